from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from backend.core import config


connect_args = {'check_same_thread': False} if config.DATABASE_URL.startswith('sqlite') else {}

engine = create_engine(config.DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_scheduling_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_scheduling_schema() -> None:
    """Backfill indexes on scheduling tables created before they were declared."""
    global _scheduling_schema_checked

    if _scheduling_schema_checked:
        return

    with _schema_lock:
        if _scheduling_schema_checked:
            return

        table_names = set(inspect(engine).get_table_names())
        statements = []

        if 'counselor_time_slots' in table_names:
            statements.extend([
                'CREATE UNIQUE INDEX IF NOT EXISTS uq_counselor_time_slot '
                'ON counselor_time_slots(counselor_id, date, start_time, end_time)',
                'CREATE INDEX IF NOT EXISTS idx_time_slots_counselor_date '
                'ON counselor_time_slots(counselor_id, date, start_time)',
            ])

        if 'counselor_bookings' in table_names:
            statements.extend([
                'CREATE UNIQUE INDEX IF NOT EXISTS uq_counselor_bookings_active_slot '
                "ON counselor_bookings(time_slot_id) WHERE status <> 'cancelled'",
                'CREATE INDEX IF NOT EXISTS idx_bookings_counselor_appointment '
                'ON counselor_bookings(counselor_id, appointment_at)',
            ])

        if statements:
            with engine.begin() as connection:
                for statement in statements:
                    connection.execute(text(statement))

        _scheduling_schema_checked = True
