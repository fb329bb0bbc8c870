import os
from datetime import date, time, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from backend.database import Base  # noqa: E402
from backend.models import availability, booking, counselor, screening, time_slot  # noqa: E402,F401
from backend.models.counselor import CounselorProfile  # noqa: E402
from backend.models.profile import ROLE_COUNSELOR, ROLE_STUDENT, Profile  # noqa: E402
from backend.scheduling import slots  # noqa: E402
from backend.scheduling.queries import list_slots  # noqa: E402


@pytest.fixture
def db():
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def make_profile(db):
    def _make_profile(email: str, role: str = ROLE_STUDENT, display_name: str | None = None) -> Profile:
        profile = Profile(email=email, role=role, display_name=display_name)
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile

    return _make_profile


@pytest.fixture
def make_counselor(db, make_profile):
    def _make_counselor(email: str = 'counselor@campus.edu', name: str = 'Dr. Priya Sharma', **fields) -> CounselorProfile:
        profile = make_profile(email, role=ROLE_COUNSELOR, display_name=name)
        counselor = CounselorProfile(
            profile_id=profile.id,
            name=name,
            specialization=fields.pop('specialization', ['anxiety']),
            languages=fields.pop('languages', ['english']),
            experience_years=fields.pop('experience_years', 5),
            bio=fields.pop('bio', 'Supports students through exam stress.'),
            hourly_rate=fields.pop('hourly_rate', 1500),
            is_active=fields.pop('is_active', True),
        )
        db.add(counselor)
        db.commit()
        db.refresh(counselor)
        return counselor

    return _make_counselor


@pytest.fixture
def next_monday() -> date:
    today = date.today()
    return today + timedelta(days=(7 - today.weekday()) % 7 or 7)


@pytest.fixture
def monday_slot(db, make_counselor, next_monday):
    """A counselor with Monday 09:00-17:00 availability and the generated slot for next Monday."""
    counselor = make_counselor()
    slots.replace_rules(
        db,
        counselor.id,
        [slots.RuleInput(day_of_week=1, start_time=time(9, 0), end_time=time(17, 0))],
        today=next_monday,
    )
    return counselor, list_slots(db, counselor.id, next_monday, next_monday)[0]
