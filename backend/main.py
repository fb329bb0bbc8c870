import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from backend.core import config
from backend.core.errors import register_exception_handlers
from backend.database import Base, engine, ensure_scheduling_schema
from backend.models import availability, booking, counselor, profile, screening, time_slot  # noqa: F401
from backend.routes import auth_routes, availability_routes, booking_routes, counselor_routes, support_routes
from backend.support.chat import build_chat_client

logger = logging.getLogger(__name__)


def initialize_database() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        ensure_scheduling_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and Postgres credentials.')


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    config.validate_runtime_config()
    initialize_database()

    app.state.chat_client = build_chat_client()
    if not app.state.chat_client.is_configured:
        logger.warning('OPENAI_API_KEY is not set; chat support will answer with the fallback message.')

    yield

    app.state.chat_client.close()


app = FastAPI(title='Campus Care API', lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

register_exception_handlers(app)


@app.get('/')
def root():
    return {'status': 'Campus Care API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(availability_routes.router, prefix='/availability')
app.include_router(booking_routes.router, prefix='/bookings')
app.include_router(counselor_routes.router, prefix='/counselors')
app.include_router(support_routes.router, prefix='/support')
