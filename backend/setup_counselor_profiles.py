"""Create counselor listings for every counselor-role profile that lacks one.

Usage:
    python -m backend.setup_counselor_profiles
"""
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from backend.database import Base, SessionLocal, engine
from backend.models import availability, booking, counselor, screening, time_slot  # noqa: F401
from backend.models.profile import ROLE_COUNSELOR, Profile
from backend.scheduling.counselors import ensure_counselor_profile

logger = logging.getLogger(__name__)


def setup_counselor_profiles(db) -> tuple[int, int]:
    profiles = db.query(Profile).filter(Profile.role == ROLE_COUNSELOR).order_by(Profile.id.asc()).all()
    logger.info('Found %s counselor profile(s).', len(profiles))

    created_count = 0
    for profile in profiles:
        _, created = ensure_counselor_profile(db, profile)
        if created:
            created_count += 1
            print(f"Created counselor profile for {profile.email}")
        else:
            print(f"Counselor profile already exists for {profile.email}")

    return created_count, len(profiles) - created_count


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    db = SessionLocal()
    try:
        Base.metadata.create_all(bind=engine)
        created, existing = setup_counselor_profiles(db)
    except SQLAlchemyError as exc:
        print(f"Counselor profile setup failed: {exc}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()

    print(f"Counselor profile setup completed: {created} created, {existing} already present.")


if __name__ == "__main__":
    main()
