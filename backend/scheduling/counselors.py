"""Counselor directory and profile lookups."""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.core.errors import NotFoundError
from backend.models.counselor import CounselorProfile
from backend.models.profile import Profile

logger = logging.getLogger(__name__)

DEFAULT_SPECIALIZATION = ['general-counseling']
DEFAULT_LANGUAGES = ['english']
DEFAULT_EXPERIENCE_YEARS = 1
DEFAULT_BIO = 'Professional counselor providing mental health support to students.'
DEFAULT_HOURLY_RATE = 1500


@dataclass(frozen=True)
class ProfileSummary:
    role: str
    display_name: str
    email: str


def profile_summary(profile: Profile) -> ProfileSummary:
    return ProfileSummary(
        role=profile.role,
        display_name=profile.display_name or profile.email.split('@')[0],
        email=profile.email,
    )


def get_profile(db: Session, user_id: int) -> ProfileSummary:
    profile = db.get(Profile, user_id)
    if profile is None:
        raise NotFoundError('Profile not found.')
    return profile_summary(profile)


def default_counselor_name(profile: Profile) -> str:
    if profile.display_name:
        return profile.display_name
    return f"Dr. {profile.email.split('@')[0]}"


def find_counselor_profile(db: Session, profile_id: int) -> CounselorProfile | None:
    return db.query(CounselorProfile).filter(CounselorProfile.profile_id == profile_id).first()


def ensure_counselor_profile(db: Session, profile: Profile) -> tuple[CounselorProfile, bool]:
    """Return the counselor listing for ``profile``, creating a default one if missing."""
    counselor = find_counselor_profile(db, profile.id)
    if counselor is not None:
        return counselor, False

    counselor = CounselorProfile(
        profile_id=profile.id,
        name=default_counselor_name(profile),
        specialization=list(DEFAULT_SPECIALIZATION),
        languages=list(DEFAULT_LANGUAGES),
        experience_years=DEFAULT_EXPERIENCE_YEARS,
        bio=DEFAULT_BIO,
        hourly_rate=DEFAULT_HOURLY_RATE,
        is_active=True,
    )
    db.add(counselor)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent first request created the listing before us.
        db.rollback()
        existing = find_counselor_profile(db, profile.id)
        if existing is None:
            raise
        return existing, False

    db.refresh(counselor)
    logger.info('Created counselor profile %s for %s.', counselor.id, profile.email)
    return counselor, True


def get_counselor(db: Session, counselor_id: int) -> CounselorProfile:
    counselor = db.get(CounselorProfile, counselor_id)
    if counselor is None or not counselor.is_active:
        raise NotFoundError('Counselor not found.')
    return counselor


def list_counselors(
    db: Session,
    search: str | None = None,
    specialization: str | None = None,
    language: str | None = None,
) -> list[CounselorProfile]:
    counselors = db.query(CounselorProfile).filter(
        CounselorProfile.is_active.is_(True),
    ).order_by(CounselorProfile.name.asc()).all()

    # JSON list columns are filtered here rather than in SQL so SQLite and Postgres behave alike.
    if search and search.strip():
        needle = search.strip().lower()
        counselors = [
            counselor for counselor in counselors
            if needle in counselor.name.lower()
            or needle in (counselor.bio or '').lower()
            or any(needle in item.lower() for item in counselor.specialization or [])
        ]

    if specialization:
        counselors = [
            counselor for counselor in counselors
            if specialization in (counselor.specialization or [])
        ]

    if language:
        counselors = [
            counselor for counselor in counselors
            if language in (counselor.languages or [])
        ]

    return counselors
