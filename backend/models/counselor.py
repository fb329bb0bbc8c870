"""Counselor profile model definitions."""

from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, String, Text
from backend.database import Base


class CounselorProfile(Base):
    """Represents the public counselor listing tied to a counselor-role profile."""
    __tablename__ = "counselor_profiles"

    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(Integer, ForeignKey("profiles.id"), unique=True, nullable=False)
    name = Column(String, nullable=False)
    specialization = Column(JSON, nullable=False, default=list)
    languages = Column(JSON, nullable=False, default=list)
    experience_years = Column(Integer, nullable=False, default=0)
    bio = Column(Text)
    hourly_rate = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
