"""Profile model definitions."""

from sqlalchemy import Column, Integer, String
from backend.database import Base

ROLE_STUDENT = 'student'
ROLE_COUNSELOR = 'counselor'
ROLE_ADMIN = 'admin'


class Profile(Base):
    """Represents an application user."""
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    display_name = Column(String)
    role = Column(String, nullable=False, default=ROLE_STUDENT)  # student/counselor/admin
