from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

import jwt

from backend.auth import jwt_handler
from backend.database import get_db
from backend.models.counselor import CounselorProfile
from backend.models.profile import ROLE_ADMIN, ROLE_COUNSELOR, ROLE_STUDENT, Profile
from backend.scheduling.counselors import ensure_counselor_profile

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def resolve_profile(token: str, db: Session) -> Profile:
    try:
        payload = jwt_handler.decode_access_token(token)
    except jwt.PyJWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    subject = payload.get("sub")
    if not subject or not str(subject).isdigit():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token subject")

    profile = db.get(Profile, int(subject))
    if profile is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return profile


def get_current_profile(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Profile:
    return resolve_profile(credentials.credentials, db)


def get_optional_profile(
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_security),
    db: Session = Depends(get_db),
) -> Profile | None:
    if credentials is None:
        return None
    return resolve_profile(credentials.credentials, db)


def get_current_student(profile: Profile = Depends(get_current_profile)) -> Profile:
    if profile.role != ROLE_STUDENT:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only students can do this.")
    return profile


def get_current_staff(profile: Profile = Depends(get_current_profile)) -> Profile:
    if profile.role not in {ROLE_COUNSELOR, ROLE_ADMIN}:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only counselors and admins can do this.")
    return profile


def get_current_counselor(
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> CounselorProfile:
    if profile.role != ROLE_COUNSELOR:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only counselors can do this.")
    counselor, _ = ensure_counselor_profile(db, profile)
    return counselor
