from fastapi import APIRouter, Depends
from pydantic import BaseModel

from backend.auth.dependencies import get_current_profile
from backend.models.profile import Profile
from backend.scheduling.counselors import profile_summary

router = APIRouter(tags=['auth'])


class ProfileResponse(BaseModel):
    id: int
    email: str
    display_name: str
    role: str


@router.get("/me", response_model=ProfileResponse)
def me(current_profile: Profile = Depends(get_current_profile)):
    summary = profile_summary(current_profile)
    return ProfileResponse(
        id=current_profile.id,
        email=summary.email,
        display_name=summary.display_name,
        role=summary.role,
    )
