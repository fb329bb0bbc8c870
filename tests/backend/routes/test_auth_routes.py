import jwt
import pytest
from fastapi import HTTPException

from backend.auth.dependencies import (
    get_current_counselor,
    get_current_staff,
    get_current_student,
    resolve_profile,
)
from backend.auth.jwt_handler import create_access_token, decode_access_token
from backend.core import config
from backend.models.counselor import CounselorProfile
from backend.models.profile import ROLE_ADMIN, ROLE_COUNSELOR
from backend.routes.auth_routes import me


def test_access_token_round_trip_carries_subject_and_role() -> None:
    payload = decode_access_token(create_access_token(42, 'student'))

    assert payload['sub'] == '42'
    assert payload['role'] == 'student'


def test_resolve_profile_returns_profile(db, make_profile) -> None:
    profile = make_profile('student@campus.edu')

    assert resolve_profile(create_access_token(profile.id, profile.role), db).id == profile.id


@pytest.mark.parametrize(
    'token_factory',
    [
        lambda: 'not-a-jwt',
        lambda: create_access_token(1, 'student', expires_minutes=-1),
        lambda: jwt.encode({'sub': '1'}, 'a-different-signing-secret-for-tests-only', algorithm=config.JWT_ALGORITHM),
        lambda: jwt.encode({'sub': 'abc'}, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM),
        lambda: create_access_token(999, 'student'),
    ],
)
def test_resolve_profile_rejects_bad_tokens(db, token_factory) -> None:
    with pytest.raises(HTTPException) as exception_info:
        resolve_profile(token_factory(), db)

    assert exception_info.value.status_code == 401


def test_role_guards(make_profile) -> None:
    student = make_profile('student@campus.edu')
    admin = make_profile('admin@campus.edu', role=ROLE_ADMIN)

    assert get_current_student(student) is student
    assert get_current_staff(admin) is admin

    with pytest.raises(HTTPException) as exception_info:
        get_current_student(admin)
    assert exception_info.value.status_code == 403

    with pytest.raises(HTTPException) as exception_info:
        get_current_staff(student)
    assert exception_info.value.status_code == 403


def test_get_current_counselor_creates_listing_on_first_use(db, make_profile) -> None:
    profile = make_profile('new.counselor@campus.edu', role=ROLE_COUNSELOR)

    counselor = get_current_counselor(profile=profile, db=db)

    assert counselor.profile_id == profile.id
    assert db.query(CounselorProfile).count() == 1


def test_get_current_counselor_rejects_students(db, make_profile) -> None:
    student = make_profile('student@campus.edu')

    with pytest.raises(HTTPException) as exception_info:
        get_current_counselor(profile=student, db=db)

    assert exception_info.value.status_code == 403


def test_me_returns_profile_summary(make_profile) -> None:
    profile = make_profile('jordan@campus.edu')

    response = me(current_profile=profile)

    assert response.email == 'jordan@campus.edu'
    assert response.display_name == 'jordan'
    assert response.role == 'student'
