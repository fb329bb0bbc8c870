import pytest

from backend.core.errors import NotFoundError
from backend.routes.counselor_routes import get_counselor, list_counselors


@pytest.fixture(autouse=True)
def skip_schema_check(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('backend.routes.counselor_routes.ensure_database_ready', lambda: None)


def test_list_counselors_passes_filters(db, make_counselor) -> None:
    make_counselor('hindi@campus.edu', name='Dr. Kavya Menon', languages=['english', 'hindi'])
    make_counselor('english@campus.edu', name='Dr. Leo Park')

    result = list_counselors(search=None, specialization=None, language='hindi', db=db)

    assert [counselor.name for counselor in result] == ['Dr. Kavya Menon']


def test_get_counselor_returns_listing(db, make_counselor) -> None:
    counselor = make_counselor()

    assert get_counselor(counselor_id=counselor.id, db=db).name == 'Dr. Priya Sharma'


def test_get_counselor_missing(db) -> None:
    with pytest.raises(NotFoundError):
        get_counselor(counselor_id=123, db=db)
