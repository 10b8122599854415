"""Tests for UserRepository against an in-memory SQLite database."""

from datetime import datetime, timezone

import pytest

from app.core.exceptions import ErrorKind, UserServiceError
from app.db.repositories.user import UserRepository, build_assignments
from app.schemas.user import UserCreate, UserUpdate


def _create(repository: UserRepository, **fields):
    payload = {"name": "Ana Gomez", "email": "ana@example.com"}
    payload.update(fields)
    return repository.create(UserCreate(**payload))


# ======================================================================
# create
# ======================================================================


class TestCreate:
    def test_assigns_id_and_equal_timestamps(self, repository):
        user = _create(repository, age=30)
        assert user.id is not None and user.id >= 1
        assert user.created_at == user.updated_at
        assert user.age == 30
        assert user.phone is None
        assert user.address is None

    def test_ids_are_increasing(self, repository):
        first = _create(repository, email="a@example.com")
        second = _create(repository, email="b@example.com")
        assert second.id > first.id

    def test_unique_constraint_maps_to_duplicate_email(self, repository):
        _create(repository)
        with pytest.raises(UserServiceError) as exc_info:
            _create(repository, name="Someone Else")
        assert exc_info.value.kind is ErrorKind.DUPLICATE_EMAIL

    def test_first_row_survives_duplicate_attempt(self, repository):
        original = _create(repository)
        with pytest.raises(UserServiceError):
            _create(repository, name="Someone Else")
        stored = repository.get_by_id(original.id)
        assert stored.name == "Ana Gomez"
        assert repository.count() == 1

    def test_check_constraint_maps_to_constraint_violation(self, repository):
        # model_construct skips validation so the database sees age=200
        data = UserCreate.model_construct(name="Old", email="old@example.com", age=200, phone=None, address=None)
        with pytest.raises(UserServiceError) as exc_info:
            repository.create(data)
        assert exc_info.value.kind is ErrorKind.CONSTRAINT_VIOLATION


# ======================================================================
# lookups
# ======================================================================


class TestLookups:
    def test_get_by_id(self, repository):
        user = _create(repository)
        assert repository.get_by_id(user.id).email == "ana@example.com"

    def test_get_by_id_missing(self, repository):
        assert repository.get_by_id(999) is None

    def test_get_by_email(self, repository):
        user = _create(repository)
        assert repository.get_by_email("ana@example.com").id == user.id
        assert repository.get_by_email("nobody@example.com") is None
        assert repository.exists_by_email("ana@example.com") is True


# ======================================================================
# get_all / count
# ======================================================================


class TestListing:
    @pytest.fixture
    def people(self, repository):
        names = [
            ("Ana Gomez", "ana@example.com"),
            ("Bruno Diaz", "bruno@example.com"),
            ("Carla Ruiz", "carla@sample.org"),
            ("Diego Anaya", "diego@example.com"),
            ("Elena 100% Real", "elena@example.com"),
        ]
        return [_create(repository, name=name, email=email) for name, email in names]

    def test_newest_first(self, repository, people):
        listed = repository.get_all(page=1, limit=10)
        assert [u.id for u in listed] == [u.id for u in reversed(people)]

    def test_pagination_offsets(self, repository, people):
        first = repository.get_all(page=1, limit=2)
        second = repository.get_all(page=2, limit=2)
        third = repository.get_all(page=3, limit=2)
        assert len(first) == 2 and len(second) == 2 and len(third) == 1
        ids = [u.id for u in first + second + third]
        assert len(set(ids)) == 5

    def test_page_past_the_end_is_empty(self, repository, people):
        assert repository.get_all(page=4, limit=2) == []

    def test_count_ignores_pagination(self, repository, people):
        assert repository.count() == 5

    def test_search_matches_name_or_email_case_insensitive(self, repository, people):
        matches = repository.get_all(page=1, limit=10, search="ANA")
        assert {u.name for u in matches} == {"Ana Gomez", "Diego Anaya"}
        assert repository.count("ANA") == 2

    def test_search_on_email(self, repository, people):
        matches = repository.get_all(page=1, limit=10, search="sample.org")
        assert [u.name for u in matches] == ["Carla Ruiz"]

    def test_search_wildcards_are_literal(self, repository, people):
        assert repository.count("%") == 1
        assert [u.name for u in repository.get_all(search="100%")] == ["Elena 100% Real"]
        assert repository.count("_") == 0

    def test_empty_search_means_no_filter(self, repository, people):
        assert repository.count("") == 5


# ======================================================================
# update
# ======================================================================


class TestUpdate:
    def test_only_supplied_fields_change(self, repository):
        user = _create(repository, age=30, phone="555-0100")
        created_at = user.created_at

        updated = repository.update(user.id, UserUpdate(age=31))

        assert updated.age == 31
        assert updated.name == "Ana Gomez"
        assert updated.phone == "555-0100"
        assert updated.created_at == created_at
        assert updated.updated_at > created_at

    def test_clearing_optional_field(self, repository):
        user = _create(repository, address="Calle 1")
        updated = repository.update(user.id, UserUpdate.model_validate({"address": None}))
        assert updated.address is None

    def test_missing_row(self, repository):
        assert repository.update(404, UserUpdate(name="Nobody")) is None

    def test_email_collision_maps_to_duplicate_email(self, repository):
        _create(repository, email="taken@example.com")
        other = _create(repository, email="free@example.com")
        with pytest.raises(UserServiceError) as exc_info:
            repository.update(other.id, UserUpdate(email="taken@example.com"))
        assert exc_info.value.kind is ErrorKind.DUPLICATE_EMAIL
        assert repository.get_by_id(other.id).email == "free@example.com"

    def test_build_assignments_always_refreshes_updated_at(self):
        now = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        assert build_assignments(UserUpdate(name="Ana"), now) == {"name": "Ana", "updated_at": now}


# ======================================================================
# delete
# ======================================================================


class TestDelete:
    # The instance is expired by the commit in delete(); keep the id beforehand

    def test_delete_existing(self, repository):
        user_id = _create(repository).id
        assert repository.delete(user_id) is True
        assert repository.get_by_id(user_id) is None

    def test_delete_twice(self, repository):
        user_id = _create(repository).id
        assert repository.delete(user_id) is True
        assert repository.delete(user_id) is False

    def test_ids_not_reused(self, repository):
        first_id = _create(repository).id
        repository.delete(first_id)
        replacement = _create(repository)
        assert replacement.id > first_id

    def test_ids_not_reused_after_deleting_the_newest(self, repository):
        _create(repository, email="old@example.com")
        newest_id = _create(repository, email="new@example.com").id
        repository.delete(newest_id)
        assert _create(repository, email="next@example.com").id > newest_id
