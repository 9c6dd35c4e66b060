"""Tests for the in-memory record index."""

from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from pix_keys.exceptions import DuplicateKeyValueError
from pix_keys.models.enums import AccountType, KeyType, PersonType
from pix_keys.models.pix_key import PixKey
from pix_keys.store.memory import InMemoryRecordIndex

T0 = datetime(2024, 1, 1, 9, 0, 0)


def make_record(n: int = 0, branch: int = 1, account: int = 1, **overrides) -> PixKey:
    values = dict(
        id=uuid4(),
        key_type=KeyType.EMAIL,
        key_value=f"user{n}@example.com",
        person_type=PersonType.INDIVIDUAL,
        account_type=AccountType.CHECKING,
        branch_number=branch,
        account_number=account,
        holder_first_name="Ana",
        created_at=T0 + timedelta(minutes=n),
    )
    values.update(overrides)
    return PixKey(**values)


class TestSave:
    """Tests for writes and index maintenance."""

    def test_insert(self, index: InMemoryRecordIndex) -> None:
        record = make_record()

        assert index.save(record) is record
        assert index.find_by_id(record.id) == record
        assert index.exists_by_type_and_value(KeyType.EMAIL, "user0@example.com")

    def test_replace_same_id(self, index: InMemoryRecordIndex) -> None:
        record = index.save(make_record())

        index.save(record.amended(holder_first_name="Bia"))

        assert len(index.records) == 1
        assert index.find_by_id(record.id).holder_first_name == "Bia"

    def test_duplicate_pair_rejected(self, index: InMemoryRecordIndex) -> None:
        index.save(make_record())

        with pytest.raises(DuplicateKeyValueError):
            index.save(make_record(account=2))

        assert len(index.records) == 1

    def test_account_move_reindexes(self, index: InMemoryRecordIndex) -> None:
        record = index.save(make_record())

        index.save(record.amended(account_number=2))

        assert index.find_by_account(1, 1) == []
        assert index.count_active_by_account(1, 2) == 1
        assert index.summary()["accounts"] == 1


class TestInvariantQueries:
    """Tests for the reads the engine checks invariants with."""

    def test_exists_by_type_and_value_is_type_scoped(self, index: InMemoryRecordIndex) -> None:
        index.save(make_record())

        assert not index.exists_by_type_and_value(KeyType.RANDOM, "user0@example.com")
        assert not index.exists_by_type_and_value(KeyType.EMAIL, "other@example.com")

    def test_person_type_conflict(self, index: InMemoryRecordIndex) -> None:
        index.save(make_record())

        assert index.exists_by_account_with_different_person_type(1, 1, PersonType.ENTITY)
        assert not index.exists_by_account_with_different_person_type(1, 1, PersonType.INDIVIDUAL)
        assert not index.exists_by_account_with_different_person_type(2, 2, PersonType.ENTITY)

    def test_person_type_conflict_includes_inactive(self, index: InMemoryRecordIndex) -> None:
        record = index.save(make_record())
        index.save(record.deactivated(T0))

        assert index.exists_by_account_with_different_person_type(1, 1, PersonType.ENTITY)

    def test_count_active_ignores_inactive(self, index: InMemoryRecordIndex) -> None:
        first = index.save(make_record(0))
        index.save(make_record(1))
        index.save(first.deactivated(T0))

        assert index.count_active_by_account(1, 1) == 1
        assert index.count_active_by_account(9, 9) == 0


class TestQueries:
    """Tests for listing queries."""

    @pytest.fixture
    def records(self, index: InMemoryRecordIndex) -> list[PixKey]:
        saved = [
            index.save(make_record(2, holder_first_name="Mariana")),
            index.save(make_record(0)),
            index.save(make_record(1, account=2, key_type=KeyType.RANDOM, key_value="A" * 36)),
        ]
        index.save(saved[2].deactivated(T0 + timedelta(hours=1)))
        return saved

    def test_find_by_account_ordered_by_creation(self, index, records) -> None:
        mariana, ana, _ = records
        assert index.find_by_account(1, 1) == [ana, mariana]

    def test_find_by_key_type(self, index, records) -> None:
        assert [r.key_value for r in index.find_by_key_type(KeyType.RANDOM)] == ["A" * 36]

    def test_find_by_holder_name_case_insensitive(self, index, records) -> None:
        assert {r.holder_first_name for r in index.find_by_holder_name("AN")} == {"Ana", "Mariana"}
        assert index.find_by_holder_name("xyz") == []

    def test_find_created_between_inclusive(self, index, records) -> None:
        found = index.find_created_between(T0, T0 + timedelta(minutes=1))
        assert {r.created_at for r in found} == {T0, T0 + timedelta(minutes=1)}

    def test_active_inactive(self, index, records) -> None:
        assert len(index.find_active()) == 2
        assert [r.key_type for r in index.find_inactive()] == [KeyType.RANDOM]

    def test_summary(self, index, records) -> None:
        assert index.summary() == {"keys": 3, "active": 2, "inactive": 1, "accounts": 2}


class TestTransaction:
    """Tests for the transaction boundary."""

    def test_reentrant(self, index: InMemoryRecordIndex) -> None:
        with index.transaction(("key", KeyType.EMAIL, "a@b.com")):
            with index.transaction(("account", 1, 1)):
                index.save(make_record())

        assert len(index.records) == 1

    def test_exception_releases_lock(self, index: InMemoryRecordIndex) -> None:
        with pytest.raises(ValueError):
            with index.transaction():
                raise ValueError("boom")

        with index.transaction():
            index.save(make_record())
