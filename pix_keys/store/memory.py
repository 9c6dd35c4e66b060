"""In-memory record index with relationship tracking."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Hashable, Iterator
from uuid import UUID

from pix_keys.exceptions import DuplicateKeyValueError
from pix_keys.models.enums import KeyType, PersonType
from pix_keys.models.pix_key import PixKey
from pix_keys.store.base import RecordIndex


@dataclass
class InMemoryRecordIndex(RecordIndex):
    """Dict-backed index for tests, scripts and single-process use.

    A single re-entrant lock serializes every transaction, so lock keys are
    accepted but not needed.
    """

    records: dict[UUID, PixKey] = field(default_factory=dict)

    # Relationship indexes
    _by_value: dict[tuple[KeyType, str], UUID] = field(default_factory=dict)
    _account_keys: dict[tuple[int, int], set[UUID]] = field(default_factory=dict)

    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @contextmanager
    def transaction(self, *lock_keys: Hashable) -> Iterator[None]:
        with self._lock:
            yield

    def find_by_id(self, key_id: UUID) -> PixKey | None:
        return self.records.get(key_id)

    def exists_by_type_and_value(self, key_type: KeyType, key_value: str) -> bool:
        return (key_type, key_value) in self._by_value

    def exists_by_account_with_different_person_type(
        self, branch_number: int, account_number: int, person_type: PersonType
    ) -> bool:
        return any(
            record.person_type != person_type
            for record in self._account_records(branch_number, account_number)
        )

    def count_active_by_account(self, branch_number: int, account_number: int) -> int:
        return sum(
            1
            for record in self._account_records(branch_number, account_number)
            if record.is_active
        )

    def save(self, record: PixKey) -> PixKey:
        """Insert or replace a record, keeping the indexes in step.

        Raises
        ------
        DuplicateKeyValueError
            If another record already owns the (key type, key value) pair.
        """
        with self._lock:
            value_key = (record.key_type, record.key_value)
            owner = self._by_value.get(value_key)
            if owner is not None and owner != record.id:
                raise DuplicateKeyValueError(
                    f"PIX key {record.key_type.value} {record.key_value!r} already exists"
                )

            previous = self.records.get(record.id)
            if previous is not None and previous.account != record.account:
                self._account_keys[previous.account].discard(record.id)

            self.records[record.id] = record
            self._by_value[value_key] = record.id
            self._account_keys.setdefault(record.account, set()).add(record.id)
            return record

    # Query methods
    def find_by_key_type(self, key_type: KeyType) -> list[PixKey]:
        return [r for r in self.records.values() if r.key_type == key_type]

    def find_by_account(self, branch_number: int, account_number: int) -> list[PixKey]:
        return self._account_records(branch_number, account_number)

    def find_by_holder_name(self, fragment: str) -> list[PixKey]:
        needle = fragment.upper()
        return [r for r in self.records.values() if needle in r.holder_first_name.upper()]

    def find_created_between(self, start: datetime, end: datetime) -> list[PixKey]:
        return [r for r in self.records.values() if start <= r.created_at <= end]

    def find_active(self) -> list[PixKey]:
        return [r for r in self.records.values() if r.is_active]

    def find_inactive(self) -> list[PixKey]:
        return [r for r in self.records.values() if not r.is_active]

    def summary(self) -> dict[str, int]:
        """Return summary counts of stored records."""
        active = len(self.find_active())
        return {
            "keys": len(self.records),
            "active": active,
            "inactive": len(self.records) - active,
            "accounts": sum(1 for ids in self._account_keys.values() if ids),
        }

    def _account_records(self, branch_number: int, account_number: int) -> list[PixKey]:
        ids = self._account_keys.get((branch_number, account_number), set())
        return sorted((self.records[i] for i in ids), key=lambda r: r.created_at)
