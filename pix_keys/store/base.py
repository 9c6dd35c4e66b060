"""Record index contract consumed by the rule engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Hashable
from uuid import UUID

from pix_keys.models.enums import KeyType, PersonType
from pix_keys.models.pix_key import PixKey


class RecordIndex(ABC):
    """Storage seam for PIX key records.

    The engine only needs the lookups below plus a transaction boundary
    around "check invariants, then write". Implementations decide how that
    boundary is enforced; ``lock_keys`` name the (key type, key value) and
    (branch, account) pairs an operation depends on so implementations can
    serialize only conflicting work.
    """

    @abstractmethod
    def transaction(self, *lock_keys: Hashable) -> AbstractContextManager[None]:
        """Serialize invariant checks and the following write."""

    @abstractmethod
    def find_by_id(self, key_id: UUID) -> PixKey | None:
        """Return the record with ``key_id`` or None."""

    @abstractmethod
    def exists_by_type_and_value(self, key_type: KeyType, key_value: str) -> bool:
        """True if any record, active or inactive, has this pair."""

    @abstractmethod
    def exists_by_account_with_different_person_type(
        self, branch_number: int, account_number: int, person_type: PersonType
    ) -> bool:
        """True if the account holds any record of another person type."""

    @abstractmethod
    def count_active_by_account(self, branch_number: int, account_number: int) -> int:
        """Number of active records on the account."""

    @abstractmethod
    def save(self, record: PixKey) -> PixKey:
        """Insert or fully replace ``record`` keyed by id."""

    # Query filters

    @abstractmethod
    def find_by_key_type(self, key_type: KeyType) -> list[PixKey]:
        ...

    @abstractmethod
    def find_by_account(self, branch_number: int, account_number: int) -> list[PixKey]:
        ...

    @abstractmethod
    def find_by_holder_name(self, fragment: str) -> list[PixKey]:
        """Records whose first name contains ``fragment``, ignoring case."""

    @abstractmethod
    def find_created_between(self, start: datetime, end: datetime) -> list[PixKey]:
        """Records created in ``[start, end]``."""

    @abstractmethod
    def find_active(self) -> list[PixKey]:
        ...

    @abstractmethod
    def find_inactive(self) -> list[PixKey]:
        ...
