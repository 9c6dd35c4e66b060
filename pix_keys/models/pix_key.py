"""PIX key record and the inputs used to create and amend it."""

from dataclasses import dataclass, fields, replace
from datetime import datetime
from typing import Any
from uuid import UUID

from pix_keys.exceptions import AlreadyInactiveError
from pix_keys.models.enums import AccountType, KeyType, PersonType

# Fields an amend is allowed to touch; identity fields are never listed here.
MUTABLE_FIELDS = (
    "account_type",
    "branch_number",
    "account_number",
    "holder_first_name",
    "holder_last_name",
)


@dataclass(frozen=True)
class PixKey:
    """Registered PIX key.

    Records are immutable. ``key_type``, ``key_value`` and ``person_type``
    are fixed at creation; the account fields change only through
    :meth:`amended` and the lifecycle only through :meth:`deactivated`.
    """

    id: UUID
    key_type: KeyType
    key_value: str  # <= 77 chars, format depends on key_type
    person_type: PersonType
    account_type: AccountType
    branch_number: int  # 1-9999
    account_number: int  # 1-99999999
    holder_first_name: str
    created_at: datetime
    holder_last_name: str | None = None
    deactivated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.deactivated_at is None

    @property
    def account(self) -> tuple[int, int]:
        """(branch_number, account_number) pair the key points to."""
        return (self.branch_number, self.account_number)

    def amended(self, **changes: Any) -> "PixKey":
        """Return a copy with the given account/holder fields replaced.

        Raises
        ------
        TypeError
            If a field outside :data:`MUTABLE_FIELDS` is passed.
        """
        illegal = set(changes) - set(MUTABLE_FIELDS)
        if illegal:
            raise TypeError(f"Cannot amend immutable fields: {sorted(illegal)}")
        return replace(self, **changes)

    def deactivated(self, at: datetime) -> "PixKey":
        """Return a copy marked inactive at ``at``."""
        if not self.is_active:
            raise AlreadyInactiveError(f"PIX key {self.id} is already inactive")
        return replace(self, deactivated_at=at)


@dataclass(frozen=True)
class PixKeyCandidate:
    """Create request as received from the calling layer.

    Categorical fields hold raw strings (e.g. ``"E-mail"``, ``"JURÍDICA"``)
    until the normalizer maps them to canonical tokens.
    """

    key_type: str | None
    key_value: str | None
    person_type: str | None
    account_type: str | None
    branch_number: int | None
    account_number: int | None
    holder_first_name: str | None
    holder_last_name: str | None = None


@dataclass(frozen=True)
class PixKeyPatch:
    """Partial update for an existing key. ``None`` means "leave unchanged"."""

    account_type: str | None = None
    branch_number: int | None = None
    account_number: int | None = None
    holder_first_name: str | None = None
    holder_last_name: str | None = None

    def provided(self) -> dict[str, Any]:
        """Return the fields that carry a value."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }
