"""Structural field validation.

Checks presence, enum membership, numeric ranges and string lengths, and
converts normalized tokens into enum members. Format rules for the key
value itself live in :mod:`pix_keys.rules.validators`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

from pix_keys.exceptions import InvalidFieldError
from pix_keys.models.enums import AccountType, KeyType, PersonType
from pix_keys.models.pix_key import PixKeyCandidate, PixKeyPatch
from pix_keys.rules.validators import MAX_KEY_VALUE_LENGTH

BRANCH_RANGE = (1, 9999)
ACCOUNT_RANGE = (1, 99999999)
FIRST_NAME_MAX_LENGTH = 30
LAST_NAME_MAX_LENGTH = 45

E = TypeVar("E", bound=Enum)


@dataclass(frozen=True)
class CheckedCandidate:
    """Candidate whose fields passed structural validation."""

    key_type: KeyType
    key_value: str
    person_type: PersonType
    account_type: AccountType
    branch_number: int
    account_number: int
    holder_first_name: str
    holder_last_name: str | None


def parse_enum(field: str, value: str | None, enum_cls: type[E]) -> E:
    """Map a normalized token to ``enum_cls`` or raise InvalidFieldError."""
    if value is None:
        raise InvalidFieldError(field, f"{field} is required")
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidFieldError(
            field, f"{field} must be one of: {allowed} (got {value!r})"
        ) from None


def check_int_range(field: str, value: Any, bounds: tuple[int, int]) -> int:
    if value is None:
        raise InvalidFieldError(field, f"{field} is required")
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidFieldError(field, f"{field} must be an integer")
    low, high = bounds
    if not low <= value <= high:
        raise InvalidFieldError(field, f"{field} must be between {low} and {high}")
    return value


def check_first_name(value: str | None) -> str:
    if not value:
        raise InvalidFieldError("holder_first_name", "holder_first_name is required")
    if len(value) > FIRST_NAME_MAX_LENGTH:
        raise InvalidFieldError(
            "holder_first_name",
            f"holder_first_name exceeds {FIRST_NAME_MAX_LENGTH} characters",
        )
    return value


def check_last_name(value: str | None) -> str | None:
    if value is not None and len(value) > LAST_NAME_MAX_LENGTH:
        raise InvalidFieldError(
            "holder_last_name",
            f"holder_last_name exceeds {LAST_NAME_MAX_LENGTH} characters",
        )
    return value


def check_key_value(value: str | None) -> str:
    if value is None:
        raise InvalidFieldError("key_value", "key_value is required")
    if len(value) > MAX_KEY_VALUE_LENGTH:
        raise InvalidFieldError(
            "key_value", f"key_value exceeds {MAX_KEY_VALUE_LENGTH} characters"
        )
    return value


def validate_candidate(candidate: PixKeyCandidate) -> CheckedCandidate:
    """Validate every field of a normalized create candidate.

    Raises
    ------
    InvalidFieldError
        On the first field that violates its bound, in declaration order.
    """
    return CheckedCandidate(
        key_type=parse_enum("key_type", candidate.key_type, KeyType),
        key_value=check_key_value(candidate.key_value),
        person_type=parse_enum("person_type", candidate.person_type, PersonType),
        account_type=parse_enum("account_type", candidate.account_type, AccountType),
        branch_number=check_int_range("branch_number", candidate.branch_number, BRANCH_RANGE),
        account_number=check_int_range(
            "account_number", candidate.account_number, ACCOUNT_RANGE
        ),
        holder_first_name=check_first_name(candidate.holder_first_name),
        holder_last_name=check_last_name(candidate.holder_last_name),
    )


def validate_patch(patch: PixKeyPatch) -> dict[str, Any]:
    """Validate the provided fields of a normalized patch.

    Returns
    -------
    dict[str, Any]
        Provided fields converted to their record types.
    """
    values = patch.provided()
    if "account_type" in values:
        values["account_type"] = parse_enum(
            "account_type", values["account_type"], AccountType
        )
    if "branch_number" in values:
        check_int_range("branch_number", values["branch_number"], BRANCH_RANGE)
    if "account_number" in values:
        check_int_range("account_number", values["account_number"], ACCOUNT_RANGE)
    if "holder_first_name" in values:
        check_first_name(values["holder_first_name"])
    if "holder_last_name" in values:
        check_last_name(values["holder_last_name"])
    return values
