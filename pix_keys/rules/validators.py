"""Format validators for PIX key values.

One predicate per key type, all pure and total over ``(key_type, str)``.
CPF and CNPJ share a single modulo-11 check-digit routine parameterized by
weight vectors.
"""

from __future__ import annotations

import re
from typing import Callable, Sequence

from pix_keys.models.enums import KeyType

MAX_KEY_VALUE_LENGTH = 77
RANDOM_KEY_LENGTH = 36

PHONE_PATTERN = re.compile(r"^\+(\d{1,3})(\d{2,3})(\d{8,9})$", re.ASCII)
EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9_+&*-]+(?:\.[a-zA-Z0-9_+&*-]+)*@(?:[a-zA-Z0-9-]+\.)+[a-zA-Z]{2,7}$"
)
RANDOM_KEY_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")
_NON_DIGITS = re.compile(r"\D", re.ASCII)

CPF_LENGTH = 11
CPF_FIRST_WEIGHTS = tuple(range(10, 1, -1))  # 10..2 over positions 0-8
CPF_SECOND_WEIGHTS = tuple(range(11, 1, -1))  # 11..2 over positions 0-9

CNPJ_LENGTH = 14
CNPJ_FIRST_WEIGHTS = (5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)
CNPJ_SECOND_WEIGHTS = (6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)


def digits_only(value: str) -> str:
    """Strip every non-digit character."""
    return _NON_DIGITS.sub("", value)


def check_digit(digits: str, weights: Sequence[int]) -> int:
    """Compute one modulo-11 check digit.

    ``digits`` is zipped with ``weights``, so only the first
    ``len(weights)`` digits contribute.

    Parameters
    ----------
    digits : str
        Digit string (no separators).
    weights : Sequence[int]
        Multiplier for each leading position.

    Returns
    -------
    int
        0 when ``sum % 11 < 2``, otherwise ``11 - sum % 11``.
    """
    remainder = sum(int(d) * w for d, w in zip(digits, weights)) % 11
    return 0 if remainder < 2 else 11 - remainder


def has_valid_check_digits(
    value: str,
    length: int,
    first_weights: Sequence[int],
    second_weights: Sequence[int],
) -> bool:
    """Validate a national id whose last two digits are check digits.

    Non-digits are stripped first. The cleaned value must have exactly
    ``length`` digits, not all identical, and its last two digits must
    equal the check digits computed with ``first_weights`` and
    ``second_weights``.
    """
    digits = digits_only(value)
    if len(digits) != length or digits == digits[0] * length:
        return False

    first = check_digit(digits, first_weights)
    second = check_digit(digits, second_weights)
    return int(digits[-2]) == first and int(digits[-1]) == second


def is_valid_cpf(value: str) -> bool:
    """Validate a CPF (national individual id), formatted or not."""
    return has_valid_check_digits(value, CPF_LENGTH, CPF_FIRST_WEIGHTS, CPF_SECOND_WEIGHTS)


def is_valid_cnpj(value: str) -> bool:
    """Validate a CNPJ (national entity id), formatted or not."""
    return has_valid_check_digits(
        value, CNPJ_LENGTH, CNPJ_FIRST_WEIGHTS, CNPJ_SECOND_WEIGHTS
    )


def is_valid_phone(value: str) -> bool:
    """``+`` then country code (1-3), area code (2-3) and number (8-9), no separators."""
    return PHONE_PATTERN.fullmatch(value) is not None


def is_valid_email(value: str) -> bool:
    if "@" not in value or len(value) > MAX_KEY_VALUE_LENGTH:
        return False
    return EMAIL_PATTERN.fullmatch(value) is not None


def is_valid_random_key(value: str) -> bool:
    """Exactly 36 alphanumerics; hyphenated UUIDs are rejected."""
    return len(value) == RANDOM_KEY_LENGTH and RANDOM_KEY_PATTERN.fullmatch(value) is not None


VALIDATORS: dict[KeyType, Callable[[str], bool]] = {
    KeyType.PHONE: is_valid_phone,
    KeyType.EMAIL: is_valid_email,
    KeyType.CPF: is_valid_cpf,
    KeyType.CNPJ: is_valid_cnpj,
    KeyType.RANDOM: is_valid_random_key,
}


def validate_value(key_type: KeyType | str | None, value: str | None) -> bool:
    """Check ``value`` against the format rule of ``key_type``.

    Returns False for a null or empty value and for an unrecognized key
    type.
    """
    if not value:
        return False
    try:
        validator = VALIDATORS[KeyType(key_type)]
    except ValueError:
        return False
    return validator(value)
