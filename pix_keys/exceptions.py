"""Custom exception hierarchy for pix-keys.

Every rejection raised by the rule engine carries an :class:`ErrorKind` so
callers can switch on ``err.kind`` instead of inspecting message text.
"""

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_FIELD = "INVALID_FIELD"
    INVALID_KEY_VALUE_FORMAT = "INVALID_KEY_VALUE_FORMAT"
    DUPLICATE_KEY_VALUE = "DUPLICATE_KEY_VALUE"
    PERSON_TYPE_MISMATCH = "PERSON_TYPE_MISMATCH"
    ACCOUNT_QUOTA_EXCEEDED = "ACCOUNT_QUOTA_EXCEEDED"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_INACTIVE = "ALREADY_INACTIVE"
    NO_CHANGE = "NO_CHANGE"


class PixKeysError(Exception):
    """Base exception for all pix-keys errors."""


class ConfigurationError(PixKeysError):
    """Raised when configuration is invalid or missing."""


class PixKeyError(PixKeysError):
    """Base exception for rule engine rejections."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidFieldError(PixKeyError):
    """Raised when a field is missing, out of range, too long or not a known token."""

    kind = ErrorKind.INVALID_FIELD

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class InvalidKeyValueFormatError(PixKeyError):
    """Raised when a key value fails the validator for its key type."""

    kind = ErrorKind.INVALID_KEY_VALUE_FORMAT


class DuplicateKeyValueError(PixKeyError):
    """Raised when the (key type, key value) pair is already registered."""

    kind = ErrorKind.DUPLICATE_KEY_VALUE


class PersonTypeMismatchError(PixKeyError):
    """Raised when an account already holds keys of the other person type."""

    kind = ErrorKind.PERSON_TYPE_MISMATCH


class AccountQuotaExceededError(PixKeyError):
    """Raised when an account already holds its maximum of active keys."""

    kind = ErrorKind.ACCOUNT_QUOTA_EXCEEDED


class KeyNotFoundError(PixKeyError):
    """Raised when an operation targets an unknown key id."""

    kind = ErrorKind.NOT_FOUND


class AlreadyInactiveError(PixKeyError):
    """Raised when amending or deactivating an already deactivated key."""

    kind = ErrorKind.ALREADY_INACTIVE


class NoChangeError(PixKeyError):
    """Raised when an amend patch would not alter any field."""

    kind = ErrorKind.NO_CHANGE
