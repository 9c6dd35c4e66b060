"""Tests for custom exception hierarchy."""

import pytest

from pix_keys.exceptions import (
    AccountQuotaExceededError,
    AlreadyInactiveError,
    ConfigurationError,
    DuplicateKeyValueError,
    ErrorKind,
    InvalidFieldError,
    InvalidKeyValueFormatError,
    KeyNotFoundError,
    NoChangeError,
    PersonTypeMismatchError,
    PixKeyError,
    PixKeysError,
)

REJECTIONS = [
    (InvalidKeyValueFormatError, ErrorKind.INVALID_KEY_VALUE_FORMAT),
    (DuplicateKeyValueError, ErrorKind.DUPLICATE_KEY_VALUE),
    (PersonTypeMismatchError, ErrorKind.PERSON_TYPE_MISMATCH),
    (AccountQuotaExceededError, ErrorKind.ACCOUNT_QUOTA_EXCEEDED),
    (KeyNotFoundError, ErrorKind.NOT_FOUND),
    (AlreadyInactiveError, ErrorKind.ALREADY_INACTIVE),
    (NoChangeError, ErrorKind.NO_CHANGE),
]


class TestExceptionHierarchy:
    """Test exception inheritance chain."""

    def test_pix_keys_error_is_exception(self) -> None:
        assert isinstance(PixKeysError("test"), Exception)

    def test_configuration_error_is_not_a_rejection(self) -> None:
        err = ConfigurationError("test")
        assert isinstance(err, PixKeysError)
        assert not isinstance(err, PixKeyError)

    @pytest.mark.parametrize(("cls", "kind"), REJECTIONS)
    def test_rejection_kind(self, cls, kind) -> None:
        err = cls("reason")
        assert isinstance(err, PixKeyError)
        assert err.kind is kind
        assert err.message == "reason"
        assert str(err) == "reason"

    def test_invalid_field_carries_field(self) -> None:
        err = InvalidFieldError("branch_number", "branch_number must be between 1 and 9999")
        assert err.kind is ErrorKind.INVALID_FIELD
        assert err.field == "branch_number"
        assert str(err) == "branch_number must be between 1 and 9999"

    def test_every_kind_has_an_exception(self) -> None:
        kinds = {kind for _, kind in REJECTIONS} | {InvalidFieldError.kind}
        assert kinds == set(ErrorKind)

    def test_kind_values_are_stable(self) -> None:
        assert ErrorKind.DUPLICATE_KEY_VALUE == "DUPLICATE_KEY_VALUE"
