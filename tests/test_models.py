"""Tests for domain models."""

from dataclasses import FrozenInstanceError
from datetime import datetime
from uuid import uuid4

import pytest

from pix_keys.exceptions import AlreadyInactiveError
from pix_keys.models import (
    MUTABLE_FIELDS,
    AccountType,
    Event,
    KeyType,
    PersonType,
    PixKey,
    PixKeyCandidate,
    PixKeyPatch,
)

CREATED_AT = datetime(2024, 1, 1, 9, 0, 0)


@pytest.fixture
def record() -> PixKey:
    return PixKey(
        id=uuid4(),
        key_type=KeyType.PHONE,
        key_value="+5511987654321",
        person_type=PersonType.INDIVIDUAL,
        account_type=AccountType.CHECKING,
        branch_number=1234,
        account_number=56789012,
        holder_first_name="Ana",
        created_at=CREATED_AT,
    )


class TestEnums:
    """Tests for canonical tokens."""

    def test_key_type_tokens(self) -> None:
        assert [k.value for k in KeyType] == ["celular", "email", "cpf", "cnpj", "aleatoria"]

    def test_person_type_tokens(self) -> None:
        assert PersonType("fisica") is PersonType.INDIVIDUAL
        assert PersonType("juridica") is PersonType.ENTITY

    def test_account_type_tokens(self) -> None:
        assert [a.value for a in AccountType] == ["corrente", "poupanca"]

    def test_str_comparison(self) -> None:
        assert KeyType.EMAIL == "email"


class TestPixKey:
    """Tests for the PixKey record."""

    def test_defaults(self, record: PixKey) -> None:
        assert record.holder_last_name is None
        assert record.deactivated_at is None
        assert record.is_active
        assert record.account == (1234, 56789012)

    def test_frozen(self, record: PixKey) -> None:
        with pytest.raises(FrozenInstanceError):
            record.key_value = "+5511000000000"

    def test_amended(self, record: PixKey) -> None:
        amended = record.amended(account_type=AccountType.SAVINGS, holder_last_name="Souza")

        assert amended.account_type is AccountType.SAVINGS
        assert amended.holder_last_name == "Souza"
        assert amended.id == record.id
        assert record.account_type is AccountType.CHECKING

    @pytest.mark.parametrize("field", ["id", "key_type", "key_value", "person_type", "created_at"])
    def test_identity_fields_not_amendable(self, record: PixKey, field: str) -> None:
        with pytest.raises(TypeError, match=field):
            record.amended(**{field: getattr(record, field)})

    def test_deactivated_cannot_be_reached_through_amend(self, record: PixKey) -> None:
        with pytest.raises(TypeError):
            record.amended(deactivated_at=CREATED_AT)

    def test_deactivated(self, record: PixKey) -> None:
        at = datetime(2024, 2, 1)

        inactive = record.deactivated(at)

        assert inactive.deactivated_at == at
        assert not inactive.is_active
        assert record.is_active

    def test_deactivation_is_one_way(self, record: PixKey) -> None:
        inactive = record.deactivated(datetime(2024, 2, 1))

        with pytest.raises(AlreadyInactiveError):
            inactive.deactivated(datetime(2024, 3, 1))

    def test_mutable_fields(self) -> None:
        assert set(MUTABLE_FIELDS) == {
            "account_type",
            "branch_number",
            "account_number",
            "holder_first_name",
            "holder_last_name",
        }


class TestPixKeyCandidate:
    """Tests for create requests."""

    def test_holder_last_name_optional(self) -> None:
        candidate = PixKeyCandidate("email", "a@b.com", "fisica", "corrente", 1, 1, "Ana")
        assert candidate.holder_last_name is None


class TestPixKeyPatch:
    """Tests for amend requests."""

    def test_provided_skips_none(self) -> None:
        patch = PixKeyPatch(branch_number=10, holder_last_name="")
        assert patch.provided() == {"branch_number": 10, "holder_last_name": ""}

    def test_empty(self) -> None:
        assert PixKeyPatch().provided() == {}

    def test_patch_fields_match_mutable_fields(self) -> None:
        patch = PixKeyPatch(
            account_type="corrente",
            branch_number=1,
            account_number=1,
            holder_first_name="Ana",
            holder_last_name="Souza",
        )
        assert tuple(patch.provided()) == MUTABLE_FIELDS


class TestEvent:
    """Tests for Event model."""

    def test_event_creation(self) -> None:
        event = Event(
            event_id="evt-001",
            event_type="pix_key.created",
            event_time=CREATED_AT,
            source="pix-keys",
            subject="key-001",
            data={"key_type": "email"},
        )

        assert event.event_type == "pix_key.created"
        assert event.metadata == {}
