"""Domain models for PIX key registration."""

from pix_keys.models.base import Event
from pix_keys.models.enums import AccountType, KeyType, PersonType
from pix_keys.models.pix_key import MUTABLE_FIELDS, PixKey, PixKeyCandidate, PixKeyPatch

__all__ = [
    "MUTABLE_FIELDS",
    "AccountType",
    "Event",
    "KeyType",
    "PersonType",
    "PixKey",
    "PixKeyCandidate",
    "PixKeyPatch",
]
