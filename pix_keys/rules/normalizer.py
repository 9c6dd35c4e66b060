"""Normalization of categorical fields before validation.

Equivalent spellings collapse to the canonical tokens of
:mod:`pix_keys.models.enums`: ``"E-mail"`` -> ``"email"``,
``"JURÍDICA"`` -> ``"juridica"``, ``"POUPANÇA"`` -> ``"poupanca"``.
Numeric and name fields are left untouched and ``None`` stays ``None``.
"""

from __future__ import annotations

import unicodedata
from dataclasses import replace

from pix_keys.models.pix_key import PixKeyCandidate, PixKeyPatch


def normalize_key_type(value: str | None) -> str | None:
    """Lower-case and drop hyphens."""
    if value is None:
        return None
    return value.lower().replace("-", "")


def normalize_person_type(value: str | None) -> str | None:
    """Lower-case and strip diacritics."""
    if value is None:
        return None
    decomposed = unicodedata.normalize("NFD", value.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_account_type(value: str | None) -> str | None:
    """Lower-case and map ``ç`` to ``c``."""
    if value is None:
        return None
    return value.lower().replace("ç", "c")


def normalize(candidate: PixKeyCandidate) -> PixKeyCandidate:
    """Return ``candidate`` with its categorical fields normalized."""
    return replace(
        candidate,
        key_type=normalize_key_type(candidate.key_type),
        person_type=normalize_person_type(candidate.person_type),
        account_type=normalize_account_type(candidate.account_type),
    )


def normalize_patch(patch: PixKeyPatch) -> PixKeyPatch:
    """Return ``patch`` with its account type normalized."""
    return replace(patch, account_type=normalize_account_type(patch.account_type))
