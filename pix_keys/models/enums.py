"""Enumeration types for PIX key records.

Member values are the canonical lower-case tokens accepted after
normalization (e.g. ``"E-mail"`` normalizes to ``KeyType.EMAIL``).
"""

from enum import Enum


class KeyType(str, Enum):
    PHONE = "celular"
    EMAIL = "email"
    CPF = "cpf"  # national individual id, 11 digits
    CNPJ = "cnpj"  # national entity id, 14 digits
    RANDOM = "aleatoria"  # opaque 36-char token


class PersonType(str, Enum):
    INDIVIDUAL = "fisica"
    ENTITY = "juridica"


class AccountType(str, Enum):
    CHECKING = "corrente"
    SAVINGS = "poupanca"
