"""Synthetic PIX key candidates for tests, demos and load scripts."""

from __future__ import annotations

import string
from typing import Callable, Iterator

from pix_keys.generators.base import BaseGenerator
from pix_keys.models.enums import AccountType, KeyType, PersonType
from pix_keys.models.pix_key import PixKeyCandidate
from pix_keys.rules.fields import FIRST_NAME_MAX_LENGTH, LAST_NAME_MAX_LENGTH
from pix_keys.rules.validators import RANDOM_KEY_LENGTH, validate_value

# Alternative spellings the normalizer folds into canonical tokens.
MESSY_SPELLINGS: dict[str, list[str]] = {
    KeyType.EMAIL.value: ["E-mail", "EMAIL", "e-mail"],
    KeyType.PHONE.value: ["Celular", "CELULAR"],
    KeyType.CPF.value: ["CPF"],
    KeyType.CNPJ.value: ["CNPJ"],
    KeyType.RANDOM.value: ["Aleatoria", "ALEATORIA"],
    PersonType.INDIVIDUAL.value: ["Física", "FÍSICA", "fisica"],
    PersonType.ENTITY.value: ["Jurídica", "JURÍDICA", "juridica"],
    AccountType.CHECKING.value: ["Corrente", "CORRENTE"],
    AccountType.SAVINGS.value: ["Poupança", "POUPANÇA", "poupanca"],
}


class PixKeyCandidateGenerator(BaseGenerator):
    """Generate create requests that pass every format rule.

    Individuals get CPF, phone, e-mail or random keys; entities get CNPJ,
    phone, e-mail or random keys.
    """

    KEY_TYPES = {
        PersonType.INDIVIDUAL: [KeyType.CPF, KeyType.PHONE, KeyType.EMAIL, KeyType.RANDOM],
        PersonType.ENTITY: [KeyType.CNPJ, KeyType.PHONE, KeyType.EMAIL, KeyType.RANDOM],
    }
    ACCOUNT_TYPES = list(AccountType)
    ACCOUNT_TYPE_WEIGHTS = [0.75, 0.25]

    MAX_ATTEMPTS = 20

    def __init__(self, seed: int | None = None, messy: bool = False) -> None:
        """
        Parameters
        ----------
        seed : int | None
            Random seed for reproducibility.
        messy : bool
            Emit mixed-case and accented spellings for categorical fields.
        """
        super().__init__(seed)
        self.messy = messy

    def generate(
        self,
        key_type: KeyType | None = None,
        person_type: PersonType | None = None,
        branch_number: int | None = None,
        account_number: int | None = None,
    ) -> PixKeyCandidate:
        """Generate a single candidate; unspecified fields are random."""
        person_type = person_type or self.random.choice(list(PersonType))
        key_type = key_type or self.random.choice(self.KEY_TYPES[person_type])
        account_type = self.random.choices(
            self.ACCOUNT_TYPES, weights=self.ACCOUNT_TYPE_WEIGHTS, k=1
        )[0]

        return PixKeyCandidate(
            key_type=self._spell(key_type.value),
            key_value=self.key_value(key_type),
            person_type=self._spell(person_type.value),
            account_type=self._spell(account_type.value),
            branch_number=branch_number or self.random.randint(1, 9999),
            account_number=account_number or self.random.randint(1, 99999999),
            holder_first_name=self.fake.first_name()[:FIRST_NAME_MAX_LENGTH],
            holder_last_name=self.fake.last_name()[:LAST_NAME_MAX_LENGTH],
        )

    def generate_for_account(
        self,
        branch_number: int,
        account_number: int,
        person_type: PersonType,
        count: int,
    ) -> Iterator[PixKeyCandidate]:
        """Generate ``count`` candidates sharing one account and person type."""
        for _ in range(count):
            yield self.generate(
                person_type=person_type,
                branch_number=branch_number,
                account_number=account_number,
            )

    def key_value(self, key_type: KeyType) -> str:
        """Generate a value that passes the validator for ``key_type``."""
        factories: dict[KeyType, Callable[[], str]] = {
            KeyType.PHONE: self._phone,
            KeyType.EMAIL: self.fake.email,
            KeyType.CPF: self.fake.cpf,
            KeyType.CNPJ: self.fake.cnpj,
            KeyType.RANDOM: self._random_key,
        }
        factory = factories[key_type]
        for _ in range(self.MAX_ATTEMPTS):
            value = factory()
            if validate_value(key_type, value):
                return value
        raise RuntimeError(f"Could not generate a valid {key_type.value} value")

    def _phone(self) -> str:
        area = self.random.randint(11, 99)
        number = "9" + "".join(self.random.choices(string.digits, k=8))
        return f"+55{area}{number}"

    def _random_key(self) -> str:
        return "".join(
            self.random.choices(string.ascii_letters + string.digits, k=RANDOM_KEY_LENGTH)
        )

    def _spell(self, token: str) -> str:
        if not self.messy:
            return token
        return self.random.choice(MESSY_SPELLINGS[token])
