"""Rule engine for PIX key registration.

Create, amend and deactivate run their checks in a fixed order and stop at
the first violation, raising a typed :class:`~pix_keys.exceptions.PixKeyError`.
Nothing is written until every check has passed. Checks that read other
records (uniqueness, person-type consistency, account quota) run inside the
index's transaction boundary together with the write.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Callable, Hashable
from uuid import UUID

from pix_keys.config import RulesConfig
from pix_keys.exceptions import (
    AccountQuotaExceededError,
    AlreadyInactiveError,
    DuplicateKeyValueError,
    InvalidKeyValueFormatError,
    KeyNotFoundError,
    NoChangeError,
    PersonTypeMismatchError,
    PixKeyError,
)
from pix_keys.logging import mask_key_value
from pix_keys.models.base import Event
from pix_keys.models.enums import KeyType, PersonType
from pix_keys.models.pix_key import PixKey, PixKeyCandidate, PixKeyPatch
from pix_keys.rules.fields import parse_enum, validate_candidate, validate_patch
from pix_keys.rules.normalizer import normalize, normalize_key_type, normalize_patch
from pix_keys.rules.validators import validate_value
from pix_keys.sinks.base import EventSink
from pix_keys.sinks.serialization import to_dict_fast
from pix_keys.store.base import RecordIndex

logger = logging.getLogger(__name__)

EVENT_SOURCE = "pix-keys"


def _key_lock(key_type: KeyType, key_value: str) -> tuple[Hashable, ...]:
    return ("key", key_type, key_value)


def _account_lock(branch_number: int, account_number: int) -> tuple[Hashable, ...]:
    return ("account", branch_number, account_number)


class PixKeyEngine:
    """Registers, amends, deactivates and queries PIX keys.

    Parameters
    ----------
    index : RecordIndex
        Storage the engine reads invariants from and writes records to.
    rules : RulesConfig | None
        Per-account key limits (defaults: 5 individual, 20 entity).
    event_sink : EventSink | None
        Receives a lifecycle event after each committed operation.
    clock : Callable[[], datetime]
        Source of ``created_at`` / ``deactivated_at`` timestamps.
    id_factory : Callable[[], UUID]
        Source of new record ids.
    """

    def __init__(
        self,
        index: RecordIndex,
        rules: RulesConfig | None = None,
        event_sink: EventSink | None = None,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], UUID] = uuid.uuid4,
    ) -> None:
        self.index = index
        self.rules = rules or RulesConfig()
        self.event_sink = event_sink
        self._clock = clock
        self._id_factory = id_factory

    # --- Commands ---

    def create(self, candidate: PixKeyCandidate) -> PixKey:
        """Register a new PIX key.

        Order: normalize, structural checks, value format, uniqueness,
        person-type consistency, account quota, then persist.

        Raises
        ------
        InvalidFieldError, InvalidKeyValueFormatError, DuplicateKeyValueError,
        PersonTypeMismatchError, AccountQuotaExceededError
        """
        try:
            checked = validate_candidate(normalize(candidate))
            if not validate_value(checked.key_type, checked.key_value):
                raise InvalidKeyValueFormatError(
                    f"Invalid value for key type {checked.key_type.value}"
                )

            with self.index.transaction(
                _key_lock(checked.key_type, checked.key_value),
                _account_lock(checked.branch_number, checked.account_number),
            ):
                self._check_unique(checked.key_type, checked.key_value)
                self._check_person_type(
                    checked.branch_number, checked.account_number, checked.person_type
                )
                self._check_quota(
                    checked.branch_number, checked.account_number, checked.person_type
                )
                record = PixKey(
                    id=self._id_factory(),
                    key_type=checked.key_type,
                    key_value=checked.key_value,
                    person_type=checked.person_type,
                    account_type=checked.account_type,
                    branch_number=checked.branch_number,
                    account_number=checked.account_number,
                    holder_first_name=checked.holder_first_name,
                    holder_last_name=checked.holder_last_name,
                    created_at=self._clock(),
                )
                stored = self.index.save(record)
        except PixKeyError as e:
            self._log_rejection("create", e)
            raise

        logger.info(
            "Created PIX key %s: type=%s value=%s account=%s/%s",
            stored.id,
            stored.key_type.value,
            mask_key_value(stored.key_value),
            stored.branch_number,
            stored.account_number,
        )
        self._publish("pix_key.created", stored)
        return stored

    def amend(self, key_id: UUID, patch: PixKeyPatch) -> PixKey:
        """Apply a partial update to the account and holder fields of a key.

        Order: lookup, active check, normalize, no-change check, field
        checks, then person-type consistency and quota at the destination
        account when branch or account number changes.

        Raises
        ------
        KeyNotFoundError, AlreadyInactiveError, NoChangeError,
        InvalidFieldError, PersonTypeMismatchError, AccountQuotaExceededError
        """
        try:
            preview = self.index.find_by_id(key_id)
            locked = None if preview is None else self._target_account(preview, patch)

            while True:
                lock_keys: list[Hashable] = [("id", key_id)]
                if locked is not None:
                    lock_keys.append(_account_lock(*locked))

                with self.index.transaction(*lock_keys):
                    current = self._require_active(key_id)
                    target = self._target_account(current, patch)
                    if target != locked:
                        # Moved since the unlocked read: retry holding the new target.
                        locked = target
                        continue

                    patch = normalize_patch(patch)
                    if not any(
                        getattr(current, name) != value
                        for name, value in patch.provided().items()
                    ):
                        raise NoChangeError(f"Amend of PIX key {key_id} changes no field")

                    changes = validate_patch(patch)
                    if target != current.account:
                        self._check_person_type(*target, current.person_type)
                        self._check_quota(*target, current.person_type)

                    stored = self.index.save(current.amended(**changes))
                break
        except PixKeyError as e:
            self._log_rejection("amend", e)
            raise

        logger.info("Amended PIX key %s: fields=%s", stored.id, sorted(changes))
        self._publish("pix_key.amended", stored)
        return stored

    def deactivate(self, key_id: UUID) -> PixKey:
        """Mark a key inactive. There is no way back.

        Raises
        ------
        KeyNotFoundError, AlreadyInactiveError
        """
        try:
            with self.index.transaction(("id", key_id)):
                current = self._require_active(key_id)
                stored = self.index.save(current.deactivated(self._clock()))
        except PixKeyError as e:
            self._log_rejection("deactivate", e)
            raise

        logger.info("Deactivated PIX key %s at %s", stored.id, stored.deactivated_at)
        self._publish("pix_key.deactivated", stored)
        return stored

    # --- Queries ---

    def find_by_id(self, key_id: UUID) -> PixKey | None:
        return self.index.find_by_id(key_id)

    def find_by_key_type(self, key_type: KeyType | str) -> list[PixKey]:
        """Keys of one type; accepts raw spellings such as ``"E-mail"``."""
        return self.index.find_by_key_type(
            parse_enum("key_type", normalize_key_type(key_type), KeyType)
        )

    def find_by_account(self, branch_number: int, account_number: int) -> list[PixKey]:
        return self.index.find_by_account(branch_number, account_number)

    def find_by_holder_name(self, fragment: str) -> list[PixKey]:
        return self.index.find_by_holder_name(fragment)

    def find_created_between(self, start: datetime, end: datetime) -> list[PixKey]:
        return self.index.find_created_between(start, end)

    def find_active(self) -> list[PixKey]:
        return self.index.find_active()

    def find_inactive(self) -> list[PixKey]:
        return self.index.find_inactive()

    # --- Checks ---

    def _require_active(self, key_id: UUID) -> PixKey:
        current = self.index.find_by_id(key_id)
        if current is None:
            raise KeyNotFoundError(f"PIX key {key_id} not found")
        if not current.is_active:
            raise AlreadyInactiveError(
                f"PIX key {key_id} is inactive since {current.deactivated_at.isoformat()}"
            )
        return current

    def _check_unique(self, key_type: KeyType, key_value: str) -> None:
        if self.index.exists_by_type_and_value(key_type, key_value):
            raise DuplicateKeyValueError(
                f"PIX key {key_type.value} {mask_key_value(key_value)} already exists"
            )

    def _check_person_type(
        self, branch_number: int, account_number: int, person_type: PersonType
    ) -> None:
        if self.index.exists_by_account_with_different_person_type(
            branch_number, account_number, person_type
        ):
            raise PersonTypeMismatchError(
                f"Account {branch_number}/{account_number} is registered "
                f"with a person type other than {person_type.value}"
            )

    def _check_quota(
        self, branch_number: int, account_number: int, person_type: PersonType
    ) -> None:
        limit = self.rules.key_limit(person_type)
        active = self.index.count_active_by_account(branch_number, account_number)
        if active >= limit:
            raise AccountQuotaExceededError(
                f"Account {branch_number}/{account_number} already has {active} active "
                f"keys (limit {limit} for {person_type.value})"
            )

    @staticmethod
    def _target_account(current: PixKey, patch: PixKeyPatch) -> tuple[int, int]:
        """(branch, account) the key points to once ``patch`` is applied."""
        return (
            patch.branch_number if patch.branch_number is not None else current.branch_number,
            patch.account_number if patch.account_number is not None else current.account_number,
        )

    # --- Events and logging ---

    def _publish(self, event_type: str, record: PixKey) -> None:
        if self.event_sink is None:
            return
        self.event_sink.publish(
            Event(
                event_id=str(uuid.uuid4()),
                event_type=event_type,
                event_time=self._clock(),
                source=EVENT_SOURCE,
                subject=str(record.id),
                data=to_dict_fast(record),
            )
        )

    @staticmethod
    def _log_rejection(operation: str, error: PixKeyError) -> None:
        logger.info(
            "Rejected %s: kind=%s reason=%s",
            operation,
            error.kind.value,
            error.message,
            extra={"fields": {"operation": operation, "kind": error.kind.value}},
        )
