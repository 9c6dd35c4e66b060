"""PostgreSQL record index.

Invariant checks and the following write run inside ``conn.transaction()``
after taking a transaction-scoped advisory lock per lock key, so two
sessions touching the same (key type, key value) or (branch, account)
pair serialize. The ``(key_type, key_value)`` unique constraint backs I1
at the storage layer; its violation surfaces as
:class:`~pix_keys.exceptions.DuplicateKeyValueError`. Every other database
error propagates unchanged.
"""

from __future__ import annotations

import hashlib
import logging
from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from typing import Any, Hashable, Iterator, Sequence
from uuid import UUID

import psycopg
from psycopg import errors

from pix_keys.config import PostgresConfig
from pix_keys.exceptions import DuplicateKeyValueError
from pix_keys.models.enums import AccountType, KeyType, PersonType
from pix_keys.models.pix_key import PixKey
from pix_keys.store.base import RecordIndex

logger = logging.getLogger(__name__)

TABLE = "pix_keys"

COLUMNS = (
    "id",
    "key_type",
    "key_value",
    "person_type",
    "account_type",
    "branch_number",
    "account_number",
    "holder_first_name",
    "holder_last_name",
    "created_at",
    "deactivated_at",
)

SCHEMA_STATEMENTS = (
    f"""
    CREATE TABLE IF NOT EXISTS {TABLE} (
        id UUID PRIMARY KEY,
        key_type VARCHAR(9) NOT NULL,
        key_value VARCHAR(77) NOT NULL,
        person_type VARCHAR(8) NOT NULL,
        account_type VARCHAR(10) NOT NULL,
        branch_number INTEGER NOT NULL CHECK (branch_number BETWEEN 1 AND 9999),
        account_number INTEGER NOT NULL CHECK (account_number BETWEEN 1 AND 99999999),
        holder_first_name VARCHAR(30) NOT NULL,
        holder_last_name VARCHAR(45),
        created_at TIMESTAMP NOT NULL,
        deactivated_at TIMESTAMP,
        CONSTRAINT {TABLE}_type_value_key UNIQUE (key_type, key_value)
    )
    """,
    f"CREATE INDEX IF NOT EXISTS {TABLE}_account_idx ON {TABLE} (branch_number, account_number)",
)

_SELECT = f"SELECT {', '.join(COLUMNS)} FROM {TABLE}"  # noqa: S608

_UPSERT = (
    f"INSERT INTO {TABLE} ({', '.join(COLUMNS)}) "  # noqa: S608
    f"VALUES ({', '.join(['%s'] * len(COLUMNS))}) "
    "ON CONFLICT (id) DO UPDATE SET "
    + ", ".join(f"{col} = EXCLUDED.{col}" for col in COLUMNS[1:])
)


def lock_id(lock_key: Hashable) -> int:
    """Map a lock key to a stable signed 64-bit advisory lock id.

    Enum parts contribute their value, so the id is identical across
    processes (unlike ``hash()``).
    """
    parts = lock_key if isinstance(lock_key, tuple) else (lock_key,)
    text = "|".join(str(p.value if isinstance(p, Enum) else p) for p in parts)
    digest = hashlib.blake2b(text.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, byteorder="big", signed=True)


def _escape_like(fragment: str) -> str:
    return fragment.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class PostgresRecordIndex(RecordIndex):
    """Record index backed by a psycopg 3 connection in autocommit mode."""

    def __init__(self, conn: psycopg.Connection) -> None:
        self._conn = conn

    @classmethod
    def connect(cls, config: PostgresConfig | str) -> "PostgresRecordIndex":
        """Open a connection from a config or a connection string."""
        conninfo = config.connection_string if isinstance(config, PostgresConfig) else config
        return cls(psycopg.connect(conninfo, autocommit=True))

    def close(self) -> None:
        self._conn.close()

    def create_schema(self) -> None:
        """Create the table and indexes if they do not exist."""
        with self._conn.cursor() as cur:
            for statement in SCHEMA_STATEMENTS:
                cur.execute(statement)
        logger.info("Schema ready: %s", TABLE)

    @contextmanager
    def transaction(self, *lock_keys: Hashable) -> Iterator[None]:
        # Sorted ids give every session the same acquisition order.
        ids = sorted({lock_id(key) for key in lock_keys})
        with self._conn.transaction():
            with self._conn.cursor() as cur:
                for advisory_id in ids:
                    cur.execute("SELECT pg_advisory_xact_lock(%s)", (advisory_id,))
            yield

    def find_by_id(self, key_id: UUID) -> PixKey | None:
        rows = self._fetch_all(f"{_SELECT} WHERE id = %s", (key_id,))
        return rows[0] if rows else None

    def exists_by_type_and_value(self, key_type: KeyType, key_value: str) -> bool:
        return self._fetch_scalar(
            f"SELECT EXISTS (SELECT 1 FROM {TABLE} WHERE key_type = %s AND key_value = %s)",  # noqa: S608
            (key_type.value, key_value),
        )

    def exists_by_account_with_different_person_type(
        self, branch_number: int, account_number: int, person_type: PersonType
    ) -> bool:
        return self._fetch_scalar(
            f"SELECT EXISTS (SELECT 1 FROM {TABLE} "  # noqa: S608
            "WHERE branch_number = %s AND account_number = %s AND person_type <> %s)",
            (branch_number, account_number, person_type.value),
        )

    def count_active_by_account(self, branch_number: int, account_number: int) -> int:
        return self._fetch_scalar(
            f"SELECT COUNT(*) FROM {TABLE} "  # noqa: S608
            "WHERE branch_number = %s AND account_number = %s AND deactivated_at IS NULL",
            (branch_number, account_number),
        )

    def save(self, record: PixKey) -> PixKey:
        try:
            with self._conn.cursor() as cur:
                cur.execute(_UPSERT, self._record_params(record))
        except errors.UniqueViolation as e:
            raise DuplicateKeyValueError(
                f"PIX key {record.key_type.value} {record.key_value!r} already exists"
            ) from e
        return record

    # Query methods
    def find_by_key_type(self, key_type: KeyType) -> list[PixKey]:
        return self._fetch_all(
            f"{_SELECT} WHERE key_type = %s ORDER BY created_at", (key_type.value,)
        )

    def find_by_account(self, branch_number: int, account_number: int) -> list[PixKey]:
        return self._fetch_all(
            f"{_SELECT} WHERE branch_number = %s AND account_number = %s ORDER BY created_at",
            (branch_number, account_number),
        )

    def find_by_holder_name(self, fragment: str) -> list[PixKey]:
        return self._fetch_all(
            f"{_SELECT} WHERE UPPER(holder_first_name) LIKE UPPER(%s) ORDER BY created_at",
            (f"%{_escape_like(fragment)}%",),
        )

    def find_created_between(self, start: datetime, end: datetime) -> list[PixKey]:
        return self._fetch_all(
            f"{_SELECT} WHERE created_at BETWEEN %s AND %s ORDER BY created_at",
            (start, end),
        )

    def find_active(self) -> list[PixKey]:
        return self._fetch_all(f"{_SELECT} WHERE deactivated_at IS NULL ORDER BY created_at")

    def find_inactive(self) -> list[PixKey]:
        return self._fetch_all(
            f"{_SELECT} WHERE deactivated_at IS NOT NULL ORDER BY created_at"
        )

    def _fetch_scalar(self, query: str, params: Sequence[Any]) -> Any:
        with self._conn.cursor() as cur:
            cur.execute(query, params)
            return cur.fetchone()[0]

    def _fetch_all(self, query: str, params: Sequence[Any] = ()) -> list[PixKey]:
        with self._conn.cursor() as cur:
            cur.execute(query, params)
            return [self._row_to_record(row) for row in cur.fetchall()]

    @staticmethod
    def _record_params(record: PixKey) -> tuple[Any, ...]:
        return (
            record.id,
            record.key_type.value,
            record.key_value,
            record.person_type.value,
            record.account_type.value,
            record.branch_number,
            record.account_number,
            record.holder_first_name,
            record.holder_last_name,
            record.created_at,
            record.deactivated_at,
        )

    @staticmethod
    def _row_to_record(row: Sequence[Any]) -> PixKey:
        return PixKey(
            id=row[0] if isinstance(row[0], UUID) else UUID(str(row[0])),
            key_type=KeyType(row[1]),
            key_value=row[2],
            person_type=PersonType(row[3]),
            account_type=AccountType(row[4]),
            branch_number=row[5],
            account_number=row[6],
            holder_first_name=row[7],
            holder_last_name=row[8],
            created_at=row[9],
            deactivated_at=row[10],
        )
