"""Record indexes backing the rule engine."""

from pix_keys.store.base import RecordIndex
from pix_keys.store.memory import InMemoryRecordIndex
from pix_keys.store.postgres import PostgresRecordIndex

__all__ = ["InMemoryRecordIndex", "PostgresRecordIndex", "RecordIndex"]
