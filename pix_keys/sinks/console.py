"""Console sink for debugging and development."""

import json
from typing import Any

from pix_keys.models.base import Event
from pix_keys.sinks.serialization import to_dict


class ConsoleSink:
    """Print lifecycle events to stdout."""

    def __init__(self, pretty: bool = True) -> None:
        """Initialize console sink.

        Parameters
        ----------
        pretty : bool
            Pretty-print JSON output.
        """
        self.pretty = pretty
        self._counts: dict[str, int] = {}

    def publish(self, event: Event) -> None:
        """Print a single event."""
        self.write(event.event_type, event)

    def write(self, label: str, record: Any) -> None:
        """Print any dataclass or dict as JSON under ``label``."""
        data = to_dict(record)
        if self.pretty:
            print(json.dumps(data, indent=2, ensure_ascii=False, default=str))
        else:
            print(json.dumps(data, ensure_ascii=False, default=str))
        self._counts[label] = self._counts.get(label, 0) + 1

    def close(self) -> None:
        """Print summary."""
        print(f"\n{'='*60}")
        print("Console Sink Summary")
        print("=" * 60)
        for label, count in self._counts.items():
            print(f"  {label}: {count} records")
