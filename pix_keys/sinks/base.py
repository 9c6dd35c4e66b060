"""Event sink protocol."""

from typing import Protocol

from pix_keys.models.base import Event


class EventSink(Protocol):
    """Anything that accepts lifecycle events from the rule engine."""

    def publish(self, event: Event) -> None:
        ...
