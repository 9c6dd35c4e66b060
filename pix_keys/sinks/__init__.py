"""Sinks receiving PIX key lifecycle events."""

from pix_keys.sinks.base import EventSink
from pix_keys.sinks.console import ConsoleSink
from pix_keys.sinks.kafka import KafkaSink

__all__ = ["ConsoleSink", "EventSink", "KafkaSink"]
