"""PIX key registration rule engine."""

__version__ = "0.1.0"
