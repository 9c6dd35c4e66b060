"""Normalization, validation and the rule engine."""

from pix_keys.rules.engine import PixKeyEngine
from pix_keys.rules.normalizer import normalize, normalize_patch
from pix_keys.rules.validators import validate_value

__all__ = ["PixKeyEngine", "normalize", "normalize_patch", "validate_value"]
