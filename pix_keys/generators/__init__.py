"""Synthetic data generators."""

from pix_keys.generators.pix_key import PixKeyCandidateGenerator

__all__ = ["PixKeyCandidateGenerator"]
