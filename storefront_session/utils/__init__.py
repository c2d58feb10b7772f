"""Utility functions package for the storefront session layer.

Exposed functions:
    format_duration: Formats time durations into human-readable strings.
    mask_token: Shortens bearer tokens for safe log output.
"""

from .helpers import format_duration, mask_token

__all__ = ["format_duration", "mask_token"]
