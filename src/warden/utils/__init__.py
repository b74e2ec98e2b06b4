"""Shared utilities for Warden.

Contains cross-cutting utilities used by multiple modules.
"""

from warden.utils.time import format_timestamp, utc_now

__all__ = ["format_timestamp", "utc_now"]
