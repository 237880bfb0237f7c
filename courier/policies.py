"""
Cache policies (per-call control over the response cache).

A call's `cache` option accepts one of these policies, a cache handle, or a
bool for convenience.
"""

from __future__ import annotations

from enum import Enum


class CachePolicy(Enum):
    """How a call should interact with the response cache."""

    DEFAULT = "default"
    DISABLED = "disabled"
