"""
Cache-invalidation policies deciding whether a refresh hits the network.

Refresh keys are ``"all"`` for the full plant list and ``"zone:<number>"``
for a single grow zone.
"""

from __future__ import annotations

import time
from typing import Callable, Dict, Protocol, runtime_checkable


@runtime_checkable
class RefreshPolicy(Protocol):
    def should_refresh(self, key: str) -> bool:
        """Return True if a network request should be made for ``key``."""
        ...

    def mark_refreshed(self, key: str) -> None:
        """Record that ``key`` was refreshed successfully."""
        ...


class AlwaysRefreshPolicy:
    """Refresh on every call."""

    def should_refresh(self, key: str) -> bool:
        return True

    def mark_refreshed(self, key: str) -> None:
        _ = key  # Unused but required by protocol


class MaxAgeRefreshPolicy:
    """
    Refresh a key when it was never refreshed or is older than ``max_age_seconds``.
    """

    def __init__(
        self, max_age_seconds: float, clock: Callable[[], float] = time.monotonic
    ) -> None:
        if max_age_seconds < 0:
            raise ValueError("max_age_seconds must be >= 0")
        self.max_age_seconds = max_age_seconds
        self._clock = clock
        self._refreshed_at: Dict[str, float] = {}

    def should_refresh(self, key: str) -> bool:
        refreshed_at = self._refreshed_at.get(key)
        if refreshed_at is None:
            return True
        return self._clock() - refreshed_at >= self.max_age_seconds

    def mark_refreshed(self, key: str) -> None:
        self._refreshed_at[key] = self._clock()


__all__ = ["AlwaysRefreshPolicy", "MaxAgeRefreshPolicy", "RefreshPolicy"]
