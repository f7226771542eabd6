"""
Baseline state used as detection reference.

Holds the per-user set of known login geographies plus the global static
baselines for network rate and transfer volume. The static baselines come
from configuration and are not learned from traffic.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Optional, Set

from src.core.config import BaselineConfig


class BaselineStore:
    """
    Per-entity reference state.

    User entries are created lazily on first login and retained for the life
    of the store. Not thread-safe; the engine serializes access.
    """

    def __init__(self, settings: Optional[BaselineConfig] = None):
        self._settings = settings or BaselineConfig()
        self._user_geos: Dict[str, Set[str]] = {}

    def record_login(self, user_id: str, geo: str) -> bool:
        """
        Add ``geo`` to the user's known geographies.

        Returns:
            True if this is the first time ``(user_id, geo)`` has been seen
        """
        geos = self._user_geos.setdefault(user_id, set())
        if geo in geos:
            return False
        geos.add(geo)
        return True

    def known_geographies(self, user_id: str) -> FrozenSet[str]:
        return frozenset(self._user_geos.get(user_id, ()))

    def normal_requests_per_minute(self) -> float:
        return self._settings.normal_requests_per_minute

    def normal_daily_transfer_mb(self) -> float:
        return self._settings.normal_daily_transfer_mb

    def snapshot(self) -> Dict[str, FrozenSet[str]]:
        """Copy of all known geographies keyed by user."""
        return {user: frozenset(geos) for user, geos in self._user_geos.items()}

    def __len__(self) -> int:
        return len(self._user_geos)
