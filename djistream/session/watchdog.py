"""
Named, cancellable watchdog timers.

Each watchdog is keyed by name. Arming a name that is already running
cancels the earlier timer first, so at most one timer per name is pending.
The token given when arming is passed back on expiry so the owner can tell
which arming fired.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class WatchdogScheduler:
    """
    Schedules watchdog callbacks on the running event loop.

    Example:
        >>> watchdogs = WatchdogScheduler(lambda name, token: print(name, token, "expired"))
        >>> watchdogs.arm("start-watchdog", 60.0, token=1)
        >>> watchdogs.cancel("start-watchdog")
        True
    """

    def __init__(self, on_expired: Callable[[str, int], None]) -> None:
        """
        Args:
            on_expired: Called with the watchdog name and its arming token
                when a timer fires.
        """
        self._on_expired = on_expired
        self._handles: dict[str, asyncio.TimerHandle] = {}

    @property
    def armed(self) -> frozenset[str]:
        """Names of watchdogs currently pending."""
        return frozenset(self._handles)

    def is_armed(self, name: str) -> bool:
        return name in self._handles

    def arm(self, name: str, seconds: float, token: int = 0) -> None:
        """
        Start (or restart) the watchdog `name`.

        Must be called from within a running event loop.
        """
        self.cancel(name)
        loop = asyncio.get_running_loop()
        self._handles[name] = loop.call_later(seconds, self._fire, name, token)
        logger.debug("Armed %s for %.1fs (token %d)", name, seconds, token)

    def cancel(self, name: str) -> bool:
        """
        Cancel the watchdog `name`.

        Returns:
            True if a pending timer was cancelled.
        """
        handle = self._handles.pop(name, None)
        if handle is None:
            return False
        handle.cancel()
        logger.debug("Cancelled %s", name)
        return True

    def cancel_all(self) -> None:
        for name in list(self._handles):
            self.cancel(name)

    def _fire(self, name: str, token: int) -> None:
        self._handles.pop(name, None)
        self._on_expired(name, token)
