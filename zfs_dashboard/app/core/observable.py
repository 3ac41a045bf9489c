"""Explicit change notification for in-process stores."""

import logging
from collections.abc import Callable
from typing import Any


log = logging.getLogger("zfs_dashboard.core.observable")

Observer = Callable[[Any], None]


class Observable:
    """Keep a list of observers and call each one after a state change."""

    def __init__(self) -> None:
        self._observers: list[Observer] = []

    def subscribe(self, callback: Observer) -> Callable[[], None]:
        """Register ``callback``; the returned callable removes it again."""
        self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._observers):
            try:
                callback(self)
            except Exception:
                log.exception("observer failed callback=%r", callback)
