"""Refresh notifiers for the orchestrator.

The orchestrator calls entity_changed after every committed mutation so
that live views can re-read the entity. The transport (websocket, SSE,
cache invalidation) belongs to whoever registers the callback.
"""

import logging
from typing import Callable

from domain.ports.notification_port import NotificationPort

logger = logging.getLogger(__name__)


class CallbackNotifier(NotificationPort):
    """Fans a change signal out to registered callbacks.

    Example:
        notifier = CallbackNotifier()
        notifier.subscribe(lambda kind, entity_id: cache.invalidate(kind, entity_id))
    """

    def __init__(self):
        self._callbacks: list[Callable[[str, str], None]] = []

    def subscribe(self, callback: Callable[[str, str], None]) -> Callable[[], None]:
        """Register a callback; returns a function that unregisters it."""
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def entity_changed(self, kind: str, entity_id: str) -> None:
        for callback in list(self._callbacks):
            callback(kind, entity_id)


class LoggingNotifier(NotificationPort):
    """Default notifier when no live channel is configured."""

    def entity_changed(self, kind: str, entity_id: str) -> None:
        logger.debug(f"{kind} {entity_id} changed")
