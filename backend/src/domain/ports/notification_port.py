"""Notification Port - refresh signal after successful mutations."""

from abc import ABC, abstractmethod


class NotificationPort(ABC):
    """Tells dependent views that an entity changed.

    There is no payload contract beyond "something changed"; observers re-read
    the entity themselves.
    """

    @abstractmethod
    def entity_changed(self, kind: str, entity_id: str) -> None:
        pass
