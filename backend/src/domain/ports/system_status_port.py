"""System Status Port - read-only view of portal availability."""

from abc import ABC, abstractmethod


class SystemStatusPort(ABC):

    @abstractmethod
    def is_maintenance_mode(self) -> bool:
        """True while the portal is closed to everyone but administrators."""
        pass
