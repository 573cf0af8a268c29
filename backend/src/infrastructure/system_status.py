"""System status adapters"""

from config import Settings
from domain.ports.system_status_port import SystemStatusPort


class SettingsSystemStatus(SystemStatusPort):
    """Maintenance mode read from application settings (MAINTENANCE_MODE)."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def is_maintenance_mode(self) -> bool:
        return self.settings.MAINTENANCE_MODE


class StaticSystemStatus(SystemStatusPort):
    """Fixed maintenance flag, switchable at runtime by an operator hook."""

    def __init__(self, maintenance_mode: bool = False):
        self.maintenance_mode = maintenance_mode

    def is_maintenance_mode(self) -> bool:
        return self.maintenance_mode
