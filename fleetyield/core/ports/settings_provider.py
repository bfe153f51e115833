"""
SettingsProvider Port - Interface for loading and persisting system settings.

Implementations can be file-based (YAML) or database-backed (MongoDB).
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fleetyield.core.domain.settings import SystemSettings


class SettingsProvider(ABC):
    """
    Abstract interface for system settings storage.

    Implementations:
    - YamlSettingsProvider: File-based settings
    - MongoAnalyticsStore: Database-backed settings
    """

    @abstractmethod
    async def get_settings(self) -> "SystemSettings | None":
        """
        Get the current settings snapshot.

        Returns:
            SystemSettings if configured, None otherwise
        """
        ...

    @abstractmethod
    async def save_settings(self, settings: "SystemSettings") -> None:
        """
        Replace the stored settings.

        Args:
            settings: Already validated settings
        """
        ...
