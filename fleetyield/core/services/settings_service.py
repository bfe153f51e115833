"""
Settings Service - Reads and updates system settings through a provider.
"""

import logging
from datetime import datetime, timezone

from fleetyield.core.domain.audit import AuditEvent
from fleetyield.core.domain.settings import DEFAULT_SETTINGS, SystemSettings, validate_settings
from fleetyield.core.ports.audit import AuditPublisher
from fleetyield.core.ports.settings_provider import SettingsProvider

logger = logging.getLogger(__name__)


class SettingsService:

    def __init__(self, provider: SettingsProvider, audit: AuditPublisher | None = None):
        self.provider = provider
        self.audit = audit

    async def get_settings(self) -> SystemSettings:
        """
        Get a validated settings snapshot; defaults if nothing is stored.

        Raises:
            InvalidSettings: if the stored settings are out of range
        """
        settings = await self.provider.get_settings()
        if settings is None:
            logger.info("No stored settings, using defaults")
            return DEFAULT_SETTINGS.model_copy(deep=True)

        validate_settings(settings)
        return settings

    async def update_settings(self, settings: SystemSettings, user_id: int | None = None) -> SystemSettings:
        """
        Validate and store new settings.

        Raises:
            InvalidSettings: naming the violated constraint; nothing is stored
        """
        validate_settings(settings)

        updated = settings.model_copy(update={
            "updated_at": datetime.now(timezone.utc),
            "updated_by": user_id,
        })
        await self.provider.save_settings(updated)
        logger.info(f"Settings updated by user {user_id}")

        if self.audit:
            self.audit.publish(AuditEvent(
                action="settings.update",
                entity_type="system_settings",
                new_values=updated.model_dump(mode="json"),
                user_id=user_id,
            ))
        return updated

    @staticmethod
    def validate_settings(settings: SystemSettings) -> None:
        validate_settings(settings)
