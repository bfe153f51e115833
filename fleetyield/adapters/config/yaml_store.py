"""
YAML Settings Provider Adapter - File-based system settings.

Reads the `settings` mapping of a YAML file:

    settings:
      fuel_price_per_liter: 52.5
      peak_hours_coefficient: 1.2
      seasonal_coefficients:
        summer: 1.15
"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from fleetyield.core.domain.errors import InvalidSettings
from fleetyield.core.domain.settings import SystemSettings
from fleetyield.core.ports.settings_provider import SettingsProvider

logger = logging.getLogger(__name__)


class YamlSettingsProvider(SettingsProvider):
    """
    Settings provider backed by a YAML file. The file is re-read on every
    call so edits are picked up without a restart.
    """

    def __init__(self, settings_path: str | Path):
        self.settings_path = Path(settings_path)

    async def get_settings(self) -> SystemSettings | None:
        if not self.settings_path.exists():
            return None

        with open(self.settings_path) as f:
            data = yaml.safe_load(f) or {}

        section = data.get("settings")
        if not section:
            logger.info(f"No settings section in {self.settings_path}")
            return None

        try:
            return SystemSettings(**section)
        except ValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(part) for part in error["loc"])
            raise InvalidSettings(f"{field}: {error['msg']}") from e

    async def save_settings(self, settings: SystemSettings) -> None:
        data = {"settings": settings.model_dump(mode="json", exclude_none=True)}
        with open(self.settings_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False)
