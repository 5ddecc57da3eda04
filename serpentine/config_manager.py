"""Configuration persistence manager for serpentine.

This module handles loading and saving of processing Settings to/from
JSON files.
"""

import dataclasses
import json
import logging
from pathlib import Path
from typing import Optional, Tuple

from serpentine.models import (
    DEFAULT_CONFIG_FILE,
    CurveControlSettings,
    ProcessingMode,
    Settings,
)

logger = logging.getLogger(__name__)


def settings_to_dict(settings: Settings) -> dict:
    """JSON-ready representation of Settings."""
    data = dataclasses.asdict(settings)
    data["processing_mode"] = settings.processing_mode.value
    return data


def settings_from_dict(data: dict) -> Settings:
    """Build Settings from a dict, keeping defaults for missing keys.

    Unknown keys are ignored.

    Raises:
        ValueError: If processing_mode is not a known mode
    """
    known = {f.name for f in dataclasses.fields(Settings)}
    values = {key: value for key, value in data.items() if key in known}

    if "processing_mode" in values:
        values["processing_mode"] = ProcessingMode(values["processing_mode"])

    if "curve_controls" in values:
        curve_fields = {f.name for f in dataclasses.fields(CurveControlSettings)}
        raw = values["curve_controls"] or {}
        values["curve_controls"] = CurveControlSettings(
            **{key: value for key, value in raw.items() if key in curve_fields}
        )

    if "visible_paths" in values:
        values["visible_paths"] = {
            str(key): bool(value)
            for key, value in (values["visible_paths"] or {}).items()
        }

    return Settings(**values)


class ConfigManager:
    """Handles loading and saving of processing settings."""

    def __init__(self, config_path: Path = DEFAULT_CONFIG_FILE):
        """Initialize config manager.

        Args:
            config_path: Path to configuration file
                (defaults to ~/.serpentine_config.json)
        """
        self.config_path = Path(config_path)

    def load(self) -> Settings:
        """Load settings from file, returning defaults if not found.

        Returns:
            Settings with loaded or default values
        """
        if not self.config_path.exists():
            return Settings()

        try:
            with open(self.config_path, "r") as f:
                settings = settings_from_dict(json.load(f))
            logger.info("Loaded configuration from %s", self.config_path)
            return settings
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Could not load config file %s: %s", self.config_path, e)
            return Settings()

    def save(self, settings: Settings) -> Tuple[bool, Optional[str]]:
        """Save settings to file.

        Args:
            settings: Settings to save

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        try:
            with open(self.config_path, "w") as f:
                json.dump(settings_to_dict(settings), f, indent=2)
            return True, None
        except OSError as e:
            return False, str(e)
