"""Engine settings loaded from the host's bundled YAML configuration.

The file is optional.  Example ``trialkey.yaml``::

    trial_days: 30
    dev_email: dev@localhost

Settings are read from the application bundle, never from the per-user data
directory, so a user cannot lengthen their own trial by editing it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from .logger import get_logger

log = get_logger("config")

DEFAULT_TRIAL_DAYS = 30
MAX_TRIAL_DAYS = 3650


class EngineSettings(BaseModel):
    trial_days: int = Field(default=DEFAULT_TRIAL_DAYS, ge=1, le=MAX_TRIAL_DAYS)
    dev_email: str = "dev@localhost"

    model_config = {"frozen": True, "extra": "ignore"}


def _read_mapping(config_file: Path) -> Dict[str, Any]:
    if not config_file.is_file():
        return {}

    try:
        with config_file.open("r", encoding="utf-8") as fp:
            data = yaml.safe_load(fp) or {}
    except (yaml.YAMLError, OSError) as exc:
        log.warning("Ignoring unreadable config %s: %s", config_file, exc)
        return {}

    if not isinstance(data, dict):
        log.warning("Ignoring config %s: expected a mapping at top level", config_file)
        return {}
    return data


def load_settings(config_file: Optional[Path] = None) -> EngineSettings:
    """Return settings from *config_file*, falling back to defaults.

    Configuration problems never stop the engine; a bad file means defaults.
    """
    if config_file is None:
        return EngineSettings()

    data = _read_mapping(Path(config_file))
    try:
        return EngineSettings.model_validate(data)
    except ValidationError as exc:
        log.warning("Ignoring invalid settings in %s: %s", config_file, exc)
        return EngineSettings()


__all__ = ["EngineSettings", "load_settings", "DEFAULT_TRIAL_DAYS", "MAX_TRIAL_DAYS"]
