"""Harness configuration package

Provides:
- INI file loading with environment overrides
- Pydantic validation of the loaded values
"""

from .constants import *
from .loader import load_settings, read_config
from .schema import (
    DirectorySettings,
    HarnessSettings,
    LoggingSettings,
    ScenarioSettings,
    ServerSettings,
)

__all__ = [
    "load_settings",
    "read_config",
    "HarnessSettings",
    "ServerSettings",
    "DirectorySettings",
    "ScenarioSettings",
    "LoggingSettings",
]
