"""Harness configuration loading.

Load order: defaults → config file → environment variables.
Environment overrides follow ``HARNESS_<SECTION>_<KEY>`` and are only applied
when the file does not define the key. Passwords set through
``HARNESS_ADMIN_PASSWORD`` / ``HARNESS_LDAP_ADMIN_PASSWORD`` always win.
"""

from __future__ import annotations

import configparser
import os
from pathlib import Path

from pydantic import ValidationError

from ldap_sync_harness.exceptions import ConfigError, ConfigValidationError
from ldap_sync_harness.utils.logger import get_logger

from .constants import (
    DEFAULTS,
    ENV_ADMIN_PASSWORD,
    ENV_HARNESS_CONFIG,
    ENV_LDAP_ADMIN_PASSWORD,
    ENV_PREFIX,
    SECTION_LDAP,
    SECTION_SERVER,
)
from .schema import HarnessSettings

logger = get_logger(__name__)


def apply_env_overrides(config: configparser.ConfigParser, section: str, key: str) -> None:
    """Apply ``HARNESS_<SECTION>_<KEY>`` unless the file already sets the key."""
    env_var = f"{ENV_PREFIX}{section.upper()}_{key.upper()}"
    value = os.environ.get(env_var)
    if value is None:
        return
    if not config.has_section(section):
        config.add_section(section)
    if config.has_option(section, key):
        logger.debug(
            "Skipping environment override because config already defines the value",
            event="harness.config.loader.env_override_skipped",
            section=section,
            key=key,
        )
        return
    config.set(section, key, value)
    logger.debug(
        "Applied environment override for config key",
        event="harness.config.loader.env_override_applied",
        section=section,
        key=key,
        env_var=env_var,
    )


def _apply_secret(config: configparser.ConfigParser, section: str, key: str, env_var: str) -> None:
    value = os.environ.get(env_var)
    if value:
        config.set(section, key, value)


def read_config(path: str | os.PathLike[str] | None = None) -> configparser.ConfigParser:
    """Read the INI file at *path* (or ``$HARNESS_CONFIG``) with env overrides applied."""
    config = configparser.ConfigParser(interpolation=None)
    source = path or os.environ.get(ENV_HARNESS_CONFIG)
    if source:
        source_path = Path(source)
        if not source_path.is_file():
            raise ConfigError(f"Configuration file not found: {source_path}", {"path": str(source_path)})
        config.read(source_path, encoding="utf-8")
        logger.info(
            "Loaded harness configuration file",
            event="harness.config.loader.file_loaded",
            path=str(source_path),
        )

    for section, values in DEFAULTS.items():
        for key in values:
            apply_env_overrides(config, section, key)
        if not config.has_section(section):
            config.add_section(section)
        for key, value in values.items():
            if not config.has_option(section, key):
                config.set(section, key, value)

    _apply_secret(config, SECTION_SERVER, "admin_password", ENV_ADMIN_PASSWORD)
    _apply_secret(config, SECTION_LDAP, "admin_password", ENV_LDAP_ADMIN_PASSWORD)
    return config


def load_settings(path: str | os.PathLike[str] | None = None) -> HarnessSettings:
    """Load and validate harness settings."""
    config = read_config(path)
    raw = {section: dict(config.items(section)) for section in config.sections()}
    try:
        return HarnessSettings.model_validate(raw)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ()))
        raise ConfigValidationError(
            f"Invalid harness configuration: {field}: {first.get('msg')}",
            field=field,
            value=first.get("input"),
        ) from exc
