"""
Configuration loading.

Settings are layered, later layers winning:

1. Defaults declared on the models in settings.py
2. A YAML file (``--config``, or the first config.yaml found on the search path)
3. Environment variables named ``PAGE_AGENT__{SECTION}__{KEY}``

Example:
    PAGE_AGENT__STORAGE__DATABASE_PATH=/var/lib/page-agent/agent.db
    PAGE_AGENT__SERVER__CORS_ORIGINS=http://localhost:3000,https://app.example.com
"""

import os
import typing
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from page_agent.config.settings import Settings
from page_agent.core.exceptions import ConfigurationError


ENV_PREFIX = "PAGE_AGENT"

CONFIG_FILENAME = "config.yaml"


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _merge(current, value)
        else:
            merged[key] = value
    return merged


def _expects_list(section: str, key: str) -> bool:
    section_field = Settings.model_fields.get(section)
    if section_field is None or not hasattr(section_field.annotation, "model_fields"):
        return False
    field = section_field.annotation.model_fields.get(key)
    return field is not None and typing.get_origin(field.annotation) is list


def _parse_scalar(raw: str) -> Any:
    # YAML scalar rules give booleans, numbers and null for free
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
    if isinstance(value, (dict, list)):
        return raw
    return value


def _env_overrides(prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """Collect ``{prefix}__SECTION__KEY`` variables into a nested mapping."""
    marker = f"{prefix}__"
    overrides: dict[str, Any] = {}

    for name, raw in os.environ.items():
        if not name.startswith(marker):
            continue

        path = name[len(marker):].lower().split("__")
        if len(path) != 2 or not all(path):
            continue
        section, key = path

        if _expects_list(section, key):
            value: Any = [item.strip() for item in raw.split(",") if item.strip()]
        else:
            value = _parse_scalar(raw)

        overrides.setdefault(section, {})[key] = value

    return overrides


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigurationError(
            "Configuration file not found", details={"path": str(path)}) from e
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read configuration file: {e}", details={"path": str(path)}) from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in configuration file: {e}",
            details={"path": str(path)},
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping, got: {type(data).__name__}",
            details={"path": str(path)},
        )
    return data


def load_config(
    config_path: Path | str | None = None,
    env_prefix: str = ENV_PREFIX,
) -> Settings:
    """
    Build Settings from defaults, an optional YAML file and the environment.

    Args:
        config_path: YAML file to read; None skips the file layer
        env_prefix: Prefix of the environment variables to honour

    Returns:
        Validated Settings

    Raises:
        ConfigurationError: If the file cannot be used or a value fails validation
    """
    data: dict[str, Any] = {}
    if config_path is not None:
        data = _read_yaml(Path(config_path))
    data = _merge(data, _env_overrides(env_prefix))

    try:
        return Settings(**data)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {e.error_count()} error(s)",
            details={"errors": [".".join(str(part) for part in err["loc"]) for err in e.errors()]},
        ) from e


def get_default_config_path() -> Path | None:
    """
    Return the first config.yaml found in the working directory,
    ./config/ or ~/.page_agent/, or None.
    """
    candidates = (
        Path.cwd() / CONFIG_FILENAME,
        Path.cwd() / "config" / CONFIG_FILENAME,
        Path.home() / ".page_agent" / CONFIG_FILENAME,
    )
    return next((path for path in candidates if path.is_file()), None)
