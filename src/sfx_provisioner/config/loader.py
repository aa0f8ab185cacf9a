"""Read ``sfx-provisioner.yaml`` into a :class:`Config`."""

from __future__ import annotations

import logging
import os
from collections import Counter
from pathlib import Path
from typing import Any

from dotenv import dotenv_values
from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from sfx_provisioner.config.schema import ENV_PREFIX, Config, ProviderConfig

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """The configuration file is unreadable or invalid."""


def _dotenv_provider_values(env_file: Path) -> dict[str, str]:
    """Provider fields from a ``.env`` file that the process environment leaves unset."""
    if not env_file.is_file():
        return {}
    values: dict[str, str] = {}
    for key, value in dotenv_values(env_file, encoding="utf-8-sig").items():
        field = key[len(ENV_PREFIX) :].lower() if key.startswith(ENV_PREFIX) else ""
        if field in ProviderConfig.model_fields and value is not None and key not in os.environ:
            values[field] = value
    return values


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc.strerror or exc}") from exc
    try:
        data = YAML(typ="safe").load(text)
    except YAMLError as exc:
        raise ConfigError(f"{path} is not valid YAML: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")
    return data


def load_config(path: Path | str) -> Config:
    """Parse *path*.

    Provider settings resolve per field as YAML, then ``SFX_*`` environment
    variables, then a ``.env`` file beside the configuration. A relative
    ``state_path`` is taken from the configuration file's directory.

    Raises:
        ConfigError: The file cannot be read or does not validate.
    """
    path = Path(path)
    data = _read_yaml(path)

    provider = data.pop("provider", None) or {}
    if not isinstance(provider, dict):
        raise ConfigError(f"{path}: 'provider' must be a mapping")

    try:
        settings = ProviderConfig(**{**_dotenv_provider_values(path.parent / ".env"), **provider})
        config = Config.model_validate({**data, "provider": settings})
    except ValidationError as exc:
        raise ConfigError(f"{path}: {exc}") from exc

    dupes = sorted(n for n, k in Counter(c.name for c in config.text_charts).items() if k > 1)
    if dupes:
        raise ConfigError(f"{path}: chart name(s) used more than once: {', '.join(dupes)}")

    if not config.state_path.is_absolute():
        config.state_path = path.parent / config.state_path

    logger.info("Loaded %d text chart(s) from %s", len(config.text_charts), path)
    return config
