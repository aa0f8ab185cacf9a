"""Configuration models."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict

from sfx_provisioner.core.urls import DEFAULT_API_URL, DEFAULT_APP_URL, normalize_base_url
from sfx_provisioner.resources.text_chart import TextChartResource  # noqa: TC001

ENV_PREFIX = "SFX_"


class ProviderConfig(BaseSettings):
    """How to reach the SignalFx organization.

    Values passed in (from YAML) win over ``SFX_*`` environment variables.
    Both URLs must be absolute http(s) URLs; a realm is picked by pointing
    ``api_url`` at it, e.g. ``https://api.eu0.signalfx.com``.
    """

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="forbid")

    auth_token: str | None = None
    api_url: Annotated[str, AfterValidator(normalize_base_url)] = DEFAULT_API_URL
    custom_app_url: Annotated[str, AfterValidator(normalize_base_url)] = DEFAULT_APP_URL


def _charts_or_empty(v: Any) -> Any:
    # `text_charts:` with nothing under it parses as None.
    return [] if v is None else v


class Config(BaseModel):
    """A parsed ``sfx-provisioner.yaml``."""

    model_config = ConfigDict(extra="forbid")

    provider: ProviderConfig
    state_path: Path = Path(".sfx-state.json")
    text_charts: Annotated[list[TextChartResource], BeforeValidator(_charts_or_empty)] = []
