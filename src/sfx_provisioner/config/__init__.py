"""Python API: load a configuration file and plan, apply or refresh it."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import SecretStr

from sfx_provisioner.config.loader import ConfigError, load_config
from sfx_provisioner.config.schema import Config, ProviderConfig
from sfx_provisioner.core.provider import SignalFxProvider, TokenAuth
from sfx_provisioner.engine.engine import ChartEngine

if TYPE_CHECKING:
    from pathlib import Path

    from sfx_provisioner.engine.engine import ProgressCallback
    from sfx_provisioner.engine.plan import ApplyResult, Plan, RefreshResult

__all__ = [
    "Config",
    "ConfigError",
    "ProviderConfig",
    "apply",
    "engine_for",
    "load",
    "plan",
    "plan_and_apply",
    "refresh",
]


def load(path: Path | str) -> Config:
    return load_config(path)


def engine_for(config: Config) -> ChartEngine:
    """Build the engine for *config*; a token is required from here on."""
    settings = config.provider
    if not settings.auth_token:
        raise ConfigError("No SignalFx token: set SFX_AUTH_TOKEN or provider.auth_token")
    provider = SignalFxProvider(
        api_url=settings.api_url,
        custom_app_url=settings.custom_app_url,
        auth=TokenAuth(auth_token=SecretStr(settings.auth_token)),
    )
    return ChartEngine(provider=provider, state_path=config.state_path)


def plan(config: Config, *, destroy: bool = False, refresh: bool = True) -> Plan:
    return engine_for(config).plan(config.text_charts, destroy=destroy, refresh=refresh)


def apply(
    plan_obj: Plan, config: Config, *, progress: ProgressCallback | None = None
) -> ApplyResult:
    return engine_for(config).apply(plan_obj, progress=progress)


def plan_and_apply(config: Config, *, destroy: bool = False) -> ApplyResult:
    """Plan and apply in one go, as ``apply --auto-approve`` does."""
    engine = engine_for(config)
    return engine.apply(engine.plan(config.text_charts, destroy=destroy))


def refresh(config: Config, *, persist: bool = True) -> RefreshResult:
    """Report how tracked charts compare to SignalFx.

    With ``persist`` the refreshed records (remote content, ``synced``
    flags, charts deleted remotely) are written to state.
    """
    return engine_for(config).refresh(persist=persist)
