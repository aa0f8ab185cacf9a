"""Tests for YAML configuration loading."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from sfx_provisioner.config import engine_for
from sfx_provisioner.config.loader import ConfigError, load_config
from sfx_provisioner.core.urls import DEFAULT_API_URL, DEFAULT_APP_URL
from sfx_provisioner.resources.text_chart import TextChartResource

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from sfx_provisioner.config.schema import Config

_FULL_YAML = """\
provider:
  api_url: https://api.eu0.signalfx.com/
  custom_app_url: https://acme.signalfx.com

state_path: custom-state.json

text_charts:
  - name: Sample
    description: Desc
    markdown: "**bold**"
  - name: Runbook
    markdown: |
      # Runbook
      - step one
"""


class TestLoadConfigFull:
    def test_provider(self, make_config: Callable[..., Config]) -> None:
        config = make_config(_FULL_YAML)
        assert config.provider.api_url == "https://api.eu0.signalfx.com"
        assert config.provider.custom_app_url == "https://acme.signalfx.com"

    def test_charts(self, make_config: Callable[..., Config]) -> None:
        sample, runbook = make_config(_FULL_YAML).text_charts
        assert isinstance(sample, TextChartResource)
        assert sample.markdown == "**bold**"
        assert sample.description == "Desc"
        assert runbook.markdown == "# Runbook\n- step one\n"
        assert runbook.description == ""

    def test_state_path_is_relative_to_config(
        self, make_config: Callable[..., Config], tmp_path: Path
    ) -> None:
        assert make_config(_FULL_YAML).state_path == tmp_path / "custom-state.json"

    def test_default_state_path(self, tmp_path: Path) -> None:
        f = tmp_path / "sub" / "config.yaml"
        f.parent.mkdir()
        f.write_text("text_charts:\n")
        config = load_config(f)
        assert config.state_path == f.parent / ".sfx-state.json"
        assert config.text_charts == []

    def test_absolute_state_path_kept(
        self, make_config: Callable[..., Config], tmp_path: Path
    ) -> None:
        target = tmp_path / "elsewhere" / "state.json"
        assert make_config(f"state_path: {target}\n").state_path == target

    def test_defaults(self, make_config: Callable[..., Config]) -> None:
        config = make_config("")
        assert config.provider.api_url == DEFAULT_API_URL
        assert config.provider.custom_app_url == DEFAULT_APP_URL
        assert config.provider.auth_token is None


class TestValidation:
    def test_missing_markdown(self, make_config: Callable[..., Config]) -> None:
        with pytest.raises(ConfigError, match="markdown"):
            make_config("text_charts:\n  - name: x\n")

    def test_unknown_chart_field(self, make_config: Callable[..., Config]) -> None:
        with pytest.raises(ConfigError, match="Extra inputs"):
            make_config("text_charts:\n  - name: x\n    markdown: y\n    url: z\n")

    def test_unknown_top_level_key(self, make_config: Callable[..., Config]) -> None:
        with pytest.raises(ConfigError, match="Extra inputs"):
            make_config("dashboards: []\n")

    def test_unknown_provider_field(self, make_config: Callable[..., Config]) -> None:
        with pytest.raises(ConfigError, match="Extra inputs"):
            make_config("provider:\n  host: nope\n")

    def test_provider_not_a_mapping(self, make_config: Callable[..., Config]) -> None:
        with pytest.raises(ConfigError, match="'provider' must be a mapping"):
            make_config("provider: https://api.signalfx.com\n")

    def test_duplicate_names(self, make_config: Callable[..., Config]) -> None:
        yaml = (
            "text_charts:\n"
            "  - {name: x, markdown: a}\n"
            "  - {name: x, markdown: b}\n"
            "  - {name: y, markdown: c}\n"
        )
        with pytest.raises(ConfigError, match="used more than once: x$"):
            make_config(yaml)

    def test_invalid_yaml(self, make_config: Callable[..., Config]) -> None:
        with pytest.raises(ConfigError, match="not valid YAML"):
            make_config("text_charts: [\n")

    def test_top_level_list(self, make_config: Callable[..., Config]) -> None:
        with pytest.raises(ConfigError, match="expected a mapping"):
            make_config("- a\n- b\n")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Cannot read"):
            load_config(tmp_path / "nope.yaml")

    def test_app_url_without_scheme(self, make_config: Callable[..., Config]) -> None:
        with pytest.raises(ConfigError, match="expected http"):
            make_config("provider:\n  custom_app_url: acme.signalfx.com\n")

    def test_api_url_without_scheme_from_env(
        self, make_config: Callable[..., Config], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SFX_API_URL", "api.eu0.signalfx.com")
        with pytest.raises(ConfigError, match="expected http"):
            make_config("")


class TestProviderResolution:
    def test_token_from_env(
        self, make_config: Callable[..., Config], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SFX_AUTH_TOKEN", "env-token")
        assert make_config("").provider.auth_token == "env-token"

    def test_token_from_dotenv(self, make_config: Callable[..., Config]) -> None:
        config = make_config("", dotenv="SFX_AUTH_TOKEN=dotenv-token\n")
        assert config.provider.auth_token == "dotenv-token"

    def test_unrelated_dotenv_keys_ignored(self, make_config: Callable[..., Config]) -> None:
        config = make_config("", dotenv="OTHER=1\nSFX_LOG=debug\nSFX_AUTH_TOKEN=t\n")
        assert config.provider.auth_token == "t"

    def test_env_beats_dotenv(
        self, make_config: Callable[..., Config], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SFX_API_URL", "https://api.env.signalfx.com")
        config = make_config("", dotenv="SFX_API_URL=https://api.dotenv.signalfx.com\n")
        assert config.provider.api_url == "https://api.env.signalfx.com"

    def test_yaml_beats_env(
        self, make_config: Callable[..., Config], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SFX_API_URL", "https://api.env.signalfx.com")
        config = make_config("provider:\n  api_url: https://api.yaml.signalfx.com\n")
        assert config.provider.api_url == "https://api.yaml.signalfx.com"


class TestEngineFor:
    def test_requires_token(self, make_config: Callable[..., Config]) -> None:
        with pytest.raises(ConfigError, match="No SignalFx token"):
            engine_for(make_config(""))

    def test_uses_resolved_state_path(
        self, make_config: Callable[..., Config], tmp_path: Path
    ) -> None:
        engine = engine_for(make_config("", dotenv="SFX_AUTH_TOKEN=t\n"))
        assert engine.state_path == tmp_path / ".sfx-state.json"
