"""Shared fixtures for unit tests."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest

from sfx_provisioner.config import load

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from sfx_provisioner.config.schema import Config

_SFX_ENV_VARS = ("SFX_AUTH_TOKEN", "SFX_API_URL", "SFX_CUSTOM_APP_URL", "SFX_LOG", "NO_COLOR")

API_URL = "https://api.signalfx.com"
CHART_URL = f"{API_URL}/v2/chart"


@pytest.fixture(autouse=True)
def _clean_sfx_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove SFX_* env vars so unit tests don't leak host config."""
    for var in _SFX_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., Config]:
    """Factory fixture: write YAML + optional .env, return loaded Config."""

    def _make(yaml_str: str, *, dotenv: str | None = None) -> Config:
        (tmp_path / "config.yaml").write_text(yaml_str)
        if dotenv is not None:
            (tmp_path / ".env").write_text(dotenv)
        return load(tmp_path / "config.yaml")

    return _make


class FakeChartAPI:
    """In-memory stand-in for the chart endpoints, used as a SignalFxClient."""

    def __init__(self) -> None:
        self.charts: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, str]] = []
        self._next_id = 0
        self._clock = 1_000.0

    def _tick(self) -> float:
        self._clock += 1.0
        return self._clock

    def edit_remotely(self, chart_id: str, **fields: Any) -> None:
        """Simulate a change made in the SignalFx UI."""
        self.charts[chart_id].update(fields)
        self.charts[chart_id]["lastUpdated"] = self._tick()

    def send_request(
        self, method: str, url: str, payload: bytes | None = None
    ) -> tuple[int, bytes]:
        self.calls.append((method, url))
        chart_id = url[len(CHART_URL) :].lstrip("/")

        if method == "POST":
            self._next_id += 1
            chart_id = f"CHART{self._next_id}"
            assert payload is not None
            self.charts[chart_id] = {
                **json.loads(payload),
                "id": chart_id,
                "lastUpdated": self._tick(),
            }
            return 200, json.dumps(self.charts[chart_id]).encode()

        if chart_id not in self.charts:
            return 404, b'{"message": "Resource not found"}'

        if method == "GET":
            return 200, json.dumps(self.charts[chart_id]).encode()
        if method == "PUT":
            assert payload is not None
            self.charts[chart_id] = {
                **json.loads(payload),
                "id": chart_id,
                "lastUpdated": self._tick(),
            }
            return 200, json.dumps(self.charts[chart_id]).encode()
        if method == "DELETE":
            del self.charts[chart_id]
            return 204, b""
        raise AssertionError(f"unexpected method {method}")


@pytest.fixture
def fake_api() -> FakeChartAPI:
    return FakeChartAPI()
