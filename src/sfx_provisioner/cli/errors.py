"""Turn exceptions into a short stderr report."""

from __future__ import annotations

import typer

from sfx_provisioner.config.loader import ConfigError
from sfx_provisioner.core.client import APIError
from sfx_provisioner.core.urls import URLError
from sfx_provisioner.engine.errors import (
    ApplyError,
    StalePlanError,
    StateLockError,
    ValidationError,
)
from sfx_provisioner.resources.text_chart import PayloadError

_HEADLINES: dict[type[Exception], str] = {
    ConfigError: "Configuration error",
    StalePlanError: "Plan is stale",
    StateLockError: "State is locked",
    APIError: "SignalFx API error",
    URLError: "Bad SignalFx URL",
    PayloadError: "Cannot encode chart",
}


def report_error(exc: Exception, *, color: bool) -> int:
    """Print *exc* to stderr and return the exit code to use."""

    def err(line: str) -> None:
        typer.secho(line, err=True, fg=typer.colors.RED if color else None)

    if isinstance(exc, ValidationError):
        err("Invalid charts:")
        for problem in exc.errors:
            err(f"  - {problem}")
    elif isinstance(exc, ApplyError):
        err(f"Apply stopped at {exc}")
        if exc.applied:
            done = ", ".join(c.address for c in exc.applied)
            err(f"  Already applied and saved to state: {done}")
        cause = exc.__cause__
        if isinstance(cause, APIError) and cause.status_code is not None:
            err(f"  SignalFx answered HTTP {cause.status_code}")
    else:
        headline = next(
            (h for kind, h in _HEADLINES.items() if isinstance(exc, kind)), "Unexpected error"
        )
        err(f"{headline}: {exc}")
    return 1
