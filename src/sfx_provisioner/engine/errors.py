"""Errors raised while planning or applying chart changes."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sfx_provisioner.engine.plan import ChartChange


class EngineError(Exception):
    """Base class for plan/apply failures."""


class StalePlanError(EngineError):
    """The state file moved on since the plan was computed."""


class StateLockError(EngineError):
    """Another run holds the state file, or it cannot be locked at all."""


class ValidationError(EngineError):
    """The configured charts cannot be planned."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


class ApplyError(EngineError):
    """A chart operation failed part way through an apply.

    ``applied`` lists the changes that went through (and were written to
    state) before the chart at *address* failed.
    """

    def __init__(self, address: str, reason: str, applied: list[ChartChange]) -> None:
        super().__init__(f"{address}: {reason}")
        self.address = address
        self.applied = applied
