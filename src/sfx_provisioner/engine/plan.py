"""Plans, chart changes and refresh reports."""

from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from sfx_provisioner.core.state import ChartRecord  # noqa: TC001
from sfx_provisioner.resources.text_chart import RESOURCE_TYPE, TextChartResource


class Action(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    NOOP = "no-op"


class ChartChange(BaseModel):
    """What apply will do to one chart.

    ``label`` is the chart's name in configuration, which is also its key in
    state. ``diff`` maps a field to its ``(current, configured)`` pair.
    """

    label: str
    action: Action
    desired: TextChartResource | None = None
    prior: ChartRecord | None = None
    diff: dict[str, tuple[Any, Any]] = Field(default_factory=dict)

    @property
    def address(self) -> str:
        return f"{RESOURCE_TYPE}.{self.label}"

    @property
    def chart_id(self) -> str | None:
        return self.prior.id if self.prior else None


class Plan(BaseModel):
    """Changes computed against one exact state file revision."""

    lineage: str
    serial: int
    fingerprint: str
    destroy: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    changes: list[ChartChange] = Field(default_factory=list)

    @property
    def pending(self) -> list[ChartChange]:
        """Changes to run, creates and updates before deletes."""
        order = {Action.CREATE: 0, Action.UPDATE: 0, Action.DELETE: 1}
        todo = [c for c in self.changes if c.action != Action.NOOP]
        return sorted(todo, key=lambda c: order[c.action])

    def counts(self) -> Counter[Action]:
        return Counter(c.action for c in self.changes)

    def save(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2) + "\n", encoding="utf-8")

    @classmethod
    def load(cls, path: Path) -> Plan:
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))


class ApplyResult(BaseModel):
    """Changes that went through, and the app link of every chart still managed."""

    applied: list[ChartChange] = Field(default_factory=list)
    urls: dict[str, str] = Field(default_factory=dict)

    def counts(self) -> Counter[Action]:
        return Counter(c.action for c in self.applied)


class SyncStatus(str, Enum):
    IN_SYNC = "in-sync"
    EDITED = "edited"
    DELETED = "deleted"


class ChartDrift(BaseModel):
    """How one tracked chart compares to SignalFx after a refresh.

    ``changed`` maps each remote field that moved to its ``(tracked, remote)``
    pair.
    """

    label: str
    chart_id: str
    status: SyncStatus
    changed: dict[str, tuple[Any, Any]] = Field(default_factory=dict)
    url: str = ""


class RefreshResult(BaseModel):
    drift: list[ChartDrift] = Field(default_factory=list)
    serial: int = 0
    persisted: bool = False

    @property
    def drifted(self) -> list[ChartDrift]:
        return [d for d in self.drift if d.status != SyncStatus.IN_SYNC]
