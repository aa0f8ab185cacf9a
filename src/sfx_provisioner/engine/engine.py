"""Plan/apply engine for text charts."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Literal

from sfx_provisioner.core.state import ChartState
from sfx_provisioner.engine.errors import ApplyError, StalePlanError, ValidationError
from sfx_provisioner.engine.lock import state_lock
from sfx_provisioner.engine.plan import (
    Action,
    ApplyResult,
    ChartChange,
    ChartDrift,
    Plan,
    RefreshResult,
    SyncStatus,
)
from sfx_provisioner.engine.text_chart_handler import TextChartHandler

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from sfx_provisioner.core.provider import SignalFxProvider
    from sfx_provisioner.resources.text_chart import TextChartResource

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ChartChange, Literal["start", "done"]], None]

# Remote fields a refresh can bring back.
_REMOTE_FIELDS = ("name", "description", "markdown")


class ChartEngine:
    """Reconcile configured text charts with SignalFx through a state file."""

    def __init__(self, *, provider: SignalFxProvider, state_path: Path) -> None:
        self._state_path = state_path
        self._handler = TextChartHandler(provider)

    @property
    def state_path(self) -> Path:
        return self._state_path

    def _refresh_into(self, state: ChartState) -> tuple[list[ChartDrift], bool]:
        """Re-read every tracked chart, updating *state* in place.

        Returns the per-chart report and whether *state* changed.
        """
        report: list[ChartDrift] = []
        dirty = False
        for label, record in sorted(state.charts.items()):
            fresh = self._handler.read(record)
            if fresh is None:
                logger.info("Chart %s (%s) was deleted in SignalFx", label, record.id)
                del state.charts[label]
                dirty = True
                report.append(
                    ChartDrift(label=label, chart_id=record.id, status=SyncStatus.DELETED)
                )
                continue

            changed = {
                f: (getattr(record, f), getattr(fresh, f))
                for f in _REMOTE_FIELDS
                if getattr(record, f) != getattr(fresh, f)
            }
            if fresh.model_dump(exclude={"updated_at"}) != record.model_dump(
                exclude={"updated_at"}
            ):
                fresh.updated_at = datetime.now(UTC)
                state.charts[label] = fresh
                dirty = True
            report.append(
                ChartDrift(
                    label=label,
                    chart_id=record.id,
                    status=SyncStatus.EDITED if changed or not fresh.synced else SyncStatus.IN_SYNC,
                    changed=changed,
                    url=record.url,
                )
            )
        return report, dirty

    def _save(self, state: ChartState) -> None:
        state.serial += 1
        state.write(self._state_path)

    def refresh(self, *, persist: bool = False) -> RefreshResult:
        """Compare tracked charts with SignalFx, optionally saving what was found."""
        with state_lock(self._state_path):
            state = ChartState.read(self._state_path)
            report, dirty = self._refresh_into(state)
            saved = persist and dirty
            if saved:
                self._save(state)
            return RefreshResult(drift=report, serial=state.serial, persisted=saved)

    def _check(self, charts: Sequence[TextChartResource]) -> None:
        errors = self._handler.check_provider()
        seen: set[str] = set()
        for chart in charts:
            if chart.name in seen:
                errors.append(f"{chart.address}: duplicate chart name")
            seen.add(chart.name)
            errors.extend(self._handler.validate(chart))
        if errors:
            raise ValidationError(errors)

    @staticmethod
    def _compare(chart: TextChartResource, state: ChartState) -> ChartChange:
        record = state.charts.get(chart.name)
        if record is None:
            return ChartChange(label=chart.name, action=Action.CREATE, desired=chart)

        current = record.config_view()
        diff = {k: (current[k], v) for k, v in chart.model_dump().items() if current[k] != v}
        return ChartChange(
            label=chart.name,
            action=Action.UPDATE if diff else Action.NOOP,
            desired=chart,
            prior=record,
            diff=diff,
        )

    def plan(
        self,
        charts: Sequence[TextChartResource],
        *,
        destroy: bool = False,
        refresh: bool = True,
    ) -> Plan:
        """Work out what apply has to do to make SignalFx match *charts*.

        With ``refresh`` (the default) tracked charts are re-read first and
        the refreshed state is saved, so remote edits and deletions show up
        as updates and re-creates.
        """
        if not destroy:
            self._check(charts)

        guard = state_lock(self._state_path) if refresh else contextlib.nullcontext()
        with guard:
            state = ChartState.read(self._state_path)
            if refresh and self._refresh_into(state)[1]:
                self._save(state)

            wanted = set() if destroy else {c.name for c in charts}
            changes = [] if destroy else [self._compare(c, state) for c in charts]
            changes += [
                ChartChange(label=label, action=Action.DELETE, prior=state.charts[label])
                for label in sorted(set(state.charts) - wanted)
            ]
            logger.info("Planned %d chart changes", sum(c.action != Action.NOOP for c in changes))
            return Plan(
                lineage=state.lineage,
                serial=state.serial,
                fingerprint=state.fingerprint(),
                destroy=destroy,
                changes=changes,
            )

    def _load_for(self, plan: Plan) -> ChartState:
        if not self._state_path.exists():
            # Plan saved before the first state write: take over its identity.
            return ChartState(lineage=plan.lineage, serial=plan.serial)
        state = ChartState.read(self._state_path)
        if state.lineage != plan.lineage:
            raise StalePlanError("the state file was replaced; re-run plan")
        if state.serial != plan.serial or state.fingerprint() != plan.fingerprint:
            raise StalePlanError(
                f"state is at serial {state.serial}, plan was made at {plan.serial}; re-run plan"
            )
        return state

    def _run(self, change: ChartChange, state: ChartState) -> None:
        now = datetime.now(UTC)
        if change.action == Action.DELETE:
            self._handler.delete(state.charts[change.label])
            del state.charts[change.label]
            return

        if change.desired is None:
            raise ValueError(f"No configured chart for {change.action.value} of {change.address}")
        if change.action == Action.CREATE:
            record = self._handler.create(change.desired)
        else:
            record = self._handler.update(change.desired, state.charts[change.label])
        record.updated_at = now
        state.charts[change.label] = record

    def apply(self, plan: Plan, *, progress: ProgressCallback | None = None) -> ApplyResult:
        """Run *plan*, saving state after every chart so a failure loses nothing."""
        with state_lock(self._state_path):
            state = self._load_for(plan)
            done: list[ChartChange] = []
            for change in plan.pending:
                if progress:
                    progress(change, "start")
                try:
                    self._run(change, state)
                except Exception as exc:
                    raise ApplyError(change.address, str(exc), done) from exc
                self._save(state)
                done.append(change)
                if progress:
                    progress(change, "done")

            touched = {c.label for c in done if c.action != Action.DELETE}
            urls = {label: state.charts[label].url for label in sorted(touched)}
            return ApplyResult(applied=done, urls=urls)
