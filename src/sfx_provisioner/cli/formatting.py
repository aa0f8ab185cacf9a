"""Rendering of plans, refresh reports and apply results."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import typer

from sfx_provisioner.engine.plan import Action, SyncStatus

if TYPE_CHECKING:
    from collections import Counter
    from collections.abc import Iterable

    from sfx_provisioner.engine.plan import ApplyResult, ChartChange, ChartDrift, Plan

# (symbol, colour, "will be ..." phrase, progress verb, done phrase)
ACTIONS: dict[Action, tuple[str, str, str, str, str]] = {
    Action.CREATE: ("+", "green", "will be created", "Creating", "created"),
    Action.UPDATE: ("~", "yellow", "will be updated in-place", "Updating", "updated"),
    Action.DELETE: ("-", "red", "will be destroyed", "Destroying", "destroyed"),
}

_STATUS_STYLE: dict[SyncStatus, tuple[str, str | None]] = {
    SyncStatus.IN_SYNC: (" ", None),
    SyncStatus.EDITED: ("~", "yellow"),
    SyncStatus.DELETED: ("-", "red"),
}

# Markdown bodies get long; plan lines keep to this many characters per value.
_VALUE_WIDTH = 60


class Painter:
    """``typer.style`` that turns into a no-op when colour is off."""

    def __init__(self, color: bool) -> None:
        self.color = color

    def __call__(self, text: str, fg: str | None = None, *, bold: bool = False) -> str:
        if not self.color or (fg is None and not bold):
            return text
        return typer.style(text, fg=fg, bold=bold)


def show(value: Any) -> str:
    """One-line rendering of an attribute value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        flat = value.replace("\n", "\\n")
        if len(flat) > _VALUE_WIDTH:
            flat = flat[: _VALUE_WIDTH - 3] + "..."
        return f'"{flat}"'
    return str(value)


def _rows(pairs: dict[str, str], symbol: str) -> list[str]:
    width = max((len(k) for k in pairs), default=0)
    return [f"      {symbol} {k.ljust(width)} = {v}" for k, v in pairs.items()]


def format_change(change: ChartChange, paint: Painter) -> str:
    symbol, fg, phrase, _, _ = ACTIONS[change.action]
    title = change.address
    if change.chart_id:
        title += f" ({change.chart_id})"
    lines = [paint(f"  {symbol} {title} {phrase}", fg, bold=True)]

    if change.action == Action.CREATE and change.desired is not None:
        rows = {k: show(v) for k, v in change.desired.model_dump().items()}
    elif change.action == Action.UPDATE:
        rows = {k: f"{show(old)} -> {show(new)}" for k, (old, new) in change.diff.items()}
    else:
        rows = {}
    lines += [paint(row, fg) for row in _rows(rows, symbol)]

    if change.prior is not None and change.prior.url:
        lines.append(f"        {change.prior.url}")
    return "\n".join(lines)


def format_plan(plan: Plan, paint: Painter) -> str:
    blocks = [format_change(c, paint) for c in plan.changes if c.action != Action.NOOP]
    if not blocks:
        return "No changes. Charts are up-to-date."
    return "\n\n".join(blocks)


def _tally(counts: Counter[Action], verbs: Iterable[str], paint: Painter) -> str:
    parts = []
    for action, verb in zip(ACTIONS, verbs, strict=True):
        n = counts.get(action, 0)
        text = f"{n} {verb}"
        parts.append(paint(text, ACTIONS[action][1]) if n else text)
    return ", ".join(parts)


def plan_summary(plan: Plan, paint: Painter) -> str:
    """``Plan: 1 to add, 0 to change, 2 to destroy.``"""
    return f"Plan: {_tally(plan.counts(), ('to add', 'to change', 'to destroy'), paint)}."


def format_apply_result(result: ApplyResult, paint: Painter) -> str:
    """Summary line followed by the app link of every created or updated chart."""
    head = paint("Apply complete!", "green", bold=True)
    tally = _tally(result.counts(), ("added", "changed", "destroyed"), paint)
    lines = [f"{head} Charts: {tally}."]
    lines += [f"  {label}: {url}" for label, url in result.urls.items()]
    return "\n".join(lines)


def format_drift(drift: ChartDrift, paint: Painter) -> str:
    symbol, fg = _STATUS_STYLE[drift.status]
    head = f"  {symbol} {drift.label} ({drift.chart_id})"
    if drift.status == SyncStatus.DELETED:
        return paint(f"{head} was deleted in SignalFx; apply will re-create it", fg)
    if drift.status == SyncStatus.IN_SYNC:
        return f"{head} is in sync"

    lines = [paint(f"{head} was edited in SignalFx; apply will restore it", fg)]
    fields = {k: f"{show(old)} -> {show(new)}" for k, (old, new) in drift.changed.items()}
    lines += [paint(row, fg) for row in _rows(fields, symbol)]
    if drift.url:
        lines.append(f"        {drift.url}")
    return "\n".join(lines)


def format_refresh(drift: list[ChartDrift], paint: Painter) -> str:
    if not drift:
        return "No charts tracked yet."
    return "\n".join(format_drift(d, paint) for d in drift)
