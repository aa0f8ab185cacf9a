"""``plan``, ``apply``, ``destroy``, ``refresh`` and ``validate``."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Literal

import typer
from rich.console import Console

from sfx_provisioner import config as api
from sfx_provisioner.cli import app
from sfx_provisioner.cli.errors import report_error
from sfx_provisioner.cli.formatting import (
    ACTIONS,
    Painter,
    format_apply_result,
    format_plan,
    format_refresh,
    plan_summary,
)
from sfx_provisioner.engine.plan import Plan

if TYPE_CHECKING:
    from collections.abc import Callable
    from typing import TypeVar

    from sfx_provisioner.config import Config
    from sfx_provisioner.engine.plan import ChartChange

    T = TypeVar("T")

ConfigOpt = Annotated[
    Path, typer.Option("--config", "-c", help="Chart configuration file.")
]
NoColorOpt = Annotated[bool, typer.Option("--no-color", help="Plain output.")]
YesOpt = Annotated[bool, typer.Option("--auto-approve", "-y", help="Do not ask before applying.")]


def _painter(no_color: bool) -> Painter:
    return Painter(not no_color and "NO_COLOR" not in os.environ)


def _guarded(paint: Painter, step: Callable[[], T]) -> T:
    """Run *step*, turning any failure into a stderr report and exit 1."""
    try:
        return step()
    except Exception as exc:
        raise typer.Exit(report_error(exc, color=paint.color)) from exc


def _run_plan(plan_obj: Plan, cfg: Config, paint: Painter, *, auto_approve: bool) -> None:
    """Show *plan_obj*, ask, apply it with a live status line, report links."""
    typer.echo(format_plan(plan_obj, paint))
    if not plan_obj.pending:
        return
    typer.echo("\n" + plan_summary(plan_obj, paint) + "\n")

    if not auto_approve and not typer.confirm("Apply these changes?"):
        typer.echo("Apply canceled.", err=True)
        raise typer.Exit(1)

    console = Console(no_color=not paint.color, highlight=False)
    with console.status("Applying") as status:

        def progress(change: ChartChange, event: Literal["start", "done"]) -> None:
            _, _, _, doing, done = ACTIONS[change.action]
            if event == "start":
                status.update(f"{doing} {change.address}...")
            else:
                console.print(f"  {change.address}: {done}")

        result = _guarded(paint, lambda: api.apply(plan_obj, cfg, progress=progress))

    typer.echo("\n" + format_apply_result(result, paint))


@app.command()
def plan(
    config: ConfigOpt = Path("sfx-provisioner.yaml"),
    out: Annotated[
        Path | None, typer.Option("--out", "-o", help="Write the plan here for a later apply.")
    ] = None,
    no_refresh: Annotated[
        bool, typer.Option("--no-refresh", help="Trust state without asking SignalFx.")
    ] = False,
    no_color: NoColorOpt = False,
) -> None:
    """Show what apply would change. Exits 2 when there is something to do."""
    paint = _painter(no_color)
    cfg = _guarded(paint, lambda: api.load(config))
    plan_obj = _guarded(paint, lambda: api.plan(cfg, refresh=not no_refresh))

    typer.echo(format_plan(plan_obj, paint))
    typer.echo("\n" + plan_summary(plan_obj, paint))
    if out is not None:
        plan_obj.save(out)
        typer.echo(f"Saved plan to {out}; run `sfx-provisioner apply {out}` to apply it.")
    if plan_obj.pending:
        raise typer.Exit(2)


@app.command()
def apply(
    plan_file: Annotated[
        Path | None, typer.Argument(help="Plan written by `plan --out`.")
    ] = None,
    config: ConfigOpt = Path("sfx-provisioner.yaml"),
    auto_approve: YesOpt = False,
    no_color: NoColorOpt = False,
) -> None:
    """Create, update and delete charts to match the configuration."""
    paint = _painter(no_color)
    cfg = _guarded(paint, lambda: api.load(config))
    if plan_file is not None:
        plan_obj = _guarded(paint, lambda: Plan.load(plan_file))
    else:
        plan_obj = _guarded(paint, lambda: api.plan(cfg))
    _run_plan(plan_obj, cfg, paint, auto_approve=auto_approve)


@app.command()
def destroy(
    config: ConfigOpt = Path("sfx-provisioner.yaml"),
    auto_approve: YesOpt = False,
    no_color: NoColorOpt = False,
) -> None:
    """Delete every chart tracked in state."""
    paint = _painter(no_color)
    cfg = _guarded(paint, lambda: api.load(config))
    plan_obj = _guarded(paint, lambda: api.plan(cfg, destroy=True))
    if not plan_obj.pending:
        typer.echo("No charts to destroy.")
        return
    _run_plan(plan_obj, cfg, paint, auto_approve=auto_approve)


@app.command()
def refresh(
    config: ConfigOpt = Path("sfx-provisioner.yaml"),
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Only report drift; exit 2 if any, leave state alone."),
    ] = False,
    no_color: NoColorOpt = False,
) -> None:
    """Check every tracked chart against SignalFx and record what changed there."""
    paint = _painter(no_color)
    cfg = _guarded(paint, lambda: api.load(config))
    result = _guarded(paint, lambda: api.refresh(cfg, persist=not dry_run))

    typer.echo(format_refresh(result.drift, paint))
    drifted = len(result.drifted)
    if not drifted:
        typer.echo("\nAll charts match SignalFx.")
    elif result.persisted:
        typer.echo(f"\n{drifted} chart(s) drifted; state saved at serial {result.serial}.")
    else:
        typer.echo(f"\n{drifted} chart(s) drifted.")
    if dry_run and drifted:
        raise typer.Exit(2)


@app.command()
def validate(
    config: ConfigOpt = Path("sfx-provisioner.yaml"),
    no_color: NoColorOpt = False,
) -> None:
    """Check the configuration without contacting SignalFx."""
    paint = _painter(no_color)
    cfg = _guarded(paint, lambda: api.load(config))
    _guarded(paint, lambda: api.plan(cfg, refresh=False))
    typer.echo(paint(f"{len(cfg.text_charts)} chart(s) OK.", "green"))
