"""Plan and apply engine for SignalFx text charts."""

from sfx_provisioner.engine.engine import ChartEngine, ProgressCallback
from sfx_provisioner.engine.errors import (
    ApplyError,
    EngineError,
    StalePlanError,
    StateLockError,
    ValidationError,
)
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

__all__ = [
    "Action",
    "ApplyError",
    "ApplyResult",
    "ChartChange",
    "ChartDrift",
    "ChartEngine",
    "EngineError",
    "Plan",
    "ProgressCallback",
    "RefreshResult",
    "StalePlanError",
    "StateLockError",
    "SyncStatus",
    "TextChartHandler",
    "ValidationError",
]
