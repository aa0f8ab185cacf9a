"""Chart state file.

The state file remembers, per configured chart label, which remote chart
backs it and what it looked like the last time we wrote or read it. Plans
pin the state they were computed against through ``lineage``, ``serial``
and :meth:`ChartState.fingerprint`.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import shutil
import tempfile
import uuid
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Fields a configured chart can diverge on.
CONFIG_FIELDS = ("name", "description", "markdown", "synced")


def _now() -> datetime:
    return datetime.now(UTC)


class ChartRecord(BaseModel):
    """Last known shape of one managed chart.

    ``name``, ``description`` and ``markdown`` mirror the remote chart as of
    the last apply or refresh. ``synced`` is ``False`` when the remote
    ``lastUpdated`` moved past ``last_updated`` since then.
    """

    id: str = Field(min_length=1)
    name: str
    description: str = ""
    markdown: str = ""
    synced: bool = True
    last_updated: float = 0.0
    url: str = ""
    updated_at: datetime = Field(default_factory=_now)

    def config_view(self) -> dict[str, object]:
        return {f: getattr(self, f) for f in CONFIG_FIELDS}


class ChartState(BaseModel):
    """Everything ``sfx-provisioner`` tracks between runs."""

    format: int = 1
    lineage: str = Field(default_factory=lambda: uuid.uuid4().hex)
    serial: int = 0
    charts: dict[str, ChartRecord] = Field(default_factory=dict)

    def fingerprint(self) -> str:
        """Hash of the tracked content, ignoring ``updated_at`` stamps."""
        content = {
            "lineage": self.lineage,
            "serial": self.serial,
            "charts": {
                label: rec.model_dump(mode="json", exclude={"updated_at"})
                for label, rec in self.charts.items()
            },
        }
        blob = json.dumps(content, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(blob.encode("utf-8")).hexdigest()

    def write(self, path: Path) -> None:
        """Replace *path* atomically, keeping the previous file as ``<path>.backup``."""
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.exists():
            shutil.copyfile(path, path.with_name(path.name + ".backup"))

        text = self.model_dump_json(indent=2) + "\n"
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", delete=False
        ) as tmp:
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
        try:
            os.replace(tmp.name, path)
        except OSError:
            Path(tmp.name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote state serial %d to %s", self.serial, path)

    @classmethod
    def read(cls, path: Path) -> ChartState:
        """Load *path*, or start an empty state when it does not exist yet."""
        if not path.exists():
            logger.debug("No state at %s, starting fresh", path)
            return cls()
        return cls.model_validate_json(path.read_text(encoding="utf-8"))
