"""Exclusive lock on the state file for the length of a run."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sfx_provisioner.engine.errors import StateLockError

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

try:
    import fcntl
except ImportError:  # pragma: no cover
    fcntl = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


def lock_path_for(state_path: Path) -> Path:
    return state_path.with_name(state_path.name + ".lock")


@contextmanager
def state_lock(state_path: Path) -> Iterator[None]:
    """Hold ``<state>.lock`` or fail at once if another run has it."""
    if fcntl is None:  # pragma: no cover
        raise StateLockError("State locking needs fcntl (POSIX)")

    path = lock_path_for(state_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        try:
            fcntl.flock(handle, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as exc:
            raise StateLockError(f"{path} is held by another sfx-provisioner run") from exc
        except OSError as exc:
            raise StateLockError(f"Cannot lock {path}: {exc}") from exc
        logger.debug("Locked %s", path)
        try:
            yield
        finally:
            fcntl.flock(handle, fcntl.LOCK_UN)
