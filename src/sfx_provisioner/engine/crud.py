"""Shared CRUD helpers for SignalFx REST resources.

Every SignalFx object type (charts, dashboards, detectors) follows the same
lifecycle: ``POST`` to create, ``GET``/``PUT``/``DELETE`` on ``<path>/<id>``.
Handlers build the URL and payload, these helpers issue the call and turn
the response into the attributes tracked in state:

- ``id``: remote object id
- ``last_updated``: remote ``lastUpdated`` timestamp
- ``synced``: ``False`` once the object was modified outside this tool
- ``name``, ``description``, ``markdown``: remote content as last read
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from sfx_provisioner.core.client import APIError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sfx_provisioner.core.client import SignalFxClient

logger = logging.getLogger(__name__)

_NOT_FOUND_MARKER = "Resource not found"


def _body_text(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")


def _is_success(status: int) -> bool:
    return 200 <= status < 300


def _check_status(method: str, url: str, status: int, body: bytes) -> None:
    if not _is_success(status):
        text = _body_text(body)
        raise APIError(
            f"{method} {url}: bad status {status}: {text}", status_code=status, body=text
        )


def _is_not_found(status: int, body: bytes) -> bool:
    """A 404, or an error response whose body reports the object missing.

    Successful responses are never "not found", even when a chart's own
    markdown happens to contain the marker text.
    """
    if status == 404:
        return True
    return not _is_success(status) and _NOT_FOUND_MARKER in _body_text(body)


def _decode(method: str, url: str, body: bytes) -> dict[str, Any]:
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise APIError(f"{method} {url}: invalid JSON response: {exc}") from exc
    if not isinstance(data, dict):
        raise APIError(f"{method} {url}: expected a JSON object, got {type(data).__name__}")
    return data


def _last_updated(data: Mapping[str, Any], default: float = 0.0) -> float:
    value = data.get("lastUpdated")
    return float(value) if value is not None else default


def _remote_content(data: Mapping[str, Any]) -> dict[str, Any]:
    """The configurable fields present in a chart response."""
    content = {k: data[k] for k in ("name", "description") if data.get(k) is not None}
    options = data.get("options")
    if isinstance(options, dict) and options.get("markdown") is not None:
        content["markdown"] = options["markdown"]
    return content


def resource_create(client: SignalFxClient, url: str, payload: bytes) -> dict[str, Any]:
    """Create a remote object and return its computed attributes."""
    status, body = client.send_request("POST", url, payload)
    _check_status("POST", url, status, body)
    data = _decode("POST", url, body)

    remote_id = data.get("id")
    if not remote_id:
        raise APIError(f"POST {url}: response carries no object id")

    logger.info("Created %s", remote_id)
    return {
        "id": str(remote_id),
        "last_updated": _last_updated(data),
        "synced": True,
    }


def resource_read(
    client: SignalFxClient, url: str, prior: Mapping[str, Any]
) -> dict[str, Any] | None:
    """Re-read a remote object.

    Returns *prior* updated with the remote content and sync bookkeeping, or
    ``None`` when the object was deleted remotely.
    """
    status, body = client.send_request("GET", url)
    if _is_not_found(status, body):
        logger.info("Remote object at %s no longer exists", url)
        return None
    _check_status("GET", url, status, body)

    data = _decode("GET", url, body)
    attrs = {**prior, **_remote_content(data)}
    last_updated = _last_updated(data)
    if last_updated > float(prior.get("last_updated") or 0.0):
        # Edited outside of this tool.
        logger.info("Remote object at %s changed since last apply", url)
        attrs["synced"] = False
        attrs["last_updated"] = last_updated
    return attrs


def resource_update(
    client: SignalFxClient, url: str, payload: bytes, prior: Mapping[str, Any]
) -> dict[str, Any]:
    """Push *payload* over an existing remote object."""
    status, body = client.send_request("PUT", url, payload)
    _check_status("PUT", url, status, body)
    data = _decode("PUT", url, body)

    attrs = dict(prior)
    attrs["last_updated"] = _last_updated(data, float(prior.get("last_updated") or 0.0))
    attrs["synced"] = True
    return attrs


def resource_delete(client: SignalFxClient, url: str) -> None:
    """Delete a remote object. Already-deleted objects are not an error."""
    status, body = client.send_request("DELETE", url)
    if _is_not_found(status, body):
        logger.info("Remote object at %s already deleted", url)
        return
    _check_status("DELETE", url, status, body)
