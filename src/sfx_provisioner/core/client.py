"""Thin HTTP client for the SignalFx REST API."""

from __future__ import annotations

import logging

import requests

logger = logging.getLogger(__name__)

AUTH_HEADER = "X-SF-Token"
DEFAULT_TIMEOUT = 30.0


class APIError(Exception):
    """Raised for transport failures and unexpected HTTP status codes."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class SignalFxClient:
    """Issue authenticated JSON requests against the SignalFx API.

    One request per call, no retries. Callers decide which status codes are
    acceptable; only transport errors raise here.
    """

    def __init__(
        self,
        auth_token: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                AUTH_HEADER: auth_token,
                "Content-Type": "application/json",
            }
        )

    def send_request(
        self, method: str, url: str, payload: bytes | None = None
    ) -> tuple[int, bytes]:
        """Send one request and return ``(status_code, body)``."""
        logger.debug("%s %s", method, url)
        try:
            resp = self._session.request(method, url, data=payload, timeout=self._timeout)
        except requests.RequestException as exc:
            raise APIError(f"Failed sending {method} request to {url}: {exc}") from exc
        logger.debug("%s %s -> %d", method, url, resp.status_code)
        return resp.status_code, resp.content

    def close(self) -> None:
        self._session.close()
