"""SignalFx API and web app URL helpers."""

from __future__ import annotations

from urllib.parse import urlencode, urlsplit

DEFAULT_API_URL = "https://api.signalfx.com"
DEFAULT_APP_URL = "https://app.signalfx.com"

CHART_API_PATH = "/v2/chart"
CHART_APP_PATH = "/chart/"


class URLError(ValueError):
    """Raised when an API or app URL cannot be built."""


def normalize_base_url(base: str) -> str:
    """Return *base* without a trailing slash.

    Raises:
        URLError: If *base* is not an absolute http(s) URL.
    """
    parts = urlsplit(base)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise URLError(f"invalid base URL {base!r}: expected http(s)://host")
    return base.rstrip("/")


def build_url(api_url: str, path: str, params: dict[str, str] | None = None) -> str:
    """Join *api_url* and *path*, optionally appending a query string."""
    url = normalize_base_url(api_url) + "/" + path.lstrip("/")
    if params:
        url += "?" + urlencode(params)
    return url


def build_app_url(app_url: str, fragment: str) -> str:
    """Build a user-facing link: the web app routes on the URL fragment."""
    return f"{normalize_base_url(app_url)}/#{fragment}"
