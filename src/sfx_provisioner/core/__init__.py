"""SignalFx connection, URLs and state."""

from sfx_provisioner.core.client import APIError, SignalFxClient
from sfx_provisioner.core.provider import SignalFxProvider, TokenAuth
from sfx_provisioner.core.state import ChartRecord, ChartState
from sfx_provisioner.core.urls import URLError

__all__ = [
    "APIError",
    "ChartRecord",
    "ChartState",
    "SignalFxClient",
    "SignalFxProvider",
    "TokenAuth",
    "URLError",
]
