"""SignalFx chart definitions."""

from sfx_provisioner.resources.text_chart import (
    RESOURCE_TYPE,
    PayloadError,
    TextChartResource,
    text_chart_options,
    text_chart_payload,
)

__all__ = [
    "RESOURCE_TYPE",
    "PayloadError",
    "TextChartResource",
    "text_chart_options",
    "text_chart_payload",
]
