"""Text chart resource model and payload construction."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

RESOURCE_TYPE = "signalfx_text_chart"
TEXT_CHART_TYPE = "Text"


class PayloadError(Exception):
    """Raised when a chart cannot be encoded as a JSON request body."""


class TextChartResource(BaseModel):
    """A SignalFx text chart.

    Renders static markdown on a dashboard. ``synced`` is bookkeeping: it is
    ``True`` in configuration and flips to ``False`` in state when the chart
    was edited outside this tool, which forces an update on the next plan.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    description: str = ""
    markdown: str = Field(
        description=(
            "Markdown text to display. More info at: "
            "https://github.com/adam-p/markdown-here/wiki/Markdown-Cheatsheet"
        ),
    )
    synced: bool = True

    @property
    def address(self) -> str:
        return f"{RESOURCE_TYPE}.{self.name}"


def text_chart_options(chart: TextChartResource) -> dict[str, Any]:
    """Visualization options for a text chart."""
    options: dict[str, Any] = {"type": TEXT_CHART_TYPE}
    if chart.markdown:
        options["markdown"] = chart.markdown
    return options


def text_chart_payload(chart: TextChartResource) -> bytes:
    """Encode *chart* as the JSON body of a chart create/update request.

    Raises:
        PayloadError: If the payload cannot be serialized.
    """
    payload: dict[str, Any] = {
        "name": chart.name,
        "description": chart.description,
    }
    options = text_chart_options(chart)
    if options:
        payload["options"] = options

    try:
        return json.dumps(payload).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise PayloadError(f"Failed creating json payload: {exc}") from exc
