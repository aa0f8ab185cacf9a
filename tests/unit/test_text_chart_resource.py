"""Tests for TextChartResource and its payload."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from sfx_provisioner.resources.text_chart import (
    PayloadError,
    TextChartResource,
    text_chart_options,
    text_chart_payload,
)


class TestTextChartResource:
    def test_address(self) -> None:
        chart = TextChartResource(name="Notes", markdown="hi")
        assert chart.address == "signalfx_text_chart.Notes"

    def test_defaults(self) -> None:
        chart = TextChartResource(name="Notes", markdown="hi")
        assert chart.description == ""
        assert chart.synced is True

    def test_markdown_required(self) -> None:
        with pytest.raises(ValidationError, match="markdown"):
            TextChartResource(name="Notes")  # type: ignore[call-arg]

    def test_name_required(self) -> None:
        with pytest.raises(ValidationError, match="name"):
            TextChartResource(markdown="hi")  # type: ignore[call-arg]

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValidationError, match="at least 1 character"):
            TextChartResource(name="", markdown="hi")

    def test_extra_forbid(self) -> None:
        with pytest.raises(ValidationError, match="extra"):
            TextChartResource(name="Notes", markdown="hi", url="x")  # type: ignore[call-arg]

    def test_model_dump_shape(self) -> None:
        chart = TextChartResource(name="Notes", markdown="hi")
        assert chart.model_dump() == {
            "name": "Notes",
            "description": "",
            "markdown": "hi",
            "synced": True,
        }


class TestPayload:
    def test_sample_payload(self) -> None:
        chart = TextChartResource(name="Sample", description="Desc", markdown="**bold**")
        assert json.loads(text_chart_payload(chart)) == {
            "name": "Sample",
            "description": "Desc",
            "options": {"markdown": "**bold**", "type": "Text"},
        }

    def test_payload_is_bytes(self) -> None:
        chart = TextChartResource(name="Sample", markdown="x")
        assert isinstance(text_chart_payload(chart), bytes)

    @pytest.mark.parametrize(
        "markdown",
        ["plain", "# heading\n\n- a\n- b", "unicode ✓ ü é", '"quotes" and \\ backslash'],
    )
    def test_markdown_verbatim_and_type_text(self, markdown: str) -> None:
        chart = TextChartResource(name="Sample", markdown=markdown)
        options = json.loads(text_chart_payload(chart))["options"]
        assert options["type"] == "Text"
        assert options["markdown"] == markdown

    def test_options_without_markdown(self) -> None:
        chart = TextChartResource(name="Sample", markdown="")
        assert text_chart_options(chart) == {"type": "Text"}
        assert json.loads(text_chart_payload(chart))["options"] == {"type": "Text"}

    def test_empty_description_is_sent(self) -> None:
        chart = TextChartResource(name="Sample", markdown="x")
        assert json.loads(text_chart_payload(chart))["description"] == ""

    def test_serialization_failure_wrapped(self) -> None:
        chart = TextChartResource(name="Sample", markdown="x")
        with (
            patch("sfx_provisioner.resources.text_chart.json.dumps", side_effect=TypeError("boom")),
            pytest.raises(PayloadError, match="Failed creating json payload: boom"),
        ):
            text_chart_payload(chart)
