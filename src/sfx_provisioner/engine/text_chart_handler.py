"""Text chart CRUD against the SignalFx chart API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sfx_provisioner.core.state import ChartRecord
from sfx_provisioner.core.urls import (
    CHART_API_PATH,
    CHART_APP_PATH,
    URLError,
    build_app_url,
    build_url,
    normalize_base_url,
)
from sfx_provisioner.engine.crud import (
    resource_create,
    resource_delete,
    resource_read,
    resource_update,
)
from sfx_provisioner.resources.text_chart import text_chart_payload

if TYPE_CHECKING:
    from sfx_provisioner.core.provider import SignalFxProvider
    from sfx_provisioner.resources.text_chart import TextChartResource

logger = logging.getLogger(__name__)

API_URL_ERROR = "[SignalFx] Error constructing API URL: "
APP_URL_ERROR = "[SignalFx] Error constructing app URL: "


class TextChartHandler:
    """Maps text chart changes onto ``/v2/chart`` calls."""

    def __init__(self, provider: SignalFxProvider) -> None:
        self._provider = provider

    def _api_url(self, chart_id: str | None = None) -> str:
        path = CHART_API_PATH if chart_id is None else f"{CHART_API_PATH}/{chart_id}"
        try:
            return build_url(self._provider.api_url, path)
        except URLError as exc:
            raise URLError(API_URL_ERROR + str(exc)) from exc

    def _app_base(self) -> str:
        try:
            return normalize_base_url(self._provider.custom_app_url)
        except URLError as exc:
            raise URLError(APP_URL_ERROR + str(exc)) from exc

    def check_provider(self) -> list[str]:
        """Problems with the provider URLs, reported before anything is sent."""
        errors = []
        for check in (self._api_url, self._app_base):
            try:
                check()
            except URLError as exc:
                errors.append(str(exc))
        return errors

    def validate(self, chart: TextChartResource) -> list[str]:
        if not chart.markdown.strip():
            return [f"{chart.address}: markdown must not be empty"]
        return []

    def create(self, chart: TextChartResource) -> ChartRecord:
        """Create a chart and record its id and app link."""
        payload = text_chart_payload(chart)
        url = self._api_url()
        # Resolved before the POST so a bad app URL cannot orphan a new chart.
        app_base = self._app_base()

        computed = resource_create(self._provider.client, url, payload)
        link = build_app_url(app_base, CHART_APP_PATH + computed["id"])
        logger.debug("Chart %s available at %s", chart.name, link)
        return ChartRecord.model_validate({**chart.model_dump(), **computed, "url": link})

    def read(self, record: ChartRecord) -> ChartRecord | None:
        """Re-read a chart. Returns None if it was deleted in SignalFx."""
        attrs = resource_read(
            self._provider.client, self._api_url(record.id), record.model_dump()
        )
        if attrs is None:
            return None
        return ChartRecord.model_validate(attrs)

    def update(self, chart: TextChartResource, record: ChartRecord) -> ChartRecord:
        payload = text_chart_payload(chart)
        attrs = resource_update(
            self._provider.client, self._api_url(record.id), payload, record.model_dump()
        )
        return ChartRecord.model_validate({**attrs, **chart.model_dump(), "synced": True})

    def delete(self, record: ChartRecord) -> None:
        resource_delete(self._provider.client, self._api_url(record.id))
