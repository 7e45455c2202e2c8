"""
Async client for the Grafana legacy alerting API.

Endpoints:
  GET <base>/api/alerts        alert summaries (id, dashboardUid, …)
  GET <base>/api/alerts/<id>   full alert detail
Authentication: Authorization: Bearer <token>, optional Cookie passthrough.

``list_alerts`` raises on any failure since the alert population cannot be
determined without it. ``get_alert_detail`` returns ``None`` instead, so a
single broken alert never aborts the run.
"""
from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Optional

import httpx
import structlog

from grafana_alerts.config import Settings
from grafana_alerts.jsonvalue import parse_array, parse_object, preview

log = structlog.get_logger(__name__)

_LIST_PATH = "api/alerts"


class GrafanaAlertsError(Exception):
    """Base class for fatal grafana-alerts errors."""


class GrafanaAPIError(GrafanaAlertsError):
    """Raised for non-2xx Grafana API responses."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        super().__init__(f"Grafana API error {status_code}: {message}")


class AlertPayloadError(GrafanaAlertsError):
    """Raised when the alert list body is not a JSON array."""

    def __init__(self, message: str, saved_to: Optional[str]) -> None:
        self.saved_to = saved_to
        super().__init__(message)


class GrafanaAlertClient:
    """Async context-manager wrapper around the Grafana alert endpoints."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._base_url = settings.base_url.rstrip("/") + "/"
        self._headers = {
            "Authorization": f"Bearer {settings.api_token}",
            "Accept": "application/json",
        }
        if settings.cookie is not None:
            self._headers["Cookie"] = settings.cookie
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    async def __aenter__(self) -> "GrafanaAlertClient":
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            verify=self._settings.ssl_verify,
            timeout=self._settings.timeout,
        )
        return self

    async def __aexit__(self, *_: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client_or_raise(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("GrafanaAlertClient must be used as an async context manager")
        return self._client

    def _trace(self, event: str, **kw: Any) -> None:
        if self._settings.verbose:
            log.info(event, **kw)

    async def _get(self, path: str) -> tuple[httpx.Response, int]:
        client = self._client_or_raise()
        self._trace("grafana.request", url=f"{self._base_url}{path}")
        t0 = time.monotonic()
        # Server-set cookies are never replayed; only the configured Cookie header is sent.
        client.cookies.clear()
        response = await client.get(path)
        elapsed = round((time.monotonic() - t0) * 1000)
        return response, elapsed

    def _save_diagnostic(self, body: str) -> Optional[str]:
        """Write *body* to the error file; ``None`` if it cannot be written."""
        path = self._settings.error_file
        try:
            Path(path).write_text(body, encoding="utf-8")
        except OSError as exc:
            log.warning("grafana.diagnostic_unwritable", path=path, error=str(exc))
            return None
        return path

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------

    async def list_alerts(self) -> list[Any]:
        """Return the raw alert summaries.

        Raises ``GrafanaAPIError`` on a non-2xx status and
        ``AlertPayloadError`` if the body is not a JSON array.
        """
        response, elapsed = await self._get(_LIST_PATH)
        body = response.text
        if not response.is_success:
            log.error("grafana.list_failed", status=response.status_code, body=body)
            raise GrafanaAPIError(response.status_code, body[:500])

        alerts = parse_array(body)
        if alerts is None:
            saved_to = self._save_diagnostic(body)
            where = f"saved to {saved_to}" if saved_to else "not saved"
            raise AlertPayloadError(f"Couldn't parse json ({where}): {preview(body)}", saved_to)

        self._trace("grafana.response", path=_LIST_PATH, elapsed_ms=elapsed, body=alerts)
        return alerts

    async def get_alert_detail(self, alert_id: int) -> Optional[dict[str, Any]]:
        """Return the detail object of one alert, or ``None`` if unavailable."""
        path = f"{_LIST_PATH}/{alert_id}"
        try:
            response, elapsed = await self._get(path)
        except httpx.HTTPError as exc:
            log.warning("grafana.detail_unreachable", path=path, error=str(exc))
            return None

        body = response.text
        if not response.is_success:
            # Grafana often sends a diagnostic JSON body with error statuses; still parse it.
            log.warning("grafana.detail_status", path=path, status=response.status_code, body=body)

        detail = parse_object(body)
        if detail is None:
            saved_to = self._save_diagnostic(body)
            log.warning(
                "grafana.detail_unparseable",
                path=path,
                saved_to=saved_to,
                body=preview(body),
            )
            return None

        self._trace("grafana.response", path=path, elapsed_ms=elapsed, body=detail)
        return detail
