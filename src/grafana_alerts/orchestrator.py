"""
Concurrent detail fetching for listed alerts.

Every valid summary gets its detail request scheduled immediately; results
are then consumed strictly in list order so the surviving alerts keep their
original ordering regardless of which request finishes first.
"""
from __future__ import annotations

import asyncio
from typing import Any, Optional, Protocol, Sequence

import structlog
from pydantic import ValidationError

from grafana_alerts.models import AlertSummary, PendingAlert

log = structlog.get_logger(__name__)


class DetailSource(Protocol):
    async def get_alert_detail(self, alert_id: int) -> Optional[dict[str, Any]]: ...


def start_fetches(client: DetailSource, summaries: Sequence[Any]) -> list[PendingAlert]:
    """Schedule a detail fetch for every summary with a valid integer id."""
    pending: list[PendingAlert] = []
    for raw in summaries:
        if not isinstance(raw, dict):
            log.warning("alert.ignored_invalid", alert=raw)
            continue
        try:
            summary = AlertSummary.model_validate(raw)
        except ValidationError as exc:
            log.warning("alert.ignored_invalid", alert=raw, errors=exc.error_count())
            continue
        task = asyncio.create_task(client.get_alert_detail(summary.id))
        pending.append(PendingAlert(raw, summary, task))
    return pending


async def join_fetches(pending: list[PendingAlert]) -> list[PendingAlert]:
    """Await each fetch in submission order, dropping alerts without detail."""
    resolved: list[PendingAlert] = []
    for item in pending:
        detail = await item.task
        if detail is None:
            log.warning("alert.ignored_invalid_value", alert=item.raw)
            continue
        item.detail = detail
        resolved.append(item)
    return resolved


async def fetch_alerts(client: DetailSource, summaries: Sequence[Any]) -> list[PendingAlert]:
    log.info("alerts.listed", count=len(summaries))

    pending = start_fetches(client, summaries)
    log.info("alerts.valid", count=len(pending))
    if not pending:
        return []

    resolved = await join_fetches(pending)
    log.info("alerts.fetched", count=len(resolved))
    return resolved
