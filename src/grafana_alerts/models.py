"""
Models for Grafana alert payloads and the rendered table.

Summaries from ``GET /api/alerts`` are validated just enough to drive the
detail fetch: an integer ``id`` and an optional ``dashboardUid``. Detail
payloads stay schema-free dicts.
"""
from __future__ import annotations

import asyncio
import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from grafana_alerts.jsonvalue import scalar_text

# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

_INTEGER_RE = re.compile(r"^\s*[+-]?\d+\s*$", re.ASCII)
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


def _require_integer_id(v: Any) -> int:
    if isinstance(v, bool):
        raise ValueError("id must be an integer, not a boolean")
    if isinstance(v, str):
        if not _INTEGER_RE.match(v):
            raise ValueError("id is not a string-encoded integer")
        v = int(v)
    if not isinstance(v, int):
        raise ValueError("id must be an integer or a string-encoded integer")
    if v < _INT32_MIN or v > _INT32_MAX:
        raise ValueError("id is out of range")
    return v


# ---------------------------------------------------------------------------
# Grafana API payloads
# ---------------------------------------------------------------------------


class AlertSummary(BaseModel):
    """One entry of the alert list endpoint."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: int
    dashboard_uid: str = Field(default="", alias="dashboardUid")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> int:
        return _require_integer_id(v)

    @field_validator("dashboard_uid", mode="before")
    @classmethod
    def coerce_dashboard_uid(cls, v: Any) -> str:
        return scalar_text(v) or ""


class PendingAlert:
    """A listed alert whose detail fetch is in flight or resolved."""

    def __init__(
        self,
        raw: dict[str, Any],
        summary: AlertSummary,
        task: "asyncio.Task[Optional[dict[str, Any]]]",
    ) -> None:
        self.raw = raw
        self.summary = summary
        self.task = task
        self.detail: Optional[dict[str, Any]] = None

    @property
    def id(self) -> int:
        return self.summary.id

    def __repr__(self) -> str:
        state = "resolved" if self.detail is not None else "pending"
        return f"PendingAlert(id={self.id}, {state})"


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------


class TableRow(BaseModel):
    key: str
    cells: list[str] = []
