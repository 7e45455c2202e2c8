"""
Column discovery, row building and plain-text rendering of the alert table.
"""
from __future__ import annotations

import re
from typing import Any, Iterable, Sequence, TextIO

import structlog

from grafana_alerts import console
from grafana_alerts.jsonvalue import get_str, stringify
from grafana_alerts.models import PendingAlert, TableRow

log = structlog.get_logger(__name__)

HEADER_LABEL = "Alerts"
DASHBOARD_UID_COLUMN = "dashboardUid"
CELL_WIDTH = 9
GUTTER = "  "

_NEWLINES_RE = re.compile(r"\r\n|\r|\n")
_SPACES_RE = re.compile(r" {2,}")

_MISSING = object()


# ---------------------------------------------------------------------------
# Cells
# ---------------------------------------------------------------------------


def normalize_cell(text: str) -> str:
    """Turn line breaks into spaces and collapse runs of spaces."""
    return _SPACES_RE.sub(" ", _NEWLINES_RE.sub(" ", text))


def truncate_cell(text: str, width: int = CELL_WIDTH) -> str:
    """Cut *text* to *width* characters, the last three being ``...``."""
    if len(text) < width:
        return text
    return text[: width - 3] + "..."


def cell_text(value: Any = _MISSING) -> str:
    if value is _MISSING:
        return ""
    return truncate_cell(normalize_cell(stringify(value)))


# ---------------------------------------------------------------------------
# Columns and rows
# ---------------------------------------------------------------------------


def discover_columns(details: Iterable[dict[str, Any]], key_field: str) -> tuple[str, ...]:
    """Sorted union of top-level detail keys without *key_field*, then dashboardUid."""
    names: set[str] = set()
    for detail in details:
        names.update(detail.keys())
    names.discard(key_field)
    return (*sorted(names), DASHBOARD_UID_COLUMN)


def build_rows(
    alerts: Sequence[PendingAlert],
    columns: Sequence[str],
    key_field: str,
    header_label: str = HEADER_LABEL,
) -> list[TableRow]:
    """Header row followed by one row per alert that has a string key field."""
    rows = [TableRow(key=header_label, cells=list(columns))]
    # The synthetic column is always the last one; a detail key of the same
    # name keeps its own slot in the sorted part.
    uid_index = len(columns) - 1

    for item in alerts:
        detail = item.detail or {}
        key = get_str(detail, key_field)
        if key is None:
            log.warning("alert.missing_key_field", key_field=key_field, alert=detail)
            continue

        cells = [cell_text(detail.get(name, _MISSING)) for name in columns]
        cells[uid_index] = item.summary.dashboard_uid
        rows.append(TableRow(key=key, cells=cells))

    log.info("alerts.tabulated", count=len(rows) - 1)
    return rows


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def column_widths(rows: Sequence[TableRow]) -> list[int]:
    """Max length per column; index 0 is the row-key column."""
    if not rows:
        return []
    widths = [0] * (len(rows[0].cells) + 1)
    for row in rows:
        widths[0] = max(widths[0], len(row.key))
        for col, cell in enumerate(row.cells[: len(widths) - 1]):
            widths[col + 1] = max(widths[col + 1], len(cell))
    return widths


def render_table(rows: Sequence[TableRow]) -> list[str]:
    widths = column_widths(rows)
    lines = []
    for row in rows:
        parts = [row.key.ljust(widths[0])]
        parts += [cell.ljust(width) for cell, width in zip(row.cells, widths[1:])]
        lines.append(GUTTER.join(parts).rstrip())
    return lines


def print_table(rows: Sequence[TableRow], stream: TextIO, color: bool = False) -> None:
    """Write the table; data rows containing ``*`` are left unhighlighted."""
    for index, line in enumerate(render_table(rows)):
        if index == 0:
            style = console.HEADER
        elif "*" in line:
            style = console.NEUTRAL
        else:
            style = console.HIGHLIGHT
        console.write_line(stream, line, style if color else console.NEUTRAL)
