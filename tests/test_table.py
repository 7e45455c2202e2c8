"""Tests for column discovery, row building and table rendering."""
from __future__ import annotations

import io
from typing import Any, Optional

from structlog.testing import capture_logs

from grafana_alerts import console
from grafana_alerts.models import AlertSummary, PendingAlert, TableRow
from grafana_alerts.table import (
    build_rows,
    cell_text,
    column_widths,
    discover_columns,
    normalize_cell,
    print_table,
    render_table,
    truncate_cell,
)


def make_alert(detail: Optional[dict[str, Any]], **summary: Any) -> PendingAlert:
    raw = {"id": 1, **summary}
    item = PendingAlert(raw, AlertSummary.model_validate(raw), None)  # type: ignore[arg-type]
    item.detail = detail
    return item


# ---------------------------------------------------------------------------
# Cells
# ---------------------------------------------------------------------------


class TestNormalizeCell:
    def test_line_breaks(self):
        assert normalize_cell("a\r\nb\rc\nd") == "a b c d"

    def test_collapses_space_runs(self):
        assert normalize_cell("a        b") == "a b"

    def test_line_break_next_to_spaces(self):
        assert normalize_cell("a  \r\n  b") == "a b"

    def test_idempotent(self):
        for text in ["a  b", "x\n\n\ny", "  lead", "plain", "{\n  \"a\": 1\n}"]:
            once = normalize_cell(text)
            assert normalize_cell(once) == once

    def test_tabs_untouched(self):
        assert normalize_cell("a\t\tb") == "a\t\tb"


class TestTruncateCell:
    def test_short_unchanged(self):
        assert truncate_cell("12345678") == "12345678"

    def test_exactly_nine_is_truncated(self):
        assert truncate_cell("123456789") == "123456..."

    def test_long(self):
        assert truncate_cell("alerting-state") == "alerti..."
        assert len(truncate_cell("x" * 40)) == 9


class TestCellText:
    def test_missing(self):
        assert cell_text() == ""

    def test_null(self):
        assert cell_text(None) == ""

    def test_scalars(self):
        assert cell_text("ok") == "ok"
        assert cell_text(3) == "3"
        assert cell_text(False) == "False"

    def test_nested_is_flattened_then_truncated(self):
        assert cell_text({"a": 1}) == '{ "a": 1 }'[:6] + "..."
        assert cell_text([]) == "[]"

    def test_multiline_text(self):
        assert cell_text("a\n  b") == "a b"


# ---------------------------------------------------------------------------
# Columns
# ---------------------------------------------------------------------------


class TestDiscoverColumns:
    def test_sorted_union_without_key_then_dashboard_uid(self):
        details = [{"Name": "a", "State": "ok"}, {"Name": "b", "Id": 3, "evalDate": "x"}]
        assert discover_columns(details, "Name") == ("Id", "State", "evalDate", "dashboardUid")

    def test_ordinal_order(self):
        assert discover_columns([{"b": 1, "B": 1, "a": 1}], "Name") == ("B", "a", "b", "dashboardUid")

    def test_dashboard_uid_appended_even_if_present(self):
        cols = discover_columns([{"Name": "a", "dashboardUid": "x", "Zeta": 1}], "Name")
        assert cols == ("Zeta", "dashboardUid", "dashboardUid")

    def test_top_level_only(self):
        assert discover_columns([{"Settings": {"inner": 1}}], "Name") == ("Settings", "dashboardUid")

    def test_empty(self):
        assert discover_columns([], "Name") == ("dashboardUid",)


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------


class TestBuildRows:
    def test_example(self):
        alert = make_alert({"Name": "Alpha", "State": "ok"}, dashboardUid="d1")
        columns = discover_columns([alert.detail], "Name")
        rows = build_rows([alert], columns, "Name")
        assert [[r.key, *r.cells] for r in rows] == [
            ["Alerts", "State", "dashboardUid"],
            ["Alpha", "ok", "d1"],
        ]

    def test_dashboard_uid_comes_from_summary(self):
        alert = make_alert(
            {"Name": "a", "dashboardUid": "from-detail", "Alpha": 1, "Beta": 2},
            dashboardUid="from-summary-very-long",
        )
        columns = discover_columns([alert.detail], "Name")
        rows = build_rows([alert], columns, "Name")
        assert rows[1].cells == ["1", "2", "from-d...", "from-summary-very-long"]

    def test_missing_summary_uid_is_empty(self):
        alert = make_alert({"Name": "a", "State": "ok"})
        rows = build_rows([alert], discover_columns([alert.detail], "Name"), "Name")
        assert rows[1].cells[-1] == ""

    def test_missing_values_are_empty_cells(self):
        a = make_alert({"Name": "a", "State": "ok"})
        b = make_alert({"Name": "b", "Message": "disk full"})
        columns = discover_columns([a.detail, b.detail], "Name")
        rows = build_rows([a, b], columns, "Name")
        assert rows[0].cells == ["Message", "State", "dashboardUid"]
        assert rows[1].cells == ["", "ok", ""]
        assert rows[2].cells == ["disk f...", "", ""]

    def test_drops_rows_without_key_field(self):
        good = make_alert({"Name": "a"})
        numeric = make_alert({"Name": 5})
        missing = make_alert({"message": "Alert not found"})
        columns = discover_columns([good.detail, numeric.detail, missing.detail], "Name")
        with capture_logs() as logs:
            rows = build_rows([good, numeric, missing], columns, "Name")
        assert [r.key for r in rows] == ["Alerts", "a"]
        assert [e["event"] for e in logs].count("alert.missing_key_field") == 2

    def test_every_row_has_header_length(self):
        a = make_alert({"Name": "a", "x": 1})
        b = make_alert({"Name": "b", "y": 2, "z": 3})
        columns = discover_columns([a.detail, b.detail], "Name")
        rows = build_rows([a, b], columns, "Name")
        assert {len(r.cells) for r in rows} == {len(columns)}

    def test_custom_key_field(self):
        alert = make_alert({"Name": "n", "Title": "t"})
        columns = discover_columns([alert.detail], "Title")
        rows = build_rows([alert], columns, "Title")
        assert rows[0].cells == ["Name", "dashboardUid"]
        assert rows[1].key == "t"


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


ROWS = [
    TableRow(key="Alerts", cells=["State", "dashboardUid"]),
    TableRow(key="Alpha", cells=["ok", "d1"]),
]


class TestRender:
    def test_widths(self):
        assert column_widths(ROWS) == [6, 5, 12]

    def test_lines(self):
        assert render_table(ROWS) == [
            "Alerts  State  dashboardUid",
            "Alpha   ok     d1",
        ]

    def test_trailing_blank_cells_trimmed(self):
        rows = [TableRow(key="Alerts", cells=["A", "B"]), TableRow(key="x", cells=["1", ""])]
        assert render_table(rows)[1] == "x       1"

    def test_empty(self):
        assert render_table([]) == []
        assert column_widths([]) == []


class TestPrintTable:
    def test_plain(self):
        out = io.StringIO()
        print_table(ROWS, out)
        assert out.getvalue() == "Alerts  State  dashboardUid\nAlpha   ok     d1\n"

    def test_styles(self):
        rows = ROWS + [TableRow(key="Beta*", cells=["ok", "d2"])]
        out = io.StringIO()
        print_table(rows, out, color=True)
        header, normal, starred = out.getvalue().splitlines()
        assert header.startswith(console.HEADER)
        assert normal.startswith(console.HIGHLIGHT)
        assert starred == "Beta*   ok     d2"

    def test_nothing_for_no_rows(self):
        out = io.StringIO()
        print_table([], out, color=True)
        assert out.getvalue() == ""
