"""
grafana-alerts: print Grafana alerts as an aligned table.

Usage:
    grafana-alerts <grafanaurl> <authtoken> [-c cookie] [-verbose] [-k keyfield]
    # or
    python -m grafana_alerts <grafanaurl> <authtoken>

Exit codes: 0 on success (also when no valid alert is found), 1 on usage
errors, a malformed URL, or a failed alert list request.
"""
from __future__ import annotations

import argparse
import asyncio
import sys
from typing import NoReturn, Optional, Sequence, TextIO

import httpx
import structlog

from grafana_alerts import console
from grafana_alerts.client import GrafanaAlertClient, GrafanaAlertsError
from grafana_alerts.config import Settings, load_settings
from grafana_alerts.orchestrator import fetch_alerts
from grafana_alerts.table import build_rows, discover_columns, print_table

log = structlog.get_logger(__name__)

USAGE = "Usage: grafana-alerts <grafanaurl> <authtoken> [-c cookie] [-verbose] [-k keyfield]"


class UsageError(Exception):
    pass


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting with status 2."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(message)


def _build_parser() -> _ArgumentParser:
    parser = _ArgumentParser(prog="grafana-alerts", usage=USAGE, add_help=False)
    parser.add_argument("url")
    parser.add_argument("token")
    parser.add_argument("-c", dest="cookie", metavar="cookie", help="Cookie header value to pass through.")
    parser.add_argument("-verbose", "--verbose", dest="verbose", action="store_true")
    parser.add_argument("-k", "--key-field", dest="key_field", metavar="keyfield")
    return parser


async def show_alerts(settings: Settings, out: TextIO, color: bool = False) -> int:
    """Fetch all alerts and print them; return the process exit code."""
    async with GrafanaAlertClient(settings) as client:
        try:
            summaries = await client.list_alerts()
        except (GrafanaAlertsError, httpx.HTTPError) as exc:
            log.error("alerts.list_failed", error=str(exc))
            return 1

        alerts = await fetch_alerts(client, summaries)

    if not alerts:
        return 0

    columns = discover_columns((a.detail for a in alerts if a.detail is not None), settings.key_field)
    rows = build_rows(alerts, columns, settings.key_field)
    print_table(rows, out, color=color)
    return 0


def main(argv: Optional[Sequence[str]] = None, out: Optional[TextIO] = None) -> int:
    console.configure_logging()
    out = out or sys.stdout

    try:
        args = _build_parser().parse_args(argv)
    except UsageError as exc:
        log.error("cli.usage", error=str(exc), usage=USAGE)
        return 1

    try:
        settings = load_settings(
            args.url,
            args.token,
            cookie=args.cookie,
            verbose=args.verbose,
            key_field=args.key_field,
        )
    except ValueError as exc:
        log.error("cli.invalid_url", error=str(exc))
        return 1

    return asyncio.run(show_alerts(settings, out, color=console.supports_color(out)))


def entrypoint() -> None:
    sys.exit(main())


if __name__ == "__main__":
    entrypoint()
