"""Tabulate Grafana alerts from the alerting REST API."""

__version__ = "0.1.0"
