"""
Configuration loading for grafana-alerts.

The Grafana URL and token always come from the command line. Everything
else is resolved in priority order (highest → lowest):
  1. Command-line options (-c, -verbose, -k)
  2. Environment variables (GRAFANA_COOKIE, GRAFANA_ALERTS_KEY_FIELD, …)
  3. ~/.config/grafana-alerts/config.yaml
  4. Built-in defaults
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import structlog
import yaml

log = structlog.get_logger(__name__)

_CONFIG_FILE = Path.home() / ".config" / "grafana-alerts" / "config.yaml"

DEFAULT_KEY_FIELD = "Name"
DEFAULT_ERROR_FILE = "error.html"

_SCHEMES = ("https://", "http://")


class Settings:
    """Runtime configuration resolved at startup."""

    def __init__(
        self,
        base_url: str,
        api_token: str,
        cookie: Optional[str] = None,
        verbose: bool = False,
        key_field: str = DEFAULT_KEY_FIELD,
        error_file: str = DEFAULT_ERROR_FILE,
        ssl_verify: bool = True,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = base_url
        self.api_token = api_token
        self.cookie = cookie
        self.verbose = verbose
        self.key_field = key_field
        self.error_file = error_file
        self.ssl_verify = ssl_verify
        self.timeout = timeout

    def __repr__(self) -> str:
        return (
            f"Settings(url={self.base_url!r}, key_field={self.key_field!r}, "
            f"cookie={'set' if self.cookie else 'unset'}, verbose={self.verbose}, "
            f"ssl_verify={self.ssl_verify}, timeout={self.timeout})"
        )


def base_address(url: str) -> Optional[str]:
    """Return scheme + host of *url*, or ``None`` if the scheme is not http(s).

    >>> base_address("https://grafana.example.com/d/abc?orgId=1")
    'https://grafana.example.com'
    """
    for scheme in _SCHEMES:
        if url.startswith(scheme):
            end = url.find("/", len(scheme))
            base = url if end < 0 else url[:end]
            return base if len(base) > len(scheme) else None
    return None


def _load_yaml_config(path: Path) -> dict:
    """Load optional YAML config file, returning an empty dict if absent."""
    if path.exists():
        with path.open() as f:
            data = yaml.safe_load(f) or {}
        log.debug("config.yaml_loaded", path=str(path))
        return data
    return {}


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("false", "0", "no", "off")
    return bool(value)


def load_settings(
    url: str,
    token: str,
    cookie: Optional[str] = None,
    verbose: bool = False,
    key_field: Optional[str] = None,
    config_file: Optional[Path] = None,
) -> Settings:
    """Build Settings from CLI values, environment and the YAML file.

    Raises ``ValueError`` if *url* is not an http:// or https:// URL.
    """
    base = base_address(url)
    if base is None:
        raise ValueError(f"Invalid url: '{url}'")

    yaml_cfg = _load_yaml_config(config_file or _CONFIG_FILE)

    cookie = cookie or os.environ.get("GRAFANA_COOKIE") or yaml_cfg.get("cookie")
    key_field = (
        key_field
        or os.environ.get("GRAFANA_ALERTS_KEY_FIELD")
        or yaml_cfg.get("key_field")
        or DEFAULT_KEY_FIELD
    )
    error_file = (
        os.environ.get("GRAFANA_ALERTS_ERROR_FILE")
        or yaml_cfg.get("error_file")
        or DEFAULT_ERROR_FILE
    )
    ssl_verify = _as_bool(os.environ.get("GRAFANA_SSL_VERIFY", yaml_cfg.get("ssl_verify", True)))

    # No timeout unless explicitly configured: a hung request stalls the run.
    raw_timeout = os.environ.get("GRAFANA_TIMEOUT", yaml_cfg.get("timeout"))
    timeout = float(raw_timeout) if raw_timeout not in (None, "") else None

    settings = Settings(
        base_url=base,
        api_token=token,
        cookie=cookie,
        verbose=verbose,
        key_field=key_field,
        error_file=error_file,
        ssl_verify=ssl_verify,
        timeout=timeout,
    )
    log.debug("config.resolved", settings=repr(settings))
    return settings
