"""Configuration management for ledgerlink-ingest."""

import json
import os
from pathlib import Path
from typing import Any

from ledgerlink_ingest.models import DateFormat, Ledger

# Default config filename
CONFIG_FILENAME = "config.json"
APP_DIRNAME = "ledgerlink-ingest"
DEFAULT_TIMEOUT = 30.0


def get_config_dir() -> Path:
    """Get the config directory path (XDG compliant)."""
    xdg_config_home = os.getenv("XDG_CONFIG_HOME", str(Path.home() / ".config"))
    return Path(xdg_config_home) / APP_DIRNAME


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_config_dir() / CONFIG_FILENAME


def find_config_file() -> Path | None:
    """Find the config file in standard locations.

    Searches for config in the following order:
    1. config.json in current directory
    2. XDG config: ~/.config/ledgerlink-ingest/config.json
    """
    config_paths = [
        Path(CONFIG_FILENAME),
        get_config_path(),
    ]

    for path in config_paths:
        if path.exists():
            return path

    return None


def load_json_config(config_path: Path) -> dict[str, Any]:
    """Load configuration from a JSON file."""
    with open(config_path) as f:
        return json.load(f)  # type: ignore[no-any-return]


def save_json_config(config: dict[str, Any], config_path: Path | None = None) -> Path:
    """Save configuration to a JSON file.

    Args:
        config: Configuration dictionary to save
        config_path: Path to save to (defaults to XDG config location)

    Returns:
        Path where config was saved
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        json.dump(config, f, indent=2)
        f.write("\n")

    return config_path


def load_config(config_path: Path | None = None) -> dict[str, Any] | None:
    """Load configuration from config file.

    Args:
        config_path: Explicit path to config.json file

    Returns:
        Loaded config dict or None if not found
    """
    if config_path:
        return load_json_config(config_path)

    config_file = find_config_file()
    if config_file:
        return load_json_config(config_file)

    return None


def get_date_format(
    ledger: Ledger,
    config: dict[str, Any] | None = None,
    override: str | None = None,
) -> DateFormat:
    """Get the CSV date format for one side.

    The two sides of a reconciliation often come from different systems,
    so each side has its own setting.

    Args:
        ledger: AR or AP
        config: Loaded JSON config
        override: Format given on the command line

    Returns:
        DateFormat, MM/DD/YYYY when nothing is configured

    Raises:
        ValueError: If the configured format is not a known tag
    """
    if override:
        return DateFormat(override)

    if config:
        side = config.get("sources", {}).get(ledger.value, {})
        if fmt := side.get("date_format"):
            return DateFormat(fmt)

    return DateFormat.MM_DD_YYYY


def get_xero_credentials(
    config: dict[str, Any] | None = None,
    token_override: str | None = None,
    tenant_override: str | None = None,
) -> tuple[str | None, str | None]:
    """Get Xero access token and tenant id.

    Order: explicit override, then XERO_ACCESS_TOKEN / XERO_TENANT_ID, then config.

    Returns:
        (access_token, tenant_id), either may be None
    """
    xero_config = (config or {}).get("xero", {})

    token = token_override or os.getenv("XERO_ACCESS_TOKEN") or xero_config.get("access_token")
    tenant = tenant_override or os.getenv("XERO_TENANT_ID") or xero_config.get("tenant_id")
    return token, tenant


def get_request_timeout(config: dict[str, Any] | None = None) -> float:
    """Get the provider request timeout in seconds."""
    if config:
        timeout = config.get("xero", {}).get("timeout")
        if timeout:
            return float(timeout)
    return DEFAULT_TIMEOUT


def get_log_level(config: dict[str, Any] | None = None) -> str | None:
    """Get the configured log level name, if any."""
    if config:
        return config.get("log_level")  # type: ignore[no-any-return]
    return None


def create_default_config() -> dict[str, Any]:
    """Create a default configuration."""
    return {
        "sources": {
            Ledger.AR.value: {"date_format": DateFormat.MM_DD_YYYY.value},
            Ledger.AP.value: {"date_format": DateFormat.MM_DD_YYYY.value},
        },
        "xero": {
            "access_token": None,
            "tenant_id": None,
            "timeout": DEFAULT_TIMEOUT,
        },
        "log_level": "WARNING",
    }
