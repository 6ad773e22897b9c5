"""
User configuration and download cache for yogurt.

Settings live in a single JSON file:
  ~/.yogurt/config.json  (default)

The directory can be moved via:
  - Environment variable: YOGURT_CONFIG_DIR
  - Environment variable: XDG_DATA_HOME (uses $XDG_DATA_HOME/yogurt)
  - Default: ~/.yogurt/

Rule tables fetched from a URL are cached under ``<config dir>/cache/rules``.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
from pathlib import Path
from typing import Optional

import requests

from .errors import RuleTableError
from .rules import RuleTable

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = 10.0


def get_yogurt_config_dir(create: bool = True) -> Path:
    """
    Get the yogurt configuration directory.

    Checks in order:
    1. YOGURT_CONFIG_DIR environment variable
    2. XDG_DATA_HOME environment variable (if set)
    3. ~/.yogurt/

    Args:
        create: If True, create the directory if it doesn't exist.
    """
    if "YOGURT_CONFIG_DIR" in os.environ:
        base = Path(os.environ["YOGURT_CONFIG_DIR"])
    elif "XDG_DATA_HOME" in os.environ:
        base = Path(os.environ["XDG_DATA_HOME"]) / "yogurt"
    else:
        base = Path.home() / ".yogurt"
    if create:
        base.mkdir(parents=True, exist_ok=True)
    return base


def get_config_file(create_dir: bool = True) -> Path:
    """Get the path to the yogurt configuration file."""
    return get_yogurt_config_dir(create=create_dir) / "config.json"


def read_config() -> dict:
    """
    Read the yogurt configuration file.

    Returns:
        Dictionary with configuration values (empty dict if the file doesn't exist)
    """
    config_file = get_config_file(create_dir=False)
    if not config_file.exists():
        return {}
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable config file %s: %s", config_file, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: expected a JSON object", config_file)
        return {}
    return data


def write_config(config: dict) -> None:
    """Merge ``config`` into the configuration file, preserving other settings."""
    config_file = get_config_file()
    existing_config = read_config()
    existing_config.update(config)
    with open(config_file, "w", encoding="utf-8") as f:
        json.dump(existing_config, f, indent=2, ensure_ascii=False)


def get_default_tagger() -> Optional[str]:
    return read_config().get("default_tagger")


def set_default_tagger(tagger: str) -> None:
    write_config({"default_tagger": tagger})


def get_default_language() -> Optional[str]:
    return read_config().get("default_language")


def set_default_language(language: str) -> None:
    write_config({"default_language": language})


def get_rules_url() -> Optional[str]:
    return read_config().get("rules_url")


def set_rules_url(url: Optional[str]) -> None:
    write_config({"rules_url": url})


def get_cache_dir(create: bool = True) -> Path:
    """Return the cache directory used for downloaded rule tables."""
    cache_dir = get_yogurt_config_dir(create=create) / "cache"
    if create:
        cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir


def _rules_cache_file(url: str, create_dir: bool = True) -> Path:
    digest = hashlib.sha1(url.encode("utf-8")).hexdigest()[:16]
    rules_dir = get_cache_dir(create=create_dir) / "rules"
    if create_dir:
        rules_dir.mkdir(parents=True, exist_ok=True)
    return rules_dir / f"{digest}.json"


def fetch_rule_table(url: str, *, refresh: bool = False, timeout: float = DOWNLOAD_TIMEOUT) -> RuleTable:
    """
    Download a JSON rule table and load it, caching the payload on disk.

    A cached copy is used unless ``refresh`` is set.

    Raises:
        RuleTableError: if the download fails or the payload is not a rule table.
    """
    cache_file = _rules_cache_file(url, create_dir=False)
    if cache_file.exists() and not refresh:
        logger.debug("Using cached rule table for %s (%s)", url, cache_file)
        return RuleTable.from_file(cache_file)

    logger.info("Downloading rule table from %s", url)
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except requests.RequestException as exc:
        raise RuleTableError(f"failed to download rule table from {url}: {exc}") from exc
    except ValueError as exc:
        raise RuleTableError(f"rule table at {url} is not valid JSON: {exc}") from exc

    name = data.get("name") if isinstance(data, dict) else None
    table = RuleTable.from_dict(data, name=name or url.rstrip("/").rsplit("/", 1)[-1])
    cache_file = _rules_cache_file(url, create_dir=True)
    try:
        with open(cache_file, "w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2, ensure_ascii=False)
    except OSError as exc:
        logger.warning("Could not cache rule table %s at %s: %s", url, cache_file, exc)
    return table
