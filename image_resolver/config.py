# image_resolver/config.py
"""
Centralized configuration management.

Handles loading defaults, merging in settings from pyproject.toml,
and applying runtime overrides.
"""
from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, MutableMapping

import tomli

log = logging.getLogger(__name__)

# Off-site hosts that search-engine result pages commonly embed full images from.
DEFAULT_SEARCH_IMAGE_HOSTS = [
    "twimg.com",
    "imgur.com",
    "reddit.com",
    "redd.it",
    "githubusercontent.com",
]

# CDN domains that serve the actual pixels behind photo-share links.
DEFAULT_PHOTO_CDN_HOSTS = [
    "googleusercontent.com",
    "ggpht.com",
]

# This is the baseline configuration dictionary.
DEFAULT_CONFIG: dict[str, Any] = {
    # Full browser identification, used for page fetches and the first image tier.
    "user_agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    ),
    # Shorter identification used when loading search result and share pages.
    "share_user_agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    ),
    # Non-browser identification for the second image tier.
    "minimal_user_agent": "curl/7.68.0",
    # --- Timeouts (seconds) ---
    "page_timeout": 15.0,
    "image_timeout": 20.0,
    "minimal_timeout": 15.0,
    "bare_timeout": 30.0,
    # --- Extraction ---
    "photo_share_size": 2048,
    "search_image_hosts": DEFAULT_SEARCH_IMAGE_HOSTS,
    "photo_cdn_hosts": DEFAULT_PHOTO_CDN_HOSTS,
    # Render pages with a headless browser when a plain HTTP fetch fails.
    "use_playwright_as_fallback": False,
}


def _deep_merge_dict(
    base: MutableMapping[str, Any], overrides: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Recursively merge dicts."""
    for key, value in overrides.items():
        if isinstance(value, MutableMapping) and isinstance(
            base.get(key), MutableMapping
        ):
            base[key] = _deep_merge_dict(base[key], value)
        else:
            base[key] = value
    return base


def _read_tool_section(pyproject_path: Path) -> dict[str, Any]:
    """The `[tool.image_resolver]` table of a pyproject file, or {} if unusable."""
    try:
        with pyproject_path.open("rb") as f:
            toml_data = tomli.load(f)
    except (OSError, tomli.TOMLDecodeError) as e:
        log.warning("Could not read %s: %s. Using default config.", pyproject_path, e)
        return {}

    tool = toml_data.get("tool", {})
    section = tool.get("image_resolver", {}) if isinstance(tool, dict) else None
    if not isinstance(section, dict):
        log.warning(
            "[tool.image_resolver] in %s is not a table. Using default config.",
            pyproject_path,
        )
        return {}
    return section


def load_config(pyproject_path: Path | None = None) -> dict[str, Any]:
    """
    Defaults, overlaid with `[tool.image_resolver]` from pyproject.toml.

    The file is looked up in the current directory unless a path is given.
    Every call returns a new dict, so callers may mutate it freely.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    path = pyproject_path or Path.cwd() / "pyproject.toml"
    if not path.exists():
        log.debug("No pyproject.toml at %s. Using default config.", path)
        return config

    section = _read_tool_section(path)
    if section:
        log.info("Loading config from %s", path)
        _deep_merge_dict(config, section)
    return config
