# markrec/config.py
"""
Centralized configuration management.

Handles loading defaults, merging in settings from a TOML file,
applying command-line overrides and validating the result into an
immutable Settings value that is passed to every component.
"""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, MutableMapping

import tomli

log = logging.getLogger(__name__)

MEDIA_TYPES = ("book", "movie")

LISTING_URL_TEMPLATE = (
    "https://{media_type}.{site}/people/{user_id}/collect"
    "?sort=time&start={start}&filter=all&mode=list&tags_sort=count"
)

# This is the baseline configuration dictionary.
DEFAULT_CONFIG: dict[str, Any] = {
    "user": {
        "id": "",
        "cookie": "",
    },
    "result": {
        "media_type": "movie",
        "sort": "relevance",  # "rate" | "relevance" | anything else = unsorted
        "min_mention": 0,
        "min_score": 0.0,
    },
    "http": {
        "user_agent": (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36"
        ),
        "timeout": 10.0,
        "max_concurrency": 0,  # 0 = one task per page, no cap
        "site": "douban.com",
    },
}

DEFAULT_CONFIG_FILE = "markrec.toml"


class ConfigError(ValueError):
    """Raised when the configuration is missing, unreadable or invalid."""


@dataclass(frozen=True)
class Settings:
    """Validated run configuration."""

    user_id: str
    cookie: str
    media_type: str
    sort_by: str
    min_mention: int
    min_score: float
    user_agent: str
    timeout: float
    max_concurrency: int = 0
    site: str = "douban.com"

    def listing_url(self, start: int) -> str:
        return LISTING_URL_TEMPLATE.format(
            media_type=self.media_type,
            site=self.site,
            user_id=self.user_id,
            start=start,
        )


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


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return tomli.load(f)
    except (OSError, tomli.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to load or parse {path}: {e}") from e


def _as_int(value: Any, key: str) -> int:
    # bool is an int subclass; `true` is not a count.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    return value


def _as_float(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number, got {value!r}")
    return float(value)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """
    Loads configuration from defaults and merges settings from a TOML file.

    1. Starts with DEFAULT_CONFIG.
    2. If `config_path` is given it must exist; otherwise `markrec.toml`
       and then `pyproject.toml` are looked up in the current directory.
    3. A `[tool.markrec]` table is used when present, else the whole document.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path is not None:
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        candidates = [config_path]
    else:
        candidates = [Path.cwd() / DEFAULT_CONFIG_FILE, Path.cwd() / "pyproject.toml"]

    for path in candidates:
        if not path.exists():
            log.debug("No config file at %s.", path)
            continue

        toml_data = _read_toml(path)
        tool_section = toml_data.get("tool", {}).get("markrec")
        if tool_section is not None:
            project_config = tool_section
        elif path.name == "pyproject.toml":
            log.debug("No [tool.markrec] section in %s.", path)
            continue
        else:
            project_config = toml_data

        log.debug("Loading config from %s", path)
        return _deep_merge_dict(config, project_config)  # type: ignore

    log.debug("No config file found. Using default config.")
    return config


def load_settings(
    config: dict[str, Any],
    *,
    user_id: str | None = None,
    cookie: str | None = None,
) -> Settings:
    """
    Build a validated Settings value from a config dict.

    Non-empty `user_id` / `cookie` override the configured values.
    Raises ConfigError for anything that would make the run pointless.
    """
    user = config.get("user", {})
    result = config.get("result", {})
    http = config.get("http", {})

    try:
        settings = Settings(
            user_id=str(user_id or user.get("id") or "").strip(),
            cookie=str(cookie or user.get("cookie") or "").strip(),
            media_type=str(result.get("media_type", "")).strip().lower(),
            sort_by=str(result.get("sort", "")).strip().lower(),
            min_mention=_as_int(result.get("min_mention", 0), "result.min_mention"),
            min_score=_as_float(result.get("min_score", 0.0), "result.min_score"),
            user_agent=str(http.get("user_agent", "")),
            timeout=_as_float(http.get("timeout", 10.0), "http.timeout"),
            max_concurrency=_as_int(http.get("max_concurrency", 0), "http.max_concurrency"),
            site=str(http.get("site", "douban.com")),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid config value: {e}") from e

    if not settings.user_id or not settings.cookie:
        raise ConfigError("id or cookie is empty")
    if settings.media_type not in MEDIA_TYPES:
        raise ConfigError(
            f"media type must be one of {', '.join(MEDIA_TYPES)}, "
            f"got {settings.media_type!r}"
        )
    if settings.min_mention < 0:
        raise ConfigError("result.min_mention must be >= 0")
    if settings.min_score < 0:
        raise ConfigError("result.min_score must be >= 0")
    if settings.max_concurrency < 0:
        raise ConfigError("http.max_concurrency must be >= 0")

    if user_id:
        log.info("Applied override - user id set to: %s", settings.user_id)
    if cookie:
        log.info("Applied override - cookie taken from the command line")
    return settings
