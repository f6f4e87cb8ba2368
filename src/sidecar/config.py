"""Sidecar settings and their TOML loader.

A settings file looks like::

    [sidecar]
    url_property_fields = ["source", "url", "URL"]
    enable_tld_search = true
    enable_subreddit_filter = true
    selected_tags_allowlist = "todo, reading"
    recent_notes_cache_limit = 150

The ``[sidecar]`` table is optional; top-level keys are accepted too.  List
fields may also be written as comma-separated strings.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Callable

LOGGER = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SIDECAR_CONFIG"

_LIST_FIELDS = {"url_property_fields", "youtube_channel_property_fields"}


@dataclass(slots=True)
class SidecarSettings:
    #: Front-matter properties that may hold a URL, in priority order
    url_property_fields: list[str] = field(default_factory=lambda: ["source", "url", "URL"])
    #: Property written when creating a note for a URL
    primary_url_property: str = "source"
    enable_tld_search: bool = True
    enable_subreddit_explorer: bool = False
    enable_subreddit_filter: bool = False
    enable_youtube_channel_filter: bool = False
    enable_youtube_channel_explorer: bool = False
    #: Front-matter properties holding a YouTube channel name, in priority order
    youtube_channel_property_fields: list[str] = field(default_factory=lambda: ["channel", "author"])
    enable_twitter_explorer: bool = False
    enable_github_explorer: bool = False
    enable_tag_grouping: bool = False
    enable_selected_tag_grouping: bool = False
    selected_tags_allowlist: str = ""
    recent_notes_count: int = 10
    #: Safety cap on the index's recency cache
    recent_notes_cache_limit: int = 150

    def allowed_tags(self) -> set[str]:
        """Parse ``selected_tags_allowlist`` into ``#``-prefixed tags."""
        tags = (t.strip() for t in self.selected_tags_allowlist.split(","))
        return {t if t.startswith("#") else f"#{t}" for t in tags if t}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SidecarSettings":
        data = data.get("sidecar", data)
        known = {f.name: f for f in fields(cls)}
        defaults = cls()
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                LOGGER.warning("Ignoring unknown setting %r", key)
                continue
            if key in _LIST_FIELDS and isinstance(value, str):
                value = [v.strip() for v in value.split(",") if v.strip()]
            expected = type(getattr(defaults, key))
            if expected is int and isinstance(value, bool) or not isinstance(value, expected):
                LOGGER.warning(
                    "Setting %r should be %s, got %r; using default",
                    key,
                    expected.__name__,
                    value,
                )
                continue
            if key in _LIST_FIELDS:
                value = [v for v in value if isinstance(v, str) and v.strip()]
            kwargs[key] = value
        settings = cls(**kwargs)
        if settings.recent_notes_cache_limit < 0:
            LOGGER.warning("recent_notes_cache_limit must be >= 0; clamping to 0")
            settings.recent_notes_cache_limit = 0
        return settings


SettingsSource = Callable[[], SidecarSettings]


def load_settings(path: Path | str | None = None) -> SidecarSettings:
    """Load settings from a TOML file.

    When *path* is ``None`` the ``SIDECAR_CONFIG`` environment variable is
    consulted.  A missing file yields the defaults.
    """
    if path is None:
        env_path = os.getenv(CONFIG_ENV_VAR)
        if not env_path:
            return SidecarSettings()
        path = env_path
    path = Path(path)
    if not path.exists():
        LOGGER.info("No settings file at %s; using defaults", path)
        return SidecarSettings()
    with open(path, "rb") as fh:
        data = tomllib.load(fh)
    return SidecarSettings.from_dict(data)


def settings_source(settings: SidecarSettings | SettingsSource) -> SettingsSource:
    """Wrap a settings object in a getter so callers always re-read it."""
    if callable(settings):
        return settings
    return lambda: settings
