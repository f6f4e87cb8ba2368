"""YouTube: domain detection, channel lookup, and the channel explorer.

Unlike the other platforms the channel is not in the URL; it comes from the
note's own front-matter (``channel: "[[Some Channel]]"`` and the like).
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from sidecar.groups import add_to_group, sort_groups_by_recency
from sidecar.note import MatchedNote
from sidecar.parser import strip_wikilink
from sidecar.urls import iter_url_values

if TYPE_CHECKING:
    from sidecar.config import SidecarSettings
    from sidecar.index import UrlIndex

# youtube.com, m./mobile./www. subdomains, youtube-nocookie.com,
# country variants like youtube.co.uk, and youtu.be
_YOUTUBE_RE = re.compile(
    r"^https?://(?:(?:www\.|m\.|mobile\.)?youtube(?:-nocookie)?\.(?:com|[a-z]{2}(?:\.[a-z]{2})?)|youtu\.be)(?:[/?#:]|$)",
    re.IGNORECASE,
)


def is_youtube_domain(url: Any) -> bool:
    return isinstance(url, str) and bool(_YOUTUBE_RE.match(url.strip()))


def extract_youtube_channel(frontmatter: Mapping[str, Any] | None, property_fields: Iterable[str]) -> str | None:
    """First non-empty channel value among *property_fields* (lists: first item)."""
    if not isinstance(frontmatter, Mapping):
        return None
    for prop_name in property_fields:
        value = frontmatter.get(prop_name)
        if isinstance(value, list):
            value = value[0] if value else None
        if isinstance(value, str) and value.strip():
            return strip_wikilink(value) or None
    return None


def get_all_youtube_notes(settings: "SidecarSettings", index: "UrlIndex") -> dict[str, list[MatchedNote]]:
    """Group every note linking to YouTube by its channel property."""
    channel_map: dict[str, list[MatchedNote]] = {}
    property_fields = settings.youtube_channel_property_fields
    if not property_fields:
        return channel_map

    for note in index.get_all_files_with_urls():
        frontmatter = index.frontmatter_for(note)
        for prop_name, url in iter_url_values(frontmatter, settings.url_property_fields):
            if not is_youtube_domain(url):
                continue
            channel = extract_youtube_channel(frontmatter, property_fields)
            if not channel:
                break
            add_to_group(channel_map, channel, MatchedNote(note, "tld", url, prop_name))

    return sort_groups_by_recency(channel_map)
