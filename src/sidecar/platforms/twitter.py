"""Twitter / X: handle extraction and the user explorer."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from sidecar.groups import collect_url_groups

if TYPE_CHECKING:
    from sidecar.config import SidecarSettings
    from sidecar.index import UrlIndex
    from sidecar.note import MatchedNote

TWITTER_DOMAINS = ("twitter.com", "x.com", "mobile.twitter.com", "mobile.x.com")

_USER_RE = re.compile(r"https?://(?:www\.|mobile\.)?(?:twitter\.com|x\.com)/([^/?#]+)", re.IGNORECASE)

# Site paths that look like handles
RESERVED_PATHS = frozenset(
    {"home", "explore", "notifications", "messages", "search", "settings", "i", "compose", "hashtag"}
)


def extract_twitter_user(url: Any) -> str | None:
    """``https://x.com/jack/status/20`` -> ``"@jack"``."""
    if not isinstance(url, str):
        return None
    match = _USER_RE.match(url.strip())
    if not match:
        return None
    user = match.group(1)
    if user.lower() in RESERVED_PATHS:
        return None
    return f"@{user}"


def get_all_twitter_notes(settings: "SidecarSettings", index: "UrlIndex") -> dict[str, list["MatchedNote"]]:
    candidates = [n for domain in TWITTER_DOMAINS for n in index.get_files_for_domain(domain)]
    return collect_url_groups(
        candidates,
        settings,
        index,
        extract_twitter_user,
        prefilter=lambda url: "twitter.com" in url.lower() or "x.com" in url.lower(),
    )
