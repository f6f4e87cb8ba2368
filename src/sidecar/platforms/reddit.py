"""Reddit: subreddit and post-id extraction, and the subreddit explorer."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from sidecar.groups import collect_url_groups

if TYPE_CHECKING:
    from sidecar.config import SidecarSettings
    from sidecar.index import UrlIndex
    from sidecar.note import MatchedNote

REDDIT_DOMAINS = ("reddit.com", "old.reddit.com", "new.reddit.com")

_SUBREDDIT_RE = re.compile(r"https?://(?:www\.|old\.|new\.)?reddit\.com/r/([^/?#]+)", re.IGNORECASE)
_POST_ID_RE = re.compile(r"/comments/([a-z0-9]+)", re.IGNORECASE)


def extract_subreddit(url: Any) -> str | None:
    """``https://old.reddit.com/r/python/...`` -> ``"r/python"``."""
    if not isinstance(url, str):
        return None
    match = _SUBREDDIT_RE.match(url.strip())
    return f"r/{match.group(1)}" if match else None


def extract_post_id(url: Any) -> str | None:
    """Return the id segment of a ``/comments/<id>/`` permalink."""
    if not isinstance(url, str):
        return None
    match = _POST_ID_RE.search(url)
    return match.group(1).lower() if match else None


def is_same_reddit_post(url1: Any, url2: Any) -> bool:
    """Permalinks embed a mutable title slug after the id; compare ids only."""
    if not isinstance(url1, str) or not isinstance(url2, str):
        return False
    if "reddit.com" not in url1.lower() or "reddit.com" not in url2.lower():
        return False
    post_id = extract_post_id(url1)
    return post_id is not None and post_id == extract_post_id(url2)


def get_all_reddit_notes(settings: "SidecarSettings", index: "UrlIndex") -> dict[str, list["MatchedNote"]]:
    """Group every note linking to Reddit by subreddit."""
    candidates = [n for domain in REDDIT_DOMAINS for n in index.get_files_for_domain(domain)]
    return collect_url_groups(
        candidates,
        settings,
        index,
        extract_subreddit,
        prefilter=lambda url: "reddit.com" in url.lower(),
    )
