"""GitHub: ``owner/repo`` extraction and the repository explorer."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from sidecar.groups import collect_url_groups

if TYPE_CHECKING:
    from sidecar.config import SidecarSettings
    from sidecar.index import UrlIndex
    from sidecar.note import MatchedNote

_REPO_RE = re.compile(r"https?://(?:www\.)?github\.com/([^/?#]+)/([^/?#]+)", re.IGNORECASE)

# First path segments that are GitHub pages, not owners
RESERVED_OWNERS = frozenset(
    {
        "settings",
        "notifications",
        "search",
        "explore",
        "marketplace",
        "topics",
        "collections",
        "trending",
        "sponsors",
        "pricing",
        "features",
        "enterprise",
        "team",
        "customer-stories",
        "security",
        "readme",
        "premium-support",
        "join",
    }
)


def extract_github_repo(url: Any) -> str | None:
    """``https://github.com/psf/requests/issues/1`` -> ``"psf/requests"``."""
    if not isinstance(url, str):
        return None
    match = _REPO_RE.match(url.strip())
    if not match:
        return None
    owner, repo = match.group(1), match.group(2)
    if owner.lower() in RESERVED_OWNERS:
        return None
    return f"{owner}/{repo}"


def get_all_github_notes(settings: "SidecarSettings", index: "UrlIndex") -> dict[str, list["MatchedNote"]]:
    return collect_url_groups(
        index.get_files_for_domain("github.com"),
        settings,
        index,
        extract_github_repo,
        prefilter=lambda url: "github.com" in url.lower(),
    )
