"""Linked-notes panel for the web sidecar.

Shows every note related to the URL currently open in the browser pane,
plus the enabled explorer groupings.  Rendering produces plain dicts; the
host turns them into widgets.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sidecar.groups import get_recent_notes_with_urls, group_notes_by_selected_tags, group_notes_by_tags, sort_groups
from sidecar.index import INDEX_UPDATED
from sidecar.matcher import find_matching_notes
from sidecar.platforms import get_all_github_notes, get_all_reddit_notes, get_all_twitter_notes, get_all_youtube_notes

if TYPE_CHECKING:
    from sidecar.events import EventRef
    from sidecar.index import UrlIndex
    from sidecar.note import MatchedNote


def linked_notes_panel_ui(index: "UrlIndex", url: str | None) -> dict[str, Any]:
    """Return the panel model for *url* (or the recent-notes view when ``None``)."""
    settings = index.settings
    if not url:
        return {
            "url": None,
            "recent": [
                {"path": r.note.path, "title": r.note.title, "url": r.url, "mtime": r.modified_time}
                for r in get_recent_notes_with_urls(settings, index)
            ],
        }
    result = find_matching_notes(url, settings, index)
    return {
        "url": url,
        "exact": [m.to_dict() for m in result.exact],
        "same_domain": [m.to_dict() for m in result.same_domain],
        "subreddits": _groups_ui(result.platform_groups or {}),
        "matched_channel": result.matched_channel,
    }


def explorer_sections_ui(index: "UrlIndex") -> dict[str, list[dict[str, Any]]]:
    """Return the enabled explorer sections, keyed by section id."""
    settings = index.settings
    sections: dict[str, dict[str, list["MatchedNote"]]] = {}
    if settings.enable_subreddit_explorer:
        sections["subreddit"] = get_all_reddit_notes(settings, index)
    if settings.enable_youtube_channel_explorer:
        sections["youtube"] = get_all_youtube_notes(settings, index)
    if settings.enable_twitter_explorer:
        sections["twitter"] = get_all_twitter_notes(settings, index)
    if settings.enable_github_explorer:
        sections["github"] = get_all_github_notes(settings, index)
    if settings.enable_tag_grouping:
        sections["tag"] = group_notes_by_tags(settings, index)
    if settings.enable_selected_tag_grouping and settings.allowed_tags():
        sections["selected-tag"] = group_notes_by_selected_tags(settings, index)
    return {key: _groups_ui(groups) for key, groups in sections.items() if groups}


def _groups_ui(groups: dict[str, list["MatchedNote"]]) -> list[dict[str, Any]]:
    return [
        {"key": key, "count": len(members), "notes": [m.to_dict() for m in members]}
        for key, members in sort_groups(groups, "alpha")
    ]


class LinkedNotesPanel:
    """Keeps a rendered panel model in step with the index."""

    def __init__(self, index: "UrlIndex") -> None:
        self._index = index
        self._ref: "EventRef | None" = None
        self.current_url: str | None = None
        self.model: dict[str, Any] = {}
        self.render_count = 0

    def on_load(self) -> None:
        if self._ref is None:
            self._ref = self._index.on(INDEX_UPDATED, self.on_index_update)
        self.render()

    def on_index_update(self) -> None:
        self.render()

    def on_url_change(self, url: str | None) -> None:
        self.current_url = url
        self.render()

    def render(self) -> dict[str, Any]:
        self.model = linked_notes_panel_ui(self._index, self.current_url)
        self.render_count += 1
        return self.model

    def close(self) -> None:
        """Stop listening for index updates.  Safe to call twice."""
        if self._ref is not None:
            self._index.offref(self._ref)
            self._ref = None
