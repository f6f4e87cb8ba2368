"""Corpus-wide groupings for the explorer panels.

Each aggregator scans the indexed notes once and returns
``{group_key: [MatchedNote, ...]}`` with one entry per note per group and
members ordered newest first.  The per-platform aggregators live next to
their extractors in :mod:`sidecar.platforms`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Literal

from sidecar.note import MatchedNote, Note, RecentNote
from sidecar.parser import frontmatter_tags
from sidecar.urls import extract_domain, is_valid_url, iter_url_values

if TYPE_CHECKING:
    from sidecar.config import SidecarSettings
    from sidecar.index import UrlIndex

SortOrder = Literal["alpha", "count", "recent"]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def add_to_group(groups: dict[str, list[MatchedNote]], key: str, match: MatchedNote) -> None:
    """Append *match* under *key* unless that note is already in the group."""
    members = groups.setdefault(key, [])
    if not any(m.note is match.note for m in members):
        members.append(match)


def sort_groups_by_recency(groups: dict[str, list[MatchedNote]]) -> dict[str, list[MatchedNote]]:
    for members in groups.values():
        members.sort(key=lambda m: m.note.mtime, reverse=True)
    return groups


def first_url(note: Note, settings: "SidecarSettings", index: "UrlIndex") -> tuple[str, str] | None:
    """``(property_name, url)`` of the first valid URL on *note*."""
    frontmatter = index.frontmatter_for(note)
    for prop_name, url in iter_url_values(frontmatter, settings.url_property_fields):
        if is_valid_url(url):
            return prop_name, url
    return None


def collect_url_groups(
    candidates: Iterable[Note],
    settings: "SidecarSettings",
    index: "UrlIndex",
    key_for: Callable[[str], str | None],
    *,
    prefilter: Callable[[str], bool] | None = None,
) -> dict[str, list[MatchedNote]]:
    """Group *candidates* by the key each URL value yields.

    A note lands in every group any of its URLs maps to.  *prefilter* is a
    cheap string test run before *key_for*.
    """
    groups: dict[str, list[MatchedNote]] = {}
    seen: set[int] = set()
    for note in candidates:
        if id(note) in seen:
            continue
        seen.add(id(note))
        frontmatter = index.frontmatter_for(note)
        for prop_name, url in iter_url_values(frontmatter, settings.url_property_fields):
            if prefilter is not None and not prefilter(url):
                continue
            key = key_for(url)
            if key:
                add_to_group(groups, key, MatchedNote(note, "tld", url, prop_name))
    return sort_groups_by_recency(groups)


# ---------------------------------------------------------------------------
# Aggregators
# ---------------------------------------------------------------------------


def group_notes_by_tags(
    settings: "SidecarSettings",
    index: "UrlIndex",
    allowed_tags: set[str] | None = None,
) -> dict[str, list[MatchedNote]]:
    """Group web notes by front-matter tags unioned with inline tags.

    With a non-empty *allowed_tags* only those tags become groups; ``None``
    or an empty set keeps every tag.
    """
    tag_map: dict[str, list[MatchedNote]] = {}
    for note in index.get_all_files_with_urls():
        found = first_url(note, settings, index)
        if found is None:
            continue
        prop_name, url = found
        match = MatchedNote(note, "tld", url, prop_name)

        tags = dict.fromkeys(frontmatter_tags(index.frontmatter_for(note)) + index.tags_for(note))
        for tag in tags:
            if allowed_tags and tag not in allowed_tags:
                continue
            add_to_group(tag_map, tag, match)

    return sort_groups_by_recency(tag_map)


def group_notes_by_selected_tags(settings: "SidecarSettings", index: "UrlIndex") -> dict[str, list[MatchedNote]]:
    """Tag groups restricted to ``settings.selected_tags_allowlist``."""
    return group_notes_by_tags(settings, index, settings.allowed_tags())


def group_notes_by_domain(settings: "SidecarSettings", index: "UrlIndex") -> dict[str, list[MatchedNote]]:
    """Group web notes by the domain of their first valid URL."""
    domain_map: dict[str, list[MatchedNote]] = {}
    for note in index.get_all_files_with_urls():
        found = first_url(note, settings, index)
        if found is None:
            continue
        prop_name, url = found
        domain = extract_domain(url)
        if domain:
            add_to_group(domain_map, domain, MatchedNote(note, "tld", url, prop_name))
    return sort_groups_by_recency(domain_map)


def get_recent_notes_with_urls(
    settings: "SidecarSettings",
    index: "UrlIndex",
    limit: int | None = None,
) -> list[RecentNote]:
    """Recently modified web notes, one entry per note, newest first."""
    if limit is None:
        limit = settings.recent_notes_count
    recent: list[RecentNote] = []
    for note in index.get_recent_files():
        found = first_url(note, settings, index)
        if found is not None:
            prop_name, url = found
            recent.append(RecentNote(note, url, prop_name, note.mtime))
    recent.sort(key=lambda r: r.modified_time, reverse=True)
    return recent[: max(0, limit)]


def sort_groups(
    groups: dict[str, list[MatchedNote]],
    order: SortOrder = "alpha",
) -> list[tuple[str, list[MatchedNote]]]:
    """Order group entries for display; ties fall back to the key."""

    def newest(members: list[MatchedNote]) -> float:
        return max((m.note.mtime for m in members), default=0.0)

    items = sorted(groups.items(), key=lambda item: item[0].lower())
    if order == "count":
        items.sort(key=lambda item: len(item[1]), reverse=True)
    elif order == "recent":
        items.sort(key=lambda item: newest(item[1]), reverse=True)
    return items
