"""Web sidecar URL index library."""

from sidecar.config import SidecarSettings, load_settings
from sidecar.db import UrlDB
from sidecar.events import EventRef, Events
from sidecar.groups import get_recent_notes_with_urls, group_notes_by_domain, group_notes_by_tags, sort_groups
from sidecar.index import INDEX_UPDATED, UrlIndex
from sidecar.matcher import find_matching_notes
from sidecar.note import MatchedNote, MatchResult, Note, NoteMetadata, RecentNote
from sidecar.panel import LinkedNotesPanel
from sidecar.store import DocumentStore, VaultStore
from sidecar.urls import extract_domain, is_same_domain, is_valid_url, normalize_url, urls_match

__all__ = [
    "INDEX_UPDATED",
    "DocumentStore",
    "EventRef",
    "Events",
    "LinkedNotesPanel",
    "MatchResult",
    "MatchedNote",
    "Note",
    "NoteMetadata",
    "RecentNote",
    "SidecarSettings",
    "UrlDB",
    "UrlIndex",
    "VaultStore",
    "extract_domain",
    "find_matching_notes",
    "get_recent_notes_with_urls",
    "group_notes_by_domain",
    "group_notes_by_tags",
    "is_same_domain",
    "is_valid_url",
    "load_settings",
    "normalize_url",
    "sort_groups",
    "urls_match",
]
