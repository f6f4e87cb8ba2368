"""UrlIndex: incremental in-memory index of the URLs referenced by notes."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from sidecar.config import SettingsSource, SidecarSettings, settings_source
from sidecar.events import EventRef, Events
from sidecar.note import Note
from sidecar.store import DocumentStore
from sidecar.urls import extract_domain, is_valid_url, iter_url_values, normalize_url

LOGGER = logging.getLogger(__name__)

INDEX_UPDATED = "index-updated"

# Insertion-ordered set of notes
_NoteSet = dict[Note, None]


class UrlIndex(Events):
    """Maps exact URLs, normalised URLs and domains to the notes citing them.

    The reverse map ``path -> urls`` is the only source used to undo a note's
    previous contribution, so removal never has to re-parse stale content.
    Forward maps hold :class:`Note` objects (identity), which is why a rename
    only has to move the reverse-map key.

    Emits ``"index-updated"`` (no payload) after mutations that touched the
    index; consumers re-query.
    """

    def __init__(
        self,
        store: DocumentStore,
        settings: SidecarSettings | SettingsSource | None = None,
    ) -> None:
        super().__init__()
        self.store = store
        self._get_settings = settings_source(settings or SidecarSettings())
        self._url_to_files: dict[str, _NoteSet] = {}
        self._normalized_to_files: dict[str, _NoteSet] = {}
        self._domain_to_files: dict[str, _NoteSet] = {}
        self._file_to_urls: dict[str, set[str]] = {}
        self._recent_files: list[Note] = []
        self._listeners: list[EventRef] = []

    @property
    def settings(self) -> SidecarSettings:
        return self._get_settings()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Build the index and subscribe to the store's change stream."""
        self.rebuild_index()
        if self._listeners:
            return
        self._listeners = [
            self.store.on("changed", self.update_file_index),
            self.store.on("create", self.update_file_index),
            self.store.on("delete", self.delete_file),
            self.store.on("rename", self.rename_file),
        ]

    def destroy(self) -> None:
        """Unsubscribe from the store and drop all state.  Safe to call twice."""
        for ref in self._listeners:
            self.store.offref(ref)
        self._listeners = []
        self._clear()

    @property
    def is_initialized(self) -> bool:
        return bool(self._listeners)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def rebuild_index(self) -> None:
        """Clear and re-index every note, then emit a single update."""
        self._clear()
        for note in self.store.list_notes():
            self._index_note(note)

        cap = self._cache_limit()
        with_urls = sorted(self.get_all_files_with_urls(), key=lambda n: n.mtime, reverse=True)
        self._recent_files = with_urls[:cap]
        LOGGER.info(
            "Indexed %d URLs across %d notes",
            len(self._url_to_files),
            len(self._file_to_urls),
        )
        self.trigger(INDEX_UPDATED)

    def update_file_index(self, note: Note) -> None:
        """Replace *note*'s entries with the URLs its metadata holds now."""
        had_urls = self._remove(note)
        has_urls = self._index_note(note)
        if has_urls:
            self._insert_recent(note)
        if had_urls or has_urls:
            self.trigger(INDEX_UPDATED)

    def remove_file_from_index(self, note: Note) -> None:
        """Drop every entry *note* contributed, as recorded in the reverse map."""
        self._remove(note)

    def delete_file(self, note: Note) -> None:
        self._remove(note)
        self.trigger(INDEX_UPDATED)

    def rename_file(self, note: Note, old_path: str) -> None:
        """Move the reverse-map entry; forward maps already hold the same object."""
        urls = self._file_to_urls.pop(old_path, None)
        self._trim_recent()
        if urls is None:
            return
        self._file_to_urls[note.path] = urls
        self.trigger(INDEX_UPDATED)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_files_for_url(self, url: str) -> list[Note]:
        return list(self._url_to_files.get(url, ()))

    def get_files_for_normalized_url(self, url: str) -> list[Note]:
        normalized = normalize_url(url)
        if not normalized:
            return []
        return list(self._normalized_to_files.get(normalized, ()))

    def get_files_for_domain(self, domain: str) -> list[Note]:
        return list(self._domain_to_files.get(domain, ()))

    def get_all_files_with_urls(self) -> list[Note]:
        """Resolve every indexed path to a live note, skipping stale paths."""
        notes: list[Note] = []
        for path in self._file_to_urls:
            note = self.store.get_note(path)
            if note is not None:
                notes.append(note)
        return notes

    def get_recent_files(self, limit: int | None = None) -> list[Note]:
        """Most recently modified notes with URLs, at most the cache limit."""
        cap = self._cache_limit()
        count = cap if limit is None else max(0, min(limit, cap))
        return self._recent_files[:count]

    def get_urls_for_file(self, path: str) -> set[str]:
        return set(self._file_to_urls.get(path, ()))

    def iter_entries(self) -> Iterator[tuple[str, str]]:
        """Yield ``(path, url)`` for every indexed URL."""
        for path, urls in self._file_to_urls.items():
            for url in sorted(urls):
                yield path, url

    def domains(self) -> list[str]:
        return sorted(self._domain_to_files)

    def iter_domains(self) -> Iterator[str]:
        """Indexed domains in insertion order (no sort)."""
        return iter(self._domain_to_files)

    def frontmatter_for(self, note: Note) -> dict[str, Any]:
        """Current front-matter of *note*; ``{}`` when it cannot be read."""
        try:
            metadata = self.store.get_metadata(note)
        except Exception as exc:  # noqa: BLE001
            LOGGER.debug("Metadata lookup failed for %s: %s", note.path, exc)
            return {}
        if metadata is None or not isinstance(metadata.frontmatter, dict):
            return {}
        return metadata.frontmatter

    def tags_for(self, note: Note) -> list[str]:
        """Inline tags of *note*; empty when metadata cannot be read."""
        try:
            metadata = self.store.get_metadata(note)
        except Exception as exc:  # noqa: BLE001
            LOGGER.debug("Metadata lookup failed for %s: %s", note.path, exc)
            return []
        return list(metadata.tags) if metadata is not None else []

    def __len__(self) -> int:
        return len(self._file_to_urls)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _clear(self) -> None:
        self._url_to_files.clear()
        self._normalized_to_files.clear()
        self._domain_to_files.clear()
        self._file_to_urls.clear()
        self._recent_files = []

    def _cache_limit(self) -> int:
        return max(0, self.settings.recent_notes_cache_limit)

    def _collect_urls(self, note: Note) -> set[str]:
        frontmatter = self.frontmatter_for(note)
        return {
            url
            for _, url in iter_url_values(frontmatter, self.settings.url_property_fields)
            if is_valid_url(url)
        }

    def _index_note(self, note: Note) -> bool:
        """Insert *note* into every map for its current URLs."""
        urls = self._collect_urls(note)
        if not urls:
            return False
        self._file_to_urls[note.path] = urls
        for url in urls:
            _add(self._url_to_files, url, note)
            normalized = normalize_url(url)
            if normalized:
                _add(self._normalized_to_files, normalized, note)
            domain = extract_domain(url)
            if domain:
                _add(self._domain_to_files, domain, note)
        return True

    def _remove(self, note: Note) -> bool:
        """Undo *note*'s contribution; returns whether it had any entries."""
        self._recent_files = [n for n in self._recent_files if n is not note]
        self._trim_recent()
        urls = self._file_to_urls.pop(note.path, None)
        if urls is None:
            return False
        for url in urls:
            _discard(self._url_to_files, url, note)
            normalized = normalize_url(url)
            if normalized:
                _discard(self._normalized_to_files, normalized, note)
            domain = extract_domain(url)
            if domain:
                _discard(self._domain_to_files, domain, note)
        return True

    def _insert_recent(self, note: Note) -> None:
        """Splice *note* in by mtime (newest first) and enforce the cap."""
        position = 0
        while position < len(self._recent_files) and self._recent_files[position].mtime > note.mtime:
            position += 1
        self._recent_files.insert(position, note)
        self._trim_recent()

    def _trim_recent(self) -> None:
        # The cap may have been lowered since the last mutation
        del self._recent_files[self._cache_limit() :]


def _add(mapping: dict[str, _NoteSet], key: str, note: Note) -> None:
    mapping.setdefault(key, {})[note] = None


def _discard(mapping: dict[str, _NoteSet], key: str, note: Note) -> None:
    notes = mapping.get(key)
    if notes is None:
        return
    notes.pop(note, None)
    if not notes:
        del mapping[key]
