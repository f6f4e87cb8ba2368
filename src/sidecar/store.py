"""Document stores: the host side of the URL index.

A store owns the notes, their parsed metadata, and the change notifications
the index listens to:

``"create"``  ``(note)``
``"changed"`` ``(note)``      content or metadata edited
``"delete"``  ``(note)``
``"rename"``  ``(note, old_path)``  ``note.path`` already holds the new path

:class:`VaultStore` is a store over a directory of ``.md`` files.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Callable, Protocol, runtime_checkable

from sidecar.events import EventRef, Events
from sidecar.note import Note, NoteMetadata
from sidecar.parser import parse_metadata, render_note

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class DocumentStore(Protocol):
    """Interface the URL index requires from its host."""

    def list_notes(self) -> list[Note]:
        """Return every markdown note currently in the store."""
        ...

    def get_note(self, path: str) -> Note | None:
        """Resolve *path* to a live note, or ``None`` when it no longer exists."""
        ...

    def get_metadata(self, note: Note) -> NoteMetadata | None:
        """Return the parsed metadata of *note*, or ``None`` when unavailable."""
        ...

    def on(self, name: str, callback: Callable[..., Any]) -> EventRef: ...

    def offref(self, ref: EventRef) -> None: ...


class VaultStore(Events):
    """Markdown vault on disk, with change notifications.

    Mutations made through :meth:`create_note`, :meth:`write_note`,
    :meth:`rename_note` and :meth:`delete_note` fire the matching event
    immediately.  Edits made behind the store's back are picked up by
    :meth:`rescan`.
    """

    def __init__(self, vault_dir: Path | str) -> None:
        super().__init__()
        self.vault_dir = Path(vault_dir)
        self._notes: dict[str, Note] = {}
        self._metadata: dict[str, NoteMetadata] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> None:
        """(Re-)scan the vault silently, replacing all cached notes."""
        self._notes = {}
        self._metadata = {}
        for file_path in self._scan():
            self._read(self._rel(file_path))

    def rescan(self) -> None:
        """Diff the vault against the cache and fire events for the differences."""
        on_disk = {self._rel(p) for p in self._scan()}
        for path in sorted(set(self._notes) - on_disk):
            note = self._notes.pop(path)
            self._metadata.pop(path, None)
            self.trigger("delete", note)
        for path in sorted(on_disk):
            note = self._notes.get(path)
            if note is None:
                self.trigger("create", self._read(path))
            elif self._abs(path).stat().st_mtime != note.mtime:
                self._read(path)
                self.trigger("changed", note)

    # ------------------------------------------------------------------
    # DocumentStore
    # ------------------------------------------------------------------

    def list_notes(self) -> list[Note]:
        return list(self._notes.values())

    def get_note(self, path: str) -> Note | None:
        return self._notes.get(path)

    def get_metadata(self, note: Note) -> NoteMetadata | None:
        return self._metadata.get(note.path)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def create_note(self, path: str, frontmatter: dict[str, Any] | None = None, body: str = "") -> Note:
        """Write a new note at vault-relative *path* and fire ``create``."""
        if path in self._notes or self._abs(path).exists():
            raise FileExistsError(path)
        target = self._abs(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(render_note(frontmatter or {}, body), encoding="utf-8")
        note = self._read(path)
        self.trigger("create", note)
        return note

    def write_note(self, path: str, frontmatter: dict[str, Any] | None = None, body: str = "") -> Note:
        """Overwrite an existing note's content and fire ``changed``."""
        note = self._require(path)
        self._abs(path).write_text(render_note(frontmatter or {}, body), encoding="utf-8")
        self._read(path)
        self.trigger("changed", note)
        return note

    def rename_note(self, old_path: str, new_path: str) -> Note:
        """Move a note on disk, keeping the same :class:`Note` object."""
        note = self._require(old_path)
        if new_path in self._notes or self._abs(new_path).exists():
            raise FileExistsError(new_path)
        target = self._abs(new_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        self._abs(old_path).rename(target)
        del self._notes[old_path]
        self._metadata[new_path] = self._metadata.pop(old_path, NoteMetadata())
        note.path = new_path
        self._notes[new_path] = note
        self.trigger("rename", note, old_path)
        return note

    def delete_note(self, path: str) -> None:
        note = self._require(path)
        self._abs(path).unlink()
        del self._notes[path]
        self._metadata.pop(path, None)
        self.trigger("delete", note)

    def touch(self, path: str, mtime: float) -> None:
        """Set a note's modification time on disk and in the cache."""
        note = self._require(path)
        os.utime(self._abs(path), (mtime, mtime))
        note.mtime = mtime

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _scan(self) -> list[Path]:
        if not self.vault_dir.exists():
            return []
        return sorted(p for p in self.vault_dir.glob("**/*.md") if p.is_file())

    def _rel(self, file_path: Path) -> str:
        return file_path.relative_to(self.vault_dir).as_posix()

    def _abs(self, path: str) -> Path:
        return self.vault_dir / path

    def _require(self, path: str) -> Note:
        note = self._notes.get(path)
        if note is None:
            raise FileNotFoundError(path)
        return note

    def _read(self, path: str) -> Note:
        """Parse the file at *path* into the cache, reusing an existing Note."""
        file_path = self._abs(path)
        mtime = file_path.stat().st_mtime
        note = self._notes.get(path)
        if note is None:
            note = Note(path=path, mtime=mtime)
            self._notes[path] = note
        else:
            note.mtime = mtime
        try:
            content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            LOGGER.debug("Could not read %s: %s", path, exc)
            self._metadata[path] = NoteMetadata()
            return note
        self._metadata[path] = parse_metadata(content)
        return note
