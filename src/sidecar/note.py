"""Core note and match dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Literal

MatchType = Literal["exact", "tld"]


@dataclass(eq=False)
class Note:
    """Handle to a single markdown note owned by a :class:`~sidecar.store.DocumentStore`.

    Notes compare and hash by identity, so a rename (which only rewrites
    ``path``) keeps the same object valid as a dictionary key.
    """

    #: Vault-relative POSIX path, e.g. ``"reading/article.md"``
    path: str
    #: Modification time in seconds since the epoch
    mtime: float = 0.0

    @property
    def slug(self) -> str:
        """Filename stem, used as the display title."""
        return PurePosixPath(self.path).stem

    @property
    def title(self) -> str:
        return self.slug

    @property
    def extension(self) -> str:
        return PurePosixPath(self.path).suffix.lstrip(".").lower()

    def __repr__(self) -> str:
        return f"Note({self.path!r}, mtime={self.mtime})"


@dataclass
class NoteMetadata:
    """Parsed metadata block of a note."""

    frontmatter: dict[str, Any] = field(default_factory=dict)
    #: Inline ``#tags`` found in the body, stored with the leading ``#``
    tags: list[str] = field(default_factory=list)


@dataclass
class MatchedNote:
    note: Note
    match_type: MatchType
    url: str
    property_name: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.note.path,
            "title": self.note.title,
            "match_type": self.match_type,
            "url": self.url,
            "property_name": self.property_name,
            "mtime": self.note.mtime,
        }


@dataclass
class MatchResult:
    """Notes related to one target URL.

    A note appears in at most one of ``exact`` and ``same_domain``.
    ``platform_groups`` is ``None`` when no grouping produced a bucket.
    """

    exact: list[MatchedNote] = field(default_factory=list)
    same_domain: list[MatchedNote] = field(default_factory=list)
    platform_groups: dict[str, list[MatchedNote]] | None = None
    matched_channel: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.exact and not self.same_domain and not self.platform_groups


@dataclass
class RecentNote:
    note: Note
    url: str
    property_name: str
    modified_time: float
