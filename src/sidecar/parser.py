"""YAML-frontmatter and inline tag parser."""

from __future__ import annotations

import logging
import re
from typing import Any

import yaml

from sidecar.note import NoteMetadata

LOGGER = logging.getLogger(__name__)

# Inline #tags (not inside code-spans or URLs)
_TAG_RE = re.compile(r"(?<![`\w/#])#([\w/-]+)")
# YAML front-matter block
_FRONTMATTER_RE = re.compile(r"^---[ \t]*\n(?:(.*?)\n)?---[ \t]*(?:\n|$)", re.DOTALL)
# [[Target]] wrapper around a property value
_WIKILINK_WRAP_RE = re.compile(r"^\[\[|\]\]$")


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Split YAML front-matter from body text.

    Returns ``(metadata_dict, body)``; ``metadata_dict`` is empty when there
    is no front-matter block or when it does not parse to a mapping.
    """
    match = _FRONTMATTER_RE.match(content)
    if not match:
        return {}, content
    try:
        meta = yaml.safe_load(match.group(1) or "") or {}
    except yaml.YAMLError as exc:
        LOGGER.debug("Ignoring malformed front-matter: %s", exc)
        meta = {}
    if not isinstance(meta, dict):
        meta = {}
    return meta, content[match.end() :]


def parse_tags(text: str) -> list[str]:
    """Return all ``#tag`` values found in *text* (de-duped, ordered, no ``#``)."""
    seen: set[str] = set()
    result: list[str] = []
    for m in _TAG_RE.finditer(text):
        tag = m.group(1)
        if tag not in seen:
            seen.add(tag)
            result.append(tag)
    return result


def parse_metadata(content: str) -> NoteMetadata:
    """Parse raw note text into a :class:`NoteMetadata`."""
    frontmatter, body = parse_frontmatter(content)
    return NoteMetadata(
        frontmatter=frontmatter,
        tags=[f"#{t}" for t in parse_tags(_strip_code_blocks(body))],
    )


def frontmatter_tags(frontmatter: dict[str, Any]) -> list[str]:
    """Return the ``tags`` property as ``#``-prefixed strings.

    Accepts a list or a comma-separated string; non-strings are skipped.
    """
    raw = frontmatter.get("tags") or []
    if isinstance(raw, str):
        raw = [t.strip() for t in raw.split(",")]
    elif not isinstance(raw, list):
        return []
    result: list[str] = []
    for tag in raw:
        if isinstance(tag, str) and tag.strip():
            tag = tag.strip()
            result.append(tag if tag.startswith("#") else f"#{tag}")
    return result


def strip_wikilink(value: str) -> str:
    """``"[[Some Channel]]"`` -> ``"Some Channel"``."""
    return _WIKILINK_WRAP_RE.sub("", value.strip())


def render_note(frontmatter: dict[str, Any], body: str = "") -> str:
    """Serialise *frontmatter* and *body* back into note text."""
    if not frontmatter:
        return body
    block = yaml.safe_dump(frontmatter, sort_keys=False, allow_unicode=True)
    return f"---\n{block}---\n{body}"


def _strip_code_blocks(body: str) -> str:
    lines: list[str] = []
    in_code_block = False
    for line in body.splitlines():
        if line.lstrip().startswith(("```", "~~~")):
            in_code_block = not in_code_block
            continue
        if not in_code_block:
            lines.append(line)
    return "\n".join(lines)
