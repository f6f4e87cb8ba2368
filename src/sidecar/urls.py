"""URL normalisation and comparison helpers.

Every function here is total: malformed input yields ``None`` or ``False``
rather than raising.  The normalised form is a comparison key only and is
never shown to users.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from typing import Any
from urllib.parse import urlsplit

# Host part: dotted labels ending in an alphabetic TLD (or "localhost")
_HOST_RE = re.compile(r"^(?:[\w-]+\.)+[a-z]{2,}$|^localhost$", re.IGNORECASE)


def _split(url: Any) -> tuple[str, str, str, str] | None:
    """Return ``(host, port, path, query)`` for an absolute http(s) URL.

    ``port`` is ``":<n>"`` when one was given, else empty.  The fragment is
    dropped.  Returns ``None`` for anything else.
    """
    if not isinstance(url, str):
        return None
    candidate = url.strip()
    if not candidate or any(ch.isspace() for ch in candidate):
        return None
    try:
        parts = urlsplit(candidate)
        host = parts.hostname
        port = parts.port
    except ValueError:
        return None
    if parts.scheme.lower() not in ("http", "https") or not host:
        return None
    if not _HOST_RE.match(host):
        return None
    return host.lower(), f":{port}" if port is not None else "", parts.path, parts.query


def is_valid_url(url: Any) -> bool:
    """True only for syntactically valid absolute ``http``/``https`` URLs.

    A bare domain such as ``example.com`` is *not* valid here.
    """
    return _split(url) is not None


def normalize_url(url: Any) -> str | None:
    """Return the comparison key for *url*, or ``None`` if it is invalid.

    The scheme, a leading ``www.``, the fragment and trailing slashes are
    stripped and the host is lower-cased.  Path and query keep their case.
    """
    split = _split(url)
    if split is None:
        return None
    host, port, path, query = split
    normalized = f"{host.removeprefix('www.')}{port}{path.rstrip('/')}"
    return f"{normalized}?{query}" if query else normalized


def extract_domain(url: Any) -> str | None:
    """Return the lower-cased host of *url* without ``www.``."""
    split = _split(url)
    if split is None:
        return None
    return split[0].removeprefix("www.") or None


def urls_match(url1: Any, url2: Any) -> bool:
    n1 = normalize_url(url1)
    return n1 is not None and n1 == normalize_url(url2)


def is_same_domain(url1: Any, url2: Any) -> bool:
    d1 = extract_domain(url1)
    return bool(d1) and d1 == extract_domain(url2)


def iter_url_values(
    frontmatter: Mapping[str, Any] | None,
    fields: Iterable[str],
) -> Iterator[tuple[str, str]]:
    """Yield ``(property_name, value)`` for every string value in *fields*.

    Fields are visited in configured order; a field may hold one string or a
    list of strings.  Non-string entries are skipped.
    """
    if not isinstance(frontmatter, Mapping):
        return
    for prop_name in fields:
        value = frontmatter.get(prop_name)
        if not value:
            continue
        values = value if isinstance(value, list) else [value]
        for item in values:
            if isinstance(item, str):
                yield prop_name, item
