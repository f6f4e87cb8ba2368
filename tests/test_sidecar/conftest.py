"""Shared fixtures: small on-disk vaults with controlled modification times."""

from __future__ import annotations

import os
import textwrap
from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

from sidecar.config import SidecarSettings
from sidecar.index import UrlIndex
from sidecar.store import VaultStore


def write_note(
    directory: Path,
    path: str,
    frontmatter: dict[str, Any] | None = None,
    body: str = "",
    *,
    mtime: float | None = None,
) -> Path:
    """Write ``directory/path`` with a YAML front-matter block."""
    target = directory / path
    target.parent.mkdir(parents=True, exist_ok=True)
    content = textwrap.dedent(body)
    if frontmatter is not None:
        block = yaml.safe_dump(frontmatter, sort_keys=False)
        content = f"---\n{block}---\n{content}"
    target.write_text(content, encoding="utf-8")
    if mtime is not None:
        os.utime(target, (mtime, mtime))
    return target


@pytest.fixture()
def settings() -> SidecarSettings:
    return SidecarSettings()


@pytest.fixture()
def make_index(tmp_path: Path, settings: SidecarSettings) -> Callable[..., UrlIndex]:
    """Build a store over ``tmp_path`` and an initialised index on top of it."""
    created: list[UrlIndex] = []

    def _make(**overrides: Any) -> UrlIndex:
        for key, value in overrides.items():
            setattr(settings, key, value)
        store = VaultStore(tmp_path)
        store.load()
        index = UrlIndex(store, lambda: settings)
        index.initialize()
        created.append(index)
        return index

    yield _make

    for index in created:
        index.destroy()


@pytest.fixture()
def write(tmp_path: Path) -> Callable[..., Path]:
    """``write("a.md", {"source": ...}, mtime=...)`` into the test vault."""

    def _write(path: str, frontmatter: dict[str, Any] | None = None, body: str = "", **kwargs: Any) -> Path:
        return write_note(tmp_path, path, frontmatter, body, **kwargs)

    return _write
