"""UrlDB: tabular view over the URL index.

Uses DuckDB (in-memory) as a query engine over every ``(note, url)`` pair in
a :class:`~sidecar.index.UrlIndex`.  Returns :mod:`polars` DataFrames.

Usage::

    db = UrlDB(index)

    df = db.query("SELECT domain, count(*) FROM urls GROUP BY domain")
    counts = db.domain_counts()
    table = db.table_view(domain="github.com", order_by="mtime DESC")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import duckdb
import polars as pl

from sidecar.urls import extract_domain, normalize_url

if TYPE_CHECKING:
    from sidecar.index import UrlIndex

_COLUMNS = ("path", "title", "url", "normalized", "domain", "mtime")


class UrlDB:
    """In-memory DuckDB table ``urls(path, title, url, normalized, domain, mtime)``."""

    def __init__(self, index: "UrlIndex") -> None:
        self.conn: duckdb.DuckDBPyConnection = duckdb.connect(":memory:")
        self.refresh(index)

    # ------------------------------------------------------------------
    # Build / refresh
    # ------------------------------------------------------------------

    def refresh(self, index: "UrlIndex") -> None:
        """(Re-)populate the table from *index* (call after ``index-updated``)."""
        self._index = index
        self.conn.execute("""
            CREATE OR REPLACE TABLE urls (
                path        VARCHAR,
                title       VARCHAR,
                url         VARCHAR,
                normalized  VARCHAR,
                domain      VARCHAR,
                mtime       DOUBLE
            )
        """)
        rows = []
        for path, url in index.iter_entries():
            note = index.store.get_note(path)
            if note is None:
                continue
            rows.append((path, note.title, url, normalize_url(url), extract_domain(url), note.mtime))
        if rows:
            self.conn.executemany("INSERT INTO urls VALUES (?,?,?,?,?,?)", rows)

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def query(self, sql: str) -> pl.DataFrame:
        """Run a raw SQL query and return a Polars DataFrame."""
        return self.conn.execute(sql).pl()

    def table_view(
        self,
        *,
        domain: str | None = None,
        columns: list[str] | None = None,
        order_by: str = "path",
    ) -> pl.DataFrame:
        """Return indexed URLs, optionally limited to one *domain*."""
        cols = [c for c in (columns or ["path", "url", "domain"]) if c in _COLUMNS]
        if not cols:
            raise ValueError(f"columns must be drawn from {_COLUMNS}")
        sql = f"SELECT {', '.join(cols)} FROM urls"
        params: list[str] = []
        if domain:
            sql += " WHERE domain = ?"
            params.append(domain)
        sql += f" ORDER BY {_safe_order(order_by)}"
        return self.conn.execute(sql, params).pl()

    def domain_counts(self) -> pl.DataFrame:
        """Return a domain -> distinct-note count table, most cited first."""
        return self.conn.execute(
            """
            SELECT domain, COUNT(DISTINCT path) AS note_count, MAX(mtime) AS last_modified
            FROM urls
            WHERE domain IS NOT NULL
            GROUP BY domain
            ORDER BY note_count DESC, domain
            """
        ).pl()

    def duplicate_urls(self) -> pl.DataFrame:
        """Normalised URLs cited by more than one note."""
        return self.conn.execute(
            """
            SELECT normalized, COUNT(DISTINCT path) AS note_count, list_sort(list(DISTINCT path)) AS paths
            FROM urls
            GROUP BY normalized
            HAVING COUNT(DISTINCT path) > 1
            ORDER BY note_count DESC, normalized
            """
        ).pl()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "UrlDB":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


def _safe_order(order_by: str) -> str:
    column, _, direction = order_by.strip().partition(" ")
    if column not in _COLUMNS:
        raise ValueError(f"cannot order by {column!r}")
    direction = direction.strip().upper()
    if direction not in ("", "ASC", "DESC"):
        raise ValueError(f"bad sort direction {direction!r}")
    return f"{column} {direction}".strip()
