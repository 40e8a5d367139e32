"""
Database connection helper and the `Store` used by the repositories.

`get_conn()` opens a new psycopg connection per call. `PgStore` wraps it
behind a single `execute(statement, args)` method so repositories only
deal in SQL text and argument lists, and tests can swap in a fake.

Statements are written with PostgreSQL's numbered markers (`$1`, `$2`,
...). psycopg binds client-side with `%s`, so `PgStore` rewrites each
`$n` to `%s` and passes `args[n-1]` in its place.

Usage:
    from db import PgStore
    store = PgStore()
    rows = store.execute('SELECT * FROM "users" WHERE "userid"=$1', [uid])
"""

import logging
import re
from typing import Any, Dict, List, Protocol, Sequence

import psycopg
from psycopg.rows import dict_row
from settings import settings

logger = logging.getLogger(__name__)

_MARKER = re.compile(r"\$(\d+)")


def get_conn(url: str | None = None):
    """Return a new psycopg connection for `url` (defaults to settings).

    A short `connect_timeout` keeps HTTP requests from hanging when the
    database is unreachable.
    """

    return psycopg.connect(url or settings.database_uri(), connect_timeout=5)


def to_psycopg(statement: str, args: Sequence[Any]) -> tuple[str, List[Any]]:
    """Rewrite `$n` markers to `%s` and order `args` to match.

    Raises `IndexError` when a marker points past the end of `args`.
    """

    bound: List[Any] = []

    def _bind(m: re.Match) -> str:
        idx = int(m.group(1))
        if idx < 1 or idx > len(args):
            raise IndexError(f"No argument for ${idx} ({len(args)} given)")
        bound.append(args[idx - 1])
        return "%s"

    text = _MARKER.sub(_bind, statement.replace("%", "%%"))
    return text, bound


class Store(Protocol):
    """Anything that can run a parameterized statement and return rows."""

    def execute(self, statement: str, args: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        ...


class PgStore:
    """psycopg-backed `Store`. One connection and one commit per call."""

    def __init__(self, url: str | None = None):
        self.url = url

    def execute(self, statement: str, args: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        text, bound = to_psycopg(statement, args)
        with get_conn(self.url) as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(text, bound)
                rows = cur.fetchall() if cur.description is not None else []
            conn.commit()
        logger.debug("executed %s (%d rows)", statement.split(" ", 1)[0], len(rows))
        return rows

    def ping(self) -> None:
        """Lightweight DB health check. Raises on error."""

        with get_conn(self.url) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
