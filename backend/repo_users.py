"""
Repository: SQL operations for `users`.

DB interaction only; authorization and password handling live in the
service modules. Admin accounts are ordinary rows with
`usertype = 'Admin'`, so the admin service uses this repository too.

Every method returns plain dicts (or None). Methods ending in `_with_hash`
are the only ones whose rows include the `password` column; callers must
strip it before anything leaves the service layer.
"""

from typing import Any, Dict, List, Mapping, Optional

from db import Store
from sql_partial import partial_update_sql

TABLE = "users"
KEY = "userid"
PUBLIC_COLUMNS = "userid, name, email, artistname, usertype, venuename, location"


def public(row: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Drop the password hash from a row."""

    if row is None:
        return None
    return {k: v for k, v in row.items() if k != "password"}


class UserRepo:
    """DB access only. No business logic here."""

    def __init__(self, store: Store):
        self.store = store

    def _one(self, statement: str, args: list) -> Optional[Dict[str, Any]]:
        rows = self.store.execute(statement, args)
        return rows[0] if rows else None

    def get_by_email_with_hash(self, email: str) -> Optional[Dict[str, Any]]:
        return self._one(
            f"SELECT {PUBLIC_COLUMNS}, password FROM users WHERE email = $1", [email]
        )

    def get_by_id_with_hash(self, userid: str) -> Optional[Dict[str, Any]]:
        return self._one(
            f"SELECT {PUBLIC_COLUMNS}, password FROM users WHERE userid = $1", [userid]
        )

    def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return self._one(f"SELECT {PUBLIC_COLUMNS} FROM users WHERE email = $1", [email])

    def get_by_id(self, userid: str) -> Optional[Dict[str, Any]]:
        return self._one(f"SELECT {PUBLIC_COLUMNS} FROM users WHERE userid = $1", [userid])

    def insert(self, row: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """Insert one user. `row` keys are column names; returns the public row."""

        cols = list(row)
        markers = ", ".join(f"${i}" for i in range(1, len(cols) + 1))
        return self._one(
            f"INSERT INTO users ({', '.join(cols)}) VALUES ({markers}) "
            f"RETURNING {PUBLIC_COLUMNS}",
            list(row.values()),
        )

    def list_all(self) -> List[Dict[str, Any]]:
        return self.store.execute(f"SELECT {PUBLIC_COLUMNS} FROM users ORDER BY email")

    def update(self, userid: str, fields: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply a partial update and return the updated row, or None."""

        query, values = partial_update_sql(TABLE, fields, KEY, userid)
        return self._one(query, values)

    def delete(self, userid: str) -> Optional[Dict[str, Any]]:
        return self._one(
            "DELETE FROM users WHERE userid = $1 RETURNING userid, name, email, usertype",
            [userid],
        )
