"""
Repository: SQL operations for `calendareventrequests`.

DB interaction only. `requestid` is the sole key for updates and deletes.
"""

from typing import Any, Dict, List, Mapping, Optional

from db import Store
from sql_partial import partial_update_sql

TABLE = "calendareventrequests"
KEY = "requestid"
COLUMNS = (
    "requestid, eventid, userid, status, requestdate, starttime, endtime, "
    "amount, artistname, eventname"
)


class EventRequestRepo:
    """DB access only. No business logic here."""

    def __init__(self, store: Store):
        self.store = store

    def _one(self, statement: str, args: list) -> Optional[Dict[str, Any]]:
        rows = self.store.execute(statement, args)
        return rows[0] if rows else None

    def get(self, requestid: str) -> Optional[Dict[str, Any]]:
        return self._one(f"SELECT {COLUMNS} FROM {TABLE} WHERE requestid = $1", [requestid])

    def insert(self, row: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        cols = list(row)
        markers = ", ".join(f"${i}" for i in range(1, len(cols) + 1))
        return self._one(
            f"INSERT INTO {TABLE} ({', '.join(cols)}) VALUES ({markers}) RETURNING {COLUMNS}",
            list(row.values()),
        )

    def list_all(self) -> List[Dict[str, Any]]:
        return self.store.execute(f"SELECT {COLUMNS} FROM {TABLE}")

    def list_for_user(self, userid: str) -> List[Dict[str, Any]]:
        return self.store.execute(f"SELECT {COLUMNS} FROM {TABLE} WHERE userid = $1", [userid])

    def find_by_status(self, status: str) -> List[Dict[str, Any]]:
        return self.store.execute(f"SELECT {COLUMNS} FROM {TABLE} WHERE status = $1", [status])

    def update(self, requestid: str, fields: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        query, values = partial_update_sql(TABLE, fields, KEY, requestid)
        return self._one(query, values)

    def delete(self, requestid: str) -> Optional[Dict[str, Any]]:
        return self._one(
            f"DELETE FROM {TABLE} WHERE requestid = $1 RETURNING {COLUMNS}", [requestid]
        )
