"""
Partial UPDATE statement builder.

Turns a mapping of column -> new value into a single-row UPDATE keyed on
one column. Values are only ever bound through numbered markers; table
and column names are pasted in as quoted identifiers and must come from
server-side whitelists, never from raw client keys.
"""

from typing import Any, List, Mapping, Tuple


def partial_update_sql(
    table: str, fields: Mapping[str, Any], key: str, key_value: Any
) -> Tuple[str, List[Any]]:
    """Build `UPDATE ... SET ... WHERE key=$n RETURNING *` and its args.

    Columns are emitted in `fields` iteration order; the args list holds
    their values in the same order followed by `key_value`.

    An empty `fields` still yields a statement (with an empty SET clause
    that PostgreSQL rejects). Callers that may end up with nothing to set
    must check before calling.

        >>> partial_update_sql("users", {"name": "Jane"}, "userid", "u1")
        ('UPDATE "users" SET "name"=$1 WHERE "userid"=$2 RETURNING *', ['Jane', 'u1'])
    """

    cols = [f'"{col}"=${idx}' for idx, col in enumerate(fields, start=1)]
    query = (
        f'UPDATE "{table}" SET {", ".join(cols)} '
        f'WHERE "{key}"=${len(cols) + 1} RETURNING *'
    )
    values = [*fields.values(), key_value]
    return query, values
