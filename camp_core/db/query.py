"""SQL fragment builders for parameterized queries."""

from typing import Any


def build_update_clause(
    data: dict[str, Any],
    exclude: set[str] | None = None
) -> tuple[str, list[Any]]:
    """Build a SET clause from a dict of column values.

    None values and excluded columns are skipped, so callers can pass a
    partial update straight from a request schema.

    Args:
        data: Column name to new value
        exclude: Column names never to update (e.g. {"id"})

    Returns:
        (clause, params), e.g. ("name = ?, phone = ?", ["Ann", "555"]).
        clause is "" when nothing is left to update.
    """
    exclude = exclude or set()
    fragments = []
    params = []
    for column, value in data.items():
        if value is None or column in exclude:
            continue
        fragments.append(f"{column} = ?")
        params.append(value)
    return ", ".join(fragments), params
