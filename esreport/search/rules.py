# esreport/search/rules.py
"""Declarative post-processing of the collected table.

Stages run in a fixed order: existence filters, then the aggregate function,
then sorting. Each stage takes a table and returns a new one.
"""

import logging
from typing import Dict, FrozenSet, List, Optional, Tuple

from esreport.core.exceptions import InvalidSpecError
from esreport.search.schemas import LogQueryRequest, RuleFunction
from esreport.search.table import Row, Table

logger = logging.getLogger(__name__)

COUNT_COLUMN = "Count"


class RuleEngine:
    """Apply the filter, function and sort rules of one request."""

    def __init__(self, request: LogQueryRequest):
        self.request = request

    def apply(self, table: Table) -> Table:
        request = self.request
        numeric_columns: FrozenSet[str] = frozenset()

        if request.expr_exists:
            table = apply_exists(table, request.expr_exists)
        if request.expr_not_exists:
            table = apply_not_exists(table, request.expr_not_exists)

        if request.func == RuleFunction.DISTINCT.value:
            table = apply_distinct(table)
        elif request.func == RuleFunction.COUNT.value:
            table = apply_count(table, request.min_qty)
            numeric_columns = frozenset(c for c in table.columns if _is_count_column(c))
        elif request.func == RuleFunction.GROUP.value:
            table = apply_group(table)
        elif request.func:
            logger.info(f"Ignoring unknown function '{request.func}'")

        if request.sort and request.sort.strip():
            table = apply_sort(table, request.sort, numeric_columns)

        return table


# ===== FILTERS =====


def apply_exists(table: Table, rules: Dict[str, List[str]]) -> Table:
    """Keep rows whose column contains every listed value; an empty value means "is not empty"."""
    rows = list(table.rows)
    for column, values in rules.items():
        name = resolve_column(table, column)
        for value in values:
            if value:
                rows = [row for row in rows if value in row[name]]
            else:
                rows = [row for row in rows if row[name]]
    return table.with_rows(rows)


def apply_not_exists(table: Table, rules: Dict[str, List[str]]) -> Table:
    """Drop rows whose column contains any listed value."""
    rows = list(table.rows)
    for column, values in rules.items():
        name = resolve_column(table, column)
        for value in values:
            rows = [row for row in rows if value not in row[name]]
    return table.with_rows(rows)


# ===== FUNCTIONS =====


def apply_distinct(table: Table) -> Table:
    """Drop repeated rows, keeping the first occurrence."""
    seen = set()
    rows: List[Row] = []
    for row in table.rows:
        key = table.values(row)
        if key not in seen:
            seen.add(key)
            rows.append(row)
    return table.with_rows(rows)


def apply_group(table: Table) -> Table:
    """One row per distinct combination of all column values, in first-seen order."""
    groups: Dict[Tuple[str, ...], None] = {}
    for row in table.rows:
        groups.setdefault(table.values(row), None)
    return table.with_rows(dict(zip(table.columns, key)) for key in groups)


def apply_count(table: Table, min_qty: Optional[int] = None) -> Table:
    """
    Group by every column except the count column and count the members.

    An existing column named "count" (any case) receives the counts; otherwise
    a ``Count`` column is appended. Groups smaller than ``min_qty`` are dropped.
    """
    count_column = next((c for c in table.columns if _is_count_column(c)), None)
    key_columns = [c for c in table.columns if not _is_count_column(c)]

    columns = list(table.columns)
    if count_column is None:
        count_column = COUNT_COLUMN
        columns.append(count_column)

    counts: Dict[Tuple[str, ...], int] = {}
    for row in table.rows:
        key = tuple(row[c] for c in key_columns)
        counts[key] = counts.get(key, 0) + 1

    rows = []
    for key, count in counts.items():
        if min_qty is not None and count < min_qty:
            continue
        row = dict(zip(key_columns, key))
        row[count_column] = str(count)
        rows.append(row)

    return table.with_columns(columns, rows)


# ===== SORT =====


def parse_sort(table: Table, expression: str) -> List[Tuple[str, bool]]:
    """
    Parse ``"Col1, [Col 2] DESC"`` into ``[(column, descending), ...]``.

    Direction defaults to ascending. Bracketed names may contain spaces.
    """
    keys: List[Tuple[str, bool]] = []
    for part in expression.split(","):
        part = part.strip()
        if not part:
            continue

        descending = False
        head, _, tail = part.rpartition(" ")
        if head and tail.upper() in ("ASC", "DESC"):
            descending = tail.upper() == "DESC"
            part = head.strip()

        if part.startswith("[") and part.endswith("]"):
            part = part[1:-1]
        keys.append((resolve_column(table, part), descending))
    return keys


def apply_sort(table: Table, expression: str, numeric_columns: FrozenSet[str] = frozenset()) -> Table:
    """Stable multi-column sort; text compares case-insensitively."""
    keys = parse_sort(table, expression)
    rows = list(table.rows)

    # Apply sorts in reverse order so the first key has precedence
    for column, descending in reversed(keys):
        if column in numeric_columns:
            rows.sort(key=lambda row: _as_number(row[column]), reverse=descending)
        else:
            rows.sort(key=lambda row: row[column].lower(), reverse=descending)

    return table.with_rows(rows)


# ===== HELPERS =====


def resolve_column(table: Table, name: str) -> str:
    """Match a rule's column name to a table column, falling back to a case-insensitive match."""
    if table.has_column(name):
        return name
    folded = name.casefold()
    for column in table.columns:
        if column.casefold() == folded:
            return column
    raise InvalidSpecError(f"Unknown column '{name}'", details={"columns": list(table.columns)})


def _is_count_column(column: str) -> bool:
    return column.casefold() == COUNT_COLUMN.casefold()


def _as_number(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return float("-inf")
