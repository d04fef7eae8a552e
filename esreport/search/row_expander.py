"""Turn one search document into one or more table rows."""

from typing import Any, Dict, List, Sequence

from esreport.search.path_resolver import MULTI_VALUE_SEPARATOR, resolve_joined
from esreport.search.table import Row


def expand(document: Any, columns: Sequence[str], paths: Sequence[str]) -> List[Row]:
    """
    Build the rows for ``document``.

    The first row holds the first value of every column. When some column
    resolves to several values, one extra row is added per additional value;
    multi-valued columns take their n-th value (empty once exhausted) and all
    other columns repeat the first row's value.
    """
    base_row: Row = {}
    multi_values: Dict[str, List[str]] = {}

    for column, path in zip(columns, paths):
        value = resolve_joined(document, path)
        parts = [part for part in value.split(MULTI_VALUE_SEPARATOR) if part]

        if len(parts) > 1:
            multi_values[column] = parts
            base_row[column] = parts[0]
        else:
            base_row[column] = value

    rows = [base_row]
    if not multi_values:
        return rows

    max_count = max(len(values) for values in multi_values.values())
    for i in range(1, max_count):
        row = dict(base_row)
        for column, values in multi_values.items():
            row[column] = values[i] if i < len(values) else ""
        rows.append(row)

    return rows


def expand_all(documents: Sequence[Any], columns: Sequence[str], paths: Sequence[str]) -> List[Row]:
    """Expand every document of a page, keeping document order."""
    rows: List[Row] = []
    for document in documents:
        rows.extend(expand(document, columns, paths))
    return rows
