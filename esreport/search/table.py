"""Immutable string table passed between pipeline stages."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

Row = Dict[str, str]


@dataclass(frozen=True)
class Table:
    """Ordered rows over a fixed ordered set of columns.

    Stages never modify a table; they build a new one with :meth:`with_rows`
    or :meth:`with_columns`.
    """

    columns: Tuple[str, ...]
    rows: Tuple[Row, ...] = field(default_factory=tuple)

    @classmethod
    def build(cls, columns: Sequence[str], rows: Iterable[Row] = ()) -> "Table":
        column_tuple = tuple(columns)
        return cls(
            columns=column_tuple,
            rows=tuple({column: row.get(column, "") for column in column_tuple} for row in rows),
        )

    def __len__(self) -> int:
        return len(self.rows)

    def with_rows(self, rows: Iterable[Row]) -> "Table":
        return Table.build(self.columns, rows)

    def with_columns(self, columns: Sequence[str], rows: Iterable[Row]) -> "Table":
        return Table.build(columns, rows)

    def values(self, row: Row) -> Tuple[str, ...]:
        """Positional values of ``row`` in column order."""
        return tuple(row.get(column, "") for column in self.columns)

    def has_column(self, column: str) -> bool:
        return column in self.columns

    def to_records(self) -> List[Row]:
        return [dict(row) for row in self.rows]
