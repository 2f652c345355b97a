"""A small in-memory columnar table with typed fields and filtering."""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


class ValueType(enum.Enum):
    """Types a cell value may have."""

    NULL = "null"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT = "float"
    DOUBLE = "double"
    STRING = "string"
    BOOL = "bool"

    def __str__(self) -> str:
        return self.value


class CompareOp(enum.Enum):
    """Comparison operators usable in a WHERE condition."""

    EQ = "="
    NOT_EQ = "!="
    GT = ">"
    LT = "<"
    GTE = ">="
    LTE = "<="
    CONTAINS = "CONTAINS"
    STARTS_WITH = "STARTS_WITH"
    ENDS_WITH = "ENDS_WITH"

    def __str__(self) -> str:
        return self.value


def value_type_of(value: Any) -> ValueType:
    """Return the value type that a Python value maps to."""
    if value is None:
        return ValueType.NULL
    if isinstance(value, bool):
        return ValueType.BOOL
    if isinstance(value, int):
        return ValueType.INT64
    if isinstance(value, float):
        return ValueType.DOUBLE
    if isinstance(value, str):
        return ValueType.STRING
    raise TypeError(f"Unsupported value type: {type(value).__name__}")


def _kind(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    raise TypeError(f"Unsupported value type: {type(value).__name__}")


def compare_values(left: Any, op: CompareOp, right: Any) -> bool:
    """Compare two values; any comparison involving a null is false."""
    if left is None or right is None:
        return False
    if _kind(left) != _kind(right):
        raise TypeError(
            f"Cannot compare {type(left).__name__} with {type(right).__name__}"
        )
    if op in (CompareOp.CONTAINS, CompareOp.STARTS_WITH, CompareOp.ENDS_WITH):
        logger.warning(
            "%s operator not fully supported for table filters, using equality",
            op.name,
        )
        return left == right
    if op is CompareOp.EQ:
        return left == right
    if op is CompareOp.NOT_EQ:
        return left != right
    if op is CompareOp.GT:
        return left > right
    if op is CompareOp.LT:
        return left < right
    if op is CompareOp.GTE:
        return left >= right
    if op is CompareOp.LTE:
        return left <= right
    raise ValueError(f"Unsupported comparison operator: {op!r}")


@dataclass(frozen=True)
class Field:
    """A named, typed column of a table."""

    name: str
    type: ValueType

    def coerce(self, value: Any) -> Any:
        """Check that ``value`` fits this field and return it in stored form."""
        if value is None:
            return None
        expected = self.type
        if expected is ValueType.NULL:
            raise TypeError(f"Field '{self.name}' only holds nulls")
        if expected in (ValueType.INT32, ValueType.INT64):
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"Field '{self.name}' expects an integer, got {value!r}")
            if expected is ValueType.INT32 and not _INT32_MIN <= value <= _INT32_MAX:
                raise OverflowError(f"Value {value} out of int32 range for '{self.name}'")
            return value
        if expected in (ValueType.FLOAT, ValueType.DOUBLE):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise TypeError(f"Field '{self.name}' expects a number, got {value!r}")
            return float(value)
        if expected is ValueType.STRING:
            if not isinstance(value, str):
                raise TypeError(f"Field '{self.name}' expects a string, got {value!r}")
            return value
        if expected is ValueType.BOOL:
            if not isinstance(value, bool):
                raise TypeError(f"Field '{self.name}' expects a bool, got {value!r}")
            return value
        raise TypeError(f"Unsupported field type: {expected!r}")

    def __str__(self) -> str:
        return f"{self.name}: {self.type}"


class Table:
    """An immutable table of equally long typed columns."""

    def __init__(self, fields: Sequence[Field], columns: Sequence[Sequence[Any]]):
        fields = tuple(fields)
        if len(fields) != len(columns):
            raise ValueError(
                f"Got {len(fields)} fields but {len(columns)} columns"
            )
        names = [f.name for f in fields]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate field names: {names}")
        stored = [
            [field.coerce(v) for v in column] for field, column in zip(fields, columns)
        ]
        lengths = {len(c) for c in stored}
        if len(lengths) > 1:
            raise ValueError(f"Columns have different lengths: {sorted(lengths)}")
        self._fields = fields
        self._columns = stored
        self._index = {f.name: i for i, f in enumerate(fields)}
        self._num_rows = lengths.pop() if lengths else 0

    @classmethod
    def empty(cls, fields: Sequence[Field]) -> Table:
        """Create a table with the given fields and no rows."""
        fields = tuple(fields)
        return cls(fields, [[] for _ in fields])

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        fields: Sequence[Field] | None = None,
    ) -> Table:
        """Build a table from mappings; missing keys become nulls.

        Without ``fields`` the columns are the sorted union of all keys, typed
        by the first non-null value found, or string when there is none.
        """
        records = list(records)
        if fields is None:
            if not records:
                raise ValueError("No rows provided to create table")
            names = sorted({name for record in records for name in record})
            inferred = []
            for name in names:
                value_type = next(
                    (
                        value_type_of(r[name])
                        for r in records
                        if r.get(name) is not None
                    ),
                    ValueType.STRING,
                )
                inferred.append(Field(name, value_type))
            fields = inferred
        fields = tuple(fields)
        columns = [[record.get(f.name) for record in records] for f in fields]
        return cls(fields, columns)

    @property
    def fields(self) -> tuple[Field, ...]:
        return self._fields

    def num_rows(self) -> int:
        return self._num_rows

    def num_columns(self) -> int:
        return len(self._fields)

    def column_names(self) -> list[str]:
        return [f.name for f in self._fields]

    def field(self, name: str) -> Field:
        try:
            return self._fields[self._index[name]]
        except KeyError:
            raise KeyError(f"No column named '{name}'") from None

    def column(self, name: str) -> list[Any]:
        """Return a copy of the values of one column."""
        try:
            return list(self._columns[self._index[name]])
        except KeyError:
            raise KeyError(f"No column named '{name}'") from None

    def records(self) -> Iterator[dict[str, Any]]:
        """Yield each row as a dict of column name to value."""
        names = self.column_names()
        for values in zip(*self._columns):
            yield dict(zip(names, values))

    def select_columns(self, names: Iterable[str]) -> Table:
        """Return a table holding only the named columns, in the given order."""
        names = list(names)
        for name in names:
            if name not in self._index:
                raise KeyError(f"No column named '{name}'")
        return Table(
            [self._fields[self._index[n]] for n in names],
            [self._columns[self._index[n]] for n in names],
        )

    def filter(self, predicate: Callable[[dict[str, Any]], bool]) -> Table:
        """Return the rows for which ``predicate`` is true."""
        kept = [r for r in self.records() if predicate(r)]
        return Table.from_records(kept, self._fields)

    def where(self, column: str, op: CompareOp, value: Any) -> Table:
        """Return the rows whose ``column`` compares true against ``value``."""
        if column not in self._index:
            raise KeyError(f"No column named '{column}'")
        return self.filter(lambda r: compare_values(r[column], op, value))

    def __len__(self) -> int:
        return self._num_rows

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Table):
            return NotImplemented
        return self._fields == other._fields and self._columns == other._columns

    def __repr__(self) -> str:
        cols = ", ".join(str(f) for f in self._fields)
        return f"Table([{cols}], rows={self._num_rows})"