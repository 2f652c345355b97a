"""Result rows built from graph traversals and the tree that merges them."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from tundragraph.table import Field, Table, value_type_of

logger = logging.getLogger(__name__)

_MAX_CELLS_SHOWN = 5


@dataclass(frozen=True)
class PathSegment:
    """One step of a traversal path: a schema alias and a node id."""

    schema: str
    node_id: int

    def __str__(self) -> str:
        return f"{self.schema}:{self.node_id}"


def is_prefix(prefix: Sequence[PathSegment], path: Sequence[PathSegment]) -> bool:
    """Return whether ``prefix`` is a leading part of ``path``."""
    if len(prefix) > len(path):
        return False
    return all(a == b for a, b in zip(prefix, path))


def join_schema_path(path: Iterable[PathSegment]) -> str:
    """Render a path as ``schema:id->schema:id``."""
    return "->".join(str(segment) for segment in path)


def _format_value(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f'"{value}"'
    return str(value)


def _same_value(left: Any, right: Any) -> bool:
    return type(left) is type(right) and left == right


@dataclass
class Row:
    """A flat row of ``alias.field`` cells together with the path that made it."""

    id: int = 0
    cells: dict[str, Any] = field(default_factory=dict)
    path: list[PathSegment] = field(default_factory=list)

    def _copy(self) -> Row:
        return Row(self.id, dict(self.cells), list(self.path))

    def set_cell(self, name: str, value: Any) -> None:
        """Set a cell; a value of an unsupported type is stored as null."""
        if value is not None:
            try:
                value_type_of(value)
            except TypeError:
                value = None
        self.cells[name] = value

    def has_value(self, name: str) -> bool:
        """Return whether the cell exists and is not null."""
        return self.cells.get(name) is not None

    def start_with(self, prefix: Sequence[PathSegment]) -> bool:
        """Return whether this row's path begins with ``prefix``."""
        return is_prefix(prefix, self.path)

    def extract_schema_ids(self) -> dict[str, int]:
        """Map each alias with a non-null ``alias.id`` cell to that id."""
        result: dict[str, int] = {}
        for name, value in self.cells.items():
            if value is None:
                continue
            schema, dot, rest = name.partition(".")
            if dot and rest == "id":
                result[schema] = value
        return result

    def merge(self, other: Row) -> Row:
        """Return a copy of this row with nulls filled from ``other``."""
        merged = self._copy()
        for name, value in other.cells.items():
            if not merged.has_value(name):
                merged.cells[name] = value
        return merged

    def __str__(self) -> str:
        cells = ", ".join(
            f"{name}: {_format_value(value)}" for name, value in self.cells.items()
        )
        separator = ", " if cells else ""
        return f"Row{{path='{join_schema_path(self.path)}'{separator}{cells}}}"


def get_child_rows(parent: Row, rows: Iterable[Row]) -> list[Row]:
    """Return the rows, other than ``parent``, whose path extends its path."""
    return [r for r in rows if r.id != parent.id and r.start_with(parent.path)]


def _can_merge(first: Row, second: Row) -> bool:
    ids_first = first.extract_schema_ids()
    ids_second = second.extract_schema_ids()
    for schema, node_id in ids_first.items():
        if schema in ids_second and ids_second[schema] != node_id:
            logger.debug(
                "Conflict detected: Schema '%s' has different IDs: %s vs %s",
                schema,
                node_id,
                ids_second[schema],
            )
            return False
    for name, value in first.cells.items():
        if value is None:
            continue
        other = second.cells.get(name)
        if other is not None and not _same_value(value, other):
            logger.debug("Conflict detected: Field '%s' has different values", name)
            return False
    return True


@dataclass
class RowNode:
    """A node of the tree that groups rows by their traversal paths."""

    row: Row | None = None
    depth: int = 0
    path_segment: PathSegment = field(default_factory=lambda: PathSegment("root", -1))
    children: list[RowNode] = field(default_factory=list)

    def is_leaf(self) -> bool:
        """A node holding a row is a leaf."""
        return self.row is not None

    def insert_row(self, row: Row) -> None:
        """Store a copy of ``row`` at the node its path leads to."""
        node = self
        for segment in row.path:
            child = next((c for c in node.children if c.path_segment == segment), None)
            if child is None:
                child = RowNode(depth=node.depth + 1, path_segment=segment)
                node.children.append(child)
            node = child
        node.row = row._copy()

    def merge_rows(self) -> list[Row]:
        """Combine the rows below this node.

        Rows from children of different schemas are joined as a Cartesian
        product, dropping pairs that disagree on an id or a cell value.
        """
        if self.is_leaf():
            return [self.row._copy()]

        grouped: dict[str, list[Row]] = {}
        for child in self.children:
            grouped.setdefault(child.path_segment.schema, []).extend(child.merge_rows())

        groups = [rows for rows in grouped.values() if rows]
        if not groups:
            return []
        if len(groups) == 1:
            return groups[0]

        product = groups[-1]
        for group in reversed(groups[:-1]):
            accumulated: list[Row] = []
            for first in group:
                for second in product:
                    if _can_merge(first, second):
                        merged = first.merge(second)
                        merged.path = [self.path_segment]
                        accumulated.append(merged)
            product = accumulated
            if not product:
                logger.debug("product_accumulator is empty. stop merge")
                break
        return product

    def to_string(self, recursive: bool = True, indent_level: int = 0) -> str:
        """Render this node, and its subtree when ``recursive``, for debugging."""
        indent = " " * (indent_level * 2)
        parts = [f"{indent}RowNode [path={self.path_segment}, depth={self.depth}] {{\n"]
        if self.row is not None:
            path_text = (
                " → ".join(str(s) for s in self.row.path) if self.row.path else "(empty)"
            )
            parts.append(f"{indent}  Path: {path_text}\n")
            parts.append(f"{indent}  Cells: ")
            if not self.row.cells:
                parts.append("(empty)")
            else:
                shown = []
                for count, (name, value) in enumerate(self.row.cells.items(), start=1):
                    if count > _MAX_CELLS_SHOWN:
                        shown.append(
                            f"... +{len(self.row.cells) - _MAX_CELLS_SHOWN} more"
                        )
                        break
                    shown.append(f"{name}: {_format_value(value)}")
                parts.append("{ " + ", ".join(shown) + " }")
        parts.append("\n")
        parts.append(f"{indent}  Children: {len(self.children)}\n")
        if recursive and self.children:
            parts.append(f"{indent}  [\n")
            parts.extend(c.to_string(True, indent_level + 2) for c in self.children)
            parts.append(f"{indent}  ]\n")
        parts.append(f"{indent}}}\n")
        return "".join(parts)

    def __str__(self) -> str:
        return self.to_string()


def create_empty_row(fields: Iterable[Field]) -> Row:
    """Return a row with a null cell for every field."""
    return Row(cells={f.name: None for f in fields})


def rows_to_table(rows: Sequence[Row] | None, fields: Sequence[Field] | None = None) -> Table:
    """Build a table from rows, inferring fields when none are given."""
    if not rows:
        if fields is None:
            raise ValueError("No rows provided to create table")
        return Table.empty(fields)
    return Table.from_records([r.cells for r in rows], fields)