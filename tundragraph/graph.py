"""Connections found while traversing the graph, and helpers to shape results."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from tundragraph.table import Field, Table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Connection:
    """An edge followed during a traversal, between two aliased nodes."""

    source: str
    source_id: int
    edge_type: str
    target: str
    target_id: int
    label: str = ""

    def __str__(self) -> str:
        return (
            f"{self.source}:{self.source_id} -[{self.edge_type}]-> "
            f"{self.target}:{self.target_id}"
        )


ConnectionMap = Mapping[int, Sequence[Connection]]


def join_container(items: Iterable[Any], delimiter: str = ", ") -> str:
    """Join the string forms of ``items`` with ``delimiter``."""
    return delimiter.join(str(item) for item in items)


def get_roots(connections: ConnectionMap) -> set[int]:
    """Return the source nodes that no connection in the map points to."""
    targets = {
        conn.target_id for conn_list in connections.values() for conn in conn_list
    }
    return {node_id for node_id in connections if node_id not in targets}


def connection_paths(node_id: int, connections: ConnectionMap) -> list[str]:
    """List the paths of connections reachable from ``node_id``.

    Each path ends at a node without outgoing connections. Sibling branches
    share the path built so far, so a later sibling's path also lists the
    steps taken by the earlier siblings at the same level.
    """
    result: list[str] = []

    def walk(current: int, path: list[str]) -> None:
        if current not in connections:
            result.append(join_container(path))
            return
        for conn in connections[current]:
            path.append(str(conn))
            walk(conn.target_id, list(path))

    walk(node_id, [])
    return result


def describe_connections(connections: ConnectionMap) -> list[str]:
    """Describe every connection of the map, one line each, and log them."""
    lines = ["Printing all paths in connection graph:"]
    if not connections:
        lines.append("  No connections found")
    else:
        for source_id, conn_list in connections.items():
            if not conn_list:
                lines.append(f"  Node {source_id} has no outgoing connections")
                continue
            for conn in conn_list:
                lines.append(f"  {source_id} -[{conn.edge_type}]-> {conn.target_id}")
        lines.append(
            f"Total of {len(connections)} source nodes with connections"
        )
    for line in lines:
        logger.debug("%s", line)
    return lines


def apply_select(fields: Sequence[str] | None, table: Table) -> Table:
    """Keep the columns named by ``fields``, in the table's own order.

    A name with a dot selects that exact column; a bare name selects every
    column prefixed with ``name.``. With no fields the table is returned as is.
    """
    if not fields:
        return table
    names = table.column_names()
    keep: set[str] = set()
    for selected in fields:
        if "." in selected:
            if selected in names:
                keep.add(selected)
        else:
            prefix = selected + "."
            keep.update(name for name in names if name.startswith(prefix))
    return table.select_columns(name for name in names if name in keep)


def denormalized_fields(
    schemas: Iterable[tuple[str, Sequence[Field]]],
) -> list[Field]:
    """Prefix each schema's fields with its alias and concatenate them.

    The first pair is the FROM schema. An alias seen before is skipped; a
    prefixed name that already exists raises KeyError.
    """
    result: list[Field] = []
    seen_fields: set[str] = set()
    seen_aliases: set[str] = set()
    for alias, fields in schemas:
        if alias in seen_aliases:
            continue
        seen_aliases.add(alias)
        logger.debug("Adding fields from schema '%s'", alias)
        for f in fields:
            name = f"{alias}.{f.name}"
            if name in seen_fields:
                raise KeyError(f"Field '{name}' already exists")
            seen_fields.add(name)
            result.append(Field(name, f.type))
    return result