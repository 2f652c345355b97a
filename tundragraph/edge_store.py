"""Thread-safe in-memory store of typed graph edges."""

from __future__ import annotations

import itertools
import logging
import threading
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from tundragraph.table import Field, Table, ValueType

logger = logging.getLogger(__name__)

EDGE_TABLE_FIELDS = (
    Field("id", ValueType.INT64),
    Field("source_id", ValueType.INT64),
    Field("target_id", ValueType.INT64),
    Field("created_ts", ValueType.INT64),
)


def _now_millis() -> int:
    return time.time_ns() // 1_000_000


@dataclass
class Edge:
    """A directed, typed connection between two nodes."""

    id: int
    source_id: int
    target_id: int
    type: str
    properties: dict[str, Any] = field(default_factory=dict)
    created_ts: int = field(default_factory=_now_millis)


@dataclass
class _TableCache:
    version: int
    table: Table


class EdgeStore:
    """Holds edges indexed by id, type, source and target node."""

    def __init__(self, start_id: int = 0):
        self._ids = itertools.count(start_id)
        self._lock = threading.RLock()
        self._edges: dict[int, Edge] = {}
        self._edges_by_type: dict[str, set[int]] = {}
        self._outgoing: dict[int, set[int]] = {}
        self._incoming: dict[int, set[int]] = {}
        self._versions: dict[str, int] = {}
        self._tables: dict[str, _TableCache] = {}

    def create_edge(
        self,
        source_id: int,
        edge_type: str,
        target_id: int,
        properties: Mapping[str, Any] | None = None,
    ) -> Edge:
        """Create a new edge with a fresh id; it is not added to the store."""
        with self._lock:
            edge_id = next(self._ids)
        return Edge(edge_id, source_id, target_id, edge_type, dict(properties or {}))

    def _bump_version(self, edge_type: str) -> None:
        self._versions[edge_type] = self._versions.get(edge_type, 0) + 1

    def add(self, edge: Edge) -> bool:
        """Add an edge; raises KeyError if its id is already present."""
        with self._lock:
            if edge.id in self._edges:
                raise KeyError(f"Edge already exists with id={edge.id}")
            self._edges[edge.id] = edge
            self._edges_by_type.setdefault(edge.type, set()).add(edge.id)
            self._outgoing.setdefault(edge.source_id, set()).add(edge.id)
            self._incoming.setdefault(edge.target_id, set()).add(edge.id)
            self._bump_version(edge.type)
        return True

    def remove(self, edge_id: int) -> bool:
        """Remove an edge by id; returns False if it was not present."""
        with self._lock:
            edge = self._edges.pop(edge_id, None)
            if edge is None:
                return False
            self._edges_by_type.get(edge.type, set()).discard(edge_id)
            self._outgoing.get(edge.source_id, set()).discard(edge_id)
            self._incoming.get(edge.target_id, set()).discard(edge_id)
            self._bump_version(edge.type)
        return True

    def get(self, edge_id: int) -> Edge:
        """Return the edge with ``edge_id``; raises KeyError if absent."""
        with self._lock:
            try:
                return self._edges[edge_id]
            except KeyError:
                raise KeyError(f"Edge not found with id={edge_id}") from None

    def get_many(self, ids: Iterable[int]) -> list[Edge]:
        """Return the edges among ``ids`` that exist, ordered by id."""
        with self._lock:
            return [self._edges[i] for i in sorted(set(ids)) if i in self._edges]

    def _edges_of(self, index: Mapping[Any, set[int]], key: Any, edge_type: str) -> list[Edge]:
        with self._lock:
            ids = index.get(key)
            if not ids:
                return []
            return [
                edge
                for edge in self.get_many(ids)
                if not edge_type or edge.type == edge_type
            ]

    def get_outgoing_edges(self, node_id: int, edge_type: str = "") -> list[Edge]:
        """Return edges leaving ``node_id``, optionally of one type only."""
        return self._edges_of(self._outgoing, node_id, edge_type)

    def get_incoming_edges(self, node_id: int, edge_type: str = "") -> list[Edge]:
        """Return edges arriving at ``node_id``, optionally of one type only."""
        return self._edges_of(self._incoming, node_id, edge_type)

    def get_by_type(self, edge_type: str) -> list[Edge]:
        """Return all edges of ``edge_type``."""
        with self._lock:
            return self.get_many(self._edges_by_type.get(edge_type, ()))

    def get_version(self, edge_type: str) -> int:
        """Return the change counter of ``edge_type``; KeyError if unknown."""
        with self._lock:
            try:
                return self._versions[edge_type]
            except KeyError:
                raise KeyError(f"No version found for edge type: {edge_type}") from None

    def get_edge_types(self) -> set[str]:
        """Return every edge type ever added."""
        with self._lock:
            return set(self._edges_by_type)

    def generate_table(self, edge_type: str = "") -> Table:
        """Build a table of edges of ``edge_type``, or of all edges if empty."""
        logger.info("Generating table for edge type: '%s'", edge_type)
        with self._lock:
            if edge_type:
                selected = self.get_many(self._edges_by_type.get(edge_type, ()))
            else:
                selected = self.get_many(self._edges)
        if not selected:
            logger.info("No edges found for type '%s', returning empty table", edge_type)
            return Table.empty(EDGE_TABLE_FIELDS)
        return Table(
            EDGE_TABLE_FIELDS,
            [
                [e.id for e in selected],
                [e.source_id for e in selected],
                [e.target_id for e in selected],
                [e.created_ts for e in selected],
            ],
        )

    def get_table(self, edge_type: str) -> Table:
        """Return a cached table of ``edge_type``, rebuilt when edges change.

        Raises KeyError if no edge of that type was ever added.
        """
        with self._lock:
            if edge_type not in self._edges_by_type:
                raise KeyError("edge type doesn't exists")
            latest = self.get_version(edge_type)
            cache = self._tables.get(edge_type)
            if cache is not None:
                if cache.version > latest:
                    raise RuntimeError("Invalid state: current_version > latest_version")
                if cache.version == latest:
                    return cache.table
            table = self.generate_table(edge_type)
            self._tables[edge_type] = _TableCache(latest, table)
            return table