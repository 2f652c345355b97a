# tundragraph

Building blocks for a small in-memory graph database. The package has no
third-party dependencies.

## Modules

- `tundragraph.table` provides `Table`, an immutable columnar table with typed
  `Field`s. A field's type is a `ValueType`.
  - Build a table with `Table(fields, columns)`, `Table.empty(fields)` or
    `Table.from_records(records, fields=None)`. Without fields, the columns are
    the sorted union of the record keys. Each column's type comes from its first
    non-null value, and a column with no such value is typed as a string.
  - Read a table with `num_rows()`, `num_columns()`, `column_names()`,
    `column(name)` and `records()`.
  - Derive new tables with `select_columns(names)`, `filter(predicate)` and
    `where(column, op, value)`.
  - `compare_values(left, op, right)` applies a `CompareOp`. Any comparison
    that involves a null is false. `CONTAINS`, `STARTS_WITH` and `ENDS_WITH`
    fall back to equality and log a warning.
- `tundragraph.edge_store` provides `EdgeStore`, a thread-safe store of `Edge`
  objects. Edges are indexed by id, type, source node and target node.
  - Create and store edges with `create_edge`, `add` and `remove`.
  - Look edges up with `get`, `get_many`, `get_outgoing_edges`,
    `get_incoming_edges` and `get_by_type`.
  - `get_edge_types()` lists the edge types. `get_version(edge_type)` returns a
    counter that goes up on every add or remove of that type.
  - `generate_table(edge_type)` builds a table with the columns `id`,
    `source_id`, `target_id` and `created_ts`. `get_table(edge_type)` caches
    that table per type and rebuilds it only when the version has changed.
- `tundragraph.rows` provides `Row` (cells named `alias.field`, plus a traversal
  path), `PathSegment` and `RowNode`.
  - `RowNode` groups rows by their paths. `RowNode.merge_rows()` joins rows
    from sibling branches of different schemas as a Cartesian product. It drops
    any pair that disagrees on an `alias.id` or on a cell value.
  - The module also has `is_prefix`, `join_schema_path`, `get_child_rows`,
    `create_empty_row` and `rows_to_table`.
- `tundragraph.graph` provides `Connection` together with `get_roots`,
  `connection_paths`, `describe_connections` and `join_container`. It also
  provides `apply_select` and `denormalized_fields`.
  - `apply_select` keeps the columns a SELECT list names. A dotted name selects
    that exact column, and a bare alias selects every `alias.` column.
  - `denormalized_fields` lays out the fields as `alias.field`.
- `tundragraph.file_utils` provides `write_to_file`, `read_from_file` and
  `file_exists`.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
from tundragraph.edge_store import EdgeStore
from tundragraph.table import CompareOp

store = EdgeStore(0)
edge = store.create_edge(1, "friend", 2, {})
store.add(edge)

store.get_outgoing_edges(1, "friend")   # [edge]
table = store.get_table("friend")
table.column_names()                    # ['id', 'source_id', 'target_id', 'created_ts']
table.num_rows()                        # 1
table.where("source_id", CompareOp.EQ, 1).num_rows()   # 1
```

## Errors

Errors are raised as exceptions:

- `EdgeStore.add` raises `KeyError` for a duplicate edge id.
- `EdgeStore.get` and `EdgeStore.get_version` raise `KeyError` for an unknown
  edge id or edge type.
- `EdgeStore.get_table` raises `KeyError` for an edge type that was never added.
- `read_from_file` raises `FileNotFoundError` for a missing file.

## What it does not do

The package contains only storage and result-shaping pieces. It has no node
store and no schema registry. It has no query language or parser, and no code
that runs a whole query. There is no interactive shell or command-line program.
Nothing is persisted to disk apart from the plain text-file helpers in
`file_utils`.