import pytest

from tundragraph.rows import (
    PathSegment,
    Row,
    RowNode,
    create_empty_row,
    get_child_rows,
    is_prefix,
    join_schema_path,
    rows_to_table,
)
from tundragraph.table import Field, ValueType


def seg(schema, node_id):
    return PathSegment(schema, node_id)


def test_path_segment_str():
    assert str(seg("users", 3)) == "users:3"


def test_is_prefix_cases():
    path = [seg("u", 0), seg("f", 1), seg("c", 2)]
    assert is_prefix([], path)
    assert is_prefix(path[:2], path)
    assert is_prefix(path, path)
    assert not is_prefix([seg("u", 1)], path)
    assert not is_prefix(path + [seg("x", 9)], path)


def test_join_schema_path():
    assert join_schema_path([seg("a", 0), seg("b", 1)]) == "a:0->b:1"
    assert join_schema_path([]) == ""


def test_set_cell_and_has_value():
    row = Row()
    row.set_cell("u.name", "alice")
    row.set_cell("u.age", None)
    row.set_cell("u.blob", object())
    assert row.has_value("u.name")
    assert not row.has_value("u.age")
    assert not row.has_value("u.blob")
    assert row.cells["u.blob"] is None
    assert not row.has_value("missing")


def test_start_with():
    row = Row(path=[seg("u", 0), seg("f", 1)])
    assert row.start_with([seg("u", 0)])
    assert not row.start_with([seg("f", 1)])


def test_extract_schema_ids():
    row = Row(cells={"u.id": 0, "u.name": "a", "f.id": 5, "c.id": None, "plain": 1})
    assert row.extract_schema_ids() == {"u": 0, "f": 5}


def test_merge_fills_only_nulls():
    first = Row(id=1, cells={"u.id": 0, "u.name": None}, path=[seg("u", 0)])
    second = Row(id=2, cells={"u.id": 7, "u.name": "bob", "f.id": 3})
    merged = first.merge(second)
    assert merged.cells == {"u.id": 0, "u.name": "bob", "f.id": 3}
    assert merged.path == [seg("u", 0)]
    assert first.cells["u.name"] is None


def test_row_str_formats_values():
    row = Row(cells={"u.name": "a", "u.ok": True, "u.x": None}, path=[seg("u", 0)])
    text = str(row)
    assert text.startswith("Row{path='u:0'")
    assert 'u.name: "a"' in text
    assert "u.ok: true" in text
    assert "u.x: NULL" in text


def test_get_child_rows():
    parent = Row(id=0, path=[seg("u", 0)])
    child = Row(id=1, path=[seg("u", 0), seg("f", 1)])
    other = Row(id=2, path=[seg("u", 5)])
    assert get_child_rows(parent, [parent, child, other]) == [child]


def test_insert_row_builds_tree():
    tree = RowNode()
    tree.insert_row(Row(id=0, path=[seg("u", 0), seg("f", 1)]))
    tree.insert_row(Row(id=1, path=[seg("u", 0), seg("c", 2)]))
    assert not tree.is_leaf()
    assert len(tree.children) == 1
    user = tree.children[0]
    assert user.path_segment == seg("u", 0)
    assert user.depth == 1
    assert [c.path_segment for c in user.children] == [seg("f", 1), seg("c", 2)]
    assert all(c.is_leaf() and c.depth == 2 for c in user.children)


def test_merge_rows_joins_branches():
    tree = RowNode()
    tree.insert_row(
        Row(id=0, cells={"u.id": 0, "u.name": "a", "f.id": 1, "c.id": None},
            path=[seg("u", 0), seg("f", 1)])
    )
    tree.insert_row(
        Row(id=1, cells={"u.id": 0, "u.name": "a", "f.id": None, "c.id": 2},
            path=[seg("u", 0), seg("c", 2)])
    )
    merged = tree.merge_rows()
    assert len(merged) == 1
    assert merged[0].cells == {"u.id": 0, "u.name": "a", "f.id": 1, "c.id": 2}
    assert merged[0].path == [seg("u", 0)]


def test_merge_rows_cartesian_product():
    tree = RowNode()
    for i, (schema, node_id) in enumerate([("f", 1), ("f", 2), ("c", 3), ("c", 4)]):
        tree.insert_row(
            Row(id=i, cells={"u.id": 0, f"{schema}.id": node_id},
                path=[seg("u", 0), seg(schema, node_id)])
        )
    merged = tree.merge_rows()
    pairs = {(r.cells["f.id"], r.cells["c.id"]) for r in merged}
    assert pairs == {(1, 3), (1, 4), (2, 3), (2, 4)}


def test_merge_rows_drops_conflicts():
    tree = RowNode()
    tree.insert_row(Row(id=0, cells={"u.id": 0, "f.id": 1}, path=[seg("u", 0), seg("f", 1)]))
    tree.insert_row(Row(id=1, cells={"u.id": 9, "c.id": 2}, path=[seg("u", 0), seg("c", 2)]))
    assert tree.merge_rows() == []


def test_merge_rows_leaf_returns_own_row():
    node = RowNode()
    node.insert_row(Row(id=3, cells={"u.id": 0}, path=[]))
    assert node.is_leaf()
    assert [r.cells for r in node.merge_rows()] == [{"u.id": 0}]


def test_merge_rows_empty_tree():
    assert RowNode().merge_rows() == []


def test_to_string_recursive_and_flat():
    tree = RowNode()
    tree.insert_row(Row(id=0, cells={"u.id": 0}, path=[seg("u", 0)]))
    full = tree.to_string(True, 0)
    assert full.startswith("RowNode [path=root:-1, depth=0] {\n")
    assert "RowNode [path=u:0, depth=1]" in full
    assert "Children: 1" in full
    flat = tree.to_string(False, 0)
    assert "u:0, depth=1" not in flat


def test_to_string_limits_cells():
    node = RowNode()
    node.insert_row(Row(cells={f"u.c{i}": i for i in range(7)}, path=[]))
    text = node.to_string(False, 0)
    assert "... +2 more" in text
    assert "u.c5" not in text


def test_create_empty_row():
    fields = [Field("u.id", ValueType.INT64), Field("u.name", ValueType.STRING)]
    row = create_empty_row(fields)
    assert row.cells == {"u.id": None, "u.name": None}
    assert not any(row.has_value(f.name) for f in fields)


def test_rows_to_table_with_fields():
    fields = [Field("u.id", ValueType.INT64), Field("u.name", ValueType.STRING)]
    rows = [Row(cells={"u.id": 1, "u.name": "a"}), Row(cells={"u.id": 2})]
    table = rows_to_table(rows, fields)
    assert table.column("u.id") == [1, 2]
    assert table.column("u.name") == ["a", None]


def test_rows_to_table_infers_fields():
    table = rows_to_table([Row(cells={"b": None, "a": 5})])
    assert table.column_names() == ["a", "b"]
    assert table.field("a").type is ValueType.INT64
    assert table.field("b").type is ValueType.STRING


def test_rows_to_table_empty():
    fields = [Field("u.id", ValueType.INT64)]
    table = rows_to_table([], fields)
    assert table.num_rows() == 0
    assert table.column_names() == ["u.id"]
    with pytest.raises(ValueError):
        rows_to_table([])