from libfbx.model import NodeRecord, PropertyType
from libfbx.sizing import NODE_HEADER_SIZE, NULL_RECORD_SIZE, calculate_tree_size


def test_single_leaf():
    n = NodeRecord("X", PropertyType.INT32, 42)
    assert calculate_tree_size(n) == 19
    assert n.total_size == 19
    assert n.property_list_size == 5


def test_empty_leaf_has_no_trailer():
    n = NodeRecord("References")
    assert calculate_tree_size(n) == NODE_HEADER_SIZE + len("References")
    assert n.property_list_size == 0


def test_trailer_added_when_children_present():
    parent = NodeRecord("P")
    child = parent.add_child(NodeRecord("C"))
    total = calculate_tree_size(parent)
    assert child.total_size == 14
    assert total == 14 + 14 + NULL_RECORD_SIZE
    assert parent.total_size == total


def test_trailer_independent_of_property_count():
    parent = NodeRecord("Takes", PropertyType.STRING, "a", "b")
    parent.add_child(NodeRecord("Current", PropertyType.STRING, ""))
    calculate_tree_size(parent)
    header = NODE_HEADER_SIZE + len("Takes")
    props = 2 * (1 + 4 + 1)
    child = NODE_HEADER_SIZE + len("Current") + 1 + 4
    assert parent.property_list_size == props
    assert parent.total_size == header + props + child + NULL_RECORD_SIZE


def test_property_list_size_for_mixed_types():
    n = NodeRecord("Mixed")
    n.add_property(PropertyType.INT16, 1)
    n.add_property(PropertyType.INT64, 1)
    n.add_property(PropertyType.FLOAT32, 1.0)
    n.add_property(PropertyType.FLOAT64, 1.0)
    n.add_property(PropertyType.BOOLEAN, True)
    n.add_property(PropertyType.STRING, "ü")
    n.add_property(PropertyType.BINARY, b"\x01\x02\x03")
    calculate_tree_size(n)
    assert n.property_list_size == (1 + 2) + (1 + 8) + (1 + 4) + (1 + 8) + (1 + 1) + (1 + 4 + 2) + (1 + 4 + 3)


def test_utf8_name_length():
    n = NodeRecord("Größe")
    assert calculate_tree_size(n) == NODE_HEADER_SIZE + len("Größe".encode("utf-8"))


def test_sequence_sum_without_trailer():
    roots = [NodeRecord("A"), NodeRecord("B", PropertyType.INT32, 1)]
    assert calculate_tree_size(roots) == 14 + 19
    assert calculate_tree_size([]) == 0


def test_nested_sizes_accumulate():
    root = NodeRecord("Root")
    mid = root.add_child(NodeRecord("Mid", PropertyType.INT32, 7))
    mid.add_child(NodeRecord("Leaf", PropertyType.STRING, "abc"))
    calculate_tree_size(root)
    leaf_size = NODE_HEADER_SIZE + 4 + (1 + 4 + 3)
    mid_size = NODE_HEADER_SIZE + 3 + 5 + leaf_size + NULL_RECORD_SIZE
    assert mid.children[0].total_size == leaf_size
    assert mid.total_size == mid_size
    assert root.total_size == NODE_HEADER_SIZE + 4 + mid_size + NULL_RECORD_SIZE
