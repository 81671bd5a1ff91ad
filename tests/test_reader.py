import struct

import pytest

from libfbx.errors import FbxReadError
from libfbx.model import NodeRecord, PropertyType
from libfbx.reader import parse_fbx, read_fbx
from libfbx.writer import serialize_tree


def _walk_pairs(a, b):
    assert len(a) == len(b)
    for x, y in zip(a, b):
        yield x, y
        yield from _walk_pairs(x.children, y.children)


def test_empty_file():
    f = parse_fbx(serialize_tree([]))
    assert f.version == 7400
    assert f.nodes == []


def test_all_scalar_types_roundtrip():
    n = NodeRecord("All")
    n.add_property(PropertyType.INT16, -7)
    n.add_property(PropertyType.INT32, 123456)
    n.add_property(PropertyType.INT64, -(1 << 40))
    n.add_property(PropertyType.FLOAT32, 0.25)
    n.add_property(PropertyType.FLOAT64, 3.5)
    n.add_property(PropertyType.BOOLEAN, True)
    n.add_property(PropertyType.STRING, "naïve")
    n.add_property(PropertyType.BINARY, bytes(range(10)))
    data = serialize_tree([n])

    f = parse_fbx(data)
    node = f.nodes[0]
    assert [(p.type, p.value) for p in node.properties] == [(p.type, p.value) for p in n.properties]
    assert serialize_tree(f.nodes) == data


def test_full_document_offsets(make_builder):
    tree = make_builder().build()
    data = serialize_tree(tree)
    parsed = parse_fbx(data)

    for orig, got in _walk_pairs(tree, parsed.nodes):
        assert orig.name == got.name
        assert got.total_size == orig.total_size
        assert got.property_list_size == orig.property_list_size
        assert got.property_list_size == sum(1 + p.payload_size() for p in got.properties)

    assert serialize_tree(parsed.nodes) == data


def test_read_fbx_from_disk(tmp_path, make_builder):
    out = tmp_path / "x.fbx"
    out.write_bytes(serialize_tree(make_builder().build()))
    f = read_fbx(str(out))
    assert [n.name for n in f.nodes][0] == "FBXHeaderExtension"


def test_bad_magic():
    with pytest.raises(FbxReadError):
        parse_fbx(b"Not FBX at all, definitely not" + b"\x00" * 8)


def test_truncated_file():
    data = serialize_tree([NodeRecord("X", PropertyType.INT32, 42)])
    with pytest.raises(FbxReadError):
        parse_fbx(data[:-2])


def test_bad_end_offset():
    data = bytearray(serialize_tree([NodeRecord("X", PropertyType.INT32, 42), NodeRecord("Y")]))
    struct.pack_into("<I", data, 27, 27 + 18)
    with pytest.raises(FbxReadError):
        parse_fbx(bytes(data))


def test_bad_property_list_length():
    data = bytearray(serialize_tree([NodeRecord("X", PropertyType.INT32, 42)]))
    struct.pack_into("<I", data, 27 + 8, 4)
    with pytest.raises(FbxReadError):
        parse_fbx(bytes(data))


def test_missing_terminator():
    parent = NodeRecord("P")
    parent.add_child(NodeRecord("C"))
    data = bytearray(serialize_tree([parent]))
    data[-1] = 0x01
    with pytest.raises(FbxReadError):
        parse_fbx(bytes(data))


def test_terminator_on_leaf_rejected():
    empty = serialize_tree([])
    data = empty + struct.pack("<III", 27 + 14 + 13, 0, 0) + b"\x01X" + b"\x00" * 13
    with pytest.raises(FbxReadError):
        parse_fbx(data)


def test_array_property_rejected():
    data = bytearray(serialize_tree([NodeRecord("X", PropertyType.INT32, 42)]))
    data[27 + 13 + 1] = ord("i")
    with pytest.raises(FbxReadError):
        parse_fbx(bytes(data))
