"""libfbx.reader

Strict reader for binary FBX files produced by libfbx.writer.

It exists to verify output: every node's end offset, property list length
and child-list terminator is checked against what was actually parsed, and
the parsed tree can be fed straight back into the writer. Re-serialising an
unmodified tree must reproduce the input byte for byte.

Array properties (and therefore most files written by other tools) are
rejected.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import List

from .errors import FbxReadError
from .model import NodeRecord, Property, PropertyType
from .sizing import NULL_RECORD_SIZE
from .writer import FBX_MAGIC


@dataclass
class FbxFile:
    version: int
    nodes: List[NodeRecord] = field(default_factory=list)


@dataclass
class _Bin:
    data: bytes
    ofs: int = 0

    def tell(self) -> int:
        return self.ofs

    def read(self, n: int) -> bytes:
        b = self.data[self.ofs : self.ofs + n]
        if len(b) != n:
            raise FbxReadError(f"Unexpected EOF at {self.ofs}, need {n}")
        self.ofs += n
        return b

    def unpack(self, fmt: str):
        return struct.unpack(fmt, self.read(struct.calcsize(fmt)))[0]


_SCALAR_FORMATS = {
    PropertyType.INT16: "<h",
    PropertyType.INT32: "<i",
    PropertyType.INT64: "<q",
    PropertyType.FLOAT32: "<f",
    PropertyType.FLOAT64: "<d",
}


def _read_property(b: _Bin) -> Property:
    ofs = b.tell()
    code = b.unpack("<B")
    try:
        t = PropertyType.from_code(code)
    except ValueError as e:
        raise FbxReadError(f"{e} at offset {ofs}") from e

    if t.is_array:
        raise FbxReadError(f"Array property {t.name} at offset {ofs} is not supported")

    if t in _SCALAR_FORMATS:
        return Property(t, b.unpack(_SCALAR_FORMATS[t]))
    if t is PropertyType.BOOLEAN:
        return Property(t, b.unpack("<B") != 0)

    length = b.unpack("<I")
    raw = b.read(length)
    if t is PropertyType.STRING:
        try:
            return Property(t, raw.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise FbxReadError(f"Invalid UTF-8 string at offset {ofs}") from e
    return Property(t, raw)


def _read_node(b: _Bin) -> NodeRecord:
    start = b.tell()
    end = b.unpack("<I")
    prop_count = b.unpack("<I")
    prop_len = b.unpack("<I")
    name_len = b.unpack("<B")
    try:
        name = b.read(name_len).decode("utf-8")
    except UnicodeDecodeError as e:
        raise FbxReadError(f"Invalid node name at offset {start}") from e

    if end <= start or end > len(b.data):
        raise FbxReadError(f"Node {name!r} at {start}: bad end offset {end}")

    node = NodeRecord(name)
    props_start = b.tell()
    for _ in range(prop_count):
        node.properties.append(_read_property(b))
    if b.tell() - props_start != prop_len:
        raise FbxReadError(
            f"Node {name!r} at {start}: property list is {b.tell() - props_start} bytes, header says {prop_len}"
        )

    if b.tell() < end:
        while b.tell() < end - NULL_RECORD_SIZE:
            node.children.append(_read_node(b))
        if not node.children:
            raise FbxReadError(f"Node {name!r} at {start}: child list terminator on a node without children")
        if b.read(NULL_RECORD_SIZE) != b"\x00" * NULL_RECORD_SIZE:
            raise FbxReadError(f"Node {name!r} at {start}: missing child list terminator")

    if b.tell() != end:
        raise FbxReadError(f"Node {name!r} at {start}: ended at {b.tell()}, header says {end}")

    node.total_size = end - start
    node.property_list_size = prop_len
    return node


def parse_fbx(data: bytes) -> FbxFile:
    b = _Bin(data)
    if b.read(len(FBX_MAGIC)) != FBX_MAGIC:
        raise FbxReadError("Not a binary FBX file (missing 'Kaydara FBX Binary' magic)")
    b.read(2)
    version = b.unpack("<I")

    f = FbxFile(version=version)
    while b.tell() < len(data):
        f.nodes.append(_read_node(b))
    return f


def read_fbx(path: str) -> FbxFile:
    with open(path, "rb") as f:
        data = f.read()
    return parse_fbx(data)
