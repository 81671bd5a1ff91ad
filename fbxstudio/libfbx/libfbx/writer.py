"""libfbx.writer

Binary FBX 7.4 writer (second pass).

The size pass (libfbx.sizing) must have annotated every node before this
module runs. The whole file is produced into one pre-sized buffer and only
then flushed to disk, so a failure never leaves a half-written node record
behind on the normal path.

File layout:
  "Kaydara FBX Binary  \\0"   21 bytes
  0x1A 0x00                   2 bytes (unknown, required)
  u32 version                 7400
  <root node records>
"""

from __future__ import annotations

import logging
import os
import struct
from typing import Iterable, List, Union

from .errors import FbxWriteError, SizeMismatchError, UnsizedNodeError
from .model import NodeRecord, PropertyType
from .sizing import NULL_RECORD_SIZE, calculate_tree_size

log = logging.getLogger(__name__)

FBX_MAGIC = b"Kaydara FBX Binary  \x00"
FBX_VERSION = 7400
PREAMBLE_SIZE = len(FBX_MAGIC) + 2 + 4


class FbxBuffer:
    """Fixed-size little-endian output buffer with a write cursor."""

    __slots__ = ("data", "offset")

    def __init__(self, size: int):
        self.data = bytearray(size)
        self.offset = 0

    def _put(self, fmt: str, v) -> None:
        struct.pack_into(fmt, self.data, self.offset, v)
        self.offset += struct.calcsize(fmt)

    def u8(self, v: int) -> None:
        self._put("<B", v)

    def u32(self, v: int) -> None:
        self._put("<I", v)

    def i16(self, v: int) -> None:
        self._put("<h", v)

    def i32(self, v: int) -> None:
        self._put("<i", v)

    def i64(self, v: int) -> None:
        self._put("<q", v)

    def f32(self, v: float) -> None:
        self._put("<f", v)

    def f64(self, v: float) -> None:
        self._put("<d", v)

    def raw(self, b: bytes) -> None:
        end = self.offset + len(b)
        if end > len(self.data):
            raise struct.error(f"Buffer overrun at {self.offset}, need {len(b)}")
        self.data[self.offset:end] = b
        self.offset = end


_SCALAR_WRITERS = {
    PropertyType.INT16: FbxBuffer.i16,
    PropertyType.INT32: FbxBuffer.i32,
    PropertyType.INT64: FbxBuffer.i64,
    PropertyType.FLOAT32: FbxBuffer.f32,
    PropertyType.FLOAT64: FbxBuffer.f64,
}


def write_node(node: NodeRecord, buf: FbxBuffer) -> None:
    if not node.is_sized:
        raise UnsizedNodeError(f"Node {node.name!r} reached the writer before the size pass")

    start = buf.offset
    end = start + node.total_size

    name = node.name.encode("utf-8")
    buf.u32(end)
    buf.u32(len(node.properties))
    buf.u32(node.property_list_size)
    buf.u8(len(name))
    buf.raw(name)

    for prop in node.properties:
        buf.u8(prop.type.code)
        t = prop.type
        if t in _SCALAR_WRITERS:
            _SCALAR_WRITERS[t](buf, prop.value)
        elif t is PropertyType.BOOLEAN:
            buf.u8(0x01 if prop.value else 0x00)
        elif t is PropertyType.STRING:
            b = prop.value.encode("utf-8")
            buf.u32(len(b))
            buf.raw(b)
        elif t is PropertyType.BINARY:
            buf.u32(len(prop.value))
            buf.raw(prop.value)

    for child in node.children:
        write_node(child, buf)

    if node.children:
        buf.raw(b"\x00" * NULL_RECORD_SIZE)

    if buf.offset != end:
        raise SizeMismatchError(
            f"Node {node.name!r} at {start}: wrote {buf.offset - start} bytes, sized {node.total_size}"
        )


def serialize_tree(tree: Union[NodeRecord, Iterable[NodeRecord]]) -> bytes:
    """Size and serialise a tree into the complete file bytes."""
    roots: List[NodeRecord] = [tree] if isinstance(tree, NodeRecord) else list(tree)
    tree_size = calculate_tree_size(roots)
    log.debug("Sized %d root nodes: %d bytes", len(roots), tree_size)

    buf = FbxBuffer(PREAMBLE_SIZE + tree_size)
    buf.raw(FBX_MAGIC)
    buf.u8(0x1A)
    buf.u8(0x00)
    buf.u32(FBX_VERSION)

    for root in roots:
        write_node(root, buf)

    return bytes(buf.data)


def write_fbx(tree: Union[NodeRecord, Iterable[NodeRecord]], out_path: str, overwrite: bool = True) -> bool:
    """Serialise ``tree`` and write it to ``out_path``.

    Returns False without touching the file system when ``overwrite`` is
    disabled and the destination exists.
    """
    if not overwrite and os.path.exists(out_path):
        log.info("Skipping existing file %s", out_path)
        return False

    data = serialize_tree(tree)

    try:
        parent = os.path.dirname(os.path.abspath(out_path))
        os.makedirs(parent, exist_ok=True)
        with open(out_path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise FbxWriteError(f"Failed to write {out_path}: {e}") from e

    log.info("Wrote %s (%d bytes)", out_path, len(data))
    return True
