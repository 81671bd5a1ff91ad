from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .errors import UnsupportedPropertyError


# -----------------------------
# Property types
#
# Wire codes are fixed by the FBX binary format. The array variants are
# declared so a reader can name them, but the codec refuses to build or
# encode them (the array layout carries an encoding/compression header we do
# not produce).
# -----------------------------


class PropertyType(Enum):
    INT16 = (0x59, 2, False)
    INT32 = (0x49, 4, False)
    INT64 = (0x4C, 8, False)
    FLOAT32 = (0x46, 4, False)
    FLOAT64 = (0x44, 8, False)
    BOOLEAN = (0x43, 1, False)
    STRING = (0x53, None, False)
    BINARY = (0x52, None, False)
    ARRAY_INT32 = (0x69, 4, True)
    ARRAY_INT64 = (0x6C, 8, True)
    ARRAY_FLOAT32 = (0x66, 4, True)
    ARRAY_FLOAT64 = (0x64, 8, True)
    ARRAY_BOOLEAN = (0x62, 1, True)

    def __init__(self, code: int, size: Optional[int], is_array: bool):
        self.code = code
        self.size = size
        self.is_array = is_array

    @property
    def tag(self) -> str:
        return chr(self.code)

    @classmethod
    def from_code(cls, code: int) -> "PropertyType":
        for t in cls:
            if t.code == code:
                return t
        raise ValueError(f"Unknown property type code 0x{code:02X}")


_INT_RANGES = {
    PropertyType.INT16: (-(1 << 15), (1 << 15) - 1),
    PropertyType.INT32: (-(1 << 31), (1 << 31) - 1),
    PropertyType.INT64: (-(1 << 63), (1 << 63) - 1),
}


def _check_value(ptype: PropertyType, value: Any) -> Any:
    if ptype.is_array:
        raise UnsupportedPropertyError(f"Array property {ptype.name} is not supported by this writer")

    if ptype in _INT_RANGES:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{ptype.name} expects int, got {type(value).__name__}")
        lo, hi = _INT_RANGES[ptype]
        if not lo <= value <= hi:
            raise ValueError(f"{ptype.name} value {value} out of range [{lo}, {hi}]")
        return value

    if ptype in (PropertyType.FLOAT32, PropertyType.FLOAT64):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"{ptype.name} expects a number, got {type(value).__name__}")
        if ptype is PropertyType.FLOAT32:
            try:
                struct.pack("<f", value)
            except (struct.error, OverflowError) as e:
                raise ValueError(f"FLOAT32 value {value} does not fit in 32 bits") from e
        return float(value)

    if ptype is PropertyType.BOOLEAN:
        if not isinstance(value, bool):
            raise TypeError(f"BOOLEAN expects bool, got {type(value).__name__}")
        return value

    if ptype is PropertyType.STRING:
        if not isinstance(value, str):
            raise TypeError(f"STRING expects str, got {type(value).__name__}")
        return value

    # BINARY
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise TypeError(f"BINARY expects bytes, got {type(value).__name__}")
    return bytes(value)


@dataclass(frozen=True, eq=False)
class Property:
    """A single typed value attached to a node record.

    Compared by identity: two properties with the same type and value are
    both written when both are attached.
    """

    type: PropertyType
    value: Any

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _check_value(self.type, self.value))

    def payload_size(self) -> int:
        if self.type is PropertyType.STRING:
            return 4 + len(self.value.encode("utf-8"))
        if self.type is PropertyType.BINARY:
            return 4 + len(self.value)
        return self.type.size


# -----------------------------
# Node records
# -----------------------------


class NodeRecord:
    """A named node holding ordered properties and ordered child nodes.

    ``total_size`` and ``property_list_size`` stay ``None`` until the size
    pass has visited the node.
    """

    __slots__ = ("name", "properties", "children", "total_size", "property_list_size")

    def __init__(self, name: str, prop_type: Optional[PropertyType] = None, *values: Any):
        if len(name.encode("utf-8")) > 0xFF:
            raise ValueError(f"Node name too long for a u8 length field: {name[:32]!r}...")

        self.name = name
        self.properties: List[Property] = []
        self.children: List[NodeRecord] = []
        self.total_size: Optional[int] = None
        self.property_list_size: Optional[int] = None

        if prop_type is not None:
            self.add_property(prop_type, *values)

    def __repr__(self) -> str:
        return f"NodeRecord({self.name!r}, properties={len(self.properties)}, children={len(self.children)})"

    @property
    def is_sized(self) -> bool:
        return self.total_size is not None and self.property_list_size is not None

    def add_property(self, prop_type: PropertyType, *values: Any) -> None:
        for value in values:
            self.properties.append(Property(prop_type, value))

    def add_child(self, *children: "NodeRecord") -> Optional["NodeRecord"]:
        """Attach children in order and return the first one given.

        Attaching an instance that is already a child is ignored. No cycle
        check is made.
        """
        for child in children:
            if not any(c is child for c in self.children):
                self.children.append(child)
        return children[0] if children else None

    def walk(self):
        yield self
        for c in self.children:
            yield from c.walk()


# -----------------------------
# "P" records used inside Properties70 blocks.
# Each carries (name, type name, label, flags) strings followed by the value.
# -----------------------------


def _p(*strings: str) -> NodeRecord:
    return NodeRecord("P", PropertyType.STRING, *strings)


def bool_property(name: str, state: bool) -> NodeRecord:
    node = _p(name, "bool", "", "")
    node.add_property(PropertyType.INT32, 1 if state else 0)
    return node


def integer_property(name: str, value: int) -> NodeRecord:
    node = _p(name, "int", "Integer", "")
    node.add_property(PropertyType.INT32, value)
    return node


def enum_property(name: str, value: int) -> NodeRecord:
    node = _p(name, "enum", "", "")
    node.add_property(PropertyType.INT32, value)
    return node


def double_property(name: str, value: float) -> NodeRecord:
    node = _p(name, "double", "Number", "")
    node.add_property(PropertyType.FLOAT64, value)
    return node


def ktime_property(name: str, value: int) -> NodeRecord:
    node = _p(name, "KTime", "Time", "")
    node.add_property(PropertyType.INT64, value)
    return node


def kstring_property(name: str, value: str) -> NodeRecord:
    return _p(name, "KString", "", "", value)


def url_property(name: str, url: str) -> NodeRecord:
    return _p(name, "KString", "Url", url)


def object_property(name: str) -> NodeRecord:
    return _p(name, "object", "", "")


def vector3d_property(name: str, x: float, y: float, z: float) -> NodeRecord:
    node = _p(name, "Vector3D", "Vector", "")
    node.add_property(PropertyType.FLOAT64, x, y, z)
    return node


def color_rgb_property(name: str, r: float, g: float, b: float) -> NodeRecord:
    node = _p(name, "ColorRGB", "Color", "")
    node.add_property(PropertyType.FLOAT64, r, g, b)
    return node


def lcl_vector_property(name: str, x: float, y: float, z: float) -> NodeRecord:
    # Animatable local transform; the type name repeats the property name.
    node = _p(name, name, "", "A")
    node.add_property(PropertyType.FLOAT64, x, y, z)
    return node


def compound_properties(group: str, fields: List[Tuple[str, str, str]]) -> List[NodeRecord]:
    """Build a compound header record plus one ``group|field`` record per field.

    ``fields`` is a list of ``(field_name, type_name, value)``.
    """
    nodes = [_p(group, "Compound", "", "")]
    for key, type_name, value in fields:
        nodes.append(_p(f"{group}|{key}", type_name, "", "", value))
    return nodes


def count_nodes(tree: List[NodeRecord]) -> Dict[str, int]:
    nodes = 0
    props = 0
    for root in tree:
        for n in root.walk():
            nodes += 1
            props += len(n.properties)
    return {"nodes": nodes, "properties": props}
