"""libfbx.sizing

First pass of the two-pass writer.

Every node header stores the absolute offset of the end of its subtree, so
the size of each subtree has to be known before the first byte is written.
This pass walks the tree once (post-order) and stores on every node:

  total_size          header + properties + children + trailer
  property_list_size  bytes taken by the encoded property list alone

Node header layout (FBX 7.4, 32-bit offsets):
  u32 end_offset
  u32 property_count
  u32 property_list_length
  u8  name_length
  <name bytes>
"""

from __future__ import annotations

from typing import Iterable, Union

from .model import NodeRecord

NODE_HEADER_SIZE = 4 + 4 + 4 + 1

# Null record closing a child list.
NULL_RECORD_SIZE = 13


def _size_node(node: NodeRecord) -> int:
    size = NODE_HEADER_SIZE + len(node.name.encode("utf-8"))

    prop_size = 0
    for prop in node.properties:
        prop_size += 1 + prop.payload_size()
    size += prop_size

    for child in node.children:
        size += _size_node(child)

    if node.children:
        size += NULL_RECORD_SIZE

    node.total_size = size
    node.property_list_size = prop_size
    return size


def calculate_tree_size(tree: Union[NodeRecord, Iterable[NodeRecord]]) -> int:
    """Size a node, or a sequence of root nodes, annotating every node visited.

    For a sequence the result is the sum of the root sizes; nothing is added
    after the last root.
    """
    if isinstance(tree, NodeRecord):
        return _size_node(tree)
    return sum(_size_node(root) for root in tree)
