from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional

from .model import count_nodes
from .reader import read_fbx
from .writer import PREAMBLE_SIZE


@dataclass
class FbxRootInfo:
    name: str
    offset: int
    size: int
    children: int


@dataclass
class FbxSummary:
    path: str
    file_size: int
    version: int
    roots: List[FbxRootInfo]
    node_count: int
    property_count: int
    creator: Optional[str]

    @property
    def version_str(self) -> str:
        return f"{self.version // 1000}.{self.version % 1000 // 100}"


def summarize_fbx(path: str) -> FbxSummary:
    f = read_fbx(path)

    roots: List[FbxRootInfo] = []
    ofs = PREAMBLE_SIZE
    creator = None
    for n in f.nodes:
        roots.append(FbxRootInfo(name=n.name, offset=ofs, size=n.total_size, children=len(n.children)))
        ofs += n.total_size
        if n.name == "Creator" and n.properties:
            creator = n.properties[0].value

    counts = count_nodes(f.nodes)
    return FbxSummary(
        path=path,
        file_size=os.path.getsize(path),
        version=f.version,
        roots=roots,
        node_count=counts["nodes"],
        property_count=counts["properties"],
        creator=creator,
    )
