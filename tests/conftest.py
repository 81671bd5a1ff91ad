import random
from datetime import datetime, timezone

import pytest

from libfbx.builder import DocumentBuilder
from libfbx.config import AppInfo

FIXED_NOW = datetime(2024, 3, 5, 7, 8, 9, 45000, tzinfo=timezone.utc)


@pytest.fixture
def app():
    return AppInfo(name="fbxstudio", version="1.2.3", flavour="test")


@pytest.fixture
def make_builder(app):
    def _make(seed=1234, name="out.fbx"):
        return DocumentBuilder(name, app, now=FIXED_NOW, rng=random.Random(seed))
    return _make


def find(nodes, *path):
    """Follow a chain of node names starting from a list of nodes."""
    node = None
    for name in path:
        matches = [n for n in nodes if n.name == name]
        assert matches, f"no node {name!r} in {[n.name for n in nodes]}"
        node = matches[0]
        nodes = node.children
    return node
