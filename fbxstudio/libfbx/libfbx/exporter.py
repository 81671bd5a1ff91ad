from __future__ import annotations

import logging
import os
import random
from datetime import datetime
from typing import Optional, Sequence

from .builder import DocumentBuilder
from .config import AppInfo
from .model import NodeRecord
from .writer import write_fbx

log = logging.getLogger(__name__)


class FbxExporter:
    """Build, size and write one FBX document.

    Each call to export() builds a fresh tree; nothing is shared between
    exports.
    """

    def __init__(self, out_path: str, app: Optional[AppInfo] = None, overwrite: bool = True):
        self.out_path = out_path
        self.app = app or AppInfo()
        self.overwrite = overwrite

    def export(
        self,
        objects: Sequence[NodeRecord] = (),
        connections: Sequence[NodeRecord] = (),
        now: Optional[datetime] = None,
        rng: Optional[random.Random] = None,
    ) -> bool:
        if not self.overwrite and os.path.exists(self.out_path):
            log.info("Export skipped, %s already exists", self.out_path)
            return False

        builder = DocumentBuilder(os.path.basename(self.out_path), self.app, now=now, rng=rng)
        tree = builder.build(objects=objects, connections=connections)
        return write_fbx(tree, self.out_path, overwrite=self.overwrite)
