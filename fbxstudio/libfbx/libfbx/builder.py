"""libfbx.builder

Builds the fixed top-level skeleton of an FBX 7.4 document.

The file is a flat list of root records, always in this order:

  FBXHeaderExtension, FileId, CreationTime, Creator, GlobalSettings,
  Documents, References, Definitions, Objects, Connections, Takes

Objects and Connections are left empty unless the caller passes subtrees to
attach (geometry/model records and their links are produced elsewhere).
"""

from __future__ import annotations

import os
import random
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from .config import AppInfo
from .model import (
    NodeRecord,
    PropertyType,
    bool_property,
    color_rgb_property,
    compound_properties,
    double_property,
    enum_property,
    integer_property,
    ktime_property,
    kstring_property,
    lcl_vector_property,
    object_property,
    url_property,
    vector3d_property,
)
from .writer import FBX_VERSION

FBX_HEADER_VERSION = 1003

ROOT_ORDER = (
    "FBXHeaderExtension",
    "FileId",
    "CreationTime",
    "Creator",
    "GlobalSettings",
    "Documents",
    "References",
    "Definitions",
    "Objects",
    "Connections",
    "Takes",
)

I32 = PropertyType.INT32
STR = PropertyType.STRING


def _gmt_date_time(now: datetime) -> str:
    # DD/MM/YYYY H:MM:SS:mmm
    return (
        f"{now.day:02d}/{now.month:02d}/{now.year} "
        f"{now.hour}:{now.minute:02d}:{now.second:02d}:{now.microsecond // 1000:03d}"
    )


def _creation_time(now: datetime) -> str:
    # YYYY/MM/DD H:MM:SS:mmm
    return (
        f"{now.year}/{now.month:02d}/{now.day:02d} "
        f"{now.hour}:{now.minute:02d}:{now.second:02d}:{now.microsecond // 1000:03d}"
    )


class DocumentBuilder:
    """Assembles the root records for one export.

    ``now`` and ``rng`` are injectable; with both fixed, two builds produce
    byte-identical files.
    """

    def __init__(
        self,
        document_name: str,
        app: Optional[AppInfo] = None,
        now: Optional[datetime] = None,
        rng: Optional[random.Random] = None,
    ):
        self.document_name = document_name
        self.app = app or AppInfo()
        self.now = now or datetime.now(timezone.utc)
        self.rng = rng

    @property
    def utc_now(self) -> datetime:
        return self.now.astimezone(timezone.utc)

    @property
    def local_now(self) -> datetime:
        return self.now.astimezone()

    # -----------------------------
    # FBXHeaderExtension
    # -----------------------------

    def build_creation_timestamp(self) -> NodeRecord:
        t = self.local_now
        stamp = NodeRecord("CreationTimeStamp")
        stamp.add_child(
            NodeRecord("Version", I32, 1000),
            NodeRecord("Year", I32, t.year),
            NodeRecord("Month", I32, t.month),
            NodeRecord("Day", I32, t.day),
            NodeRecord("Hour", I32, t.hour),
            NodeRecord("Minute", I32, t.minute),
            NodeRecord("Second", I32, t.second),
            NodeRecord("Millisecond", I32, t.microsecond // 1000),
        )
        return stamp

    def build_scene_info(self) -> NodeRecord:
        info = NodeRecord("SceneInfo", STR, "GlobalInfoSceneInfo", "UserData")
        info.add_child(NodeRecord("Type", STR, "UserData"))
        info.add_child(NodeRecord("Version", I32, 100))

        meta = info.add_child(NodeRecord("MetaData"))
        meta.add_child(NodeRecord("Version", I32, 100))
        for key in ("Title", "Subject", "Author", "Keywords", "Revision", "Comment"):
            meta.add_child(NodeRecord(key, STR, ""))

        base = "/" + os.path.basename(self.document_name)
        props = info.add_child(NodeRecord("Properties70"))
        props.add_child(url_property("DocumentUrl", base))
        props.add_child(url_property("SrcDocumentUrl", base))

        last_saved = [
            ("ApplicationVendor", "KString", self.app.vendor_name),
            ("ApplicationName", "KString", self.app.name),
            ("ApplicationVersion", "KString", self.app.version),
            ("DateTime_GMT", "DateTime", _gmt_date_time(self.utc_now)),
        ]
        props.add_child(*compound_properties("Original", [("FileName", "KString", base)] + last_saved))
        props.add_child(*compound_properties("LastSaved", last_saved))
        return info

    def build_header_extension(self) -> NodeRecord:
        header = NodeRecord("FBXHeaderExtension")
        header.add_child(NodeRecord("FBXHeaderVersion", I32, FBX_HEADER_VERSION))
        header.add_child(NodeRecord("FBXVersion", I32, FBX_VERSION))
        header.add_child(NodeRecord("EncryptionType", I32, 0))
        header.add_child(self.build_creation_timestamp())
        header.add_child(NodeRecord("Creator", STR, self.app.application_string))
        header.add_child(self.build_scene_info())
        return header

    # -----------------------------
    # Small root records
    # -----------------------------

    def build_file_id(self) -> NodeRecord:
        if self.rng is None:
            file_id = os.urandom(16)
        else:
            file_id = bytes(self.rng.randrange(256) for _ in range(16))
        return NodeRecord("FileId", PropertyType.BINARY, file_id)

    def build_creation_time(self) -> NodeRecord:
        return NodeRecord("CreationTime", STR, _creation_time(self.utc_now))

    def build_creator(self) -> NodeRecord:
        return NodeRecord("Creator", STR, self.app.application_string)

    def build_documents(self) -> NodeRecord:
        node = NodeRecord("Documents")
        node.add_child(NodeRecord("Count", I32, 0))
        return node

    def build_takes(self) -> NodeRecord:
        node = NodeRecord("Takes")
        node.add_child(NodeRecord("Current", STR, ""))
        return node

    # -----------------------------
    # GlobalSettings
    # -----------------------------

    def build_global_settings(self) -> NodeRecord:
        node = NodeRecord("GlobalSettings")
        node.add_child(NodeRecord("Version", I32, 1000))

        props = node.add_child(NodeRecord("Properties70"))
        props.add_child(
            integer_property("UpAxis", 1),
            integer_property("UpAxisSign", 1),
            integer_property("FrontAxis", 2),
            integer_property("FrontAxisSign", 1),
            integer_property("CoordAxis", 0),
            integer_property("CoordAxisSign", 1),
            integer_property("OriginalUpAxis", -1),
            integer_property("OriginalUpAxisSign", 1),
            double_property("UnitScaleFactor", 1),
            double_property("OriginalUnitScaleFactor", 1),
            color_rgb_property("AmbientColor", 0, 0, 0),
            kstring_property("DefaultCamera", "Producer Perspective"),
            enum_property("TimeMode", 11),
            ktime_property("TimeSpanStart", 0),
            ktime_property("TimeSpanStop", 46186158000),
            double_property("CustomFrameFrame", 24),
        )
        return node

    # -----------------------------
    # Definitions (object type templates)
    # -----------------------------

    def _mesh_template(self) -> List[NodeRecord]:
        return [
            color_rgb_property("Color", 0.8, 0.8, 0.8),
            vector3d_property("BBoxMin", 0, 0, 0),
            vector3d_property("BBoxMax", 0, 0, 0),
            bool_property("Primary Visibility", True),
            bool_property("Casts Shadows", True),
            bool_property("Receive Shadows", True),
        ]

    def _node_template(self) -> List[NodeRecord]:
        props = [
            enum_property("QuaternionInterpolate", 0),
            vector3d_property("RotationOffset", 0, 0, 0),
            vector3d_property("RotationPivot", 0, 0, 0),
            vector3d_property("ScalingOffset", 0, 0, 0),
            vector3d_property("ScalingPivot", 0, 0, 0),
            bool_property("TranslationActive", False),
            vector3d_property("TranslationMin", 0, 0, 0),
            vector3d_property("TranslationMax", 0, 0, 0),
        ]
        props += [bool_property(f"TranslationM{m}{a}", False) for m in ("in", "ax") for a in "XYZ"]
        props += [
            bool_property("RotationOrder", False),
            bool_property("RotationSpaceForLimitOnly", False),
        ]
        props += [bool_property(f"RotationStiffness{a}", False) for a in "XYZ"]
        props += [
            bool_property("AxisLen", False),
            vector3d_property("PreRotation", 0, 0, 0),
            vector3d_property("PostRotation", 0, 0, 0),
            bool_property("RotationActive", False),
            vector3d_property("RotationMin", 0, 0, 0),
            vector3d_property("RotationMax", 0, 0, 0),
        ]
        props += [bool_property(f"RotationM{m}{a}", False) for m in ("in", "ax") for a in "XYZ"]
        props += [
            enum_property("InheritType", 0),
            bool_property("ScalingActive", False),
            vector3d_property("ScalingMin", 0, 0, 0),
            vector3d_property("ScalingMax", 1, 1, 1),
        ]
        props += [bool_property(f"ScalingM{m}{a}", False) for m in ("in", "ax") for a in "XYZ"]
        props += [
            vector3d_property("GeometricTranslation", 0, 0, 0),
            vector3d_property("GeometricRotation", 0, 0, 0),
            vector3d_property("GeometricScaling", 1, 1, 1),
        ]
        for group in ("MinDampRange", "MaxDampRange", "MinDampStrength", "MaxDampStrength", "PreferedAngle"):
            props += [double_property(f"{group}{a}", 0) for a in "XYZ"]
        props += [
            object_property("LookAtProperty"),
            object_property("UpVectorProperty"),
            bool_property("Show", True),
            bool_property("NegativePercentShapeSupport", True),
            integer_property("DefaultAttributeIndex", -1),
            bool_property("Freeze", False),
            bool_property("LODBox", False),
            lcl_vector_property("Lcl Translation", 0, 0, 0),
            lcl_vector_property("Lcl Rotation", 0, 0, 0),
            lcl_vector_property("Lcl Scaling", 0, 0, 0),
        ]

        visibility = NodeRecord("P", STR, "Visibility", "Visibility", "", "A")
        visibility.add_property(PropertyType.FLOAT64, 1)

        inheritance = NodeRecord("P", STR, "Visibility Inheritance", "Visibility Inheritance", "", "")
        inheritance.add_property(I32, 1)

        props += [visibility, inheritance]
        return props

    def _object_type(self, type_name: str, template: Optional[str] = None,
                     props: Sequence[NodeRecord] = ()) -> NodeRecord:
        node = NodeRecord("ObjectType", STR, type_name)
        node.add_child(NodeRecord("Count", I32, 1))
        if template is not None:
            tpl = node.add_child(NodeRecord("PropertyTemplate", STR, template))
            tpl.add_child(NodeRecord("Properties70")).add_child(*props)
        return node

    def build_definitions(self) -> NodeRecord:
        templates = [
            self._object_type("GlobalSettings"),
            self._object_type("Geometry", "FbxMesh", self._mesh_template()),
            self._object_type("Model", "FbxNode", self._node_template()),
        ]

        node = NodeRecord("Definitions")
        node.add_child(NodeRecord("Version", I32, 100))
        node.add_child(NodeRecord("Count", I32, len(templates)))
        node.add_child(*templates)
        return node

    # -----------------------------
    # Document
    # -----------------------------

    def build(self, objects: Sequence[NodeRecord] = (),
              connections: Sequence[NodeRecord] = ()) -> List[NodeRecord]:
        objects_node = NodeRecord("Objects")
        objects_node.add_child(*objects)

        connections_node = NodeRecord("Connections")
        connections_node.add_child(*connections)

        return [
            self.build_header_extension(),
            self.build_file_id(),
            self.build_creation_time(),
            self.build_creator(),
            self.build_global_settings(),
            self.build_documents(),
            NodeRecord("References"),
            self.build_definitions(),
            objects_node,
            connections_node,
            self.build_takes(),
        ]
