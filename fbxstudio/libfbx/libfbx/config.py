from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

from . import __version__


@dataclass(frozen=True)
class AppInfo:
    """Application identity stamped into the header and scene info."""

    name: str = "fbxstudio"
    version: str = __version__
    flavour: str = "release"
    vendor: Optional[str] = None

    @property
    def vendor_name(self) -> str:
        return self.vendor if self.vendor is not None else self.name

    @property
    def application_string(self) -> str:
        return f"{self.name} v{self.version} {self.flavour}"

    def with_overrides(self, **overrides: Any) -> "AppInfo":
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def app_info_from_dict(d: Dict[str, Any]) -> AppInfo:
    known = {f.name for f in fields(AppInfo)}
    unknown = sorted(set(d) - known)
    if unknown:
        raise ValueError(f"Unknown app config keys: {', '.join(unknown)}")
    for k, v in d.items():
        if v is None and k == "vendor":
            continue
        if not isinstance(v, str):
            raise ValueError(f"App config key {k!r} must be a string")
    return AppInfo(**d)


def load_app_info(path: str) -> AppInfo:
    with open(path, "r", encoding="utf-8") as f:
        d = json.load(f)
    if not isinstance(d, dict):
        raise ValueError(f"{path}: expected a JSON object")
    return app_info_from_dict(d)
