from __future__ import annotations


class FbxError(RuntimeError):
    pass


class UnsupportedPropertyError(FbxError, ValueError):
    """Raised for property types the codec declares but does not encode (arrays)."""


class UnsizedNodeError(FbxError):
    pass


class SizeMismatchError(FbxError):
    """The writer emitted a different number of bytes than the size pass computed."""


class FbxWriteError(FbxError):
    pass


class FbxReadError(FbxError):
    pass
