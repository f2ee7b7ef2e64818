# paint_qt/core/errors.py
"""Lỗi của bảng vẽ (paint engine errors)."""
from __future__ import annotations


class PaintError(Exception):
    """Base class for every error raised by paint_qt."""


class SurfaceError(PaintError):
    """The raster backing store could not be created."""


class ImageDecodeError(PaintError):
    """Image bytes could not be decoded into a bitmap."""


class UploadRejected(PaintError):
    """An upload was refused before decoding (wrong type or too large)."""

    def __init__(self, message: str, reason: str = "invalid"):
        super().__init__(message)
        self.reason = reason   # "type" | "size" | "missing" | "invalid"
