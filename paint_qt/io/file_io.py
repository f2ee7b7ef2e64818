# paint_qt/io/file_io.py
from __future__ import annotations
import logging
import mimetypes
import os
from typing import Optional, Tuple

from PySide6.QtGui import QImage

from paint_qt.core.errors import ImageDecodeError, UploadRejected

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 5 * 1024 * 1024
IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp")
IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.gif *.bmp *.webp)"


def guess_mime(path: str) -> str:
    mime, _ = mimetypes.guess_type(path)
    return mime or ""


def validate_upload(name: str, size: int, mime: Optional[str] = None) -> None:
    """Raise UploadRejected for a non-image or an image over 5 MB."""
    mime = mime if mime is not None else guess_mime(name)
    is_image = mime.startswith("image/") or name.lower().endswith(IMAGE_SUFFIXES)
    if not is_image:
        raise UploadRejected(f"'{os.path.basename(name)}' không phải file ảnh", reason="type")
    if size > MAX_UPLOAD_BYTES:
        raise UploadRejected(
            f"Ảnh quá lớn ({size / (1024 * 1024):.1f} MB). Tối đa 5 MB.", reason="size")


def decode_image(data: bytes) -> QImage:
    img = QImage.fromData(data)
    if img.isNull():
        raise ImageDecodeError("Không đọc được dữ liệu ảnh")
    return img


def read_image_file(path: str) -> Tuple[QImage, str]:
    """Validate + decode an image file. Returns (image, display name)."""
    name = os.path.basename(path)
    try:
        size = os.path.getsize(path)
    except OSError as e:
        raise UploadRejected(f"Không mở được file: {e}", reason="io") from e
    validate_upload(path, size)
    with open(path, "rb") as f:
        data = f.read()
    img = decode_image(data)
    logger.info("Loaded image %s (%dx%d, %d bytes)", name, img.width(), img.height(), size)
    return img, name


def save_bytes(path: str, data: bytes) -> None:
    with open(path, "wb") as f:
        f.write(data)
    logger.info("Wrote %d bytes to %s", len(data), path)
