"""
image_source.py — Image Source Selector
---------------------------------------

Normalizes the two acquisition paths (file picker, camera) into one
CapturedImage. Holds at most one image at a time; a new selection or a
reset releases the previous one.
"""

from __future__ import annotations
import logging
from io import BytesIO
from typing import Optional

from PIL import Image, UnidentifiedImageError

from config.settings import MAX_UPLOAD_BYTES
from core.capture import MediaCaptureAdapter
from core.exception import FileTooLargeError, InvalidImageError, MissingCredentialError
from core.models import CapturedImage, SourceKind

logger = logging.getLogger(__name__)


def _upload_size(file) -> int:
    if isinstance(file, (bytes, bytearray)):
        return len(file)
    size = getattr(file, "size", None)
    if size is not None:
        return int(size)
    return len(file.getvalue())


def _upload_bytes(file) -> bytes:
    if isinstance(file, (bytes, bytearray)):
        return bytes(file)
    if hasattr(file, "getvalue"):
        return file.getvalue()
    return file.read()


def _detect_mime(payload: bytes) -> str:
    try:
        with Image.open(BytesIO(payload)) as img:
            fmt = img.format
            img.verify()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        raise InvalidImageError() from e
    return Image.MIME.get(fmt, "image/jpeg")


class ImageSourceSelector:
    def __init__(self, max_bytes: int = MAX_UPLOAD_BYTES):
        self.max_bytes = max_bytes
        self.image: Optional[CapturedImage] = None

    def _replace(self, image: CapturedImage) -> CapturedImage:
        if self.image is not None:
            self.image.release()
        self.image = image
        return image

    def from_file(self, file, api_key: Optional[str]) -> CapturedImage:
        """
        Accept an uploaded file as the current image.

        Raises FileTooLargeError at or above the ceiling, MissingCredentialError
        when no API key is available, InvalidImageError when the bytes are not
        an image. Nothing is sent anywhere.
        """
        size = _upload_size(file)
        if size >= self.max_bytes:
            logger.debug("Rejected upload of %d bytes (ceiling %d)", size, self.max_bytes)
            raise FileTooLargeError()
        if not api_key:
            raise MissingCredentialError()

        payload = _upload_bytes(file)
        mime_type = _detect_mime(payload)
        filename = getattr(file, "name", None) or "plant-photo"
        return self._replace(
            CapturedImage.from_bytes(payload, SourceKind.UPLOAD, mime_type=mime_type, filename=filename)
        )

    def from_camera(self, adapter: MediaCaptureAdapter) -> CapturedImage:
        return self._replace(adapter.capture())

    def reset(self) -> None:
        if self.image is not None:
            self.image.release()
            self.image = None
