"""
capture.py — Media Capture Adapter
----------------------------------

Wraps camera access behind activate / capture / deactivate. Two frame sources
share that contract:

* "browser" (default): the visitor's own camera. The page shows
  `st.camera_input` while a session is active and hands each snapshot to
  `submit_frame()`; the browser owns the live view and the permission prompt.
* "device": a camera attached to the machine running the app, opened through
  OpenCV with resolution hints. For kiosk-style local deployments.

* `activate()` opens the source and keeps the handle in a CameraSession.
  Failures are classified into permission / not found / busy / unknown
  CameraError subclasses.
* `preview_frame()` returns the current frame for a server-side live view,
  mirrored when the preview is configured as a mirror.
* `capture()` takes one frame at native resolution (never mirrored), encodes it
  as JPEG and ends the session. One capture per activation.
* `deactivate()` releases the source; calling it without a session is a no-op.

The session owns the source handle, so every exit path (capture, cancel,
page teardown via the context manager) goes through `deactivate()`.

Dependencies:
- OpenCV for device access and snapshot decoding
- Pillow for JPEG encoding
"""

from __future__ import annotations
import errno
import logging
from io import BytesIO
from typing import Callable, Optional

import cv2
import numpy as np
from PIL import Image
from pydantic import BaseModel

from config.settings import (
    CAMERA_BACKEND, CAMERA_DEVICE, CAMERA_FACING_MODE, CAMERA_HEIGHT, CAMERA_MIRROR_PREVIEW,
    CAMERA_WIDTH, JPEG_QUALITY,
)
from core.exception import (
    CameraBusyError, CameraError, CameraInactiveError, CameraNotFoundError,
    CameraPermissionError, CameraUnknownError,
)
from core.models import CapturedImage, SourceKind

logger = logging.getLogger(__name__)


class CaptureConstraints(BaseModel):
    facing_mode: str = CAMERA_FACING_MODE
    width: int = CAMERA_WIDTH
    height: int = CAMERA_HEIGHT
    device: int = CAMERA_DEVICE
    mirror_preview: bool = CAMERA_MIRROR_PREVIEW


class CameraSession:
    """An open video handle plus the constraints it was opened with."""

    def __init__(self, handle, constraints: CaptureConstraints):
        self.handle = handle
        self.constraints = constraints

    def read(self) -> np.ndarray:
        ok, frame = self.handle.read()
        if not ok or frame is None:
            raise CameraUnknownError("Could not read a frame from the camera.")
        return frame

    def stop(self) -> None:
        self.handle.release()


def classify_camera_error(exc: BaseException) -> CameraError:
    """Map a low-level failure onto the capture-device error family."""
    if isinstance(exc, CameraError):
        return exc
    if isinstance(exc, PermissionError):
        return CameraPermissionError()
    if isinstance(exc, FileNotFoundError):
        return CameraNotFoundError()
    if isinstance(exc, OSError):
        if exc.errno in (errno.EACCES, errno.EPERM):
            return CameraPermissionError()
        if exc.errno in (errno.ENOENT, errno.ENODEV, errno.ENXIO):
            return CameraNotFoundError()
        if exc.errno == errno.EBUSY:
            return CameraBusyError()
    return CameraUnknownError()


def open_video_device(constraints: CaptureConstraints):
    """Open an OpenCV capture for `constraints.device` and apply resolution hints."""
    cap = cv2.VideoCapture(constraints.device)
    if not cap.isOpened():
        cap.release()
        raise CameraNotFoundError()

    cap.set(cv2.CAP_PROP_FRAME_WIDTH, constraints.width)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, constraints.height)

    # An opened device that yields no frame is held by someone else
    ok, _ = cap.read()
    if not ok:
        cap.release()
        raise CameraBusyError()
    return cap


class BrowserSnapshotHandle:
    """
    Frame source fed by the visitor's browser.

    The page pushes the encoded snapshot from `st.camera_input`; `read()`
    decodes it to BGR the way a VideoCapture would hand it back.
    """

    def __init__(self):
        self.snapshot: Optional[bytes] = None
        self.opened = True

    def push(self, data: bytes) -> None:
        self.snapshot = data

    def read(self):
        if not self.opened or not self.snapshot:
            return False, None
        frame = cv2.imdecode(np.frombuffer(self.snapshot, dtype=np.uint8), cv2.IMREAD_COLOR)
        return frame is not None, frame

    def isOpened(self) -> bool:
        return self.opened

    def release(self) -> None:
        self.snapshot = None
        self.opened = False


def open_browser_camera(constraints: CaptureConstraints) -> BrowserSnapshotHandle:
    # Facing mode and resolution are hints the browser widget does not take
    return BrowserSnapshotHandle()


OPENERS = {"browser": open_browser_camera, "device": open_video_device}


def default_opener(backend: str = CAMERA_BACKEND):
    if backend not in OPENERS:
        logger.warning("Unknown CAMERA_BACKEND %r; using the browser camera", backend)
        return open_browser_camera
    return OPENERS[backend]


def encode_jpeg(frame_bgr: np.ndarray, quality: int = JPEG_QUALITY) -> bytes:
    rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
    buf = BytesIO()
    Image.fromarray(rgb).save(buf, format="JPEG", quality=quality)
    return buf.getvalue()


class MediaCaptureAdapter:
    def __init__(self, opener: Optional[Callable[[CaptureConstraints], object]] = None,
                 jpeg_quality: int = JPEG_QUALITY):
        self._opener = opener or default_opener()
        self.jpeg_quality = jpeg_quality
        self.session: Optional[CameraSession] = None

    @property
    def active(self) -> bool:
        return self.session is not None

    def activate(self, constraints: Optional[CaptureConstraints] = None) -> CameraSession:
        if self.session is not None:
            return self.session
        constraints = constraints or CaptureConstraints()
        logger.debug("Opening camera %s (%s, %dx%d)", constraints.device,
                     constraints.facing_mode, constraints.width, constraints.height)
        try:
            handle = self._opener(constraints)
        except Exception as e:
            err = classify_camera_error(e)
            logger.debug("Camera activation failed: %r -> %s", e, type(err).__name__)
            raise err from e
        self.session = CameraSession(handle, constraints)
        return self.session

    def preview_frame(self) -> np.ndarray:
        """Current frame as RGB for display, flipped horizontally when mirroring."""
        if self.session is None:
            raise CameraInactiveError()
        rgb = cv2.cvtColor(self.session.read(), cv2.COLOR_BGR2RGB)
        if self.session.constraints.mirror_preview:
            rgb = np.ascontiguousarray(rgb[:, ::-1])
        return rgb

    @property
    def uses_browser(self) -> bool:
        return self.session is not None and isinstance(self.session.handle, BrowserSnapshotHandle)

    def submit_frame(self, data: bytes) -> None:
        """Hand a browser snapshot to the active session."""
        if self.session is None:
            raise CameraInactiveError()
        if not isinstance(self.session.handle, BrowserSnapshotHandle):
            raise CameraUnknownError("This camera does not accept browser snapshots.")
        self.session.handle.push(data)

    def capture(self) -> CapturedImage:
        if self.session is None:
            raise CameraInactiveError()
        try:
            # Native frame: the preview mirror is a display effect only
            frame = self.session.read()
            payload = encode_jpeg(frame, self.jpeg_quality)
        except (cv2.error, OSError, ValueError) as e:
            logger.debug("Capture failed: %r", e)
            raise CameraUnknownError() from e
        finally:
            self.deactivate()
        return CapturedImage.from_bytes(payload, SourceKind.CAMERA, filename="camera-photo.jpg")

    def deactivate(self) -> None:
        if self.session is None:
            return
        session, self.session = self.session, None
        session.stop()
        logger.debug("Camera released")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.deactivate()
