"""
session.py — Identification cycle state machine
-----------------------------------------------

Empty → ImageSelected → Loading → Displaying | ErrorShown, with reset back to
Empty from anywhere.

Each identification attempt gets a request token. Only the most recently
issued token may apply its outcome; a superseded request that resolves late
is discarded. `reset()` also invalidates whatever is in flight.

Errors never escape the session methods used by the page: they are stored as
`error` (user-facing text) and `failure` (the exception) for rendering.
Anything outside the PlantIdError family is handed to `report_unexpected()`
by the page, which logs it and shows a generic message.
"""

from __future__ import annotations
import logging
import threading
from enum import Enum
from typing import Optional

from core.capture import MediaCaptureAdapter
from core.exception import (
    CameraError, NoImageSelectedError, PlantIdError, custom_exception_hook,
)
from core.identification import IdentificationClient
from core.image_source import ImageSourceSelector
from core.models import CapturedImage, PlantRecord

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    EMPTY = "empty"
    IMAGE_SELECTED = "image_selected"
    LOADING = "loading"
    DISPLAYING = "displaying"
    ERROR_SHOWN = "error_shown"


class IdentificationSession:
    def __init__(self, selector: Optional[ImageSourceSelector] = None):
        self.selector = selector or ImageSourceSelector()
        self.phase = Phase.EMPTY
        self.record: Optional[PlantRecord] = None
        self.error: Optional[str] = None
        self.failure: Optional[PlantIdError] = None
        self._issued = 0
        self._lock = threading.Lock()

    @property
    def image(self) -> Optional[CapturedImage]:
        return self.selector.image

    @property
    def is_loading(self) -> bool:
        return self.phase is Phase.LOADING

    def _set_error(self, exc: PlantIdError) -> None:
        self.failure = exc
        self.error = exc.message

    def _clear_error(self) -> None:
        self.failure = None
        self.error = None

    # --- image acquisition ---

    def select_file(self, file, api_key: Optional[str]) -> Optional[CapturedImage]:
        """Validation errors block the selection and leave the phase as it was."""
        try:
            image = self.selector.from_file(file, api_key)
        except PlantIdError as e:
            self._set_error(e)
            return None
        self.record = None
        self._clear_error()
        self.phase = Phase.IMAGE_SELECTED
        return image

    def activate_camera(self, adapter: MediaCaptureAdapter, constraints=None) -> bool:
        try:
            adapter.activate(constraints)
        except CameraError as e:
            self._set_error(e)
            self.phase = Phase.ERROR_SHOWN
            return False
        self._clear_error()
        if self.phase is Phase.ERROR_SHOWN:
            self.phase = Phase.IMAGE_SELECTED if self.image is not None else Phase.EMPTY
        return True

    def capture_photo(self, adapter: MediaCaptureAdapter) -> Optional[CapturedImage]:
        try:
            image = self.selector.from_camera(adapter)
        except CameraError as e:
            self._set_error(e)
            self.phase = Phase.ERROR_SHOWN
            return None
        self.record = None
        self._clear_error()
        self.phase = Phase.IMAGE_SELECTED
        return image

    def capture_snapshot(self, adapter: MediaCaptureAdapter, data: bytes) -> Optional[CapturedImage]:
        """Capture from a snapshot taken by the visitor's browser camera."""
        try:
            adapter.submit_frame(data)
        except CameraError as e:
            adapter.deactivate()
            self._set_error(e)
            self.phase = Phase.ERROR_SHOWN
            return None
        return self.capture_photo(adapter)

    def cancel_camera(self, adapter: MediaCaptureAdapter) -> None:
        adapter.deactivate()

    # --- identification ---

    def begin_identification(self) -> Optional[int]:
        """Issue a request token and enter Loading, or record an error when no image is selected."""
        with self._lock:
            if self.image is None:
                self._set_error(NoImageSelectedError())
                return None
            self._issued += 1
            self._clear_error()
            self.phase = Phase.LOADING
            return self._issued

    def _is_current(self, token: int) -> bool:
        if token != self._issued:
            logger.debug("Discarding result of superseded request %d (latest %d)", token, self._issued)
            return False
        return True

    def complete(self, token: int, record: PlantRecord) -> bool:
        with self._lock:
            if not self._is_current(token):
                return False
            self.record = record
            self._clear_error()
            self.phase = Phase.DISPLAYING
            return True

    def fail(self, token: int, exc: PlantIdError) -> bool:
        with self._lock:
            if not self._is_current(token):
                return False
            self.record = None
            self._set_error(exc)
            self.phase = Phase.ERROR_SHOWN
            return True

    def identify(self, client: IdentificationClient) -> Optional[PlantRecord]:
        token = self.begin_identification()
        if token is None:
            return None
        image = self.image
        try:
            record = client.identify(image)
        except PlantIdError as e:
            self.fail(token, e)
            return None
        return record if self.complete(token, record) else None

    def report_unexpected(self, exc: BaseException) -> str:
        """Log an error outside the PlantIdError family and show a generic message for it."""
        short = custom_exception_hook(type(exc), exc, exc.__traceback__)
        with self._lock:
            self._set_error(PlantIdError(f"Unexpected error ({short}). Please try again."))
            self.phase = Phase.ERROR_SHOWN
        return short

    def reset(self) -> None:
        with self._lock:
            self.selector.reset()
            self.record = None
            self._clear_error()
            # Any request still in flight is now stale
            self._issued += 1
            self.phase = Phase.EMPTY
