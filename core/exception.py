"""
exception.py — Error taxonomy for the Plant Identifier
-------------------------------------------------------

Every error raised by the capture, selection and identification layers derives
from `PlantIdError` and carries a `message` that is safe to show to the user.
None of them is fatal to the page: the UI shows the message and the user can
retry or reset.

Families:
- CameraError          capture-device problems (permission, absence, busy, unknown)
- ValidationError      blocked before any network call (size, credential, no image)
- IdentificationError  transport, status, payload and incomplete-data failures
"""

import logging
import traceback
from typing import Optional

logger = logging.getLogger(__name__)

RETRY_MESSAGE = "Could not identify the plant. Please try a clear photo of a single plant."


class PlantIdError(Exception):
    message = "Something went wrong."

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


# --- Capture device ---

class CameraError(PlantIdError):
    message = "Unable to access camera."


class CameraPermissionError(CameraError):
    message = "Camera access was denied. Allow camera access and try again."


class CameraNotFoundError(CameraError):
    message = "No camera was found on this device."


class CameraBusyError(CameraError):
    message = "The camera is already in use by another application."


class CameraUnknownError(CameraError):
    message = "Unable to access camera."


class CameraInactiveError(CameraError):
    message = "Start the camera before capturing a photo."


# --- Validation ---

class ValidationError(PlantIdError):
    pass


class FileTooLargeError(ValidationError):
    message = "Image size should be less than 5MB"


class MissingCredentialError(ValidationError):
    message = "API key not found. Please enter your API key."


class InvalidImageError(ValidationError):
    message = "The selected file is not a supported image."


class NoImageSelectedError(ValidationError):
    message = "Please select an image first"


# --- Identification ---

class IdentificationError(PlantIdError):
    """
    A failed identification attempt.

    `kind` is one of "transport", "status", "payload" or "incomplete". All kinds
    collapse to the same retry prompt unless the server supplied a detail string.
    """

    KINDS = ("transport", "status", "payload", "incomplete")

    def __init__(self, kind: str, detail: Optional[str] = None, status_code: Optional[int] = None):
        if kind not in self.KINDS:
            raise ValueError(f"Unknown identification failure kind: {kind}")
        self.kind = kind
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail or RETRY_MESSAGE)

    def __repr__(self):
        return f"IdentificationError(kind={self.kind!r}, status_code={self.status_code!r}, detail={self.detail!r})"


def custom_exception_hook(exc_type, exc_value, tb):
    full_traceback = "".join(traceback.format_exception(exc_type, exc_value, tb))
    first_line = f"{exc_type.__name__}: {exc_value}"
    short_message = f"{exc_type.__name__}"

    # Full traceback only reaches the console at DEBUG
    logger.debug(full_traceback)

    # Also log just the first line for quick visibility
    logger.error(f"First line: {first_line}")

    return short_message
