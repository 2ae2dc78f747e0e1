"""Shared pytest configuration and fixtures for the Plant Identifier test suite."""

import json
import sys
from io import BytesIO
from pathlib import Path
from unittest.mock import MagicMock

import numpy as np
import pytest
import requests
from PIL import Image

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# Images
# =============================================================================


def make_png(width=64, height=48, noise=False) -> bytes:
    if noise:
        pixels = np.random.default_rng(0).integers(0, 256, (height, width, 3), dtype=np.uint8)
    else:
        pixels = np.full((height, width, 3), (40, 160, 60), dtype=np.uint8)
    buf = BytesIO()
    Image.fromarray(pixels).save(buf, format="PNG")
    return buf.getvalue()


def huge_dimension_png() -> bytes:
    """Tiny file, but past Pillow's decompression-bomb pixel ceiling."""
    buf = BytesIO()
    Image.new("1", (20000, 10000)).save(buf, format="PNG")
    return buf.getvalue()


class FakeUpload(BytesIO):
    """Stand-in for streamlit's UploadedFile (BytesIO with name/type/size)."""

    def __init__(self, data: bytes, name="leaf.png", type="image/png"):
        super().__init__(data)
        self.name = name
        self.type = type
        self.size = len(data)


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def upload(png_bytes):
    return FakeUpload(png_bytes)


# =============================================================================
# Plant payloads and HTTP
# =============================================================================


@pytest.fixture
def plant_payload():
    return {
        "name": "Monstera",
        "scientificName": "Monstera deliciosa",
        "confidence": 87,
        "description": "A climbing evergreen with large split leaves.",
        "keyFeatures": ["Fenestrated leaves", "Aerial roots", "Glossy surface", "Climbing habit"],
        "care": {
            "light": "Bright indirect light",
            "water": "When the top 5 cm of soil is dry",
            "humidity": "60% or higher",
            "temperature": "18-30°C",
            "soil": "Chunky, well-draining aroid mix",
            "fertilizer": "Monthly in spring and summer",
        },
        "commonProblems": ["Yellow leaves from overwatering", "Brown edges from low humidity"],
        "propagation": "Cut below a node. Root it in water. Pot up once roots reach 5 cm.",
        "growthRate": "Fast in warm conditions",
    }


def make_response(status=200, body=None, raw=None) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    if raw is not None:
        response._content = raw
    else:
        response._content = json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    response.encoding = "utf-8"
    return response


@pytest.fixture
def http():
    return MagicMock(spec=requests.Session)


# =============================================================================
# Camera
# =============================================================================


def make_frame(width=320, height=240) -> np.ndarray:
    """BGR frame: left half pure blue, right half pure red."""
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    frame[:, : width // 2] = (255, 0, 0)
    frame[:, width // 2:] = (0, 0, 255)
    return frame


@pytest.fixture
def camera_handle():
    handle = MagicMock()
    handle.read.return_value = (True, make_frame())
    handle.isOpened.return_value = True
    return handle


@pytest.fixture
def opener(camera_handle):
    return MagicMock(return_value=camera_handle)
