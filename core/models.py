"""
models.py — Data model for the capture → identify → display cycle
------------------------------------------------------------------

* CapturedImage          one identification-bound photo (binary payload + data-URI preview)
* IdentificationRequest  a CapturedImage plus the credential, built per attempt
* PlantRecord            structured identification result for one plant

PlantRecord mirrors the relay's wire shape through camelCase aliases. The
required subset (name, scientific name, light and water care) is checked
separately by `missing_required_fields` so an incomplete answer can be told
apart from a malformed one.
"""

from __future__ import annotations
import base64
import logging
import re
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class SourceKind(str, Enum):
    UPLOAD = "upload"
    CAMERA = "camera"


def encode_preview(payload: bytes, mime_type: str = "image/jpeg") -> str:
    """Return a data URI for `payload`, suitable for st.image / <img src>."""
    return f"data:{mime_type};base64,{base64.b64encode(payload).decode('ascii')}"


class CapturedImage(BaseModel):
    payload: bytes = Field(repr=False)
    preview_encoding: str = Field(repr=False)
    source_kind: SourceKind
    mime_type: str = "image/jpeg"
    filename: str = "plant.jpg"
    released: bool = False

    @classmethod
    def from_bytes(cls, payload: bytes, source_kind: SourceKind, *,
                   mime_type: str = "image/jpeg", filename: str = "plant.jpg") -> "CapturedImage":
        return cls(
            payload=payload,
            preview_encoding=encode_preview(payload, mime_type),
            source_kind=source_kind,
            mime_type=mime_type,
            filename=filename,
        )

    @property
    def size(self) -> int:
        return len(self.payload)

    def release(self) -> None:
        """Drop the payload and preview; the image can no longer be sent."""
        self.payload = b""
        self.preview_encoding = ""
        self.released = True


class IdentificationRequest(BaseModel):
    image: CapturedImage
    api_key: str = Field(repr=False)

    def headers(self) -> Dict[str, str]:
        return {"X-Api-Key": self.api_key, "Accept": "application/json"}

    def multipart(self) -> Dict[str, tuple]:
        return {"image": (self.image.filename, self.image.payload, self.image.mime_type)}

    def json_body(self) -> Dict[str, str]:
        return {
            "image": base64.b64encode(self.image.payload).decode("ascii"),
            "mimeType": self.image.mime_type,
        }


# --- PlantRecord -----------------------------------------------------------

REQUIRED_FIELDS = ("name", "scientificName", "care.light", "care.water")

_PERCENT = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*%?\s*$")


class PlantRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    common_name: str = Field(alias="name")
    scientific_name: str = Field(alias="scientificName")
    confidence: float = Field(default=0, ge=0, le=100)
    description: str = ""
    key_features: List[str] = Field(default_factory=list, alias="keyFeatures")
    care: Dict[str, str]
    common_problems: List[str] = Field(default_factory=list, alias="commonProblems")
    propagation: str = ""
    growth_rate: str = Field(default="", alias="growthRate")

    @field_validator("description", "key_features", "common_problems", "propagation", "growth_rate",
                     mode="before")
    @classmethod
    def _null_is_empty(cls, value, info):
        if value is None:
            return [] if info.field_name in ("key_features", "common_problems") else ""
        return value

    @field_validator("confidence", mode="before")
    @classmethod
    def _parse_confidence(cls, value):
        if value is None:
            return 0
        # Models often answer "87" or "87%"
        if isinstance(value, str):
            m = _PERCENT.match(value)
            if not m:
                raise ValueError(f"confidence is not a number: {value!r}")
            return float(m.group(1))
        return value

    @field_validator("care", mode="before")
    @classmethod
    def _stringify_care(cls, value):
        if isinstance(value, dict):
            return {str(k): "" if v is None else str(v) for k, v in value.items()}
        return value


def missing_required_fields(payload: dict) -> List[str]:
    """Return the dotted names of required fields absent or blank in `payload`."""
    missing = []
    for dotted in REQUIRED_FIELDS:
        node = payload
        for part in dotted.split("."):
            node = node.get(part) if isinstance(node, dict) else None
        if node is None or (isinstance(node, str) and not node.strip()):
            missing.append(dotted)
    return missing


# Legacy answers used overview/features and carried pot sizes and placements
# that have no place in PlantRecord.
_LEGACY_RENAMES = {"overview": "description", "features": "keyFeatures"}
_LEGACY_DROPPED = ("potSizes", "idealFor")


def upgrade_legacy_payload(payload: dict) -> dict:
    """
    Map the deprecated overview/features shape onto the current one.

    Canonical keys win when both are present. Every upgrade is logged as a
    deprecation warning so legacy producers stay visible.
    """
    legacy = [k for k in (*_LEGACY_RENAMES, *_LEGACY_DROPPED) if k in payload]
    if not legacy:
        return payload

    logger.warning("Deprecated plant payload keys %s; upgrading to current schema", legacy)
    upgraded = {k: v for k, v in payload.items() if k not in legacy}
    for old, new in _LEGACY_RENAMES.items():
        if old in payload and new not in upgraded:
            upgraded[new] = payload[old]
    return upgraded


def parse_plant_record(payload: dict) -> PlantRecord:
    """Validate a relay `plantData` object into a PlantRecord (raises pydantic.ValidationError)."""
    return PlantRecord.model_validate(upgrade_legacy_payload(payload))
