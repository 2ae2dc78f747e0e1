"""
rendering.py — Result view model
--------------------------------

Turns a PlantRecord into the four tab contents (overview / features / care /
details) without touching Streamlit, so the page widgets in
`tools/ui_tools.py` only lay out what is built here.
"""

from __future__ import annotations
import re
from typing import List, Optional

from pydantic import BaseModel

from core.models import PlantRecord

TABS = (
    ("overview", "Overview"),
    ("features", "Key Features"),
    ("care", "Care Instructions"),
    ("details", "Details"),
)

CARE_ICONS = {
    "light": "☀️",
    "water": "💧",
    "humidity": "💦",
    "temperature": "🌡️",
    "soil": "🪴",
    "fertilizer": "🧪",
}
DEFAULT_CARE_ICON = "🌱"

_WORD_BOUNDARY = re.compile(r"[_\-\s]+|(?<=[a-z0-9])(?=[A-Z])")


class CareEntry(BaseModel):
    key: str
    label: str
    icon: str
    text: str


class ResultView(BaseModel):
    title: str
    subtitle: str
    badge: str
    overview: str
    features: List[str]
    care: List[CareEntry]
    problems: List[str]
    propagation_steps: List[str]
    growth_rate: str


def care_label(key: str) -> str:
    """'light' -> 'Light', 'soilType' / 'soil_type' -> 'Soil Type'."""
    words = [w for w in _WORD_BOUNDARY.split(key) if w]
    return " ".join(w[:1].upper() + w[1:] for w in words)


def care_entries(record: PlantRecord) -> List[CareEntry]:
    return [
        CareEntry(key=key, label=care_label(key), icon=CARE_ICONS.get(key.lower(), DEFAULT_CARE_ICON), text=text)
        for key, text in record.care.items()
    ]


def propagation_steps(text: str) -> List[str]:
    return [part.strip() for part in (text or "").split(".") if part.strip()]


def confidence_badge(confidence: float) -> str:
    return f"{confidence:g}% Match"


def build_result_view(record: Optional[PlantRecord]) -> Optional[ResultView]:
    if record is None:
        return None
    return ResultView(
        title=record.common_name,
        subtitle=record.scientific_name,
        badge=confidence_badge(record.confidence),
        overview=record.description,
        features=list(record.key_features),
        care=care_entries(record),
        problems=list(record.common_problems),
        propagation_steps=propagation_steps(record.propagation),
        growth_rate=record.growth_rate,
    )
