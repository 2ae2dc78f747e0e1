"""Tests for the result view model."""

from core.models import parse_plant_record
from core.rendering import (
    TABS, build_result_view, care_label, confidence_badge, propagation_steps,
)


def test_no_record_renders_nothing():
    assert build_result_view(None) is None


def test_care_has_one_entry_per_key_in_order(plant_payload):
    view = build_result_view(parse_plant_record(plant_payload))
    assert [c.key for c in view.care] == list(plant_payload["care"])
    assert [c.label for c in view.care] == ["Light", "Water", "Humidity", "Temperature", "Soil", "Fertilizer"]
    assert view.care[1].text == "When the top 5 cm of soil is dry"


def test_unknown_care_keys_still_render(plant_payload):
    plant_payload["care"] = {"light": "Sun", "water": "Weekly", "pruningTips": "Pinch tops", "pot_size": "20 cm"}
    view = build_result_view(parse_plant_record(plant_payload))
    assert [c.label for c in view.care] == ["Light", "Water", "Pruning Tips", "Pot Size"]
    assert view.care[2].icon == "🌱"


def test_care_label():
    assert care_label("light") == "Light"
    assert care_label("soil_type") == "Soil Type"
    assert care_label("soilType") == "Soil Type"


def test_propagation_split_on_periods():
    assert propagation_steps("Cut below a node.  Root in water. .Pot up.") == [
        "Cut below a node", "Root in water", "Pot up",
    ]
    assert propagation_steps("") == []


def test_badge():
    assert confidence_badge(87) == "87% Match"
    assert confidence_badge(92.5) == "92.5% Match"


def test_all_tabs_populated(plant_payload):
    view = build_result_view(parse_plant_record(plant_payload))
    assert [label for _, label in TABS] == ["Overview", "Key Features", "Care Instructions", "Details"]
    assert view.title == "Monstera"
    assert view.subtitle == "Monstera deliciosa"
    assert view.badge == "87% Match"
    assert view.overview
    assert len(view.features) == 4
    assert view.problems and view.propagation_steps == [
        "Cut below a node", "Root it in water", "Pot up once roots reach 5 cm",
    ]
    assert view.growth_rate == "Fast in warm conditions"
