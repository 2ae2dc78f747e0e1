"""Tests for PlantRecord parsing, required-field checks and legacy upgrades."""

import logging

import pytest
from pydantic import ValidationError

from core.models import (
    CapturedImage, IdentificationRequest, PlantRecord, SourceKind,
    missing_required_fields, parse_plant_record, upgrade_legacy_payload,
)


class TestPlantRecord:
    def test_parses_wire_aliases(self, plant_payload):
        record = parse_plant_record(plant_payload)
        assert record.common_name == "Monstera"
        assert record.scientific_name == "Monstera deliciosa"
        assert record.confidence == 87
        assert record.key_features[0] == "Fenestrated leaves"
        assert record.growth_rate == "Fast in warm conditions"

    def test_care_keeps_mapping_order(self, plant_payload):
        record = parse_plant_record(plant_payload)
        assert list(record.care) == ["light", "water", "humidity", "temperature", "soil", "fertilizer"]

    @pytest.mark.parametrize("raw, expected", [("87", 87.0), ("92.5%", 92.5), (" 40 % ", 40.0), (100, 100)])
    def test_confidence_coercion(self, plant_payload, raw, expected):
        plant_payload["confidence"] = raw
        assert parse_plant_record(plant_payload).confidence == expected

    @pytest.mark.parametrize("raw", [-1, 101, "very likely"])
    def test_confidence_outside_range_is_rejected(self, plant_payload, raw):
        plant_payload["confidence"] = raw
        with pytest.raises(ValidationError):
            parse_plant_record(plant_payload)

    def test_optional_fields_default_empty(self):
        record = parse_plant_record({
            "name": "Basil", "scientificName": "Ocimum basilicum",
            "care": {"light": "Full sun", "water": "Keep moist"},
        })
        assert record.key_features == []
        assert record.common_problems == []
        assert record.propagation == ""

    def test_null_optional_fields_become_empty(self, plant_payload):
        for key in ("description", "keyFeatures", "commonProblems", "propagation", "growthRate", "confidence"):
            plant_payload[key] = None
        record = parse_plant_record(plant_payload)
        assert (record.description, record.propagation, record.growth_rate) == ("", "", "")
        assert record.key_features == [] and record.common_problems == []
        assert record.confidence == 0

    def test_populate_by_field_name(self):
        record = PlantRecord(common_name="Fern", scientific_name="Nephrolepis exaltata",
                             care={"light": "Shade", "water": "Often"})
        assert record.common_name == "Fern"


class TestRequiredFields:
    def test_complete_payload(self, plant_payload):
        assert missing_required_fields(plant_payload) == []

    def test_missing_water(self, plant_payload):
        del plant_payload["care"]["water"]
        assert missing_required_fields(plant_payload) == ["care.water"]

    def test_blank_values_count_as_missing(self, plant_payload):
        plant_payload["name"] = "  "
        plant_payload["care"] = None
        assert missing_required_fields(plant_payload) == ["name", "care.light", "care.water"]


class TestLegacyUpgrade:
    def test_current_payload_untouched(self, plant_payload):
        assert upgrade_legacy_payload(plant_payload) is plant_payload

    def test_overview_and_features_are_renamed(self, caplog):
        legacy = {
            "name": "Snake Plant", "scientificName": "Dracaena trifasciata", "confidence": 90,
            "overview": "Hardy succulent.", "features": ["Upright leaves"],
            "care": {"light": "Any", "water": "Sparingly", "humidity": "Low", "temperature": "15-29°C"},
            "potSizes": ["15 cm"], "idealFor": ["Bedroom"],
        }
        with caplog.at_level(logging.WARNING, logger="core.models"):
            record = parse_plant_record(legacy)
        assert record.description == "Hardy succulent."
        assert record.key_features == ["Upright leaves"]
        assert "Deprecated plant payload keys" in caplog.text

    def test_canonical_key_wins(self):
        upgraded = upgrade_legacy_payload({"overview": "old", "description": "new"})
        assert upgraded == {"description": "new"}


class TestCapturedImage:
    def test_preview_is_data_uri(self, png_bytes):
        image = CapturedImage.from_bytes(png_bytes, SourceKind.UPLOAD, mime_type="image/png")
        assert image.preview_encoding.startswith("data:image/png;base64,")
        assert image.size == len(png_bytes)

    def test_release_drops_payload(self, png_bytes):
        image = CapturedImage.from_bytes(png_bytes, SourceKind.CAMERA)
        image.release()
        assert image.released
        assert image.payload == b""
        assert image.preview_encoding == ""

    def test_request_hides_key_from_repr(self, png_bytes):
        image = CapturedImage.from_bytes(png_bytes, SourceKind.UPLOAD)
        request = IdentificationRequest(image=image, api_key="sk-secret")
        assert "sk-secret" not in repr(request)
        assert request.headers()["X-Api-Key"] == "sk-secret"
