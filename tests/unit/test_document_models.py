"""Unit tests for building analysis models from provider payloads."""

import json

import pytest

from docsign_ai.models.document import DEFAULT_CONFIDENCE, FormField, Position, SignatureZone
from docsign_ai.models.signature import SignatureData


class TestNonFiniteNumbers:
    """Tests for NaN and infinite values the JSON decoder accepts."""

    def test_form_field_from_decoded_json(self):
        data = json.loads(
            '{"id": "1", "type": "text", "label": "Name", "page": Infinity,'
            ' "confidence": NaN, "position": {"x": -Infinity, "y": 1e400, "width": NaN}}'
        )

        field = FormField.from_dict(data)

        assert field.page == 1
        assert field.confidence == DEFAULT_CONFIDENCE
        assert (field.position.x, field.position.y, field.position.width) == (0.0, 0.0, 0.0)

    @pytest.mark.parametrize("value", ["inf", "-Infinity", "nan", float("inf")])
    def test_zone_page_falls_back(self, value):
        zone = SignatureZone.from_dict({"id": "z", "page": value})

        assert zone.page == 1

    def test_position_keeps_default_box(self):
        default = Position(100.0, 500.0, 150.0, 50.0)

        position = Position.from_dict({"x": float("nan"), "height": "inf"}, default)

        assert position == default

    def test_signature_data_numbers(self):
        datum = SignatureData.from_dict(
            {"id": "s", "name": "S", "type": "typed", "data": "S", "x": float("inf"), "y": "12.5", "page": float("nan")}
        )

        assert datum.x is None
        assert datum.y == 12.5
        assert datum.page is None


class TestRequiredFlag:
    """Tests for coercing the required flag."""

    @pytest.mark.parametrize("value", ["false", "False", "no", "0", " off ", False, 0])
    def test_false_values(self, value):
        assert FormField.from_dict({"required": value}).required is False
        assert SignatureZone.from_dict({"required": value}).required is False

    @pytest.mark.parametrize("value", ["true", "yes", "1", True, 1])
    def test_true_values(self, value):
        assert FormField.from_dict({"required": value}).required is True

    def test_missing_uses_default(self):
        assert FormField.from_dict({}).required is False
        assert SignatureZone.from_dict({}).required is True
