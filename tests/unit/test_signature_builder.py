"""Unit tests for building backend signature requests."""

import json

import pytest

from docsign_ai.models.document import FormField, Position, SignatureZone
from docsign_ai.models.enums import FieldType, SignatureType
from docsign_ai.models.processing import UserProfile
from docsign_ai.models.signature import SignatureData, SignatureRequest
from docsign_ai.reconciliation.signature_builder import (
    DEFAULT_BOX,
    SignatureRequestBuilder,
    default_signatures,
    parse_points,
    serialize_requests,
)


@pytest.fixture
def builder():
    return SignatureRequestBuilder(clock=lambda: 1000.0)


def signature_field(field_id="1", x=50.0, y=100.0, value="Dana Levi"):
    return FormField(
        id=field_id,
        type=FieldType.SIGNATURE,
        label="Signature",
        position=Position(x, y, 150.0, 50.0),
        value=value,
    )


def zone(zone_id="z1", x=50.0, y=100.0, page=1):
    return SignatureZone(id=zone_id, label="Sign here", position=Position(x, y, 150.0, 50.0), page=page)


def typed(name="Dana Levi", **kwargs):
    return SignatureData(id=kwargs.pop("id", "sig1"), name=name, type=SignatureType.TYPED, data=name, **kwargs)


class TestParsePoints:
    """Tests for parse_points."""

    def test_point_array(self):
        assert parse_points('[{"x": 1, "y": 2}]') == [(1.0, 2.0, 0.5)]

    def test_pressure_kept(self):
        assert parse_points('[{"x": 1, "y": 2, "pressure": 0.9}]') == [(1.0, 2.0, 0.9)]

    @pytest.mark.parametrize("data", ["", "Dana Levi", "[not json", "[]", '[{"x": "a", "y": 2}]', "{}"])
    def test_unusable_data(self, data):
        assert parse_points(data) is None


class TestBuild:
    """Tests for SignatureRequestBuilder.build."""

    def test_nothing_found_yields_default_request(self, builder):
        requests = builder.build([], [], [])

        assert len(requests) == 1
        request = requests[0]
        assert (request.x, request.y) == (DEFAULT_BOX.x, DEFAULT_BOX.y)
        assert (request.width, request.height) == (DEFAULT_BOX.width, DEFAULT_BOX.height)
        assert request.page == 1
        assert len(request.points) == 5
        assert request.metadata["source"] == "default"

    def test_point_data_becomes_single_point(self, builder):
        """Drawing data with one point yields one request point."""
        datum = SignatureData(id="d", name="Dana", type=SignatureType.DRAWING, data='[{"x":1,"y":2}]')

        requests = builder.build([], [], [datum])

        assert len(requests) == 1
        points = requests[0].points
        assert len(points) == 1
        assert (points[0].x, points[0].y) == (1.0, 2.0)
        assert points[0].pressure == 0.5
        assert points[0].timestamp == 1000000

    def test_typed_signature_is_synthesized_inside_box(self, builder):
        requests = builder.build([signature_field()], [], [typed()])

        request = requests[0]
        assert request.metadata["synthesized"] is True
        for point in request.points:
            assert 50.0 <= point.x <= 200.0
            assert 100.0 <= point.y <= 150.0
        timestamps = [p.timestamp for p in request.points]
        assert timestamps == sorted(timestamps)

    def test_unfilled_signature_field_skipped(self, builder):
        requests = builder.build([signature_field(value="  ")], [zone(x=300.0)], [typed()])

        assert [r.metadata["source"] for r in requests] == ["zone"]

    def test_non_signature_fields_ignored(self, builder):
        field = FormField(id="1", type=FieldType.TEXT, label="Name", value="Dana")

        requests = builder.build([field], [], [typed()])

        assert requests[0].metadata["source"] == "default"

    def test_field_wins_over_zone_at_same_position(self, builder):
        """A field and a zone at the same place yield one field request."""
        keyed = {"signature_z1": '[{"x": 9, "y": 9}]'}

        requests = builder.build([signature_field()], [zone()], [typed()], keyed)

        assert len(requests) == 1
        assert requests[0].metadata["source"] == "field"
        assert requests[0].metadata["signatureId"] == "sig1"

    def test_zones_at_distinct_positions(self, builder):
        requests = builder.build([signature_field()], [zone(x=300.0), zone("z2", x=300.0, y=400.0)], [typed()])

        assert [r.metadata["source"] for r in requests] == ["field", "zone", "zone"]
        assert len({r.anchor for r in requests}) == 3

    def test_duplicate_zones_deduplicated(self, builder):
        requests = builder.build([], [zone("z1"), zone("z2")], [typed()])

        assert len(requests) == 1

    def test_keyed_signature_used_for_zone(self, builder):
        keyed = {"signature_z1": '[{"x": 60, "y": 110}, {"x": 70, "y": 115}]'}

        requests = builder.build([], [zone()], [typed()], keyed)

        assert len(requests[0].points) == 2
        assert requests[0].metadata["signatureId"] == "signature_z1"
        assert requests[0].metadata["synthesized"] is False

    def test_keyed_signature_as_dict(self, builder):
        keyed = {"signature_z1": {"type": "typed", "data": "D. Levi"}}

        requests = builder.build([], [zone()], [], keyed)

        assert requests[0].metadata["signatureId"] == "signature_z1"

    def test_default_flag_selects_datum(self, builder):
        data = [typed(id="a"), typed(id="b", is_default=True)]

        requests = builder.build([], [zone()], data)

        assert requests[0].metadata["signatureId"] == "b"

    def test_field_bound_datum_by_id(self, builder):
        data = [typed(id="other", is_default=True), typed(id="1")]

        requests = builder.build([signature_field(field_id="1")], [], data)

        assert requests[0].metadata["signatureId"] == "1"

    def test_datum_position_override(self, builder):
        datum = typed(id="1", x=400.0, y=700.0, page=2)

        requests = builder.build([signature_field(field_id="1")], [], [datum])

        request = requests[0]
        assert (request.x, request.y, request.page) == (400.0, 700.0, 2)

    def test_default_datum_keeps_zone_positions(self, builder):
        """A saved default signature with coordinates does not move every zone onto one anchor."""
        datum = typed(is_default=True, x=10.0, y=10.0, page=3)

        requests = builder.build([], [zone("a", y=100.0), zone("b", y=400.0)], [datum])

        assert [r.anchor for r in requests] == [(50.0, 100.0), (50.0, 400.0)]
        assert all(r.page == 1 for r in requests)
        assert all(r.metadata["signatureId"] == "sig1" for r in requests)

    def test_default_datum_keeps_field_position(self, builder):
        datum = typed(id="saved", is_default=True, x=10.0, y=10.0)

        requests = builder.build([signature_field(field_id="1")], [], [datum])

        assert requests[0].anchor == (50.0, 100.0)

    def test_keyed_datum_position_override(self, builder):
        keyed = {"signature_z1": {"type": "typed", "data": "Noa", "x": 220.0, "y": 330.0}}

        requests = builder.build([], [zone()], [], keyed)

        assert requests[0].anchor == (220.0, 330.0)

    def test_requests_are_fresh_per_call(self, builder):
        first = builder.build([signature_field()], [], [typed()])
        second = builder.build([signature_field()], [], [typed()])

        assert first[0] == second[0]
        assert first[0] is not second[0]


class TestSerialization:
    """Tests for serialize_requests and SignatureRequest."""

    def test_wire_format(self, builder):
        requests = builder.build([signature_field()], [], [typed()])

        decoded = json.loads(serialize_requests(requests))

        assert len(decoded) == 1
        entry = decoded[0]
        assert set(entry) == {"points", "x", "y", "width", "height", "color", "page"}
        assert set(entry["points"][0]) == {"x", "y", "pressure", "timestamp"}
        assert entry["color"] == "#000000"

    def test_request_requires_points(self):
        with pytest.raises(ValueError):
            SignatureRequest(points=(), x=0, y=0, width=1, height=1)


class TestDefaultSignatures:
    """Tests for default_signatures."""

    def test_from_profile_name(self):
        signatures = default_signatures(UserProfile(name="Dana Levi"))

        assert len(signatures) == 1
        assert signatures[0].type is SignatureType.TYPED
        assert signatures[0].data == "Dana Levi"
        assert signatures[0].is_default

    def test_empty_profile(self):
        assert default_signatures(UserProfile()) == []
