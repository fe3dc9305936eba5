"""Building backend signature requests from fields, zones and artifacts."""

import json
import logging
import time
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from ..models.document import FormField, Position, SignatureZone
from ..models.enums import FieldType, SignatureType
from ..models.processing import UserProfile
from ..models.signature import SignatureData, SignaturePoint, SignatureRequest


logger = logging.getLogger(__name__)

DEFAULT_BOX = Position(x=100.0, y=500.0, width=150.0, height=50.0)
DEFAULT_PAGE = 1
DEFAULT_PRESSURE = 0.5
DEFAULT_COLOR = "#000000"
POINT_INTERVAL_MS = 16

# Relative (x, y) offsets of the placeholder stroke inside the request box.
ZIGZAG = ((0.1, 0.7), (0.3, 0.3), (0.5, 0.7), (0.7, 0.3), (0.9, 0.7))

KeyedSignature = Any  # SignatureData, dict in wire format, or raw data string


def parse_points(data: str) -> Optional[List[Tuple[float, float, float]]]:
    """
    Parse signature data as a JSON array of ``{x, y, pressure?}`` points.

    Returns:
        (x, y, pressure) tuples, or None when the data is not such an
        array or holds no usable point.
    """
    if not data or not data.lstrip().startswith("["):
        return None
    try:
        raw = json.loads(data)
    except ValueError:
        return None
    if not isinstance(raw, list):
        return None

    points = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        x, y = item.get("x"), item.get("y")
        if not _is_number(x) or not _is_number(y):
            continue
        pressure = item.get("pressure")
        points.append((float(x), float(y), float(pressure) if _is_number(pressure) else DEFAULT_PRESSURE))
    return points or None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class SignatureRequestBuilder:
    """
    Turns detected signature locations and user artifacts into requests.

    Requests are deduplicated by (x, y) position. Field-derived requests
    are built first and win over zone-derived ones at the same position,
    whatever data either carries. When nothing yields a request a single
    default request is emitted, so the result is never empty.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        color: str = DEFAULT_COLOR,
    ):
        self._clock = clock
        self._color = color

    def build(
        self,
        filled_fields: Iterable[FormField],
        zones: Iterable[SignatureZone],
        signature_data: Optional[Iterable[SignatureData]] = None,
        keyed_signatures: Optional[Mapping[str, KeyedSignature]] = None,
    ) -> List[SignatureRequest]:
        """
        Build signature requests for one processing call.

        Args:
            filled_fields: Fields after reconciliation.
            zones: Signature zones found by analysis.
            signature_data: The user's signature artifacts.
            keyed_signatures: Artifacts supplied per zone as
                ``signature_<zoneId>``.

        Returns:
            A non-empty list of fresh SignatureRequest values.
        """
        data = list(signature_data or [])
        by_id = {datum.id: datum for datum in data}
        default = self.default_datum(data)
        keyed_signatures = keyed_signatures or {}

        signature_requests: List[SignatureRequest] = []
        covered: Set[Tuple[float, float]] = set()

        for field in filled_fields:
            if field.type is not FieldType.SIGNATURE or not (field.value or "").strip():
                continue
            bound = by_id.get(field.id)
            request = self._request(
                bound or default, field.position, field.page, "field", field.id,
                override=bound is not None,
            )
            if request.anchor in covered:
                logger.debug(f"Skipping signature field {field.id}: position already covered")
                continue
            covered.add(field.position.anchor)
            covered.add(request.anchor)
            signature_requests.append(request)

        for zone in zones:
            if zone.position.anchor in covered:
                continue
            keyed = self._keyed_datum(keyed_signatures, zone.id)
            request = self._request(
                keyed or default, zone.position, zone.page, "zone", zone.id,
                override=keyed is not None,
            )
            if request.anchor in covered:
                continue
            covered.add(zone.position.anchor)
            covered.add(request.anchor)
            signature_requests.append(request)

        if not signature_requests:
            logger.info("No signature locations found, using default signature position")
            signature_requests.append(self._request(default, DEFAULT_BOX, DEFAULT_PAGE, "default", None, override=False))

        return signature_requests

    def default_datum(self, data: List[SignatureData]) -> Optional[SignatureData]:
        """The artifact flagged as default, else the first one."""
        for datum in data:
            if datum.is_default:
                return datum
        return data[0] if data else None

    def _keyed_datum(self, keyed: Mapping[str, KeyedSignature], zone_id: str) -> Optional[SignatureData]:
        key = f"signature_{zone_id}"
        value = keyed.get(key)
        if value is None or value == "":
            return None
        if isinstance(value, SignatureData):
            return value
        if isinstance(value, dict):
            return SignatureData.from_dict({"id": key, "name": key, **value})
        text = str(value)
        return SignatureData(
            id=key,
            name=key,
            type=SignatureType.DRAWING if parse_points(text) else SignatureType.TYPED,
            data=text,
        )

    def _request(
        self,
        datum: Optional[SignatureData],
        box: Position,
        page: int,
        source: str,
        source_id: Optional[str],
        override: bool = True,
    ) -> SignatureRequest:
        x, y = box.x, box.y
        if override and datum is not None:
            x = datum.x if datum.x is not None else x
            y = datum.y if datum.y is not None else y
            page = datum.page if datum.page is not None else page

        parsed = parse_points(datum.data) if datum is not None else None
        base = int(self._clock() * 1000)
        if parsed:
            points = tuple(
                SignaturePoint(px, py, pressure, base + i * POINT_INTERVAL_MS)
                for i, (px, py, pressure) in enumerate(parsed)
            )
        else:
            points = tuple(
                SignaturePoint(
                    x + box.width * dx,
                    y + box.height * dy,
                    DEFAULT_PRESSURE,
                    base + i * POINT_INTERVAL_MS,
                )
                for i, (dx, dy) in enumerate(ZIGZAG)
            )

        metadata: Dict[str, Any] = {"source": source}
        if source_id is not None:
            metadata["sourceId"] = source_id
        if datum is not None:
            metadata["signatureId"] = datum.id
            metadata["synthesized"] = not parsed

        return SignatureRequest(
            points=points,
            x=x,
            y=y,
            width=box.width,
            height=box.height,
            page=max(1, page),
            color=self._color,
            metadata=metadata,
        )


def serialize_requests(signature_requests: Iterable[SignatureRequest]) -> str:
    """Encode requests as the JSON array the signing backend expects."""
    return json.dumps([request.to_dict() for request in signature_requests], ensure_ascii=False)


def default_signatures(profile: UserProfile) -> List[SignatureData]:
    """A typed default signature made from the profile name, if any."""
    if not profile.name:
        return []
    return [SignatureData(
        id="default",
        name=profile.name,
        type=SignatureType.TYPED,
        data=profile.name,
        is_default=True,
    )]
