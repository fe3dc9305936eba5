"""Signature artifact and backend request models."""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .enums import SignatureType, coerce_enum


@dataclass
class SignatureData:
    """
    A user-supplied signature artifact.

    ``data`` holds typed text, base64 image bytes, or a JSON-encoded array
    of stroke points depending on ``type``. The optional x/y/page override
    the geometry of the field the signature is bound to.
    """
    id: str
    name: str
    type: SignatureType
    data: str
    is_default: bool = False
    x: Optional[float] = None
    y: Optional[float] = None
    page: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SignatureData":
        def optional_number(key: str, cast):
            value = data.get(key)
            if value is None or isinstance(value, bool):
                return None
            try:
                number = float(value)
            except (TypeError, ValueError):
                return None
            return cast(number) if math.isfinite(number) else None

        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            type=coerce_enum(SignatureType, data.get("type"), SignatureType.TYPED),
            data=str(data.get("data", "")),
            is_default=bool(data.get("isDefault", False)),
            x=optional_number("x", float),
            y=optional_number("y", float),
            page=optional_number("page", int),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "data": self.data,
            "isDefault": self.is_default,
        }
        if self.x is not None:
            result["x"] = self.x
        if self.y is not None:
            result["y"] = self.y
        if self.page is not None:
            result["page"] = self.page
        return result


@dataclass(frozen=True)
class SignaturePoint:
    """One sampled point of a signature stroke."""
    x: float
    y: float
    pressure: float
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "pressure": self.pressure,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class SignatureRequest:
    """
    A backend-bound instruction to draw one signature.

    Requests are immutable value trees built fresh for every processing
    call; points is a non-empty tuple and no request shares sub-objects
    with another, so serialization can never meet a cycle.
    """
    points: Tuple[SignaturePoint, ...]
    x: float
    y: float
    width: float
    height: float
    page: int = 1
    color: str = "#000000"
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        if not self.points:
            raise ValueError("SignatureRequest requires at least one point")

    @property
    def anchor(self) -> tuple:
        return (self.x, self.y)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "points": [p.to_dict() for p in self.points],
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "color": self.color,
            "page": self.page,
        }
