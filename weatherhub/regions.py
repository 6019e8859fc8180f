"""Regional eligibility checks for region-restricted providers.

Regions are approximated by bounding boxes, which is precise enough to keep
a country-scoped provider away from clearly foreign coordinates. Callers with
real boundary data can supply their own :class:`RegionEligibility`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Protocol, Tuple


class RegionEligibility(Protocol):
    def is_eligible(self, latitude: float, longitude: float) -> bool:
        ...


@dataclass(frozen=True)
class BoundingBox:
    south: float
    west: float
    north: float
    east: float

    def contains(self, latitude: float, longitude: float) -> bool:
        return self.south <= latitude <= self.north and self.west <= longitude <= self.east


@dataclass(frozen=True)
class BoundingBoxRegion:
    code: str
    boxes: Tuple[BoundingBox, ...]

    def is_eligible(self, latitude: float, longitude: float) -> bool:
        return any(box.contains(latitude, longitude) for box in self.boxes)


UNITED_STATES = BoundingBoxRegion(
    code="US",
    boxes=(
        BoundingBox(24.7433195, -124.7844079, 49.3457868, -66.9513812),  # conterminous
        BoundingBox(51.2, -179.99, 71.5, -129.97),  # Alaska
        BoundingBox(51.2, 172.4, 53.1, 180.0),  # western Aleutians
        BoundingBox(18.9, -160.3, 22.3, -154.8),  # Hawaii
        BoundingBox(17.88, -67.95, 18.52, -65.22),  # Puerto Rico
    ),
)


def default_regions() -> Dict[str, RegionEligibility]:
    return {UNITED_STATES.code: UNITED_STATES}


def is_location_in_us(latitude: float, longitude: float) -> bool:
    return UNITED_STATES.is_eligible(latitude, longitude)


__all__ = [
    "BoundingBox",
    "BoundingBoxRegion",
    "RegionEligibility",
    "UNITED_STATES",
    "default_regions",
    "is_location_in_us",
]
