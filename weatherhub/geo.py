"""Coordinate validation and location bucketing."""
from __future__ import annotations

import math
from decimal import Decimal
from numbers import Real
from typing import Tuple

import pygeohash

from .errors import InvalidCoordinatesError


DEFAULT_PRECISION = 5
MAX_PRECISION = 19


def validate_coordinates(latitude: object, longitude: object) -> Tuple[float, float]:
    if not _is_number(latitude) or not _is_number(longitude):
        raise InvalidCoordinatesError("Invalid latitude or longitude")
    lat, lng = float(latitude), float(longitude)
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        raise InvalidCoordinatesError("Invalid latitude or longitude")
    return lat, lng


def bucket_key(latitude: float, longitude: float, precision: int = DEFAULT_PRECISION) -> str:
    return pygeohash.encode(latitude, longitude, precision=precision)


def bucket_center(geohash: str) -> Tuple[float, float]:
    decoded = pygeohash.decode_exactly(geohash)
    return float(decoded[0]), float(decoded[1])


def is_valid_precision(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return 0 < value <= MAX_PRECISION


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (Real, Decimal)):
        return False
    return math.isfinite(float(value))


__all__ = [
    "DEFAULT_PRECISION",
    "MAX_PRECISION",
    "bucket_center",
    "bucket_key",
    "is_valid_precision",
    "validate_coordinates",
]
