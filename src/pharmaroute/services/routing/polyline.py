"""Encoded polyline codec (precision 1e5).

Each coordinate is stored as the delta from the previous point, zig-zag
encoded and split into 5-bit chunks; every chunk but the last carries the
0x20 continuation bit, and 63 is added to make the character printable.
"""

from __future__ import annotations

from typing import Iterable

PRECISION = 1e5
_OFFSET = 63
_CHUNK_MASK = 0x1F
_CONTINUATION = 0x20


class PolylineDecodingError(ValueError):
    """The encoded string is truncated or contains invalid characters."""


def _read_value(encoded: str, index: int) -> tuple[int, int]:
    shift = 0
    result = 0
    while True:
        if index >= len(encoded):
            raise PolylineDecodingError(
                f"Encoded polyline ends inside a value at position {index}."
            )
        chunk = ord(encoded[index]) - _OFFSET
        if chunk < 0 or chunk > 0x3F:
            raise PolylineDecodingError(
                f"Invalid polyline character {encoded[index]!r} at position {index}."
            )
        index += 1
        result |= (chunk & _CHUNK_MASK) << shift
        shift += 5
        if chunk < _CONTINUATION:
            break
    delta = ~(result >> 1) if (result & 1) else (result >> 1)
    return delta, index


def decode_polyline(encoded: str) -> list[tuple[float, float]]:
    """Decode an encoded polyline string to a list of (lat, lng) tuples."""
    coordinates: list[tuple[float, float]] = []
    index = 0
    lat = 0
    lng = 0

    while index < len(encoded):
        dlat, index = _read_value(encoded, index)
        if index >= len(encoded):
            raise PolylineDecodingError("Encoded polyline has a latitude without a longitude.")
        dlng, index = _read_value(encoded, index)
        lat += dlat
        lng += dlng
        coordinates.append((lat / PRECISION, lng / PRECISION))

    return coordinates


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else (value << 1)
    chunks = []
    while value >= _CONTINUATION:
        chunks.append(chr((_CONTINUATION | (value & _CHUNK_MASK)) + _OFFSET))
        value >>= 5
    chunks.append(chr(value + _OFFSET))
    return "".join(chunks)


def encode_polyline(points: Iterable[tuple[float, float]]) -> str:
    """Encode (lat, lng) points with the same precision and delta scheme."""
    output = []
    prev_lat = 0
    prev_lng = 0
    for lat, lng in points:
        lat_i = int(round(lat * PRECISION))
        lng_i = int(round(lng * PRECISION))
        output.append(_encode_value(lat_i - prev_lat))
        output.append(_encode_value(lng_i - prev_lng))
        prev_lat, prev_lng = lat_i, lng_i
    return "".join(output)
