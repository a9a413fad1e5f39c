"""Marker icon selection.

Icons are described as data (Leaflet ``DivIcon`` options) so the web client can
build them without knowing how a marker was chosen.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

PRIMARY_COLOR = "#2563eb"
NEUTRAL_COLOR = "#6b7280"

_MOTORCYCLE_PATH = (
    "M18.92 6.01C18.72 5.42 18.16 5 17.5 5h-11c-.66 0-1.21.42-1.42 1.01L3 12v8c0 .55.45 1 1 1h1"
    "c.55 0 1-.45 1-1v-1h12v1c0 .55.45 1 1 1h1c.55 0 1-.45 1-1v-8l-2.08-5.99zM6.5 16c-.83 0-1.5-.67"
    "-1.5-1.5S5.67 13 6.5 13s1.5.67 1.5 1.5S7.33 16 6.5 16zm11 0c-.83 0-1.5-.67-1.5-1.5s.67-1.5 1.5"
    "-1.5s1.5.67 1.5 1.5-.67 1.5-1.5 1.5zM5 11l1.5-4.5h11L19 11H5z"
)


@dataclass(slots=True, frozen=True)
class MarkerIcon:
    kind: str
    color: Optional[str]
    html: Optional[str]
    icon_size: tuple[int, int]
    icon_anchor: tuple[int, int]
    label: Optional[str] = None
    z_index_offset: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


def origin_icon() -> MarkerIcon:
    """The client's default pin; no custom HTML."""
    return MarkerIcon(kind="origin", color=None, html=None, icon_size=(25, 41), icon_anchor=(12, 41))


def route_point_icon(number: int, color: str = PRIMARY_COLOR) -> MarkerIcon:
    if number < 1:
        raise ValueError("Stop numbers start at 1.")
    html = (
        f'<div class="route-point" style="background-color:{color};color:#fff;border-radius:9999px;'
        f"width:2rem;height:2rem;display:flex;align-items:center;justify-content:center;"
        f'font-weight:700;border:2px solid white;">{number}</div>'
    )
    return MarkerIcon(
        kind="route_point",
        color=color,
        html=html,
        icon_size=(32, 32),
        icon_anchor=(16, 32),
        label=str(number),
    )


def pending_icon() -> MarkerIcon:
    html = (
        f'<div class="pending-point" style="background-color:{NEUTRAL_COLOR};border-radius:9999px;'
        f'width:1.5rem;height:1.5rem;border:2px solid white;"></div>'
    )
    return MarkerIcon(kind="pending", color=NEUTRAL_COLOR, html=html, icon_size=(24, 24), icon_anchor=(12, 24))


def courier_icon(color: str) -> MarkerIcon:
    svg = (
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24" fill="{color}" '
        f'width="32px" height="32px"><path d="{_MOTORCYCLE_PATH}"/></svg>'
    )
    return MarkerIcon(
        kind="courier",
        color=color,
        html=svg,
        icon_size=(32, 32),
        icon_anchor=(16, 16),
        z_index_offset=1000,
    )
