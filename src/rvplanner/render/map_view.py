"""
Map renderer.

The map widget itself (Leaflet in the browser, GeoJSON for the API) is a `MapCanvas`.
`MapRenderer.render()` does a full redraw on every call: clear every marker, draw the new
pins, then fit the view to them. No marker identity is tracked between renders.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from rvplanner.domain.models import MapPin


class MapCanvas(Protocol):
    def clear_markers(self) -> None: ...

    def add_marker(self, pin: MapPin) -> None: ...

    def fit_bounds(self, south: float, west: float, north: float, east: float) -> None: ...


@dataclass(frozen=True)
class Bounds:
    south: float
    west: float
    north: float
    east: float

    def padded(self, ratio: float) -> "Bounds":
        """Grow each side by `ratio` of the span (Leaflet's `LatLngBounds.pad`)."""
        dlat = (self.north - self.south) * ratio
        dlon = (self.east - self.west) * ratio
        return Bounds(
            south=max(-90.0, self.south - dlat),
            west=max(-180.0, self.west - dlon),
            north=min(90.0, self.north + dlat),
            east=min(180.0, self.east + dlon),
        )


def pins_bounds(pins: list[MapPin]) -> Bounds | None:
    if not pins:
        return None
    lats = [p.lat for p in pins]
    lons = [p.lon for p in pins]
    return Bounds(south=min(lats), west=min(lons), north=max(lats), east=max(lons))


class MapRenderer:
    def __init__(self, canvas: MapCanvas, *, fit_padding: float = 0.1):
        self._canvas = canvas
        self._fit_padding = fit_padding

    @property
    def canvas(self) -> MapCanvas:
        return self._canvas

    def render(self, pins: list[MapPin]) -> Bounds | None:
        """Redraw the canvas with exactly `pins`; returns the fitted bounds (None if empty)."""
        self._canvas.clear_markers()
        for pin in pins:
            self._canvas.add_marker(pin)
        bounds = pins_bounds(pins)
        if bounds is None:
            return None
        bounds = bounds.padded(self._fit_padding)
        self._canvas.fit_bounds(bounds.south, bounds.west, bounds.north, bounds.east)
        return bounds


@dataclass
class RecordingCanvas:
    """Keeps the current markers and a log of operations (CLI output, tests)."""

    markers: list[MapPin] = field(default_factory=list)
    operations: list[str] = field(default_factory=list)
    bounds: Bounds | None = None

    def clear_markers(self) -> None:
        self.operations.append("clear")
        self.markers = []

    def add_marker(self, pin: MapPin) -> None:
        self.operations.append(f"add:{pin.id}")
        self.markers.append(pin)

    def fit_bounds(self, south: float, west: float, north: float, east: float) -> None:
        self.operations.append("fit")
        self.bounds = Bounds(south, west, north, east)


class GeoJsonCanvas:
    """Renders markers into a GeoJSON FeatureCollection (served to the web map)."""

    def __init__(self) -> None:
        self._features: list[dict[str, Any]] = []
        self._bbox: list[float] | None = None

    def clear_markers(self) -> None:
        self._features = []
        self._bbox = None

    def add_marker(self, pin: MapPin) -> None:
        self._features.append(
            {
                "type": "Feature",
                "id": pin.id,
                # GeoJSON coordinate order is [lon, lat].
                "geometry": {"type": "Point", "coordinates": [pin.lon, pin.lat]},
                "properties": {
                    "name": pin.name,
                    "category": pin.category,
                    "colorClass": pin.color_class,
                    "color": pin.color,
                    "popupContent": pin.popup_content,
                    "clickAction": pin.click_action,
                },
            }
        )

    def fit_bounds(self, south: float, west: float, north: float, east: float) -> None:
        self._bbox = [west, south, east, north]

    def feature_collection(self) -> dict[str, Any]:
        fc: dict[str, Any] = {"type": "FeatureCollection", "features": list(self._features)}
        if self._bbox is not None:
            fc["bbox"] = list(self._bbox)
        return fc
