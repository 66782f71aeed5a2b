"""
Filter/merge engine.

Turns the user collection + catalog + current `FilterState` into what the views show:
- the list working set (filtered user records, collection order preserved)
- the map pins (filtered user records + curated catalog entries the user has not adopted)
- the "discover" list (discoverable catalog entries the user has not adopted)

Precedence rule: when a catalog entry and a user record share an id, the user record wins
everywhere and the catalog copy is suppressed, so an adopted place never shows twice.
Curated pins ignore the filters; they are always on the map.
"""

from __future__ import annotations

import html
from dataclasses import dataclass, field
from typing import Iterable

from rvplanner.catalog.loader import CatalogProvider
from rvplanner.config.settings import MapColors
from rvplanner.domain.models import (
    FOLDER_ALL,
    FOLDER_VISITED,
    FOLDER_WISHLIST,
    CatalogEntry,
    Destination,
    FilterState,
    MapPin,
    region_label,
    type_label,
)


@dataclass(frozen=True)
class WorkingSet:
    destinations: list[Destination] = field(default_factory=list)
    pins: list[MapPin] = field(default_factory=list)


def _matches_folder(d: Destination, folder: str) -> bool:
    if folder == FOLDER_ALL:
        return True
    if folder == FOLDER_WISHLIST:
        return not d.visited
    if folder == FOLDER_VISITED:
        return d.visited
    return d.folder == folder


def _matches_search(d: Destination, needle: str) -> bool:
    if not needle:
        return True
    return any(needle in (value or "").lower() for value in (d.name, d.state, d.notes))


def filter_destinations(records: Iterable[Destination], filters: FilterState) -> list[Destination]:
    """Apply folder, type, region and search filters (in that order)."""
    out = []
    for d in records:
        if not _matches_folder(d, filters.folder):
            continue
        if filters.type != "all" and d.type != filters.type:
            continue
        if filters.region != "all" and d.region != filters.region:
            continue
        if not _matches_search(d, filters.search):
            continue
        out.append(d)
    return out


def _popup(name: str, state: str, rows: list[tuple[str, str | None]]) -> str:
    parts = [f"<h4>{html.escape(name)}</h4>"]
    if state:
        parts.append(f"<p>{html.escape(state)}</p>")
    for label, value in rows:
        if value:
            parts.append(f"<p>{html.escape(label)}: {html.escape(value)}</p>")
    return "".join(parts)


def destination_pin(d: Destination, colors: MapColors) -> MapPin | None:
    """Pin for a user record; None when the record has no coordinates."""
    if not d.is_mappable:
        return None
    if d.visited:
        category, color_class, color = "visited", "success", colors.success
    else:
        category, color_class, color = "unvisited", "alert", colors.alert
    rows = [
        ("Type", type_label(d.type)),
        ("RV camping", (d.rv_camping_details or "Available") if d.rv_camping else None),
        ("Best", d.best_season),
        ("Visited", d.visited_date),
    ]
    return MapPin(
        id=d.id,
        name=d.name,
        lat=d.latitude,
        lon=d.longitude,
        category=category,
        color_class=color_class,
        color=color,
        popup_content=_popup(d.name, d.state, rows),
        click_action="view",
    )


def curated_pin(e: CatalogEntry, colors: MapColors) -> MapPin | None:
    if not e.is_mappable:
        return None
    rows = [
        ("Type", type_label(e.type)),
        ("Region", region_label(e.region)),
        ("Best", e.best_season),
        ("Must see", e.must_see),
    ]
    return MapPin(
        id=e.id,
        name=e.name,
        lat=e.latitude,
        lon=e.longitude,
        category="curated",
        color_class="info",
        color=colors.info,
        popup_content=_popup(e.name, e.state, rows),
        click_action="adopt",
    )


def build_map_pins(
    records: list[Destination],
    filters: FilterState,
    curated: Iterable[CatalogEntry],
    colors: MapColors,
) -> list[MapPin]:
    """Filtered user pins first, then curated pins for entries not in the collection."""
    adopted = {d.id for d in records}
    pins = [p for p in (destination_pin(d, colors) for d in filter_destinations(records, filters)) if p]
    for e in curated:
        if e.id in adopted:
            continue
        pin = curated_pin(e, colors)
        if pin:
            pins.append(pin)
    return pins


def discover(
    catalog: CatalogProvider,
    records: Iterable[Destination],
    *,
    region: str | None = None,
    type: str | None = None,
) -> list[CatalogEntry]:
    """Discoverable catalog entries for a region/type that the user has not adopted yet."""
    adopted = {d.id for d in records}
    return [e for e in catalog.list_discoverable(region=region, type=type) if e.id not in adopted]


def merge_views(
    records: list[Destination],
    catalog: CatalogProvider,
    filters: FilterState,
    colors: MapColors,
) -> WorkingSet:
    return WorkingSet(
        destinations=filter_destinations(records, filters),
        pins=build_map_pins(records, filters, catalog.list_curated(), colors),
    )
