"""
List renderer.

`render_list()` is a pure function of its inputs: it returns a complete view description
(cards + empty state) that replaces the previous one wholesale. Cards expose their actions
as `CardAction` descriptors; performing an action is the controller's job, never the renderer's.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Literal

from rvplanner.domain.models import (
    FOLDER_ALL,
    FOLDER_VISITED,
    FOLDER_WISHLIST,
    Destination,
    FilterState,
    Folder,
    region_label,
    type_label,
)

ActionName = Literal["toggle-visited", "edit", "delete", "add-to-folder"]

# The action table: every card offers exactly these, in this order.
ACTIONS: tuple[ActionName, ...] = ("toggle-visited", "edit", "delete", "add-to-folder")


@dataclass(frozen=True)
class CardAction:
    name: ActionName
    label: str
    destination_id: str


@dataclass(frozen=True)
class InfoRow:
    label: str
    value: str


@dataclass(frozen=True)
class DestinationCard:
    id: str
    title: str
    subtitle: str
    visited: bool
    tags: list[str] = field(default_factory=list)
    info: list[InfoRow] = field(default_factory=list)
    must_see: str | None = None
    notes: str | None = None
    visit_summary: str | None = None
    folder_name: str | None = None
    actions: list[CardAction] = field(default_factory=list)


@dataclass(frozen=True)
class ListView:
    cards: list[DestinationCard]
    empty: bool
    empty_message: str | None = None

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class FolderSummary:
    id: str
    name: str
    count: int
    builtin: bool
    active: bool = False


def _action_label(name: ActionName, d: Destination) -> str:
    if name == "toggle-visited":
        return "Mark as Wishlist" if d.visited else "Mark as Visited"
    if name == "edit":
        return "Edit"
    if name == "delete":
        return "Delete"
    return "Move to Folder" if d.folder else "Add to Folder"


def _visit_summary(d: Destination) -> str | None:
    if not d.visited:
        return None
    parts = [f"Visited {d.visited_date}" if d.visited_date else "Visited"]
    if d.visited_notes:
        parts.append(d.visited_notes)
    return ": ".join(parts)


def render_card(d: Destination, *, folder_names: dict[str, str] | None = None) -> DestinationCard:
    tags = [type_label(d.type)]
    if d.region:
        tags.append(region_label(d.region))
    if d.visited:
        tags.append("Visited")

    info: list[InfoRow] = []
    if d.rv_camping:
        info.append(InfoRow("RV Camping", d.rv_camping_details or "Available"))
    if d.best_season:
        info.append(InfoRow("Best Season", d.best_season))
    if d.estimated_cost:
        info.append(InfoRow("Est. Cost", d.estimated_cost))

    return DestinationCard(
        id=d.id,
        title=d.name,
        subtitle=d.state,
        visited=d.visited,
        tags=tags,
        info=info,
        must_see=d.must_see,
        notes=d.notes,
        visit_summary=_visit_summary(d),
        folder_name=(folder_names or {}).get(d.folder) if d.folder else None,
        actions=[CardAction(name, _action_label(name, d), d.id) for name in ACTIONS],
    )


def _empty_message(filters: FilterState | None) -> str:
    if filters is None or filters == FilterState():
        return "Start adding places you want to visit!"
    if filters.search:
        return f'No destinations match "{filters.search}".'
    return "No destinations in this view yet."


def render_list(
    destinations: list[Destination],
    *,
    folders: list[Folder] | None = None,
    filters: FilterState | None = None,
) -> ListView:
    """Render the working set as cards (a full replacement of any previous view)."""
    folder_names = {f.id: f.name for f in folders or []}
    cards = [render_card(d, folder_names=folder_names) for d in destinations]
    if not cards:
        return ListView(cards=[], empty=True, empty_message=_empty_message(filters))
    return ListView(cards=cards, empty=False)


def render_folder_sidebar(
    records: list[Destination], folders: list[Folder], *, active: str = FOLDER_ALL
) -> list[FolderSummary]:
    """Built-in pseudo-folders with counts, followed by the user's folders."""
    visited = sum(1 for d in records if d.visited)
    rows = [
        (FOLDER_ALL, "All Destinations", len(records), True),
        (FOLDER_WISHLIST, "Wishlist", len(records) - visited, True),
        (FOLDER_VISITED, "Visited", visited, True),
    ]
    for f in folders:
        rows.append((f.id, f.name, sum(1 for d in records if d.folder == f.id), False))
    return [FolderSummary(id_, name, count, builtin, active=(id_ == active)) for id_, name, count, builtin in rows]
