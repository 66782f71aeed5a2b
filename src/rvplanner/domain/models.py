"""
Domain models (Pydantic).

These types are the stable "contract" between layers:
- catalog reference data (`CatalogEntry`)
- user-owned records (`Destination`, `Folder`)
- view inputs/outputs (`FilterState`, `MapPin`)

JSON documents use camelCase keys (`visitedDate`, `bestSeason`, `createdAt`) so files
written by the browser version of the planner load unchanged; Python code uses snake_case.

Visit state is a tagged union (`Unvisited` | `Visited`): a destination that is not
visited cannot carry a visit date or visit notes.
"""

from __future__ import annotations

import secrets
import time
from datetime import datetime
from typing import Annotated, Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from rvplanner.core.time import ensure_tz, utc_now


DestinationType = Literal["national-park", "state-park", "campground", "city", "scenic", "attraction", "other"]
DESTINATION_TYPES: tuple[str, ...] = get_args(DestinationType)

TYPE_ALIASES = {
    "park": "national-park",
    "national_park": "national-park",
    "state_park": "state-park",
    "scenic-route": "scenic",
    "scenic_route": "scenic",
}

TYPE_LABELS = {
    "national-park": "National Park",
    "state-park": "State Park",
    "campground": "Campground",
    "city": "City",
    "scenic": "Scenic Route",
    "attraction": "Attraction",
    "other": "Other",
}

REGION_LABELS = {
    "southwest": "Southwest",
    "pacific-northwest": "Pacific Northwest",
    "east-coast": "East Coast",
    "southeast": "Southeast",
    "midwest": "Midwest",
    "rocky-mountains": "Rocky Mountains",
}

# Pseudo-folders understood by `FilterState.folder` besides real folder ids.
FOLDER_ALL = "all"
FOLDER_WISHLIST = "wishlist"
FOLDER_VISITED = "visited"
FOLDER_ALIASES = {"unfiled-bucket": FOLDER_WISHLIST, "not-visited": FOLDER_WISHLIST}

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(n: int) -> str:
    out = ""
    while True:
        n, r = divmod(n, 36)
        out = _BASE36[r] + out
        if n == 0:
            return out


def generate_id() -> str:
    """Return a short id: base36 milliseconds + random suffix (roughly time-ordered)."""
    return _base36(time.time_ns() // 1_000_000) + secrets.token_hex(4)


def normalize_type(value: Any) -> str:
    """Map aliases and unknown values onto `DESTINATION_TYPES` (unknown -> `other`)."""
    if value is None:
        return "other"
    t = str(value).strip().lower()
    t = TYPE_ALIASES.get(t, t)
    return t if t in DESTINATION_TYPES else "other"


def normalize_filter_type(value: Any) -> str:
    """Filter-side type: aliases are mapped, unknown values kept as given, blank means `all`."""
    t = str(value or "").strip().lower()
    return TYPE_ALIASES.get(t, t) or "all"


def type_label(value: str) -> str:
    return TYPE_LABELS.get(value, value)


def region_label(value: str | None) -> str:
    if not value:
        return ""
    return REGION_LABELS.get(value, value.replace("-", " ").title())


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Unvisited(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["unvisited"] = "unvisited"


class Visited(BaseModel):
    """Visit details; both fields are optional free text (e.g. date "June 2026")."""

    model_config = ConfigDict(frozen=True)

    status: Literal["visited"] = "visited"
    date: str | None = None
    notes: str | None = None

    @field_validator("date", "notes", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v


Visit = Annotated[Unvisited | Visited, Field(discriminator="status")]


class _PlaceFields(_CamelModel):
    """Descriptive fields shared by catalog templates and user records."""

    name: str
    state: str = ""
    region: str | None = None
    type: DestinationType = "other"
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)

    description: str | None = None
    best_season: str | None = None
    estimated_cost: str | None = None
    rv_camping: bool = False
    rv_camping_details: str | None = None
    must_see: str | None = None

    @field_validator("name")
    @classmethod
    def _require_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, v: Any) -> str:
        return normalize_type(v)

    @field_validator("region", mode="before")
    @classmethod
    def _normalize_region(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v

    @model_validator(mode="after")
    def _both_coordinates_or_neither(self) -> "_PlaceFields":
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("Enter both latitude and longitude, or neither")
        return self

    @property
    def is_mappable(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class Destination(_PlaceFields):
    """A user-owned record of a place being tracked (wishlist or visited)."""

    id: str = Field(default_factory=generate_id)
    visit: Visit = Field(default_factory=Unvisited)
    folder: str | None = None
    notes: str | None = None
    source: Literal["custom", "catalog"] = "custom"
    created_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="before")
    @classmethod
    def _fold_legacy_visit_fields(cls, data: Any) -> Any:
        # Browser-era records are flat: {visited, visitedDate, visitedNotes}.
        if not isinstance(data, dict):
            return data
        data = dict(data)
        flag = data.pop("visited", None)
        date = data.pop("visitedDate", None) or data.pop("visited_date", None)
        notes = data.pop("visitedNotes", None) or data.pop("visited_notes", None)
        if "visit" not in data and flag:
            data["visit"] = {"status": "visited", "date": date, "notes": notes}
        return data

    @field_validator("created_at")
    @classmethod
    def _aware_created_at(cls, v: datetime) -> datetime:
        return ensure_tz(v, "UTC")

    @field_validator("folder", mode="before")
    @classmethod
    def _blank_folder(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @computed_field
    @property
    def visited(self) -> bool:
        return isinstance(self.visit, Visited)

    @property
    def visited_date(self) -> str | None:
        return self.visit.date if isinstance(self.visit, Visited) else None

    @property
    def visited_notes(self) -> str | None:
        return self.visit.notes if isinstance(self.visit, Visited) else None

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class CatalogEntry(_PlaceFields):
    """Immutable reference record shipped with the app (a template for a Destination)."""

    model_config = ConfigDict(frozen=True)

    id: str
    curated: bool = False

    def adopt(self, *, visited: bool, folder: str | None = None) -> Destination:
        """Copy template fields into a new user record that keeps the catalog id."""
        fields = self.model_dump(exclude={"curated"})
        return Destination(
            **fields,
            visit=Visited() if visited else Unvisited(),
            folder=folder,
            source="catalog",
        )


class Folder(_CamelModel):
    id: str = Field(default_factory=generate_id)
    name: str
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("name")
    @classmethod
    def _require_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("folder name must not be empty")
        return v

    @field_validator("created_at")
    @classmethod
    def _aware_created_at(cls, v: datetime) -> datetime:
        return ensure_tz(v, "UTC")

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class FilterState(BaseModel):
    """Current filter selections for the list and map views."""

    model_config = ConfigDict(frozen=True)

    folder: str = FOLDER_ALL
    type: str = "all"
    region: str = "all"
    search: str = ""

    @field_validator("folder", mode="before")
    @classmethod
    def _normalize_folder(cls, v: Any) -> str:
        v = str(v or FOLDER_ALL).strip()
        return FOLDER_ALIASES.get(v, v) or FOLDER_ALL

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_filter_type(cls, v: Any) -> str:
        return normalize_filter_type(v)

    @field_validator("region", mode="before")
    @classmethod
    def _normalize_filter_region(cls, v: Any) -> str:
        return str(v or "all").strip().lower() or "all"

    @field_validator("search", mode="before")
    @classmethod
    def _normalize_search(cls, v: Any) -> str:
        return str(v or "").strip().lower()

    def replace(self, **changes: Any) -> "FilterState":
        """Return a new state with `changes` applied (re-validated, unlike `model_copy`)."""
        return FilterState.model_validate({**self.model_dump(), **changes})


PinCategory = Literal["visited", "unvisited", "curated"]
ColorClass = Literal["success", "alert", "info"]


class MapPin(_CamelModel):
    """One marker for the map renderer."""

    id: str
    name: str
    lat: float
    lon: float
    category: PinCategory
    color_class: ColorClass
    color: str
    popup_content: str
    click_action: Literal["view", "adopt"] = "view"
