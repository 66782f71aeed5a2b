"""
Destination catalog loader.

The catalog is a local JSON file (default: `data/catalogs/parks.json`) with two sections:
- `curated`: always shown on the map, regardless of filters
- `discoverable`: shown only in the "discover" view once a region or type is chosen

A flat list with a per-entry `curated` flag is accepted too. Entries are validated into
immutable `CatalogEntry` models; the provider never mutates them.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from rvplanner.config.settings import Settings, get_settings
from rvplanner.core.env import resolve_project_path
from rvplanner.domain.models import CatalogEntry, normalize_filter_type

logger = logging.getLogger(__name__)

_ENTRIES_ADAPTER = TypeAdapter(list[CatalogEntry])


@dataclass(frozen=True)
class CatalogData:
    curated: tuple[CatalogEntry, ...] = ()
    discoverable: tuple[CatalogEntry, ...] = ()
    source_path: Path | None = field(default=None, compare=False)


def load_catalog(path: str | Path) -> CatalogData:
    """Load and validate a catalog JSON file."""
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))

    if isinstance(payload, list):
        entries = _ENTRIES_ADAPTER.validate_python(payload)
        return CatalogData(
            curated=tuple(e for e in entries if e.curated),
            discoverable=tuple(e for e in entries if not e.curated),
            source_path=resolved,
        )
    if not isinstance(payload, dict):
        raise ValueError(f"Unsupported catalog shape in {resolved}: expected an object or array.")

    curated = _ENTRIES_ADAPTER.validate_python(
        [{**row, "curated": True} for row in payload.get("curated") or [] if isinstance(row, dict)]
    )
    discoverable = _ENTRIES_ADAPTER.validate_python(
        [{**row, "curated": False} for row in payload.get("discoverable") or [] if isinstance(row, dict)]
    )
    return CatalogData(curated=tuple(curated), discoverable=tuple(discoverable), source_path=resolved)


class CatalogProvider:
    """Read-only access to curated and discoverable catalog entries."""

    def __init__(self, data: CatalogData | None = None):
        self._data = data or CatalogData()
        self._by_id = {e.id: e for e in (*self._data.discoverable, *self._data.curated)}

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "CatalogProvider":
        """Load the configured catalog; a missing or invalid file yields an empty catalog."""
        settings = settings or get_settings()
        try:
            data = load_catalog(settings.catalog.path)
        except (OSError, ValueError, ValidationError) as e:
            logger.warning("Catalog not loaded from %s: %s", settings.catalog.path, e)
            return cls()
        logger.info(
            "Loaded catalog: %d curated, %d discoverable", len(data.curated), len(data.discoverable)
        )
        return cls(data)

    @property
    def loaded(self) -> bool:
        return bool(self._by_id)

    def list_curated(self) -> list[CatalogEntry]:
        return list(self._data.curated)

    def list_discoverable(self, *, region: str | None = None, type: str | None = None) -> list[CatalogEntry]:
        """Return discoverable entries matching the chosen region/type.

        Nothing is returned until at least one of the two is chosen; `"all"` counts as not chosen.
        """
        region = (region or "").strip().lower()
        type_ = normalize_filter_type(type)
        region = "" if region == "all" else region
        type_ = "" if type_ == "all" else type_
        if not region and not type_:
            return []
        out = []
        for e in self._data.discoverable:
            if region and e.region != region:
                continue
            if type_ and e.type != type_:
                continue
            out.append(e)
        return out

    def get(self, entry_id: str) -> CatalogEntry | None:
        return self._by_id.get(entry_id)

    def entries(self) -> list[CatalogEntry]:
        return [*self._data.curated, *self._data.discoverable]

    def regions(self) -> list[str]:
        return sorted({e.region for e in self.entries() if e.region})
