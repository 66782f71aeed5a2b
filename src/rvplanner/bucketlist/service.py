"""
Bucket-list service: the non-interactive core operations.

This is the only place that mutates the user collection. Each mutation:
1. validates input (blank names and bad coordinates raise `ValidationFailed`)
2. changes the in-memory store
3. saves the whole collection and reports the outcome through the `Notifier`

A failed save is never raised: the change stays in memory, a warning is surfaced, and
`last_save_ok` is False so API callers can tell the client.

The interactive flows (confirmations, visit-notes prompts) live in `controller.py`.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import ValidationError

from rvplanner.bucketlist.dialogs import LoggingNotifier, Notifier
from rvplanner.catalog.loader import CatalogProvider
from rvplanner.config.settings import Settings, get_settings
from rvplanner.domain.errors import (
    DuplicateDestinationError,
    UnknownCatalogEntryError,
    UnknownDestinationError,
    ValidationFailed,
)
from rvplanner.domain.models import (
    CatalogEntry,
    Destination,
    FilterState,
    Folder,
    MapPin,
    Unvisited,
    Visited,
)
from rvplanner.engine.merge import WorkingSet, discover, merge_views
from rvplanner.folders.manager import FolderManager
from rvplanner.render.list_view import FolderSummary, ListView, render_folder_sidebar, render_list
from rvplanner.render.map_view import Bounds, MapCanvas, MapRenderer
from rvplanner.storage.collection import UserCollectionStore
from rvplanner.storage.kv import KeyValueStore, build_store
from rvplanner.transfer.backup import ImportBundle, export_collection

logger = logging.getLogger(__name__)

# Fields a user may set through the add/edit forms (snake_case ids).
EDITABLE_FIELDS = (
    "name",
    "state",
    "region",
    "type",
    "notes",
    "best_season",
    "estimated_cost",
    "must_see",
    "rv_camping",
    "rv_camping_details",
    "latitude",
    "longitude",
)

_TRUE_STRINGS = {"1", "true", "yes", "y", "on"}


def _first_error(e: ValidationError) -> str:
    err = e.errors()[0]
    loc = ".".join(str(p) for p in err.get("loc", ()))
    return f"{loc}: {err['msg']}" if loc else err["msg"]


def clean_form_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize raw form values (strings) into a patch of editable fields."""
    out: dict[str, Any] = {}
    for key in EDITABLE_FIELDS:
        if key not in fields:
            continue
        value = fields[key]
        if isinstance(value, str):
            value = value.strip()
        if key in ("latitude", "longitude"):
            if value in ("", None):
                out[key] = None
                continue
            try:
                out[key] = float(value)
            except (TypeError, ValueError) as e:
                raise ValidationFailed(f"{key} must be a number") from e
        elif key == "rv_camping":
            out[key] = value if isinstance(value, bool) else str(value).lower() in _TRUE_STRINGS
        elif key in ("name", "state"):
            out[key] = value or ""
        else:
            out[key] = value or None
    if "name" in out and not out["name"]:
        raise ValidationFailed("Name is required")
    return out


class BucketListService:
    def __init__(
        self,
        store: UserCollectionStore,
        catalog: CatalogProvider,
        *,
        settings: Settings | None = None,
        notifier: Notifier | None = None,
    ):
        self.store = store
        self.catalog = catalog
        self.folders = FolderManager(store)
        self.filters = FilterState()
        self.last_save_ok = True
        self._settings = settings or get_settings()
        self._notifier = notifier or LoggingNotifier()

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        backend: KeyValueStore | None = None,
        notifier: Notifier | None = None,
    ) -> "BucketListService":
        """Build the service from configuration and load the user's collection."""
        settings = settings or get_settings()
        store = UserCollectionStore(backend if backend is not None else build_store(settings))
        store.load_all()
        return cls(store, CatalogProvider.from_settings(settings), settings=settings, notifier=notifier)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    # -- views -------------------------------------------------------------

    def set_filters(self, **changes: Any) -> FilterState:
        self.filters = self.filters.replace(**changes)
        return self.filters

    def working_set(self, filters: FilterState | None = None) -> WorkingSet:
        return merge_views(
            self.store.destinations(),
            self.catalog,
            filters or self.filters,
            self._settings.map.colors,
        )

    def list_view(self, filters: FilterState | None = None) -> ListView:
        filters = filters or self.filters
        ws = self.working_set(filters)
        return render_list(ws.destinations, folders=self.store.folders(), filters=filters)

    def map_pins(self, filters: FilterState | None = None) -> list[MapPin]:
        return self.working_set(filters).pins

    def render_map(self, canvas: MapCanvas, filters: FilterState | None = None) -> Bounds | None:
        renderer = MapRenderer(canvas, fit_padding=self._settings.map.fit_padding)
        return renderer.render(self.map_pins(filters))

    def sidebar(self, active: str | None = None) -> list[FolderSummary]:
        return render_folder_sidebar(
            self.store.destinations(), self.store.folders(), active=active or self.filters.folder
        )

    def discover(self, *, region: str | None = None, type: str | None = None) -> list[CatalogEntry]:
        return discover(self.catalog, self.store.destinations(), region=region, type=type)

    def stats(self) -> dict[str, int]:
        records = self.store.destinations()
        visited = sum(1 for d in records if d.visited)
        return {"total": len(records), "visited": visited, "wishlist": len(records) - visited}

    # -- helpers -----------------------------------------------------------

    def require(self, destination_id: str) -> Destination:
        d = self.store.get(destination_id)
        if d is None:
            raise UnknownDestinationError(destination_id)
        return d

    def _commit(self, message: str, *, destinations: bool = True, folders: bool = False) -> bool:
        ok = True
        if destinations:
            ok = self.store.save() and ok
        if folders:
            ok = self.store.save_folders() and ok
        self.last_save_ok = ok
        if ok:
            self._notifier.notify(message, "success")
        else:
            self._notifier.notify("Your change could not be saved. Please try again.", "warning")
        return ok

    def _update(self, destination_id: str, patch: dict[str, Any]) -> Destination:
        try:
            updated = self.store.update(destination_id, patch)
        except ValidationError as e:
            raise ValidationFailed(_first_error(e)) from e
        if updated is None:
            raise UnknownDestinationError(destination_id)
        return updated

    # -- visit state -------------------------------------------------------

    def mark_visited(self, destination_id: str, *, date: str | None = None, notes: str | None = None) -> Destination:
        updated = self._update(destination_id, {"visit": Visited(date=date, notes=notes)})
        self._commit("Marked as visited!")
        return updated

    def mark_unvisited(self, destination_id: str) -> Destination:
        """Move back to the wishlist; any visit date/notes are discarded."""
        current = self.require(destination_id)
        if not current.visited:
            return current
        updated = self._update(destination_id, {"visit": Unvisited()})
        self._commit("Moved to wishlist")
        return updated

    # -- edit / delete -----------------------------------------------------

    def edit(self, destination_id: str, fields: Mapping[str, Any]) -> Destination:
        updated = self._update(destination_id, clean_form_fields(fields))
        self._commit("Destination updated")
        return updated

    def delete(self, destination_id: str) -> bool:
        removed = self.store.remove(destination_id)
        if removed:
            self._commit("Destination deleted")
        return removed

    # -- folders -----------------------------------------------------------

    def assign_folder(self, destination_id: str, folder_id: str | None) -> Destination:
        self.require(destination_id)
        updated = self.folders.assign(destination_id, folder_id)
        self._commit("Moved to folder" if folder_id else "Removed from folder")
        return updated

    def create_folder(self, name: str) -> Folder:
        folder = self.folders.create(name)
        self._commit("Folder created!", destinations=False, folders=True)
        return folder

    def rename_folder(self, folder_id: str, name: str) -> Folder:
        folder = self.folders.rename(folder_id, name)
        self._commit("Folder renamed", destinations=False, folders=True)
        return folder

    def delete_folder(self, folder_id: str) -> int:
        unfiled = self.folders.delete(folder_id)
        if self.filters.folder == folder_id:
            self.filters = self.filters.replace(folder="all")
        self._commit("Folder deleted", destinations=unfiled > 0, folders=True)
        return unfiled

    # -- adding ------------------------------------------------------------

    def _adopt(self, catalog_id: str, *, visited: bool) -> Destination:
        entry = self.catalog.get(catalog_id)
        if entry is None:
            raise UnknownCatalogEntryError(catalog_id)
        if self.store.contains(entry.id):
            raise DuplicateDestinationError(entry.id)
        return self.store.add(entry.adopt(visited=visited))

    def adopt_from_map(self, catalog_id: str) -> Destination:
        """Map click on a curated pin: "I've been there" (added as visited)."""
        record = self._adopt(catalog_id, visited=True)
        self._commit(f"{record.name} added as visited!")
        return record

    def add_to_wishlist(self, catalog_id: str) -> Destination:
        """List/discover "add": planning a trip (added as not yet visited)."""
        record = self._adopt(catalog_id, visited=False)
        self._commit(f"{record.name} added to your list!")
        return record

    def add_custom(self, fields: Mapping[str, Any]) -> Destination:
        patch = clean_form_fields(fields)
        if not patch.get("name"):
            raise ValidationFailed("Name is required")
        try:
            record = Destination(**patch)
        except ValidationError as e:
            raise ValidationFailed(_first_error(e)) from e
        self.store.add(record, prepend=True)
        self._commit("Destination added!")
        return record

    # -- export / import ---------------------------------------------------

    def export(self) -> dict[str, Any]:
        return export_collection(
            self.store.destinations(), self.store.folders(), version=self._settings.export.version
        )

    def import_bundle(self, bundle: ImportBundle) -> int:
        """Replace the whole collection (and folders, when the file has them)."""
        self.store.replace_all(bundle.destinations)
        ok = self.store.save()
        if bundle.folders is not None:
            ok = self.store.save_folders(bundle.folders) and ok
        self.last_save_ok = ok
        for w in bundle.warnings:
            self._notifier.notify(w, "info")
        if ok:
            self._notifier.notify("Data imported successfully!", "success")
        else:
            self._notifier.notify("Imported data could not be saved. Please try again.", "warning")
        logger.info("Imported %d destinations", len(bundle.destinations))
        return len(bundle.destinations)
