"""
API routes.

Endpoints:
- GET/POST `/api/destinations`: filtered list view; add a custom destination.
- PATCH/DELETE `/api/destinations/{id}`, POST `.../visit`, POST `.../unvisit`, PUT `.../folder`.
- GET/POST `/api/folders`, PATCH/DELETE `/api/folders/{id}`.
- GET `/api/map/pins`, `/api/map/geojson`: map markers (filters apply to collection pins only).
- GET `/api/catalog/curated`, `/api/catalog/discover`; POST `/api/catalog/{id}/adopt`.
- GET `/api/export`, POST `/api/import`, GET `/api/quality/report`.

Destructive operations (`unvisit`, `import`) require `confirm=true`, the HTTP equivalent of
the confirmation dialog. Mutations report `saved: false` when the collection could not be
persisted; the change is still applied in memory.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import asdict
from functools import lru_cache
from typing import Any, Iterator, Literal

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from rvplanner.bucketlist.service import BucketListService
from rvplanner.config.settings import get_settings
from rvplanner.domain.errors import (
    DuplicateDestinationError,
    PlannerError,
    UnknownCatalogEntryError,
    UnknownDestinationError,
    UnknownFolderError,
)
from rvplanner.domain.models import FilterState
from rvplanner.quality.report import build_quality_report
from rvplanner.render.map_view import GeoJsonCanvas
from rvplanner.transfer.backup import export_filename, parse_import

router = APIRouter()


@lru_cache
def _service() -> BucketListService:
    return BucketListService.from_settings(get_settings())


def _status_for(e: PlannerError) -> tuple[int, str]:
    if isinstance(e, (UnknownDestinationError, UnknownFolderError, UnknownCatalogEntryError)):
        return 404, "NOT_FOUND"
    if isinstance(e, DuplicateDestinationError):
        return 409, "DUPLICATE"
    return 400, "VALIDATION_ERROR"


@contextmanager
def _domain_errors() -> Iterator[None]:
    try:
        yield
    except PlannerError as e:
        status, code = _status_for(e)
        raise HTTPException(status_code=status, detail={"code": code, "message": str(e)}) from e


def _require_confirm(confirm: bool, what: str) -> None:
    if not confirm:
        raise HTTPException(
            status_code=400,
            detail={"code": "CONFIRMATION_REQUIRED", "message": f"{what} requires confirm=true"},
        )


def _filters(folder: str | None, type: str | None, region: str | None, search: str | None) -> FilterState:
    return FilterState(folder=folder, type=type, region=region, search=search)


class DestinationFields(BaseModel):
    """Editable destination fields; camelCase or snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str | None = None
    state: str | None = None
    region: str | None = None
    type: str | None = None
    notes: str | None = None
    best_season: str | None = None
    estimated_cost: str | None = None
    must_see: str | None = None
    rv_camping: bool | None = None
    rv_camping_details: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class VisitIn(BaseModel):
    date: str | None = None
    notes: str | None = None


class FolderAssignIn(BaseModel):
    folder: str | None = None


class FolderIn(BaseModel):
    name: str


def _mutation(payload: dict[str, Any]) -> dict[str, Any]:
    return {**payload, "saved": _service().last_save_ok}


@router.get("/api/destinations")
def get_destinations(
    folder: str | None = None,
    type: str | None = None,
    region: str | None = None,
    search: str | None = None,
) -> dict:
    """Return the filtered list view (cards), the folder sidebar and collection stats."""
    service = _service()
    filters = _filters(folder, type, region, search)
    view = service.list_view(filters)
    return {
        "filters": filters.model_dump(),
        "stats": service.stats(),
        "sidebar": [asdict(s) for s in service.sidebar(filters.folder)],
        "view": view.as_dict(),
        "destinations": [d.to_json() for d in service.working_set(filters).destinations],
    }


@router.post("/api/destinations", status_code=201)
def post_destination(fields: DestinationFields) -> dict:
    with _domain_errors():
        d = _service().add_custom(fields.model_dump(exclude_unset=True))
    return _mutation({"destination": d.to_json()})


@router.patch("/api/destinations/{destination_id}")
def patch_destination(destination_id: str, fields: DestinationFields) -> dict:
    with _domain_errors():
        d = _service().edit(destination_id, fields.model_dump(exclude_unset=True))
    return _mutation({"destination": d.to_json()})


@router.post("/api/destinations/{destination_id}/visit")
def post_visit(destination_id: str, visit: VisitIn | None = None) -> dict:
    visit = visit or VisitIn()
    with _domain_errors():
        d = _service().mark_visited(destination_id, date=visit.date, notes=visit.notes)
    return _mutation({"destination": d.to_json()})


@router.post("/api/destinations/{destination_id}/unvisit")
def post_unvisit(destination_id: str, confirm: bool = False) -> dict:
    """Move back to the wishlist; visit date/notes are discarded, so confirmation is required."""
    _require_confirm(confirm, "Discarding visit notes")
    with _domain_errors():
        d = _service().mark_unvisited(destination_id)
    return _mutation({"destination": d.to_json()})


@router.put("/api/destinations/{destination_id}/folder")
def put_destination_folder(destination_id: str, body: FolderAssignIn) -> dict:
    with _domain_errors():
        d = _service().assign_folder(destination_id, body.folder or None)
    return _mutation({"destination": d.to_json()})


@router.delete("/api/destinations/{destination_id}")
def delete_destination(destination_id: str, confirm: bool = False) -> dict:
    _require_confirm(confirm, "Deleting a destination")
    removed = _service().delete(destination_id)
    return _mutation({"deleted": removed})


@router.get("/api/folders")
def get_folders(active: str | None = None) -> dict:
    service = _service()
    sidebar = service.sidebar(FilterState(folder=active).folder)
    return {"folders": [f.to_json() for f in service.folders.list()], "sidebar": [asdict(s) for s in sidebar]}


@router.post("/api/folders", status_code=201)
def post_folder(body: FolderIn) -> dict:
    with _domain_errors():
        folder = _service().create_folder(body.name)
    return _mutation({"folder": folder.to_json()})


@router.patch("/api/folders/{folder_id}")
def patch_folder(folder_id: str, body: FolderIn) -> dict:
    with _domain_errors():
        folder = _service().rename_folder(folder_id, body.name)
    return _mutation({"folder": folder.to_json()})


@router.delete("/api/folders/{folder_id}")
def delete_folder(folder_id: str, confirm: bool = False) -> dict:
    """Delete a folder; its destinations are unfiled, never deleted."""
    _require_confirm(confirm, "Deleting a folder")
    with _domain_errors():
        unfiled = _service().delete_folder(folder_id)
    return _mutation({"deleted": folder_id, "unfiled": unfiled})


@router.get("/api/map/pins")
def get_map_pins(
    folder: str | None = None,
    type: str | None = None,
    region: str | None = None,
    search: str | None = None,
) -> dict:
    settings = get_settings()
    pins = _service().map_pins(_filters(folder, type, region, search))
    return {
        "center": list(settings.map.center),
        "zoom": settings.map.zoom,
        "pins": [p.model_dump(mode="json", by_alias=True) for p in pins],
    }


@router.get("/api/map/geojson")
def get_map_geojson(
    folder: str | None = None,
    type: str | None = None,
    region: str | None = None,
    search: str | None = None,
) -> dict:
    canvas = GeoJsonCanvas()
    _service().render_map(canvas, _filters(folder, type, region, search))
    return canvas.feature_collection()


@router.get("/api/catalog/curated")
def get_catalog_curated() -> dict:
    entries = _service().catalog.list_curated()
    return {"entries": [e.model_dump(mode="json", by_alias=True) for e in entries]}


@router.get("/api/catalog/discover")
def get_catalog_discover(region: str | None = None, type: str | None = None) -> dict:
    """Discoverable entries not yet in the collection (empty until a region or type is chosen)."""
    service = _service()
    entries = service.discover(region=region, type=type)
    return {
        "regions": service.catalog.regions(),
        "entries": [e.model_dump(mode="json", by_alias=True) for e in entries],
    }


@router.post("/api/catalog/{entry_id}/adopt", status_code=201)
def post_catalog_adopt(entry_id: str, source: Literal["map", "list"] = Query(default="list")) -> dict:
    """Add a catalog entry: from the map it is added as visited, from the list as wishlist."""
    service = _service()
    with _domain_errors():
        d = service.adopt_from_map(entry_id) if source == "map" else service.add_to_wishlist(entry_id)
    return _mutation({"destination": d.to_json()})


@router.get("/api/export")
def get_export() -> JSONResponse:
    service = _service()
    doc = service.export()
    filename = export_filename(service.settings.export.filename_pattern, tz_name=service.settings.app.timezone)
    return JSONResponse(
        content=doc,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/api/import")
async def post_import(request: Request, confirm: bool = False) -> dict:
    """Replace the whole collection with an export document (all-or-nothing)."""
    _require_confirm(confirm, "Replacing the collection")
    body = await request.body()
    with _domain_errors():
        bundle = parse_import(body)
    imported = _service().import_bundle(bundle)
    return _mutation({"imported": imported, "warnings": list(bundle.warnings)})


@router.get("/api/quality/report")
def get_quality_report() -> dict:
    """Return an offline data quality report (no network)."""
    service = _service()
    return build_quality_report(service.store.destinations(), service.store.folders(), service.settings)
