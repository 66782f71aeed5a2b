"""
FastAPI application wiring.

This file creates the `FastAPI` instance, mounts static assets, and serves the web page.
Business logic lives in `rvplanner.api.routes` and `rvplanner.bucketlist`.
"""

from __future__ import annotations

import os
from dataclasses import asdict
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.cors import CORSMiddleware

from rvplanner.config.settings import get_settings
from rvplanner.core.logging import configure_logging
from rvplanner.domain.models import DESTINATION_TYPES, REGION_LABELS, FilterState, region_label, type_label

from .routes import _service, router

configure_logging()

app = FastAPI(title="RV Planner API", version="0.1.0")

# CORS (dev-friendly): allow local frontends to call this API.
# Configure via env:
# - RVPLANNER_CORS_ORIGINS="http://localhost:5173,http://127.0.0.1:5173"
# - RVPLANNER_CORS_ALLOW_LOCAL=0 to disable the default localhost allowance
cors_origins = [s.strip() for s in os.getenv("RVPLANNER_CORS_ORIGINS", "").split(",") if s.strip()]
cors_allow_local = os.getenv("RVPLANNER_CORS_ALLOW_LOCAL", "1").strip().lower() in {"1", "true", "yes", "y"}
cors_origin_regex = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$" if cors_allow_local and not cors_origins else ""
if cors_origins or cors_origin_regex:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_origin_regex=cors_origin_regex or None,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(router)

BASE_DIR = Path(__file__).resolve().parent.parent
TEMPLATES_DIR = BASE_DIR / "web" / "templates"
STATIC_DIR = BASE_DIR / "web" / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["type_label"] = type_label
templates.env.filters["region_label"] = region_label
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")


@app.get("/", response_class=HTMLResponse)
def index(
    request: Request,
    folder: str | None = None,
    type: str | None = None,
    region: str | None = None,
    search: str | None = None,
) -> HTMLResponse:
    """Server-rendered bucket-list page (the map script draws `pins`)."""
    service = _service()
    filters = FilterState(folder=folder, type=type, region=region, search=search)
    pins = service.map_pins(filters)
    working = service.working_set(filters)
    context = {
        "filters": filters,
        "stats": service.stats(),
        "sidebar": [asdict(s) for s in service.sidebar(filters.folder)],
        "view": service.list_view(filters),
        "regions": service.catalog.regions(),
        "types": DESTINATION_TYPES,
        "form_regions": list(REGION_LABELS),
        "records": {d.id: d.to_json() for d in working.destinations},
        "map": get_settings().map.model_dump(),
        "pins": [p.model_dump(mode="json", by_alias=True) for p in pins],
    }
    return templates.TemplateResponse(request, "index.html", context)
