"""
Export / import of the destination collection.

Export documents look like the browser version's backups:

    {"version": "1.0", "exportDate": "...", "page": "destinations", "data": [...], "folders": [...]}

Import is all-or-nothing: the document must carry `version`, and every record must validate,
otherwise `ImportFormatError` is raised and nothing is replaced. Full-site backups
(`{"version", "destinations": [...]}`) are accepted as well.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import TypeAdapter, ValidationError

from rvplanner.core.time import local_date, utc_now
from rvplanner.domain.errors import ImportFormatError
from rvplanner.domain.models import Destination, Folder

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"
DEFAULT_PAGE = "destinations"

_DESTINATIONS_ADAPTER = TypeAdapter(list[Destination])
_FOLDERS_ADAPTER = TypeAdapter(list[Folder])


@dataclass(frozen=True)
class ImportBundle:
    version: str
    destinations: list[Destination]
    folders: list[Folder] | None = None
    export_date: str | None = None
    page: str | None = None
    warnings: list[str] = field(default_factory=list)


def export_collection(
    destinations: list[Destination],
    folders: list[Folder] | None = None,
    *,
    page: str = DEFAULT_PAGE,
    version: str = EXPORT_VERSION,
    now: datetime | None = None,
) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "version": version,
        "exportDate": (now or utc_now()).isoformat(),
        "page": page,
        "data": [d.to_json() for d in destinations],
    }
    if folders is not None:
        doc["folders"] = [f.to_json() for f in folders]
    return doc


def dump_export(doc: dict[str, Any]) -> str:
    return json.dumps(doc, ensure_ascii=False, indent=2)


def export_filename(
    pattern: str, *, page: str = DEFAULT_PAGE, now: datetime | None = None, tz_name: str = "UTC"
) -> str:
    """Download name for an export, dated in the user's timezone."""
    return pattern.format(page=page, date=local_date(now or utc_now(), tz_name).isoformat())


def parse_import(text: str | bytes) -> ImportBundle:
    """Parse and validate an export document; raises `ImportFormatError` on any problem."""
    try:
        payload = json.loads(text)
    except ValueError as e:
        raise ImportFormatError(f"Import file is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise ImportFormatError("Import file must contain a JSON object")
    version = payload.get("version")
    if not version:
        raise ImportFormatError("Invalid backup file format: missing 'version'")
    export_date = payload.get("exportDate")
    if export_date is not None and not isinstance(export_date, str):
        raise ImportFormatError("Invalid backup file format: 'exportDate' must be a string")

    warnings: list[str] = []
    if payload.get("page") and "data" in payload:
        page = str(payload["page"])
        if page != DEFAULT_PAGE:
            raise ImportFormatError(f"Import file holds '{page}' data, not destinations")
        rows = payload["data"]
    elif "destinations" in payload:
        page = None
        rows = payload["destinations"]
        warnings.append("Full-site backup: only destinations and folders were imported")
    else:
        raise ImportFormatError("Import file has no destination data")

    if not isinstance(rows, list):
        raise ImportFormatError("Destination data must be a list")
    try:
        destinations = _DESTINATIONS_ADAPTER.validate_python(rows)
    except ValidationError as e:
        raise ImportFormatError(f"Invalid destination record: {e.errors()[0]['msg']}") from e

    ids = [d.id for d in destinations]
    if len(set(ids)) != len(ids):
        raise ImportFormatError("Import file contains duplicate destination ids")

    folders = None
    if isinstance(payload.get("folders"), list):
        try:
            folders = _FOLDERS_ADAPTER.validate_python(payload["folders"])
        except ValidationError as e:
            raise ImportFormatError(f"Invalid folder record: {e.errors()[0]['msg']}") from e

    logger.info("Parsed import: %d destinations, %s folders", len(destinations), len(folders or []))
    return ImportBundle(
        version=str(version),
        destinations=destinations,
        folders=folders,
        export_date=export_date or None,
        page=page,
        warnings=warnings,
    )
