from __future__ import annotations

import argparse
import csv
import json
import math
import re
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from rvplanner.catalog.loader import load_catalog
from rvplanner.core.env import resolve_project_path
from rvplanner.domain.models import CatalogEntry

# Incoming column -> catalog field (camelCase, as stored in the catalog file).
FIELD_MAP = {
    "id": "id",
    "name": "name",
    "state": "state",
    "region": "region",
    "type": "type",
    "lat": "latitude",
    "latitude": "latitude",
    "lon": "longitude",
    "longitude": "longitude",
    "description": "description",
    "best_season": "bestSeason",
    "bestSeason": "bestSeason",
    "estimated_cost": "estimatedCost",
    "estimatedCost": "estimatedCost",
    "rv_camping": "rvCamping",
    "rvCamping": "rvCamping",
    "rv_camping_details": "rvCampingDetails",
    "rvCampingDetails": "rvCampingDetails",
    "must_see": "mustSee",
    "mustSee": "mustSee",
}


def _read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")


def _norm_name(s: str) -> str:
    t = str(s or "").strip().lower()
    t = re.sub(r"\b(national|state)\s+park\b", " ", t)
    t = re.sub(r"[\s\-_/,.()]+", " ", t)
    return re.sub(r"\s+", " ", t).strip()


def _slug(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", str(s).lower()).strip("-")


def _haversine_m(a_lat: float, a_lon: float, b_lat: float, b_lon: float) -> float:
    r = 6371000.0
    to_rad = math.radians
    d_lat = to_rad(b_lat - a_lat)
    d_lon = to_rad(b_lon - a_lon)
    lat1 = to_rad(a_lat)
    lat2 = to_rad(b_lat)
    s = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    return 2 * r * math.asin(min(1.0, math.sqrt(s)))


def import_rows_from_csv(path: Path) -> list[dict[str, Any]]:
    with path.open("r", encoding="utf-8-sig", newline="") as f:
        return [row for row in csv.DictReader(f) if isinstance(row, dict)]


def import_rows_from_json(path: Path) -> list[dict[str, Any]]:
    payload = _read_json(path)
    if isinstance(payload, list):
        return [r for r in payload if isinstance(r, dict)]
    if isinstance(payload, dict):
        # Allow {id: {...}} shape.
        return [{"id": k, **v} for k, v in payload.items() if isinstance(k, str) and k.strip() and isinstance(v, dict)]
    raise ValueError("Unsupported JSON shape: expected array or object.")


def _to_entry(row: dict[str, Any]) -> CatalogEntry | None:
    data: dict[str, Any] = {}
    for key, value in row.items():
        target = FIELD_MAP.get(str(key).strip())
        if target is None or value is None or (isinstance(value, str) and not value.strip()):
            continue
        data[target] = value.strip() if isinstance(value, str) else value
    if isinstance(data.get("rvCamping"), str):
        data["rvCamping"] = data["rvCamping"].lower() in {"1", "true", "yes", "y"}
    if "name" in data and not data.get("id"):
        data["id"] = _slug(f"{data.get('type', 'other')}-{data['name']}")
    try:
        entry = CatalogEntry.model_validate(data)
    except ValidationError:
        return None
    return entry if entry.is_mappable else None


def _find_existing(
    sections: dict[str, dict[str, dict[str, Any]]], entry: CatalogEntry, radius_m: float
) -> tuple[str, str] | None:
    for name, by_id in sections.items():
        if entry.id in by_id:
            return name, entry.id
    if radius_m <= 0:
        return None
    for name, by_id in sections.items():
        for cid, cur in by_id.items():
            if cur.get("latitude") is None or cur.get("longitude") is None:
                continue
            if _norm_name(cur.get("name", "")) != _norm_name(entry.name):
                continue
            if _haversine_m(entry.latitude, entry.longitude, cur["latitude"], cur["longitude"]) <= radius_m:
                return name, cid
    return None


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Merge places from a local CSV/JSON file into the destination catalog.")
    p.add_argument("--catalog", type=str, default="data/catalogs/parks.json")
    p.add_argument("--in-csv", type=str, default=None)
    p.add_argument("--in-json", type=str, default=None)
    p.add_argument("--section", choices=["curated", "discoverable"], default="discoverable")
    p.add_argument("--merge", choices=["keep-existing", "overwrite"], default="keep-existing")
    p.add_argument(
        "--dedupe-radius-m",
        type=float,
        default=5000.0,
        help="Treat a row as an existing entry if the names match and it lies within this radius (0 disables).",
    )
    args = p.parse_args(argv)

    if bool(args.in_csv) == bool(args.in_json):
        raise SystemExit("Provide exactly one of --in-csv or --in-json.")

    catalog_path = resolve_project_path(args.catalog)
    existing = load_catalog(catalog_path) if catalog_path.exists() else None
    sections: dict[str, dict[str, dict[str, Any]]] = {"curated": {}, "discoverable": {}}
    if existing is not None:
        for name, entries in (("curated", existing.curated), ("discoverable", existing.discoverable)):
            for e in entries:
                sections[name][e.id] = e.model_dump(mode="json", by_alias=True, exclude={"curated"}, exclude_none=True)

    rows = (
        import_rows_from_csv(resolve_project_path(args.in_csv))
        if args.in_csv
        else import_rows_from_json(resolve_project_path(args.in_json))
    )

    added = updated = skipped = bad = 0
    for row in rows:
        entry = _to_entry(row)
        if entry is None:
            bad += 1
            continue
        incoming = entry.model_dump(mode="json", by_alias=True, exclude={"curated"}, exclude_none=True)

        # Same place under another id (same name, nearby): update that entry instead of adding one.
        section_name, target_id = _find_existing(sections, entry, args.dedupe_radius_m) or (args.section, entry.id)

        by_id = sections[section_name]
        incoming["id"] = target_id
        if target_id not in by_id:
            by_id[target_id] = incoming
            added += 1
        elif args.merge == "overwrite":
            by_id[target_id] = {**by_id[target_id], **incoming}
            updated += 1
        else:
            # Fill blanks only.
            cur = by_id[target_id]
            for k, v in incoming.items():
                cur.setdefault(k, v)
            skipped += 1

    _write_json(
        catalog_path,
        {name: sorted(by_id.values(), key=lambda d: d["id"]) for name, by_id in sections.items()},
    )

    print("Wrote catalog:", catalog_path)
    print("Imported rows:", len(rows))
    print("Added:", added, "Updated:", updated, "Skipped:", skipped, "Bad:", bad)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
