"""
Offline data quality report.

A deterministic, network-free answer to "is the collection complete and sane?"
Used by:
- CLI `quality-report`
- API `/api/quality/report`

Counts mirror the stats shown above the destination list (total / visited / wishlist);
issues flag records the views silently skip or mis-file.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from rvplanner.catalog.loader import load_catalog
from rvplanner.config.settings import Settings
from rvplanner.core.env import resolve_project_path
from rvplanner.domain.models import Destination, Folder

SAMPLE_SIZE = 8


@dataclass(frozen=True)
class Issue:
    severity: str  # "info" | "warning" | "error"
    code: str
    message: str
    count: int = 1
    sample: list[str] | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity,
            "code": self.code,
            "message": self.message,
            "count": int(self.count),
            "sample": list(self.sample or []),
        }


def collection_counts(destinations: list[Destination], folders: list[Folder]) -> dict[str, int]:
    visited = sum(1 for d in destinations if d.visited)
    return {
        "total": len(destinations),
        "visited": visited,
        "wishlist": len(destinations) - visited,
        "mappable": sum(1 for d in destinations if d.is_mappable),
        "folders": len(folders),
    }


def _sampled(severity: str, code: str, message: str, offenders: list[str]) -> Issue:
    return Issue(severity, code, message, count=len(offenders), sample=offenders[:SAMPLE_SIZE])


def _repeated(ids: list[str]) -> list[str]:
    return sorted(i for i, n in Counter(ids).items() if n > 1)


def collection_issues(destinations: list[Destination], folders: list[Folder]) -> list[Issue]:
    issues: list[Issue] = []

    dup = _repeated([d.id for d in destinations])
    if dup:
        issues.append(_sampled("error", "COLLECTION_DUPLICATE_ID", "Duplicate destination ids in the collection.", dup))

    unmappable = [d.id for d in destinations if not d.is_mappable]
    if unmappable:
        msg = "Some destinations have no coordinates and are not shown on the map."
        issues.append(_sampled("info", "COLLECTION_NOT_MAPPABLE", msg, unmappable))

    folder_ids = {f.id for f in folders}
    dangling = [f"{d.id}:{d.folder}" for d in destinations if d.folder and d.folder not in folder_ids]
    if dangling:
        msg = "Some destinations point at a folder that no longer exists."
        issues.append(_sampled("warning", "COLLECTION_UNKNOWN_FOLDER", msg, dangling))

    return issues


def catalog_issues(settings: Settings) -> list[Issue]:
    try:
        data = load_catalog(settings.catalog.path)
    except (OSError, ValueError, ValidationError) as e:
        return [Issue("error", "CATALOG_LOAD_FAILED", str(e))]

    issues: list[Issue] = []
    if not data.curated:
        issues.append(Issue("warning", "CATALOG_NO_CURATED", "Catalog has no curated entries."))
    dup = _repeated([e.id for e in (*data.curated, *data.discoverable)])
    if dup:
        issues.append(_sampled("error", "CATALOG_DUPLICATE_ID", "Duplicate ids in catalog.", dup))
    return issues


def build_quality_report(
    destinations: list[Destination],
    folders: list[Folder],
    settings: Settings,
) -> dict[str, Any]:
    issues = [*collection_issues(destinations, folders), *catalog_issues(settings)]

    rank = {"info": 1, "warning": 2, "error": 3}
    worst = max((i.severity for i in issues), key=rank.__getitem__, default="info")

    return {
        "overall": {"severity": worst, "issue_count": len(issues)},
        "counts": collection_counts(destinations, folders),
        "paths": {
            "catalog_path": str(resolve_project_path(settings.catalog.path)),
            "storage_dir": str(resolve_project_path(settings.storage.dir)),
        },
        "issues": [i.as_dict() for i in issues],
    }
