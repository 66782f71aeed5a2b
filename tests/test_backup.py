import json
from datetime import datetime, timezone

import pytest

from rvplanner.domain.errors import ImportFormatError
from rvplanner.domain.models import Destination, Folder, Visited
from rvplanner.transfer.backup import dump_export, export_collection, export_filename, parse_import


def _collection() -> list[Destination]:
    return [
        Destination(id="a", name="Yosemite", type="national-park", latitude=37.86, longitude=-119.54,
                    visit=Visited(date="2024", notes="Half Dome"), folder="f1"),
        Destination(id="b", name="Moab", state="Utah", rv_camping=True, rv_camping_details="BLM sites"),
    ]


def test_export_then_import_reproduces_the_collection():
    # Export followed by import gives back the same records and folders.
    records = _collection()
    folders = [Folder(id="f1", name="West")]
    bundle = parse_import(dump_export(export_collection(records, folders)))

    assert [d.id for d in bundle.destinations] == ["a", "b"]
    assert [d.to_json() for d in bundle.destinations] == [d.to_json() for d in records]
    assert [f.to_json() for f in bundle.folders] == [f.to_json() for f in folders]
    assert bundle.version == "1.0"
    assert bundle.page == "destinations"


def test_export_document_shape():
    # Document layout: version, ISO export date, page, data; folders only when given.
    now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    doc = export_collection(_collection(), now=now)
    assert doc["version"] == "1.0"
    assert doc["exportDate"] == "2026-03-01T12:00:00+00:00"
    assert doc["page"] == "destinations"
    assert doc["data"][0]["visit"]["date"] == "2024"
    assert "folders" not in doc
    assert export_filename("{page}-backup-{date}.json", now=now) == "destinations-backup-2026-03-01.json"


def test_import_accepts_browser_era_flat_records():
    # Older exports with flat visit fields and type aliases still import.
    text = json.dumps(
        {
            "version": "1.0",
            "page": "destinations",
            "data": [{"id": "x", "name": "Zion", "visited": True, "visitedDate": "2023", "type": "park"}],
        }
    )
    (d,) = parse_import(text).destinations
    assert d.visited_date == "2023"
    assert d.type == "national-park"


def test_import_accepts_full_site_backup_with_warning():
    # A full-site backup carries `destinations`; it imports, with a warning about the rest.
    bundle = parse_import(json.dumps({"version": "1.0", "destinations": [{"id": "x", "name": "Zion"}]}))
    assert [d.id for d in bundle.destinations] == ["x"]
    assert bundle.warnings


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[]",
        json.dumps({"page": "destinations", "data": []}),
        json.dumps({"version": "1.0", "page": "budget", "data": []}),
        json.dumps({"version": "1.0"}),
        json.dumps({"version": "1.0", "page": "destinations", "data": [{"id": "x", "name": ""}]}),
        json.dumps({"version": "1.0", "page": "destinations", "data": [{"id": "x", "name": "A"}, {"id": "x", "name": "B"}]}),
        json.dumps({"version": "1.0", "exportDate": 1700000000, "page": "destinations", "data": []}),
        json.dumps({"version": "1.0", "page": "destinations", "data": [{"id": "x", "name": "A", "latitude": 1.0}]}),
    ],
)
def test_malformed_imports_are_rejected_whole(text):
    # Any problem rejects the whole file; nothing is partially imported.
    with pytest.raises(ImportFormatError):
        parse_import(text)


def test_export_filename_uses_local_date():
    # 03:00 UTC on March 2 is still March 1 in Denver.
    late_utc = datetime(2026, 3, 2, 3, 0, tzinfo=timezone.utc)
    assert export_filename("{date}.json", now=late_utc, tz_name="America/Denver") == "2026-03-01.json"


def test_naive_created_at_is_read_as_utc():
    # Timestamps without an offset are taken as UTC.
    d = Destination.model_validate({"id": "x", "name": "Zion", "createdAt": "2024-05-01T10:00:00"})
    assert d.created_at.tzinfo is not None
    assert d.to_json()["createdAt"].startswith("2024-05-01T10:00:00")
