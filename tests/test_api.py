import pytest
from starlette.testclient import TestClient

import rvplanner.api.app as app_module
import rvplanner.api.routes as routes
from rvplanner.api.app import app


@pytest.fixture
def client(monkeypatch, service):
    # Patch the cached service factory so API tests use an in-memory collection.
    monkeypatch.setattr(routes, "_service", lambda: service)
    monkeypatch.setattr(app_module, "_service", lambda: service)
    with TestClient(app) as c:
        yield c


def test_add_filter_and_list(client):
    resp = client.post("/api/destinations", json={"name": "Yosemite", "type": "national-park"})
    assert resp.status_code == 201
    assert resp.json()["saved"] is True

    # Filters are query parameters; search is case-insensitive and covers the state.
    client.post("/api/destinations", json={"name": "Moab", "type": "city", "state": "Utah"})
    data = client.get("/api/destinations", params={"type": "national-park"}).json()
    assert [c["title"] for c in data["view"]["cards"]] == ["Yosemite"]
    assert data["stats"]["total"] == 2

    data = client.get("/api/destinations", params={"search": "UTAH"}).json()
    assert [d["name"] for d in data["destinations"]] == ["Moab"]


def test_blank_name_is_a_400(client):
    # Validation failures map to a 400 with a machine-readable code.
    resp = client.post("/api/destinations", json={"name": "  "})
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "VALIDATION_ERROR"


def test_adopt_from_map_then_duplicate_and_unknown(client):
    resp = client.post("/api/catalog/np-zion/adopt", params={"source": "map"})
    assert resp.status_code == 201
    assert resp.json()["destination"]["visited"] is True

    # Adopting twice is a conflict; an unknown catalog id is not found.
    assert client.post("/api/catalog/np-zion/adopt").status_code == 409
    assert client.post("/api/catalog/nope/adopt").status_code == 404

    pins = {p["id"]: p for p in client.get("/api/map/pins").json()["pins"]}
    assert pins["np-zion"]["colorClass"] == "success"
    assert pins["np-yosemite"]["clickAction"] == "adopt"


def test_visit_unvisit_requires_confirm(client):
    d = client.post("/api/destinations", json={"name": "Arches"}).json()["destination"]
    resp = client.post(f"/api/destinations/{d['id']}/visit", json={"date": "2025", "notes": "Windy"})
    assert resp.json()["destination"]["visit"]["notes"] == "Windy"

    # Unvisiting discards notes, so it needs confirm=true.
    resp = client.post(f"/api/destinations/{d['id']}/unvisit")
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "CONFIRMATION_REQUIRED"

    resp = client.post(f"/api/destinations/{d['id']}/unvisit", params={"confirm": "true"})
    assert resp.json()["destination"]["visited"] is False

    assert client.post("/api/destinations/missing/visit", json={}).status_code == 404


def test_folders_lifecycle(client):
    d = client.post("/api/destinations", json={"name": "Moab"}).json()["destination"]
    folder = client.post("/api/folders", json={"name": "Utah"}).json()["folder"]

    resp = client.put(f"/api/destinations/{d['id']}/folder", json={"folder": folder["id"]})
    assert resp.json()["destination"]["folder"] == folder["id"]

    # The sidebar carries member counts.
    listing = client.get("/api/folders").json()
    counts = {row["id"]: row["count"] for row in listing["sidebar"]}
    assert counts[folder["id"]] == 1

    assert client.patch(f"/api/folders/{folder['id']}", json={"name": "Utah 2026"}).json()["folder"]["name"] == "Utah 2026"
    # Deleting without confirm=true is refused and leaves the folder in place.
    assert client.delete(f"/api/folders/{folder['id']}").json()["detail"]["code"] == "CONFIRMATION_REQUIRED"
    resp = client.delete(f"/api/folders/{folder['id']}?confirm=true")
    assert resp.json()["unfiled"] == 1
    assert client.delete(f"/api/folders/{folder['id']}?confirm=true").status_code == 404


def test_delete_destination_removes_it_from_list_and_map(client):
    d = client.post("/api/destinations", json={"name": "Bend", "latitude": 44.06, "longitude": -121.31}).json()[
        "destination"
    ]
    assert d["id"] in [p["id"] for p in client.get("/api/map/pins").json()["pins"]]

    # A bare DELETE is a destructive action without confirmation: refused.
    resp = client.delete(f"/api/destinations/{d['id']}")
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "CONFIRMATION_REQUIRED"

    assert client.delete(f"/api/destinations/{d['id']}?confirm=true").json()["deleted"] is True
    assert client.get("/api/destinations").json()["destinations"] == []
    assert d["id"] not in [p["id"] for p in client.get("/api/map/pins").json()["pins"]]


def test_geojson_and_discover(client):
    # With an empty collection only the curated pins are on the map.
    fc = client.get("/api/map/geojson").json()
    assert fc["type"] == "FeatureCollection"
    assert {f["id"] for f in fc["features"]} == {"np-yosemite", "np-zion"}

    # Discover is empty until a region or type is chosen.
    assert client.get("/api/catalog/discover").json()["entries"] == []
    entries = client.get("/api/catalog/discover", params={"region": "southwest"}).json()["entries"]
    assert [e["id"] for e in entries] == ["ct-moab"]
    assert len(client.get("/api/catalog/curated").json()["entries"]) == 2


def test_export_import_round_trip(client):
    client.post("/api/destinations", json={"name": "Zion", "notes": "Shuttle"})
    resp = client.get("/api/export")
    assert "attachment" in resp.headers["content-disposition"]
    doc = resp.json()

    # Import replaces the whole collection, so it needs confirm=true.
    client.post("/api/destinations", json={"name": "Extra"})
    assert client.post("/api/import", json=doc).status_code == 400
    resp = client.post("/api/import", params={"confirm": "true"}, json=doc)
    assert resp.json()["imported"] == 1
    assert [d["name"] for d in client.get("/api/destinations").json()["destinations"]] == ["Zion"]

    # A file without `version` is refused.
    bad = client.post("/api/import", params={"confirm": "true"}, json={"data": []})
    assert bad.status_code == 400


def test_quality_report_and_index_page(client):
    # A record without coordinates is flagged and still listed on the page.
    client.post("/api/destinations", json={"name": "Unmapped"})
    report = client.get("/api/quality/report").json()
    assert report["counts"]["total"] == 1
    assert "COLLECTION_NOT_MAPPABLE" in [i["code"] for i in report["issues"]]

    page = client.get("/")
    assert page.status_code == 200
    assert "Unmapped" in page.text


def test_index_page_offers_every_flow(client):
    d = client.post("/api/destinations", json={"name": "Bend", "notes": "Tumalo Falls"}).json()["destination"]
    folder = client.post("/api/folders", json={"name": "Oregon"}).json()["folder"]
    text = client.get("/").text

    # Toolbar: add, discover, export and import, plus folder creation in the sidebar.
    for marker in ('data-toolbar="add"', 'data-toolbar="discover"', 'data-toolbar="import"',
                   'href="/api/export"', 'data-toolbar="create-folder"'):
        assert marker in text

    # The add/edit form and the discover dialog are part of the page.
    assert 'id="destination-dialog"' in text
    assert 'id="discover-dialog"' in text

    # Records are embedded so the edit form can be pre-filled.
    assert 'id="records"' in text
    assert "Tumalo Falls" in text.split('id="records"', 1)[1]

    # User folders get rename/delete buttons; pseudo-folders do not.
    assert f'data-folder-action="rename" data-id="{folder["id"]}"' in text
    assert 'data-folder-action="rename" data-id="visited"' not in text
    assert d["id"] in text
