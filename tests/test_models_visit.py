import pytest
from pydantic import ValidationError

from rvplanner.domain.models import (
    CatalogEntry,
    Destination,
    FilterState,
    Folder,
    Unvisited,
    Visited,
    generate_id,
    normalize_filter_type,
    normalize_type,
)


def test_legacy_flat_visit_fields_fold_into_visit():
    # Records saved with flat visited/visitedDate/visitedNotes load into the visit union.
    d = Destination.model_validate(
        {"id": "a1", "name": "Arches", "visited": True, "visitedDate": "May 2025", "visitedNotes": "Windy"}
    )
    assert d.visited is True
    assert isinstance(d.visit, Visited)
    assert d.visited_date == "May 2025"
    assert d.visited_notes == "Windy"


def test_unvisited_record_drops_leftover_visit_fields():
    # An unvisited record cannot carry a visit date; stale fields are dropped on load.
    d = Destination.model_validate(
        {"id": "a2", "name": "Arches", "visited": False, "visitedDate": "May 2025", "visitedNotes": "Windy"}
    )
    assert d.visited is False
    assert isinstance(d.visit, Unvisited)
    assert d.visited_date is None
    assert d.visited_notes is None


def test_to_json_uses_camel_case_and_reloads():
    d = Destination(name="Zion", best_season="Spring", rv_camping=True, visit=Visited(date="2024"))
    doc = d.to_json()

    # Stored keys are camelCase, with `visited` kept alongside the tagged visit.
    assert doc["bestSeason"] == "Spring"
    assert doc["rvCamping"] is True
    assert doc["visited"] is True
    assert doc["visit"] == {"status": "visited", "date": "2024", "notes": None}

    # The stored form loads back into the same record.
    again = Destination.model_validate(doc)
    assert again.visited_date == "2024"
    assert again.id == d.id


def test_blank_name_is_rejected():
    with pytest.raises(ValidationError):
        Destination(name="   ")
    with pytest.raises(ValidationError):
        Folder(name="")


def test_type_aliases_and_unknown_types():
    # Stored records: aliases map, unknown types become "other".
    assert normalize_type("park") == "national-park"
    assert normalize_type("scenic-route") == "scenic"
    assert normalize_type("volcano") == "other"
    assert Destination(name="X", type="PARK").type == "national-park"

    # Filters: aliases map, unknown types are kept so they match nothing; blank means "all".
    assert normalize_filter_type("PARK") == "national-park"
    assert normalize_filter_type("volcano") == "volcano"
    assert normalize_filter_type("") == "all"


def test_coordinates_are_range_checked():
    with pytest.raises(ValidationError):
        Destination(name="Nowhere", latitude=95, longitude=0)
    assert Destination(name="Somewhere").is_mappable is False


@pytest.mark.parametrize("coords", [{"latitude": 10.0}, {"longitude": -100.0}])
def test_half_a_location_is_rejected(coords):
    # Latitude and longitude come as a pair or not at all.
    with pytest.raises(ValidationError, match="both latitude and longitude"):
        Destination(name="Half", **coords)
    with pytest.raises(ValidationError):
        CatalogEntry(id="half", name="Half", **coords)


def test_catalog_adopt_keeps_id_and_marks_source():
    # Adopting copies the catalog id so the curated pin is suppressed afterwards.
    entry = CatalogEntry(id="np-zion", name="Zion", latitude=37.3, longitude=-113.0, curated=True)
    d = entry.adopt(visited=True)
    assert d.id == "np-zion"
    assert d.source == "catalog"
    assert d.visited is True
    assert entry.adopt(visited=False).visited is False


def test_filter_state_normalizes_inputs():
    f = FilterState(folder="unfiled-bucket", type="park", region=" SouthWest ", search="  YoSe ")
    assert f.folder == "wishlist"
    assert f.type == "national-park"
    assert f.region == "southwest"
    assert f.search == "yose"

    # Missing values fall back to "all"; `replace` re-runs normalization.
    assert FilterState(folder=None, type=None).folder == "all"
    assert FilterState(type=None).type == "all"
    assert f.replace(search="ZION").search == "zion"


def test_generated_ids_are_unique():
    ids = {generate_id() for _ in range(200)}
    assert len(ids) == 200
