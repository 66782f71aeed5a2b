import pytest

from rvplanner.domain.errors import DuplicateDestinationError
from rvplanner.domain.models import Destination, Folder
from rvplanner.storage.collection import UserCollectionStore
from rvplanner.storage.kv import MemoryStore


class _BrokenReads(MemoryStore):
    def get(self, key, default=None):
        raise RuntimeError("backend down")


def test_save_then_load_round_trips_through_backend():
    backend = MemoryStore()
    store = UserCollectionStore(backend)
    store.add(Destination(id="d1", name="Moab", state="Utah"))
    store.add_folder(Folder(id="f1", name="2026 Trip"))
    assert store.save() is True
    assert store.save_folders() is True

    # A second store over the same backend sees what the first one saved.
    again = UserCollectionStore(backend)
    again.load_all()
    assert [d.id for d in again.destinations()] == ["d1"]
    assert [f.name for f in again.folders()] == ["2026 Trip"]


def test_add_rejects_duplicate_ids():
    store = UserCollectionStore(MemoryStore())
    store.add(Destination(id="d1", name="Moab"))
    with pytest.raises(DuplicateDestinationError):
        store.add(Destination(id="d1", name="Moab again"))


def test_prepend_puts_record_first():
    store = UserCollectionStore(MemoryStore())
    store.add(Destination(id="d1", name="Old"))
    store.add(Destination(id="d2", name="New"), prepend=True)
    assert [d.id for d in store.destinations()] == ["d2", "d1"]


def test_update_is_noop_for_unknown_id_and_revalidates():
    store = UserCollectionStore(MemoryStore())
    store.add(Destination(id="d1", name="Moab"))
    assert store.update("missing", {"name": "X"}) is None

    # Updated fields go through validation again, so the type alias is normalized.
    updated = store.update("d1", {"notes": "Arches nearby", "type": "park"})
    assert updated.notes == "Arches nearby"
    assert updated.type == "national-park"
    assert store.get("d1").notes == "Arches nearby"


def test_remove_is_idempotent():
    store = UserCollectionStore(MemoryStore())
    store.add(Destination(id="d1", name="Moab"))
    assert store.remove("d1") is True
    assert store.remove("d1") is False
    assert store.destinations() == []


def test_backend_read_failure_keeps_last_known_good():
    backend = MemoryStore()
    store = UserCollectionStore(backend)
    store.add(Destination(id="d1", name="Moab"))
    store.save()

    # A failing backend read returns the in-memory list instead of emptying it.
    store._backend = _BrokenReads()
    assert [d.id for d in store.load()] == ["d1"]


def test_invalid_rows_are_skipped_on_load():
    # A blank name and a non-object row are dropped; the good row survives.
    backend = MemoryStore({"destinations": [{"id": "ok", "name": "Moab"}, {"id": "bad", "name": ""}, "junk"]})
    store = UserCollectionStore(backend)
    assert [d.id for d in store.load()] == ["ok"]


def test_replace_all_swaps_collection():
    store = UserCollectionStore(MemoryStore())
    store.add(Destination(id="d1", name="Moab"))
    store.replace_all([Destination(id="d2", name="Bend")])
    assert store.ids() == {"d2"}
