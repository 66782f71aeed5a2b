import pytest

from rvplanner.domain.errors import UnknownDestinationError, UnknownFolderError, ValidationFailed
from rvplanner.domain.models import Destination
from rvplanner.folders.manager import FolderManager
from rvplanner.storage.collection import UserCollectionStore
from rvplanner.storage.kv import MemoryStore


@pytest.fixture
def store() -> UserCollectionStore:
    s = UserCollectionStore(MemoryStore())
    s.add(Destination(id="d1", name="Moab"))
    s.add(Destination(id="d2", name="Bend"))
    return s


def test_create_rejects_blank_names_and_allows_duplicates(store):
    folders = FolderManager(store)
    with pytest.raises(ValidationFailed):
        folders.create("   ")
    # Names are not unique; each folder gets its own id.
    a = folders.create("Summer")
    b = folders.create("Summer")
    assert a.id != b.id
    assert [f.name for f in folders.list()] == ["Summer", "Summer"]


def test_assign_and_count_members(store):
    folders = FolderManager(store)
    f = folders.create("Utah")
    folders.assign("d1", f.id)
    assert folders.count_members(f.id) == 1
    # Assigning None unfiles.
    folders.assign("d1", None)
    assert folders.count_members(f.id) == 0

    with pytest.raises(UnknownFolderError):
        folders.assign("d1", "nope")
    with pytest.raises(UnknownDestinationError):
        folders.assign("missing", f.id)


def test_delete_unfiles_members_and_keeps_destinations(store):
    folders = FolderManager(store)
    f = folders.create("Road trip")
    folders.assign("d1", f.id)
    folders.assign("d2", f.id)

    # The return value is the number of records unfiled; none are removed.
    assert folders.delete(f.id) == 2
    assert folders.list() == []
    assert [d.id for d in store.destinations()] == ["d1", "d2"]
    assert all(d.folder is None for d in store.destinations())


def test_rename(store):
    folders = FolderManager(store)
    f = folders.create("Old")
    # New names are trimmed and must not be blank.
    assert folders.rename(f.id, "  New  ").name == "New"
    with pytest.raises(ValidationFailed):
        folders.rename(f.id, "")
    with pytest.raises(UnknownFolderError):
        folders.rename("nope", "X")
