"""
User collection store.

Owns the user's destinations and folders. All mutation goes through this object; the
engine and renderers only ever read snapshots (`destinations()`, `folders()`).

Persistence is whole-collection replace under two keys (`destinations`, `folders`).
The in-memory copy doubles as the last-known-good cache: if the backend fails on read,
the store keeps what it already has instead of dropping the user's data.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from pydantic import ValidationError

from rvplanner.domain.errors import DuplicateDestinationError
from rvplanner.domain.models import Destination, Folder
from rvplanner.storage.kv import KeyValueStore

logger = logging.getLogger(__name__)

DESTINATIONS_KEY = "destinations"
FOLDERS_KEY = "folders"


class UserCollectionStore:
    def __init__(self, backend: KeyValueStore):
        self._backend = backend
        self._destinations: list[Destination] = []
        self._folders: list[Folder] = []

    @property
    def backend(self) -> KeyValueStore:
        return self._backend

    # -- persistence -------------------------------------------------------

    def _read(self, key: str, model: type[Destination] | type[Folder], cached: list) -> list:
        try:
            raw = self._backend.get(key, [])
        except Exception as e:
            logger.warning("Loading %s failed, keeping %d cached records: %s", key, len(cached), e)
            return cached
        if not isinstance(raw, list):
            logger.warning("Ignoring %s: expected a list, got %s", key, type(raw).__name__)
            return cached
        records = []
        for row in raw:
            try:
                records.append(model.model_validate(row))
            except ValidationError as e:
                logger.warning("Skipping invalid %s record %r: %s", key, row, e.errors()[:1])
        return records

    def load(self) -> list[Destination]:
        self._destinations = self._read(DESTINATIONS_KEY, Destination, self._destinations)
        return self.destinations()

    def load_folders(self) -> list[Folder]:
        self._folders = self._read(FOLDERS_KEY, Folder, self._folders)
        return self.folders()

    def load_all(self) -> None:
        self.load()
        self.load_folders()

    def _write(self, key: str, payload: list[dict[str, Any]]) -> bool:
        try:
            ok = bool(self._backend.set(key, payload))
        except Exception as e:
            logger.error("Saving %s failed: %s", key, e)
            return False
        if not ok:
            logger.error("Saving %s failed", key)
        return ok

    def save(self, records: Iterable[Destination] | None = None) -> bool:
        """Persist the whole destination list (optionally replacing it first)."""
        if records is not None:
            self._destinations = list(records)
        return self._write(DESTINATIONS_KEY, [d.to_json() for d in self._destinations])

    def save_folders(self, folders: Iterable[Folder] | None = None) -> bool:
        if folders is not None:
            self._folders = list(folders)
        return self._write(FOLDERS_KEY, [f.to_json() for f in self._folders])

    # -- destinations ------------------------------------------------------

    def destinations(self) -> list[Destination]:
        return list(self._destinations)

    def ids(self) -> set[str]:
        return {d.id for d in self._destinations}

    def contains(self, destination_id: str) -> bool:
        return any(d.id == destination_id for d in self._destinations)

    def get(self, destination_id: str) -> Destination | None:
        return next((d for d in self._destinations if d.id == destination_id), None)

    def add(self, record: Destination, *, prepend: bool = False) -> Destination:
        """Add a record; raises `DuplicateDestinationError` if its id is taken."""
        if self.contains(record.id):
            raise DuplicateDestinationError(record.id)
        if prepend:
            self._destinations.insert(0, record)
        else:
            self._destinations.append(record)
        return record

    def update(self, destination_id: str, patch: dict[str, Any]) -> Destination | None:
        """Apply `patch` (snake_case field names) and re-validate; no-op if the id is absent."""
        for i, d in enumerate(self._destinations):
            if d.id != destination_id:
                continue
            data = d.model_dump(exclude={"visited"})
            data.update(patch)
            data["id"] = d.id
            updated = Destination.model_validate(data)
            self._destinations[i] = updated
            return updated
        return None

    def replace(self, record: Destination) -> bool:
        for i, d in enumerate(self._destinations):
            if d.id == record.id:
                self._destinations[i] = record
                return True
        return False

    def replace_all(self, records: Iterable[Destination]) -> None:
        """Swap in a whole new collection (import); ids must already be unique."""
        self._destinations = list(records)

    def remove(self, destination_id: str) -> bool:
        """Remove a record; removing an absent id is a no-op that returns False."""
        before = len(self._destinations)
        self._destinations = [d for d in self._destinations if d.id != destination_id]
        return len(self._destinations) != before

    # -- folders -----------------------------------------------------------

    def folders(self) -> list[Folder]:
        return list(self._folders)

    def get_folder(self, folder_id: str) -> Folder | None:
        return next((f for f in self._folders if f.id == folder_id), None)

    def add_folder(self, folder: Folder) -> Folder:
        self._folders.append(folder)
        return folder

    def replace_folder(self, folder: Folder) -> bool:
        for i, f in enumerate(self._folders):
            if f.id == folder.id:
                self._folders[i] = folder
                return True
        return False

    def remove_folder(self, folder_id: str) -> bool:
        before = len(self._folders)
        self._folders = [f for f in self._folders if f.id != folder_id]
        return len(self._folders) != before
