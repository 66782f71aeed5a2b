"""
Folder manager.

Folders are a flat, user-defined label namespace orthogonal to visited/wishlist. Names
must be non-blank; duplicates are allowed. Deleting a folder unfiles its members
(their `folder` becomes None); no destination is ever deleted along with a folder.

The manager mutates the collection store in memory; callers persist with
`store.save_folders()` / `store.save()`.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from rvplanner.domain.errors import UnknownDestinationError, UnknownFolderError, ValidationFailed
from rvplanner.domain.models import Destination, Folder
from rvplanner.storage.collection import UserCollectionStore

logger = logging.getLogger(__name__)


def _new_folder(name: str | None) -> Folder:
    try:
        return Folder(name=name or "")
    except ValidationError as e:
        raise ValidationFailed("Folder name is required") from e


class FolderManager:
    def __init__(self, store: UserCollectionStore):
        self._store = store

    def create(self, name: str) -> Folder:
        folder = self._store.add_folder(_new_folder(name))
        logger.info("Created folder %s (%s)", folder.id, folder.name)
        return folder

    def list(self) -> list[Folder]:
        return self._store.folders()

    def get(self, folder_id: str) -> Folder:
        folder = self._store.get_folder(folder_id)
        if folder is None:
            raise UnknownFolderError(folder_id)
        return folder

    def count_members(self, folder_id: str) -> int:
        return sum(1 for d in self._store.destinations() if d.folder == folder_id)

    def rename(self, folder_id: str, name: str) -> Folder:
        folder = self.get(folder_id)
        renamed = folder.model_copy(update={"name": _new_folder(name).name})
        self._store.replace_folder(renamed)
        return renamed

    def delete(self, folder_id: str) -> int:
        """Delete a folder and unfile its members; returns how many members were unfiled."""
        self.get(folder_id)
        unfiled = 0
        for d in self._store.destinations():
            if d.folder == folder_id:
                self._store.update(d.id, {"folder": None})
                unfiled += 1
        self._store.remove_folder(folder_id)
        logger.info("Deleted folder %s, unfiled %d destinations", folder_id, unfiled)
        return unfiled

    def assign(self, destination_id: str, folder_id: str | None) -> Destination:
        """Put a destination into a folder (None unfiles it)."""
        if folder_id is not None:
            self.get(folder_id)
        updated = self._store.update(destination_id, {"folder": folder_id})
        if updated is None:
            raise UnknownDestinationError(destination_id)
        return updated
