"""
Interactive bucket-list flows.

`BucketListController` wraps `BucketListService` with the dialog steps each user action
needs. Every flow awaits its dialogs one at a time (dialogs are modal) and treats cancel
as a full no-op: nothing is changed or saved.

- toggle-visited: wishlist -> visited asks for an optional visit date and notes;
  visited -> wishlist asks for confirmation first because the visit notes are discarded
- edit: pre-filled form; a blank name is rejected and the form is shown again
- delete: confirmation
- add-to-folder: choose one of the user's folders (or "Unfiled")
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from rvplanner.bucketlist.dialogs import Dialogs, FormField
from rvplanner.bucketlist.service import BucketListService
from rvplanner.domain.errors import ImportFormatError, ValidationFailed
from rvplanner.domain.models import (
    DESTINATION_TYPES,
    REGION_LABELS,
    Destination,
    Folder,
    type_label,
)
from rvplanner.render.list_view import ActionName, CardAction
from rvplanner.transfer.backup import parse_import

logger = logging.getLogger(__name__)

UNFILED = ""


def _destination_form(d: Destination | None = None) -> list[FormField]:
    def v(value: object) -> str:
        return "" if value is None else str(value)

    type_options = [(t, type_label(t)) for t in DESTINATION_TYPES]
    region_options = [("", "None"), *REGION_LABELS.items()]
    return [
        FormField("name", "Name", value=v(d and d.name), placeholder="e.g., Yellowstone"),
        FormField("state", "State", value=v(d and d.state), placeholder="e.g., Wyoming"),
        FormField("type", "Type", "select", value=v(d.type if d else "other"), options=type_options),
        FormField("region", "Region", "select", value=v(d and d.region), options=region_options),
        FormField("best_season", "Best season", value=v(d and d.best_season)),
        FormField("estimated_cost", "Estimated cost", value=v(d and d.estimated_cost)),
        FormField("must_see", "Must see", "textarea", value=v(d and d.must_see)),
        FormField("notes", "Notes", "textarea", value=v(d and d.notes)),
        FormField("latitude", "Latitude", "number", value=v(d and d.latitude)),
        FormField("longitude", "Longitude", "number", value=v(d and d.longitude)),
    ]


VISIT_FIELDS = [
    FormField("visitedDate", "When did you visit?", placeholder="e.g., June 2026"),
    FormField("visitedNotes", "Notes about your visit", "textarea", placeholder="Share your experience..."),
]


class BucketListController:
    def __init__(self, service: BucketListService, dialogs: Dialogs):
        self.service = service
        self.dialogs = dialogs
        self._actions: dict[ActionName, Callable[[str], Awaitable[bool]]] = {
            "toggle-visited": self.toggle_visited,
            "edit": self.edit,
            "delete": self.delete,
            "add-to-folder": self.add_to_folder,
        }

    async def dispatch(self, action: CardAction) -> bool:
        """Run the flow behind a card action; returns True if anything changed."""
        handler = self._actions.get(action.name)
        if handler is None:
            raise ValueError(f"Unknown card action '{action.name}'")
        return await handler(action.destination_id)

    async def toggle_visited(self, destination_id: str) -> bool:
        d = self.service.require(destination_id)
        if d.visited:
            detail = " Your visit notes will be discarded." if (d.visited_date or d.visited_notes) else ""
            if not await self.dialogs.confirm(f'Move "{d.name}" back to your wishlist?{detail}'):
                return False
            self.service.mark_unvisited(destination_id)
            return True

        result = await self.dialogs.prompt_form("Mark as Visited", VISIT_FIELDS)
        if result is None:
            return False
        self.service.mark_visited(
            destination_id, date=result.get("visitedDate"), notes=result.get("visitedNotes")
        )
        return True

    async def _form_until_valid(
        self, title: str, fields: list[FormField], submit: Callable[[dict[str, str]], object]
    ) -> bool:
        while True:
            result = await self.dialogs.prompt_form(title, fields)
            if result is None:
                return False
            try:
                submit(result)
            except ValidationFailed as e:
                self.service.notifier.notify(str(e), "error")
                # Show the form again with what the user typed.
                fields = [
                    FormField(f.id, f.label, f.type, result.get(f.id, f.value), f.placeholder, f.options)
                    for f in fields
                ]
                continue
            return True

    async def edit(self, destination_id: str) -> bool:
        d = self.service.require(destination_id)
        return await self._form_until_valid(
            "Edit Destination", _destination_form(d), lambda r: self.service.edit(destination_id, r)
        )

    async def add_custom(self) -> bool:
        return await self._form_until_valid(
            "Add Destination", _destination_form(), lambda r: self.service.add_custom(r)
        )

    async def delete(self, destination_id: str) -> bool:
        d = self.service.require(destination_id)
        if not await self.dialogs.confirm(f'Delete "{d.name}"?'):
            return False
        return self.service.delete(destination_id)

    async def add_to_folder(self, destination_id: str) -> bool:
        d = self.service.require(destination_id)
        folders = self.service.folders.list()
        if not folders:
            self.service.notifier.notify("Create a folder first", "info")
            return False
        options = [(UNFILED, "Unfiled"), *((f.id, f.name) for f in folders)]
        field = FormField("folder", "Folder", "select", value=d.folder or UNFILED, options=options)
        result = await self.dialogs.prompt_form(f'Move "{d.name}" to folder', [field])
        if result is None:
            return False
        folder_id = result.get("folder") or None
        if folder_id == d.folder:
            return False
        self.service.assign_folder(destination_id, folder_id)
        return True

    async def create_folder(self) -> Folder | None:
        while True:
            name = await self.dialogs.prompt_text("Create Folder", "Enter folder name:")
            if name is None:
                return None
            try:
                return self.service.create_folder(name)
            except ValidationFailed as e:
                self.service.notifier.notify(str(e), "error")

    async def rename_folder(self, folder_id: str) -> Folder | None:
        folder = self.service.folders.get(folder_id)
        while True:
            name = await self.dialogs.prompt_text("Rename Folder", "New folder name:", folder.name)
            if name is None:
                return None
            try:
                return self.service.rename_folder(folder_id, name)
            except ValidationFailed as e:
                self.service.notifier.notify(str(e), "error")

    async def delete_folder(self, folder_id: str) -> bool:
        folder = self.service.folders.get(folder_id)
        members = self.service.folders.count_members(folder_id)
        message = f'Delete folder "{folder.name}"?'
        if members:
            message += f" Its {members} destination(s) will be unfiled, not deleted."
        if not await self.dialogs.confirm(message):
            return False
        self.service.delete_folder(folder_id)
        return True

    async def import_text(self, text: str | bytes) -> bool:
        """Validate an export file, confirm the destructive replace, then import."""
        try:
            bundle = parse_import(text)
        except ImportFormatError as e:
            logger.warning("Rejected import: %s", e)
            self.service.notifier.notify("Error importing data. Please check the file format.", "error")
            return False
        source = f"the backup from {bundle.export_date[:10]}" if bundle.export_date else "backup file"
        confirmed = await self.dialogs.confirm(
            f"Import data from {source}? This will REPLACE your current "
            f"{self.service.stats()['total']} destinations with {len(bundle.destinations)}."
        )
        if not confirmed:
            return False
        self.service.import_bundle(bundle)
        return True
