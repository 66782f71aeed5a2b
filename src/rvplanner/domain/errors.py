"""
Domain errors.

Everything subclasses `ValueError` so callers that already treat bad input as a
`ValueError` (API routes, CLI) keep working; the subclasses let them pick a status code.
"""

from __future__ import annotations


class PlannerError(ValueError):
    """Base class for bucket-list errors."""


class ValidationFailed(PlannerError):
    """A required field is missing or blank (e.g. an empty destination or folder name)."""


class DuplicateDestinationError(PlannerError):
    def __init__(self, destination_id: str):
        super().__init__(f"Destination '{destination_id}' is already in the collection")
        self.destination_id = destination_id


class UnknownDestinationError(PlannerError):
    def __init__(self, destination_id: str):
        super().__init__(f"Unknown destination '{destination_id}'")
        self.destination_id = destination_id


class UnknownFolderError(PlannerError):
    def __init__(self, folder_id: str):
        super().__init__(f"Unknown folder '{folder_id}'")
        self.folder_id = folder_id


class UnknownCatalogEntryError(PlannerError):
    def __init__(self, entry_id: str):
        super().__init__(f"Unknown catalog entry '{entry_id}'")
        self.entry_id = entry_id


class ImportFormatError(PlannerError):
    """An import file is not a valid export document; nothing was imported."""
