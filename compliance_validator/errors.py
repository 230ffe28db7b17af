from __future__ import annotations


class ComplianceError(Exception):
    """Base class for errors that stop a validation run."""


class ValidatorConnectionError(ComplianceError):
    """The subscription or resource group could not be reached."""


class CollaboratorQueryError(ComplianceError):
    """A resource listing failed (permissions, throttling, not found)."""

    def __init__(self, category: str, cause: Exception):
        super().__init__(f"Failed to list {category}: {type(cause).__name__}: {cause}")
        self.category = category
        self.cause = cause
