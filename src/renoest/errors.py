"""Exception types raised by the project collaborators."""

from __future__ import annotations


class RenoestError(Exception):
    """Base class for errors surfaced to the user."""


class ProjectImportError(RenoestError):
    """Raised when a project file cannot be read or fails validation."""


class EntityNotFoundError(RenoestError, KeyError):
    """Raised when an edit targets a room or line item that does not exist."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable on the CLI.
        return str(self.args[0]) if self.args else ""


class ExportError(RenoestError):
    """Raised when an unsupported export format is requested."""


class InvalidPhotoError(RenoestError):
    """Raised when a room photo cannot be read or is not an image."""


__all__ = ["RenoestError", "ProjectImportError", "EntityNotFoundError", "ExportError", "InvalidPhotoError"]
