"""Exceptions raised by the chat backend."""


class DigitalTickError(Exception):
    """Base class for service errors."""


class CollaboratorError(DigitalTickError):
    """The completion provider failed to produce a reply."""

    def __init__(self, message: str, provider: str | None = None):
        super().__init__(message)
        self.provider = provider


class PersistenceError(DigitalTickError):
    """A snapshot document could not be written to disk."""
