"""Persistence-related exceptions."""


class PersistenceError(Exception):
    """Base exception for persistence-related errors."""


class CorruptRecordError(PersistenceError):
    """Stored record cannot be converted back into an entity."""
