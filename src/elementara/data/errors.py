"""Exceptions raised while loading the creature catalog and game modes."""


class DataError(Exception):
    """Base exception for the data layer."""


class DataLoadError(DataError):
    """Raised when a definition file is missing or is not valid JSON."""


class DataValidationError(DataError):
    """Raised when a definition has missing, unknown or mistyped fields."""


class DataReferenceError(DataError):
    """Raised when an evolution line is inconsistent (duplicate ids, stage gaps)."""
