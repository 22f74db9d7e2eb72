"""Service-layer exceptions."""


class FactoryError(Exception):
    """Raised when a creature instance or roster cannot be created."""


class ProgressStoreError(Exception):
    """Raised when the persistent progress store cannot be written."""
