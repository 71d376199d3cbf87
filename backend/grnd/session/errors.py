"""Session and document-store exceptions."""


class GrndError(Exception):
    """Base exception for GRND domain errors."""
    pass


class SetupError(GrndError):
    """Raised when a session cannot start from the given setup payload."""

    def __init__(self, message: str, missing_groups: list[str] | None = None):
        super().__init__(message)
        self.missing_groups = missing_groups or []


class InvalidSessionState(GrndError):
    """Raised when an operation is not allowed in the current lifecycle state."""
    pass


class WorkoutStoreError(GrndError):
    """Raised by the document store when a record call fails."""
    pass


class SessionStorageError(GrndError):
    """Raised when finishing or templating a session fails at the store.

    The session stays active, so the caller may retry.
    """
    pass
