"""Error taxonomy for daylog operations."""


class DaylogError(Exception):
    """Base class for all daylog errors."""

    pass


class ValidationError(DaylogError):
    """Raised when an interval or request is malformed.

    ``errors`` maps field names to a human readable message.
    """

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        detail = "; ".join(f"{name}: {msg}" for name, msg in self.errors.items())
        super().__init__(detail or "invalid input")


class NotFoundError(DaylogError):
    """Raised when an edit targets a missing or non-editable interval."""

    pass


class ConflictError(DaylogError):
    """Reserved for optimistic-concurrency checks. Not raised today."""

    pass


class UpstreamSyncError(DaylogError):
    """Raised when the external calendar batch could not be fetched."""

    pass


class ReauthorizationRequired(UpstreamSyncError):
    """Raised when calendar credentials are missing or can't be refreshed."""

    pass


class StorageError(DaylogError):
    """Raised when the persistence layer fails."""

    pass
