class WaiverError(Exception):
    """Base class for every failure raised by the waiver pipeline."""


# --- Server side (ingestion) ---

class ValidationError(WaiverError):
    """Required field missing. Raised before any side effect."""


class StorageError(WaiverError):
    """Blob upload failed. Nothing has been inserted."""


class PersistenceError(WaiverError):
    """Database insert failed. Attachments may already be uploaded."""

    def __init__(self, message, details=None, hint=None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.hint = hint


class NotificationError(WaiverError):
    """Aftercare email could not be sent. Never fails a submission."""


# --- Client side (encoder) ---

class SubmissionRejected(WaiverError):
    """Local validation failed; nothing was sent."""


class SubmissionFailed(WaiverError):
    """The POST did not succeed. Form state is left untouched."""
