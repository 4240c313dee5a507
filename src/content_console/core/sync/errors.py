"""Error taxonomy for loading and saving content documents.

Every failure of the fetch/upload/merge/write pipeline is reported as a
``ContentSyncError`` subclass carrying a message suitable for the operator.
"""

from typing import TYPE_CHECKING, Dict, List, Optional

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from ...documents.schema import SlotRef


WRITE_ACCESS_DISABLED_MESSAGE = (
    "Payment required: Admin write access is disabled until full payment."
)


class ContentSyncError(Exception):
    """Base class for content console sync failures."""

    default_message = "Operation failed"

    def __init__(self, message: Optional[str] = None) -> None:
        """Initialize with an operator-facing message."""
        self.user_message = message or self.default_message
        super().__init__(self.user_message)


class FetchFailed(ContentSyncError):
    """Reading a document from the store failed."""

    default_message = "Failed to load settings"


class UploadFailed(ContentSyncError):
    """One or more image uploads failed; nothing was written."""

    default_message = "Image upload failed"

    def __init__(
        self,
        failures: "Dict[SlotRef, str]",
        message: Optional[str] = None,
    ) -> None:
        """Initialize with the failed slots and their error descriptions."""
        self.failures = dict(failures)
        if message is None:
            slots = ", ".join(str(slot) for slot in sorted(self.failures))
            message = f"{self.default_message}: {slots}"
        super().__init__(message)


class WriteFailed(ContentSyncError):
    """The document write was rejected or did not complete."""

    default_message = "Failed to save"


class PermissionDenied(ContentSyncError):
    """Write access is not authorized for this process."""

    default_message = WRITE_ACCESS_DISABLED_MESSAGE


class InvalidDocument(ContentSyncError):
    """The merged document does not satisfy the document model."""

    default_message = "Document is invalid"

    def __init__(self, errors: List[str], message: Optional[str] = None) -> None:
        """Initialize with the list of validation problems."""
        self.errors = list(errors)
        if message is None and self.errors:
            message = f"{self.default_message}: " + "; ".join(self.errors)
        super().__init__(message)


class SessionNotReady(ContentSyncError):
    """Save was triggered without a loaded editing session."""

    default_message = "Nothing to save: settings are not loaded"


class FormValidationError(ContentSyncError, ValueError):
    """An edit was rejected by the local form model."""

    default_message = "Invalid edit"
