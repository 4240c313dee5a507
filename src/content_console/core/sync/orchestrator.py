"""Load/edit/save life cycle of one document editing session.

The SyncOrchestrator drives the session as an explicit state machine:

    IDLE -> LOADING -> READY <-> SAVING -> READY | ERROR

A save runs the permission gate, the UploadCoordinator, the MergeEngine and a
single write, in that order. The write is the only step that mutates the
store and it only happens after every upload and the merge succeeded, so a
failed save leaves the stored document exactly as it was.
"""

import logging
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol

from pydantic import ValidationError

from ...documents.schema import DocumentSpec, SlotRef
from ...store import SanityClient, SanityError
from .capability import WriteCapability
from .errors import (
    ContentSyncError,
    FetchFailed,
    InvalidDocument,
    SessionNotReady,
)
from .form_state import EditSession, FormStateController, asset_ref_of
from .merge_engine import MergeEngine, MergePatch
from .upload_coordinator import UploadCoordinator
from .upsert import CollectionWriter, SingletonUpsert

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """States of an editing session."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    SAVING = "saving"
    ERROR = "error"


class DocumentWriter(Protocol):
    """Commits a merge patch and returns the written document id."""

    async def write(
        self, patch: MergePatch, remote: Optional[Dict[str, Any]] = None
    ) -> str: ...


@dataclass
class SaveResult:
    """Result of one save attempt."""

    patch: Optional[MergePatch] = None
    uploaded: Dict[SlotRef, str] = dataclass_field(default_factory=dict)
    document_id: Optional[str] = None
    error: Optional[ContentSyncError] = None
    skipped: bool = False
    refreshed: bool = False
    warnings: List[str] = dataclass_field(default_factory=list)

    @property
    def success(self) -> bool:
        """Whether the document was written."""
        return self.error is None and not self.skipped

    @property
    def message(self) -> str:
        """Operator-facing outcome."""
        if self.error is not None:
            return self.error.user_message
        if self.skipped:
            return "A save is already in progress"
        return "Saved"

    def get_summary(self) -> Dict[str, Any]:
        """Summary of the save attempt."""
        summary: Dict[str, Any] = {
            "success": self.success,
            "skipped": self.skipped,
            "uploaded": len(self.uploaded),
            "refreshed": self.refreshed,
        }
        if self.document_id:
            summary["document_id"] = self.document_id
        if self.patch is not None:
            summary["slots"] = self.patch.get_summary()
        if self.error is not None:
            summary["error"] = type(self.error).__name__
        return summary


class SyncOrchestrator:
    """Editing session for one document."""

    def __init__(
        self,
        spec: DocumentSpec,
        store: SanityClient,
        capability: WriteCapability,
        document_id: Optional[str] = None,
        writer: Optional[DocumentWriter] = None,
        uploader: Optional[UploadCoordinator] = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            spec: Shape of the edited document
            store: Document store
            capability: Write-permission gate, checked on every save
            document_id: Collection document to update; None creates a new
                document (ignored for singletons)
            writer: Writer for the merged patch; defaults to create-or-replace
                for singletons and create/update for collections
            uploader: Image uploader; defaults to one bound to ``store``
        """
        self.spec = spec
        self.store = store
        self.capability = capability
        self.document_id = spec.document_id or document_id
        self.engine = MergeEngine(spec)
        self.uploader = uploader or UploadCoordinator(
            store, max_concurrency=store.config.upload_concurrency, spec=spec
        )
        if writer is None:
            writer = SingletonUpsert(store) if spec.is_singleton else CollectionWriter(store)
        self.writer = writer

        self._state = SessionState.IDLE
        self._session: Optional[EditSession] = None
        self.last_error: Optional[ContentSyncError] = None

    @property
    def state(self) -> SessionState:
        """Current state of the session."""
        return self._state

    @property
    def session(self) -> Optional[EditSession]:
        """Snapshot/edits pair, present once a load succeeded."""
        return self._session

    @property
    def form(self) -> FormStateController:
        """The editable form.

        Raises:
            SessionNotReady: If nothing has been loaded
        """
        if self._session is None:
            raise SessionNotReady()
        return self._session.form

    async def load(self) -> bool:
        """Fetch the snapshot and start a fresh editing session.

        Returns:
            True if the session is ready for editing
        """
        if self._state == SessionState.SAVING:
            logger.warning("Reload of %s ignored: save in progress", self.spec.label)
            return False

        self._state = SessionState.LOADING
        self.last_error = None
        try:
            remote = await self._fetch_remote()
        except FetchFailed as e:
            logger.error("Loading %s failed: %s", self.spec.label, e)
            self._session = None
            self.last_error = e
            self._state = SessionState.ERROR
            return False

        self._session = EditSession.start(self.spec, remote)
        self._state = SessionState.READY
        logger.info(
            "Loaded %s (%s)",
            self.spec.label,
            "existing document" if remote else "no document yet",
        )
        return True

    async def save(self) -> SaveResult:
        """Upload new images, merge, and write the document.

        A save triggered while another is in progress is ignored.

        Returns:
            SaveResult describing the outcome
        """
        result = SaveResult()
        if self._state == SessionState.SAVING:
            logger.warning("Save of %s ignored: already saving", self.spec.label)
            result.skipped = True
            return result

        session = self._session
        if session is None:
            result.error = SessionNotReady()
            return result

        # The guard is set before the first await
        self._state = SessionState.SAVING
        self.last_error = None
        try:
            self.capability.require()
            self._validate(self._scalar_document(session))

            result.uploaded = await self.uploader.resolve_uploads(session.form.state)
            patch = self.engine.merge(
                session.remote,
                session.form.state,
                result.uploaded,
                document_id=self.document_id,
            )
            result.patch = patch
            self._validate(patch.to_document())

            result.document_id = await self.writer.write(patch, session.remote)
            self.document_id = result.document_id
            logger.info("Saved %s (%s)", self.spec.label, result.document_id)

            await self._refresh(result)
            self._state = SessionState.READY
        except ContentSyncError as e:
            self._fail(result, e)
        except Exception as e:
            logger.exception("Unexpected error while saving %s", self.spec.label)
            self._fail(result, ContentSyncError(f"Failed to save: {e}"))

        return result

    def preview_urls(self) -> Dict[SlotRef, str]:
        """CDN URLs of the stored images, by slot."""
        if self._session is None:
            return {}
        return {
            slot: self.store.image_url(asset_ref_of(entry))  # type: ignore[arg-type]
            for slot, entry in self._session.stored_images().items()
        }

    async def _fetch_remote(self) -> Optional[Dict[str, Any]]:
        if not self.spec.is_singleton and not self.document_id:
            return None
        try:
            remote = await self.store.fetch_document(
                self.spec.document_type, self.document_id
            )
        except SanityError as e:
            raise FetchFailed(f"Failed to load {self.spec.label.lower()}: {e}") from e
        if remote is None and not self.spec.is_singleton:
            raise FetchFailed(f"{self.spec.label} {self.document_id} not found")
        return remote

    async def _refresh(self, result: SaveResult) -> None:
        """Restart the session from what the store now holds."""
        try:
            remote = await self._fetch_remote()
            result.refreshed = remote is not None
        except FetchFailed as e:
            remote = None
            result.warnings.append(f"Saved, but reloading failed: {e.user_message}")
            logger.warning("Reloading %s after save failed: %s", self.spec.label, e)

        if remote is None and result.patch is not None:
            remote = result.patch.to_document()
            if result.document_id:
                remote["_id"] = result.document_id
        self._session = EditSession.start(self.spec, remote)

    def _scalar_document(self, session: EditSession) -> Dict[str, Any]:
        """Document without images, to check field values before uploading."""
        document: Dict[str, Any] = {"_type": self.spec.document_type}
        if self.document_id:
            document["_id"] = self.document_id
        document.update(self.engine.merge_fields(session.form.state, session.remote))
        return document

    def _validate(self, document: Dict[str, Any]) -> None:
        try:
            self.spec.model.model_validate(document)
        except ValidationError as e:
            raise InvalidDocument(_describe_validation_errors(e)) from e

    def _fail(self, result: SaveResult, error: ContentSyncError) -> None:
        logger.error("Saving %s failed: %s", self.spec.label, error)
        result.error = error
        self.last_error = error
        self._state = SessionState.ERROR


def _describe_validation_errors(error: ValidationError) -> List[str]:
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        messages.append(f"{location}: {item.get('msg', 'invalid')}")
    return messages
