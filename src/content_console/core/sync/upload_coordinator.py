"""Uploads newly selected images and maps each result to its slot.

Uploads for different slots run concurrently. Each upload reports the slot it
was started for, so results are correlated by slot key and never by the order
in which uploads finish.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from ...documents.schema import DocumentSpec, SlotRef
from ...store import SanityClient, SanityError
from .errors import UploadFailed
from .form_state import FormState, PendingUpload

logger = logging.getLogger(__name__)


@dataclass
class UploadOutcome:
    """Result of uploading the image selected for one slot."""

    slot: SlotRef
    asset_ref: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        """Whether the upload produced an asset."""
        return self.asset_ref is not None


class UploadCoordinator:
    """Uploads the pending images of a form."""

    def __init__(
        self,
        store: SanityClient,
        max_concurrency: int = 4,
        spec: Optional[DocumentSpec] = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            store: Store receiving the images
            max_concurrency: Maximum number of uploads in flight
            spec: Document shape; image fields naming their uploads after a
                text field take the filename from the form values
        """
        self.store = store
        self.max_concurrency = max(1, max_concurrency)
        self.spec = spec

    async def resolve_uploads(self, local: FormState) -> Dict[SlotRef, str]:
        """Upload every pending image of the form.

        Args:
            local: Form edits holding the pending images

        Returns:
            Asset id per slot

        Raises:
            UploadFailed: If any upload failed; lists every failed slot
        """
        pending = dict(local.pending)
        if not pending:
            return {}

        logger.info("Uploading %d image(s)", len(pending))
        semaphore = asyncio.Semaphore(self.max_concurrency)
        outcomes = await asyncio.gather(
            *(
                self._upload_slot(
                    slot, upload, self._filename(slot, upload, local), semaphore
                )
                for slot, upload in pending.items()
            )
        )

        uploaded: Dict[SlotRef, str] = {}
        failures: Dict[SlotRef, str] = {}
        for outcome in outcomes:
            if outcome.succeeded:
                uploaded[outcome.slot] = outcome.asset_ref  # type: ignore[assignment]
            else:
                failures[outcome.slot] = outcome.error or "unknown error"

        if failures:
            for slot, error in failures.items():
                logger.error("Upload for %s failed: %s", slot, error)
            raise UploadFailed(failures)

        return uploaded

    def _filename(self, slot: SlotRef, upload: PendingUpload, local: FormState) -> str:
        if self.spec is None or not self.spec.has_slot(slot):
            return upload.filename
        source = self.spec.image_field(slot.field).filename_field
        if source is None:
            return upload.filename
        name = str(local.values.get(source) or "").strip()
        return name or f"{self.spec.document_type}-image"

    async def _upload_slot(
        self,
        slot: SlotRef,
        upload: PendingUpload,
        filename: str,
        semaphore: asyncio.Semaphore,
    ) -> UploadOutcome:
        async with semaphore:
            try:
                asset_ref = await self.store.upload_image(
                    upload.data,
                    filename=filename,
                    content_type=upload.content_type,
                )
            except SanityError as e:
                return UploadOutcome(slot=slot, error=str(e))
            except Exception as e:
                logger.exception("Unexpected error uploading %s", slot)
                return UploadOutcome(slot=slot, error=str(e) or type(e).__name__)
        logger.debug("Uploaded %s -> %s", slot, asset_ref)
        return UploadOutcome(slot=slot, asset_ref=asset_ref)
