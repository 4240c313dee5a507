"""Writers committing a merge patch to the store.

``SingletonUpsert`` replaces a fixed-id document wholesale. No revision is
read or checked beforehand: concurrent editors overwrite each other and the
last write wins.

``CollectionWriter`` handles collection documents such as products, where the
operator chooses between creating a new document and updating an existing
one.
"""

import logging
from typing import Any, Dict, Optional

from ...store import SanityClient, SanityError
from .errors import WriteFailed
from .merge_engine import MergePatch

logger = logging.getLogger(__name__)


class SingletonUpsert:
    """Create-or-replace writer keyed by the document's fixed id."""

    def __init__(self, store: SanityClient) -> None:
        self.store = store

    async def write(
        self, patch: MergePatch, remote: Optional[Dict[str, Any]] = None
    ) -> str:
        """Replace the document with the patch.

        Args:
            patch: Fully merged document
            remote: Snapshot the patch was merged from (unused)

        Returns:
            Id of the written document

        Raises:
            WriteFailed: If the patch has no id or the store rejected it
        """
        if not patch.document_id:
            raise WriteFailed("Cannot save a settings document without its id")

        logger.info("Replacing %s document %s", patch.document_type, patch.document_id)
        try:
            return await self.store.create_or_replace(patch.to_document())
        except SanityError as e:
            raise WriteFailed(f"Failed to save: {e}") from e


class CollectionWriter:
    """Creates or updates a document of a collection."""

    def __init__(self, store: SanityClient) -> None:
        self.store = store

    async def write(
        self, patch: MergePatch, remote: Optional[Dict[str, Any]] = None
    ) -> str:
        """Create the document, or update the one ``remote`` was fetched as.

        Updates set every merged field and unset the fields the merge left
        out, so a cleared image is removed while fields this console does not
        manage stay untouched.

        Returns:
            Id of the written document

        Raises:
            WriteFailed: If the store rejected the write
        """
        try:
            if remote is None:
                logger.info("Creating %s document", patch.document_type)
                document_id = await self.store.create(patch.to_document())
                if not document_id:
                    raise WriteFailed("Store did not return the new document id")
                return document_id

            document_id = patch.document_id or remote.get("_id")
            if not document_id:
                raise WriteFailed("Cannot update a document without its id")
            unset = sorted(
                {
                    decision.slot.field
                    for decision in patch.decisions
                    if decision.slot.field not in patch.fields
                    and decision.slot.field in remote
                }
            )
            logger.info("Updating %s document %s", patch.document_type, document_id)
            return await self.store.patch(
                document_id, set_fields=patch.fields, unset_fields=unset or None
            )
        except SanityError as e:
            raise WriteFailed(f"Failed to save: {e}") from e

