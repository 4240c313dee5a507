"""WhatsApp call-to-action buttons shown across the public site."""

import logging
from typing import Dict, List

from pydantic import ValidationError

from ..core.sync.capability import WriteCapability
from ..core.sync.errors import FetchFailed
from ..core.sync.orchestrator import SyncOrchestrator
from ..documents.catalog import BUTTON_IDS, BUTTON_PLACEMENTS, button_spec, default_button
from ..models import WhatsappButton
from ..store import SanityClient, SanityError

logger = logging.getLogger(__name__)


class ButtonsService:
    """Loads and edits the six fixed WhatsApp buttons."""

    def __init__(self, store: SanityClient, capability: WriteCapability) -> None:
        self.store = store
        self.capability = capability

    async def list_buttons(self) -> List[WhatsappButton]:
        """Fetch every button in placement order.

        Placements that were never saved are filled with default buttons.

        Raises:
            FetchFailed: If the buttons could not be read
        """
        try:
            documents = await self.store.fetch_documents(
                "whatsappButton", ids=BUTTON_IDS
            )
        except SanityError as e:
            raise FetchFailed(f"Failed to load buttons: {e}") from e

        stored: Dict[str, WhatsappButton] = {}
        for document in documents:
            try:
                button = WhatsappButton.model_validate(document)
            except ValidationError as e:
                logger.warning("Skipping malformed button %s: %s", document.get("_id"), e)
                continue
            stored[button.id] = button

        buttons = []
        for placement in BUTTON_PLACEMENTS:
            button = stored.get(placement.button_id)
            if button is None:
                logger.debug("Button %s not saved yet, using defaults", placement.button_id)
                button = default_button(placement.button_id)
            buttons.append(button)
        return buttons

    def editor(self, button_id: str) -> SyncOrchestrator:
        """Editing session for one button; each button is saved on its own.

        Raises:
            KeyError: If ``button_id`` is not a known placement
        """
        return SyncOrchestrator(button_spec(button_id), self.store, self.capability)
