"""Tests for the buttons and product services."""

import pytest

from content_console.core.sync import FetchFailed, SessionState
from content_console.documents import BUTTON_IDS
from content_console.services import ButtonsService, ProductService


class TestButtonsService:
    """Test ButtonsService."""

    @pytest.mark.asyncio
    async def test_missing_buttons_use_defaults(self, store, granted):
        """Test every placement is listed even if never saved."""
        store.add(
            {
                "_id": "footerChatButton",
                "_type": "whatsappButton",
                "text": "Chat",
                "phoneNumber": "+1 555",
                "preMessage": "Hello",
                "isActive": False,
            }
        )

        buttons = await ButtonsService(store, granted).list_buttons()

        assert [button.id for button in buttons] == list(BUTTON_IDS)
        footer = buttons[BUTTON_IDS.index("footerChatButton")]
        assert footer.text == "Chat"
        assert footer.is_active is False
        assert buttons[0].phone_number == "+2348012345678"
        assert store.calls[0] == ("fetch_documents", ("whatsappButton", BUTTON_IDS, None))

    @pytest.mark.asyncio
    async def test_list_failure(self, store, granted):
        """Test a failed read raises FetchFailed."""
        store.fail_fetch = True

        with pytest.raises(FetchFailed):
            await ButtonsService(store, granted).list_buttons()

    @pytest.mark.asyncio
    async def test_editor_saves_one_button(self, store, granted):
        """Test the editor writes only the chosen button."""
        orchestrator = ButtonsService(store, granted).editor("contactWpButton")
        await orchestrator.load()
        orchestrator.form.set_field("preMessage", "I have a question")

        result = await orchestrator.save()

        assert result.success
        assert store.get("whatsappButton", "contactWpButton")["preMessage"] == (
            "I have a question"
        )
        assert len(store.documents) == 1

    def test_editor_unknown_button(self, store, granted):
        """Test unknown button ids are rejected."""
        with pytest.raises(KeyError):
            ButtonsService(store, granted).editor("headerButton")


class TestProductService:
    """Test ProductService."""

    @pytest.mark.asyncio
    async def test_list_products_skips_malformed(self, store, granted):
        """Test products without a name are skipped."""
        store.add({"_id": "p1", "_type": "product", "name": "Cake", "tags": ["a"]})
        store.add({"_id": "p2", "_type": "product", "name": ""})

        products = await ProductService(store, granted).list_products()

        assert [product.id for product in products] == ["p1"]
        assert store.calls[0] == ("fetch_documents", ("product", None, "_createdAt desc"))

    @pytest.mark.asyncio
    async def test_editor_for_new_product(self, store, granted):
        """Test a new-product session loads without fetching."""
        orchestrator = ProductService(store, granted).editor()

        assert await orchestrator.load() is True

        assert orchestrator.state == SessionState.READY
        assert store.calls == []
