"""Tests for UploadCoordinator."""

import asyncio

import pytest
from conftest import upload

from content_console.core.sync import FormState, UploadCoordinator, UploadFailed
from content_console.documents import HOME_SETTINGS, PRODUCT, SlotRef


def ig(position):
    return SlotRef("instagramImages", position)


class ReorderingStore:
    """Store whose first upload finishes only after the second one."""

    def __init__(self):
        self.second_done = asyncio.Event()
        self.completed = []

    async def upload_image(self, data, filename=None, content_type=None):
        if filename == "first.jpg":
            await self.second_done.wait()
        else:
            self.second_done.set()
        self.completed.append(filename)
        return f"image-{filename.split('.')[0]}-1x1-jpg"


class TestUploadCoordinator:
    """Test UploadCoordinator."""

    @pytest.mark.asyncio
    async def test_no_pending_uploads(self, store):
        """Test nothing is uploaded when no image was selected."""
        coordinator = UploadCoordinator(store)

        result = await coordinator.resolve_uploads(FormState())

        assert result == {}
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_results_keyed_by_slot(self):
        """Test out-of-order completion still maps each asset to its slot."""
        store = ReorderingStore()
        state = FormState(
            pending={ig(0): upload("first.jpg"), ig(2): upload("second.jpg")}
        )

        result = await UploadCoordinator(store).resolve_uploads(state)

        assert store.completed == ["second.jpg", "first.jpg"]
        assert result == {
            ig(0): "image-first-1x1-jpg",
            ig(2): "image-second-1x1-jpg",
        }

    @pytest.mark.asyncio
    async def test_failure_lists_failed_slots(self, store):
        """Test a failed upload fails the batch and names the slot."""
        store.failing_uploads = {"broken.jpg"}
        state = FormState(
            pending={ig(0): upload("broken.jpg"), ig(1): upload("fine.jpg")}
        )

        with pytest.raises(UploadFailed) as exc_info:
            await UploadCoordinator(store).resolve_uploads(state)

        assert set(exc_info.value.failures) == {ig(0)}
        assert "instagramImages[0]" in exc_info.value.user_message
        assert store.call_names().count("upload_image") == 2

    @pytest.mark.asyncio
    async def test_concurrency_limit(self):
        """Test no more uploads run at once than allowed."""

        class CountingStore:
            def __init__(self):
                self.active = 0
                self.peak = 0

            async def upload_image(self, data, filename=None, content_type=None):
                self.active += 1
                self.peak = max(self.peak, self.active)
                await asyncio.sleep(0)
                self.active -= 1
                return f"image-{filename}"

        counting = CountingStore()
        state = FormState(pending={ig(i): upload(f"{i}.jpg") for i in range(4)})

        result = await UploadCoordinator(counting, max_concurrency=2).resolve_uploads(state)

        assert len(result) == 4
        assert counting.peak == 2

    def test_concurrency_at_least_one(self, store):
        """Test a zero limit is raised to one."""
        assert UploadCoordinator(store, max_concurrency=0).max_concurrency == 1

    @pytest.mark.asyncio
    async def test_unexpected_error_is_collected(self, store):
        """Test errors other than SanityError are reported per slot."""

        class BrokenStream:
            async def upload_image(self, data, filename=None, content_type=None):
                if filename == "broken.jpg":
                    raise OSError("connection reset")
                return await store.upload_image(data, filename, content_type)

        state = FormState(
            pending={ig(0): upload("broken.jpg"), ig(1): upload("fine.jpg")}
        )

        with pytest.raises(UploadFailed) as exc_info:
            await UploadCoordinator(BrokenStream()).resolve_uploads(state)

        assert exc_info.value.failures == {ig(0): "connection reset"}
        assert store.calls == [("upload_image", "fine.jpg")]


class TestUploadFilenames:
    """Test the filename sent with each upload."""

    @pytest.mark.asyncio
    async def test_product_image_named_after_product(self, store):
        """Test product images are uploaded under the product name."""
        state = FormState(
            values={"name": " Lemon Tart "},
            pending={SlotRef("mainImage"): upload("IMG_0042.jpg")},
        )

        await UploadCoordinator(store, spec=PRODUCT).resolve_uploads(state)

        assert store.calls == [("upload_image", "Lemon Tart")]

    @pytest.mark.asyncio
    async def test_unnamed_product_image(self, store):
        """Test a product without a name falls back to a generic filename."""
        state = FormState(pending={SlotRef("mainImage"): upload("IMG_0042.jpg")})

        await UploadCoordinator(store, spec=PRODUCT).resolve_uploads(state)

        assert store.calls == [("upload_image", "product-image")]

    @pytest.mark.asyncio
    async def test_settings_images_keep_local_name(self, store):
        """Test other images are uploaded under their own filename."""
        state = FormState(
            values={"heroHeadline": "Hi"}, pending={ig(0): upload("cake.jpg")}
        )

        await UploadCoordinator(store, spec=HOME_SETTINGS).resolve_uploads(state)

        assert store.calls == [("upload_image", "cake.jpg")]
