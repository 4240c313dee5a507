"""Basic tests for configuration, logging, models and the write gate."""

import logging

import pytest
from pydantic import ValidationError

from content_console.config import Config
from content_console.core.sync import PermissionDenied, WriteCapability
from content_console.core.sync.errors import WRITE_ACCESS_DISABLED_MESSAGE, UploadFailed
from content_console.documents import SlotRef, default_button
from content_console.models import (
    AboutSettings,
    HomeSettings,
    PortableTextBlock,
    Product,
    WhatsappButton,
    image_url,
)
from content_console.utils.logging_config import (
    LevelColorFormatter,
    configure_third_party_loggers,
    setup_logging,
)


class TestConfig:
    """Test configuration management."""

    def test_config_defaults(self, monkeypatch):
        """Test defaults when nothing is configured."""
        for name in (
            "SANITY_DATASET",
            "SANITY_API_VERSION",
            "SANITY_TOKEN",
            "CONTENT_CONSOLE_REQUEST_TIMEOUT",
            "CONTENT_CONSOLE_UPLOAD_CONCURRENCY",
            "CONTENT_CONSOLE_LOG_LEVEL",
        ):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("SANITY_PROJECT_ID", "abc123")

        config = Config()

        assert config.dataset == "production"
        assert config.token is None
        assert config.request_timeout == 30.0
        assert config.upload_concurrency == 4
        assert config.log_level == "INFO"
        assert config.api_host == "https://abc123.api.sanity.io/v2024-01-01"
        assert config.cdn_host == "https://cdn.sanity.io/images/abc123/production"

    def test_config_from_environment(self, monkeypatch):
        """Test environment overrides."""
        monkeypatch.setenv("SANITY_PROJECT_ID", "xyz")
        monkeypatch.setenv("SANITY_DATASET", "staging")
        monkeypatch.setenv("SANITY_API_VERSION", "v2023-05-03")
        monkeypatch.setenv("CONTENT_CONSOLE_UPLOAD_CONCURRENCY", "0")
        monkeypatch.setenv("CONTENT_CONSOLE_LOG_LEVEL", "debug")

        config = Config()

        assert config.api_host == "https://xyz.api.sanity.io/v2023-05-03"
        assert config.upload_concurrency == 1
        assert config.log_level == "DEBUG"


class TestWriteCapability:
    """Test the write-permission gate."""

    def test_granted(self):
        """Test a token grants access."""
        capability = WriteCapability.granted("token")

        assert capability.is_granted()
        capability.require()

    def test_denied(self):
        """Test no token denies access with the payment message."""
        with pytest.raises(PermissionDenied) as exc_info:
            WriteCapability.denied().require()

        assert exc_info.value.user_message == WRITE_ACCESS_DISABLED_MESSAGE

    def test_blank_token_denies(self):
        """Test a whitespace token counts as missing."""
        assert not WriteCapability.granted("   ").is_granted()

    def test_environment_read_each_time(self, monkeypatch):
        """Test the environment is consulted on every check."""
        monkeypatch.delenv("SANITY_TOKEN", raising=False)
        capability = WriteCapability.from_environment()
        assert not capability.is_granted()

        monkeypatch.setenv("SANITY_TOKEN", "abc")
        assert capability.is_granted()
        assert capability.current_token() == "abc"


class TestModels:
    """Test document models."""

    def test_home_settings_from_document(self, home_document):
        """Test stored documents parse with wire names."""
        settings = HomeSettings.model_validate(home_document)

        assert settings.hero_headline == "Fresh bakes daily"
        assert settings.instagram_images[1].key == "k2"
        assert settings.instagram_images[1].asset_ref == "image-bbb-600x600-jpg"
        assert settings.hero_background_image.key is None

    def test_headline_length(self):
        """Test the hero headline is limited to 60 characters."""
        with pytest.raises(ValidationError):
            HomeSettings(heroHeadline="x" * 61)

    def test_null_instagram_entries_dropped(self):
        """Test null list entries are ignored."""
        settings = HomeSettings.model_validate({"instagramImages": [None]})

        assert settings.instagram_images == []

    def test_about_intro_limit(self):
        """Test the about intro holds at most three paragraphs."""
        blocks = [PortableTextBlock().model_dump(by_alias=True) for _ in range(4)]

        with pytest.raises(ValidationError):
            AboutSettings.model_validate({"introText": blocks})

    def test_portable_text_plain_text(self):
        """Test span texts are joined."""
        block = PortableTextBlock.model_validate(
            {"children": [{"text": "Hello "}, {"text": "world", "marks": ["strong"]}]}
        )

        assert block.plain_text == "Hello world"

    def test_to_document_uses_wire_names(self):
        """Test dumping uses camelCase and system field names."""
        document = default_button("wpButton").to_document()

        assert document == {
            "_id": "wpButton",
            "_type": "whatsappButton",
            "text": "",
            "phoneNumber": "+2348012345678",
            "preMessage": "",
            "isActive": True,
        }

    def test_whatsapp_preview_link(self):
        """Test the wa.me link strips the plus sign and encodes the message."""
        button = WhatsappButton(
            _id="homeWpButton", phoneNumber="+234 801 234 5678", preMessage="Hi there!"
        )

        assert button.preview_link == "https://wa.me/2348012345678?text=Hi%20there%21"

    def test_product_requires_name(self):
        """Test products need a name."""
        with pytest.raises(ValidationError):
            Product(name="")

    def test_product_tags_unique(self):
        """Test duplicate tags collapse."""
        assert Product(name="Cake", tags=["a", "b", "a"]).tags == ["a", "b"]

    def test_image_url(self):
        """Test asset ids map to CDN file names."""
        assert image_url(
            "https://cdn.sanity.io/images/p/d/", "image-Tb9Ew8CXIwaY6R1kjMvI0uRR-2000x3000-jpg"
        ) == "https://cdn.sanity.io/images/p/d/Tb9Ew8CXIwaY6R1kjMvI0uRR-2000x3000.jpg"


class TestErrors:
    """Test error messages."""

    def test_upload_failed_lists_slots(self):
        """Test the message names every failed slot in order."""
        error = UploadFailed(
            {SlotRef("instagramImages", 2): "boom", SlotRef("heroBackgroundImage"): "x"}
        )

        assert error.user_message == (
            "Image upload failed: heroBackgroundImage[0], instagramImages[2]"
        )


@pytest.fixture
def restore_root_logger():
    """Remove the handlers installed by setup_logging after the test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


class TestLogging:
    """Test logging setup."""

    def test_setup_logging_with_file(self, restore_root_logger, tmp_path):
        """Test a console handler and a rotating file handler are installed."""
        log_file = tmp_path / "logs" / "console.log"

        setup_logging("debug", log_file=log_file)
        logging.getLogger("content_console.test").info("saved homeSettings")

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 2
        for handler in restore_root_logger.handlers:
            handler.flush()
        assert "saved homeSettings" in log_file.read_text()

    def test_unknown_level_falls_back_to_info(self, restore_root_logger):
        """Test an unknown level name is treated as INFO."""
        setup_logging("chatty")

        assert restore_root_logger.level == logging.INFO
        assert len(restore_root_logger.handlers) == 1

    def test_level_color_formatter(self):
        """Test the level name is coloured without altering the record."""
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "boom", None, None)

        text = LevelColorFormatter("%(levelname)s %(message)s").format(record)

        assert text.startswith("\033[31mERROR")
        assert text.endswith("boom")
        assert record.levelname == "ERROR"

    def test_third_party_loggers_quieted(self):
        """Test HTTP client logs are limited to warnings."""
        configure_third_party_loggers()

        assert logging.getLogger("aiohttp.client").level == logging.WARNING
