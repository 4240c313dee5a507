"""Shared fixtures for content console tests."""

import copy
from typing import Any, Dict, List, Optional, Set, Tuple
from unittest.mock import Mock

import pytest

from content_console.config import Config
from content_console.core.sync import PendingUpload, WriteCapability
from content_console.models import image_url
from content_console.store import SanityError


class FakeStore:
    """In-memory stand-in for SanityClient recording every call."""

    def __init__(self, config: Config) -> None:
        self.config = config
        self.documents: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self.calls: List[Tuple[str, Any]] = []
        self.failing_uploads: Set[str] = set()
        self.fail_fetch = False
        self.fail_write = False
        self._next_asset = 0
        self._next_document = 0

    async def __aenter__(self) -> "FakeStore":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        return None

    def add(self, document: Dict[str, Any]) -> None:
        self.documents[(document["_type"], document["_id"])] = copy.deepcopy(document)

    def get(self, document_type: str, document_id: str) -> Optional[Dict[str, Any]]:
        return self.documents.get((document_type, document_id))

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]

    async def fetch_document(
        self, document_type: str, document_id: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        self.calls.append(("fetch_document", (document_type, document_id)))
        if self.fail_fetch:
            raise SanityError("Sanity error 503: unavailable", 503)
        for (stored_type, stored_id), document in self.documents.items():
            if stored_type == document_type and (
                document_id is None or stored_id == document_id
            ):
                return copy.deepcopy(document)
        return None

    async def fetch_documents(
        self, document_type: str, ids: Any = None, order: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        self.calls.append(("fetch_documents", (document_type, ids, order)))
        if self.fail_fetch:
            raise SanityError("Sanity error 503: unavailable", 503)
        wanted = set(ids) if ids is not None else None
        return [
            copy.deepcopy(document)
            for (stored_type, stored_id), document in self.documents.items()
            if stored_type == document_type and (wanted is None or stored_id in wanted)
        ]

    async def upload_image(
        self,
        data: bytes,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> str:
        self.calls.append(("upload_image", filename))
        if filename in self.failing_uploads:
            raise SanityError("Sanity error 500: upload rejected", 500)
        self._next_asset += 1
        return f"image-new{self._next_asset}-800x600-jpg"

    async def create_or_replace(self, document: Dict[str, Any]) -> str:
        self.calls.append(("create_or_replace", copy.deepcopy(document)))
        if self.fail_write:
            raise SanityError("Sanity error 409: conflict", 409)
        self.add(document)
        return document["_id"]

    async def create(self, document: Dict[str, Any]) -> str:
        self.calls.append(("create", copy.deepcopy(document)))
        if self.fail_write:
            raise SanityError("Sanity error 409: conflict", 409)
        self._next_document += 1
        stored = dict(document, _id=f"product-{self._next_document}")
        self.add(stored)
        return stored["_id"]

    async def patch(
        self,
        document_id: str,
        set_fields: Optional[Dict[str, Any]] = None,
        unset_fields: Optional[List[str]] = None,
    ) -> str:
        self.calls.append(("patch", (document_id, set_fields, unset_fields)))
        if self.fail_write:
            raise SanityError("Sanity error 409: conflict", 409)
        for key, document in self.documents.items():
            if key[1] == document_id:
                document.update(copy.deepcopy(set_fields or {}))
                for name in unset_fields or []:
                    document.pop(name, None)
        return document_id

    def image_url(self, asset_ref: str) -> str:
        return image_url(self.config.cdn_host, asset_ref)


def stored_image(asset_ref: str, key: Optional[str] = None) -> Dict[str, Any]:
    """Image entry as Sanity stores it."""
    entry: Dict[str, Any] = {"_type": "image"}
    if key is not None:
        entry["_key"] = key
    entry["asset"] = {"_type": "reference", "_ref": asset_ref}
    return entry


def upload(filename: str = "photo.jpg", size: int = 16) -> PendingUpload:
    """Small in-memory image selection."""
    return PendingUpload(data=b"x" * size, filename=filename, content_type="image/jpeg")


@pytest.fixture
def mock_config():
    """Create a mock config."""
    config = Mock(spec=Config)
    config.project_id = "abc123"
    config.dataset = "production"
    config.api_version = "2024-01-01"
    config.api_host = "https://abc123.api.sanity.io/v2024-01-01"
    config.cdn_host = "https://cdn.sanity.io/images/abc123/production"
    config.token = "secret-token"
    config.request_timeout = 30.0
    config.upload_concurrency = 4
    return config


@pytest.fixture
def store(mock_config):
    """Create an empty in-memory store."""
    return FakeStore(mock_config)


@pytest.fixture
def granted():
    """Capability that always grants write access."""
    return WriteCapability.granted("secret-token")


@pytest.fixture
def home_document():
    """Stored home settings with two Instagram images."""
    return {
        "_id": "homeSettings",
        "_type": "homeSettings",
        "_rev": "rev-1",
        "heroHeadline": "Fresh bakes daily",
        "heroSubline": "Cakes, pastries and more",
        "heroBackgroundImage": stored_image("image-hero-1920x1080-jpg"),
        "instagramHandle": "bakery",
        "instagramUrl": "https://instagram.com/bakery",
        "instagramImages": [
            stored_image("image-aaa-600x600-jpg", "k1"),
            stored_image("image-bbb-600x600-jpg", "k2"),
        ],
    }
