"""Product catalog access."""

import logging
from typing import List, Optional

from pydantic import ValidationError

from ..core.sync.capability import WriteCapability
from ..core.sync.errors import FetchFailed
from ..core.sync.orchestrator import SyncOrchestrator
from ..documents.catalog import PRODUCT
from ..models import Product
from ..store import SanityClient, SanityError

logger = logging.getLogger(__name__)


class ProductService:
    """Lists products and opens create/update sessions."""

    def __init__(self, store: SanityClient, capability: WriteCapability) -> None:
        self.store = store
        self.capability = capability

    async def list_products(self) -> List[Product]:
        """Fetch all products, newest first.

        Raises:
            FetchFailed: If the catalog could not be read
        """
        try:
            documents = await self.store.fetch_documents(
                PRODUCT.document_type, order="_createdAt desc"
            )
        except SanityError as e:
            raise FetchFailed(f"Failed to load products: {e}") from e

        products = []
        for document in documents:
            try:
                products.append(Product.model_validate(document))
            except ValidationError as e:
                logger.warning("Skipping malformed product %s: %s", document.get("_id"), e)
        return products

    def editor(self, product_id: Optional[str] = None) -> SyncOrchestrator:
        """Session creating a product (no id) or updating ``product_id``."""
        return SyncOrchestrator(
            PRODUCT, self.store, self.capability, document_id=product_id
        )
