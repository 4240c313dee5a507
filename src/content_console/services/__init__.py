"""Services for the content console."""

from .buttons_service import ButtonsService
from .product_service import ProductService

__all__ = ["ButtonsService", "ProductService"]
