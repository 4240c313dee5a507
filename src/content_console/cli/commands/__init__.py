"""CLI command modules."""

from .buttons import buttons
from .products import products
from .settings import settings

__all__ = [
    "buttons",
    "products",
    "settings",
]
