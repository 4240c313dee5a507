"""CLI display and formatting utilities."""

from .formatters import (
    display_buttons,
    display_document,
    display_products,
    display_save_result,
)

__all__ = [
    "display_buttons",
    "display_document",
    "display_products",
    "display_save_result",
]
