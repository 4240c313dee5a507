"""Models for the content console."""

from .models import (
    AboutSettings,
    AssetReference,
    HomeSettings,
    ImageSlot,
    PortableTextBlock,
    Product,
    SanityModel,
    Span,
    WhatsappButton,
    image_url,
)

__all__ = [
    "AboutSettings",
    "AssetReference",
    "HomeSettings",
    "ImageSlot",
    "PortableTextBlock",
    "Product",
    "SanityModel",
    "Span",
    "WhatsappButton",
    "image_url",
]
