"""Data models for documents managed by the content console.

The models mirror the document shapes stored in Sanity. Field names are
snake_case in Python and camelCase on the wire; system fields keep their
underscore-prefixed names (``_id``, ``_type``, ``_key``, ``_ref``) as aliases.
"""

from typing import Any, Dict, List, Literal, Optional
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class SanityModel(BaseModel):
    """Base model with camelCase aliases that accepts unknown fields."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    def to_document(self) -> Dict[str, Any]:
        """Dump the model using wire names, dropping unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


class AssetReference(SanityModel):
    """Reference from an image slot to a stored asset."""

    type_: Literal["reference"] = Field(default="reference", alias="_type")
    ref: str = Field(alias="_ref", min_length=1)


class ImageSlot(SanityModel):
    """An image attached to a document field.

    ``key`` is only present for images stored inside an array field.
    """

    type_: Literal["image"] = Field(default="image", alias="_type")
    key: Optional[str] = Field(default=None, alias="_key")
    asset: AssetReference

    @property
    def asset_ref(self) -> str:
        """Identifier of the referenced asset."""
        return self.asset.ref


class Span(SanityModel):
    """Run of text inside a portable text block."""

    type_: Literal["span"] = Field(default="span", alias="_type")
    key: Optional[str] = Field(default=None, alias="_key")
    text: str = ""
    marks: List[str] = Field(default_factory=list)


class PortableTextBlock(SanityModel):
    """A paragraph of portable text."""

    type_: Literal["block"] = Field(default="block", alias="_type")
    key: Optional[str] = Field(default=None, alias="_key")
    style: str = "normal"
    children: List[Span] = Field(default_factory=list)
    mark_defs: List[Dict[str, Any]] = Field(default_factory=list)

    @property
    def plain_text(self) -> str:
        """Text of the paragraph without marks."""
        return "".join(child.text for child in self.children)


class HomeSettings(SanityModel):
    """Home page settings singleton."""

    id: str = Field(default="homeSettings", alias="_id")
    type_: Literal["homeSettings"] = Field(default="homeSettings", alias="_type")
    hero_headline: str = Field(default="", max_length=60)
    hero_subline: str = Field(default="", max_length=120)
    hero_background_image: Optional[ImageSlot] = None
    instagram_handle: str = ""
    instagram_url: Optional[str] = None
    instagram_images: List[ImageSlot] = Field(default_factory=list)

    @field_validator("instagram_images", mode="before")
    @classmethod
    def drop_empty_images(cls, value: Any) -> Any:
        """Treat null entries of a stored list as absent."""
        if isinstance(value, list):
            return [item for item in value if item]
        return value


class AboutSettings(SanityModel):
    """About page settings singleton."""

    id: str = Field(default="aboutSettings", alias="_id")
    type_: Literal["aboutSettings"] = Field(default="aboutSettings", alias="_type")
    page_title: str = Field(default="", max_length=60)
    hero_title: str = Field(default="", max_length=90)
    intro_text: List[PortableTextBlock] = Field(default_factory=list, max_length=3)
    founder_image: Optional[ImageSlot] = None
    whatsapp_button_text: str = ""


class WhatsappButton(SanityModel):
    """Call-to-action button opening a WhatsApp chat."""

    id: str = Field(alias="_id")
    type_: Literal["whatsappButton"] = Field(
        default="whatsappButton", alias="_type"
    )
    text: str = ""
    phone_number: str = ""
    pre_message: str = ""
    is_active: bool = True

    @property
    def preview_link(self) -> str:
        """Link the public site renders for this button."""
        phone = self.phone_number.replace("+", "").replace(" ", "")
        return f"https://wa.me/{phone}?text={quote(self.pre_message)}"


class Product(SanityModel):
    """Catalog product."""

    id: Optional[str] = Field(default=None, alias="_id")
    type_: Literal["product"] = Field(default="product", alias="_type")
    name: str = Field(min_length=1)
    short_description: str = ""
    description: str = ""
    category: str = ""
    tags: List[str] = Field(default_factory=list)
    main_image: Optional[ImageSlot] = None

    @field_validator("tags")
    @classmethod
    def unique_tags(cls, value: List[str]) -> List[str]:
        """Tags form a set; keep first occurrence order."""
        return list(dict.fromkeys(value))


def image_url(cdn_host: str, asset_ref: str) -> str:
    """Build the CDN URL of an image asset.

    Asset ids look like ``image-<hash>-<width>x<height>-<format>`` and are
    served as ``<hash>-<width>x<height>.<format>``.

    Args:
        cdn_host: Base URL including project id and dataset
        asset_ref: Asset document id

    Returns:
        Absolute image URL
    """
    name = asset_ref[len("image-") :] if asset_ref.startswith("image-") else asset_ref
    stem, sep, extension = name.rpartition("-")
    if sep:
        name = f"{stem}.{extension}"
    return f"{cdn_host.rstrip('/')}/{name}"
