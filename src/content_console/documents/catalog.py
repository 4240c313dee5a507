"""The documents this console edits."""

from dataclasses import dataclass
from typing import Dict, Tuple

from ..models import AboutSettings, HomeSettings, Product, WhatsappButton
from .schema import (
    BooleanField,
    DocumentSpec,
    ImageField,
    ParagraphsField,
    TagsField,
    TextField,
    image_list,
)

MAX_PRODUCT_IMAGE_BYTES = 2 * 1024 * 1024
DEFAULT_PHONE_NUMBER = "+2348012345678"

HOME_SETTINGS = DocumentSpec(
    document_type="homeSettings",
    document_id="homeSettings",
    label="Home Settings",
    model=HomeSettings,
    fields=(
        TextField("heroHeadline"),
        TextField("heroSubline"),
        TextField("instagramHandle", strip_chars="@"),
        TextField("instagramUrl", optional=True),
    ),
    images=(
        ImageField("heroBackgroundImage"),
        image_list("instagramImages", capacity=4, key_prefix="ig"),
    ),
)

ABOUT_SETTINGS = DocumentSpec(
    document_type="aboutSettings",
    document_id="aboutSettings",
    label="About Settings",
    model=AboutSettings,
    fields=(
        TextField("pageTitle"),
        TextField("heroTitle"),
        ParagraphsField("introText", max_blocks=3),
        TextField("whatsappButtonText"),
    ),
    images=(ImageField("founderImage"),),
)

PRODUCT = DocumentSpec(
    document_type="product",
    label="Product",
    model=Product,
    fields=(
        TextField("name", trim=True),
        TextField("shortDescription", trim=True),
        TextField("description", trim=True),
        TextField("category", trim=True),
        TagsField("tags"),
    ),
    images=(ImageField("mainImage", filename_field="name"),),
    max_image_bytes=MAX_PRODUCT_IMAGE_BYTES,
)

SETTINGS: Dict[str, DocumentSpec] = {
    "home": HOME_SETTINGS,
    "about": ABOUT_SETTINGS,
}


@dataclass(frozen=True)
class ButtonPlacement:
    """Where a WhatsApp button appears on the public site."""

    button_id: str
    label: str


BUTTON_PLACEMENTS: Tuple[ButtonPlacement, ...] = (
    ButtonPlacement("homeWpButton", "Hero CTA (Home)"),
    ButtonPlacement("wpButton", "Product Card CTA"),
    ButtonPlacement("footerChatButton", "Footer Link"),
    ButtonPlacement("footerWhatsappUsButton", "Footer CTA"),
    ButtonPlacement("floatingWpButton", "Floating Button"),
    ButtonPlacement("contactWpButton", "Contact Page CTA"),
)

BUTTON_IDS: Tuple[str, ...] = tuple(p.button_id for p in BUTTON_PLACEMENTS)


def button_spec(button_id: str) -> DocumentSpec:
    """Document spec for one of the fixed WhatsApp buttons.

    Raises:
        KeyError: If ``button_id`` is not one of the fixed button ids
    """
    placement = next((p for p in BUTTON_PLACEMENTS if p.button_id == button_id), None)
    if placement is None:
        raise KeyError(button_id)
    return DocumentSpec(
        document_type="whatsappButton",
        document_id=placement.button_id,
        label=placement.label,
        model=WhatsappButton,
        fields=(
            TextField("text"),
            TextField("phoneNumber", default=DEFAULT_PHONE_NUMBER),
            TextField("preMessage"),
            BooleanField("isActive", default=True),
        ),
    )


def default_button(button_id: str) -> WhatsappButton:
    """Button shown for a placement that has never been saved."""
    return WhatsappButton(
        _id=button_id,
        text="",
        phoneNumber=DEFAULT_PHONE_NUMBER,
        preMessage="",
        isActive=True,
    )
