"""Editable document declarations."""

from .catalog import (
    ABOUT_SETTINGS,
    BUTTON_IDS,
    BUTTON_PLACEMENTS,
    HOME_SETTINGS,
    PRODUCT,
    SETTINGS,
    ButtonPlacement,
    button_spec,
    default_button,
)
from .schema import (
    OMIT,
    BooleanField,
    DocumentSpec,
    ImageField,
    ParagraphsField,
    ScalarField,
    SlotRef,
    TagsField,
    TextField,
    image_list,
)

__all__ = [
    "ABOUT_SETTINGS",
    "BUTTON_IDS",
    "BUTTON_PLACEMENTS",
    "HOME_SETTINGS",
    "PRODUCT",
    "SETTINGS",
    "ButtonPlacement",
    "button_spec",
    "default_button",
    "OMIT",
    "BooleanField",
    "DocumentSpec",
    "ImageField",
    "ParagraphsField",
    "ScalarField",
    "SlotRef",
    "TagsField",
    "TextField",
    "image_list",
]
