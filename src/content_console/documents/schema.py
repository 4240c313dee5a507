"""Declarative description of editable documents.

A ``DocumentSpec`` lists the scalar fields and image fields of one document
category. Scalar fields know how to turn a stored value into a form value and
back; image fields declare how many slots they hold and how list entries are
keyed.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Tuple, Type

from ..models import SanityModel

# Sentinel returned by ``serialize`` when the field must not appear in the
# written document.
OMIT = object()

_SLOT_PATTERN = re.compile(r"^(?P<field>[A-Za-z_][\w]*)(?:(?:\[|\.)(?P<pos>\d+)\]?)?$")


class SlotRef(NamedTuple):
    """Address of one image slot: field name plus position in that field."""

    field: str
    position: int = 0

    def __str__(self) -> str:
        """Render as ``field[position]``."""
        return f"{self.field}[{self.position}]"

    @classmethod
    def parse(cls, text: str) -> "SlotRef":
        """Parse ``field``, ``field.2`` or ``field[2]``.

        Raises:
            ValueError: If the text is not a slot address
        """
        match = _SLOT_PATTERN.match(text.strip())
        if not match:
            raise ValueError(f"Invalid image slot: {text!r}")
        position = match.group("pos")
        return cls(match.group("field"), int(position) if position else 0)


class ScalarField:
    """Base class for non-image fields."""

    def __init__(self, name: str) -> None:
        """Initialize the field.

        Args:
            name: Field name as stored in the document
        """
        self.name = name

    def initial(self, remote_value: Any) -> Any:
        """Return the form value for a stored value (or ``None``)."""
        raise NotImplementedError

    def normalize(self, value: Any) -> Any:
        """Clean a value entered by the operator."""
        return value

    def serialize(self, local_value: Any, remote_value: Any) -> Any:
        """Return the stored value for a form value, or ``OMIT``."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class TextField(ScalarField):
    """Plain string field."""

    def __init__(
        self,
        name: str,
        optional: bool = False,
        strip_chars: str = "",
        trim: bool = False,
        default: str = "",
    ) -> None:
        """Initialize the text field.

        Args:
            name: Field name
            optional: Omit the field from the document when empty
            strip_chars: Characters removed from edits (e.g. ``@`` in handles)
            trim: Strip surrounding whitespace when saving
            default: Form value when the document has no value
        """
        super().__init__(name)
        self.optional = optional
        self.strip_chars = strip_chars
        self.trim = trim
        self.default = default

    def initial(self, remote_value: Any) -> str:
        if isinstance(remote_value, str):
            return remote_value
        return self.default

    def normalize(self, value: Any) -> str:
        text = "" if value is None else str(value)
        for char in self.strip_chars:
            text = text.replace(char, "")
        return text

    def serialize(self, local_value: Any, remote_value: Any) -> Any:
        text = self.normalize(local_value)
        if self.trim:
            text = text.strip()
        if self.optional and not text:
            return OMIT
        return text


class BooleanField(ScalarField):
    """True/false toggle."""

    def __init__(self, name: str, default: bool = False) -> None:
        super().__init__(name)
        self.default = default

    def initial(self, remote_value: Any) -> bool:
        if isinstance(remote_value, bool):
            return remote_value
        return self.default

    def normalize(self, value: Any) -> bool:
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("1", "true", "yes", "on"):
                return True
            if lowered in ("0", "false", "no", "off"):
                return False
            raise ValueError(f"Not a boolean: {value!r}")
        return bool(value)

    def serialize(self, local_value: Any, remote_value: Any) -> bool:
        return self.normalize(local_value)


class TagsField(ScalarField):
    """Set of free-text tags, edited as a comma separated string."""

    def initial(self, remote_value: Any) -> List[str]:
        if isinstance(remote_value, list):
            return [tag for tag in remote_value if isinstance(tag, str)]
        return []

    def normalize(self, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        tags = [str(tag).strip() for tag in value]
        return list(dict.fromkeys(tag for tag in tags if tag))

    def serialize(self, local_value: Any, remote_value: Any) -> List[str]:
        return self.normalize(local_value)


class ParagraphsField(ScalarField):
    """Portable text edited as a fixed number of plain paragraphs.

    Paragraphs whose text did not change keep their stored block, marks
    included. Changed paragraphs are written as a single unmarked span and
    blank paragraphs are dropped.
    """

    def __init__(self, name: str, max_blocks: int = 3, key_prefix: str = "p") -> None:
        super().__init__(name)
        self.max_blocks = max_blocks
        self.key_prefix = key_prefix

    @staticmethod
    def block_text(block: Any) -> str:
        """Concatenated span text of a stored block."""
        if not isinstance(block, dict):
            return ""
        children = block.get("children") or []
        return "".join(
            child.get("text", "") for child in children if isinstance(child, dict)
        )

    def initial(self, remote_value: Any) -> List[str]:
        if not isinstance(remote_value, list):
            return []
        return [self.block_text(block) for block in remote_value]

    def normalize(self, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return ["" if text is None else str(text) for text in value]

    def serialize(self, local_value: Any, remote_value: Any) -> List[Dict[str, Any]]:
        remote_blocks = remote_value if isinstance(remote_value, list) else []
        blocks: List[Dict[str, Any]] = []
        used_keys = {
            block.get("_key")
            for block in remote_blocks
            if isinstance(block, dict) and block.get("_key")
        }

        # Paragraph i pairs with stored block i even when earlier ones are blank
        for index, text in enumerate(self.normalize(local_value)):
            if not text.strip():
                continue
            remote_block = remote_blocks[index] if index < len(remote_blocks) else None
            key = remote_block.get("_key") if isinstance(remote_block, dict) else None
            if not key:
                key = unique_key(f"{self.key_prefix}-{index}", used_keys)
                used_keys.add(key)

            if self.block_text(remote_block) == text:
                block = dict(remote_block)  # type: ignore[arg-type]
                block["_key"] = key
            else:
                block = {
                    "_type": "block",
                    "_key": key,
                    "style": "normal",
                    "markDefs": [],
                    "children": [
                        {"_type": "span", "_key": f"{key}-s0", "text": text, "marks": []}
                    ],
                }
            blocks.append(block)
        return blocks


@dataclass(frozen=True)
class ImageField:
    """Image field holding one slot, or a list of keyed slots."""

    name: str
    capacity: int = 1
    key_prefix: Optional[str] = None
    # Text field whose value names uploaded files instead of the local name
    filename_field: Optional[str] = None

    @property
    def is_list(self) -> bool:
        """Whether the field is stored as an array of keyed images."""
        return self.key_prefix is not None

    def slots(self) -> Iterator[SlotRef]:
        """All slot addresses of this field in position order."""
        for position in range(self.capacity):
            yield SlotRef(self.name, position)


def image_list(name: str, capacity: int, key_prefix: str) -> ImageField:
    """Declare an array image field."""
    return ImageField(name=name, capacity=capacity, key_prefix=key_prefix)


def unique_key(candidate: str, used: "set[str]") -> str:
    """Return ``candidate``, suffixed with ``-<n>`` if it is already used."""
    if candidate not in used:
        return candidate
    suffix = 1
    while f"{candidate}-{suffix}" in used:
        suffix += 1
    return f"{candidate}-{suffix}"


@dataclass(frozen=True)
class DocumentSpec:
    """Editable shape of one document category."""

    document_type: str
    label: str
    model: Type[SanityModel]
    fields: Tuple[ScalarField, ...] = ()
    images: Tuple[ImageField, ...] = ()
    document_id: Optional[str] = None
    max_image_bytes: Optional[int] = None

    @property
    def is_singleton(self) -> bool:
        """Singletons are stored under a fixed, well-known id."""
        return self.document_id is not None

    def field(self, name: str) -> ScalarField:
        """Look up a scalar field by name.

        Raises:
            KeyError: If the document has no such field
        """
        for candidate in self.fields:
            if candidate.name == name:
                return candidate
        raise KeyError(name)

    def image_field(self, name: str) -> ImageField:
        """Look up an image field by name.

        Raises:
            KeyError: If the document has no such image field
        """
        for candidate in self.images:
            if candidate.name == name:
                return candidate
        raise KeyError(name)

    def has_slot(self, slot: Any) -> bool:
        """Whether ``slot`` addresses a declared image slot."""
        if not isinstance(slot, tuple) or len(slot) != 2:
            return False
        name, position = slot
        if not isinstance(position, int):
            return False
        try:
            image_field = self.image_field(name)
        except KeyError:
            return False
        return 0 <= position < image_field.capacity

    def slot_refs(self) -> List[SlotRef]:
        """Every declared slot, fields in declaration order."""
        return [slot for image_field in self.images for slot in image_field.slots()]
