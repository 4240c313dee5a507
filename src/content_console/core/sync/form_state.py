"""Local edit state kept apart from the remote snapshot.

``FormStateController`` owns the operator's in-progress edits: scalar values,
images selected but not yet uploaded, and slots the operator cleared. It never
talks to the store. ``EditSession`` pairs it with the snapshot it was created
from so the merge step can be fed both explicitly.
"""

import copy
import logging
import mimetypes
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from ...documents.schema import DocumentSpec, ImageField, SlotRef
from .errors import FormValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingUpload:
    """Image bytes chosen by the operator and not yet stored."""

    data: bytes = dataclass_field(repr=False)
    filename: str = "image"
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        """Payload size in bytes."""
        return len(self.data)

    @classmethod
    def from_path(cls, path: Path) -> "PendingUpload":
        """Read an image file from disk."""
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            data=path.read_bytes(),
            filename=path.name,
            content_type=content_type or "application/octet-stream",
        )


@dataclass
class FormState:
    """Snapshot of the operator's edits handed to upload and merge."""

    values: Dict[str, Any] = dataclass_field(default_factory=dict)
    pending: Dict[SlotRef, PendingUpload] = dataclass_field(default_factory=dict)
    cleared: Set[SlotRef] = dataclass_field(default_factory=set)

    @property
    def has_pending_uploads(self) -> bool:
        """Whether any slot holds an image that still needs uploading."""
        return bool(self.pending)


class FormStateController:
    """Mutable local model of one document being edited."""

    def __init__(self, spec: DocumentSpec, remote: Optional[Dict[str, Any]]) -> None:
        """Initialize the form from the last fetched snapshot.

        Args:
            spec: Shape of the document being edited
            remote: Snapshot the edits start from; None if never saved
        """
        self.spec = spec
        source = remote or {}
        self._state = FormState(
            values={f.name: f.initial(source.get(f.name)) for f in spec.fields}
        )

    @property
    def state(self) -> FormState:
        """Current edits."""
        return self._state

    def get(self, name: str) -> Any:
        """Current form value of a scalar field."""
        self._require_field(name)
        return self._state.values[name]

    def set_field(self, name: str, value: Any) -> None:
        """Replace the value of a scalar field.

        Raises:
            FormValidationError: If the field does not exist or the value
                cannot be interpreted
        """
        scalar_field = self._require_field(name)
        try:
            normalized = scalar_field.normalize(value)
        except ValueError as e:
            raise FormValidationError(f"{name}: {e}") from e
        self._state.values[name] = normalized
        logger.debug("Field %s updated", name)

    def set_paragraph(self, name: str, index: int, text: str) -> None:
        """Replace one paragraph of a paragraphs field, padding with blanks.

        Raises:
            FormValidationError: If the field has no paragraph ``index``
        """
        scalar_field = self._require_field(name)
        max_blocks = getattr(scalar_field, "max_blocks", None)
        if max_blocks is None:
            raise FormValidationError(f"{name} is not a paragraphs field")
        if not 0 <= index < max_blocks:
            raise FormValidationError(
                f"{name} holds at most {max_blocks} paragraphs (got index {index})"
            )
        paragraphs: List[str] = list(self._state.values.get(name) or [])
        while len(paragraphs) <= index:
            paragraphs.append("")
        paragraphs[index] = text
        self._state.values[name] = paragraphs

    def attach_image(self, slot: SlotRef, upload: PendingUpload) -> None:
        """Select a new image for a slot; it is uploaded on save.

        Raises:
            FormValidationError: If the slot does not exist or the image
                exceeds the document's size limit
        """
        self._require_slot(slot)
        limit = self.spec.max_image_bytes
        if limit is not None and upload.size > limit:
            raise FormValidationError(
                f"Image must be under {limit // (1024 * 1024)}MB"
            )
        self._state.pending[slot] = upload
        self._state.cleared.discard(slot)
        logger.debug("Image selected for %s (%d bytes)", slot, upload.size)

    def clear_image(self, slot: SlotRef) -> None:
        """Remove the image from a slot, discarding any pending selection."""
        self._require_slot(slot)
        self._state.pending.pop(slot, None)
        self._state.cleared.add(slot)

    def _require_field(self, name: str) -> Any:
        try:
            return self.spec.field(name)
        except KeyError:
            raise FormValidationError(
                f"{self.spec.label} has no field {name!r}"
            ) from None

    def _require_slot(self, slot: SlotRef) -> ImageField:
        if not self.spec.has_slot(slot):
            raise FormValidationError(
                f"{self.spec.label} has no image slot {slot}"
            )
        return self.spec.image_field(slot.field)


@dataclass
class EditSession:
    """The remote snapshot and the local edits derived from it."""

    remote: Optional[Dict[str, Any]]
    form: FormStateController

    @classmethod
    def start(
        cls, spec: DocumentSpec, remote: Optional[Dict[str, Any]]
    ) -> "EditSession":
        """Begin editing from a freshly fetched snapshot."""
        snapshot = copy.deepcopy(remote) if remote is not None else None
        return cls(remote=snapshot, form=FormStateController(spec, snapshot))

    def stored_images(self) -> Dict[SlotRef, Dict[str, Any]]:
        """Images present in the snapshot, by slot."""
        images: Dict[SlotRef, Dict[str, Any]] = {}
        if not self.remote:
            return images
        for image_field in self.form.spec.images:
            value = self.remote.get(image_field.name)
            if image_field.is_list:
                entries = value if isinstance(value, list) else []
            else:
                entries = [value]
            for position, entry in enumerate(entries):
                if asset_ref_of(entry):
                    images[SlotRef(image_field.name, position)] = entry
        return images


def asset_ref_of(entry: Any) -> Optional[str]:
    """Asset id referenced by a stored image entry, if any."""
    if not isinstance(entry, dict):
        return None
    asset = entry.get("asset")
    if not isinstance(asset, dict):
        return None
    ref = asset.get("_ref")
    return ref if isinstance(ref, str) and ref else None
