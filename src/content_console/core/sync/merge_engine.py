"""Merge engine producing the replacement document for a save.

Combines the last fetched snapshot, the operator's local edits and the asset
ids of freshly uploaded images into one document. The engine is pure: it
performs no I/O and never raises on malformed input.

Scalar fields are overwritten unconditionally with the local value. For each
image slot, in position order:

1. a fresh upload for the slot wins; the slot keeps the stored key at that
   position or gets a key derived from its position;
2. otherwise a stored image the operator did not clear is carried forward
   with its asset and key unchanged;
3. otherwise the slot is left out.
"""

import copy
import logging
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from ...documents.schema import OMIT, DocumentSpec, ImageField, SlotRef, unique_key
from .form_state import FormState, asset_ref_of

logger = logging.getLogger(__name__)


class SlotAction(str, Enum):
    """What the merge did with an image slot."""

    USE_UPLOAD = "use_upload"  # Newly uploaded asset
    CARRY_FORWARD = "carry_forward"  # Stored image kept as is
    OMIT = "omit"  # No image in the output


@dataclass
class SlotDecision:
    """Outcome of merging one image slot."""

    slot: SlotRef
    action: SlotAction
    asset_ref: Optional[str] = None
    key: Optional[str] = None
    reason: str = ""


@dataclass
class MergePatch:
    """Fully resolved document to be written."""

    document_type: str
    document_id: Optional[str]
    fields: Dict[str, Any] = dataclass_field(default_factory=dict)
    decisions: List[SlotDecision] = dataclass_field(default_factory=list)

    def to_document(self) -> Dict[str, Any]:
        """Document body including system fields."""
        document: Dict[str, Any] = {"_type": self.document_type}
        if self.document_id:
            document["_id"] = self.document_id
        document.update(copy.deepcopy(self.fields))
        return document

    def decision_for(self, slot: SlotRef) -> Optional[SlotDecision]:
        """Decision taken for ``slot``, if it was evaluated."""
        for decision in self.decisions:
            if decision.slot == slot:
                return decision
        return None

    def get_summary(self) -> Dict[str, int]:
        """Counts of slot decisions by action."""
        summary = {action.value: 0 for action in SlotAction}
        for decision in self.decisions:
            summary[decision.action.value] += 1
        return summary


class MergeEngine:
    """Builds merge patches for one document category."""

    def __init__(self, spec: DocumentSpec) -> None:
        """Initialize the engine.

        Args:
            spec: Shape of the documents being merged
        """
        self.spec = spec

    def merge(
        self,
        remote: Optional[Mapping[str, Any]],
        local: FormState,
        uploaded: Mapping[SlotRef, str],
        document_id: Optional[str] = None,
    ) -> MergePatch:
        """Merge snapshot, edits and upload results into a patch.

        Args:
            remote: Last fetched document, or None if it does not exist yet
            local: Operator edits
            uploaded: Asset id per slot for images uploaded in this save
            document_id: Id of a collection document; singletons use their
                fixed id

        Returns:
            MergePatch ready to be written
        """
        source: Mapping[str, Any] = remote if isinstance(remote, Mapping) else {}
        patch = MergePatch(
            document_type=self.spec.document_type,
            document_id=self.spec.document_id or document_id or source.get("_id"),
            fields=self.merge_fields(local, source),
        )

        accepted: Dict[SlotRef, str] = {}
        for slot, asset_ref in uploaded.items():
            if self.spec.has_slot(slot) and isinstance(asset_ref, str) and asset_ref:
                accepted[SlotRef(*slot)] = asset_ref
            else:
                logger.debug("Ignoring upload result for unknown slot %r", slot)

        for image_field in self.spec.images:
            if image_field.is_list:
                value = self._merge_image_list(
                    image_field, source.get(image_field.name), local, accepted, patch
                )
                patch.fields[image_field.name] = value
            else:
                value = self._merge_single_image(
                    image_field, source.get(image_field.name), local, accepted, patch
                )
                if value is not None:
                    patch.fields[image_field.name] = value

        logger.debug(
            "Merged %s: %d fields, slots %s",
            self.spec.document_type,
            len(patch.fields),
            patch.get_summary(),
        )
        return patch

    def merge_fields(
        self, local: FormState, remote: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        """Serialize the scalar fields; local values always win."""
        source: Mapping[str, Any] = remote if isinstance(remote, Mapping) else {}
        fields: Dict[str, Any] = {}
        for scalar_field in self.spec.fields:
            value = scalar_field.serialize(
                local.values.get(scalar_field.name), source.get(scalar_field.name)
            )
            if value is not OMIT:
                fields[scalar_field.name] = value
        return fields

    def _merge_single_image(
        self,
        image_field: ImageField,
        remote_value: Any,
        local: FormState,
        uploaded: Mapping[SlotRef, str],
        patch: MergePatch,
    ) -> Optional[Dict[str, Any]]:
        slot = SlotRef(image_field.name, 0)
        decision = self._decide(slot, remote_value, local, uploaded)
        patch.decisions.append(decision)

        if decision.action == SlotAction.USE_UPLOAD:
            return _image_entry(decision.asset_ref)  # type: ignore[arg-type]
        if decision.action == SlotAction.CARRY_FORWARD:
            entry = copy.deepcopy(remote_value)
            entry.pop("_key", None)
            entry.setdefault("_type", "image")
            return entry
        return None

    def _merge_image_list(
        self,
        image_field: ImageField,
        remote_value: Any,
        local: FormState,
        uploaded: Mapping[SlotRef, str],
        patch: MergePatch,
    ) -> List[Dict[str, Any]]:
        remote_items: List[Any] = remote_value if isinstance(remote_value, list) else []
        positions = range(max(image_field.capacity, len(remote_items)))

        decisions: List[SlotDecision] = []
        for position in positions:
            slot = SlotRef(image_field.name, position)
            remote_item = remote_items[position] if position < len(remote_items) else None
            decision = self._decide(slot, remote_item, local, uploaded)
            if decision.action != SlotAction.OMIT and isinstance(remote_item, dict):
                stored_key = remote_item.get("_key")
                if isinstance(stored_key, str) and stored_key:
                    decision.key = stored_key
            decisions.append(decision)

        # Keys are assigned once: derive missing ones from the position while
        # avoiding every key already present in the output
        used_keys = {d.key for d in decisions if d.key}
        for decision in decisions:
            if decision.action != SlotAction.OMIT and not decision.key:
                decision.key = unique_key(
                    f"{image_field.key_prefix}-{decision.slot.position}", used_keys
                )
                used_keys.add(decision.key)

        items: List[Dict[str, Any]] = []
        for decision in decisions:
            patch.decisions.append(decision)
            if decision.action == SlotAction.USE_UPLOAD:
                items.append(_image_entry(decision.asset_ref, decision.key))  # type: ignore[arg-type]
            elif decision.action == SlotAction.CARRY_FORWARD:
                entry = copy.deepcopy(remote_items[decision.slot.position])
                entry["_key"] = decision.key
                entry.setdefault("_type", "image")
                items.append(entry)
        return items

    @staticmethod
    def _decide(
        slot: SlotRef,
        remote_item: Any,
        local: FormState,
        uploaded: Mapping[SlotRef, str],
    ) -> SlotDecision:
        if slot in uploaded:
            return SlotDecision(
                slot=slot,
                action=SlotAction.USE_UPLOAD,
                asset_ref=uploaded[slot],
                reason="new image uploaded",
            )

        stored_ref = asset_ref_of(remote_item)
        if stored_ref and slot not in local.cleared:
            return SlotDecision(
                slot=slot,
                action=SlotAction.CARRY_FORWARD,
                asset_ref=stored_ref,
                reason="stored image unchanged",
            )

        reason = "cleared by operator" if stored_ref else "no image"
        return SlotDecision(slot=slot, action=SlotAction.OMIT, reason=reason)


def _image_entry(asset_ref: str, key: Optional[str] = None) -> Dict[str, Any]:
    entry: Dict[str, Any] = {"_type": "image"}
    if key is not None:
        entry["_key"] = key
    entry["asset"] = {"_type": "reference", "_ref": asset_ref}
    return entry


def merge(
    spec: DocumentSpec,
    remote: Optional[Mapping[str, Any]],
    local: FormState,
    uploaded: Mapping[SlotRef, str],
) -> MergePatch:
    """Merge using a throwaway engine for ``spec``."""
    return MergeEngine(spec).merge(remote, local, uploaded)
