"""Synchronization module.

Handles local edit state, image uploads, merging and the save life cycle.
"""

from .capability import WriteCapability
from .errors import (
    ContentSyncError,
    FetchFailed,
    FormValidationError,
    InvalidDocument,
    PermissionDenied,
    SessionNotReady,
    UploadFailed,
    WriteFailed,
)
from .form_state import EditSession, FormState, FormStateController, PendingUpload
from .merge_engine import MergeEngine, MergePatch, SlotAction, SlotDecision, merge
from .orchestrator import SaveResult, SessionState, SyncOrchestrator
from .upload_coordinator import UploadCoordinator, UploadOutcome
from .upsert import CollectionWriter, SingletonUpsert

__all__ = [
    # Capability
    "WriteCapability",
    # Errors
    "ContentSyncError",
    "FetchFailed",
    "FormValidationError",
    "InvalidDocument",
    "PermissionDenied",
    "SessionNotReady",
    "UploadFailed",
    "WriteFailed",
    # Local state
    "EditSession",
    "FormState",
    "FormStateController",
    "PendingUpload",
    # Merge
    "MergeEngine",
    "MergePatch",
    "SlotAction",
    "SlotDecision",
    "merge",
    # Orchestration
    "SaveResult",
    "SessionState",
    "SyncOrchestrator",
    "UploadCoordinator",
    "UploadOutcome",
    # Writers
    "CollectionWriter",
    "SingletonUpsert",
]
