"""Content Console.

Admin tool for the marketing content of the public site: home and about page
settings, WhatsApp call-to-action buttons and the product catalog, all stored
as Sanity documents.
"""

__version__ = "1.0.0"

from .config import Config
from .core.sync import SaveResult, SessionState, SyncOrchestrator, WriteCapability
from .documents import ABOUT_SETTINGS, HOME_SETTINGS, PRODUCT
from .store import SanityClient

__all__ = [
    "ABOUT_SETTINGS",
    "Config",
    "HOME_SETTINGS",
    "PRODUCT",
    "SanityClient",
    "SaveResult",
    "SessionState",
    "SyncOrchestrator",
    "WriteCapability",
]
