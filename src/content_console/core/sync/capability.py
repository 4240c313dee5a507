"""Write-permission gate checked at the start of every save."""

import logging
import os
from typing import Callable, Optional

from ...config import TOKEN_ENV_VAR
from .errors import PermissionDenied

logger = logging.getLogger(__name__)


class WriteCapability:
    """Grants write access while a write token is available.

    The token source is consulted on every check; the outcome is never
    cached, so revoking the token takes effect on the next save.
    """

    def __init__(self, token_source: Callable[[], Optional[str]]) -> None:
        """Initialize the capability.

        Args:
            token_source: Returns the current write token, or None
        """
        self._token_source = token_source

    @classmethod
    def from_environment(cls, variable: str = TOKEN_ENV_VAR) -> "WriteCapability":
        """Capability backed by an environment variable."""
        return cls(lambda: os.environ.get(variable))

    @classmethod
    def granted(cls, token: str) -> "WriteCapability":
        """Capability with a fixed token."""
        return cls(lambda: token)

    @classmethod
    def denied(cls) -> "WriteCapability":
        """Capability that never grants access."""
        return cls(lambda: None)

    def current_token(self) -> Optional[str]:
        """The token available right now, if any."""
        token = self._token_source()
        return token.strip() if token and token.strip() else None

    def is_granted(self) -> bool:
        """Whether writing is authorized right now."""
        return self.current_token() is not None

    def require(self) -> None:
        """Raise unless writing is authorized.

        Raises:
            PermissionDenied: If no write token is available
        """
        if not self.is_granted():
            logger.warning("Write access denied: no write token configured")
            raise PermissionDenied()
