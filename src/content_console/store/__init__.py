"""Document store access."""

from .sanity_client import SanityClient, SanityError

__all__ = ["SanityClient", "SanityError"]
