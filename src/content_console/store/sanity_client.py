"""Async client for the Sanity HTTP API.

Covers the three store operations the console needs (querying documents,
uploading image assets, committing mutations) and nothing more. No retries are
performed here; callers decide what a failure means.
"""

import asyncio
import json
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

import aiohttp

from ..config import Config
from ..models import image_url

logger = logging.getLogger(__name__)


class SanityError(Exception):
    """Raised when a Sanity API call fails."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        """Initialize with a message and the HTTP status, if any."""
        super().__init__(message)
        self.status = status


class SanityClient:
    """Client for one Sanity project and dataset."""

    def __init__(
        self,
        config: Config,
        session: Optional[aiohttp.ClientSession] = None,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Application configuration
            session: Optional shared HTTP session (owned by the caller)
            token_provider: Returns the API token for each request; defaults
                to the token in the configuration
        """
        self.config = config
        self._session = session
        self._owns_session = session is None
        self._token_provider = token_provider or (lambda: config.token)

    async def __aenter__(self) -> "SanityClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.request_timeout)
            )
        return self._session

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self._token_provider()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if extra:
            headers.update(extra)
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json_body: Optional[Any] = None,
        data: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        url = f"{self.config.api_host}/{path.lstrip('/')}"
        try:
            async with self._get_session().request(
                method,
                url,
                params=params,
                json=json_body,
                data=data,
                headers=self._headers(headers),
            ) as response:
                text = await response.text()
                payload = _decode(text)
                if response.status >= 400:
                    raise SanityError(
                        _error_message(payload, response.status), response.status
                    )
                return payload
        except aiohttp.ClientError as e:
            raise SanityError(f"Request to Sanity failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise SanityError(f"Request to Sanity timed out: {method} {path}") from e

    async def query(self, groq: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Run a GROQ query against the published perspective.

        Args:
            groq: Query text
            params: Query parameters, referenced as ``$name`` in the query

        Returns:
            The query result
        """
        query_params = {"query": groq, "perspective": "published"}
        for name, value in (params or {}).items():
            query_params[f"${name}"] = json.dumps(value)

        logger.debug("GROQ query: %s %s", groq, params or {})
        payload = await self._request(
            "GET", f"data/query/{self.config.dataset}", params=query_params
        )
        if not isinstance(payload, dict) or "result" not in payload:
            raise SanityError("Malformed query response")
        return payload["result"]

    async def fetch_document(
        self, document_type: str, document_id: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """Fetch the latest document of a type, optionally by id.

        Returns:
            The document, or None if none exists
        """
        if document_id:
            result = await self.query(
                "*[_type == $type && _id == $id][0]",
                {"type": document_type, "id": document_id},
            )
        else:
            result = await self.query("*[_type == $type][0]", {"type": document_type})
        return result if isinstance(result, dict) else None

    async def fetch_documents(
        self,
        document_type: str,
        ids: Optional[Iterable[str]] = None,
        order: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Fetch all documents of a type, optionally restricted to ids."""
        params: Dict[str, Any] = {"type": document_type}
        groq = "*[_type == $type"
        if ids is not None:
            params["ids"] = list(ids)
            groq += " && _id in $ids"
        groq += "]"
        if order:
            groq += f" | order({order})"
        result = await self.query(groq, params)
        if not isinstance(result, list):
            return []
        return [item for item in result if isinstance(item, dict)]

    async def upload_image(
        self,
        data: bytes,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> str:
        """Upload an image and return the id of the created asset."""
        params = {"filename": filename} if filename else None
        payload = await self._request(
            "POST",
            f"assets/images/{self.config.dataset}",
            params=params,
            data=data,
            headers={"Content-Type": content_type or "application/octet-stream"},
        )
        document = payload.get("document") if isinstance(payload, dict) else None
        asset_id = document.get("_id") if isinstance(document, dict) else None
        if not asset_id:
            raise SanityError("Upload response did not include an asset id")
        logger.info("Uploaded image %s as %s", filename or "<unnamed>", asset_id)
        return asset_id

    async def mutate(self, mutations: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Commit mutations in one transaction."""
        payload = await self._request(
            "POST",
            f"data/mutate/{self.config.dataset}",
            params={"returnIds": "true", "visibility": "sync"},
            json_body={"mutations": mutations},
        )
        if not isinstance(payload, dict):
            raise SanityError("Malformed mutation response")
        return payload

    async def create_or_replace(self, document: Dict[str, Any]) -> str:
        """Create the document or replace it wholesale; returns its id."""
        if not document.get("_id"):
            raise SanityError("createOrReplace requires a document _id")
        await self.mutate([{"createOrReplace": document}])
        return document["_id"]

    async def create(self, document: Dict[str, Any]) -> str:
        """Create a document, letting the server assign an id if absent."""
        payload = await self.mutate([{"create": document}])
        return _first_result_id(payload) or document.get("_id", "")

    async def patch(
        self,
        document_id: str,
        set_fields: Optional[Dict[str, Any]] = None,
        unset_fields: Optional[List[str]] = None,
    ) -> str:
        """Set and unset fields of an existing document."""
        operation: Dict[str, Any] = {"id": document_id}
        if set_fields:
            operation["set"] = set_fields
        if unset_fields:
            operation["unset"] = unset_fields
        await self.mutate([{"patch": operation}])
        return document_id

    def image_url(self, asset_ref: str) -> str:
        """CDN URL for an asset reference."""
        return image_url(self.config.cdn_host, asset_ref)


def _decode(text: str) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


def _error_message(payload: Any, status: int) -> str:
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            description = error.get("description") or error.get("message")
            if description:
                return f"Sanity error {status}: {description}"
        for key in ("message", "error"):
            if isinstance(payload.get(key), str):
                return f"Sanity error {status}: {payload[key]}"
    return f"Sanity error {status}"


def _first_result_id(payload: Dict[str, Any]) -> Optional[str]:
    results = payload.get("results")
    if isinstance(results, list) and results and isinstance(results[0], dict):
        return results[0].get("id")
    return None
