"""
Scryfall API client.

All network traffic to Scryfall goes through one ScryfallClient. Requests
are strictly sequential: an asyncio.Lock admits one request at a time and
enforces a minimum spacing between them, as Scryfall asks.

API docs: https://scryfall.com/docs/api

Error classification:
- "not found" is an expected answer (a 404 from /cards/search, or an entry
  in the not_found list of /cards/collection) and is returned as data
- everything else (non-2xx, transport failure, unreadable body) raises
  ScryfallServiceError
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from omenpath.config import SCRYFALL_BATCH_SIZE, settings
from omenpath.models.card import ScryfallCard, ScryfallSet, parse_cards

logger = logging.getLogger(__name__)


class ScryfallServiceError(Exception):
    """Raised when Scryfall cannot be reached or answers unexpectedly."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


@dataclass(frozen=True, slots=True)
class CollectionResponse:
    """
    Result of one /cards/collection call.

    Attributes:
        data: Records Scryfall found, in no guaranteed order
        not_found: Identifiers Scryfall reported as unknown, as sent
    """

    data: tuple[ScryfallCard, ...]
    not_found: tuple[dict[str, Any], ...] = ()


class ScryfallClient:
    """
    Rate-limited async client for the Scryfall endpoints the converter uses.

    Use as an async context manager, or call ``aclose()`` when done. An
    existing ``httpx.AsyncClient`` may be passed in; it is then not closed
    by this client.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        user_agent: str | None = None,
        timeout: float | None = None,
        rate_limit_delay: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url or settings.scryfall_api_url).rstrip("/")
        self.rate_limit_delay = (
            settings.scryfall_rate_limit_delay if rate_limit_delay is None else rate_limit_delay
        )
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=timeout or settings.scryfall_timeout,
            headers={
                "User-Agent": user_agent or settings.scryfall_user_agent,
                "Accept": "application/json",
            },
        )
        self._lock = asyncio.Lock()
        self._last_request_at: float | None = None
        self.request_count = 0

    async def __aenter__(self) -> "ScryfallClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send one request, waiting out the rate limit first."""
        url = f"{self.base_url}{path}"
        async with self._lock:
            loop = asyncio.get_running_loop()
            if self._last_request_at is not None:
                wait = self._last_request_at + self.rate_limit_delay - loop.time()
                if wait > 0:
                    await asyncio.sleep(wait)
            try:
                response = await self._http.request(method, url, **kwargs)
            except httpx.RequestError as e:
                raise ScryfallServiceError(f"Request to {path} failed: {e}") from e
            finally:
                self._last_request_at = loop.time()
                self.request_count += 1
        return response

    @staticmethod
    def _json(response: httpx.Response, path: str) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as e:
            raise ScryfallServiceError(f"Unreadable response from {path}") from e
        if not isinstance(payload, dict):
            raise ScryfallServiceError(f"Unexpected response shape from {path}")
        return payload

    async def fetch_collection(self, identifiers: list[dict[str, Any]]) -> CollectionResponse:
        """
        Resolve up to SCRYFALL_BATCH_SIZE identifiers in one call.

        Raises:
            ValueError: If more identifiers are passed than Scryfall accepts
            ScryfallServiceError: On transport failure or non-2xx response
        """
        if len(identifiers) > SCRYFALL_BATCH_SIZE:
            raise ValueError(
                f"At most {SCRYFALL_BATCH_SIZE} identifiers per request, got {len(identifiers)}"
            )
        if not identifiers:
            return CollectionResponse(data=())

        path = "/cards/collection"
        response = await self._request("POST", path, json={"identifiers": identifiers})
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ScryfallServiceError(
                f"Collection lookup failed: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e

        payload = self._json(response, path)
        try:
            cards = parse_cards(payload.get("data", []))
        except ValidationError as e:
            raise ScryfallServiceError(f"Malformed card data from {path}") from e

        logger.debug(
            "Collection lookup: %d requested, %d found, %d not found",
            len(identifiers),
            len(cards),
            len(payload.get("not_found", [])),
        )
        return CollectionResponse(
            data=tuple(cards),
            not_found=tuple(payload.get("not_found", [])),
        )

    async def search(self, query: str, *, unique: str = "prints") -> list[ScryfallCard]:
        """
        Run a full-text search and return the first page of results.

        Returns:
            Matching cards; empty when Scryfall reports no matches (HTTP 404)

        Raises:
            ScryfallServiceError: On transport failure or any other non-2xx response
        """
        path = "/cards/search"
        response = await self._request("GET", path, params={"q": query, "unique": unique})
        if response.status_code == httpx.codes.NOT_FOUND:
            return []
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ScryfallServiceError(
                f"Search failed: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e

        payload = self._json(response, path)
        try:
            return parse_cards(payload.get("data", []))
        except ValidationError as e:
            raise ScryfallServiceError(f"Malformed card data from {path}") from e

    async def search_by_name_and_collector(
        self, name: str, collector_number: str
    ) -> list[ScryfallCard]:
        """Exact-name search restricted to one collector number, across all sets."""
        escaped = name.replace('"', '\\"')
        return await self.search(f'!"{escaped}" cn:{collector_number}')

    async def search_by_language(
        self, set_code: str, collector_number: str, lang: str
    ) -> list[ScryfallCard]:
        """Find one printing in a specific language."""
        return await self.search(f"e:{set_code} cn:{collector_number} lang:{lang}")

    async def fetch_sets(self) -> list[ScryfallSet]:
        """
        Fetch every set Scryfall knows about.

        Raises:
            ScryfallServiceError: On transport failure or non-2xx response
        """
        path = "/sets"
        response = await self._request("GET", path)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ScryfallServiceError(
                f"Set list failed: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e

        payload = self._json(response, path)
        try:
            return [ScryfallSet.model_validate(item) for item in payload.get("data", [])]
        except ValidationError as e:
            raise ScryfallServiceError(f"Malformed set data from {path}") from e

    async def check_health(self) -> bool:
        """True if Scryfall answers a trivial request."""
        try:
            response = await self._request("GET", "/sets/lea")
        except ScryfallServiceError:
            return False
        return response.is_success


async def get_scryfall_client() -> AsyncGenerator[ScryfallClient, None]:
    """
    Dependency that provides a Scryfall client for one request.

    Usage in FastAPI:
        @app.post("/convert")
        async def convert(client: ScryfallClient = Depends(get_scryfall_client)):
            ...
    """
    async with ScryfallClient() as client:
        yield client
