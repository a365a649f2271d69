"""Async HTTP client for the Open Library catalog."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Dict, Any
import logging

import httpx

from booklookup.config import Config
from booklookup.covers import get_cover_url, get_cover_url_by_isbn, SizeLike
from booklookup.models import BookSearchResult, CoverSize
from booklookup.parse import (
    MalformedResponseError,
    parse_search_response,
    parse_work,
    strip_key,
)

logger = logging.getLogger(__name__)


class FetchStatus(Enum):
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass
class FetchOutcome:
    """
    What actually happened on one provider call.

    The public client methods collapse EMPTY and FAILED into the same
    return value; this keeps the difference available for logging.
    """
    status: FetchStatus
    data: Any = None
    error: Optional[str] = None
    books: List[BookSearchResult] = field(default_factory=list)

    @classmethod
    def ok(cls, data: Any) -> "FetchOutcome":
        return cls(FetchStatus.OK, data=data)

    @classmethod
    def empty(cls) -> "FetchOutcome":
        return cls(FetchStatus.EMPTY)

    @classmethod
    def failed(cls, error: str) -> "FetchOutcome":
        return cls(FetchStatus.FAILED, error=error)


class AsyncOpenLibraryClient:
    """Async client for Open Library search and work lookups.

    Every public lookup fails closed: transport errors, bad statuses and
    malformed payloads are logged and come back as ``[]`` or ``None``.
    """

    def __init__(
        self,
        base_url: str = Config.OPENLIBRARY_BASE_URL,
        covers_url: str = Config.OPENLIBRARY_COVERS_URL,
        timeout: int = Config.DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize async client.

        Args:
            base_url: Catalog root, e.g. https://openlibrary.org
            covers_url: Covers endpoint root
            timeout: Request timeout in seconds
            client: Pre-built httpx client; left open on close()
        """
        self.base_url = base_url.rstrip("/")
        self.covers_url = covers_url
        self.timeout = timeout

        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def search_books(
        self,
        query: str,
        limit: int = Config.DEFAULT_SEARCH_LIMIT
    ) -> List[BookSearchResult]:
        """
        Free-text search by title, author or ISBN fragment.

        Args:
            query: Search text (escaped by httpx)
            limit: Max records requested from the provider

        Returns:
            Normalized results; empty on no match or on any failure
        """
        outcome = await self._search({"q": query, "limit": limit})
        if outcome.status is FetchStatus.FAILED:
            logger.error(f"Search failed for {query!r}: {outcome.error}")
        return outcome.books

    async def search_by_isbn(self, isbn: str) -> Optional[BookSearchResult]:
        """
        Exact ISBN lookup.

        Returns:
            First matching result, or None on no match or failure
        """
        outcome = await self._search({"isbn": isbn.strip(), "limit": 1})
        if outcome.status is FetchStatus.FAILED:
            logger.error(f"ISBN search failed for {isbn!r}: {outcome.error}")
            return None
        if outcome.status is FetchStatus.EMPTY:
            return None
        return outcome.books[0]

    async def get_book_details(self, work_id: str) -> Optional[BookSearchResult]:
        """
        Fetch one work, including its description.

        Args:
            work_id: Bare id ("OL45804W") or key ("/works/OL45804W")

        Returns:
            Normalized result with author set to the sentinel, or None
        """
        olid = strip_key(work_id)
        outcome = await self._get_json(f"{self.base_url}/works/{olid}.json")
        if outcome.status is not FetchStatus.OK:
            logger.error(f"Get book details failed for {olid}: {outcome.error}")
            return None

        try:
            return parse_work(olid, outcome.data, self.covers_url)
        except MalformedResponseError as e:
            logger.error(f"Get book details failed for {olid}: {e}")
            return None

    def get_cover_url(self, cover_id: int, size: SizeLike = CoverSize.MEDIUM) -> str:
        return get_cover_url(cover_id, size, self.covers_url)

    def get_cover_url_by_isbn(self, isbn: str, size: SizeLike = CoverSize.MEDIUM) -> str:
        return get_cover_url_by_isbn(isbn, size, self.covers_url)

    async def _search(self, params: Dict[str, Any]) -> FetchOutcome:
        """Run one ``/search.json`` call and normalize its docs."""
        outcome = await self._get_json(f"{self.base_url}/search.json", params)
        if outcome.status is not FetchStatus.OK:
            return outcome

        try:
            books = parse_search_response(outcome.data, self.covers_url)
        except MalformedResponseError as e:
            return FetchOutcome.failed(str(e))

        if not books:
            logger.info(f"No matches for {params}")
            return FetchOutcome.empty()

        outcome.books = books
        return outcome

    async def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None
    ) -> FetchOutcome:
        """
        GET a URL and decode its JSON body.

        Args:
            url: Request URL
            params: Query parameters

        Returns:
            OK with the decoded body, or FAILED with the reason
        """
        try:
            logger.info(f"Async request: {url} {params or ''}")
            response = await self.client.get(url, params=params)
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeError) as e:
            # Bad input can fail while the request is still being built
            logger.warning(f"Request error for {url}: {e!r}")
            return FetchOutcome.failed(f"{type(e).__name__}: {e}")

        if not response.is_success:
            logger.warning(f"Status {response.status_code} for {url}")
            return FetchOutcome.failed(f"HTTP {response.status_code}")

        try:
            return FetchOutcome.ok(response.json())
        except ValueError as e:
            logger.warning(f"Invalid JSON from {url}: {e}")
            return FetchOutcome.failed(f"Invalid JSON: {e}")

    async def close(self):
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
