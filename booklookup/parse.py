"""Parse and normalize Open Library API responses."""
import logging
import re
from typing import Dict, Any, List, Optional, Union

from pydantic import ValidationError

from booklookup.covers import COVERS_URL, get_cover_url
from booklookup.models import BookSearchResult, CoverSize, UNKNOWN_AUTHOR
from booklookup.schemas import (
    OpenLibraryDoc,
    OpenLibrarySearchResponse,
    OpenLibraryWork,
    TextValue,
)

logger = logging.getLogger(__name__)

YEAR_PATTERN = re.compile(r"\d{4}")


class MalformedResponseError(ValueError):
    """Provider payload does not have the expected shape."""


def strip_key(key: str) -> str:
    """Drop the namespace path from a key: ``/works/OL123W`` -> ``OL123W``."""
    return key.strip().rstrip("/").rsplit("/", 1)[-1]


def extract_description(value: Optional[Union[str, TextValue, Dict[str, Any]]]) -> Optional[str]:
    """
    Flatten Open Library's two description encodings into plain text.

    Args:
        value: A plain string, a wrapped ``{"value": ...}`` object, or None

    Returns:
        The text, or None when absent or empty
    """
    if not value:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return value.get("value") or None
    return value.value or None


def parse_publish_year(text: Optional[str]) -> Optional[int]:
    """First four-digit year in a free-form date ("Aug 1, 1965"), else None."""
    if not text:
        return None
    match = YEAR_PATTERN.search(text)
    if not match:
        return None
    return int(match.group(0))


def transform_book(doc: OpenLibraryDoc, covers_url: str = COVERS_URL) -> BookSearchResult:
    """
    Normalize one search record.

    Description is never filled here; it needs the work-detail call.
    Covers come from ``cover_i`` only, never from the ISBN.
    """
    author = doc.author_name[0] if doc.author_name else None

    cover_url = None
    if doc.cover_i:
        cover_url = get_cover_url(doc.cover_i, CoverSize.MEDIUM, covers_url)

    return BookSearchResult(
        external_id=strip_key(doc.key),
        title=doc.title,
        author=author or UNKNOWN_AUTHOR,
        cover_url=cover_url,
        first_publish_year=doc.first_publish_year,
        isbn=doc.isbn[0] if doc.isbn else None,
        page_count=doc.number_of_pages_median,
        description=None,
    )


def parse_book(item: Any, covers_url: str = COVERS_URL) -> Optional[BookSearchResult]:
    """
    Parse a single record from a search response.

    Args:
        item: Single entry of the ``docs`` array
        covers_url: Covers endpoint root

    Returns:
        BookSearchResult or None if the record is unusable
    """
    if not isinstance(item, dict):
        logger.warning(f"Skipping non-object search record: {type(item).__name__}")
        return None

    try:
        doc = OpenLibraryDoc.model_validate(item)
    except ValidationError as e:
        # Skip the record, keep the rest of the page
        logger.warning(f"Skipping malformed search record: {e.error_count()} error(s)")
        return None

    return transform_book(doc, covers_url)


def parse_search_response(
    response_json: Any,
    covers_url: str = COVERS_URL
) -> List[BookSearchResult]:
    """
    Parse a full ``/search.json`` response.

    Args:
        response_json: Decoded JSON body
        covers_url: Covers endpoint root

    Returns:
        List of results (empty if no docs found)

    Raises:
        MalformedResponseError: if the envelope itself is unusable
    """
    if not isinstance(response_json, dict):
        raise MalformedResponseError(
            f"Expected JSON object, got {type(response_json).__name__}"
        )

    try:
        envelope = OpenLibrarySearchResponse.model_validate(response_json)
    except ValidationError as e:
        raise MalformedResponseError(f"Invalid search envelope: {e}") from e

    books = []
    for item in envelope.docs:
        book = parse_book(item, covers_url)
        if book:
            books.append(book)

    return books


def transform_work(
    work_id: str,
    work: OpenLibraryWork,
    covers_url: str = COVERS_URL
) -> BookSearchResult:
    """
    Normalize a work-detail record.

    The works endpoint only carries author keys, so ``author`` is always
    the sentinel here.
    """
    cover_url = None
    if work.covers and work.covers[0]:
        cover_url = get_cover_url(work.covers[0], CoverSize.MEDIUM, covers_url)

    return BookSearchResult(
        external_id=strip_key(work_id),
        title=work.title,
        author=UNKNOWN_AUTHOR,
        cover_url=cover_url,
        first_publish_year=parse_publish_year(work.first_publish_date),
        description=extract_description(work.description),
    )


def parse_work(
    work_id: str,
    response_json: Any,
    covers_url: str = COVERS_URL
) -> BookSearchResult:
    """
    Parse a ``/works/{id}.json`` response.

    Raises:
        MalformedResponseError: if the payload is not a work record
    """
    if not isinstance(response_json, dict):
        raise MalformedResponseError(
            f"Expected JSON object, got {type(response_json).__name__}"
        )

    try:
        work = OpenLibraryWork.model_validate(response_json)
    except ValidationError as e:
        raise MalformedResponseError(f"Invalid work record: {e}") from e

    return transform_work(work_id, work, covers_url)
