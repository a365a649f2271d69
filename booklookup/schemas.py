"""
Pydantic models of the payloads Open Library sends back.

These mirror the provider's JSON as-is (snake_case keys, optional
almost everywhere) and exist only at the deserialization boundary.
Nothing past ``booklookup.parse`` should touch them; callers get
``BookSearchResult`` instead.
"""
from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field


class TextValue(BaseModel):
    """Wrapped text, e.g. ``{"type": "/type/text", "value": "..."}``."""
    type: Optional[str] = None
    value: str


class KeyRef(BaseModel):
    key: str


class WorkAuthor(BaseModel):
    author: Optional[KeyRef] = None


class OpenLibraryDoc(BaseModel):
    """A single record from the ``docs`` array of ``/search.json``."""
    key: str
    title: str
    author_name: Optional[List[str]] = None
    first_publish_year: Optional[int] = None
    isbn: Optional[List[str]] = None
    cover_i: Optional[int] = None
    publisher: Optional[List[str]] = None
    number_of_pages_median: Optional[int] = None
    subject: Optional[List[str]] = None


class OpenLibrarySearchResponse(BaseModel):
    """
    Envelope of ``/search.json``.

    ``docs`` is kept raw so one bad record can be skipped without
    rejecting the whole page; see ``parse.parse_search_response``.
    """
    numFound: int = 0
    start: int = 0
    docs: List[Any] = Field(default_factory=list)


class OpenLibraryWork(BaseModel):
    """Payload of ``/works/{id}.json``."""
    title: str
    description: Optional[Union[str, TextValue]] = None
    covers: Optional[List[int]] = None
    authors: Optional[List[WorkAuthor]] = None
    subjects: Optional[List[str]] = None
    first_publish_date: Optional[str] = None


class OpenLibraryAuthor(BaseModel):
    """Payload of ``/authors/{id}.json``."""
    name: str
    bio: Optional[Union[str, TextValue]] = None
    birth_date: Optional[str] = None
    photos: Optional[List[int]] = None
