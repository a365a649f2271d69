"""Data models for book lookups."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any, Union

UNKNOWN_AUTHOR = "Unknown Author"


class CoverSize(Enum):
    """Size classes served by the covers endpoint."""
    SMALL = "S"
    MEDIUM = "M"
    LARGE = "L"

    @classmethod
    def default(cls) -> "CoverSize":
        return cls.MEDIUM

    @classmethod
    def parse(cls, value: Union["CoverSize", str]) -> "CoverSize":
        """
        Accept a CoverSize, a size letter ("S") or a name ("small").

        Raises:
            ValueError: if the value names no known size
        """
        if isinstance(value, cls):
            return value

        text = str(value).strip().upper()
        for size in cls:
            if text in (size.value, size.name):
                return size

        raise ValueError(f"Unknown cover size: {value!r}")


@dataclass
class BookSearchResult:
    """Normalized book representation handed to callers."""
    external_id: str
    title: str
    author: str = UNKNOWN_AUTHOR
    cover_url: Optional[str] = None
    first_publish_year: Optional[int] = None
    isbn: Optional[str] = None
    page_count: Optional[int] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Render with camelCase keys, omitting absent fields."""
        data = {
            "externalId": self.external_id,
            "title": self.title,
            "author": self.author,
            "coverUrl": self.cover_url,
            "firstPublishYear": self.first_publish_year,
            "isbn": self.isbn,
            "pageCount": self.page_count,
            "description": self.description,
        }
        return {key: value for key, value in data.items() if value is not None}
