"""Build Open Library cover image URLs. Pure string work, no requests."""
from typing import Union

from booklookup.config import Config
from booklookup.models import CoverSize

COVERS_URL = Config.OPENLIBRARY_COVERS_URL

SizeLike = Union[CoverSize, str]


def get_cover_url(
    cover_id: int,
    size: SizeLike = CoverSize.MEDIUM,
    base_url: str = COVERS_URL
) -> str:
    """
    Cover URL for a numeric cover id.

    Args:
        cover_id: Open Library cover id (``cover_i`` / ``covers[n]``)
        size: CoverSize or its letter/name
        base_url: Covers endpoint root

    Returns:
        ``{base_url}/id/{cover_id}-{S|M|L}.jpg``
    """
    size = CoverSize.parse(size)
    return f"{base_url.rstrip('/')}/id/{cover_id}-{size.value}.jpg"


def get_cover_url_by_isbn(
    isbn: str,
    size: SizeLike = CoverSize.MEDIUM,
    base_url: str = COVERS_URL
) -> str:
    """Cover URL keyed by ISBN: ``{base_url}/isbn/{isbn}-{S|M|L}.jpg``."""
    size = CoverSize.parse(size)
    return f"{base_url.rstrip('/')}/isbn/{isbn}-{size.value}.jpg"
