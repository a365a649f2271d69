"""Tests for the async Open Library client against a mocked transport."""
import asyncio

import httpx

from booklookup.async_client import AsyncOpenLibraryClient

BASE = "https://openlibrary.test"
COVERS = "https://covers.test/b"

DUNE_DOC = {
    "key": "/works/OL893415W",
    "title": "Dune",
    "author_name": ["Frank Herbert"],
    "first_publish_year": 1965,
    "isbn": ["9780441172719"],
    "cover_i": 258027,
    "number_of_pages_median": 612,
}


def run_with(handler, call):
    """Run ``call(client)`` against a client whose HTTP is served by ``handler``."""
    async def runner():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = AsyncOpenLibraryClient(base_url=BASE, covers_url=COVERS, client=http)
            return await call(client)

    return asyncio.run(runner())


def test_search_books_success():
    """Test that search results are normalized."""
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"numFound": 1, "start": 0, "docs": [DUNE_DOC]})

    books = run_with(handler, lambda c: c.search_books("dune", limit=5))

    assert len(books) == 1
    assert books[0].external_id == "OL893415W"
    assert books[0].author == "Frank Herbert"
    assert books[0].cover_url == f"{COVERS}/id/258027-M.jpg"
    assert books[0].page_count == 612

    assert requests[0].url.path == "/search.json"
    assert requests[0].url.params["q"] == "dune"
    assert requests[0].url.params["limit"] == "5"


def test_search_books_escapes_query():
    """Test that the query is URL-escaped."""
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"docs": []})

    run_with(handler, lambda c: c.search_books("lord & rings?"))

    assert requests[0].url.params["q"] == "lord & rings?"
    assert "%26" in str(requests[0].url)
    assert requests[0].url.params["limit"] == "10"


def test_search_books_server_error():
    """Test that HTTP 500 yields an empty list, not an exception."""
    books = run_with(
        lambda request: httpx.Response(500, text="boom"),
        lambda c: c.search_books("tolkien")
    )
    assert books == []


def test_search_books_connection_error():
    """Test that transport failures yield an empty list."""
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    assert run_with(handler, lambda c: c.search_books("tolkien")) == []


def test_search_books_timeout():
    """Test that timeouts yield an empty list."""
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    assert run_with(handler, lambda c: c.search_books("tolkien")) == []


def test_search_books_unencodable_query():
    """Test that a query httpx cannot encode yields an empty list."""
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"docs": [DUNE_DOC]})

    # Lone surrogate, as produced from an invalid UTF-8 argv byte
    assert run_with(handler, lambda c: c.search_books("du\udcffne")) == []
    assert requests == []


def test_get_book_details_invalid_url():
    """Test that a work id that makes an invalid URL yields None."""
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"title": "Dune"})

    assert run_with(handler, lambda c: c.get_book_details("OL1\x00W")) is None
    assert requests == []


def test_search_books_invalid_json():
    """Test that an unparseable body yields an empty list."""
    books = run_with(
        lambda request: httpx.Response(200, content=b"<html>not json</html>"),
        lambda c: c.search_books("tolkien")
    )
    assert books == []


def test_search_books_unexpected_shape():
    """Test that a non-object payload yields an empty list."""
    books = run_with(
        lambda request: httpx.Response(200, json=[DUNE_DOC]),
        lambda c: c.search_books("tolkien")
    )
    assert books == []


def test_search_books_skips_bad_records():
    """Test that one invalid doc does not discard the page."""
    payload = {"docs": [{"key": "/works/OL1W"}, DUNE_DOC]}
    books = run_with(
        lambda request: httpx.Response(200, json=payload),
        lambda c: c.search_books("dune")
    )
    assert [book.title for book in books] == ["Dune"]


def test_search_books_skips_non_object_records():
    """Test that null or string entries in docs are skipped, not fatal."""
    payload = {"docs": [None, "junk", DUNE_DOC]}
    books = run_with(
        lambda request: httpx.Response(200, json=payload),
        lambda c: c.search_books("dune")
    )
    assert [book.title for book in books] == ["Dune"]


def test_search_by_isbn_found():
    """Test ISBN lookup returns the first match."""
    requests = []

    def handler(request):
        requests.append(request)
        second = dict(DUNE_DOC, key="/works/OL2W", title="Other")
        return httpx.Response(200, json={"numFound": 2, "docs": [DUNE_DOC, second]})

    book = run_with(handler, lambda c: c.search_by_isbn("9780441172719"))

    assert book is not None
    assert book.title == "Dune"
    assert book.isbn == "9780441172719"
    assert requests[0].url.params["isbn"] == "9780441172719"
    assert "q" not in requests[0].url.params


def test_search_by_isbn_no_match():
    """Test ISBN lookup with zero docs."""
    book = run_with(
        lambda request: httpx.Response(200, json={"numFound": 0, "docs": []}),
        lambda c: c.search_by_isbn("0000000000")
    )
    assert book is None


def test_search_by_isbn_failure():
    """Test that a failed ISBN lookup looks like no match."""
    book = run_with(
        lambda request: httpx.Response(404),
        lambda c: c.search_by_isbn("0000000000")
    )
    assert book is None


def test_get_book_details():
    """Test the work-detail fetch."""
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={
            "title": "Dune",
            "description": {"type": "/type/text", "value": "A desert planet..."},
            "covers": [258027],
            "authors": [{"author": {"key": "/authors/OL79034A"}}],
            "first_publish_date": "August 1965",
        })

    book = run_with(handler, lambda c: c.get_book_details("/works/OL893415W"))

    assert requests[0].url.path == "/works/OL893415W.json"
    assert book.external_id == "OL893415W"
    assert book.author == "Unknown Author"
    assert book.description == "A desert planet..."
    assert book.cover_url == f"{COVERS}/id/258027-M.jpg"
    assert book.first_publish_year == 1965


def test_get_book_details_unparseable_date():
    """Test that a bad publish date leaves the year absent."""
    book = run_with(
        lambda request: httpx.Response(200, json={
            "title": "Dune",
            "description": "A desert planet...",
            "first_publish_date": "unknown",
        }),
        lambda c: c.get_book_details("OL893415W")
    )

    assert book is not None
    assert book.description == "A desert planet..."
    assert book.first_publish_year is None


def test_get_book_details_failures():
    """Test that missing works and malformed works come back as None."""
    assert run_with(
        lambda request: httpx.Response(404, json={"error": "notfound"}),
        lambda c: c.get_book_details("OL0W")
    ) is None

    assert run_with(
        lambda request: httpx.Response(200, json={"description": "no title"}),
        lambda c: c.get_book_details("OL0W")
    ) is None


def test_cover_helpers_use_client_base():
    """Test the cover helpers on the client."""
    client = AsyncOpenLibraryClient(base_url=BASE, covers_url=COVERS, client=httpx.AsyncClient())

    assert client.get_cover_url(1, "L") == f"{COVERS}/id/1-L.jpg"
    assert client.get_cover_url_by_isbn("123") == f"{COVERS}/isbn/123-M.jpg"

    asyncio.run(client.client.aclose())


def test_close_leaves_injected_client_open():
    """Test that close() only closes clients the instance created."""
    async def runner():
        http = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        async with AsyncOpenLibraryClient(client=http):
            pass
        closed_injected = http.is_closed
        await http.aclose()

        owned = AsyncOpenLibraryClient()
        await owned.close()
        return closed_injected, owned.client.is_closed

    assert asyncio.run(runner()) == (False, True)
