#!/usr/bin/env python3
"""Book Lookup Explorer CLI - Open Library search, details and covers."""
import argparse
import asyncio
import sys
import json
from tabulate import tabulate
from booklookup.async_client import AsyncOpenLibraryClient
from booklookup.config import Config
from booklookup.covers import get_cover_url, get_cover_url_by_isbn
from booklookup.debounce import DebouncedSearch
import logging

logger = logging.getLogger(__name__)


def setup_logging(config: Config, verbose: bool = False):
    """Configure root logging for CLI runs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.LOG_LEVEL.upper(),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def make_client(config: Config) -> AsyncOpenLibraryClient:
    return AsyncOpenLibraryClient(
        base_url=config.OPENLIBRARY_BASE_URL,
        covers_url=config.OPENLIBRARY_COVERS_URL,
        timeout=config.DEFAULT_TIMEOUT
    )


def display_books(books, format_type: str):
    """Display books in specified format."""
    if not books:
        print("No results.")
        return

    if format_type == "table":
        headers = ["ID", "Title", "Author", "Year", "ISBN", "Pages"]
        rows = [
            [
                book.external_id,
                book.title[:50] + "..." if len(book.title) > 50 else book.title,
                book.author[:30] + "..." if len(book.author) > 30 else book.author,
                book.first_publish_year or "Unknown",
                book.isbn or "N/A",
                book.page_count or "N/A"
            ]
            for book in books
        ]
        print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))

    elif format_type == "json":
        print(json.dumps([book.to_dict() for book in books], indent=2))

    elif format_type == "compact":
        for i, book in enumerate(books, 1):
            print(f"{i}. {book.title} - {book.author}")


async def search_books(args, config: Config):
    """Free-text search."""
    async with make_client(config) as client:
        logger.info(f"Searching for: {args.query}")
        books = await client.search_books(args.query, limit=args.limit)
        logger.info(f"Found {len(books)} books")
        display_books(books, args.format)


async def lookup_isbn(args, config: Config):
    """Exact ISBN lookup."""
    async with make_client(config) as client:
        book = await client.search_by_isbn(args.isbn)
        display_books([book] if book else [], args.format)


async def show_work(args, config: Config):
    """Work details, including description."""
    async with make_client(config) as client:
        book = await client.get_book_details(args.work_id)
        display_books([book] if book else [], args.format)

        if book and book.description and args.format != "json":
            print(f"\n{book.description}\n")


def show_cover(args, config: Config):
    """Print a cover URL without fetching it."""
    if args.id is not None:
        print(get_cover_url(args.id, args.size, config.OPENLIBRARY_COVERS_URL))
    else:
        print(get_cover_url_by_isbn(args.isbn, args.size, config.OPENLIBRARY_COVERS_URL))


async def autocomplete(args, config: Config):
    """Type text one character at a time through the debouncer."""
    delay = args.delay if args.delay is not None else config.debounce_delay

    async with make_client(config) as client:
        debouncer = DebouncedSearch(client.search_books, delay=delay)

        for i in range(1, len(args.text) + 1):
            prefix = args.text[:i]
            print(f"> {prefix}")

            def on_results(books, prefix=prefix):
                titles = ", ".join(book.title for book in books[:3]) or "-"
                print(f"  [{prefix!r}] {len(books)} results: {titles}")

            debouncer.trigger_search(prefix, on_results)
            await asyncio.sleep(args.interval)

        # Let the last scheduled search fire, then drain
        while debouncer.pending:
            await asyncio.sleep(delay)
        await debouncer.wait_idle()


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Book Lookup Explorer - Open Library metadata CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Search with defaults
  %(prog)s search "dune"

  # Look up an ISBN as JSON
  %(prog)s isbn 9780441172719 --format json

  # Work details with description
  %(prog)s work OL893415W

  # Cover URL only
  %(prog)s cover --id 258027 --size L

  # Watch the debouncer collapse keystrokes
  %(prog)s autocomplete "tolkien" --interval 0.1
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")
    formats = ["table", "json", "compact"]

    # Search command
    search_parser = subparsers.add_parser("search", help="Search for books")
    search_parser.add_argument("query", help="Search query")
    search_parser.add_argument("--limit", type=int, default=Config.DEFAULT_SEARCH_LIMIT, help="Max results (default: %(default)s)")
    search_parser.add_argument("--format", choices=formats, default="table", help="Output format")

    # ISBN command
    isbn_parser = subparsers.add_parser("isbn", help="Look up a book by ISBN")
    isbn_parser.add_argument("isbn", help="ISBN-10 or ISBN-13")
    isbn_parser.add_argument("--format", choices=formats, default="table", help="Output format")

    # Work command
    work_parser = subparsers.add_parser("work", help="Show work details")
    work_parser.add_argument("work_id", help="Work id, e.g. OL893415W or /works/OL893415W")
    work_parser.add_argument("--format", choices=formats, default="table", help="Output format")

    # Cover command
    cover_parser = subparsers.add_parser("cover", help="Print a cover image URL")
    cover_source = cover_parser.add_mutually_exclusive_group(required=True)
    cover_source.add_argument("--id", type=int, help="Numeric cover id")
    cover_source.add_argument("--isbn", help="ISBN")
    cover_parser.add_argument("--size", choices=["S", "M", "L"], default="M", help="Size class (default: M)")

    # Autocomplete command
    auto_parser = subparsers.add_parser("autocomplete", help="Simulate typing into a debounced search")
    auto_parser.add_argument("text", help="Text to type")
    auto_parser.add_argument("--interval", type=float, default=0.1, help="Seconds between keystrokes (default: 0.1)")
    auto_parser.add_argument("--delay", type=float, help="Quiet period in seconds (default: DEBOUNCE_DELAY_MS)")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = Config()
    setup_logging(config, args.verbose)

    try:
        if args.command == "search":
            asyncio.run(search_books(args, config))

        elif args.command == "isbn":
            asyncio.run(lookup_isbn(args, config))

        elif args.command == "work":
            asyncio.run(show_work(args, config))

        elif args.command == "cover":
            show_cover(args, config)

        elif args.command == "autocomplete":
            asyncio.run(autocomplete(args, config))

    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"❌ Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
