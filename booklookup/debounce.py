"""Debounced search for keystroke-driven callers such as autocomplete."""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Set

from booklookup.config import Config
from booklookup.models import BookSearchResult

logger = logging.getLogger(__name__)

SearchFn = Callable[[str], Awaitable[List[BookSearchResult]]]
ResultsCallback = Callable[[List[BookSearchResult]], None]


class DebouncedSearch:
    """
    Collapse a burst of queries into one search per quiet period.

    Each ``trigger_search`` replaces the pending timer, so only the last
    query of a burst is sent. Searches already dispatched are left to
    finish and still report back unless ``drop_stale`` is set.

    Must be used from inside a running event loop. One instance holds
    one timer; give independent inputs their own instance.
    """

    def __init__(
        self,
        search: SearchFn,
        delay: float = Config.DEBOUNCE_DELAY_MS / 1000,
        min_length: int = 2,
        drop_stale: bool = False
    ):
        """
        Args:
            search: Coroutine function taking the query, e.g.
                ``AsyncOpenLibraryClient.search_books``
            delay: Quiet period in seconds
            min_length: Shorter trimmed queries answer ``[]`` immediately
            drop_stale: Skip callbacks of searches superseded by a newer trigger
        """
        self.search = search
        self.delay = delay
        self.min_length = min_length
        self.drop_stale = drop_stale

        self._timer: Optional[asyncio.TimerHandle] = None
        self._generation = 0
        self._in_flight: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        """True while a search is scheduled but not yet dispatched."""
        return self._timer is not None

    def trigger_search(self, query: str, on_results: ResultsCallback) -> None:
        """
        Schedule a search for ``query``, superseding any pending one.

        Args:
            query: Raw input text
            on_results: Called with the results once the search resolves
        """
        self.cancel()
        self._generation += 1

        if len(query.strip()) < self.min_length:
            on_results([])
            return

        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(
            self.delay, self._dispatch, query, on_results, self._generation
        )
        logger.debug(f"Scheduled search for {query!r} in {self.delay:.3f}s")

    def cancel(self) -> None:
        """Drop the pending timer, if any. In-flight searches are untouched."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def wait_idle(self) -> None:
        """Wait for every dispatched search to deliver its results."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    def _dispatch(self, query: str, on_results: ResultsCallback, generation: int) -> None:
        self._timer = None
        logger.debug(f"Dispatching search for {query!r}")

        task = asyncio.get_running_loop().create_task(
            self._run(query, on_results, generation)
        )
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _run(self, query: str, on_results: ResultsCallback, generation: int) -> None:
        try:
            results = await self.search(query)
        except Exception:
            logger.exception(f"Debounced search for {query!r} raised")
            return

        if self.drop_stale and generation != self._generation:
            logger.debug(f"Dropping stale results for {query!r}")
            return

        try:
            on_results(results)
        except Exception:
            logger.exception(f"Results callback for {query!r} raised")
