import asyncio
from typing import List, Optional

from catalog_stats.core import (
    CatalogStatsError,
    LibraryEntry,
    LibraryQueryKey,
    Page,
    QueryStatus,
    log_info,
    log_progress,
    log_warning,
)

from .paginator import PaginatedFetcher, next_offset


class LibraryQuery:
    """
    Incremental page sequence for one active LibraryQueryKey.

    Pages are requested strictly in offset order. Switching to a different key
    (or refetching) starts a new sequence at offset 0; a page belonging to a
    superseded sequence is dropped when it resolves.
    """

    def __init__(self, fetcher: PaginatedFetcher, key: LibraryQueryKey) -> None:
        self._fetcher = fetcher
        self._key = key
        self._generation = 0
        self._lock = asyncio.Lock()
        self._pages: List[Page] = []
        self._status = QueryStatus.PENDING
        self._error: Optional[CatalogStatsError] = None

    @property
    def key(self) -> LibraryQueryKey:
        return self._key

    @property
    def status(self) -> QueryStatus:
        return self._status

    @property
    def error(self) -> Optional[CatalogStatsError]:
        return self._error

    @property
    def pages(self) -> List[Page]:
        return list(self._pages)

    @property
    def items(self) -> List[LibraryEntry]:
        return [item for page in self._pages for item in page.items]

    @property
    def has_next_page(self) -> bool:
        if not self._pages:
            return False
        return next_offset(self._pages[-1], self._fetcher.limit) is not None

    @property
    def is_empty(self) -> bool:
        """True once the first page resolved without any item ("nothing here")."""
        return self._status == QueryStatus.READY and not self._pages[0].items

    def _reset(self) -> None:
        self._generation += 1
        # A fresh lock so the new sequence does not queue behind a stale fetch.
        self._lock = asyncio.Lock()
        self._pages = []
        self._status = QueryStatus.PENDING
        self._error = None

    def set_key(self, key: LibraryQueryKey) -> bool:
        """
        Make `key` the active key. Returns False when it is already active.
        """
        if key == self._key:
            return False
        log_info(f"Library query changed to {key}; restarting at offset 0.")
        self._key = key
        self._reset()
        return True

    async def start(self) -> Optional[Page]:
        if self._pages:
            return self._pages[0]
        return await self.fetch_next_page()

    async def refetch(self) -> Optional[Page]:
        self._fetcher.refresh()
        self._reset()
        return await self.fetch_next_page()

    async def fetch_next_page(self) -> Optional[Page]:
        """
        Fetch the next page of the active sequence.

        Returns None when pagination is exhausted or when the sequence was
        superseded while the page was loading. Pipeline errors are recorded on
        the query (status ERROR) and re-raised.
        """
        generation, key, lock = self._generation, self._key, self._lock

        async with lock:
            if generation != self._generation:
                return None

            if self._pages:
                offset = next_offset(self._pages[-1], self._fetcher.limit)
                if offset is None:
                    return None
            else:
                offset = 0

            try:
                page = await self._fetcher.fetch_page(key, offset)
            except CatalogStatsError as exc:
                if generation != self._generation:
                    log_warning(f"Ignoring failure of superseded query {key}: {exc}")
                    return None
                self._status = QueryStatus.ERROR
                self._error = exc
                raise

            if generation != self._generation:
                log_warning(f"Discarding page at offset {offset} of superseded query {key}.")
                return None

            self._pages.append(page)
            self._status = QueryStatus.READY
            self._error = None

            total_pages = -(-page.total_length // self._fetcher.limit)
            log_progress(len(self._pages), total_pages, prefix=f"  {key.query_name} pages")
            return page
