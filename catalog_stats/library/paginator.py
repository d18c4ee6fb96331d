"""Cache-keyed page retrieval for library content.

PaginatedFetcher turns a content source into immutable Page values:

  - pages are cached per (query key, offset, limit); a resolved page is never
    requested from the source again until the key is invalidated
  - concurrent requests for the same (key, offset, limit) share a single
    in-flight source call
  - invalidate(key) drops the key's pages; a request that was already in flight
    still resolves for its caller but is not written back into the cache
  - only the max_keys most recently requested keys keep pages; the least
    recently used key is evicted first
  - refresh() drops every page and makes the source reload its content

Sequencing (offset N+1 only after offset N resolved) and key switching are the
concern of LibraryQuery, which drives this fetcher.
"""

import asyncio
import itertools
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from catalog_stats.config import (
    LIBRARY_ARTISTS_FILTER,
    LIBRARY_CACHED_QUERIES,
    LIBRARY_PAGE_SIZE,
)
from catalog_stats.core import (
    CatalogStatsError,
    LibraryEntry,
    LibraryQueryKey,
    Page,
    SourceUnavailable,
    log_error,
    log_info,
    log_step,
)

from .sources import ContentSource

_CacheKey = Tuple[LibraryQueryKey, int, int]


def next_offset(page: Page, limit: int) -> Optional[int]:
    """
    Offset of the page following `page`, or None once pagination is exhausted.
    """
    candidate = page.offset + limit
    if page.total_length > candidate:
        return candidate
    return None


def _parse_page(response: Any, offset: int) -> Page:
    if not isinstance(response, dict):
        raise SourceUnavailable(f"Content source returned {type(response).__name__}, expected a mapping.")

    items = response.get("items")
    total_length = response.get("totalLength")
    if not isinstance(items, list):
        raise SourceUnavailable("Content source response has no 'items' list.")
    if not isinstance(total_length, int) or isinstance(total_length, bool):
        raise SourceUnavailable("Content source response has no integer 'totalLength'.")

    try:
        return Page(
            items=tuple(LibraryEntry.model_validate(item) for item in items),
            total_length=total_length,
            offset=offset,
        )
    except ValidationError as exc:
        raise SourceUnavailable(f"Content source returned malformed items: {exc}") from exc


class PaginatedFetcher:
    def __init__(
        self,
        source: ContentSource,
        limit: int = LIBRARY_PAGE_SIZE,
        filters: Optional[List[str]] = None,
        max_keys: int = LIBRARY_CACHED_QUERIES,
    ) -> None:
        if limit <= 0:
            raise ValueError("limit must be positive")
        if max_keys <= 0:
            raise ValueError("max_keys must be positive")
        self.limit = limit
        self.max_keys = max_keys
        self._source = source
        self._filters = list(filters) if filters else [LIBRARY_ARTISTS_FILTER]
        self._cache: Dict[_CacheKey, Page] = {}
        self._in_flight: Dict[_CacheKey, "asyncio.Task[Page]"] = {}
        # Least recently used key first; the token changes whenever a key's pages are dropped.
        self._tokens: "OrderedDict[LibraryQueryKey, int]" = OrderedDict()
        self._token_counter = itertools.count(1)

    def cached_page(
        self, key: LibraryQueryKey, offset: int, limit: Optional[int] = None
    ) -> Optional[Page]:
        return self._cache.get((key, offset, self.limit if limit is None else limit))

    def cached_keys(self) -> List[LibraryQueryKey]:
        return list(self._tokens)

    def _drop(self, key: LibraryQueryKey) -> None:
        self._tokens.pop(key, None)
        for cache_key in [k for k in self._cache if k[0] == key]:
            del self._cache[cache_key]
        for cache_key in [k for k in self._in_flight if k[0] == key]:
            del self._in_flight[cache_key]

    def _touch(self, key: LibraryQueryKey) -> int:
        token = self._tokens.get(key)
        if token is None:
            token = next(self._token_counter)
            self._tokens[key] = token
        self._tokens.move_to_end(key)

        while len(self._tokens) > self.max_keys:
            evicted = next(iter(self._tokens))
            log_info(f"Evicting cached pages of {evicted.query_name} ({evicted.text_filter!r}).")
            self._drop(evicted)
        return token

    def invalidate(self, key: LibraryQueryKey) -> None:
        """Forget every page (cached or in flight) of `key`."""
        self._drop(key)

    def refresh(self) -> None:
        """Forget every cached page and ask the source to reload its content."""
        self._tokens.clear()
        self._cache.clear()
        self._in_flight.clear()
        self._source.refresh()

    async def fetch_page(
        self, key: LibraryQueryKey, offset: int, limit: Optional[int] = None
    ) -> Page:
        """
        Return the page of `key` starting at `offset`.

        Raises SourceUnavailable when the source fails or answers with
        malformed data.
        """
        limit = self.limit if limit is None else limit
        if offset < 0 or limit <= 0:
            raise ValueError(f"Invalid page window offset={offset} limit={limit}")

        token = self._touch(key)
        cache_key = (key, offset, limit)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        task = self._in_flight.get(cache_key)
        if task is None:
            task = asyncio.ensure_future(self._load(cache_key, token))
            self._in_flight[cache_key] = task
            task.add_done_callback(lambda done: self._forget_in_flight(cache_key, done))

        # One caller giving up must not cancel the fetch shared with the others.
        return await asyncio.shield(task)

    def _forget_in_flight(self, cache_key: _CacheKey, task: "asyncio.Task[Page]") -> None:
        if self._in_flight.get(cache_key) is task:
            del self._in_flight[cache_key]

    async def _load(self, cache_key: _CacheKey, token: int) -> Page:
        key, offset, limit = cache_key
        log_step(f"Fetching {key.query_name} page (offset={offset}, limit={limit})...")

        try:
            response = await self._source.get_page(
                list(self._filters),
                key.sort_id,
                key.text_filter,
                offset,
                limit,
            )
        except CatalogStatsError:
            raise
        except Exception as exc:
            log_error(f"Content source failed for {key.query_name} at offset {offset}: {exc}")
            raise SourceUnavailable(f"Content source failed: {exc}") from exc

        page = _parse_page(response, offset)

        if self._tokens.get(key) == token:
            self._cache[cache_key] = page
        return page
