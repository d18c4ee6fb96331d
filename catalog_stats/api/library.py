from fastapi import APIRouter, Depends, Query

from catalog_stats.core import LibraryQueryKey, SortOption
from catalog_stats.library import PaginatedFetcher, next_offset

from .dependencies import get_library_fetcher
from .schemas import LibraryPageResponse

router = APIRouter()


@router.get("/artists", response_model=LibraryPageResponse)
async def get_artists_page(
    sort: SortOption = SortOption.NAME,
    filter: str = "",
    offset: int = Query(0, ge=0),
    refresh: bool = False,
    fetcher: PaginatedFetcher = Depends(get_library_fetcher),
) -> LibraryPageResponse:
    """
    One page of saved artists.

    `next_offset` is null once the last page has been served; clients pass it
    back as `offset` to load more.

    `refresh=true` drops every cached page and reloads the follow list.
    """
    if refresh:
        fetcher.refresh()
    key = LibraryQueryKey("library:artists", sort.value, filter)
    page = await fetcher.fetch_page(key, offset)
    return LibraryPageResponse(
        items=list(page.items),
        total_length=page.total_length,
        offset=page.offset,
        next_offset=next_offset(page, fetcher.limit),
    )
