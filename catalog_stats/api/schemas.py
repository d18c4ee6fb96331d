from typing import Dict, List, Optional

from pydantic import BaseModel

from catalog_stats.core import LibraryEntry, QueryStatus


class LibraryPageResponse(BaseModel):
    status: QueryStatus = QueryStatus.READY
    items: List[LibraryEntry]
    total_length: int
    offset: int
    next_offset: Optional[int] = None


class StatisticsResponse(BaseModel):
    status: QueryStatus = QueryStatus.READY
    time_range: str
    analysis: Dict[str, float]
    genres: Dict[str, int]
    release_years: Dict[str, int]


class ErrorResponse(BaseModel):
    status: QueryStatus = QueryStatus.ERROR
    error: str
    detail: str
