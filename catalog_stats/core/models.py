from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Dict, FrozenSet, Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

FrequencyMap = Dict[str, int]
FeatureVector = Dict[str, float]


class QueryStatus(str, Enum):
    """Status signal handed to the presentation layer."""

    PENDING = "pending"
    ERROR = "error"
    READY = "ready"


class TimeRange(str, Enum):
    SHORT_TERM = "short_term"
    MEDIUM_TERM = "medium_term"
    LONG_TERM = "long_term"


class SortOption(str, Enum):
    NAME = "0"
    DATE_ADDED = "1"


@dataclass(frozen=True)
class LibraryQueryKey:
    """
    Identity of a library page sequence.

    Two keys are equal iff every field is equal; a new user selection builds a
    new key instead of mutating the active one.
    """

    query_name: str
    sort_id: str
    text_filter: str = ""


@dataclass(frozen=True)
class StatsQueryKey:
    query_name: str
    range_id: str


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Image(_Frozen):
    url: str


class LibraryEntry(_Frozen):
    """One saved library entry (e.g. a followed artist)."""

    uri: str
    name: str
    images: Tuple[Image, ...] = ()


class Page(_Frozen):
    items: Tuple[LibraryEntry, ...]
    total_length: int = Field(ge=0)
    offset: int = Field(ge=0)


class Album(_Frozen):
    release_date: str
    name: str = ""


class Artist(_Frozen):
    genres: FrozenSet[str] = frozenset()
    id: str = ""
    name: str = ""


class CatalogRecord(_Frozen):
    """
    Track resolved against the catalog, carrying every enrichment field.
    """

    variant: Literal["catalog"] = "catalog"
    id: str
    uri: str = ""
    name: str
    images: Tuple[Image, ...] = ()
    popularity: int = Field(ge=0, le=100)
    explicit: bool
    album: Album
    artists: Tuple[Artist, ...]


class ExternalRecord(_Frozen):
    """
    Track known only to an external source. It has no popularity, explicit,
    album or artist-genre attributes.
    """

    variant: Literal["external"] = "external"
    id: str
    name: str


Record = Annotated[Union[CatalogRecord, ExternalRecord], Field(discriminator="variant")]


class StatisticsResult(_Frozen):
    """
    Consolidated output of one aggregation call.

    - analysis      : popularity, explicit fraction and every mean audio feature
    - genres        : genre label -> count
    - release_years : year label -> count
    """

    analysis: Dict[str, float]
    genres: FrequencyMap
    release_years: FrequencyMap
