from typing import Iterable

from catalog_stats.core import CatalogRecord, FrequencyMap, MalformedDate


def aggregate_genres(records: Iterable[CatalogRecord]) -> FrequencyMap:
    """
    Count genre labels over every (record, artist, genre) triple.

    Records without artists and artists without genres contribute nothing.
    """
    genres: FrequencyMap = {}
    for record in records:
        for artist in record.artists:
            for genre in artist.genres:
                genres[genre] = genres.get(genre, 0) + 1
    return genres


def aggregate_release_years(records: Iterable[CatalogRecord]) -> FrequencyMap:
    """
    Count records per release year, the year being the first four characters of
    the album release date ("2020-01-01" and "2020" both give "2020").
    """
    release_years: FrequencyMap = {}
    for record in records:
        release_date = record.album.release_date
        if len(release_date) < 4:
            raise MalformedDate(
                f"Release date {release_date!r} of record {record.id!r} has no year."
            )
        year = release_date[:4]
        release_years[year] = release_years.get(year, 0) + 1
    return release_years
