"""Source-variant tagging of raw track records.

classify() turns a raw mapping into a CatalogRecord or an ExternalRecord.
Aggregation code only ever receives the output of filter_catalog(), so the
enrichment fields are never looked up on an external record.
"""

from typing import Any, Iterable, List, Mapping

from pydantic import ValidationError

from catalog_stats.core import CatalogRecord, ExternalRecord, MalformedRecord, Record

CATALOG_FIELDS = ("popularity", "explicit", "album", "artists")

# Explicit tags accepted on raw records, including the legacy "type" values.
_CATALOG_TAGS = {"catalog", "spotify"}
_EXTERNAL_TAGS = {"external", "lastfm"}


def _variant_of(raw: Mapping[str, Any]) -> str:
    tag = raw.get("variant", raw.get("type"))
    if tag in _CATALOG_TAGS:
        return "catalog"
    if tag in _EXTERNAL_TAGS:
        return "external"

    present = [field for field in CATALOG_FIELDS if field in raw]
    if not present:
        return "external"
    if len(present) == len(CATALOG_FIELDS):
        return "catalog"

    missing = sorted(set(CATALOG_FIELDS) - set(present))
    raise MalformedRecord(
        f"Record {raw.get('id')!r} has catalog fields {present} but lacks {missing}."
    )


def classify(raw: Mapping[str, Any]) -> Record:
    """
    Tag a raw record by source variant.

    Raises MalformedRecord when the record carries only part of the catalog
    fields or fails validation for its variant.
    """
    if not isinstance(raw, Mapping):
        raise MalformedRecord(f"Expected a mapping, got {type(raw).__name__}.")

    variant = _variant_of(raw)
    payload = {k: v for k, v in raw.items() if k not in ("variant", "type")}

    try:
        if variant == "catalog":
            return CatalogRecord.model_validate(payload)
        return ExternalRecord.model_validate(payload)
    except ValidationError as exc:
        raise MalformedRecord(f"Invalid {variant} record {raw.get('id')!r}: {exc}") from exc


def filter_catalog(records: Iterable[Record]) -> List[CatalogRecord]:
    """Keep catalog records only, in their original order."""
    return [record for record in records if isinstance(record, CatalogRecord)]
