"""
Merge per-tile geometry into one de-duplicated collection.

Adjacent tiles each emit the hexagons straddling their shared edge, so the
same shape arrives more than once. Records are keyed by their stable
feature id (``h3index`` / ``featureId``) or, failing that, by their first
vertex rounded to a fixed precision (4 decimals ~ 11 m). First seen wins.
"""
import logging
from typing import Iterable, List, Sequence, Set

from hotrod.core.models import GeometryRecord

logger = logging.getLogger(__name__)


def merge_geometry_records(
    batches: Iterable[Sequence[GeometryRecord]],
    precision: int = 4,
) -> List[GeometryRecord]:
    """
    Flatten ``batches`` keeping the first record for every dedupe key.

    Records without a usable key (no id and no coordinates) are dropped.
    """
    seen: Set[str] = set()
    merged: List[GeometryRecord] = []
    duplicates = 0
    keyless = 0

    for batch in batches:
        for record in batch:
            key = record.dedupe_key(precision)
            if key is None:
                keyless += 1
                continue
            if key in seen:
                duplicates += 1
                continue
            seen.add(key)
            merged.append(record)

    if duplicates or keyless:
        logger.debug(
            f"Merged {len(merged)} records "
            f"(dropped {duplicates} duplicates, {keyless} without a key)"
        )
    return merged
