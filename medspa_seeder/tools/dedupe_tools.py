from typing import Iterable, List, Set

from medspa_seeder.config.models.records import OutputRecord


def dedupe_key(record: OutputRecord) -> str:
    """
    Identity of a record: its domain, or `name|city` (lowercased) when it has none.
    """
    return record.domain or f"{record.name.lower()}|{record.city.lower()}"


def dedupe_records(records: Iterable[OutputRecord]) -> List[OutputRecord]:
    """
    Keep the first record seen for each dedupe key, preserving input order.
    """
    seen: Set[str] = set()
    kept: List[OutputRecord] = []
    for record in records:
        key = dedupe_key(record)
        if key in seen:
            continue
        seen.add(key)
        kept.append(record)
    return kept
