from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence
from urllib.parse import urlsplit

from medspa_seeder.config.logger import logger
from medspa_seeder.config.models.records import OutputRecord

OSM_BASE_URL = "https://www.openstreetmap.org"

_SCHEME = re.compile(r"^[a-z][a-z0-9+.\-]*://", re.IGNORECASE)
_HOST_LABEL = r"[a-z0-9_](?:[a-z0-9_\-]*[a-z0-9_])?"
_HOSTNAME = re.compile(rf"^{_HOST_LABEL}(?:\.{_HOST_LABEL})*\.?$")

CITY_TAGS = ("addr:city", "is_in:city", "addr:town", "addr:village")
WEBSITE_TAGS = ("website", "contact:website")


def root_domain(url: Optional[str]) -> str:
    """
    Lower-cased hostname of a URL with a leading `www.` removed.

    `http://` is assumed when the value carries no scheme. Anything that does
    not parse to a valid hostname yields an empty string.

    :param url: The raw website value.
    :return: The root domain, e.g. `example.com`.
    """
    if not url or not isinstance(url, str):
        return ""
    url = url.strip()
    candidate = url if _SCHEME.match(url) else f"http://{url}"
    try:
        host = urlsplit(candidate).hostname
    except ValueError:
        return ""
    if not host:
        return ""
    try:
        host = host.encode("idna").decode("ascii").lower()
    except UnicodeError:
        return ""
    if not _HOSTNAME.match(host):
        return ""
    return host[4:] if host.startswith("www.") else host


def _tag(tags: Mapping[str, Any], key: str) -> str:
    value = tags.get(key)
    return value.strip() if isinstance(value, str) else ""


def category_from_tags(tags: Mapping[str, Any]) -> str:
    """
    Pick the category, preferring spa, then clinic, then beauty.

    :param tags: The element tags.
    :return: The category, or the raw amenity/leisure/shop value when none of the three match.
    """
    if _tag(tags, "leisure") == "spa":
        return "spa"
    if _tag(tags, "amenity") == "clinic":
        return "clinic"
    if _tag(tags, "shop") == "beauty":
        return "beauty"
    return _tag(tags, "amenity") or _tag(tags, "leisure") or _tag(tags, "shop")


def city_from_tags(tags: Mapping[str, Any], fallback_city: str) -> str:
    """
    :param tags: The element tags.
    :param fallback_city: The configured city.
    :return: The first non-empty address city tag, else `fallback_city`.
    """
    for key in CITY_TAGS:
        city = _tag(tags, key)
        if city:
            return city
    return fallback_city


def evidence_note(name: str, keywords: Iterable[str]) -> str:
    """
    Record which keywords occur in the element name.

    :param name: The element name.
    :param keywords: The configured keywords.
    :return: `name_keywords=<k1>,<k2>` with lowercased keywords, or `""` when none match.
    """
    lowered = (name or "").lower()
    hits = [
        str(k).lower() for k in keywords if str(k) and str(k).lower() in lowered
    ]
    return f"name_keywords={','.join(hits)}" if hits else ""


def confidence_for(domain: str, note: str) -> str:
    """
    Score how likely the place is a real lead.

    :param domain: The root domain, possibly empty.
    :param note: The evidence note, possibly empty.
    :return: `"1.00"` with a domain, `"0.70"` with only a keyword hit, else `"0.50"`.
    """
    if domain:
        return "1.00"
    if note:
        return "0.70"
    return "0.50"


def _coordinate(element: Mapping[str, Any], axis: str) -> str:
    value = element.get(axis)
    if value is None:
        center = element.get("center")
        value = center.get(axis) if isinstance(center, Mapping) else None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return ""
    return f"{value:.6f}"


def source_url(element: Mapping[str, Any]) -> str:
    """
    :param element: The Overpass element.
    :return: The openstreetmap.org page of the node or way.
    """
    osm_type = "node" if element.get("type") == "node" else "way"
    return f"{OSM_BASE_URL}/{osm_type}/{element.get('id')}"


def extract_record(
    element: Any, keywords: Sequence[str], fallback_city: str
) -> Optional[OutputRecord]:
    """
    Map a raw Overpass element onto an `OutputRecord`.

    :param element: One entry of the Overpass `elements` list.
    :param keywords: Keywords used for the evidence note.
    :param fallback_city: City used when no address tag names one.
    :return: The record, or None when the element has no usable name.
    """
    if not isinstance(element, Mapping):
        return None
    tags = element.get("tags") or {}
    if not isinstance(tags, Mapping):
        tags = {}

    name = _tag(tags, "name")
    if not name:
        return None

    website = next((_tag(tags, key) for key in WEBSITE_TAGS if _tag(tags, key)), "")
    domain = root_domain(website)
    note = evidence_note(name, keywords)

    return OutputRecord(
        name=name,
        domain=domain,
        city=city_from_tags(tags, fallback_city),
        category=category_from_tags(tags),
        source_url=source_url(element),
        lat=_coordinate(element, "lat"),
        lon=_coordinate(element, "lon"),
        confidence=confidence_for(domain, note),
        notes=note,
    )


def extract_records(
    elements: Iterable[Any], keywords: Sequence[str], fallback_city: str
) -> List[OutputRecord]:
    """
    Extract records from every element, dropping the unnamed ones.
    """
    records: List[OutputRecord] = []
    dropped = 0
    for element in elements:
        record = extract_record(element, keywords, fallback_city)
        if record is None:
            dropped += 1
            continue
        records.append(record)
    if dropped:
        logger.debug(f"Dropped {dropped} elements without a name")
    return records


def records_to_rows(records: Iterable[OutputRecord]) -> List[Dict[str, str]]:
    return [record.model_dump() for record in records]
