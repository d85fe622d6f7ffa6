from __future__ import annotations

import re
import textwrap
from typing import Any, Dict, Iterable, List

import requests

from medspa_seeder.config.logger import logger
from medspa_seeder.config.models.seeder_input import BoundingBox
from medspa_seeder.config.settings import OverpassSettings
from medspa_seeder.utils.decorators import with_retry
from medspa_seeder.utils.errors import MalformedResponse, TransportFailure

DEFAULT_NAME_PATTERN = r"med\s*spa|medspa|aesthetic|inject|botox|laser|hydrafacial"

# Characters with a meaning in the regex dialect Overpass evaluates.
_REGEX_SPECIALS = re.compile(r"([.*+?^${}()|\[\]\\])")

# (element kind, tag key, tag value), in query order.
POI_FILTERS = (
    ("node", "leisure", "spa"),
    ("way", "leisure", "spa"),
    ("node", "shop", "beauty"),
    ("way", "shop", "beauty"),
    ("node", "amenity", "clinic"),
    ("way", "amenity", "clinic"),
)


def escape_keyword(keyword: str) -> str:
    """
    Backslash-escape regex metacharacters so the keyword matches literally.

    :param keyword: A single keyword.
    :returns: The escaped keyword.
    """
    return _REGEX_SPECIALS.sub(r"\\\1", keyword)


def build_name_pattern(keywords: Iterable[Any]) -> str:
    """
    Build the case-insensitive alternation used to filter element names.

    :param keywords: Keywords to match; values are trimmed and empties discarded.
    :returns: A pattern such as `(?i)(med spa|botox)`.
    """
    safe = [
        escape_keyword(str(k).strip())
        for k in (keywords or [])
        if k is not None and str(k).strip()
    ]
    joined = "|".join(safe) if safe else DEFAULT_NAME_PATTERN
    return f"(?i)({joined})"


def build_query(
    name_pattern: str,
    bbox: BoundingBox,
    settings: OverpassSettings = OverpassSettings(),
) -> str:
    """
    Build the Overpass QL query for spas, beauty shops and clinics inside a bbox.

    :param name_pattern: The output of `build_name_pattern`.
    :param bbox: The area to search.
    :param settings: The Overpass settings providing the declared query timeout.
    :returns: A formatted Overpass QL query string.
    """
    area = bbox.to_overpass()
    clauses = "\n".join(
        f'  {kind}["{key}"="{value}"]["name"~"{name_pattern}"]({area});'
        for kind, key, value in POI_FILTERS
    )
    return textwrap.dedent(
        """
        [out:json][timeout:{timeout}];
        (
        {clauses}
        );
        out center tags;
        """
    ).strip().format(timeout=settings.query_timeout, clauses=clauses)


def post_query(
    endpoint: str, query: str, settings: OverpassSettings = OverpassSettings()
) -> Dict[str, Any]:
    """
    Submit an Overpass QL query to a single endpoint, once.

    :param endpoint: The interpreter URL.
    :param query: The Overpass query to execute.
    :param settings: The Overpass settings.
    :returns: The JSON-decoded response.
    :raises TransportFailure: On network errors, non-success status, a non-JSON
        content type or an undecodable body.
    """
    try:
        resp = requests.post(
            endpoint,
            data={"data": query},
            headers=settings.headers,
            timeout=settings.timeout,
        )
    except requests.RequestException as e:
        raise TransportFailure(
            f"Request to {endpoint} failed: {e}", endpoint=endpoint
        ) from e

    try:
        resp.raise_for_status()
    except requests.HTTPError as e:
        raise TransportFailure(
            f"HTTP {resp.status_code}",
            endpoint=endpoint,
            status_code=resp.status_code,
        ) from e

    content_type = resp.headers.get("content-type", "")
    if "application/json" not in content_type:
        raise TransportFailure(
            f"Unexpected content-type: {content_type}",
            endpoint=endpoint,
            status_code=resp.status_code,
        )

    try:
        return resp.json()
    except ValueError as e:
        raise TransportFailure(
            f"Invalid JSON from {endpoint}",
            endpoint=endpoint,
            status_code=resp.status_code,
        ) from e


def run_query(
    query: str, settings: OverpassSettings = OverpassSettings()
) -> Dict[str, Any]:
    """
    Submit a query with retries and endpoint fallback.

    :param query: The Overpass query to execute.
    :param settings: The Overpass settings.
    :returns: The parsed JSON of the first successful attempt.
    :raises EndpointExhausted: If every endpoint ran out of attempts.
    """
    return with_retry(post_query, settings)(query, settings=settings)


def elements_from_payload(payload: Any, *, strict: bool = False) -> List[Any]:
    """
    Pull the `elements` list out of an Overpass payload.

    :param payload: The decoded response.
    :param strict: Raise instead of tolerating a missing or malformed list.
    :returns: The elements, or an empty list for a malformed payload in lenient mode.
    :raises MalformedResponse: In strict mode, when `elements` is not a list.
    """
    elements = payload.get("elements") if isinstance(payload, dict) else None
    if isinstance(elements, list):
        return elements

    message = (
        f"Overpass payload has no 'elements' list "
        f"(got {type(elements).__name__ if isinstance(payload, dict) else type(payload).__name__})"
    )
    if strict:
        raise MalformedResponse(message)
    logger.warning(f"{message}; treating as empty")
    return []
