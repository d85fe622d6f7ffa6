import hashlib
import json
from typing import Any


def summarize(result: Any, *, max_len: int = 200) -> str:
    """
    Summarizes the input `result` into a short string.
    :param result: Object to summarize.
    :param max_len: The length of characters of the summary
    :return: For an Overpass payload, the element count and a short SHA-256 digest.
             For a list, its length. Otherwise a truncated string representation.
    """
    if isinstance(result, dict) and "elements" in result:
        elements = result["elements"]
        count = len(elements) if isinstance(elements, list) else 0
        h = hashlib.sha256(
            json.dumps(result, sort_keys=True, default=str).encode()
        ).hexdigest()[:8]
        return f"elements={count} sha256={h}"
    if isinstance(result, (list, tuple)):
        return f"count={len(result)}"
    text = str(result)
    return (text[:max_len] + "…") if len(text) > max_len else text


def query_hash(query: str) -> str:
    """
    Stable 8-char digest of the query text
    :param query: The given query
    :return: The string representation of the hash
    """
    return hashlib.sha256(query.encode()).hexdigest()[:8]
