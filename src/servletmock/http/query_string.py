"""
=============================================================================
QUERY STRING CODEC
=============================================================================

Parses and formats application/x-www-form-urlencoded query strings while
keeping the difference between "a" and "a=" intact.

=============================================================================
BARE NAMES
=============================================================================

urllib.parse.parse_qs() drops or blanks parameters without a value. The
request fixture needs to tell them apart, so bare names map to None:

    "a=text&a&a=&a&a=data"
        │    │  │  │   │
        │    │  │  │   └── "data"
        │    │  │  └────── None   (no "=")
        │    │  └───────── ""     ("=" with nothing after it)
        │    └──────────── None
        └───────────────── "text"

    → {"a": ["text", None, "", None, "data"]}

format_query_string() is the exact inverse, so

    parse_query_string(format_query_string(m)) == m

for every mapping whose value lists are non-empty.

=============================================================================
"""

from typing import Dict, List, Mapping, Optional, Sequence
from urllib.parse import quote_plus, unquote_plus


QueryParams = Dict[str, List[Optional[str]]]


def parse_query_string(query_string: Optional[str], encoding: str = "UTF-8") -> QueryParams:
    """
    Parse a query string into name → list of values.

    Pairs are split on "&", then on the first "=". Names and values are
    form-decoded ("+" is a space, %XX uses `encoding`).

    Args:
        query_string: Raw query string without the leading "?"
        encoding: Charset for percent-decoding

    Returns:
        Parameters in order of first appearance; None for bare names

    Example:
        parse_query_string("my+%3D+name")  # {"my = name": [None]}
    """
    parameters: QueryParams = {}
    if not query_string:
        return parameters

    for pair in query_string.split("&"):
        name, sep, value = pair.partition("=")
        decoded = unquote_plus(value, encoding=encoding) if sep else None
        parameters.setdefault(unquote_plus(name, encoding=encoding), []).append(decoded)

    return parameters


def format_query_string(
    parameters: Mapping[str, Sequence[Optional[str]]],
    encoding: str = "UTF-8",
) -> str:
    """
    Format name → values as a query string.

    An empty value list or a None value emits the bare name.

    Example:
        format_query_string({"a": ["my = value"]})  # "a=my+%3D+value"
    """
    parts = []
    for name, values in parameters.items():
        encoded_name = _encode(name, encoding)
        if not values:
            parts.append(encoded_name)
            continue
        for value in values:
            if value is None:
                parts.append(encoded_name)
            else:
                parts.append(f"{encoded_name}={_encode(value, encoding)}")
    return "&".join(parts)


def _encode(text: str, encoding: str) -> str:
    # "*" stays literal like the servlet URL encoder; space becomes "+"
    return quote_plus(text, safe="*", encoding=encoding)
