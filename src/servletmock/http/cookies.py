"""
=============================================================================
COOKIE CODEC
=============================================================================

Formats the value of a Set-Cookie header from a Cookie, and parses a
single Cookie / Set-Cookie line back into one.

=============================================================================
COOKIE LINE ANATOMY
=============================================================================

    session=abc123; Domain=example.org; Path=/; Max-Age=3600; Secure; HttpOnly
    ───────┬──────  ─────────────────────────┬──────────────────────────────
           │                                 │
      name=value                attributes ("; " separated)

    ┌────────────┬──────────────────────────────────────────────────────┐
    │ Attribute  │ Effect on Cookie                                     │
    ├────────────┼──────────────────────────────────────────────────────┤
    │ Domain     │ domain                                               │
    │ Path       │ path                                                 │
    │ Comment    │ comment                                              │
    │ Version    │ version (int)                                        │
    │ Max-Age    │ max_age (int seconds)                                │
    │ Expires    │ max_age = seconds from now until the date            │
    │ Discard    │ max_age = -1 (session cookie)                        │
    │ Secure     │ secure = True                                        │
    │ HttpOnly   │ http_only = True                                     │
    └────────────┴──────────────────────────────────────────────────────┘

Formatting leaves out every attribute still at its default, so a bare
Cookie("a", "b") formats as just "a=b". Expires and Discard are never
written: max_age already carries their meaning.

=============================================================================
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from ..errors import HeaderFormatError
from .headers import parse_http_date, parse_int_header


_RECORD_SEPARATOR = re.compile(r"; *")
_NAME_VALUE_SEPARATOR = re.compile(r" *= *")


@dataclass
class Cookie:
    """
    A single HTTP cookie.

    max_age follows servlet conventions: -1 means "until the browser
    closes" and 0 means "delete now".
    """

    name: str
    value: str
    domain: Optional[str] = None
    path: Optional[str] = None
    comment: Optional[str] = None
    max_age: int = -1
    version: int = 0
    secure: bool = False
    http_only: bool = False


def format_cookie(cookie: Cookie) -> str:
    """
    Format a cookie as a Set-Cookie header value.

    Example:
        format_cookie(Cookie("id", "42", path="/", http_only=True))
        # "id=42; Path=/; HttpOnly"
    """
    parts = [f"{cookie.name}={cookie.value}"]
    if cookie.domain is not None:
        parts.append(f"Domain={cookie.domain}")
    if cookie.path is not None:
        parts.append(f"Path={cookie.path}")
    if cookie.max_age > 0:
        parts.append(f"Max-Age={cookie.max_age}")
    if cookie.comment is not None:
        parts.append(f"Comment={cookie.comment}")
    if cookie.version > 0:
        parts.append(f"Version={cookie.version}")
    if cookie.secure:
        parts.append("Secure")
    if cookie.http_only:
        parts.append("HttpOnly")
    return "; ".join(parts)


def parse_cookie(line: str, now: Optional[datetime] = None) -> Cookie:
    """
    Parse one Cookie / Set-Cookie line.

    Attribute names match case-insensitively; unknown attributes are
    ignored.

    Args:
        line: Header value, e.g. "id=42; Path=/; Secure"
        now: Reference time for Expires (defaults to the current UTC time)

    Returns:
        The parsed Cookie

    Raises:
        HeaderFormatError: If the line has no name=value pair, or an
            attribute value has the wrong type.
    """
    records = _RECORD_SEPARATOR.split(line.strip())
    name_value = _NAME_VALUE_SEPARATOR.split(records[0], maxsplit=1)
    if len(name_value) < 2 or not name_value[0]:
        raise HeaderFormatError("Cookie", line, "expected name=value")

    cookie = Cookie(name=name_value[0], value=name_value[1])

    for record in records[1:]:
        tag_value = _NAME_VALUE_SEPARATOR.split(record, maxsplit=1)
        tag = tag_value[0].lower()
        value = tag_value[1] if len(tag_value) > 1 else ""

        if tag == "domain":
            cookie.domain = value
        elif tag == "path":
            cookie.path = value
        elif tag == "comment":
            cookie.comment = value
        elif tag == "version":
            cookie.version = parse_int_header("Cookie", value)
        elif tag == "httponly":
            cookie.http_only = True
        elif tag == "secure":
            cookie.secure = True
        elif tag == "max-age":
            cookie.max_age = parse_int_header("Cookie", value)
        elif tag == "expires":
            cookie.max_age = _seconds_until(value, now)
        elif tag == "discard":
            cookie.max_age = -1

    return cookie


def _seconds_until(expires: str, now: Optional[datetime]) -> int:
    reference = now or datetime.now(timezone.utc)
    expires_millis = parse_http_date("Cookie", expires)
    return int(expires_millis / 1000 - reference.timestamp())
