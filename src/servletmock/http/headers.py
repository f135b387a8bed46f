"""
=============================================================================
HEADER STORE
=============================================================================

Multi-valued header storage for the request and response mocks, plus the
HTTP-date helpers behind set_date_header() / get_date_header().

=============================================================================
SET VS ADD
=============================================================================

A header name maps to an ordered list of values:

    store.set("X-One", "a")      {"X-One": ["a"]}
    store.set("X-One", "b")      {"X-One": ["b"]}          ← replaced
    store.add("X-Many", "1")     {"X-One": ["b"], "X-Many": ["1"]}
    store.add("X-Many", "2")     {"X-One": ["b"], "X-Many": ["1", "2"]}

At commit time every value becomes its own header line, in order:

    X-One: b\r\n
    X-Many: 1\r\n
    X-Many: 2\r\n

=============================================================================
CASE SENSITIVITY
=============================================================================

HTTP header names are case-insensitive per RFC 7230, but the two sides
of the fixture treat them differently on purpose:

    ┌──────────────────────┬──────────────────────────────────────────────┐
    │ HeaderStore          │ Response side. Names stored and looked up    │
    │                      │ exactly as given. "content-length" does not  │
    │                      │ satisfy a check for "Content-Length".        │
    ├──────────────────────┼──────────────────────────────────────────────┤
    │ CaseInsensitive-     │ Request side. Names lowercased on the way in │
    │ HeaderStore          │ and on lookup.                               │
    └──────────────────────┴──────────────────────────────────────────────┘

Tests assert on the exact bytes a response commits, so the response side
must not rewrite the names a handler chose.

=============================================================================
"""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..errors import HeaderFormatError


class HeaderStore:
    """
    Ordered mapping of header name → list of values.

    Names keep first-insertion order (plain dict); values keep call order
    within a name.
    """

    def __init__(self, headers: Optional[Dict[str, Iterable[str]]] = None):
        self._headers: Dict[str, List[str]] = {}
        if headers:
            for name, values in headers.items():
                for value in values:
                    self.add(name, value)

    def _key(self, name: str) -> str:
        return name

    def set(self, name: str, value: str) -> None:
        """Replace all values of `name` with the single `value`."""
        self._headers[self._key(name)] = [value]

    def add(self, name: str, value: str) -> None:
        """Append `value` to `name`, creating the header if absent."""
        self._headers.setdefault(self._key(name), []).append(value)

    def get(self, name: str) -> Optional[str]:
        """First value of `name`, or None."""
        values = self._headers.get(self._key(name))
        return values[0] if values else None

    def get_all(self, name: str) -> List[str]:
        """All values of `name` in order (empty list if absent)."""
        return list(self._headers.get(self._key(name), []))

    def names(self) -> List[str]:
        """Names that currently hold at least one value."""
        return [name for name, values in self._headers.items() if values]

    def remove(self, name: str) -> None:
        self._headers.pop(self._key(name), None)

    def clear(self) -> None:
        self._headers.clear()

    def items(self) -> Iterator[Tuple[str, str]]:
        """Yield one (name, value) pair per value, the way they hit the wire."""
        for name, values in self._headers.items():
            for value in values:
                yield name, value

    def to_dict(self) -> Dict[str, List[str]]:
        """Deep copy as a plain dict (lists are not shared)."""
        return {name: list(values) for name, values in self._headers.items() if values}

    def copy(self) -> "HeaderStore":
        return self.__class__(self._headers)

    def contains(self, name: str) -> bool:
        """True if `name` holds at least one value."""
        return bool(self._headers.get(self._key(name)))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.contains(name)

    def __len__(self) -> int:
        return len(self.names())

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.to_dict()!r})"


class CaseInsensitiveHeaderStore(HeaderStore):
    """
    Request-side header store.

    Names are lowercased on store and lookup, so names() reports them in
    lowercase too:

        store.add("Content-Type", "text/plain")
        store.get("CONTENT-TYPE")   # "text/plain"
        store.names()               # ["content-type"]
    """

    def _key(self, name: str) -> str:
        return name.lower()


# =============================================================================
# HTTP DATES
# =============================================================================

def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 1123).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Thu, 01 Jan 1970 00:00:00 GMT

    Naive datetimes are taken to be UTC already.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    # Weekday names (0=Monday in Python's datetime)
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


def format_epoch_millis(millis: int) -> str:
    """
    Format milliseconds since the epoch as an HTTP-date.

    This is the unit servlet-style date headers use:

        format_epoch_millis(100000000)  # "Fri, 02 Jan 1970 03:46:40 GMT"
    """
    return format_http_date(datetime.fromtimestamp(millis / 1000, tz=timezone.utc))


def parse_http_date(header: str, value: str) -> int:
    """
    Parse an HTTP-date header value into milliseconds since the epoch.

    Accepts one- or two-digit days ("Sun, 4 Jan 1970 ...").

    Raises:
        HeaderFormatError: If `value` isn't an HTTP-date.
    """
    try:
        dt = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError) as e:
        raise HeaderFormatError(header, value, "expected an RFC 1123 date") from e
    if dt is None:
        raise HeaderFormatError(header, value, "expected an RFC 1123 date")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def parse_int_header(header: str, value: str) -> int:
    """
    Parse a decimal header value.

    Raises:
        HeaderFormatError: If `value` isn't a decimal integer.
    """
    try:
        return int(value.strip())
    except ValueError as e:
        raise HeaderFormatError(header, value, "expected an integer") from e
