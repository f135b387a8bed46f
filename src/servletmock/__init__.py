"""
=============================================================================
SERVLETMOCK - In-Memory Servlet-Style HTTP Test Doubles
=============================================================================

Request, response and session fixtures for unit-testing request handlers
without a network listener or a container.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    servletmock/
    ├── __init__.py          # This file - package exports
    ├── config.py            # FixtureConfig dataclass
    ├── errors.py            # IllegalStateError and friends
    └── http/
        ├── request.py       # HttpRequestMock
        ├── response.py      # HttpResponseMock (commit state machine)
        ├── session.py       # HttpSessionMock
        ├── interface.py     # Servlet contracts as ABCs
        ├── headers.py       # Header store, HTTP dates
        ├── status_codes.py  # Status registry
        ├── query_string.py  # Query string codec
        └── cookies.py       # Cookie codec

=============================================================================
QUICK START
=============================================================================

    from servletmock import HttpRequestMock, HttpResponseMock, CaptureSink

    request = HttpRequestMock().with_query_string("name=World")
    sink = CaptureSink()
    response = HttpResponseMock(sink)

    response.set_content_type("text/plain")
    response.get_writer().write(f"Hello, {request.get_parameter('name')}!")
    response.close()

    sink.text()
    # "HTTP/1.1 200 OK\\r\\n"
    # "Content-Type: text/plain; charset=ISO-8859-1\\r\\n"
    # "Content-Length: 13\\r\\n"
    # "\\r\\n"
    # "Hello, World!"

=============================================================================
"""

from .config import FixtureConfig
from .errors import (
    FixtureError,
    HeaderFormatError,
    IllegalStateError,
    UnsupportedInFixtureError,
)
from .http import (
    CaptureSink,
    Cookie,
    HTTPStatus,
    HttpRequestMock,
    HttpResponseMock,
    HttpSessionMock,
    Principal,
    format_query_string,
    parse_query_string,
    reason_phrase,
)

__version__ = "1.0.0"

__all__ = [
    "CaptureSink",
    "Cookie",
    "FixtureConfig",
    "FixtureError",
    "HTTPStatus",
    "HeaderFormatError",
    "HttpRequestMock",
    "HttpResponseMock",
    "HttpSessionMock",
    "IllegalStateError",
    "Principal",
    "UnsupportedInFixtureError",
    "format_query_string",
    "parse_query_string",
    "reason_phrase",
]
