"""
=============================================================================
FIXTURE ERRORS
=============================================================================

Exceptions raised by the servlet test doubles.

=============================================================================
ERROR TAXONOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        FIXTURE ERRORS                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   FixtureError                                                       │
    │   ├── IllegalStateError          call not allowed in this phase     │
    │   │     - set_status() after commit                                 │
    │   │     - set_header() / add_header() after commit                  │
    │   │     - get_writer() after get_output_stream() (and vice versa)   │
    │   │     - commit() twice                                            │
    │   │                                                                  │
    │   ├── HeaderFormatError          header value can't be parsed       │
    │   │     - get_date_header() on "yesterday"                          │
    │   │     - get_int_header() on "forty-two"                           │
    │   │                                                                  │
    │   └── UnsupportedInFixtureError  not implemented for testing        │
    │         - multipart parts, async context, upgrade, dispatch         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

None of these are transient. A test that triggers one made a call the
code under test must not make, so nothing here is ever retried.

=============================================================================
"""

from typing import Optional


class FixtureError(Exception):
    """Base class for every error raised by the servlet test doubles."""


class IllegalStateError(FixtureError):
    """
    Raised when an operation is illegal in the current lifecycle phase.

    Mirrors the container behaviour a handler would see in production:
    once a response is committed its status line and headers are on the
    wire, so changing them is a programming error, not a recoverable one.
    """


class HeaderFormatError(FixtureError, ValueError):
    """
    Raised when a header value can't be converted to the requested type.

    Subclasses ValueError so callers that already guard int()/date parsing
    with `except ValueError` keep working.
    """

    def __init__(self, header: str, value: str, reason: Optional[str] = None):
        message = f"Malformed header {header}: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.header = header  # Header name as requested
        self.value = value    # Raw header value


class UnsupportedInFixtureError(FixtureError, NotImplementedError):
    """
    Raised by contract operations the fixtures deliberately don't implement.

    Multipart parts, async contexts, protocol upgrades and request
    dispatching need a real container. Failing loudly is better than
    returning a half-working stand-in.
    """

    def __init__(self, operation: str):
        super().__init__(f"{operation} is not supported in this fixture")
        self.operation = operation
