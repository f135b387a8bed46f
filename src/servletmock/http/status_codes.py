"""
=============================================================================
HTTP STATUS CODES AND REASON PHRASES
=============================================================================

The status registry used when the response mock writes its status line.

=============================================================================
STATUS CODE CATEGORIES
=============================================================================

HTTP status codes are 3-digit numbers grouped by the first digit:

    ┌────────────────────────────────────────────────────────────────────┐
    │                      STATUS CODE CATEGORIES                        │
    ├────────┬───────────────────────────────────────────────────────────┤
    │  1xx   │ INFORMATIONAL   100 Continue, 101 Switching Protocols     │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  2xx   │ SUCCESS         200 OK, 201 Created, 204 No Content       │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  3xx   │ REDIRECTION     301 Moved Permanently, 302 Found          │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  4xx   │ CLIENT ERROR    400 Bad Request, 404 Not Found            │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  5xx   │ SERVER ERROR    500 Internal Server Error                 │
    └────────┴───────────────────────────────────────────────────────────┘

=============================================================================
UNKNOWN CODES
=============================================================================

Handlers under test are free to send any integer as a status. A code that
isn't in the table still gets a reason phrase, derived from its range:

        code < 100  →  "Unknown"
        1xx         →  "Informational"
        2xx         →  "Success"
        3xx         →  "Redirection"
        4xx         →  "Client Error"
        5xx         →  "Server Error"
        code ≥ 600  →  "Unknown"

So `HTTP/1.1 299 Success` is what a 299 commits as, unless the handler set
its own status message.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    This enum extends IntEnum, so status codes can be used as integers:

        >>> HTTPStatus.OK
        <HTTPStatus.OK: 200>
        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.OK.phrase
        'OK'
    """

    # =========================================================================
    # 1xx INFORMATIONAL
    # =========================================================================
    CONTINUE = 100
    SWITCHING_PROTOCOLS = 101
    PROCESSING = 102

    # =========================================================================
    # 2xx SUCCESS
    # =========================================================================
    OK = 200
    CREATED = 201
    ACCEPTED = 202
    NON_AUTHORITATIVE_INFORMATION = 203
    NO_CONTENT = 204
    RESET_CONTENT = 205
    PARTIAL_CONTENT = 206
    MULTI_STATUS = 207
    ALREADY_REPORTED = 208
    IM_USED = 226

    # =========================================================================
    # 3xx REDIRECTION
    # =========================================================================
    MULTIPLE_CHOICES = 300
    MOVED_PERMANENTLY = 301
    FOUND = 302                 # send_redirect() uses this
    SEE_OTHER = 303
    NOT_MODIFIED = 304
    USE_PROXY = 305
    TEMPORARY_REDIRECT = 307
    PERMANENT_REDIRECT = 308

    # =========================================================================
    # 4xx CLIENT ERRORS
    # =========================================================================
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    PAYMENT_REQUIRED = 402
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    NOT_ACCEPTABLE = 406
    PROXY_AUTHENTICATION_REQUIRED = 407
    REQUEST_TIMEOUT = 408
    CONFLICT = 409
    GONE = 410
    LENGTH_REQUIRED = 411
    PRECONDITION_FAILED = 412
    PAYLOAD_TOO_LARGE = 413
    REQUEST_URI_TOO_LONG = 414
    UNSUPPORTED_MEDIA_TYPE = 415
    REQUESTED_RANGE_NOT_SATISFIABLE = 416
    EXPECTATION_FAILED = 417
    IM_A_TEAPOT = 418
    MISDIRECTED_REQUEST = 421
    UNPROCESSABLE_ENTITY = 422
    LOCKED = 423
    FAILED_DEPENDENCY = 424
    UPGRADE_REQUIRED = 426
    PRECONDITION_REQUIRED = 428
    TOO_MANY_REQUESTS = 429
    REQUEST_HEADER_FIELDS_TOO_LARGE = 431
    UNAVAILABLE_FOR_LEGAL_REASONS = 451
    CLIENT_CLOSED_REQUEST = 499           # nginx extension

    # =========================================================================
    # 5xx SERVER ERRORS
    # =========================================================================
    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504
    HTTP_VERSION_NOT_SUPPORTED = 505
    VARIANT_ALSO_NEGOTIATES = 506
    INSUFFICIENT_STORAGE = 507
    LOOP_DETECTED = 508
    NOT_EXTENDED = 510
    NETWORK_AUTHENTICATION_REQUIRED = 511
    NETWORK_CONNECT_TIMEOUT_ERROR = 599   # proxy extension

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.1 200 OK
                     ─── ──
                      │   │
                      │   └── Reason phrase
                      └────── Status code
        """
        return _STATUS_PHRASES[self]

    @property
    def is_informational(self) -> bool:
        """Check if this is a 1xx (informational) status code."""
        return 100 <= self < 200

    @property
    def is_success(self) -> bool:
        """Check if this is a 2xx (success) status code."""
        return 200 <= self < 300

    @property
    def is_redirect(self) -> bool:
        """Check if this is a 3xx (redirection) status code."""
        return 300 <= self < 400

    @property
    def is_client_error(self) -> bool:
        """Check if this is a 4xx (client error) status code."""
        return 400 <= self < 500

    @property
    def is_server_error(self) -> bool:
        """Check if this is a 5xx (server error) status code."""
        return 500 <= self < 600

    @property
    def is_error(self) -> bool:
        """Check if this is an error status code (4xx or 5xx)."""
        return self >= 400


# =============================================================================
# REASON PHRASES
# =============================================================================
#
# Per RFC 7230, reason phrases are purely informational and may be
# modified or ignored by clients. These are the phrases committed when a
# handler doesn't pass its own message to set_status().
#
# =============================================================================

_STATUS_PHRASES = {
    # 1xx Informational
    HTTPStatus.CONTINUE: "Continue",
    HTTPStatus.SWITCHING_PROTOCOLS: "Switching Protocols",
    HTTPStatus.PROCESSING: "Processing",

    # 2xx Success
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.ACCEPTED: "Accepted",
    HTTPStatus.NON_AUTHORITATIVE_INFORMATION: "Non-authoritative Information",
    HTTPStatus.NO_CONTENT: "No Content",
    HTTPStatus.RESET_CONTENT: "Reset Content",
    HTTPStatus.PARTIAL_CONTENT: "Partial Content",
    HTTPStatus.MULTI_STATUS: "Multi-Status",
    HTTPStatus.ALREADY_REPORTED: "Already Reported",
    HTTPStatus.IM_USED: "IM Used",

    # 3xx Redirection
    HTTPStatus.MULTIPLE_CHOICES: "Multiple Choices",
    HTTPStatus.MOVED_PERMANENTLY: "Moved Permanently",
    HTTPStatus.FOUND: "Found",
    HTTPStatus.SEE_OTHER: "See Other",
    HTTPStatus.NOT_MODIFIED: "Not Modified",
    HTTPStatus.USE_PROXY: "Use Proxy",
    HTTPStatus.TEMPORARY_REDIRECT: "Temporary Redirect",
    HTTPStatus.PERMANENT_REDIRECT: "Permanent Redirect",

    # 4xx Client Errors
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.UNAUTHORIZED: "Unauthorized",
    HTTPStatus.PAYMENT_REQUIRED: "Payment Required",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.NOT_ACCEPTABLE: "Not Acceptable",
    HTTPStatus.PROXY_AUTHENTICATION_REQUIRED: "Proxy Authentication Required",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.CONFLICT: "Conflict",
    HTTPStatus.GONE: "Gone",
    HTTPStatus.LENGTH_REQUIRED: "Length Required",
    HTTPStatus.PRECONDITION_FAILED: "Precondition Failed",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.REQUEST_URI_TOO_LONG: "Request-URI Too Long",
    HTTPStatus.UNSUPPORTED_MEDIA_TYPE: "Unsupported Media Type",
    HTTPStatus.REQUESTED_RANGE_NOT_SATISFIABLE: "Requested Range Not Satisfiable",
    HTTPStatus.EXPECTATION_FAILED: "Expectation Failed",
    HTTPStatus.IM_A_TEAPOT: "I'm a teapot",
    HTTPStatus.MISDIRECTED_REQUEST: "Misdirected Request",
    HTTPStatus.UNPROCESSABLE_ENTITY: "Unprocessable Entity",
    HTTPStatus.LOCKED: "Locked",
    HTTPStatus.FAILED_DEPENDENCY: "Failed Dependency",
    HTTPStatus.UPGRADE_REQUIRED: "Upgrade Required",
    HTTPStatus.PRECONDITION_REQUIRED: "Precondition Required",
    HTTPStatus.TOO_MANY_REQUESTS: "Too Many Requests",
    HTTPStatus.REQUEST_HEADER_FIELDS_TOO_LARGE: "Request Header Fields Too Large",
    HTTPStatus.UNAVAILABLE_FOR_LEGAL_REASONS: "Unavailable For Legal Reasons",
    HTTPStatus.CLIENT_CLOSED_REQUEST: "Client Closed Request",

    # 5xx Server Errors
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
    HTTPStatus.BAD_GATEWAY: "Bad Gateway",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
    HTTPStatus.GATEWAY_TIMEOUT: "Gateway Timeout",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
    HTTPStatus.VARIANT_ALSO_NEGOTIATES: "Variant Also Negotiates",
    HTTPStatus.INSUFFICIENT_STORAGE: "Insufficient Storage",
    HTTPStatus.LOOP_DETECTED: "Loop Detected",
    HTTPStatus.NOT_EXTENDED: "Not Extended",
    HTTPStatus.NETWORK_AUTHENTICATION_REQUIRED: "Network Authentication Required",
    HTTPStatus.NETWORK_CONNECT_TIMEOUT_ERROR: "Network Connect Timeout Error",
}


_PHRASES_BY_CODE = {int(status): phrase for status, phrase in _STATUS_PHRASES.items()}


# Range fallbacks, checked in order: first upper bound above the code wins
_RANGE_PHRASES = (
    (100, "Unknown"),
    (200, "Informational"),
    (300, "Success"),
    (400, "Redirection"),
    (500, "Client Error"),
    (600, "Server Error"),
)


def reason_phrase(code: int) -> str:
    """
    Get the reason phrase for any integer status code.

    Exact matches come from the HTTPStatus table; everything else falls
    back to the name of its range (see module docstring).

    Args:
        code: Numeric status code, standard or not

    Returns:
        Reason phrase for the status line

    Example:
        reason_phrase(404)  # "Not Found"
        reason_phrase(299)  # "Success"
        reason_phrase(42)   # "Unknown"
    """
    phrase = _PHRASES_BY_CODE.get(code)
    if phrase is not None:
        return phrase

    for upper_bound, phrase in _RANGE_PHRASES:
        if code < upper_bound:
            return phrase
    return "Unknown"
