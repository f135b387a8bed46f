"""
HTTP fixture components.

    request.py        HttpRequestMock (fluent builder) and Principal
    response.py       HttpResponseMock, its body handles and CaptureSink
    session.py        HttpSessionMock
    interface.py      Request/response/session contracts (ABCs)
    headers.py        HeaderStore and HTTP-date helpers
    status_codes.py   HTTPStatus and reason_phrase()
    query_string.py   Query string parse/format
    cookies.py        Cookie and its header codec
"""

from .cookies import Cookie, format_cookie, parse_cookie
from .headers import (
    CaseInsensitiveHeaderStore,
    HeaderStore,
    format_epoch_millis,
    format_http_date,
    parse_http_date,
)
from .interface import HttpServletRequest, HttpServletResponse, HttpSession
from .query_string import format_query_string, parse_query_string
from .request import DispatcherType, HttpRequestMock, Principal
from .response import (
    CaptureSink,
    HttpResponseMock,
    OutputMode,
    ResponseOutputStream,
    ResponseWriter,
)
from .session import HttpSessionMock
from .status_codes import HTTPStatus, reason_phrase

__all__ = [
    "CaptureSink",
    "CaseInsensitiveHeaderStore",
    "Cookie",
    "DispatcherType",
    "HTTPStatus",
    "HeaderStore",
    "HttpRequestMock",
    "HttpResponseMock",
    "HttpServletRequest",
    "HttpServletResponse",
    "HttpSession",
    "HttpSessionMock",
    "OutputMode",
    "Principal",
    "ResponseOutputStream",
    "ResponseWriter",
    "format_cookie",
    "format_epoch_millis",
    "format_http_date",
    "format_query_string",
    "parse_cookie",
    "parse_http_date",
    "parse_query_string",
    "reason_phrase",
]
