"""
=============================================================================
HTTP REQUEST MOCK
=============================================================================

A servlet-style request configured up front through a fluent builder,
then handed to the code under test.

=============================================================================
BUILDING A REQUEST
=============================================================================

Every with_*() method returns the request itself, so a fixture reads as
one expression:

    request = (HttpRequestMock()
        .with_method("POST")
        .with_context_path("/app")
        .with_servlet_path("/users")
        .with_path("/42")
        .with_query_string("expand=roles&expand=groups")
        .with_header("Content-Type", "application/json; charset=UTF-8")
        .with_body('{"name": "alice"}'))

    request.get_request_uri()               # "/app/users/42"
    request.get_parameter_values("expand")  # ["roles", "groups"]
    request.get_character_encoding()        # "UTF-8"

=============================================================================
DEFAULTS
=============================================================================

    ┌────────────────────┬──────────────────────────────────────────────┐
    │ protocol           │ config.protocol ("HTTP/1.1")                 │
    │ method             │ "GET"                                        │
    │ scheme             │ "http"                                       │
    │ context/servlet    │ "" / ""                                      │
    │ path info          │ None  (request URI ends in "/")              │
    │ local              │ 127.0.0.1:8080, host name "localhost"        │
    │ remote             │ 0.0.0.0, host "example.org", port 2**31 - 1  │
    │ body               │ empty                                        │
    └────────────────────┴──────────────────────────────────────────────┘

Header names are case-insensitive on this side: get_header("content-type")
and get_header("Content-Type") find the same value.

=============================================================================
"""

import io
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, BinaryIO, Dict, Iterable, List, Mapping, Optional, Sequence, TextIO, Tuple, Union
from urllib.parse import urlsplit

from ..config import FixtureConfig
from ..errors import HeaderFormatError, IllegalStateError, UnsupportedInFixtureError
from .cookies import Cookie, parse_cookie
from .headers import CaseInsensitiveHeaderStore, parse_http_date, parse_int_header
from .interface import HttpServletRequest, HttpServletResponse
from .query_string import parse_query_string
from .session import HttpSessionMock


logger = logging.getLogger(__name__)


_CHARSET_SEPARATOR = "; charset="

_DEFAULT_PORTS = {"http": 80, "https": 443}


def _split_host(host: str) -> Tuple[Optional[str], Optional[int]]:
    """Split a Host header value into (hostname, port)."""
    try:
        parts = urlsplit(f"//{host}")
        return parts.hostname, parts.port
    except ValueError as e:
        raise HeaderFormatError("Host", host, "expected host[:port]") from e


@dataclass(frozen=True)
class Principal:
    """An authenticated user, identified by name."""

    name: str


class DispatcherType(Enum):
    FORWARD = "FORWARD"
    INCLUDE = "INCLUDE"
    REQUEST = "REQUEST"
    ASYNC = "ASYNC"
    ERROR = "ERROR"


class HttpRequestMock(HttpServletRequest):
    """
    Read-mostly request fixture.

    Configure with the with_*() builder methods before use; the getters
    implement the request contract on top of that configuration.
    """

    def __init__(self, config: Optional[FixtureConfig] = None):
        self.config = config or FixtureConfig.from_env()
        self.config.validate()

        # Request line
        self._protocol = self.config.protocol
        self._method = "GET"
        self._scheme = "http"
        self._context_path = ""
        self._servlet_path = ""
        self._path: Optional[str] = None
        self._query_string: Optional[str] = None

        # Content
        self._headers = CaseInsensitiveHeaderStore()
        self._parameters: Dict[str, List[Optional[str]]] = {}
        self._input: BinaryIO = io.BytesIO()
        self._body_encoding: Optional[str] = None
        self._reader: Optional[TextIO] = None

        # Connection
        self._local_port = 8080
        self._local_ip = "127.0.0.1"
        self._local_host = "localhost"
        self._remote_port = 2 ** 31 - 1
        self._remote_ip = "0.0.0.0"
        self._remote_host = "example.org"

        # Authentication and session
        self._auth_type: Optional[str] = None
        self._principal: Optional[Principal] = None
        self._remote_user: Optional[str] = None
        self._session: Optional[HttpSessionMock] = None
        self._requested_session_id: Optional[str] = None

        self._attributes: Dict[str, Any] = {}

    # =========================================================================
    # BUILDER
    # =========================================================================

    def with_protocol(self, protocol: str) -> "HttpRequestMock":
        self._protocol = protocol
        return self

    def with_method(self, method: str) -> "HttpRequestMock":
        self._method = method
        return self

    def with_scheme(self, scheme: str) -> "HttpRequestMock":
        self._scheme = scheme
        return self

    def with_context_path(self, context_path: str) -> "HttpRequestMock":
        self._context_path = context_path
        return self

    def with_servlet_path(self, servlet_path: str) -> "HttpRequestMock":
        self._servlet_path = servlet_path
        return self

    def with_path(self, path: Optional[str]) -> "HttpRequestMock":
        """Set the path info (the part after the servlet path)."""
        self._path = path
        return self

    def with_query_string(self, query_string: Optional[str], encoding: str = "UTF-8") -> "HttpRequestMock":
        """
        Set the query string and merge its parameters.

        Bare names ("?debug") become parameters with a single None value.
        """
        self._query_string = query_string
        return self.with_parameters(parse_query_string(query_string, encoding))

    def with_headers(self, headers: Mapping[str, Union[str, Iterable[str]]]) -> "HttpRequestMock":
        """
        Replace the values of every header named in `headers`.

        A value may be a single string or a list of strings.
        """
        for name, values in headers.items():
            self._headers.remove(name)
            for value in ([values] if isinstance(values, str) else values):
                self._headers.add(name, value)
        return self

    def with_header(self, name: str, value: str) -> "HttpRequestMock":
        """Add one header value, keeping existing values of `name`."""
        self._headers.add(name, value)
        return self

    def with_parameters(self, parameters: Mapping[str, Sequence[Optional[str]]]) -> "HttpRequestMock":
        """Merge parameters; names with no values are skipped."""
        for name, values in parameters.items():
            if values:
                self._parameters[name] = list(values)
        return self

    def with_attributes(self, attributes: Mapping[str, Any]) -> "HttpRequestMock":
        """Replace all request attributes."""
        self._attributes = dict(attributes)
        return self

    def with_session(self, session: Optional[HttpSessionMock]) -> "HttpRequestMock":
        self._session = session
        return self

    def with_requested_session_id(self, session_id: Optional[str]) -> "HttpRequestMock":
        self._requested_session_id = session_id
        return self

    def with_authentication(self, auth_type: str, principal: Principal) -> "HttpRequestMock":
        self._auth_type = auth_type
        self._principal = principal
        self._remote_user = principal.name
        return self

    def with_local_port(self, port: int) -> "HttpRequestMock":
        self._local_port = port
        return self

    def with_local_ip(self, ip: str) -> "HttpRequestMock":
        self._local_ip = ip
        return self

    def with_local_host(self, host: str) -> "HttpRequestMock":
        self._local_host = host
        return self

    def with_remote_port(self, port: int) -> "HttpRequestMock":
        self._remote_port = port
        return self

    def with_remote_ip(self, ip: str) -> "HttpRequestMock":
        self._remote_ip = ip
        return self

    def with_remote_host(self, host: str) -> "HttpRequestMock":
        self._remote_host = host
        return self

    def with_body(self, body: Union[str, bytes], encoding: Optional[str] = None) -> "HttpRequestMock":
        """
        Set the request body.

        Strings are encoded with `encoding`, else the Content-Type charset,
        else UTF-8. get_reader() decodes with the same encoding.
        """
        self._body_encoding = None
        if isinstance(body, str):
            self._body_encoding = encoding or self.get_character_encoding() or "UTF-8"
            body = body.encode(self._body_encoding)
        self._input = io.BytesIO(body)
        self._reader = None
        return self

    # =========================================================================
    # HEADERS
    # =========================================================================

    def get_header(self, name: str) -> Optional[str]:
        return self._headers.get(name)

    def get_headers(self, name: str) -> List[str]:
        return self._headers.get_all(name)

    def get_date_header(self, name: str) -> int:
        """
        Header as milliseconds since the epoch, or -1 if absent.

        Raises:
            HeaderFormatError: If the value isn't an HTTP-date.
        """
        value = self.get_header(name)
        if value is None:
            return -1
        return parse_http_date(name, value)

    def get_int_header(self, name: str) -> int:
        """
        Header as an int, or -1 if absent.

        Raises:
            HeaderFormatError: If the value isn't an integer.
        """
        value = self.get_header(name)
        if value is None:
            return -1
        return parse_int_header(name, value)

    def get_header_names(self) -> List[str]:
        return self._headers.names()

    def get_cookies(self) -> List[Cookie]:
        """One Cookie per Cookie header value (empty list if none)."""
        return [parse_cookie(value) for value in self.get_headers("Cookie")]

    def get_locale(self) -> str:
        return self.get_locales()[0]

    def get_locales(self) -> List[str]:
        return [self.config.default_locale]

    # =========================================================================
    # REQUEST LINE
    # =========================================================================

    def get_protocol(self) -> str:
        return self._protocol

    def get_scheme(self) -> str:
        return self._scheme

    def get_method(self) -> str:
        return self._method

    def get_path_info(self) -> Optional[str]:
        return self._path

    def get_path_translated(self) -> Optional[str]:
        return None

    def get_context_path(self) -> str:
        return self._context_path

    def get_servlet_path(self) -> str:
        return self._servlet_path

    def get_query_string(self) -> Optional[str]:
        return self._query_string

    def get_request_uri(self) -> str:
        """context path + servlet path + path info (or "/")."""
        path = self._path if self._path is not None else "/"
        return f"{self._context_path}{self._servlet_path}{path}"

    def get_request_url(self) -> str:
        """
        Full URL without query string.

        Example: "http://localhost:8080/app/users/42"
        """
        return f"{self._scheme}://{self.get_server_name()}:{self.get_server_port()}{self.get_request_uri()}"

    # =========================================================================
    # CONNECTION
    # =========================================================================

    def get_remote_port(self) -> int:
        return self._remote_port

    def get_remote_addr(self) -> str:
        return self._remote_ip

    def get_remote_host(self) -> str:
        return self._remote_host

    def get_local_port(self) -> int:
        return self._local_port

    def get_local_name(self) -> str:
        return self._local_host

    def get_local_addr(self) -> str:
        return self._local_ip

    def get_server_port(self) -> int:
        """
        Port from the Host header, else the scheme's default port when
        Host has none, else the local port when there is no Host header.

        Raises:
            HeaderFormatError: If the Host port isn't a valid port number.
        """
        host = self.get_header("Host")
        if host is None:
            return self._local_port
        _, port = _split_host(host)
        if port is not None:
            return port
        return _DEFAULT_PORTS.get(self._scheme, self._local_port)

    def get_server_name(self) -> str:
        """Host name from the Host header, else the local host name."""
        host = self.get_header("Host")
        if host is None:
            return self._local_host
        hostname, _ = _split_host(host)
        return hostname or self._local_host

    def is_secure(self) -> bool:
        return self._scheme == "https"

    # =========================================================================
    # AUTHENTICATION
    # =========================================================================

    def get_auth_type(self) -> Optional[str]:
        return self._auth_type

    def get_remote_user(self) -> Optional[str]:
        return self._remote_user

    def get_user_principal(self) -> Optional[Principal]:
        return self._principal

    def is_user_in_role(self, role: str) -> bool:
        return False

    def authenticate(self, response: HttpServletResponse) -> bool:
        return False

    def login(self, username: str, password: str) -> None:
        """Accept any credentials and authenticate as `username`."""
        self.with_authentication("BasicAuth", Principal(username))

    def logout(self) -> None:
        self._remote_user = None
        self._auth_type = None
        self._principal = None

    # =========================================================================
    # SESSION
    # =========================================================================

    def get_session(self, create: bool = True) -> Optional[HttpSessionMock]:
        """
        The request's session; with `create`, a new one if there is none.

        A created session is kept, so later calls return the same one.
        """
        if self._session is None and create:
            self._session = HttpSessionMock()
            logger.debug(f"Created session {self._session.get_id()}")
        return self._session

    def change_session_id(self) -> str:
        session = self.get_session(create=False)
        if session is None:
            raise IllegalStateError("Cannot change session id: request has no session")
        replacement = HttpSessionMock(attributes={
            name: session.get_attribute(name) for name in session.get_attribute_names()
        })
        self._session = replacement
        return replacement.get_id()

    def get_requested_session_id(self) -> Optional[str]:
        return self._requested_session_id

    def is_requested_session_id_valid(self) -> bool:
        return self._requested_session_id is not None

    def is_requested_session_id_from_cookie(self) -> bool:
        return False

    def is_requested_session_id_from_url(self) -> bool:
        return False

    # =========================================================================
    # ATTRIBUTES
    # =========================================================================

    def get_attribute(self, name: str) -> Any:
        return self._attributes.get(name)

    def get_attribute_names(self) -> List[str]:
        return list(self._attributes)

    def set_attribute(self, name: str, value: Any) -> None:
        self._attributes[name] = value

    def remove_attribute(self, name: str) -> None:
        self._attributes.pop(name, None)

    # =========================================================================
    # CONTENT
    # =========================================================================

    def get_character_encoding(self) -> Optional[str]:
        """Charset parameter of Content-Type, or None."""
        content_type = self.get_content_type()
        if content_type is None:
            return None
        _, sep, charset = content_type.partition(_CHARSET_SEPARATOR)
        return charset if sep else None

    def set_character_encoding(self, encoding: str) -> None:
        """Ignored; the encoding comes from the configured Content-Type."""

    def get_content_length(self) -> int:
        """
        Content-Length as an int, or -1 if absent.

        Raises:
            HeaderFormatError: If the value isn't an integer.
        """
        return self.get_int_header("Content-Length")

    def get_content_type(self) -> Optional[str]:
        return self.get_header("Content-Type")

    def get_input_stream(self) -> BinaryIO:
        return self._input

    def get_reader(self) -> TextIO:
        """
        Text view of the body.

        A text body is decoded with the encoding with_body() used; a bytes
        body with the request charset, else config.fallback_encoding.
        Line endings are returned untouched.
        """
        if self._reader is None:
            encoding = (self._body_encoding
                        or self.get_character_encoding()
                        or self.config.fallback_encoding)
            self._reader = io.TextIOWrapper(self._input, encoding=encoding, newline="")
        return self._reader

    def get_parts(self) -> List[Any]:
        raise UnsupportedInFixtureError("HttpServletRequest.get_parts")

    def get_part(self, name: str) -> Any:
        raise UnsupportedInFixtureError("HttpServletRequest.get_part")

    # =========================================================================
    # PARAMETERS
    # =========================================================================

    def get_parameter(self, name: str) -> Optional[str]:
        """First value of `name`; None if absent or a bare name."""
        values = self._parameters.get(name)
        return values[0] if values else None

    def get_parameter_names(self) -> List[str]:
        return list(self._parameters)

    def get_parameter_values(self, name: str) -> Optional[List[Optional[str]]]:
        values = self._parameters.get(name)
        return list(values) if values is not None else None

    def get_parameter_map(self) -> Dict[str, List[Optional[str]]]:
        """Copy of all parameters; mutating it doesn't touch the request."""
        return {name: list(values) for name, values in self._parameters.items()}

    # =========================================================================
    # CONTAINER
    # =========================================================================

    def get_request_dispatcher(self, path: str) -> Any:
        raise UnsupportedInFixtureError("HttpServletRequest.get_request_dispatcher")

    def get_real_path(self, path: str) -> str:
        raise UnsupportedInFixtureError("HttpServletRequest.get_real_path")

    def get_servlet_context(self) -> Any:
        raise UnsupportedInFixtureError("HttpServletRequest.get_servlet_context")

    def start_async(self) -> Any:
        raise UnsupportedInFixtureError("HttpServletRequest.start_async")

    def is_async_started(self) -> bool:
        return False

    def is_async_supported(self) -> bool:
        return False

    def get_async_context(self) -> Any:
        raise UnsupportedInFixtureError("HttpServletRequest.get_async_context")

    def get_dispatcher_type(self) -> DispatcherType:
        return DispatcherType.REQUEST

    def upgrade(self, handler_class: type) -> Any:
        raise UnsupportedInFixtureError("HttpServletRequest.upgrade")
