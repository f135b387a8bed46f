"""
=============================================================================
SERVLET CONTRACTS
=============================================================================

Abstract base classes listing every operation of the request, response
and session contracts the mocks stand in for.

=============================================================================
WHY EXPLICIT CONTRACTS?
=============================================================================

Code under test is written against a container's request/response API.
If a mock silently lacks a method, the test fails with an AttributeError
far away from the real cause. Declaring the contract as an ABC means:

    1. A mock missing an operation can't even be instantiated
    2. Operations a fixture can't honestly provide (multipart, async,
       upgrade, dispatch) are still present, and raise
       UnsupportedInFixtureError with the operation's name

    ┌───────────────────────┐        ┌───────────────────────┐
    │  HttpServletRequest   │        │  HttpServletResponse  │
    │  (ABC)                │        │  (ABC)                │
    └──────────┬────────────┘        └──────────┬────────────┘
               │                                 │
    ┌──────────▼────────────┐        ┌──────────▼────────────┐
    │  HttpRequestMock      │        │  HttpResponseMock     │
    └──────────┬────────────┘        └───────────────────────┘
               │ get_session()
    ┌──────────▼────────────┐
    │  HttpSessionMock      │ ◄── HttpSession (ABC)
    └───────────────────────┘

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Dict, List, Optional, TextIO


class HttpSession(ABC):
    """Contract for a server-side session."""

    @abstractmethod
    def get_id(self) -> str:
        """Opaque session identifier."""

    @abstractmethod
    def get_creation_time(self) -> int:
        """Creation time in milliseconds since the epoch."""

    @abstractmethod
    def get_last_accessed_time(self) -> int:
        """Last access time in milliseconds since the epoch."""

    @abstractmethod
    def get_max_inactive_interval(self) -> int:
        """Seconds of inactivity before expiry; negative once invalidated."""

    @abstractmethod
    def set_max_inactive_interval(self, interval: int) -> None:
        pass

    @abstractmethod
    def get_attribute(self, name: str) -> Any:
        pass

    @abstractmethod
    def set_attribute(self, name: str, value: Any) -> None:
        pass

    @abstractmethod
    def remove_attribute(self, name: str) -> None:
        pass

    @abstractmethod
    def get_attribute_names(self) -> List[str]:
        pass

    @abstractmethod
    def invalidate(self) -> None:
        """Drop all attributes and mark the session unusable."""

    @abstractmethod
    def is_new(self) -> bool:
        pass

    @abstractmethod
    def get_servlet_context(self) -> Any:
        pass


class HttpServletResponse(ABC):
    """Contract for the response a handler writes to."""

    # Status
    @abstractmethod
    def get_status(self) -> int:
        pass

    @abstractmethod
    def set_status(self, code: int, message: Optional[str] = None) -> None:
        pass

    @abstractmethod
    def send_error(self, code: int, message: Optional[str] = None) -> None:
        pass

    @abstractmethod
    def send_redirect(self, location: str) -> None:
        pass

    # Headers
    @abstractmethod
    def contains_header(self, name: str) -> bool:
        pass

    @abstractmethod
    def set_header(self, name: str, value: str) -> None:
        pass

    @abstractmethod
    def add_header(self, name: str, value: str) -> None:
        pass

    @abstractmethod
    def set_date_header(self, name: str, date: int) -> None:
        pass

    @abstractmethod
    def add_date_header(self, name: str, date: int) -> None:
        pass

    @abstractmethod
    def set_int_header(self, name: str, value: int) -> None:
        pass

    @abstractmethod
    def add_int_header(self, name: str, value: int) -> None:
        pass

    @abstractmethod
    def add_cookie(self, cookie: Any) -> None:
        pass

    @abstractmethod
    def get_header(self, name: str) -> Optional[str]:
        pass

    @abstractmethod
    def get_headers(self, name: str) -> List[str]:
        pass

    @abstractmethod
    def get_header_names(self) -> List[str]:
        pass

    @abstractmethod
    def set_content_length(self, length: int) -> None:
        pass

    @abstractmethod
    def set_content_length_long(self, length: int) -> None:
        pass

    # Content type, encoding, locale
    @abstractmethod
    def get_content_type(self) -> Optional[str]:
        pass

    @abstractmethod
    def set_content_type(self, content_type: str) -> None:
        pass

    @abstractmethod
    def get_character_encoding(self) -> str:
        pass

    @abstractmethod
    def set_character_encoding(self, charset: Optional[str]) -> None:
        pass

    @abstractmethod
    def get_locale(self) -> str:
        pass

    @abstractmethod
    def set_locale(self, locale: str) -> None:
        pass

    # Body and buffering
    @abstractmethod
    def get_output_stream(self) -> Any:
        pass

    @abstractmethod
    def get_writer(self) -> Any:
        pass

    @abstractmethod
    def get_buffer_size(self) -> int:
        pass

    @abstractmethod
    def set_buffer_size(self, size: int) -> None:
        pass

    @abstractmethod
    def flush_buffer(self) -> None:
        pass

    @abstractmethod
    def reset_buffer(self) -> None:
        pass

    @abstractmethod
    def reset(self) -> None:
        pass

    @abstractmethod
    def is_committed(self) -> bool:
        pass

    # URL rewriting
    @abstractmethod
    def encode_url(self, url: str) -> str:
        pass

    @abstractmethod
    def encode_redirect_url(self, url: str) -> str:
        pass


class HttpServletRequest(ABC):
    """Contract for the request a handler reads from."""

    # Headers
    @abstractmethod
    def get_header(self, name: str) -> Optional[str]:
        pass

    @abstractmethod
    def get_headers(self, name: str) -> List[str]:
        pass

    @abstractmethod
    def get_date_header(self, name: str) -> int:
        pass

    @abstractmethod
    def get_int_header(self, name: str) -> int:
        pass

    @abstractmethod
    def get_header_names(self) -> List[str]:
        pass

    @abstractmethod
    def get_cookies(self) -> List[Any]:
        pass

    @abstractmethod
    def get_locale(self) -> str:
        pass

    @abstractmethod
    def get_locales(self) -> List[str]:
        pass

    # Request line
    @abstractmethod
    def get_protocol(self) -> str:
        pass

    @abstractmethod
    def get_scheme(self) -> str:
        pass

    @abstractmethod
    def get_method(self) -> str:
        pass

    @abstractmethod
    def get_path_info(self) -> Optional[str]:
        pass

    @abstractmethod
    def get_path_translated(self) -> Optional[str]:
        pass

    @abstractmethod
    def get_context_path(self) -> str:
        pass

    @abstractmethod
    def get_servlet_path(self) -> str:
        pass

    @abstractmethod
    def get_query_string(self) -> Optional[str]:
        pass

    @abstractmethod
    def get_request_uri(self) -> str:
        pass

    @abstractmethod
    def get_request_url(self) -> str:
        pass

    # Connection
    @abstractmethod
    def get_remote_port(self) -> int:
        pass

    @abstractmethod
    def get_remote_addr(self) -> str:
        pass

    @abstractmethod
    def get_remote_host(self) -> str:
        pass

    @abstractmethod
    def get_local_port(self) -> int:
        pass

    @abstractmethod
    def get_local_name(self) -> str:
        pass

    @abstractmethod
    def get_local_addr(self) -> str:
        pass

    @abstractmethod
    def get_server_port(self) -> int:
        pass

    @abstractmethod
    def get_server_name(self) -> str:
        pass

    @abstractmethod
    def is_secure(self) -> bool:
        pass

    # Authentication
    @abstractmethod
    def get_auth_type(self) -> Optional[str]:
        pass

    @abstractmethod
    def get_remote_user(self) -> Optional[str]:
        pass

    @abstractmethod
    def get_user_principal(self) -> Any:
        pass

    @abstractmethod
    def is_user_in_role(self, role: str) -> bool:
        pass

    @abstractmethod
    def authenticate(self, response: HttpServletResponse) -> bool:
        pass

    @abstractmethod
    def login(self, username: str, password: str) -> None:
        pass

    @abstractmethod
    def logout(self) -> None:
        pass

    # Session
    @abstractmethod
    def get_session(self, create: bool = True) -> Optional[HttpSession]:
        pass

    @abstractmethod
    def change_session_id(self) -> str:
        pass

    @abstractmethod
    def get_requested_session_id(self) -> Optional[str]:
        pass

    @abstractmethod
    def is_requested_session_id_valid(self) -> bool:
        pass

    @abstractmethod
    def is_requested_session_id_from_cookie(self) -> bool:
        pass

    @abstractmethod
    def is_requested_session_id_from_url(self) -> bool:
        pass

    # Attributes
    @abstractmethod
    def get_attribute(self, name: str) -> Any:
        pass

    @abstractmethod
    def get_attribute_names(self) -> List[str]:
        pass

    @abstractmethod
    def set_attribute(self, name: str, value: Any) -> None:
        pass

    @abstractmethod
    def remove_attribute(self, name: str) -> None:
        pass

    # Content
    @abstractmethod
    def get_character_encoding(self) -> Optional[str]:
        pass

    @abstractmethod
    def set_character_encoding(self, encoding: str) -> None:
        pass

    @abstractmethod
    def get_content_length(self) -> int:
        pass

    @abstractmethod
    def get_content_type(self) -> Optional[str]:
        pass

    @abstractmethod
    def get_input_stream(self) -> BinaryIO:
        pass

    @abstractmethod
    def get_reader(self) -> TextIO:
        pass

    @abstractmethod
    def get_parts(self) -> List[Any]:
        pass

    @abstractmethod
    def get_part(self, name: str) -> Any:
        pass

    # Parameters
    @abstractmethod
    def get_parameter(self, name: str) -> Optional[str]:
        pass

    @abstractmethod
    def get_parameter_names(self) -> List[str]:
        pass

    @abstractmethod
    def get_parameter_values(self, name: str) -> Optional[List[Optional[str]]]:
        pass

    @abstractmethod
    def get_parameter_map(self) -> Dict[str, List[Optional[str]]]:
        pass

    # Container
    @abstractmethod
    def get_request_dispatcher(self, path: str) -> Any:
        pass

    @abstractmethod
    def get_real_path(self, path: str) -> str:
        pass

    @abstractmethod
    def get_servlet_context(self) -> Any:
        pass

    @abstractmethod
    def start_async(self) -> Any:
        pass

    @abstractmethod
    def is_async_started(self) -> bool:
        pass

    @abstractmethod
    def is_async_supported(self) -> bool:
        pass

    @abstractmethod
    def get_async_context(self) -> Any:
        pass

    @abstractmethod
    def get_dispatcher_type(self) -> Any:
        pass

    @abstractmethod
    def upgrade(self, handler_class: type) -> Any:
        pass
