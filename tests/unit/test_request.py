"""
Unit tests for the request mock.
"""

import pytest

from servletmock import HeaderFormatError, IllegalStateError, UnsupportedInFixtureError
from servletmock.http.request import DispatcherType, HttpRequestMock, Principal
from servletmock.http.session import HttpSessionMock


class TestDefaults:
    """Tests for a request nobody configured."""

    def test_request_line_defaults(self, request_mock):
        """Test protocol, method, scheme and path defaults."""
        assert request_mock.get_protocol() == "HTTP/1.1"
        assert request_mock.get_method() == "GET"
        assert request_mock.get_scheme() == "http"
        assert request_mock.get_context_path() == ""
        assert request_mock.get_servlet_path() == ""
        assert request_mock.get_path_info() is None
        assert request_mock.get_query_string() is None
        assert request_mock.get_request_uri() == "/"

    def test_connection_defaults(self, request_mock):
        """Test local and remote endpoint defaults."""
        assert request_mock.get_local_port() == 8080
        assert request_mock.get_local_addr() == "127.0.0.1"
        assert request_mock.get_local_name() == "localhost"
        assert request_mock.get_remote_port() == 2 ** 31 - 1
        assert request_mock.get_remote_addr() == "0.0.0.0"
        assert request_mock.get_remote_host() == "example.org"
        assert not request_mock.is_secure()

    def test_request_url_default(self, request_mock):
        """Test the URL built from local host and port."""
        assert request_mock.get_request_url() == "http://localhost:8080/"

    def test_empty_collections(self, request_mock):
        """Test nothing is configured by default."""
        assert request_mock.get_header_names() == []
        assert request_mock.get_parameter_names() == []
        assert request_mock.get_attribute_names() == []
        assert request_mock.get_cookies() == []
        assert request_mock.get_session(create=False) is None
        assert request_mock.get_input_stream().read() == b""

    def test_locale_comes_from_config(self, request_mock):
        """Test locales report the configured default."""
        assert request_mock.get_locale() == "en"
        assert request_mock.get_locales() == ["en"]


class TestBuilder:
    """Tests for the with_*() methods."""

    def test_builder_returns_self(self):
        """Test every builder call can be chained."""
        request = HttpRequestMock()

        assert request.with_method("POST") is request
        assert request.with_scheme("https").with_local_port(8443) is request

    def test_request_uri_is_concatenated(self):
        """Test context + servlet + path info."""
        request = (HttpRequestMock()
            .with_context_path("/app")
            .with_servlet_path("/users")
            .with_path("/42"))

        assert request.get_request_uri() == "/app/users/42"
        assert request.get_request_url() == "http://localhost:8080/app/users/42"

    def test_request_uri_without_path_ends_in_slash(self):
        """Test a missing path info becomes "/"."""
        request = HttpRequestMock().with_context_path("/app").with_servlet_path("/users")

        assert request.get_request_uri() == "/app/users/"

    def test_with_headers_replaces_named_headers(self):
        """Test with_headers() replaces, with_header() appends."""
        request = (HttpRequestMock()
            .with_header("Accept", "text/html")
            .with_header("X-Keep", "yes")
            .with_headers({"Accept": ["application/json", "text/plain"]}))

        assert request.get_headers("Accept") == ["application/json", "text/plain"]
        assert request.get_header("X-Keep") == "yes"

    def test_header_lookup_is_case_insensitive(self):
        """Test request headers ignore case."""
        request = HttpRequestMock().with_headers({"Content-Type": "text/plain"})

        assert request.get_header("content-type") == "text/plain"
        assert request.get_header("CONTENT-TYPE") == "text/plain"
        assert request.get_header_names() == ["content-type"]

    def test_with_attributes_replaces(self):
        """Test attributes are replaced wholesale."""
        request = HttpRequestMock().with_attributes({"a": 1})
        request.with_attributes({"b": 2})

        assert request.get_attribute("a") is None
        assert request.get_attribute("b") == 2

    def test_attribute_operations(self, request_mock):
        """Test set/get/remove of request attributes."""
        request_mock.set_attribute("user", "alice")
        assert request_mock.get_attribute_names() == ["user"]

        request_mock.remove_attribute("user")
        request_mock.remove_attribute("never-set")

        assert request_mock.get_attribute("user") is None


class TestParameters:
    """Tests for parameters and the query string."""

    def test_query_string_sets_parameters(self):
        """Test parameters parsed from the query string."""
        request = HttpRequestMock().with_query_string("a=1&a=2&b&c=")

        assert request.get_query_string() == "a=1&a=2&b&c="
        assert request.get_parameter("a") == "1"
        assert request.get_parameter_values("a") == ["1", "2"]
        assert request.get_parameter("b") is None
        assert request.get_parameter_values("b") == [None]
        assert request.get_parameter("c") == ""
        assert request.get_parameter_names() == ["a", "b", "c"]

    def test_missing_parameter(self, request_mock):
        """Test an unknown parameter."""
        assert request_mock.get_parameter("missing") is None
        assert request_mock.get_parameter_values("missing") is None

    def test_with_parameters_skips_empty_lists(self):
        """Test names without values are not added."""
        request = HttpRequestMock().with_parameters({"a": ["x"], "b": []})

        assert request.get_parameter_names() == ["a"]

    def test_parameter_map_is_a_copy(self):
        """Test mutating the returned map leaves the request alone."""
        request = HttpRequestMock().with_parameters({"a": ["x"]})

        parameters = request.get_parameter_map()
        parameters["a"].append("y")
        parameters["b"] = ["z"]

        assert request.get_parameter_map() == {"a": ["x"]}

    def test_query_string_decoding(self):
        """Test form decoding of names and values."""
        request = HttpRequestMock().with_query_string("my+%3D+name=caf%C3%A9")

        assert request.get_parameter("my = name") == "café"


class TestTypedHeaders:
    """Tests for date, int and cookie headers."""

    def test_date_header(self):
        """Test HTTP-dates are returned as epoch milliseconds."""
        request = HttpRequestMock().with_header("If-Modified-Since", "Fri, 02 Jan 1970 03:46:40 GMT")

        assert request.get_date_header("If-Modified-Since") == 100000000

    def test_absent_typed_headers(self, request_mock):
        """Test -1 for absent date/int headers and Content-Length."""
        assert request_mock.get_date_header("If-Modified-Since") == -1
        assert request_mock.get_int_header("Max-Forwards") == -1
        assert request_mock.get_content_length() == -1

    def test_int_header(self):
        """Test decimal header values."""
        request = HttpRequestMock().with_header("Content-Length", "42")

        assert request.get_int_header("Content-Length") == 42
        assert request.get_content_length() == 42

    def test_malformed_date_header(self):
        """Test a bad date raises HeaderFormatError."""
        request = HttpRequestMock().with_header("If-Modified-Since", "yesterday")

        with pytest.raises(HeaderFormatError) as exc_info:
            request.get_date_header("If-Modified-Since")

        assert exc_info.value.header == "If-Modified-Since"
        assert exc_info.value.value == "yesterday"

    def test_malformed_int_header(self):
        """Test a bad int raises HeaderFormatError (a ValueError)."""
        request = HttpRequestMock().with_header("Max-Forwards", "forty-two")

        with pytest.raises(ValueError):
            request.get_int_header("Max-Forwards")

    def test_cookies(self):
        """Test one cookie per Cookie header value."""
        request = (HttpRequestMock()
            .with_header("Cookie", "id=42")
            .with_header("Cookie", "theme=dark; Path=/"))

        cookies = request.get_cookies()

        assert [(c.name, c.value) for c in cookies] == [("id", "42"), ("theme", "dark")]
        assert cookies[1].path == "/"


class TestServerName:
    """Tests for server name and port resolution."""

    def test_host_with_port(self):
        """Test port taken from the Host header."""
        request = HttpRequestMock().with_header("Host", "example.com:9090")

        assert request.get_server_name() == "example.com"
        assert request.get_server_port() == 9090
        assert request.get_request_url() == "http://example.com:9090/"

    def test_host_without_port_uses_scheme_default(self):
        """Test the scheme's default port."""
        request = HttpRequestMock().with_scheme("https").with_header("Host", "example.com")

        assert request.get_server_port() == 443
        assert request.is_secure()

    @pytest.mark.parametrize("host", ["example.org:abc", "example.org:99999", "[::1"])
    def test_malformed_host(self, host):
        """Test a bad Host header raises HeaderFormatError."""
        request = HttpRequestMock().with_header("Host", host)

        with pytest.raises(HeaderFormatError) as exc_info:
            request.get_server_port()

        assert exc_info.value.header == "Host"
        assert exc_info.value.value == host

    def test_no_host_uses_local_endpoint(self):
        """Test falling back to local host and port."""
        request = HttpRequestMock().with_local_host("box").with_local_port(9000)

        assert request.get_server_name() == "box"
        assert request.get_server_port() == 9000


class TestBody:
    """Tests for the request body."""

    def test_bytes_body(self):
        """Test a binary body through the input stream."""
        request = HttpRequestMock().with_body(b"\x00\x01")

        assert request.get_input_stream().read() == b"\x00\x01"

    def test_body_uses_content_type_charset(self):
        """Test the charset parameter drives encoding and decoding."""
        request = (HttpRequestMock()
            .with_header("Content-Type", "text/plain; charset=ISO-8859-1")
            .with_body("café"))

        assert request.get_character_encoding() == "ISO-8859-1"
        assert request.get_input_stream().getvalue() == "café".encode("latin-1")
        assert request.get_reader().read() == "café"

    def test_no_charset(self):
        """Test no charset without a Content-Type parameter."""
        request = HttpRequestMock().with_header("Content-Type", "application/json")

        assert request.get_character_encoding() is None
        assert request.get_content_type() == "application/json"

    def test_text_body_round_trips_without_content_type(self):
        """Test the reader decodes with the encoding the body was built with."""
        request = HttpRequestMock().with_body("café €5")

        assert request.get_input_stream().getvalue() == "café €5".encode("utf-8")
        assert request.get_reader().read() == "café €5"

    def test_text_body_with_explicit_encoding(self):
        """Test an explicit body encoding is used for reading too."""
        request = HttpRequestMock().with_body("café", encoding="UTF-16")

        assert request.get_reader().read() == "café"

    def test_bytes_body_reader_uses_fallback_encoding(self):
        """Test raw bytes without a charset decode as ISO-8859-1."""
        request = HttpRequestMock().with_body(b"caf\xe9")

        assert request.get_reader().read() == "café"

    def test_reader_keeps_crlf(self):
        """Test line endings come back unchanged."""
        request = HttpRequestMock().with_body("a\r\nb\rc\n")

        assert request.get_reader().read() == "a\r\nb\rc\n"

    def test_reader_is_idempotent(self):
        """Test the same reader comes back twice."""
        request = HttpRequestMock().with_body("line one\nline two\n")

        reader = request.get_reader()

        assert request.get_reader() is reader
        assert reader.readline() == "line one\n"


class TestAuthentication:
    """Tests for login/logout."""

    def test_login_accepts_any_credentials(self, request_mock):
        """Test login() authenticates as the given user."""
        request_mock.login("alice", "secret")

        assert request_mock.get_remote_user() == "alice"
        assert request_mock.get_auth_type() == "BasicAuth"
        assert request_mock.get_user_principal() == Principal("alice")

    def test_logout_clears_identity(self, request_mock):
        """Test logout() drops user, auth type and principal."""
        request_mock.with_authentication("DIGEST", Principal("bob"))

        request_mock.logout()

        assert request_mock.get_remote_user() is None
        assert request_mock.get_auth_type() is None
        assert request_mock.get_user_principal() is None

    def test_no_roles(self, request_mock, response):
        """Test role checks and authenticate() always fail."""
        assert not request_mock.is_user_in_role("admin")
        assert not request_mock.authenticate(response)


class TestSession:
    """Tests for session access through the request."""

    def test_get_session_creates_once(self, request_mock):
        """Test the created session is reused."""
        session = request_mock.get_session()

        assert isinstance(session, HttpSessionMock)
        assert request_mock.get_session() is session
        assert request_mock.get_session(create=False) is session

    def test_configured_session(self):
        """Test with_session() is returned as-is."""
        session = HttpSessionMock("abc")
        request = HttpRequestMock().with_session(session)

        assert request.get_session(create=False) is session

    def test_change_session_id_keeps_attributes(self):
        """Test a new id with the old attributes."""
        session = HttpSessionMock("old")
        session.set_attribute("user", "alice")
        request = HttpRequestMock().with_session(session)

        new_id = request.change_session_id()

        assert new_id != "old"
        assert request.get_session().get_id() == new_id
        assert request.get_session().get_attribute("user") == "alice"

    def test_change_session_id_without_session(self, request_mock):
        """Test changing the id requires a session."""
        with pytest.raises(IllegalStateError):
            request_mock.change_session_id()

    def test_requested_session_id(self, request_mock):
        """Test the requested session id flags."""
        assert not request_mock.is_requested_session_id_valid()

        request_mock.with_requested_session_id("abc")

        assert request_mock.get_requested_session_id() == "abc"
        assert request_mock.is_requested_session_id_valid()
        assert not request_mock.is_requested_session_id_from_cookie()
        assert not request_mock.is_requested_session_id_from_url()


class TestContainerOperations:
    """Tests for operations that need a real container."""

    @pytest.mark.parametrize("operation, args", [
        ("get_parts", ()),
        ("get_part", ("file",)),
        ("get_request_dispatcher", ("/other",)),
        ("get_real_path", ("/index.html",)),
        ("get_servlet_context", ()),
        ("start_async", ()),
        ("get_async_context", ()),
        ("upgrade", (object,)),
    ])
    def test_unsupported(self, request_mock, operation, args):
        """Test the operation raises with its name."""
        with pytest.raises(UnsupportedInFixtureError) as exc_info:
            getattr(request_mock, operation)(*args)

        assert exc_info.value.operation == f"HttpServletRequest.{operation}"

    def test_async_and_dispatch_flags(self, request_mock):
        """Test async is never available and dispatch is REQUEST."""
        assert not request_mock.is_async_started()
        assert not request_mock.is_async_supported()
        assert request_mock.get_dispatcher_type() is DispatcherType.REQUEST
        assert request_mock.get_path_translated() is None
