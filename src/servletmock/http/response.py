"""
=============================================================================
HTTP RESPONSE MOCK
=============================================================================

An in-memory servlet-style response. Handlers write to it exactly as they
would to a container's response; tests then assert on the bytes that
reached the sink.

=============================================================================
WHAT REACHES THE SINK
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     COMMITTED RESPONSE                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                  ← status line               │
    │    Content-Type: text/plain\r\n         ← one line per value        │
    │    X-List: first\r\n                                                │
    │    X-List: second\r\n                                               │
    │    Content-Length: 12\r\n               ← added by close() only     │
    │    \r\n                                 ← end of header block       │
    │    message body                         ← buffered body bytes       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
COMMIT STATE MACHINE
=============================================================================

    ┌──────────┐   flush_buffer() / close() / send_error()   ┌───────────┐
    │   OPEN   │ ──────────────── send_redirect() ─────────► │ COMMITTED │
    └──────────┘        stream/writer flush() or close()     └───────────┘
      status,                                                  status and
      headers and                                              headers frozen,
      buffer mutable                                           body may grow

    The transition runs exactly once:

        1. status line "<protocol> <status> <reason>\r\n"
        2. "<name>: <value>\r\n" for every header value
        3. "\r\n"
        4. write the block to the sink, flush the sink
        5. snapshot status, status message and headers
        6. committed = True

    close() additionally sets Content-Length to the buffered size first,
    unless Content-Length is already set or Transfer-Encoding is
    "identity". flush_buffer() never does: the body may not be complete yet.

=============================================================================
STREAM VS WRITER
=============================================================================

    get_output_stream() ──► ResponseOutputStream ─┐
                                                  ├──► response._append()
    get_writer() ─────────► ResponseWriter ───────┘         │
                               │                            ▼
                               └──► sent_body (text)     buffer

    Only one of the two may ever be claimed. Asking for the same kind
    again returns the same handle; asking for the other kind raises
    IllegalStateError. Neither handle buffers on its own, so there is a
    single body buffer owned by the response.

=============================================================================
CHARACTER ENCODING
=============================================================================

    get_character_encoding():

        explicit encoding set?  ──yes──►  that encoding
              │ no
        locale set?             ──yes──►  config.default_encoding
              │ no
              ▼
        config.fallback_encoding ("ISO-8859-1")

    The writer fixes the encoding when it is created: get_writer() writes
    the effective charset into Content-Type, and later calls to
    set_character_encoding() are ignored.

=============================================================================
"""

import io
import logging
from enum import Enum
from typing import BinaryIO, Dict, List, Optional, Union

from ..config import FixtureConfig
from ..errors import IllegalStateError
from .cookies import Cookie, format_cookie
from .headers import HeaderStore, format_epoch_millis
from .interface import HttpServletResponse
from .status_codes import HTTPStatus, reason_phrase


logger = logging.getLogger(__name__)


BytesLike = Union[bytes, bytearray, memoryview]

_CHARSET_SEPARATOR = "; charset="


class OutputMode(Enum):
    """Which body handle, if any, has been claimed."""

    NONE = "none"
    STREAM = "stream"
    WRITER = "writer"


class CaptureSink:
    """
    Byte sink that keeps everything written to it, even after close().

    io.BytesIO discards its contents on close, which is exactly when a
    test wants to look at them. The counters let tests assert that the
    response flushed and closed its sink.
    """

    def __init__(self):
        self._data = bytearray()
        self.closed = False
        self.flush_count = 0
        self.close_count = 0

    def write(self, data: BytesLike) -> int:
        if self.closed:
            raise ValueError("write to closed sink")
        self._data += data
        return len(data)

    def flush(self) -> None:
        self.flush_count += 1

    def close(self) -> None:
        self.close_count += 1
        self.closed = True

    def getvalue(self) -> bytes:
        return bytes(self._data)

    def text(self, encoding: str = "utf-8") -> str:
        """Everything written so far, decoded."""
        return self._data.decode(encoding)


class ResponseOutputStream:
    """
    Binary body handle returned by get_output_stream().

    Holds no buffer of its own; every write lands in the response buffer.
    """

    def __init__(self, response: "HttpResponseMock"):
        self._response = response

    def write(self, data: BytesLike) -> int:
        if isinstance(data, str):
            raise TypeError("ResponseOutputStream.write() requires bytes, not str")
        self._response._append(data)
        return len(data)

    def writelines(self, lines) -> None:
        for line in lines:
            self.write(line)

    def flush(self) -> None:
        """Commit if needed and push the buffered body to the sink."""
        self._response.flush_buffer()

    def close(self) -> None:
        """Close the whole response, like closing the container's stream."""
        self._response.close()

    @property
    def closed(self) -> bool:
        return self._response.closed

    def __enter__(self) -> "ResponseOutputStream":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class ResponseWriter:
    """
    Text body handle returned by get_writer().

    Encodes with the charset fixed at creation and mirrors every piece of
    text into the response's sent_body recorder. Unmappable characters
    are written as "?".
    """

    def __init__(self, response: "HttpResponseMock", encoding: str):
        self._response = response
        self.encoding = encoding

    def write(self, text: str) -> int:
        self._response._append(text.encode(self.encoding, errors="replace"))
        self._response._record_text(text)
        return len(text)

    def writelines(self, lines) -> None:
        for line in lines:
            self.write(line)

    def append(self, text: str) -> "ResponseWriter":
        """Write `text` and return self for chaining."""
        self.write(text)
        return self

    def print(self, *values, sep: str = " ", end: str = "\n") -> None:
        """Write values the way the print() builtin would."""
        self.write(sep.join(str(value) for value in values) + end)

    def flush(self) -> None:
        self._response.flush_buffer()

    def close(self) -> None:
        self._response.close()

    @property
    def closed(self) -> bool:
        return self._response.closed

    def __enter__(self) -> "ResponseWriter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class HttpResponseMock(HttpServletResponse):
    """
    Servlet-style response that serializes to an in-memory sink.

    =========================================================================
    USAGE
    =========================================================================

        sink = CaptureSink()
        response = HttpResponseMock(sink)

        handler(request, response)      # code under test
        response.close()

        assert sink.getvalue() == (
            b"HTTP/1.1 200 OK\\r\\n"
            b"Content-Length: 0\\r\\n"
            b"\\r\\n"
        )

    Besides the sink, the response keeps its own recorders:

        header_bytes        status line + header block as committed
        sent_body_bytes     every body byte transferred to the sink
        sent_body           every piece of text written via the writer
        committed_status    status at commit time (None before)
        committed_headers   deep copy of the headers at commit time

    =========================================================================
    """

    # Effectively unbounded: the mock never commits because of buffer size
    BUFFER_SIZE = 2 ** 31 - 9

    def __init__(self, sink: Optional[BinaryIO] = None, config: Optional[FixtureConfig] = None):
        """
        Create a response writing to `sink`.

        Args:
            sink: Binary file-like object with write/flush/close. Defaults
                  to a fresh CaptureSink, reachable as `response.sink`.
            config: Fixture defaults (protocol, encodings, locale).
                    Defaults to FixtureConfig.from_env().

        Raises:
            ValueError: If the configuration doesn't validate.
        """
        self.sink = sink if sink is not None else CaptureSink()
        self.config = config or FixtureConfig.from_env()
        self.config.validate()

        self._locale: Optional[str] = None
        self._encoding: Optional[str] = None
        self._committed = False
        self._closed = False

        self._status: int = HTTPStatus.OK
        self._status_message: Optional[str] = None
        self._headers = HeaderStore()
        self._buffer = bytearray()
        self._output_mode = OutputMode.NONE
        self._stream: Optional[ResponseOutputStream] = None
        self._writer: Optional[ResponseWriter] = None

        # Commit snapshot
        self._committed_status: Optional[int] = None
        self._committed_status_message: Optional[str] = None
        self._committed_headers: Dict[str, List[str]] = {}

        # Recorders (append-only)
        self._header_recorder = bytearray()
        self._body_recorder = bytearray()
        self._text_recorder = io.StringIO()

    # =========================================================================
    # STATUS
    # =========================================================================

    def get_status(self) -> int:
        return self._status

    def set_status(self, code: int, message: Optional[str] = None) -> None:
        """
        Set the status code and, optionally, a custom reason phrase.

        Without `message` the reason phrase comes from the status
        registry, so set_status(404) commits as "404 Not Found".

        Raises:
            IllegalStateError: If the response is already committed.
        """
        self._check_open("set status")
        self._status = code
        self._status_message = message

    @property
    def status_message(self) -> Optional[str]:
        return self._status_message

    # =========================================================================
    # HEADERS
    # =========================================================================

    def contains_header(self, name: str) -> bool:
        return name in self._headers

    def set_header(self, name: str, value: str) -> None:
        """
        Replace every value of `name` with `value`.

        Raises:
            IllegalStateError: If the response is already committed.
        """
        self._check_open("set header")
        self._headers.set(name, value)

    def add_header(self, name: str, value: str) -> None:
        self._check_open("add header")
        self._headers.add(name, value)

    def set_date_header(self, name: str, date: int) -> None:
        """Set `name` to the HTTP-date of `date` (milliseconds since the epoch)."""
        self.set_header(name, format_epoch_millis(date))

    def add_date_header(self, name: str, date: int) -> None:
        self.add_header(name, format_epoch_millis(date))

    def set_int_header(self, name: str, value: int) -> None:
        self.set_header(name, str(int(value)))

    def add_int_header(self, name: str, value: int) -> None:
        self.add_header(name, str(int(value)))

    def add_cookie(self, cookie: Cookie) -> None:
        self.add_header("Set-Cookie", format_cookie(cookie))

    def get_header(self, name: str) -> Optional[str]:
        return self._headers.get(name)

    def get_headers(self, name: str) -> List[str]:
        return self._headers.get_all(name)

    def get_header_names(self) -> List[str]:
        return self._headers.names()

    def set_content_length(self, length: int) -> None:
        self.set_header("Content-Length", str(int(length)))

    # Python ints have no width; kept for contract parity
    set_content_length_long = set_content_length

    # =========================================================================
    # CONTENT TYPE, ENCODING, LOCALE
    # =========================================================================

    def get_content_type(self) -> Optional[str]:
        return self.get_header("Content-Type")

    def set_content_type(self, content_type: str) -> None:
        """
        Set Content-Type; a "; charset=" parameter also sets the encoding.

        Without a charset parameter the current explicit encoding (if any)
        is appended. Ignored once the response is committed.
        """
        if self._committed:
            return
        self._headers.set("Content-Type", content_type)
        _, sep, charset = content_type.partition(_CHARSET_SEPARATOR)
        self.set_character_encoding(charset if sep else self._encoding)

    def get_character_encoding(self) -> str:
        if self._encoding is not None:
            return self._encoding
        if self._locale is not None:
            return self.config.default_encoding
        return self.config.fallback_encoding

    def set_character_encoding(self, charset: Optional[str]) -> None:
        """
        Set the explicit encoding and rewrite the Content-Type charset.

        Ignored once committed or once a writer has been obtained.
        """
        if self._committed or self._writer is not None:
            return
        content_type = self.get_header("Content-Type")
        if content_type is not None:
            base = content_type.split(_CHARSET_SEPARATOR, 1)[0]
            self._headers.set(
                "Content-Type",
                base if charset is None else f"{base}{_CHARSET_SEPARATOR}{charset}",
            )
        self._encoding = charset

    def get_locale(self) -> str:
        return self._locale if self._locale is not None else self.config.default_locale

    def set_locale(self, locale: str) -> None:
        """
        Set the locale, e.g. "en" or "de_DE". Ignored once committed.

        Adds Content-Language with the language part, and makes the
        platform default the effective encoding unless one was set.
        """
        if self._committed:
            return
        self._locale = locale
        language = locale.replace("-", "_").split("_", 1)[0].lower()
        self._headers.set("Content-Language", language)

    # =========================================================================
    # BODY HANDLES
    # =========================================================================

    def get_output_stream(self) -> ResponseOutputStream:
        """
        Claim the binary body handle.

        Raises:
            IllegalStateError: If the writer was already obtained.
        """
        if self._output_mode is OutputMode.WRITER:
            raise IllegalStateError("Cannot get output stream: writer already obtained")
        if self._stream is None:
            self._stream = ResponseOutputStream(self)
            self._output_mode = OutputMode.STREAM
            logger.debug("Output stream claimed")
        return self._stream

    def get_writer(self) -> ResponseWriter:
        """
        Claim the text body handle.

        Fixes the character encoding and writes it into Content-Type.

        Raises:
            IllegalStateError: If the output stream was already obtained.
        """
        if self._writer is not None:
            return self._writer
        if self._output_mode is OutputMode.STREAM:
            raise IllegalStateError("Cannot get writer: output stream already obtained")

        encoding = self.get_character_encoding()
        self.set_character_encoding(encoding)
        self._writer = ResponseWriter(self, encoding)
        self._output_mode = OutputMode.WRITER
        logger.debug(f"Writer claimed with encoding {encoding}")
        return self._writer

    @property
    def output_mode(self) -> OutputMode:
        return self._output_mode

    def _append(self, data: BytesLike) -> None:
        if self._closed:
            raise IllegalStateError("Cannot write: response already closed")
        self._buffer += data

    def _record_text(self, text: str) -> None:
        self._text_recorder.write(text)

    # =========================================================================
    # BUFFER
    # =========================================================================

    def get_buffer_size(self) -> int:
        return self.BUFFER_SIZE

    def set_buffer_size(self, size: int) -> None:
        """Accepted and ignored; the buffer never fills up."""
        self._check_open("set buffer size")

    def reset_buffer(self) -> None:
        """
        Drop buffered body bytes.

        Raises:
            IllegalStateError: If the response is already committed.
        """
        self._check_open("reset buffer")
        self._buffer.clear()

    def reset(self) -> None:
        """
        Restore status 200, drop headers, body and both body handles.

        Encoding and locale survive a reset.

        Raises:
            IllegalStateError: If the response is already committed.
        """
        self._check_open("reset")
        self._status = HTTPStatus.OK
        self._status_message = None
        self._headers.clear()
        self._buffer.clear()
        self._writer = None
        self._stream = None
        self._output_mode = OutputMode.NONE

    # =========================================================================
    # COMMIT
    # =========================================================================

    def is_committed(self) -> bool:
        return self._committed

    def _check_open(self, action: str) -> None:
        if self._committed:
            raise IllegalStateError(f"Cannot {action}: response already committed")

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def status_line(self) -> str:
        """
        Status line as it would be committed right now (without CRLF).

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        """
        reason = self._status_message if self._status_message is not None else reason_phrase(self._status)
        return f"{self.config.protocol} {int(self._status)} {reason}"

    def commit(self) -> None:
        """
        Freeze status and headers and write them to the sink.

        =====================================================================
        SERIALIZATION FORMAT
        =====================================================================

            HTTP/1.1 200 OK\\r\\n          ← status line
            Name: value\\r\\n              ← one line per header value
            \\r\\n                         ← empty line (separator)

        =====================================================================

        Raises:
            IllegalStateError: If the response is already committed.
        """
        if self._committed:
            raise IllegalStateError("Response already committed")

        lines = [self.status_line]
        for name, value in self._headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        # Header block is ASCII on the wire
        block = ("\r\n".join(lines) + "\r\n").encode("ascii", errors="replace")

        self._header_recorder += block
        self.sink.write(block)
        self.sink.flush()

        self._committed_status = int(self._status)
        self._committed_status_message = self._status_message
        self._committed_headers = self._headers.to_dict()
        self._committed = True

        logger.debug(f"Committed '{self.status_line}' with {len(self._committed_headers)} header(s)")

    def flush_buffer(self) -> None:
        """
        Commit if needed, then push buffered body bytes to the sink.

        Never adds Content-Length. The response stays open: the buffer is
        emptied and more body may follow. No-op after close().
        """
        if self._closed:
            return
        if not self._committed:
            self.commit()
        self._transfer_body()
        self._buffer.clear()
        self.sink.flush()

    def close(self) -> None:
        """
        Finish the response: commit if needed, write the body, close the sink.

        If still uncommitted, Content-Length is set to the buffered size
        unless it is already present or Transfer-Encoding is "identity".
        A second close() is a no-op; the sink is closed exactly once.
        """
        if self._closed:
            logger.debug("close() on already closed response ignored")
            return

        if not self._committed:
            if (self.get_header("Content-Length") is None
                    and self.get_header("Transfer-Encoding") != "identity"):
                self.set_content_length(len(self._buffer))
            self.commit()

        self._transfer_body()
        self._buffer.clear()
        self._closed = True
        self.sink.close()
        logger.debug("Response closed")

    def _transfer_body(self) -> None:
        if not self._buffer:
            return
        body = bytes(self._buffer)
        self.sink.write(body)
        self._body_recorder += body

    # =========================================================================
    # SHORTCUTS
    # =========================================================================

    def send_redirect(self, location: str) -> None:
        """Set 302 Found with a Location header and commit."""
        self.set_status(HTTPStatus.FOUND)
        self.set_header("Location", location)
        self.flush_buffer()

    def send_error(self, code: int, message: Optional[str] = None) -> None:
        """
        Set an error status with a text/html body and commit.

        The message, if given, is written through the writer, so it also
        shows up in sent_body.

        Raises:
            IllegalStateError: If already committed, or if `message` is
                given after the output stream was claimed.
        """
        self.set_status(code)
        self.set_content_type("text/html")
        if message is not None:
            self.get_writer().append(message).flush()
        else:
            self.flush_buffer()

    def encode_url(self, url: str) -> str:
        return url

    def encode_redirect_url(self, url: str) -> str:
        return url

    # =========================================================================
    # RECORDERS
    # =========================================================================

    @property
    def committed_status(self) -> Optional[int]:
        return self._committed_status

    @property
    def committed_status_message(self) -> Optional[str]:
        return self._committed_status_message

    @property
    def committed_headers(self) -> Dict[str, List[str]]:
        return {name: list(values) for name, values in self._committed_headers.items()}

    @property
    def header_bytes(self) -> bytes:
        return bytes(self._header_recorder)

    @property
    def sent_body_bytes(self) -> bytes:
        return bytes(self._body_recorder)

    @property
    def sent_body(self) -> str:
        return self._text_recorder.getvalue()
