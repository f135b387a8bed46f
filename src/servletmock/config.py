"""
=============================================================================
FIXTURE CONFIGURATION
=============================================================================

Centralized defaults for the request/response/session test doubles.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Explicit FixtureConfig passed to a mock                        │
    │      └── HttpResponseMock(sink, config=FixtureConfig(...))          │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── SERVLETMOCK_PROTOCOL=HTTP/1.0 pytest                       │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The defaults match what a servlet container hands a handler when nothing
else was configured: HTTP/1.1, ISO-8859-1 as the last-resort charset and
the platform encoding once a locale is known.

=============================================================================
"""

import codecs
import locale
import logging
import os
from dataclasses import dataclass, field
from typing import Optional


def _platform_encoding() -> str:
    """Name of the interpreter's preferred encoding, e.g. "UTF-8"."""
    name = locale.getpreferredencoding(False) or "UTF-8"
    try:
        # codecs reports "utf-8"; header values conventionally use "UTF-8"
        return codecs.lookup(name).name.upper()
    except LookupError:
        return "UTF-8"


@dataclass
class FixtureConfig:
    """
    Configuration shared by the servlet test doubles.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    WIRE FORMAT
    - protocol

    CHARACTER ENCODING
    - fallback_encoding, default_encoding, default_locale

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # WIRE FORMAT
    # ─────────────────────────────────────────────────────────────────────

    protocol: str = "HTTP/1.1"
    """
    Protocol written at the start of the response status line.
    Also the default protocol reported by HttpRequestMock.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CHARACTER ENCODING
    # ─────────────────────────────────────────────────────────────────────

    fallback_encoding: str = "ISO-8859-1"
    """
    Encoding used when neither an explicit encoding nor a locale is set.
    """

    default_encoding: str = field(default_factory=_platform_encoding)
    """
    Encoding used once a locale is set without an explicit encoding.
    """

    default_locale: str = "en"
    """
    Locale reported by get_locale() when none was set.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "WARNING"
    """
    Level for the "servletmock" logger. DEBUG traces every commit.
    """

    @classmethod
    def from_env(cls) -> "FixtureConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        SERVLETMOCK_PROTOCOL          Status line protocol (default: HTTP/1.1)
        SERVLETMOCK_DEFAULT_ENCODING  Encoding once a locale is set
        SERVLETMOCK_DEFAULT_LOCALE    Locale reported when unset (default: en)
        SERVLETMOCK_LOG_LEVEL         Logging level (default: WARNING)

        =====================================================================
        """
        return cls(
            protocol=os.getenv("SERVLETMOCK_PROTOCOL", "HTTP/1.1"),
            default_encoding=os.getenv("SERVLETMOCK_DEFAULT_ENCODING") or _platform_encoding(),
            default_locale=os.getenv("SERVLETMOCK_DEFAULT_LOCALE", "en"),
            log_level=os.getenv("SERVLETMOCK_LOG_LEVEL", "WARNING"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises ValueError on the first bad value, so a misconfigured test
        run fails at fixture construction instead of deep inside a commit.
        """
        if not self.protocol.startswith("HTTP/"):
            raise ValueError(f"Invalid protocol: {self.protocol!r}. Must start with 'HTTP/'.")

        for name in ("fallback_encoding", "default_encoding"):
            value = getattr(self, name)
            try:
                codecs.lookup(value)
            except LookupError:
                raise ValueError(f"{name} is not a known encoding: {value!r}")

        if not self.default_locale:
            raise ValueError("default_locale must not be empty")

        if not isinstance(getattr(logging, self.log_level.upper(), None), int):
            raise ValueError(f"Invalid log level: {self.log_level!r}")

    def configure_logging(self, level: Optional[str] = None) -> None:
        """Configure logging for the fixtures based on config."""
        level_name = (level or self.log_level).upper()
        numeric = getattr(logging, level_name, logging.WARNING)

        logging.basicConfig(
            level=numeric,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("servletmock").setLevel(numeric)

