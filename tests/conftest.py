"""
pytest configuration and fixtures.
"""

from typing import Generator
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from servletmock import FixtureConfig
from servletmock.http import CaptureSink, HttpRequestMock, HttpResponseMock


@pytest.fixture
def config() -> FixtureConfig:
    """Fixture configuration with a pinned platform encoding."""
    return FixtureConfig(default_encoding="UTF-8", default_locale="en")


@pytest.fixture
def sink() -> CaptureSink:
    """Sink that keeps its bytes after close()."""
    return CaptureSink()


@pytest.fixture
def response(sink: CaptureSink, config: FixtureConfig) -> Generator[HttpResponseMock, None, None]:
    """Response writing to the `sink` fixture."""
    yield HttpResponseMock(sink, config=config)


@pytest.fixture
def request_mock(config: FixtureConfig) -> HttpRequestMock:
    """Request with default settings."""
    return HttpRequestMock(config=config)
