"""
Unit tests for fixture configuration.
"""

import logging

import pytest

from servletmock.config import FixtureConfig
from servletmock.http.request import HttpRequestMock
from servletmock.http.response import CaptureSink, HttpResponseMock


class TestFixtureConfig:
    """Tests for FixtureConfig."""

    def test_defaults(self):
        """Test the container-like defaults."""
        config = FixtureConfig()

        assert config.protocol == "HTTP/1.1"
        assert config.fallback_encoding == "ISO-8859-1"
        assert config.default_encoding
        assert config.default_locale == "en"
        assert config.log_level == "WARNING"

    def test_default_config_is_valid(self):
        """Test the defaults pass validation."""
        FixtureConfig().validate()

    def test_from_env(self, monkeypatch):
        """Test environment overrides."""
        monkeypatch.setenv("SERVLETMOCK_PROTOCOL", "HTTP/1.0")
        monkeypatch.setenv("SERVLETMOCK_DEFAULT_ENCODING", "UTF-16")
        monkeypatch.setenv("SERVLETMOCK_DEFAULT_LOCALE", "de")
        monkeypatch.setenv("SERVLETMOCK_LOG_LEVEL", "DEBUG")

        config = FixtureConfig.from_env()

        assert config.protocol == "HTTP/1.0"
        assert config.default_encoding == "UTF-16"
        assert config.default_locale == "de"
        assert config.log_level == "DEBUG"

    def test_from_env_without_variables(self, monkeypatch):
        """Test defaults when nothing is set."""
        for name in ("SERVLETMOCK_PROTOCOL", "SERVLETMOCK_DEFAULT_ENCODING",
                     "SERVLETMOCK_DEFAULT_LOCALE", "SERVLETMOCK_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        config = FixtureConfig.from_env()

        assert config.protocol == "HTTP/1.1"
        assert config.default_locale == "en"

    @pytest.mark.parametrize("overrides", [
        {"protocol": "SPDY/3"},
        {"fallback_encoding": "no-such-charset"},
        {"default_encoding": "no-such-charset"},
        {"default_locale": ""},
        {"log_level": "LOUD"},
    ])
    def test_validate_rejects(self, overrides):
        """Test each invalid value raises ValueError."""
        with pytest.raises(ValueError):
            FixtureConfig(**overrides).validate()

    def test_configure_logging_sets_package_level(self):
        """Test the package logger level follows the config."""
        logger = logging.getLogger("servletmock")
        previous = logger.level
        try:
            FixtureConfig(log_level="DEBUG").configure_logging()
            assert logger.level == logging.DEBUG

            FixtureConfig().configure_logging("ERROR")
            assert logger.level == logging.ERROR
        finally:
            logger.setLevel(previous)


class TestConfigResolution:
    """Tests for how the mocks pick up configuration."""

    def test_response_reads_environment(self, monkeypatch):
        """Test a response without explicit config uses the environment."""
        monkeypatch.setenv("SERVLETMOCK_PROTOCOL", "HTTP/1.0")
        sink = CaptureSink()

        HttpResponseMock(sink).close()

        assert sink.text().startswith("HTTP/1.0 200 OK\r\n")

    def test_request_reads_environment(self, monkeypatch):
        """Test a request without explicit config uses the environment."""
        monkeypatch.setenv("SERVLETMOCK_PROTOCOL", "HTTP/1.0")
        monkeypatch.setenv("SERVLETMOCK_DEFAULT_LOCALE", "fr")

        request = HttpRequestMock()

        assert request.get_protocol() == "HTTP/1.0"
        assert request.get_locale() == "fr"

    def test_explicit_config_wins_over_environment(self, monkeypatch):
        """Test an explicit config ignores the environment."""
        monkeypatch.setenv("SERVLETMOCK_PROTOCOL", "HTTP/1.0")
        sink = CaptureSink()

        HttpResponseMock(sink, config=FixtureConfig(protocol="HTTP/2")).close()

        assert sink.text().startswith("HTTP/2 200 OK\r\n")

    def test_response_rejects_invalid_config(self):
        """Test a bad config fails when the response is built."""
        with pytest.raises(ValueError):
            HttpResponseMock(config=FixtureConfig(protocol="FTP"))

    def test_request_rejects_invalid_config(self):
        """Test a bad config fails when the request is built."""
        with pytest.raises(ValueError):
            HttpRequestMock(config=FixtureConfig(fallback_encoding="no-such-charset"))

    def test_invalid_environment_fails_construction(self, monkeypatch):
        """Test a bad environment value fails when the mock is built."""
        monkeypatch.setenv("SERVLETMOCK_LOG_LEVEL", "LOUD")

        with pytest.raises(ValueError):
            HttpResponseMock()
