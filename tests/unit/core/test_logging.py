"""Unit tests for structured logging helpers."""

import structlog

from warden.core.logging import (
    LoggingContext,
    add_correlation_id,
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
    rename_message_field,
)


class TestProcessors:
    """Test suite for the custom structlog processors."""

    def test_correlation_id_added_when_missing(self):
        """Test a correlation id is generated for unbound events."""
        event = add_correlation_id(None, "info", {"event": "x"})
        assert event["correlation_id"].startswith("cid_")

    def test_bound_correlation_id_kept(self):
        """Test an existing correlation id is not replaced."""
        event = add_correlation_id(None, "info", {"correlation_id": "req-1"})
        assert event["correlation_id"] == "req-1"

    def test_rename_message_field(self):
        """Test the event key is renamed to message."""
        assert rename_message_field(None, "info", {"event": "hello"}) == {"message": "hello"}


class TestContext:
    """Test suite for context binding helpers."""

    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_logging_context_binds_and_unbinds(self):
        """Test keys are bound inside the block only."""
        with LoggingContext(user_id="u1"):
            assert structlog.contextvars.get_contextvars() == {"user_id": "u1"}
        assert structlog.contextvars.get_contextvars() == {}

    def test_bind_correlation_id(self):
        """Test binding a correlation id for the current context."""
        bind_correlation_id("req-42")
        assert structlog.contextvars.get_contextvars()["correlation_id"] == "req-42"

        clear_context()
        assert structlog.contextvars.get_contextvars() == {}


def test_configure_logging_and_get_logger(settings):
    """Test logging can be configured and loggers obtained."""
    configure_logging(settings)
    logger = get_logger(__name__)
    logger.debug("configured", check=True)
    structlog.reset_defaults()
