"""Tests for structured logging context."""

from hashlib import sha256
from unittest.mock import MagicMock

import pytest
import structlog
from structlog.testing import CapturingLogger

from src.gallery.core import logging as gallery_logging
from src.gallery.core.logging import (
    bind_action_context,
    bind_session_context,
    clear_context,
    session_ref,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def capturing_logger():
    """Create a capturing logger for tests."""
    cap_logger = CapturingLogger()

    # Save original configuration to restore later
    old_config = structlog.get_config()

    structlog.configure(
        processors=[structlog.contextvars.merge_contextvars],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=lambda *args, **kwargs: cap_logger,
        cache_logger_on_first_use=False,
    )

    clear_context()
    yield cap_logger
    clear_context()
    structlog.configure(**old_config)


def test_bind_session_context_logs_digest(capturing_logger):
    """Only a digest prefix of the session id is logged by default."""
    session_id = "session-a"

    bind_session_context(session_id)
    structlog.get_logger().info("test message")

    entries = capturing_logger.calls
    assert len(entries) == 1
    assert entries[0].kwargs["session"] == sha256(b"session-a").hexdigest()[:12]
    assert session_id not in entries[0].kwargs.values()


def test_bind_session_context_with_none(capturing_logger):
    """Test that a None session id is not bound."""
    bind_session_context(None)
    structlog.get_logger().info("test message")

    entries = capturing_logger.calls
    assert len(entries) == 1
    assert "session" not in entries[0].kwargs


def test_full_session_id_when_enabled(capturing_logger, monkeypatch):
    mock_settings = MagicMock()
    mock_settings.log_session_ids = True
    monkeypatch.setattr(gallery_logging, "get_settings", lambda: mock_settings)

    bind_session_context("session-a")
    structlog.get_logger().info("test message")

    assert capturing_logger.calls[0].kwargs["session"] == "session-a"


def test_bind_action_context(capturing_logger):
    bind_action_context("delete_comment", "c1")
    structlog.get_logger().info("test message")

    kwargs = capturing_logger.calls[0].kwargs
    assert kwargs["action"] == "delete_comment"
    assert kwargs["resource_id"] == "c1"


def test_clear_context(capturing_logger):
    """Test that context is cleared properly."""
    bind_session_context("session-a")
    bind_action_context("edit_project", "p1")
    clear_context()
    structlog.get_logger().info("test message")

    kwargs = capturing_logger.calls[0].kwargs
    assert "session" not in kwargs
    assert "action" not in kwargs


def test_session_ref_is_stable():
    assert session_ref("session-a") == session_ref("session-a")
    assert session_ref("session-a") != session_ref("session-b")
