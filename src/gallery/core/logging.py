"""Logging configuration using structlog."""

import logging
import sys
from hashlib import sha256

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars

from src.gallery.core.config import get_settings


def setup_logging(debug: bool = False) -> None:
    """Configure structlog for structured logging.

    Args:
        debug: If True, use colored console output. If False, use JSON for production.
    """
    log_level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    shared_processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if debug:
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=True)]
    else:
        processors = shared_processors + [structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Optional logger name.

    Returns:
        A bound structlog logger.
    """
    return structlog.get_logger(name)


def session_ref(session_id: str) -> str:
    """Short, stable reference to a session id that is safe to log.

    The full id is returned only when settings.log_session_ids is enabled.
    """
    if get_settings().log_session_ids:
        return session_id
    return sha256(session_id.encode()).hexdigest()[:12]


def bind_session_context(session_id: str | None) -> None:
    """Bind the viewer's session reference to all subsequent log calls.

    Args:
        session_id: The locally generated session id, or None to skip.
    """
    if session_id:
        bind_contextvars(session=session_ref(session_id))


def bind_action_context(action: str, resource_id: str) -> None:
    """Bind the pending privileged action to all subsequent log calls.

    Args:
        action: The action kind (e.g. "delete_comment").
        resource_id: Id of the project or comment the action targets.
    """
    bind_contextvars(action=action, resource_id=resource_id)


def clear_context() -> None:
    """Clear all bound log context."""
    clear_contextvars()
