"""Session ID logging context for tracing decisions across modules.

Provides a session-aware logger that attaches the active session ID to
every log record, so one shopper's decisions, planned workflows, and tool
calls can be followed through the engine.

Usage:
    from phone_advisor.logging_context import get_session_logger, set_session_id

    set_session_id("session-42")
    logger = get_session_logger(__name__)
    logger.info("Classifying input")  # record.session_id == "session-42"

To print the id, route records through ``build_session_handler()``, whose
format includes ``%(session_id)s`` for records from any logger.
"""

import logging
from contextvars import ContextVar

_session_id: ContextVar[str] = ContextVar("session_id", default="NO_SESSION")


def set_session_id(session_id: str) -> None:
    """Set the session ID for the current async context."""
    _session_id.set(session_id)


def get_session_id() -> str:
    """Retrieve the current session ID."""
    return _session_id.get()


class SessionIdFilter(logging.Filter):
    """Injects session_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = _session_id.get()  # type: ignore[attr-defined]
        return True


def get_session_logger(name: str) -> logging.Logger:
    """Return a logger with the SessionIdFilter attached.

    The filter adds ``session_id`` to each record so formatters can
    include ``%(session_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, SessionIdFilter) for f in logger.filters):
        logger.addFilter(SessionIdFilter())
    return logger


SESSION_LOG_FORMAT = "%(asctime)s [%(name)s] [%(session_id)s] %(levelname)s: %(message)s"


def build_session_handler(stream=None) -> logging.Handler:
    """Return a stream handler that stamps and prints the session ID.

    The filter sits on the handler, so records from plain
    ``logging.getLogger`` loggers are stamped too.
    """
    handler = logging.StreamHandler(stream)
    handler.addFilter(SessionIdFilter())
    handler.setFormatter(logging.Formatter(SESSION_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler
