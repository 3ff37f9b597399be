"""Shared exceptions and handler-failure reporting for evac."""

from __future__ import annotations

import logging
import sys
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

HANDLER_FAILURE_HEADER = "Error encountered in panic handler:"

# Receives (error, details) after each handler failure has been printed.
_error_hook: Optional[Callable[[Exception, dict[str, Any]], None]] = None


def set_error_hook(hook: Optional[Callable[[Exception, dict[str, Any]], None]]) -> None:
    """Forward handler failures to *hook*, e.g. a crash-telemetry client.

    Called once per failed panic handler with the exception and a dict of
    details (handler name, position in the chain, the fatal error). None
    turns forwarding off.
    """
    global _error_hook
    _error_hook = hook


def render_error(error: BaseException) -> str:
    try:
        return str(error)
    except Exception:
        return f"<unprintable {type(error).__name__}>"


def report_handler_failure(error: Exception, **context: Any) -> None:
    """Write the two-line stderr diagnostic and emit telemetry.

    A failing error hook is logged and ignored.
    """
    message = render_error(error)
    print(HANDLER_FAILURE_HEADER, file=sys.stderr)
    print(message, file=sys.stderr)

    ctx = {
        "error_type": type(error).__name__,
        "message": message,
        **context,
    }
    logger.debug("panic handler failed: %s", ctx, exc_info=error)
    if _error_hook is not None:
        try:
            _error_hook(error, ctx)
        except Exception:
            logger.warning("Error hook failed", exc_info=True)


class EvacError(Exception):
    """Base exception for evac."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.context = context


class BuilderConsumedError(EvacError):
    """Raised when a builder is used after register() consumed it."""


class ConfigError(EvacError):
    """Raised when configuration is invalid or missing."""
