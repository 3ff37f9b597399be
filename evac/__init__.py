"""Composable fatal-error hooks.

The runtime allows one ``sys.excepthook``; evac lets any number of handlers
share it, run in order, and pass state to each other through a shared
context.
"""

from .builder import EvacBuilder
from .config import EvacConfig
from .context import SharedContext
from .errors import (
    HANDLER_FAILURE_HEADER,
    BuilderConsumedError,
    ConfigError,
    EvacError,
    set_error_hook,
)
from .hook import InstalledHook, OriginalHook, active_hook, install, uninstall
from .models import ErrorInfo, Handler, HandlerChain, HookSource

__all__ = [
    "BuilderConsumedError",
    "ConfigError",
    "ErrorInfo",
    "EvacBuilder",
    "EvacConfig",
    "EvacError",
    "HANDLER_FAILURE_HEADER",
    "Handler",
    "HandlerChain",
    "HookSource",
    "InstalledHook",
    "OriginalHook",
    "SharedContext",
    "active_hook",
    "install",
    "set_error_hook",
    "uninstall",
]
