"""The installed fatal-error hook and the process-wide slot that holds it.

Python exposes two runtime slots for uncaught exceptions:
``sys.excepthook`` for the main thread and ``threading.excepthook`` for
everything started through ``threading``. An InstalledHook owns both (the
second one unless disabled) and is the only thing evac ever writes there.
"""

from __future__ import annotations

import logging
import sys
import threading
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Callable, Optional

from .context import SharedContext
from .errors import report_handler_failure
from .models import ErrorInfo, HandlerChain, HookSource

logger = logging.getLogger(__name__)

# The single active evac hook. Last writer wins.
_active: Optional["InstalledHook"] = None


def _handler_name(handler: Callable[..., Any]) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


def _is_evac_hook(hook: Any) -> bool:
    return isinstance(getattr(hook, "__self__", None), InstalledHook)


@dataclass(frozen=True)
class OriginalHook:
    """Hooks that were installed before register(), kept for chaining."""

    sys_hook: Callable[..., Any]
    thread_hook: Callable[..., Any]

    @classmethod
    def capture(cls) -> OriginalHook:
        return cls(sys.excepthook, threading.excepthook)

    def __call__(self, info: ErrorInfo) -> None:
        # Failures here are not caught; they behave as they did before evac.
        if info.source is HookSource.THREADING:
            self.thread_hook(info.thread_hook_args())
        else:
            self.sys_hook(info.exc_type, info.exc_value, info.exc_traceback)


class InstalledHook:
    """Runs the preserved hook, then every handler in registration order."""

    def __init__(
        self,
        chain: HandlerChain,
        context: SharedContext,
        original: Optional[OriginalHook] = None,
        *,
        include_threads: bool = True,
    ) -> None:
        self.chain = chain
        self.context = context
        self.original = original
        self.include_threads = include_threads

    def __call__(self, info: ErrorInfo) -> None:
        if self.original is not None:
            self.original(info)

        with self.context.borrow() as ctx:
            for index, handler in enumerate(self.chain):
                try:
                    handler(info, ctx)
                except Exception as exc:
                    try:
                        report_handler_failure(
                            exc,
                            handler=_handler_name(handler),
                            index=index,
                            fatal=info.to_dict(),
                        )
                    except Exception:
                        # stderr gone (closed stream, broken pipe); keep going.
                        logger.debug("Could not report panic handler failure", exc_info=True)

    def excepthook(
        self,
        exc_type: type[BaseException],
        exc_value: BaseException,
        exc_traceback: Optional[TracebackType],
    ) -> None:
        """``sys.excepthook`` entry point."""
        self(ErrorInfo.from_excepthook(exc_type, exc_value, exc_traceback))

    def thread_excepthook(self, args: Any) -> None:
        """``threading.excepthook`` entry point."""
        info = ErrorInfo.from_thread_args(args)
        # Threads exit quietly on SystemExit, so only the preserved hook sees it.
        if issubclass(args.exc_type, SystemExit):
            if self.original is not None:
                self.original(info)
            return
        self(info)

    def __repr__(self) -> str:
        return (
            f"InstalledHook(handlers={len(self.chain)}, "
            f"preserve_default={self.chain.preserve_default}, "
            f"include_threads={self.include_threads})"
        )


def install(hook: InstalledHook) -> None:
    """Make *hook* the process-wide fatal-error callback."""
    global _active
    sys.excepthook = hook.excepthook
    if hook.include_threads:
        threading.excepthook = hook.thread_excepthook
    elif _is_evac_hook(threading.excepthook):
        # Don't leave a superseded chain reachable from worker threads.
        threading.excepthook = threading.__excepthook__
    _active = hook


def active_hook() -> Optional[InstalledHook]:
    """Return the installed evac hook, or None if something else replaced it."""
    if _active is not None and sys.excepthook == _active.excepthook:
        return _active
    return None


def uninstall() -> None:
    """Restore the interpreter's default hooks and clear the active slot."""
    global _active
    sys.excepthook = sys.__excepthook__
    threading.excepthook = threading.__excepthook__
    _active = None
    logger.debug("Restored default exception hooks")
