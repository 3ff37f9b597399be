"""Builder for composing many fatal-error handlers into one hook.

Python only allows a single ``sys.excepthook``, so every reaction to a crash
(dump files, telemetry, lock cleanup) is registered here and run in order
from one installed hook::

    def build_dump(info, ctx):
        ctx.value["dump"] = render_dump(info)

    def write_dump(info, ctx):
        Path(ctx.value["path"]).write_text(ctx.value["dump"])

    (
        EvacBuilder()
        .with_handler(build_dump)
        .with_handler(write_dump)
        .register({"path": "crash.txt"})
    )
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from .config import EvacConfig
from .context import SharedContext
from .errors import BuilderConsumedError
from .hook import InstalledHook, OriginalHook, install
from .models import Handler, HandlerChain

logger = logging.getLogger(__name__)


class EvacBuilder:
    """Accumulates handlers and options until register() consumes it."""

    def __init__(self) -> None:
        self._handlers: list[Handler] = []
        self._preserve_default = False
        self._include_threads = True
        self._synchronize_context = False
        self._consumed = False

    @classmethod
    def from_config(cls, config: Optional[EvacConfig] = None) -> EvacBuilder:
        config = config or EvacConfig()
        builder = cls().include_threads(config.include_threads)
        if config.preserve_default:
            builder.preserve_default_panic()
        if config.synchronize_context:
            builder.synchronize_context()
        return builder

    def _check_open(self) -> None:
        if self._consumed:
            raise BuilderConsumedError("EvacBuilder was already registered")

    @property
    def handlers(self) -> tuple[Handler, ...]:
        return tuple(self._handlers)

    @property
    def preserves_default(self) -> bool:
        return self._preserve_default

    def with_handler(self, handler: Handler) -> EvacBuilder:
        """Add a handler. Handlers run in the order they are added.

        Each receives the ErrorInfo and the SharedContext, so earlier
        handlers can leave values for later ones. Raising an exception marks
        the handler as failed; the remaining handlers still run.
        """
        self._check_open()
        if not callable(handler):
            raise TypeError(f"handler must be callable, got {type(handler).__name__}")
        self._handlers.append(handler)
        return self

    def preserve_default_panic(self) -> EvacBuilder:
        """Run the hook that was installed before register() ahead of the handlers."""
        self._check_open()
        self._preserve_default = True
        return self

    def include_threads(self, enabled: bool = True) -> EvacBuilder:
        """Also install on ``threading.excepthook`` (on by default)."""
        self._check_open()
        self._include_threads = enabled
        return self

    def synchronize_context(self) -> EvacBuilder:
        """Guard the context with a lock instead of asserting exclusive access."""
        self._check_open()
        self._synchronize_context = True
        return self

    def register(self, context: Any = None) -> None:
        """Freeze the handlers and install them as the process-wide hook."""
        self._check_open()
        self._consumed = True

        chain = HandlerChain(tuple(self._handlers), self._preserve_default)
        original = OriginalHook.capture() if chain.preserve_default else None
        shared = SharedContext(context, synchronized=self._synchronize_context)

        install(
            InstalledHook(chain, shared, original, include_threads=self._include_threads)
        )
        logger.debug(
            "Registered %d panic handler(s) (preserve_default=%s, synchronized=%s)",
            len(chain),
            chain.preserve_default,
            shared.synchronized,
        )
