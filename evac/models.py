"""Domain models for evac: fatal-error snapshots and frozen handler chains."""

from __future__ import annotations

import threading
import traceback
from collections import namedtuple
from dataclasses import dataclass, field
from enum import Enum
from types import TracebackType
from typing import TYPE_CHECKING, Any, Callable, Iterator, Optional

from .errors import render_error

if TYPE_CHECKING:
    from .context import SharedContext

Handler = Callable[["ErrorInfo", "SharedContext"], None]

# Attribute-compatible stand-in for threading.ExceptHookArgs, whose
# constructor differs between the C and pure-Python implementations.
_ThreadHookArgs = namedtuple(
    "_ThreadHookArgs", ["exc_type", "exc_value", "exc_traceback", "thread"]
)


class HookSource(str, Enum):
    SYS = "sys.excepthook"
    THREADING = "threading.excepthook"


@dataclass(frozen=True)
class ErrorInfo:
    """Read-only snapshot of one fatal condition."""

    exc_type: type[BaseException]
    exc_value: Optional[BaseException]
    exc_traceback: Optional[TracebackType] = None
    thread: Optional[threading.Thread] = None
    source: HookSource = HookSource.SYS
    hook_args: Any = field(default=None, repr=False, compare=False)

    @classmethod
    def from_excepthook(
        cls,
        exc_type: type[BaseException],
        exc_value: Optional[BaseException],
        exc_traceback: Optional[TracebackType],
    ) -> ErrorInfo:
        return cls(exc_type, exc_value, exc_traceback)

    @classmethod
    def from_thread_args(cls, args: Any) -> ErrorInfo:
        return cls(
            args.exc_type,
            args.exc_value,
            args.exc_traceback,
            thread=args.thread,
            source=HookSource.THREADING,
            hook_args=args,
        )

    @property
    def error_type(self) -> str:
        return self.exc_type.__name__

    @property
    def message(self) -> str:
        return "" if self.exc_value is None else render_error(self.exc_value)

    @property
    def payload(self) -> Optional[BaseException]:
        return self.exc_value

    @property
    def location(self) -> Optional[str]:
        """``file:line`` of the innermost traceback frame, if any."""
        if self.exc_traceback is None:
            return None
        frame = traceback.extract_tb(self.exc_traceback)[-1]
        return f"{frame.filename}:{frame.lineno}"

    def thread_hook_args(self) -> Any:
        """Arguments in the shape ``threading.excepthook`` expects."""
        if self.hook_args is not None:
            return self.hook_args
        return _ThreadHookArgs(
            self.exc_type, self.exc_value, self.exc_traceback, self.thread
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": self.error_type,
            "message": self.message,
            "location": self.location,
            "thread": self.thread.name if self.thread is not None else None,
            "source": self.source.value,
        }


@dataclass(frozen=True)
class HandlerChain:
    """Ordered handlers frozen at registration time."""

    handlers: tuple[Handler, ...] = ()
    preserve_default: bool = False

    def __len__(self) -> int:
        return len(self.handlers)

    def __iter__(self) -> Iterator[Handler]:
        return iter(self.handlers)
