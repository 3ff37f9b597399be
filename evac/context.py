"""Mutable context shared by every handler of an installed hook.

Handlers receive the cell, not the bare value, so they can rebind it
(``ctx.value += "a"``) as well as mutate it in place.

Exclusive access is asserted, not enforced: the installed hook is assumed
not to be re-entered by overlapping fatal events. A concurrent borrow is
logged and proceeds with undefined results. ``synchronized=True`` swaps the
assertion for a reentrant lock held across one full handler run.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Iterator, Optional

logger = logging.getLogger(__name__)


class SharedContext:
    """Caller-supplied value threaded through all handlers."""

    def __init__(self, value: Any = None, *, synchronized: bool = False) -> None:
        self.value = value
        self._lock: Optional[threading.RLock] = threading.RLock() if synchronized else None
        self._borrower: Optional[int] = None

    @property
    def synchronized(self) -> bool:
        return self._lock is not None

    @property
    def borrowed(self) -> bool:
        return self._borrower is not None

    @contextmanager
    def borrow(self) -> Iterator[SharedContext]:
        """Hold exclusive access for the duration of one hook invocation."""
        if self._lock is not None:
            with self._lock:
                yield self
            return

        previous = self._borrower
        me = threading.get_ident()
        if previous is not None and previous != me:
            logger.warning(
                "panic context borrowed concurrently by threads %s and %s",
                previous,
                me,
            )
        self._borrower = me
        try:
            yield self
        finally:
            self._borrower = previous

    def __repr__(self) -> str:
        return f"SharedContext({self.value!r})"
