"""Cancellation and deadline context for blocking operations."""

import threading
import time
from typing import Optional

from iaasctl.domain.core.exceptions import OperationCancelledError


class OperationContext:
    """
    Caller-supplied cancellation and timeout context.

    Every call into an external command accepts one of these. A cancelled or
    expired context makes the operation raise OperationCancelledError; an
    external command already running is allowed to finish and its result is
    discarded.
    """

    def __init__(self, timeout: Optional[float] = None):
        """
        Initialize operation context.

        Args:
            timeout: Seconds from now after which the context expires, None for no deadline
        """
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._cancelled = threading.Event()

    @classmethod
    def background(cls) -> "OperationContext":
        """Context that never expires."""
        return cls()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def check(self, operation: str) -> None:
        """Raise OperationCancelledError if the context is done."""
        if self.cancelled:
            raise OperationCancelledError(operation)
        if self.expired:
            raise OperationCancelledError(operation, "timed out")


def ensure_context(context: Optional[OperationContext]) -> OperationContext:
    return context if context is not None else OperationContext.background()
