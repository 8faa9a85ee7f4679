"""
skyproj.cancel — Cooperative Cancellation
==========================================

A render pass polls a :class:`CancelToken` at fixed points (once per grid
line, once per catalog chunk).  Cancellation only takes effect at the next
poll; nothing is pre-empted.
"""

import logging
import threading

logger = logging.getLogger(__name__)


class CancelledError(RuntimeError):
    """Raised by :meth:`CancelToken.raise_if_cancelled`."""


class CancelToken:
    """Thread-safe "is this pass still wanted" flag.

    The UI thread calls :meth:`cancel`; the drawing thread polls
    :attr:`still_drawing` or calls :meth:`raise_if_cancelled`.
    """

    def __init__(self):
        self._event = threading.Event()

    @classmethod
    def never(cls) -> "CancelToken":
        """A fresh token nobody else holds, so it is never cancelled."""
        return cls()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def still_drawing(self) -> bool:
        return not self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancelledError("render pass cancelled")

    def __repr__(self) -> str:
        state = "cancelled" if self.is_cancelled else "active"
        return f"CancelToken({state})"


def note_cancelled(what: str, done: int) -> None:
    """Log that an iteration stopped early at a poll point."""
    logger.info("Cancelled %s after %d item(s)", what, done)
