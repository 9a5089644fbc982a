"""Cancellation context shared by every transition and provider call.

A single :class:`Context` is created at startup. :func:`install_signal_relay`
turns the first SIGINT/SIGTERM into ``ctx.cancel()``; everything that can
block (keystroke reads, queries) observes it and fails fast with
:class:`~pgnav.errors.CancelError`.
"""
from __future__ import annotations

import logging
import signal
import threading
import time
from typing import Callable

from .errors import CancelError

log = logging.getLogger(__name__)


class Context:
    """Cancellation token with an optional deadline.

    Child contexts (see :meth:`child`) are cancelled together with their
    parent but may also carry a tighter deadline of their own.
    """

    def __init__(self, parent: Context | None = None, deadline: float | None = None):
        self.parent = parent
        self.deadline = deadline
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self.parent is not None and self.parent.cancelled

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when unbounded."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def cancel(self) -> None:
        """Cancel this context and run registered callbacks exactly once."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for cb in callbacks:
            try:
                cb()
            except Exception:
                log.exception("cancel callback %r failed", cb)

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register *callback* to run on cancellation.

        Returns a function that unregisters it again. If the context is
        already cancelled the callback runs immediately.
        """
        with self._lock:
            fired = self._event.is_set()
            if not fired:
                self._callbacks.append(callback)
        if fired:
            callback()
            return lambda: None

        parent_remove = self.parent.on_cancel(callback) if self.parent is not None else None

        def remove() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)
            if parent_remove is not None:
                parent_remove()

        return remove

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise CancelError()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or *timeout* elapses; return ``cancelled``."""
        end = None if timeout is None else time.monotonic() + timeout
        while not self.cancelled:
            left = None if end is None else end - time.monotonic()
            if left is not None and left <= 0:
                break
            step = 0.05 if left is None else min(0.05, left)
            self._event.wait(step)
        return self.cancelled

    def child(self, timeout: float | None = None) -> Context:
        """Derive a context bounded by *timeout* seconds (and by our deadline)."""
        deadline = None if timeout is None else time.monotonic() + timeout
        if self.deadline is not None:
            deadline = self.deadline if deadline is None else min(deadline, self.deadline)
        return Context(parent=self, deadline=deadline)


def install_signal_relay(ctx: Context) -> Callable[[], None]:
    """Relay SIGINT/SIGTERM into ``ctx.cancel()`` once per process.

    After the first signal the previous handlers are restored, so a second
    Ctrl+C behaves as the interpreter default. Returns a function restoring
    the original handlers. Must be called from the main thread.
    """
    signals = [signal.SIGINT, signal.SIGTERM]
    previous = {sig: signal.getsignal(sig) for sig in signals}
    fired = {"done": False}

    def restore() -> None:
        for sig, handler in previous.items():
            signal.signal(sig, handler)

    def relay(signum, frame) -> None:
        if fired["done"]:
            return
        fired["done"] = True
        log.info("received signal %s, cancelling", signal.Signals(signum).name)
        restore()
        ctx.cancel()

    for sig in signals:
        signal.signal(sig, relay)
    return restore
