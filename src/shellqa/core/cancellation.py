# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Cooperative cancellation tokens.

A :class:`CancellationTokenSource` owns the right to cancel; the token it hands
out may only be observed. Tokens can be chained so that cancelling a parent
cancels every linked child, which lets the diagnosis pipeline scope a run to a
single document while still honouring a caller supplied token.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from shellqa.interfaces import CancellationToken, Disposable

LOGGER = logging.getLogger(__name__)


class CallbackDisposable:
    """Disposable invoking ``callback`` at most once."""

    __slots__ = ("_callback",)

    def __init__(self, callback: Callable[[], None] | None = None) -> None:
        self._callback = callback

    def dispose(self) -> None:
        callback, self._callback = self._callback, None
        if callback is not None:
            callback()


class _SourceToken:
    """Token bound to a :class:`CancellationTokenSource`."""

    def __init__(self) -> None:
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []
        self._lock = threading.Lock()

    @property
    def is_cancellation_requested(self) -> bool:
        return self._cancelled

    def on_cancellation_requested(self, callback: Callable[[], None]) -> Disposable:
        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)
                return CallbackDisposable(lambda: self._remove(callback))
        callback()
        return CallbackDisposable()

    def _remove(self, callback: Callable[[], None]) -> None:
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                return

    def _cancel(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception:  # noqa: BLE001 - listeners are isolated from each other
                LOGGER.exception("cancellation listener raised")


class _NeverCancelled:
    """Token that never signals."""

    @property
    def is_cancellation_requested(self) -> bool:
        return False

    def on_cancellation_requested(self, callback: Callable[[], None]) -> Disposable:
        del callback
        return CallbackDisposable()


NONE_TOKEN: CancellationToken = _NeverCancelled()


class CancellationTokenSource:
    """Create and signal a cancellation token.

    Args:
        parent: Optional token whose cancellation propagates to this source.
    """

    def __init__(self, parent: CancellationToken | None = None) -> None:
        self._token = _SourceToken()
        self._parent_link: Disposable | None = None
        if parent is not None:
            self._parent_link = parent.on_cancellation_requested(self.cancel)

    @property
    def token(self) -> CancellationToken:
        """Return the observable token."""

        return self._token

    @property
    def is_cancelled(self) -> bool:
        """Return ``True`` once :meth:`cancel` has been invoked."""

        return self._token.is_cancellation_requested

    def cancel(self) -> None:
        """Signal cancellation. Repeated calls are ignored."""

        self._token._cancel()

    def dispose(self) -> None:
        """Detach from the parent token without cancelling."""

        if self._parent_link is not None:
            self._parent_link.dispose()
            self._parent_link = None


__all__ = [
    "CallbackDisposable",
    "CancellationTokenSource",
    "NONE_TOKEN",
]
