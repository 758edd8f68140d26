"""
Trailing-edge debounce for CDN Cert Sync.

Coalesces a burst of trigger calls into a single delayed call of an
action, using only the arguments of the last trigger in the burst.
Timers run on daemon threads because watchdog delivers filesystem
events on its own observer thread.
"""

from __future__ import annotations

import logging
import math
import threading
from collections.abc import Callable
from typing import Any

from cdn_cert_sync.errors import InvalidConfiguration

logger = logging.getLogger(__name__)


def _log_error(exc: BaseException) -> None:
    logger.error("Debounced action failed: %s", exc, exc_info=exc)


class Debouncer:
    """
    Wrap *action* so that calling the instance schedules it after a quiet period.

    Each call cancels the outstanding timer (if any), captures its arguments,
    and arms a fresh timer. The action runs once the quiet period passes
    with no further calls, and never inside the call itself.

    Parameters
    ----------
    action : callable
        Invoked with the most recently captured ``*args, **kwargs``.
    wait_ms : int or float
        Quiet period in milliseconds (>= 0).
    on_error : callable, optional
        Receives any exception raised by *action*. Defaults to logging it.
    name : str
        Thread name used for the timers.
    """

    def __init__(
        self,
        action: Callable[..., Any],
        wait_ms: float,
        on_error: Callable[[BaseException], None] | None = None,
        name: str = "Debouncer",
    ):
        if (
            isinstance(wait_ms, bool)
            or not isinstance(wait_ms, (int, float))
            or not math.isfinite(wait_ms)
            or wait_ms < 0
            or wait_ms / 1000.0 > threading.TIMEOUT_MAX
        ):
            raise InvalidConfiguration(
                "Quiet period must be a finite, non-negative number of milliseconds"
                f" no larger than {threading.TIMEOUT_MAX * 1000:g}, got {wait_ms!r}"
            )
        self._action = action
        self._wait_ms = wait_ms
        self._on_error = on_error or _log_error
        self._name = name
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._generation = 0
        self._closed = False

    @property
    def wait_ms(self) -> float:
        return self._wait_ms

    @property
    def pending(self) -> bool:
        """Return whether an execution is currently scheduled."""
        with self._lock:
            return self._timer is not None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        """Re-arm the quiet period with these arguments."""
        with self._lock:
            if self._closed:
                logger.debug("%s is closed; ignoring trigger.", self._name)
                return
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            timer = threading.Timer(
                self._wait_ms / 1000.0,
                self._fire,
                args=(self._generation, args, kwargs),
            )
            timer.daemon = True
            timer.name = self._name
            self._timer = timer
            timer.start()

    def _fire(self, generation: int, args: tuple, kwargs: dict) -> None:
        with self._lock:
            # A newer trigger (or close) may have won the race with this timer
            if self._closed or generation != self._generation:
                return
            self._timer = None
        try:
            self._action(*args, **kwargs)
        except Exception as exc:
            self._on_error(exc)

    def close(self) -> None:
        """Cancel any pending execution and ignore all further triggers."""
        with self._lock:
            self._closed = True
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def __enter__(self) -> Debouncer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
