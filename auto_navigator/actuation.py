"""Single-slot delayed actuation.

Movement and interaction clicks fire after a short human-like delay. Only one
action may be pending: scheduling a new one cancels the previous, so pointer
placement and click of different requests can never interleave.
"""

import logging
import threading
from typing import Callable, Optional

from auto_navigator.errors import ActuationError


class ActuationScheduler:
    """Cancelable single-slot scheduled action.

    Errors raised by a fired action (ActuationError) are stored and handed
    to the driver through take_error() on its next tick.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0
        self._last_error: Optional[ActuationError] = None
        self.fired_count = 0
        self.cancelled_count = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def schedule(self, action: Callable[[], None], delay_ms: float) -> None:
        """Run action after delay_ms, replacing any pending action."""
        with self._lock:
            self._cancel_locked()
            self._generation += 1
            generation = self._generation
            timer = threading.Timer(max(0.0, delay_ms) / 1000.0, self._fire, args=(generation, action))
            timer.daemon = True
            self._timer = timer
            timer.start()

    def cancel(self) -> bool:
        """Cancel the pending action; returns True if one was pending."""
        with self._lock:
            return self._cancel_locked()

    def _cancel_locked(self) -> bool:
        if self._timer is None:
            return False
        self._timer.cancel()
        self._timer = None
        # Invalidate a timer that already started running its callback
        self._generation += 1
        self.cancelled_count += 1
        return True

    def _fire(self, generation: int, action: Callable[[], None]) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None
            # Run under the lock so a replacement cannot start mid-action
            try:
                action()
                self.fired_count += 1
            except ActuationError as e:
                self._logger.warning(f'[ACTUATION] Scheduled action rejected: {e.message}')
                self._last_error = e

    def take_error(self) -> Optional[ActuationError]:
        """Return and clear the last actuation error, if any."""
        with self._lock:
            error, self._last_error = self._last_error, None
            return error

    def shutdown(self) -> None:
        self.cancel()
