import logging
from typing import Callable, Optional


class RoundTimer:
    """Single-slot, cancelable delayed callback for phase transitions.

    - ``schedule`` cancels whatever is pending before arming a new timer
    - Each armed timer carries a generation token; a worker whose token is no
      longer current wakes up and aborts without calling back
    - The callback runs while holding ``lock`` so it never interleaves with
      socket handlers mutating the same session

    ``scheduler`` is anything exposing ``start_background_task(fn, *args)``
    and ``sleep(seconds)``: the ``SocketIO`` instance at runtime, a manual
    stand-in under test.
    """

    def __init__(self, scheduler, lock, logger: Optional[logging.Logger] = None):
        self._scheduler = scheduler
        self._lock = lock
        self._logger = logger or logging.getLogger(__name__)
        self._generation = 0
        self._armed: Optional[int] = None
        self._label: Optional[str] = None
        self._delay: Optional[float] = None

    @property
    def pending(self) -> Optional[str]:
        """Label of the armed timer, or None."""
        return self._label if self._armed is not None else None

    @property
    def pending_delay(self) -> Optional[float]:
        return self._delay if self._armed is not None else None

    def schedule(self, delay_sec: float, callback: Callable[[], None], label: str = '') -> None:
        with self._lock:
            self.cancel()
            self._generation += 1
            token = self._generation
            self._armed = token
            self._label = label
            self._delay = delay_sec
            self._logger.info(f"[timer-set] label={label} delay={delay_sec}s token={token}")
        self._scheduler.start_background_task(self._worker, token, delay_sec, callback, label)

    def cancel(self) -> None:
        with self._lock:
            if self._armed is None:
                return
            self._logger.info(f"[timer-cancel] label={self._label} token={self._armed}")
            self._armed = None
            self._label = None
            self._delay = None

    def _worker(self, token: int, delay_sec: float, callback: Callable[[], None], label: str) -> None:
        self._scheduler.sleep(delay_sec)
        with self._lock:
            if self._armed != token:
                self._logger.info(f"[timer-abort] label={label} token={token} superseded")
                return
            self._armed = None
            self._label = None
            self._delay = None
            self._logger.info(f"[timer-fire] label={label} token={token}")
            callback()
