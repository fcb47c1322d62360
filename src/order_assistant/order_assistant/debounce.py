"""Trailing-edge debounce for user input."""

import threading
from collections.abc import Callable

from loguru import logger

DEFAULT_DELAY = 2.0


class InputDebouncer:
    """Coalesce rapid consecutive inputs into one handler call.

    Every push restarts the timer. When it fires, the buffered inputs are
    joined with spaces in arrival order and handed to ``handler`` once.
    Deliveries never overlap.
    """

    def __init__(self, handler: Callable[[str], object], delay: float = DEFAULT_DELAY) -> None:
        self._handler = handler
        self.delay = delay
        self._buffer: list[str] = []
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()
        self._delivery_lock = threading.Lock()

    @property
    def pending(self) -> bool:
        with self._lock:
            return bool(self._buffer)

    def push(self, text: str) -> None:
        with self._lock:
            self._buffer.append(text)
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self._deliver)
            self._timer.daemon = True
            self._timer.start()
            logger.debug("Buffered input ({} pending)", len(self._buffer))

    def flush(self) -> None:
        """Deliver whatever is buffered now, without waiting for the timer."""
        self._deliver()

    def _take(self) -> str | None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if not self._buffer:
                return None
            text = " ".join(self._buffer)
            self._buffer = []
            return text

    def _deliver(self) -> None:
        with self._delivery_lock:
            text = self._take()
            if text is None:
                return
            logger.debug("Delivering debounced input: {}", text)
            self._handler(text)
