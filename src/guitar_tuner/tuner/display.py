"""
Values the presentation layer observes: the current frequency and status text.
"""

import logging
import threading
from typing import Callable, Generic, List, TypeVar

from ..types import DetectionResult

logger = logging.getLogger(__name__)

T = TypeVar('T')

IDLE_TEXT = "No sound detected"


class ObservableValue(Generic[T]):
    """
    Latest-value holder with change callbacks.

    ``post`` may be called from any thread; readers always see the most
    recent value. Callbacks run on the posting thread.
    """

    def __init__(self, initial: T):
        self._value = initial
        self._lock = threading.Lock()
        self._observers: List[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        with self._lock:
            return self._value

    def post(self, value: T) -> None:
        with self._lock:
            self._value = value
            observers = list(self._observers)
        for callback in observers:
            try:
                callback(value)
            except Exception:
                logger.exception("Observer %r failed", callback)

    def observe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register a callback; returns a function that unregisters it."""
        with self._lock:
            self._observers.append(callback)

        def _remove():
            with self._lock:
                if callback in self._observers:
                    self._observers.remove(callback)

        return _remove


class TunerDisplay:
    """The two values a tuner screen shows."""

    def __init__(self):
        self.frequency: ObservableValue[float] = ObservableValue(0.0)
        self.status: ObservableValue[str] = ObservableValue(IDLE_TEXT)

    def publish(self, result: DetectionResult) -> None:
        self.frequency.post(result.frequency_hz)
        self.status.post(result.status_text)

    def show_status(self, text: str) -> None:
        self.status.post(text)
