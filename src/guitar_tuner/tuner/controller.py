"""
Start/stop state machine that owns the listening thread.

States are IDLE and LISTENING. All transitions go through ``start`` and
``stop`` (or the worker ending its own session) under one lock, and each
session gets its own stop event, so a late-finishing worker can never reset
a newer session.
"""

import enum
import logging
import threading
from typing import Callable, Optional, Union

from ..capture.base import FrameSource
from ..config import TunerConfig
from ..errors import ConfigError, DeviceInitFailed, PermissionDenied, ReadFailure
from .display import TunerDisplay
from .pipeline import run_pipeline

logger = logging.getLogger(__name__)

PERMISSION_TEXT = "Microphone permission required"
INIT_FAILED_TEXT = "Audio initialization failed"
READ_FAILED_TEXT = "Audio read failed"

Permission = Union[bool, Callable[[], bool]]


class TunerState(enum.Enum):
    IDLE = 'idle'
    LISTENING = 'listening'


class _Session:
    """One listening run: its source, stop event and worker thread."""

    def __init__(self, source: FrameSource):
        self.source = source
        self.stop_event = threading.Event()
        self.thread: Optional[threading.Thread] = None
        self._released = False

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        _close_source(self.source)


class TunerController:
    """
    Drives capture -> detection -> display for an interactive tuner.

    Args:
        source_factory: Creates a fresh, unopened FrameSource per session
        display: Receives frequency and status updates
        config: Tuner configuration; frame_size must be resolved
    """

    def __init__(
        self,
        source_factory: Callable[[], FrameSource],
        display: Optional[TunerDisplay] = None,
        config: Optional[TunerConfig] = None
    ):
        self.config = config or TunerConfig()
        if self.config.frame_size is None:
            raise ConfigError("TunerController needs a concrete frame_size")
        self.source_factory = source_factory
        self.display = display or TunerDisplay()
        self._lock = threading.Lock()
        self._state = TunerState.IDLE
        self._session: Optional[_Session] = None
        self._starting = False
        self._start_cancelled = False

    @property
    def state(self) -> TunerState:
        with self._lock:
            return self._state

    @property
    def is_listening(self) -> bool:
        return self.state is TunerState.LISTENING

    def start(self, permission: Permission = True) -> bool:
        """
        Begin listening.

        Args:
            permission: Whether audio capture is allowed, or a callable
                returning that. Checked before anything else.

        Returns:
            True if a new session started
        """
        logger.debug("Starting listening")
        try:
            _check_permission(permission)
        except PermissionDenied as e:
            logger.error("Microphone permission not granted: %s", e)
            self.display.show_status(PERMISSION_TEXT)
            return False

        with self._lock:
            if self._state is TunerState.LISTENING or self._starting:
                logger.debug("Already listening")
                return False
            self._starting = True
            self._start_cancelled = False

        # Opening a device may block; the lock stays free meanwhile
        failure = None
        source = None
        try:
            source = self.source_factory()
            source.open()
        except DeviceInitFailed as e:
            logger.error("Audio source not initialized: %s", e)
            failure = INIT_FAILED_TEXT
        except Exception as e:
            logger.exception("Error starting audio capture")
            failure = f"Error: {e}"

        with self._lock:
            self._starting = False
            cancelled = self._start_cancelled
            if failure is None and not cancelled:
                session = _Session(source)
                session.thread = threading.Thread(
                    target=self._listen,
                    args=(session,),
                    name="TunerListener",
                    daemon=True,
                )
                self._session = session
                self._state = TunerState.LISTENING
                session.thread.start()

        # Posted outside the lock so observers may call start/stop
        if failure is not None:
            self.display.show_status(failure)
            return False
        if cancelled:
            logger.info("Stop requested while opening the audio source")
            _close_source(source)
            return False

        logger.info("Listening at %d Hz, frame size %d", source.sample_rate, self.config.frame_size)
        return True

    def stop(self) -> None:
        """Stop listening. Safe to call at any time, any number of times."""
        with self._lock:
            if self._starting:
                self._start_cancelled = True
            session = self._session
            if session is None:
                return
            logger.info("Stopping listening")
            self._session = None
            self._state = TunerState.IDLE
            session.stop_event.set()

        thread = session.thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(self.config.stop_timeout)
            if thread.is_alive():
                logger.warning("Listening thread still blocked in read after %.1fs",
                               self.config.stop_timeout)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the current session ends; True if nothing is running."""
        with self._lock:
            session = self._session
        if session is None or session.thread is None:
            return True
        session.thread.join(timeout)
        return not session.thread.is_alive()

    def _listen(self, session: _Session) -> None:
        try:
            frames = run_pipeline(session.source, self.display.publish, self.config, session.stop_event)
            logger.debug("Listening loop stopped after %d frames", frames)
        except ReadFailure as e:
            if not session.stop_event.is_set():
                logger.error("Error reading audio: %d", e.count)
                self.display.show_status(READ_FAILED_TEXT)
        except Exception:
            logger.exception("Error in listening loop")
        finally:
            session.release()
            with self._lock:
                if self._session is session:
                    self._session = None
                    self._state = TunerState.IDLE


def _check_permission(permission: Permission) -> None:
    granted = permission() if callable(permission) else permission
    if not granted:
        raise PermissionDenied("audio capture not permitted")


def _close_source(source: FrameSource) -> None:
    try:
        source.close()
    except Exception:
        logger.exception("Error releasing capture source")
