"""
Landmark sources feeding hands into the gesture classifier.
"""

import logging
import threading
from typing import Any, Iterable, List, Optional, Protocol, Sequence, Tuple

logger = logging.getLogger(__name__)

Hands = List[Tuple[Sequence[Any], Any]]


class LandmarkSource(Protocol):
    """Producer of per-frame hand landmarks."""

    def read(self) -> Optional[Hands]:
        """
        Return the hands for the next frame.

        Returns:
            List of up to two ``(landmarks, handedness)`` pairs, or None when
            the source has no more frames
        """
        ...

    def close(self) -> None:
        ...


class StaticLandmarkSource:
    """Replays a fixed sequence of frames, for tests and offline demos."""

    def __init__(self, frames: Iterable[Hands], loop: bool = False):
        self.frames = list(frames)
        self.loop = loop
        self.position = 0
        self.closed = False

    def read(self) -> Optional[Hands]:
        if self.closed or not self.frames:
            return None
        if self.position >= len(self.frames):
            if not self.loop:
                return None
            self.position = 0
        hands = self.frames[self.position]
        self.position += 1
        return hands

    def close(self):
        self.closed = True


class BackgroundLandmarkSource:
    """
    Runs another source on a worker thread and keeps only its latest result.

    The camera and landmark model usually run slower than the display, so the
    render loop reads whatever hands were produced most recently instead of
    waiting for a new detection.
    """

    def __init__(self, source: LandmarkSource, poll_interval: float = 0.0):
        """
        Args:
            source: Source to read on the worker thread
            poll_interval: Pause between reads in seconds
        """
        self.source = source
        self.poll_interval = poll_interval
        self._latest: Hands = []
        self._exhausted = False
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "BackgroundLandmarkSource":
        if self._thread is None:
            self._thread = threading.Thread(target=self._run, name="landmark-source", daemon=True)
            self._thread.start()
        return self

    def _run(self):
        logger.debug("Landmark worker started")
        while not self._stop_event.is_set():
            try:
                hands = self.source.read()
            except Exception:
                logger.exception("Landmark source failed, stopping worker")
                hands = None
            with self._lock:
                if hands is None:
                    self._exhausted = True
                else:
                    self._latest = list(hands)
            if hands is None:
                break
            if self.poll_interval:
                self._stop_event.wait(self.poll_interval)
        logger.debug("Landmark worker stopped")

    def read(self) -> Optional[Hands]:
        """Latest hands seen by the worker, or None once the source ran dry."""
        with self._lock:
            if self._exhausted:
                return None
            return list(self._latest)

    def close(self):
        """Stop the worker thread and close the wrapped source."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        self.source.close()
