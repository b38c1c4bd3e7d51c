"""
Interface wiring a landmark source, the gesture classifier, the particle field
and a render sink into one frame loop.
"""

import logging
import time
from typing import Any, Callable, List, Optional

from .gesture_classifier import GestureClassifier, GestureState
from .landmark_source import Hands, LandmarkSource
from .particle_field import ParticleField, ParticleFieldConfig
from .render import RenderFrame, RenderSink

logger = logging.getLogger(__name__)

GestureCallback = Callable[[GestureState], None]


class ParticleInterface:
    """Drives a gesture-controlled particle field one tick at a time."""

    def __init__(self,
                 source: Optional[LandmarkSource] = None,
                 sink: Optional[RenderSink] = None,
                 config: Optional[ParticleFieldConfig] = None,
                 seed: Optional[int] = None,
                 classifier: Optional[GestureClassifier] = None):
        """
        Initialize the particle interface.

        Args:
            source: Where hand landmarks come from; None means no hands
            sink: Where frames are drawn; None skips drawing
            config: Initial particle field settings
            seed: Seed for the particle shape jitter
            classifier: Gesture classifier to use
        """
        self.source = source
        self.sink = sink
        self.classifier = classifier or GestureClassifier()
        self.field = ParticleField(config, seed=seed)

        self.gesture_callbacks: List[GestureCallback] = []
        self.current_gesture = GestureState()
        self.is_running = False
        self.closed = False

    def register_gesture_callback(self, callback: GestureCallback):
        """
        Register a function called with every new gesture state.

        Args:
            callback: Function receiving the GestureState
        """
        self.gesture_callbacks.append(callback)

    def process_hands(self, hands: Optional[Hands]) -> GestureState:
        """
        Classify one frame of hands and retarget the particle field.

        Args:
            hands: Hands from the landmark source

        Returns:
            The gesture state for this frame
        """
        if self.closed:
            return self.current_gesture

        gesture = self.classifier.classify(hands or [])
        self.current_gesture = gesture
        self.field.apply_gesture(gesture)

        for callback in list(self.gesture_callbacks):
            callback(gesture)
        return gesture

    def tick(self, dt: float, hands: Optional[Hands] = None) -> Optional[RenderFrame]:
        """
        Run one frame: classify, advance and draw.

        Args:
            dt: Seconds since the previous tick
            hands: Hands for this frame; read from the source when omitted

        Returns:
            The rendered frame, or None after cleanup
        """
        if self.closed:
            return None

        if hands is None and self.source is not None:
            hands = self.source.read()
        self.process_hands(hands)

        self.field.advance(dt)
        frame = self.field.render_frame()
        if frame is not None and self.sink is not None:
            if not self.sink.render(frame, self.current_gesture):
                self.is_running = False
        return frame

    def run_realtime(self, max_frames: Optional[int] = None,
                     on_tick: Optional[Callable[["ParticleInterface"], None]] = None):
        """
        Run the frame loop until the sink asks to stop or the source runs dry.

        Args:
            max_frames: Stop after this many frames (None runs until stopped)
            on_tick: Called with this interface after every frame
        """
        start = getattr(self.source, 'start_camera', None)
        if start is not None and not start():
            logger.error("Failed to start landmark source")
            return

        logger.info("Starting particle loop")
        self.is_running = True
        frames = 0
        last_time = time.perf_counter()
        try:
            while self.is_running:
                hands = self.source.read() if self.source is not None else []
                if hands is None:
                    logger.info("Landmark source stopped, leaving particle loop")
                    break

                now = time.perf_counter()
                dt, last_time = now - last_time, now
                self.tick(dt, hands)
                if on_tick is not None:
                    on_tick(self)
                frames += 1
                if max_frames is not None and frames >= max_frames:
                    break
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
        finally:
            self.is_running = False

    def get_current_gesture(self) -> GestureState:
        return self.current_gesture

    def set_particle_count(self, count: Any):
        self.field.set_particle_count(count)

    def set_particle_shape(self, shape: Any):
        self.field.set_particle_shape(shape)

    def set_particle_color(self, color: Any):
        self.field.set_color(color)

    def set_particle_size(self, size: Any):
        self.field.set_particle_size(size)

    def cleanup(self):
        """Release the source, the sink and the particle buffers."""
        if self.closed:
            return
        self.closed = True
        self.is_running = False
        self.gesture_callbacks.clear()
        if self.source is not None:
            self.source.close()
        if self.sink is not None:
            self.sink.close()
        self.field.dispose()
        logger.info("Particle interface closed")
