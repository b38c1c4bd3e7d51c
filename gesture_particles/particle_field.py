"""
Particle field owning the position/velocity buffers and the smoothed
scale/rotation driven by gestures.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Any, Optional, Tuple

import numpy as np

from .config import PARTICLE_CONFIG
from .gesture_classifier import GestureState
from .render import RenderFrame
from .shapes import ParticleShape, ShapeGenerator

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]


def parse_color(value: Any, default: RGB = PARTICLE_CONFIG['default_color']) -> RGB:
    """
    Read an RGB color.

    Args:
        value: ``'#rrggbb'`` hex string or a 3-sequence of 0-255 channels
        default: Color returned when ``value`` cannot be read

    Returns:
        Tuple of (r, g, b) ints in 0-255
    """
    try:
        if isinstance(value, str):
            text = value.strip().lstrip('#')
            if len(text) != 6:
                raise ValueError(value)
            return tuple(int(text[i:i + 2], 16) for i in (0, 2, 4))
        r, g, b = value
        return tuple(int(max(0, min(255, round(float(c))))) for c in (r, g, b))
    except (TypeError, ValueError, OverflowError):
        logger.warning("Invalid particle color %r, using %s", value, default)
        return tuple(default)


def _sanitize_count(count: Any) -> int:
    try:
        count = int(count)
    except (TypeError, ValueError, OverflowError):
        logger.warning("Invalid particle count %r, using %d", count, PARTICLE_CONFIG['default_count'])
        return PARTICLE_CONFIG['default_count']
    return max(PARTICLE_CONFIG['min_count'], min(PARTICLE_CONFIG['max_count'], count))


def _sanitize_size(size: Any, fallback: float = PARTICLE_CONFIG['default_size']) -> float:
    try:
        size = float(size)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(size) or size <= 0:
        return fallback
    return size


@dataclass
class ParticleFieldConfig:
    """User-facing particle field settings."""
    count: int = PARTICLE_CONFIG['default_count']
    size: float = PARTICLE_CONFIG['default_size']
    color: RGB = PARTICLE_CONFIG['default_color']
    shape: ParticleShape = ParticleShape.SPHERE

    def sanitized(self) -> "ParticleFieldConfig":
        """Return a copy with every field clamped or defaulted into range."""
        return replace(
            self,
            count=_sanitize_count(self.count),
            size=_sanitize_size(self.size),
            color=parse_color(self.color),
            shape=ParticleShape.parse(self.shape),
        )


@dataclass
class ParticleBuffer:
    """Positions and velocities for one generated field."""
    shape: ParticleShape
    positions: np.ndarray
    velocities: np.ndarray = field(repr=False)

    @property
    def count(self) -> int:
        return len(self.positions)

    @classmethod
    def build(cls, generator: ShapeGenerator, shape: ParticleShape, count: int) -> "ParticleBuffer":
        positions, velocities = generator.generate_buffer(shape, count)
        return cls(shape=shape, positions=positions, velocities=velocities)


class ParticleField:
    """Simulated particle field with gesture-driven scale and rotation."""

    def __init__(self,
                 config: Optional[ParticleFieldConfig] = None,
                 seed: Optional[int] = None,
                 generator: Optional[ShapeGenerator] = None,
                 smoothing: float = PARTICLE_CONFIG['smoothing_factor'],
                 gravity: float = PARTICLE_CONFIG['gravity']):
        """
        Initialize the particle field.

        Args:
            config: Initial settings; out-of-range values are clamped
            seed: Seed for the shape jitter, ignored when ``generator`` is given
            generator: Shape generator to use
            smoothing: Fraction of the remaining gap to the target covered per tick
            gravity: Downward acceleration applied to firework z-velocity
        """
        self.config = (config or ParticleFieldConfig()).sanitized()
        self.generator = generator if generator is not None else ShapeGenerator(seed)
        self.smoothing = smoothing
        self.gravity = gravity

        self.current_scale = 1.0
        self.target_scale = 1.0
        self.current_rotation = 0.0
        self.target_rotation = 0.0

        self.buffer: Optional[ParticleBuffer] = ParticleBuffer.build(
            self.generator, self.config.shape, self.config.count)
        self.positions_dirty = True
        self.shape_changed = True
        self.disposed = False

    @property
    def positions(self) -> Optional[np.ndarray]:
        return self.buffer.positions if self.buffer is not None else None

    @property
    def velocities(self) -> Optional[np.ndarray]:
        return self.buffer.velocities if self.buffer is not None else None

    @property
    def count(self) -> int:
        return self.config.count

    @property
    def shape(self) -> ParticleShape:
        return self.config.shape

    def set_scale(self, scale: float):
        """Set the target scale, clamped to the allowed range."""
        try:
            scale = float(scale)
        except (TypeError, ValueError):
            return
        if not math.isfinite(scale):
            return
        self.target_scale = max(PARTICLE_CONFIG['min_scale'], min(PARTICLE_CONFIG['max_scale'], scale))

    def set_rotation(self, rotation: float):
        """Set the target Z rotation in radians."""
        try:
            rotation = float(rotation)
        except (TypeError, ValueError):
            return
        if math.isfinite(rotation):
            self.target_rotation = rotation

    def set_color(self, color: Any):
        self.config.color = parse_color(color, default=self.config.color)

    def set_particle_size(self, size: Any):
        self.config.size = _sanitize_size(size, fallback=self.config.size)

    def set_particle_count(self, count: Any):
        """
        Change the number of particles, regenerating the field if it differs.

        Args:
            count: New particle count (clamped)
        """
        count = _sanitize_count(count)
        if count == self.config.count or self.disposed:
            return
        self._rebuild(self.config.shape, count)

    def set_particle_shape(self, shape: Any):
        """
        Change the shape family, regenerating the field if it differs.

        Args:
            shape: Shape id; unknown ids become SPHERE
        """
        shape = ParticleShape.parse(shape)
        if shape is self.config.shape or self.disposed:
            return
        self._rebuild(shape, self.config.count)

    def _rebuild(self, shape: ParticleShape, count: int):
        # Build the new buffer completely before swapping it in
        buffer = ParticleBuffer.build(self.generator, shape, count)
        self.config = replace(self.config, shape=shape, count=count)
        self.buffer = buffer
        self.positions_dirty = True
        self.shape_changed = True
        logger.info("Regenerated %d particles as %s", count, shape.value)

    def apply_gesture(self, gesture: GestureState):
        """
        Map a gesture state onto the scale and rotation targets.

        Hand distance spreads the field from 0.5x to 2x, and the pinch angle
        rotates it around the view axis.
        """
        self.set_scale(0.5 + gesture.hand_distance * 1.5)
        self.set_rotation(math.radians(gesture.pinch_angle))

    def advance(self, dt: float):
        """
        Advance the field by one tick.

        Scale and rotation close a fixed fraction of the gap to their targets
        per call, independent of ``dt``. Firework particles move along their
        velocity and fall under gravity; they are never clamped or respawned.

        Args:
            dt: Elapsed time in seconds
        """
        if self.disposed:
            return
        try:
            dt = float(dt)
        except (TypeError, ValueError):
            dt = 0.0
        if not math.isfinite(dt) or dt < 0:
            dt = 0.0

        self.current_scale += (self.target_scale - self.current_scale) * self.smoothing
        self.current_rotation += (self.target_rotation - self.current_rotation) * self.smoothing

        buffer = self.buffer
        if buffer is not None and buffer.shape is ParticleShape.FIREWORK:
            buffer.positions += buffer.velocities * np.float32(dt)
            buffer.velocities[:, 2] -= np.float32(self.gravity * dt)
            self.positions_dirty = True

    def render_frame(self) -> Optional[RenderFrame]:
        """
        Snapshot the data the renderer needs and clear the change flags.

        Returns:
            RenderFrame, or None once the field has been disposed
        """
        buffer = self.buffer
        if self.disposed or buffer is None:
            return None
        frame = RenderFrame(
            positions=buffer.positions.reshape(-1),
            color=self.config.color,
            size=self.config.size,
            scale=self.current_scale,
            rotation=self.current_rotation,
            shape_changed=self.shape_changed,
            positions_dirty=self.positions_dirty,
        )
        self.shape_changed = False
        self.positions_dirty = False
        return frame

    def dispose(self):
        """Release the particle buffers."""
        self.buffer = None
        self.disposed = True
