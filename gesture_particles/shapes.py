"""
Procedural particle shapes.

Every shape is generated from the particle index and the total particle count.
Heart, flower, firework and nebula add bounded random jitter drawn from the
generator's own ``numpy.random.Generator`` so that a fixed seed reproduces the
exact same field.
"""

import logging
import math
from enum import Enum
from typing import Any, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

SPHERE_RADIUS = 3.0
HEART_SCALE = 2.0
FLOWER_PETALS = 6
FLOWER_RADIUS = 2.0
NEBULA_EXTENT = 6.0

Vector3 = Tuple[float, float, float]


class ParticleShape(Enum):
    """Supported particle shape families."""
    SPHERE = "sphere"
    HEART = "heart"
    FLOWER = "flower"
    FIREWORK = "firework"
    NEBULA = "nebula"

    @classmethod
    def parse(cls, value: Any) -> "ParticleShape":
        """
        Resolve a shape id, falling back to SPHERE for anything unknown.

        Args:
            value: ParticleShape member or shape name (any case)

        Returns:
            The matching shape
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        logger.warning("Unknown particle shape %r, using sphere", value)
        return cls.SPHERE


class ShapeGenerator:
    """Generates particle positions (and firework velocities) for a shape."""

    def __init__(self, seed: Optional[int] = None, rng: Optional[np.random.Generator] = None):
        """
        Initialize the shape generator.

        Args:
            seed: Seed for the jitter source; None draws fresh entropy
            rng: Explicit random generator, takes precedence over ``seed``
        """
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def generate(self, shape: Any, index: int, count: int) -> Tuple[Vector3, Optional[Vector3]]:
        """
        Generate a single particle.

        Args:
            shape: Shape id
            index: Particle index, 0 <= index < count
            count: Total number of particles in the field

        Returns:
            Tuple of (position, velocity); velocity is None except for fireworks
        """
        shape = ParticleShape.parse(shape)
        count = max(1, int(count))
        positions, velocities = self._build(shape, np.array([index], dtype=np.float64), count)
        position = tuple(float(v) for v in positions[0])
        if shape is ParticleShape.FIREWORK:
            return position, tuple(float(v) for v in velocities[0])
        return position, None

    def generate_buffer(self, shape: Any, count: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        Generate the whole field at once.

        Args:
            shape: Shape id
            count: Number of particles

        Returns:
            Tuple of (positions, velocities), both float32 arrays of shape
            (count, 3). Velocities are zero for every shape except fireworks.
        """
        shape = ParticleShape.parse(shape)
        count = max(1, int(count))
        positions, velocities = self._build(shape, np.arange(count, dtype=np.float64), count)
        return positions.astype(np.float32), velocities.astype(np.float32)

    def _build(self, shape: ParticleShape, indices: np.ndarray, count: int) -> Tuple[np.ndarray, np.ndarray]:
        builders = {
            ParticleShape.SPHERE: self._sphere,
            ParticleShape.HEART: self._heart,
            ParticleShape.FLOWER: self._flower,
            ParticleShape.FIREWORK: self._firework,
            ParticleShape.NEBULA: self._nebula,
        }
        positions, velocities = builders[shape](indices, count)
        if velocities is None:
            velocities = np.zeros_like(positions)
        return positions, velocities

    def _jitter(self, n: int, extent: float) -> np.ndarray:
        """Uniform noise in [-extent/2, extent/2)."""
        return (self.rng.random(n) - 0.5) * extent

    def _sphere(self, indices: np.ndarray, count: int):
        # Fibonacci sphere
        phi = np.arccos(np.clip(-1.0 + 2.0 * indices / count, -1.0, 1.0))
        theta = math.sqrt(count * math.pi) * phi
        positions = np.column_stack((
            SPHERE_RADIUS * np.cos(theta) * np.sin(phi),
            SPHERE_RADIUS * np.sin(theta) * np.sin(phi),
            SPHERE_RADIUS * np.cos(phi),
        ))
        return positions, None

    def _heart(self, indices: np.ndarray, count: int):
        t = indices / count * 2.0 * math.pi
        x = 16.0 * np.sin(t) ** 3
        y = 13.0 * np.cos(t) - 5.0 * np.cos(2 * t) - 2.0 * np.cos(3 * t) - np.cos(4 * t)
        positions = np.column_stack((
            x / 16.0 * HEART_SCALE,
            y / 16.0 * HEART_SCALE,
            self._jitter(len(indices), 0.5),
        ))
        return positions, None

    def _flower(self, indices: np.ndarray, count: int):
        t = indices / count * 2.0 * math.pi
        r = FLOWER_RADIUS * np.cos(t * FLOWER_PETALS)
        positions = np.column_stack((
            r * np.cos(t),
            r * np.sin(t),
            self._jitter(len(indices), 0.3),
        ))
        return positions, None

    def _firework(self, indices: np.ndarray, count: int):
        n = len(indices)
        angle = indices / count * 2.0 * math.pi
        radius = 0.1 + self.rng.random(n) * 3.0
        positions = np.column_stack((
            radius * np.cos(angle),
            radius * np.sin(angle),
            self._jitter(n, 2.0),
        ))
        velocities = np.column_stack((
            np.cos(angle) * (self.rng.random(n) + 0.5),
            np.sin(angle) * (self.rng.random(n) + 0.5),
            self._jitter(n, 0.5),
        ))
        return positions, velocities

    def _nebula(self, indices: np.ndarray, count: int):
        return self.rng.random((len(indices), 3)) * NEBULA_EXTENT - NEBULA_EXTENT / 2, None
