"""
Gesture Particles
Hand-gesture classification driving a procedural particle field.
"""

from .gesture_classifier import GestureClassifier, GestureState, Handedness
from .shapes import ParticleShape, ShapeGenerator
from .particle_field import ParticleField, ParticleFieldConfig
from .particle_interface import ParticleInterface

__version__ = "1.0.0"
__all__ = [
    "GestureClassifier",
    "GestureState",
    "Handedness",
    "ParticleShape",
    "ShapeGenerator",
    "ParticleField",
    "ParticleFieldConfig",
    "ParticleInterface",
]
