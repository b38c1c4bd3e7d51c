#!/usr/bin/env python3
"""
Simple particle field example without a camera.

Replays synthetic two-hand frames that slowly move apart while the right hand
pinch rotates, and shows the result in an OpenCV window.
"""

import math

from gesture_particles import ParticleFieldConfig, ParticleInterface, ParticleShape
from gesture_particles.landmark_source import StaticLandmarkSource
from gesture_particles.render import OpenCVRenderSink


def synthetic_hand(palm_x, pinch_angle):
    """Open hand centred on ``palm_x`` with the index tip rotated around the thumb."""
    landmarks = [{'x': palm_x, 'y': 0.6} for _ in range(21)]
    landmarks[9] = {'x': palm_x, 'y': 0.55}
    for tip in (12, 16, 20):
        landmarks[tip] = {'x': palm_x, 'y': 0.4}
    landmarks[4] = {'x': palm_x, 'y': 0.45}
    landmarks[8] = {'x': palm_x + 0.1 * math.cos(pinch_angle),
                    'y': 0.45 + 0.1 * math.sin(pinch_angle)}
    return landmarks


def synthetic_frames(n=300):
    frames = []
    for i in range(n):
        spread = 0.5 * (1 - math.cos(2 * math.pi * i / n)) / 2
        angle = 2 * math.pi * i / n
        frames.append([
            (synthetic_hand(0.5 - spread, 0.0), "Left"),
            (synthetic_hand(0.5 + spread, angle), "Right"),
        ])
    return frames


def simple_particle_example():
    print("Simple Gesture Particles Example")
    print("================================")
    print("Press 'q' in the window to quit...")

    interface = ParticleInterface(
        source=StaticLandmarkSource(synthetic_frames(), loop=True),
        sink=OpenCVRenderSink(),
        config=ParticleFieldConfig(count=5000, shape=ParticleShape.HEART),
        seed=7,
    )

    def on_gesture(gesture):
        if gesture.hand_distance >= 0.45:
            print(f"Hands spread: {gesture.hand_distance:.2f}")

    interface.register_gesture_callback(on_gesture)

    try:
        interface.run_realtime()
    finally:
        interface.cleanup()


if __name__ == "__main__":
    simple_particle_example()
