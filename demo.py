#!/usr/bin/env python3
"""
Gesture Particles Demo
Drives a particle field with your hands through the webcam.
"""

import argparse
import logging

from gesture_particles import ParticleFieldConfig, ParticleInterface, ParticleShape
from gesture_particles.config import LOGGING_CONFIG, PARTICLE_CONFIG
from gesture_particles.hand_tracker import HandTracker
from gesture_particles.landmark_source import BackgroundLandmarkSource
from gesture_particles.render import OpenCVRenderSink

SHAPE_KEYS = {ord(str(i + 1)): shape for i, shape in enumerate(ParticleShape)}


class KeyboardControls:
    """Applies keyboard commands read by the render sink after every frame."""

    def __init__(self, sink: OpenCVRenderSink):
        self.sink = sink
        self.color_index = PARTICLE_CONFIG['color_presets'].index('#00ffff')

    def __call__(self, interface: ParticleInterface):
        key = self.sink.last_key
        field = interface.field
        if key in SHAPE_KEYS:
            interface.set_particle_shape(SHAPE_KEYS[key])
            print(f"Shape: {field.shape.value}")
        elif key in (ord('+'), ord('=')):
            interface.set_particle_count(field.count + PARTICLE_CONFIG['count_step'])
            print(f"Particles: {field.count}")
        elif key == ord('-'):
            interface.set_particle_count(max(PARTICLE_CONFIG['count_step'], field.count - PARTICLE_CONFIG['count_step']))
            print(f"Particles: {field.count}")
        elif key == ord('c'):
            presets = PARTICLE_CONFIG['color_presets']
            self.color_index = (self.color_index + 1) % len(presets)
            interface.set_particle_color(presets[self.color_index])
            print(f"Color: {presets[self.color_index]}")


def main():
    """Main demonstration function."""
    parser = argparse.ArgumentParser(description="Gesture-controlled particle field")
    parser.add_argument('--camera', type=int, default=0, help="camera device index")
    parser.add_argument('--shape', default=PARTICLE_CONFIG['default_shape'],
                        choices=[shape.value for shape in ParticleShape])
    parser.add_argument('--count', type=int, default=PARTICLE_CONFIG['default_count'])
    parser.add_argument('--seed', type=int, default=None, help="seed for the particle jitter")
    args = parser.parse_args()

    logging.basicConfig(level=LOGGING_CONFIG['level'], format=LOGGING_CONFIG['format'])

    print("=" * 60)
    print("GESTURE PARTICLES")
    print("=" * 60)
    print("  Move your hands apart / together  - grow / shrink the field")
    print("  Rotate the thumb-index pinch      - rotate the field")
    print("  Keys 1-5                          - sphere, heart, flower, firework, nebula")
    print("  + / -                             - more / fewer particles")
    print("  c                                 - next color")
    print("  q                                 - quit")
    print()

    tracker = HandTracker(camera_index=args.camera)
    if not tracker.start_camera():
        print("Failed to start camera")
        return

    sink = OpenCVRenderSink()
    interface = ParticleInterface(
        source=BackgroundLandmarkSource(tracker).start(),
        sink=sink,
        config=ParticleFieldConfig(count=args.count, shape=ParticleShape.parse(args.shape)),
        seed=args.seed,
    )

    try:
        interface.run_realtime(on_tick=KeyboardControls(sink))
    finally:
        interface.cleanup()
        print("\nDemo finished.")


if __name__ == "__main__":
    main()
