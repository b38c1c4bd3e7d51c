import numpy as np
import pytest

from gesture_particles import ParticleFieldConfig, ParticleInterface, ParticleShape
from gesture_particles.landmark_source import StaticLandmarkSource


def hand(palm_x, pinch_dx=0.0):
    landmarks = [{'x': palm_x, 'y': 0.8} for _ in range(21)]
    landmarks[9] = {'x': palm_x, 'y': 0.7}
    for tip in (12, 16, 20):
        landmarks[tip] = {'x': palm_x, 'y': 0.5}
    landmarks[4] = {'x': palm_x, 'y': 0.5}
    landmarks[8] = {'x': palm_x + pinch_dx, 'y': 0.5}
    return landmarks


class RecordingSink:
    def __init__(self, stop_after=None):
        self.frames = []
        self.gestures = []
        self.stop_after = stop_after
        self.closed = False

    def render(self, frame, gesture=None):
        self.frames.append(frame)
        self.gestures.append(gesture)
        return self.stop_after is None or len(self.frames) < self.stop_after

    def close(self):
        self.closed = True


def make_interface(frames, sink=None, shape=ParticleShape.SPHERE):
    return ParticleInterface(
        source=StaticLandmarkSource(frames, loop=True),
        sink=sink or RecordingSink(),
        config=ParticleFieldConfig(count=1000, shape=shape),
        seed=3,
    )


def test_tick_drives_field_from_gesture():
    interface = make_interface([[(hand(0.1), "Left"), (hand(0.6, pinch_dx=0.1), "Right")]])

    frame = interface.tick(0.016)

    gesture = interface.get_current_gesture()
    assert gesture.hands_detected == 2
    assert gesture.hand_distance == pytest.approx(0.5)
    assert interface.field.target_scale == pytest.approx(1.25)
    assert interface.field.target_rotation == pytest.approx(0.0)
    assert frame.scale == pytest.approx(1.025)
    assert interface.sink.gestures[-1] is gesture


def test_tick_with_explicit_hands_skips_source():
    interface = make_interface([[(hand(0.5), "Right")]])

    interface.tick(0.016, hands=[])
    assert interface.get_current_gesture().hands_detected == 0
    assert interface.source.position == 0


def test_callbacks_receive_every_state():
    interface = make_interface([[(hand(0.5), "Right")]])
    seen = []
    interface.register_gesture_callback(seen.append)

    for _ in range(3):
        interface.tick(0.016)

    assert len(seen) == 3
    assert all(state.right_hand_open for state in seen)


def test_sink_can_stop_the_loop():
    sink = RecordingSink(stop_after=4)
    interface = make_interface([[]], sink=sink)

    interface.run_realtime(max_frames=100)

    assert len(sink.frames) == 4
    assert not interface.is_running


def test_configuration_passthrough():
    interface = make_interface([[]], shape=ParticleShape.FIREWORK)
    first = interface.tick(0.016)

    interface.set_particle_shape("heart")
    interface.set_particle_count(2000)
    interface.set_particle_color("#ffcc00")
    interface.set_particle_size(0.1)
    frame = interface.tick(0.016)

    assert first.count == 1000
    assert frame.shape_changed
    assert frame.count == 2000
    assert frame.color == (255, 204, 0)
    assert frame.size == 0.1
    assert np.all(np.isfinite(frame.positions))


def test_cleanup_releases_everything():
    interface = make_interface([[(hand(0.5), "Right")]])
    seen = []
    interface.register_gesture_callback(seen.append)
    interface.tick(0.016)

    interface.cleanup()
    interface.cleanup()

    assert interface.source.closed
    assert interface.sink.closed
    assert interface.field.buffer is None
    assert interface.tick(0.016) is None
    interface.process_hands([(hand(0.5), "Right")])
    assert len(seen) == 1


def test_run_realtime_ends_with_finite_source():
    sink = RecordingSink()
    interface = ParticleInterface(source=StaticLandmarkSource([[]] * 3), sink=sink,
                                  config=ParticleFieldConfig(count=1000))

    interface.run_realtime()

    assert len(sink.frames) == 3
    assert not interface.is_running


def test_run_realtime_calls_tick_hook():
    interface = make_interface([[(hand(0.5), "Right")]])
    ticks = []

    def on_tick(current):
        ticks.append(current.get_current_gesture())
        if len(ticks) == 2:
            current.set_particle_shape(ParticleShape.NEBULA)

    interface.run_realtime(max_frames=4, on_tick=on_tick)

    assert len(ticks) == 4
    assert all(state.right_hand_open for state in ticks)
    assert interface.field.shape is ParticleShape.NEBULA
