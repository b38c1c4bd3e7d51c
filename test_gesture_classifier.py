import dataclasses
from types import SimpleNamespace

import pytest

from gesture_particles.gesture_classifier import (
    GestureClassifier,
    GestureState,
    Handedness,
    landmark_xy,
)


def make_hand(palm=(0.5, 0.8), open_tips=5, pinch=None):
    """
    Build 21 landmarks with a palm length of 0.1.

    ``open_tips`` fingertips (in order thumb, index, ...) are placed 0.3 from
    the palm base, the rest 0.05. ``pinch`` overrides thumb/index positions.
    """
    px, py = palm
    landmarks = [{'x': px, 'y': py} for _ in range(21)]
    landmarks[9] = {'x': px, 'y': py - 0.1}
    for n, tip in enumerate((4, 8, 12, 16, 20)):
        reach = 0.3 if n < open_tips else 0.05
        landmarks[tip] = {'x': px, 'y': py - reach}
    if pinch is not None:
        thumb, index = pinch
        landmarks[4] = {'x': thumb[0], 'y': thumb[1]}
        landmarks[8] = {'x': index[0], 'y': index[1]}
    return landmarks


@pytest.fixture
def classifier():
    return GestureClassifier()


def test_open_hand(classifier):
    assert classifier.is_hand_open(make_hand(open_tips=5))
    assert classifier.is_hand_open(make_hand(open_tips=3))


def test_closed_hand(classifier):
    assert not classifier.is_hand_open(make_hand(open_tips=2))
    assert not classifier.is_hand_open(make_hand(open_tips=0))


def test_short_landmark_list_is_closed(classifier):
    assert not classifier.is_hand_open(make_hand()[:20])
    assert not classifier.is_hand_open([])


def test_open_threshold_is_tunable():
    strict = GestureClassifier(open_finger_ratio=5.0)
    assert not strict.is_hand_open(make_hand(open_tips=5))


def test_pinch_strength_bounds(classifier):
    touching = make_hand(pinch=((0.5, 0.5), (0.5, 0.5)))
    apart = make_hand(pinch=((0.2, 0.5), (0.7, 0.5)))
    far_apart = make_hand(pinch=((0.1, 0.5), (0.9, 0.5)))
    halfway = make_hand(pinch=((0.5, 0.5), (0.75, 0.5)))

    assert classifier.calculate_pinch_strength(touching) == 1.0
    assert classifier.calculate_pinch_strength(apart) == pytest.approx(0.0, abs=1e-9)
    assert classifier.calculate_pinch_strength(far_apart) == 0.0
    assert classifier.calculate_pinch_strength(halfway) == pytest.approx(0.5)


def test_pinch_on_short_list(classifier):
    assert classifier.calculate_pinch_strength(make_hand()[:8]) == 0.0
    assert classifier.calculate_pinch_angle(make_hand()[:8]) == 0.0


def test_pinch_angle(classifier):
    right = make_hand(pinch=((0.5, 0.5), (0.6, 0.5)))
    down = make_hand(pinch=((0.5, 0.5), (0.5, 0.6)))
    up = make_hand(pinch=((0.5, 0.5), (0.5, 0.4)))

    assert classifier.calculate_pinch_angle(right) == pytest.approx(0.0)
    assert classifier.calculate_pinch_angle(down) == pytest.approx(90.0)
    assert classifier.calculate_pinch_angle(up) == pytest.approx(-90.0)


def test_pinch_angle_never_minus_180(classifier):
    # atan2(-0.0, negative) is -180 degrees
    hand = make_hand(pinch=((0.5, 0.0), (0.4, -0.0)))
    assert classifier.calculate_pinch_angle(hand) == pytest.approx(180.0)


def test_hand_distance_symmetric_and_clamped(classifier):
    a = make_hand(palm=(0.2, 0.8))
    b = make_hand(palm=(0.6, 0.5))
    far = make_hand(palm=(1.0, 1.0))
    origin = make_hand(palm=(0.0, 0.0))

    assert classifier.calculate_hand_distance(a, b) == pytest.approx(0.5)
    assert classifier.calculate_hand_distance(a, b) == classifier.calculate_hand_distance(b, a)
    assert classifier.calculate_hand_distance(origin, far) == 1.0
    assert classifier.calculate_hand_distance([], b) == 0.0


def test_no_hands(classifier):
    state = classifier.classify([])

    assert state == GestureState()
    assert state.hands_detected == 0
    assert state.confidence == 0.0
    assert not state.left_hand_open and not state.right_hand_open
    assert state.pinch_strength == 0.0 and state.hand_distance == 0.0


def test_single_left_hand(classifier):
    hand = make_hand(pinch=((0.5, 0.5), (0.5, 0.5)))
    state = classifier.classify([(hand, "Left")])

    assert state.hands_detected == 1
    assert state.left_hand_open
    assert not state.right_hand_open
    assert state.hand_distance == 0.0
    assert state.pinch_strength == 1.0
    assert state.confidence == 0.8


def test_single_hand_without_label_counts_as_right(classifier):
    state = classifier.classify([(make_hand(), None)])

    assert state.right_hand_open
    assert not state.left_hand_open


def test_two_hands_pinch_from_right_hand(classifier):
    pinching = make_hand(palm=(0.8, 0.8), open_tips=0, pinch=((0.8, 0.5), (0.8, 0.5)))
    relaxed = make_hand(palm=(0.2, 0.8), open_tips=5, pinch=((0.1, 0.5), (0.9, 0.5)))

    state = classifier.classify([(relaxed, Handedness.LEFT), (pinching, Handedness.RIGHT)])
    assert state.hands_detected == 2
    assert state.left_hand_open
    assert state.pinch_strength == 1.0
    assert state.hand_distance == pytest.approx(0.6)

    # First label Right: first hand is right, second is left
    swapped = classifier.classify([(pinching, "Right"), (relaxed, "Right")])
    assert swapped.pinch_strength == 1.0
    assert swapped.left_hand_open
    assert swapped.hand_distance == pytest.approx(0.6)


def test_incomplete_hands_are_ignored(classifier):
    state = classifier.classify([(make_hand()[:10], "Left"), (make_hand(), "Right")])

    assert state.hands_detected == 1
    assert state.right_hand_open


def test_more_than_two_hands_uses_first_two(classifier):
    hands = [(make_hand(), "Left"), (make_hand(), "Right"), (make_hand(), "Left")]
    assert classifier.classify(hands).hands_detected == 2


def test_unreadable_points_degrade(classifier):
    hand = make_hand()
    hand[4] = None
    hand[0] = "garbage"

    state = classifier.classify([(hand, "Right")])
    assert state.hands_detected == 1
    assert not state.right_hand_open
    assert state.pinch_strength == 0.0
    assert state.pinch_angle == 0.0


def test_malformed_entries_do_not_raise(classifier):
    assert classifier.classify([None, 42, ("x",)]).hands_detected == 0
    assert classifier.classify(None).hands_detected == 0


def test_point_formats():
    assert landmark_xy({'x': 0.1, 'y': 0.2}) == (0.1, 0.2)
    assert landmark_xy(SimpleNamespace(x=0.3, y=0.4, z=0.0)) == (0.3, 0.4)
    assert landmark_xy((0.5, 0.6, 0.0)) == (0.5, 0.6)


def test_handedness_parse():
    assert Handedness.parse("left") is Handedness.LEFT
    assert Handedness.parse("Right") is Handedness.RIGHT
    assert Handedness.parse(Handedness.LEFT) is Handedness.LEFT
    assert Handedness.parse("sideways") is None
    assert Handedness.parse(None) is None


def test_gesture_state_is_a_snapshot():
    state = GestureState(hands_detected=1, confidence=0.8)

    with pytest.raises(dataclasses.FrozenInstanceError):
        state.hands_detected = 2
    assert state.to_dict()['hands_detected'] == 1
