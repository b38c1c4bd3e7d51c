"""
Gesture classification module turning hand landmarks into a per-frame gesture state.
"""

import logging
import math
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .config import GESTURE_CONFIG

logger = logging.getLogger(__name__)

NUM_LANDMARKS = 21

# MediaPipe hand landmark indices
PALM_BASE = 0
THUMB_TIP = 4
INDEX_TIP = 8
PALM_MIDDLE = 9
FINGER_TIPS = (4, 8, 12, 16, 20)


class Handedness(Enum):
    """Which hand a set of landmarks belongs to."""
    LEFT = "Left"
    RIGHT = "Right"

    @classmethod
    def parse(cls, value: Any) -> Optional["Handedness"]:
        """
        Read a handedness label leniently.

        Args:
            value: Handedness member, label string ("Left"/"Right", any case)
                or None

        Returns:
            The matching member, or None when the label is missing or unknown
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            label = value.strip().lower()
            for member in cls:
                if member.value.lower() == label:
                    return member
        return None


@dataclass(frozen=True)
class GestureState:
    """Snapshot of both hands for a single frame."""
    left_hand_open: bool = False
    right_hand_open: bool = False
    hand_distance: float = 0.0
    pinch_strength: float = 0.0
    pinch_angle: float = 0.0
    hands_detected: int = 0
    confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


HandInput = Tuple[Sequence[Any], Any]


def landmark_xy(point: Any) -> Tuple[float, float]:
    """
    Read the normalized image coordinates of a landmark.

    Accepts MediaPipe landmark objects, ``{'x': .., 'y': ..}`` dicts and
    ``(x, y[, z])`` sequences.

    Raises:
        TypeError, ValueError, KeyError, IndexError: if the point cannot be read
    """
    if isinstance(point, dict):
        return float(point['x']), float(point['y'])
    if hasattr(point, 'x') and hasattr(point, 'y'):
        return float(point.x), float(point.y)
    return float(point[0]), float(point[1])


def _distance(p1: Any, p2: Any) -> float:
    x1, y1 = landmark_xy(p1)
    x2, y2 = landmark_xy(p2)
    return float(np.sqrt((x1 - x2) ** 2 + (y1 - y2) ** 2))


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class GestureClassifier:
    """Stateless classifier computing hand openness, distance and pinch."""

    def __init__(self,
                 open_finger_ratio: float = GESTURE_CONFIG['open_finger_ratio'],
                 min_open_fingers: int = GESTURE_CONFIG['min_open_fingers'],
                 pinch_distance_gain: float = GESTURE_CONFIG['pinch_distance_gain'],
                 detection_confidence: float = GESTURE_CONFIG['detection_confidence']):
        """
        Initialize the gesture classifier.

        Args:
            open_finger_ratio: A fingertip counts as extended when its distance
                to the palm base exceeds this multiple of the palm length
            min_open_fingers: Extended fingertips needed for an open hand
            pinch_distance_gain: Pinch strength drops by this much per unit of
                thumb-index distance
            detection_confidence: Confidence reported whenever a hand is present
        """
        self.open_finger_ratio = open_finger_ratio
        self.min_open_fingers = min_open_fingers
        self.pinch_distance_gain = pinch_distance_gain
        self.detection_confidence = detection_confidence

    def classify(self, hands: Sequence[HandInput]) -> GestureState:
        """
        Classify the hands seen in one frame.

        Args:
            hands: Up to two ``(landmarks, handedness)`` pairs

        Returns:
            A fresh GestureState for this frame
        """
        valid = self._valid_hands(hands)
        count = len(valid)

        if count == 0:
            return GestureState()

        if count == 1:
            landmarks, handedness = valid[0]
            is_open = self.is_hand_open(landmarks)
            is_left = Handedness.parse(handedness) is Handedness.LEFT
            return GestureState(
                left_hand_open=is_open if is_left else False,
                right_hand_open=False if is_left else is_open,
                hand_distance=0.0,
                pinch_strength=self.calculate_pinch_strength(landmarks),
                pinch_angle=self.calculate_pinch_angle(landmarks),
                hands_detected=1,
                confidence=self.detection_confidence,
            )

        # Side of the second hand is inferred from the first hand's label
        (first, first_label), (second, _) = valid
        if Handedness.parse(first_label) is Handedness.LEFT:
            left_hand, right_hand = first, second
        else:
            left_hand, right_hand = second, first

        return GestureState(
            left_hand_open=self.is_hand_open(left_hand),
            right_hand_open=self.is_hand_open(right_hand),
            hand_distance=self.calculate_hand_distance(left_hand, right_hand),
            pinch_strength=self.calculate_pinch_strength(right_hand),
            pinch_angle=self.calculate_pinch_angle(right_hand),
            hands_detected=2,
            confidence=self.detection_confidence,
        )

    def _valid_hands(self, hands: Optional[Sequence[HandInput]]) -> List[HandInput]:
        """Drop hands without a full landmark set and keep at most two."""
        valid = []
        for entry in hands or ():
            try:
                landmarks, handedness = entry
                complete = len(landmarks) == NUM_LANDMARKS
            except (TypeError, ValueError):
                complete = False
            if not complete:
                logger.debug("Ignoring hand without %d landmarks", NUM_LANDMARKS)
                continue
            valid.append((landmarks, handedness))
        if len(valid) > 2:
            logger.debug("Ignoring %d extra hands", len(valid) - 2)
        return valid[:2]

    def is_hand_open(self, landmarks: Sequence[Any]) -> bool:
        """
        Check whether a hand is open.

        Counts fingertips reaching further from the palm base than
        ``open_finger_ratio`` palm lengths. This is a coarse 2D heuristic; the
        ratio and finger count are the tuning knobs.

        Args:
            landmarks: 21 hand landmarks

        Returns:
            True if enough fingertips are extended
        """
        if landmarks is None or len(landmarks) < NUM_LANDMARKS:
            return False

        try:
            palm_base = landmarks[PALM_BASE]
            palm_distance = _distance(landmarks[PALM_MIDDLE], palm_base)
            open_fingers = sum(
                1 for tip in FINGER_TIPS
                if _distance(landmarks[tip], palm_base) > palm_distance * self.open_finger_ratio
            )
        except (TypeError, ValueError, KeyError, IndexError, AttributeError):
            return False

        return open_fingers >= self.min_open_fingers

    def calculate_pinch_strength(self, landmarks: Sequence[Any]) -> float:
        """
        Estimate how tightly thumb and index finger are pinched.

        Args:
            landmarks: Hand landmarks (thumb and index tips are used)

        Returns:
            1.0 when the tips touch, falling to 0.0 at a distance of 0.5
        """
        if landmarks is None or len(landmarks) <= INDEX_TIP:
            return 0.0
        try:
            distance = _distance(landmarks[THUMB_TIP], landmarks[INDEX_TIP])
        except (TypeError, ValueError, KeyError, IndexError, AttributeError):
            return 0.0
        if not math.isfinite(distance):
            return 0.0
        return _clamp(1.0 - distance * self.pinch_distance_gain, 0.0, 1.0)

    def calculate_pinch_angle(self, landmarks: Sequence[Any]) -> float:
        """
        Angle of the thumb-to-index vector in degrees, in (-180, 180].
        """
        if landmarks is None or len(landmarks) <= INDEX_TIP:
            return 0.0
        try:
            thumb_x, thumb_y = landmark_xy(landmarks[THUMB_TIP])
            index_x, index_y = landmark_xy(landmarks[INDEX_TIP])
        except (TypeError, ValueError, KeyError, IndexError, AttributeError):
            return 0.0

        angle = math.degrees(math.atan2(index_y - thumb_y, index_x - thumb_x))
        if not math.isfinite(angle):
            return 0.0
        if angle <= -180.0:
            angle += 360.0
        return angle

    def calculate_hand_distance(self, hand1: Sequence[Any], hand2: Sequence[Any]) -> float:
        """
        Distance between the palm bases of two hands, clamped to [0, 1].
        """
        if hand1 is None or hand2 is None or len(hand1) == 0 or len(hand2) == 0:
            return 0.0
        try:
            distance = _distance(hand1[PALM_BASE], hand2[PALM_BASE])
        except (TypeError, ValueError, KeyError, IndexError, AttributeError):
            return 0.0
        if not math.isfinite(distance):
            return 0.0
        return _clamp(distance, 0.0, 1.0)
