"""
Hand tracking module using MediaPipe for real-time hand detection and landmark extraction.
"""

import logging
import os
import time
import urllib.request
from typing import Optional

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from .config import CAMERA_CONFIG, HAND_TRACKING_CONFIG
from .gesture_classifier import Handedness
from .landmark_source import Hands

logger = logging.getLogger(__name__)


def download_model(model_path: str = HAND_TRACKING_CONFIG['model_path'],
                   model_url: str = HAND_TRACKING_CONFIG['model_url']) -> bool:
    """
    Fetch the hand landmarker model if it is not on disk yet.

    Returns:
        True if the model file is available
    """
    if os.path.exists(model_path):
        return True
    logger.info("Downloading %s from %s", model_path, model_url)
    try:
        urllib.request.urlretrieve(model_url, model_path)
    except OSError as e:
        logger.error("Error downloading hand landmarker model: %s", e)
        return False
    return True


class HandTracker:
    """Camera capture plus MediaPipe hand landmarks, usable as a LandmarkSource."""

    def __init__(self,
                 camera_index: int = CAMERA_CONFIG['default_camera_index'],
                 frame_width: int = CAMERA_CONFIG['default_frame_width'],
                 frame_height: int = CAMERA_CONFIG['default_frame_height'],
                 flip_horizontal: bool = CAMERA_CONFIG['flip_horizontal'],
                 model_path: str = HAND_TRACKING_CONFIG['model_path'],
                 num_hands: int = HAND_TRACKING_CONFIG['num_hands'],
                 min_hand_detection_confidence: float = HAND_TRACKING_CONFIG['min_hand_detection_confidence'],
                 min_hand_presence_confidence: float = HAND_TRACKING_CONFIG['min_hand_presence_confidence'],
                 min_tracking_confidence: float = HAND_TRACKING_CONFIG['min_tracking_confidence']):
        """
        Initialize the hand tracker.

        Args:
            camera_index: Camera device index
            frame_width: Camera frame width
            frame_height: Camera frame height
            flip_horizontal: Mirror frames before detection
            model_path: Path to the ``hand_landmarker.task`` model
            num_hands: Maximum number of hands to detect
            min_hand_detection_confidence: Minimum confidence for palm detection
            min_hand_presence_confidence: Minimum confidence that a hand is present
            min_tracking_confidence: Minimum confidence for hand tracking
        """
        self.camera_index = camera_index
        self.frame_width = frame_width
        self.frame_height = frame_height
        self.flip_horizontal = flip_horizontal
        self.model_path = model_path
        self.landmarker_options = dict(
            num_hands=num_hands,
            min_hand_detection_confidence=min_hand_detection_confidence,
            min_hand_presence_confidence=min_hand_presence_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )

        self.cap = None
        self.landmarker = None
        self.last_frame: Optional[np.ndarray] = None
        self._last_timestamp_ms = 0

    def start_camera(self) -> bool:
        """
        Open the camera and load the landmark model.

        Returns:
            True if both started successfully
        """
        if not download_model(self.model_path):
            return False

        try:
            options = vision.HandLandmarkerOptions(
                base_options=python.BaseOptions(model_asset_path=self.model_path),
                running_mode=vision.RunningMode.VIDEO,
                **self.landmarker_options
            )
            self.landmarker = vision.HandLandmarker.create_from_options(options)
        except (RuntimeError, ValueError) as e:
            logger.error("Error loading hand landmarker: %s", e)
            return False

        self.cap = cv2.VideoCapture(self.camera_index)
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.frame_width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.frame_height)
        if not self.cap.isOpened():
            logger.error("Could not open camera %d", self.camera_index)
            self.close()
            return False

        logger.info("Camera %d started", self.camera_index)
        return True

    def read(self) -> Optional[Hands]:
        """
        Capture one frame and detect hands in it.

        Returns:
            List of ``(landmarks, handedness)`` pairs, or None if the camera
            is not running or a frame could not be read
        """
        if self.cap is None or self.landmarker is None:
            return None

        ret, frame = self.cap.read()
        if not ret:
            logger.warning("Failed to read frame from camera %d", self.camera_index)
            return None

        if self.flip_horizontal:
            frame = cv2.flip(frame, 1)
        self.last_frame = frame
        return self.detect_hands(frame)

    def detect_hands(self, image: np.ndarray) -> Hands:
        """
        Detect hands in the input image.

        Args:
            image: Input image as numpy array (BGR format)

        Returns:
            List of ``(landmarks, handedness)`` pairs; landmarks are dicts with
            ``x``, ``y`` and ``z`` keys
        """
        rgb_image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_image)

        # VIDEO mode needs strictly increasing timestamps
        timestamp_ms = max(int(time.monotonic() * 1000), self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms
        result = self.landmarker.detect_for_video(mp_image, timestamp_ms)

        hands = []
        for i, hand_landmarks in enumerate(result.hand_landmarks or []):
            landmarks = [
                {'x': landmark.x, 'y': landmark.y, 'z': landmark.z}
                for landmark in hand_landmarks
            ]
            label = None
            if result.handedness and i < len(result.handedness) and result.handedness[i]:
                label = result.handedness[i][0].category_name
            hands.append((landmarks, Handedness.parse(label)))

        return hands

    def close(self):
        """Clean up resources."""
        if self.cap is not None:
            self.cap.release()
            self.cap = None
        if self.landmarker is not None:
            self.landmarker.close()
            self.landmarker = None
