"""
Render sink interface and an OpenCV implementation drawing the particle field.
"""

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Protocol, Tuple

import cv2
import numpy as np

from .config import DISPLAY_CONFIG

if TYPE_CHECKING:
    from .gesture_classifier import GestureState

logger = logging.getLogger(__name__)


@dataclass
class RenderFrame:
    """Everything a renderer needs to draw one frame."""
    positions: np.ndarray  # flat, 3 floats per particle
    color: Tuple[int, int, int]
    size: float
    scale: float
    rotation: float  # radians around Z
    shape_changed: bool = False
    positions_dirty: bool = False

    @property
    def count(self) -> int:
        return len(self.positions) // 3


class RenderSink(Protocol):
    """Consumer of particle frames."""

    def render(self, frame: RenderFrame, gesture: Optional["GestureState"] = None) -> bool:
        """Draw a frame; return False to ask the caller to stop."""
        ...

    def close(self) -> None:
        ...


def project_points(positions: np.ndarray,
                   scale: float,
                   rotation: float,
                   width: int,
                   height: int,
                   camera_distance: float = DISPLAY_CONFIG['camera_distance'],
                   field_of_view: float = DISPLAY_CONFIG['field_of_view']) -> Tuple[np.ndarray, np.ndarray]:
    """
    Project particle positions to pixel coordinates.

    The field is scaled, rotated around Z and viewed by a perspective camera
    on the +Z axis looking at the origin.

    Args:
        positions: Flat or (N, 3) array of particle positions
        scale: Uniform field scale
        rotation: Rotation around Z in radians
        width: Image width in pixels
        height: Image height in pixels
        camera_distance: Distance of the camera from the origin
        field_of_view: Vertical field of view in degrees

    Returns:
        Tuple of (pixels, depths): integer (M, 2) pixel coordinates of the
        visible particles and their distance from the camera
    """
    points = np.asarray(positions, dtype=np.float64).reshape(-1, 3) * scale
    cos_r, sin_r = math.cos(rotation), math.sin(rotation)
    x = points[:, 0] * cos_r - points[:, 1] * sin_r
    y = points[:, 0] * sin_r + points[:, 1] * cos_r
    depth = camera_distance - points[:, 2]

    visible = depth > 0.1
    focal = (height / 2.0) / math.tan(math.radians(field_of_view) / 2.0)
    px = width / 2.0 + focal * x[visible] / depth[visible]
    py = height / 2.0 - focal * y[visible] / depth[visible]

    pixels = np.column_stack((px, py))
    on_screen = (px >= 0) & (px < width) & (py >= 0) & (py < height)
    return pixels[on_screen].astype(np.int32), depth[visible][on_screen]


class OpenCVRenderSink:
    """Draws the particle field into an OpenCV window (or off-screen)."""

    def __init__(self,
                 width: int = DISPLAY_CONFIG['width'],
                 height: int = DISPLAY_CONFIG['height'],
                 window_name: str = DISPLAY_CONFIG['window_name'],
                 show_window: bool = True,
                 show_gesture_info: bool = DISPLAY_CONFIG['show_gesture_info']):
        """
        Initialize the render sink.

        Args:
            width: Canvas width in pixels
            height: Canvas height in pixels
            window_name: Name of the display window
            show_window: Display frames with cv2.imshow; False keeps rendering
                off-screen in ``last_image``
            show_gesture_info: Whether to draw the gesture overlay
        """
        self.width = width
        self.height = height
        self.window_name = window_name
        self.show_window = show_window
        self.show_gesture_info = show_gesture_info
        self.last_image: Optional[np.ndarray] = None
        self.last_key: int = -1
        self.frames_uploaded = 0
        self._positions: Optional[np.ndarray] = None

    def render(self, frame: RenderFrame, gesture: Optional["GestureState"] = None) -> bool:
        """
        Draw one frame.

        Args:
            frame: Particle data for this frame
            gesture: Gesture state to show in the overlay

        Returns:
            False when the user pressed 'q'
        """
        if frame.positions_dirty or frame.shape_changed or self._positions is None:
            self._positions = np.array(frame.positions, copy=True)
            self.frames_uploaded += 1

        image = np.empty((self.height, self.width, 3), dtype=np.uint8)
        image[:] = DISPLAY_CONFIG['background']

        pixels, _ = project_points(self._positions, frame.scale, frame.rotation, self.width, self.height)
        r, g, b = frame.color
        image[pixels[:, 1], pixels[:, 0]] = (b, g, r)

        focal = (self.height / 2.0) / math.tan(math.radians(DISPLAY_CONFIG['field_of_view']) / 2.0)
        point_px = int(round(frame.size * frame.scale * focal / DISPLAY_CONFIG['camera_distance']))
        if point_px > 1:
            image = cv2.dilate(image, np.ones((point_px, point_px), dtype=np.uint8))

        if self.show_gesture_info and gesture is not None:
            image = self._add_gesture_overlay(image, gesture)

        self.last_image = image
        if not self.show_window:
            return True

        cv2.imshow(self.window_name, image)
        self.last_key = cv2.waitKey(1) & 0xFF
        return self.last_key != ord('q')

    def _add_gesture_overlay(self, image: np.ndarray, gesture: "GestureState") -> np.ndarray:
        """
        Add gesture information overlay to the image.

        Args:
            image: Rendered particle image
            gesture: Gesture state for this frame

        Returns:
            Image with overlay
        """
        overlay = image.copy()

        cv2.rectangle(overlay, (10, 10), (330, 130), DISPLAY_CONFIG['overlay_background'], -1)
        cv2.rectangle(overlay, (10, 10), (330, 130), DISPLAY_CONFIG['overlay_color'], 1)

        text_lines = [
            f"Hands: {gesture.hands_detected}",
            f"Open: L={'yes' if gesture.left_hand_open else 'no'} R={'yes' if gesture.right_hand_open else 'no'}",
            f"Hand distance: {gesture.hand_distance:.2f}",
            f"Pinch angle: {gesture.pinch_angle:.0f}",
        ]
        for i, line in enumerate(text_lines):
            cv2.putText(overlay, line, (15, 30 + i * 20), cv2.FONT_HERSHEY_SIMPLEX,
                        DISPLAY_CONFIG['text_scale'], DISPLAY_CONFIG['overlay_color'],
                        DISPLAY_CONFIG['text_thickness'])

        # Pinch strength bar
        if gesture.pinch_strength > 0:
            bar_width = int(300 * gesture.pinch_strength)
            cv2.rectangle(overlay, (15, 110), (15 + bar_width, 120), (0, 255, 0), -1)
        cv2.rectangle(overlay, (15, 110), (315, 120), DISPLAY_CONFIG['overlay_color'], 1)

        return overlay

    def close(self):
        """Close the display window."""
        if self.show_window:
            try:
                cv2.destroyWindow(self.window_name)
            except cv2.error as e:
                logger.debug("Window %s already closed: %s", self.window_name, e)
        self._positions = None
