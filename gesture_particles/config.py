"""
Configuration settings for the gesture particle field
"""

import os

# Camera settings
CAMERA_CONFIG = {
    'default_camera_index': 0,
    'default_frame_width': 1280,
    'default_frame_height': 720,
    'flip_horizontal': True  # Mirror effect for natural interaction
}

# Hand tracking settings (MediaPipe Tasks hand landmarker)
HAND_TRACKING_CONFIG = {
    'model_path': os.getenv('HAND_LANDMARKER_MODEL', 'hand_landmarker.task'),
    'model_url': ('https://storage.googleapis.com/mediapipe-models/hand_landmarker/'
                  'hand_landmarker/float16/1/hand_landmarker.task'),
    'num_hands': 2,
    'min_hand_detection_confidence': 0.5,
    'min_hand_presence_confidence': 0.5,
    'min_tracking_confidence': 0.5
}

# Gesture classification settings
GESTURE_CONFIG = {
    'open_finger_ratio': 1.5,  # fingertip reach vs. palm length
    'min_open_fingers': 3,
    'pinch_distance_gain': 2.0,  # strength = 1 - gain * distance
    'detection_confidence': 0.8
}

# Particle field settings
PARTICLE_CONFIG = {
    'default_count': 10000,
    'min_count': 1,
    'max_count': 50000,
    'count_step': 1000,
    'default_size': 0.05,
    'default_color': (0, 255, 255),
    'default_shape': 'sphere',
    'min_scale': 0.5,
    'max_scale': 2.0,
    'smoothing_factor': 0.1,
    'gravity': 0.5,
    'color_presets': ['#ff0080', '#9000ff', '#0080ff', '#00ffff', '#ffcc00', '#00ff80']
}

# Display settings
DISPLAY_CONFIG = {
    'window_name': 'Gesture Particles',
    'width': 1280,
    'height': 720,
    'background': (26, 10, 10),  # BGR of #0a0a1a
    'camera_distance': 10.0,
    'field_of_view': 75.0,
    'show_gesture_info': True,
    'overlay_color': (255, 255, 255),
    'overlay_background': (0, 0, 0),
    'text_scale': 0.5,
    'text_thickness': 1
}

# Logging settings
LOGGING_CONFIG = {
    'level': os.getenv('GESTURE_PARTICLES_LOG_LEVEL', 'INFO'),
    'format': '%(asctime)s %(levelname)s %(name)s: %(message)s'
}
