"""Configuration constants for the flip card control and its demo dashboard."""

import logging
import platform

_config_logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Platform Detection
# -----------------------------------------------------------------------------
PLATFORM = platform.system()  # 'Windows', 'Linux', 'Darwin'
IS_WINDOWS = PLATFORM == "Windows"

# -----------------------------------------------------------------------------
# Flip Animation
# -----------------------------------------------------------------------------
# Total flip time in milliseconds, split evenly between the two half-rotations
FLIP_DURATION_MS = 500

# Rotation directions: "LEFT" or "RIGHT" (names of flip3d.sides.Direction)
FLIP_FRONT_TO_BACK = "LEFT"
FLIP_BACK_TO_FRONT = "RIGHT"

# Easing per half-rotation (names from flip3d.animation.EASING_FUNCTIONS)
FLIP_FIRST_HALF_EASING = "ease_in_2"    # Accelerate into the edge-on frame
FLIP_SECOND_HALF_EASING = "ease_out_2"  # Decelerate onto the arriving face

# Distance of the virtual camera from the card plane, in pixels.
# 576 = 8 inches at 72 dpi, the classic camera-matrix default.
CAMERA_DISTANCE = 576.0

# -----------------------------------------------------------------------------
# Card Layout
# -----------------------------------------------------------------------------
INTERNAL_PADDING = 0  # Pixels between the card edge and the face content
SCALE_MODE = "center_inside"  # 'center_inside', 'fit' or 'center'

# Colors (BGR format for OpenCV)
COLOR_FRONT = (255, 0, 0)   # Blue
COLOR_BACK = (0, 0, 255)    # Red
COLOR_CARD_BG = (0, 0, 0)   # Shown behind a card while it is edge-on

# -----------------------------------------------------------------------------
# Dashboard Settings
# -----------------------------------------------------------------------------
DASHBOARD_COLUMNS = 3
DASHBOARD_VISIBLE_ROWS = 3
DASHBOARD_CELL_SIZE = 200
DASHBOARD_CELL_MARGIN = 8
DASHBOARD_FPS = 60
DASHBOARD_SCROLL_STEP = 40  # Pixels per mouse wheel notch
DASHBOARD_GRID_ITEMS = 300

COLOR_TEXT = (255, 255, 255)  # White
COLOR_PANEL_BG = (40, 40, 40)  # Dark gray
COLOR_HELP_TEXT = (100, 100, 100)
COLOR_STATUS_FRONT = (0, 255, 0)   # Green
COLOR_STATUS_BACK = (0, 165, 255)  # Orange
COLOR_STATUS_FLIPPING = (0, 255, 255)  # Yellow

# -----------------------------------------------------------------------------
# System Settings
# -----------------------------------------------------------------------------
LOG_LEVEL = "INFO"

# -----------------------------------------------------------------------------
# Local Config Override
# -----------------------------------------------------------------------------
# Load local_config.py if it exists (not checked into git)
# This allows per-machine settings like window size or animation speed
try:
    from local_config import *  # noqa: F401, F403
    _config_logger.debug("Loaded local_config overrides")
except ImportError:
    pass
