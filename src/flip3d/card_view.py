"""Visual host for a flip card.

CardView is a blank stage: positional face slots (one per Side) plus an
overlay slot that swallows clicks while a flip is playing. It has no idea
which logical item it is showing or why it flips; FlipState drives it through
show_instant / animate_to / set_interactive / clear_animation and listens to
the future returned by animate_to.
"""

from __future__ import annotations

import logging
import math
import time
from concurrent.futures import Future
from dataclasses import dataclass
from functools import partial
from typing import Callable, Optional

import cv2
import numpy as np

from . import config
from .animation import Frame, TransitionSequencer
from .sides import Direction, Side, parse_direction

logger = logging.getLogger(__name__)

# Slot index of the click-swallowing overlay (after the face slots)
OVERLAY_SLOT = len(Side)

SCALE_MODES = ("center_inside", "fit", "center")

# |cos(angle)| below this means the face is edge-on and draws nothing
EDGE_ON_EPSILON = 1e-3


@dataclass
class FlipConfig:
    """Construction-time options of a flip card."""

    duration_ms: float = None  # Total flip time (from config.FLIP_DURATION_MS)
    front_to_back: Direction = None  # Rotation when leaving the front
    back_to_front: Direction = None  # Rotation when leaving the back
    internal_padding: int = None  # Pixels around the face content
    scale_mode: str = None  # How face images are fitted into the card
    background_color: tuple[int, int, int] = None
    front_color: tuple[int, int, int] = None  # Front face when no image is set
    back_color: tuple[int, int, int] = None  # Back face when no image is set

    def __post_init__(self):
        """Load defaults from config.py if not specified."""
        if self.duration_ms is None:
            self.duration_ms = getattr(config, 'FLIP_DURATION_MS', 500)
        if self.front_to_back is None:
            self.front_to_back = getattr(config, 'FLIP_FRONT_TO_BACK', "LEFT")
        if self.back_to_front is None:
            self.back_to_front = getattr(config, 'FLIP_BACK_TO_FRONT', "RIGHT")
        if self.internal_padding is None:
            self.internal_padding = getattr(config, 'INTERNAL_PADDING', 0)
        if self.scale_mode is None:
            self.scale_mode = getattr(config, 'SCALE_MODE', "center_inside")
        if self.background_color is None:
            self.background_color = getattr(config, 'COLOR_CARD_BG', (0, 0, 0))
        if self.front_color is None:
            self.front_color = getattr(config, 'COLOR_FRONT', (255, 0, 0))
        if self.back_color is None:
            self.back_color = getattr(config, 'COLOR_BACK', (0, 0, 255))

        self.front_to_back = parse_direction(self.front_to_back)
        self.back_to_front = parse_direction(self.back_to_front)

        if self.duration_ms <= 0:
            raise ValueError(f"duration_ms must be positive, got {self.duration_ms}")
        if self.internal_padding < 0:
            raise ValueError(f"internal_padding must not be negative, got {self.internal_padding}")
        if self.scale_mode not in SCALE_MODES:
            raise ValueError(f"Unknown scale mode {self.scale_mode!r}, expected one of {SCALE_MODES}")

    def direction_for(self, departing: Side) -> Direction:
        """Rotation direction for a flip leaving the given face."""
        return self.front_to_back if departing is Side.FRONT else self.back_to_front


def fit_face(
    image: np.ndarray,
    width: int,
    height: int,
    padding: int = 0,
    scale_mode: str = "center_inside",
    background: tuple[int, int, int] = (0, 0, 0),
) -> np.ndarray:
    """
    Fit face content into a card-sized BGR image.

    Args:
        image: Source image (BGR, BGRA or grayscale)
        width: Card width in pixels
        height: Card height in pixels
        padding: Pixels left empty on every edge
        scale_mode: 'center_inside' (shrink only), 'fit' (scale to fit) or
            'center' (no scaling, cropped)
        background: Fill color around the content

    Returns:
        Image of shape (height, width, 3)
    """
    if image.ndim == 2:
        image = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    elif image.shape[2] == 4:
        image = cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)

    face = np.zeros((height, width, 3), dtype=np.uint8)
    face[:] = background

    inner_w = max(1, width - 2 * padding)
    inner_h = max(1, height - 2 * padding)
    src_h, src_w = image.shape[:2]

    if scale_mode == "fit":
        scale = min(inner_w / src_w, inner_h / src_h)
    elif scale_mode == "center_inside":
        scale = min(1.0, inner_w / src_w, inner_h / src_h)
    else:
        scale = 1.0

    if scale != 1.0:
        new_w = max(1, int(round(src_w * scale)))
        new_h = max(1, int(round(src_h * scale)))
        interpolation = cv2.INTER_AREA if scale < 1.0 else cv2.INTER_LINEAR
        image = cv2.resize(image, (new_w, new_h), interpolation=interpolation)
        src_h, src_w = image.shape[:2]

    # Crop anything still larger than the inner area (only in 'center' mode)
    crop_x = max(0, (src_w - inner_w) // 2)
    crop_y = max(0, (src_h - inner_h) // 2)
    image = image[crop_y:crop_y + inner_h, crop_x:crop_x + inner_w]
    src_h, src_w = image.shape[:2]

    x = padding + (inner_w - src_w) // 2
    y = padding + (inner_h - src_h) // 2
    face[y:y + src_h, x:x + src_w] = image
    return face


class CardView:
    """
    Renders one flip card and plays flip animations on request.

    Write-only from the state machine's point of view, apart from the
    future returned by animate_to.
    """

    def __init__(
        self,
        width: int,
        height: int,
        config: Optional[FlipConfig] = None,
    ) -> None:
        """
        Initialize card view.

        Args:
            width: Card width in pixels
            height: Card height in pixels
            config: Construction options (defaults from config.py)
        """
        self.width = width
        self.height = height
        self.config = config or FlipConfig()

        self._faces: list[np.ndarray] = [None] * len(Side)
        self._visible = [False] * (OVERLAY_SLOT + 1)
        self._interactive = [False] * (OVERLAY_SLOT + 1)
        self._sequencer: Optional[TransitionSequencer] = None
        self._frame: Optional[Frame] = None
        self._click_listener: Optional[Callable[[], None]] = None

        self.set_face_color(Side.FRONT, self.config.front_color)
        self.set_face_color(Side.BACK, self.config.back_color)
        self._set_face_state(Side.FRONT)

    def __repr__(self) -> str:
        return f"CardView({self.width}x{self.height}, 0x{id(self):x})"

    # -------------------------------------------------------------------------
    # Face Content
    # -------------------------------------------------------------------------

    def set_face_image(self, side: Side, image: np.ndarray) -> None:
        """Set face content from an image, fitted per config.scale_mode."""
        self._faces[Side(side).value] = fit_face(
            image,
            self.width,
            self.height,
            padding=self.config.internal_padding,
            scale_mode=self.config.scale_mode,
            background=self.config.background_color,
        )

    def set_face_color(self, side: Side, color: tuple[int, int, int]) -> None:
        """Set face content to a solid color (inside the padding)."""
        solid = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        solid[:] = color
        self.set_face_image(side, solid)

    def set_front_image(self, image: np.ndarray) -> None:
        self.set_face_image(Side.FRONT, image)

    def set_back_image(self, image: np.ndarray) -> None:
        self.set_face_image(Side.BACK, image)

    def face_image(self, side: Side) -> np.ndarray:
        return self._faces[Side(side).value]

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def show_instant(self, side: Side) -> None:
        """Show a face immediately, dropping any running animation."""
        self.clear_animation()
        self._set_face_state(Side(side))

    def set_interactive(self, side: Side, enabled: bool) -> None:
        self._interactive[Side(side).value] = enabled

    def animate_to(
        self,
        side: Side,
        direction: Optional[Direction] = None,
        duration_ms: Optional[float] = None,
    ) -> Future:
        """
        Start a flip from the visible face to the given face.

        The animation starts on the next tick(). The overlay swallows clicks
        until it completes or is cleared.

        Args:
            side: Face to end on
            direction: Rotation direction (default from config per departing face)
            duration_ms: Total flip time (default config.duration_ms)

        Returns:
            Future resolved with the arriving side, or cancelled by
            clear_animation / show_instant
        """
        side = Side(side)
        departing = self.visible_side
        if departing is None or departing is side:
            raise ValueError(f"Cannot flip to {side.label}: showing {departing}")

        self.clear_animation()
        if direction is None:
            direction = self.config.direction_for(departing)
        if duration_ms is None:
            duration_ms = self.config.duration_ms

        sequencer = TransitionSequencer(
            departing,
            side,
            direction,
            duration_ms,
            center=(self.width / 2.0, self.height / 2.0),
            on_midpoint=partial(self._swap_faces, departing, side),
        )
        # Registered first so the overlay is gone before any outside callback runs
        sequencer.completion.add_done_callback(self._on_sequence_done)
        self._sequencer = sequencer
        self._set_overlay(True)
        logger.debug(f"{self!r}: flipping {departing.label} -> {side.label} ({direction.name}, {duration_ms}ms)")
        return sequencer.completion

    def clear_animation(self) -> None:
        """Cancel the running animation, if any. Its future is cancelled."""
        sequencer, self._sequencer = self._sequencer, None
        self._frame = None
        if sequencer is not None:
            sequencer.cancel()
        self._set_overlay(False)

    # -------------------------------------------------------------------------
    # Input
    # -------------------------------------------------------------------------

    @property
    def click_listener(self) -> Optional[Callable[[], None]]:
        return self._click_listener

    def set_click_listener(self, listener: Optional[Callable[[], None]]) -> None:
        self._click_listener = listener

    def remove_click_listener(self, listener: Callable[[], None]) -> None:
        """Clear the click listener only if it is the given one."""
        if self._click_listener == listener:
            self._click_listener = None

    def click(self, x: int, y: int) -> bool:
        """
        Deliver a click at card coordinates.

        Returns:
            True if the click was consumed (by the overlay or the listener)
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            return False
        if self._visible[OVERLAY_SLOT]:
            logger.debug(f"{self!r}: click ignored, flip in progress")
            return True
        side = self.visible_side
        if side is None or not self._interactive[side.value]:
            return False
        if self._click_listener is None:
            return False
        self._click_listener()
        return True

    # -------------------------------------------------------------------------
    # Frame Loop
    # -------------------------------------------------------------------------

    def tick(self, now: Optional[float] = None) -> bool:
        """
        Advance the running animation.

        Args:
            now: Timestamp in seconds (defaults to time.monotonic())

        Returns:
            True while an animation is still running
        """
        sequencer = self._sequencer
        if sequencer is None:
            return False
        if now is None:
            now = time.monotonic()
        frame = sequencer.tick(now)
        # Completion callbacks may already have started a new animation
        if sequencer is self._sequencer:
            self._frame = frame
        return self.is_animating

    def render(self) -> np.ndarray:
        """Render the card as a BGR image of shape (height, width, 3)."""
        frame = self._frame
        if frame is None:
            side = self.visible_side
            if side is None:
                return self._blank()
            return self._faces[side.value].copy()

        if abs(math.cos(math.radians(frame.degrees))) < EDGE_ON_EPSILON:
            return self._blank()
        return cv2.warpPerspective(
            self._faces[frame.side.value],
            frame.matrix,
            (self.width, self.height),
            flags=cv2.INTER_LINEAR,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=self.config.background_color,
        )

    # -------------------------------------------------------------------------
    # Introspection (rendering and tests only)
    # -------------------------------------------------------------------------

    @property
    def is_animating(self) -> bool:
        return self._sequencer is not None

    @property
    def overlay_visible(self) -> bool:
        return self._visible[OVERLAY_SLOT]

    @property
    def visible_side(self) -> Optional[Side]:
        for side in Side:
            if self._visible[side.value]:
                return side
        return None

    @property
    def current_frame(self) -> Optional[Frame]:
        return self._frame

    def is_interactive(self, side: Side) -> bool:
        return self._interactive[Side(side).value]

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _set_face_state(self, shown: Side) -> None:
        for side in Side:
            self._visible[side.value] = side is shown
            self._interactive[side.value] = side is shown

    def _set_overlay(self, visible: bool) -> None:
        self._visible[OVERLAY_SLOT] = visible
        self._interactive[OVERLAY_SLOT] = visible

    def _swap_faces(self, departing: Side, arriving: Side) -> None:
        self._visible[departing.value] = False
        self._interactive[departing.value] = False
        self._visible[arriving.value] = True
        self._interactive[arriving.value] = True

    def _on_sequence_done(self, future: Future) -> None:
        if self._sequencer is not None and self._sequencer.completion is future:
            self._sequencer = None
            self._frame = None
            self._set_overlay(False)

    def _blank(self) -> np.ndarray:
        blank = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        blank[:] = self.config.background_color
        return blank
