"""Rotation primitive and the two-phase flip sequencer.

A flip is played as two half-rotations around the card's vertical axis:
- First half: departing face turns from 0 to 90 degrees (accelerating)
- Swap: departing face hidden, arriving face shown (edge-on, so invisible)
- Second half: arriving face turns from -90 to 0 degrees (decelerating)

Both halves are driven by tick(now) calls from the UI loop. Nothing here
owns a timer or a thread.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, NamedTuple, Optional

import numpy as np

from . import config
from .sides import Direction, Side

logger = logging.getLogger(__name__)

# Tolerance when comparing elapsed time against a phase duration (ms)
EPSILON_MS = 1e-6


# =============================================================================
# Easing Functions
# =============================================================================

def ease_linear(t: float) -> float:
    return t


def ease_in(t: float) -> float:
    return 1 - math.cos(t * math.pi / 2)


def ease_out(t: float) -> float:
    return math.sin(t * math.pi / 2)


def ease_in_2(t: float) -> float:
    return t ** 2


def ease_out_2(t: float) -> float:
    return 1 - (1 - t) ** 2


def ease_in_3(t: float) -> float:
    return t ** 3


def ease_out_3(t: float) -> float:
    return 1 - (1 - t) ** 3


EASING_FUNCTIONS = {
    "linear": ease_linear,
    "ease_in": ease_in,
    "ease_out": ease_out,
    "ease_in_2": ease_in_2,
    "ease_out_2": ease_out_2,
    "ease_in_3": ease_in_3,
    "ease_out_3": ease_out_3,
}


def get_easing_function(name: str) -> Callable[[float], float]:
    """Get easing function by name, defaults to linear"""
    return EASING_FUNCTIONS.get(name, ease_linear)


# =============================================================================
# Rotation Primitive
# =============================================================================

def rotation_matrix(
    degrees: float,
    center_x: float,
    center_y: float,
    camera_distance: float,
) -> np.ndarray:
    """
    Build the 3x3 perspective matrix for a rotation around the vertical axis.

    The card plane is rotated about the Y axis through (center_x, center_y)
    and projected from a camera placed camera_distance pixels in front of it.
    Equivalent to translating the pivot to the origin, applying the camera
    rotation, and translating back.

    Args:
        degrees: Rotation angle (0 = facing the camera)
        center_x: Pivot X in card pixels
        center_y: Pivot Y in card pixels
        camera_distance: Camera distance from the card plane in pixels

    Returns:
        Homography usable with cv2.warpPerspective
    """
    theta = math.radians(degrees)
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)

    rotate = np.array([
        [cos_t, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [sin_t / camera_distance, 0.0, 1.0],
    ])
    pre = np.array([[1.0, 0.0, -center_x], [0.0, 1.0, -center_y], [0.0, 0.0, 1.0]])
    post = np.array([[1.0, 0.0, center_x], [0.0, 1.0, center_y], [0.0, 0.0, 1.0]])
    return post @ rotate @ pre


@dataclass
class Rotation:
    """Time-parameterized rotation from one angle to another around a pivot."""

    from_degrees: float
    to_degrees: float
    center_x: float
    center_y: float
    duration_ms: float
    easing: Callable[[float], float] = ease_linear
    camera_distance: float = None
    start_time: Optional[float] = None

    def __post_init__(self):
        """Load defaults from config.py if not specified."""
        if self.camera_distance is None:
            self.camera_distance = getattr(config, 'CAMERA_DISTANCE', 576.0)

    def start(self, now: float) -> None:
        self.start_time = now

    @property
    def started(self) -> bool:
        return self.start_time is not None

    def _elapsed_ms(self, now: float) -> float:
        if self.start_time is None:
            return 0.0
        return max(0.0, (now - self.start_time) * 1000.0)

    def progress(self, now: float) -> float:
        """Eased progress in [0, 1]."""
        if self.duration_ms <= 0:
            return 1.0
        t = min(1.0, self._elapsed_ms(now) / self.duration_ms)
        return self.easing(t)

    def is_finished(self, now: float) -> bool:
        return self.started and self._elapsed_ms(now) >= self.duration_ms - EPSILON_MS

    def degrees_at(self, now: float) -> float:
        if self.is_finished(now):
            return self.to_degrees
        return self.from_degrees + (self.to_degrees - self.from_degrees) * self.progress(now)

    def matrix_at(self, now: float) -> np.ndarray:
        return rotation_matrix(
            self.degrees_at(now), self.center_x, self.center_y, self.camera_distance
        )


# =============================================================================
# Transition Sequencer
# =============================================================================

class Phase(Enum):
    """Sequencer phases."""
    FIRST_HALF = auto()
    SECOND_HALF = auto()


class Frame(NamedTuple):
    """One rendered step of a flip: which face to draw and how."""
    side: Side
    degrees: float
    matrix: np.ndarray


class TransitionSequencer:
    """
    Drives a single flip as two half-rotations.

    The midpoint swap happens on the tick after the first half produced its
    final (edge-on) frame, so the second half always starts at the pivot and
    angle where the first half stopped. The completion future resolves with
    the arriving side on the tick after the final frame.
    """

    def __init__(
        self,
        departing: Side,
        arriving: Side,
        direction: Direction,
        duration_ms: float,
        center: tuple[float, float],
        on_midpoint: Optional[Callable[[], None]] = None,
        first_easing: Optional[Callable[[float], float]] = None,
        second_easing: Optional[Callable[[float], float]] = None,
        camera_distance: Optional[float] = None,
    ) -> None:
        self.departing = departing
        self.arriving = arriving
        self.direction = direction
        self.duration_ms = duration_ms
        self.on_midpoint = on_midpoint
        self.completion: Future = Future()
        self.phase: Optional[Phase] = None

        if first_easing is None:
            first_easing = get_easing_function(config.FLIP_FIRST_HALF_EASING)
        if second_easing is None:
            second_easing = get_easing_function(config.FLIP_SECOND_HALF_EASING)

        half = duration_ms / 2.0
        sign = direction.multiplier
        center_x, center_y = center
        self._first = Rotation(
            0.0, 90.0 * sign, center_x, center_y, half, first_easing, camera_distance
        )
        self._second = Rotation(
            -90.0 * sign, 0.0, center_x, center_y, half, second_easing, camera_distance
        )
        self._phase_finished = False
        self._midpoint_fired = False

    @property
    def started(self) -> bool:
        return self.phase is not None or self.completion.done()

    @property
    def midpoint_fired(self) -> bool:
        return self._midpoint_fired

    def start(self, now: float) -> None:
        if self.started:
            return
        self.phase = Phase.FIRST_HALF
        self._phase_finished = False
        self._first.start(now)

    def tick(self, now: float) -> Optional[Frame]:
        """
        Advance the flip to time now.

        Args:
            now: Current timestamp in seconds (monotonic clock)

        Returns:
            Frame to render, or None once the flip is complete or cancelled
        """
        if self.completion.done():
            return None
        if self.phase is None:
            self.start(now)

        if self.phase is Phase.FIRST_HALF:
            if not self._phase_finished:
                return self._frame(self._first, self.departing, now)
            self._enter_second_half(now)

        if self._phase_finished:
            self.phase = None
            self.completion.set_result(self.arriving)
            return None
        return self._frame(self._second, self.arriving, now)

    def cancel(self) -> bool:
        """Stop the flip without swapping or completing. Returns True if cancelled."""
        self.phase = None
        return self.completion.cancel()

    def _frame(self, rotation: Rotation, side: Side, now: float) -> Frame:
        self._phase_finished = rotation.is_finished(now)
        return Frame(side, rotation.degrees_at(now), rotation.matrix_at(now))

    def _enter_second_half(self, now: float) -> None:
        if not self._midpoint_fired:
            self._midpoint_fired = True
            logger.debug(f"Midpoint reached, swapping {self.departing.label} -> {self.arriving.label}")
            if self.on_midpoint is not None:
                self.on_midpoint()
        self.phase = Phase.SECOND_HALF
        self._phase_finished = False
        self._second.start(now)
