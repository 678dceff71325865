"""Flip cards: a flip state machine decoupled from its recyclable visual host."""

from .sides import Direction, Side, parse_direction
from .animation import Rotation, TransitionSequencer, get_easing_function
from .card_view import CardView, FlipConfig, fit_face
from .state_machine import FlipListener, FlipState
from .grid_adapter import GridFlipAdapter
from .wiring import ExclusiveFlipListener, PairedFlipListener, pair_states

__all__ = [
    "Direction",
    "Side",
    "parse_direction",
    "Rotation",
    "TransitionSequencer",
    "get_easing_function",
    "CardView",
    "FlipConfig",
    "fit_face",
    "FlipListener",
    "FlipState",
    "GridFlipAdapter",
    "ExclusiveFlipListener",
    "PairedFlipListener",
    "pair_states",
]
