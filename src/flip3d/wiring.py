"""Listeners that make one card's flip force other cards.

- ExclusiveFlipListener: clicking any card sends all the others to one side
- PairedFlipListener: clicking one card of a pair forces its partner
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from .sides import Side
from .state_machine import FlipListener, FlipState

logger = logging.getLogger(__name__)

TRIGGER_STARTED = "started"
TRIGGER_FINISHED = "finished"


class ExclusiveFlipListener(FlipListener):
    """Forces every other state to a side when one starts a user flip."""

    def __init__(
        self,
        states: Sequence[FlipState] | Callable[[], Sequence[FlipState]],
        side: Side = Side.FRONT,
    ) -> None:
        """
        Args:
            states: The states to keep exclusive, or a callable returning them
                (e.g. adapter.get_states, so the data set can change later)
            side: Side the other states are forced to
        """
        self._states = states
        self.side = Side(side)

    def on_started_flipping(self, state: FlipState, starting_side: Side, user_initiated: bool) -> None:
        if not user_initiated:
            return
        states = self._states() if callable(self._states) else self._states
        logger.debug(f"Started flipping {state.identity}, forcing others to {self.side.label}")
        for other in states:
            if other is not state:
                other.force_to(self.side)


class PairedFlipListener(FlipListener):
    """Forces a partner state to a side after a user flip starts or finishes."""

    def __init__(
        self,
        side: Side,
        trigger: str = TRIGGER_STARTED,
        partner: Optional[FlipState] = None,
    ) -> None:
        if trigger not in (TRIGGER_STARTED, TRIGGER_FINISHED):
            raise ValueError(f"Unknown trigger {trigger!r}")
        self.side = Side(side)
        self.trigger = trigger
        self.partner = partner

    def on_started_flipping(self, state: FlipState, starting_side: Side, user_initiated: bool) -> None:
        if self.trigger == TRIGGER_STARTED:
            self._force_partner(user_initiated)

    def on_finished_flipping(self, state: FlipState, ending_side: Side, user_initiated: bool) -> None:
        if self.trigger == TRIGGER_FINISHED:
            self._force_partner(user_initiated)

    def _force_partner(self, user_initiated: bool) -> None:
        if user_initiated and self.partner is not None:
            self.partner.force_to(self.side)


def pair_states(first: FlipState, second: FlipState, side: Side, trigger: str = TRIGGER_STARTED) -> None:
    """Cross-wire two states so a user flip on either forces the other to side."""
    first.listener = PairedFlipListener(side, trigger, partner=second)
    second.listener = PairedFlipListener(side, trigger, partner=first)
