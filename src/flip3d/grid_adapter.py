"""Adapter between a recycling grid and the flip states it displays.

The grid owns a bounded pool of CardView hosts and asks for one per visible
position through get_view(position, convert_view). The adapter keeps the
host -> state ownership map so a recycled host is always unbound from its
previous state before it is bound to the next one.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from .card_view import CardView, FlipConfig
from .state_machine import FlipState

logger = logging.getLogger(__name__)


class GridFlipAdapter:
    """
    Hands out bound CardViews for grid positions.

    Subclass and override create_view / prepare_view, or pass callables.
    """

    def __init__(
        self,
        item_size: int,
        states: Iterable[FlipState] = (),
        create_view: Optional[Callable[[], CardView]] = None,
        prepare_view: Optional[Callable[[int, CardView, FlipState], None]] = None,
        config: Optional[FlipConfig] = None,
    ) -> None:
        """
        Initialize adapter.

        Args:
            item_size: Width and height of created cards in pixels
            states: Flip states, one per grid position
            create_view: Factory for new hosts (default: square CardView)
            prepare_view: Hook to fill a host's faces after it is bound
            config: Options for hosts made by the default factory
        """
        self.item_size = item_size
        self.config = config
        self._create_view = create_view
        self._prepare_view = prepare_view
        self._states: list[FlipState] = list(states)
        self._owners: dict[CardView, FlipState] = {}

    # -------------------------------------------------------------------------
    # Data Set
    # -------------------------------------------------------------------------

    def set_states(self, states: Iterable[FlipState]) -> None:
        """Replace the data set. All hosts are released."""
        for host in list(self._owners):
            self.on_moved_to_scrap_heap(host)
        self._states = list(states)

    def get_states(self) -> tuple[FlipState, ...]:
        return tuple(self._states)

    def get_count(self) -> int:
        return len(self._states)

    def get_state(self, position: int) -> FlipState:
        if not 0 <= position < len(self._states):
            raise IndexError(f"Position {position} out of range (0..{len(self._states) - 1})")
        return self._states[position]

    def owner_of(self, host: CardView) -> Optional[FlipState]:
        return self._owners.get(host)

    # -------------------------------------------------------------------------
    # Grid Callbacks
    # -------------------------------------------------------------------------

    def get_view(self, position: int, convert_view: Optional[CardView] = None) -> CardView:
        """
        Get a host showing the item at position.

        Args:
            position: Item position in the data set
            convert_view: Recycled host to reuse, if the grid has one

        Returns:
            Host bound to the item's state
        """
        state = self.get_state(position)

        if self._is_extra_call(position, state, convert_view):
            # Grid measuring its first cell again; not a content request
            logger.debug("Duplicate layout probe for position 0 ignored")
            return convert_view if convert_view is not None else self.create_view()

        if convert_view is not None:
            logger.debug(f"Reusing {convert_view!r} at position {position}")
            host = convert_view
        else:
            host = self.create_view()
            logger.debug(f"Created {host!r} at position {position}")

        self._attach(state, host)
        self.prepare_view(position, host, state)
        return host

    def on_moved_to_scrap_heap(self, host: CardView) -> None:
        """Grid stopped showing host; detach it from its state."""
        owner = self._owners.pop(host, None)
        if owner is not None:
            logger.debug(f"{host!r} scrapped, detaching from {owner.identity}")
            owner.unbind()

    # -------------------------------------------------------------------------
    # Hooks
    # -------------------------------------------------------------------------

    def create_view(self) -> CardView:
        if self._create_view is not None:
            return self._create_view()
        return CardView(self.item_size, self.item_size, self.config)

    def prepare_view(self, position: int, host: CardView, state: FlipState) -> None:
        if self._prepare_view is not None:
            self._prepare_view(position, host, state)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _is_extra_call(self, position: int, state: FlipState, convert_view: Optional[CardView]) -> bool:
        if position != 0 or state.host is None:
            return False
        return convert_view is None or convert_view is state.host

    def _attach(self, state: FlipState, host: CardView) -> None:
        previous = self._owners.get(host)
        if previous is not None and previous is not state:
            previous.unbind()

        old_host = state.host
        if old_host is host:
            self._owners[host] = state
            return
        if old_host is not None:
            self._owners.pop(old_host, None)
            state.unbind()

        self._owners[host] = state
        state.bind(host)
