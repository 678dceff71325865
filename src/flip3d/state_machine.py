"""Flip state machine.

States:
- Idle(side): showing one face, ready for a click
- Transitioning(from, to): a flip is playing (or settling, without a host)
- Transitioning+Override(from, to, desired): a force arrived mid-flip; the
  running flip finishes, then a corrective hop runs if still needed

FlipState is the long-lived truth for one logical item. A CardView may be
bound to it, rebound to another state by a recycling grid, or absent
altogether; flips without a host settle synchronously.

Threading: every method must be called from the UI loop thread. Hosts
resolve their futures from tick(), which runs on that same thread, so no
locking is done here.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Optional, TYPE_CHECKING

from .sides import Side

if TYPE_CHECKING:
    from .card_view import CardView

logger = logging.getLogger(__name__)


class FlipListener:
    """Receives flip events from a FlipState. Override what you need."""

    def on_started_flipping(self, state: FlipState, starting_side: Side, user_initiated: bool) -> None:
        """Flip started. Never reported for a corrective hop."""

    def on_finished_flipping(self, state: FlipState, ending_side: Side, user_initiated: bool) -> None:
        """Flip settled, including host-less settles and rebind fast-forwards."""


def _mode(user_initiated: bool) -> str:
    return "<Manual>" if user_initiated else "<Forced>"


class FlipState:
    """Flip state of one logical card."""

    def __init__(
        self,
        identity,
        listener: Optional[FlipListener] = None,
        initial_side: Side = Side.FRONT,
    ) -> None:
        self.identity = identity
        self.listener = listener

        self._current_side = Side(initial_side)
        self._target_side = self._current_side
        self._in_progress = False
        self._override_pending = False
        self._user_initiated = False

        self._host: Optional[CardView] = None
        self._pending: Optional[Future] = None

    def __repr__(self) -> str:
        return (
            f"FlipState({self.identity!r}, {self._current_side.label}"
            f"{' -> ' + self._target_side.label if self._in_progress else ''}"
            f"{' [forced]' if self._override_pending else ''})"
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def current_side(self) -> Side:
        return self._current_side

    @property
    def target_side(self) -> Side:
        return self._target_side

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    @property
    def override_pending(self) -> bool:
        return self._override_pending

    @property
    def host(self) -> Optional[CardView]:
        return self._host

    def get_current_side(self) -> Side:
        return self._current_side

    def is_in_progress(self) -> bool:
        return self._in_progress

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    def request_flip(self, user_initiated: bool = True) -> None:
        """Flip to the other side. Ignored while a flip is in progress."""
        if self._in_progress:
            logger.debug(f"{self.identity}: Click ignored, already flipping to {self._target_side.label}")
            return
        self._target_side = self._current_side.other()
        self._user_initiated = user_initiated
        self._start_transition(notify=True)

    def force_to(self, side: Side) -> None:
        """
        Converge on a side, flipping only if needed.

        While flipping, the request is remembered and applied after the
        running flip settles; repeated forces overwrite each other.
        """
        side = Side(side)
        if self._override_pending:
            logger.debug(f"{self.identity}: Already forced, retargeting to {side.label}")
            self._target_side = side
            return
        if self._in_progress:
            logger.debug(f"{self.identity}: Already flipping. Set target to {side.label}")
            self._override_pending = True
            self._target_side = side
            return
        if self._current_side is side:
            logger.debug(f"{self.identity}: Already in the right state: {side.label}")
            return
        logger.debug(f"{self.identity}: Not flipping but need to flip to {side.label}")
        self.request_flip(user_initiated=False)

    def on_transition_settled(self, new_side: Side) -> None:
        """Called when a flip has visually (or instantly) landed on new_side."""
        new_side = Side(new_side)
        logger.debug(f"{self.identity}: Ended flipping to {new_side.label}")
        self._current_side = new_side
        self._pending = None

        if self._override_pending:
            self._override_pending = False
            self._user_initiated = False
            if self._target_side is not new_side:
                logger.debug(f"{self.identity}: Flipping back, forcibly to {self._target_side.label}")
                self._start_transition(notify=False)
                return
        self._finish()

    # -------------------------------------------------------------------------
    # Host Binding
    # -------------------------------------------------------------------------

    def bind(self, host: Optional[CardView]) -> None:
        """
        Attach a host (or None), replacing the current one.

        A flip still in flight on the previous host is resolved to its
        intended side at once. The new host is shown the current side
        without animation.

        Callers should unbind the host's previous owner first (the grid
        adapter does). A previous owner that was not unbound lets go of the
        host the next time it tries to flip, and settles without it.
        """
        old_host = self._host
        if old_host is not None:
            self._host = None
            if old_host is not host:
                old_host.remove_click_listener(self.request_flip)
            if self._in_progress:
                logger.debug(f"{self.identity}: Host detached mid-flip, resolving to {self._target_side.label}")
                self._resolve_in_flight()

        self._target_side = self._current_side
        self._in_progress = False
        self._override_pending = False
        self._pending = None

        self._host = host
        if host is not None:
            host.show_instant(self._current_side)
            host.set_click_listener(self.request_flip)

    def unbind(self) -> None:
        """Detach the host, cancelling its animation so no stale completion arrives."""
        host = self._host
        if host is not None and self._pending is not None:
            self._pending = None
            host.clear_animation()
        self.bind(None)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _start_transition(self, notify: bool) -> None:
        departing = self._current_side
        arriving = departing.other()
        self._in_progress = True

        if notify and self.listener is not None:
            self.listener.on_started_flipping(self, departing, self._user_initiated)
            # The listener may have rebound or resolved this state
            if not self._in_progress or self._current_side is not departing:
                return

        if self._host is not None and self._host.click_listener != self.request_flip:
            # Another state bound this host without unbinding us first
            logger.debug(f"{self.identity}: Host taken over by another state, releasing it")
            self._host = None

        if self._host is None:
            logger.debug(f"{self.identity}: No host bound, settling immediately on {arriving.label}")
            self.on_transition_settled(arriving)
            return

        self._host.set_interactive(departing, False)
        future = self._host.animate_to(arriving)
        self._pending = future
        future.add_done_callback(self._on_animation_done)

    def _on_animation_done(self, future: Future) -> None:
        if future is not self._pending:
            logger.debug(f"{self.identity}: Dropping stale flip completion")
            return
        self._pending = None

        if future.cancelled():
            # Host was taken over without unbind(); let it go
            logger.debug(f"{self.identity}: Flip cancelled by host, resolving to {self._target_side.label}")
            self._release_host()
            self._resolve_in_flight()
            return

        self.on_transition_settled(future.result())

    def _release_host(self) -> None:
        host, self._host = self._host, None
        if host is not None:
            host.remove_click_listener(self.request_flip)

    def _resolve_in_flight(self) -> None:
        """Jump an unfinished flip to its intended end side and report it."""
        self._user_initiated = self._user_initiated and not self._override_pending
        self._current_side = self._target_side
        self._override_pending = False
        self._pending = None
        self._finish()

    def _finish(self) -> None:
        self._in_progress = False
        self._target_side = self._current_side
        if self._host is not None:
            self._host.set_interactive(self._current_side, True)
        logger.debug(
            f"{self.identity}: {_mode(self._user_initiated)}: Flipping finished to {self._current_side.label}"
        )
        if self.listener is not None:
            self.listener.on_finished_flipping(self, self._current_side, self._user_initiated)
