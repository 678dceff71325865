"""
Pytest configuration and shared fixtures.

Fixtures available to all tests:
  • recorder      : FlipListener that records every event
  • fake_host     : host double whose flips complete only when told to
  • flip_config   : FlipConfig with a 1000 ms flip (binary-exact tick times)
  • card          : small CardView using flip_config
"""

from __future__ import annotations

import os
import sys
from concurrent.futures import Future
from typing import List, Optional

import pytest

# Ensure src/ is on the path when the package is not installed.
SRC_ROOT = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src")
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from flip3d.card_view import CardView, FlipConfig  # noqa: E402
from flip3d.sides import Side  # noqa: E402
from flip3d.state_machine import FlipListener  # noqa: E402

# Tick times for a 1000 ms flip started at FLIP_START (all exact in binary)
FLIP_START = 10.0
FLIP_TICKS = (10.0, 10.5, 10.75, 11.25, 11.5)


# ---------------------------------------------------------------------------
# Listener double
# ---------------------------------------------------------------------------

class RecordingListener(FlipListener):
    def __init__(self) -> None:
        self.events: List[tuple] = []

    def on_started_flipping(self, state, starting_side, user_initiated):
        self.events.append(("started", state.identity, starting_side, user_initiated))

    def on_finished_flipping(self, state, ending_side, user_initiated):
        self.events.append(("finished", state.identity, ending_side, user_initiated))

    def of(self, kind: str) -> List[tuple]:
        return [e for e in self.events if e[0] == kind]


# ---------------------------------------------------------------------------
# Host double
# ---------------------------------------------------------------------------

class FakeHost:
    """Records host commands; animate_to futures resolve only via complete()."""

    def __init__(self, name: str = "host") -> None:
        self.name = name
        self.shown: Optional[Side] = None
        self.click_listener = None
        self.interactive = {side: False for side in Side}
        self.calls: List[tuple] = []
        self.pending: Optional[Future] = None
        self.pending_side: Optional[Side] = None

    def __repr__(self) -> str:
        return f"FakeHost({self.name})"

    def show_instant(self, side):
        self.clear_animation()
        self.calls.append(("show_instant", side))
        self.shown = side
        for s in Side:
            self.interactive[s] = s is side

    def set_click_listener(self, listener):
        self.click_listener = listener

    def remove_click_listener(self, listener):
        if self.click_listener == listener:
            self.click_listener = None

    def set_interactive(self, side, enabled):
        self.interactive[side] = enabled

    def animate_to(self, side, direction=None, duration_ms=None):
        self.calls.append(("animate_to", side))
        self.pending = Future()
        self.pending_side = side
        return self.pending

    def clear_animation(self):
        future, self.pending = self.pending, None
        if future is not None:
            self.calls.append(("clear_animation",))
            future.cancel()

    def complete(self):
        """Finish the running flip as a real host would after its last frame."""
        future, self.pending = self.pending, None
        assert future is not None, "no flip running"
        self.shown = self.pending_side
        future.set_result(self.pending_side)

    def click(self):
        if self.pending is None and self.click_listener is not None:
            self.click_listener()

    def animations(self) -> List[Side]:
        return [c[1] for c in self.calls if c[0] == "animate_to"]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def recorder() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def fake_host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def flip_config() -> FlipConfig:
    return FlipConfig(duration_ms=1000)


@pytest.fixture
def card(flip_config) -> CardView:
    return CardView(20, 20, flip_config)


def play_flip(host: CardView, start: float = FLIP_START) -> None:
    """Tick a real CardView through a whole 1000 ms flip."""
    for t in FLIP_TICKS:
        host.tick(t - FLIP_START + start)
