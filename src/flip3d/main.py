"""Main entry point for the flip card demo."""

from __future__ import annotations

import logging
import signal
import sys
import threading
from typing import Optional

import cv2
import numpy as np

from . import config
from .card_view import CardView
from .dashboard import GridWindow
from .grid_adapter import GridFlipAdapter
from .sides import Side
from .state_machine import FlipState
from .wiring import ExclusiveFlipListener, TRIGGER_FINISHED, TRIGGER_STARTED, pair_states


# Configure logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

MODES = ("grid", "pairs")


def draw_back_face(size: int, identity) -> np.ndarray:
    """Checkerboard back face with the card number in the middle."""
    tile = max(1, size // 8)
    rows, cols = np.indices((size, size)) // tile
    face = np.where(((rows + cols) % 2 == 0)[..., None], config.COLOR_BACK, (30, 30, 30)).astype(np.uint8)

    text = str(identity)
    (text_w, text_h), _ = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, 1.2, 2)
    origin = ((size - text_w) // 2, (size + text_h) // 2)
    cv2.putText(face, text, origin, cv2.FONT_HERSHEY_SIMPLEX, 1.2, config.COLOR_TEXT, 2)
    return face


class Application:
    """Main application controller."""

    def __init__(self, mode: str = "grid") -> None:
        if mode not in MODES:
            raise ValueError(f"Unknown mode {mode!r}, expected one of {MODES}")
        self.mode = mode
        self.stop_event = threading.Event()
        self.rng = np.random.default_rng()
        self.front_colors: dict = {}

        self.adapter: Optional[GridFlipAdapter] = None
        self.window: Optional[GridWindow] = None

        # Signal handling
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum: int, frame) -> None:
        """Handle shutdown signals."""
        logger.info(f"Received signal {signum}, shutting down...")
        self.stop()

    def build(self) -> GridWindow:
        """Create states, adapter and window for the selected mode."""
        if self.mode == "grid":
            count = config.DASHBOARD_GRID_ITEMS
            states = [FlipState(i) for i in range(count)]
            columns = config.DASHBOARD_COLUMNS
        else:
            count = 4
            states = [FlipState(i + 1) for i in range(count)]
            columns = 2

        self.adapter = GridFlipAdapter(
            config.DASHBOARD_CELL_SIZE,
            states,
            prepare_view=self._prepare_view,
        )

        if self.mode == "grid":
            listener = ExclusiveFlipListener(self.adapter.get_states, Side.FRONT)
            for state in states:
                state.listener = listener
        else:
            # Cards 1 and 2 send each other to the front as soon as one is clicked;
            # cards 3 and 4 send each other to the back once a clicked flip lands
            pair_states(states[0], states[1], Side.FRONT, TRIGGER_STARTED)
            pair_states(states[2], states[3], Side.BACK, TRIGGER_FINISHED)

        for state in states:
            color = self.rng.integers(0, 256, size=3)
            self.front_colors[state.identity] = tuple(int(c) for c in color)

        self.window = GridWindow(self.adapter, self.stop_event, columns=columns)
        logger.info(f"Built {self.mode} demo with {count} cards")
        return self.window

    def _prepare_view(self, position: int, host: CardView, state: FlipState) -> None:
        host.set_face_color(Side.FRONT, self.front_colors[state.identity])
        host.set_back_image(draw_back_face(host.width, state.identity))

    def start(self) -> None:
        """Build the demo and run the window until it closes."""
        logger.info("Starting application...")
        window = self.build()

        # Window runs in main thread (blocking)
        try:
            window.run()
        except Exception as e:
            logger.error(f"Grid window error: {e}")
            window.add_error(f"Grid window error: {e}")

        self.stop()

    def stop(self) -> None:
        """Stop the window loop."""
        logger.info("Stopping application...")
        self.stop_event.set()
        logger.info("Application stopped")


def main() -> int:
    """Main entry point."""
    mode = sys.argv[1] if len(sys.argv) > 1 else "grid"

    logger.info("=" * 50)
    logger.info("Flip3D Demo Starting")
    logger.info("=" * 50)
    logger.info(f"Platform: {config.PLATFORM}")
    logger.info(f"Mode: {mode}")
    logger.info(f"Flip duration: {config.FLIP_DURATION_MS} ms")
    logger.info("=" * 50)

    try:
        app = Application(mode)
        app.start()
    except Exception as e:
        logger.error(f"Application error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
