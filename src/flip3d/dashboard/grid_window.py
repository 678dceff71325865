"""Scrolling grid of flip cards backed by a recycled pool of hosts."""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional

import cv2
import numpy as np

from .. import config
from ..card_view import CardView
from ..grid_adapter import GridFlipAdapter
from ..sides import Side

logger = logging.getLogger(__name__)

STATUS_HEIGHT = 18


class GridWindow:
    """
    Grid window controller.

    Shows columns x visible_rows cards from an adapter with any number of
    states. Only the cards on screen own a CardView; scrolled-out hosts go
    to the scrap heap and are handed back to the adapter for reuse.
    """

    WINDOW_NAME = "Flip3D Grid"

    def __init__(
        self,
        adapter: GridFlipAdapter,
        stop_event: Optional[threading.Event] = None,
        columns: Optional[int] = None,
        visible_rows: Optional[int] = None,
        cell_size: Optional[int] = None,
        margin: Optional[int] = None,
    ) -> None:
        """
        Initialize grid window.

        Args:
            adapter: Adapter providing states and hosts
            stop_event: Event to signal shutdown
            columns: Cards per row (default config.DASHBOARD_COLUMNS)
            visible_rows: Rows on screen (default config.DASHBOARD_VISIBLE_ROWS)
            cell_size: Card size in pixels (default config.DASHBOARD_CELL_SIZE)
            margin: Gap between cards (default config.DASHBOARD_CELL_MARGIN)
        """
        self.adapter = adapter
        self.stop_event = stop_event or threading.Event()
        self.columns = columns or config.DASHBOARD_COLUMNS
        self.visible_rows = visible_rows or config.DASHBOARD_VISIBLE_ROWS
        self.cell_size = cell_size or config.DASHBOARD_CELL_SIZE
        self.margin = config.DASHBOARD_CELL_MARGIN if margin is None else margin

        self.pitch = self.cell_size + STATUS_HEIGHT + self.margin
        self.width = self.columns * (self.cell_size + self.margin) + self.margin
        self.grid_height = self.visible_rows * self.pitch + self.margin
        self.height = self.grid_height + 40  # Room for help text

        self.scroll_offset = 0
        self._slots: dict[int, CardView] = {}
        self._scrap: list[CardView] = []
        self.errors: list[str] = []

        # FPS tracking
        self.frame_times: list[float] = []
        self.fps = 0.0

    # -------------------------------------------------------------------------
    # Main Loop
    # -------------------------------------------------------------------------

    def run(self) -> None:
        """
        Run the grid main loop.

        This should be called from the main thread as OpenCV requires it.
        """
        logger.info("Grid window starting...")

        cv2.namedWindow(self.WINDOW_NAME, cv2.WINDOW_AUTOSIZE)
        cv2.setMouseCallback(self.WINDOW_NAME, self._on_mouse_event)

        target_frame_time = 1.0 / config.DASHBOARD_FPS

        logger.info(f"Grid running: {self.adapter.get_count()} cards, {self.columns} columns")

        while not self.stop_event.is_set():
            frame_start = time.time()

            try:
                self.step(time.monotonic())
                cv2.imshow(self.WINDOW_NAME, self.render())
            except Exception as e:
                logger.error(f"Grid frame error: {e}")
                self.add_error(f"Grid frame error: {e}")

            key = cv2.waitKey(1) & 0xFF
            if key == ord("q") or key == 27:  # 'q' or ESC
                logger.info("User requested exit")
                self.stop_event.set()
                break
            elif key == ord("f"):
                self.force_all(Side.FRONT)
            elif key == ord("b"):
                self.force_all(Side.BACK)

            # Check if window was closed
            if cv2.getWindowProperty(self.WINDOW_NAME, cv2.WND_PROP_VISIBLE) < 1:
                logger.info("Window closed")
                self.stop_event.set()
                break

            self._update_fps(frame_start)

            # Frame rate limiting
            elapsed = time.time() - frame_start
            if elapsed < target_frame_time:
                time.sleep(target_frame_time - elapsed)

        cv2.destroyAllWindows()
        logger.info("Grid window stopped")

    def step(self, now: float) -> None:
        """Lay out visible positions and advance every on-screen animation."""
        self.layout()
        for host in list(self._slots.values()):
            host.tick(now)

    # -------------------------------------------------------------------------
    # Layout & Recycling
    # -------------------------------------------------------------------------

    def visible_positions(self) -> range:
        count = self.adapter.get_count()
        first_row = self.scroll_offset // self.pitch
        last_row = (self.scroll_offset + self.grid_height - self.margin - 1) // self.pitch
        start = min(count, first_row * self.columns)
        stop = min(count, (last_row + 1) * self.columns)
        return range(start, stop)

    def layout(self) -> None:
        """Scrap hosts that scrolled out and fetch hosts for new positions."""
        wanted = self.visible_positions()

        for position in [p for p in self._slots if p not in wanted]:
            host = self._slots.pop(position)
            self.adapter.on_moved_to_scrap_heap(host)
            self._scrap.append(host)

        for position in wanted:
            if position not in self._slots:
                convert_view = self._scrap.pop() if self._scrap else None
                self._slots[position] = self.adapter.get_view(position, convert_view)

    def scroll(self, direction: int) -> None:
        """Scroll by one wheel notch (direction -1 = up, 1 = down)."""
        rows = -(-self.adapter.get_count() // self.columns)
        max_offset = max(0, rows * self.pitch + self.margin - self.grid_height)
        self.scroll_offset += direction * config.DASHBOARD_SCROLL_STEP
        self.scroll_offset = max(0, min(max_offset, self.scroll_offset))

    @property
    def pool_size(self) -> int:
        """Number of hosts ever created (on screen plus scrap heap)."""
        return len(self._slots) + len(self._scrap)

    def host_at(self, position: int) -> Optional[CardView]:
        return self._slots.get(position)

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def force_all(self, side: Side) -> None:
        for state in self.adapter.get_states():
            state.force_to(side)
        logger.info(f"All cards forced to {side.label}")

    def click(self, x: int, y: int) -> bool:
        """Route a window click to the card under it."""
        hit = self._cell_at(x, y)
        if hit is None:
            return False
        position, local_x, local_y = hit
        host = self._slots.get(position)
        if host is None:
            return False
        return host.click(local_x, local_y)

    def add_error(self, error: str) -> None:
        """Add error to list, keeping last 10."""
        self.errors.append(f"{time.strftime('%H:%M:%S')} - {error}")
        if len(self.errors) > 10:
            self.errors.pop(0)

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render(self) -> np.ndarray:
        """Compose all on-screen cards into the window image."""
        canvas = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        canvas[:] = config.COLOR_PANEL_BG

        for position, host in self._slots.items():
            x, y = self._cell_origin(position)
            self._blit(canvas, host.render(), x, y + STATUS_HEIGHT)
            self._draw_status(canvas, position, x, y)

        # Cover the help strip so cards scrolled under it are hidden
        canvas[self.grid_height:, :] = config.COLOR_PANEL_BG

        cv2.putText(
            canvas,
            f"FPS: {self.fps:.1f}  Hosts: {self.pool_size}  Cards: {self.adapter.get_count()}",
            (10, self.height - 22),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.4,
            config.COLOR_HELP_TEXT,
            1,
        )
        cv2.putText(
            canvas,
            "Click:Flip  Wheel:Scroll  F:All front  B:All back  Q:Quit",
            (10, self.height - 8),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.4,
            config.COLOR_HELP_TEXT,
            1,
        )
        return canvas

    def _draw_status(self, canvas: np.ndarray, position: int, x: int, y: int) -> None:
        state = self.adapter.get_state(position)
        if state.in_progress:
            color = config.COLOR_STATUS_FLIPPING
            label = f"#{state.identity} -> {state.target_side.label}"
        else:
            side = state.current_side
            color = config.COLOR_STATUS_FRONT if side is Side.FRONT else config.COLOR_STATUS_BACK
            label = f"#{state.identity} {side.label}"

        strip = np.zeros((STATUS_HEIGHT, self.cell_size, 3), dtype=np.uint8)
        strip[:] = config.COLOR_PANEL_BG
        cv2.circle(strip, (8, STATUS_HEIGHT // 2), 5, color, -1)
        cv2.putText(strip, label, (18, STATUS_HEIGHT - 5), cv2.FONT_HERSHEY_SIMPLEX, 0.4, config.COLOR_TEXT, 1)
        self._blit(canvas, strip, x, y)

    def _blit(self, canvas: np.ndarray, image: np.ndarray, x: int, y: int) -> None:
        """Copy image onto canvas at (x, y), clipped to the grid area."""
        h, w = image.shape[:2]
        top = max(0, y)
        bottom = min(self.grid_height, y + h)
        if bottom <= top:
            return
        canvas[top:bottom, x:x + w] = image[top - y:bottom - y, :]

    def _cell_origin(self, position: int) -> tuple[int, int]:
        row, column = divmod(position, self.columns)
        x = self.margin + column * (self.cell_size + self.margin)
        y = self.margin + row * self.pitch - self.scroll_offset
        return x, y

    def _cell_at(self, x: int, y: int) -> Optional[tuple[int, int, int]]:
        """Map window coordinates to (position, card_x, card_y)."""
        if not (0 <= y < self.grid_height):
            return None
        for position in self._slots:
            cell_x, cell_y = self._cell_origin(position)
            card_y = cell_y + STATUS_HEIGHT
            if cell_x <= x < cell_x + self.cell_size and card_y <= y < card_y + self.cell_size:
                return position, x - cell_x, y - card_y
        return None

    def _update_fps(self, frame_start: float) -> None:
        """Update FPS calculation."""
        self.frame_times.append(frame_start)

        # Keep only last second of frame times
        cutoff = frame_start - 1.0
        self.frame_times = [t for t in self.frame_times if t > cutoff]

        if len(self.frame_times) > 1:
            self.fps = len(self.frame_times) / (
                self.frame_times[-1] - self.frame_times[0]
            )

    def _on_mouse_event(self, event: int, x: int, y: int, flags: int, param) -> None:
        """
        Handle mouse events for clicks and scrolling.

        Args:
            event: OpenCV mouse event type
            x: X coordinate
            y: Y coordinate
            flags: Additional flags
            param: User data (unused)
        """
        if event == cv2.EVENT_MOUSEWHEEL:
            # Positive flags = scroll up, negative = scroll down
            direction = -1 if flags > 0 else 1
            self.scroll(direction)
        elif event == cv2.EVENT_LBUTTONDOWN:
            self.click(x, y)
