"""Turns raw pointer input into slideshow commands"""

from typing import Optional, Tuple
from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from dozeframe.logger import debug
from dozeframe.models import CommandKind, GestureCommand, GestureState, SwipeDirection

DOUBLE_TAP_TIMEOUT_MS = 300
DEBOUNCE_MS = 200
EDGE_THRESHOLD = 50  # px from the left/right screen edge
TAP_SLOP = 20  # px a tap may wander
MIN_SWIPE_DISTANCE = 100  # px
MIN_SWIPE_VELOCITY = 800  # px/s
MIN_SWIPE_DURATION_MS = 100
MIN_DRAG_DISTANCE = 30  # px before a vertical drag counts as brightness


class GestureRouter(QObject):
    """Classifies pointer sequences and emits GestureCommands.

    Times are event timestamps in milliseconds. A command is accepted only
    if at least DEBOUNCE_MS passed since the previous accepted one. Each
    accepted command calls feedback.pulse() and feedback.dismiss_hints()
    when a feedback object is set.
    """

    command = pyqtSignal(object)  # GestureCommand

    def __init__(self, width: int = 1920, height: int = 1080, feedback=None, parent=None):
        super().__init__(parent)
        self.width = width
        self.height = height
        self.feedback = feedback
        self.state = GestureState()

        self._down: Optional[Tuple[float, float, float]] = None
        self._max_travel = 0.0
        self._pending_tap_at: Optional[float] = None
        self._tap_timer = QTimer(self)
        self._tap_timer.setSingleShot(True)
        self._tap_timer.setInterval(DOUBLE_TAP_TIMEOUT_MS)
        self._tap_timer.timeout.connect(self._confirm_single_tap)

    def set_screen_size(self, width: int, height: int):
        self.width = width
        self.height = height

    def set_paused(self, paused: bool):
        self.state.paused = paused

    def reset(self):
        """Forget any gesture in progress, keeping the debounce clock"""
        self._down = None
        self._max_travel = 0.0
        self._pending_tap_at = None
        self._tap_timer.stop()

    def pointer_down(self, x: float, y: float, t: float):
        self._down = (x, y, t)
        self._max_travel = 0.0

    def pointer_move(self, x: float, y: float, t: float):
        if self._down is None:
            return
        x0, y0, _ = self._down
        self._max_travel = max(self._max_travel, abs(x - x0), abs(y - y0))

    def pointer_up(self, x: float, y: float, t: float, vx: float = 0.0, vy: float = 0.0):
        if self._down is None:
            return
        x0, y0, t0 = self._down
        self._down = None
        dx, dy = x - x0, y - y0
        self._max_travel = max(self._max_travel, abs(dx), abs(dy))

        if self._near_edge(x0):
            debug(f"Rejected gesture starting at x={x0:.0f} near the screen edge")
            self._cancel_pending_tap()
            return

        if self._max_travel <= TAP_SLOP:
            self._on_tap(t)
            return

        if abs(dx) > abs(dy):
            self._on_horizontal(dx, vx, t - t0, t)
        elif x0 >= self.width / 2 and abs(dy) > MIN_DRAG_DISTANCE:
            self._accept(GestureCommand(CommandKind.BRIGHTNESS, delta=-dy / max(1, self.height)), t)

    def _near_edge(self, x: float) -> bool:
        return x < EDGE_THRESHOLD or x > self.width - EDGE_THRESHOLD

    def _on_tap(self, t: float):
        if self._pending_tap_at is not None and t - self._pending_tap_at <= DOUBLE_TAP_TIMEOUT_MS:
            self._cancel_pending_tap()
            self._accept(GestureCommand(CommandKind.EXIT), t)
            return
        self._pending_tap_at = t
        self._tap_timer.start()

    def _confirm_single_tap(self):
        # state.paused follows the scheduler through set_paused()
        tapped_at = self._pending_tap_at
        self._pending_tap_at = None
        if tapped_at is not None:
            self._accept(GestureCommand(CommandKind.PAUSE_TOGGLE), tapped_at)

    def _cancel_pending_tap(self):
        self._pending_tap_at = None
        self._tap_timer.stop()

    def _on_horizontal(self, dx: float, vx: float, duration: float, t: float):
        if abs(dx) <= MIN_SWIPE_DISTANCE or abs(vx) <= MIN_SWIPE_VELOCITY:
            debug(f"Not a fling: dx={dx:.0f} vx={vx:.0f}")
            return
        if duration < MIN_SWIPE_DURATION_MS:
            debug(f"Ignoring {duration:.0f}ms swipe as accidental")
            return
        if dx > 0:
            self._accept(GestureCommand(CommandKind.PREVIOUS, SwipeDirection.RIGHT), t)
        else:
            self._accept(GestureCommand(CommandKind.NEXT, SwipeDirection.LEFT), t)

    def _accept(self, command: GestureCommand, t: float) -> bool:
        last = self.state.last_accepted_at
        if last is not None and t - last < DEBOUNCE_MS:
            debug(f"Debounced {command.kind.value} ({t - last:.0f}ms after the last gesture)")
            return False
        self.state.last_accepted_at = t
        debug(f"Gesture: {command.kind.value}"
              f"{f' {command.direction.value}' if command.direction else ''}")
        if self.feedback is not None:
            self.feedback.pulse()
            self.feedback.dismiss_hints()
        self.command.emit(command)
        return True
