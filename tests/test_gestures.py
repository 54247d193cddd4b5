import pytest

from dozeframe.gestures import DOUBLE_TAP_TIMEOUT_MS, GestureRouter
from dozeframe.models import CommandKind, GestureCommand, SwipeDirection


class RecordingFeedback:
    def __init__(self):
        self.pulses = 0
        self.dismissals = 0

    def pulse(self):
        self.pulses += 1

    def dismiss_hints(self):
        self.dismissals += 1


@pytest.fixture
def feedback():
    return RecordingFeedback()


@pytest.fixture
def router(qtbot, feedback):
    router = GestureRouter(width=1080, height=1920, feedback=feedback)
    commands = []
    router.command.connect(commands.append)
    router.commands = commands
    return router


def fling(router, x, dx, vx, t, duration=150, y=900, dy=0):
    router.pointer_down(x, y, t)
    router.pointer_move(x + dx / 2, y + dy / 2, t + duration / 2)
    router.pointer_up(x + dx, y + dy, t + duration, vx, 0.0)


def tap(router, x, y, t):
    router.pointer_down(x, y, t)
    router.pointer_up(x, y, t + 40)


def test_left_fling_is_next_left(router, feedback):
    fling(router, x=200, dx=-150, vx=-1000, t=1000)
    assert router.commands == [GestureCommand(CommandKind.NEXT, SwipeDirection.LEFT)]
    assert feedback.pulses == 1
    assert feedback.dismissals == 1


def test_right_fling_is_previous_right(router):
    fling(router, x=400, dx=300, vx=1500, t=1000)
    assert router.commands == [GestureCommand(CommandKind.PREVIOUS, SwipeDirection.RIGHT)]


@pytest.mark.parametrize("x", [10, 1075])
def test_fling_from_edge_is_rejected(router, feedback, x):
    fling(router, x=x, dx=-300 if x > 500 else 300, vx=-5000 if x > 500 else 5000, t=1000)
    assert router.commands == []
    assert feedback.pulses == 0


@pytest.mark.parametrize("dx, vx, duration", [
    (-90, -2000, 150),   # too short
    (-300, -500, 150),   # too slow
    (-300, -2000, 50),   # over too quickly
])
def test_weak_or_accidental_flings_are_ignored(router, dx, vx, duration):
    fling(router, x=600, dx=dx, vx=vx, t=1000, duration=duration)
    assert router.commands == []


def test_mostly_vertical_swipe_on_left_half_is_not_a_fling(router):
    fling(router, x=300, dx=-120, vx=-2000, t=1000, dy=-400)
    assert router.commands == []


def test_gestures_50ms_apart_are_debounced(router):
    fling(router, x=600, dx=-200, vx=-1200, t=1000)
    fling(router, x=600, dx=-200, vx=-1200, t=1050)
    assert len(router.commands) == 1


def test_gestures_250ms_apart_are_both_accepted(router):
    fling(router, x=600, dx=-200, vx=-1200, t=1000)
    fling(router, x=600, dx=-200, vx=-1200, t=1250)
    assert len(router.commands) == 2


def test_vertical_drag_on_right_half_adjusts_brightness(router):
    router.pointer_down(900, 1200, 1000)
    router.pointer_move(900, 1000, 1100)
    router.pointer_up(900, 720, 1200)
    (command,) = router.commands
    assert command.kind == CommandKind.BRIGHTNESS
    assert command.delta == pytest.approx(480 / 1920)


def test_downward_drag_lowers_brightness(router):
    router.pointer_down(900, 500, 1000)
    router.pointer_up(900, 980, 1300)
    (command,) = router.commands
    assert command.delta == pytest.approx(-0.25)


def test_vertical_drag_on_left_half_is_ignored(router):
    router.pointer_down(300, 1200, 1000)
    router.pointer_up(300, 700, 1300)
    assert router.commands == []


def test_single_tap_toggles_pause_after_timeout(qtbot, router):
    with qtbot.waitSignal(router.command, timeout=DOUBLE_TAP_TIMEOUT_MS + 1000) as blocker:
        tap(router, 500, 900, 1000)
        assert router.commands == []
    assert blocker.args == [GestureCommand(CommandKind.PAUSE_TOGGLE)]
    # Only the scheduler decides; set_paused() reports the outcome back
    assert not router.state.paused


def test_paused_state_follows_set_paused(qtbot, router):
    router.set_paused(True)
    with qtbot.waitSignal(router.command, timeout=DOUBLE_TAP_TIMEOUT_MS + 1000):
        tap(router, 500, 900, 1000)
    assert router.state.paused
    router.set_paused(False)
    assert not router.state.paused


def test_double_tap_exits_without_pausing(qtbot, router):
    tap(router, 500, 900, 1000)
    tap(router, 505, 905, 1150)
    assert router.commands == [GestureCommand(CommandKind.EXIT)]
    qtbot.wait(DOUBLE_TAP_TIMEOUT_MS + 100)
    assert router.commands == [GestureCommand(CommandKind.EXIT)]
    assert not router.state.paused


def test_tap_near_edge_is_rejected(qtbot, router):
    tap(router, 20, 900, 1000)
    qtbot.wait(DOUBLE_TAP_TIMEOUT_MS + 100)
    assert router.commands == []


def test_pointer_up_without_down_is_ignored(router):
    router.pointer_up(500, 500, 1000, -3000, 0)
    assert router.commands == []


def test_works_without_feedback(qtbot):
    router = GestureRouter(width=1080, height=1920)
    commands = []
    router.command.connect(commands.append)
    fling(router, x=200, dx=-150, vx=-1000, t=1000)
    assert len(commands) == 1
