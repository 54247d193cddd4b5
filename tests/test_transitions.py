import pytest

from conftest import photo
from dozeframe import transitions
from dozeframe.models import Settings, SwipeDirection, TransitionState, TransitionType, ZoomType
from dozeframe.transitions import FAST_DURATION_MS, NORMAL_DURATION_MS, TransitionCoordinator
from dozeframe.zoom import ZoomScheduler


@pytest.fixture
def zoom():
    scheduler = ZoomScheduler()
    yield scheduler
    scheduler.cleanup()


def make_coordinator(surfaces, loader, zoom):
    coordinator = TransitionCoordinator(surfaces, loader, zoom)
    states = []
    coordinator.state_changed.connect(states.append)
    return coordinator, states


@pytest.fixture
def plan_spy(monkeypatch):
    calls = []
    original = transitions.create_transition_plan

    def spy(transition_type, width, height, duration):
        calls.append((transition_type, duration))
        return original(transition_type, width, height, duration)

    monkeypatch.setattr(transitions, "create_transition_plan", spy)
    return calls


def test_needs_exactly_two_surfaces(qtbot, surfaces, loader, zoom):
    with pytest.raises(ValueError):
        TransitionCoordinator(surfaces[:1], loader, zoom)


def test_first_photo_goes_straight_to_settling(qtbot, surfaces, loader, zoom, plan_spy):
    coordinator, states = make_coordinator(surfaces, loader, zoom)
    done = []
    assert coordinator.request(photo("a"), 0, Settings(), on_complete=lambda: done.append(True))

    assert states == [TransitionState.PREPARING, TransitionState.SETTLING, TransitionState.IDLE]
    assert done == [True]
    assert plan_spy == []
    assert coordinator.current_slot == 1
    assert coordinator.current_surface.opacity() == 1.0
    assert coordinator.next_surface.opacity() == 0.0
    # Zoom starts right away on the first photo
    assert zoom.is_running(coordinator.current_surface)


def test_second_request_while_busy_is_rejected(qtbot, surfaces, manual_loader, zoom):
    coordinator, states = make_coordinator(surfaces, manual_loader, zoom)
    assert coordinator.request(photo("a"), 0, Settings())
    assert not coordinator.request(photo("b"), 1, Settings())
    assert len(manual_loader.requests) == 1

    manual_loader.complete_all()
    assert states.count(TransitionState.PREPARING) == 1
    assert coordinator.is_idle


def test_animated_transition_runs_once_and_resets_surfaces(qtbot, surfaces, loader, zoom, plan_spy):
    coordinator, states = make_coordinator(surfaces, loader, zoom)
    coordinator.request(photo("a"), 0, Settings())
    first_surface = coordinator.current_surface
    states.clear()

    finished = []
    coordinator.transition_finished.connect(finished.append)
    assert coordinator.request(photo("b"), 1, Settings(transition_type=TransitionType.SLIDE_UP))
    assert coordinator.state == TransitionState.ANIMATING
    assert not coordinator.request(photo("c"), 2, Settings())

    qtbot.waitUntil(lambda: coordinator.is_idle, timeout=3000)
    assert states == [TransitionState.PREPARING, TransitionState.ANIMATING,
                      TransitionState.SETTLING, TransitionState.IDLE]
    assert finished == [1]
    assert plan_spy == [(TransitionType.SLIDE_UP, NORMAL_DURATION_MS)]
    assert coordinator.next_surface is first_surface
    assert first_surface.opacity() == 0.0
    assert first_surface.translation() == (0.0, 0.0)
    assert coordinator.current_surface.opacity() == 1.0
    assert coordinator.current_surface.translation() == (0.0, 0.0)


def test_swipe_direction_overrides_style_for_one_fast_advance(qtbot, surfaces, loader, zoom, plan_spy):
    coordinator, _ = make_coordinator(surfaces, loader, zoom)
    settings = Settings(transition_type=TransitionType.FADE)
    coordinator.request(photo("a"), 0, settings)

    coordinator.request(photo("b"), 1, settings, fast=True, direction=SwipeDirection.RIGHT)
    qtbot.waitUntil(lambda: coordinator.is_idle, timeout=3000)
    coordinator.request(photo("c"), 2, settings)
    qtbot.waitUntil(lambda: coordinator.is_idle, timeout=3000)

    assert plan_spy == [(TransitionType.SLIDE_RIGHT, FAST_DURATION_MS),
                        (TransitionType.FADE, NORMAL_DURATION_MS)]


def test_decode_failure_shows_placeholder_and_continues(qtbot, surfaces, loader, zoom):
    coordinator, _ = make_coordinator(surfaces, loader, zoom)
    loader.failing.add("broken")
    done = []
    coordinator.request(photo("broken"), 0, Settings(), on_complete=lambda: done.append(True))
    assert done == [True]
    assert coordinator.current_surface.has_image()


def test_sine_wave_zoom_is_prestaged_while_preparing(qtbot, surfaces, manual_loader, zoom):
    coordinator, _ = make_coordinator(surfaces, manual_loader, zoom)
    settings = Settings(zoom_type=ZoomType.SINE_WAVE)
    coordinator.request(photo("a"), 0, settings)
    manual_loader.complete_all()

    coordinator.request(photo("b"), 1, settings)
    assert coordinator.state == TransitionState.PREPARING
    assert zoom.is_running(coordinator.next_surface)
    prestaged = zoom.state_for(coordinator.next_surface)

    manual_loader.complete_all()
    assert coordinator.state == TransitionState.ANIMATING
    # Not restarted at ANIMATING entry
    assert zoom.state_for(coordinator.next_surface) is prestaged


def test_sawtooth_zoom_waits_for_animating(qtbot, surfaces, manual_loader, zoom):
    coordinator, _ = make_coordinator(surfaces, manual_loader, zoom)
    settings = Settings(zoom_type=ZoomType.SAWTOOTH)
    coordinator.request(photo("a"), 0, settings)
    manual_loader.complete_all()

    coordinator.request(photo("b"), 1, settings)
    assert not zoom.is_running(coordinator.next_surface)
    manual_loader.complete_all()
    assert zoom.is_running(coordinator.next_surface)


def test_unanimated_request_reshows_without_animation(qtbot, surfaces, loader, zoom, plan_spy):
    coordinator, _ = make_coordinator(surfaces, loader, zoom)
    coordinator.request(photo("a"), 0, Settings())
    coordinator.request(photo("a"), 0, Settings(), animated=False)
    assert coordinator.is_idle
    assert plan_spy == []


def test_shutdown_makes_late_completions_noops(qtbot, surfaces, manual_loader, zoom):
    coordinator, states = make_coordinator(surfaces, manual_loader, zoom)
    done = []
    coordinator.request(photo("a"), 0, Settings(), on_complete=lambda: done.append(True))
    coordinator.shutdown()
    manual_loader.complete_all()

    assert done == []
    assert coordinator.is_idle
    assert not coordinator.current_surface.has_image()
    assert not coordinator.request(photo("b"), 1, Settings())


def test_shutdown_mid_animation_skips_completion(qtbot, surfaces, loader, zoom):
    coordinator, _ = make_coordinator(surfaces, loader, zoom)
    coordinator.request(photo("a"), 0, Settings())
    done = []
    coordinator.request(photo("b"), 1, Settings(), on_complete=lambda: done.append(True))
    assert coordinator.is_animating
    coordinator.shutdown()
    qtbot.wait(NORMAL_DURATION_MS + 200)
    assert done == []
