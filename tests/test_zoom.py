import pytest
from PyQt6.QtCore import QEasingCurve

from dozeframe.models import Settings, ZoomType
from dozeframe.zoom import ZoomScheduler, initial_scale, scales_for, zoom_duration


@pytest.mark.parametrize("slide, expected", [(1000, 1000), (15000, 15000), (60000, 15000)])
def test_zoom_duration_is_capped(slide, expected):
    assert zoom_duration(Settings(slide_duration_ms=slide)) == expected


def test_sine_wave_initial_scales_alternate():
    settings = Settings(zoom_type=ZoomType.SINE_WAVE, zoom_amount=3)
    assert [initial_scale(i, settings) for i in range(4)] == pytest.approx([1.0, 1.03, 1.0, 1.03])


def test_sawtooth_always_zooms_in():
    settings = Settings(zoom_type=ZoomType.SAWTOOTH, zoom_amount=5)
    for i in range(3):
        assert scales_for(i, settings) == pytest.approx((1.0, 1.05))


def test_sine_wave_odd_photos_zoom_out():
    settings = Settings(zoom_type=ZoomType.SINE_WAVE, zoom_amount=2)
    assert scales_for(0, settings) == pytest.approx((1.0, 1.02))
    assert scales_for(1, settings) == pytest.approx((1.02, 1.0))


def test_set_initial_scale_on_surface(qtbot, surfaces):
    zoom = ZoomScheduler()
    settings = Settings(zoom_type=ZoomType.SINE_WAVE, zoom_amount=4)
    surface = surfaces[0]
    zoom.set_initial_scale(surface, 1, settings)
    assert surface.scale() == pytest.approx(1.04)
    zoom.set_initial_scale(surface, 2, settings)
    assert surface.scale() == 1.0


def test_start_records_state(qtbot, surfaces):
    zoom = ZoomScheduler()
    settings = Settings(slide_duration_ms=60000, zoom_amount=3)
    assert zoom.start(surfaces[0], 0, settings)
    state = zoom.state_for(surfaces[0])
    assert state.running
    assert state.end_scale == pytest.approx(1.03)
    assert state.capped_duration_ms == 15000
    zoom.cleanup()


def test_start_replaces_running_zoom_on_same_surface(qtbot, surfaces):
    zoom = ZoomScheduler()
    settings = Settings()
    zoom.start(surfaces[0], 0, settings)
    first = zoom.state_for(surfaces[0])
    zoom.start(surfaces[0], 1, settings)
    assert not first.running
    assert zoom.is_running(surfaces[0])
    zoom.cleanup()


def test_paused_scheduler_refuses_new_starts_but_keeps_running_zoom(qtbot, surfaces):
    zoom = ZoomScheduler()
    settings = Settings()
    zoom.start(surfaces[0], 0, settings)
    zoom.pause()
    assert not zoom.start(surfaces[1], 0, settings)
    assert zoom.is_running(surfaces[0])
    assert not zoom.is_running(surfaces[1])
    zoom.resume()
    assert zoom.start(surfaces[1], 0, settings)
    zoom.cleanup()


def test_cleanup_cancels_everything_and_clears_pause(qtbot, surfaces):
    zoom = ZoomScheduler()
    zoom.start(surfaces[0], 0, Settings())
    zoom.start(surfaces[1], 1, Settings())
    zoom.pause()
    zoom.cleanup()
    assert not zoom.is_running(surfaces[0])
    assert not zoom.is_running(surfaces[1])
    assert not zoom.paused


def test_zoom_reaches_end_scale(qtbot, surfaces):
    zoom = ZoomScheduler()
    settings = Settings(slide_duration_ms=1000, zoom_amount=5)
    surface = surfaces[0]
    zoom.set_initial_scale(surface, 0, settings)
    with qtbot.waitSignal(zoom.zoom_finished, timeout=3000):
        zoom.start(surface, 0, settings)
    assert surface.scale() == pytest.approx(1.05)
    assert not zoom.is_running(surface)


def test_zoom_eases_in_and_out(qtbot, surfaces):
    zoom = ZoomScheduler()
    zoom.start(surfaces[0], 0, Settings())
    animation = zoom._animations[surfaces[0]]
    assert animation.easingCurve().type() == QEasingCurve.Type.InOutSine
    zoom.cleanup()
