"""Slow zoom ("Ken Burns") animation on the display surfaces"""

import time
from typing import Dict, Optional, Tuple
from PyQt6.QtCore import QObject, QVariantAnimation, pyqtSignal

from dozeframe.logger import debug
from dozeframe.models import Settings, ZoomState, ZoomType
from utils.animation_utils import Easing

MAX_ZOOM_DURATION_MS = 15000


def zoom_duration(settings: Settings) -> int:
    """Zoom runs for the slide duration, capped at 15 s"""
    return min(settings.slide_duration_ms, MAX_ZOOM_DURATION_MS)


def scales_for(photo_index: int, settings: Settings) -> Tuple[float, float]:
    """(start, end) scale; sine wave zooms out again on odd photos"""
    peak = settings.zoom_scale
    if settings.zoom_type == ZoomType.SINE_WAVE and photo_index % 2 == 1:
        return peak, 1.0
    return 1.0, peak


def initial_scale(photo_index: int, settings: Settings) -> float:
    return scales_for(photo_index, settings)[0]


class ZoomScheduler(QObject):
    """At most one zoom animation per surface; pause only blocks new starts"""

    zoom_finished = pyqtSignal(object)  # surface

    def __init__(self, parent=None):
        super().__init__(parent)
        self._animations: Dict[object, QVariantAnimation] = {}
        self._states: Dict[object, ZoomState] = {}
        self.paused = False

    def set_initial_scale(self, surface, photo_index: int, settings: Settings):
        self.cancel(surface)
        surface.set_scale(initial_scale(photo_index, settings))

    def start(self, surface, photo_index: int, settings: Settings, is_pre_stage: bool = False) -> bool:
        if self.paused:
            debug(f"Zoom paused, not starting on {surface}")
            return False
        self.cancel(surface)

        _, end_scale = scales_for(photo_index, settings)
        # Continue from wherever the surface currently is
        start_scale = surface.scale()
        duration = zoom_duration(settings)

        animation = surface.animate('scale', start_scale, end_scale, duration,
                                    Easing.ACCELERATE_DECELERATE)
        animation.finished.connect(lambda: self._on_finished(surface, animation))
        self._animations[surface] = animation
        self._states[surface] = ZoomState(running=True, start_scale=start_scale, end_scale=end_scale,
                                          started_at=time.monotonic(), capped_duration_ms=duration)
        animation.start()
        debug(f"Zoom {start_scale:.2f} -> {end_scale:.2f} over {duration}ms on {surface}"
              f"{' (pre-staged)' if is_pre_stage else ''}")
        return True

    def _on_finished(self, surface, animation: QVariantAnimation):
        if self._animations.get(surface) is not animation:
            return
        del self._animations[surface]
        state = self._states.pop(surface, None)
        if state is not None:
            state.running = False
        animation.deleteLater()
        debug(f"Zoom finished on {surface}")
        self.zoom_finished.emit(surface)

    def cancel(self, surface):
        animation = self._animations.pop(surface, None)
        state = self._states.pop(surface, None)
        if state is not None:
            state.running = False
        if animation is not None:
            # stop() does not emit finished
            animation.stop()
            animation.deleteLater()

    def is_running(self, surface) -> bool:
        return surface in self._animations

    def state_for(self, surface) -> Optional[ZoomState]:
        return self._states.get(surface)

    def pause(self):
        self.paused = True

    def resume(self):
        self.paused = False

    def cleanup(self):
        """Cancel every zoom and clear the pause flag; used at teardown"""
        for surface in list(self._animations):
            self.cancel(surface)
        self.paused = False
