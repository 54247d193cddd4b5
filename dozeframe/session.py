"""Host-facing facade that builds and tears down one slideshow session"""

import dataclasses
import random
import time
from typing import Callable, Iterable, Optional
from PyQt6.QtCore import QObject, pyqtSignal

from dozeframe.catalog import timestamp_for
from dozeframe.errors import EmptyPlaylist, GateFailed, SlideshowError
from dozeframe.gestures import GestureRouter
from dozeframe.loader import ImageLoader
from dozeframe.logger import debug, error, info
from dozeframe.models import ImageOrientation, PhotoRecord, RunState, Settings
from dozeframe.playlist import PlaylistEngine
from dozeframe.power import PowerGate
from dozeframe.scheduler import SlideshowScheduler
from dozeframe.settings import MAX_HINT_SESSIONS, SettingsStore
from dozeframe.transitions import TransitionCoordinator
from dozeframe.zoom import ZoomScheduler

EXIT_GRACE_SECONDS = 5.0
MIN_BRIGHTNESS = 0.1
MAX_BRIGHTNESS = 1.0


class SlideshowSession(QObject):
    """Wires playlist, zoom, transitions, scheduler and gestures together.

    end_session() cancels every timer, animation and pending decode and may
    be called any number of times; start_session() can then run again.
    """

    session_ended = pyqtSignal(object)  # None, EmptyPlaylist or GateFailed
    brightness_changed = pyqtSignal(float)

    def __init__(self, surfaces, store: SettingsStore, loader=None, gate: Optional[PowerGate] = None,
                 feedback=None, clock: Callable[[], float] = time.monotonic,
                 rng: Optional[random.Random] = None, parent=None):
        super().__init__(parent)
        self.store = store
        self.clock = clock
        self.zoom = ZoomScheduler(self)
        self.loader = loader if loader is not None else ImageLoader(parent=self)
        self.coordinator = TransitionCoordinator(surfaces, self.loader, self.zoom, self)
        self.playlist = PlaylistEngine(timestamp_for, rng)
        self.gate = gate or PowerGate()
        self.scheduler = SlideshowScheduler(self.playlist, self.coordinator, self.zoom, self.gate,
                                            self.store.load, self)
        self.gestures = GestureRouter(feedback=feedback, parent=self)

        self.gestures.command.connect(self.scheduler.handle_command)
        self.scheduler.session_failed.connect(self._on_session_failed)
        self.scheduler.exit_requested.connect(self.end_session)
        self.scheduler.brightness_requested.connect(self.adjust_brightness)
        self.scheduler.state_changed.connect(self._on_run_state_changed)

        self.active = False
        self.show_hints = False
        self._started_at: Optional[float] = None

    def start_session(self, catalog: Iterable[PhotoRecord], settings: Optional[Settings] = None,
                      device_orientation: ImageOrientation = ImageOrientation.LANDSCAPE):
        """Load the playlist and show the first photo.

        Raises EmptyPlaylist or GateFailed; the session is then not active.
        A session may be started again after end_session().
        """
        settings = settings or self.store.load()
        if not self.active:
            # A previous end_session() shut the coordinator down
            self.coordinator.reopen()
        self.playlist.load(catalog, settings, device_orientation)
        try:
            self.scheduler.start(settings)
        except (EmptyPlaylist, GateFailed) as e:
            error(f"Cannot start slideshow: {e}")
            raise

        self.active = True
        self._started_at = self.clock()
        self.show_hints = self.store.hint_count() < MAX_HINT_SESSIONS
        if self.show_hints:
            self.store.record_hint_shown()

    def end_session(self, reason: Optional[SlideshowError] = None):
        if not self.active:
            return
        self.active = False
        self.scheduler.stop()
        self.coordinator.shutdown()
        self.zoom.cleanup()
        self.loader.shutdown()
        self.gestures.reset()
        info(f"Session ended{f': {reason}' if reason else ''}")
        self.session_ended.emit(reason)

    def _on_session_failed(self, reason: SlideshowError):
        self.end_session(reason)

    def _on_run_state_changed(self, state: RunState):
        self.gestures.set_paused(state == RunState.PAUSED)

    def on_orientation_changed(self, orientation: ImageOrientation):
        if self.active:
            self.scheduler.on_orientation_changed(orientation)

    def on_power_changed(self, status=None):
        if self.active:
            self.scheduler.on_power_changed()

    def on_external_exit_requested(self) -> bool:
        """End the session unless it only just started; True if it ended"""
        if not self.active:
            return False
        if self._started_at is not None and self.clock() - self._started_at < EXIT_GRACE_SECONDS:
            debug("Ignoring exit request during the start grace period")
            return False
        self.end_session()
        return True

    def adjust_brightness(self, delta: float) -> float:
        """Apply a brightness change, persist it and announce the new value"""
        settings = self.store.load()
        brightness = max(MIN_BRIGHTNESS, min(MAX_BRIGHTNESS, settings.brightness + delta))
        if brightness != settings.brightness:
            self.store.save(dataclasses.replace(settings, brightness=brightness))
            debug(f"Brightness saved: {int(brightness * 100)}%")
        self.brightness_changed.emit(brightness)
        return brightness
