"""Auto-advance clock and the single entry point for playback commands"""

from typing import Callable, Optional
from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from dozeframe.errors import EmptyPlaylist, GateFailed, SlideshowError
from dozeframe.logger import debug, info, warning
from dozeframe.models import (CommandKind, GestureCommand, ImageOrientation, RunState, Settings,
                              SwipeDirection)
from dozeframe.playlist import PlaylistEngine
from dozeframe.power import PowerGate
from dozeframe.transitions import TransitionCoordinator
from dozeframe.zoom import ZoomScheduler


class SlideshowScheduler(QObject):
    """STOPPED -> RUNNING <-> PAUSED -> STOPPED around one single-shot timer.

    The timer is only armed from a transition's completion callback while
    RUNNING, so there is never more than one advance pending.
    """

    state_changed = pyqtSignal(object)  # RunState
    session_failed = pyqtSignal(object)  # EmptyPlaylist or GateFailed
    exit_requested = pyqtSignal()
    brightness_requested = pyqtSignal(float)

    def __init__(self, playlist: PlaylistEngine, coordinator: TransitionCoordinator,
                 zoom: ZoomScheduler, gate: PowerGate, settings_source: Callable[[], Settings],
                 parent=None):
        super().__init__(parent)
        self.playlist = playlist
        self.coordinator = coordinator
        self.zoom = zoom
        self.gate = gate
        self.settings_source = settings_source
        self.state = RunState.STOPPED
        # Set when an orientation change arrived mid-transition
        self._reshow_pending = False

        self.timer = QTimer(self)
        self.timer.setSingleShot(True)
        self.timer.timeout.connect(self._on_advance_due)

    @property
    def is_running(self) -> bool:
        return self.state == RunState.RUNNING

    @property
    def is_paused(self) -> bool:
        return self.state == RunState.PAUSED

    def _set_state(self, state: RunState):
        if self.state != state:
            debug(f"Scheduler {self.state.value} -> {state.value}")
            self.state = state
            self.state_changed.emit(state)

    def start(self, settings: Optional[Settings] = None):
        """Show the first photo without animation; raises EmptyPlaylist or GateFailed"""
        settings = settings or self.settings_source()
        if self.playlist.state.is_empty:
            raise EmptyPlaylist()
        self.gate.ensure(settings)

        self.zoom.resume()
        self._set_state(RunState.RUNNING)
        info(f"Slideshow started with {self.playlist.size} photos, "
             f"{settings.slide_duration_ms}ms per slide")
        self.coordinator.request(self.playlist.current(), self.playlist.index, settings,
                                 animated=False, on_complete=self._on_transition_complete)

    def _arm(self, settings: Optional[Settings] = None):
        settings = settings or self.settings_source()
        self.timer.stop()
        self.timer.start(settings.slide_duration_ms)

    def _on_transition_complete(self):
        if self._reshow_pending and self.state != RunState.STOPPED:
            self._reshow_pending = False
            if self._reshow(self.settings_source()):
                return
        if self.state == RunState.RUNNING:
            self._arm()

    def _reshow(self, settings: Settings) -> bool:
        """Show the playlist's current photo again without animation"""
        return self.coordinator.request(self.playlist.current(), self.playlist.index, settings,
                                        animated=False, on_complete=self._on_transition_complete)

    def _on_advance_due(self):
        self.timer.stop()
        if self.state != RunState.RUNNING:
            return
        if not self.coordinator.is_idle:
            # The in-flight transition re-arms on completion
            debug("Advance due while a transition is in flight, skipping")
            return

        settings = self.settings_source()
        try:
            self.gate.ensure(settings)
        except GateFailed as e:
            self._fail(e)
            return

        self.playlist.next()
        self.coordinator.request(self.playlist.current(), self.playlist.index, settings,
                                 on_complete=self._on_transition_complete)

    def navigate(self, forward: bool, direction: Optional[SwipeDirection] = None) -> bool:
        """Fast transition to the next/previous photo; dropped while one is in flight"""
        if self.state == RunState.STOPPED:
            return False
        if not self.coordinator.is_idle:
            debug(f"Dropping {'next' if forward else 'previous'}: transition in flight")
            return False

        settings = self.settings_source()
        try:
            self.gate.ensure(settings)
        except GateFailed as e:
            self._fail(e)
            return False

        self.timer.stop()
        if forward:
            self.playlist.next()
        else:
            self.playlist.previous()
        return self.coordinator.request(self.playlist.current(), self.playlist.index, settings,
                                        fast=True, direction=direction,
                                        on_complete=self._on_transition_complete)

    def toggle_pause(self):
        if self.state == RunState.RUNNING:
            self.timer.stop()
            self.zoom.pause()
            self._set_state(RunState.PAUSED)
            info("Slideshow paused")
        elif self.state == RunState.PAUSED:
            self.zoom.resume()
            self._set_state(RunState.RUNNING)
            info("Slideshow resumed")
            if self.coordinator.is_idle:
                settings = self.settings_source()
                self._arm(settings)
                self.zoom.start(self.coordinator.current_surface, self.playlist.index, settings)

    def on_orientation_changed(self, orientation: ImageOrientation):
        settings = self.settings_source()
        state = self.playlist.on_orientation_changed(settings, orientation)
        if self.state == RunState.STOPPED:
            return
        if state.is_empty:
            warning(f"No photos left for {orientation.value} orientation, stopping")
            self._fail(EmptyPlaylist(f"no photos for {orientation.value} orientation"))
            return

        self.timer.stop()
        if not self._reshow(settings):
            debug("Transition in flight, re-showing once it settles")
            self._reshow_pending = True

    def on_power_changed(self):
        if self.state == RunState.STOPPED:
            return
        try:
            self.gate.ensure(self.settings_source())
        except GateFailed as e:
            self._fail(e)

    def _fail(self, error: SlideshowError):
        self.stop()
        self.session_failed.emit(error)

    def stop(self):
        self.timer.stop()
        self._reshow_pending = False
        self._set_state(RunState.STOPPED)

    def handle_command(self, command: GestureCommand):
        if command.kind == CommandKind.PAUSE_TOGGLE:
            self.toggle_pause()
        elif command.kind == CommandKind.EXIT:
            self.exit_requested.emit()
        elif command.kind == CommandKind.NEXT:
            self.navigate(True, command.direction)
        elif command.kind == CommandKind.PREVIOUS:
            self.navigate(False, command.direction)
        elif command.kind == CommandKind.BRIGHTNESS:
            self.brightness_requested.emit(command.delta)
