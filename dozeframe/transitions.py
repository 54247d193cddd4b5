"""Two-surface transition state machine"""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple
from PyQt6.QtCore import QObject, QParallelAnimationGroup, pyqtSignal

from dozeframe.logger import debug, info, warning
from dozeframe.models import PhotoRecord, Settings, SwipeDirection, TransitionState, ZoomType
from dozeframe.tasks import TaskTracker
from dozeframe.zoom import ZoomScheduler
from utils.animation_utils import create_transition_animation, create_transition_plan
from utils.image_utils import create_placeholder_image

NORMAL_DURATION_MS = 500
FAST_DURATION_MS = 250


@dataclass
class _Run:
    """Everything one request needs until it settles"""
    record: PhotoRecord
    photo_index: int
    settings: Settings
    fast: bool
    direction: Optional[SwipeDirection]
    on_complete: Optional[Callable[[], None]]
    animated: bool


class TransitionCoordinator(QObject):
    """Swaps photos between two fixed surface slots.

    IDLE -> PREPARING (decode) -> ANIMATING -> SETTLING -> IDLE. Requests
    made outside IDLE are dropped, never queued.
    """

    state_changed = pyqtSignal(object)  # TransitionState
    transition_finished = pyqtSignal(int)  # photo index now showing

    def __init__(self, surfaces, loader, zoom: ZoomScheduler, parent=None):
        super().__init__(parent)
        self._slots: Tuple = tuple(surfaces)
        if len(self._slots) != 2:
            raise ValueError("TransitionCoordinator needs exactly two surfaces")
        self._current_slot = 0
        self.loader = loader
        self.zoom = zoom
        self.state = TransitionState.IDLE
        self._run: Optional[_Run] = None
        self._group: Optional[QParallelAnimationGroup] = None
        self._tasks = TaskTracker()
        self._closed = False

    @property
    def current_slot(self) -> int:
        return self._current_slot

    @property
    def current_surface(self):
        return self._slots[self._current_slot]

    @property
    def next_surface(self):
        return self._slots[1 - self._current_slot]

    @property
    def is_idle(self) -> bool:
        return self.state == TransitionState.IDLE

    @property
    def is_animating(self) -> bool:
        return self.state == TransitionState.ANIMATING

    def _set_state(self, state: TransitionState):
        self.state = state
        self.state_changed.emit(state)

    def _target_size(self) -> Tuple[int, int]:
        size = self.current_surface.size()
        return max(1, size.width()), max(1, size.height())

    def request(self, record: PhotoRecord, photo_index: int, settings: Settings, fast: bool = False,
                direction: Optional[SwipeDirection] = None,
                on_complete: Optional[Callable[[], None]] = None, animated: bool = True) -> bool:
        """Start a transition to record; False if one is already in flight"""
        if self._closed:
            debug(f"Coordinator shut down, ignoring request for {record.id}")
            return False
        if self.state != TransitionState.IDLE:
            debug(f"InvalidTransitionRequest: busy in {self.state.value}, dropping {record.id}")
            return False

        first = not self.current_surface.has_image()
        self._run = _Run(record, photo_index, settings, fast, direction, on_complete,
                         animated and not first)
        self._set_state(TransitionState.PREPARING)

        incoming = self.next_surface
        if self._run.animated:
            self.zoom.set_initial_scale(incoming, photo_index, settings)
            if settings.zoom_type == ZoomType.SINE_WAVE:
                self.zoom.start(incoming, photo_index, settings, is_pre_stage=True)

        task = self._tasks.track(f"decode {record.id}", self._on_decoded)
        self.loader.decode(record, self._target_size(), task)
        return True

    def _on_decoded(self, decoded, error):
        if decoded is None:
            warning(f"Showing placeholder for {self._run.record.id}: {error}")
            decoded = create_placeholder_image(self._target_size())
        self.next_surface.set_image(decoded)

        if self._run.animated:
            self._animate()
        else:
            self._settle()

    def _animate(self):
        run = self._run
        outgoing, incoming = self.current_surface, self.next_surface
        self._set_state(TransitionState.ANIMATING)

        if run.settings.zoom_type == ZoomType.SAWTOOTH or not self.zoom.is_running(incoming):
            self.zoom.start(incoming, run.photo_index, run.settings)

        transition_type = run.direction.transition if run.direction else run.settings.transition_type
        duration = FAST_DURATION_MS if run.fast else NORMAL_DURATION_MS
        width, height = self._target_size()
        plan = create_transition_plan(transition_type, width, height, duration)

        self._group = create_transition_animation(plan, outgoing, incoming, self)
        task = self._tasks.track(f"{transition_type.value} animation", self._settle)
        self._group.finished.connect(task.resolve)
        debug(f"{transition_type.value} to #{run.photo_index} over {duration}ms")
        self._group.start()

    def _settle(self):
        run = self._run
        self._set_state(TransitionState.SETTLING)

        self._current_slot = 1 - self._current_slot
        inactive = self.next_surface
        self.zoom.cancel(inactive)
        inactive.reset_visual_state(0.0)
        self.current_surface.reset_visual_state(1.0)

        if self._group is not None:
            self._group.deleteLater()
            self._group = None

        if not run.animated:
            self.zoom.set_initial_scale(self.current_surface, run.photo_index, run.settings)
            self.zoom.start(self.current_surface, run.photo_index, run.settings)

        self._run = None
        self._set_state(TransitionState.IDLE)
        info(f"Showing #{run.photo_index}: {run.record.id}")
        self.transition_finished.emit(run.photo_index)
        if run.on_complete is not None:
            run.on_complete()

    def reopen(self):
        """Accept requests again with both slots empty, so the next one is a first photo"""
        self.shutdown()
        self._closed = False
        self._current_slot = 0
        for surface in self._slots:
            self.zoom.cancel(surface)
            surface.clear()
            surface.reset_visual_state(0.0)
            surface.set_scale(1.0)

    def shutdown(self):
        """Abandon any in-flight work; its completions become no-ops"""
        self._closed = True
        cancelled = self._tasks.cancel_all()
        if self._group is not None:
            self._group.stop()
            self._group.deleteLater()
            self._group = None
        self._run = None
        if self.state != TransitionState.IDLE:
            self._set_state(TransitionState.IDLE)
        debug(f"Transition coordinator shut down ({cancelled} pending tasks cancelled)")
