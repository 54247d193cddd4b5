from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Tuple
from PyQt6.QtCore import QEasingCurve, QParallelAnimationGroup, QVariantAnimation

from dozeframe.models import TransitionType


class Easing(Enum):
    LINEAR = "linear"
    ACCELERATE_DECELERATE = "accelerate_decelerate"


EASING_CURVES = {
    Easing.LINEAR: QEasingCurve.Type.Linear,
    # Cosine ease in and out, the classic accelerate/decelerate curve
    Easing.ACCELERATE_DECELERATE: QEasingCurve.Type.InOutSine,
}

OUTGOING = "outgoing"
INCOMING = "incoming"


def create_value_animation(setter: Callable[[float], None], start: float, end: float,
                           duration: int, easing: Easing = Easing.LINEAR,
                           parent=None) -> QVariantAnimation:
    """Animate a float from start to end, feeding every step into setter"""
    animation = QVariantAnimation(parent)
    animation.setDuration(max(0, int(duration)))
    animation.setStartValue(float(start))
    animation.setEndValue(float(end))
    animation.setEasingCurve(EASING_CURVES[easing])
    animation.valueChanged.connect(lambda value: setter(float(value)))
    return animation


@dataclass(frozen=True)
class SurfaceTrack:
    """One animated property on either the outgoing or the incoming surface"""
    role: str
    prop: str
    start: float
    end: float
    easing: Easing = Easing.LINEAR


@dataclass(frozen=True)
class TransitionPlan:
    transition_type: TransitionType
    duration: int
    tracks: Tuple[SurfaceTrack, ...]

    def tracks_for(self, role: str) -> Tuple[SurfaceTrack, ...]:
        return tuple(track for track in self.tracks if track.role == role)

    def staging(self, role: str) -> Dict[str, float]:
        """Property values a surface must hold before the animation starts"""
        values = {'opacity': 1.0, 'translation_x': 0.0, 'translation_y': 0.0}
        for track in self.tracks_for(role):
            values[track.prop] = track.start
        return values


def create_fade_plan(width: int, height: int, duration: int) -> TransitionPlan:
    """Cross fade: outgoing 1 -> 0 while incoming 0 -> 1, linear"""
    return TransitionPlan(TransitionType.FADE, duration, (
        SurfaceTrack(OUTGOING, 'opacity', 1.0, 0.0),
        SurfaceTrack(INCOMING, 'opacity', 0.0, 1.0),
    ))


def _slide_plan(transition_type: TransitionType, prop: str, distance: float,
                duration: int) -> TransitionPlan:
    # Outgoing leaves towards -distance, incoming arrives from +distance
    return TransitionPlan(transition_type, duration, (
        SurfaceTrack(OUTGOING, prop, 0.0, -distance, Easing.ACCELERATE_DECELERATE),
        SurfaceTrack(INCOMING, prop, distance, 0.0, Easing.ACCELERATE_DECELERATE),
    ))


def create_slide_left_plan(width: int, height: int, duration: int) -> TransitionPlan:
    return _slide_plan(TransitionType.SLIDE_LEFT, 'translation_x', float(width), duration)


def create_slide_right_plan(width: int, height: int, duration: int) -> TransitionPlan:
    return _slide_plan(TransitionType.SLIDE_RIGHT, 'translation_x', -float(width), duration)


def create_slide_up_plan(width: int, height: int, duration: int) -> TransitionPlan:
    return _slide_plan(TransitionType.SLIDE_UP, 'translation_y', float(height), duration)


def create_slide_down_plan(width: int, height: int, duration: int) -> TransitionPlan:
    return _slide_plan(TransitionType.SLIDE_DOWN, 'translation_y', -float(height), duration)


TRANSITION_PLANS: Dict[TransitionType, Callable[[int, int, int], TransitionPlan]] = {
    TransitionType.FADE: create_fade_plan,
    TransitionType.SLIDE_LEFT: create_slide_left_plan,
    TransitionType.SLIDE_RIGHT: create_slide_right_plan,
    TransitionType.SLIDE_UP: create_slide_up_plan,
    TransitionType.SLIDE_DOWN: create_slide_down_plan,
}


def create_transition_plan(transition_type: TransitionType, width: int, height: int,
                           duration: int) -> TransitionPlan:
    """Look up the plan function for a style and build its plan"""
    return TRANSITION_PLANS[transition_type](width, height, duration)


def create_transition_animation(plan: TransitionPlan, outgoing, incoming,
                                parent=None) -> QParallelAnimationGroup:
    """Stage both surfaces and group their animations so they run together"""
    surfaces = {OUTGOING: outgoing, INCOMING: incoming}
    group = QParallelAnimationGroup(parent)

    for role, surface in surfaces.items():
        for prop, value in plan.staging(role).items():
            surface.set_visual(prop, value)

    for track in plan.tracks:
        surface = surfaces[track.role]
        group.addAnimation(surface.animate(track.prop, track.start, track.end, plan.duration, track.easing))
    return group
