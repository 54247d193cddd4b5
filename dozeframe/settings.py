"""QSettings-backed persistence for slideshow settings"""

import json
from enum import Enum
from typing import Optional, Type, TypeVar

from PyQt6.QtCore import QSettings

from dozeframe.logger import warning
from dozeframe.models import (BatteryMode, DisplayMode, MAX_ZOOM_AMOUNT, MIN_SLIDE_DURATION_MS,
                              OrderType, Settings, TransitionType, ZoomType)
from dozeframe.translations import SETTINGS_APP, SETTINGS_ORG

E = TypeVar('E', bound=Enum)

MAX_HINT_SESSIONS = 3


def _enum_from_name(enum_cls: Type[E], name, default: E) -> E:
    """Look up an enum member by name, falling back to default for stale values"""
    try:
        return enum_cls[str(name)]
    except KeyError:
        warning(f"Unknown {enum_cls.__name__} '{name}' in settings, using {default.name}")
        return default


def _clamp(value, low, high):
    return max(low, min(high, value))


class SettingsStore:
    """Loads and saves Settings; callers re-load at every decision point"""

    def __init__(self, qsettings: Optional[QSettings] = None):
        self.settings = qsettings if qsettings is not None else QSettings(SETTINGS_ORG, SETTINGS_APP)

    def load(self) -> Settings:
        defaults = Settings()
        s = self.settings

        try:
            duration = int(s.value('slide_duration_ms', defaults.slide_duration_ms))
        except (TypeError, ValueError):
            duration = defaults.slide_duration_ms
        try:
            zoom_amount = int(s.value('zoom_amount', defaults.zoom_amount))
        except (TypeError, ValueError):
            zoom_amount = defaults.zoom_amount
        try:
            brightness = float(s.value('brightness', defaults.brightness))
        except (TypeError, ValueError):
            brightness = defaults.brightness
        try:
            sensitivity = float(s.value('square_sensitivity', defaults.square_sensitivity))
        except (TypeError, ValueError):
            sensitivity = defaults.square_sensitivity

        try:
            photo_dirs = tuple(json.loads(s.value('photo_dirs', '[]')))
        except (TypeError, ValueError):
            photo_dirs = ()

        return Settings(
            slide_duration_ms=max(MIN_SLIDE_DURATION_MS, duration),
            order_type=_enum_from_name(OrderType, s.value('order_type', defaults.order_type.name),
                                       defaults.order_type),
            transition_type=_enum_from_name(TransitionType,
                                            s.value('transition_type', defaults.transition_type.name),
                                            defaults.transition_type),
            zoom_type=_enum_from_name(ZoomType, s.value('zoom_type', defaults.zoom_type.name),
                                      defaults.zoom_type),
            zoom_amount=_clamp(zoom_amount, 0, MAX_ZOOM_AMOUNT),
            orientation_filtering=s.value('orientation_filtering', defaults.orientation_filtering,
                                          type=bool),
            battery_mode=_enum_from_name(BatteryMode, s.value('battery_mode', defaults.battery_mode.name),
                                         defaults.battery_mode),
            brightness=_clamp(brightness, 0.0, 1.0),
            display_mode=_enum_from_name(DisplayMode, s.value('display_mode', defaults.display_mode.name),
                                         defaults.display_mode),
            square_sensitivity=_clamp(sensitivity, 0.5, 1.0),
            photo_dirs=photo_dirs,
            log_level=str(s.value('log_level', defaults.log_level)),
        )

    def save(self, settings: Settings):
        s = self.settings
        s.setValue('slide_duration_ms', int(settings.slide_duration_ms))
        s.setValue('order_type', settings.order_type.name)
        s.setValue('transition_type', settings.transition_type.name)
        s.setValue('zoom_type', settings.zoom_type.name)
        s.setValue('zoom_amount', int(settings.zoom_amount))
        s.setValue('orientation_filtering', bool(settings.orientation_filtering))
        s.setValue('battery_mode', settings.battery_mode.name)
        s.setValue('brightness', float(settings.brightness))
        s.setValue('display_mode', settings.display_mode.name)
        s.setValue('square_sensitivity', float(settings.square_sensitivity))
        s.setValue('photo_dirs', json.dumps(list(settings.photo_dirs)))
        s.setValue('log_level', settings.log_level)
        s.sync()

    def hint_count(self) -> int:
        """How many sessions already showed the gesture hints"""
        try:
            return int(self.settings.value('hint_count', 0))
        except (TypeError, ValueError):
            return 0

    def record_hint_shown(self):
        self.settings.setValue('hint_count', self.hint_count() + 1)
