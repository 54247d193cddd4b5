"""Battery gate: may the slideshow start or keep advancing?"""

from dataclasses import dataclass
from typing import Callable, Optional

import psutil
from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from dozeframe.errors import GateFailed, GateReason
from dozeframe.logger import debug, info, warning
from dozeframe.models import BatteryMode, Settings

MIN_BATTERY_LEVEL = 20  # percent, must be strictly above
BATTERY_POLL_INTERVAL_MS = 30000


@dataclass(frozen=True)
class BatteryStatus:
    level: int = 100
    charging: bool = True


def can_advance(battery_mode: BatteryMode, battery_level: int, is_charging: bool) -> bool:
    if is_charging:
        return True
    if battery_mode == BatteryMode.CHARGING_ONLY:
        return False
    return battery_level > MIN_BATTERY_LEVEL


def read_battery() -> BatteryStatus:
    """Current battery state; machines without a battery count as plugged in"""
    try:
        battery = psutil.sensors_battery()
    except (AttributeError, NotImplementedError, OSError) as e:
        debug(f"Battery status unavailable: {e}")
        battery = None
    if battery is None:
        return BatteryStatus()
    return BatteryStatus(level=int(round(battery.percent)), charging=bool(battery.power_plugged))


class PowerGate:
    def __init__(self, battery_source: Callable[[], BatteryStatus] = read_battery):
        self.battery_source = battery_source
        self.last_status = BatteryStatus()

    def status(self) -> BatteryStatus:
        self.last_status = self.battery_source()
        return self.last_status

    def check(self, settings: Settings) -> Optional[GateReason]:
        """None when playback may continue, otherwise why not"""
        status = self.status()
        if can_advance(settings.battery_mode, status.level, status.charging):
            return None
        if settings.battery_mode == BatteryMode.CHARGING_ONLY:
            return GateReason.UNPLUGGED
        return GateReason.BATTERY_LOW

    def ensure(self, settings: Settings):
        """Raise GateFailed if the gate denies playback"""
        reason = self.check(settings)
        if reason is not None:
            warning(f"Battery gate failed: {reason.value} at {self.last_status.level}%")
            raise GateFailed(reason, self.last_status.level)


class BatteryMonitor(QObject):
    """Polls the battery and reports changes"""

    power_changed = pyqtSignal(object)  # BatteryStatus

    def __init__(self, battery_source: Callable[[], BatteryStatus] = read_battery,
                 interval_ms: int = BATTERY_POLL_INTERVAL_MS, parent=None):
        super().__init__(parent)
        self.battery_source = battery_source
        self.last_status: Optional[BatteryStatus] = None
        self.timer = QTimer(self)
        self.timer.setInterval(interval_ms)
        self.timer.timeout.connect(self.poll)

    def start(self):
        self.last_status = self.battery_source()
        self.timer.start()

    def stop(self):
        self.timer.stop()

    def poll(self):
        status = self.battery_source()
        if status != self.last_status:
            info(f"Power changed: {status.level}%{' charging' if status.charging else ''}")
            self.last_status = status
            self.power_changed.emit(status)
