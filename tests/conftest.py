"""pytest configuration and shared fixtures."""

import os
import random

# Must be set before the QApplication is created
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtCore import QSettings
from PyQt6.QtGui import QImage, QColor

from dozeframe.errors import DecodeError
from dozeframe.models import ImageOrientation, PhotoRecord, Settings
from dozeframe.power import BatteryStatus, PowerGate
from dozeframe.settings import SettingsStore
from dozeframe.surfaces import ImageSurface
from utils.image_utils import DecodedImage


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: marks tests that wait on real animations")


class FakeLoader:
    """Stands in for ImageLoader; resolves decodes immediately or on demand"""

    def __init__(self, auto: bool = True):
        self.auto = auto
        self.failing = set()
        self.pending = []
        self.requests = []
        self.shutdowns = 0

    def decode(self, record, target_size, task):
        self.requests.append((record, target_size))
        if self.auto:
            self._resolve(record, task)
        else:
            self.pending.append((record, task))

    def _resolve(self, record, task):
        if record.id in self.failing:
            task.resolve(None, DecodeError(f"cannot decode {record.id}"))
            return
        image = QImage(16, 12, QImage.Format.Format_RGB32)
        image.fill(QColor(200, 100, 50))
        task.resolve(DecodedImage(image=image), None)

    def complete_all(self):
        pending, self.pending = self.pending, []
        for record, task in pending:
            self._resolve(record, task)

    def shutdown(self):
        self.shutdowns += 1


class FakeBattery:
    def __init__(self, level: int = 100, charging: bool = True):
        self.status = BatteryStatus(level, charging)

    def set(self, level: int, charging: bool):
        self.status = BatteryStatus(level, charging)

    def __call__(self) -> BatteryStatus:
        return self.status


@pytest.fixture
def loader():
    return FakeLoader()


@pytest.fixture
def manual_loader():
    return FakeLoader(auto=False)


@pytest.fixture
def battery():
    return FakeBattery()


@pytest.fixture
def gate(battery):
    return PowerGate(battery_source=battery)


@pytest.fixture
def settings_store(tmp_path):
    qsettings = QSettings(str(tmp_path / "settings.ini"), QSettings.Format.IniFormat)
    return SettingsStore(qsettings)


@pytest.fixture
def make_settings():
    def _make(**overrides) -> Settings:
        return Settings(**overrides)
    return _make


@pytest.fixture
def surfaces(qtbot):
    pair = (ImageSurface("slot 0"), ImageSurface("slot 1"))
    for surface in pair:
        qtbot.addWidget(surface)
        surface.resize(400, 300)
        surface.reset_visual_state(0.0)
    return pair


@pytest.fixture
def rng():
    return random.Random(1234)


def photo(name: str, orientation: ImageOrientation = ImageOrientation.LANDSCAPE) -> PhotoRecord:
    return PhotoRecord(id=name, orientation=orientation,
                       aspect_ratio={ImageOrientation.LANDSCAPE: 1.5,
                                     ImageOrientation.PORTRAIT: 0.66,
                                     ImageOrientation.SQUARE: 1.0}[orientation])
