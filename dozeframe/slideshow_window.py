from collections import deque
from typing import Optional
from PyQt6.QtWidgets import QWidget, QLabel, QVBoxLayout, QGraphicsOpacityEffect
from PyQt6.QtCore import Qt, QTimer, QPropertyAnimation, QEasingCurve, QRectF
from PyQt6.QtGui import QPainter, QColor, QPen, QFont, QPalette

from dozeframe.catalog import device_orientation
from dozeframe.errors import EmptyPlaylist, GateFailed, GateReason
from dozeframe.loader import ImageLoader
from dozeframe.logger import debug, info, warning
from dozeframe.models import (CatalogResult, CommandKind, DisplayMode, GestureCommand, RunState,
                              SwipeDirection)
from dozeframe.power import BatteryMonitor, PowerGate
from dozeframe.session import SlideshowSession
from dozeframe.settings import SettingsStore
from dozeframe.surfaces import ImageSurface
from dozeframe.translations import tr, format_tr

START_DELAY_MS = 500
FAILURE_MESSAGE_MS = 2000
HINT_DELAY_MS = 2000
HINT_VISIBLE_MS = 4000
INDICATOR_VISIBLE_MS = 1500
KEY_BRIGHTNESS_STEP = 0.1
VELOCITY_WINDOW_MS = 100
EXIT_FLASH_MS = 300


class BrightnessIndicator(QWidget):
    """Circular progress ring with the brightness percentage in the middle"""
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setFixedSize(120, 120)
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
        self._progress = 1.0

    def set_progress(self, progress: float):
        self._progress = max(0.0, min(1.0, progress))
        self.update()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        rect = QRectF(8, 8, self.width() - 16, self.height() - 16)

        painter.setBrush(QColor(0, 0, 0, 150))
        painter.setPen(Qt.PenStyle.NoPen)
        painter.drawEllipse(rect)

        pen = QPen(QColor(255, 255, 255, 60), 8)
        painter.setPen(pen)
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawEllipse(rect)

        pen.setColor(QColor(255, 255, 255))
        pen.setCapStyle(Qt.PenCapStyle.RoundCap)
        painter.setPen(pen)
        # Qt angles are in 1/16th of a degree, starting at 3 o'clock
        painter.drawArc(rect, 90 * 16, -int(360 * 16 * self._progress))

        painter.setFont(QFont("", 18, QFont.Weight.Bold))
        painter.drawText(rect, Qt.AlignmentFlag.AlignCenter,
                         format_tr('brightness_percent', int(round(self._progress * 100))))
        painter.end()


class SlideshowWindow(QWidget):
    """Full-screen host for one slideshow session"""
    def __init__(self, catalog: CatalogResult, store: Optional[SettingsStore] = None,
                 gate: Optional[PowerGate] = None, battery_monitor: Optional[BatteryMonitor] = None,
                 loader=None, parent=None):
        super().__init__(parent)
        self.catalog = catalog
        self.store = store or SettingsStore()
        self.settings = self.store.load()
        self.battery_monitor = battery_monitor or BatteryMonitor()
        self._start_scheduled = False
        self._closing = False
        self._orientation = None
        self._samples = deque(maxlen=16)
        self.init_ui()

        if loader is None:
            loader = ImageLoader(with_background=self.settings.display_mode == DisplayMode.BLUR_FILL, parent=self)
        self.session = SlideshowSession(self.surfaces, self.store, loader=loader, gate=gate,
                                        feedback=self, parent=self)
        self.session.session_ended.connect(self.on_session_ended)
        self.session.brightness_changed.connect(self.on_brightness_changed)
        self.session.scheduler.state_changed.connect(self.on_run_state_changed)
        self.battery_monitor.power_changed.connect(self.session.on_power_changed)

    def init_ui(self):
        self.setWindowTitle(tr('app_title'))
        palette = self.palette()
        palette.setColor(QPalette.ColorRole.Window, QColor(0, 0, 0))
        self.setPalette(palette)
        self.setAutoFillBackground(True)
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

        self.surfaces = (ImageSurface("slot 0", self), ImageSurface("slot 1", self))
        for surface in self.surfaces:
            surface.set_display_mode(self.settings.display_mode)
            surface.reset_visual_state(0.0)

        # Dims the photos to the chosen brightness
        self.dim_overlay = QWidget(self)
        self.dim_overlay.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
        self.apply_brightness(self.settings.brightness)

        self.flash_overlay = QWidget(self)
        self.flash_overlay.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
        self.flash_overlay.setStyleSheet("background-color: white;")
        self.flash_opacity = QGraphicsOpacityEffect(self.flash_overlay)
        self.flash_opacity.setOpacity(0.0)
        self.flash_overlay.setGraphicsEffect(self.flash_opacity)
        self.flash_animation = QPropertyAnimation(self.flash_opacity, b"opacity", self)
        self.flash_animation.setEasingCurve(QEasingCurve.Type.OutCubic)

        self.pause_label = QLabel(tr('paused'), self)
        self.pause_label.setStyleSheet("""
            QLabel {
                background-color: rgba(0, 0, 0, 150);
                color: white;
                border-radius: 12px;
                padding: 10px 20px;
                font-size: 22px;
            }
        """)
        self.pause_label.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
        self.pause_label.adjustSize()
        self.pause_label.hide()

        self.hints = QWidget(self)
        self.hints.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
        hints_layout = QVBoxLayout(self.hints)
        hints_layout.setSpacing(6)
        for key in ('hint_tap', 'hint_double_tap', 'hint_swipe', 'hint_brightness'):
            label = QLabel(tr(key))
            label.setStyleSheet("""
                QLabel {
                    background-color: rgba(60, 60, 60, 150);
                    color: rgba(230, 230, 230, 230);
                    border-radius: 6px;
                    padding: 6px 12px;
                    font-size: 15px;
                }
            """)
            label.setAlignment(Qt.AlignmentFlag.AlignCenter)
            hints_layout.addWidget(label)
        self.hints.adjustSize()
        self.hints.hide()
        self.hint_timer = QTimer(self)
        self.hint_timer.setSingleShot(True)
        self.hint_timer.timeout.connect(self.dismiss_hints)

        self.brightness_indicator = BrightnessIndicator(self)
        self.brightness_indicator.hide()
        self.indicator_timer = QTimer(self)
        self.indicator_timer.setSingleShot(True)
        self.indicator_timer.timeout.connect(self.brightness_indicator.hide)

        self.status_label = QLabel(self)
        self.status_label.setWordWrap(True)
        self.status_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.status_label.setStyleSheet("""
            QLabel {
                color: #ddd;
                font-size: 20px;
                background-color: transparent;
            }
        """)
        self.status_label.hide()

    def layout_children(self):
        rect = self.rect()
        for widget in (*self.surfaces, self.dim_overlay, self.flash_overlay, self.status_label):
            widget.setGeometry(rect)
        self.pause_label.move((self.width() - self.pause_label.width()) // 2, 40)
        self.hints.move((self.width() - self.hints.width()) // 2,
                        self.height() - self.hints.height() - 60)
        self.brightness_indicator.move((self.width() - self.brightness_indicator.width()) // 2,
                                       (self.height() - self.brightness_indicator.height()) // 2)
        for widget in (self.dim_overlay, self.flash_overlay, self.pause_label, self.hints,
                       self.brightness_indicator, self.status_label):
            widget.raise_()

    def showEvent(self, event):
        super().showEvent(event)
        if not self._start_scheduled:
            self._start_scheduled = True
            QTimer.singleShot(START_DELAY_MS, self.start_session)

    def start_session(self):
        if self._closing:
            return
        self.settings = self.store.load()
        self._orientation = device_orientation(self.width(), self.height())
        self.session.gestures.set_screen_size(self.width(), self.height())
        try:
            self.session.start_session(self.catalog.records, self.settings, self._orientation)
        except (EmptyPlaylist, GateFailed) as e:
            self.show_failure(e)
            return

        self.apply_brightness(self.settings.brightness)
        self.battery_monitor.start()
        if self.session.show_hints:
            QTimer.singleShot(HINT_DELAY_MS, self.show_hints)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.layout_children()
        self.session.gestures.set_screen_size(self.width(), self.height())
        orientation = device_orientation(self.width(), self.height())
        if self._orientation is not None and orientation != self._orientation:
            info(f"Window orientation changed to {orientation.value}")
            self._orientation = orientation
            self.session.on_orientation_changed(orientation)

    def failure_message(self, reason) -> str:
        if isinstance(reason, EmptyPlaylist):
            return tr('no_photos') if self.catalog.records else tr('no_photos_in_dirs')
        if isinstance(reason, GateFailed):
            if reason.reason == GateReason.UNPLUGGED:
                return tr('battery_unplugged')
            if reason.reason == GateReason.BATTERY_LOW:
                return format_tr('battery_low', reason.battery_level)
            return tr('battery_issue')
        return str(reason)

    def show_failure(self, reason):
        """Explain why the slideshow stopped, then close"""
        warning(f"Slideshow stopped: {reason}")
        self.status_label.setText(self.failure_message(reason))
        self.status_label.show()
        self.status_label.raise_()
        QTimer.singleShot(FAILURE_MESSAGE_MS, self.close)

    def on_session_ended(self, reason):
        self.battery_monitor.stop()
        if reason is None:
            self.flash(0.3, EXIT_FLASH_MS)
            QTimer.singleShot(EXIT_FLASH_MS, self.close)
        else:
            self.show_failure(reason)

    def on_run_state_changed(self, state: RunState):
        self.pause_label.setVisible(state == RunState.PAUSED)

    def apply_brightness(self, brightness: float):
        alpha = int(round((1.0 - max(0.0, min(1.0, brightness))) * 255))
        self.dim_overlay.setStyleSheet(f"background-color: rgba(0, 0, 0, {alpha});")

    def on_brightness_changed(self, brightness: float):
        self.apply_brightness(brightness)
        self.brightness_indicator.set_progress(brightness)
        self.brightness_indicator.show()
        self.brightness_indicator.raise_()
        self.indicator_timer.start(INDICATOR_VISIBLE_MS)

    def show_hints(self):
        if not self.session.active:
            return
        self.hints.show()
        self.hints.raise_()
        self.hint_timer.start(HINT_VISIBLE_MS)

    def flash(self, peak: float, duration: int):
        self.flash_animation.stop()
        self.flash_animation.setDuration(duration)
        self.flash_animation.setStartValue(peak)
        self.flash_animation.setEndValue(0.0)
        self.flash_animation.start()

    # Gesture feedback
    def pulse(self):
        self.flash(0.08, 120)

    def dismiss_hints(self):
        self.hint_timer.stop()
        self.hints.hide()

    def _velocity(self, x: float, y: float, t: float):
        """px/s over the last VELOCITY_WINDOW_MS of pointer samples"""
        recent = [s for s in self._samples if t - s[2] <= VELOCITY_WINDOW_MS]
        if not recent or t - recent[0][2] <= 0:
            return 0.0, 0.0
        x0, y0, t0 = recent[0]
        elapsed = (t - t0) / 1000.0
        return (x - x0) / elapsed, (y - y0) / elapsed

    def mousePressEvent(self, event):
        pos = event.position()
        t = event.timestamp()
        self._samples.clear()
        self._samples.append((pos.x(), pos.y(), t))
        self.session.gestures.pointer_down(pos.x(), pos.y(), t)

    def mouseDoubleClickEvent(self, event):
        # Qt replaces the second press of a double click with this event
        self.mousePressEvent(event)

    def mouseMoveEvent(self, event):
        if not event.buttons():
            return
        pos = event.position()
        t = event.timestamp()
        self._samples.append((pos.x(), pos.y(), t))
        self.session.gestures.pointer_move(pos.x(), pos.y(), t)

    def mouseReleaseEvent(self, event):
        pos = event.position()
        t = event.timestamp()
        vx, vy = self._velocity(pos.x(), pos.y(), t)
        self.session.gestures.pointer_up(pos.x(), pos.y(), t, vx, vy)

    def keyPressEvent(self, event):
        key = event.key()
        scheduler = self.session.scheduler
        if key == Qt.Key.Key_Space:
            scheduler.handle_command(GestureCommand(CommandKind.PAUSE_TOGGLE))
        elif key == Qt.Key.Key_Right:
            scheduler.handle_command(GestureCommand(CommandKind.NEXT, SwipeDirection.LEFT))
        elif key == Qt.Key.Key_Left:
            scheduler.handle_command(GestureCommand(CommandKind.PREVIOUS, SwipeDirection.RIGHT))
        elif key == Qt.Key.Key_Up:
            scheduler.handle_command(GestureCommand(CommandKind.BRIGHTNESS, delta=KEY_BRIGHTNESS_STEP))
        elif key == Qt.Key.Key_Down:
            scheduler.handle_command(GestureCommand(CommandKind.BRIGHTNESS, delta=-KEY_BRIGHTNESS_STEP))
        elif key == Qt.Key.Key_Escape:
            self.session.end_session()
        elif self.session.on_external_exit_requested():
            debug(f"Key {key} ended the slideshow")
        else:
            super().keyPressEvent(event)

    def closeEvent(self, event):
        """Clean up when closing"""
        self._closing = True
        self.battery_monitor.stop()
        self.session.end_session()
        event.accept()
