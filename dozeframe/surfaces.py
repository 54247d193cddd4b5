from typing import Optional, Tuple
from PyQt6.QtWidgets import QWidget, QSizePolicy
from PyQt6.QtCore import Qt, QRectF, QVariantAnimation
from PyQt6.QtGui import QPainter, QColor, QPixmap

from dozeframe.models import DisplayMode
from utils.animation_utils import Easing, create_value_animation
from utils.image_utils import DecodedImage, calculate_fit_size


class ImageSurface(QWidget):
    """Full-size photo layer with animatable opacity, translation and scale"""

    PROPERTIES = ('opacity', 'translation_x', 'translation_y', 'scale')

    def __init__(self, name: str = "surface", parent=None):
        super().__init__(parent)
        self.name = name
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
        self.setSizePolicy(QSizePolicy.Policy.Ignored, QSizePolicy.Policy.Ignored)
        self._pixmap: Optional[QPixmap] = None
        self._background_pixmap: Optional[QPixmap] = None
        self._display_mode = DisplayMode.BLUR_FILL
        self._opacity = 1.0
        self._translation = (0.0, 0.0)
        self._scale = (1.0, 1.0)

    def __repr__(self):
        return f"ImageSurface({self.name})"

    def set_image(self, decoded: Optional[DecodedImage]):
        """Show a decoded photo; None clears the surface"""
        if decoded is None or decoded.image.isNull():
            self.clear()
            return
        self._pixmap = QPixmap.fromImage(decoded.image)
        self._background_pixmap = QPixmap.fromImage(decoded.background) if decoded.background else None
        self.update()

    def has_image(self) -> bool:
        return self._pixmap is not None

    def clear(self):
        self._pixmap = None
        self._background_pixmap = None
        self.update()

    def set_display_mode(self, mode: DisplayMode):
        if self._display_mode != mode:
            self._display_mode = mode
            self.update()

    def opacity(self) -> float:
        return self._opacity

    def set_opacity(self, value: float):
        self._opacity = max(0.0, min(1.0, float(value)))
        self.update()

    def translation(self) -> Tuple[float, float]:
        return self._translation

    def set_translation(self, x: float, y: float):
        self._translation = (float(x), float(y))
        self.update()

    def scale(self) -> float:
        return self._scale[0]

    def set_scale(self, x: float, y: Optional[float] = None):
        self._scale = (float(x), float(x if y is None else y))
        self.update()

    def set_visual(self, prop: str, value: float):
        """Set one of PROPERTIES by name"""
        if prop == 'opacity':
            self.set_opacity(value)
        elif prop == 'translation_x':
            self.set_translation(value, self._translation[1])
        elif prop == 'translation_y':
            self.set_translation(self._translation[0], value)
        elif prop == 'scale':
            self.set_scale(value)
        else:
            raise ValueError(f"Unknown surface property: {prop}")

    def visual(self, prop: str) -> float:
        if prop == 'opacity':
            return self._opacity
        if prop == 'translation_x':
            return self._translation[0]
        if prop == 'translation_y':
            return self._translation[1]
        if prop == 'scale':
            return self._scale[0]
        raise ValueError(f"Unknown surface property: {prop}")

    def animate(self, prop: str, start: float, end: float, duration_ms: int,
                easing: Easing = Easing.LINEAR) -> QVariantAnimation:
        """Build (without starting) an animation of one property"""
        if prop not in self.PROPERTIES:
            raise ValueError(f"Unknown surface property: {prop}")
        return create_value_animation(lambda value: self.set_visual(prop, value),
                                      start, end, duration_ms, easing, self)

    def reset_visual_state(self, opacity: float):
        """Put the surface at rest: given opacity, no translation"""
        self._opacity = opacity
        self._translation = (0.0, 0.0)
        self.update()

    def paintEvent(self, event):
        if self._opacity <= 0.0:
            return

        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.setOpacity(self._opacity)
        painter.translate(*self._translation)

        if self._display_mode == DisplayMode.BLUR_FILL and self._background_pixmap is not None:
            painter.drawPixmap(self.rect(), self._background_pixmap)
        else:
            painter.fillRect(self.rect(), QColor(0, 0, 0))

        if self._pixmap is not None:
            width, height = calculate_fit_size(
                self._pixmap.width(), self._pixmap.height(), self.width(), self.height(),
                cover=self._display_mode == DisplayMode.ZOOM_FILL)
            # Zoom around the centre of the surface
            painter.translate(self.width() / 2, self.height() / 2)
            painter.scale(*self._scale)
            painter.drawPixmap(QRectF(-width / 2, -height / 2, width, height), self._pixmap,
                               QRectF(self._pixmap.rect()))
        painter.end()
