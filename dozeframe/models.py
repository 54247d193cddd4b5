"""Value types shared by the slideshow engine and its collaborators"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class ImageOrientation(Enum):
    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"
    SQUARE = "square"


class OrderType(Enum):
    RANDOM = "Random"
    ALPHABETICAL = "Alphabetical"
    DATE_MODIFIED = "Date Modified"
    DATE_CREATED = "Date Created"


class TransitionType(Enum):
    FADE = "Fade"
    SLIDE_LEFT = "Slide Left"
    SLIDE_RIGHT = "Slide Right"
    SLIDE_UP = "Slide Up"
    SLIDE_DOWN = "Slide Down"


class ZoomType(Enum):
    SAWTOOTH = "Sawtooth"  # zoom in on every photo
    SINE_WAVE = "Sine Wave"  # alternate in/out across consecutive photos


class BatteryMode(Enum):
    CHARGING_ONLY = "Charging Only"
    BATTERY_ABOVE_THRESHOLD = "Battery Above Threshold"


class DisplayMode(Enum):
    FIT = "Fit"  # Black bars around the photo
    BLUR_FILL = "Blur Fill"  # Blurred, darkened copy behind the photo
    ZOOM_FILL = "Zoom Fill"  # Crop to fill the screen


class SwipeDirection(Enum):
    LEFT = "left"
    RIGHT = "right"

    @property
    def transition(self) -> TransitionType:
        """Slide style a swipe in this direction forces for one advance"""
        if self is SwipeDirection.LEFT:
            return TransitionType.SLIDE_LEFT
        return TransitionType.SLIDE_RIGHT


class TransitionState(Enum):
    IDLE = "idle"
    PREPARING = "preparing"
    ANIMATING = "animating"
    SETTLING = "settling"


class RunState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"


@dataclass(frozen=True)
class PhotoRecord:
    """One catalog entry; id is the file path"""
    id: str
    orientation: ImageOrientation = ImageOrientation.SQUARE
    aspect_ratio: float = 1.0


MIN_SLIDE_DURATION_MS = 1000
MAX_ZOOM_AMOUNT = 5


@dataclass(frozen=True)
class Settings:
    """Slideshow settings, re-read at every decision point"""
    slide_duration_ms: int = 5000
    order_type: OrderType = OrderType.RANDOM
    transition_type: TransitionType = TransitionType.FADE
    zoom_type: ZoomType = ZoomType.SAWTOOTH
    zoom_amount: int = 3
    orientation_filtering: bool = True
    battery_mode: BatteryMode = BatteryMode.BATTERY_ABOVE_THRESHOLD
    brightness: float = 1.0
    display_mode: DisplayMode = DisplayMode.BLUR_FILL
    square_sensitivity: float = 0.8
    photo_dirs: Tuple[str, ...] = ()
    log_level: str = 'INFO'

    @property
    def zoom_scale(self) -> float:
        """Peak scale factor, e.g. 1.03 for a zoom amount of 3"""
        return 1.0 + self.zoom_amount / 100.0


@dataclass(frozen=True)
class PlaylistState:
    all: Tuple[PhotoRecord, ...] = ()
    filtered: Tuple[PhotoRecord, ...] = ()
    cursor: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.filtered

    def current(self) -> Optional[PhotoRecord]:
        if not self.filtered:
            return None
        return self.filtered[self.cursor]


@dataclass
class ZoomState:
    running: bool = False
    start_scale: float = 1.0
    end_scale: float = 1.0
    started_at: float = 0.0
    capped_duration_ms: int = 0


@dataclass
class GestureState:
    paused: bool = False
    last_accepted_at: Optional[float] = None


class CommandKind(Enum):
    PAUSE_TOGGLE = "pause_toggle"
    EXIT = "exit"
    NEXT = "next"
    PREVIOUS = "previous"
    BRIGHTNESS = "brightness"


@dataclass(frozen=True)
class GestureCommand:
    kind: CommandKind
    direction: Optional[SwipeDirection] = None
    delta: float = 0.0


@dataclass(frozen=True)
class CatalogResult:
    """Outcome of a folder scan"""
    records: Tuple[PhotoRecord, ...] = ()
    total_found: int = 0
    truncated: bool = False
    source_name: str = ""
    scanned_at: float = 0.0
    skipped: Tuple[str, ...] = field(default=())
