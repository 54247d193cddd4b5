"""Background photo decoding on a QThreadPool"""

from typing import Dict, Tuple
from PyQt6.QtCore import QObject, QRunnable, QThreadPool, pyqtSignal
from PIL import Image, UnidentifiedImageError

from dozeframe.errors import DecodeError
from dozeframe.logger import debug, warning
from dozeframe.models import PhotoRecord
from dozeframe.tasks import PendingTask
from utils.image_utils import load_photo

MAX_DECODE_THREADS = 2


class _DecodeSignals(QObject):
    # token, DecodedImage or None, DecodeError or None
    finished = pyqtSignal(int, object, object)


class _DecodeJob(QRunnable):
    def __init__(self, token: int, path: str, target_size: Tuple[int, int], with_background: bool,
                 signals: _DecodeSignals):
        super().__init__()
        self.token = token
        self.path = path
        self.target_size = target_size
        self.with_background = with_background
        self.signals = signals

    def run(self):
        try:
            decoded = load_photo(self.path, self.target_size, self.with_background)
        except (OSError, UnidentifiedImageError, ValueError, Image.DecompressionBombError) as e:
            self.signals.finished.emit(self.token, None, DecodeError(f"{self.path}: {e}"))
            return
        self.signals.finished.emit(self.token, decoded, None)


class ImageLoader(QObject):
    """Decodes photos off the GUI thread.

    Each decode() resolves its PendingTask exactly once on the GUI thread with
    (DecodedImage, None) or (None, DecodeError).
    """

    def __init__(self, with_background: bool = True, pool: QThreadPool = None, parent=None):
        super().__init__(parent)
        self.with_background = with_background
        if pool is None:
            pool = QThreadPool(self)
            pool.setMaxThreadCount(MAX_DECODE_THREADS)
        self.pool = pool
        self._signals = _DecodeSignals()
        # Emitted from worker threads, delivered queued on the GUI thread
        self._signals.finished.connect(self._on_finished)
        self._tasks: Dict[int, PendingTask] = {}
        self._next_token = 0

    def decode(self, record: PhotoRecord, target_size: Tuple[int, int], task: PendingTask):
        self._next_token += 1
        token = self._next_token
        self._tasks[token] = task
        debug(f"Decoding {record.id} at {target_size[0]}x{target_size[1]}")
        self.pool.start(_DecodeJob(token, record.id, target_size, self.with_background, self._signals))

    def _on_finished(self, token: int, decoded, error):
        task = self._tasks.pop(token, None)
        if task is None:
            return
        if error is not None:
            warning(f"Decode failed: {error}")
        task.resolve(decoded, error)

    def shutdown(self):
        """Drop queued jobs; running ones finish and are ignored"""
        self.pool.clear()
        for task in self._tasks.values():
            task.cancel()
        self._tasks.clear()
