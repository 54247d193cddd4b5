from PIL import Image

from dozeframe.errors import DecodeError
from dozeframe.loader import ImageLoader
from dozeframe.models import PhotoRecord
from dozeframe.tasks import PendingTask


def _decode(qtbot, loader, path, size=(80, 80)):
    results = []
    loader.decode(PhotoRecord(id=str(path)), size, PendingTask("decode", lambda *r: results.append(r)))
    qtbot.waitUntil(lambda: bool(results), timeout=5000)
    return results[0]


def test_decodes_photo_with_background(qtbot, tmp_path):
    path = tmp_path / "wide.png"
    Image.new("RGB", (160, 90), (10, 120, 200)).save(path)
    loader = ImageLoader()

    decoded, error = _decode(qtbot, loader, path)
    assert error is None
    assert (decoded.image.width(), decoded.image.height()) == (80, 45)
    assert (decoded.background.width(), decoded.background.height()) == (80, 80)
    loader.shutdown()


def test_background_can_be_skipped(qtbot, tmp_path):
    path = tmp_path / "tall.png"
    Image.new("RGB", (40, 80)).save(path)
    loader = ImageLoader(with_background=False)

    decoded, _ = _decode(qtbot, loader, path)
    assert decoded.background is None
    loader.shutdown()


def test_unreadable_file_reports_decode_error(qtbot, tmp_path):
    path = tmp_path / "broken.jpg"
    path.write_bytes(b"definitely not a jpeg")
    loader = ImageLoader()

    decoded, error = _decode(qtbot, loader, path)
    assert decoded is None
    assert isinstance(error, DecodeError)
    loader.shutdown()


def test_shutdown_drops_pending_results(qtbot, tmp_path):
    path = tmp_path / "photo.png"
    Image.new("RGB", (64, 64)).save(path)
    loader = ImageLoader()
    results = []
    task = PendingTask("decode", lambda *r: results.append(r))
    loader.decode(PhotoRecord(id=str(path)), (32, 32), task)
    loader.shutdown()

    qtbot.wait(300)
    assert results == []
    assert task.cancelled
