import os
from dataclasses import dataclass
from typing import List, Optional, Tuple
from PIL import Image, ImageEnhance, ImageFilter, ImageOps
from PyQt6.QtGui import QImage, QPainter, QColor, QPen
from PyQt6.QtCore import QRectF
from pillow_heif import register_heif_opener

# Register HEIF/HEIC support with Pillow
register_heif_opener()

SUPPORTED_FORMATS = {'.jpg', '.jpeg', '.png', '.bmp', '.gif', '.webp', '.heic', '.heif'}

BACKGROUND_BLUR_RADIUS = 25
BACKGROUND_ENLARGE = 1.05
BACKGROUND_DARKEN = 0.55


@dataclass
class DecodedImage:
    """Foreground photo plus the blurred backdrop drawn behind it"""
    image: QImage
    background: Optional[QImage] = None
    placeholder: bool = False


def is_supported_image(path: str) -> bool:
    return os.path.splitext(path)[1].lower() in SUPPORTED_FORMATS


def get_image_files(directory: str) -> List[str]:
    """Get all image files below a directory, recursively and sorted"""
    # Note: .gif only shows its first frame
    image_files = []
    if not os.path.isdir(directory):
        return image_files

    for root, dirs, files in os.walk(directory):
        dirs[:] = sorted(d for d in dirs if not d.startswith('.'))
        for file in sorted(files):
            if not file.startswith('.') and is_supported_image(file):
                image_files.append(os.path.join(root, file))
    return image_files


def get_image_files_from_dirs(directories: List[str]) -> List[str]:
    """Get all image files from multiple directories without duplicates"""
    all_files = []
    seen = set()

    for directory in directories:
        for file_path in get_image_files(directory):
            real_path = os.path.realpath(file_path)
            if real_path not in seen:
                all_files.append(file_path)
                seen.add(real_path)

    return all_files


def read_image_size(image_path: str) -> Optional[Tuple[int, int]]:
    """Read (width, height) after EXIF rotation without decoding pixels"""
    with Image.open(image_path) as img:
        width, height = img.size
        try:
            exif_orientation = img.getexif().get(0x0112, 1)
        except (AttributeError, ValueError):
            exif_orientation = 1
    # EXIF orientations 5-8 are rotated by 90 degrees
    if exif_orientation in (5, 6, 7, 8):
        width, height = height, width
    if width <= 0 or height <= 0:
        return None
    return width, height


def file_timestamp(image_path: str, created: bool = False) -> float:
    """Modification time, or creation time where the platform records one"""
    stat = os.stat(image_path)
    if created:
        return float(getattr(stat, 'st_birthtime', stat.st_ctime))
    return float(stat.st_mtime)


def pil_to_qimage(pil_image: Image.Image) -> QImage:
    """Convert a Pillow image into a detached QImage"""
    if pil_image.mode in ('RGBA', 'LA', 'PA') or (pil_image.mode == 'P' and 'transparency' in pil_image.info):
        pil_image = pil_image.convert('RGBA')
        bytes_per_line = 4 * pil_image.width
        qimage_format = QImage.Format.Format_RGBA8888
    else:
        # Everything else (L, 1, CMYK, P without alpha) becomes RGB
        pil_image = pil_image.convert('RGB')
        bytes_per_line = 3 * pil_image.width
        qimage_format = QImage.Format.Format_RGB888

    img_data = pil_image.tobytes()
    qimage = QImage(img_data, pil_image.width, pil_image.height, bytes_per_line, qimage_format)
    # Copy so the QImage owns its buffer once img_data goes away
    return qimage.copy()


def create_blurred_background(pil_image: Image.Image, target_size: Tuple[int, int]) -> Image.Image:
    """Cover-crop, blur, enlarge slightly and darken a copy of the photo"""
    width, height = max(1, target_size[0]), max(1, target_size[1])
    filled = ImageOps.fit(pil_image.convert('RGB'), (width, height), Image.Resampling.BILINEAR)

    # Blur a downscaled copy, it is much cheaper and looks the same
    small = filled.resize((max(1, width // 4), max(1, height // 4)), Image.Resampling.BILINEAR)
    small = small.filter(ImageFilter.GaussianBlur(BACKGROUND_BLUR_RADIUS / 4))
    blurred = small.resize((width, height), Image.Resampling.BILINEAR)

    enlarged = blurred.resize((int(width * BACKGROUND_ENLARGE), int(height * BACKGROUND_ENLARGE)),
                              Image.Resampling.BILINEAR)
    left = (enlarged.width - width) // 2
    top = (enlarged.height - height) // 2
    cropped = enlarged.crop((left, top, left + width, top + height))

    return ImageEnhance.Brightness(cropped).enhance(BACKGROUND_DARKEN)


def load_photo(image_path: str, target_size: Tuple[int, int], with_background: bool = True) -> DecodedImage:
    """Decode a photo scaled to cover target_size, plus its background.

    Raises OSError (or a Pillow error) when the file cannot be decoded.
    """
    with Image.open(image_path) as opened:
        pil_image = ImageOps.exif_transpose(opened)
        pil_image.load()

    width, height = max(1, target_size[0]), max(1, target_size[1])
    # Never upscale here, the surface scales at paint time
    fitted = pil_image.copy()
    fitted.thumbnail((width, height), Image.Resampling.LANCZOS)

    background = None
    if with_background:
        background = pil_to_qimage(create_blurred_background(pil_image, (width, height)))

    return DecodedImage(image=pil_to_qimage(fitted), background=background)


def create_placeholder_image(target_size: Tuple[int, int]) -> DecodedImage:
    """Dark frame with a simple picture glyph, shown when decoding fails"""
    width, height = max(1, target_size[0]), max(1, target_size[1])
    image = QImage(width, height, QImage.Format.Format_RGB32)
    image.fill(QColor(16, 16, 16))

    painter = QPainter(image)
    painter.setRenderHint(QPainter.RenderHint.Antialiasing)
    side = min(width, height) / 5
    rect = QRectF((width - side) / 2, (height - side * 0.8) / 2, side, side * 0.8)
    pen = QPen(QColor(90, 90, 90))
    pen.setWidthF(max(2.0, side / 20))
    painter.setPen(pen)
    painter.drawRoundedRect(rect, side / 10, side / 10)
    painter.setBrush(QColor(90, 90, 90))
    painter.drawEllipse(QRectF(rect.left() + side * 0.2, rect.top() + side * 0.15, side * 0.2, side * 0.2))
    painter.end()

    return DecodedImage(image=image, background=None, placeholder=True)


def calculate_fit_size(image_width: int, image_height: int, area_width: int, area_height: int,
                       cover: bool = False) -> Tuple[int, int]:
    """Size of an image scaled to fit (or cover) an area, keeping aspect ratio"""
    if image_width <= 0 or image_height <= 0:
        return area_width, area_height
    scale_w = area_width / image_width
    scale_h = area_height / image_height
    scale = max(scale_w, scale_h) if cover else min(scale_w, scale_h)
    return max(1, round(image_width * scale)), max(1, round(image_height * scale))
