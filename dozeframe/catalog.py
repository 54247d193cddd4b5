"""Folder scan that builds the photo catalog, plus date lookups for ordering"""

import os
import time
from typing import Callable, List, Optional

from PIL import UnidentifiedImageError

from dozeframe.errors import TimestampLookupFailed
from dozeframe.logger import debug, info, warning
from dozeframe.models import CatalogResult, ImageOrientation, OrderType, PhotoRecord
from utils.image_utils import file_timestamp, get_image_files_from_dirs, read_image_size

MAX_IMAGES = 1000
DEFAULT_SQUARE_SENSITIVITY = 0.8

# (current, total, file name)
ProgressCallback = Callable[[int, int, str], None]


def classify_orientation(width: int, height: int,
                         sensitivity: float = DEFAULT_SQUARE_SENSITIVITY) -> ImageOrientation:
    """Square when the short side is at least `sensitivity` of the long side"""
    if min(width, height) / max(width, height) >= sensitivity:
        return ImageOrientation.SQUARE
    if width > height:
        return ImageOrientation.LANDSCAPE
    return ImageOrientation.PORTRAIT


def device_orientation(width: int, height: int) -> ImageOrientation:
    """Orientation of a screen or window; square screens count as landscape"""
    return ImageOrientation.PORTRAIT if height > width else ImageOrientation.LANDSCAPE


def analyze_photo(path: str, sensitivity: float = DEFAULT_SQUARE_SENSITIVITY) -> Optional[PhotoRecord]:
    """Build a PhotoRecord from the image header, None if unreadable"""
    try:
        size = read_image_size(path)
    except (OSError, UnidentifiedImageError, ValueError) as e:
        warning(f"Failed to analyze image {path}: {e}")
        return None
    if size is None:
        warning(f"Could not determine dimensions for {path}")
        return None

    width, height = size
    orientation = classify_orientation(width, height, sensitivity)
    debug(f"{os.path.basename(path)}: {width}x{height} -> {orientation.value}")
    return PhotoRecord(id=path, orientation=orientation, aspect_ratio=width / height)


def scan_photo_dirs(directories: List[str], sensitivity: float = DEFAULT_SQUARE_SENSITIVITY,
                    limit: int = MAX_IMAGES,
                    on_progress: Optional[ProgressCallback] = None) -> CatalogResult:
    """Scan directories recursively and classify every supported photo"""
    files = get_image_files_from_dirs(directories)
    total_found = len(files)
    truncated = total_found > limit
    if truncated:
        warning(f"Limiting catalog to {limit} images (found {total_found})")
        files = files[:limit]

    records = []
    skipped = []
    for index, path in enumerate(files):
        if on_progress:
            on_progress(index + 1, len(files), os.path.basename(path))
        record = analyze_photo(path, sensitivity)
        if record is None:
            skipped.append(path)
        else:
            records.append(record)

    source_name = ", ".join(os.path.basename(os.path.normpath(d)) or d for d in directories)
    info(f"Catalog ready: {len(records)} photos from {source_name or 'nowhere'}"
         f" ({total_found} found, {len(skipped)} skipped)")
    return CatalogResult(
        records=tuple(records),
        total_found=total_found,
        truncated=truncated,
        source_name=source_name,
        scanned_at=time.time(),
        skipped=tuple(skipped),
    )


def timestamp_for(record: PhotoRecord, order_type: OrderType) -> float:
    """Timestamp used by date ordering; raises TimestampLookupFailed"""
    try:
        return file_timestamp(record.id, created=order_type == OrderType.DATE_CREATED)
    except OSError as e:
        raise TimestampLookupFailed(f"{record.id}: {e}") from e
