"""Filtered, ordered photo sequence with a wrap-around cursor"""

import dataclasses
import random
from typing import Callable, Iterable, Optional

from dozeframe.errors import EmptyPlaylist, TimestampLookupFailed
from dozeframe.logger import debug, info, warning
from dozeframe.models import ImageOrientation, OrderType, PhotoRecord, PlaylistState, Settings

TimestampLookup = Callable[[PhotoRecord, OrderType], float]


def shows_in_orientation(photo: PhotoRecord, device_orientation: ImageOrientation) -> bool:
    """Square photos fit both orientations, the rest only their own"""
    return photo.orientation == ImageOrientation.SQUARE or photo.orientation == device_orientation


class PlaylistEngine:
    """Owns the PlaylistState; the cursor only moves through next()/previous()"""

    def __init__(self, timestamp_lookup: Optional[TimestampLookup] = None,
                 rng: Optional[random.Random] = None):
        self.timestamp_lookup = timestamp_lookup
        self.rng = rng or random.Random()
        self.state = PlaylistState()
        self.device_orientation = ImageOrientation.LANDSCAPE

    @property
    def size(self) -> int:
        return len(self.state.filtered)

    @property
    def index(self) -> int:
        return self.state.cursor

    def current(self) -> PhotoRecord:
        photo = self.state.current()
        if photo is None:
            raise EmptyPlaylist()
        return photo

    def load(self, catalog: Iterable[PhotoRecord], settings: Settings,
             device_orientation: ImageOrientation) -> PlaylistState:
        """Build the filtered view of the catalog for the device orientation"""
        all_photos = tuple(catalog)
        self.device_orientation = device_orientation
        state = PlaylistState(all=all_photos, filtered=self._filter(all_photos, settings), cursor=0)
        if state.is_empty:
            warning(f"No photos available for {device_orientation.value} orientation "
                    f"({len(all_photos)} in catalog)")
        else:
            state = self.sort(state, settings.order_type)
            info(f"Using {len(state.filtered)} of {len(all_photos)} photos "
                 f"for {device_orientation.value} orientation")
        self.state = state
        return state

    def _filter(self, photos, settings: Settings):
        if not settings.orientation_filtering:
            return photos
        filtered = tuple(p for p in photos if shows_in_orientation(p, self.device_orientation))
        debug(f"Filtered {len(photos)} -> {len(filtered)} photos for {self.device_orientation.value}")
        return filtered

    def sort(self, state: PlaylistState, order_type: OrderType) -> PlaylistState:
        photos = list(state.filtered)
        if order_type == OrderType.RANDOM:
            self.rng.shuffle(photos)
        elif order_type == OrderType.ALPHABETICAL:
            photos.sort(key=lambda photo: photo.id)
        else:
            # sort() is stable, so equal timestamps keep their catalog order
            photos.sort(key=lambda photo: self._timestamp(photo, order_type))
        return dataclasses.replace(state, filtered=tuple(photos))

    def _timestamp(self, photo: PhotoRecord, order_type: OrderType) -> float:
        if self.timestamp_lookup is None:
            return 0.0
        try:
            return float(self.timestamp_lookup(photo, order_type))
        except (TimestampLookupFailed, OSError, ValueError) as e:
            warning(f"No {order_type.value.lower()} for {photo.id}, sorting it first: {e}")
            return 0.0

    def next(self) -> PlaylistState:
        if self.state.is_empty:
            raise EmptyPlaylist()
        cursor = (self.state.cursor + 1) % len(self.state.filtered)
        self.state = dataclasses.replace(self.state, cursor=cursor)
        return self.state

    def previous(self) -> PlaylistState:
        if self.state.is_empty:
            raise EmptyPlaylist()
        size = len(self.state.filtered)
        cursor = (self.state.cursor - 1 + size) % size
        self.state = dataclasses.replace(self.state, cursor=cursor)
        return self.state

    def on_orientation_changed(self, settings: Settings,
                               device_orientation: ImageOrientation) -> PlaylistState:
        """Re-filter and re-sort for a new orientation; check is_empty on the result"""
        old_count = len(self.state.filtered)
        self.device_orientation = device_orientation
        state = PlaylistState(all=self.state.all, filtered=self._filter(self.state.all, settings), cursor=0)
        if not state.is_empty:
            state = self.sort(state, settings.order_type)
        self.state = state
        info(f"Orientation changed to {device_orientation.value}: "
             f"{old_count} -> {len(state.filtered)} photos")
        return state
