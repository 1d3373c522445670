from __future__ import annotations

import logging
import string
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from ..schemas.trip import GeoPoint

logger = logging.getLogger(__name__)


class StopIndexError(IndexError):
    pass


@dataclass(frozen=True)
class StopListChanged:
    """Published once after every successful mutation."""
    kind: str  # "append" | "remove" | "move"
    stops: Tuple[GeoPoint, ...]


Listener = Callable[[StopListChanged], None]


def stop_label(index: int) -> str:
    """
    Positional label: A..Z, then AA, AB, ... like spreadsheet columns.
    """
    if index < 0:
        raise ValueError("index must be >= 0")
    letters = string.ascii_uppercase
    label = ""
    n = index + 1
    while n > 0:
        n, rem = divmod(n - 1, 26)
        label = letters[rem] + label
    return label


class StopList:
    """
    Ordered stops of the itinerary.

    Free-form: every stop can be removed or moved.
    Anchored: an origin and a destination bracket the list and never move;
    append/remove/move only touch the middle. Indices are always positions
    in the full list as displayed.
    """

    def __init__(
        self,
        stops: Optional[Sequence[GeoPoint]] = None,
        *,
        origin: Optional[GeoPoint] = None,
        destination: Optional[GeoPoint] = None,
    ) -> None:
        if (origin is None) != (destination is None):
            raise ValueError("Anchored lists need both an origin and a destination")

        self._anchored = origin is not None
        self._stops: List[GeoPoint] = []
        if self._anchored:
            self._stops = [origin, *(stops or []), destination]
        else:
            self._stops = list(stops or [])
        self._listeners: List[Listener] = []

    # ---- read side ----

    @property
    def anchored(self) -> bool:
        return self._anchored

    def __len__(self) -> int:
        return len(self._stops)

    def __getitem__(self, index: int) -> GeoPoint:
        return self._stops[index]

    def __iter__(self):
        return iter(tuple(self._stops))

    def snapshot(self) -> Tuple[GeoPoint, ...]:
        return tuple(self._stops)

    def labels(self) -> List[str]:
        return [stop_label(i) for i in range(len(self._stops))]

    def is_endpoint(self, index: int) -> bool:
        return index == 0 or index == len(self._stops) - 1

    def mutable_range(self) -> range:
        if self._anchored:
            return range(1, len(self._stops) - 1)
        return range(0, len(self._stops))

    def is_removable(self, index: int) -> bool:
        return index in self.mutable_range()

    # ---- subscriptions ----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, kind: str) -> None:
        event = StopListChanged(kind=kind, stops=self.snapshot())
        for listener in list(self._listeners):
            listener(event)

    # ---- mutations ----

    def append(self, point: GeoPoint) -> int:
        """Add a stop and return its index."""
        if self._anchored:
            index = len(self._stops) - 1
            self._stops.insert(index, point)
        else:
            self._stops.append(point)
            index = len(self._stops) - 1

        logger.info("Added stop %s at %s", point.name, stop_label(index))
        self._publish("append")
        return index

    def remove_at(self, index: int) -> GeoPoint:
        if index not in self.mutable_range():
            raise StopIndexError(self._index_message(index))

        removed = self._stops.pop(index)
        logger.info("Removed stop %s", removed.name)
        self._publish("remove")
        return removed

    def move_to(self, source_index: Optional[int], target_index: int) -> bool:
        """
        Move the stop at source_index so it ends up at target_index.
        target_index is read after the source has been taken out.
        Returns False when there was nothing to do.
        """
        if source_index is None or source_index == target_index:
            return False

        allowed = self.mutable_range()
        if source_index not in allowed:
            raise StopIndexError(self._index_message(source_index))
        if target_index not in allowed:
            raise StopIndexError(self._index_message(target_index))

        moved = self._stops.pop(source_index)
        self._stops.insert(target_index, moved)

        logger.info("Moved stop %s from %s to %s", moved.name, source_index, target_index)
        self._publish("move")
        return True

    def _index_message(self, index: int) -> str:
        if self._anchored and index in (0, len(self._stops) - 1):
            return f"Stop {index} is a fixed origin/destination and cannot be changed"
        return f"No stop at position {index} (list has {len(self._stops)} stops)"
