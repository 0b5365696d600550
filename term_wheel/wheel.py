import logging
import math
from dataclasses import dataclass, field
from typing import Callable

from term_wheel.errors import EmptyWheelError, IndexOutOfRangeError
from term_wheel.ezterm import RGBA

logger = logging.getLogger(__name__)

TAU: float = 2.0 * math.pi

# Angles use the drawing convention: 0 points right and angles grow clockwise,
# so "straight up" is 270°.
POINTER_ANGLE: float = 1.5 * math.pi

PALETTE: list[RGBA] = [
    RGBA.from_hex("#FFB7B2"),
    RGBA.from_hex("#FFDAC1"),
    RGBA.from_hex("#E2F0CB"),
    RGBA.from_hex("#B2E2F2"),
    RGBA.from_hex("#C7CEEA"),
    RGBA.from_hex("#F3D1F4"),
]


@dataclass(eq=False)
class Item:
    """One wheel entry. Compared by identity, so duplicate labels stay distinct."""

    label: str


@dataclass(frozen=True)
class SectorGeometry:
    index: int
    label: str
    start_angle: float
    end_angle: float
    color: RGBA

    @property
    def mid_angle(self) -> float:
        return (self.start_angle + self.end_angle) / 2.0


def sector_width(count: int) -> float:
    if count <= 0:
        raise EmptyWheelError()
    return TAU / count


def sector_at_direction(direction: float, angle: float, count: int) -> int:
    """Index of the sector covering `direction` when the wheel is rotated by `angle`."""
    width: float = sector_width(count)

    # `%` can round up to TAU itself for tiny negative inputs, hence the clamp
    normalized: float = (direction - angle) % TAU
    return min(int(normalized // width), count - 1)


def sector_index(angle: float, count: int) -> int:
    """Index of the sector under the pointer for an unnormalized rotation `angle`."""
    return sector_at_direction(POINTER_ANGLE, angle, count)


@dataclass
class WheelModel:
    items: list[Item] = field(default_factory=list)
    angle: float = 0.0
    on_change: Callable[[], None] | None = field(default=None, repr=False)

    @property
    def labels(self) -> list[str]:
        return [item.label for item in self.items]

    def add_item(self, label: str) -> Item | None:
        """Appends a trimmed label. Blank input is ignored and returns `None`."""
        text: str = label.strip()
        if not text:
            return None

        item = Item(text)
        self.items.append(item)
        logger.debug("Added item %r (%d total)", text, len(self.items))
        self._changed()
        return item

    def remove_item(self, index: int) -> Item:
        if not 0 <= index < len(self.items):
            logger.warning("Rejected removal of index %d from %d items", index, len(self.items))
            raise IndexOutOfRangeError(index, len(self.items))

        item: Item = self.items.pop(index)
        logger.debug("Removed item %r at index %d", item.label, index)
        self._changed()
        return item

    def discard(self, item: Item) -> bool:
        """Removes `item` by identity. Returns `False` if it is no longer on the wheel."""
        for index, candidate in enumerate(self.items):
            if candidate is item:
                del self.items[index]
                self._changed()
                return True
        return False

    def clear(self) -> None:
        self.items.clear()
        logger.debug("Cleared all items")
        self._changed()

    def sector_at(self, angle: float | None = None) -> int:
        return sector_index(self.angle if angle is None else angle, len(self.items))

    def sectors(self) -> list[SectorGeometry]:
        """Read-only geometry for the renderer. Empty for an empty wheel."""
        if not self.items:
            return []

        width: float = sector_width(len(self.items))
        return [
            SectorGeometry(
                index=i,
                label=item.label,
                start_angle=self.angle + i * width,
                end_angle=self.angle + (i + 1) * width,
                color=PALETTE[i % len(PALETTE)],
            )
            for i, item in enumerate(self.items)
        ]

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()
