"""
Value types shared by the slab layout engine.

Coordinates are millimetres from the top-left corner of the sheet, with y
growing downward: the "bottom" remainder of a split has the larger y.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from slab_config import MIN_USABLE_SIZE


class Orientation(Enum):
    UPRIGHT = "upright"
    ROTATED = "rotated"

    def footprint(self, width, height):
        """Return (width, height) as laid on the sheet for this orientation."""
        if self is Orientation.ROTATED:
            return height, width
        return width, height


@dataclass(frozen=True)
class Sheet:
    width: float
    height: float
    margin: float = 0.0
    kerf: float = 0.0
    min_usable: float = MIN_USABLE_SIZE

    @property
    def area(self):
        return self.width * self.height

    @property
    def usable_width(self):
        return self.width - 2 * self.margin

    @property
    def usable_height(self):
        return self.height - 2 * self.margin


@dataclass(frozen=True)
class Part:
    id: str
    name: str
    width: float
    height: float
    is_current: bool = False

    @property
    def area(self):
        return self.width * self.height


@dataclass(frozen=True)
class FreeRect:
    x: float
    y: float
    width: float
    height: float

    @property
    def area(self):
        return self.width * self.height

    def fits(self, width, height):
        return self.width >= width and self.height >= height


@dataclass(frozen=True)
class PlacedPart:
    part_id: str
    name: str
    x: float
    y: float
    width: float
    height: float
    sequence: int
    orientation: Orientation = Orientation.UPRIGHT
    is_current: bool = False

    @property
    def rotated(self):
        return self.orientation is Orientation.ROTATED

    @property
    def area(self):
        return self.width * self.height

    def footprint(self, kerf):
        """The rectangle consumed on the sheet, including the kerf strip."""
        return FreeRect(self.x, self.y, self.width + kerf, self.height + kerf)

    def to_dict(self):
        return {
            "part_id": self.part_id,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "sequence": self.sequence,
            "rotated": self.rotated,
            "is_current": self.is_current,
        }


@dataclass(frozen=True)
class LayoutResult:
    sheet: Sheet
    placed: tuple = ()
    unplaced: tuple = ()
    efficiency: int = 0
    offcuts: tuple = field(default=(), repr=False)

    @property
    def placed_area(self):
        return sum(p.area for p in self.placed)

    def find(self, part_id):
        for placed in self.placed:
            if placed.part_id == part_id:
                return placed
        return None

    def to_dict(self):
        return {
            "sheet": {
                "width": self.sheet.width,
                "height": self.sheet.height,
                "margin": self.sheet.margin,
                "kerf": self.sheet.kerf,
            },
            "placed": [p.to_dict() for p in self.placed],
            "unplaced": list(self.unplaced),
            "efficiency": self.efficiency,
            "offcuts": [
                {"x": r.x, "y": r.y, "width": r.width, "height": r.height}
                for r in self.offcuts
            ],
        }


def intersects(a, b):
    """True when two rectangles share interior area; touching edges do not count."""
    return not (
        a.x + a.width <= b.x
        or b.x + b.width <= a.x
        or a.y + a.height <= b.y
        or b.y + b.height <= a.y
    )


def contains(outer, inner, tol=1e-6):
    return (
        inner.x >= outer.x - tol
        and inner.y >= outer.y - tol
        and inner.x + inner.width <= outer.x + outer.width + tol
        and inner.y + inner.height <= outer.y + outer.height + tol
    )


def usable_region(sheet):
    return FreeRect(sheet.margin, sheet.margin, sheet.usable_width, sheet.usable_height)


def validate_layout(result):
    """Return a list of human-readable layout rule violations (empty when valid)."""
    sheet = result.sheet
    usable = usable_region(sheet)
    problems = []

    for placed in result.placed:
        if not contains(usable, placed.footprint(0)):
            problems.append(f"{placed.part_id} lies outside the sheet margins.")

    placed = list(result.placed)
    for i, a in enumerate(placed):
        for b in placed[i + 1:]:
            if intersects(a.footprint(sheet.kerf), b.footprint(sheet.kerf)):
                problems.append(f"{a.part_id} overlaps {b.part_id} (kerf clearance violation).")

    sequences = sorted(p.sequence for p in placed)
    if sequences != list(range(1, len(placed) + 1)):
        problems.append("Cut sequence is not a 1..n permutation.")

    return problems
