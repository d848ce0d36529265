from __future__ import annotations

from dataclasses import dataclass

from slab_geometry import Orientation


@dataclass(frozen=True)
class Fit:
    """Best free rectangle for a part, with the footprint it will consume."""

    index: int
    width: float
    height: float
    orientation: Orientation
    slack: float


def short_side_slack(rect, width, height):
    return min(rect.width - width, rect.height - height)


def find_best_fit(pool, width, height, kerf=0.0):
    """
    Best Short-Side Fit over the free pool.

    Both orientations are tried on every free rectangle, upright first. The
    smallest leftover short side wins; on a tie the first candidate scanned
    is kept. Returns None when nothing fits.
    """
    best = None
    for index, rect in enumerate(pool):
        for orientation in (Orientation.UPRIGHT, Orientation.ROTATED):
            fw, fh = orientation.footprint(width + kerf, height + kerf)
            if not rect.fits(fw, fh):
                continue
            slack = short_side_slack(rect, fw, fh)
            if best is None or slack < best.slack:
                best = Fit(index, fw, fh, orientation, slack)
    return best
