import logging

from slab_geometry import usable_region

logger = logging.getLogger(__name__)


def initial_pool(sheet):
    """Start with a single free rectangle: the whole sheet inside its margins."""
    return [usable_region(sheet)]


def is_sliver(rect, min_usable):
    return rect.width <= min_usable or rect.height <= min_usable


def prune(pool, min_usable):
    """Drop free rectangles too thin to hold anything, keeping scan order."""
    kept = [rect for rect in pool if not is_sliver(rect, min_usable)]
    dropped = len(pool) - len(kept)
    if dropped:
        logger.debug("Pruned %d sliver rectangle(s) below %s mm", dropped, min_usable)
    pool[:] = kept
    return pool


def free_area(pool):
    return sum(rect.area for rect in pool)
