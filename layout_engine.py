import logging
import math

from free_space import initial_pool, prune
from guillotine_splitter import split_free_rect
from placement_heuristic import find_best_fit
from slab_geometry import LayoutResult, PlacedPart

logger = logging.getLogger(__name__)


class SheetConfigError(ValueError):
    """Raised when the sheet itself cannot host any layout."""


def validate_sheet(sheet):
    if sheet.width <= 0 or sheet.height <= 0:
        raise SheetConfigError(f"Sheet dimensions must be positive, got {sheet.width}x{sheet.height}.")
    if sheet.margin < 0:
        raise SheetConfigError(f"Margin cannot be negative, got {sheet.margin}.")
    if sheet.kerf < 0:
        raise SheetConfigError(f"Kerf cannot be negative, got {sheet.kerf}.")
    if sheet.width <= 2 * sheet.margin or sheet.height <= 2 * sheet.margin:
        raise SheetConfigError(
            f"Margin {sheet.margin} leaves no usable area on a {sheet.width}x{sheet.height} sheet."
        )


def _round_half_up(value):
    return int(math.floor(value + 0.5))


def calculate_efficiency(placed, sheet):
    """Percentage of the whole sheet covered by placed parts (kerf excluded)."""
    if sheet.area <= 0:
        return 0
    total = sum(p.width * p.height for p in placed)
    return _round_half_up(total * 100 / sheet.area)


def sort_parts(parts):
    # sorted() is stable, so equal areas keep their input order.
    return sorted(parts, key=lambda p: p.width * p.height, reverse=True)


def compute_layout(sheet, parts):
    """Lay out ``parts`` on one ``sheet`` and return a LayoutResult."""
    validate_sheet(sheet)

    unplaced = []
    candidates = []
    for part in parts:
        if part.width <= 0 or part.height <= 0:
            logger.warning("Rejecting part %s with non-positive size %sx%s", part.id, part.width, part.height)
            unplaced.append(part.id)
        else:
            candidates.append(part)

    pool = initial_pool(sheet)
    placed = []

    for part in sort_parts(candidates):
        fit = find_best_fit(pool, part.width, part.height, sheet.kerf)
        if fit is None:
            logger.warning("Part %s (%sx%s) does not fit on the sheet", part.id, part.width, part.height)
            unplaced.append(part.id)
            continue

        rect = pool[fit.index]
        width, height = fit.orientation.footprint(part.width, part.height)
        placed.append(PlacedPart(
            part_id=part.id,
            name=part.name,
            x=rect.x,
            y=rect.y,
            width=width,
            height=height,
            sequence=len(placed) + 1,
            orientation=fit.orientation,
            is_current=part.is_current,
        ))
        logger.debug(
            "Placed %s at (%s, %s) %s, slack %s",
            part.id, rect.x, rect.y, fit.orientation.value, fit.slack,
        )

        split_free_rect(pool, fit.index, fit.width, fit.height, sheet.min_usable)
        prune(pool, sheet.min_usable)

    return LayoutResult(
        sheet=sheet,
        placed=tuple(placed),
        unplaced=tuple(unplaced),
        efficiency=calculate_efficiency(placed, sheet),
        offcuts=tuple(pool),
    )
