from slab_config import DEFAULT_PART_HEIGHT, DEFAULT_PART_THICKNESS, DEFAULT_PART_WIDTH
from slab_geometry import Part

TRUTHY_VALUES = {"1", "true", "t", "yes", "y", "on"}
FALSY_VALUES = {"0", "false", "f", "no", "n", "off", ""}


def coerce_bool(value):
    """Safely coerce mixed UI/import values to bool without bool('False') bugs."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in TRUTHY_VALUES:
            return True
        if normalized in FALSY_VALUES:
            return False
    return False


def _coerce_float(value, default=0.0):
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def normalize_parts(rows):
    """
    Clean editor rows. Rows without an Id get ``part-<n>`` by position and a
    repeated Id gets a ``-<k>`` suffix so every row stays addressable.
    """
    normalized = []
    seen = set()
    for index, raw in enumerate(rows, start=1):
        row = dict(raw)
        base_id = str(row.get("Id") or "").strip() or f"part-{index}"
        part_id = base_id
        suffix = 2
        while part_id in seen:
            part_id = f"{base_id}-{suffix}"
            suffix += 1
        seen.add(part_id)
        normalized.append({
            "Id": part_id,
            "Label": str(row.get("Label") or "Part"),
            "Width": _coerce_float(row.get("Width", 0.0)),
            "Length": _coerce_float(row.get("Length", 0.0)),
            "Current?": coerce_bool(row.get("Current?", False)),
        })
    return normalized


def rows_to_parts(rows):
    return [
        Part(
            id=row["Id"],
            name=row["Label"],
            width=row["Width"],
            height=row["Length"],
            is_current=row["Current?"],
        )
        for row in normalize_parts(rows)
    ]


def cutting_footprint(width, height, depth):
    """
    For sheet goods the cutting face is the two largest dimensions and the
    smallest is the material thickness. Returns (cut_width, cut_height, thickness).
    """
    dims = sorted(
        [
            _coerce_float(width, 0.0) or DEFAULT_PART_WIDTH,
            _coerce_float(height, 0.0) or DEFAULT_PART_HEIGHT,
            _coerce_float(depth, 0.0) or DEFAULT_PART_THICKNESS,
        ],
        reverse=True,
    )
    return dims[0], dims[1], dims[2]
