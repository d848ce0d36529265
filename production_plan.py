"""
Per-part production plan for the shop floor stations.

A cabinet part is laid out on a standard slab together with the companion
parts of a typical cabinet, which gives the wall saw its position and cut
order. The CNC, edge-banding and packaging stations get template plans.
"""

import logging
from datetime import datetime, timezone

from layout_engine import compute_layout
from machine_programs import generate_gcode
from panel_utils import cutting_footprint
from slab_config import (
    BANDING_MATERIAL,
    BANDING_SEQUENCE,
    CNC_ESTIMATED_MINUTES,
    CNC_TOOL_CHANGES,
    DEFAULT_KERF,
    DEFAULT_MARGIN,
    DEFAULT_SLAB_MATERIAL,
    SLAB_HEIGHT,
    SLAB_WIDTH,
    STANDARD_CABINET_PARTS,
)
from slab_geometry import Part, Sheet

logger = logging.getLogger(__name__)

_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def _to_base36(number):
    if number <= 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_slab_id(now=None):
    moment = now or datetime.now(timezone.utc)
    return f"SLAB-{_to_base36(int(moment.timestamp() * 1000))}"


def default_slab():
    return Sheet(width=SLAB_WIDTH, height=SLAB_HEIGHT, margin=DEFAULT_MARGIN, kerf=DEFAULT_KERF)


def cabinet_parts(current_id, current_name, cut_width, cut_height):
    parts = [Part(id=current_id, name=current_name, width=cut_width, height=cut_height, is_current=True)]
    for companion in STANDARD_CABINET_PARTS:
        parts.append(Part(
            id=companion["id"],
            name=companion["name"],
            width=companion["width"],
            height=companion["height"],
        ))
    return parts


def generate_slab_layout(current_part, cut_width, cut_height, sheet=None, now=None):
    sheet = sheet or default_slab()
    current_id = str(current_part.get("id") or "current-part")
    current_name = current_part.get("name") or "Current Part"

    result = compute_layout(sheet, cabinet_parts(current_id, current_name, cut_width, cut_height))
    if current_id in result.unplaced:
        logger.warning("Part %s did not fit on the %sx%s slab", current_id, sheet.width, sheet.height)

    current = result.find(current_id)
    if current is None and result.placed:
        current = result.placed[0]

    if current is None:
        current_summary = {
            "x": sheet.margin,
            "y": sheet.margin,
            "width": cut_width,
            "height": cut_height,
            "sequence": 1,
        }
    else:
        current_summary = {
            "x": current.x,
            "y": current.y,
            "width": current.width,
            "height": current.height,
            "sequence": current.sequence,
        }

    other_parts = [
        {
            "part_id": p.part_id,
            "name": p.name,
            "x": p.x,
            "y": p.y,
            "width": p.width,
            "height": p.height,
            "cut_sequence": p.sequence,
        }
        for p in result.placed
        if not p.is_current
    ]

    return {
        "slab_id": generate_slab_id(now),
        "current_part": current_summary,
        "other_parts": other_parts,
        "efficiency": result.efficiency,
        "unplaced": list(result.unplaced),
        "layout": result,
    }


def build_production_plan(part, now=None):
    cut_width, cut_height, _ = cutting_footprint(
        part.get("width"),
        part.get("height"),
        part.get("depth") or part.get("thickness"),
    )
    slab = default_slab()
    slab_layout = generate_slab_layout(part, cut_width, cut_height, sheet=slab, now=now)
    current = slab_layout["current_part"]

    return {
        "wall_saw_plan": {
            "slab_id": slab_layout["slab_id"],
            "slab_material": part.get("material") or DEFAULT_SLAB_MATERIAL,
            "slab_width": slab.width,
            "slab_height": slab.height,
            "position_x": current["x"],
            "position_y": current["y"],
            "part_width": current["width"],
            "part_height": current["height"],
            "cut_sequence": current["sequence"],
            "other_parts": slab_layout["other_parts"],
            "efficiency": slab_layout["efficiency"],
        },
        "cnc_plan": {
            "program_id": f"CNC-{str(part.get('id') or '')[:8]}",
            "gcode": generate_gcode(part, generated_at=now),
            "tool_changes": list(CNC_TOOL_CHANGES),
            "estimated_time": CNC_ESTIMATED_MINUTES,
            "drill_holes": list(part.get("drilling") or []),
        },
        "banding_plan": {
            "banding_sequence": list(BANDING_SEQUENCE),
            "banding_material": BANDING_MATERIAL,
            "banding_color": part.get("color") or "White",
            "edges": {
                edge: {"band": True, "order": order}
                for order, edge in enumerate(BANDING_SEQUENCE, start=1)
            },
        },
        "packaging_plan": {
            "package_group": None,
            "protection_type": "Standard",
            "label_position": "Top",
            "special_instructions": "",
        },
    }
