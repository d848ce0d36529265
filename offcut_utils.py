from __future__ import annotations


def calculate_offcuts(result, min_width=120.0, min_height=120.0, min_area=25000.0):
    """Utilization inside the margins plus the leftover rectangles worth keeping."""
    sheet = result.sheet
    interior_area = max(0.0, sheet.usable_width) * max(0.0, sheet.usable_height)
    used_area = result.placed_area
    waste_area = max(0.0, interior_area - used_area)

    reusable = [
        {
            "x": round(r.x, 2),
            "y": round(r.y, 2),
            "width": round(r.width, 2),
            "height": round(r.height, 2),
            "area": round(r.area, 2),
        }
        for r in result.offcuts
        if r.width >= min_width and r.height >= min_height and r.area >= min_area
    ]
    reusable.sort(key=lambda r: r["area"], reverse=True)

    return {
        "interior_area": round(interior_area, 2),
        "used_area": round(used_area, 2),
        "waste_area": round(waste_area, 2),
        "utilization_pct": round((used_area / interior_area * 100.0), 2) if interior_area > 0 else 0.0,
        "reusable_offcuts": reusable,
    }
