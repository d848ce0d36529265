import io

import ezdxf
from ezdxf.enums import TextEntityAlignment


def _rectangle(x, y, w, h):
    return [(x, y), (x + w, y), (x + w, y + h), (x, y + h), (x, y)]


def layout_to_dxf(result):
    """
    Render a layout as DXF text. Layout y grows downward from the top edge;
    DXF y grows upward, so rows are mirrored against the sheet height.
    """
    if not result or not result.placed:
        raise ValueError("No layout data available to export DXF")

    sheet = result.sheet
    doc = ezdxf.new()
    msp = doc.modelspace()
    doc.layers.new(name='SHEET_BOUNDARY', dxfattribs={'color': 1})
    doc.layers.new(name='MARGIN', dxfattribs={'color': 2})
    doc.layers.new(name='CUT_LINES', dxfattribs={'color': 3})
    doc.layers.new(name='LABELS', dxfattribs={'color': 7})

    msp.add_lwpolyline(_rectangle(0, 0, sheet.width, sheet.height), dxfattribs={'layer': 'SHEET_BOUNDARY'})
    msp.add_lwpolyline(
        _rectangle(sheet.margin, sheet.margin, sheet.usable_width, sheet.usable_height),
        dxfattribs={'layer': 'MARGIN'},
    )

    for placed in sorted(result.placed, key=lambda p: p.sequence):
        x = placed.x
        y = sheet.height - placed.y - placed.height
        w = placed.width
        h = placed.height
        msp.add_lwpolyline(_rectangle(x, y, w, h), dxfattribs={'layer': 'CUT_LINES'})
        label_text = f"{placed.sequence}. {placed.name or placed.part_id}"
        msp.add_text(label_text, dxfattribs={'layer': 'LABELS', 'height': 20}).set_placement(
            (x + w / 2, y + h / 2), align=TextEntityAlignment.MIDDLE_CENTER
        )
        size_text = f"{int(w)}x{int(h)}" + (" R" if placed.rotated else "")
        msp.add_text(size_text, dxfattribs={'layer': 'LABELS', 'height': 15}).set_placement(
            (x + w / 2, y + h / 2 - 25), align=TextEntityAlignment.MIDDLE_CENTER
        )

    dxf_io = io.StringIO()
    doc.write(dxf_io)
    return dxf_io.getvalue()


def layout_rows(result, scale=1.0):
    """Placement rows in cut order, positions multiplied by a display scale."""
    rows = []
    for placed in sorted(result.placed, key=lambda p: p.sequence):
        rows.append({
            "Seq": placed.sequence,
            "Id": placed.part_id,
            "Name": placed.name,
            "X": round(placed.x * scale, 2),
            "Y": round(placed.y * scale, 2),
            "Width": round(placed.width * scale, 2),
            "Height": round(placed.height * scale, 2),
            "Rotated": placed.rotated,
            "Current": placed.is_current,
        })
    return rows
