import io
import re
import zipfile
from datetime import datetime, timezone

from slab_config import (
    CUT_FEED,
    DEFAULT_PART_HEIGHT,
    DEFAULT_PART_THICKNESS,
    DEFAULT_PART_WIDTH,
    PLUNGE_FEED,
    ROUTER_TOOL_DIAMETER,
    SPINDLE_RPM,
)

BORING_INSET = 37
BORING_DEPTH = 12
BORING_DIAMETER = 5


def _safe_float(value, default=0.0):
    try:
        return float(value)
    except (TypeError, ValueError):
        return float(default)


def _timestamp(generated_at):
    moment = generated_at or datetime.now(timezone.utc)
    return moment.isoformat()


def part_dimensions(part):
    """Nominal (width, height, thickness) of a part record, with shop defaults."""
    width = _safe_float(part.get("width"), 0.0) or DEFAULT_PART_WIDTH
    height = _safe_float(part.get("height"), 0.0) or DEFAULT_PART_HEIGHT
    thickness = (
        _safe_float(part.get("depth"), 0.0)
        or _safe_float(part.get("thickness"), 0.0)
        or DEFAULT_PART_THICKNESS
    )
    return width, height, thickness


def _format_number(value):
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, float):
        return f"{value:.3f}".rstrip("0").rstrip(".")
    return str(value)


def _sanitize_cix_name(value, fallback="PART"):
    raw = str(value or "").strip()
    cleaned = re.sub(r"[^A-Za-z0-9_-]+", "_", raw).strip("_")
    return cleaned[:40] or fallback


def generate_gcode(part, generated_at=None):
    """Perimeter-cut program for a single part."""
    w, h, d = (_format_number(v) for v in part_dimensions(part))
    lines = [
        f"; Part: {part.get('name') or 'Unknown'}",
        f"; Dimensions: {w} x {h} x {d}mm",
        f"; Generated: {_timestamp(generated_at)}",
        "",
        "G21 ; Set units to mm",
        "G90 ; Absolute positioning",
        "G17 ; XY plane selection",
        "",
        "; Tool change - 6mm End Mill",
        "T1 M6",
        f"S{SPINDLE_RPM} M3 ; Spindle on",
        "",
        "; Perimeter cut",
        "G0 X0 Y0 Z5",
        f"G1 Z-{d} F{PLUNGE_FEED}",
        f"G1 X{w} F{CUT_FEED}",
        f"G1 Y{h}",
        "G1 X0",
        "G1 Y0",
        "G0 Z5",
        "",
        "M5 ; Spindle off",
        "G0 X0 Y0 Z50 ; Return home",
        "M30 ; Program end",
    ]
    return "\n".join(lines)


def _cix_block(name, fields, indent="  "):
    lines = [f"BEGIN {name}"]
    for key, value in fields:
        lines.append(f"{indent}{key}= {_format_number(value)}")
    lines.append(f"END {name.split()[0]}")
    return lines


def generate_part_cix(part, generated_at=None):
    """CID3 program for one part: perimeter route plus four corner borings."""
    width, height, thickness = part_dimensions(part)
    part_name = re.sub(r"[^a-zA-Z0-9]", "_", part.get("name") or "Part")
    part_id = str(part.get("id") or "")
    moment = generated_at or datetime.now(timezone.utc)
    program_id = part_id[:8] if part_id else moment.strftime("%H%M%S%f")[:8]

    lines = _cix_block("ID CID3", [("REL", "4.0")])
    lines.append("")
    lines += _cix_block("MAINDATA", [
        ("INCH", 0), ("LPX", width), ("LPY", height), ("LPZ", thickness),
        ("ORLST", '"5"'), ("SIMESSION", 0), ("ROTEFLAG", 0), ("DRAWSIDE", 0), ("MIRTEFLAG", 0),
    ])
    lines.append("")
    lines += _cix_block("PARTINFO", [
        ("PARTNAME", f'"{part_name}"'),
        ("PROGRAMID", f'"{program_id}"'),
        ("MATERIAL", f'"{part.get("material") or "MDF"}"'),
        ("THICKNESS", thickness),
        ("GENERATED", f'"{moment.isoformat()}"'),
    ])
    lines.append("")
    lines += [
        "BEGIN MACRO",
        "  NAME= PERIMETER_CUT",
        f"  PARAM,NAME= TOOL_DIA,VALUE= {ROUTER_TOOL_DIAMETER}",
        f"  PARAM,NAME= DEPTH,VALUE= {_format_number(thickness)}",
        f"  PARAM,NAME= FEED,VALUE= {CUT_FEED}",
        f"  PARAM,NAME= SPINDLE,VALUE= {SPINDLE_RPM}",
        "END MACRO",
        "",
    ]

    lines += _cix_block("ROUTING", [
        ("ID", 1), ("SIDE", 0), ("CRN", '"1"'), ("Z", 0), ("DP", thickness),
        ("DIA", ROUTER_TOOL_DIAMETER), ("RTY", "rpRP"),
    ])[:-1]
    corners = [(0.0, 0.0), (width, 0.0), (width, height), (0.0, height)]
    for gid, (start, end) in enumerate(zip(corners, corners[1:] + corners[:1]), start=1):
        lines.append("")
        lines += _cix_block("ROUTGEO", [
            ("GID", gid), ("GC", 0), ("DIR", "dirCW"),
            ("SX", start[0]), ("SY", start[1]), ("EX", end[0]), ("EY", end[1]),
        ], indent="    ")
    lines.append("END ROUTING")

    borings = [
        (BORING_INSET, BORING_INSET),
        (width - BORING_INSET, BORING_INSET),
        (BORING_INSET, height - BORING_INSET),
        (width - BORING_INSET, height - BORING_INSET),
    ]
    for boring_id, (x, y) in enumerate(borings, start=100):
        lines.append("")
        lines += _cix_block("BORING", [
            ("ID", boring_id), ("SIDE", 0), ("CRN", '"1"'), ("X", x), ("Y", y), ("Z", 0),
            ("DP", BORING_DEPTH), ("DIA", BORING_DIAMETER), ("THR", 0), ("RTY", "rpRP"), ("DIR", "dirCW"),
        ])

    lines.append("")
    lines.append("END CID3")
    return "\n".join(lines)


def _format_cix_value(value):
    if isinstance(value, str):
        return f'"{value}"'
    return _format_number(value)


def _cix_macro(name, params):
    lines = ["BEGIN MACRO", f"\tNAME={name}"]
    for key, value in params.items():
        lines.append(f"\tPARAM,NAME={key},VALUE={_format_cix_value(value)}")
    lines.append("END MACRO")
    return "\n".join(lines)


def _append_routing_macros(program_lines, sequence, part_name, geo_id):
    program_lines.append(_cix_macro("WFL", {
        "ID": 9000 + sequence,
        "X": 0,
        "Y": 0,
        "Z": 0,
        "AZ": 90,
        "AR": 0,
        "UCS": 1,
        "RV": 0,
        "FRC": 1,
    }))
    program_lines.append("")
    program_lines.append(_cix_macro("ROUTG", {
        "LAY": f"Route_{part_name}",
        "ID": f"R{sequence}",
        "GID": geo_id,
        "Z": 0,
        "DP": 0,
        "THR": 1,
        "CRC": 2,
        "CKA": 3,
        "OPT": 1,
        "RSP": SPINDLE_RPM,
        "WSP": 10000,
        "DSP": 5000,
        "TIN": 0,
        "CIN": 0,
        "TOU": 0,
        "COU": 0,
        "TNM": f"{ROUTER_TOOL_DIAMETER}MM",
        "TOS": 1,
    }))
    program_lines.append("")


def _append_part_macros(program_lines, placed, sheet_height):
    part_name = _sanitize_cix_name(placed.name or placed.part_id, fallback=f"PART_{placed.sequence}")
    geo_id = f"G{part_name}_{placed.sequence}"
    # CIX uses a y-up origin at the bottom-left, like the DXF export.
    x, w, h = placed.x, placed.width, placed.height
    y = sheet_height - placed.y - h

    program_lines.append(_cix_macro("GEO", {"LAY": f"Part_{part_name}", "ID": geo_id, "SIDE": 0, "CRN": "2", "RTY": 2}))
    program_lines.append("")
    program_lines.append(_cix_macro("START_POINT", {"LAY": "Layer 0", "X": x, "Y": y + h}))
    program_lines.append("")
    for seg_idx, (xe, ye) in enumerate([(x, y), (x + w, y), (x + w, y + h), (x, y + h)]):
        program_lines.append(_cix_macro("LINE_EP", {
            "LAY": "Layer 0",
            "ID": 1000 * placed.sequence + seg_idx,
            "XE": xe,
            "YE": ye,
            "ZS": 0,
            "ZE": 0,
            "FD": 0,
            "SP": 0,
            "MVT": 0,
        }))
        program_lines.append("")
    program_lines.append(_cix_macro("ENDPATH", {}))
    program_lines.append("")
    _append_routing_macros(program_lines, placed.sequence, part_name, geo_id)
    program_lines.append(f"'PART_LABEL={placed.name or placed.part_id} SEQ={placed.sequence}'")
    program_lines.append("")


def build_sheet_cix_program(result, thickness=DEFAULT_PART_THICKNESS):
    """One CIX program for the whole slab, parts routed in cut-sequence order."""
    sheet = result.sheet
    program_lines = [
        "BEGIN ID CID3",
        "\tREL=5.0",
        "END ID",
        "",
        "BEGIN MAINDATA",
        f"\tLPX={_format_cix_value(float(sheet.width))}",
        f"\tLPY={_format_cix_value(float(sheet.height))}",
        f"\tLPZ={_format_cix_value(float(thickness))}",
        '\tORLST="9"',
        "\tSIMMETRY=0",
        "END MAINDATA",
        "",
        "BEGIN PUBLICVARS",
        "END PUBLICVARS",
        "",
    ]
    for placed in sorted(result.placed, key=lambda p: p.sequence):
        _append_part_macros(program_lines, placed, float(sheet.height))
    return "\n".join(program_lines).strip() + "\n"


def create_program_zip(result, parts=None, thickness=DEFAULT_PART_THICKNESS, generated_at=None):
    """Zip of the slab CIX plus per-part G-code and CIX for every placed part."""
    if not result or not result.placed:
        raise ValueError("No layout data available to export machine programs")

    records = {str(p.get("id")): p for p in (parts or [])}
    zip_buffer = io.BytesIO()
    with zipfile.ZipFile(zip_buffer, "a", zipfile.ZIP_DEFLATED, False) as zip_file:
        zip_file.writestr("Slab.cix", build_sheet_cix_program(result, thickness))
        for placed in sorted(result.placed, key=lambda p: p.sequence):
            record = records.get(placed.part_id) or {
                "id": placed.part_id,
                "name": placed.name,
                "width": placed.width,
                "height": placed.height,
                "thickness": thickness,
            }
            stem = f"{placed.sequence:02d}_{_sanitize_cix_name(placed.name or placed.part_id)}"
            zip_file.writestr(f"{stem}.nc", generate_gcode(record, generated_at))
            zip_file.writestr(f"{stem}.cix", generate_part_cix(record, generated_at))
    return zip_buffer.getvalue()
