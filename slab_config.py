SLAB_WIDTH = 2800.0
SLAB_HEIGHT = 2070.0
DEFAULT_KERF = 4.0  # saw blade width
DEFAULT_MARGIN = 10.0

# Free rectangles this thin or thinner are dropped as slivers.
MIN_USABLE_SIZE = 10.0

SHEET_PRESETS = {
    "MDF (2800 x 2070)": (2800.0, 2070.0),
    "Ply (3050 x 1220)": (3050.0, 1220.0),
}

DEFAULT_SLAB_MATERIAL = "MDF 18mm"
DEFAULT_PART_THICKNESS = 18.0
DEFAULT_PART_WIDTH = 600.0
DEFAULT_PART_HEIGHT = 720.0

CNC_TOOL_CHANGES = ["T1 - 6mm End Mill", "T2 - 5mm Drill"]
CNC_ESTIMATED_MINUTES = 2.5
SPINDLE_RPM = 18000
PLUNGE_FEED = 1000
CUT_FEED = 3000
ROUTER_TOOL_DIAMETER = 6

BANDING_MATERIAL = "ABS 2mm"
BANDING_SEQUENCE = ["top", "bottom", "left", "right"]

# Companion parts of a typical base cabinet, cut alongside the focused part.
STANDARD_CABINET_PARTS = [
    {"id": "left-panel", "name": "Left Panel", "width": 720.0, "height": 554.0},
    {"id": "right-panel", "name": "Right Panel", "width": 720.0, "height": 554.0},
    {"id": "top-panel", "name": "Top Panel", "width": 564.0, "height": 554.0},
    {"id": "bottom-panel", "name": "Bottom Panel", "width": 564.0, "height": 554.0},
    {"id": "back-panel", "name": "Back Panel", "width": 600.0, "height": 720.0},
    {"id": "shelf-1", "name": "Shelf 1", "width": 564.0, "height": 534.0},
    {"id": "shelf-2", "name": "Shelf 2", "width": 564.0, "height": 534.0},
]
