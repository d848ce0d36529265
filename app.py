import logging

import matplotlib.patches as patches
import matplotlib.pyplot as plt
import pandas as pd
import streamlit as st

from layout_engine import SheetConfigError, compute_layout
from layout_export import layout_rows, layout_to_dxf
from machine_programs import build_sheet_cix_program, create_program_zip
from offcut_utils import calculate_offcuts
from panel_utils import normalize_parts, rows_to_parts
from production_plan import build_production_plan
from slab_config import DEFAULT_KERF, DEFAULT_MARGIN, DEFAULT_PART_THICKNESS, SHEET_PRESETS, SLAB_HEIGHT, SLAB_WIDTH, STANDARD_CABINET_PARTS
from slab_geometry import Sheet

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

# --- PAGE CONFIG ---
st.set_page_config(page_title="Slab Layout", layout="wide")

# --- SESSION STATE ---
if 'parts' not in st.session_state:
    st.session_state['parts'] = normalize_parts([
        {"Id": p["id"], "Label": p["name"], "Width": p["width"], "Length": p["height"]}
        for p in STANDARD_CABINET_PARTS
    ])
if 'sheet_w' not in st.session_state:
    st.session_state.sheet_w = SLAB_WIDTH
if 'sheet_h' not in st.session_state:
    st.session_state.sheet_h = SLAB_HEIGHT
if 'kerf' not in st.session_state:
    st.session_state.kerf = DEFAULT_KERF
if 'margin' not in st.session_state:
    st.session_state.margin = DEFAULT_MARGIN
if 'thickness' not in st.session_state:
    st.session_state.thickness = DEFAULT_PART_THICKNESS
if 'layout_result' not in st.session_state:
    st.session_state.layout_result = None
if 'last_sheet_preset_applied' not in st.session_state:
    st.session_state.last_sheet_preset_applied = "Custom"


# --- HELPERS ---


def add_part(w, l, label, current):
    rows = st.session_state['parts']
    rows.append({"Id": "", "Label": label, "Width": w, "Length": l, "Current?": current})
    st.session_state['parts'] = normalize_parts(rows)


def clear_data():
    st.session_state['parts'] = []
    st.session_state.layout_result = None


def sync_sheet_dims_from_preset():
    preset = st.session_state.get("sheet_preset", "Custom")
    if st.session_state.get("last_sheet_preset_applied") == preset:
        return

    dims = SHEET_PRESETS.get(preset)
    if dims is not None:
        st.session_state.sheet_w, st.session_state.sheet_h = dims

    st.session_state.last_sheet_preset_applied = preset


def draw_slab(result):
    sheet = result.sheet
    fig, ax = plt.subplots(figsize=(7.5, 5.5))
    ax.set_xlim(0, sheet.width)
    # Layout y grows downward from the top edge.
    ax.set_ylim(sheet.height, 0)
    ax.set_aspect('equal')
    ax.axis('off')
    ax.add_patch(patches.Rectangle((0, 0), sheet.width, sheet.height, fc='#eef5ff', ec='#333'))
    ax.add_patch(patches.Rectangle((sheet.margin, sheet.margin), sheet.usable_width, sheet.usable_height, ec='red', ls='--', fc='none'))

    for rect in result.offcuts:
        ax.add_patch(patches.Rectangle((rect.x, rect.y), rect.width, rect.height, fc='none', ec='#bbb', ls=':'))

    for placed in result.placed:
        if placed.is_current:
            fc = '#f39c12'
        elif placed.rotated:
            fc = '#5a7'
        else:
            fc = '#6fa8dc'
        ax.add_patch(patches.Rectangle((placed.x, placed.y), placed.width, placed.height, fc=fc, ec='#222'))
        ax.text(
            placed.x + placed.width / 2,
            placed.y + placed.height / 2,
            f"#{placed.sequence} {placed.name}\n{int(placed.width)}x{int(placed.height)}",
            ha='center', va='center', fontsize=7,
        )

    st.pyplot(fig)


# --- MAIN PAGE ---
st.title("🪚 Slab Cutting Layout")

st.sidebar.header("⚙️ Slab Settings")
st.sidebar.selectbox("Select Sheet Size", ["Custom"] + list(SHEET_PRESETS), index=0, key="sheet_preset")
sync_sheet_dims_from_preset()
SHEET_W = st.sidebar.number_input("Sheet Width", key="sheet_w", step=10.0)
SHEET_H = st.sidebar.number_input("Sheet Height", key="sheet_h", step=10.0)
KERF = st.sidebar.number_input("Kerf", key="kerf", min_value=0.0)
MARGIN = st.sidebar.number_input("Margin", key="margin", min_value=0.0)
THICKNESS = st.sidebar.number_input("Material Thickness", key="thickness", min_value=1.0)

input_tab, result_tab, plan_tab = st.tabs(["1️⃣ Parts", "2️⃣ Slab Layout", "3️⃣ Production Plan"])

with input_tab:
    with st.form("add_part"):
        c1, c2 = st.columns(2)
        w = c1.number_input("W", step=10.0)
        l = c2.number_input("L", step=10.0)
        lbl = st.text_input("Label", "Part")
        cur = st.checkbox("Current part")
        if st.form_submit_button("Add"):
            add_part(w, l, lbl, cur)
            st.success("Added")

    if st.session_state['parts']:
        st.markdown("### Part List")
        edited = st.data_editor(
            pd.DataFrame(st.session_state['parts']),
            hide_index=True,
            num_rows="dynamic",
            width="stretch",
            key="parts_editor",
        )
        st.session_state['parts'] = normalize_parts(edited.fillna("").to_dict("records"))

        if st.button("🗑️ Clear All Parts"):
            clear_data()
            st.rerun()

    st.write("---")
    if st.button("🚀 RUN LAYOUT", type="primary", use_container_width=True):
        if not st.session_state['parts']:
            st.warning("Empty.")
        else:
            sheet = Sheet(width=SHEET_W, height=SHEET_H, margin=MARGIN, kerf=KERF)
            try:
                result = compute_layout(sheet, rows_to_parts(st.session_state['parts']))
            except SheetConfigError as e:
                st.error(f"Invalid slab settings: {e}")
                st.session_state.layout_result = None
            else:
                st.session_state.layout_result = result
                if result.unplaced:
                    st.error(f"⚠️ {len(result.unplaced)} part(s) could not fit on the slab: {', '.join(result.unplaced)}")
                else:
                    st.success(f"Success! All {len(result.placed)} parts placed, efficiency {result.efficiency}%.")

with result_tab:
    st.subheader("Slab Layout")
    result = st.session_state.layout_result
    if result and result.placed:
        m1, m2, m3 = st.columns(3)
        m1.metric("Efficiency", f"{result.efficiency}%")
        m2.metric("Placed", len(result.placed))
        m3.metric("Unplaced", len(result.unplaced))

        draw_slab(result)
        st.dataframe(pd.DataFrame(layout_rows(result)), hide_index=True, width="stretch")

        offcuts = calculate_offcuts(result)
        st.caption(
            f"Usable-area utilization {offcuts['utilization_pct']}% | "
            f"waste {(offcuts['waste_area'] / 1_000_000):.2f} m² | "
            f"{len(offcuts['reusable_offcuts'])} reusable offcut(s)"
        )
        if offcuts["reusable_offcuts"]:
            st.dataframe(pd.DataFrame(offcuts["reusable_offcuts"]), hide_index=True, width="stretch")

        records = [
            {"id": row["Id"], "name": row["Label"], "width": row["Width"], "height": row["Length"], "thickness": THICKNESS}
            for row in st.session_state['parts']
        ]
        d1, d2, d3 = st.columns(3)
        d1.download_button("💾 DXF", layout_to_dxf(result), "slab.dxf", "application/dxf", use_container_width=True)
        d2.download_button("💾 Slab CIX", build_sheet_cix_program(result, THICKNESS), "slab.cix", "text/plain", use_container_width=True)
        d3.download_button("💾 All Programs", create_program_zip(result, records, THICKNESS), "programs.zip", "application/zip", use_container_width=True)
    elif result:
        st.warning("No parts could be placed on this slab.")
    else:
        st.info("Run the layout from the Parts tab to view results.")

with plan_tab:
    st.subheader("Production Plan")
    if not st.session_state['parts']:
        st.info("Add parts to build a production plan.")
    else:
        options = {row["Id"]: row for row in st.session_state['parts']}
        default_id = next((row["Id"] for row in st.session_state['parts'] if row["Current?"]), next(iter(options)))
        selected_id = st.selectbox(
            "Part",
            list(options),
            index=list(options).index(default_id),
            format_func=lambda pid: f"{options[pid]['Label']} ({pid})",
        )
        row = options[selected_id]
        plan = build_production_plan({
            "id": row["Id"],
            "name": row["Label"],
            "width": row["Width"],
            "height": row["Length"],
            "depth": THICKNESS,
        })
        saw = plan["wall_saw_plan"]
        st.markdown(
            f"**Slab** {saw['slab_id']} ({saw['slab_material']}, {int(saw['slab_width'])}x{int(saw['slab_height'])}) | "
            f"position ({saw['position_x']:g}, {saw['position_y']:g}) | cut #{saw['cut_sequence']} | "
            f"efficiency {saw['efficiency']}%"
        )
        st.dataframe(pd.DataFrame(saw["other_parts"]), hide_index=True, width="stretch")
        st.code(plan["cnc_plan"]["gcode"], language="gcode")
        st.json({k: v for k, v in plan.items() if k not in ("wall_saw_plan", "cnc_plan")})
