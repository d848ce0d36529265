import unittest
from datetime import datetime, timezone

from production_plan import _to_base36, build_production_plan, cabinet_parts, generate_slab_id, generate_slab_layout
from slab_geometry import validate_layout

FIXED_NOW = datetime(2024, 1, 1, 8, 30, tzinfo=timezone.utc)


class ProductionPlanTests(unittest.TestCase):
    def setUp(self):
        self.part = {
            "id": "abc12345-door",
            "name": "Door",
            "width": 600,
            "height": 720,
            "depth": 18,
            "color": "Oak",
        }

    def test_slab_id_is_base36_timestamp(self):
        self.assertEqual(_to_base36(35), "Z")
        self.assertEqual(_to_base36(36), "10")
        slab_id = generate_slab_id(FIXED_NOW)
        self.assertRegex(slab_id, r"^SLAB-[0-9A-Z]+$")
        self.assertEqual(slab_id, generate_slab_id(FIXED_NOW))

    def test_cabinet_parts_flag_only_the_current_part(self):
        parts = cabinet_parts("door", "Door", 720, 600)

        self.assertEqual(len(parts), 8)
        self.assertEqual([p.id for p in parts if p.is_current], ["door"])

    def test_slab_layout_places_current_part_first(self):
        slab = generate_slab_layout(self.part, 720, 600, now=FIXED_NOW)
        layout = slab["layout"]

        self.assertEqual(validate_layout(layout), [])
        self.assertEqual(slab["current_part"]["x"], 10)
        self.assertEqual(slab["current_part"]["y"], 10)
        self.assertEqual(slab["current_part"]["sequence"], 1)
        self.assertEqual(slab["current_part"]["width"] * slab["current_part"]["height"], 720 * 600)
        self.assertEqual(len(slab["other_parts"]), len(layout.placed) - 1)
        self.assertNotIn(self.part["id"], [p["part_id"] for p in slab["other_parts"]])
        self.assertEqual(slab["efficiency"], layout.efficiency)

    def test_unplaceable_current_part_falls_back_to_first_placement(self):
        huge = {"id": "huge", "name": "Huge", "width": 5000, "height": 3000, "depth": 18}
        slab = generate_slab_layout(huge, 5000, 3000, now=FIXED_NOW)

        self.assertIn("huge", slab["unplaced"])
        first = slab["layout"].placed[0]
        self.assertEqual(slab["current_part"]["sequence"], 1)
        self.assertEqual((slab["current_part"]["x"], slab["current_part"]["y"]), (first.x, first.y))
        self.assertEqual(len(slab["other_parts"]), len(slab["layout"].placed))

    def test_build_production_plan_sections(self):
        plan = build_production_plan(self.part, now=FIXED_NOW)

        saw = plan["wall_saw_plan"]
        self.assertEqual(saw["slab_material"], "MDF 18mm")
        self.assertEqual((saw["slab_width"], saw["slab_height"]), (2800.0, 2070.0))
        self.assertEqual(saw["cut_sequence"], 1)
        self.assertEqual(saw["slab_id"], generate_slab_id(FIXED_NOW))

        cnc = plan["cnc_plan"]
        self.assertEqual(cnc["program_id"], "CNC-abc12345")
        self.assertIn("G1 Z-18", cnc["gcode"])
        self.assertEqual(cnc["tool_changes"], ["T1 - 6mm End Mill", "T2 - 5mm Drill"])
        self.assertEqual(cnc["drill_holes"], [])

        banding = plan["banding_plan"]
        self.assertEqual(banding["banding_color"], "Oak")
        self.assertEqual(banding["edges"]["left"], {"band": True, "order": 3})

        self.assertEqual(plan["packaging_plan"]["protection_type"], "Standard")

    def test_build_production_plan_uses_material_when_given(self):
        plan = build_production_plan(dict(self.part, material="Birch Ply 18mm"), now=FIXED_NOW)
        self.assertEqual(plan["wall_saw_plan"]["slab_material"], "Birch Ply 18mm")


if __name__ == "__main__":
    unittest.main()
