import io
import re
import unittest
import zipfile
from datetime import datetime, timezone

import ezdxf

from layout_engine import compute_layout
from layout_export import layout_to_dxf
from machine_programs import build_sheet_cix_program, create_program_zip, generate_gcode, generate_part_cix
from slab_geometry import LayoutResult, Part, Sheet

FIXED_NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


class MachineProgramTests(unittest.TestCase):
    def setUp(self):
        self.part = {"id": "abc12345-side", "name": "Side Panel", "width": 600, "height": 720, "depth": 18}
        self.result = compute_layout(
            Sheet(width=1000, height=1000, margin=0, kerf=0),
            [Part("a", "Base", 600, 600), Part("b", "Side Panel", 400, 600)],
        )

    def test_gcode_traces_the_part_perimeter(self):
        gcode = generate_gcode(self.part, generated_at=FIXED_NOW)

        self.assertIn("; Part: Side Panel", gcode)
        self.assertIn("; Dimensions: 600 x 720 x 18mm", gcode)
        self.assertIn(f"; Generated: {FIXED_NOW.isoformat()}", gcode)
        self.assertIn("G1 Z-18 F1000", gcode)
        self.assertIn("G1 X600 F3000", gcode)
        self.assertIn("G1 Y720", gcode)
        self.assertTrue(gcode.endswith("M30 ; Program end"))

    def test_gcode_uses_shop_defaults_for_missing_dimensions(self):
        gcode = generate_gcode({}, generated_at=FIXED_NOW)

        self.assertIn("; Part: Unknown", gcode)
        self.assertIn("; Dimensions: 600 x 720 x 18mm", gcode)

    def test_part_cix_contains_route_and_corner_borings(self):
        cix = generate_part_cix(self.part, generated_at=FIXED_NOW)

        self.assertTrue(cix.startswith("BEGIN ID CID3"))
        self.assertIn("LPX= 600", cix)
        self.assertIn("LPY= 720", cix)
        self.assertIn("LPZ= 18", cix)
        self.assertIn('PARTNAME= "Side_Panel"', cix)
        self.assertIn('PROGRAMID= "abc12345"', cix)
        self.assertEqual(cix.count("BEGIN ROUTGEO"), 4)
        self.assertEqual(cix.count("BEGIN BORING"), 4)
        self.assertIn("X= 563", cix)
        self.assertIn("Y= 683", cix)
        self.assertTrue(cix.endswith("END CID3"))

    def test_sheet_cix_routes_parts_in_cut_order(self):
        program = build_sheet_cix_program(self.result, thickness=18)

        self.assertIn("LPX=1000", program)
        self.assertIn("LPZ=18", program)
        self.assertEqual(program.count("NAME=GEO"), 2)
        self.assertEqual(program.count("NAME=WFL"), 2)
        self.assertEqual(program.count("NAME=ROUTG"), 2)
        self.assertIn("PARAM,NAME=ID,VALUE=9001", program)
        self.assertIn("PARAM,NAME=ID,VALUE=9002", program)
        self.assertLess(program.index("NAME=WFL"), program.index("NAME=ROUTG"))
        self.assertIn("PARAM,NAME=CKA,VALUE=3", program)
        self.assertLess(program.index("'PART_LABEL=Base SEQ=1'"), program.index("'PART_LABEL=Side Panel SEQ=2'"))
        self.assertIn("PARAM,NAME=XE,VALUE=1000", program)

    def test_sheet_cix_and_dxf_agree_on_part_rows(self):
        result = compute_layout(
            Sheet(width=1000, height=1000, margin=10, kerf=4),
            [Part("a", "Base", 600, 300), Part("b", "Shelf", 100, 100)],
        )
        program = build_sheet_cix_program(result, thickness=18)
        chunks = program.split("NAME=GEO")[1:]
        cix_ranges = []
        for chunk in chunks:
            ys = [float(v) for v in re.findall(r"PARAM,NAME=YE,VALUE=([-\d.]+)", chunk)]
            cix_ranges.append((min(ys), max(ys)))

        doc = ezdxf.read(io.StringIO(layout_to_dxf(result)))
        dxf_ranges = []
        for polyline in doc.modelspace().query('LWPOLYLINE[layer=="CUT_LINES"]'):
            ys = [p[1] for p in polyline.get_points("xy")]
            dxf_ranges.append((min(ys), max(ys)))

        self.assertEqual(len(cix_ranges), 2)
        self.assertEqual(cix_ranges, dxf_ranges)
        self.assertEqual(cix_ranges[0], (690.0, 990.0))

    def test_part_cix_without_id_is_repeatable_for_a_fixed_moment(self):
        part = {"name": "Shelf", "width": 564, "height": 534}
        first = generate_part_cix(part, generated_at=FIXED_NOW)
        second = generate_part_cix(part, generated_at=FIXED_NOW)

        self.assertEqual(first, second)
        self.assertIn('PROGRAMID= "00000000"', first)

    def test_program_zip_holds_slab_and_part_programs(self):
        data = create_program_zip(self.result, [self.part | {"id": "b"}], thickness=18, generated_at=FIXED_NOW)

        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            names = sorted(archive.namelist())
            self.assertEqual(names, ["01_Base.cix", "01_Base.nc", "02_Side_Panel.cix", "02_Side_Panel.nc", "Slab.cix"])
            side = archive.read("02_Side_Panel.nc").decode("utf-8")
            base = archive.read("01_Base.nc").decode("utf-8")

        self.assertIn("; Dimensions: 600 x 720 x 18mm", side)
        self.assertIn("; Dimensions: 600 x 600 x 18mm", base)

    def test_program_zip_rejects_empty_layout(self):
        with self.assertRaises(ValueError):
            create_program_zip(LayoutResult(Sheet(width=100, height=100)))


if __name__ == "__main__":
    unittest.main()
