import unittest

from guillotine_splitter import split_free_rect
from slab_geometry import FreeRect, intersects


class GuillotineSplitterTests(unittest.TestCase):
    def test_split_adds_right_then_bottom_remainder(self):
        pool = [FreeRect(10, 10, 980, 980)]
        chosen = split_free_rect(pool, 0, 102, 102, min_usable=10)

        self.assertEqual(chosen, FreeRect(10, 10, 980, 980))
        self.assertEqual(pool, [
            FreeRect(112, 10, 878, 102),
            FreeRect(10, 112, 980, 878),
        ])

    def test_remainders_never_overlap_the_placement_or_each_other(self):
        pool = [FreeRect(0, 0, 1000, 800)]
        split_free_rect(pool, 0, 300, 200, min_usable=10)
        placed = FreeRect(0, 0, 300, 200)
        right, bottom = pool

        self.assertFalse(intersects(right, placed))
        self.assertFalse(intersects(bottom, placed))
        self.assertFalse(intersects(right, bottom))
        self.assertEqual(right.area + bottom.area + placed.area, 1000 * 800)

    def test_sliver_remainders_are_dropped(self):
        pool = [FreeRect(0, 0, 105, 300)]
        split_free_rect(pool, 0, 100, 100, min_usable=10)

        self.assertEqual(pool, [FreeRect(0, 100, 105, 200)])

    def test_exact_fit_consumes_the_rectangle(self):
        pool = [FreeRect(0, 0, 100, 100)]
        split_free_rect(pool, 0, 100, 100, min_usable=10)

        self.assertEqual(pool, [])

    def test_other_rectangles_keep_their_order(self):
        a = FreeRect(0, 0, 50, 50)
        b = FreeRect(100, 0, 400, 400)
        c = FreeRect(0, 500, 50, 50)
        pool = [a, b, c]

        split_free_rect(pool, 1, 100, 100, min_usable=10)

        self.assertEqual(pool, [
            a,
            c,
            FreeRect(200, 0, 300, 100),
            FreeRect(100, 100, 400, 300),
        ])


if __name__ == "__main__":
    unittest.main()
