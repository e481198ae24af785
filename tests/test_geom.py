import math
import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from PyQt6.QtCore import QPointF

from molgraph import geom


class GeomTest(unittest.TestCase):
    def test_largest_gap_wraps_around(self):
        """Verifica que el hueco que cruza 0 rad se detecta."""
        start, gap = geom.largest_gap([0.5, -0.5])
        self.assertAlmostEqual(start, 0.5)
        self.assertAlmostEqual(gap, 2 * math.pi - 1.0)
        self.assertEqual(geom.largest_gap([]), (0.0, 0.0))

    def test_snap_angle(self):
        self.assertAlmostEqual(geom.snap_angle(math.radians(47.0), 15.0), math.radians(45.0))
        self.assertEqual(geom.snap_angle(1.234, 0.0), 1.234)

    def test_regular_polygon_sides(self):
        """Verifica los dos hexágonos posibles sobre un lado horizontal.

        Returns:
            None.

        """
        p1 = QPointF(0.0, 0.0)
        p2 = QPointF(40.0, 0.0)
        side1, side2 = geom.regular_polygon_sides(p1, p2, 6)
        self.assertEqual(len(side1), 4)
        self.assertEqual(len(side2), 4)
        self.assertAlmostEqual(geom.distance(p1, side1[0]), 40.0)
        self.assertAlmostEqual(geom.distance(p2, side1[-1]), 40.0)
        self.assertAlmostEqual(geom.distance(p2, side2[0]), 40.0)
        self.assertTrue(all(p.y() < 0 for p in side1))
        self.assertTrue(all(p.y() > 0 for p in side2))

    def test_cross_and_reflection(self):
        a = QPointF(0.0, 0.0)
        b = QPointF(10.0, 0.0)
        self.assertGreater(geom.cross(a, b, QPointF(5.0, 5.0)), 0.0)
        reflected = geom.reflect_point(QPointF(1.0, 2.0), QPointF(5.0, 5.0))
        self.assertEqual((reflected.x(), reflected.y()), (9.0, 8.0))


if __name__ == "__main__":
    unittest.main()
