import unittest

from partlab.dimensions import (
    FRONT,
    SIDE,
    TOP,
    CameraQuadrant,
    camera_quadrant,
    dimensions,
    format_label,
    visible_dimensions,
)
from partlab.library.catalog import PartsCatalog


class DimensionTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.catalog = PartsCatalog()
        cls.catalog.load()

    def test_nut_hole_diameter_label(self):
        nut = self.catalog.get("mech_2")
        labels = [dim.label for dim in dimensions(nut, unit="mm")]
        self.assertIn("⌀4.0mm", labels)
        self.assertIn("8.0mm", labels)
        self.assertIn("2.0mm", labels)

    def test_scale_uses_largest_component(self):
        nut = self.catalog.get("mech_2").with_transform(scale=(1.0, 2.0, 1.5))
        labels = [dim.label for dim in dimensions(nut, unit="mm")]
        self.assertIn("⌀8.0mm", labels)
        hole = [dim for dim in dimensions(nut, unit="mm") if dim.label.startswith("⌀")][0]
        self.assertAlmostEqual(hole.offset, 0.3)

    def test_screw_layout(self):
        screw = self.catalog.get("mech_1")
        dims = {dim.position: dim for dim in dimensions(screw, unit="mm")}
        self.assertEqual(dims[SIDE].label, "12.0mm")
        self.assertEqual(dims[TOP].label, "⌀8.0mm")
        self.assertEqual(dims[FRONT].label, "⌀4.0mm")
        self.assertAlmostEqual(dims[SIDE].end[1], 1.2)

    def test_every_catalog_part_has_dimensions(self):
        for part in self.catalog.all_parts():
            with self.subTest(part=part.id):
                self.assertGreater(len(dimensions(part, unit="mm")), 0)

    def test_label_rounding(self):
        self.assertEqual(format_label(12.345, "mm"), "12.3mm")
        self.assertEqual(format_label(0.25, "cm", diameter=True), "⌀0.3cm")
        self.assertEqual(format_label(7, "mm"), "7.0mm")

    def test_camera_quadrant(self):
        self.assertEqual(camera_quadrant((3.0, 6.0, -2.0)), CameraQuadrant(x=1, z=-1, top=True))
        self.assertEqual(camera_quadrant((0.0, 5.0, 2.0)), CameraQuadrant(x=0, z=1, top=False))

    def test_visible_dimensions_from_above_behind(self):
        dims = dimensions(self.catalog.get("mech_2"), unit="mm")
        visible = visible_dimensions(CameraQuadrant(x=-1, z=-1, top=True), dims)
        self.assertEqual([dim.position for dim in visible], [TOP])

    def test_visible_dimensions_from_front(self):
        dims = dimensions(self.catalog.get("mech_2"), unit="mm")
        visible = visible_dimensions(CameraQuadrant(x=1, z=1, top=False), dims)
        self.assertEqual(len(visible), len(dims))

    def test_side_visible_when_level_with_axis(self):
        dims = dimensions(self.catalog.get("mech_2"), unit="mm")
        visible = visible_dimensions(CameraQuadrant(x=-1, z=0, top=True), dims)
        self.assertEqual(sorted(dim.position for dim in visible), [SIDE, TOP])


if __name__ == "__main__":
    unittest.main()
