import math
import unittest

import numpy as np

from partlab.assembly import generate_part, synthesize, transform_matrix
from partlab.grounding import EPSILON, ground_offset
from partlab.library.catalog import PartsCatalog
from partlab.library.models import (
    BoxParameters,
    CupParameters,
    DiceParameters,
    GeometrySpec,
    Material,
    PartDescriptor,
    Transform,
    make_parameters,
)


def _descriptor(family, params=None, position=(0.0, 0.0, 0.0), **kwargs):
    return PartDescriptor(
        id=f"test-{family}",
        name=f"Test {family}",
        category="geometric",
        geometry=GeometrySpec(family, make_parameters(family, params)),
        transform=Transform(position=position, **kwargs),
    )


class GroundingTests(unittest.TestCase):
    def test_offset_table(self):
        self.assertAlmostEqual(ground_offset("box", BoxParameters(height=2.0)), 1.0 + EPSILON)
        self.assertAlmostEqual(ground_offset("sphere", make_parameters("sphere", {"radius": 0.5})), 0.5 + EPSILON)
        self.assertAlmostEqual(ground_offset("screw", make_parameters("screw")), 0.5 + EPSILON)
        self.assertAlmostEqual(ground_offset("nut", make_parameters("nut")), 0.1 + EPSILON)
        self.assertAlmostEqual(ground_offset("dice", DiceParameters(size=1.0)), 0.5)

    def test_requested_position_above_minimum_is_kept(self):
        self.assertEqual(ground_offset("box", BoxParameters(), 3.0), 3.0)
        self.assertEqual(ground_offset("cup", CupParameters(), 0.7), 0.7)

    def test_base_origin_families_clamped_at_clearance(self):
        self.assertAlmostEqual(ground_offset("cup", CupParameters(), -4.0), EPSILON)
        self.assertAlmostEqual(ground_offset("complexPlate", make_parameters("plate"), 0.0), EPSILON)

    def test_lowest_vertex_clears_ground(self):
        for family in ("box", "sphere", "cylinder", "screw", "nut", "cup", "plate"):
            for y in (-10.0, 0.0, 0.005):
                with self.subTest(family=family, y=y):
                    mesh = synthesize(_descriptor(family, position=(0.3, y, -0.2)))
                    self.assertGreaterEqual(mesh.bounds[0, 1], EPSILON - 1e-9)

    def test_dice_lowest_point_on_ground(self):
        result = generate_part(_descriptor("dice", {"size": 1}, position=(0.0, -3.0, 0.0)))
        self.assertAlmostEqual(result.position_y, 0.5)
        self.assertAlmostEqual(result.mesh.bounds[0, 1], 0.0)

    def test_transform_order(self):
        transform = Transform(position=(1.0, 2.0, 3.0), rotation=(0.0, math.pi / 2.0, 0.0), scale=(2.0, 1.0, 1.0))
        matrix = transform_matrix(transform, 2.0)
        point = matrix @ np.array([1.0, 0.0, 0.0, 1.0])
        # scale x2, then rotate +90 deg around Y: (2, 0, 0) -> (0, 0, -2)
        np.testing.assert_allclose(point[:3], (1.0, 2.0, 1.0), atol=1e-12)

    def test_generate_part_colours_vertices(self):
        descriptor = _descriptor("dice").with_material(color="#ff0000")
        mesh = generate_part(descriptor).mesh
        colors = mesh.visual.vertex_colors
        self.assertTrue(np.any(np.all(colors == (255, 0, 0, 255), axis=1)))
        self.assertTrue(np.any(np.all(colors == (0, 0, 0, 255), axis=1)))

    def test_thread_curves_follow_transform(self):
        result = generate_part(_descriptor("screw", position=(2.0, 0.0, 0.0)))
        self.assertEqual(len(result.curves), 1)
        curve = result.curves[0]
        self.assertAlmostEqual(curve[:, 1].min(), result.position_y - 0.5)
        self.assertAlmostEqual(np.hypot(curve[:, 0] - 2.0, curve[:, 2]).max(), 0.23, places=3)

    def test_catalog_parts_synthesize(self):
        catalog = PartsCatalog()
        catalog.load()
        for part in catalog.all_parts():
            with self.subTest(part=part.id):
                mesh = synthesize(part)
                self.assertGreater(len(mesh.faces), 0)
                self.assertGreaterEqual(mesh.bounds[0, 1], -1e-9)

    def test_descriptor_is_not_modified(self):
        descriptor = _descriptor("nut", position=(0.0, -1.0, 0.0))
        generate_part(descriptor)
        self.assertEqual(descriptor.transform.position, (0.0, -1.0, 0.0))
        self.assertEqual(descriptor.material, Material())


if __name__ == "__main__":
    unittest.main()
