import math
import unittest

import numpy as np

from partlab.errors import InvalidParameter
from partlab.library.profiles import (
    ProfilePath,
    cubic_bezier,
    extrude_profile,
    helix_points,
    lathe,
    regular_polygon,
    sweep_tube,
)


def _face_areas(mesh):
    tri = mesh.triangles
    return np.linalg.norm(np.cross(tri[:, 1] - tri[:, 0], tri[:, 2] - tri[:, 0]), axis=1) / 2.0


class ProfileTests(unittest.TestCase):
    def test_regular_polygon_corners_on_circumcircle(self):
        pts = regular_polygon(6, 0.4)
        self.assertEqual(len(pts), 6)
        for x, y in pts:
            self.assertAlmostEqual(math.hypot(x, y), 0.4)

    def test_regular_polygon_rejects_two_corners(self):
        with self.assertRaises(InvalidParameter):
            regular_polygon(2, 1.0)

    def test_cubic_bezier_hits_endpoints(self):
        curve = cubic_bezier((0, 0), (1, 0), (1, 1), (2, 1), divisions=10)
        self.assertEqual(curve.shape, (11, 2))
        np.testing.assert_allclose(curve[0], (0, 0))
        np.testing.assert_allclose(curve[-1], (2, 1))

    def test_profile_path_collapses_duplicates(self):
        path = ProfilePath()
        path.move_to(0.0, 0.0)
        path.line_to(1.0, 0.0)
        path.line_to(1.0, 0.0)
        path.bezier_curve_to(1.2, 0.0, 1.4, 0.1, 1.5, 0.3, divisions=8)
        pts = path.points()
        self.assertEqual(len(pts), 2 + 8)
        steps = np.linalg.norm(np.diff(pts, axis=0), axis=1)
        self.assertTrue(np.all(steps > 0))

    def test_line_to_without_start_fails(self):
        with self.assertRaises(ValueError):
            ProfilePath().line_to(1.0, 0.0)

    def test_helix_point_count_and_extent(self):
        pts = helix_points(1.0, 0.05, 0.2, 0.03)
        self.assertEqual(len(pts), 20 * 64)
        self.assertAlmostEqual(pts[0, 1], -0.5)
        self.assertAlmostEqual(pts[-1, 1], 0.5)
        radii = np.hypot(pts[:, 0], pts[:, 2])
        self.assertLessEqual(radii.max(), 0.23 + 1e-9)
        self.assertGreaterEqual(radii.min(), 0.17 - 1e-9)

    def test_helix_shorter_than_pitch_is_empty(self):
        self.assertEqual(len(helix_points(0.04, 0.05, 0.2, 0.03)), 0)

    def test_lathe_cylinder_is_closed(self):
        profile = [(0.0, -0.5), (0.5, -0.5), (0.5, 0.5), (0.0, 0.5)]
        mesh = lathe(profile, segments=32)
        self.assertTrue(mesh.is_watertight)
        self.assertGreater(mesh.volume, 0)
        self.assertAlmostEqual(mesh.volume, math.pi * 0.25 * 32 / (2 * math.pi) * math.sin(2 * math.pi / 32), places=6)
        self.assertTrue(np.all(_face_areas(mesh) > 0))

    def test_lathe_rejects_negative_radius(self):
        with self.assertRaises(InvalidParameter):
            lathe([(0.0, 0.0), (-0.5, 0.0), (0.0, 1.0)])

    def test_lathe_rejects_self_intersection(self):
        with self.assertRaises(InvalidParameter):
            lathe([(0.0, 0.0), (1.0, 1.0), (1.0, 0.0), (0.0, 1.0)])

    def test_lathe_rejects_two_segments(self):
        with self.assertRaises(InvalidParameter):
            lathe([(0.0, 0.0), (1.0, 0.0), (0.0, 1.0)], segments=2)

    def test_extrude_centered_on_y(self):
        mesh = extrude_profile(regular_polygon(6, 0.4), [], 0.2)
        np.testing.assert_allclose(mesh.bounds[:, 1], (-0.1, 0.1), atol=1e-9)
        self.assertTrue(mesh.is_watertight)

    def test_extrude_chamfer_keeps_outline_and_height(self):
        hole = [(0.2 * math.cos(a), 0.2 * math.sin(a)) for a in np.linspace(0, 2 * math.pi, 32, endpoint=False)]
        mesh = extrude_profile(regular_polygon(6, 0.4), [hole], 0.2, chamfer=0.04)
        np.testing.assert_allclose(mesh.bounds[:, 1], (-0.1, 0.1), atol=1e-9)
        radial = np.hypot(mesh.vertices[:, 0], mesh.vertices[:, 2])
        self.assertAlmostEqual(radial.max(), 0.4)
        self.assertAlmostEqual(radial.min(), 0.2)
        self.assertTrue(mesh.is_watertight)
        self.assertTrue(np.all(_face_areas(mesh) > 0))

    def test_extrude_rejects_oversized_chamfer(self):
        with self.assertRaises(InvalidParameter):
            extrude_profile(regular_polygon(6, 0.4), [], 0.2, chamfer=0.1)

    def test_sweep_tube_follows_path(self):
        path = cubic_bezier((0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0), divisions=20)
        mesh = sweep_tube(path, 0.05)
        self.assertEqual(len(mesh.faces), 20 * 8 * 2 + 2 * 8)
        self.assertTrue(np.all(_face_areas(mesh) > 0))
        self.assertLess(mesh.bounds[0, 2], 0)
        self.assertGreater(mesh.bounds[1, 2], 0)


if __name__ == "__main__":
    unittest.main()
