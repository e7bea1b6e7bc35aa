import os
import tempfile
import unittest

import numpy as np
import trimesh

from partlab.assembly import synthesize
from partlab.errors import EmptyMesh, UnsupportedFormat
from partlab.export import (
    ExportFormat,
    export_filename,
    export_mesh,
    read_obj,
    read_stl,
    write_export,
)
from partlab.library.catalog import PartsCatalog
from partlab.mesh import MeshGroup


class ExportTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        catalog = PartsCatalog()
        catalog.load()
        cls.nut = catalog.get("mech_2")
        cls.screw = catalog.get("mech_1")

    def test_stl_round_trip(self):
        mesh = synthesize(self.nut)
        data = export_mesh(mesh, "stl")
        self.assertEqual(len(data), 84 + 50 * len(mesh.faces))
        normals, triangles = read_stl(data)
        self.assertEqual(len(triangles), len(mesh.faces))
        np.testing.assert_allclose(triangles, mesh.triangles, atol=1e-5)
        np.testing.assert_allclose(np.linalg.norm(normals, axis=1), 1.0, atol=1e-5)

    def test_stl_normals_point_outward(self):
        mesh = trimesh.creation.box(extents=(1.0, 1.0, 1.0))
        normals, triangles = read_stl(export_mesh(mesh, ExportFormat.STL))
        centers = triangles.mean(axis=1)
        self.assertTrue(np.all(np.sum(normals * centers, axis=1) > 0))

    def test_obj_round_trip(self):
        mesh = synthesize(self.screw)
        vertices, faces = read_obj(export_mesh(mesh, "obj"))
        self.assertEqual(len(faces), len(mesh.faces))
        self.assertTrue(np.all(faces >= 0))
        self.assertTrue(np.all(faces < len(vertices)))
        np.testing.assert_allclose(vertices[faces], mesh.triangles, atol=1e-5)

    def test_obj_lines_are_one_indexed(self):
        mesh = trimesh.creation.box(extents=(1.0, 1.0, 1.0))
        lines = export_mesh(mesh, "obj").decode("utf-8").splitlines()
        self.assertEqual(len([line for line in lines if line.startswith("v ")]), 8)
        face_lines = [line for line in lines if line.startswith("f ")]
        self.assertEqual(len(face_lines), 12)
        indices = [int(v.split("/")[0]) for line in face_lines for v in line.split()[1:]]
        self.assertEqual((min(indices), max(indices)), (1, 8))

    def test_stl_layout(self):
        mesh = trimesh.creation.box(extents=(1.0, 1.0, 1.0))
        data = export_mesh(mesh, "stl")
        self.assertEqual(int.from_bytes(data[80:84], "little"), 12)
        attributes = [data[84 + 50 * i + 48:84 + 50 * i + 50] for i in range(12)]
        self.assertTrue(all(value == b"\x00\x00" for value in attributes))

    def test_fbx_is_unsupported(self):
        mesh = synthesize(self.nut)
        with self.assertRaises(UnsupportedFormat):
            export_mesh(mesh, "fbx")
        with self.assertRaises(UnsupportedFormat):
            export_mesh(mesh, ExportFormat.FBX)

    def test_unknown_format(self):
        with self.assertRaises(UnsupportedFormat):
            ExportFormat.parse("step")

    def test_empty_mesh(self):
        empty = trimesh.Trimesh(vertices=np.zeros((0, 3)), faces=np.zeros((0, 3), dtype=np.int64))
        with self.assertRaises(EmptyMesh):
            export_mesh(empty, "stl")
        with self.assertRaises(EmptyMesh):
            export_mesh(MeshGroup("nothing"), "obj")

    def test_group_is_flattened(self):
        group = MeshGroup("pair")
        group.add("a", trimesh.creation.box(extents=(1.0, 1.0, 1.0)))
        group.add("b", trimesh.creation.box(extents=(1.0, 1.0, 1.0)), offset=(3.0, 0.0, 0.0))
        _, triangles = read_stl(export_mesh(group, "stl"))
        self.assertEqual(len(triangles), 24)
        self.assertAlmostEqual(triangles[..., 0].max(), 3.5, places=5)

    def test_filename_convention(self):
        self.assertEqual(export_filename("Screw M8", "stl"), "screw-m8.stl")
        self.assertEqual(export_filename("Big Coffee Mug", ExportFormat.OBJ), "big-coffee-mug.obj")

    def test_write_export(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = write_export(synthesize(self.nut), self.nut.name, "stl", os.path.join(tmp, "out"))
            self.assertEqual(os.path.basename(path), "nut-m8.stl")
            with open(path, "rb") as f:
                _, triangles = read_stl(f.read())
            self.assertGreater(len(triangles), 0)


if __name__ == "__main__":
    unittest.main()
