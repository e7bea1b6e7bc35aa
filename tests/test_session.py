import asyncio
import os
import tempfile
import unittest

from partlab.errors import RequestSuperseded
from partlab.export import read_stl
from partlab.library.catalog import PartsCatalog
from partlab.session import EditorSession, LatestRequestGate


class LatestRequestGateTests(unittest.TestCase):
    def test_only_newest_ticket_is_current(self):
        gate = LatestRequestGate()
        first = gate.issue()
        second = gate.issue()
        self.assertFalse(gate.is_current(first))
        self.assertTrue(gate.is_current(second))
        with self.assertRaises(RequestSuperseded):
            gate.check(first)
        gate.check(second)


class EditorSessionTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        catalog = PartsCatalog()
        catalog.load()
        self.session = EditorSession(catalog=catalog, latency=0.0)

    async def test_search_sets_results(self):
        results = await self.session.search("nut")
        self.assertEqual([part.id for part in results], ["mech_2"])
        self.assertEqual(self.session.results, results)

    async def test_last_search_wins(self):
        slow = self.session.search("screw", latency=0.05)
        fast = self.session.search("mug", latency=0.0)
        outcomes = await asyncio.gather(slow, fast, return_exceptions=True)
        self.assertIsInstance(outcomes[0], RequestSuperseded)
        self.assertEqual([part.id for part in self.session.results], ["daily_1"])

    async def test_last_save_wins(self):
        self.session.select("mech_2")
        first = self.session.save("stl", latency=0.05)
        self.session.update_parameters(holeRadius=0.25)
        second = self.session.save("obj")
        outcomes = await asyncio.gather(first, second, return_exceptions=True)
        self.assertIsInstance(outcomes[0], RequestSuperseded)
        self.assertEqual(self.session.last_export.filename, "nut-m8.obj")

    async def test_save_writes_file(self):
        self.session.select("geo_2")
        with tempfile.TemporaryDirectory() as tmp:
            result = await self.session.save("stl", out_dir=tmp)
            self.assertEqual(result.path, os.path.join(tmp, "cube.stl"))
            with open(result.path, "rb") as f:
                _, triangles = read_stl(f.read())
            self.assertEqual(len(triangles), 12)

    async def test_edits_replace_selection_with_copies(self):
        original = self.session.select("geo_1")
        self.session.update_transform(position=(0.0, 2.0, 0.0))
        self.session.update_material(color="#00ff00")
        self.assertEqual(original.transform.position, (0.0, 0.0, 0.0))
        self.assertEqual(self.session.selected.transform.position, (0.0, 2.0, 0.0))
        self.assertEqual(self.session.preview().position_y, 2.0)

    async def test_save_without_selection(self):
        with self.assertRaises(ValueError):
            await self.session.save("stl")


if __name__ == "__main__":
    unittest.main()
