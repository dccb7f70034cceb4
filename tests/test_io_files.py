import os
import tempfile
import unittest

from config import CFG
from io_files import write_layout_view_html, write_solution_text
from models import StickyBlockType, Vec2
from projection import GeodeProjection
from solution import Solution, SolutionGroup


class WriteOutputsTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self._orig_solution = CFG.SOLUTION_OUT
        self._orig_layout = CFG.LAYOUT_HTML

    def tearDown(self) -> None:
        CFG.SOLUTION_OUT = self._orig_solution
        CFG.LAYOUT_HTML = self._orig_layout

    def test_write_solution_text_uses_configured_relative_path(self) -> None:
        CFG.SOLUTION_OUT = "outputs/custom_solution.txt"
        proj = GeodeProjection.from_rows(["C...", "...."])
        group = SolutionGroup(
            {Vec2(0, 0), Vec2(1, 0), Vec2(2, 0), Vec2(2, 1)},
            StickyBlockType.HONEY,
            flying_machine_loc=Vec2(1, 0),
            flying_machine_is_vert=False,
            immovable_loc=Vec2(2, 1),
        )

        path = write_solution_text(Solution(proj, [group]), self.tmpdir.name)

        expected = os.path.join(self.tmpdir.name, "outputs", "custom_solution.txt")
        self.assertEqual(path, expected)
        with open(path, "r", encoding="utf-8") as fh:
            lines = fh.read().splitlines()
        self.assertEqual(lines[0], "1 groups, 1/1 crystals, 4 blocks")
        self.assertEqual(
            lines[1],
            "#00 honey machine @ (1,0) horizontal stopper @ (2,1): (0,0) (1,0) (2,0) (2,1)",
        )

    def test_write_solution_text_without_groups(self) -> None:
        CFG.SOLUTION_OUT = "solution.txt"
        path = write_solution_text(Solution(GeodeProjection.from_rows(["C"])), self.tmpdir.name)
        with open(path, "r", encoding="utf-8") as fh:
            self.assertEqual(fh.read(), "No solution\n")

    def test_write_layout_view_html_accepts_absolute_path(self) -> None:
        target = os.path.join(self.tmpdir.name, "html", "layout.html")
        CFG.LAYOUT_HTML = target

        svg = "<svg></svg>"
        legend = "<li>slime</li>"

        path = write_layout_view_html(svg, legend, self.tmpdir.name)

        self.assertEqual(path, target)
        self.assertTrue(os.path.exists(path))

        with open(path, "r", encoding="utf-8") as fh:
            contents = fh.read()
        self.assertIn(svg, contents)
        self.assertIn(legend, contents)


if __name__ == "__main__":
    unittest.main()
