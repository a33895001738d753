from __future__ import annotations

import os
import random
import re
import sys
import unittest
from pathlib import Path
from unittest import mock

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

import smartsvg.colors as colors_mod
from smartsvg import COLOR_NAMES, Attributes, ColorCycle, format_value, rotate, scale, sum_attributes, translate, view_box
from smartsvg.colors import random_color, rgb_of


class AttributeTests(unittest.TestCase):
    def test_format_value(self) -> None:
        self.assertEqual(format_value(70.0), "70")
        self.assertEqual(format_value(-0.0), "0")
        self.assertEqual(format_value(2.5), "2.5")
        self.assertEqual(format_value(3), "3")
        self.assertEqual(format_value("abc"), "abc")
        self.assertEqual(format_value(True), "true")

    def test_sorted_items_are_lexicographic(self) -> None:
        attrs = Attributes({"y": 2, "fill": "red", "x": 1.5, "height": 10})
        self.assertEqual(
            attrs.sorted_items(),
            [("fill", "red"), ("height", "10"), ("x", "1.5"), ("y", "2")],
        )

    def test_merge_appends_or_overrides(self) -> None:
        attrs = Attributes(transform="translate(1, 2)")
        attrs.merge(scale(3, 4))
        self.assertEqual(attrs["transform"], "translate(1, 2) scale(3, 4)")
        attrs.merge({"transform": "rotate(9)"}, override=True)
        self.assertEqual(attrs["transform"], "rotate(9)")

        attrs.merge({"fill": "none"}, None, {"stroke-width": 2})
        self.assertEqual(attrs["fill"], "none")
        self.assertEqual(attrs["stroke-width"], "2")

        attrs["class"] = ""
        attrs.merge({"class": "axis"})
        self.assertEqual(attrs["class"], "axis")

    def test_transform_helpers(self) -> None:
        self.assertEqual(translate(70.0, 25)["transform"], "translate(70, 25)")
        self.assertEqual(scale(1, -1)["transform"], "scale(1, -1)")
        self.assertEqual(rotate(90, 5, 0)["transform"], "rotate(90, 5, 0)")
        self.assertEqual(rotate(45)["transform"], "rotate(45)")
        self.assertEqual(view_box(0, 0, 20, 265)["viewBox"], "0 0 20 265")

    def test_sum_attributes_later_maps_win(self) -> None:
        merged = sum_attributes({"a": 1, "b": 2}, None, {"b": 3})
        self.assertEqual(merged, {"a": 1, "b": 3})
        self.assertIsInstance(merged, Attributes)

    def test_copy_is_independent(self) -> None:
        attrs = Attributes(fill="red")
        clone = attrs.copy()
        clone["fill"] = "blue"
        self.assertEqual(attrs["fill"], "red")
        self.assertIsInstance(clone, Attributes)


class ColorCycleTests(unittest.TestCase):
    def test_palette(self) -> None:
        self.assertEqual(len(COLOR_NAMES), 146)
        self.assertEqual(COLOR_NAMES[0], "aliceblue")
        self.assertEqual(COLOR_NAMES[-1], "yellowgreen")
        self.assertEqual(len(set(COLOR_NAMES)), 146)
        self.assertEqual(rgb_of("Navy"), (0, 0, 128))
        self.assertEqual(rgb_of("limegreen"), (50, 205, 50))
        with self.assertRaises(KeyError):
            rgb_of("notacolor")

    def test_full_turn_returns_every_name_once_then_repeats(self) -> None:
        cycle = ColorCycle(offset=0)
        seen = [cycle.next_color() for _ in range(146)]
        self.assertEqual(seen, list(COLOR_NAMES))
        self.assertEqual(cycle.next_color(), seen[0])

    def test_random_start_keeps_relative_order(self) -> None:
        cycle = ColorCycle(rng=random.Random(7))
        seen = [next(cycle) for _ in range(146)]
        start = COLOR_NAMES.index(seen[0])
        self.assertEqual(seen, list(COLOR_NAMES[start:] + COLOR_NAMES[:start]))
        self.assertEqual(next(cycle), seen[0])

    def test_offset_wraps(self) -> None:
        self.assertEqual(ColorCycle(offset=147).next_color(), "antiquewhite")
        self.assertEqual(ColorCycle(["a", "b"], offset=1).next_color(), "b")
        with self.assertRaises(ValueError):
            ColorCycle([])

    def test_reset_moves_cursor(self) -> None:
        cycle = ColorCycle(offset=10)
        cycle.next_color()
        cycle.reset()
        self.assertEqual(cycle.cursor, 0)
        self.assertEqual(cycle.next_color(), "aliceblue")
        cycle.reset(-1)
        self.assertEqual(cycle.next_color(), "yellowgreen")

    def test_random_color_is_independent_of_cursor(self) -> None:
        cycle = ColorCycle(offset=5, rng=random.Random(1))
        value = cycle.random_color()
        match = re.fullmatch(r"rgb\((\d{1,3}), (\d{1,3}), (\d{1,3})\)", value)
        self.assertIsNotNone(match)
        self.assertTrue(all(0 <= int(part) <= 255 for part in match.groups()))
        self.assertEqual(cycle.cursor, 5)
        self.assertRegex(random_color(), r"^rgb\(\d+, \d+, \d+\)$")

    def test_default_cycle_honours_env_offset(self) -> None:
        saved = colors_mod._DEFAULT_CYCLE
        self.addCleanup(setattr, colors_mod, "_DEFAULT_CYCLE", saved)
        colors_mod._DEFAULT_CYCLE = None
        with mock.patch.dict(os.environ, {colors_mod.COLOR_OFFSET_ENV: "3"}):
            cycle = colors_mod.default_cycle()
        self.assertIs(colors_mod.default_cycle(), cycle)
        self.assertEqual(cycle.next_color(), COLOR_NAMES[3])


if __name__ == "__main__":
    unittest.main()
