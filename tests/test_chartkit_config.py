from __future__ import annotations

from dataclasses import FrozenInstanceError
import unittest

from chartkit.config import DEFAULT_CHART_DEFAULTS, ChartDefaults, validate_chart_defaults
from chartkit.style import (
    AUTO,
    ELEMENT_STYLES,
    LineStyle,
    Style,
    auto_style,
    element_font,
    element_style,
    lighter,
    next_symbol,
    parse_color,
    resolve_style,
)


class ChartDefaultsTests(unittest.TestCase):
    def test_overrides_are_merged(self) -> None:
        d = validate_chart_defaults({"pie_shrinkage": 0.5})
        self.assertEqual(d.pie_shrinkage, 0.5)
        self.assertEqual(d.box_percentile, DEFAULT_CHART_DEFAULTS.box_percentile)
        self.assertEqual(validate_chart_defaults(), DEFAULT_CHART_DEFAULTS)

    def test_unknown_key(self) -> None:
        with self.assertRaisesRegex(ValueError, "Unknown chart default"):
            validate_chart_defaults({"pie_size": 1.0})

    def test_invalid_values(self) -> None:
        with self.assertRaises(ValueError):
            validate_chart_defaults({"pie_shrinkage": 1.5})
        with self.assertRaises(ValueError):
            validate_chart_defaults({"key_col_sep": -1.0})
        with self.assertRaises(ValueError):
            validate_chart_defaults({"text_aspect": "wide"})
        with self.assertRaises(ValueError):
            validate_chart_defaults({"text_aspect": True})

    def test_int_fields_stay_int(self) -> None:
        d = validate_chart_defaults({"pie_min_highlight_shift": 4.0})
        self.assertIsInstance(d.pie_min_highlight_shift, int)

    def test_defaults_are_frozen(self) -> None:
        with self.assertRaises(FrozenInstanceError):
            DEFAULT_CHART_DEFAULTS.pie_shrinkage = 0.1  # type: ignore[misc]
        with self.assertRaises(ValueError):
            ChartDefaults(box_percentile=50.0)


class StyleTests(unittest.TestCase):
    def test_auto_styles_cycle(self) -> None:
        first = auto_style(0)
        self.assertEqual((first.symbol, first.symbol_color), ("o", "#cc0000"))
        second = auto_style(1)
        self.assertEqual((second.symbol, second.symbol_color, second.line_style), ("=", "#00bb00", LineStyle.DASHED))
        wrapped = auto_style(7)
        self.assertEqual((wrapped.symbol, wrapped.symbol_color, wrapped.line_style), ("o", "#00bb00", LineStyle.DOTTED))

    def test_first_styles_are_distinct(self) -> None:
        styles = [auto_style(i) for i in range(49)]
        self.assertEqual(len({(s.symbol, s.symbol_color) for s in styles}), 49)

    def test_filled_auto_style_is_lighter(self) -> None:
        s = auto_style(0, filled=True)
        self.assertIsNotNone(s.fill_color)
        self.assertNotEqual(s.fill_color, s.symbol_color)
        with self.assertRaises(ValueError):
            auto_style(-1)

    def test_resolve_style(self) -> None:
        self.assertEqual(resolve_style(AUTO, 2), auto_style(2))
        explicit = Style(line_color="#102030")
        self.assertIs(resolve_style(explicit, 0), explicit)
        self.assertIsNotNone(resolve_style(explicit, 0, filled=True).fill_color)

    def test_next_symbol_wraps(self) -> None:
        self.assertEqual(next_symbol("o"), "=")
        self.assertEqual(next_symbol("V"), "o")
        self.assertEqual(next_symbol("a"), "b")

    def test_colors(self) -> None:
        self.assertEqual(parse_color("#ff000080"), (255, 0, 0, 128))
        self.assertEqual(parse_color("#00ff00"), (0, 255, 0, 255))
        self.assertEqual(parse_color("#0000ff", 0.5), (0, 0, 255, 127))
        with self.assertRaises(ValueError):
            parse_color("red")
        self.assertEqual(lighter("#000000", 0.0), "#ffffff")
        self.assertEqual(lighter("#cc0000", 1.0), "#cc0000")

    def test_style_validation(self) -> None:
        with self.assertRaises(ValueError):
            Style(symbol="ab")
        with self.assertRaises(ValueError):
            Style(line_color="blue")
        with self.assertRaises(ValueError):
            Style(alpha=2.0)
        with self.assertRaises(ValueError):
            Style(line_width=-1)

    def test_element_tables_are_read_only(self) -> None:
        with self.assertRaises(TypeError):
            ELEMENT_STYLES["axis"] = Style()  # type: ignore[index]
        self.assertEqual(element_style("axis").line_width, 2)
        self.assertEqual(element_font("title").size, 16.0)
        with self.assertRaises(ValueError):
            element_style("nope")


if __name__ == "__main__":
    unittest.main()
