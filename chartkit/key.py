from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Union

from chartkit.config import DEFAULT_CHART_DEFAULTS, ChartDefaults
from chartkit.data import PlotStyle
from chartkit.style import Style


class FillOrder(str, Enum):
    COLUMN_MAJOR = "column"
    ROW_MAJOR = "row"


@dataclass(frozen=True)
class Heading:
    """Text-only key row, e.g. the name of a pie data set."""

    text: str


@dataclass(frozen=True)
class DataEntry:
    text: str
    style: Style
    plot_style: PlotStyle = PlotStyle.POINTS


KeyEntry = Union[Heading, DataEntry]
KeyMatrix = list[list[Optional[KeyEntry]]]

# Outside: o + side (t/b/l/r) + alignment along that side.
# Inside: i + vertical (t/c/b) + horizontal (l/c/r).
KEY_POSITIONS: frozenset[str] = frozenset(
    [f"o{side}{a}" for side in "tb" for a in "lcr"]
    + [f"o{side}{a}" for side in "lr" for a in "tcb"]
    + [f"i{v}{h}" for v in "tcb" for h in "lcr"]
)


@dataclass
class Key:
    """Legend configuration and its entries.

    Entries are laid out in a `columns` wide grid, filled column by column
    or row by row according to `fill_order`. `border` -1 draws no frame.
    """

    hide: bool = False
    columns: int = 1
    fill_order: FillOrder = FillOrder.COLUMN_MAJOR
    border: int = 0
    position: str = "itr"
    entries: list[KeyEntry] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.columns < 0:
            raise ValueError("Key `columns` must be >= 0")
        if self.position not in KEY_POSITIONS:
            raise ValueError(f"Unknown key position: {self.position}")
        self.fill_order = FillOrder(self.fill_order)

    def add_heading(self, text: str) -> None:
        self.entries.append(Heading(text))

    def add_entry(self, text: str, style: Style, plot_style: PlotStyle = PlotStyle.POINTS) -> None:
        self.entries.append(DataEntry(text, style, plot_style))

    def visible_entries(self) -> list[KeyEntry]:
        return [e for e in self.entries if e.text]

    @property
    def is_empty(self) -> bool:
        return self.hide or not self.visible_entries()

    def place(self) -> KeyMatrix:
        """Arrange visible entries as matrix[column][row].

        Column-major placement drops trailing columns that would stay
        empty (5 entries in 4 columns become 3 columns of 2, 2, 1).
        """

        entries = self.visible_entries()
        num = len(entries)
        if num == 0:
            return []
        cols = min(max(self.columns, 1), num)
        rows = (num + cols - 1) // cols
        row_first = self.fill_order is FillOrder.ROW_MAJOR
        if not row_first:
            cols = (num + rows - 1) // rows

        matrix: KeyMatrix = [[None] * rows for _ in range(cols)]
        for i, entry in enumerate(entries):
            if row_first:
                r, c = divmod(i, cols)
            else:
                c, r = divmod(i, rows)
            matrix[c][r] = entry
        return matrix


CHARACTER_WIDTH: Mapping[str, float] = MappingProxyType(
    {
        "a": 16.8, "b": 17.0, "c": 15.2, "d": 16.8, "e": 16.8, "f": 8.5, "g": 17.0, "h": 16.8,
        "i": 5.9, "j": 5.9, "k": 16.8, "l": 6.9, "m": 25.5, "n": 16.8, "o": 16.8, "p": 17.0,
        "q": 17.0, "r": 10.2, "s": 15.2, "t": 8.4, "u": 16.8, "v": 15.4, "w": 22.2, "x": 15.2,
        "y": 15.2, "z": 15.2,
        "A": 20.2, "B": 20.2, "C": 22.2, "D": 22.2, "E": 20.2, "F": 18.6, "G": 23.5, "H": 22.0,
        "I": 8.2, "J": 15.2, "K": 20.2, "L": 16.8, "M": 25.5, "N": 22.0, "O": 23.5, "P": 20.2,
        "Q": 23.5, "R": 21.1, "S": 20.2, "T": 18.5, "U": 22.0, "V": 20.2, "W": 29.0, "X": 20.2,
        "Y": 20.2, "Z": 18.8, " ": 8.5,
        "1": 16.8, "2": 16.8, "3": 16.8, "4": 16.8, "5": 16.8, "6": 16.8, "7": 16.8, "8": 16.8,
        "9": 16.8, "0": 16.8,
        ".": 8.2, ",": 8.2, ":": 8.2, ";": 8.2, "+": 17.9, '"': 11.0, "*": 11.8, "%": 27.0,
        "&": 20.2, "/": 8.4, "(": 10.2, ")": 10.2, "=": 18.0, "?": 16.8, "!": 8.5, "[": 8.2,
        "]": 8.2, "{": 10.2, "}": 10.2, "$": 16.8, "<": 18.0, ">": 18.0, "§": 16.8, "°": 12.2,
        "^": 14.2, "~": 18.0,
    }
)
AVERAGE_CHARACTER_WIDTH = 15.0
_UNKNOWN_CHARACTER_WIDTH = 23.0

TextWidth = Callable[[str], float]


def text_view_length(text: str) -> float:
    """Approximate width of `text` in average character widths."""

    total = sum(CHARACTER_WIDTH.get(ch, _UNKNOWN_CHARACTER_WIDTH) for ch in text)
    return total / AVERAGE_CHARACTER_WIDTH


def text_dimensions(text: str, text_width: TextWidth = text_view_length) -> tuple[float, int]:
    """(widest line, number of lines) of a possibly multi-line text."""

    lines = text.split("\n")
    return max(text_width(line) for line in lines), len(lines)


@dataclass(frozen=True)
class KeyMetrics:
    width: int
    height: int
    col_widths: tuple[int, ...]
    row_heights: tuple[int, ...]


def measure_key(
    matrix: KeyMatrix,
    font_width: float,
    font_height: int,
    text_width: TextWidth = text_view_length,
    defaults: ChartDefaults = DEFAULT_CHART_DEFAULTS,
) -> KeyMetrics:
    """Size of the key box in screen units.

    Column widths are in character units, row heights in text lines.
    """

    if not matrix:
        return KeyMetrics(0, 0, (), ())
    cols, rows = len(matrix), len(matrix[0])

    row_heights = []
    for r in range(rows):
        row_heights.append(max((text_dimensions(col[r].text, text_width)[1] for col in matrix if col[r] is not None), default=0))

    col_widths = []
    for col in matrix:
        widest = max((text_dimensions(e.text, text_width)[0] for e in col if e is not None), default=0.0)
        col_widths.append(int(widest + 0.75))

    fw, fh = font_width, font_height
    d = defaults
    width = int(sum(col_widths) * fw)
    width += int(d.key_col_sep * (cols - 1) * fw)
    width += int(2 * d.key_hor_sep * fw)
    width += int((d.key_symbol_width + d.key_symbol_sep) * fw) * cols

    height = sum(row_heights) * fh
    height += int(d.key_row_sep * (rows - 1) * fh)
    height += int(2 * key_vertical_sep(fh, defaults))
    return KeyMetrics(width, height, tuple(col_widths), tuple(row_heights))


def key_vertical_sep(font_height: int, defaults: ChartDefaults = DEFAULT_CHART_DEFAULTS) -> float:
    return max(1.0, defaults.key_vert_sep * font_height)
