from __future__ import annotations

from dataclasses import dataclass
import logging

from chartkit.errors import LayoutError
from chartkit.key import KEY_POSITIONS

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartLayout:
    """Plot area, recommended tic counts and key origin in screen units."""

    width: int
    height: int
    left: int
    top: int
    num_x_tics: int
    num_y_tics: int
    key_x: int = 0
    key_y: int = 0

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height


def num_x_tics_for(width: int, font_width: float) -> int:
    """Tic count suggested for `width` screen units of axis."""

    chars = width / font_width
    if chars < 20:
        return 2
    if chars < 30:
        return 3
    if chars < 60:
        return 4
    if chars < 80:
        return 5
    if chars < 100:
        return 7
    return 10


def compute_layout(
    total_width: int,
    total_height: int,
    font_width: float,
    font_height: int,
    *,
    title: str = "",
    x_label: str = "",
    y_label: str = "",
    hide_x_tics: bool = False,
    hide_y_tics: bool = False,
    key_size: tuple[int, int] | None = None,
    key_position: str = "itr",
) -> ChartLayout:
    """Reserve margins for title, labels, tics and key.

    `key_size` is the measured (width, height) of the key, or None when no
    key is shown. Outside key positions shrink the plot area, inside ones
    only determine the key origin.
    """

    if key_position not in KEY_POSITIONS:
        raise ValueError(f"Unknown key position: {key_position}")
    fw, fh = font_width, font_height

    width = total_width - int(6 * fw)
    left = int(2 * fw)
    height = total_height - fh
    top = 0
    if title:
        top += (5 * fh) // 2
        height -= (5 * fh) // 2
    if x_label:
        height -= (3 * fh) // 2
    if not hide_x_tics:
        height -= (3 * fh) // 2
    if y_label:
        left += 2 * fh
        width -= 2 * fh
    if not hide_y_tics:
        left += int(6 * fw)
        width -= int(6 * fw)

    key_x = key_y = 0
    if key_size is not None:
        kw, kh = key_size
        gap_x, gap_y = int(2 * fw), fh
        side, along = key_position[:2], key_position[2]
        if side == "ol":
            key_x = 0
            left += kw + gap_x
            width -= kw + gap_x
        elif side == "or":
            width -= kw + gap_x
            key_x = total_width - kw - int(fw)
        elif side == "ot":
            key_y = top
            top += kh + gap_y
            height -= kh + gap_y
        elif side == "ob":
            height -= kh + gap_y
            key_y = total_height - kh - 1

        if side in ("ol", "or"):
            key_y = {"t": top, "c": top + (height - kh) // 2, "b": top + height - kh}[along]
        elif side in ("ot", "ob"):
            key_x = {"l": left, "c": left + (width - kw) // 2, "r": left + width - kw}[along]
        else:
            key_y = {"t": top + fh // 2, "c": top + (height - kh) // 2, "b": top + height - kh - fh // 2}[side[1]]
            key_x = {"l": left + int(fw), "c": left + (width - kw) // 2, "r": left + width - kw - int(fw)}[along]

    if width <= 0 or height <= 0:
        raise LayoutError(f"canvas {total_width}x{total_height} leaves no room for the plot area")

    layout = ChartLayout(
        width=width,
        height=height,
        left=left,
        top=top,
        num_x_tics=num_x_tics_for(width, fw),
        num_y_tics=max(2, (total_height // fh) // 5),
        key_x=key_x,
        key_y=key_y,
    )
    LOGGER.debug("layout: %s", layout)
    return layout
