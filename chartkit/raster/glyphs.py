from __future__ import annotations

from functools import lru_cache
import math
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont

DEFAULT_FONT_FAMILY = "DejaVu Sans"
FONT_FALLBACK_PATTERNS = (
    "dejavusans",
    "dejavu sans",
    "liberationsans",
    "arial",
    "helvetica",
)
FONT_DIRS = (
    Path.home() / ".fonts",
    Path.home() / "Library" / "Fonts",
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
)

FontLike = ImageFont.FreeTypeFont | ImageFont.ImageFont


def text_mask(text: str, family: str, size_px: float, rotate_deg: int = 0) -> np.ndarray:
    """8-bit coverage mask of `text`, rotated counter-clockwise by quarter turns."""

    mask = _render_mask(text, load_font(family, size_px))
    turns = quarter_turns(rotate_deg)
    return np.rot90(mask, k=turns) if turns else mask


def text_size(text: str, family: str, size_px: float, rotate_deg: int = 0) -> tuple[int, int]:
    font = load_font(family, size_px)
    if not text:
        ascent, descent = font.getmetrics()
        return (0, max(1, int(ascent + descent)))
    left, top, right, bottom = font.getbbox(text)
    w, h = max(0, int(right - left)), max(1, int(bottom - top))
    return (h, w) if quarter_turns(rotate_deg) % 2 else (w, h)


def font_metrics(family: str, size_px: float) -> tuple[float, int]:
    """(average character width, line height) in pixels."""

    font = load_font(family, size_px)
    ascent, descent = font.getmetrics()
    left, _, right, _ = font.getbbox("0123456789")
    return max(1.0, (right - left) / 10.0), max(1, int(ascent + descent))


def quarter_turns(rotate_deg: int) -> int:
    if rotate_deg % 90 != 0:
        raise ValueError("rotate_deg must be a multiple of 90")
    return (rotate_deg // 90) % 4


@lru_cache(maxsize=256)
def _render_mask(text: str, font: FontLike) -> np.ndarray:
    if not text:
        return np.zeros((1, 1), dtype=np.uint8)
    left, top, right, bottom = font.getbbox(text)
    image = Image.new("L", (max(1, int(right - left)), max(1, int(bottom - top))), 0)
    ImageDraw.Draw(image).text((-left, -top), text, fill=255, font=font)
    return np.asarray(image, dtype=np.uint8)


@lru_cache(maxsize=64)
def load_font(family: str, size_px: float) -> FontLike:
    size = max(1, int(round(size_px)))
    path = _resolve_font_path(family)
    if path is None:
        return ImageFont.load_default()
    try:
        return ImageFont.truetype(str(path), size=size)
    except OSError:
        return ImageFont.load_default()


@lru_cache(maxsize=16)
def _resolve_font_path(family: str) -> Path | None:
    wanted = family.strip().lower() or DEFAULT_FONT_FAMILY.lower()
    candidates: list[Path] = []
    for base in FONT_DIRS:
        if base.exists():
            for ext in ("*.ttf", "*.otf"):
                candidates.extend(sorted(base.rglob(ext)))
    for pattern in (wanted,) + FONT_FALLBACK_PATTERNS:
        p = pattern.replace(" ", "")
        for path in candidates:
            stem = path.stem.lower().replace(" ", "")
            # Prefer the regular face: "DejaVuSans" over "DejaVuSans-Bold".
            if stem == p or stem == p + "-regular":
                return path
        for path in candidates:
            if p in path.stem.lower().replace(" ", ""):
                return path
    return None


def wedge_masks(
    outer: int,
    inner: int,
    phi_start: float,
    phi_end: float,
    eccentricity: float = 1.0,
    line_width: int = 0,
) -> tuple[np.ndarray, np.ndarray]:
    """(fill, outline) masks of a wedge centered in a (2*ry+3) x (2*rx+3) box.

    Angles are radians counter-clockwise from the positive x axis, screen y
    pointing down.
    """

    rx, ry = int(math.ceil(outer * eccentricity)), outer
    size = (2 * rx + 3, 2 * ry + 3)
    cx, cy = rx + 1, ry + 1
    start, end = -math.degrees(phi_end), -math.degrees(phi_start)
    outer_box = [cx - rx, cy - ry, cx + rx, cy + ry]

    fill = Image.new("L", size, 0)
    draw = ImageDraw.Draw(fill)
    draw.pieslice(outer_box, start, end, fill=255)
    if inner > 0:
        irx = int(round(inner * eccentricity))
        draw.ellipse([cx - irx, cy - inner, cx + irx, cy + inner], fill=0)

    outline = Image.new("L", size, 0)
    if line_width > 0:
        odraw = ImageDraw.Draw(outline)
        odraw.pieslice(outer_box, start, end, outline=255, width=line_width)
        if inner > 0:
            odraw.arc([cx - irx, cy - inner, cx + irx, cy + inner], start, end, fill=255, width=line_width)
    return np.asarray(fill, dtype=np.uint8), np.asarray(outline, dtype=np.uint8)
