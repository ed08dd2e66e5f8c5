from __future__ import annotations

import numpy as np

RGBA = tuple[int, int, int, int]


def new_buffer(width: int, height: int, color: RGBA = (255, 255, 255, 255)) -> np.ndarray:
    buf = np.empty((height, width, 4), dtype=np.uint8)
    buf[:, :] = np.asarray(color, dtype=np.uint8)
    return buf


def _blend(region: np.ndarray, color: RGBA) -> None:
    a = color[3] / 255.0
    src = np.asarray(color[:3], dtype=np.float32) * a
    region[..., :3] = (src + region[..., :3].astype(np.float32) * (1.0 - a)).astype(np.uint8)
    region[..., 3] = 255


def draw_pixel(dst: np.ndarray, x: int, y: int, color: RGBA) -> None:
    if 0 <= y < dst.shape[0] and 0 <= x < dst.shape[1]:
        _blend(dst[y, x], color)


def draw_hline(dst: np.ndarray, x0: int, x1: int, y: int, color: RGBA) -> None:
    fill_rect(dst, min(x0, x1), y, abs(x1 - x0) + 1, 1, color)


def draw_vline(dst: np.ndarray, x: int, y0: int, y1: int, color: RGBA) -> None:
    fill_rect(dst, x, min(y0, y1), 1, abs(y1 - y0) + 1, color)


def fill_rect(dst: np.ndarray, x: int, y: int, w: int, h: int, color: RGBA) -> None:
    """Blend a solid rectangle; parts outside the buffer are clipped."""

    xa, ya = max(0, x), max(0, y)
    xb, yb = min(dst.shape[1], x + w), min(dst.shape[0], y + h)
    if xa >= xb or ya >= yb:
        return
    _blend(dst[ya:yb, xa:xb], color)


def blend_mask(dst: np.ndarray, x: int, y: int, mask: np.ndarray, color: RGBA) -> None:
    """Blend `color` through an 8-bit coverage mask placed at (x, y)."""

    h, w = mask.shape
    x0, y0 = max(0, x), max(0, y)
    x1, y1 = min(dst.shape[1], x + w), min(dst.shape[0], y + h)
    if x1 <= x0 or y1 <= y0:
        return
    cov = mask[y0 - y : y1 - y, x0 - x : x1 - x].astype(np.float32) / 255.0
    alpha = (color[3] / 255.0) * cov[:, :, None]
    if not np.any(alpha > 0):
        return
    patch = dst[y0:y1, x0:x1]
    src = np.asarray(color[:3], dtype=np.float32).reshape(1, 1, 3)
    out = src * alpha + patch[:, :, :3].astype(np.float32) * (1.0 - alpha)
    patch[:, :, :3] = np.clip(out, 0, 255).astype(np.uint8)
    patch[:, :, 3] = 255
