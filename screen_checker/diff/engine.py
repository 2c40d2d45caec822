"""Default diff capability: per-pixel comparison with numpy.

Both images are decoded to RGBA and padded to the larger of the two
sizes. Pixels present in only one image always count as mismatched.

Tolerances (per channel / brightness):
  default              rgba 16, brightness 16
  ignore antialiasing  rgba 32, brightness 64, contrast 96

A pixel is treated as anti-aliased when at least two of its eight
neighbours contrast with it (brightness distance above the contrast
limit) in either image. Anti-aliased pixels are forgiven when their
brightness is similar.

With ``ignore_colors`` only brightness and alpha are compared.

Rectangles are ``(x, y, width, height)``. Pixels inside an ignore
rectangle never mismatch; when include rectangles are given, pixels
outside all of them are not compared.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

import numpy as np
from PIL import Image

from screen_checker.core.imaging import as_image
from screen_checker.core.types import CompareOptions, ComparisonResult, ErrorSettings, ErrorType, Rectangle

TOLERANCE = 16
BRIGHTNESS_TOLERANCE = 16
AA_TOLERANCE = 32
AA_BRIGHTNESS_TOLERANCE = 64
AA_CONTRAST = 96


class DiffCapability(Protocol):
    async def compare(
        self,
        baseline: bytes,
        capture: bytes,
        options: CompareOptions,
        render: ErrorSettings,
    ) -> ComparisonResult: ...


def _brightness(rgba: np.ndarray) -> np.ndarray:
    return 0.3 * rgba[..., 0] + 0.59 * rgba[..., 1] + 0.11 * rgba[..., 2]


def _padded(image: Image.Image, width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
    """RGBA array padded to (height, width) plus a mask of the pixels the image covers."""
    arr = np.zeros((height, width, 4), dtype=np.float32)
    covered = np.zeros((height, width), dtype=bool)
    w, h = image.size
    arr[:h, :w] = np.asarray(image.convert('RGBA'), dtype=np.float32)
    covered[:h, :w] = True
    return arr, covered


def _region_mask(rects: tuple[Rectangle, ...], shape: tuple[int, int]) -> np.ndarray:
    mask = np.zeros(shape, dtype=bool)
    for x, y, w, h in rects:
        x0, y0 = max(int(x), 0), max(int(y), 0)
        x1, y1 = max(int(x + w), 0), max(int(y + h), 0)
        mask[y0:y1, x0:x1] = True
    return mask


def _contrasting_neighbours(brightness: np.ndarray, limit: float) -> np.ndarray:
    """Count, per pixel, the 3x3 neighbours whose brightness differs by more than ``limit``."""
    h, w = brightness.shape
    padded = np.pad(brightness, 1, mode='edge')
    count = np.zeros((h, w), dtype=np.uint8)
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            if dy == 0 and dx == 0:
                continue
            shifted = padded[1 + dy : 1 + dy + h, 1 + dx : 1 + dx + w]
            count += np.abs(shifted - brightness) > limit
    return count


def _render_diff(
    capture: np.ndarray,
    baseline: np.ndarray,
    mismatch: np.ndarray,
    forgiven: np.ndarray,
    render: ErrorSettings,
) -> Image.Image:
    """Paint the diff overlay: capture faded by ``transparency``, mismatches in the error colour."""
    out = capture.copy()
    out[..., 3] *= render.transparency

    gray = _brightness(capture)
    out[forgiven, 0] = gray[forgiven]
    out[forgiven, 1] = gray[forgiven]
    out[forgiven, 2] = gray[forgiven]

    err = np.array(render.error_color.as_tuple(), dtype=np.float32)
    src = capture[mismatch, :3]
    error_type = ErrorType(render.error_type)
    if error_type is ErrorType.FLAT:
        painted = np.broadcast_to(err, src.shape)
    elif error_type is ErrorType.MOVEMENT:
        painted = (src * (err / 255) + err) / 2
    elif error_type in (ErrorType.FLAT_DIFFERENCE_INTENSITY, ErrorType.MOVEMENT_DIFFERENCE_INTENSITY):
        distance = np.abs(capture[mismatch, :3] - baseline[mismatch, :3]).sum(axis=-1, keepdims=True)
        ratio = distance / (255 * 3)
        target = err if error_type is ErrorType.FLAT_DIFFERENCE_INTENSITY else (src * (err / 255) + err) / 2
        painted = target * ratio + src * (1 - ratio)
    else:
        painted = src
    out[mismatch, :3] = painted
    out[mismatch, 3] = 255

    return Image.fromarray(np.clip(out, 0, 255).astype(np.uint8))


def diff_images(
    baseline: bytes | Image.Image,
    capture: bytes | Image.Image,
    options: CompareOptions | None = None,
    render: ErrorSettings | None = None,
) -> ComparisonResult:
    """Compare two images and report dimension equality and mismatch percentage."""
    options = options or CompareOptions()
    render = render or ErrorSettings()

    base_img = as_image(baseline)
    cap_img = as_image(capture)
    width = max(base_img.width, cap_img.width)
    height = max(base_img.height, cap_img.height)
    base_arr, base_cov = _padded(base_img, width, height)
    cap_arr, cap_cov = _padded(cap_img, width, height)
    same_dimensions = base_img.size == cap_img.size

    if options.ignore_antialiasing:
        tolerance, brightness_tolerance = AA_TOLERANCE, AA_BRIGHTNESS_TOLERANCE
    else:
        tolerance, brightness_tolerance = TOLERANCE, BRIGHTNESS_TOLERANCE

    base_b = _brightness(base_arr)
    cap_b = _brightness(cap_arr)
    delta = np.abs(base_arr - cap_arr)
    alpha_similar = delta[..., 3] <= tolerance
    brightness_similar = (np.abs(base_b - cap_b) < brightness_tolerance) & alpha_similar
    if options.ignore_colors:
        similar = brightness_similar
    else:
        similar = np.all(delta <= tolerance, axis=-1)

    forgiven = np.zeros((height, width), dtype=bool)
    if options.ignore_antialiasing:
        antialiased = (_contrasting_neighbours(base_b, AA_CONTRAST) >= 2) | (
            _contrasting_neighbours(cap_b, AA_CONTRAST) >= 2
        )
        forgiven = ~similar & antialiased & brightness_similar
        similar = similar | forgiven

    compared = np.ones((height, width), dtype=bool)
    if options.include_rectangles:
        compared &= _region_mask(options.include_rectangles, (height, width))
    if options.ignore_rectangles:
        compared &= ~_region_mask(options.ignore_rectangles, (height, width))

    mismatch = compared & (~(base_cov & cap_cov) | ~similar)
    forgiven &= compared & ~mismatch
    total = width * height
    percentage = round(float(mismatch.sum()) / total * 100, 2) if total else 0.0

    return ComparisonResult(
        is_same_dimensions=same_dimensions,
        mis_match_percentage=percentage,
        diff_factory=lambda: _render_diff(cap_arr, base_arr, mismatch, forgiven, render),
    )


class PixelDiffEngine:
    """Async wrapper running ``diff_images`` off the event loop."""

    async def compare(
        self,
        baseline: bytes,
        capture: bytes,
        options: CompareOptions,
        render: ErrorSettings,
    ) -> ComparisonResult:
        return await asyncio.to_thread(diff_images, baseline, capture, options, render)
