"""Tests for the default numpy diff capability."""

import asyncio

from PIL import Image, ImageDraw
from screen_checker.core.types import CompareOptions, ErrorColor, ErrorSettings, ErrorType
from screen_checker.diff.engine import PixelDiffEngine, diff_images


def _solid(width: int, height: int, color: tuple[int, int, int, int] = (100, 100, 100, 255)) -> Image.Image:
    return Image.new('RGBA', (width, height), color)


def _with_block(base: Image.Image, box: tuple[int, int, int, int], fill=(255, 0, 0, 255)) -> Image.Image:
    img = base.copy()
    ImageDraw.Draw(img).rectangle(box, fill=fill)
    return img


EXACT = CompareOptions(ignore_antialiasing=False)


class TestIdentical:
    def test_zero_mismatch(self):
        img = _solid(20, 20)
        result = diff_images(img, img.copy(), EXACT)
        assert result.is_same_dimensions is True
        assert result.mis_match_percentage == 0.0

    def test_accepts_encoded_bytes(self, png_bytes):
        result = diff_images(png_bytes, png_bytes)
        assert result.mis_match_percentage == 0.0


class TestMismatch:
    def test_block_percentage(self):
        before = _solid(10, 10)
        after = _with_block(before, (0, 0, 4, 4))  # 25 pixels
        result = diff_images(before, after, EXACT)
        assert result.mis_match_percentage == 25.0

    def test_small_channel_noise_is_tolerated(self):
        before = _solid(10, 10, (100, 100, 100, 255))
        after = _solid(10, 10, (110, 105, 95, 255))
        assert diff_images(before, after, EXACT).mis_match_percentage == 0.0

    def test_different_sizes(self):
        small = _solid(30, 30)
        large = _solid(50, 50)
        result = diff_images(small, large, EXACT)
        assert result.is_same_dimensions is False
        assert result.mis_match_percentage == 64.0

    def test_rounded_to_two_places(self):
        before = _solid(30, 10)
        after = _with_block(before, (0, 0, 0, 0))  # 1 pixel of 300
        assert diff_images(before, after, EXACT).mis_match_percentage == 0.33


class TestIgnoreColors:
    def test_same_brightness_different_hue_matches(self):
        # brightness 0.3*r + 0.59*g + 0.11*b: both around 100
        before = _solid(10, 10, (100, 100, 100, 255))
        after = _solid(10, 10, (150, 75, 92, 255))
        assert diff_images(before, after, EXACT).mis_match_percentage == 100.0
        opts = CompareOptions(ignore_antialiasing=False, ignore_colors=True)
        assert diff_images(before, after, opts).mis_match_percentage == 0.0


class TestRectangles:
    def test_ignore_rectangle_masks_change(self):
        before = _solid(10, 10)
        after = _with_block(before, (0, 0, 4, 4))
        opts = CompareOptions(ignore_antialiasing=False, ignore_rectangles=((0, 0, 5, 5),))
        assert diff_images(before, after, opts).mis_match_percentage == 0.0

    def test_include_rectangle_restricts_comparison(self):
        before = _solid(10, 10)
        after = _with_block(before, (0, 0, 4, 4))
        opts = CompareOptions(ignore_antialiasing=False, include_rectangles=((5, 5, 5, 5),))
        assert diff_images(before, after, opts).mis_match_percentage == 0.0

    def test_include_rectangle_over_change(self):
        before = _solid(10, 10)
        after = _with_block(before, (0, 0, 4, 4))
        opts = CompareOptions(ignore_antialiasing=False, include_rectangles=((0, 0, 2, 2),))
        assert diff_images(before, after, opts).mis_match_percentage == 4.0

    def test_ignore_inside_include(self):
        before = _solid(10, 10)
        after = _with_block(before, (0, 0, 4, 4))
        opts = CompareOptions(
            ignore_antialiasing=False,
            include_rectangles=((0, 0, 5, 5),),
            ignore_rectangles=((0, 0, 5, 2),),
        )
        # rows 2-4, columns 0-4 of the block remain: 3 * 5
        assert diff_images(before, after, opts).mis_match_percentage == 15.0


class TestAntialiasing:
    def test_edge_pixel_with_similar_brightness_forgiven(self):
        # A sharp black/white edge; the capture shifts one edge pixel's hue while keeping brightness.
        before = Image.new('RGBA', (6, 6), (255, 255, 255, 255))
        ImageDraw.Draw(before).rectangle((0, 0, 2, 5), fill=(0, 0, 0, 255))
        after = before.copy()
        after.putpixel((2, 2), (0, 0, 60, 255))
        exact = diff_images(before, after, EXACT)
        assert exact.mis_match_percentage > 0
        forgiving = diff_images(before, after, CompareOptions(ignore_antialiasing=True))
        assert forgiving.mis_match_percentage == 0.0


class TestDiffImage:
    def test_flat_error_colour(self):
        before = _solid(4, 4)
        after = _with_block(before, (0, 0, 0, 0))
        render = ErrorSettings(error_color=ErrorColor(255, 0, 255), error_type=ErrorType.FLAT)
        diff = diff_images(before, after, EXACT, render).get_diff_image()
        assert diff.size == (4, 4)
        assert diff.getpixel((0, 0)) == (255, 0, 255, 255)

    def test_matched_pixels_faded(self):
        before = _solid(4, 4)
        after = _with_block(before, (0, 0, 0, 0))
        render = ErrorSettings(transparency=0.5)
        diff = diff_images(before, after, EXACT, render).get_diff_image()
        r, g, b, a = diff.getpixel((3, 3))
        assert (r, g, b) == (100, 100, 100)
        assert a == 127

    def test_diff_only_keeps_capture_colour(self):
        before = _solid(4, 4)
        after = _with_block(before, (0, 0, 0, 0), fill=(10, 200, 10, 255))
        render = ErrorSettings(error_type=ErrorType.DIFF_ONLY)
        diff = diff_images(before, after, EXACT, render).get_diff_image()
        assert diff.getpixel((0, 0)) == (10, 200, 10, 255)

    def test_rendered_once(self):
        img = _solid(4, 4)
        result = diff_images(img, img.copy(), EXACT)
        assert result.get_diff_image() is result.get_diff_image()


class TestPixelDiffEngine:
    def test_async_compare(self, png_bytes, other_png_bytes):
        result = asyncio.run(PixelDiffEngine().compare(png_bytes, other_png_bytes, EXACT, ErrorSettings()))
        assert result.is_same_dimensions is True
        assert result.mis_match_percentage == 100.0
