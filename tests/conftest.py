"""Shared fixtures: synthetic images and stand-ins for the capture and diff collaborators."""

import io

import pytest
from PIL import Image
from screen_checker.core.types import ComparisonResult


def encode(image: Image.Image, fmt: str = 'PNG') -> bytes:
    buf = io.BytesIO()
    image.save(buf, format=fmt)
    return buf.getvalue()


class FakeCapture:
    """Capture source returning fixed bytes and recording the options it was given."""

    def __init__(self, data: bytes | None = None, error: Exception | None = None):
        self.data = data
        self.error = error
        self.calls: list[dict] = []

    async def screenshot(self, **options) -> bytes:
        self.calls.append(options)
        if self.error is not None:
            raise self.error
        return self.data


class FakeDiff:
    """Diff capability with a canned result."""

    def __init__(self, same_dimensions: bool = True, mismatch: float | str = 0.0, error: Exception | None = None):
        self.same_dimensions = same_dimensions
        self.mismatch = mismatch
        self.error = error
        self.calls: list[tuple] = []

    async def compare(self, baseline, capture, options, render) -> ComparisonResult:
        self.calls.append((baseline, capture, options, render))
        if self.error is not None:
            raise self.error
        return ComparisonResult(
            is_same_dimensions=self.same_dimensions,
            mis_match_percentage=self.mismatch,
            diff_factory=lambda: Image.new('RGBA', (8, 8), (255, 0, 255, 255)),
        )


@pytest.fixture
def png_bytes() -> bytes:
    return encode(Image.new('RGB', (8, 8), (40, 80, 120)))


@pytest.fixture
def other_png_bytes() -> bytes:
    return encode(Image.new('RGB', (8, 8), (200, 30, 30)))


@pytest.fixture
def capture(png_bytes: bytes) -> FakeCapture:
    return FakeCapture(png_bytes)


@pytest.fixture
def make_capture():
    return FakeCapture


@pytest.fixture
def make_diff():
    return FakeDiff
