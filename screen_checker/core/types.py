"""Shared types for screen-tester: Codec, MatchingBox, ErrorSettings, ComparisonConfig, Outcome."""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from PIL import Image

Rectangle = tuple[int, int, int, int]  # (x, y, width, height)


class ErrorType(str, enum.Enum):
    """How mismatched pixels are painted on the diff overlay."""

    FLAT = 'flat'
    MOVEMENT = 'movement'
    FLAT_DIFFERENCE_INTENSITY = 'flatDifferenceIntensity'
    MOVEMENT_DIFFERENCE_INTENSITY = 'movementDifferenceIntensity'
    DIFF_ONLY = 'diffOnly'


@dataclass(frozen=True)
class ErrorColor:
    red: int = 255
    green: int = 0
    blue: int = 255

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.red, self.green, self.blue)


@dataclass(frozen=True)
class ErrorSettings:
    """Diff overlay rendering, passed along with every comparison."""

    error_color: ErrorColor = field(default_factory=ErrorColor)
    error_type: ErrorType = ErrorType.FLAT
    transparency: float = 0.7


@dataclass(frozen=True)
class MatchingBox:
    """Regions excluded from (ignore) or exclusively compared in (include) a diff."""

    ignore_rectangles: tuple[Rectangle, ...] = ()
    include_rectangles: tuple[Rectangle, ...] = ()


@dataclass(frozen=True)
class OutputSettings:
    force_ext: str | None = None  # codec name overriding the file extension
    compression_level: int | None = None  # quality (jpeg/webp) or zlib level (png)
    raise_on_write_error: bool = False


@dataclass(frozen=True)
class ComparisonConfig:
    """Everything a comparator needs, bound once and shared by every invocation."""

    base_dir: Path
    threshold: float = 0
    include_aa: bool = False
    ignore_colors: bool = False
    matching_box: MatchingBox = field(default_factory=MatchingBox)
    error_settings: ErrorSettings = field(default_factory=ErrorSettings)
    output_settings: OutputSettings = field(default_factory=OutputSettings)


@dataclass(frozen=True)
class CompareOptions:
    """Compare-time options handed to a diff capability."""

    ignore_antialiasing: bool = True
    ignore_colors: bool = False
    ignore_rectangles: tuple[Rectangle, ...] = ()
    include_rectangles: tuple[Rectangle, ...] = ()


@dataclass
class ComparisonResult:
    """What a diff capability reports for one image pair.

    The diff raster is produced on first access through ``get_diff_image``.
    """

    is_same_dimensions: bool
    mis_match_percentage: float
    diff_factory: Callable[[], Image.Image] | None = field(default=None, repr=False)
    _diff_image: Image.Image | None = field(default=None, init=False, repr=False)

    def get_diff_image(self) -> Image.Image:
        if self._diff_image is None:
            if self.diff_factory is None:
                raise RuntimeError('Comparison result carries no diff image')
            self._diff_image = self.diff_factory()
        return self._diff_image


@dataclass(frozen=True)
class TestInvocation:
    """One call of a comparator: what to capture and under which name."""

    __test__ = False  # not a pytest test class

    capture_source: Any
    name: str = 'test'
    screenshot_options: dict[str, Any] = field(default_factory=dict)


@dataclass
class Outcome:
    """Detailed record behind a verdict."""

    name: str
    baseline_path: Path
    passed: bool = False
    bootstrapped: bool = False
    is_same_dimensions: bool | None = None
    mis_match_percentage: float | None = None
    artifacts: list[Path] = field(default_factory=list)
    write_errors: list[str] = field(default_factory=list)


class Codec:
    """A self-registering image encoder.

    Usage in a codec module:

        codec = Codec(name='jpeg', aliases=('jpg',), default_quality=85)

        @codec.encoder
        def encode(image, quality):
            ...
    """

    def __init__(self, name: str, aliases: tuple[str, ...] = (), default_quality: int = 85, help: str = ''):
        self.name = name
        self.aliases = aliases
        self.default_quality = default_quality
        self.help = help
        self._encode_fn: Callable | None = None

    def encoder(self, fn: Callable) -> Callable:
        """Decorator to register the encode function."""
        self._encode_fn = fn
        return fn

    def encode(self, source: bytes | Image.Image, quality: int) -> bytes:
        """Encode raw/encoded pixel data with this codec."""
        if self._encode_fn is None:
            raise RuntimeError(f'Codec {self.name} has no encode function')
        return self._encode_fn(source, quality)

    def __repr__(self) -> str:
        return f'Codec({self.name!r})'
