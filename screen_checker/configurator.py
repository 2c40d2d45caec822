"""One-time comparator setup.

    tester = await screen_test_factory(
        'tests/screens',
        threshold=0.5,
        matching_box={'ignore_rectangles': [(0, 0, 1280, 64)]},
        output_settings={'force_ext': 'webp', 'compression_level': 70},
    )
    ok = await tester(page, 'dashboard', {'full_page': True})

Values are not range-checked: an out-of-range threshold or transparency
is logged and used as given.
"""

import logging
import warnings
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from screen_checker.core.store import ArtifactStore
from screen_checker.core.types import (
    ComparisonConfig,
    ErrorColor,
    ErrorSettings,
    ErrorType,
    MatchingBox,
    OutputSettings,
)
from screen_checker.diff.engine import DiffCapability
from screen_checker.tester import ScreenTester

logger = logging.getLogger(__name__)


def _rects(value: Sequence | None) -> tuple:
    return tuple(tuple(r) for r in (value or ()))


def normalize_matching_box(matching_box: MatchingBox | Mapping | Sequence | None) -> MatchingBox:
    """Coerce any accepted matching box shape to MatchingBox.

    A bare list is the pre-1.3 form: it becomes ``ignore_rectangles`` and a
    DeprecationWarning is issued and logged at WARNING.
    """
    if matching_box is None:
        return MatchingBox()
    if isinstance(matching_box, MatchingBox):
        return matching_box
    if isinstance(matching_box, Mapping):
        return MatchingBox(
            ignore_rectangles=_rects(matching_box.get('ignore_rectangles')),
            include_rectangles=_rects(matching_box.get('include_rectangles')),
        )
    message = (
        'Passing matching_box as a list is deprecated, use '
        "{'ignore_rectangles': [...], 'include_rectangles': [...]} instead"
    )
    logger.warning(message)
    warnings.warn(message, DeprecationWarning, stacklevel=3)
    return MatchingBox(ignore_rectangles=_rects(matching_box))


def _error_color(value: Any) -> ErrorColor:
    if value is None:
        return ErrorColor()
    if isinstance(value, ErrorColor):
        return value
    if isinstance(value, Mapping):
        default = ErrorColor()
        return ErrorColor(
            red=value.get('red', default.red),
            green=value.get('green', default.green),
            blue=value.get('blue', default.blue),
        )
    red, green, blue = value
    return ErrorColor(red=red, green=green, blue=blue)


def _error_type(value: Any) -> ErrorType:
    try:
        return ErrorType(value)
    except ValueError:
        logger.warning('Unknown error_type %r, using %r', value, ErrorType.FLAT.value)
        return ErrorType.FLAT


def normalize_error_settings(error_settings: ErrorSettings | Mapping | None) -> ErrorSettings:
    if error_settings is None:
        return ErrorSettings()
    if isinstance(error_settings, ErrorSettings):
        settings = error_settings
    else:
        default = ErrorSettings()
        settings = ErrorSettings(
            error_color=_error_color(error_settings.get('error_color')),
            error_type=_error_type(error_settings.get('error_type', default.error_type)),
            transparency=error_settings.get('transparency', default.transparency),
        )
    if not 0 <= settings.transparency <= 1:
        logger.warning('transparency %s is outside 0-1', settings.transparency)
    return settings


def normalize_output_settings(output_settings: OutputSettings | Mapping | None) -> OutputSettings:
    if output_settings is None:
        return OutputSettings()
    if isinstance(output_settings, OutputSettings):
        return output_settings
    return OutputSettings(
        force_ext=output_settings.get('force_ext'),
        compression_level=output_settings.get('compression_level'),
        raise_on_write_error=bool(output_settings.get('raise_on_write_error', False)),
    )


def build_config(
    base_dir: str | Path,
    threshold: float = 0,
    include_aa: bool = False,
    ignore_colors: bool = False,
    matching_box: MatchingBox | Mapping | Sequence | None = None,
    error_settings: ErrorSettings | Mapping | None = None,
    output_settings: OutputSettings | Mapping | None = None,
) -> ComparisonConfig:
    """Validate and normalize comparator settings into a frozen ComparisonConfig."""
    if not 0 <= threshold <= 100:
        logger.warning('threshold %s is outside 0-100, using it as given', threshold)
    return ComparisonConfig(
        base_dir=Path(base_dir),
        threshold=threshold,
        include_aa=include_aa,
        ignore_colors=ignore_colors,
        matching_box=normalize_matching_box(matching_box),
        error_settings=normalize_error_settings(error_settings),
        output_settings=normalize_output_settings(output_settings),
    )


async def screen_test_factory(
    base_dir: str | Path,
    threshold: float = 0,
    include_aa: bool = False,
    ignore_colors: bool = False,
    matching_box: MatchingBox | Mapping | Sequence | None = None,
    error_settings: ErrorSettings | Mapping | None = None,
    output_settings: OutputSettings | Mapping | None = None,
    *,
    diff_engine: DiffCapability | None = None,
    store: ArtifactStore | None = None,
) -> ScreenTester:
    """Bind a configuration once and return a reusable comparator."""
    config = build_config(
        base_dir,
        threshold=threshold,
        include_aa=include_aa,
        ignore_colors=ignore_colors,
        matching_box=matching_box,
        error_settings=error_settings,
        output_settings=output_settings,
    )
    return ScreenTester(config, diff_engine=diff_engine, store=store)
