"""Test decision engine: one screenshot against its baseline, one verdict.

Per invocation:

  START -> BASELINE_LOOKUP -> BOOTSTRAP | COMPARE -> PASS | FAIL_WITH_ARTIFACTS -> DONE

No baseline on disk means bootstrap: the capture is written as the new
baseline and the invocation passes. Otherwise the diff capability decides,
and a failing comparison leaves ``{name}-diff{ext}`` (plus ``{name}-new{ext}``
or an overwritten baseline when asked) next to the baseline.
"""

import asyncio
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from screen_checker.core import formats
from screen_checker.core.errors import CaptureFailure, DiffCapabilityFailure, WriteFailure
from screen_checker.core.store import ArtifactStore, artifact_path
from screen_checker.core.types import CompareOptions, ComparisonConfig, ComparisonResult, Outcome, TestInvocation
from screen_checker.diff.engine import DiffCapability, PixelDiffEngine

logger = logging.getLogger(__name__)

DEFAULT_EXT = '.png'


@dataclass(frozen=True)
class Target:
    """Where an invocation's baseline lives, and what goes to the capture source."""

    folder: Path
    name: str
    ext: str
    capture_options: dict[str, Any] = field(default_factory=dict)
    save_new_image_on_error: bool = False
    overwrite_image_on_change: bool = False


def resolve_target(base_dir: str | Path, name: str = 'test', screenshot_options: dict[str, Any] | None = None) -> Target:
    """Work out folder, name and extension for an invocation.

    ``type`` picks the default extension. A ``path`` with a non-empty file
    name overrides folder, name and extension (``.png`` when it has none).
    ``path`` and the artifact flags are never forwarded to the capture source.
    """
    options = dict(screenshot_options or {})
    folder = Path(base_dir)
    ext = f'.{options["type"]}' if options.get('type') else DEFAULT_EXT

    path = options.pop('path', None)
    if path is not None:
        # trailing separators do not empty the name: '/out/' is folder '/', name 'out'
        path = str(path).rstrip('/' + os.sep) or str(path)
        base, path_ext = os.path.splitext(os.path.basename(path))
        directory = os.path.dirname(path) or '.'
        if base:
            folder = Path(directory)
            name = base
            ext = path_ext or DEFAULT_EXT

    save_new = bool(options.pop('save_new_image_on_error', False))
    overwrite = bool(options.pop('overwrite_image_on_change', False))
    return Target(
        folder=folder,
        name=name,
        ext=ext,
        capture_options=options,
        save_new_image_on_error=save_new,
        overwrite_image_on_change=overwrite,
    )


def compose_options(config: ComparisonConfig) -> CompareOptions:
    box = config.matching_box
    return CompareOptions(
        ignore_antialiasing=not config.include_aa,
        ignore_colors=config.ignore_colors,
        ignore_rectangles=box.ignore_rectangles if box.ignore_rectangles else (),
        include_rectangles=box.include_rectangles if box.include_rectangles else (),
    )


def decide(result: ComparisonResult, threshold: float) -> bool:
    """Fail on a dimension change or when the mismatch exceeds the threshold (not inclusive)."""
    if result.is_same_dimensions is False:
        return False
    return not float(result.mis_match_percentage) > threshold


async def _capture(source: Any, options: dict[str, Any]) -> bytes:
    try:
        return await source.screenshot(**options)
    except Exception as e:
        raise CaptureFailure(f'Screenshot failed: {e}') from e


async def _write_artifacts(
    config: ComparisonConfig,
    target: Target,
    result: ComparisonResult,
    screenshot: bytes,
    store: ArtifactStore,
    outcome: Outcome,
) -> None:
    output = config.output_settings
    codec, quality = formats.resolve(target.ext, output.force_ext, output.compression_level)

    async def write_diff() -> Path:
        diff_image = await asyncio.to_thread(result.get_diff_image)
        return await store.write(target.folder, target.name, '-diff', target.ext, diff_image, codec, quality)

    writes = [write_diff()]
    if target.save_new_image_on_error or target.overwrite_image_on_change:
        suffix = '' if target.overwrite_image_on_change else '-new'
        writes.append(store.write(target.folder, target.name, suffix, target.ext, screenshot, codec, quality))

    errors = []
    for res in await asyncio.gather(*writes, return_exceptions=True):
        if isinstance(res, Exception):
            logger.error('Artifact write for %s failed: %s', target.name, res)
            outcome.write_errors.append(str(res))
            errors.append(res)
        else:
            outcome.artifacts.append(res)

    if errors and output.raise_on_write_error:
        first = errors[0]
        if isinstance(first, WriteFailure):
            raise first
        raise WriteFailure(str(first)) from first


async def _run(
    config: ComparisonConfig,
    source: Any,
    target: Target,
    diff_engine: DiffCapability,
    store: ArtifactStore,
) -> Outcome:
    outcome = Outcome(name=target.name, baseline_path=artifact_path(target.folder, target.name, target.ext))
    baseline = await store.read(target.folder, target.name, target.ext)
    screenshot = await _capture(source, target.capture_options)
    output = config.output_settings

    if baseline is None:
        codec, quality = formats.resolve(target.ext, output.force_ext, output.compression_level)
        path = await store.write(target.folder, target.name, '', target.ext, screenshot, codec, quality)
        logger.info('There was nothing to compare, current screen saved as baseline %s', path)
        outcome.passed = True
        outcome.bootstrapped = True
        outcome.artifacts.append(path)
        return outcome

    try:
        result = await diff_engine.compare(baseline, screenshot, compose_options(config), config.error_settings)
        mis_match_percentage = float(result.mis_match_percentage)
    except Exception as e:
        raise DiffCapabilityFailure(f'Comparing {target.name} against its baseline failed: {e}') from e

    outcome.is_same_dimensions = result.is_same_dimensions
    outcome.mis_match_percentage = mis_match_percentage
    outcome.passed = decide(result, config.threshold)
    if outcome.passed:
        logger.debug('%s matches baseline (%.2f%% mismatch)', target.name, outcome.mis_match_percentage)
        return outcome

    logger.info(
        '%s differs from baseline: %.2f%% mismatch, same dimensions: %s',
        target.name,
        outcome.mis_match_percentage,
        result.is_same_dimensions,
    )
    await _write_artifacts(config, target, result, screenshot, store, outcome)
    return outcome


async def evaluate(
    config: ComparisonConfig,
    invocation: TestInvocation,
    diff_engine: DiffCapability | None = None,
    store: ArtifactStore | None = None,
) -> Outcome:
    """Run one invocation and return the full outcome behind its verdict."""
    diff_engine = diff_engine or PixelDiffEngine()
    store = store or ArtifactStore()
    target = resolve_target(config.base_dir, invocation.name, invocation.screenshot_options)
    async with store.locked(target.folder, target.name, target.ext):
        return await _run(config, invocation.capture_source, target, diff_engine, store)


async def compare(
    config: ComparisonConfig,
    invocation: TestInvocation,
    diff_engine: DiffCapability | None = None,
    store: ArtifactStore | None = None,
) -> bool:
    """Run one invocation and return its verdict."""
    outcome = await evaluate(config, invocation, diff_engine, store)
    return outcome.passed


class ScreenTester:
    """A comparator bound to one ComparisonConfig.

    Calling it runs an invocation and returns the verdict:

        tester = await screen_test_factory('tests/screens', threshold=0.5)
        assert await tester(page, 'home')
    """

    def __init__(
        self,
        config: ComparisonConfig,
        diff_engine: DiffCapability | None = None,
        store: ArtifactStore | None = None,
    ):
        self.config = config
        self.diff_engine = diff_engine or PixelDiffEngine()
        self.store = store or ArtifactStore()

    async def evaluate(
        self,
        capture_source: Any,
        name: str = 'test',
        screenshot_options: dict[str, Any] | None = None,
    ) -> Outcome:
        invocation = TestInvocation(capture_source, name, dict(screenshot_options or {}))
        return await evaluate(self.config, invocation, self.diff_engine, self.store)

    async def __call__(
        self,
        capture_source: Any,
        name: str = 'test',
        screenshot_options: dict[str, Any] | None = None,
    ) -> bool:
        outcome = await self.evaluate(capture_source, name, screenshot_options)
        return outcome.passed
