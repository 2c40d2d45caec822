"""Visual regression comparator: screenshots against stored baselines."""

from screen_checker.configurator import build_config, screen_test_factory
from screen_checker.core.errors import (
    CaptureFailure,
    DiffCapabilityFailure,
    ScreenTestError,
    UnsupportedFormat,
    WriteFailure,
)
from screen_checker.core.types import (
    ComparisonConfig,
    ErrorColor,
    ErrorSettings,
    ErrorType,
    MatchingBox,
    Outcome,
    OutputSettings,
    TestInvocation,
)
from screen_checker.tester import ScreenTester, compare, evaluate

__all__ = [
    'CaptureFailure',
    'ComparisonConfig',
    'DiffCapabilityFailure',
    'ErrorColor',
    'ErrorSettings',
    'ErrorType',
    'MatchingBox',
    'Outcome',
    'OutputSettings',
    'ScreenTestError',
    'ScreenTester',
    'TestInvocation',
    'UnsupportedFormat',
    'WriteFailure',
    'build_config',
    'compare',
    'evaluate',
    'screen_test_factory',
]
