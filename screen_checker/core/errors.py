"""Exceptions raised by screen-tester.

A missing or unreadable baseline is not an error: it starts a bootstrap run.
Everything else below propagates to the caller of a comparator.
"""


class ScreenTestError(Exception):
    """Base class for screen-tester errors."""


class UnsupportedFormat(ScreenTestError, LookupError):
    """The output extension does not name a known codec."""

    def __init__(self, ext: str, available: list[str] | None = None):
        self.ext = ext
        self.available = available or []
        msg = f'Unsupported image format: {ext!r}'
        if self.available:
            msg += f'. Available: {", ".join(self.available)}'
        super().__init__(msg)


class CaptureFailure(ScreenTestError):
    """The capture source failed to produce a screenshot."""


class DiffCapabilityFailure(ScreenTestError):
    """The diff capability failed to compare the baseline and the capture."""


class WriteFailure(ScreenTestError):
    """An artifact could not be encoded or written."""
