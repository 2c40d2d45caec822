"""Diff capabilities. Anything with an async ``compare`` matching DiffCapability can be plugged in."""

from screen_checker.diff.engine import DiffCapability, PixelDiffEngine, diff_images

__all__ = ['DiffCapability', 'PixelDiffEngine', 'diff_images']
