"""Capture sources: anything with ``async screenshot(**options) -> bytes``.

A Playwright ``Page`` already fits. ``FileCapture`` replays an image file
from disk, which is what the CLI uses.
"""

import asyncio
from pathlib import Path
from typing import Any, Protocol

from screen_checker import registry


class CaptureSource(Protocol):
    async def screenshot(self, **options: Any) -> bytes: ...


class FileCapture:
    """Serve an existing image file as a screenshot.

    ``type`` re-encodes the file through the matching codec; ``quality`` is
    passed on when given. Other options are accepted and ignored.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    async def screenshot(self, **options: Any) -> bytes:
        data = await asyncio.to_thread(self.path.read_bytes)
        fmt = options.get('type')
        if not fmt:
            return data
        codec = registry.get(fmt)
        quality = options.get('quality') or codec.default_quality
        return await asyncio.to_thread(codec.encode, data, quality)
