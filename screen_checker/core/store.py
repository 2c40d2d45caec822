"""Artifact store: baselines, diffs and new captures on disk.

Files live at ``{folder}/{name}{suffix}{ext}``. Writes go straight to the
target path (no temp file + rename), so a crash mid-write can leave a
truncated artifact.

Concurrent invocations on the same ``(folder, name, ext)`` key are
serialized through ``locked()``. Locks are kept per event loop and
dropped once no invocation holds or waits on them; they only cover callers
sharing one store instance.
"""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from pathlib import Path

from screen_checker.core.errors import WriteFailure
from screen_checker.core.types import Codec

logger = logging.getLogger(__name__)


def artifact_path(folder: str | Path, name: str, ext: str, suffix: str = '') -> Path:
    return Path(folder) / f'{name}{suffix}{ext}'


def _read_bytes(path: Path) -> bytes | None:
    if not path.is_file():
        return None
    try:
        return path.read_bytes()
    except OSError as e:
        logger.debug('Baseline %s unreadable, treating as absent: %s', path, e)
        return None


def _write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


class ArtifactStore:
    def __init__(self) -> None:
        # (loop, path) -> [lock, number of holders and waiters]
        self._locks: dict[tuple[asyncio.AbstractEventLoop, Path], list] = {}

    @contextlib.asynccontextmanager
    async def locked(self, folder: str | Path, name: str, ext: str) -> AsyncIterator[None]:
        """Hold the lock shared by every invocation targeting the same baseline."""
        key = (asyncio.get_running_loop(), artifact_path(folder, name, ext).resolve())
        entry = self._locks.get(key)
        if entry is None:
            entry = self._locks[key] = [asyncio.Lock(), 0]
        entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    def pending_keys(self) -> int:
        """Number of baselines currently locked or awaited."""
        return len(self._locks)

    async def read(self, folder: str | Path, name: str, ext: str) -> bytes | None:
        """Return baseline bytes, or None when the file is missing or unreadable."""
        return await asyncio.to_thread(_read_bytes, artifact_path(folder, name, ext))

    async def write(
        self,
        folder: str | Path,
        name: str,
        suffix: str,
        ext: str,
        data,
        codec: Codec,
        quality: int,
    ) -> Path:
        """Encode ``data`` through ``codec`` and write it to ``{folder}/{name}{suffix}{ext}``."""
        path = artifact_path(folder, name, ext, suffix)

        def _encode_and_write() -> None:
            _write_bytes(path, codec.encode(data, quality))

        try:
            await asyncio.to_thread(_encode_and_write)
        except Exception as e:
            raise WriteFailure(f'Failed to write {path}: {e}') from e
        logger.debug('Wrote %s (%s, quality=%s)', path, codec.name, quality)
        return path
