"""Output format resolution: which codec writes an artifact, and at what quality."""

from screen_checker import registry
from screen_checker.core.types import Codec


def storage_ext(ext: str, force_ext: str | None = None) -> str:
    """Codec name for an artifact: ``force_ext`` wins, else the part after the last dot of ``ext``."""
    if force_ext is not None:
        return force_ext
    return ext[ext.rfind('.') + 1 :]


def resolve(ext: str, force_ext: str | None = None, compression_level: int | None = None) -> tuple[Codec, int]:
    """Resolve ``(codec, quality)`` for an output extension.

    ``compression_level`` replaces the codec default only when truthy, so a
    configured 0 falls back to the default for every format.

    Raises UnsupportedFormat for anything outside png/jpeg/jpg/webp.
    """
    codec = registry.get(storage_ext(ext, force_ext))
    quality = compression_level or codec.default_quality
    return codec, quality
