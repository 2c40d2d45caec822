"""Lossy WEBP output, alpha preserved. Quality 1-100, default 85."""

from PIL import Image

from screen_checker.core.imaging import as_image, to_bytes
from screen_checker.core.types import Codec

codec = Codec(name='webp', default_quality=85, help='Lossy WEBP with alpha, quality 1-100 (default 85).')


@codec.encoder
def encode(source: bytes | Image.Image, quality: int) -> bytes:
    image = as_image(source)
    if image.mode not in ('RGB', 'RGBA'):
        image = image.convert('RGBA')
    return to_bytes(image, 'WEBP', quality=int(quality))
