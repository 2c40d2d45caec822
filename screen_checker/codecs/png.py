"""Lossless PNG output.

The compression value is the zlib level (0-9) handed to Pillow as
``compress_level``. Default 8.

Example:
    screen-tester compare ./baselines shot.png --force-ext png --compression-level 6
"""

from PIL import Image

from screen_checker.core.imaging import as_image, to_bytes
from screen_checker.core.types import Codec

codec = Codec(name='png', default_quality=8, help='Lossless PNG, compression level 0-9 (default 8).')


@codec.encoder
def encode(source: bytes | Image.Image, quality: int) -> bytes:
    image = as_image(source)
    return to_bytes(image, 'PNG', compress_level=max(0, min(int(quality), 9)))
