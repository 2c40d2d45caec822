"""Lossy JPEG output, also selected by the ``jpg`` extension.

JPEG has no alpha channel: transparent areas are flattened onto white
before encoding. Quality 1-100, default 85.

Example:
    screen-tester compare ./baselines shot.jpg --compression-level 90
"""

from PIL import Image

from screen_checker.core.imaging import as_image, to_bytes
from screen_checker.core.types import Codec

codec = Codec(name='jpeg', aliases=('jpg',), default_quality=85, help='Lossy JPEG, quality 1-100 (default 85).')


def _flatten(image: Image.Image) -> Image.Image:
    if image.mode in ('RGBA', 'LA') or (image.mode == 'P' and 'transparency' in image.info):
        rgba = image.convert('RGBA')
        background = Image.new('RGB', rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[3])
        return background
    return image.convert('RGB')


@codec.encoder
def encode(source: bytes | Image.Image, quality: int) -> bytes:
    image = _flatten(as_image(source))
    return to_bytes(image, 'JPEG', quality=int(quality))
