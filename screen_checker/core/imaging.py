"""Pillow helpers shared by the codecs and the diff engine."""

import io

from PIL import Image


def as_image(source: bytes | Image.Image) -> Image.Image:
    """Decode an encoded buffer, or pass a Pillow image through."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        img = Image.open(io.BytesIO(bytes(source)))
        try:
            img.load()
        except Exception:
            img.close()
            raise
        return img
    return source


def to_bytes(image: Image.Image, format: str, **params) -> bytes:
    """Encode a Pillow image into a byte string."""
    buf = io.BytesIO()
    image.save(buf, format=format, **params)
    return buf.getvalue()
