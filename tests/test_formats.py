"""Tests for screen_checker.core.formats and the codec registry."""

import io

import pytest
from PIL import Image
from screen_checker import registry
from screen_checker.core.errors import UnsupportedFormat
from screen_checker.core.formats import resolve, storage_ext


class TestStorageExt:
    def test_strips_leading_dot(self):
        assert storage_ext('.png') == 'png'

    def test_uses_part_after_last_dot(self):
        assert storage_ext('.tar.webp') == 'webp'

    def test_bare_extension(self):
        assert storage_ext('jpg') == 'jpg'

    def test_force_ext_wins(self):
        assert storage_ext('.png', force_ext='webp') == 'webp'


class TestResolve:
    def test_jpg_and_jpeg_are_synonyms(self):
        jpg_codec, jpg_quality = resolve('.jpg')
        jpeg_codec, jpeg_quality = resolve('.jpeg')
        assert jpg_codec is jpeg_codec
        assert jpg_quality == jpeg_quality == 85

    def test_png_default_compression(self):
        codec, quality = resolve('.png')
        assert codec.name == 'png'
        assert quality == 8

    def test_webp_default_quality(self):
        codec, quality = resolve('.webp')
        assert codec.name == 'webp'
        assert quality == 85

    def test_compression_level_overrides_default(self):
        assert resolve('.jpg', compression_level=60)[1] == 60
        assert resolve('.png', compression_level=3)[1] == 3

    def test_zero_compression_level_means_unset(self):
        assert resolve('.webp', compression_level=0)[1] == 85
        assert resolve('.png', compression_level=0)[1] == 8

    def test_force_ext_selects_codec(self):
        codec, quality = resolve('.png', force_ext='jpeg')
        assert codec.name == 'jpeg'
        assert quality == 85

    def test_unknown_extension_raises(self):
        with pytest.raises(UnsupportedFormat) as exc:
            resolve('.bmp')
        assert exc.value.ext == 'bmp'
        assert 'png' in exc.value.available

    def test_unsupported_format_is_lookup_error(self):
        with pytest.raises(LookupError):
            resolve('.gif')

    def test_matching_is_case_sensitive(self):
        with pytest.raises(UnsupportedFormat):
            resolve('.PNG')


class TestRegistry:
    def test_all_codecs_lists_canonical_names(self):
        assert sorted(registry.all_codecs()) == ['jpeg', 'png', 'webp']

    def test_alias_lookup(self):
        assert registry.get('jpg') is registry.get('jpeg')


class TestCodecs:
    @pytest.mark.parametrize('name, pil_format', [('png', 'PNG'), ('jpeg', 'JPEG'), ('webp', 'WEBP')])
    def test_encoded_output_decodes(self, name, pil_format):
        src = Image.new('RGBA', (10, 6), (10, 200, 30, 255))
        codec = registry.get(name)
        data = codec.encode(src, codec.default_quality)
        decoded = Image.open(io.BytesIO(data))
        assert decoded.format == pil_format
        assert decoded.size == (10, 6)

    def test_jpeg_flattens_transparency(self):
        src = Image.new('RGBA', (4, 4), (0, 0, 0, 0))
        data = registry.get('jpeg').encode(src, 90)
        decoded = Image.open(io.BytesIO(data)).convert('RGB')
        r, g, b = decoded.getpixel((1, 1))
        assert min(r, g, b) > 240

    def test_encodes_from_bytes(self):
        buf = io.BytesIO()
        Image.new('RGB', (5, 5), (1, 2, 3)).save(buf, format='PNG')
        data = registry.get('webp').encode(buf.getvalue(), 85)
        assert Image.open(io.BytesIO(data)).format == 'WEBP'
