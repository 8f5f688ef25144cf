"""Pillow 编码测试。"""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from PIL import Image

from image_shrink.core.exceptions import EncodingError
from image_shrink.core.models import EncodeOptions
from image_shrink.processing.encoder import encode_image

JPEG_OPTIONS = EncodeOptions(format="JPEG", quality=90, advanced_encoder=True)
WEBP_OPTIONS = EncodeOptions(format="WEBP", quality=85)


def _decode(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


def test_png_with_alpha_to_jpeg_is_flattened_on_white(tmp_path: Path) -> None:
    path = tmp_path / "transparent.png"
    Image.new("RGBA", (16, 16), (255, 0, 0, 0)).save(path)

    decoded = _decode(encode_image(path, JPEG_OPTIONS))

    assert decoded.format == "JPEG"
    assert decoded.mode == "RGB"
    r, g, b = decoded.getpixel((8, 8))
    assert min(r, g, b) > 240


def test_png_with_alpha_to_webp_keeps_alpha(tmp_path: Path) -> None:
    path = tmp_path / "transparent.png"
    Image.new("RGBA", (16, 16), (0, 0, 255, 128)).save(path)

    decoded = _decode(encode_image(path, WEBP_OPTIONS))

    assert decoded.format == "WEBP"
    assert decoded.mode == "RGBA"


def test_palette_png_to_webp(tmp_path: Path) -> None:
    path = tmp_path / "palette.png"
    Image.new("RGB", (20, 10), "green").convert("P").save(path)

    decoded = _decode(encode_image(path, WEBP_OPTIONS))

    assert decoded.size == (20, 10)
    assert decoded.mode == "RGB"


def test_cmyk_jpeg_to_webp(tmp_path: Path) -> None:
    path = tmp_path / "cmyk.jpg"
    Image.new("CMYK", (30, 30), (0, 128, 255, 0)).save(path)

    decoded = _decode(encode_image(path, WEBP_OPTIONS))

    assert decoded.mode == "RGB"


def test_exif_orientation_is_applied(tmp_path: Path) -> None:
    if not hasattr(Image, "Exif"):
        pytest.skip("当前 Pillow 版本不支持写入 EXIF 数据")

    path = tmp_path / "rotated.jpg"
    exif = Image.Exif()
    exif[274] = 6  # 顺时针 90 度
    Image.new("RGB", (80, 40), "red").save(path, exif=exif.tobytes())

    decoded = _decode(encode_image(path, WEBP_OPTIONS))

    assert decoded.size == (40, 80)


def test_corrupt_source_raises_encoding_error(tmp_path: Path) -> None:
    path = tmp_path / "corrupted.png"
    path.write_text("not an image")

    with pytest.raises(EncodingError):
        encode_image(path, JPEG_OPTIONS)


def test_16bit_grayscale_png_is_scaled_not_clipped(tmp_path: Path) -> None:
    path = tmp_path / "depth16.png"
    Image.new("I;16", (8, 8), 30000).save(path)

    jpeg = _decode(encode_image(path, JPEG_OPTIONS))
    webp = _decode(encode_image(path, WEBP_OPTIONS))

    # 30000 / 65535 ≈ 46% 灰度，约 117
    for decoded in (jpeg, webp):
        r, g, b = decoded.getpixel((4, 4))[:3]
        assert 100 < r < 135
        assert abs(r - g) <= 2 and abs(r - b) <= 2
