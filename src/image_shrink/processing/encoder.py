"""使用 Pillow 将源图片重新编码为目标格式。"""

from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from image_shrink.core.exceptions import EncodingError
from image_shrink.core.models import EncodeOptions

LOGGER = logging.getLogger(__name__)

_ALPHA_MODES = {"RGBA", "LA", "PA"}
_HIGH_DEPTH_MODES = {"I", "I;16", "I;16B", "I;16L", "I;16N"}


def encode_image(path: Path, options: EncodeOptions) -> bytes:
    """读取源图片并按 ``options`` 编码，返回内存中的字节。

    会先按 EXIF Orientation 校正方向。
    """

    try:
        with Image.open(path) as img:
            img.load()
            img = ImageOps.exif_transpose(img)
            prepared = _prepare_for_format(img, options.format)

            buffer = io.BytesIO()
            prepared.save(buffer, format=options.format, **options.save_params())
            return buffer.getvalue()
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        LOGGER.debug("无法编码图像 %s: %s", path, exc)
        raise EncodingError(f"无法编码图像 {path.name} -> {options.format}: {exc}") from exc


def _prepare_for_format(img: Image.Image, image_format: str) -> Image.Image:
    img = _reduce_to_8bit(img)
    if image_format == "JPEG":
        return _flatten_to_rgb(img)

    # WEBP 支持透明通道
    if img.mode in {"RGB", "RGBA"}:
        return img
    if _has_alpha(img):
        return img.convert("RGBA")
    return img.convert("RGB")


def _reduce_to_8bit(img: Image.Image) -> Image.Image:
    """16 位灰度按比例缩放到 8 位；直接 convert 会把大于 255 的值截断成纯白。"""

    if img.mode not in _HIGH_DEPTH_MODES:
        return img
    return img.convert("I").point(lambda v: v * (1 / 256)).convert("L")


def _has_alpha(img: Image.Image) -> bool:
    return img.mode in _ALPHA_MODES or (img.mode == "P" and "transparency" in img.info)


def _flatten_to_rgb(img: Image.Image) -> Image.Image:
    """将任意模式图像转换为 RGB，透明区域以白色背景混合。"""

    if _has_alpha(img):
        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[-1])
        return background

    if img.mode == "RGB":
        return img

    return img.convert("RGB")
