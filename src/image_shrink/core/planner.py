"""源文件分类与派生文件规划。"""

from __future__ import annotations

from pathlib import Path

from image_shrink.core.models import (
    KIND_JPEG,
    KIND_PNG,
    KIND_UNSUPPORTED,
    DerivativePlan,
    EncodeOptions,
    SourceKind,
)

PNG_EXTENSIONS = {".png"}
JPEG_EXTENSIONS = {".jpg", ".jpeg"}

JPEG_DERIVATIVE = DerivativePlan(".jpg", EncodeOptions(format="JPEG", quality=90, advanced_encoder=True))
WEBP_DERIVATIVE = DerivativePlan(".webp", EncodeOptions(format="WEBP", quality=85))

_PLANS: dict[SourceKind, tuple[DerivativePlan, ...]] = {
    KIND_PNG: (JPEG_DERIVATIVE, WEBP_DERIVATIVE),
    KIND_JPEG: (WEBP_DERIVATIVE,),
    KIND_UNSUPPORTED: (),
}


def classify_source(path: Path) -> SourceKind:
    """按扩展名（不区分大小写）判断源文件类型。"""

    suffix = path.suffix.lower()
    if suffix in PNG_EXTENSIONS:
        return KIND_PNG
    if suffix in JPEG_EXTENSIONS:
        return KIND_JPEG
    return KIND_UNSUPPORTED


def plan_derivatives(kind: SourceKind) -> list[DerivativePlan]:
    """返回该类型需要生成的派生文件列表，顺序固定。"""

    return list(_PLANS.get(kind, ()))


def build_output_path(output_dir: Path, base_name: str, target_extension: str) -> Path:
    return output_dir / f"{base_name}{target_extension}"
