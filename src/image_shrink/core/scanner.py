"""文件扫描与筛选逻辑。"""

from __future__ import annotations

import logging
from fnmatch import fnmatch
from pathlib import Path
from typing import Iterator, Sequence

from image_shrink.core.config import JobConfig
from image_shrink.core.exceptions import UnrecoverableSetupError
from image_shrink.core.models import SourceFile

LOGGER = logging.getLogger(__name__)


def _iter_candidate_files(path: Path) -> Iterator[Path]:
    """递归遍历目录下的所有文件。"""

    for candidate in path.rglob("*"):
        if candidate.is_file():
            yield candidate


def _matches_any(name: str, patterns: Sequence[str]) -> bool:
    lowered = name.lower()
    return any(fnmatch(lowered, pattern.lower()) for pattern in patterns)


def collect_source_files(config: JobConfig) -> list[SourceFile]:
    """扫描输入目录，返回去重并排序后的候选文件。

    扩展名不在此处过滤：不支持的文件交由编排器记录为跳过。
    """

    root = config.input_dir
    if not root.exists():
        raise UnrecoverableSetupError(f"输入目录不存在: {root}")
    if not root.is_dir():
        raise UnrecoverableSetupError(f"输入路径不是目录: {root}")

    include_patterns = config.include_patterns or ("*",)
    exclude_patterns = config.exclude_patterns or ()

    collected: list[SourceFile] = []
    seen_paths: set[Path] = set()

    try:
        # rglob 会吞掉 PermissionError，先显式读取一次根目录
        next(root.iterdir(), None)
        for candidate in _iter_candidate_files(root.resolve()):
            resolved = candidate.resolve()
            if resolved in seen_paths:
                continue
            seen_paths.add(resolved)

            name = candidate.name
            if not _matches_any(name, include_patterns):
                continue
            if exclude_patterns and _matches_any(name, exclude_patterns):
                continue

            collected.append(SourceFile.from_path(candidate))
    except OSError as exc:
        raise UnrecoverableSetupError(f"无法读取输入目录: {root}") from exc

    collected.sort(key=lambda x: str(x.path).lower())
    LOGGER.debug("扫描 %s 得到 %d 个文件", root, len(collected))
    return collected
