"""批处理完成后清空输入目录。"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

LOGGER = logging.getLogger(__name__)


def clear_input_dir(input_dir: Path) -> int:
    """删除输入目录下的全部条目（保留目录本身），返回删除数量。"""

    removed = 0
    for entry in input_dir.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()
        removed += 1
    LOGGER.info("已清空输入目录 %s（%d 项）", input_dir, removed)
    return removed
