"""输出目录管理与文件写入。"""

from __future__ import annotations

import logging
from pathlib import Path

from image_shrink.core.config import OutputConfig
from image_shrink.core.exceptions import OutputWriteError, UnrecoverableSetupError
from image_shrink.core.models import DerivativePlan, SourceFile
from image_shrink.core.planner import build_output_path

LOGGER = logging.getLogger(__name__)


class OutputManager:
    """负责创建输出目录、计算输出路径并写入压缩结果。

    输出路径为 ``{output_dir}/{base_name}{ext}``，目录结构被展平；
    不同源文件同名时后处理的文件会覆盖先前的结果。
    """

    def __init__(self, config: OutputConfig) -> None:
        self.config = config
        self.output_dir = config.output_dir.resolve()
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise UnrecoverableSetupError(f"无法创建输出目录: {self.output_dir}") from exc
        if not self.output_dir.is_dir():
            raise UnrecoverableSetupError(f"输出路径不是目录: {self.output_dir}")

    def destination_for(self, source: SourceFile, plan: DerivativePlan) -> Path:
        return build_output_path(self.output_dir, source.base_name, plan.target_extension)

    def write_bytes(self, destination: Path, data: bytes) -> None:
        """写入（或覆盖）输出文件。"""

        if destination.exists():
            LOGGER.debug("覆盖已存在的输出: %s", destination)
        try:
            destination.write_bytes(data)
        except OSError as exc:
            raise OutputWriteError(f"写入文件失败: {destination}") from exc
