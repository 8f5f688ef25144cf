"""单个派生文件的处理单元：编码 → 远程压缩 → 写入。"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from image_shrink.core.models import DerivativePlan, SourceFile
from image_shrink.core.output_manager import OutputManager
from image_shrink.processing.encoder import encode_image
from image_shrink.remote.tinify_client import RemoteCompressor

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class DerivativeTask:
    """描述单个派生文件的处理任务。"""

    source: SourceFile
    plan: DerivativePlan
    dest_path: Path


async def run_derivative(
    task: DerivativeTask,
    compressor: RemoteCompressor,
    output_manager: OutputManager,
) -> Path:
    """执行完整流程并返回输出路径；失败时直接抛出异常。

    只有经过远程压缩的字节才会写入磁盘。
    """

    encoded = await asyncio.to_thread(encode_image, task.source.path, task.plan.encode_options)
    LOGGER.debug("%s 编码为 %s: %d 字节", task.source.path.name, task.plan.target_extension, len(encoded))

    compressed = await compressor.compress(encoded)

    await asyncio.to_thread(output_manager.write_bytes, task.dest_path, compressed)
    LOGGER.debug("写入 %s (%d -> %d 字节)", task.dest_path, len(encoded), len(compressed))
    return task.dest_path
