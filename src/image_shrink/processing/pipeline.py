"""处理流水线：扫描、逐文件执行派生文件的编码与远程压缩。"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from image_shrink.core.cleanup import clear_input_dir
from image_shrink.core.config import JobConfig
from image_shrink.core.models import (
    STATUS_FAILED,
    STATUS_SKIPPED,
    STATUS_SUCCEEDED,
    BatchResult,
    DerivativeOutcome,
    FileOutcome,
    SourceFile,
)
from image_shrink.core.output_manager import OutputManager
from image_shrink.core.planner import classify_source, plan_derivatives
from image_shrink.core.progress import ProgressUpdate
from image_shrink.core.report import write_csv_report
from image_shrink.core.scanner import collect_source_files
from image_shrink.processing.worker import DerivativeTask, run_derivative
from image_shrink.remote.tinify_client import RemoteCompressor

LOGGER = logging.getLogger(__name__)


ProgressCallback = Optional[Callable[[ProgressUpdate], None]]


def process_batch(
    config: JobConfig,
    compressor: Optional[RemoteCompressor] = None,
    progress_callback: ProgressCallback = None,
) -> BatchResult:
    """同步入口，内部运行事件循环。"""

    return asyncio.run(process_batch_async(config, compressor, progress_callback))


async def process_batch_async(
    config: JobConfig,
    compressor: Optional[RemoteCompressor] = None,
    progress_callback: ProgressCallback = None,
) -> BatchResult:
    """批量处理：文件之间严格串行，单个文件的派生任务并发执行。

    仅准备阶段（目录扫描/创建）的错误会向外抛出 ``UnrecoverableSetupError``；
    单个文件的任何错误都只记录为该文件失败。
    """

    output_manager = OutputManager(config.output)

    LOGGER.info("开始扫描输入目录 %s", config.input_dir)
    sources = collect_source_files(config)
    total = len(sources)
    LOGGER.info("发现 %d 个候选文件", total)

    result = BatchResult()

    if total == 0:
        _emit_progress(progress_callback, completed=0, total=0, message="没有需要处理的图片")
        return result

    if compressor is None:
        compressor = RemoteCompressor(config.compressor)

    _emit_progress(progress_callback, 0, total, "开始执行处理任务")

    async with compressor:
        for completed, source in enumerate(sources, start=1):
            outcome = await process_source(source, compressor, output_manager)
            result.record(outcome)
            _emit_progress(progress_callback, completed, total, outcome=outcome)

    summary = result.summary()
    LOGGER.info("处理完成：成功 %d，跳过 %d，失败 %d", summary.succeeded, summary.skipped, summary.failed)

    if config.report_filename:
        _write_report(config, output_manager, result)

    if config.clear_input_after:
        if result.failed:
            LOGGER.warning("存在失败文件，保留输入目录 %s", config.input_dir)
        else:
            _clear_input(config)

    return result


async def process_source(
    source: SourceFile,
    compressor: RemoteCompressor,
    output_manager: OutputManager,
) -> FileOutcome:
    """处理单个源文件并返回其结果，不会抛出异常。"""

    plans = plan_derivatives(classify_source(source.path))
    if not plans:
        LOGGER.info("跳过不支持的文件：%s", source.path)
        return FileOutcome(source_path=source.path, status=STATUS_SKIPPED)

    tasks = [
        DerivativeTask(source=source, plan=plan, dest_path=output_manager.destination_for(source, plan))
        for plan in plans
    ]
    results = await asyncio.gather(
        *(run_derivative(task, compressor, output_manager) for task in tasks),
        return_exceptions=True,
    )

    derivatives: list[DerivativeOutcome] = []
    for task, value in zip(tasks, results):
        if isinstance(value, BaseException) and not isinstance(value, Exception):
            raise value
        error = value if isinstance(value, Exception) else None
        derivatives.append(DerivativeOutcome(plan=task.plan, output_path=task.dest_path, error=error))

    failures = [item for item in derivatives if not item.ok]
    if failures:
        message = "; ".join(item.describe_error() for item in failures)
        LOGGER.warning("处理失败 %s：%s", source.path, message)
        return FileOutcome(
            source_path=source.path,
            status=STATUS_FAILED,
            output_paths=[item.output_path for item in derivatives if item.ok],
            message=message,
            derivatives=derivatives,
        )

    return FileOutcome(
        source_path=source.path,
        status=STATUS_SUCCEEDED,
        output_paths=[item.output_path for item in derivatives],
        derivatives=derivatives,
    )


def _emit_progress(
    callback: ProgressCallback,
    completed: int,
    total: int,
    message: Optional[str] = None,
    outcome: Optional[FileOutcome] = None,
) -> None:
    if not callback:
        return
    callback(ProgressUpdate(total=total, completed=completed, message=message, outcome=outcome))


def _write_report(config: JobConfig, output_manager: OutputManager, result: BatchResult) -> None:
    try:
        write_csv_report(result.all_outcomes(), output_manager.output_dir, config.report_filename)
    except OSError as exc:
        LOGGER.error("写入报告失败：%s", exc)


def _clear_input(config: JobConfig) -> None:
    try:
        clear_input_dir(config.input_dir)
    except OSError as exc:
        LOGGER.error("清空输入目录失败：%s", exc)
