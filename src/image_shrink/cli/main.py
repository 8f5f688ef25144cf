"""命令行入口。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from image_shrink.core.config import (
    DEFAULT_INPUT_DIR,
    DEFAULT_OUTPUT_DIR,
    JobConfig,
    OutputConfig,
    load_compressor_config,
)
from image_shrink.core.exceptions import UnrecoverableSetupError
from image_shrink.core.models import STATUS_SKIPPED, STATUS_SUCCEEDED, FileOutcome
from image_shrink.core.progress import ProgressUpdate
from image_shrink.processing.pipeline import process_batch
from image_shrink.utils.logging import setup_logging

app = typer.Typer(help="将 PNG/JPEG 转换为 JPG/WEBP 并通过 TinyPNG 压缩。")


def _display_path(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


def format_outcome(outcome: FileOutcome) -> str:
    shown = _display_path(outcome.source_path)
    if outcome.status == STATUS_SUCCEEDED:
        names = ", ".join(path.name for path in outcome.output_paths)
        return f"OK: {shown} -> {names}"
    if outcome.status == STATUS_SKIPPED:
        return f"SKIP: {shown}"
    return f"ERROR: {shown} : {outcome.message}"


def _build_progress_callback(progress: Progress, output_dir: Path):
    task_id: Optional[int] = None
    header_shown = False

    def callback(update: ProgressUpdate) -> None:
        nonlocal task_id, header_shown
        # 首个事件在目录准备与扫描成功之后才会到达
        if not header_shown:
            typer.echo(f"输出目录: {output_dir}")
            header_shown = True
        if update.total == 0:
            if update.message:
                typer.echo(update.message)
            return
        if task_id is None:
            typer.echo(f"输入: {update.total} 个文件")
            task_id = progress.add_task("处理图片", total=update.total)
        progress.update(task_id, completed=update.completed)

        outcome = update.outcome
        if outcome is None:
            return
        typer.echo(format_outcome(outcome), err=outcome.status not in {STATUS_SUCCEEDED, STATUS_SKIPPED})

    return callback


@app.command()
def run_cli(
    input_dir: Path = typer.Option(DEFAULT_INPUT_DIR, "--input", "-i", help="输入目录（递归扫描）"),
    output_dir: Path = typer.Option(DEFAULT_OUTPUT_DIR, "--output", "-o", help="输出目录"),
    env_file: Path = typer.Option(Path(".env"), "--env-file", help="读取 TINYPNG_API_KEY 的 .env 文件"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="网络请求超时（秒），默认不限"),
    clear_input: bool = typer.Option(False, "--clear-input", help="全部成功后清空输入目录"),
    report: Optional[str] = typer.Option(None, "--report", help="在输出目录写入 CSV 报告的文件名"),
    log_level: str = typer.Option("WARNING", "--log-level", help="日志级别"),
) -> None:
    """执行一次批量转换与压缩。"""

    setup_logging(log_level)
    logging.getLogger(__name__).debug("CLI 参数解析完成")

    source = input_dir.expanduser().resolve()
    output = output_dir.expanduser().resolve()

    job = JobConfig(
        input_dir=source,
        output=OutputConfig(output_dir=output),
        compressor=load_compressor_config(env_file, timeout=timeout),
        clear_input_after=clear_input,
        report_filename=report,
    )

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TimeElapsedColumn(),
        transient=True,
        redirect_stderr=False,
    )

    try:
        with progress:
            result = process_batch(job, progress_callback=_build_progress_callback(progress, output))
    except UnrecoverableSetupError as exc:
        typer.echo(f"错误: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    summary = result.summary()
    typer.echo(f"处理完成：成功 {summary.succeeded} 个，跳过 {summary.skipped} 个，失败 {summary.failed} 个。")
    if report:
        typer.echo(f"报告文件：{output / report}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
