"""命令行入口测试。"""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image
from typer.testing import CliRunner

from conftest import FakeTinify
from image_shrink.cli import main as cli_main
from image_shrink.processing import pipeline

runner = CliRunner()


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    # load_dotenv 会写入 os.environ；先 setenv 以便测试结束后还原
    for name in ("TINYPNG_API_KEY", "TINYPNG_API_URL"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    (tmp_path / "before").mkdir()
    return tmp_path


def _use_fake_service(monkeypatch: pytest.MonkeyPatch, fake: FakeTinify) -> None:
    def fake_process_batch(job, progress_callback=None):
        return pipeline.process_batch(job, fake.compressor(), progress_callback)

    monkeypatch.setattr(cli_main, "process_batch", fake_process_batch)


def test_default_run_prints_status_and_summary(workdir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    Image.new("RGB", (16, 16), "red").save(workdir / "before" / "photo.png")
    (workdir / "before" / "notes.txt").write_text("hello")
    _use_fake_service(monkeypatch, FakeTinify())

    result = runner.invoke(cli_main.app, [])

    assert result.exit_code == 0, result.output
    assert "OK: before/photo.png -> photo.jpg, photo.webp" in result.output
    assert "SKIP: before/notes.txt" in result.output
    assert "成功 1 个，跳过 1 个，失败 0 个" in result.output
    assert result.output.index("输出目录") < result.output.index("OK:")
    assert (workdir / "after" / "photo.jpg").exists()
    assert (workdir / "after" / "photo.webp").exists()


def test_missing_credential_exits_normally(workdir: Path) -> None:
    Image.new("RGB", (16, 16), "red").save(workdir / "before" / "photo.jpg")

    result = runner.invoke(cli_main.app, ["--env-file", str(workdir / "missing.env")])

    assert result.exit_code == 0, result.output
    assert "ERROR: before/photo.jpg" in result.output
    assert "ConfigurationError" in result.output
    assert "失败 1 个" in result.output


def test_missing_input_directory_exits_with_code_1(workdir: Path) -> None:
    result = runner.invoke(cli_main.app, ["--input", str(workdir / "nope")])

    assert result.exit_code == 1
    assert "输出目录" not in result.output


def test_empty_input_directory(workdir: Path) -> None:
    result = runner.invoke(cli_main.app, [])

    assert result.exit_code == 0
    assert "没有需要处理的图片" in result.output


def test_api_key_is_read_from_env_file(workdir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = workdir / "custom.env"
    env_file.write_text("TINYPNG_API_KEY=from-file\n")
    captured = {}

    def fake_process_batch(job, progress_callback=None):
        captured["job"] = job
        return pipeline.BatchResult()

    monkeypatch.setattr(cli_main, "process_batch", fake_process_batch)

    result = runner.invoke(cli_main.app, ["--env-file", str(env_file), "--timeout", "30", "--clear-input"])

    assert result.exit_code == 0, result.output
    job = captured["job"]
    assert job.compressor.api_key == "from-file"
    assert job.compressor.timeout == 30
    assert job.clear_input_after is True
