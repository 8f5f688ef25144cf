"""测试共用的假压缩服务与辅助函数。"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Callable, Optional

import httpx
import pytest
from PIL import Image

from image_shrink.core.config import CompressorConfig, JobConfig, OutputConfig
from image_shrink.remote.tinify_client import RemoteCompressor

API_BASE = "https://api.tinify.com"


class FakeTinify:
    """用 httpx.MockTransport 模拟 /shrink 上传与结果下载。"""

    def __init__(
        self,
        fail_upload: Optional[Callable[[bytes], bool]] = None,
        fail_download: bool = False,
    ) -> None:
        self.fail_upload = fail_upload
        self.fail_download = fail_download
        self.outputs: dict[str, bytes] = {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST" and request.url.path == "/shrink":
            body = request.content
            if self.fail_upload and self.fail_upload(body):
                return httpx.Response(429, json={"error": "TooManyRequests", "message": "slow down"})
            key = f"/output/{len(self.outputs) + 1}"
            self.outputs[key] = body
            return httpx.Response(201, headers={"Location": f"{API_BASE}{key}"})
        if request.method == "GET" and request.url.path in self.outputs:
            if self.fail_download:
                return httpx.Response(500)
            return httpx.Response(200, content=self.outputs[request.url.path])
        return httpx.Response(404)

    def uploads(self) -> list[httpx.Request]:
        return [req for req in self.requests if req.method == "POST"]

    def compressor(self, api_key: Optional[str] = "test-key") -> RemoteCompressor:
        client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return RemoteCompressor(CompressorConfig(api_key=api_key, endpoint=f"{API_BASE}/shrink"), client=client)


def image_size_of(data: bytes) -> tuple[int, int]:
    with Image.open(io.BytesIO(data)) as img:
        return img.size


def make_job(source: Path, output: Path, **kwargs) -> JobConfig:
    return JobConfig(input_dir=source, output=OutputConfig(output_dir=output), **kwargs)


@pytest.fixture
def dirs(tmp_path: Path) -> tuple[Path, Path]:
    source = tmp_path / "before"
    output = tmp_path / "after"
    source.mkdir()
    return source, output


@pytest.fixture
def fake_tinify() -> FakeTinify:
    return FakeTinify()
