"""处理任务的配置模型与环境变量加载。"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

LOGGER = logging.getLogger(__name__)

API_KEY_ENV = "TINYPNG_API_KEY"
API_URL_ENV = "TINYPNG_API_URL"
DEFAULT_ENDPOINT = "https://api.tinify.com/shrink"

DEFAULT_INPUT_DIR = Path("before")
DEFAULT_OUTPUT_DIR = Path("after")


@dataclass(slots=True)
class CompressorConfig:
    """远程压缩服务配置。

    ``api_key`` 允许为空：缺失凭证不会在启动时报错，而是在第一次压缩时抛出
    ``ConfigurationError``。
    """

    api_key: Optional[str] = None
    endpoint: str = DEFAULT_ENDPOINT
    username: str = "api"
    timeout: Optional[float] = None


@dataclass(slots=True)
class OutputConfig:
    """输出目录配置。同名文件一律覆盖。"""

    output_dir: Path


@dataclass(slots=True)
class JobConfig:
    """单次批处理任务的配置集合。"""

    input_dir: Path
    output: OutputConfig
    compressor: CompressorConfig = field(default_factory=CompressorConfig)
    include_patterns: Sequence[str] = field(default_factory=lambda: ("*",))
    exclude_patterns: Sequence[str] = field(default_factory=tuple)
    clear_input_after: bool = False
    report_filename: Optional[str] = None


def load_compressor_config(
    env_file: Optional[Path] = None,
    *,
    timeout: Optional[float] = None,
) -> CompressorConfig:
    """从环境变量（以及可选的 .env 文件）读取压缩服务配置。"""

    if env_file is not None:
        loaded = load_dotenv(dotenv_path=env_file)
        LOGGER.debug("加载 .env 文件 %s: %s", env_file, loaded)

    api_key = os.getenv(API_KEY_ENV) or None
    if api_key is None:
        LOGGER.debug("未设置环境变量 %s", API_KEY_ENV)

    return CompressorConfig(
        api_key=api_key,
        endpoint=os.getenv(API_URL_ENV) or DEFAULT_ENDPOINT,
        timeout=timeout,
    )
