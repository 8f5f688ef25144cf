"""TinyPNG (Tinify) 兼容压缩服务客户端。

压缩分两步完成：

1. ``POST /shrink`` 上传原始字节，服务端在 ``Location`` 头中返回结果地址；
2. ``GET <Location>`` 下载压缩后的字节。

两次请求都使用 HTTP Basic 认证（用户名固定为 ``api``，密码为 API Key）。
不做重试；任何失败都会以异常形式交给调用方。
"""

from __future__ import annotations

import base64
import logging
from typing import Optional

import httpx

from image_shrink.core.config import CompressorConfig
from image_shrink.core.exceptions import ConfigurationError, DownloadError, UploadError

LOGGER = logging.getLogger(__name__)


class RemoteCompressor:
    """上传 → 跟随 Location → 下载 的两步协议客户端。

    可以注入 ``client``（例如带 ``httpx.MockTransport`` 的测试客户端）；
    未注入时在首次使用时自行创建，并在 ``aclose`` 中关闭。
    """

    def __init__(self, config: CompressorConfig, client: Optional[httpx.AsyncClient] = None) -> None:
        self.config = config
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "RemoteCompressor":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
        return self._client

    def _auth_header(self) -> str:
        api_key = self.config.api_key
        if not api_key:
            raise ConfigurationError("未配置压缩服务 API Key（环境变量 TINYPNG_API_KEY）")
        token = base64.b64encode(f"{self.config.username}:{api_key}".encode("utf-8")).decode("ascii")
        return f"Basic {token}"

    async def compress(self, data: bytes) -> bytes:
        """上传 ``data`` 并返回压缩后的字节。"""

        authorization = self._auth_header()
        location = await self._upload(data, authorization)
        return await self._download(location, authorization)

    async def _upload(self, data: bytes, authorization: str) -> str:
        client = self._get_client()
        try:
            response = await client.post(
                self.config.endpoint,
                content=data,
                headers={
                    "Authorization": authorization,
                    "Content-Type": "application/octet-stream",
                },
            )
        except httpx.HTTPError as exc:
            raise UploadError(f"上传失败: {exc}") from exc

        if not response.is_success:
            raise UploadError(f"/shrink 失败: status={response.status_code} body={_error_detail(response)}")

        location = response.headers.get("Location")
        if not location:
            raise UploadError("/shrink 响应缺少 Location 头")

        LOGGER.debug("上传完成 %d 字节 -> %s", len(data), location)
        return str(response.url.join(location))

    async def _download(self, location: str, authorization: str) -> bytes:
        client = self._get_client()
        try:
            response = await client.get(
                location,
                headers={"Authorization": authorization},
                follow_redirects=True,
            )
        except httpx.HTTPError as exc:
            raise DownloadError(f"下载失败: {exc}") from exc

        if not response.is_success:
            raise DownloadError(f"下载压缩结果失败: status={response.status_code}")

        LOGGER.debug("下载完成 %d 字节 <- %s", len(response.content), location)
        return response.content


def _error_detail(response: httpx.Response) -> str:
    """提取服务端返回的错误说明。"""

    try:
        payload = response.json()
    except ValueError:
        return response.text

    if isinstance(payload, dict):
        parts = [str(payload[key]) for key in ("error", "message") if payload.get(key)]
        if parts:
            return ": ".join(parts)
    return response.text
