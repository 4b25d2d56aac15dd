"""
REST Client - HTTP 传输层

负责真正的网络收发。RequestDispatcher 只依赖 BaseTransport 接口：
send(WireRequest) -> TransportResponse，可以是同步阻塞实现，也可以是协程。
"""

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, Callable

import aiohttp
from aiohttp import ClientSession, ClientTimeout, TCPConnector
from yarl import URL

from shared.models import WireRequest

from ..config import ClientConfig
from ..errors import TransportError

logger = logging.getLogger(__name__)

# 这些状态码的响应没有实体
NO_ENTITY_STATUSES = frozenset({204, 205, 304})


class TransportResponse:
    """传输层响应封装

    stream 为 None 表示没有响应实体；否则为可读对象，
    read() 可以是普通方法（如 io.BytesIO）或协程（如 aiohttp 响应）。
    """

    def __init__(
        self,
        status: int,
        reason: str = "",
        headers: Optional[Dict[str, str]] = None,
        stream: Optional[Any] = None,
        on_close: Optional[Callable[[], Any]] = None
    ):
        self.status = status
        self.reason = reason or ""
        self.headers = {str(key): str(value) for key, value in (headers or {}).items()}
        self.stream = stream
        self._on_close = on_close
        self._closed = False

    @property
    def has_entity(self) -> bool:
        """是否有响应实体"""
        return self.stream is not None

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self):
        """释放响应占用的资源（可重复调用）"""
        if self._closed:
            return
        self._closed = True

        if self._on_close is not None:
            result = self._on_close()
            if inspect.isawaitable(result):
                await result
        elif self.stream is not None and hasattr(self.stream, "close"):
            self.stream.close()


class BaseTransport(ABC):
    """传输层基类

    子类实现 send()，可以是 `def` 也可以是 `async def`。
    同步实现会在工作线程中执行，不会阻塞调用方的事件循环。
    """

    @abstractmethod
    def send(self, request: WireRequest) -> TransportResponse:
        """发送请求并返回响应

        Args:
            request: 序列化完成的请求

        Returns:
            传输层响应
        """
        pass

    async def connect(self):
        """建立共享连接（子类可覆盖）"""
        pass

    async def disconnect(self):
        """关闭共享连接（子类可覆盖）"""
        pass

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()


class AiohttpTransport(BaseTransport):
    """基于 aiohttp 的传输层

    负责：
    - 发送请求（每次请求独立会话，或 connect() 后共享连接池）
    - 响应实体判定
    - 将 aiohttp 异常转换为 TransportError
    """

    def __init__(self, config: Optional[ClientConfig] = None):
        self.config = config or ClientConfig()
        self._session: Optional[ClientSession] = None

    def _create_session(self) -> ClientSession:
        connector = TCPConnector(
            limit=self.config.max_connections,
            keepalive_timeout=self.config.keepalive_timeout
        )
        # 不设置整体超时
        timeout = ClientTimeout(total=None)

        return ClientSession(connector=connector, timeout=timeout)

    async def connect(self):
        """建立共享连接池"""
        if self._session is None:
            self._session = self._create_session()
            logger.info("HTTP transport connected")

    async def disconnect(self):
        """关闭共享连接池"""
        if self._session:
            await self._session.close()
            self._session = None
            logger.info("HTTP transport disconnected")

    @property
    def connected(self) -> bool:
        return self._session is not None

    async def send(self, request: WireRequest) -> TransportResponse:
        """发送 HTTP 请求

        未调用 connect() 时，每次请求使用独立会话，响应关闭时一并关闭。
        """
        owns_session = self._session is None
        session = self._create_session() if owns_session else self._session

        try:
            response = await session.request(
                method=request.method.value,
                url=URL(request.url, encoded=True),
                headers=request.headers,
                data=request.body
            )
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            if owns_session:
                await session.close()
            raise TransportError(f"{request.method.value} {request.url} failed: {e}", inner=e) from e
        except BaseException:
            if owns_session:
                await session.close()
            raise

        async def release():
            released = response.release()
            if inspect.isawaitable(released):
                await released
            if owns_session:
                await session.close()

        has_entity = response.status >= 200 and response.status not in NO_ENTITY_STATUSES

        return TransportResponse(
            status=response.status,
            reason=response.reason or "",
            headers=dict(response.headers),
            stream=_AiohttpBodyStream(response) if has_entity else None,
            on_close=release
        )


class _AiohttpBodyStream:
    """aiohttp 响应体读取适配"""

    def __init__(self, response: aiohttp.ClientResponse):
        self._response = response

    async def read(self) -> bytes:
        try:
            return await self._response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            raise TransportError(f"Failed to read response body: {e}", inner=e) from e
