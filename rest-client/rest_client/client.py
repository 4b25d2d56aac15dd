"""
REST Client - 客户端入口
"""

import asyncio
import logging
from typing import Optional, Tuple, Union

from shared.models import Verb, NameValue, RequestConfig, Outcome

from .config import ClientConfig
from .dispatcher.request_dispatcher import RequestDispatcher
from .http.transport import BaseTransport, AiohttpTransport
from .http.variants import serialize
from .listener import RequestListener
from .params import NameValueSet

logger = logging.getLogger(__name__)


class RestClient:
    """异步 REST 客户端

    配置 URL、请求头和参数后调用 execute()，请求在独立任务中执行，
    结果在调用方的事件循环上交给监听器，同时通过返回的 Future 提供。

    Usage:
        client = RestClient("http://example.com/api")
        client.add_header("Accept", "application/json").add_param("q", "hello world")
        client.set_listener(my_listener)

        # 回调方式
        client.execute(Verb.GET)

        # 等待结果
        outcome = await client.execute(Verb.POST)

    注意：
    - execute() 会对配置做快照，但同一实例上请求进行中时不应修改配置
    - 默认每个请求一个任务、不限并发；可用 ClientConfig.max_concurrency 限制
    - 没有注册监听器时，结果不会通知任何人（Future 仍然完成）
    """

    def __init__(
        self,
        url: str,
        config: Optional[ClientConfig] = None,
        transport: Optional[BaseTransport] = None
    ):
        self.config = config or ClientConfig()
        self.transport = transport or AiohttpTransport(self.config)

        self._url = url
        self._params = NameValueSet()
        self._headers = NameValueSet()

        # 单一监听器槽位（后设置的覆盖前面的）
        self._listener: Optional[RequestListener] = None

        self.dispatcher = RequestDispatcher(self.transport, self.config)

    @property
    def url(self) -> str:
        return self._url

    @property
    def params(self) -> Tuple[NameValue, ...]:
        return self._params.snapshot()

    @property
    def headers(self) -> Tuple[NameValue, ...]:
        return self._headers.snapshot()

    @property
    def listener(self) -> Optional[RequestListener]:
        return self._listener

    @property
    def pending_count(self) -> int:
        """进行中的请求数"""
        return self.dispatcher.pending_count

    def set_listener(self, listener: Optional[RequestListener]):
        """设置监听器（替换之前的，None 表示清除）"""
        self._listener = listener

    def add_param(self, name: str, value: str) -> "RestClient":
        """添加参数"""
        self._params.add(name, value)
        return self

    def add_header(self, name: str, value: str) -> "RestClient":
        """添加请求头"""
        self._headers.add(name, value)
        return self

    def snapshot(self) -> RequestConfig:
        """当前请求配置的快照"""
        return RequestConfig(
            url=self._url,
            headers=self._headers.snapshot(),
            params=self._params.snapshot()
        )

    def execute(
        self,
        method: Union[Verb, str],
        listener: Optional[RequestListener] = None
    ) -> asyncio.Future:
        """执行请求，立即返回

        Args:
            method: HTTP 方法
            listener: 只用于本次请求的监听器（优先于 set_listener 设置的）

        Returns:
            Future[Outcome]，在监听器被调用之后完成，不会以异常结束

        Raises:
            ConfigurationError: 参数无法编码，请求未发送
            RuntimeError: 不在运行中的事件循环内调用
        """
        verb = Verb.coerce(method)
        request = serialize(verb, self.snapshot())

        if listener is not None:
            resolve_listener = lambda: listener
        else:
            resolve_listener = lambda: self._listener

        return self.dispatcher.dispatch(verb, request, resolve_listener)

    def get(self, listener: Optional[RequestListener] = None) -> asyncio.Future:
        """GET 请求"""
        return self.execute(Verb.GET, listener)

    def post(self, listener: Optional[RequestListener] = None) -> asyncio.Future:
        """POST 请求"""
        return self.execute(Verb.POST, listener)

    def put(self, listener: Optional[RequestListener] = None) -> asyncio.Future:
        """PUT 请求"""
        return self.execute(Verb.PUT, listener)

    def delete(self, listener: Optional[RequestListener] = None) -> asyncio.Future:
        """DELETE 请求（忽略参数）"""
        return self.execute(Verb.DELETE, listener)

    async def fetch(
        self,
        method: Union[Verb, str],
        listener: Optional[RequestListener] = None
    ) -> Outcome:
        """执行请求并等待结果"""
        return await self.execute(method, listener)

    async def wait_idle(self):
        """等待所有进行中的请求交付完成"""
        await self.dispatcher.wait_idle()

    async def connect(self):
        """建立传输层共享连接"""
        await self.transport.connect()
        logger.info(f"REST client connected: {self._url}")

    async def disconnect(self):
        """等待进行中的请求后断开传输层"""
        await self.wait_idle()
        await self.transport.disconnect()
        logger.info(f"REST client disconnected: {self._url}")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
