"""
REST Client - 请求调度器
"""

import asyncio
import inspect
import logging
import re
from typing import Optional, Dict, Set, Callable

from shared.models import Verb, WireRequest, Success, Failure, Outcome, generate_id

from ..config import ClientConfig
from ..errors import TransportError
from ..http.transport import BaseTransport, TransportResponse
from ..listener import RequestListener
from .completion import CompletionChannel

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r\n|\r|\n")

ListenerResolver = Callable[[], Optional[RequestListener]]


def reassemble_lines(text: str) -> str:
    """按行重建文本，每行（含最后一行）都以 "\\n" 结尾

    行分隔符可以是 "\\r\\n"、"\\r" 或 "\\n"。空文本返回空字符串。
    """
    lines = _LINE_BREAK.split(text)
    if lines[-1] == "":
        lines.pop()
    return "".join(line + "\n" for line in lines)


class RequestDispatcher:
    """请求调度器

    负责：
    - 每次请求启动一个独立的工作任务（可选并发上限）
    - 调用传输层并读取完整响应体
    - 通过完成通道把结果交回调用方事件循环
    - 跟踪未完成的请求
    """

    def __init__(self, transport: BaseTransport, config: ClientConfig):
        self.transport = transport
        self.config = config

        # 并发控制（None 表示不限）
        self._semaphore: Optional[asyncio.Semaphore] = None

        # 请求状态跟踪: {request_id: Future[Outcome]}
        self._pending: Dict[str, asyncio.Future] = {}

        # 工作任务与异步监听器任务（保持引用）
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending_count(self) -> int:
        """未完成的请求数"""
        return len(self._pending)

    def dispatch(
        self,
        verb: Verb,
        request: WireRequest,
        resolve_listener: ListenerResolver
    ) -> asyncio.Future:
        """调度请求，立即返回

        Args:
            verb: HTTP 方法
            request: 序列化完成的请求
            resolve_listener: 交付时调用，返回当时应通知的监听器

        Returns:
            在监听器被调用之后完成的 Future[Outcome]
        """
        channel = CompletionChannel.for_running_loop()
        loop = channel.loop

        if self.config.max_concurrency and self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.config.max_concurrency)

        request_id = generate_id("req")
        future = loop.create_future()
        self._pending[request_id] = future
        future.add_done_callback(lambda _: self._pending.pop(request_id, None))

        self._spawn(loop, self._run(request_id, verb, request, channel, future, resolve_listener))

        logger.debug(f"Dispatched request {request_id}: {verb.value} {request.url}")
        return future

    async def wait_idle(self):
        """等待所有未完成请求交付（包括异步监听器）"""
        while True:
            waiting = [f for f in self._pending.values() if not f.done()]
            waiting.extend(t for t in self._tasks if not t.done())
            if not waiting:
                return
            # asyncio.wait 被取消时不会取消正在等待的请求
            await asyncio.wait(waiting)

    def _spawn(self, loop: asyncio.AbstractEventLoop, awaitable) -> asyncio.Task:
        task = asyncio.ensure_future(awaitable, loop=loop)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(
        self,
        request_id: str,
        verb: Verb,
        request: WireRequest,
        channel: CompletionChannel,
        future: asyncio.Future,
        resolve_listener: ListenerResolver
    ):
        """工作任务：执行请求并投递结果"""
        try:
            if self._semaphore is None:
                outcome = await self._perform(request_id, verb, request)
            else:
                async with self._semaphore:
                    outcome = await self._perform(request_id, verb, request)
        except asyncio.CancelledError:
            logger.debug(f"Request {request_id} cancelled")
            channel.post(self._cancel, future)
            raise

        channel.post(self._deliver, outcome, future, resolve_listener)

    async def _perform(self, request_id: str, verb: Verb, request: WireRequest) -> Outcome:
        """调用传输层，返回 Success 或 Failure（不抛出普通异常）"""
        try:
            response = await self._send(request)
        except Exception as e:
            logger.warning(f"Request {request_id} ({verb.value} {request.url}) failed: {e}")
            return Failure(request_id=request_id, verb=verb, error=_as_transport_error(e))

        try:
            if self.config.log_response_headers:
                logger.debug(f"Request {request_id} response headers: {response.headers}")

            body = await self._read_body(response)
        except Exception as e:
            logger.warning(f"Request {request_id} ({verb.value} {request.url}) failed reading response: {e}")
            return Failure(request_id=request_id, verb=verb, error=_as_transport_error(e))
        finally:
            await self._release(request_id, response)

        return Success(
            request_id=request_id,
            verb=verb,
            status_code=response.status,
            reason_phrase=response.reason,
            headers=response.headers,
            body=body
        )

    async def _send(self, request: WireRequest) -> TransportResponse:
        send = self.transport.send
        if asyncio.iscoroutinefunction(send):
            return await send(request)
        # 同步传输层在工作线程中阻塞
        return await asyncio.to_thread(send, request)

    async def _read_body(self, response: TransportResponse) -> Optional[str]:
        """读取完整响应体，无实体时返回 None"""
        if response.stream is None:
            return None

        read = response.stream.read
        if asyncio.iscoroutinefunction(read):
            raw = await read()
        else:
            raw = await asyncio.to_thread(read)

        if isinstance(raw, str):
            text = raw
        else:
            text = bytes(raw).decode(self.config.body_encoding, errors="replace")
        return reassemble_lines(text)

    async def _release(self, request_id: str, response: TransportResponse):
        try:
            await response.close()
        except Exception as e:
            logger.warning(f"Request {request_id}: failed to release response: {e}")

    def _deliver(
        self,
        outcome: Outcome,
        future: asyncio.Future,
        resolve_listener: ListenerResolver
    ):
        """在调用方事件循环上执行：通知监听器，然后完成 Future"""
        listener = resolve_listener()

        if listener is None:
            logger.debug(f"No listener registered, dropping outcome of {outcome.request_id}")
        else:
            self._notify(listener, outcome)

        if not future.done():
            future.set_result(outcome)

    def _notify(self, listener: RequestListener, outcome: Outcome):
        if isinstance(outcome, Success):
            handler = listener.on_finish
        else:
            handler = listener.on_error

        try:
            result = handler(outcome)
            if inspect.isawaitable(result):
                task = self._spawn(asyncio.get_running_loop(), result)
                task.add_done_callback(self._log_listener_failure)
        except Exception:
            logger.exception(f"Listener failed handling outcome of {outcome.request_id}")

    @staticmethod
    def _log_listener_failure(task: asyncio.Task):
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Async listener failed: {error!r}", exc_info=error)

    @staticmethod
    def _cancel(future: asyncio.Future):
        if not future.done():
            future.cancel()


def _as_transport_error(error: BaseException) -> TransportError:
    if isinstance(error, TransportError):
        return error
    wrapped = TransportError(f"{type(error).__name__}: {error}", inner=error)
    wrapped.__cause__ = error
    return wrapped
