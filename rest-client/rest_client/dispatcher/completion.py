"""
REST Client - 完成通道

把工作任务中产生的结果投递回调用方的事件循环。
"""

import asyncio
import logging
from typing import Callable, Any

logger = logging.getLogger(__name__)


class CompletionChannel:
    """完成通道

    绑定到 execute() 被调用时的事件循环。投递总是通过
    call_soon_threadsafe 排队，回调不会在工作任务（或工作线程）内直接执行。
    """

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self.loop = loop

    @classmethod
    def for_running_loop(cls) -> "CompletionChannel":
        """绑定当前正在运行的事件循环

        Raises:
            RuntimeError: 当前没有运行中的事件循环
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            raise RuntimeError("execute() must be called from a running event loop") from None
        return cls(loop)

    def post(self, callback: Callable[..., Any], *args: Any):
        """将回调投递到调用方事件循环"""
        if self.loop.is_closed():
            logger.warning("Event loop closed, dropping completion")
            return
        self.loop.call_soon_threadsafe(callback, *args)
