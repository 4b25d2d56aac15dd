"""
REST Client - 结果监听器
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional, Any

from shared.models import Success, Failure


class RequestListener(ABC):
    """请求结果监听器

    每次 execute() 调用恰好触发一次 on_finish 或 on_error，
    且总是在调用方的事件循环上执行。方法可以是普通函数或协程函数。
    """

    @abstractmethod
    def on_finish(self, outcome: Success) -> Any:
        """请求完成（收到 HTTP 响应）"""
        pass

    @abstractmethod
    def on_error(self, outcome: Failure) -> Any:
        """请求失败（传输层错误）"""
        pass


class CallbackListener(RequestListener):
    """用两个回调函数构造监听器

    Usage:
        client.execute(Verb.GET, listener=CallbackListener(
            on_finish=lambda s: print(s.status_code),
            on_error=lambda f: print(f.error)
        ))
    """

    def __init__(
        self,
        on_finish: Optional[Callable[[Success], Any]] = None,
        on_error: Optional[Callable[[Failure], Any]] = None
    ):
        self._on_finish = on_finish
        self._on_error = on_error

    def on_finish(self, outcome: Success) -> Any:
        if self._on_finish:
            return self._on_finish(outcome)

    def on_error(self, outcome: Failure) -> Any:
        if self._on_error:
            return self._on_error(outcome)
