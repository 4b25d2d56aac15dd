"""
REST Client - 异常定义
"""

from typing import Optional


class RestClientError(Exception):
    """REST 客户端错误基类"""
    pass


class ConfigurationError(RestClientError):
    """请求配置错误

    在 execute() 中同步抛出，请求不会被发送。
    """
    pass


class TransportError(RestClientError):
    """传输层错误（连接失败、协议错误、读取响应体失败等）

    只通过 on_error / Failure 异步交付，不会从 execute() 抛出。
    """

    def __init__(self, message: str, inner: Optional[BaseException] = None):
        super().__init__(message)
        self.inner = inner
