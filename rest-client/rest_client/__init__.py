"""
REST Client - 主入口包

极简的异步 HTTP 客户端：
- 构建 GET / POST / PUT / DELETE 请求
- 在独立任务中执行
- 在调用方事件循环上通过监听器交付结果

主要组件：
- RestClient: 主客户端类
- RequestDispatcher: 请求调度与结果交付
- AiohttpTransport: 默认 HTTP 传输层
- RequestListener: 结果监听器
"""

from .client import RestClient
from .config import ClientConfig
from .errors import RestClientError, ConfigurationError, TransportError
from .listener import RequestListener, CallbackListener
from .params import NameValueSet
from .dispatcher.completion import CompletionChannel
from .dispatcher.request_dispatcher import RequestDispatcher, reassemble_lines
from .http.transport import BaseTransport, AiohttpTransport, TransportResponse
from .http.variants import serialize

from shared.models import Verb, NameValue, Success, Failure, Outcome, WireRequest

__version__ = "0.1.0"

__all__ = [
    # 主客户端
    "RestClient",

    # 配置
    "ClientConfig",

    # 异常
    "RestClientError",
    "ConfigurationError",
    "TransportError",

    # 监听器
    "RequestListener",
    "CallbackListener",

    # 参数
    "NameValueSet",

    # 调度
    "CompletionChannel",
    "RequestDispatcher",
    "reassemble_lines",

    # 传输层
    "BaseTransport",
    "AiohttpTransport",
    "TransportResponse",
    "serialize",

    # 数据模型
    "Verb",
    "NameValue",
    "Success",
    "Failure",
    "Outcome",
    "WireRequest",
]
