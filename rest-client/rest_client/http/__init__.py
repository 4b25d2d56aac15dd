"""
REST Client - HTTP 模块

负责请求序列化和传输层调用。
"""

from .transport import (
    BaseTransport,
    AiohttpTransport,
    TransportResponse,
)
from .variants import (
    serialize,
    build_query_string,
    build_form_body,
    FORM_CONTENT_TYPE,
)

__all__ = [
    "BaseTransport",
    "AiohttpTransport",
    "TransportResponse",
    "serialize",
    "build_query_string",
    "build_form_body",
    "FORM_CONTENT_TYPE",
]
