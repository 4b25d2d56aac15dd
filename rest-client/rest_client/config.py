"""
REST Client - 配置管理
"""

from pydantic import BaseModel, Field
from typing import Optional


class ClientConfig(BaseModel):
    """REST 客户端配置"""
    # 并发控制（None 表示每次 execute 一个独立任务，不限并发）
    max_concurrency: Optional[int] = Field(None, ge=1, description="最大并发请求数")

    # 共享连接池（仅在 transport.connect() 后生效）
    max_connections: int = Field(100, description="最大连接数")
    keepalive_timeout: int = Field(30, description="Keep-alive 超时")

    # 响应处理
    body_encoding: str = Field("utf-8", description="响应体解码字符集")
    log_response_headers: bool = Field(True, description="是否以 DEBUG 级别记录响应头")

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """从环境变量加载配置"""
        import os

        max_concurrency = os.getenv("REST_CLIENT_MAX_CONCURRENCY")

        return cls(
            max_concurrency=int(max_concurrency) if max_concurrency else None,
            max_connections=int(os.getenv("REST_CLIENT_MAX_CONNECTIONS", "100")),
            keepalive_timeout=int(os.getenv("REST_CLIENT_KEEPALIVE_TIMEOUT", "30")),
        )
