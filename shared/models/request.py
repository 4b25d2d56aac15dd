"""
共享数据模型 - 请求相关
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Tuple, Any

from .common import Verb


class RequestConfig(BaseModel):
    """请求配置快照

    由 RestClient 在 execute() 时生成，之后不再变化。
    headers/params 中的元素为 NameValue，值在序列化时才编码，这里不做校验。
    """
    url: str
    headers: Tuple[Any, ...] = Field(default_factory=tuple, description="请求头（有序）")
    params: Tuple[Any, ...] = Field(default_factory=tuple, description="参数（有序）")

    class Config:
        frozen = True


class WireRequest(BaseModel):
    """序列化完成、可交给传输层的请求"""
    method: Verb
    url: str
    headers: List[Tuple[str, str]] = Field(default_factory=list)
    body: Optional[bytes] = None

    class Config:
        frozen = True

    def header(self, name: str) -> Optional[str]:
        """按名称（忽略大小写）取第一个请求头"""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None
