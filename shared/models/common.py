"""
共享数据模型 - 通用类型
"""

from typing import NamedTuple, Union
from enum import Enum
import uuid


def generate_id(prefix: str = "") -> str:
    """生成唯一 ID"""
    uid = uuid.uuid4().hex[:12]
    return f"{prefix}_{uid}" if prefix else uid


class Verb(str, Enum):
    """HTTP 请求方法"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @classmethod
    def coerce(cls, value: Union["Verb", str]) -> "Verb":
        """将字符串转换为 Verb（忽略大小写）

        未知方法属于编程错误，直接抛出 ValueError。
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"Unsupported method: {value!r}") from None


class NameValue(NamedTuple):
    """名称/值对（参数或请求头）

    插入时不做任何校验或编码。
    """
    name: str
    value: str
