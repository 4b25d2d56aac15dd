"""
共享数据模型 - 请求结果

每次 execute() 调用只产生一个 Outcome：Success 或 Failure。
"""

import json
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, Union

from .common import Verb


class Success(BaseModel):
    """请求成功完成（拿到了 HTTP 响应，无论状态码）"""
    request_id: str
    verb: Verb
    status_code: int
    reason_phrase: str = ""
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[str] = Field(None, description="响应体；无响应实体时为 None")

    @property
    def ok(self) -> bool:
        """状态码是否为 2xx"""
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """按 JSON 解析响应体"""
        if self.body is None:
            raise ValueError("Response has no body")
        return json.loads(self.body)


class Failure(BaseModel):
    """请求失败（传输层错误或读取响应体失败）"""
    request_id: str
    verb: Verb
    error: Exception

    class Config:
        arbitrary_types_allowed = True


Outcome = Union[Success, Failure]
