"""
共享数据模型包
"""

from .common import (
    Verb,
    NameValue,
    generate_id,
)

from .request import (
    RequestConfig,
    WireRequest,
)

from .outcome import (
    Success,
    Failure,
    Outcome,
)

__all__ = [
    # Common
    "Verb",
    "NameValue",
    "generate_id",

    # Request
    "RequestConfig",
    "WireRequest",

    # Outcome
    "Success",
    "Failure",
    "Outcome",
]
