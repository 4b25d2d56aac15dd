"""
REST Client - 请求调度模块

负责在独立任务中执行请求，并把结果交回调用方事件循环。
"""

from .completion import CompletionChannel
from .request_dispatcher import RequestDispatcher, reassemble_lines

__all__ = ["CompletionChannel", "RequestDispatcher", "reassemble_lines"]
