"""
REST Client - 请求序列化

按 HTTP 方法决定参数如何放入请求：
- GET: 参数以查询字符串追加到 URL
- POST / PUT: 参数作为 application/x-www-form-urlencoded 请求体
- DELETE: 忽略参数（保留的既有行为）
"""

import logging
from typing import Iterable, List, Optional, Tuple
from urllib.parse import quote, urlencode

from shared.models import Verb, RequestConfig, WireRequest

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=UTF-8"


def serialize(verb: Verb, config: RequestConfig) -> WireRequest:
    """将请求配置序列化为 WireRequest

    Args:
        verb: HTTP 方法
        config: 请求配置快照

    Returns:
        可交给传输层的请求

    Raises:
        ConfigurationError: 参数值无法编码
    """
    headers = _attach_headers(config.headers)
    url = config.url
    body: Optional[bytes] = None

    if verb == Verb.GET:
        url = config.url + build_query_string(config.params)
    elif verb in (Verb.POST, Verb.PUT):
        body = build_form_body(config.params)
        if body is not None and not _has_header(headers, "Content-Type"):
            headers.append(("Content-Type", FORM_CONTENT_TYPE))
    elif verb == Verb.DELETE:
        if config.params:
            logger.debug(f"DELETE ignores {len(config.params)} params for {config.url}")
    else:
        raise ValueError(f"Unsupported method: {verb!r}")

    return WireRequest(method=verb, url=url, headers=headers, body=body)


def build_query_string(params: Iterable[Tuple[str, str]]) -> str:
    """构建查询字符串

    第一个参数前缀为 "?"，其余以 "&" 连接；名称原样保留，值按 UTF-8 百分号编码。
    无参数时返回空字符串。
    """
    pairs = []
    for name, value in params:
        if not isinstance(name, str):
            raise ConfigurationError(f"Query param name {name!r} must be a string")
        try:
            encoded = quote(value, safe="", encoding="utf-8", errors="strict")
        except (UnicodeEncodeError, TypeError) as e:
            raise ConfigurationError(f"Cannot encode value of param {name!r}: {e}") from e
        pairs.append(f"{name}={encoded}")

    if not pairs:
        return ""
    return "?" + "&".join(pairs)


def build_form_body(params: Iterable[Tuple[str, str]]) -> Optional[bytes]:
    """构建表单请求体，无参数时返回 None"""
    pairs = list(params)
    if not pairs:
        return None

    for name, value in pairs:
        if not isinstance(name, str) or not isinstance(value, str):
            raise ConfigurationError(f"Form param {name!r} must be a string pair")

    try:
        encoded = urlencode(pairs, encoding="utf-8", errors="strict")
    except UnicodeEncodeError as e:
        raise ConfigurationError(f"Cannot form-encode params: {e}") from e
    return encoded.encode("ascii")


def _attach_headers(headers: Iterable[Tuple[str, str]]) -> List[Tuple[str, str]]:
    """所有方法统一附加请求头（保持顺序，不去重）"""
    return [(str(name), str(value)) for name, value in headers]


def _has_header(headers: List[Tuple[str, str]], name: str) -> bool:
    lowered = name.lower()
    return any(key.lower() == lowered for key, _ in headers)
