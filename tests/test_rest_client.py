"""
REST Client 单元测试

测试配置、参数集合、请求序列化和客户端同步接口。
运行方式: pytest tests/test_rest_client.py -v
"""

import os
import pytest
from unittest.mock import patch
from urllib.parse import parse_qsl

from rest_client import (
    ClientConfig,
    RestClient,
    NameValueSet,
    ConfigurationError,
    BaseTransport,
    AiohttpTransport,
    TransportResponse,
    serialize,
)
from rest_client.http import build_query_string, build_form_body, FORM_CONTENT_TYPE
from shared.models import Verb, NameValue, RequestConfig, WireRequest, Success


class NullTransport(BaseTransport):
    """不会被调用的传输层"""

    def send(self, request):
        raise AssertionError("transport should not be called")


class TestClientConfig:
    """客户端配置测试"""

    def test_default_config(self):
        """测试默认配置"""
        config = ClientConfig()

        assert config.max_concurrency is None
        assert config.max_connections == 100
        assert config.keepalive_timeout == 30
        assert config.body_encoding == "utf-8"
        assert config.log_response_headers is True

    def test_invalid_concurrency(self):
        """测试并发数必须为正"""
        with pytest.raises(ValueError):
            ClientConfig(max_concurrency=0)

    def test_from_env(self):
        """测试从环境变量加载配置"""
        with patch.dict(os.environ, {
            "REST_CLIENT_MAX_CONCURRENCY": "4",
            "REST_CLIENT_MAX_CONNECTIONS": "8"
        }):
            config = ClientConfig.from_env()

            assert config.max_concurrency == 4
            assert config.max_connections == 8

    def test_from_env_unbounded(self):
        """测试未设置并发数时不限并发"""
        with patch.dict(os.environ, {}, clear=True):
            config = ClientConfig.from_env()

            assert config.max_concurrency is None


class TestVerb:
    """HTTP 方法测试"""

    def test_coerce_string(self):
        assert Verb.coerce("get") is Verb.GET
        assert Verb.coerce("DELETE") is Verb.DELETE
        assert Verb.coerce(Verb.PUT) is Verb.PUT

    def test_unknown_verb(self):
        """未知方法属于编程错误"""
        with pytest.raises(ValueError):
            Verb.coerce("PATCH")


class TestNameValueSet:
    """参数集合测试"""

    def test_preserves_order_and_duplicates(self):
        """测试保持顺序且不去重"""
        values = NameValueSet()
        values.add("b", "1").add("a", "2").add("b", "3")

        assert values.items() == [("b", "1"), ("a", "2"), ("b", "3")]
        assert len(values) == 3
        assert list(values)[0] == NameValue("b", "1")

    def test_empty(self):
        values = NameValueSet()

        assert not values
        assert values.snapshot() == ()

    def test_no_validation_on_add(self):
        """测试插入时不做校验"""
        values = NameValueSet()
        values.add("n", 42)

        assert values.items() == [("n", 42)]

    def test_snapshot_is_independent(self):
        values = NameValueSet()
        values.add("a", "1")
        snapshot = values.snapshot()
        values.add("b", "2")

        assert snapshot == (NameValue("a", "1"),)

    def test_clear(self):
        values = NameValueSet()
        values.add("a", "1")
        values.clear()

        assert len(values) == 0


class TestSerialize:
    """请求序列化测试"""

    @pytest.fixture
    def config(self):
        return RequestConfig(
            url="http://x/api",
            headers=(NameValue("Accept", "application/json"), NameValue("X-Tag", "1"), NameValue("X-Tag", "2")),
            params=(NameValue("a", "1"), NameValue("b", "2 c"))
        )

    def test_get_query_string(self, config):
        """测试 GET 参数拼接到 URL"""
        request = serialize(Verb.GET, config)

        assert request.method == Verb.GET
        assert request.url == "http://x/api?a=1&b=2%20c"
        assert request.body is None

    def test_get_without_params(self):
        request = serialize(Verb.GET, RequestConfig(url="http://x/api"))

        assert request.url == "http://x/api"

    def test_get_encodes_values_not_names(self):
        """测试只编码参数值"""
        query = build_query_string([("q", "a&b=c/d"), ("名", "值")])

        assert query == "?q=a%26b%3Dc%2Fd&名=%E5%80%BC"

    def test_query_string_no_leading_ampersand(self):
        query = build_query_string([("x", "1"), ("y", "2"), ("x", "3")])

        assert query == "?x=1&y=2&x=3"
        assert not query.startswith("?&")

    @pytest.mark.parametrize("verb", [Verb.POST, Verb.PUT])
    def test_form_body(self, config, verb):
        """测试 POST / PUT 参数作为表单请求体"""
        request = serialize(verb, config)

        assert request.url == "http://x/api"
        assert parse_qsl(request.body.decode("ascii")) == [("a", "1"), ("b", "2 c")]
        assert request.header("Content-Type") == FORM_CONTENT_TYPE

    @pytest.mark.parametrize("verb", [Verb.POST, Verb.PUT])
    def test_form_without_params(self, verb):
        """测试无参数时没有请求体"""
        request = serialize(verb, RequestConfig(url="http://x/api"))

        assert request.body is None
        assert request.header("Content-Type") is None

    def test_form_keeps_custom_content_type(self):
        config = RequestConfig(
            url="http://x/api",
            headers=(NameValue("content-type", "text/plain"),),
            params=(NameValue("a", "1"),)
        )
        request = serialize(Verb.POST, config)

        assert request.headers == [("content-type", "text/plain")]

    def test_form_body_utf8(self):
        body = build_form_body([("name", "é ü")])

        assert body == b"name=%C3%A9+%C3%BC"

    def test_delete_ignores_params(self, config):
        """测试 DELETE 忽略参数"""
        request = serialize(Verb.DELETE, config)

        assert request.url == "http://x/api"
        assert request.body is None

    @pytest.mark.parametrize("verb", list(Verb))
    def test_headers_attached_in_order(self, config, verb):
        """测试所有方法都按顺序附加请求头"""
        request = serialize(verb, config)

        assert request.headers[:3] == [
            ("Accept", "application/json"),
            ("X-Tag", "1"),
            ("X-Tag", "2"),
        ]

    def test_unencodable_query_value(self):
        """测试无法编码的值"""
        config = RequestConfig(url="http://x", params=(NameValue("bad", "\ud800"),))

        with pytest.raises(ConfigurationError):
            serialize(Verb.GET, config)

    def test_unencodable_form_value(self):
        config = RequestConfig(url="http://x", params=(NameValue("bad", "\ud800"),))

        with pytest.raises(ConfigurationError):
            serialize(Verb.POST, config)

    def test_non_string_value(self):
        config = RequestConfig(url="http://x", params=(NameValue("n", 1),))

        with pytest.raises(ConfigurationError):
            serialize(Verb.GET, config)
        with pytest.raises(ConfigurationError):
            serialize(Verb.PUT, config)

    @pytest.mark.parametrize("verb", [Verb.GET, Verb.POST, Verb.PUT])
    def test_non_string_name(self, verb):
        """测试参数名不是字符串时所有方法一致报错"""
        config = RequestConfig(url="http://x", params=(NameValue(1, "x"),))

        with pytest.raises(ConfigurationError):
            serialize(verb, config)


class TestRestClient:
    """客户端同步接口测试"""

    @pytest.fixture
    def client(self):
        return RestClient("http://x/api", transport=NullTransport())

    def test_default_transport(self):
        client = RestClient("http://x/api")

        assert isinstance(client.transport, AiohttpTransport)

    def test_chained_configuration(self, client):
        """测试链式添加参数和请求头"""
        client.add_param("a", "1").add_param("b", "2 c").add_header("Accept", "*/*")

        snapshot = client.snapshot()
        assert snapshot.url == "http://x/api"
        assert snapshot.params == (NameValue("a", "1"), NameValue("b", "2 c"))
        assert snapshot.headers == (NameValue("Accept", "*/*"),)

    def test_single_listener_slot(self, client):
        """测试监听器槽位：后设置的覆盖前面的"""
        first, second = object(), object()
        client.set_listener(first)
        client.set_listener(second)

        assert client.listener is second

        client.set_listener(None)
        assert client.listener is None

    def test_execute_requires_running_loop(self, client):
        """测试不在事件循环内调用 execute"""
        with pytest.raises(RuntimeError):
            client.execute(Verb.GET)

    def test_configuration_error_is_synchronous(self, client):
        """测试编码错误在调度前同步抛出"""
        client.add_param("bad", "\ud800")

        with pytest.raises(ConfigurationError):
            client.execute(Verb.GET)

        assert client.pending_count == 0


class TestModels:
    """数据模型测试"""

    def test_success_helpers(self):
        outcome = Success(
            request_id="req_1",
            verb=Verb.GET,
            status_code=200,
            reason_phrase="OK",
            body='{"a": 1}\n'
        )

        assert outcome.ok
        assert outcome.json() == {"a": 1}

    def test_success_without_body(self):
        outcome = Success(request_id="req_1", verb=Verb.DELETE, status_code=204)

        assert outcome.body is None
        with pytest.raises(ValueError):
            outcome.json()

    def test_wire_request_header_lookup(self):
        request = WireRequest(method=Verb.GET, url="http://x", headers=[("Accept", "a"), ("accept", "b")])

        assert request.header("ACCEPT") == "a"
        assert request.header("missing") is None

    @pytest.mark.asyncio
    async def test_transport_response_close_once(self):
        """测试响应只释放一次"""
        calls = []
        response = TransportResponse(200, "OK", on_close=lambda: calls.append(1))

        await response.close()
        await response.close()

        assert calls == [1]
        assert response.closed
