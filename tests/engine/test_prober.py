"""Tests for the connection prober."""

import json

import httpx
import pytest
import respx
from httpx import Response

from aetheria.engine.prober import ConnectionProber, parse_model_ids
from aetheria.store.models import Connection, ConnectionStatus


@pytest.fixture
def prober() -> ConnectionProber:
    return ConnectionProber(probe_timeout=1.0, models_timeout=1.0, load_timeout=1.0)


# -- parse_model_ids ---------------------------------------------------------


def test_parse_openai_shape():
    data = {"object": "list", "data": [{"id": "qwen2.5:7b"}, {"id": "llama3:8b"}]}
    assert parse_model_ids(data) == ["qwen2.5:7b", "llama3:8b"]


def test_parse_ollama_shape():
    data = {"models": [{"name": "mistral:7b", "size": 1}, {"name": "phi3:mini"}]}
    assert parse_model_ids(data) == ["mistral:7b", "phi3:mini"]


@pytest.mark.parametrize("data", [None, [], "text", {"data": "x"}, {"other": []}])
def test_parse_unknown_shapes(data):
    assert parse_model_ids(data) == []


def test_parse_skips_malformed_entries():
    assert parse_model_ids({"data": [{"id": "a"}, "junk", {"id": ""}, {}]}) == ["a"]


# -- probe -------------------------------------------------------------------


@pytest.mark.asyncio
@respx.mock
async def test_probe_success(prober: ConnectionProber) -> None:
    route = respx.get("http://localhost:11434/v1/models").mock(
        return_value=Response(200, json={"data": []})
    )

    assert await prober.probe("localhost:11434/") is True
    assert route.called


@pytest.mark.asyncio
@respx.mock
async def test_probe_sends_bearer_token(prober: ConnectionProber) -> None:
    route = respx.get("http://h:1/v1/models").mock(return_value=Response(200, json={}))

    await prober.probe("http://h:1", api_key="sk-test")

    assert route.calls.last.request.headers["Authorization"] == "Bearer sk-test"


@pytest.mark.asyncio
@respx.mock
async def test_probe_error_status_is_false(prober: ConnectionProber) -> None:
    respx.get("http://h:1/v1/models").mock(return_value=Response(503))

    assert await prober.probe("http://h:1") is False


@pytest.mark.asyncio
@respx.mock
async def test_probe_connection_error_is_false(prober: ConnectionProber) -> None:
    respx.get("http://h:1/v1/models").mock(side_effect=httpx.ConnectError("refused"))

    assert await prober.probe("http://h:1") is False


@pytest.mark.asyncio
@respx.mock
async def test_probe_timeout_is_false(prober: ConnectionProber) -> None:
    respx.get("http://h:1/v1/models").mock(side_effect=httpx.ReadTimeout("slow"))

    assert await prober.probe("http://h:1") is False


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["", "   ", "h:1", "http://[::1"])
async def test_probe_malformed_urls_never_raise(prober: ConnectionProber, url: str) -> None:
    assert await prober.probe(url) is False


# -- list_models -------------------------------------------------------------


@pytest.mark.asyncio
@respx.mock
async def test_list_models_openai_shape(prober: ConnectionProber) -> None:
    respx.get("http://localhost:1234/v1/models").mock(
        return_value=Response(200, json={"data": [{"id": "qwen2.5-coder-7b"}]})
    )

    assert await prober.list_models("localhost:1234/v1") == ["qwen2.5-coder-7b"]


@pytest.mark.asyncio
@respx.mock
async def test_list_models_non_json_is_empty(prober: ConnectionProber) -> None:
    respx.get("http://h:1/v1/models").mock(return_value=Response(200, text="<html>hi</html>"))

    assert await prober.list_models("http://h:1") == []


@pytest.mark.asyncio
@respx.mock
async def test_list_models_unreachable_is_empty(prober: ConnectionProber) -> None:
    respx.get("http://h:1/v1/models").mock(side_effect=httpx.ConnectError("refused"))

    assert await prober.list_models("http://h:1") == []


@pytest.mark.asyncio
@respx.mock
async def test_list_models_error_status_is_empty(prober: ConnectionProber) -> None:
    respx.get("http://h:1/v1/models").mock(return_value=Response(401, json={"data": [{"id": "x"}]}))

    assert await prober.list_models("http://h:1") == []


# -- request_model_load ------------------------------------------------------


@pytest.mark.asyncio
@respx.mock
async def test_request_model_load_posts_model_key(prober: ConnectionProber) -> None:
    route = respx.post("http://localhost:1234/api/v1/models/load").mock(
        return_value=Response(200, json={"status": "loaded"})
    )

    assert await prober.request_model_load("localhost:1234/v1", "qwen2.5-7b") is True
    assert json.loads(route.calls.last.request.content) == {"model_key": "qwen2.5-7b"}


@pytest.mark.asyncio
@respx.mock
async def test_request_model_load_failure_is_false(prober: ConnectionProber) -> None:
    respx.post("http://h:1/api/v1/models/load").mock(side_effect=httpx.ConnectError("refused"))

    assert await prober.request_model_load("http://h:1", "m") is False


@pytest.mark.asyncio
async def test_request_model_load_requires_inputs(prober: ConnectionProber) -> None:
    assert await prober.request_model_load("", "m") is False
    assert await prober.request_model_load("http://h:1", "") is False


# -- check -------------------------------------------------------------------


@pytest.mark.asyncio
@respx.mock
async def test_check_maps_to_status(prober: ConnectionProber) -> None:
    respx.get("http://up:1/v1/models").mock(return_value=Response(200, json={"data": []}))
    respx.get("http://down:1/v1/models").mock(side_effect=httpx.ConnectError("refused"))

    up = Connection(base_url="http://up:1")
    down = Connection(base_url="http://down:1")

    assert await prober.check(up) is ConnectionStatus.ONLINE
    assert await prober.check(down) is ConnectionStatus.OFFLINE
