import json

import pytest
from fastapi.testclient import TestClient

from dotrpc.api.http import create_app
from dotrpc.client.client import Client
from dotrpc.client.transport import HttpTransport
from dotrpc.config.schema import ServerConfig
from dotrpc.rpc.server import Server

pytestmark = pytest.mark.http


@pytest.fixture
def http_client(server):
    return TestClient(create_app(server, "/rpc"))


def test_post_returns_json_reply(http_client, written):
    resp = http_client.post("/rpc", content='{"jsonrpc": "2.0", "method": "substract", "params": [42, 23], "id": 1}')
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/json")
    assert resp.json() == {"jsonrpc": "2.0", "result": 19, "id": 1}
    assert written == []


def test_post_batch_and_notification(http_client, recorder):
    batch = [
        {"jsonrpc": "2.0", "method": "math.sum", "params": [1, 2], "id": "a"},
        {"jsonrpc": "2.0", "method": "notify_hello", "params": [5]},
    ]
    resp = http_client.post("/rpc", content=json.dumps(batch))
    assert resp.json() == [{"jsonrpc": "2.0", "result": 3, "id": "a"}]

    resp = http_client.post("/rpc", content='{"jsonrpc": "2.0", "method": "notify_hello", "params": [6]}')
    assert resp.status_code == 200
    assert resp.content == b""
    assert recorder.calls == [(5,), (6,)]


def test_post_parse_error(http_client):
    resp = http_client.post("/rpc", content="{broken")
    assert resp.json()["error"]["code"] == -32700


def test_get_call_requires_opt_in(http_client):
    resp = http_client.get("/rpc", params={"method": "foo.get", "params": "me"})
    assert resp.json()["error"] == {"code": -32600, "message": "GET method calls are not allowed"}


def test_get_call_when_enabled():
    srv = Server(ServerConfig(allow_get_calls=True))
    srv.register("foo.get", lambda name="world": f"hello {name}")
    client = TestClient(create_app(srv))
    resp = client.get("/", params={"method": "foo.get", "params": "me", "id": "4"})
    assert resp.json() == {"jsonrpc": "2.0", "result": "hello me", "id": 4}


def test_client_over_http(http_client):
    client = Client(HttpTransport("http://testserver/rpc", client=http_client))
    assert client.math.sum(4, 5).result == 9
    assert client.foo.get(name="http").result == "hello http"
    assert client.nothing.here().error.code == -32601
