import json

import pytest
from pydantic import BaseModel

from dotrpc.rpc.dispatcher import DispatchOutcome
from dotrpc.rpc.protocol import ErrorResponse, Response
from dotrpc.rpc.response import build, build_error, serialize


def test_build_single_and_batch():
    ok = Response(id=1, result=3)
    err = ErrorResponse(id=None, code=-32600, message="Invalid Request.")

    assert build(DispatchOutcome(entries=[ok])) == {"jsonrpc": "2.0", "result": 3, "id": 1}
    assert build(DispatchOutcome(entries=[ok, err], is_batch=True)) == [
        {"jsonrpc": "2.0", "result": 3, "id": 1},
        {"jsonrpc": "2.0", "error": {"code": -32600, "message": "Invalid Request."}, "id": None},
    ]


def test_build_without_entries_returns_none():
    assert build(DispatchOutcome(entries=[])) is None
    assert build(DispatchOutcome(entries=[], is_batch=True)) is None


def test_build_error_includes_data_only_when_set():
    assert build_error(ErrorResponse(id=None, code=-32700, message="Parse error.")) == {
        "jsonrpc": "2.0",
        "error": {"code": -32700, "message": "Parse error."},
        "id": None,
    }
    with_data = build_error(ErrorResponse(id=4, code=-32001, message="x", data=[1]))
    assert with_data["error"]["data"] == [1]


def test_serialize_handles_results_json_cannot_encode_natively():
    class Point(BaseModel):
        x: int
        y: int

    raw = serialize({"result": (Point(x=1, y=2), {3})})
    assert json.loads(raw) == {"result": [{"x": 1, "y": 2}, [3]]}
    assert serialize(None) == ""
    assert serialize({"text": "héllo"}) == '{"text": "héllo"}'


def test_serialize_unknown_objects_raises():
    with pytest.raises(TypeError):
        serialize({"result": object()})
