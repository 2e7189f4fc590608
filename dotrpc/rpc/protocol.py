"""JSON-RPC 2.0 wire models and serialization helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, TypeAlias, Union

JSONRPC_VERSION = "2.0"
RESERVED_PREFIX = "rpc."
SEPARATOR = "."

RequestId: TypeAlias = Union[str, int]
Params: TypeAlias = Union[list[Any], dict[str, Any], None]

_MISSING = object()


@dataclass(slots=True)
class Request:
    """Normalized request record. ``id`` of ``None`` marks a notification."""

    method: str
    params: Params = None
    id: RequestId | None = None
    version: str = JSONRPC_VERSION

    @property
    def is_notification(self) -> bool:
        return self.id is None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": self.method}
        if self.params is not None:
            payload["params"] = self.params
        if self.id is not None:
            payload["id"] = self.id
        return payload


@dataclass(slots=True)
class Response:
    """Successful call outcome."""

    id: RequestId | None
    result: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"jsonrpc": JSONRPC_VERSION, "result": self.result, "id": self.id}


@dataclass(slots=True)
class ErrorResponse:
    """Failed call outcome; ``id`` is null when the request id was unusable."""

    id: RequestId | None
    code: int
    message: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return {"jsonrpc": JSONRPC_VERSION, "error": error, "id": self.id}


Entry: TypeAlias = Union[Response, ErrorResponse]


@dataclass(slots=True)
class CallResult:
    """Client-side view of a reply. Exactly one of the fields is meaningful."""

    result: Any = None
    error: ErrorResponse | None = None
    id: RequestId | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class NormalizedInput:
    """Decoded payload plus the shape it arrived in."""

    items: list[Any] = field(default_factory=list)
    is_batch: bool = False


def encode_request(request: Request | list[Request]) -> str:
    """Encode a request (or batch) into a JSON string."""
    if isinstance(request, list):
        return json.dumps([r.to_dict() for r in request], ensure_ascii=False)
    return json.dumps(request.to_dict(), ensure_ascii=False)


def safe_dict(value: Any) -> dict[str, Any]:
    """Return the value when dict-like, otherwise an empty dict."""
    return value if isinstance(value, dict) else {}


def decode_entry(payload: Any) -> Entry:
    """Decode a raw response object into Response or ErrorResponse."""
    row = safe_dict(payload)
    req_id = row.get("id")
    error = row.get("error", _MISSING)
    if error is not _MISSING and error is not None:
        err = safe_dict(error)
        code = err.get("code")
        return ErrorResponse(
            id=req_id,
            code=code if isinstance(code, int) else 0,
            message=str(err.get("message") or ""),
            data=err.get("data"),
        )
    return Response(id=req_id, result=row.get("result"))


def decode_response(raw: str | bytes) -> Entry | list[Entry] | None:
    """Parse a serialized reply; empty bodies decode to ``None``."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    if not raw.strip():
        return None
    payload = json.loads(raw)
    if isinstance(payload, list):
        return [decode_entry(item) for item in payload]
    return decode_entry(payload)


def to_call_result(entry: Entry | None) -> CallResult:
    """Convert a decoded entry into the client-facing result pair."""
    if entry is None:
        return CallResult()
    if isinstance(entry, ErrorResponse):
        return CallResult(result=None, error=entry, id=entry.id)
    return CallResult(result=entry.result, error=None, id=entry.id)


def json_default(value: Any) -> Any:
    """``default=`` hook for ``json.dumps`` covering the types handlers commonly return."""
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    model_dump = getattr(value, "model_dump", None)
    if callable(model_dump):
        return model_dump()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
