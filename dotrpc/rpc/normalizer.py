"""Turn raw inbound payloads into normalized request items."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from dotrpc.rpc.protocol import JSONRPC_VERSION, RESERVED_PREFIX, NormalizedInput, Request
from dotrpc.utils.exceptions import InvalidRequest, MethodNotFound, ParseError

LEGACY_VERSION = "1.0"


def normalize(raw: Any) -> NormalizedInput:
    """Decode ``raw`` and classify it as batch or single.

    Text input is parsed as JSON; anything else is treated as already parsed.

    Raises:
        ParseError: text is not valid JSON or decodes to null.
    """
    payload = raw
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError() from exc
    if isinstance(raw, str):
        payload = _decode_json(raw)
        # double-encoded bodies arrive as a JSON string holding JSON
        if isinstance(payload, str):
            payload = _decode_json(payload)
    if payload is None:
        raise ParseError()
    if isinstance(payload, list):
        return NormalizedInput(items=list(payload), is_batch=True)
    return NormalizedInput(items=[payload], is_batch=False)


def normalize_query(query: Mapping[str, Any], *, allow_get_calls: bool) -> NormalizedInput:
    """Build a single request from ``method``/``params``/``id`` query parameters.

    ``params`` is a comma-separated list of positional values; they are passed
    to the handler as strings.
    """
    if not allow_get_calls:
        raise InvalidRequest("GET method calls are not allowed")
    method = query.get("method")
    if not isinstance(method, str) or not method:
        raise InvalidRequest("Invalid Request. Query does not contain method.")
    raw_params = str(query.get("params") or "")
    params = raw_params.split(",") if raw_params else []
    req_id: Any = query.get("id", 1)
    if isinstance(req_id, str) and req_id.lstrip("-").isdigit():
        req_id = int(req_id)
    item = {"jsonrpc": JSONRPC_VERSION, "method": method, "params": params, "id": req_id}
    return NormalizedInput(items=[item], is_batch=False)


def request_version(item: Mapping[str, Any]) -> str | None:
    """Return the protocol version of ``item``, or None if it has none.

    A missing ``jsonrpc`` member falls back to the legacy ``version`` member,
    then to 1.0 when a ``method`` is present.
    """
    if "jsonrpc" in item:
        return str(item["jsonrpc"])
    if "version" in item:
        return str(item["version"])
    if "method" in item:
        return LEGACY_VERSION
    return None


def request_id(item: Any) -> Any:
    """Return the item's id when it is usable for echoing, else None."""
    if not isinstance(item, Mapping):
        return None
    req_id = item.get("id")
    if _is_valid_id(req_id):
        return req_id
    return None


def validate_request(item: Any, *, strict_version: bool = False) -> Request:
    """Check one batch item and return it as a Request.

    Raises:
        InvalidRequest: item is not a well-formed request object.
        MethodNotFound: method uses the reserved ``rpc.`` prefix.
    """
    if not isinstance(item, Mapping):
        raise InvalidRequest("Invalid Request. Request is not an object.")

    version = request_version(item)
    if version is None:
        raise InvalidRequest(
            'Invalid Request. Request does not contain version number in "jsonrpc" parameter for 2.0, '
            'or "version" for 1.x'
        )
    if strict_version and item.get("jsonrpc") != JSONRPC_VERSION:
        raise InvalidRequest('Invalid Request. "jsonrpc" must be exactly "2.0".')
    if "jsonrpc" in item and item.get("jsonrpc") != JSONRPC_VERSION:
        raise InvalidRequest('Invalid Request. Unsupported "jsonrpc" version.')

    method = item.get("method")
    if not isinstance(method, str) or not method:
        raise InvalidRequest("Invalid Request. Request does not contain method.")
    if method.startswith(RESERVED_PREFIX):
        raise MethodNotFound()

    req_id = item.get("id")
    if req_id is not None and not _is_valid_id(req_id):
        raise InvalidRequest("Invalid Request. Request contains ID, but it's not string or integer.")

    params = item.get("params")
    if params is not None and not isinstance(params, (list, dict)):
        raise InvalidRequest("Invalid Request. Params must be an array or an object.")

    return Request(method=method, params=params, id=req_id, version=version)


def _is_valid_id(value: Any) -> bool:
    return isinstance(value, (str, int)) and not isinstance(value, bool)


def _decode_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise ParseError() from exc
