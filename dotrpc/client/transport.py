"""Transports that carry serialized requests for the RPC client."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx
from loguru import logger

from dotrpc.utils.exceptions import TransportError

if TYPE_CHECKING:
    from dotrpc.rpc.server import Server


@runtime_checkable
class Transport(Protocol):
    """Deliver one serialized request and return the raw reply body."""

    def send(self, payload: bytes, options: Mapping[str, Any]) -> bytes: ...


class HttpTransport:
    """POST requests to a JSON-RPC endpoint with httpx.

    ``options`` are handed to ``httpx.Client.post`` untouched (``timeout``,
    ``headers``, ``auth``...), so per-client settings never pass through the
    RPC layer.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = 10.0,
        headers: Mapping[str, str] | None = None,
        client: httpx.Client | None = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self.headers = {"Content-Type": "application/json", "Accept": "application/json", **dict(headers or {})}
        self._client = client

    def send(self, payload: bytes, options: Mapping[str, Any]) -> bytes:
        kwargs: dict[str, Any] = {"timeout": self.timeout}
        kwargs.update(options)
        headers = {**self.headers, **dict(kwargs.pop("headers", None) or {})}
        try:
            if self._client is not None:
                resp = self._client.post(self.endpoint, content=payload, headers=headers, **kwargs)
            else:
                with httpx.Client() as client:
                    resp = client.post(self.endpoint, content=payload, headers=headers, **kwargs)
        except httpx.TimeoutException as exc:
            raise TransportError(f"rpc timeout: POST {self.endpoint}", retryable=True) from exc
        except httpx.RequestError as exc:
            raise TransportError(f"rpc network error: POST {self.endpoint}: {exc}", retryable=True) from exc

        status_code = int(resp.status_code)
        body = resp.content
        if status_code >= 400 and not body.strip():
            raise TransportError(
                f"rpc http error {status_code}",
                status_code=status_code,
                retryable=self._is_retryable_status(status_code),
            )
        logger.debug("RPC POST {} -> {} ({} bytes)", self.endpoint, status_code, len(body))
        return body

    @staticmethod
    def _is_retryable_status(status_code: int) -> bool:
        return status_code >= 500 or status_code in {408, 425, 429}


class LocalTransport:
    """Hand requests to an in-process Server, as an embedding framework would."""

    def __init__(self, server: "Server"):
        self.server = server

    def send(self, payload: bytes, options: Mapping[str, Any]) -> bytes:
        previous = self.server.output_suppressed
        self.server.suppress_output()
        try:
            self.server.handle(payload)
            return self.server.get_raw_output().encode("utf-8")
        finally:
            self.server.suppress_output(previous)
