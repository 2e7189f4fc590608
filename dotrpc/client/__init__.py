"""JSON-RPC client and transports."""

from dotrpc.client.client import Client
from dotrpc.client.transport import HttpTransport, LocalTransport, Transport

__all__ = ["Client", "HttpTransport", "LocalTransport", "Transport"]
