"""HTTP adapters for dotrpc servers."""

from dotrpc.api.http import create_app, create_router

__all__ = ["create_app", "create_router"]
