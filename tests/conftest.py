"""Pytest hooks and fixtures."""

import pytest

from dotrpc.config.access import clear_config_cache
from dotrpc.config.schema import ServerConfig
from dotrpc.rpc.server import Server


def substract(subtrahend, minuend):
    return subtrahend - minuend


def get_data():
    return ["hello", 5]


class MathService:
    def sum(self, *values):
        return sum(values)

    def double(self, value):
        return value * 2

    def _secret(self):
        return "hidden"


class Recorder:
    """Collects notification calls so tests can see side effects."""

    def __init__(self):
        self.calls = []

    def hello(self, *values):
        self.calls.append(values)


@pytest.fixture(autouse=True)
def _isolated_config_cache():
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def written():
    return []


@pytest.fixture
def server(recorder, written):
    srv = Server(ServerConfig(), writer=written.append)
    srv.register("substract", substract)
    srv.register("get_data", get_data)
    srv.register("math", MathService())
    srv.register("notify_hello", recorder.hello)
    srv.register("foo.get", lambda name="world": f"hello {name}")
    return srv
