import pytest

from dotrpc.rpc.binder import describe
from dotrpc.rpc.registry import HandlerRegistry, Namespace, split_path
from dotrpc.utils.exceptions import MethodNotFound, RegistrationError


class Strings:
    def upper(self, value):
        return value.upper()

    def lower(self, value):
        return value.lower()

    def _private(self):
        return None


def test_register_dotted_path_creates_namespaces():
    registry = HandlerRegistry()
    registry.register("strings.hash.encode", lambda value: value[::-1])

    assert registry.contains("strings")
    assert registry.contains("strings.hash")
    assert isinstance(registry.root.get("strings"), Namespace)
    assert registry.resolve("strings.hash.encode").target("abc") == "cba"


def test_register_object_exposes_public_methods():
    registry = HandlerRegistry()
    registry.register("strings", Strings())

    assert registry.list_methods() == ["strings.lower", "strings.upper"]
    assert not registry.contains("strings._private")


@pytest.mark.parametrize("value", [5, "abc", None, True, 2.5, b"raw", [1, 2]])
def test_plain_values_are_rejected(value):
    registry = HandlerRegistry()

    with pytest.raises(RegistrationError, match="is not a handler"):
        registry.register("config.limit", value)
    assert registry.list_methods() == []
    assert registry.root.get("config") is None


def test_register_mapping_and_namespace():
    registry = HandlerRegistry()
    registry.register("math", {"add": lambda a, b: a + b, "neg": {"int": lambda a: -a}})

    other = HandlerRegistry()
    other.register("tools", registry.root.get("math"))

    assert registry.list_methods() == ["math.add", "math.neg.int"]
    assert other.list_methods() == ["tools.add", "tools.neg.int"]
    assert other.resolve("tools.add").path == "tools.add"


def test_register_descriptor_keeps_parameters():
    registry = HandlerRegistry()
    registry.register("pair", describe(lambda a, b=2: (a, b)))
    descriptor = registry.resolve("pair")
    assert descriptor.path == "pair"
    assert [p.name for p in descriptor.parameters] == ["a", "b"]


def test_resolve_namespace_or_missing_is_method_not_found():
    registry = HandlerRegistry()
    registry.register("math.sum", lambda *xs: sum(xs))

    with pytest.raises(MethodNotFound):
        registry.resolve("math")
    with pytest.raises(MethodNotFound):
        registry.resolve("math.avg")
    with pytest.raises(MethodNotFound):
        registry.resolve("math.sum.deeper")
    with pytest.raises(MethodNotFound):
        registry.resolve("math..sum")


def test_leaf_and_namespace_cannot_share_a_name():
    registry = HandlerRegistry()
    registry.register("math.sum", lambda *xs: sum(xs))

    with pytest.raises(RegistrationError):
        registry.register("math", lambda: None)
    with pytest.raises(RegistrationError):
        registry.register("math.sum.fast", lambda: None)


def test_reregistering_a_leaf_replaces_it():
    registry = HandlerRegistry()
    registry.register("ping", lambda: "a")
    registry.register("ping", lambda: "b")
    assert registry.resolve("ping").target() == "b"
    assert len(registry) == 1


def test_unregister_removes_leaf_or_subtree():
    registry = HandlerRegistry()
    registry.register("a.b.c", lambda: 1)
    registry.register("a.d", lambda: 2)

    assert registry.unregister("a.b") is True
    assert registry.list_methods() == ["a.d"]
    assert registry.unregister("a.b") is False
    assert registry.unregister("") is False


def test_method_decorator_defaults_to_function_name():
    registry = HandlerRegistry()

    @registry.method()
    def echo(value):
        return value

    @registry.method("text.shout")
    def shout(value):
        return value.upper()

    assert "echo" in registry
    assert registry.resolve("text.shout").target("x") == "X"
    assert echo("same") == "same"


@pytest.mark.parametrize("path", ["", ".a", "a.", "a..b"])
def test_split_path_rejects_empty_segments(path):
    with pytest.raises(RegistrationError):
        split_path(path)
