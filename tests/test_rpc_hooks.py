import pytest

from dotrpc.rpc.hooks import HookBus, HookPhase, to_phase


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("before_call", HookPhase.BEFORE_CALL),
        ("onBeforeCall", HookPhase.BEFORE_CALL),
        ("on-success", HookPhase.ON_SUCCESS),
        ("onError", HookPhase.ON_ERROR),
        (HookPhase.ON_ERROR, HookPhase.ON_ERROR),
    ],
)
def test_to_phase_accepts_spellings(raw, expected):
    assert to_phase(raw) is expected


def test_to_phase_rejects_unknown():
    with pytest.raises(ValueError, match="not valid"):
        to_phase("after_call")


def test_add_appends_and_fire_runs_in_order():
    bus = HookBus()
    calls = []
    bus.add("before_call", lambda ctx: calls.append(("a", ctx)))
    bus.add(HookPhase.BEFORE_CALL, lambda ctx: calls.append(("b", ctx)))
    bus.fire("before_call", "ctx")
    assert calls == [("a", "ctx"), ("b", "ctx")]
    assert len(bus.hooks("before_call")) == 2
    assert bus.hooks("on_success") == ()


def test_extend_and_clear():
    bus = HookBus()
    bus.extend("on_success", [print, repr]).add("on_error", print)
    assert len(bus.hooks("on_success")) == 2

    bus.clear("on_success")
    assert bus.hooks("on_success") == ()
    assert len(bus.hooks("on_error")) == 1

    bus.clear()
    assert bus.hooks("on_error") == ()


def test_add_rejects_non_callable():
    with pytest.raises(TypeError):
        HookBus().add("on_error", "not callable")


def test_hook_exceptions_propagate_and_stop_the_chain():
    bus = HookBus()
    calls = []

    def failing(_ctx):
        raise RuntimeError("stop")

    bus.add("on_error", failing).add("on_error", lambda ctx: calls.append(ctx))
    with pytest.raises(RuntimeError):
        bus.fire("on_error", None)
    assert calls == []
