import pytest

from zappkit.depender import Depender, DependerError, Item


def _make(name, deps, log):
    return Item(
        name=name,
        depends_on=deps,
        start=lambda: log.append(("start", name)),
        close=lambda: log.append(("close", name)),
    )


def test_dependencies_start_first():
    log = []
    items = [
        _make("c", ["b"], log),
        _make("b", ["a"], log),
        _make("a", None, log),
    ]
    d = Depender(items)
    d.start()
    order = [name for action, name in log if action == "start"]
    assert sorted(order) == ["a", "b", "c"]
    for item in items:
        for dep in item.depends_on or ():
            assert order.index(dep) < order.index(item.name)


def test_independent_items_keep_given_order():
    log = []
    names = ["x", "y", "z"]
    d = Depender([_make(n, [], log) for n in names])
    d.start()
    assert [name for _, name in log] == names


def test_close_reverses_start_order():
    log = []
    d = Depender([_make("p", ["q"], log), _make("q", [], log), _make("r", ["p"], log)])
    d.start()
    started = [name for action, name in log if action == "start"]
    log.clear()
    d.close()
    closed = [name for action, name in log if action == "close"]
    assert closed == list(reversed(started))
    assert [i.name for i in d.started] == started


def test_cycle_raises():
    log = []
    d = Depender([_make("a", ["b"], log), _make("b", ["a"], log)])
    with pytest.raises(DependerError, match="cyclic"):
        d.start()
    assert log == []


def test_missing_dependency_raises():
    d = Depender([Item("a", ["ghost"])])
    with pytest.raises(DependerError, match="item=a"):
        d.start()


def test_start_failure_raises_and_keeps_started():
    log = []

    def boom():
        raise RuntimeError("broken")

    d = Depender([_make("ok", [], log), Item("bad", ["ok"], start=boom)])
    with pytest.raises(DependerError) as info:
        d.start()
    assert "item=bad" in str(info.value)
    assert "broken" in str(info.value)
    assert isinstance(info.value.__cause__, RuntimeError)
    d.close()
    assert log == [("start", "ok"), ("close", "ok")]


def test_empty_depender():
    d = Depender([])
    d.start()
    d.close()
    assert d.started == []