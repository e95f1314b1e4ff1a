from zappkit.zlog.config import Level
from zappkit.zlog.core import Entry
from zappkit.zlog.hook import HookConfig, with_hook


def test_without_interceptors_entry_passes_through():
    written = []
    hooked = HookConfig().wrap(lambda entry, fields: written.append((entry.message, list(fields))))
    hooked(Entry(Level.INFO, "hello"), [("k", 1)])
    assert written == [("hello", [("k", 1)])]


def test_interceptor_can_rewrite_message():
    written = []

    def upper(entry, fields):
        entry.message = entry.message.upper()
        return False

    hooked = with_hook(upper).wrap(
        lambda entry, fields: written.append((entry.message, list(fields)))
    )
    hooked(Entry(Level.INFO, "abc"), [])
    assert written == [("ABC", [])]


def test_cancelling_interceptor_drops_entry_and_stops_chain():
    written = []
    seen = []
    hooked = with_hook(
        lambda entry, fields: seen.append("cancel") or True,
        lambda entry, fields: seen.append("later") or False,
    ).wrap(lambda entry, fields: written.append(entry.message))
    hooked(Entry(Level.INFO, "x"), [])
    assert written == []
    assert seen == ["cancel"]


def test_interceptors_run_in_order():
    written = []

    def add_a(entry, fields):
        entry.message += "a"
        return False

    def add_b(entry, fields):
        entry.message += "b"
        return False

    conf = HookConfig().add_interceptor_func(add_a).add_interceptor_func(add_b)
    hooked = conf.wrap(lambda entry, fields: written.append(entry.message))
    hooked(Entry(Level.INFO, "-"), [])
    assert written == ["-ab"]


def test_start_callbacks_run_once():
    calls = []
    conf = HookConfig().add_start_hook_callbacks(lambda: calls.append(1), lambda: calls.append(2))
    assert calls == []
    conf.wrap(lambda e, f: None)
    conf.wrap(lambda e, f: None)
    assert calls == [1, 2]


def test_add_methods_return_same_config():
    conf = HookConfig()
    assert conf.add_interceptor_func() is conf
    assert conf.add_start_hook_callbacks() is conf