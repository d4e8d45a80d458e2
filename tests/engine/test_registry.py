from __future__ import annotations

import json
import locale

import pytest

from redis_repl.engine.registry import CommandError, build_registry
from redis_repl.engine.types import SessionContext
from redis_repl.engine.vocabulary import COMMANDS


class _FakeConnection:
    def __init__(self, commands=("get", "set", "getrange")) -> None:
        self.commands = tuple(commands)
        self.calls: list[tuple[str, list[str]]] = []
        self.closed = False

    def send_command(self, name, args):
        self.calls.append((name, list(args)))
        return f"reply:{name}"

    def close(self) -> None:
        self.closed = True


def _registry(commands=("get", "set", "getrange")):
    connection = _FakeConnection(commands)
    context = SessionContext()
    return build_registry(connection, context), connection, context


def test_vocabulary_has_no_duplicates():
    assert len(set(COMMANDS)) == len(COMMANDS)
    assert all(name == name.lower() for name in COMMANDS)


def test_remote_commands_forward_verbatim():
    registry, connection, _ = _registry()
    handler = registry.lookup("getrange")
    assert handler is not None
    reply = handler("GETRANGE", ["key", "0", "-1"])
    assert reply == "reply:GETRANGE"
    assert connection.calls == [("GETRANGE", ["key", "0", "-1"])]


def test_lookup_is_case_insensitive_and_misses_return_none():
    registry, _, _ = _registry()
    assert registry.lookup("get") is not None
    assert registry.lookup("Get") is not None
    assert registry.lookup("NOPE") is None
    assert "set" in registry
    assert "NOPE" not in registry


def test_indexing_returns_handler_or_raises_keyerror():
    registry, _, _ = _registry()
    assert registry["help"] is not None
    assert registry["Get"] is registry.lookup("GET")
    with pytest.raises(KeyError):
        registry["NOPE"]


def test_registry_holds_vocabulary_and_meta_commands():
    registry, _, _ = _registry()
    assert set(registry) == {"GET", "SET", "GETRANGE", "", "HELP", "NOOP", "EXIT", "QUIT", "SAVE"}
    assert len(registry) == 9


def test_help_without_filter_lists_vocabulary_in_order():
    registry, connection, _ = _registry()
    assert registry.lookup("HELP")("HELP", []) == ["GET", "SET", "GETRANGE"]
    assert connection.calls == []


def test_help_filters_by_substring_case_insensitively():
    registry, _, _ = _registry()
    assert registry.lookup("HELP")("HELP", ["get"]) == ["GET", "GETRANGE"]
    assert registry.lookup("HELP")("HELP", ["RaNg"]) == ["GETRANGE"]
    assert registry.lookup("HELP")("HELP", ["xyz"]) == []


def test_help_on_full_vocabulary_is_complete_and_unique():
    registry, _, _ = _registry(COMMANDS)
    names = registry.lookup("HELP")("HELP", [])
    assert names == [name.upper() for name in COMMANDS]
    assert len(set(names)) == len(names)
    assert all(name in registry for name in names)


def test_help_collapses_duplicate_enumeration():
    registry, _, _ = _registry(("get", "GET", "set"))
    assert registry.lookup("HELP")("HELP", []) == ["GET", "SET"]


def test_noop_and_empty_name_reply_nothing():
    registry, connection, _ = _registry()
    assert registry.lookup("NOOP")("NOOP", []) is None
    assert registry.lookup("")("", []) is None
    assert connection.calls == []


@pytest.mark.parametrize("name", ["QUIT", "EXIT", "quit"])
def test_quit_closes_connection_and_exits_cleanly(name):
    registry, connection, _ = _registry()
    with pytest.raises(SystemExit) as excinfo:
        registry.lookup(name)(name.upper(), [])
    assert excinfo.value.code == 0
    assert connection.closed is True


def test_meta_commands_shadow_server_commands():
    registry, connection, context = _registry(COMMANDS)
    context.last_reply = "value"
    with pytest.raises(CommandError):
        registry.lookup("SAVE")("SAVE", [])
    with pytest.raises(SystemExit):
        registry.lookup("QUIT")("QUIT", [])
    assert connection.calls == []


@pytest.mark.parametrize("args", [[], ["a.txt", "b.txt"]])
def test_save_requires_exactly_one_filename(tmp_path, monkeypatch, args):
    monkeypatch.chdir(tmp_path)
    registry, _, context = _registry()
    context.last_reply = "OK"
    with pytest.raises(CommandError) as excinfo:
        registry.lookup("SAVE")("SAVE", args)
    assert str(excinfo.value) == "SAVE filename"
    assert list(tmp_path.iterdir()) == []


def test_save_without_reply_fails(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    registry, _, _ = _registry()
    with pytest.raises(CommandError) as excinfo:
        registry.lookup("SAVE")("SAVE", ["out.txt"])
    assert str(excinfo.value) == "No reply to save"
    assert list(tmp_path.iterdir()) == []


def test_save_writes_string_reply_verbatim(tmp_path):
    registry, _, context = _registry()
    context.last_reply = "OK"
    target = tmp_path / "out.txt"
    reply = registry.lookup("SAVE")("SAVE", [str(target)])
    assert target.read_text() == "OK"
    assert reply == f"Saved last reply to {target}"


def test_save_writes_structured_reply_as_json(tmp_path):
    registry, _, context = _registry()
    context.last_reply = ["a", "b"]
    target = tmp_path / "out.json"
    registry.lookup("SAVE")("SAVE", [str(target)])
    assert target.read_text() == '["a","b"]'


def test_save_overwrites_existing_file(tmp_path):
    registry, _, context = _registry()
    target = tmp_path / "out.json"
    target.write_text("previous content that is longer")
    context.last_reply = {"count": 3, "items": [1, None, "x"]}
    registry.lookup("SAVE")("SAVE", [str(target)])
    assert json.loads(target.read_text()) == {"count": 3, "items": [1, None, "x"]}


def test_save_integer_reply(tmp_path):
    registry, _, context = _registry()
    context.last_reply = 0
    target = tmp_path / "n.txt"
    registry.lookup("SAVE")("SAVE", [str(target)])
    assert target.read_text() == "0"


def test_save_write_failure_raises_oserror(tmp_path):
    registry, _, context = _registry()
    context.last_reply = "OK"
    with pytest.raises(OSError):
        registry.lookup("SAVE")("SAVE", [str(tmp_path / "missing" / "out.txt")])


def test_save_unencodable_reply_keeps_existing_file(tmp_path, monkeypatch):
    monkeypatch.setattr(locale, "getpreferredencoding", lambda do_setlocale=True: "ascii")
    registry, _, context = _registry()
    target = tmp_path / "out.txt"
    target.write_text("previous")
    context.last_reply = "café �"
    with pytest.raises(CommandError) as excinfo:
        registry.lookup("SAVE")("SAVE", [str(target)])
    assert "ascii" in str(excinfo.value)
    assert target.read_text() == "previous"


def test_save_uses_locale_encoding(tmp_path, monkeypatch):
    monkeypatch.setattr(locale, "getpreferredencoding", lambda do_setlocale=True: "utf-8")
    registry, _, context = _registry()
    context.last_reply = ["café"]
    target = tmp_path / "out.json"
    registry.lookup("SAVE")("SAVE", [str(target)])
    assert target.read_bytes() == '["café"]'.encode("utf-8")
