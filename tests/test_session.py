import json

import pytest

from complaint_monitor import jsonfile
from complaint_monitor.errors import SessionCacheError
from complaint_monitor.session import SessionCache
from fakes import FakeContext


COOKIE = {"name": "token", "value": "t", "domain": "discord.com", "path": "/"}


def test_bare_cookie_array_becomes_storage_state(tmp_path):
    path = tmp_path / "auth.json"
    path.write_text(json.dumps([COOKIE]), encoding="utf-8")

    assert SessionCache(path).load() == {"cookies": [COOKIE], "origins": []}


def test_cookies_object_without_origins(tmp_path):
    cache = SessionCache(tmp_path / "auth.json")
    cache.save_cookies([COOKIE])

    assert cache.exists()
    assert cache.load() == {"cookies": [COOKIE], "origins": []}


def test_full_storage_state_is_kept(tmp_path):
    state = {"cookies": [COOKIE], "origins": [{"origin": "https://grnd.gg", "localStorage": []}]}
    path = tmp_path / "auth.json"
    path.write_text(json.dumps(state), encoding="utf-8")

    assert SessionCache(path).load() == state


@pytest.mark.parametrize("content", ["not json", json.dumps({"token": "x"}), json.dumps("cookies")])
def test_unusable_session_file_raises(tmp_path, content):
    path = tmp_path / "auth.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(SessionCacheError):
        SessionCache(path).load()


def test_save_context_writes_storage_state(tmp_path):
    cache = SessionCache(tmp_path / "nested" / "auth.json")
    context = FakeContext()

    cache.save_context(context)

    assert context.state_reads == 1
    assert cache.load()["cookies"][0]["domain"] == "grnd.gg"


def test_best_effort_save_swallows_playwright_errors(tmp_path):
    cache = SessionCache(tmp_path / "auth.json")
    context = FakeContext()
    context.fail_save = True

    assert cache.save_context_best_effort(context) is False
    assert not cache.exists()


def test_interrupted_save_keeps_previous_session(tmp_path, monkeypatch):
    cache = SessionCache(tmp_path / "auth.json")
    cache.save_cookies([COOKIE])

    def fail_replace(src, dst):
        raise OSError("killed before rename")

    monkeypatch.setattr(jsonfile.os, "replace", fail_replace)

    with pytest.raises(OSError):
        cache.save_context(FakeContext())

    monkeypatch.undo()
    assert cache.load() == {"cookies": [COOKIE], "origins": []}
    assert not (tmp_path / "auth.json.tmp").exists()
