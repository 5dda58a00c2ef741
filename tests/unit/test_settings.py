# tests/unit/test_settings.py
from __future__ import annotations

import pytest

from clipcache.inputs.settings import debug_enabled, load_policy
from clipcache.schemas.models import DEFAULT_USER_AGENT


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("USER_AGENT", "TIMEOUT_S", "SHARING_DOMAIN", "SHARING_ORIGIN", "MAX_WORKERS", "DEBUG"):
        monkeypatch.delenv(f"CLIPCACHE_{name}", raising=False)


def test_defaults_without_env() -> None:
    p = load_policy()
    assert p.user_agent == DEFAULT_USER_AGENT
    assert p.timeout_s == 15.0
    assert p.max_workers == 4


def test_env_overrides(monkeypatch) -> None:
    monkeypatch.setenv("CLIPCACHE_USER_AGENT", "Mozilla/5.0 Env")
    monkeypatch.setenv("CLIPCACHE_TIMEOUT_S", "4.5")
    monkeypatch.setenv("CLIPCACHE_SHARING_DOMAIN", "Sounds.Example")
    monkeypatch.setenv("CLIPCACHE_MAX_WORKERS", "8")

    p = load_policy()

    assert p.user_agent == "Mozilla/5.0 Env"
    assert p.timeout_s == 4.5
    assert p.sharing_domain == "sounds.example"
    assert p.max_workers == 8


def test_explicit_overrides_beat_env_and_none_is_ignored(monkeypatch) -> None:
    monkeypatch.setenv("CLIPCACHE_TIMEOUT_S", "4.5")
    p = load_policy(timeout_s=9.0, user_agent=None)
    assert p.timeout_s == 9.0
    assert p.user_agent == DEFAULT_USER_AGENT


def test_unparseable_numbers_keep_defaults(monkeypatch) -> None:
    monkeypatch.setenv("CLIPCACHE_TIMEOUT_S", "soon")
    monkeypatch.setenv("CLIPCACHE_MAX_WORKERS", "many")
    p = load_policy()
    assert p.timeout_s == 15.0
    assert p.max_workers == 4


def test_invalid_values_raise_value_error(monkeypatch) -> None:
    monkeypatch.setenv("CLIPCACHE_SHARING_ORIGIN", "ftp://nope")
    with pytest.raises(ValueError, match="Invalid fetch policy"):
        load_policy()
    with pytest.raises(ValueError):
        load_policy(timeout_s=0)


def test_custom_prefix(monkeypatch) -> None:
    monkeypatch.setenv("SOUNDBOT_TIMEOUT_S", "2")
    assert load_policy("SOUNDBOT_").timeout_s == 2.0


@pytest.mark.parametrize("raw,expected", [("1", True), ("Yes", True), ("on", True), ("0", False), ("", False)])
def test_debug_enabled(monkeypatch, raw, expected) -> None:
    monkeypatch.setenv("CLIPCACHE_DEBUG", raw)
    assert debug_enabled() is expected
