from __future__ import annotations

from types import SimpleNamespace

import pytest
from django.db import connection

from django_demo import startup
from django_demo.config import RuntimeConfig
from django_demo.errors import MigrationError


def test_run_migrations_invokes_migrate_once(monkeypatch):
    calls: list[tuple[tuple, dict]] = []
    monkeypatch.setattr(startup, "call_command", lambda *a, **kw: calls.append((a, kw)))
    startup.run_migrations(RuntimeConfig())
    assert calls == [(("migrate",), {"interactive": False, "verbosity": 1})]


def test_run_migrations_is_verbose_in_debug(monkeypatch):
    monkeypatch.setenv("DJANGO_DEBUG", "true")
    calls: list[dict] = []
    monkeypatch.setattr(startup, "call_command", lambda *a, **kw: calls.append(kw))
    startup.run_migrations(RuntimeConfig())
    assert calls[0]["verbosity"] == 2


def test_run_migrations_wraps_failures(monkeypatch, caplog):
    def _boom(*_a, **_kw):
        raise RuntimeError("database unreachable")

    monkeypatch.setattr(startup, "call_command", _boom)
    with caplog.at_level("ERROR"):
        with pytest.raises(MigrationError) as excinfo:
            startup.run_migrations(RuntimeConfig())
    assert "database unreachable" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert "startup_stage" in caplog.text


def test_run_migrations_applies_schema():
    startup.run_migrations(RuntimeConfig())
    assert "django_migrations" in connection.introspection.table_names()
    assert "auth_user" in connection.introspection.table_names()


def test_prepare_runtime_skips_migrations_in_autoreload_child(monkeypatch):
    monkeypatch.setattr(startup, "setup_django", lambda: None)
    migrated: list[RuntimeConfig] = []
    monkeypatch.setattr(startup, "run_migrations", migrated.append)

    monkeypatch.setenv("RUN_MAIN", "true")
    startup.prepare_runtime(RuntimeConfig())
    assert migrated == []

    monkeypatch.delenv("RUN_MAIN")
    cfg = RuntimeConfig()
    startup.prepare_runtime(cfg)
    assert migrated == [cfg]


def _fake_debugpy(recorded: dict, *, fail: bool = False):
    def _listen(address):
        if fail:
            raise RuntimeError("address already in use")
        recorded["address"] = address

    return SimpleNamespace(
        listen=_listen,
        wait_for_client=lambda: recorded.__setitem__("waited", True),
    )


def test_enable_remote_debugger_listens_on_configured_port(monkeypatch):
    recorded: dict = {}
    monkeypatch.setattr(startup, "debugpy", _fake_debugpy(recorded))
    monkeypatch.setenv("DEBUGPY_PORT", "5679")
    assert startup.enable_remote_debugger(RuntimeConfig()) is True
    assert recorded == {"address": ("0.0.0.0", 5679)}


def test_enable_remote_debugger_waits_for_client_when_requested(monkeypatch):
    recorded: dict = {}
    monkeypatch.setattr(startup, "debugpy", _fake_debugpy(recorded))
    monkeypatch.setenv("DEBUGPY_WAIT_FOR_CLIENT", "true")
    startup.enable_remote_debugger(RuntimeConfig())
    assert recorded["waited"] is True


def test_enable_remote_debugger_failure_is_not_fatal(monkeypatch, caplog):
    recorded: dict = {}
    monkeypatch.setattr(startup, "debugpy", _fake_debugpy(recorded, fail=True))
    with caplog.at_level("WARNING"):
        assert startup.enable_remote_debugger(RuntimeConfig()) is False
    assert "remote_debugger_unavailable" in caplog.text
    assert "waited" not in recorded


def test_prepare_runtime_closes_connections_after_migrating(monkeypatch):
    events: list[str] = []
    monkeypatch.setattr(startup, "setup_django", lambda: None)
    monkeypatch.setattr(startup, "run_migrations", lambda cfg: events.append("migrate"))
    monkeypatch.setattr(
        startup, "connections", SimpleNamespace(close_all=lambda: events.append("close"))
    )
    startup.prepare_runtime(RuntimeConfig())
    assert events == ["migrate", "close"]
