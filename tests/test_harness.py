from __future__ import annotations

import pytest
from conftest import SERVER_CONFIGS

from e2ecore.driver import SessionDriverFactory
from e2ecore.errors import ServerSpawnError, SessionInitError
from e2elib.harness import Harness


class _FakeServer:
    def __init__(self, port: int, fail_shutdown: bool = False) -> None:
        self.port = port
        self.stopped = False
        self.fail_shutdown = fail_shutdown

    def shutdown(self) -> bool:
        if self.fail_shutdown:
            raise OSError("zombie")
        self.stopped = True
        return True


class _ServerStarter:
    def __init__(self, fail_shutdown: bool = False) -> None:
        self.started: list[_FakeServer] = []
        self.fail_shutdown = fail_shutdown

    def __call__(self, port, log_path, settle_delay):
        server = _FakeServer(port, self.fail_shutdown)
        self.started.append(server)
        return server


def _harness(environ, session_class, starter) -> Harness:
    factory = SessionDriverFactory(server_configs=SERVER_CONFIGS, session_class=session_class)
    return Harness(environ=environ, factory=factory, start_server=starter)


def test_local_run_starts_server_then_session(fake_session_class, clock) -> None:
    starter = _ServerStarter()
    harness = _harness({"APPIUM_PORT": "4790"}, fake_session_class, starter)

    session = harness.setup()
    assert [server.port for server in starter.started] == [4790]
    assert session.command_executor == "http://localhost:4790"
    assert harness.context.is_local

    harness.teardown()
    assert session.call_names()[-1] == "quit"
    assert starter.started[0].stopped
    assert harness.session is None and harness.server is None


def test_remote_run_has_no_server(fake_session_class, clock) -> None:
    starter = _ServerStarter()
    harness = _harness({"TEST_ENV": "sauce", "TEST_RN_PLATFORM": "ios"}, fake_session_class, starter)
    with harness as session:
        assert session.capabilities["app"] == "sauce-storage:Gutenberg.app.zip"
    assert starter.started == []
    assert session.call_names()[-1] == "quit"


def test_server_stays_reachable_after_session_failure(fake_session_class, clock, monkeypatch) -> None:
    monkeypatch.setattr(fake_session_class, "init_error", ConnectionRefusedError(111, "refused"))
    starter = _ServerStarter()
    harness = _harness({}, fake_session_class, starter)

    with pytest.raises(SessionInitError):
        harness.setup()
    assert harness.server is starter.started[0]
    assert not harness.server.stopped

    harness.teardown()
    assert starter.started[0].stopped


def test_context_manager_tears_down_on_failed_setup(fake_session_class, clock, monkeypatch) -> None:
    monkeypatch.setattr(fake_session_class, "init_error", ConnectionRefusedError(111, "refused"))
    starter = _ServerStarter()
    with pytest.raises(SessionInitError):
        with _harness({}, fake_session_class, starter):
            pass
    assert starter.started[0].stopped


def test_spawn_error_propagates(fake_session_class, clock) -> None:
    def failing_starter(port, log_path, settle_delay):
        raise ServerSpawnError("appium not found")

    harness = _harness({}, fake_session_class, failing_starter)
    with pytest.raises(ServerSpawnError):
        harness.setup()
    assert fake_session_class.instances == []


def test_teardown_swallows_shutdown_errors(fake_session_class, clock) -> None:
    harness = _harness({}, fake_session_class, _ServerStarter(fail_shutdown=True))
    harness.setup()
    harness.teardown()
    assert harness.server is None
    harness.teardown()
