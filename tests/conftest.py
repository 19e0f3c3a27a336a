from __future__ import annotations

import pytest

from e2ecore import driver as driver_module
from e2ecore.environment import ExecutionContext


class FakeClock:
    """Stands in for the `time` module: sleeping only advances the clock."""

    def __init__(self) -> None:
        self.now = 1000.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def time(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeSession:
    """Records the protocol calls made by the driver factory."""

    instances: list["FakeSession"] = []
    statuses: list = [{"ready": True, "build": {"version": "2.11.0"}}]
    init_error: Exception | None = None

    def __init__(self, command_executor: str) -> None:
        self.command_executor = command_executor
        self.calls: list[tuple] = []
        self.capabilities: dict | None = None
        self._statuses = list(type(self).statuses)
        FakeSession.instances.append(self)

    @property
    def session_id(self) -> str:
        return "fake-session"

    def init(self, capabilities: dict) -> "FakeSession":
        self.calls.append(("init",))
        if type(self).init_error is not None:
            raise type(self).init_error
        self.capabilities = capabilities
        return self

    def status(self):
        self.calls.append(("status",))
        result = self._statuses.pop(0) if len(self._statuses) > 1 else self._statuses[0]
        if isinstance(result, Exception):
            raise result
        return result

    def sleep(self, ms: int, cancel_event=None) -> None:
        self.calls.append(("sleep", ms))

    def set_implicit_wait_timeout(self, ms: int) -> None:
        self.calls.append(("set_implicit_wait_timeout", ms))

    def quit(self) -> None:
        self.calls.append(("quit",))

    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]


SERVER_CONFIGS = {
    "local": {"protocol": "http", "host": "localhost", "path": ""},
    "sauce": {
        "protocol": "http",
        "host": "ondemand.saucelabs.com",
        "port": 80,
        "path": "/wd/hub",
        "username": "jane",
        "access_key": "s3cr3t",
        "run_name": "Gutenberg Editor Tests[{platform}]",
        "tags": ["Gutenberg"],
    },
}


@pytest.fixture
def clock(monkeypatch) -> FakeClock:
    fake = FakeClock()
    monkeypatch.setattr(driver_module, "time", fake)
    return fake


@pytest.fixture
def fake_session_class(monkeypatch):
    monkeypatch.setattr(FakeSession, "instances", [])
    monkeypatch.setattr(FakeSession, "statuses", [{"ready": True}])
    monkeypatch.setattr(FakeSession, "init_error", None)
    return FakeSession


@pytest.fixture
def local_context() -> ExecutionContext:
    return ExecutionContext(platform="android", environment="local",
                            app_location="./build/app-debug", server_port=4728)


@pytest.fixture
def remote_context() -> ExecutionContext:
    return ExecutionContext(platform="ios", environment="sauce",
                            app_location="sauce-storage:Gutenberg.app.zip", server_port=4728)
