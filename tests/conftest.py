import asyncio
import os
from typing import Any, Awaitable, Callable, List, Optional, Tuple

import pytest
from typer.testing import CliRunner

from reqflow.core.orchestrator import RequestOrchestrator
from reqflow.domain.interfaces.notifier import Notifier, NoticeKind
from reqflow.domain.interfaces.transport import Transport
from reqflow.domain.models.request import HttpResponse
from reqflow.infrastructure.config.orchestrator_config import OrchestratorConfig
from reqflow.infrastructure.config import settings


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Stands in for asyncio.sleep: records the delay and advances the fake clock."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        self.clock.advance(delay)
        await asyncio.sleep(0)


class RecordingNotifier(Notifier):
    def __init__(self):
        self.notices: List[Tuple[NoticeKind, str]] = []

    def notify(self, kind: NoticeKind, message: str) -> None:
        self.notices.append((kind, message))

    def kinds(self) -> List[NoticeKind]:
        return [kind for kind, _ in self.notices]


Responder = Callable[[int, str, str], Awaitable[HttpResponse]]


class ScriptedTransport(Transport):
    """Transport whose behaviour per call is supplied by an async responder.

    The responder receives (call_index, method, url) and returns a response
    or raises; every call is recorded in `calls`.
    """

    def __init__(self, responder: Responder):
        self._responder = responder
        self.calls: List[dict] = []
        self.in_flight = 0
        self.peak_in_flight = 0
        self.closed = False

    @classmethod
    def always(cls, status: int = 200, body: Any = None) -> "ScriptedTransport":
        async def respond(index: int, method: str, url: str) -> HttpResponse:
            return HttpResponse(status=status, body=body if body is not None else {"call": index}, url=url)
        return cls(respond)

    async def send(self, method, url, params=None, body=None, headers=None) -> HttpResponse:
        index = len(self.calls)
        self.calls.append({"method": method, "url": url, "params": params, "body": body, "headers": headers})
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            return await self._responder(index, method, url)
        finally:
            self.in_flight -= 1

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeps(clock: FakeClock) -> RecordingSleep:
    return RecordingSleep(clock)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def scripted_transport():
    """The ScriptedTransport class, for building per-test transports."""
    return ScriptedTransport


@pytest.fixture
def make_orchestrator(clock, sleeps, notifier):
    """Builds an orchestrator on fake time with pacing and queueing off unless asked for."""
    def factory(transport: Transport, sleep: Optional[Callable] = None, **overrides: Any) -> RequestOrchestrator:
        options = dict(default_interval=0.0, interval_table=[], critical_prefixes=[], ttl_table=[])
        options.update(overrides)
        return RequestOrchestrator(
            transport,
            config=OrchestratorConfig(**options),
            notifier=notifier,
            clock=clock,
            sleep=sleep or sleeps,
        )
    return factory


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keeps tests away from the user's ~/.reqflow config and REQFLOW_* variables."""
    for name in list(os.environ):
        if name.startswith(settings.ENV_PREFIX):
            monkeypatch.delenv(name)
    monkeypatch.setattr(settings, "DEFAULT_CONFIG_FILE", tmp_path / "missing-config.yaml")
    monkeypatch.setattr(settings, "find_dotenv_path", lambda: None)
    settings.reset_configuration()
    yield
    settings.reset_configuration()
