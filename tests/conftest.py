# tests/conftest.py: fakes shared by the timer, dispatcher and server tests
import threading

import pytest

from safecheck.agents.checkin_agent import CheckInTimer
from safecheck.agents.dispatch_agent import AlertDispatcher
from safecheck.agents.notifier_agent import SendOutcome
from safecheck.models import Contact

T0 = 1_700_000_000_000  # fixed epoch ms


class FakeNotifier:
    """Records every send; chat ids in ``fail`` are reported as failures."""

    def __init__(self, fail=(), raise_for=()):
        self.fail = set(fail)
        self.raise_for = set(raise_for)
        self.calls = []
        self._lock = threading.Lock()

    def send(self, chat_id, text):
        with self._lock:
            self.calls.append((chat_id, text))
        if chat_id in self.raise_for:
            raise RuntimeError("boom")
        if chat_id in self.fail:
            return SendOutcome(False, "chat not found")
        return SendOutcome(True)


class FakeClock:
    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


class ManualRearm:
    """Captures scheduled re-arms so tests decide when the settling delay ends."""

    def __init__(self):
        self.pending = []

    def __call__(self, delay_s, fn):
        self.pending.append((delay_s, fn))

    def fire(self):
        pending, self.pending = self.pending, []
        for _, fn in pending:
            fn()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rearm():
    return ManualRearm()


@pytest.fixture
def timer(notifier, clock, rearm):
    return CheckInTimer(
        AlertDispatcher(notifier, max_workers=2),
        timer_duration=60_000,
        settle_delay_s=1.0,
        clock=clock,
        schedule_rearm=rearm,
    )


@pytest.fixture
def contacts():
    return [
        Contact(name="Alice", chat_id="111"),
        Contact(name="Bob"),
        Contact(name="Carol", chat_id="333"),
    ]
