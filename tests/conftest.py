import threading

import pytest

from inspiration.db import init_db, reset_engine
from inspiration.debuglog import DebugLog
from inspiration.gateway import AIGateway


class FakeGateway(AIGateway):
    """Replays canned replies; an Exception in the queue is raised instead."""

    def __init__(self, debug_log, replies=()):
        super().__init__(debug_log)
        self.replies = list(replies)
        self.calls = []

    def model_for(self, task):
        return "fake-model"

    def _complete(self, prompt, task):
        self.calls.append((task, prompt))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class BlockingGateway(FakeGateway):
    """Holds every call until ``release`` is set."""

    def __init__(self, debug_log, replies=()):
        super().__init__(debug_log, replies)
        self.started = threading.Event()
        self.release = threading.Event()

    def _complete(self, prompt, task):
        self.started.set()
        assert self.release.wait(timeout=5)
        return super()._complete(prompt, task)


@pytest.fixture
def db(tmp_path, monkeypatch):
    monkeypatch.setenv("INSPIRATION_DB_PATH", str(tmp_path / "notes.sqlite"))
    reset_engine()
    init_db()
    yield
    reset_engine()


@pytest.fixture
def debug_log():
    return DebugLog()


@pytest.fixture
def make_gateway(debug_log):
    def _make(*replies, blocking=False):
        cls = BlockingGateway if blocking else FakeGateway
        return cls(debug_log, replies)
    return _make
