"""Shared fixtures."""

import pytest


class FakeObserver:
    """Stands in for a watchdog Observer without starting threads.

    Like watchdog, a watch is identified by (path, recursive): scheduling the
    same pair twice returns the same watch and unscheduling it drops every
    handler attached to it.
    """

    def __init__(self):
        self.scheduled = []
        self.alive = False
        self.stop_calls = 0

    def schedule(self, handler, path, recursive=False):
        self.scheduled.append((handler, path, recursive))
        return (path, recursive)

    def unschedule(self, watch):
        if watch not in {(p, r) for _, p, r in self.scheduled}:
            raise KeyError(watch)
        self.scheduled = [s for s in self.scheduled if (s[1], s[2]) != watch]

    def start(self):
        self.alive = True

    def stop(self):
        self.stop_calls += 1
        self.alive = False

    def join(self, timeout=None):
        pass

    def is_alive(self):
        return self.alive


class FakeSocket:
    """Records what a websocket client would receive."""

    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail
        self.close_calls = 0

    async def send_json(self, message):
        if self.fail:
            raise ConnectionResetError("client went away")
        self.sent.append(message)

    async def close(self):
        self.close_calls += 1


@pytest.fixture
def observers():
    """Observer factory that remembers every FakeObserver it built."""
    created = []

    def factory():
        observer = FakeObserver()
        created.append(observer)
        return observer

    factory.created = created
    return factory


@pytest.fixture
def make_socket():
    return FakeSocket
