"""Tests for DebounceScheduler."""

import asyncio
import threading

from app.services.debounce import ChangeType, DebounceScheduler

DELAY = 0.02


class Recorder:
    def __init__(self):
        self.calls = []

    async def __call__(self, path, change):
        self.calls.append((path, change))


class TestDebounce:
    """Event collapsing per path."""

    def test_burst_collapses_into_one_job(self):
        """Given three events within the delay, exactly one job runs."""
        recorder = Recorder()

        async def scenario():
            scheduler = DebounceScheduler(recorder, delay=DELAY)
            scheduler.submit("/p/a.js", ChangeType.ADDED)
            scheduler.submit("/p/a.js", ChangeType.CHANGED)
            scheduler.submit("/p/a.js", ChangeType.CHANGED)
            await scheduler.drain()

        asyncio.run(scenario())

        assert recorder.calls == [("/p/a.js", ChangeType.CHANGED)]

    def test_last_change_type_wins(self):
        """Given added then deleted, the job sees deleted."""
        recorder = Recorder()

        async def scenario():
            scheduler = DebounceScheduler(recorder, delay=DELAY)
            scheduler.submit("/p/a.js", ChangeType.ADDED)
            scheduler.submit("/p/a.js", ChangeType.DELETED)
            await scheduler.drain()

        asyncio.run(scenario())

        assert recorder.calls == [("/p/a.js", ChangeType.DELETED)]

    def test_paths_are_independent(self):
        recorder = Recorder()

        async def scenario():
            scheduler = DebounceScheduler(recorder, delay=DELAY)
            scheduler.submit("/p/a.js", ChangeType.CHANGED)
            scheduler.submit("/p/b.js", ChangeType.ADDED)
            await scheduler.drain()

        asyncio.run(scenario())

        assert sorted(recorder.calls, key=lambda c: c[0]) == [
            ("/p/a.js", ChangeType.CHANGED),
            ("/p/b.js", ChangeType.ADDED),
        ]

    def test_separate_bursts_run_separately(self):
        """Given two events further apart than the delay, two jobs run."""
        recorder = Recorder()

        async def scenario():
            scheduler = DebounceScheduler(recorder, delay=DELAY)
            scheduler.submit("/p/a.js", ChangeType.ADDED)
            await scheduler.drain()
            scheduler.submit("/p/a.js", ChangeType.CHANGED)
            await scheduler.drain()

        asyncio.run(scenario())

        assert recorder.calls == [
            ("/p/a.js", ChangeType.ADDED),
            ("/p/a.js", ChangeType.CHANGED),
        ]


class TestPerPathExclusivity:
    """At most one job waiting and one running per path."""

    def test_job_waits_for_running_job_on_same_path(self):
        """Given a slow job in flight, a newly fired job is deferred until it ends."""
        active = 0
        max_active = 0
        calls = []
        observed = {}

        async def scenario():
            release = asyncio.Event()

            async def slow(path, change):
                nonlocal active, max_active
                active += 1
                max_active = max(max_active, active)
                calls.append(change)
                await release.wait()
                active -= 1

            scheduler = DebounceScheduler(slow, delay=DELAY)
            scheduler.submit("/p/a.js", ChangeType.ADDED)
            await asyncio.sleep(DELAY * 5)
            observed["first_running"] = scheduler.is_running("/p/a.js")

            scheduler.submit("/p/a.js", ChangeType.CHANGED)
            scheduler.submit("/p/a.js", ChangeType.DELETED)
            await asyncio.sleep(DELAY * 5)
            observed["deferred"] = scheduler.pending_paths()
            observed["calls_while_blocked"] = list(calls)

            release.set()
            await scheduler.drain()

        asyncio.run(scenario())

        assert observed["first_running"] is True
        assert observed["deferred"] == ["/p/a.js"]
        assert observed["calls_while_blocked"] == [ChangeType.ADDED]
        assert calls == [ChangeType.ADDED, ChangeType.DELETED]
        assert max_active == 1


class TestCancellation:
    """cancel, cancel_under and cancel_all."""

    def test_cancel_drops_pending_job(self):
        recorder = Recorder()

        async def scenario():
            scheduler = DebounceScheduler(recorder, delay=DELAY)
            scheduler.submit("/p/a.js", ChangeType.CHANGED)
            assert scheduler.cancel("/p/a.js") is True
            assert scheduler.cancel("/p/a.js") is False
            await asyncio.sleep(DELAY * 3)
            await scheduler.drain()

        asyncio.run(scenario())

        assert recorder.calls == []

    def test_cancel_under_only_touches_that_root(self):
        """Given jobs under two roots, cancelling one root keeps the other."""
        recorder = Recorder()

        async def scenario():
            scheduler = DebounceScheduler(recorder, delay=DELAY)
            scheduler.submit("/work/x/a.js", ChangeType.CHANGED)
            scheduler.submit("/work/xy/b.js", ChangeType.CHANGED)
            assert scheduler.cancel_under("/work/x") == 1
            await scheduler.drain()

        asyncio.run(scenario())

        assert recorder.calls == [("/work/xy/b.js", ChangeType.CHANGED)]

    def test_cancel_under_spares_kept_roots(self):
        """Given a nested root that stays watched, its jobs survive the outer cancel."""
        recorder = Recorder()

        async def scenario():
            scheduler = DebounceScheduler(recorder, delay=DELAY)
            scheduler.submit("/work/top.js", ChangeType.CHANGED)
            scheduler.submit("/work/lib/deep.js", ChangeType.CHANGED)
            assert scheduler.cancel_under("/work", keep=["/work/lib"]) == 1
            await scheduler.drain()

        asyncio.run(scenario())

        assert recorder.calls == [("/work/lib/deep.js", ChangeType.CHANGED)]

    def test_cancel_all_stops_accepting_events(self):
        recorder = Recorder()

        async def scenario():
            scheduler = DebounceScheduler(recorder, delay=DELAY)
            scheduler.submit("/p/a.js", ChangeType.CHANGED)
            scheduler.cancel_all()
            scheduler.submit("/p/b.js", ChangeType.CHANGED)
            await asyncio.sleep(DELAY * 3)
            await scheduler.drain()

        asyncio.run(scenario())

        assert recorder.calls == []


class TestThreadHandoff:
    """Events coming from watcher threads."""

    def test_submit_threadsafe_from_other_thread(self):
        recorder = Recorder()

        async def scenario():
            scheduler = DebounceScheduler(recorder, delay=DELAY)
            scheduler.bind(asyncio.get_running_loop())
            worker = threading.Thread(
                target=scheduler.submit_threadsafe, args=("/p/a.js", ChangeType.ADDED)
            )
            worker.start()
            worker.join()
            await asyncio.sleep(DELAY / 2)
            await scheduler.drain()

        asyncio.run(scenario())

        assert recorder.calls == [("/p/a.js", ChangeType.ADDED)]

    def test_failing_job_does_not_stop_later_jobs(self):
        """Given a job that raises, the error is logged and the next job still runs."""
        seen = []

        async def flaky(path, change):
            seen.append(change)
            if change is ChangeType.ADDED:
                raise OSError("disk vanished")

        async def scenario():
            scheduler = DebounceScheduler(flaky, delay=DELAY)
            scheduler.submit("/p/a.js", ChangeType.ADDED)
            await scheduler.drain()
            scheduler.submit("/p/a.js", ChangeType.CHANGED)
            await scheduler.drain()

        asyncio.run(scenario())

        assert seen == [ChangeType.ADDED, ChangeType.CHANGED]
