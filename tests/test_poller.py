"""Tests for the background lifecycle poller and push publisher."""

from __future__ import annotations

import asyncio
import logging
import threading

from anyio import to_thread

from civicvote.application.use_cases.sessions import LifecyclePassReport, LifecyclePoller
from civicvote.domain.entities import NotificationEvent
from civicvote.infrastructure.notifications import NotificationPublisher

from tests.factories import NOW


class _Session:
    closed = False

    def close(self):
        self.closed = True


def test_run_once_executes_a_pass_and_closes_the_session():
    sessions = []

    def factory():
        sessions.append(_Session())
        return sessions[-1]

    poller = LifecyclePoller(
        factory,
        interval=1,
        initial_delay=0,
        timeout=5,
        pass_runner=lambda session: LifecyclePassReport(started_at=NOW),
    )

    report = asyncio.run(poller.run_once())

    assert report == LifecyclePassReport(started_at=NOW)
    assert [session.closed for session in sessions] == [True]


def test_overrunning_pass_times_out_and_blocks_the_next_tick():
    release = threading.Event()

    def slow_pass(session):
        release.wait(5)
        return LifecyclePassReport(started_at=NOW)

    poller = LifecyclePoller(
        _Session, interval=1, initial_delay=0, timeout=0.05, pass_runner=slow_pass
    )

    async def scenario():
        first = await poller.run_once()
        second = await poller.run_once()
        release.set()
        await asyncio.sleep(0.1)
        return first, second

    assert asyncio.run(scenario()) == (None, None)


def test_failure_after_a_timeout_is_logged(caplog):
    release = threading.Event()

    def slow_broken_pass(session):
        release.wait(5)
        raise RuntimeError("database gone")

    poller = LifecyclePoller(
        _Session, interval=1, initial_delay=0, timeout=0.05, pass_runner=slow_broken_pass
    )

    async def scenario():
        result = await poller.run_once()
        release.set()
        await asyncio.sleep(0.2)
        return result

    with caplog.at_level(logging.ERROR):
        assert asyncio.run(scenario()) is None

    late = [r for r in caplog.records if r.getMessage() == "Timed-out lifecycle pass later failed"]
    assert len(late) == 1
    assert isinstance(late[0].exc_info[1], RuntimeError)


def test_crashing_pass_is_contained():
    def broken_pass(session):
        raise RuntimeError("database gone")

    poller = LifecyclePoller(
        _Session, interval=1, initial_delay=0, timeout=5, pass_runner=broken_pass
    )

    assert asyncio.run(poller.run_once()) is None


def test_start_and_stop():
    calls = []

    def counting_pass(session):
        calls.append(session)
        return LifecyclePassReport(started_at=NOW)

    async def scenario():
        poller = LifecyclePoller(
            _Session, interval=0.01, initial_delay=0, timeout=1, pass_runner=counting_pass
        )
        poller.start()
        assert poller.running
        await asyncio.sleep(0.1)
        await poller.stop()
        return poller.running

    assert asyncio.run(scenario()) is False
    assert calls


class _RecordingManager:
    def __init__(self, failures: int = 0):
        self.sent = []
        self.failures = failures

    async def send_to_user(self, user_id, message):
        self.sent.append((user_id, message))
        return self.failures

    async def broadcast(self, message):
        self.sent.append((None, message))
        return self.failures


def _event() -> NotificationEvent:
    return NotificationEvent(id=5, type="session.started", title="Live", created_at=NOW)


def test_publisher_pushes_per_user_and_counts_failures():
    manager = _RecordingManager(failures=1)
    publisher = NotificationPublisher(manager)

    async def scenario():
        publisher.dispatch(_event(), [3, "3", None, 4])
        await asyncio.sleep(0)
        await asyncio.sleep(0)

    asyncio.run(scenario())

    assert [user_id for user_id, _ in manager.sent] == [3, 4]
    message = manager.sent[0][1]
    assert message["type"] == "notification:new"
    assert message["data"]["id"] == 5
    assert publisher.failures["connection_error"] == 2


def test_publisher_without_a_loop_records_the_drop():
    manager = _RecordingManager()
    publisher = NotificationPublisher(manager)

    publisher.dispatch(_event())

    assert manager.sent == []
    assert publisher.failures["no_event_loop"] == 1


def test_publisher_bridges_from_worker_threads():
    manager = _RecordingManager()
    publisher = NotificationPublisher(manager)

    async def scenario():
        await to_thread.run_sync(publisher.dispatch, _event())
        await asyncio.sleep(0.05)

    asyncio.run(scenario())

    assert [user_id for user_id, _ in manager.sent] == [None]
    assert publisher.failures == {}


def test_publisher_from_a_foreign_thread_records_the_drop():
    manager = _RecordingManager()
    publisher = NotificationPublisher(manager)

    async def scenario():
        thread = threading.Thread(target=publisher.dispatch, args=(_event(),))
        thread.start()
        thread.join()
        await asyncio.sleep(0.05)

    asyncio.run(scenario())

    assert manager.sent == []
    assert publisher.failures["no_event_loop"] == 1


def test_publisher_holds_delivery_tasks_until_they_finish():
    manager = _RecordingManager()
    publisher = NotificationPublisher(manager)

    async def scenario():
        publisher.dispatch(_event(), [1, 2])
        pending = len(publisher._tasks)
        await asyncio.sleep(0.05)
        return pending, len(publisher._tasks)

    assert asyncio.run(scenario()) == (2, 0)
    assert [user_id for user_id, _ in manager.sent] == [1, 2]


def test_publisher_with_no_recipients_sends_nothing():
    manager = _RecordingManager()
    publisher = NotificationPublisher(manager)

    async def scenario():
        publisher.dispatch(_event(), [])
        await asyncio.sleep(0.05)

    asyncio.run(scenario())

    assert manager.sent == []
