import asyncio
import logging

import kopf

from shazamq_operator import harness
from shazamq_operator.config.settings import OperatorSettings
from shazamq_operator.context import OperatorContext
from shazamq_operator.errors import ReconcileError
from shazamq_operator.harness import (
    Wakeups,
    converge_loop,
    error_directive,
    register,
    run_cycle,
    sleep_until_due,
)
from shazamq_operator.observers.dispatcher import EventBus
from shazamq_operator.reconcile.engine import RequeueDirective

SETTINGS = OperatorSettings(requeue_seconds=300, error_requeue_seconds=60)

BODY = {
    "apiVersion": "shazamq.io/v1alpha1",
    "kind": "ShazamqCluster",
    "metadata": {"name": "demo", "namespace": "ns1", "uid": "u-1"},
    "spec": {"replicas": 3},
}


class FakeEngine:
    def __init__(self, error=None, after=300, on_cycle=None):
        self.error = error
        self.after = after
        self.on_cycle = on_cycle
        self.seen = []

    async def reconcile(self, cluster):
        self.seen.append(cluster)
        if self.on_cycle is not None:
            self.on_cycle(len(self.seen))
        if self.error is not None:
            raise self.error
        return RequeueDirective(after=self.after)


class Stopped:
    """Shaped like kopf's DaemonStopped: falsy until set, awaitable wait()."""

    def __init__(self):
        self._event = asyncio.Event()

    def set(self):
        self._event.set()

    def __bool__(self):
        return self._event.is_set()

    async def wait(self):
        await self._event.wait()


def test_successful_cycle_returns_engine_directive():
    engine = FakeEngine()
    directive = asyncio.run(run_cycle(engine, BODY, SETTINGS))
    assert directive == RequeueDirective(after=300)
    assert engine.seen[0].name == "demo"
    assert engine.seen[0].spec.replicas == 3


def test_failed_cycle_requeues_after_error_delay():
    err = ReconcileError("service", "demo", "ns1", RuntimeError("409"))
    directive = asyncio.run(run_cycle(FakeEngine(error=err), BODY, SETTINGS))
    assert directive.after == 60
    assert directive.reason == "ReconcileError"


def test_invalid_body_requeues_without_reaching_engine():
    engine = FakeEngine()
    body = {**BODY, "spec": {"replicas": -2}}
    directive = asyncio.run(run_cycle(engine, body, SETTINGS))
    assert directive.after == 60
    assert engine.seen == []


def test_error_directive_ignores_error_kind():
    assert error_directive(ValueError("x"), SETTINGS).after == 60
    assert error_directive(KeyError("x"), SETTINGS).after == 60


def test_sleep_returns_early_when_woken():
    async def scenario():
        wakeup, stopped = asyncio.Event(), asyncio.Event()
        wakeup.set()
        loop = asyncio.get_running_loop()
        start = loop.time()
        await sleep_until_due(30, wakeup, stopped)
        return loop.time() - start, wakeup.is_set()

    elapsed, still_set = asyncio.run(scenario())
    assert elapsed < 5
    assert still_set is False


def test_sleep_returns_early_on_shutdown():
    async def scenario():
        wakeup, stopped = asyncio.Event(), asyncio.Event()
        asyncio.get_running_loop().call_later(0.01, stopped.set)
        await sleep_until_due(30, wakeup, stopped)
        return stopped.is_set()

    assert asyncio.run(scenario()) is True


def test_sleep_times_out():
    async def scenario():
        await sleep_until_due(0.01, asyncio.Event(), asyncio.Event())

    asyncio.run(scenario())


def test_wakeups_per_resource():
    async def scenario():
        wakeups = Wakeups()
        assert wakeups.wake("u-1") is False
        first = wakeups.get("u-1")
        assert wakeups.get("u-1") is first
        assert wakeups.wake("u-1") is True
        assert first.is_set()
        assert not wakeups.get("u-2").is_set()
        wakeups.discard("u-1")
        assert wakeups.wake("u-1") is False

    asyncio.run(scenario())


def test_register_builds_a_registry():
    ctx = OperatorContext(
        client=None,
        settings=SETTINGS,
        logger=logging.getLogger("harness-test"),
        bus=EventBus(),
    )
    assert isinstance(register(ctx), kopf.OperatorRegistry)


def test_engine_failure_is_not_logged_twice(caplog):
    caplog.set_level(logging.DEBUG, logger="shazamq")
    err = ReconcileError("service", "demo", "ns1", RuntimeError("409"))
    asyncio.run(run_cycle(FakeEngine(error=err), BODY, SETTINGS))

    records = [r for r in caplog.records if r.name == "shazamq"]
    assert records
    assert all(r.levelno < logging.ERROR for r in records)


def test_failure_before_engine_is_logged_as_error(caplog):
    caplog.set_level(logging.DEBUG, logger="shazamq")
    asyncio.run(run_cycle(FakeEngine(), {**BODY, "spec": {}}, SETTINGS))

    errors = [r for r in caplog.records if r.name == "shazamq" and r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert "ns1/demo" in errors[0].getMessage()


def test_loop_waits_for_each_returned_delay(monkeypatch):
    delays = []

    async def fake_sleep(delay, wakeup, stopped):
        delays.append(delay)
        if len(delays) == 3:
            stopped.set()

    monkeypatch.setattr(harness, "sleep_until_due", fake_sleep)
    engine = FakeEngine(after=45)

    async def scenario():
        await converge_loop(engine, BODY, SETTINGS, asyncio.Event(), Stopped())

    asyncio.run(scenario())
    assert delays == [45, 45, 45]
    assert len(engine.seen) == 3


def test_loop_uses_error_delay_after_failure(monkeypatch):
    delays = []

    async def fake_sleep(delay, wakeup, stopped):
        delays.append(delay)
        stopped.set()

    monkeypatch.setattr(harness, "sleep_until_due", fake_sleep)
    err = ReconcileError("stateful-set", "demo", "ns1", RuntimeError("boom"))

    async def scenario():
        await converge_loop(FakeEngine(error=err), BODY, SETTINGS, asyncio.Event(), Stopped())

    asyncio.run(scenario())
    assert delays == [60]


def test_loop_runs_again_as_soon_as_woken():
    async def scenario():
        wakeup, stopped = asyncio.Event(), Stopped()

        def on_cycle(n):
            if n == 1:
                wakeup.set()
            else:
                stopped.set()

        engine = FakeEngine(after=3600, on_cycle=on_cycle)
        await asyncio.wait_for(converge_loop(engine, BODY, SETTINGS, wakeup, stopped), timeout=5)
        return engine

    engine = asyncio.run(scenario())
    assert len(engine.seen) == 2


def test_loop_exits_when_stopped_mid_sleep():
    async def scenario():
        stopped = Stopped()
        asyncio.get_running_loop().call_later(0.01, stopped.set)
        engine = FakeEngine(after=3600)
        await asyncio.wait_for(
            converge_loop(engine, BODY, SETTINGS, asyncio.Event(), stopped), timeout=5
        )
        return engine

    assert len(asyncio.run(scenario()).seen) == 1


def test_loop_does_nothing_once_stopped():
    engine = FakeEngine()

    async def scenario():
        stopped = Stopped()
        stopped.set()
        await converge_loop(engine, BODY, SETTINGS, asyncio.Event(), stopped)

    asyncio.run(scenario())
    assert engine.seen == []
