# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shazamq_operator/harness.py
"""
kopf wiring.

kopf delivers ShazamqCluster events and owns the watch, retries and
shutdown. Each resource gets one daemon that loops: run a cycle, take
the returned directive, sleep that long or until a spec change wakes
it. One daemon per resource means at most one cycle in flight per
resource, while distinct resources converge concurrently.
"""
from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any, Dict, Mapping, Optional

import kopf

from shazamq_operator.config.settings import OperatorSettings
from shazamq_operator.context import OperatorContext
from shazamq_operator.crd.models import GROUP, PLURAL, VERSION, ShazamqCluster
from shazamq_operator.errors import ReconcileError
from shazamq_operator.reconcile.engine import ReconcileEngine, RequeueDirective

log = logging.getLogger("shazamq")

CANCELLATION_TIMEOUT = 10.0


def error_directive(exc: BaseException, settings: OperatorSettings) -> RequeueDirective:
    """Any failure, whatever its kind, is retried after the fixed error delay."""
    return RequeueDirective(after=settings.error_requeue_seconds, reason=type(exc).__name__)


async def run_cycle(engine: ReconcileEngine, body: Mapping[str, Any], settings: OperatorSettings) -> RequeueDirective:
    # snapshot: the daemon's body is updated in place by kopf
    snapshot = copy.deepcopy(dict(body))
    meta = snapshot.get("metadata") or {}
    try:
        cluster = ShazamqCluster.from_body(snapshot)
        return await engine.reconcile(cluster)
    except ReconcileError as e:
        # already reported through ReconcileFailed
        log.debug("Cycle for %s/%s aborted: %s", meta.get("namespace"), meta.get("name"), e)
        return error_directive(e, settings)
    except Exception as e:
        log.error(
            "Reconciliation error for %s/%s: %s",
            meta.get("namespace"),
            meta.get("name"),
            e,
        )
        return error_directive(e, settings)


async def sleep_until_due(delay: float, wakeup: asyncio.Event, stopped: Any) -> None:
    """Wait ``delay`` seconds, or less if woken by a change or by shutdown."""
    waiters = {
        asyncio.ensure_future(wakeup.wait()),
        asyncio.ensure_future(stopped.wait()),
    }
    try:
        await asyncio.wait(waiters, timeout=delay, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for waiter in waiters:
            waiter.cancel()
    wakeup.clear()


async def converge_loop(
    engine: ReconcileEngine,
    body: Mapping[str, Any],
    settings: OperatorSettings,
    wakeup: asyncio.Event,
    stopped: Any,
) -> None:
    """Cycle, then wait for the directive's delay; repeat until ``stopped``."""
    meta = body.get("metadata") or {}
    while not stopped:
        directive = await run_cycle(engine, body, settings)
        log.info(
            "Reconciled %s/%s, next pass in %ss (%s)",
            meta.get("namespace"),
            meta.get("name"),
            directive.after,
            directive.reason,
        )
        await sleep_until_due(directive.after, wakeup, stopped)


class Wakeups:
    """Per-resource wake-up events, keyed by uid. Touched only on the event loop."""

    def __init__(self) -> None:
        self._events: Dict[str, asyncio.Event] = {}

    def get(self, uid: str) -> asyncio.Event:
        return self._events.setdefault(uid, asyncio.Event())

    def wake(self, uid: str) -> bool:
        event = self._events.get(uid)
        if event is None:
            return False
        event.set()
        return True

    def discard(self, uid: str) -> None:
        self._events.pop(uid, None)


def register(ctx: OperatorContext, registry: Optional[kopf.OperatorRegistry] = None) -> kopf.OperatorRegistry:
    registry = registry if registry is not None else kopf.OperatorRegistry()
    engine = ReconcileEngine(ctx)
    wakeups = Wakeups()

    @kopf.on.startup(registry=registry)
    def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
        settings.posting.level = logging.WARNING
        settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage(
            prefix=GROUP,
            key="last-handled-configuration",
        )
        settings.persistence.progress_storage = kopf.AnnotationsProgressStorage(prefix=GROUP)
        settings.watching.server_timeout = 300

    @kopf.on.cleanup(registry=registry)
    def release(**_: Any) -> None:
        ctx.bus.close()

    @kopf.daemon(GROUP, VERSION, PLURAL, registry=registry, cancellation_timeout=CANCELLATION_TIMEOUT)
    async def converge(body: kopf.Body, uid: str, stopped: kopf.DaemonStopped, **_: Any) -> None:
        try:
            await converge_loop(engine, body, ctx.settings, wakeups.get(uid), stopped)
        finally:
            wakeups.discard(uid)

    @kopf.on.resume(GROUP, VERSION, PLURAL, registry=registry)
    @kopf.on.create(GROUP, VERSION, PLURAL, registry=registry)
    @kopf.on.update(GROUP, VERSION, PLURAL, registry=registry, field="spec")
    async def wake(uid: str, **_: Any) -> None:
        # async so the event is set on the loop, not from kopf's thread pool
        wakeups.wake(uid)

    return registry


def run(ctx: OperatorContext, *, verbose: bool = False) -> None:
    """Hand the context to kopf and block until shutdown."""
    namespace = ctx.settings.namespace
    registry = register(ctx)
    kopf.configure(verbose=verbose)
    kopf.run(
        registry=registry,
        standalone=True,
        clusterwide=namespace is None,
        namespaces=[namespace] if namespace else (),
    )
