# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shazamq_operator/reconcile/engine.py
"""
One convergence cycle for one ShazamqCluster:

    synthesize -> config map -> service -> headless service
               -> stateful set -> read health -> project + apply status

Steps run strictly one after another. The first failure aborts the
cycle; objects applied earlier in the same cycle stay applied, since
every apply is idempotent and will simply be repeated next cycle.
Nothing is ever deleted here, and no state survives between cycles.
"""
from __future__ import annotations

import time
from dataclasses import dataclass

from shazamq_operator.context import OperatorContext
from shazamq_operator.crd.models import ShazamqCluster
from shazamq_operator.errors import ReconcileError
from shazamq_operator.observers.events import (
    HealthObserved,
    ObjectApplied,
    ReconcileFailed,
    ReconcileStarted,
    ReconcileSucceeded,
    StatusApplied,
    new_ctx,
)
from shazamq_operator.status.projector import project_status
from shazamq_operator.synth.manifests import synthesize
from shazamq_operator.synth.naming import stateful_set_name


@dataclass(frozen=True)
class RequeueDirective:
    """Delay, in seconds, after which the harness must run the cycle again."""

    after: float
    reason: str = "poll"


class ReconcileEngine:
    def __init__(self, ctx: OperatorContext):
        self.ctx = ctx

    async def reconcile(self, cluster: ShazamqCluster) -> RequeueDirective:
        name = cluster.name
        namespace = cluster.namespace
        client = self.ctx.client
        bus = self.ctx.bus
        run_ctx = new_ctx(name, namespace)
        start = time.monotonic()

        bus.emit(
            ReconcileStarted(
                replicas=cluster.spec.replicas,
                generation=cluster.metadata.generation,
                **run_ctx,
            )
        )

        step = "synthesize"
        try:
            manifests = synthesize(cluster.spec, name, namespace)

            for step, obj in manifests.in_apply_order():
                await client.apply(obj)
                bus.emit(ObjectApplied(step=step, kind=obj.kind, name=obj.metadata.name, **run_ctx))

            step = "read-health"
            ready = await client.read_ready_replicas(stateful_set_name(name), namespace)
            bus.emit(HealthObserved(ready_replicas=ready, **run_ctx))

            step = "apply-status"
            status = project_status(cluster.spec, ready)
            await client.apply_status(name, namespace, status)
            bus.emit(
                StatusApplied(
                    phase=status.phase.value,
                    replicas=status.replicas,
                    ready_replicas=status.ready_replicas,
                    **run_ctx,
                )
            )
        except Exception as e:
            bus.emit(
                ReconcileFailed(
                    step=step,
                    error=str(e),
                    duration_ms=int((time.monotonic() - start) * 1000),
                    **run_ctx,
                )
            )
            raise ReconcileError(step, name, namespace, e) from e

        directive = RequeueDirective(after=self.ctx.settings.requeue_seconds)
        bus.emit(
            ReconcileSucceeded(
                requeue_after=directive.after,
                duration_ms=int((time.monotonic() - start) * 1000),
                **run_ctx,
            )
        )
        return directive
