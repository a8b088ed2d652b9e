# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shazamq_operator/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional
from datetime import datetime, timezone
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events of one reconcile cycle
    cluster: str      # ShazamqCluster name
    namespace: str

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_ctx(cluster: str, namespace: str) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "run_id": str(uuid.uuid4()),
        "cluster": cluster,
        "namespace": namespace,
    }


# ---------------------------------------------------------------------
# Reconcile lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ReconcileStarted(BaseEvent):
    replicas: int
    generation: Optional[int] = None

@dataclass(frozen=True)
class ObjectApplied(BaseEvent):
    step: str
    kind: str
    name: str

@dataclass(frozen=True)
class HealthObserved(BaseEvent):
    ready_replicas: int

@dataclass(frozen=True)
class StatusApplied(BaseEvent):
    phase: str
    replicas: int
    ready_replicas: int

@dataclass(frozen=True)
class ReconcileSucceeded(BaseEvent):
    requeue_after: float
    duration_ms: int

@dataclass(frozen=True)
class ReconcileFailed(BaseEvent):
    step: str
    error: str
    duration_ms: int
