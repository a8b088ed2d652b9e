# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shazamq_operator/status/projector.py
from __future__ import annotations

from shazamq_operator.crd.models import ClusterSpec, ClusterStatus, Phase


def project_phase(replicas: int, ready_replicas: int) -> Phase:
    """
    Memoryless: depends only on the latest observation.

        ready == replicas      -> Running   (includes 0/0)
        0 < ready < replicas   -> Updating
        ready == 0             -> Creating
    """
    if ready_replicas == replicas:
        return Phase.RUNNING
    if ready_replicas > 0:
        return Phase.UPDATING
    return Phase.CREATING


def project_status(spec: ClusterSpec, observed_ready: int | None) -> ClusterStatus:
    """
    Derive the full status from scratch. A replica group that is still
    shrinking can report more ready pods than desired; the count is clamped
    so readyReplicas never exceeds replicas.
    """
    replicas = spec.replicas
    ready = max(0, min(observed_ready or 0, replicas))
    return ClusterStatus(
        phase=project_phase(replicas, ready),
        replicas=replicas,
        ready_replicas=ready,
        conditions=[],
        brokers=[],
    )
