# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations
from typing import Any, Protocol

from shazamq_operator.crd.models import ClusterStatus


class PlatformClient(Protocol):
    """Idempotent platform primitives the reconcile engine relies on."""

    async def apply(self, obj: Any) -> None: ...

    async def read_ready_replicas(self, name: str, namespace: str) -> int: ...

    async def apply_status(self, name: str, namespace: str, status: ClusterStatus) -> None: ...
