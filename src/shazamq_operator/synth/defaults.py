# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shazamq_operator/synth/defaults.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from shazamq_operator.crd.models import (
    DEFAULT_METRICS_PORT,
    DEFAULT_PORT,
    DEFAULT_SERVICE_TYPE,
    ClusterSpec,
    MirrorSource,
    ResourceList,
    S3Config,
)

BROKER_PORT = 9092
METRICS_PORT = 9090
DATA_DIR = "/data/shazamq"
CONFIG_DIR = "/etc/shazamq"
STORAGE_CAPACITY = "100Gi"
STORAGE_ACCESS_MODE = "ReadWriteOnce"
LOG_LEVEL = "info"


@dataclass(frozen=True)
class ResolvedStorage:
    segment_bytes: Optional[int] = None
    retention_hours: Optional[int] = None
    retention_bytes: Optional[int] = None


@dataclass(frozen=True)
class ResolvedTieredStorage:
    enabled: bool = False
    provider: str = ""
    hot_tier_retention_hours: Optional[int] = None
    s3: Optional[S3Config] = None


@dataclass(frozen=True)
class ResolvedMirror:
    enabled: bool = False
    sources: Tuple[MirrorSource, ...] = ()


@dataclass(frozen=True)
class ResolvedService:
    service_type: str = DEFAULT_SERVICE_TYPE
    port: int = DEFAULT_PORT
    metrics_port: int = DEFAULT_METRICS_PORT


@dataclass(frozen=True)
class ResolvedResources:
    requests: Dict[str, str] = field(default_factory=dict)
    limits: Dict[str, str] = field(default_factory=dict)

    @property
    def empty(self) -> bool:
        return not self.requests and not self.limits


@dataclass(frozen=True)
class ResolvedSpec:
    """
    A ClusterSpec with every default applied once. Rendering code reads
    this and never branches on absence of a spec block.
    """

    replicas: int
    version: str
    image: str
    image_pull_policy: str
    storage: ResolvedStorage
    tiered_storage: ResolvedTieredStorage
    mirror: ResolvedMirror
    service: ResolvedService
    resources: ResolvedResources
    pod_labels: Dict[str, str]
    pod_annotations: Dict[str, str]
    node_selector: Dict[str, str]
    storage_capacity: str = STORAGE_CAPACITY

    @property
    def image_ref(self) -> str:
        return f"{self.image}:{self.version}"


def _quantities(values: Optional[ResourceList]) -> Dict[str, str]:
    if values is None:
        return {}
    return {k: v for k, v in (("cpu", values.cpu), ("memory", values.memory)) if v}


def resolve(spec: ClusterSpec) -> ResolvedSpec:
    storage = spec.storage
    tiered = spec.tiered_storage
    mirror = spec.mirror
    service = spec.service
    resources = spec.resources

    return ResolvedSpec(
        replicas=spec.replicas,
        version=spec.version,
        image=spec.image,
        image_pull_policy=spec.image_pull_policy,
        storage=ResolvedStorage(
            segment_bytes=storage.segment_bytes,
            retention_hours=storage.retention_hours,
            retention_bytes=storage.retention_bytes,
        ) if storage else ResolvedStorage(),
        tiered_storage=ResolvedTieredStorage(
            enabled=tiered.enabled,
            provider=tiered.provider,
            hot_tier_retention_hours=tiered.hot_tier_retention_hours,
            s3=tiered.s3,
        ) if tiered else ResolvedTieredStorage(),
        mirror=ResolvedMirror(
            enabled=mirror.enabled,
            sources=tuple(mirror.sources),
        ) if mirror else ResolvedMirror(),
        service=ResolvedService(
            service_type=service.service_type,
            port=service.port,
            metrics_port=service.metrics_port,
        ) if service else ResolvedService(),
        resources=ResolvedResources(
            requests=_quantities(resources.requests),
            limits=_quantities(resources.limits),
        ) if resources else ResolvedResources(),
        pod_labels=dict(spec.pod_labels or {}),
        pod_annotations=dict(spec.pod_annotations or {}),
        node_selector=dict(spec.node_selector or {}),
    )
