# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shazamq_operator/crd/models.py
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

GROUP = "shazamq.io"
VERSION = "v1alpha1"
KIND = "ShazamqCluster"
PLURAL = "shazamqclusters"
SINGULAR = "shazamqcluster"
SHORT_NAME = "sqc"
API_VERSION = f"{GROUP}/{VERSION}"

DEFAULT_VERSION = "0.1.1-rc1"
DEFAULT_IMAGE = "shazamq/shazamq"
DEFAULT_PULL_POLICY = "IfNotPresent"
DEFAULT_SERVICE_TYPE = "ClusterIP"
DEFAULT_PORT = 9092
DEFAULT_METRICS_PORT = 9090


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python. Unknown fields are ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ---------------------------------------------------------------------
# Spec
# ---------------------------------------------------------------------
class StorageConfig(WireModel):
    segment_bytes: Optional[int] = None
    retention_hours: Optional[int] = None
    retention_bytes: Optional[int] = None


class S3Config(WireModel):
    bucket: str
    region: str
    prefix: str
    endpoint: Optional[str] = None
    credentials_secret: Optional[str] = None


class TieredStorageConfig(WireModel):
    enabled: bool = False
    provider: str
    hot_tier_retention_hours: Optional[int] = None
    s3: Optional[S3Config] = None


class MirrorSource(WireModel):
    name: str
    bootstrap_servers: str
    security_protocol: str
    sasl_mechanism: Optional[str] = None
    credentials_secret: Optional[str] = None
    topic_whitelist: List[str]
    topic_blacklist: Optional[List[str]] = None
    consumer_group_id: str
    num_consumers: Optional[int] = None
    exactly_once: Optional[bool] = None


class MirrorConfig(WireModel):
    enabled: bool = False
    sources: List[MirrorSource] = Field(default_factory=list)


class ReplicationConfig(WireModel):
    default_replication_factor: int
    min_insync_replicas: int


class ResourceList(WireModel):
    cpu: Optional[str] = None
    memory: Optional[str] = None


class ResourceRequirements(WireModel):
    requests: Optional[ResourceList] = None
    limits: Optional[ResourceList] = None


class ServiceConfig(WireModel):
    service_type: str = Field(default=DEFAULT_SERVICE_TYPE, alias="type")
    port: int = DEFAULT_PORT
    metrics_port: int = DEFAULT_METRICS_PORT


class TlsConfig(WireModel):
    enabled: bool = False
    secret_name: str


class AuthConfig(WireModel):
    enabled: bool = False
    mechanism: str
    secret_name: str


class SecurityConfig(WireModel):
    enabled: bool = False
    tls: Optional[TlsConfig] = None
    auth: Optional[AuthConfig] = None


class ServiceMonitorConfig(WireModel):
    enabled: bool = False
    interval: str = "30s"
    scrape_timeout: str = "10s"


class MonitoringConfig(WireModel):
    enabled: bool = False
    service_monitor: Optional[ServiceMonitorConfig] = None


class ClusterSpec(WireModel):
    """Desired state of a ShazamqCluster, authored by the user."""

    replicas: int = Field(ge=0)
    version: str = DEFAULT_VERSION
    image: str = DEFAULT_IMAGE
    image_pull_policy: str = DEFAULT_PULL_POLICY
    storage: Optional[StorageConfig] = None
    tiered_storage: Optional[TieredStorageConfig] = None
    mirror: Optional[MirrorConfig] = None
    replication: Optional[ReplicationConfig] = None
    resources: Optional[ResourceRequirements] = None
    pod_annotations: Optional[Dict[str, str]] = None
    pod_labels: Optional[Dict[str, str]] = None
    node_selector: Optional[Dict[str, str]] = None
    service: Optional[ServiceConfig] = None
    security: Optional[SecurityConfig] = None
    monitoring: Optional[MonitoringConfig] = None


# ---------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------
class Phase(str, Enum):
    CREATING = "Creating"
    UPDATING = "Updating"
    RUNNING = "Running"


class StatusCondition(WireModel):
    type: str
    status: str
    last_transition_time: str
    reason: Optional[str] = None
    message: Optional[str] = None


class BrokerStatus(WireModel):
    id: int
    pod: str
    ready: bool
    leader: bool


class ClusterStatus(WireModel):
    """Observed state. Written only by the status projector."""

    phase: Optional[Phase] = None
    replicas: Optional[int] = None
    ready_replicas: Optional[int] = None
    conditions: List[StatusCondition] = Field(default_factory=list)
    brokers: List[BrokerStatus] = Field(default_factory=list)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


# ---------------------------------------------------------------------
# Resource
# ---------------------------------------------------------------------
class ObjectIdentity(WireModel):
    name: str
    namespace: Optional[str] = None
    uid: Optional[str] = None
    generation: Optional[int] = None


class ShazamqCluster(WireModel):
    metadata: ObjectIdentity
    spec: ClusterSpec
    status: Optional[ClusterStatus] = None

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace or "default"

    @classmethod
    def from_body(cls, body: Mapping[str, Any]) -> "ShazamqCluster":
        """
        Parse a raw platform object. ``apiVersion``/``kind`` are not checked;
        the harness only delivers objects of this kind. The live status is
        dropped: it is recomputed on every cycle and never read back.
        """
        return cls.model_validate(
            {
                "metadata": dict(body.get("metadata") or {}),
                "spec": dict(body.get("spec") or {}),
            }
        )
