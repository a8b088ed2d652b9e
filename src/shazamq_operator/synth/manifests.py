# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shazamq_operator/synth/manifests.py
"""
Manifest synthesizer: (spec, name, namespace) -> subordinate objects.

Pure, no I/O. Everything is recomputed from the ClusterSpec on every
cycle; nothing here is cached between cycles.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Tuple

from kubernetes.client import (
    ApiClient,
    V1ConfigMap,
    V1ConfigMapVolumeSource,
    V1Container,
    V1ContainerPort,
    V1EnvVar,
    V1LabelSelector,
    V1ObjectMeta,
    V1PersistentVolumeClaim,
    V1PersistentVolumeClaimSpec,
    V1PodSpec,
    V1PodTemplateSpec,
    V1ResourceRequirements,
    V1Service,
    V1ServicePort,
    V1ServiceSpec,
    V1StatefulSet,
    V1StatefulSetSpec,
    V1Volume,
    V1VolumeMount,
    V1VolumeResourceRequirements,
)

from shazamq_operator.crd.models import ClusterSpec
from shazamq_operator.synth import naming
from shazamq_operator.synth.config_text import render_config
from shazamq_operator.synth.defaults import (
    BROKER_PORT,
    CONFIG_DIR,
    DATA_DIR,
    LOG_LEVEL,
    METRICS_PORT,
    STORAGE_ACCESS_MODE,
    ResolvedSpec,
    resolve,
)

CONTAINER_NAME = "shazamq"
BROKER_PORT_NAME = "kafka"
METRICS_PORT_NAME = "metrics"
DATA_VOLUME = "data"
CONFIG_VOLUME = "config"

# Environment contract of the broker image.
LOG_LEVEL_ENV = "RUST_LOG"
MIRROR_ENABLED_ENV = "SHAZAMQ_MIRROR_ENABLED"


@dataclass(frozen=True)
class Manifests:
    config_map: V1ConfigMap
    service: V1Service
    headless_service: V1Service
    stateful_set: V1StatefulSet

    def in_apply_order(self) -> List[Tuple[str, Any]]:
        """
        The replica group goes last: its pods mount the config map and
        resolve peers through the headless service by name.
        """
        return [
            ("config-map", self.config_map),
            ("service", self.service),
            ("headless-service", self.headless_service),
            ("stateful-set", self.stateful_set),
        ]


def _meta(name: str, namespace: str, cluster: str) -> V1ObjectMeta:
    return V1ObjectMeta(
        name=name,
        namespace=namespace,
        labels=naming.common_labels(cluster),
    )


def build_config_map(resolved: ResolvedSpec, cluster: str, namespace: str) -> V1ConfigMap:
    return V1ConfigMap(
        api_version="v1",
        kind="ConfigMap",
        metadata=_meta(naming.config_map_name(cluster), namespace, cluster),
        data={naming.CONFIG_KEY: render_config(resolved)},
    )


def build_service(resolved: ResolvedSpec, cluster: str, namespace: str) -> V1Service:
    svc = resolved.service
    return V1Service(
        api_version="v1",
        kind="Service",
        metadata=_meta(naming.service_name(cluster), namespace, cluster),
        spec=V1ServiceSpec(
            type=svc.service_type,
            selector=naming.selector_labels(cluster),
            ports=[
                V1ServicePort(name=BROKER_PORT_NAME, port=svc.port, target_port=BROKER_PORT),
                V1ServicePort(name=METRICS_PORT_NAME, port=svc.metrics_port, target_port=METRICS_PORT),
            ],
        ),
    )


def build_headless_service(cluster: str, namespace: str) -> V1Service:
    # No cluster IP: peers address each replica directly through DNS.
    return V1Service(
        api_version="v1",
        kind="Service",
        metadata=_meta(naming.headless_service_name(cluster), namespace, cluster),
        spec=V1ServiceSpec(
            cluster_ip="None",
            selector=naming.selector_labels(cluster),
            ports=[V1ServicePort(name=BROKER_PORT_NAME, port=BROKER_PORT)],
        ),
    )


def _env(resolved: ResolvedSpec) -> List[V1EnvVar]:
    env = [V1EnvVar(name=LOG_LEVEL_ENV, value=LOG_LEVEL)]
    if resolved.mirror.enabled:
        env.append(V1EnvVar(name=MIRROR_ENABLED_ENV, value="true"))
    return env


def _container(resolved: ResolvedSpec) -> V1Container:
    resources = None
    if not resolved.resources.empty:
        resources = V1ResourceRequirements(
            requests=dict(resolved.resources.requests) or None,
            limits=dict(resolved.resources.limits) or None,
        )

    return V1Container(
        name=CONTAINER_NAME,
        image=resolved.image_ref,
        image_pull_policy=resolved.image_pull_policy,
        ports=[
            V1ContainerPort(name=BROKER_PORT_NAME, container_port=BROKER_PORT),
            V1ContainerPort(name=METRICS_PORT_NAME, container_port=METRICS_PORT),
        ],
        env=_env(resolved),
        volume_mounts=[
            V1VolumeMount(name=DATA_VOLUME, mount_path=DATA_DIR),
            V1VolumeMount(name=CONFIG_VOLUME, mount_path=CONFIG_DIR, read_only=True),
        ],
        args=["--config", f"{CONFIG_DIR}/{naming.CONFIG_KEY}"],
        resources=resources,
    )


def build_stateful_set(resolved: ResolvedSpec, cluster: str, namespace: str) -> V1StatefulSet:
    pod_template = V1PodTemplateSpec(
        metadata=V1ObjectMeta(
            labels=naming.pod_labels(cluster, resolved.pod_labels),
            annotations=dict(resolved.pod_annotations) or None,
        ),
        spec=V1PodSpec(
            containers=[_container(resolved)],
            volumes=[
                V1Volume(
                    name=CONFIG_VOLUME,
                    config_map=V1ConfigMapVolumeSource(name=naming.config_map_name(cluster)),
                ),
            ],
            node_selector=dict(resolved.node_selector) or None,
        ),
    )

    data_claim = V1PersistentVolumeClaim(
        metadata=V1ObjectMeta(name=DATA_VOLUME),
        spec=V1PersistentVolumeClaimSpec(
            access_modes=[STORAGE_ACCESS_MODE],
            resources=V1VolumeResourceRequirements(
                requests={"storage": resolved.storage_capacity},
            ),
        ),
    )

    return V1StatefulSet(
        api_version="apps/v1",
        kind="StatefulSet",
        metadata=_meta(naming.stateful_set_name(cluster), namespace, cluster),
        spec=V1StatefulSetSpec(
            replicas=resolved.replicas,
            selector=V1LabelSelector(match_labels=naming.selector_labels(cluster)),
            service_name=naming.headless_service_name(cluster),
            template=pod_template,
            volume_claim_templates=[data_claim],
        ),
    )


def synthesize(spec: ClusterSpec, cluster: str, namespace: str) -> Manifests:
    resolved = resolve(spec)
    return Manifests(
        config_map=build_config_map(resolved, cluster, namespace),
        service=build_service(resolved, cluster, namespace),
        headless_service=build_headless_service(cluster, namespace),
        stateful_set=build_stateful_set(resolved, cluster, namespace),
    )


@lru_cache(maxsize=1)
def _serializer() -> ApiClient:
    return ApiClient()


def serialize(obj: Any) -> Dict[str, Any]:
    """Wire form of a kubernetes model: camelCase keys, unset fields dropped."""
    return _serializer().sanitize_for_serialization(obj)
