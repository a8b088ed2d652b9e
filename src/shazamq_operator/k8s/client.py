# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shazamq_operator/k8s/client.py
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict

import urllib3
from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException

from shazamq_operator.config.settings import OperatorSettings
from shazamq_operator.crd.models import API_VERSION, GROUP, KIND, PLURAL, VERSION, ClusterStatus
from shazamq_operator.errors import TransientPlatformError
from shazamq_operator.synth.manifests import serialize

log = logging.getLogger("shazamq")

# Server-side apply: same body twice yields the same live object, and
# ownership of each field is tracked per field manager.
APPLY_PATCH = "application/apply-patch+yaml"


def load_kube_config(kube_context: str | None = None) -> None:
    """In-cluster service account first, local kubeconfig otherwise."""
    try:
        config.load_incluster_config()
    except ConfigException:
        config.load_kube_config(context=kube_context)


class KubePlatformClient:
    """
    Platform client over the ``kubernetes`` package.

    The package is blocking, so every call runs in a worker thread and is
    awaited before the next one starts. No retries here: failures surface
    as TransientPlatformError and the harness requeues.
    """

    def __init__(self, *, core: Any, apps: Any, custom: Any, field_manager: str):
        self.core = core
        self.apps = apps
        self.custom = custom
        self.field_manager = field_manager
        self._appliers: Dict[str, Callable[..., Any]] = {
            "ConfigMap": core.patch_namespaced_config_map,
            "Service": core.patch_namespaced_service,
            "StatefulSet": apps.patch_namespaced_stateful_set,
        }

    @classmethod
    def from_settings(cls, settings: OperatorSettings) -> "KubePlatformClient":
        load_kube_config(settings.kube_context)
        api_client = client.ApiClient()
        return cls(
            core=client.CoreV1Api(api_client),
            apps=client.AppsV1Api(api_client),
            custom=client.CustomObjectsApi(api_client),
            field_manager=settings.field_manager,
        )

    async def _call(
        self, operation: str, kind: str, obj_name: str, fn: Callable[..., Any], /, **kwargs: Any
    ) -> Any:
        # positional-only: kwargs carry the API's own ``name``
        try:
            return await asyncio.to_thread(fn, **kwargs)
        except ApiException as e:
            raise TransientPlatformError(
                operation, kind, obj_name, status=e.status, reason=e.reason
            ) from e
        except (urllib3.exceptions.HTTPError, OSError) as e:
            raise TransientPlatformError(operation, kind, obj_name, reason=str(e)) from e

    async def apply(self, obj: Any) -> None:
        body = serialize(obj)
        kind = body["kind"]
        name = body["metadata"]["name"]
        namespace = body["metadata"]["namespace"]

        patch = self._appliers.get(kind)
        if patch is None:
            raise ValueError(f"Don't know how to apply kind {kind!r}")

        await self._call(
            "apply",
            kind,
            name,
            patch,
            name=name,
            namespace=namespace,
            body=body,
            field_manager=self.field_manager,
            force=True,
            _content_type=APPLY_PATCH,
        )
        log.debug("Applied %s %s/%s", kind, namespace, name)

    async def read_ready_replicas(self, name: str, namespace: str) -> int:
        sts = await self._call(
            "read",
            "StatefulSet",
            name,
            self.apps.read_namespaced_stateful_set_status,
            name=name,
            namespace=namespace,
        )
        status = sts.status
        if status is None:
            return 0
        return status.ready_replicas or 0

    async def apply_status(self, name: str, namespace: str, status: ClusterStatus) -> None:
        body = {
            "apiVersion": API_VERSION,
            "kind": KIND,
            "metadata": {"name": name, "namespace": namespace},
            "status": status.to_wire(),
        }
        await self._call(
            "apply-status",
            KIND,
            name,
            self.custom.patch_namespaced_custom_object_status,
            group=GROUP,
            version=VERSION,
            namespace=namespace,
            plural=PLURAL,
            name=name,
            body=body,
            field_manager=self.field_manager,
            force=True,
            _content_type=APPLY_PATCH,
        )
        log.debug("Applied status of %s %s/%s", KIND, namespace, name)
