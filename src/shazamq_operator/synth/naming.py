# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shazamq_operator/synth/naming.py
from __future__ import annotations

from typing import Dict

APP_LABEL = "app"
APP_NAME = "shazamq"
CLUSTER_LABEL = "shazamq.io/cluster"
MANAGED_BY_LABEL = "managed-by"
MANAGED_BY = "shazamq-operator"

CONFIG_KEY = "config.toml"


def config_map_name(cluster: str) -> str:
    return f"{cluster}-config"


def service_name(cluster: str) -> str:
    return cluster


def headless_service_name(cluster: str) -> str:
    return f"{cluster}-headless"


def stateful_set_name(cluster: str) -> str:
    return cluster


def selector_labels(cluster: str) -> Dict[str, str]:
    """Labels used to select replicas. Always a subset of common_labels()."""
    return {
        APP_LABEL: APP_NAME,
        CLUSTER_LABEL: cluster,
    }


def common_labels(cluster: str) -> Dict[str, str]:
    return {
        **selector_labels(cluster),
        MANAGED_BY_LABEL: MANAGED_BY,
    }


def pod_labels(cluster: str, user_labels: Dict[str, str] | None) -> Dict[str, str]:
    """
    User labels first, selector labels last, so a user key such as
    ``app`` can never detach pods from the replica group's selector.
    """
    labels = dict(user_labels or {})
    labels.update(selector_labels(cluster))
    return labels
