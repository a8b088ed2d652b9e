# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shazamq_operator/config/loader.py

import logging
import os
import yaml
from pathlib import Path
from pydantic import ValidationError

from shazamq_operator.crd.models import KIND, ShazamqCluster
from shazamq_operator.errors import ConfigError

log = logging.getLogger("shazamq")


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    raw = path.read_text()
    expanded = os.path.expandvars(raw)
    return yaml.safe_load(expanded) or {}


def load_cluster(path: str | Path) -> ShazamqCluster:
    """
    Load a ShazamqCluster manifest from disk, as it would be applied
    with kubectl. Used for offline rendering; the running operator gets
    its objects from the watch stream instead.

    ``${ENV_VAR}`` placeholders are resolved at load time.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Resource file not found: {path}")

    try:
        data = _load_yaml(path)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path} does not contain a mapping")

    kind = data.get("kind")
    if kind not in (None, KIND):
        raise ConfigError(f"{path} holds a {kind}, expected {KIND}")

    try:
        cluster = ShazamqCluster.from_body(data)
    except ValidationError as e:
        raise ConfigError(f"{path}: invalid {KIND}: {e}") from e

    log.debug("Loaded %s %s/%s from %s", KIND, cluster.namespace, cluster.name, path)
    return cluster
