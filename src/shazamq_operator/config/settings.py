# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shazamq_operator/config/settings.py

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
import os

from shazamq_operator.errors import ConfigError

DEFAULT_FIELD_MANAGER = "shazamq-operator"
DEFAULT_REQUEUE_SECONDS = 300.0
DEFAULT_ERROR_REQUEUE_SECONDS = 60.0


@dataclass(frozen=True)
class OperatorSettings:
    field_manager: str = DEFAULT_FIELD_MANAGER
    requeue_seconds: float = DEFAULT_REQUEUE_SECONDS
    error_requeue_seconds: float = DEFAULT_ERROR_REQUEUE_SECONDS
    namespace: Optional[str] = None          # None -> watch all namespaces
    kube_context: Optional[str] = None
    log_dir: Optional[Path] = None
    events_file: Optional[Path] = None


def _seconds(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw in (None, ""):
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigError(f"{key}={raw!r} is not a number of seconds") from e
    if value <= 0:
        raise ConfigError(f"{key} must be positive, got {raw!r}")
    return value


def _optional(env: Mapping[str, str], key: str) -> Optional[str]:
    value = env.get(key)
    return value or None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> OperatorSettings:
    # defaults suit an in-cluster deployment; override via env
    env = os.environ if environ is None else environ

    log_dir = _optional(env, "SHAZAMQ_LOG_DIR")
    events_file = _optional(env, "SHAZAMQ_EVENTS_FILE")

    return OperatorSettings(
        field_manager=env.get("SHAZAMQ_FIELD_MANAGER") or DEFAULT_FIELD_MANAGER,
        requeue_seconds=_seconds(env, "SHAZAMQ_REQUEUE_SECONDS", DEFAULT_REQUEUE_SECONDS),
        error_requeue_seconds=_seconds(
            env, "SHAZAMQ_ERROR_REQUEUE_SECONDS", DEFAULT_ERROR_REQUEUE_SECONDS
        ),
        namespace=_optional(env, "SHAZAMQ_NAMESPACE"),
        kube_context=_optional(env, "SHAZAMQ_KUBE_CONTEXT"),
        log_dir=Path(log_dir) if log_dir else None,
        events_file=Path(events_file) if events_file else None,
    )
