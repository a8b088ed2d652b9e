# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shazamq_operator/errors.py
from __future__ import annotations

from typing import Optional


class OperatorError(RuntimeError):
    """Base class for shazamq operator failures."""


class ConfigError(OperatorError, ValueError):
    """Raised for invalid settings or unreadable resource files."""


class TransientPlatformError(OperatorError):
    """
    A platform call failed (transport, API error, version conflict).

    Never retried in-process; the harness requeues the resource.
    """

    def __init__(
        self,
        operation: str,
        kind: str,
        name: str,
        *,
        status: Optional[int] = None,
        reason: Optional[str] = None,
    ):
        self.operation = operation
        self.kind = kind
        self.name = name
        self.status = status
        self.reason = reason
        detail = f"{operation} {kind}/{name} failed"
        if status is not None:
            detail += f" (HTTP {status})"
        if reason:
            detail += f": {reason}"
        super().__init__(detail)


class ReconcileError(OperatorError):
    """A reconcile cycle aborted at ``step``."""

    def __init__(self, step: str, cluster: str, namespace: str, cause: BaseException):
        self.step = step
        self.cluster = cluster
        self.namespace = namespace
        super().__init__(f"{namespace}/{cluster}: step '{step}' failed: {cause}")
