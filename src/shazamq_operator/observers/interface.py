# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shazamq_operator/observers/interface.py
from __future__ import annotations

from typing import Protocol, runtime_checkable

from .events import BaseEvent


class Observer(Protocol):
    """Receives every reconcile event. Must not block the event loop for long."""

    def notify(self, event: BaseEvent) -> None: ...


@runtime_checkable
class ClosableObserver(Protocol):
    """An observer holding a resource (file handle, socket) to release at shutdown."""

    def notify(self, event: BaseEvent) -> None: ...

    def close(self) -> None: ...
