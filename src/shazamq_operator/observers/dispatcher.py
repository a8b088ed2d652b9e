# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shazamq_operator/observers/dispatcher.py
from __future__ import annotations

import logging
from typing import List, Optional

from .events import BaseEvent
from .interface import ClosableObserver, Observer

log = logging.getLogger("shazamq")


class EventBus:
    def __init__(self, observers: Optional[List[Observer]] = None):
        self._observers = list(observers or [])

    def subscribe(self, observer: Observer) -> None:
        self._observers.append(observer)

    def emit(self, event: BaseEvent) -> None:
        for ob in self._observers:
            try:
                ob.notify(event)
            except Exception:
                # observers must not break reconciles
                log.debug("observer %r failed on %s", ob, type(event).__name__, exc_info=True)

    def close(self) -> None:
        """Release observer resources. Called once at operator shutdown."""
        for ob in self._observers:
            if isinstance(ob, ClosableObserver):
                ob.close()
