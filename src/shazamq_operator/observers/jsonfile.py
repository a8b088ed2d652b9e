# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shazamq_operator/observers/jsonfile.py
from __future__ import annotations

import json
from pathlib import Path

from .events import BaseEvent


class JsonFileObserver:
    """
    One JSON object per line for every reconcile event.

    The file is opened once and line-buffered, so each event costs a single
    short write on the event loop rather than an open/close per event.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = self.path.open("a", buffering=1, encoding="utf-8")

    def notify(self, event: BaseEvent) -> None:
        record = {"type": type(event).__name__, **event.dict()}
        self._fh.write(json.dumps(record, default=str) + "\n")

    def close(self) -> None:
        if not self._fh.closed:
            self._fh.close()
