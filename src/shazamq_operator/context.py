# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shazamq_operator/context.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from shazamq_operator.config.settings import OperatorSettings
from shazamq_operator.k8s.interface import PlatformClient
from shazamq_operator.observers.dispatcher import EventBus
from shazamq_operator.observers.jsonfile import JsonFileObserver
from shazamq_operator.observers.logger import LoggerObserver


@dataclass(frozen=True)
class OperatorContext:
    """
    Process-wide state, built once at startup and passed explicitly to the
    engine. Lives until shutdown.
    """

    client: PlatformClient
    settings: OperatorSettings
    logger: logging.Logger
    bus: EventBus


def build_context(
    client: PlatformClient,
    settings: OperatorSettings,
    logger: logging.Logger,
) -> OperatorContext:
    observers = [LoggerObserver(logger)]
    if settings.events_file is not None:
        observers.append(JsonFileObserver(settings.events_file))
    return OperatorContext(
        client=client,
        settings=settings,
        logger=logger,
        bus=EventBus(observers),
    )
