# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shazamq_operator/synth/config_text.py
"""
Broker configuration rendering.

The broker reads nothing but this file, so section order and the
conditional emission of sections are fixed:

    [broker]            always
    [storage]           always; segment/retention lines only when set
    [metrics]           always
    [tiered_storage]    only when tieredStorage.enabled (s3 block when present)
    [mirror]            only when mirror.enabled, one [[mirror.sources]] each
"""
from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from shazamq_operator.synth.defaults import BROKER_PORT, DATA_DIR, METRICS_PORT, ResolvedSpec

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
CONFIG_TEMPLATE = "config.toml.j2"


def quote(value: object) -> str:
    """TOML basic string. JSON escaping is a valid subset."""
    return json.dumps(str(value), ensure_ascii=False)


@lru_cache(maxsize=1)
def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=False,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["quote"] = quote
    return env


def render_config(resolved: ResolvedSpec) -> str:
    tmpl = _environment().get_template(CONFIG_TEMPLATE)
    return tmpl.render(
        broker_port=BROKER_PORT,
        metrics_port=METRICS_PORT,
        data_dir=DATA_DIR,
        storage=resolved.storage,
        tiered=resolved.tiered_storage,
        mirror=resolved.mirror,
    )
