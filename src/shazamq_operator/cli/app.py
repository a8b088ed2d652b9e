# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shazamq_operator/cli/app.py
from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Optional

import typer
import yaml

from shazamq_operator.config.loader import load_cluster
from shazamq_operator.config.settings import load_settings
from shazamq_operator.crd.definition import build_crd
from shazamq_operator.errors import ConfigError
from shazamq_operator.synth.manifests import serialize, synthesize
from shazamq_operator.synth.naming import CONFIG_KEY

# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="Shazamq Kubernetes operator")


# ------------------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------------------

@app.command()
def run(
    namespace: Optional[str] = typer.Option(
        None, "--namespace", "-n", help="Watch a single namespace (default: all)"
    ),
    kube_context: Optional[str] = typer.Option(
        None, "--kube-context", help="kubeconfig context when running out of cluster"
    ),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Write a full-trace log file here"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug output on the console"),
):
    """
    Run the operator until interrupted.

    client -> context -> kopf, once, in that order.
    """
    # Imported here so `crd` and `render` work without cluster access.
    from shazamq_operator.context import build_context
    from shazamq_operator.harness import run as run_harness
    from shazamq_operator.k8s.client import KubePlatformClient
    from shazamq_operator.logging.log import init_logging

    try:
        settings = load_settings()
    except ConfigError as e:
        raise typer.BadParameter(str(e))

    overrides = {
        k: v
        for k, v in {"namespace": namespace, "kube_context": kube_context, "log_dir": log_dir}.items()
        if v is not None
    }
    settings = dataclasses.replace(settings, **overrides)

    logger, run_id, _ = init_logging(log_dir=settings.log_dir, verbose=verbose)
    logger.info(
        f"watching namespace={settings.namespace or '*'} field_manager={settings.field_manager} "
        f"requeue={settings.requeue_seconds}s error_requeue={settings.error_requeue_seconds}s"
    )

    client = KubePlatformClient.from_settings(settings)
    logger.info("Connected to Kubernetes cluster")

    ctx = build_context(client, settings, logger)
    run_harness(ctx, verbose=verbose)


@app.command()
def crd():
    """Print the ShazamqCluster CustomResourceDefinition as YAML."""
    typer.echo(yaml.safe_dump(build_crd(), sort_keys=False), nl=False)


@app.command()
def render(
    path: Path = typer.Argument(..., help="ShazamqCluster manifest (YAML)"),
    config_only: bool = typer.Option(False, "--config-only", help="Print only the broker config text"),
):
    """
    Print the objects the operator would apply for a ShazamqCluster,
    without contacting the cluster.
    """
    try:
        cluster = load_cluster(path)
    except ConfigError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    manifests = synthesize(cluster.spec, cluster.name, cluster.namespace)

    if config_only:
        typer.echo(manifests.config_map.data[CONFIG_KEY], nl=False)
        return

    docs = [serialize(obj) for _, obj in manifests.in_apply_order()]
    typer.echo(yaml.safe_dump_all(docs, sort_keys=False), nl=False)


if __name__ == "__main__":
    app()
