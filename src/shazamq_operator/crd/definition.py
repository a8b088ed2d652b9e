# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shazamq_operator/crd/definition.py
"""
CustomResourceDefinition for ShazamqCluster, generated from the pydantic
models so the schema served by the platform never drifts from the one
the operator validates against.
"""
from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel

from .models import GROUP, KIND, PLURAL, SHORT_NAME, SINGULAR, VERSION, ClusterSpec, ClusterStatus

PRINTER_COLUMNS: List[Dict[str, str]] = [
    {"name": "Version", "jsonPath": ".spec.version", "type": "string"},
    {"name": "Replicas", "jsonPath": ".spec.replicas", "type": "integer"},
    {"name": "Ready", "jsonPath": ".status.readyReplicas", "type": "integer"},
    {"name": "Phase", "jsonPath": ".status.phase", "type": "string"},
    {"name": "Age", "jsonPath": ".metadata.creationTimestamp", "type": "date"},
]

# Keywords the structural-schema validator rejects or that carry no meaning there.
_DROPPED_KEYS = {"title", "$defs", "examples"}


def _structural(node: Any, defs: Dict[str, Any]) -> Any:
    """
    Rewrite a pydantic JSON schema into an OpenAPI v3 structural schema:
    ``$ref`` inlined, ``anyOf [X, null]`` collapsed to ``X`` with
    ``nullable``, titles and null defaults dropped.
    """
    if isinstance(node, list):
        return [_structural(item, defs) for item in node]
    if not isinstance(node, dict):
        return node

    if "$ref" in node:
        target = defs[node["$ref"].rsplit("/", 1)[-1]]
        merged = {**target, **{k: v for k, v in node.items() if k != "$ref"}}
        return _structural(merged, defs)

    if "anyOf" in node:
        options = [o for o in node["anyOf"] if o.get("type") != "null"]
        rest = {k: v for k, v in node.items() if k != "anyOf"}
        if len(options) == 1:
            merged = {**options[0], **rest}
            if len(options) != len(node["anyOf"]):
                merged["nullable"] = True
            return _structural(merged, defs)

    out: Dict[str, Any] = {}
    for key, value in node.items():
        if key in _DROPPED_KEYS:
            continue
        if key == "default" and value is None:
            continue
        out[key] = _structural(value, defs)
    return out


def model_schema(model: type[BaseModel]) -> Dict[str, Any]:
    raw = model.model_json_schema(by_alias=True)
    return _structural(raw, raw.get("$defs", {}))


def build_crd() -> Dict[str, Any]:
    return {
        "apiVersion": "apiextensions.k8s.io/v1",
        "kind": "CustomResourceDefinition",
        "metadata": {"name": f"{PLURAL}.{GROUP}"},
        "spec": {
            "group": GROUP,
            "scope": "Namespaced",
            "names": {
                "kind": KIND,
                "plural": PLURAL,
                "singular": SINGULAR,
                "shortNames": [SHORT_NAME],
            },
            "versions": [
                {
                    "name": VERSION,
                    "served": True,
                    "storage": True,
                    "subresources": {"status": {}},
                    "additionalPrinterColumns": PRINTER_COLUMNS,
                    "schema": {
                        "openAPIV3Schema": {
                            "type": "object",
                            "required": ["spec"],
                            "properties": {
                                "spec": model_schema(ClusterSpec),
                                "status": model_schema(ClusterStatus),
                            },
                        }
                    },
                }
            ],
        },
    }
