from pathlib import Path
import textwrap

import pytest

from shazamq_operator.config.loader import load_cluster
from shazamq_operator.errors import ConfigError


def _write(tmp_path: Path, text: str) -> Path:
    f = tmp_path / "cluster.yaml"
    f.write_text(textwrap.dedent(text))
    return f


def test_load_cluster_minimal_ok(tmp_path: Path):
    f = _write(tmp_path, """
        apiVersion: shazamq.io/v1alpha1
        kind: ShazamqCluster
        metadata:
          name: demo
          namespace: streams
        spec:
          replicas: 3
          version: 1.2.0
          tieredStorage:
            enabled: true
            provider: s3
            s3: {bucket: logs, region: eu-west-1, prefix: prod/}
    """)
    cluster = load_cluster(f)
    assert cluster.name == "demo"
    assert cluster.namespace == "streams"
    assert cluster.spec.replicas == 3
    assert cluster.spec.tiered_storage.s3.bucket == "logs"


def test_namespace_defaults(tmp_path: Path):
    f = _write(tmp_path, """
        metadata: {name: demo}
        spec: {replicas: 1}
    """)
    assert load_cluster(f).namespace == "default"


def test_env_vars_are_expanded(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("SHAZAMQ_TEST_BUCKET", "from-env")
    f = _write(tmp_path, """
        kind: ShazamqCluster
        metadata: {name: demo}
        spec:
          replicas: 1
          tieredStorage:
            enabled: true
            provider: s3
            s3: {bucket: "${SHAZAMQ_TEST_BUCKET}", region: r, prefix: p}
    """)
    assert load_cluster(f).spec.tiered_storage.s3.bucket == "from-env"


def test_missing_file(tmp_path: Path):
    with pytest.raises(ConfigError, match="not found"):
        load_cluster(tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path: Path):
    f = tmp_path / "bad.yaml"
    f.write_text("spec: [unclosed\n")
    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_cluster(f)


def test_not_a_mapping(tmp_path: Path):
    f = _write(tmp_path, """
        - a
        - b
    """)
    with pytest.raises(ConfigError, match="mapping"):
        load_cluster(f)


def test_wrong_kind(tmp_path: Path):
    f = _write(tmp_path, """
        kind: Deployment
        metadata: {name: demo}
        spec: {replicas: 1}
    """)
    with pytest.raises(ConfigError, match="Deployment"):
        load_cluster(f)


def test_negative_replicas_rejected(tmp_path: Path):
    f = _write(tmp_path, """
        kind: ShazamqCluster
        metadata: {name: demo}
        spec: {replicas: -1}
    """)
    with pytest.raises(ConfigError, match="invalid ShazamqCluster"):
        load_cluster(f)
