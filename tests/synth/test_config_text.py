import tomllib

from shazamq_operator.crd.models import ClusterSpec
from shazamq_operator.synth.config_text import render_config
from shazamq_operator.synth.defaults import resolve


def _render(spec: dict) -> str:
    return render_config(resolve(ClusterSpec.model_validate(spec)))


BASE = (
    '[broker]\n'
    'host = "0.0.0.0"\n'
    'port = 9092\n'
    'data_dir = "/data/shazamq"\n'
    '\n'
    '[storage]\n'
    '\n'
    '[metrics]\n'
    'enabled = true\n'
    'host = "0.0.0.0"\n'
    'port = 9090\n'
    '\n'
)


def test_minimal_spec_renders_fixed_sections_only():
    assert _render({"replicas": 3}) == BASE


def test_storage_lines_only_when_set():
    text = _render({"replicas": 1, "storage": {"segmentBytes": 1048576}})
    assert "[storage]\nsegment_bytes = 1048576\n\n[metrics]" in text
    assert "retention_hours" not in text

    text = _render({"replicas": 1, "storage": {"segmentBytes": 10, "retentionHours": 168}})
    assert "[storage]\nsegment_bytes = 10\nretention_hours = 168\n\n[metrics]" in text


def test_tiered_storage_absent_means_no_section():
    text = _render({"replicas": 3})
    assert "tiered_storage" not in text


def test_tiered_storage_disabled_means_no_section():
    text = _render({"replicas": 3, "tieredStorage": {"enabled": False, "provider": "s3"}})
    assert "tiered_storage" not in text


def test_tiered_storage_with_s3_block():
    text = _render({
        "replicas": 3,
        "tieredStorage": {
            "enabled": True,
            "provider": "s3",
            "s3": {"bucket": "logs", "region": "eu-west-1", "prefix": "prod/"},
        },
    })
    assert text == BASE + (
        '[tiered_storage]\n'
        'enabled = true\n'
        'provider = "s3"\n'
        '\n'
        '[tiered_storage.s3]\n'
        'bucket = "logs"\n'
        'region = "eu-west-1"\n'
        'prefix = "prod/"\n'
        '\n'
    )


def test_tiered_storage_without_provider_block():
    text = _render({"replicas": 3, "tieredStorage": {"enabled": True, "provider": "local"}})
    assert text == BASE + '[tiered_storage]\nenabled = true\nprovider = "local"\n\n'


def test_single_mirror_source_block():
    text = _render({
        "replicas": 3,
        "mirror": {
            "enabled": True,
            "sources": [{
                "name": "src1",
                "bootstrapServers": "b:9092",
                "topicWhitelist": ["t1", "t2"],
                "consumerGroupId": "g1",
                "securityProtocol": "PLAINTEXT",
            }],
        },
    })
    assert text.count("[[mirror.sources]]") == 1
    assert text == BASE + (
        '[mirror]\n'
        'enabled = true\n'
        '\n'
        '[[mirror.sources]]\n'
        'name = "src1"\n'
        'bootstrap_servers = "b:9092"\n'
        'security_protocol = "PLAINTEXT"\n'
        'consumer_group_id = "g1"\n'
        'topic_whitelist = ["t1", "t2"]\n'
        '\n'
    )


def test_mirror_disabled_means_no_section():
    text = _render({
        "replicas": 1,
        "mirror": {"enabled": False, "sources": [{
            "name": "a", "bootstrapServers": "x:1", "securityProtocol": "PLAINTEXT",
            "topicWhitelist": [], "consumerGroupId": "g",
        }]},
    })
    assert "mirror" not in text


def test_section_order_independent_of_field_order():
    tiered = {"enabled": True, "provider": "s3", "s3": {"bucket": "b", "region": "r", "prefix": "p"}}
    mirror = {"enabled": True, "sources": [{
        "name": "a", "bootstrapServers": "x:1", "securityProtocol": "SSL",
        "topicWhitelist": ["t"], "consumerGroupId": "g",
    }]}
    one = _render({"replicas": 2, "tieredStorage": tiered, "mirror": mirror, "storage": {"retentionHours": 1}})
    two = _render({"mirror": mirror, "storage": {"retentionHours": 1}, "tieredStorage": tiered, "replicas": 2})
    assert one == two
    assert one.index("[storage]") < one.index("[metrics]") < one.index("[tiered_storage]") < one.index("[mirror]")


def test_output_is_valid_toml():
    text = _render({
        "replicas": 2,
        "storage": {"segmentBytes": 5, "retentionHours": 6},
        "tieredStorage": {"enabled": True, "provider": "s3", "s3": {"bucket": "b", "region": "r", "prefix": "p"}},
        "mirror": {"enabled": True, "sources": [
            {"name": "a", "bootstrapServers": "x:1", "securityProtocol": "SSL",
             "topicWhitelist": ["t1"], "consumerGroupId": "g1"},
            {"name": "b", "bootstrapServers": "y:2", "securityProtocol": "PLAINTEXT",
             "topicWhitelist": [], "consumerGroupId": "g2"},
        ]},
    })
    doc = tomllib.loads(text)
    assert doc["broker"]["port"] == 9092
    assert doc["storage"] == {"segment_bytes": 5, "retention_hours": 6}
    assert doc["tiered_storage"]["s3"]["bucket"] == "b"
    assert [s["name"] for s in doc["mirror"]["sources"]] == ["a", "b"]
    assert doc["mirror"]["sources"][1]["topic_whitelist"] == []


def test_quotes_in_values_are_escaped():
    text = _render({"replicas": 1, "tieredStorage": {"enabled": True, "provider": 'we"ird'}})
    assert tomllib.loads(text)["tiered_storage"]["provider"] == 'we"ird'


def test_unlimited_retention_renders_as_is():
    text = _render({"replicas": 1, "storage": {"retentionHours": -1}})
    assert tomllib.loads(text)["storage"] == {"retention_hours": -1}
