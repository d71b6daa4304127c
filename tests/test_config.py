from __future__ import annotations

import pytest

from awsbroker.core.config import (
    BrokerOptions,
    add_trailing_slash,
    load_options,
    options_from_mapping,
    validate_options,
)
from awsbroker.core.errors import ValidationError


def test_load_options_accepts_flat_keys(tmp_path):
    path = tmp_path / "broker.yaml"
    path.write_text(
        "keyid: AKIA\n"
        "secretkey: secret\n"
        "tablename: brokertable\n"
        "s3bucket: my-templates\n"
        "s3key: templates/v2\n"
        "s3region: eu-west-1\n"
        "templatefilter: .yaml\n"
        "region: eu-central-1\n"
        "brokerid: team-a\n"
        "pollinterval: '60'\n"
    )

    options = load_options(path)

    assert options == BrokerOptions(
        key_id="AKIA",
        secret_key="secret",
        table_name="brokertable",
        s3_bucket="my-templates",
        s3_key="templates/v2",
        s3_region="eu-west-1",
        template_filter=".yaml",
        region="eu-central-1",
        broker_id="team-a",
        poll_interval=60,
    )


def test_load_options_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "broker.yaml"
    path.write_text("")

    assert load_options(path) == BrokerOptions()


@pytest.mark.parametrize("content", ["- a\n- b\n", "region: [unclosed\n"])
def test_load_options_rejects_bad_files(tmp_path, content):
    path = tmp_path / "broker.yaml"
    path.write_text(content)

    with pytest.raises(ValidationError):
        load_options(path)


def test_load_options_missing_file(tmp_path):
    with pytest.raises(ValidationError, match="Cannot read"):
        load_options(tmp_path / "nope.yaml")


def test_options_from_mapping_rejects_unknown_keys():
    with pytest.raises(ValidationError, match="Unknown option 'bucket'"):
        options_from_mapping({"bucket": "x"})


def test_options_from_mapping_accepts_field_names():
    assert options_from_mapping({"s3_bucket": "x"}).s3_bucket == "x"


def test_merged_ignores_unset_overrides():
    base = BrokerOptions(region="eu-west-1")
    merged = base.merged(region=None, broker_id="team-b")

    assert merged.region == "eu-west-1"
    assert merged.broker_id == "team-b"


@pytest.mark.parametrize(
    "prefix,expected",
    [("templates/latest", "templates/latest/"), ("templates/", "templates/"), ("", "")],
)
def test_add_trailing_slash(prefix, expected):
    assert add_trailing_slash(prefix) == expected


@pytest.mark.parametrize(
    "options,match",
    [
        (BrokerOptions(region=" "), "region"),
        (BrokerOptions(s3_bucket=""), "s3_bucket"),
        (BrokerOptions(key_id="AKIA"), "together"),
        (BrokerOptions(poll_interval=0), "positive"),
    ],
)
def test_validate_options_rejects(options, match):
    with pytest.raises(ValidationError, match=match):
        validate_options(options)


def test_validate_options_accepts_defaults():
    validate_options(BrokerOptions())


def test_load_options_reads_numeric_scalars_as_strings(tmp_path):
    path = tmp_path / "broker.yaml"
    path.write_text("brokerid: 12345\ns3key: 2020\n")

    options = load_options(path)

    assert options.broker_id == "12345"
    assert options.s3_key == "2020"
    assert add_trailing_slash(options.s3_key) == "2020/"


def test_options_from_mapping_rejects_nested_values():
    with pytest.raises(ValidationError, match="'region' must be a single value"):
        options_from_mapping({"region": ["us-east-1", "eu-west-1"]})
