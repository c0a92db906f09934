"""Tests for configuration loading."""

import pytest
import yaml

from payment_recon.config import (
    ReconConfig,
    generate_default_config,
    get_default_config,
    load_config,
)
from payment_recon.utils.exceptions import ConfigurationError


def test_defaults():
    config = load_config(None)

    assert config.matching.high_max_date_delta_days == 3
    assert config.matching.medium_max_date_delta_days == 10
    assert (config.matching.weights.high, config.matching.weights.medium, config.matching.weights.low) == (1000, 100, 10)
    assert config.input.statement.column_mappings["credit"] == "Credit"
    assert config.config_file_path is None


def test_yaml_overrides_are_deep_merged(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.dump(
            {
                "matching": {"high_max_date_delta_days": 2},
                "input": {"statement": {"delimiter": ","}},
            }
        )
    )

    config = load_config(path)

    assert config.matching.high_max_date_delta_days == 2
    assert config.matching.medium_max_date_delta_days == 10
    assert config.input.statement.delimiter == ","
    assert config.input.statement.date_format == "%Y-%m-%d"
    assert config.config_file_path == str(path)


def test_missing_file_falls_back_to_defaults(tmp_path):
    config = load_config(tmp_path / "absent.yaml")
    assert config.config_file_path is None


def test_medium_window_narrower_than_high_is_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({"matching": {"high_max_date_delta_days": 5, "medium_max_date_delta_days": 2}}))

    with pytest.raises(ConfigurationError):
        load_config(path)


def test_weights_must_decrease(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({"matching": {"weights": {"low": 500}}}))

    with pytest.raises(ConfigurationError):
        load_config(path)


def test_invalid_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("matching: [unclosed")

    with pytest.raises(ConfigurationError):
        load_config(path)


def test_generated_config_round_trips(tmp_path):
    path = tmp_path / "nested" / "config.yaml"

    generate_default_config(path)

    assert path.read_text().startswith("#")
    assert load_config(path).model_dump(exclude={"config_file_path"}) == get_default_config()


def test_default_dict_matches_model():
    assert ReconConfig(**get_default_config()) == ReconConfig()
