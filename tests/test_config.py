"""Tests for configuration management."""

import pytest
import yaml

from gotest_report.config import (
    AggregatorConfig,
    ConfigurationError,
    _parse_env_int,
    load_config,
    validate_config,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in (
        "GOTEST_REPORT_SEPARATOR",
        "GOTEST_REPORT_MAX_OUTPUT_LINES",
        "GOTEST_REPORT_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)


class TestAggregatorConfig:
    """Tests for AggregatorConfig dataclass."""

    def test_defaults(self):
        config = AggregatorConfig()
        assert config.hierarchy_separator == "/"
        assert config.max_output_lines is None
        assert config.log_level == "INFO"

    def test_log_level_normalized(self):
        assert AggregatorConfig(log_level="warning").log_level == "WARNING"


class TestParseEnvInt:
    """Tests for _parse_env_int."""

    def test_unset(self):
        assert _parse_env_int("GOTEST_REPORT_MAX_OUTPUT_LINES") is None

    def test_valid(self, monkeypatch):
        monkeypatch.setenv("GOTEST_REPORT_MAX_OUTPUT_LINES", "25")
        assert _parse_env_int("GOTEST_REPORT_MAX_OUTPUT_LINES") == 25

    def test_invalid(self, monkeypatch):
        monkeypatch.setenv("GOTEST_REPORT_MAX_OUTPUT_LINES", "lots")
        with pytest.raises(ConfigurationError, match="must be a valid integer"):
            _parse_env_int("GOTEST_REPORT_MAX_OUTPUT_LINES")


class TestLoadConfig:
    """Tests for load_config."""

    def test_no_file(self):
        assert load_config() == AggregatorConfig()

    def test_from_file(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            yaml.safe_dump({"max_output_lines": 100, "hierarchy_separator": "::"})
        )
        config = load_config(str(config_file))
        assert config.max_output_lines == 100
        assert config.hierarchy_separator == "::"
        assert config.log_level == "INFO"

    def test_empty_file(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")
        assert load_config(str(config_file)) == AggregatorConfig()

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("max_output_lines: 100\nlog_level: INFO\n")
        monkeypatch.setenv("GOTEST_REPORT_MAX_OUTPUT_LINES", "5")
        monkeypatch.setenv("GOTEST_REPORT_LOG_LEVEL", "debug")
        config = load_config(str(config_file))
        assert config.max_output_lines == 5
        assert config.log_level == "DEBUG"

    def test_lowercase_log_level_from_file(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("log_level: info\n")
        config = load_config(str(config_file))
        assert config.log_level == "INFO"
        assert validate_config(config) == []

    def test_env_separator(self, monkeypatch):
        monkeypatch.setenv("GOTEST_REPORT_SEPARATOR", ".")
        assert load_config().hierarchy_separator == "."

    def test_env_non_positive_max_lines(self, monkeypatch):
        monkeypatch.setenv("GOTEST_REPORT_MAX_OUTPUT_LINES", "0")
        with pytest.raises(ConfigurationError, match="positive"):
            load_config()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("max_output_lines: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(str(config_file))

    def test_non_mapping(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(str(config_file))

    def test_unknown_key(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("report_format: markdown\n")
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config(str(config_file))


class TestValidateConfig:
    """Tests for validate_config."""

    def test_defaults_valid(self):
        assert validate_config(AggregatorConfig()) == []

    def test_empty_separator(self):
        errors = validate_config(AggregatorConfig(hierarchy_separator=""))
        assert any("hierarchy_separator" in e for e in errors)

    def test_non_positive_max_lines(self):
        errors = validate_config(AggregatorConfig(max_output_lines=0))
        assert any("max_output_lines must be positive" in e for e in errors)

    def test_non_integer_max_lines(self):
        errors = validate_config(AggregatorConfig(max_output_lines="ten"))
        assert any("max_output_lines must be an integer" in e for e in errors)

    def test_invalid_log_level(self):
        errors = validate_config(AggregatorConfig(log_level="LOUD"))
        assert any("log_level" in e for e in errors)

    def test_multiple_errors(self):
        config = AggregatorConfig(hierarchy_separator="", max_output_lines=-1, log_level="x")
        assert len(validate_config(config)) == 3
