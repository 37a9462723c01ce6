"""
Configuration management for gotest-report.
"""

import logging
import os
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

# Module-level lock for thread-safe config loading
_config_lock = threading.Lock()

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


class ConfigurationError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""

    pass


@dataclass
class AggregatorConfig:
    """Settings that shape how an event stream is aggregated.

    ``max_output_lines`` caps the captured output kept per test. The
    default of ``None`` keeps every line, matching what ``go test`` printed.
    With a cap, each test keeps its first N lines and the number of
    dropped lines is recorded on the node.

    Example config YAML::

        hierarchy_separator: "/"
        max_output_lines: 500
        log_level: INFO
    """

    hierarchy_separator: str = "/"
    max_output_lines: Optional[int] = None
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        """Normalize values coming from YAML or the environment."""
        if isinstance(self.log_level, str):
            self.log_level = self.log_level.upper()


def _parse_env_int(var_name: str) -> Optional[int]:
    """
    Safely parse an integer from an environment variable.

    Args:
        var_name: Name of the environment variable

    Returns:
        Parsed integer value, or None if the variable is not set

    Raises:
        ConfigurationError: If the value cannot be parsed as an integer
    """
    value = os.environ.get(var_name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(
            f"Environment variable {var_name} must be a valid integer, got: '{value}'"
        )


def _load_from_env() -> Dict[str, Any]:
    """
    Load configuration from environment variables.

    Supported environment variables:
    - GOTEST_REPORT_SEPARATOR: Separator between parent and subtest names
    - GOTEST_REPORT_MAX_OUTPUT_LINES: Per-test cap on captured output lines
    - GOTEST_REPORT_LOG_LEVEL: Logging level

    Returns:
        Dictionary of configuration values from environment

    Raises:
        ConfigurationError: If environment variable values are invalid
    """
    env_config: Dict[str, Any] = {}

    if "GOTEST_REPORT_SEPARATOR" in os.environ:
        env_config["hierarchy_separator"] = os.environ["GOTEST_REPORT_SEPARATOR"]

    max_lines = _parse_env_int("GOTEST_REPORT_MAX_OUTPUT_LINES")
    if max_lines is not None:
        if max_lines <= 0:
            raise ConfigurationError(
                "Environment variable GOTEST_REPORT_MAX_OUTPUT_LINES must be a positive "
                f"integer, got: {max_lines}"
            )
        env_config["max_output_lines"] = max_lines

    if "GOTEST_REPORT_LOG_LEVEL" in os.environ:
        env_config["log_level"] = os.environ["GOTEST_REPORT_LOG_LEVEL"]

    return env_config


def load_config(config_file: Optional[str] = None) -> AggregatorConfig:
    """
    Load configuration from file and environment variables.

    Configuration precedence (highest to lowest):
    1. Environment variables
    2. Configuration file
    3. Default values

    Args:
        config_file: Path to YAML configuration file (optional)

    Returns:
        AggregatorConfig object with merged configuration

    Raises:
        FileNotFoundError: If config_file is specified but doesn't exist
        ConfigurationError: If config file has invalid YAML or env vars are invalid
    """
    with _config_lock:
        config_data: Dict[str, Any] = {}

        if config_file:
            logger.info("Loading configuration from %s", config_file)
            try:
                with open(config_file, "r") as f:
                    file_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in config file '{config_file}': {e}")
            except FileNotFoundError:
                raise FileNotFoundError(f"Configuration file not found: {config_file}")
            except PermissionError:
                raise ConfigurationError(f"Permission denied reading config file '{config_file}'")
            except OSError as e:
                raise ConfigurationError(f"Unable to read config file '{config_file}': {e}")

            if not isinstance(file_config, dict):
                raise ConfigurationError(
                    f"Config file '{config_file}' must contain a mapping at the top level"
                )
            config_data.update(file_config)

        env_overrides = _load_from_env()
        config_data.update(env_overrides)
        if env_overrides:
            logger.debug("Applied environment variable overrides: %s", list(env_overrides.keys()))

        try:
            return AggregatorConfig(**config_data)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")


def validate_config(config: AggregatorConfig) -> List[str]:
    """
    Validate configuration and return list of errors.

    Args:
        config: AggregatorConfig to validate

    Returns:
        List of error messages (empty if valid)
    """
    errors: List[str] = []

    if not isinstance(config.hierarchy_separator, str) or not config.hierarchy_separator:
        errors.append("hierarchy_separator must be a non-empty string")

    if config.max_output_lines is not None:
        if isinstance(config.max_output_lines, bool) or not isinstance(
            config.max_output_lines, int
        ):
            errors.append(f"max_output_lines must be an integer: {config.max_output_lines!r}")
        elif config.max_output_lines <= 0:
            errors.append(f"max_output_lines must be positive: {config.max_output_lines}")

    if config.log_level not in VALID_LOG_LEVELS:
        errors.append(f"log_level must be one of {VALID_LOG_LEVELS}: {config.log_level}")

    return errors
