"""
gotest-report: aggregate ``go test -json`` output into a tree of test results.
"""

from .aggregator import Aggregator, aggregate, clean_output_line, derive_duration, parent_of
from .config import AggregatorConfig, ConfigurationError, load_config, validate_config
from .events import iter_events, parse_event, parse_timestamp
from .exceptions import GoTestReportError, MalformedEventError, StreamReadError
from .models import EventAction, ResultSet, TestEvent, TestResultNode, TestStatus

__version__ = "0.1.0"

__all__ = [
    "Aggregator",
    "AggregatorConfig",
    "ConfigurationError",
    "EventAction",
    "GoTestReportError",
    "MalformedEventError",
    "ResultSet",
    "StreamReadError",
    "TestEvent",
    "TestResultNode",
    "TestStatus",
    "aggregate",
    "clean_output_line",
    "derive_duration",
    "iter_events",
    "load_config",
    "parent_of",
    "parse_event",
    "parse_timestamp",
    "validate_config",
]
