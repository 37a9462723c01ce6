"""
Data models for gotest-report.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class TestStatus(Enum):
    """Terminal status of a test as observed in the event stream."""

    UNKNOWN = "UNKNOWN"
    PASS = "PASS"
    FAIL = "FAIL"
    SKIP = "SKIP"


class EventAction(Enum):
    """Actions emitted by ``go test -json``."""

    RUN = "run"
    PAUSE = "pause"
    CONT = "cont"
    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"
    OUTPUT = "output"
    BENCH = "bench"


# Actions that create a node on first sight of a test name
LIFECYCLE_ACTIONS = frozenset(
    {
        EventAction.RUN.value,
        EventAction.PASS.value,
        EventAction.FAIL.value,
        EventAction.SKIP.value,
    }
)


@dataclass(frozen=True)
class TestEvent:
    """A single record from the ``go test -json`` stream."""

    action: str
    time: Optional[datetime] = None
    test: str = ""
    package: str = ""
    output: str = ""
    elapsed: float = 0.0

    @property
    def is_package_event(self) -> bool:
        """Return True for events that are not scoped to a test."""
        return not self.test


@dataclass
class TestResultNode:
    """Aggregated result of one test or subtest."""

    name: str
    package: str = ""
    status: TestStatus = TestStatus.UNKNOWN
    duration: float = 0.0
    output: List[str] = field(default_factory=list)
    parent: Optional[str] = None
    subtests: List[str] = field(default_factory=list)
    truncated_output_lines: int = 0

    @property
    def is_subtest(self) -> bool:
        """Return True if this node is attributed to a parent test."""
        return self.parent is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "package": self.package,
            "status": self.status.value,
            "duration": self.duration,
            "output": list(self.output),
            "parent": self.parent,
            "subtests": list(self.subtests),
            "truncated_output_lines": self.truncated_output_lines,
        }


@dataclass
class ResultSet:
    """Finalized aggregation of an event stream.

    Counters cover root tests only; subtests are reachable through
    ``nodes`` and each parent's ``subtests`` list.
    """

    total_tests: int
    passed_tests: int
    failed_tests: int
    skipped_tests: int
    total_duration: float
    nodes: Dict[str, TestResultNode] = field(default_factory=dict)
    sorted_root_names: List[str] = field(default_factory=list)

    @property
    def unknown_tests(self) -> int:
        """Root tests that never received a pass, fail or skip event."""
        return self.total_tests - self.passed_tests - self.failed_tests - self.skipped_tests

    @property
    def success(self) -> bool:
        """Return True if no root test failed."""
        return self.failed_tests == 0

    def root_nodes(self) -> List[TestResultNode]:
        """Return root nodes in lexicographic name order."""
        return [self.nodes[name] for name in self.sorted_root_names]

    def subtests_of(self, name: str) -> List[TestResultNode]:
        """
        Return the direct subtests of a node in discovery order.

        Args:
            name: Full name of the parent test

        Returns:
            List of child TestResultNode objects

        Raises:
            KeyError: If no node with that name exists
        """
        return [self.nodes[child] for child in self.nodes[name].subtests]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": {
                "total_tests": self.total_tests,
                "passed_tests": self.passed_tests,
                "failed_tests": self.failed_tests,
                "skipped_tests": self.skipped_tests,
                "unknown_tests": self.unknown_tests,
                "total_duration": self.total_duration,
                "success": self.success,
            },
            "sorted_root_names": list(self.sorted_root_names),
            "nodes": {name: node.to_dict() for name, node in self.nodes.items()},
        }
