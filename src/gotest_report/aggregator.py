"""
Aggregation of ``go test -json`` events into a tree of test results.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Union

from .config import AggregatorConfig
from .events import iter_events
from .models import (
    LIFECYCLE_ACTIONS,
    EventAction,
    ResultSet,
    TestEvent,
    TestResultNode,
    TestStatus,
)

logger = logging.getLogger(__name__)

_TERMINAL_STATUSES = {
    EventAction.PASS.value: TestStatus.PASS,
    EventAction.FAIL.value: TestStatus.FAIL,
}


def parent_of(name: str, separator: str = "/") -> Optional[str]:
    """Return the name truncated before its last separator, or None for root tests."""
    index = name.rfind(separator)
    # A leading separator does not name a parent
    if index <= 0:
        return None
    return name[:index]


def derive_duration(
    elapsed: float, start_time: Optional[datetime], end_time: Optional[datetime]
) -> float:
    """
    Work out how long a test ran.

    The elapsed time reported by ``go test`` wins when positive. Otherwise
    the gap between the last ``run`` event and the terminal event is used,
    provided both timestamps are known.

    Args:
        elapsed: Elapsed seconds carried by the pass/fail event
        start_time: Time of the most recent run event, if any
        end_time: Time of the pass/fail event, if any

    Returns:
        Duration in seconds, never negative
    """
    if elapsed > 0:
        return elapsed
    if start_time is not None and end_time is not None:
        return max((end_time - start_time).total_seconds(), 0.0)
    return 0.0


def clean_output_line(text: str) -> Optional[str]:
    """Strip one trailing newline; return None if nothing is left."""
    if text.endswith("\n"):
        text = text[:-1]
    return text or None


class Aggregator:
    """Folds a sequence of test events into a ResultSet.

    One instance serves one aggregation: it owns the node map, the last
    start time per test and the captured output per test.
    """

    def __init__(self, config: Optional[AggregatorConfig] = None):
        self.config = config or AggregatorConfig()
        self._nodes: Dict[str, TestResultNode] = {}
        self._start_times: Dict[str, datetime] = {}
        self._output: Dict[str, List[str]] = {}
        self._truncated: Dict[str, int] = {}

    def feed(self, event: TestEvent) -> None:
        """Apply one event to the aggregation state."""
        name = event.test
        if not name:
            return

        action = event.action
        if action in LIFECYCLE_ACTIONS:
            self._ensure_node(name, event.package)

        if action == EventAction.RUN.value:
            if event.time is not None:
                self._start_times[name] = event.time
            else:
                self._start_times.pop(name, None)
        elif action in _TERMINAL_STATUSES:
            node = self._nodes[name]
            if node.status is not TestStatus.UNKNOWN:
                logger.debug(
                    "Test %s reported %s after %s; keeping the latest",
                    name,
                    action,
                    node.status.value,
                )
            node.status = _TERMINAL_STATUSES[action]
            node.duration = derive_duration(
                event.elapsed, self._start_times.get(name), event.time
            )
        elif action == EventAction.SKIP.value:
            self._nodes[name].status = TestStatus.SKIP
        elif action == EventAction.OUTPUT.value:
            self._capture_output(name, event.output)

    def _ensure_node(self, name: str, package: str) -> TestResultNode:
        node = self._nodes.get(name)
        if node is not None:
            return node

        separator = self.config.hierarchy_separator
        parent = parent_of(name, separator)
        node = TestResultNode(name=name, package=package, parent=parent)
        self._nodes[name] = node

        if parent is not None:
            parent_node = self._nodes.get(parent)
            if parent_node is None:
                # Only the immediate parent is synthesized; it is not linked upwards
                logger.debug("Synthesizing parent %s for subtest %s", parent, name)
                parent_node = TestResultNode(
                    name=parent, package=package, parent=parent_of(parent, separator)
                )
                self._nodes[parent] = parent_node
            parent_node.subtests.append(name)
        return node

    def _capture_output(self, name: str, text: str) -> None:
        line = clean_output_line(text)
        if line is None:
            return
        buffer = self._output.setdefault(name, [])
        limit = self.config.max_output_lines
        if limit is not None and len(buffer) >= limit:
            self._truncated[name] = self._truncated.get(name, 0) + 1
            return
        buffer.append(line)

    def finalize(self) -> ResultSet:
        """
        Attach captured output and compute roll-up counters.

        Returns:
            ResultSet covering every test seen so far
        """
        for name, lines in self._output.items():
            node = self._nodes.get(name)
            if node is None:
                logger.debug("Dropping %d output lines for unseen test %s", len(lines), name)
                continue
            node.output = lines
            node.truncated_output_lines = self._truncated.get(name, 0)

        nodes = {name: self._nodes[name] for name in sorted(self._nodes)}
        roots = [node for node in nodes.values() if not node.is_subtest]

        result_set = ResultSet(
            total_tests=len(roots),
            passed_tests=sum(1 for n in roots if n.status == TestStatus.PASS),
            failed_tests=sum(1 for n in roots if n.status == TestStatus.FAIL),
            skipped_tests=sum(1 for n in roots if n.status == TestStatus.SKIP),
            total_duration=sum(n.duration for n in roots),
            nodes=nodes,
            sorted_root_names=[n.name for n in roots],
        )

        logger.info(
            "Aggregated %d tests (%d subtests): %d passed, %d failed, %d skipped",
            result_set.total_tests,
            len(nodes) - len(roots),
            result_set.passed_tests,
            result_set.failed_tests,
            result_set.skipped_tests,
        )
        return result_set


def aggregate(
    event_stream: Union[str, bytes, Iterable[Union[str, bytes, TestEvent]]],
    config: Optional[AggregatorConfig] = None,
) -> ResultSet:
    """
    Aggregate a ``go test -json`` stream into a ResultSet.

    Args:
        event_stream: Text stream, whole document, iterable of JSON lines,
            or iterable of TestEvent
        config: Aggregation settings (defaults apply when omitted)

    Returns:
        ResultSet with every test node and the root-level counters

    Raises:
        MalformedEventError: If a non-blank line is not a valid event
        StreamReadError: If the stream cannot be read to the end
    """
    aggregator = Aggregator(config)
    for event in iter_events(event_stream):
        aggregator.feed(event)
    return aggregator.finalize()
