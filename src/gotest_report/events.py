"""
Decoding of ``go test -json`` event lines.
"""

import io
import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, Optional, Union

from .exceptions import MalformedEventError, StreamReadError
from .models import TestEvent

logger = logging.getLogger(__name__)

# RFC3339 as written by Go's time.Time.MarshalJSON
_RFC3339_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})$"
)

_STRING_FIELDS = ("action", "test", "package", "output")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an RFC3339 timestamp.

    Fractional seconds of any precision are accepted and truncated to
    microseconds.

    Args:
        value: Raw JSON value of the ``Time`` field

    Returns:
        Timezone-aware datetime, or None if the value is null

    Raises:
        ValueError: If the value is not an RFC3339 timestamp string
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"Time must be an RFC3339 string, got {type(value).__name__}")

    match = _RFC3339_RE.match(value)
    if not match:
        raise ValueError(f"Time is not an RFC3339 timestamp: {value!r}")

    text = match.group("base")
    fraction = match.group("fraction")
    if fraction:
        text += "." + fraction[:6].ljust(6, "0")
    offset = match.group("offset")
    text += "+00:00" if offset in ("Z", "z") else offset

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def _fold_keys(record: Dict[str, Any]) -> Dict[str, Any]:
    """Lower-case keys; on a case collision the last key in the object wins."""
    return {key.lower(): value for key, value in record.items()}


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name} is not allowed")


def _decode(line: str) -> TestEvent:
    record = json.loads(line, parse_constant=_reject_constant)
    if not isinstance(record, dict):
        raise ValueError(f"expected a JSON object, got {type(record).__name__}")

    fields = _fold_keys(record)

    values: Dict[str, Any] = {}
    for name in _STRING_FIELDS:
        raw = fields.get(name)
        if raw is None:
            values[name] = ""
        elif isinstance(raw, str):
            values[name] = raw
        else:
            raise ValueError(f"{name.capitalize()} must be a string, got {type(raw).__name__}")

    elapsed = fields.get("elapsed")
    if elapsed is None:
        elapsed = 0.0
    elif isinstance(elapsed, bool) or not isinstance(elapsed, (int, float)):
        raise ValueError(f"Elapsed must be a number, got {type(elapsed).__name__}")

    return TestEvent(
        action=values["action"],
        time=parse_timestamp(fields.get("time")),
        test=values["test"],
        package=values["package"],
        output=values["output"],
        elapsed=float(elapsed),
    )


def parse_event(line: str, line_number: int = 1) -> TestEvent:
    """
    Decode one JSON-encoded test event.

    Args:
        line: A single line of ``go test -json`` output
        line_number: Position of the line in its stream, used in errors

    Returns:
        TestEvent decoded from the line

    Raises:
        MalformedEventError: If the line is not a valid test event
    """
    try:
        return _decode(line)
    except ValueError as e:
        # json.JSONDecodeError is a ValueError subclass
        raise MalformedEventError(line_number, line, e) from e


def iter_events(
    source: Union[str, bytes, Iterable[Union[str, bytes, TestEvent]]]
) -> Iterator[TestEvent]:
    """
    Yield test events from a stream of lines in arrival order.

    Blank and whitespace-only lines are skipped. Pre-parsed TestEvent
    values are passed through unchanged.

    Args:
        source: Text stream, whole document as str or bytes, iterable of
            lines, or iterable of TestEvent

    Yields:
        TestEvent objects

    Raises:
        MalformedEventError: If a non-blank line cannot be decoded
        StreamReadError: If the underlying stream fails while being read
    """
    # A whole document rather than a stream of lines
    if isinstance(source, str):
        source = io.StringIO(source)
    elif isinstance(source, bytes):
        source = io.BytesIO(source)

    line_number = 0
    iterator = iter(source)
    while True:
        try:
            item = next(iterator)
        except StopIteration:
            return
        except (OSError, UnicodeDecodeError) as e:
            raise StreamReadError(e, line_number) from e

        line_number += 1
        if isinstance(item, TestEvent):
            yield item
            continue
        if isinstance(item, bytes):
            try:
                item = item.decode("utf-8")
            except UnicodeDecodeError as e:
                raise StreamReadError(e, line_number) from e

        if not item.strip():
            logger.debug("Skipping blank line %d", line_number)
            continue
        yield parse_event(item, line_number)
