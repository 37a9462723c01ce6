"""
Custom exceptions for gotest-report.
"""

from typing import Optional


class GoTestReportError(Exception):
    """Base exception for gotest-report errors."""

    pass


class MalformedEventError(GoTestReportError):
    """Raised when a line of the event stream cannot be decoded into a TestEvent."""

    def __init__(self, line_number: int, line: str, original_error: Exception):
        self.line_number = line_number
        # Event lines can carry megabytes of captured output
        self.line = line[:200] if line else ""
        self.original_error = original_error
        super().__init__(f"Malformed test event on line {line_number}: {original_error}")


class StreamReadError(GoTestReportError):
    """Raised when the event stream cannot be read to the end."""

    def __init__(self, original_error: Exception, line_number: Optional[int] = None):
        self.original_error = original_error
        self.line_number = line_number
        location = f" after line {line_number}" if line_number else ""
        super().__init__(f"Failed to read test event stream{location}: {original_error}")
