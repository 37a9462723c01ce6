"""Tests for custom exceptions."""

from gotest_report.exceptions import GoTestReportError, MalformedEventError, StreamReadError


class TestGoTestReportError:
    """Tests for base exception."""

    def test_is_exception(self):
        assert issubclass(GoTestReportError, Exception)

    def test_message(self):
        assert str(GoTestReportError("test error")) == "test error"


class TestMalformedEventError:
    """Tests for malformed event error."""

    def test_inherits_from_base(self):
        assert issubclass(MalformedEventError, GoTestReportError)

    def test_attributes(self):
        orig = ValueError("Expecting value")
        err = MalformedEventError(3, "garbage", orig)
        assert err.line_number == 3
        assert err.line == "garbage"
        assert err.original_error is orig
        assert "line 3" in str(err)
        assert "Expecting value" in str(err)

    def test_line_truncated(self):
        err = MalformedEventError(1, "x" * 500, ValueError("bad"))
        assert len(err.line) == 200

    def test_line_not_in_message(self):
        err = MalformedEventError(1, "captured-output-here", ValueError("bad"))
        assert "captured-output-here" not in str(err)

    def test_empty_line(self):
        assert MalformedEventError(1, "", ValueError("bad")).line == ""


class TestStreamReadError:
    """Tests for stream read error."""

    def test_inherits_from_base(self):
        assert issubclass(StreamReadError, GoTestReportError)

    def test_attributes(self):
        orig = OSError("connection reset")
        err = StreamReadError(orig, line_number=10)
        assert err.original_error is orig
        assert err.line_number == 10
        assert "after line 10" in str(err)
        assert "connection reset" in str(err)

    def test_without_line_number(self):
        err = StreamReadError(OSError("gone"))
        assert err.line_number is None
        assert "after line" not in str(err)
