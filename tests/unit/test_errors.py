"""
Tests for diagnostics formatting and the exception hierarchy.
"""

import re

from irmatch.shared.errors import (
    Error,
    ErrorReporter,
    InvalidPatternError,
    IRMatchError,
    IRSourceError,
)
from irmatch.shared.source_location import SourceLocation

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")


def _strip_ansi(text: str) -> str:
    return _ANSI_ESCAPE.sub("", text)


class TestErrorReporterProblematic:
    """Problematic/edge cases for the error reporter formatter."""

    def test_location_none(self):
        err = Error(message="something failed", location=None, code="E0001")
        out = ErrorReporter({}).format_error(err, color=False)
        assert "error[E0001]" in out
        assert "something failed" in out
        assert "unknown location" in out

    def test_file_not_in_source_files(self):
        loc = SourceLocation(file="missing.ir", line=1, column=1)
        err = Error(message="oops", location=loc, code="E0002")
        out = ErrorReporter({}).format_error(err, color=False)
        assert "error[E0002]" in out
        assert "missing.ir:1:1" in out

    def test_line_beyond_source(self):
        loc = SourceLocation(file="x.ir", line=10, column=1)
        err = Error(message="bad", location=loc)
        out = ErrorReporter({"x.ir": "graph():\n  return ()\n"}).format_error(err, color=False)
        assert " --> x.ir:10:1" in out
        assert "10 | " in out

    def test_single_caret_without_end_column(self):
        loc = SourceLocation(file="f.ir", line=1, column=6)
        err = Error(message="type error", location=loc, label="here")
        out = ErrorReporter({"f.ir": "%a = aten::neg(%b)"}).format_error(err, color=False)
        assert "1 | %a = aten::neg(%b)" in out
        assert "  |      ^ here" in out

    def test_help_and_note(self):
        loc = SourceLocation(file="m.ir", line=1, column=1, end_line=1, end_column=3)
        err = Error(message="m", location=loc, help="try this", note="because")
        out = ErrorReporter({"m.ir": "%a"}).format_error(err, color=False)
        assert "= help: try this" in out
        assert "= note: because" in out


class TestErrorReporter:

    def test_collects_and_summarizes(self):
        reporter = ErrorReporter({})
        assert not reporter.has_errors()
        reporter.report_error("first", None, code="E0002")
        reporter.report_error("second", None, code="E0003")
        assert reporter.has_errors()
        out = reporter.format_all_errors(color=False)
        assert "first" in out and "second" in out
        assert "aborting due to 2 previous errors" in out

    def test_color_output(self):
        reporter = ErrorReporter({})
        reporter.report_error("colored", None, code="E0001")
        out = reporter.format_error(reporter.errors[0], color=True)
        assert "\x1b[" in out
        assert "colored" in _strip_ansi(out)


class TestExceptions:

    def test_hierarchy(self):
        assert issubclass(IRSourceError, IRMatchError)
        assert issubclass(InvalidPatternError, IRMatchError)

    def test_invalid_pattern_str(self):
        err = InvalidPatternError("pattern returns 2 values", "E0102")
        assert str(err) == "[E0102] pattern returns 2 values"
        assert err.error_code == "E0102"

    def test_base_str_with_location(self):
        err = IRMatchError("bad", SourceLocation(file="a.ir", line=3, column=4))
        assert str(err) == "bad (a.ir:3:4)"

    def test_source_error_renders_all_collected_errors(self):
        reporter = ErrorReporter({"a.ir": "graph():\n  return (%x, %y)\n"})
        reporter.report_error("use of undefined value `%x`", SourceLocation("a.ir", 2, 11), code="E0002")
        reporter.report_error("use of undefined value `%y`", SourceLocation("a.ir", 2, 15), code="E0002")
        err = IRSourceError.from_reporter(reporter)
        assert err.location.column == 11
        assert err.error_code == "E0002"
        text = err.render(color=False)
        assert "`%x`" in text and "`%y`" in text
        assert "aborting due to 2 previous errors" in text
