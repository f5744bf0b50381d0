"""
Error Reporting

Diagnostics for textual IR sources, and the exception hierarchy raised by
the parser and by the pattern matcher's precondition checks.

Diagnostics render in rustc style (plain form shown)::

    error[E0002]: use of undefined value `%x`
     --> pattern.ir:3:22
      |
    3 |   %c = aten::add(%b, %x)
      |                      ^^ not defined here
      |
      = help: values must be defined before use, in this block or an enclosing one
"""

import os
import sys
from dataclasses import dataclass
from typing import Dict, List, Optional

from .source_location import SourceLocation
from ..utils.config import COLOR_ENV_VAR, E_SYNTAX

_BOLD = "\033[1m"
_RED = "\033[31m"
_BLUE = "\033[34m"
_CYAN = "\033[36m"
_RESET = "\033[0m"


def _use_color() -> bool:
    """Color on a terminal unless NO_COLOR or IRMATCH_COLOR=0/false/no/never."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get(COLOR_ENV_VAR, "").lower() in ("0", "false", "no", "never"):
        return False
    return sys.stderr.isatty()


def _style(text: str, *codes: str, color: bool = True) -> str:
    if not color or not codes:
        return text
    return "".join(codes) + text + _RESET


@dataclass
class Error:
    """A single diagnostic: message, where it happened, and optional hints."""
    message: str
    location: Optional[SourceLocation]
    code: Optional[str] = None
    help: Optional[str] = None
    note: Optional[str] = None
    label: Optional[str] = None


def _format_diagnostic(error: Error, source_files: Dict[str, str], color: bool = False) -> str:
    loc = error.location
    source = source_files.get(loc.file) if loc is not None else None
    width = len(str(loc.line)) if source is not None else 1

    def gutter(text: str = "") -> str:
        return _style(" " * (width + 1) + "|" + text, _BOLD, _BLUE, color=color)

    code = f"[{error.code}]" if error.code else ""
    lines = [_style(f"error{code}", _BOLD, _RED, color=color)
             + _style(f": {error.message}", _BOLD, color=color)]
    where = str(loc) if loc is not None else "<unknown location>"
    lines.append(_style(" " * width + "--> ", _BOLD, _BLUE, color=color) + where)

    if source is not None:
        src_lines = source.split("\n")
        text = src_lines[loc.line - 1] if 0 < loc.line <= len(src_lines) else ""
        span = loc.end_column - loc.column if loc.end_line in (0, loc.line) else 0
        carets = " " * (max(loc.column, 1) - 1) + "^" * max(span, 1)
        label = f" {error.label}" if error.label else ""
        lines.append(gutter())
        lines.append(_style(f"{loc.line} | ", _BOLD, _BLUE, color=color) + text)
        lines.append(gutter(" ") + _style(carets + label, _BOLD, _RED, color=color))

    hints = [(kind, text) for kind, text in (("help", error.help), ("note", error.note)) if text]
    if hints:
        lines.append(gutter())
        for kind, text in hints:
            lines.append(_style(" " * (width + 1) + "= ", _BOLD, _CYAN, color=color)
                         + _style(f"{kind}: ", _BOLD, color=color) + text)
    return "\n".join(lines)


class ErrorReporter:
    """Collects diagnostics for a set of sources and renders them."""

    def __init__(self, source_files: Dict[str, str]):
        self.source_files = source_files
        self.errors: List[Error] = []

    def report_error(self, message: str, location: Optional[SourceLocation],
                     code: Optional[str] = None, help: Optional[str] = None,
                     note: Optional[str] = None, label: Optional[str] = None) -> None:
        self.errors.append(Error(message, location, code, help, note, label))

    def has_errors(self) -> bool:
        return bool(self.errors)

    def format_error(self, error: Error, color: Optional[bool] = None) -> str:
        return _format_diagnostic(error, self.source_files,
                                  color=_use_color() if color is None else color)

    def format_all_errors(self, color: Optional[bool] = None) -> str:
        """Every collected diagnostic followed by an "aborting due to" summary."""
        use_color = _use_color() if color is None else color
        count = len(self.errors)
        summary = (_style("error", _BOLD, _RED, color=use_color)
                   + _style(f": aborting due to {count} previous error{'s' if count != 1 else ''}",
                            _BOLD, color=use_color))
        return "\n\n".join([self.format_error(e, use_color) for e in self.errors] + [summary])


class IRMatchError(Exception):
    """Base exception for all irmatch errors"""
    def __init__(self, message: str, location: Optional[SourceLocation] = None):
        super().__init__(message)
        self.message = message
        self.location = location

    def __str__(self):
        if self.location:
            return f"{self.message} ({self.location})"
        return self.message


class IRSourceError(IRMatchError):
    """
    Error in a textual IR source, rendered as a rustc-style diagnostic.

    Carries the full list of diagnostics when several were collected
    (for example every undefined value in one graph).
    """
    def __init__(self,
                 message: str,
                 location: Optional[SourceLocation] = None,
                 error_code: str = E_SYNTAX,
                 source_code: Optional[str] = None,
                 help: Optional[str] = None,
                 errors: Optional[List[Error]] = None):
        super().__init__(message, location)
        self.error_code = error_code
        self.source_code = source_code
        self.errors: List[Error] = errors if errors is not None else [
            Error(message, location, error_code, help)
        ]

    @classmethod
    def from_reporter(cls, reporter: ErrorReporter) -> "IRSourceError":
        first = reporter.errors[0]
        source_code = None
        if first.location is not None:
            source_code = reporter.source_files.get(first.location.file)
        return cls(
            first.message,
            first.location,
            error_code=first.code or E_SYNTAX,
            source_code=source_code,
            help=first.help,
            errors=list(reporter.errors),
        )

    def render(self, color: bool = False) -> str:
        source_files: Dict[str, str] = {}
        if self.source_code is not None and self.location is not None:
            source_files[self.location.file] = self.source_code
        reporter = ErrorReporter(source_files)
        reporter.errors = list(self.errors)
        if len(self.errors) == 1:
            return reporter.format_error(self.errors[0], color=color)
        return reporter.format_all_errors(color=color)

    def __str__(self):
        return self.render(color=_use_color())


class InvalidPatternError(IRMatchError):
    """
    A pattern graph violates the matcher's structural preconditions.

    This is a bug in the pattern, not a property of the graph being searched;
    the matcher raises it before looking at any target node.
    """
    def __init__(self, message: str, error_code: str):
        super().__init__(message)
        self.error_code = error_code

    def __str__(self):
        return f"[{self.error_code}] {self.message}"
