"""
Source Location (Span)

Positions inside textual IR sources, attached to diagnostics.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SourceLocation:
    """
    Source location of a token or statement in a textual IR source.

    - File, line, column (1-based) plus optional end line/column
    - Code snippets are extracted from source files when needed (not stored here)
    - Immutable (frozen) for hashability
    """
    file: str
    line: int
    column: int
    end_line: int = 0
    end_column: int = 0

    def __str__(self) -> str:
        """Format as file:line:column"""
        return f"{self.file}:{self.line}:{self.column}"
