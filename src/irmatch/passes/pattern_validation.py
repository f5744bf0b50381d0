"""
Pattern Validation

Structural preconditions a pattern graph must satisfy before it can be
searched for:

1. The pattern is flat: no node owns a child block.
2. The pattern describes exactly one value: its return node has one input.

A pattern that fails these checks is a bug in the pattern, not a property of
the graph being searched, so ``validate_pattern`` raises instead of returning
a recoverable result.

Known gap: nothing verifies that the pattern's nodes don't alias (for example
two pattern values standing for the same memory location). Such patterns are
accepted and may produce matches that a rewrite cannot apply soundly.
"""

import logging
from typing import Optional, Tuple

from ..ir.nodes import Graph
from ..shared.errors import InvalidPatternError
from ..utils.config import E_PATTERN_EXIT_ARITY, E_PATTERN_NESTED_BLOCK

logger = logging.getLogger("irmatch.passes.pattern_validation")


def _find_violation(pattern: Graph) -> Optional[Tuple[str, str]]:
    """Return ``(message, error_code)`` for the first failed check, or None."""
    for node in pattern.nodes:
        if node.blocks:
            return (
                f"pattern node {node.kind} owns {len(node.blocks)} block(s); "
                "patterns must consist of a single flat block",
                E_PATTERN_NESTED_BLOCK,
            )

    num_outputs = len(pattern.return_node.inputs)
    if num_outputs != 1:
        return (
            f"pattern returns {num_outputs} values; "
            "a pattern must return exactly one value",
            E_PATTERN_EXIT_ARITY,
        )
    return None


def pattern_graph_is_valid(pattern: Graph) -> bool:
    """True if ``pattern`` can be handed to the subgraph matcher."""
    return _find_violation(pattern) is None


def validate_pattern(pattern: Graph) -> None:
    """Raise ``InvalidPatternError`` describing the first failed check."""
    violation = _find_violation(pattern)
    if violation is not None:
        message, code = violation
        logger.debug(f"Rejected pattern: [{code}] {message}")
        raise InvalidPatternError(message, code)
