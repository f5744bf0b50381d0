"""
IR Printer
==========

Renders a graph in the textual IR format accepted by ``irmatch.frontend.parser``::

    graph(%a, %b):
      %c = aten::mul(%a, %b)
      return (%c)

Output is deterministic, so printed graphs double as test fixtures and as
readable log output. Unnamed values print as their ``unique`` id; value names
are never all digits, so the two can't collide.
"""

import json
from typing import Any, Iterable, List

from .nodes import Block, Graph, Node, Value
from ..utils.config import BLOCK_PREFIX, GRAPH_KEYWORD, INDENT, VALUE_SIGIL


def format_value(value: Value) -> str:
    return f"{VALUE_SIGIL}{value.display_name}"


def _format_values(values: Iterable[Value]) -> str:
    return ", ".join(format_value(v) for v in values)


def _format_attribute(value: Any) -> str:
    if isinstance(value, str):
        return json.dumps(value)
    return repr(value)


def format_node(node: Node) -> str:
    """Single-line rendering of a node, without its blocks."""
    parts: List[str] = []
    if node.outputs:
        parts.append(f"{_format_values(node.outputs)} = ")
    parts.append(str(node.kind))
    if node.attributes:
        attrs = ", ".join(f"{k}={_format_attribute(v)}" for k, v in node.attributes.items())
        parts.append(f"[{attrs}]")
    parts.append(f"({_format_values(node.inputs)})")
    return "".join(parts)


def _print_block_body(block: Block, depth: int, out: List[str]) -> None:
    for node in block.nodes:
        out.append(f"{INDENT * depth}{format_node(node)}")
        for i, sub in enumerate(node.blocks):
            out.append(f"{INDENT * (depth + 1)}{BLOCK_PREFIX}{i}({_format_values(sub.inputs)}):")
            _print_block_body(sub, depth + 2, out)
            out.append(f"{INDENT * (depth + 2)}-> ({_format_values(sub.outputs)})")


def print_graph(graph: Graph) -> str:
    """Render ``graph`` as text, one statement per line."""
    out = [f"{GRAPH_KEYWORD}({_format_values(graph.inputs)}):"]
    _print_block_body(graph.block, 1, out)
    out.append(f"{INDENT}return ({_format_values(graph.outputs)})")
    return "\n".join(out) + "\n"
