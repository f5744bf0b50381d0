"""
Lowering of parsed IR syntax into ``Graph`` objects.

Names are resolved through a stack of scopes: a block sees the values of
every enclosing block defined before the node that owns it, and nothing
defined inside a block is visible after it. Value names are unique across
the whole graph.
"""

import logging
from contextlib import contextmanager
from typing import Dict, List, Optional

from .syntax import BlockSyntax, GraphSyntax, StmtSyntax, ValueRef
from ..ir.nodes import Block, Graph, Kind, Value
from ..shared.errors import ErrorReporter, IRSourceError
from ..utils.config import E_DUPLICATE_VALUE, E_UNDEFINED_VALUE

logger = logging.getLogger("irmatch.frontend.lowering")


class GraphBuilder:
    """
    Builds a ``Graph`` from a ``GraphSyntax``, collecting every name error.

    Raises ``IRSourceError`` listing all collected diagnostics if any name
    could not be resolved or was defined twice.
    """

    def __init__(self, reporter: ErrorReporter):
        self.reporter = reporter
        self._scope_stack: List[Dict[str, Value]] = [{}]
        self._defined: Dict[str, ValueRef] = {}

    @contextmanager
    def scope(self):
        """Context manager for entering/exiting a block scope."""
        self._scope_stack.append({})
        try:
            yield
        finally:
            self._scope_stack.pop()

    def _define(self, ref: ValueRef, value: Value) -> None:
        previous = self._defined.get(ref.name)
        if previous is not None:
            self.reporter.report_error(
                f"value `%{ref.name}` is defined more than once",
                ref.location,
                code=E_DUPLICATE_VALUE,
                label="redefined here",
                note=f"first definition at {previous.location}",
            )
        self._defined[ref.name] = ref
        # `%4` is how an unnamed value prints; it stays unnamed
        if not ref.name.isdigit():
            value.debug_name = ref.name
        self._scope_stack[-1][ref.name] = value

    def _lookup(self, ref: ValueRef) -> Optional[Value]:
        for scope in reversed(self._scope_stack):
            if ref.name in scope:
                return scope[ref.name]
        self.reporter.report_error(
            f"use of undefined value `%{ref.name}`",
            ref.location,
            code=E_UNDEFINED_VALUE,
            label="not defined here",
            help="values must be defined before use, in this block or an enclosing one",
        )
        return None

    def _resolve_all(self, refs: List[ValueRef]) -> List[Value]:
        values = [self._lookup(ref) for ref in refs]
        return [v for v in values if v is not None]

    def build(self, syntax: GraphSyntax) -> Graph:
        graph = Graph()
        for ref in syntax.params:
            self._define(ref, graph.add_input())
        self._lower_body(graph.block, syntax.body)
        for value in self._resolve_all(syntax.returns):
            graph.register_output(value)

        if self.reporter.has_errors():
            logger.debug(f"Lowering failed with {len(self.reporter.errors)} error(s)")
            raise IRSourceError.from_reporter(self.reporter)
        return graph

    def _lower_body(self, block: Block, body: List[StmtSyntax]) -> None:
        for stmt in body:
            self._lower_stmt(block, stmt)

    def _lower_stmt(self, block: Block, stmt: StmtSyntax) -> None:
        call = stmt.call
        node = block.append_node(
            Kind.parse(call.kind),
            self._resolve_all(call.args),
            num_outputs=len(stmt.outputs),
            attributes=call.attributes,
        )
        for sub_syntax in call.blocks:
            self._lower_block(node.add_block(), sub_syntax)
        # Outputs become visible only after the node, never inside its own blocks
        for ref, value in zip(stmt.outputs, node.outputs):
            self._define(ref, value)

    def _lower_block(self, block: Block, syntax: BlockSyntax) -> None:
        with self.scope():
            for ref in syntax.params:
                self._define(ref, block.add_input())
            self._lower_body(block, syntax.body)
            for value in self._resolve_all(syntax.returns):
                block.register_output(value)
