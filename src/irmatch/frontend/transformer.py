"""
IR Transformer
Converts the Lark parse tree of a textual IR source into ``frontend.syntax`` nodes.
"""

import ast
import math
from typing import Any, Dict, List, Tuple

from lark import Transformer, v_args
from lark.lexer import Token

from .syntax import BlockSyntax, CallSyntax, GraphSyntax, StmtSyntax, ValueRef
from ..shared.errors import IRSourceError
from ..shared.source_location import SourceLocation
from ..utils.config import E_ATTRIBUTE


@v_args(inline=True, meta=True)
class IRTransformer(Transformer):
    """
    Bottom-up transformer from parse tree to syntax nodes.

    ``current_file`` must be set by the parser before use; it is stamped on
    every source location.
    """

    def __init__(self) -> None:
        super().__init__()
        self.current_file: str = ""

    def _token_location(self, token: Token) -> SourceLocation:
        return SourceLocation(
            file=self.current_file,
            line=token.line,
            column=token.column,
            end_line=token.end_line or 0,
            end_column=token.end_column or 0,
        )

    def _meta_location(self, meta) -> SourceLocation:
        if meta is None or getattr(meta, "empty", True):
            return SourceLocation(file=self.current_file, line=0, column=0)
        return SourceLocation(
            file=self.current_file,
            line=meta.line,
            column=meta.column,
            end_line=meta.end_line,
            end_column=meta.end_column,
        )

    # ---- values ------------------------------------------------------------

    def value_list(self, meta, *tokens: Token) -> List[ValueRef]:
        return [ValueRef(str(tok)[1:], self._token_location(tok)) for tok in tokens]

    def _optional_values(self, children: Tuple[Any, ...]) -> List[ValueRef]:
        return children[0] if children else []

    def graph_params(self, meta, *children) -> List[ValueRef]:
        return self._optional_values(children)

    def return_stmt(self, meta, *children) -> List[ValueRef]:
        return self._optional_values(children)

    def call_args(self, meta, *children) -> List[ValueRef]:
        return self._optional_values(children)

    def block_params(self, meta, *children) -> List[ValueRef]:
        return self._optional_values(children)

    def block_returns(self, meta, *children) -> List[ValueRef]:
        return self._optional_values(children)

    # ---- attributes --------------------------------------------------------

    def int_lit(self, meta, token: Token) -> int:
        return int(token)

    def float_lit(self, meta, token: Token) -> float:
        value = float(token)
        if not math.isfinite(value):
            raise IRSourceError(
                f"float literal `{token}` is out of range",
                self._token_location(token),
                error_code=E_ATTRIBUTE,
            )
        return value

    def string_lit(self, meta, token: Token) -> str:
        return ast.literal_eval(str(token))

    def attribute(self, meta, name: Token, value: Any) -> Tuple[Token, Any]:
        return name, value

    def attributes(self, meta, *items: Tuple[Token, Any]) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for name, value in items:
            key = str(name)
            if key in result:
                raise IRSourceError(
                    f"attribute `{key}` specified more than once",
                    self._token_location(name),
                    error_code=E_ATTRIBUTE,
                )
            result[key] = value
        return result

    # ---- statements --------------------------------------------------------

    def call(self, meta, kind: Token, *rest) -> CallSyntax:
        call = CallSyntax(kind=str(kind), args=[], location=self._token_location(kind))
        for child in rest:
            if isinstance(child, dict):
                call.attributes = child
            elif isinstance(child, list):
                call.args = child
            else:
                call.blocks.append(child)
        return call

    def assign(self, meta, outputs: List[ValueRef], call: CallSyntax) -> StmtSyntax:
        return StmtSyntax(outputs=outputs, call=call, location=self._meta_location(meta))

    def effect(self, meta, call: CallSyntax) -> StmtSyntax:
        return StmtSyntax(outputs=[], call=call, location=self._meta_location(meta))

    def block(self, meta, name: Token, params: List[ValueRef], *rest) -> BlockSyntax:
        return BlockSyntax(
            name=str(name),
            params=params,
            body=list(rest[:-1]),
            returns=rest[-1],
            location=self._token_location(name),
        )

    def graph(self, meta, params: List[ValueRef], *rest) -> GraphSyntax:
        return GraphSyntax(
            params=params,
            body=list(rest[:-1]),
            returns=rest[-1],
            location=self._meta_location(meta),
        )
