"""
Parsed (unresolved) form of the textual IR.

Value references are still names here; ``lowering.GraphBuilder`` resolves them
to ``Value`` objects and reports undefined or duplicate names.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..shared.source_location import SourceLocation


@dataclass
class ValueRef:
    name: str
    location: SourceLocation


@dataclass
class BlockSyntax:
    name: str
    params: List[ValueRef]
    body: List["StmtSyntax"]
    returns: List[ValueRef]
    location: SourceLocation


@dataclass
class CallSyntax:
    kind: str
    args: List[ValueRef]
    location: SourceLocation
    attributes: Dict[str, Any] = field(default_factory=dict)
    blocks: List[BlockSyntax] = field(default_factory=list)


@dataclass
class StmtSyntax:
    outputs: List[ValueRef]
    call: CallSyntax
    location: SourceLocation


@dataclass
class GraphSyntax:
    params: List[ValueRef]
    body: List[StmtSyntax]
    returns: List[ValueRef]
    location: SourceLocation
