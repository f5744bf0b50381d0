"""
irmatch: find occurrences of a small pattern graph inside a larger IR graph.
"""

from .frontend.parser import parse_ir, parse_ir_file
from .ir.nodes import PARAM, RETURN, Block, Graph, Kind, Node, Use, Value
from .passes.pattern_validation import pattern_graph_is_valid, validate_pattern
from .passes.subgraph_matcher import Match, MatchStats, SubgraphMatcher, find_pattern_matches
from .shared.errors import InvalidPatternError, IRMatchError, IRSourceError

__all__ = [
    "parse_ir", "parse_ir_file",
    "PARAM", "RETURN", "Block", "Graph", "Kind", "Node", "Use", "Value",
    "pattern_graph_is_valid", "validate_pattern",
    "Match", "MatchStats", "SubgraphMatcher", "find_pattern_matches",
    "InvalidPatternError", "IRMatchError", "IRSourceError",
]
