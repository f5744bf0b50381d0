"""
Subgraph Matching

Finds every place a single-output pattern graph occurs in a target graph.

Every node of the target graph, including nodes of nested blocks, is tried
as the *anchor*: the node that must correspond to the producer of the
pattern's returned value. From there the comparison walks backward through
producers (and sideways through the outputs of matched nodes), pairing each
pattern node and value with exactly one target node and value. There is no
search over alternative pairings: the walk is fixed, and the first mismatch
ends the attempt.

Rules applied during the walk:

- A pattern node of kind ``prim::Param`` (a pattern input) matches any
  target node; its own inputs and outputs are never compared.
- Matched target nodes must live in the anchor's block.
- Nodes must agree on kind and on the number of inputs and outputs.
- Values must agree on their number of uses, except for values produced by
  the anchor (which may feed code outside the match) and values produced by a
  pattern input (whose fan-out in the pattern says nothing about the target).
- Pairings are recorded before recursing, so revisits (diamonds, cycles) are
  answered by a consistency check instead of a second walk.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from .pattern_validation import validate_pattern
from ..ir.nodes import Graph, Node, Value
from ..ir.traversal import walk_nodes

logger = logging.getLogger("irmatch.passes.subgraph_matcher")


@dataclass(frozen=True)
class Match:
    """
    One occurrence of a pattern: the anchor plus the full correspondence
    (pattern node -> target node, pattern value -> target value) recorded
    while matching it. Pattern inputs appear in ``values_map`` only.
    """
    anchor: Node
    nodes_map: Mapping[Node, Node] = field(hash=False)
    values_map: Mapping[Value, Value] = field(hash=False)


@dataclass
class MatchStats:
    """Counters accumulated by a ``SubgraphMatcher`` across searches."""
    anchors_tried: int = 0
    nodes_compared: int = 0
    values_compared: int = 0
    matches_found: int = 0

    def reset(self) -> None:
        self.anchors_tried = 0
        self.nodes_compared = 0
        self.values_compared = 0
        self.matches_found = 0


class _AnchorAttempt:
    """
    Comparator state for a single anchor.

    Created fresh for every anchor and dropped afterwards, so pairings can't
    leak from one attempt into the next. Both maps are keyed by the pattern
    entity's ``unique`` id and hold ``(pattern, target)`` pairs.
    """
    __slots__ = ('anchor', 'stats', '_nodes', '_values')

    def __init__(self, anchor: Node, stats: MatchStats):
        self.anchor = anchor
        self.stats = stats
        self._nodes: Dict[int, Tuple[Node, Node]] = {}
        self._values: Dict[int, Tuple[Value, Value]] = {}

    def match_value(self, pv: Value, tv: Value) -> bool:
        self.stats.values_compared += 1
        recorded = self._values.get(pv.unique)
        if recorded is not None:
            return recorded[1] is tv

        # Fan-out may differ where the match borders the rest of the graph:
        # values leaving through the anchor and values entering through a pattern input.
        if (pv.use_count != tv.use_count
                and tv.node is not self.anchor
                and not pv.node.kind.is_param):
            return False

        self._values[pv.unique] = (pv, tv)
        return self.match_node(pv.node, tv.node)

    def match_node(self, pn: Node, tn: Node) -> bool:
        self.stats.nodes_compared += 1
        recorded = self._nodes.get(pn.unique)
        if recorded is not None:
            return recorded[1] is tn

        if pn.kind.is_param:
            return True

        if tn.owning_block is not self.anchor.owning_block:
            return False

        if (pn.kind != tn.kind
                or len(pn.outputs) != len(tn.outputs)
                or len(pn.inputs) != len(tn.inputs)):
            return False

        self._nodes[pn.unique] = (pn, tn)
        for pv, tv in zip(pn.outputs, tn.outputs):
            if not self.match_value(pv, tv):
                return False
        for pv, tv in zip(pn.inputs, tn.inputs):
            if not self.match_value(pv, tv):
                return False
        return True

    def to_match(self) -> Match:
        return Match(
            anchor=self.anchor,
            nodes_map=MappingProxyType({pn: tn for pn, tn in self._nodes.values()}),
            values_map=MappingProxyType({pv: tv for pv, tv in self._values.values()}),
        )


class SubgraphMatcher:
    """
    Searches target graphs for one pattern.

    The pattern is validated once, on construction; an invalid pattern raises
    ``InvalidPatternError`` before any target node is looked at. The matcher
    holds no per-anchor state between calls, only the ``stats`` counters.
    """

    def __init__(self, pattern: Graph):
        validate_pattern(pattern)
        self.pattern = pattern
        self.exit_producer: Node = pattern.return_node.input().node
        self.stats = MatchStats()

    def match_anchor(self, anchor: Node) -> Optional[Match]:
        """Match the pattern with its returned value produced by ``anchor``."""
        self.stats.anchors_tried += 1
        attempt = _AnchorAttempt(anchor, self.stats)
        if not attempt.match_node(self.exit_producer, anchor):
            return None
        self.stats.matches_found += 1
        return attempt.to_match()

    def find_matches(self, graph: Graph) -> List[Match]:
        """
        Try every node of ``graph`` (nested blocks included) as the anchor.

        Results follow anchor visitation order: nodes of a block in block
        order, with nested blocks walked from an explicit stack.
        """
        logger.debug(f"Searching for pattern ending in {self.exit_producer.kind} "
                     f"in graph with {len(graph.nodes)} top-level nodes")
        matches: List[Match] = []
        for node in walk_nodes(graph.block):
            match = self.match_anchor(node)
            if match is not None:
                logger.debug(f"Matched at anchor {node!r}")
                matches.append(match)
        logger.debug(f"Found {len(matches)} match(es); running totals: {self.stats}")
        return matches


def find_pattern_matches(pattern: Graph, graph: Graph) -> List[Match]:
    """Find every occurrence of ``pattern`` in ``graph``, one per anchor node."""
    return SubgraphMatcher(pattern).find_matches(graph)
