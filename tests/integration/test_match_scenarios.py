"""
End-to-end searches over parsed target graphs, including nested regions.
"""

import pytest

from irmatch import find_pattern_matches, parse_ir
from irmatch.ir.traversal import walk_nodes


pytestmark = pytest.mark.integration


def _check_structure(match):
    """Every paired node agrees with its image on kind, arity and wiring."""
    for pn, tn in match.nodes_map.items():
        assert pn.kind == tn.kind
        assert len(pn.inputs) == len(tn.inputs)
        assert len(pn.outputs) == len(tn.outputs)
        assert tn.owning_block is match.anchor.owning_block
        for pv, tv in zip(pn.inputs, tn.inputs):
            assert match.values_map[pv] is tv
        for pv, tv in zip(pn.outputs, tn.outputs):
            assert match.values_map[pv] is tv


class TestDisjointCopies:

    def test_two_copies_give_two_matches(self, mul_add_pattern):
        target = parse_ir("""
        graph(%a, %b, %c, %d, %e, %f):
          %g = aten::mul(%a, %b)
          %h = aten::add(%g, %c)
          %i = aten::mul(%d, %e)
          %j = aten::add(%i, %f)
          return (%h, %j)
        """)
        matches = find_pattern_matches(mul_add_pattern, target)
        mul1, add1, mul2, add2 = target.nodes
        assert [m.anchor for m in matches] == [add1, add2]

        first, second = (set(m.nodes_map.values()) for m in matches)
        assert first == {mul1, add1}
        assert second == {mul2, add2}
        assert not first & second
        for m in matches:
            _check_structure(m)

    def test_results_do_not_depend_on_previous_searches(self, mul_add_pattern):
        target = parse_ir("""
        graph(%a, %b, %c):
          %d = aten::mul(%a, %b)
          %e = aten::add(%d, %c)
          return (%e)
        """)
        once = find_pattern_matches(mul_add_pattern, target)
        twice = find_pattern_matches(mul_add_pattern, target)
        assert [m.anchor for m in once] == [m.anchor for m in twice]
        assert [dict(m.nodes_map) for m in once] == [dict(m.nodes_map) for m in twice]
        assert [dict(m.values_map) for m in once] == [dict(m.values_map) for m in twice]


class TestNestedRegions:

    def test_copy_inside_a_block_is_found(self, mul_add_pattern):
        target = parse_ir("""
        graph(%a, %b, %c, %cond):
          %d = aten::mul(%a, %b)
          %e = aten::add(%d, %c)
          %r = prim::If(%cond)
            block0():
              %f = aten::mul(%e, %b)
              %g = aten::add(%f, %a)
              -> (%g)
            block1():
              -> (%e)
          return (%r)
        """)
        matches = find_pattern_matches(mul_add_pattern, target)
        top_mul, top_add, if_node = target.nodes
        inner_mul, inner_add = if_node.blocks[0].nodes
        assert [m.anchor for m in matches] == [top_add, inner_add]

        assert set(matches[0].nodes_map.values()) == {top_mul, top_add}
        assert set(matches[1].nodes_map.values()) == {inner_mul, inner_add}
        for m in matches:
            _check_structure(m)
        # The inner copy consumes %e from the enclosing block through a pattern input
        px = mul_add_pattern.inputs[0]
        assert matches[1].values_map[px] is top_add.output()

    def test_chain_crossing_a_block_boundary_is_not_matched(self, mul_add_pattern):
        target = parse_ir("""
        graph(%a, %b, %c, %cond):
          %d = aten::mul(%a, %b)
          %r = prim::If(%cond)
            block0():
              %e = aten::add(%d, %c)
              -> (%e)
            block1():
              -> (%c)
          return (%r)
        """)
        assert find_pattern_matches(mul_add_pattern, target) == []

    def test_every_node_is_tried_once(self, mul_add_pattern):
        from irmatch import SubgraphMatcher

        target = parse_ir("""
        graph(%a, %cond):
          %r = prim::If(%cond)
            block0():
              %s = prim::Loop(%a)
                block0(%i):
                  %t = aten::neg(%i)
                  -> (%t)
              -> (%s)
            block1():
              -> (%a)
          return (%r)
        """)
        matcher = SubgraphMatcher(mul_add_pattern)
        assert matcher.find_matches(target) == []
        assert matcher.stats.anchors_tried == len(list(walk_nodes(target.block))) == 3


class TestDiamond:

    def test_shared_producer_inside_loop_body(self, diamond_pattern):
        target = parse_ir("""
        graph(%in):
          %out = prim::Loop(%in)
            block0(%x):
              %a = aten::relu(%x)
              %b = aten::neg(%a)
              %c = aten::exp(%a)
              %d = aten::add(%b, %c)
              -> (%d)
          return (%out)
        """)
        (match,) = find_pattern_matches(diamond_pattern, target)
        (loop,) = target.nodes
        body = loop.blocks[0]
        assert match.anchor is body.nodes[-1]
        assert set(match.nodes_map.values()) == set(body.nodes)
        assert match.values_map[diamond_pattern.inputs[0]] is body.inputs[0]
        _check_structure(match)
