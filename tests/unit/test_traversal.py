"""
Unit tests for block traversal order.
"""

from irmatch.frontend.parser import parse_ir
from irmatch.ir.nodes import Graph, Kind
from irmatch.ir.traversal import walk_blocks, walk_nodes


NESTED = """
graph(%a, %cond):
  %b = aten::neg(%a)
  %r = prim::If(%cond)
    block0():
      %c = aten::exp(%a)
      %d = prim::Loop(%c)
        block0():
          %e = aten::relu(%c)
          -> (%e)
      -> (%d)
    block1():
      %f = aten::sin(%a)
      -> (%f)
  %g = aten::cos(%r)
  return (%g)
"""


def _kinds(nodes):
    return [str(n.kind) for n in nodes]


class TestWalkNodes:
    """Nodes of a block come in order; nested blocks are walked from a stack."""

    def test_order(self):
        g = parse_ir(NESTED)
        assert _kinds(walk_nodes(g.block)) == [
            "aten::neg", "prim::If", "aten::cos",  # root block
            "aten::sin",                          # If block1 (pushed last)
            "aten::exp", "prim::Loop",            # If block0
            "aten::relu",                         # Loop block0
        ]

    def test_every_node_visited_once(self):
        g = parse_ir(NESTED)
        nodes = list(walk_nodes(g.block))
        assert len(nodes) == len(set(nodes)) == 7

    def test_param_and_return_nodes_are_not_visited(self):
        g = parse_ir(NESTED)
        assert all(not n.kind.is_param and not n.kind.is_return for n in walk_nodes(g.block))

    def test_deep_nesting_does_not_recurse(self):
        g = Graph()
        depth = 1500
        x = g.add_input("x")
        block = g.block
        for _ in range(depth):
            node = block.append_node(Kind.parse("prim::Wrap"), [x])
            block = node.add_block()
        assert len(list(walk_nodes(g.block))) == depth
        assert len(list(walk_blocks(g.block))) == depth + 1


class TestWalkBlocks:

    def test_root_first(self):
        g = parse_ir(NESTED)
        blocks = list(walk_blocks(g.block))
        assert blocks[0] is g.block
        assert len(blocks) == 4
        owners = [b.owning_node.kind if b.owning_node is not None else None for b in blocks]
        assert [str(k) if k else None for k in owners] == [None, "prim::If", "prim::If", "prim::Loop"]

    def test_node_walk_follows_block_walk(self):
        g = parse_ir(NESTED)
        flattened = [n for b in walk_blocks(g.block) for n in b.nodes]
        assert list(walk_nodes(g.block)) == flattened
