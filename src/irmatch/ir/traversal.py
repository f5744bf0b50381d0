"""
Block traversal helpers.

Walks are driven by an explicit stack of blocks rather than native recursion,
so arbitrarily deep nesting never hits the interpreter's recursion limit.
"""

from typing import Iterator, List

from .nodes import Block, Node


def walk_blocks(root: Block) -> Iterator[Block]:
    """
    Yield ``root`` and every block nested under it.

    Order is LIFO over child blocks: a block is yielded, then the child
    blocks of its nodes are pushed in node order, so the most recently
    pushed child block is visited next.
    """
    stack: List[Block] = [root]
    while stack:
        block = stack.pop()
        yield block
        for node in block.nodes:
            stack.extend(node.blocks)


def walk_nodes(root: Block) -> Iterator[Node]:
    """
    Yield every ordinary node under ``root``, including nodes of nested blocks.

    Within a block nodes come in the block's own order; blocks come in
    ``walk_blocks`` order, so a node's child blocks are walked only after the
    block containing it.
    """
    for block in walk_blocks(root):
        yield from block.nodes
