"""
IR Nodes

A small dataflow IR with nested blocks: every ``Node`` consumes ordered input
``Value``s and defines ordered output ``Value``s; nodes may own child
``Block``s (control structures). A ``Graph`` owns a root block plus the arena
counters that give every node and value a stable ``unique`` id.

Identity is reference identity: nodes and values never compare structurally.
"""

import math
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from ..utils.config import (
    ATTRIBUTE_NAME_PATTERN,
    KIND_SEPARATOR,
    NAME_SUFFIX_SEPARATOR,
    PARAM_KIND_NAME,
    PRIM_NAMESPACE,
    RETURN_KIND_NAME,
    VALUE_NAME_PATTERN,
)

_VALUE_NAME = re.compile(VALUE_NAME_PATTERN)
_ATTRIBUTE_NAME = re.compile(ATTRIBUTE_NAME_PATTERN)


@dataclass(frozen=True)
class Kind:
    """
    Operator identity of a node (``namespace::name``).

    Compared by value; two nodes are of the same kind iff their kinds are equal.
    """
    namespace: str
    name: str

    @classmethod
    def parse(cls, qualified: str) -> "Kind":
        namespace, sep, name = qualified.partition(KIND_SEPARATOR)
        if not sep or not namespace or not name:
            raise ValueError(f"kind must be of the form 'namespace::name', got {qualified!r}")
        return cls(namespace, name)

    @property
    def is_param(self) -> bool:
        return self == PARAM

    @property
    def is_return(self) -> bool:
        return self == RETURN

    def __str__(self) -> str:
        return f"{self.namespace}{KIND_SEPARATOR}{self.name}"


PARAM = Kind(PRIM_NAMESPACE, PARAM_KIND_NAME)
RETURN = Kind(PRIM_NAMESPACE, RETURN_KIND_NAME)


def _check_attributes(attributes: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy ``attributes``, rejecting names and values the textual IR can't spell."""
    checked: Dict[str, Any] = {}
    for name, value in attributes.items():
        if not isinstance(name, str) or not _ATTRIBUTE_NAME.fullmatch(name):
            raise ValueError(f"invalid attribute name {name!r}")
        # bool is an int subclass but has no literal form
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise ValueError(
                f"attribute {name!r} must be an int, float or str, got {type(value).__name__}")
        if isinstance(value, float):
            if not math.isfinite(value):
                raise ValueError(f"attribute {name!r} must be finite, got {value!r}")
            value = float(value)
        elif isinstance(value, int):
            value = int(value)
        checked[name] = value
    return checked


class Use(NamedTuple):
    """One consumption site of a value: ``user.inputs[offset]``."""
    user: "Node"
    offset: int


class Value:
    """
    A data edge, defined by exactly one node and consumed by zero or more uses.

    ``debug_name`` is unique within the graph. All-digit names are reserved
    for unnamed values, which print as their ``unique`` id. Giving a value a
    name another value already holds renames the previous holder to
    ``name.1`` (or ``name.2``, ...).
    """
    __slots__ = ('node', 'offset', 'unique', '_debug_name', '_uses')

    def __init__(self, node: "Node", offset: int, unique: int, debug_name: Optional[str] = None):
        self.node = node
        self.offset = offset
        self.unique = unique
        self._debug_name: Optional[str] = None
        self._uses: List[Use] = []
        self.debug_name = debug_name

    @property
    def debug_name(self) -> Optional[str]:
        return self._debug_name

    @debug_name.setter
    def debug_name(self, name: Optional[str]) -> None:
        if name is not None:
            if not _VALUE_NAME.fullmatch(name):
                raise ValueError(f"invalid value name {name!r}")
            if name.isdigit():
                raise ValueError(f"value names may not be integers, got {name!r}")
        names = self.node.graph._value_names
        if self._debug_name is not None and names.get(self._debug_name) is self:
            del names[self._debug_name]
        if name is not None:
            holder = names.get(name)
            if holder is not None and holder is not self:
                suffix = 1
                while f"{name}{NAME_SUFFIX_SEPARATOR}{suffix}" in names:
                    suffix += 1
                holder._debug_name = f"{name}{NAME_SUFFIX_SEPARATOR}{suffix}"
                names[holder._debug_name] = holder
            names[name] = self
        self._debug_name = name

    @property
    def uses(self) -> Tuple[Use, ...]:
        return tuple(self._uses)

    @property
    def use_count(self) -> int:
        return len(self._uses)

    @property
    def display_name(self) -> str:
        return self.debug_name if self.debug_name is not None else str(self.unique)

    def __repr__(self) -> str:
        return f"Value(%{self.display_name}, defined by {self.node.kind})"


class Node:
    """
    An operation instance.

    ``inputs``/``outputs``/``blocks`` are fixed-order tuples. ``attributes`` are
    carried for printing and for consumers of the IR; the matcher ignores them.
    Attribute values are ints, finite floats or strings; anything else raises
    ``ValueError``.
    """
    __slots__ = ('kind', 'unique', 'owning_block', '_inputs', '_outputs', '_blocks', 'attributes')

    def __init__(self, kind: Kind, unique: int, owning_block: "Block",
                 attributes: Optional[Mapping[str, Any]] = None):
        self.kind = kind
        self.unique = unique
        self.owning_block = owning_block
        self._inputs: List[Value] = []
        self._outputs: List[Value] = []
        self._blocks: List[Block] = []
        self.attributes: Mapping[str, Any] = MappingProxyType(_check_attributes(attributes or {}))

    @property
    def graph(self) -> "Graph":
        return self.owning_block.graph

    @property
    def inputs(self) -> Tuple[Value, ...]:
        return tuple(self._inputs)

    @property
    def outputs(self) -> Tuple[Value, ...]:
        return tuple(self._outputs)

    @property
    def blocks(self) -> Tuple["Block", ...]:
        return tuple(self._blocks)

    def input(self) -> Value:
        """The single input of this node."""
        if len(self._inputs) != 1:
            raise ValueError(f"{self.kind} has {len(self._inputs)} inputs, expected exactly 1")
        return self._inputs[0]

    def output(self) -> Value:
        """The single output of this node."""
        if len(self._outputs) != 1:
            raise ValueError(f"{self.kind} has {len(self._outputs)} outputs, expected exactly 1")
        return self._outputs[0]

    def add_input(self, value: Value) -> None:
        value._uses.append(Use(self, len(self._inputs)))
        self._inputs.append(value)

    def add_output(self, debug_name: Optional[str] = None) -> Value:
        value = Value(self, len(self._outputs), self.graph._next_unique(), debug_name)
        self._outputs.append(value)
        return value

    def add_block(self) -> "Block":
        block = Block(self.graph, owning_node=self)
        self._blocks.append(block)
        return block

    def __repr__(self) -> str:
        outs = ", ".join(f"%{v.display_name}" for v in self._outputs)
        ins = ", ".join(f"%{v.display_name}" for v in self._inputs)
        prefix = f"{outs} = " if outs else ""
        return f"<Node {prefix}{self.kind}({ins})>"


class Block:
    """
    An ordered container of nodes (a region).

    Block inputs are the outputs of its ``param_node``; block outputs are the
    inputs of its ``return_node``. Both nodes are owned by the block but are
    not part of ``nodes``.
    """
    __slots__ = ('graph', 'owning_node', 'param_node', 'return_node', '_nodes')

    def __init__(self, graph: "Graph", owning_node: Optional[Node] = None):
        self.graph = graph
        self.owning_node = owning_node
        self._nodes: List[Node] = []
        self.param_node = Node(PARAM, graph._next_unique(), self)
        self.return_node = Node(RETURN, graph._next_unique(), self)

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return tuple(self._nodes)

    @property
    def inputs(self) -> Tuple[Value, ...]:
        return self.param_node.outputs

    @property
    def outputs(self) -> Tuple[Value, ...]:
        return self.return_node.inputs

    def add_input(self, debug_name: Optional[str] = None) -> Value:
        return self.param_node.add_output(debug_name)

    def register_output(self, value: Value) -> None:
        self.return_node.add_input(value)

    def append_node(self, kind: Kind, inputs: Sequence[Value] = (), num_outputs: int = 1,
                    attributes: Optional[Mapping[str, Any]] = None) -> Node:
        """Create a node at the end of this block, wired to ``inputs``."""
        node = Node(kind, self.graph._next_unique(), self, attributes)
        for value in inputs:
            node.add_input(value)
        for _ in range(num_outputs):
            node.add_output()
        self._nodes.append(node)
        return node

    def __repr__(self) -> str:
        owner = self.owning_node.kind if self.owning_node is not None else "graph"
        return f"<Block of {owner} with {len(self._nodes)} nodes>"


class Graph:
    """
    A root block plus the arena that numbers its nodes and values.

    The graph's exit is ``return_node``; its inputs are the graph outputs.
    """
    __slots__ = ('_unique_counter', '_value_names', 'block')

    def __init__(self):
        self._unique_counter = 0
        self._value_names: Dict[str, Value] = {}
        self.block = Block(self)

    def _next_unique(self) -> int:
        unique = self._unique_counter
        self._unique_counter += 1
        return unique

    @property
    def param_node(self) -> Node:
        return self.block.param_node

    @property
    def return_node(self) -> Node:
        return self.block.return_node

    @property
    def inputs(self) -> Tuple[Value, ...]:
        return self.block.inputs

    @property
    def outputs(self) -> Tuple[Value, ...]:
        return self.block.outputs

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return self.block.nodes

    def add_input(self, debug_name: Optional[str] = None) -> Value:
        return self.block.add_input(debug_name)

    def register_output(self, value: Value) -> None:
        self.block.register_output(value)

    def create_node(self, kind: Kind, inputs: Sequence[Value] = (), num_outputs: int = 1,
                    attributes: Optional[Dict[str, Any]] = None) -> Node:
        """Append a node to the root block."""
        return self.block.append_node(kind, inputs, num_outputs, attributes)

    def __str__(self) -> str:
        from .printer import print_graph
        return print_graph(self)

    def __repr__(self) -> str:
        return f"<Graph with {len(self.block.nodes)} top-level nodes>"
