"""
The node arena that backs every Value.

Nodes are addressed by an integer id. Values and gradients live in two
parallel float64 arrays; operations and operand ids live in parallel lists.
A node can only reference ids that already exist, so the operand relation is
acyclic by construction.
"""

import logging
from contextlib import contextmanager

import numpy as np

from scalargrad import ops
from scalargrad.ops import GraphError, LEAF

logger = logging.getLogger(__name__)


class Graph:
    """
    Arena of scalar nodes recorded in creation order.

    Example:
        >>> g = Graph()
        >>> a, b = g.leaf(2.0), g.leaf(3.0)
        >>> c = g.apply(ops.Operation(ops.Op.MUL), a, b)
        >>> g.backward(c)
        >>> float(g.grad[a]), float(g.grad[b])
        (3.0, 2.0)
    """

    def __init__(self, capacity=64):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._data = np.zeros(capacity, dtype=np.float64)
        self._grad = np.zeros(capacity, dtype=np.float64)
        self._ops = []
        self._operands = []
        self._names = {}

    def __len__(self):
        return len(self._ops)

    def __repr__(self):
        return f"Graph(nodes={len(self)})"

    @property
    def data(self):
        """View of the node values, indexed by node id."""
        return self._data[:len(self)]

    @property
    def grad(self):
        """View of the accumulated gradients, indexed by node id."""
        return self._grad[:len(self)]

    def operation(self, node):
        return self._ops[node]

    def operands(self, node):
        return self._operands[node]

    def is_leaf(self, node):
        return not self._operands[node]

    def name(self, node):
        return self._names.get(node, '')

    def set_name(self, node, name):
        if name:
            self._names[node] = name
        else:
            self._names.pop(node, None)

    def _append(self, value, operation, operands):
        n = len(self._ops)
        if n == len(self._data):
            # amortised doubling, the arrays are only ever appended to
            self._data = np.concatenate([self._data, np.zeros_like(self._data)])
            self._grad = np.concatenate([self._grad, np.zeros_like(self._grad)])
        self._data[n] = value
        self._grad[n] = 0.0
        self._ops.append(operation)
        self._operands.append(operands)
        return n

    def leaf(self, value):
        """Record a leaf (constant, weight or bias) and return its id."""
        return self._append(value, LEAF, ())

    def apply(self, operation, *operands):
        """Record ``operation(*operands)``, computing its value eagerly."""
        ops.check_arity(operation, len(operands))
        for i in operands:
            if not 0 <= i < len(self):
                raise GraphError(f"operand {i} does not exist in {self!r}")
        value = ops.forward(operation, [self._data[i] for i in operands])
        return self._append(value, operation, tuple(operands))

    def topological_order(self, root):
        """
        Return every node reachable from ``root``, each exactly once, with
        operands before the nodes that consume them.

        Iterative depth-first post-order; the visited set is keyed on node id,
        so nodes shared between several consumers are only emitted once.
        """
        order = []
        visited = set()
        stack = [(root, False)]
        while stack:
            node, expanded = stack.pop()
            if expanded:
                order.append(node)
                continue
            if node in visited:
                continue
            visited.add(node)
            stack.append((node, True))
            for child in reversed(self._operands[node]):
                if child not in visited:
                    stack.append((child, False))
        return order

    def backward(self, root, observer=None):
        """
        Reverse-mode differentiation of ``root`` w.r.t. every ancestor.

        Gradients of the subgraph are reset to zero first, then the root is
        seeded with 1.0 and each node, consumers before producers, adds
        ``partial * grad`` into its operands. ``observer(node)`` is called
        after each node has pushed its gradient.
        """
        order = self.topological_order(root)
        self._grad[order] = 0.0
        self._grad[root] = 1.0

        with np.errstate(all='ignore'):
            for node in reversed(order):
                operands = self._operands[node]
                if operands:
                    g = self._grad[node]
                    partials = ops.backward(
                        self._ops[node], self._data[node], [self._data[i] for i in operands])
                    for child, partial in zip(operands, partials):
                        self._grad[child] += partial * g
                if observer is not None:
                    observer(node)

    def checkpoint(self):
        """Mark the current end of the arena, see ``release``."""
        return len(self)

    def release(self, mark):
        """
        Drop every node created after ``mark``.

        Nodes recorded before the mark (typically model parameters) are kept.
        Any handle to a dropped node is stale afterwards.
        """
        if not 0 <= mark <= len(self):
            raise GraphError(f"invalid checkpoint {mark} for {self!r}")
        dropped = len(self) - mark
        del self._ops[mark:]
        del self._operands[mark:]
        for node in [n for n in self._names if n >= mark]:
            del self._names[node]
        self._grad[mark:] = 0.0
        logger.debug("released %d nodes, %d remain", dropped, mark)


_default_graph = Graph()


def default_graph():
    """Graph used by Values created without an explicit ``graph``."""
    return _default_graph


@contextmanager
def use_graph(graph=None):
    """
    Temporarily switch the default graph (to a fresh one if none is given):

        with use_graph() as g:
            y = Value(2.0) * 3
            y.backward()
    """
    global _default_graph
    prev = _default_graph
    _default_graph = graph if graph is not None else Graph()
    try:
        yield _default_graph
    finally:
        _default_graph = prev
