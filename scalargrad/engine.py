from scalargrad.graph import Graph, default_graph
from scalargrad.ops import GraphError, Op, Operation


class Value:
    """
    A scalar node in a computation graph, tracked for automatic differentiation.

    A Value is a handle onto one node of a ``Graph``. Arithmetic on Values
    records new nodes in the same graph; ``backward`` then fills in the
    gradient of every ancestor. Two Values are equal only if they refer to the
    same node, never because they hold the same number.

    Example:
        >>> x = Value(2.0)
        >>> y = Value(3.0)
        >>> z = x * y + x
        >>> z.backward()  # Compute gradients
        >>> print(x.grad)  # dz/dx = y + 1 = 4.0
    """

    __slots__ = ('graph', 'node')

    def __init__(self, data, graph=None, name=""):
        """
        Create a leaf Value.

        Args:
            data: The scalar this leaf holds
            graph: Graph to record the leaf in (default: the current default graph)
            name: Optional name for debugging and visualization
        """
        self.graph = graph if graph is not None else default_graph()
        self.node = self.graph.leaf(float(data))
        self.graph.set_name(self.node, name)

    @classmethod
    def _wrap(cls, graph, node):
        """Handle onto an existing node (no new node is recorded)."""
        v = cls.__new__(cls)
        v.graph = graph
        v.node = node
        return v

    @property
    def data(self):
        return float(self.graph.data[self.node])

    @data.setter
    def data(self, value):
        self.graph.data[self.node] = value

    @property
    def grad(self):
        return float(self.graph.grad[self.node])

    @grad.setter
    def grad(self, value):
        self.graph.grad[self.node] = value

    @property
    def op(self):
        """The ``Operation`` that produced this node (``Op.NONE`` for leaves)."""
        return self.graph.operation(self.node)

    @property
    def children(self):
        """Operands of this node, in order (left before right)."""
        return tuple(Value._wrap(self.graph, i) for i in self.graph.operands(self.node))

    @property
    def is_leaf(self):
        return self.graph.is_leaf(self.node)

    @property
    def name(self):
        return self.graph.name(self.node)

    @name.setter
    def name(self, name):
        self.graph.set_name(self.node, name)

    def _lift(self, other):
        """Promote plain numbers to constant leaves in this Value's graph."""
        if isinstance(other, Value):
            if other.graph is not self.graph:
                raise GraphError("cannot combine Values from different graphs")
            return other
        return Value(other, graph=self.graph)

    def _apply(self, operation, *operands):
        node = self.graph.apply(operation, *(o.node for o in operands))
        return Value._wrap(self.graph, node)

    def __add__(self, other):
        """
        Addition: Value + Value or Value + number.

        Example:
            >>> c = Value(1.0) + 2  # c.data = 3.0
        """
        other = self._lift(other)
        return self._apply(Operation(Op.ADD), self, other)

    def __mul__(self, other):
        """
        Multiplication: Value * Value or Value * number.

        Example:
            >>> c = Value(3.0) * Value(4.0)  # c.data = 12.0
        """
        other = self._lift(other)
        return self._apply(Operation(Op.MUL), self, other)

    def __pow__(self, other):
        """
        Power operation: raises Value to a constant power.

        The exponent is not a graph node and receives no gradient.

        Example:
            >>> y = Value(3.0) ** 2  # y.data = 9.0
        """
        assert isinstance(other, (int, float)), "Only supporting int/float powers"
        return self._apply(Operation(Op.POW, other), self)

    def exp(self):
        """Exponential e^x. Overflows to inf rather than raising."""
        return self._apply(Operation(Op.EXP), self)

    def tanh(self):
        """
        Hyperbolic tangent, (e^{2x} - 1) / (e^{2x} + 1).

        The argument is clamped before exponentiation so large inputs give
        exactly +-1 instead of nan.
        """
        return self._apply(Operation(Op.TANH), self)

    def relu(self):
        """
        ReLU (Rectified Linear Unit) activation: max(0, x)

        Example:
            >>> Value(-1.0).relu().data
            0.0
        """
        return self._apply(Operation(Op.RELU), self)

    def backward(self, observer=None):
        """
        Perform backpropagation: compute d(self)/d(node) for every ancestor.

        Gradients of the whole subgraph are reset before the pass, so calling
        ``backward`` twice on the same root gives the same gradients rather than
        doubling them.

        Args:
            observer: Optional callable invoked with each node (as a Value)
                after its gradient has been pushed to its operands.

        Example:
            >>> x = Value(2.0)
            >>> y = x * 3 + 1
            >>> y.backward()
            >>> print(x.grad)  # dy/dx = 3.0
        """
        hook = None
        if observer is not None:
            def hook(node):
                observer(Value._wrap(self.graph, node))
        self.graph.backward(self.node, observer=hook)

    def topo(self):
        """Nodes reachable from this one, operands before consumers."""
        return [Value._wrap(self.graph, i) for i in self.graph.topological_order(self.node)]

    # Reverse and derived operations (use the basic operations defined above)

    def __neg__(self):
        """Negation: -x = -1 * x"""
        return self * -1

    def __radd__(self, other):
        """Right addition: other + self (when other is not a Value)"""
        return self + other

    def __sub__(self, other):
        """Subtraction: a - b = a + (b * -1)"""
        return self + self._lift(other) * -1

    def __rsub__(self, other):
        """Right subtraction: other - self"""
        return self._lift(other) + self * -1

    def __rmul__(self, other):
        """Right multiplication: other * self (when other is not a Value)"""
        return self * other

    def __truediv__(self, other):
        """Division: a / b = a * b^(-1)"""
        return self * self._lift(other) ** -1

    def __rtruediv__(self, other):
        """Right division: other / self"""
        return self._lift(other) * self ** -1

    def __float__(self):
        return self.data

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return self.graph is other.graph and self.node == other.node

    def __hash__(self):
        return hash((id(self.graph), self.node))

    def __repr__(self):
        """Return a readable string representation of the Value."""
        return (f"Value(data={self.data:.4f}, op={self.op.tag or '?'}, "
                f"grad={self.grad:.4f}, children={len(self.graph.operands(self.node))})")


__all__ = ["Value", "Graph", "GraphError"]
