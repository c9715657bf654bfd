"""
Inspection utilities for scalargrad computational graphs.

This module provides read-only traversal of a graph, Graphviz export showing
the flow of data and gradients, and an observer that logs the backward pass.
"""

import logging

from graphviz import Digraph


def trace(root):
    """
    Collect all nodes and edges reachable from a root Value.

    Args:
        root: A Value object representing the output of a computation

    Returns:
        tuple: (nodes, edges) where:
            - nodes: set of all Values in the graph
            - edges: set of (operand, consumer) tuples

    Example:
        >>> x = Value(2.0)
        >>> y = Value(3.0)
        >>> z = x * y + x
        >>> nodes, edges = trace(z)
        >>> len(nodes)  # x, y, x*y and z
        4
    """
    nodes = set(root.topo())
    edges = {(child, v) for v in nodes for child in v.children}
    return nodes, edges


def draw_dot(root, format='svg', rankdir='LR'):
    """
    Visualize the computational graph of a Value as a directed graph.

    Creates a Graphviz diagram showing:
    - Value nodes with their data and gradients
    - Operation nodes (+, *, tanh, etc.)
    - Edges showing data flow through the computation

    Args:
        root: A Value object (typically the loss) to visualize from
        format: Output format ('svg', 'png', 'pdf', etc.)
        rankdir: Graph direction - 'LR' (left-right) or 'TB' (top-bottom)

    Returns:
        Digraph: A graphviz Digraph object that can be rendered or displayed

    Example:
        >>> x = Value(2.0, name='x')
        >>> y = Value(-3.0, name='y')
        >>> z = x * y
        >>> z.backward()
        >>> draw_dot(z).render('computation_graph')  # Saves as SVG

    Note:
        Rendering requires the Graphviz system binaries; building the
        Digraph does not.
    """
    assert rankdir in ['LR', 'TB'], "rankdir must be 'LR' (left-right) or 'TB' (top-bottom)"

    nodes, edges = trace(root)
    dot = Digraph(format=format, graph_attr={'rankdir': rankdir})

    for n in nodes:
        uid = f"n{n.node}"
        label = f'{{ {n.name} | {{ data {n.data:.4f} | grad {n.grad:.4f} }} }}'
        dot.node(name=uid, label=label, shape='record')

        # Results of an operation get a separate op node feeding them
        tag = n.op.tag
        if tag:
            dot.node(name=uid + "op", label=tag)
            dot.edge(uid + "op", uid)

    for n1, n2 in edges:
        dot.edge(f"n{n1.node}", f"n{n2.node}op")

    return dot


def logging_observer(logger=None, level=logging.DEBUG):
    """
    Build an observer for ``Value.backward`` that logs every visited node.

    Example:
        >>> loss.backward(observer=logging_observer())
    """
    logger = logger if logger is not None else logging.getLogger("scalargrad.backward")

    def observe(v):
        logger.log(level, "%r", v)

    return observe
