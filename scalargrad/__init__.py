"""
Scalargrad: a scalar reverse-mode autograd engine.

This package builds computation graphs over scalar Values, backpropagates
through them, and trains small tanh multi-layer perceptrons on top.
"""

from scalargrad.engine import Value
from scalargrad.graph import Graph, default_graph, use_graph
from scalargrad.ops import GraphError, Op, Operation
from scalargrad import nn
from scalargrad.optim import SGD
from scalargrad.train import TrainConfig, Trainer
from scalargrad.utils import draw_dot

__version__ = "0.1.0"
__all__ = [
    "Value", "Graph", "GraphError", "Op", "Operation",
    "default_graph", "use_graph",
    "nn", "SGD", "TrainConfig", "Trainer", "draw_dot",
]
