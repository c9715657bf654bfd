"""
Neural network building blocks for scalargrad.

This module provides a tanh multi-layer perceptron built from scalar Values.
Every forward call records fresh nodes, so a graph built before a parameter
update never sees the new parameter values.
"""

import numpy as np

from scalargrad.engine import Value
from scalargrad.graph import default_graph


class Module:
    """
    Base class for all neural network modules.

    Provides common functionality for managing parameters and gradients.
    """

    def zero_grad(self):
        """
        Reset all gradients to zero.

        ``Value.backward`` already clears the gradients of the graph it walks;
        this is for callers that read or accumulate gradients by hand.
        """
        for p in self.parameters():
            p.grad = 0.0

    def parameters(self):
        """
        Return a list of all trainable parameters (weights and biases).

        Override this in subclasses to return actual parameters.
        """
        return []


class Neuron(Module):
    """
    A single tanh unit: tanh(sum_i x_i * w_i + b).

    Weights and bias are leaves initialised uniformly in [-1, 1) from ``rng``,
    which only needs a ``uniform(low, high)`` method.

    Args:
        nin: Number of inputs
        rng: Source of uniform random numbers (default: numpy default_rng())
        graph: Graph the parameters live in (default: the current default graph)
        name: Optional name prefix for the parameters

    Example:
        >>> n = Neuron(2)
        >>> y = n([1.0, -2.0])  # y.data is in (-1, 1)
    """

    def __init__(self, nin, rng=None, graph=None, name=""):
        rng = rng if rng is not None else np.random.default_rng()
        self.graph = graph if graph is not None else default_graph()
        self.name = name
        self.w = [Value(rng.uniform(-1.0, 1.0), graph=self.graph, name=f"w{i}_{name}")
                  for i in range(nin)]
        self.b = Value(rng.uniform(-1.0, 1.0), graph=self.graph, name=f"b_{name}")

    def __call__(self, x):
        if len(x) != len(self.w):
            raise ValueError(f"expected {len(self.w)} inputs, got {len(x)}")
        act = self.b
        for wi, xi in zip(self.w, x):
            act = wi * xi + act
        return act.tanh()

    def parameters(self):
        """Weights first, then the bias."""
        return self.w + [self.b]

    def __repr__(self):
        params = "\n".join(f"    {p!r}" for p in self.parameters())
        return f"Neuron({len(self.w)})\n{params}"


class Layer(Module):
    """
    ``nout`` independent neurons reading the same input vector.

    Args:
        nin: Number of inputs per neuron
        nout: Number of neurons (outputs)
        rng, graph: Passed to every Neuron
        name: Optional name for debugging
    """

    def __init__(self, nin, nout, rng=None, graph=None, name=""):
        rng = rng if rng is not None else np.random.default_rng()
        self.name = name
        self.neurons = [Neuron(nin, rng=rng, graph=graph, name=f"{name}n{i}")
                        for i in range(nout)]

    def __call__(self, x):
        """Forward pass: returns the list of neuron outputs."""
        return [n(x) for n in self.neurons]

    def parameters(self):
        return [p for n in self.neurons for p in n.parameters()]

    def __repr__(self):
        nin = len(self.neurons[0].w) if self.neurons else 0
        return f"Layer({nin} → {len(self.neurons)}, tanh)"


class MLP(Module):
    """
    Multi-Layer Perceptron: a sequence of tanh layers.

    Args:
        nin: Number of input features
        nouts: List of output sizes for each layer
               Example: [3, 1] creates 2 layers: input→3→1
        rng: Source of uniform random numbers shared by all layers
        graph: Graph the parameters live in

    Example:
        >>> mlp = MLP(2, [3, 1])
        >>> y = mlp([1.0, 0.0])  # list with one output Value
        >>> loss = (y[0] - 1.0) ** 2
        >>> loss.backward()
        >>> for p in mlp.parameters():
        ...     p.data -= 0.1 * p.grad
    """

    def __init__(self, nin, nouts, rng=None, graph=None):
        rng = rng if rng is not None else np.random.default_rng()
        self.graph = graph if graph is not None else default_graph()
        layer_sizes = [nin] + list(nouts)
        self.layers = [
            Layer(layer_sizes[i], layer_sizes[i + 1], rng=rng, graph=self.graph, name=f"l{i}")
            for i in range(len(nouts))
        ]

    def __call__(self, x):
        """Forward pass: threads the input vector through all layers."""
        for layer in self.layers:
            x = layer(x)
        return x

    def parameters(self):
        """Return all trainable parameters from all layers."""
        return [p for layer in self.layers for p in layer.parameters()]

    def __repr__(self):
        layer_str = ' → '.join(str(layer) for layer in self.layers)
        return f"MLP[\n  {layer_str}\n]"
