"""Plain gradient descent over leaf parameters."""

from scalargrad.ops import GraphError


def update(param, learning_rate):
    """In-place descent step on one leaf: data -= learning_rate * grad."""
    if not param.is_leaf:
        raise GraphError(f"only leaf Values can be updated, got {param!r}")
    param.data = param.data - learning_rate * param.grad


class SGD:
    """
    Stochastic gradient descent.

    Example:
        >>> opt = SGD(mlp.parameters(), lr=0.1)
        >>> loss.backward()
        >>> opt.step()
    """

    def __init__(self, parameters, lr=0.1):
        if lr <= 0:
            raise ValueError(f"learning rate must be positive, got {lr}")
        self.parameters = list(parameters)
        self.lr = lr

    def step(self):
        for p in self.parameters:
            update(p, self.lr)

    def zero_grad(self):
        for p in self.parameters:
            p.grad = 0.0
