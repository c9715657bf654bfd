"""
Operation tags and the forward/backward rule table.

Every node in a graph carries an ``Operation``: a tag from ``Op`` plus, for
``POW``, the constant exponent. All arithmetic is done in numpy ``float64`` so
that division by zero, ``0 ** -1`` and overflow in ``exp`` follow IEEE float
semantics (``inf``/``nan``) instead of raising.
"""

import enum
from collections import namedtuple

import numpy as np


class GraphError(Exception):
    """Raised when a graph contract is violated (bad arity, unknown node, ...)."""


class Op(enum.Enum):
    NONE = 'leaf'
    ADD = '+'
    MUL = '*'
    POW = '**'
    EXP = 'exp'
    TANH = 'tanh'
    RELU = 'ReLU'


ARITY = {
    Op.NONE: 0,
    Op.ADD: 2,
    Op.MUL: 2,
    Op.POW: 1,
    Op.EXP: 1,
    Op.TANH: 1,
    Op.RELU: 1,
}

# float64 tanh is exactly +-1 beyond this, and e^{2a} stays finite inside it
TANH_CLAMP = 20.0


class Operation(namedtuple('Operation', ['op', 'exponent'])):
    """An operation tag together with its auxiliary constant (POW only)."""

    __slots__ = ()

    def __new__(cls, op, exponent=None):
        if op is Op.POW and exponent is None:
            raise GraphError("POW requires an exponent")
        return super().__new__(cls, op, None if exponent is None else float(exponent))

    @property
    def tag(self):
        """Short label used in reprs and diagrams; leaves have none."""
        if self.op is Op.NONE:
            return ''
        if self.op is Op.POW:
            return f'**{self.exponent:g}'
        return self.op.value


LEAF = Operation(Op.NONE)


def _tanh(a):
    a = np.clip(a, -TANH_CLAMP, TANH_CLAMP)
    e = np.exp(2.0 * a)
    return (e - 1.0) / (e + 1.0)


_FORWARD = {
    Op.ADD: lambda x, a, b: a + b,
    Op.MUL: lambda x, a, b: a * b,
    Op.POW: lambda x, a: np.power(a, x.exponent),
    Op.EXP: lambda x, a: np.exp(a),
    Op.TANH: lambda x, a: _tanh(a),
    Op.RELU: lambda x, a: np.maximum(0.0, a),
}

# Local partials d(out)/d(operand_i), given the node's own value and its operands.
_BACKWARD = {
    Op.ADD: lambda x, out, a, b: (1.0, 1.0),
    Op.MUL: lambda x, out, a, b: (b, a),
    Op.POW: lambda x, out, a: (x.exponent * np.power(a, x.exponent - 1.0),),
    Op.EXP: lambda x, out, a: (out,),
    Op.TANH: lambda x, out, a: (1.0 - out * out,),
    Op.RELU: lambda x, out, a: (1.0 if a > 0 else 0.0,),
}


def check_arity(operation, n_operands):
    expected = ARITY[operation.op]
    if n_operands != expected:
        raise GraphError(
            f"{operation.op.name} takes {expected} operand(s), got {n_operands}")


def forward(operation, operand_values):
    """Compute the value of a node from its operands' values."""
    check_arity(operation, len(operand_values))
    if operation.op is Op.NONE:
        raise GraphError("leaf values are supplied, not computed")
    args = [np.float64(v) for v in operand_values]
    with np.errstate(all='ignore'):
        return np.float64(_FORWARD[operation.op](operation, *args))


def backward(operation, out_value, operand_values):
    """Return the local partial of the node w.r.t. each operand, in operand order."""
    check_arity(operation, len(operand_values))
    if operation.op is Op.NONE:
        return ()
    args = [np.float64(v) for v in operand_values]
    with np.errstate(all='ignore'):
        return _BACKWARD[operation.op](operation, np.float64(out_value), *args)
