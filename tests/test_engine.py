import math

import pytest

from scalargrad.engine import Value
from scalargrad.graph import Graph
from scalargrad.ops import GraphError, Op


@pytest.mark.parametrize("x, y", [(1.0, 2.0), (-3.5, 0.25), (0.0, 7.0)])
def test_add_and_mul_values(x, y):
    a, b = Value(x), Value(y)
    assert (a + b).data == x + y
    assert (a * b).data == x * y


def test_mul_backward():
    a, b = Value(2.0), Value(3.0)
    c = a * b
    assert c.data == 6.0
    c.backward()
    assert c.grad == 1.0
    assert a.grad == 3.0
    assert b.grad == 2.0


def test_fan_out_accumulates():
    a, b = Value(-4.0), Value(1.5)
    c = a * b
    d = c + c
    d.backward()
    assert c.grad == 2.0
    assert a.grad == 2 * b.data
    assert b.grad == 2 * a.data


def test_pow_value_and_gradient():
    a = Value(2.0)
    y = a ** 3.0
    assert y.data == 8.0
    y.backward()
    assert a.grad == 12.0

    b = Value(1.5)
    z = b ** -2
    z.backward()
    assert z.data == pytest.approx(1.5 ** -2)
    assert b.grad == pytest.approx(-2 * 1.5 ** -3)


def test_tanh_at_zero():
    x = Value(0.0)
    y = x.tanh()
    assert y.data == 0.0
    y.backward()
    assert x.grad == 1.0


@pytest.mark.parametrize("x0", [-2.0, -0.3, 0.5, 1.7])
def test_tanh_gradient_matches_finite_difference(x0):
    h = 1e-6
    x = Value(x0)
    y = x.tanh()
    y.backward()
    estimate = (math.tanh(x0 + h) - math.tanh(x0 - h)) / (2 * h)
    assert x.grad == pytest.approx(1 - y.data ** 2)
    assert abs(x.grad - estimate) < 1e-6


def test_exp():
    x = Value(1.0)
    y = x.exp()
    assert y.data == pytest.approx(math.e)
    y.backward()
    assert x.grad == pytest.approx(math.e)


def test_relu():
    neg, pos = Value(-1.0), Value(2.0)
    y = neg.relu() + pos.relu()
    assert y.data == 2.0
    y.backward()
    assert neg.grad == 0.0
    assert pos.grad == 1.0


def test_sub_and_div_are_composites():
    a, b = Value(5.0), Value(2.0)
    s = a - b
    assert s.data == 3.0
    assert s.op.op is Op.ADD
    assert s.children[1].op.op is Op.MUL

    q = a / b
    assert q.data == 2.5
    assert q.op.op is Op.MUL
    assert q.children[1].op.op is Op.POW

    (s + q).backward()
    assert a.grad == pytest.approx(1 + 1 / 2.0)
    assert b.grad == pytest.approx(-1 - 5.0 / 2.0 ** 2)


def test_complex_expression():
    a, b, c, d = Value(2.0), Value(3.0), Value(4.0), Value(5.0)
    x = (a + b) * (c - d) / Value(2.0)
    assert x.data == -2.5


def test_numbers_on_either_side():
    a = Value(2.0)
    assert (3 + a * 4.0 - 2).data == 9.0
    assert (1 - a).data == -1.0
    assert (2 * a).data == 4.0
    assert (1 / a).data == 0.5
    assert (-a).data == -2.0


def test_mixed_operations():
    a, b, c = Value(0.5), Value(0.3), Value(0.2)
    x = (a * b + c).tanh()
    assert x.data == pytest.approx(math.tanh(0.5 * 0.3 + 0.2))


def test_division_by_zero_follows_float_semantics():
    a, z = Value(1.0), Value(0.0)
    q = a / z
    assert math.isinf(q.data)
    q.backward()
    assert math.isnan(z.grad) or math.isinf(z.grad)
    assert math.isinf(Value(1000.0).exp().data)


def test_backward_twice_does_not_double():
    a, b = Value(2.0), Value(3.0)
    c = a * b
    c.backward()
    c.backward()
    assert a.grad == 3.0
    assert b.grad == 2.0


def test_built_graph_does_not_follow_leaf_updates():
    a = Value(1.0)
    y = a * 2
    a.data = 10.0
    assert y.data == 2.0
    assert (a * 2).data == 20.0


def test_identity_not_value():
    a, b = Value(1.0), Value(1.0)
    assert a != b
    assert len({a, b}) == 2
    assert a == a.topo()[0]


def test_cannot_mix_graphs():
    a = Value(1.0, graph=Graph())
    b = Value(1.0, graph=Graph())
    with pytest.raises(GraphError):
        a + b


def test_pow_rejects_value_exponent():
    with pytest.raises(AssertionError):
        Value(2.0) ** Value(2.0)


def test_observer_sees_consumers_first():
    a, b = Value(2.0), Value(3.0)
    c = a * b
    seen = []
    c.backward(observer=seen.append)
    assert seen[0] == c
    assert set(seen) == {a, b, c}


def test_repr():
    a, b = Value(2.0), Value(-3.0)
    c = a * b
    c.backward()
    assert repr(a) == "Value(data=2.0000, op=?, grad=-3.0000, children=0)"
    assert repr(c) == "Value(data=-6.0000, op=*, grad=1.0000, children=2)"
    assert repr(a ** 2) == "Value(data=4.0000, op=**2, grad=0.0000, children=1)"
