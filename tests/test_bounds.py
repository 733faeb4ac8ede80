import math

import numpy as np
import pytest
from hypothesis import strategies as st, given, settings

from milpmodel import InvalidVariableKind, Model, UnboundedBigM, compute_bounds, is_integral
from milpmodel.bounds import Bounds, assert_binary, finite_bounds


coefficients = st.floats(min_value=-100, max_value=100, allow_nan=False)
finite_values = st.floats(min_value=-1000, max_value=1000, allow_nan=False)


@st.composite
def bounded_expressions(draw):
    """A random expression over variables with finite bounds, plus one
    assignment of every variable inside its bounds."""
    m = Model()
    n = draw(st.integers(min_value=1, max_value=5))
    terms = []
    values = {}
    for _ in range(n):
        lb = draw(finite_values)
        ub = draw(st.floats(min_value=lb, max_value=lb + 1000, allow_nan=False))
        var = m.num_var(lb, ub)
        coef = draw(coefficients)
        terms.append((coef, var))
        t = draw(st.floats(min_value=0, max_value=1))
        values[var] = lb + t * (ub - lb)
    constant = draw(finite_values)
    expr = sum((coef * var for coef, var in terms), constant)
    return expr, values


@given(bounded_expressions())
@settings(deadline=1000)
def test_bound_soundness(case):
    expr, values = case
    lb, ub = compute_bounds(expr)
    value = expr.evaluate(values)
    tol = 1e-9 * max(1.0, abs(lb), abs(ub))
    assert lb - tol <= value <= ub + tol


def test_compute_bounds_example():
    m = Model()
    x = m.num_var(0, 10)
    y = m.num_var(-5, 5)
    assert compute_bounds(2*x - 3*y + 1) == Bounds(-14.0, 36.0)


def test_compute_bounds_variable_and_scalar():
    m = Model()
    x = m.int_var(-3, 4)
    assert compute_bounds(x) == Bounds(-3.0, 4.0)
    assert compute_bounds(7) == Bounds(7.0, 7.0)


def test_compute_bounds_infinite():
    m = Model()
    x = m.num_var()
    lb, ub = compute_bounds(-x + 2)
    assert ub == 2.0
    assert lb == -np.inf


def test_finite_bounds_requires_override():
    m = Model()
    x = m.num_var()
    with pytest.raises(UnboundedBigM, match="infinite bounds"):
        finite_bounds(x + 1, "abs")
    assert finite_bounds(x + 1, "abs", big_m=50) == Bounds(-50.0, 50.0)


def test_finite_bounds_message_names_context():
    m = Model()
    x = m.num_var(-math.inf, 0)
    with pytest.raises(UnboundedBigM, match="^reify:"):
        finite_bounds(x, "reify")


class TestIsIntegral:
    def test_integer_combination(self):
        m = Model()
        x = m.int_var(0, 5)
        b = m.bool_var()
        assert is_integral(2*x - 3*b + 4)

    def test_fractional_coefficient(self):
        m = Model()
        x = m.int_var(0, 5)
        assert not is_integral(0.5 * x)

    def test_fractional_constant(self):
        m = Model()
        x = m.int_var(0, 5)
        assert not is_integral(x + 0.25)

    def test_continuous_variable(self):
        m = Model()
        x = m.num_var(0, 5)
        assert not is_integral(x)
        assert not is_integral(x + 0)

    def test_scalars(self):
        assert is_integral(3)
        assert not is_integral(3.5)


class TestAssertBinary:
    def test_accepts_binary_and_zero_one_integer(self):
        m = Model()
        assert_binary(m.bool_var(), "and_")
        assert_binary(m.int_var(0, 1), "and_")

    def test_rejects_other_variables(self):
        m = Model()
        x = m.int_var(0, 2, name="x")
        with pytest.raises(InvalidVariableKind, match="'x' must be binary"):
            assert_binary(x, "and_")

    def test_rejects_expressions(self):
        m = Model()
        b = m.bool_var()
        with pytest.raises(InvalidVariableKind):
            assert_binary(b + 0, "and_")
