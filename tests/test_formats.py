import numpy as np
import pytest

from milpmodel import Model, to_lp_format, to_mps_format
from milpmodel.formats import format_number


@pytest.fixture
def simple():
    m = Model()
    x = m.num_var(0, 10, name="x")
    y = m.num_var(0, 10, name="y")
    m.add_constraint(x + y <= 10)
    m.add_constraint(x <= 5)
    m.maximize(x + 2*y)
    return m


@pytest.fixture
def mixed():
    m = Model("mixed")
    x = m.num_var(name="x")
    n = m.int_var(-3, 7, name="n")
    b = m.bool_var("b")
    f = m.num_var(-np.inf, np.inf, name="f")
    m.add_constraint(2*x - n + 3 >= 1, name="lower")
    m.add_constraint(x + f + b == 4, name="link")
    m.minimize(x - 0.5*n + 6)
    return m


def test_format_number():
    assert format_number(10.0) == "10"
    assert format_number(-0.0) == "0"
    assert format_number(0.1) == "0.1"
    assert format_number(1 / 3) == "0.333333333333333"
    assert format_number(1e20) == "1e+20"


class TestLP:
    def test_simple(self, simple):
        assert simple.to_lp() == (
            "Maximize\n"
            " obj: x + 2 y\n"
            "Subject To\n"
            " c0: x + y <= 10\n"
            " c1: x <= 5\n"
            "Bounds\n"
            " 0 <= x <= 10\n"
            " 0 <= y <= 10\n"
            "End\n"
        )

    def test_mixed(self, mixed):
        assert mixed.to_lp() == (
            "Minimize\n"
            " obj: x - 0.5 n + 6\n"
            "Subject To\n"
            " lower: 2 x - n >= -2\n"
            " link: x + f + b = 4\n"
            "Bounds\n"
            " -3 <= n <= 7\n"
            " f free\n"
            "General\n"
            " n\n"
            "Binary\n"
            " b\n"
            "End\n"
        )

    def test_bound_keywords(self):
        m = Model()
        m.num_var(-np.inf, 5, name="a")
        m.num_var(2, np.inf, name="b")
        m.num_var(3, 3, name="c")
        m.num_var(0, np.inf, name="d")
        text = m.to_lp()
        assert "Bounds\n -inf <= a <= 5\n b >= 2\n c = 3\nEnd\n" in text
        assert " d" not in text

    def test_zero_coefficients_omitted(self):
        m = Model()
        x = m.num_var(name="x")
        y = m.num_var(name="y")
        m.add_constraint(x + 0*y <= 3)
        m.minimize(0*x + y)
        text = m.to_lp()
        assert " obj: y\n" in text
        assert " c0: x <= 3\n" in text

    def test_leading_negative_terms(self):
        m = Model()
        x = m.num_var(name="x")
        y = m.num_var(name="y")
        m.add_constraint(-x - 2*y >= -8)
        m.minimize(-2*x)
        text = m.to_lp()
        assert " obj: -2 x\n" in text
        assert " c0: -x - 2 y >= -8\n" in text

    def test_empty_objective(self):
        m = Model()
        x = m.num_var(name="x")
        m.add_constraint(x <= 1)
        assert m.to_lp().startswith("Minimize\n obj:\nSubject To\n")

    def test_deterministic(self, mixed):
        assert mixed.to_lp() == mixed.to_lp()

    def test_to_string(self, simple):
        assert simple.to_string("lp") == simple.to_lp()
        assert simple.to_string("MPS") == simple.to_mps()
        with pytest.raises(ValueError):
            simple.to_string("xml")

    def test_function_form(self):
        m = Model()
        x = m.num_var(name="x")
        c = m.add_constraint(x >= 1)
        assert to_lp_format(x + 0, "minimize", [c], [x]) == (
            "Minimize\n obj: x\nSubject To\n c0: x >= 1\nEnd\n"
        )


class TestMPS:
    def test_simple(self, simple):
        assert simple.to_mps() == (
            "NAME          problem\n"
            "OBJSENSE\n"
            " MAX\n"
            "ROWS\n"
            " N  obj\n"
            " L  c0\n"
            " L  c1\n"
            "COLUMNS\n"
            "    x  obj  1\n"
            "    x  c0  1\n"
            "    x  c1  1\n"
            "    y  obj  2\n"
            "    y  c0  1\n"
            "RHS\n"
            "    rhs  c0  10\n"
            "    rhs  c1  5\n"
            "BOUNDS\n"
            " UP bnd  x  10\n"
            " UP bnd  y  10\n"
            "ENDATA\n"
        )

    def test_mixed(self, mixed):
        assert mixed.to_mps() == (
            "NAME          mixed\n"
            "ROWS\n"
            " N  obj\n"
            " G  lower\n"
            " E  link\n"
            "COLUMNS\n"
            "    x  obj  1\n"
            "    x  lower  2\n"
            "    x  link  1\n"
            "    f  link  1\n"
            "    MARKER    'MARKER'  'INTORG'\n"
            "    n  obj  -0.5\n"
            "    n  lower  -1\n"
            "    b  link  1\n"
            "    MARKER    'MARKER'  'INTEND'\n"
            "RHS\n"
            "    rhs  obj  -6\n"
            "    rhs  lower  -2\n"
            "    rhs  link  4\n"
            "BOUNDS\n"
            " PL bnd  x\n"
            " LO bnd  n  -3\n"
            " UP bnd  n  7\n"
            " BV bnd  b\n"
            " FR bnd  f\n"
            "ENDATA\n"
        )

    def test_bound_keywords(self):
        m = Model()
        a = m.num_var(-np.inf, 5, name="a")
        b = m.num_var(3, 3, name="b")
        k = m.int_var(name="k")
        m.add_constraint(a + b + k <= 100)
        text = m.to_mps()
        assert " MI bnd  a\n UP bnd  a  5\n" in text
        assert " FX bnd  b  3\n" in text
        assert " PL bnd  k\n" in text

    def test_unused_columns_omitted(self):
        m = Model()
        x = m.num_var(name="x")
        m.num_var(0, 4, name="unused")
        m.add_constraint(x <= 1)
        text = m.to_mps()
        assert "unused" not in text

    def test_zero_rhs_omitted(self):
        m = Model()
        x = m.num_var(name="x")
        y = m.num_var(name="y")
        m.add_constraint(x - y <= 0)
        text = m.to_mps()
        assert "RHS\nBOUNDS\n" in text

    def test_function_form(self):
        m = Model()
        x = m.num_var(name="x")
        c = m.add_constraint(x >= 1)
        text = to_mps_format(None, "minimize", [c], [x], name="tiny")
        assert text.startswith("NAME          tiny\nROWS\n N  obj\n G  c0\n")
        assert "    x  c0  1\n" in text
