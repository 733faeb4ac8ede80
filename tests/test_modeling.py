import numpy as np
import pytest

from milpmodel import (
    Constraint, ConstraintSense, InvalidRange, LinearExpression, Model, Sense,
    VarType, quicksum,
)


@pytest.fixture
def m():
    return Model()


class TestVariables:
    def test_auto_names(self, m):
        a = m.num_var()
        b = m.int_var()
        c = m.bool_var()
        assert [v.name for v in m.variables] == ["x0", "x1", "x2"]
        assert a.type is VarType.CONTINUOUS
        assert b.type is VarType.INTEGER
        assert c.type is VarType.BINARY

    def test_auto_names_skip_taken(self, m):
        m.num_var(name="x0")
        v = m.num_var()
        assert v.name == "x1"

    def test_duplicate_name(self, m):
        m.num_var(name="x")
        with pytest.raises(ValueError, match="already used"):
            m.int_var(name="x")
        assert m.num_variables == 1

    def test_binary_bounds(self, m):
        z = m.add_variable("binary", lb=-5, ub=7)
        assert (z.lb, z.ub) == (0.0, 1.0)
        assert z.is_binary and z.is_integer

    def test_integer_zero_one_counts_as_binary(self, m):
        assert m.int_var(0, 1).is_binary
        assert not m.int_var(0, 2).is_binary

    def test_invalid_bounds(self, m):
        with pytest.raises(InvalidRange):
            m.num_var(5, 3)
        assert m.num_variables == 0

    def test_defaults(self, m):
        v = m.num_var()
        assert v.lb == 0.0
        assert v.ub == np.inf

    def test_add_variables_prefix(self, m):
        xs = m.add_variables(3, "integer", 0, 4, prefix="item")
        assert [v.name for v in xs] == ["item0", "item1", "item2"]
        assert all(v.type is VarType.INTEGER for v in xs)

    def test_add_variables_checks_all_names_first(self, m):
        m.num_var(name="item1")
        with pytest.raises(ValueError):
            m.add_variables(3, prefix="item")
        assert m.num_variables == 1

    def test_get_variable(self, m):
        x = m.num_var(name="x")
        assert m.get_variable("x") is x

    def test_variables_key_dicts_by_identity(self, m):
        x = m.num_var(name="x")
        y = m.num_var(name="y")
        table = {x: 1, y: 2}
        assert table[x] == 1
        assert table[y] == 2


class TestExpressions:
    def test_terms_and_constant(self, m):
        x = m.num_var(name="x")
        y = m.num_var(name="y")
        expr = 3*x + 2*y - 5
        assert [(c, v.name) for c, v in expr.terms] == [(3.0, "x"), (2.0, "y")]
        assert expr.constant == -5.0

    def test_repeated_variables_collapse(self, m):
        x = m.num_var(name="x")
        expr = x + 2*x - 0.5*x
        assert len(expr) == 1
        assert expr.coefficient(x) == 2.5

    def test_cancelled_terms_are_dropped(self, m):
        x = m.num_var(name="x")
        y = m.num_var(name="y")
        expr = x + y - x
        assert expr.variables == [y]

    def test_operands_not_mutated(self, m):
        x = m.num_var(name="x")
        base = 2*x + 1
        _ = base + x
        _ = base * 3
        _ = -base
        assert base.coefficient(x) == 2.0
        assert base.constant == 1.0

    def test_rsub_and_division(self, m):
        x = m.num_var(name="x")
        expr = 10 - x / 2
        assert expr.coefficient(x) == -0.5
        assert expr.constant == 10.0

    def test_numpy_scalar_on_left(self, m):
        x = m.num_var(name="x")
        expr = np.float64(2.0) * x + np.int64(1)
        assert isinstance(expr, LinearExpression)
        assert expr.coefficient(x) == 2.0
        assert expr.constant == 1.0

    def test_product_of_variables_rejected(self, m):
        x = m.num_var(name="x")
        y = m.num_var(name="y")
        with pytest.raises(TypeError):
            (x + 1) * (y + 1)

    def test_constant_expression_product(self, m):
        x = m.num_var(name="x")
        expr = (x + 1) * LinearExpression.from_constant(3)
        assert expr.coefficient(x) == 3.0
        assert expr.constant == 3.0

    def test_evaluate(self, m):
        x = m.num_var(name="x")
        y = m.num_var(name="y")
        assert (3*x - y + 4).evaluate({x: 2, y: 1}) == 9.0
        with pytest.raises(KeyError):
            (x + y).evaluate({x: 1})

    def test_quicksum(self, m):
        xs = m.add_variables(3)
        total = quicksum(xs, 5, (2*v for v in xs))
        assert all(total.coefficient(v) == 3.0 for v in xs)
        assert total.constant == 5.0

    def test_quicksum_empty(self):
        total = quicksum()
        assert total.is_constant
        assert total.constant == 0.0

    def test_quicksum_rejects_strings(self):
        with pytest.raises(TypeError):
            quicksum("x")


class TestConstraints:
    def test_scalar_rhs_is_kept(self, m):
        x = m.num_var(name="x")
        c = 2*x + 1 <= 10
        assert c.sense is ConstraintSense.LE
        assert c.rhs == 10.0
        assert c.expression.constant == 1.0

    def test_expression_rhs_moves_left(self, m):
        x = m.num_var(name="x")
        y = m.num_var(name="y")
        c = x >= y + 2
        assert c.sense is ConstraintSense.GE
        assert c.rhs == 0.0
        assert c.expression.coefficient(y) == -1.0
        assert c.expression.constant == -2.0

    def test_equality(self, m):
        x = m.num_var(name="x")
        c = x == 3
        assert isinstance(c, Constraint)
        assert c.sense is ConstraintSense.EQ

    def test_sense_aliases(self):
        assert ConstraintSense("==") is ConstraintSense.EQ
        assert ConstraintSense("<=") is ConstraintSense.LE

    def test_no_truth_value(self, m):
        x = m.num_var(name="x")
        with pytest.raises(TypeError):
            bool(x <= 3)

    def test_auto_constraint_names(self, m):
        x = m.num_var(name="x")
        m.add_constraint(x <= 1)
        m.add_constraint(x <= 2, name="c1")
        m.add_constraint(x <= 3)
        assert [c.name for c in m.constraints] == ["c0", "c1", "c2"]

    def test_duplicate_constraint_name(self, m):
        x = m.num_var(name="x")
        m.add_constraint(x <= 1, name="cap")
        with pytest.raises(ValueError):
            m.add_constraint(x <= 2, name="cap")
        assert m.num_constraints == 1

    def test_add_constraint_returns_named_copy(self, m):
        x = m.num_var(name="x")
        original = x <= 4
        registered = m.add_constraint(original, name="limit")
        assert registered.name == "limit"
        assert original.name is None

    def test_add_constraint_type_check(self, m):
        with pytest.raises(TypeError):
            m.add_constraint(3)


class TestObjective:
    def test_default_sense(self, m):
        assert m.sense is Sense.MINIMIZE
        assert m.objective is None

    def test_maximize_variable(self, m):
        x = m.num_var(name="x")
        m.maximize(x)
        assert m.sense is Sense.MAXIMIZE
        assert m.objective.coefficient(x) == 1.0

    def test_set_objective_keeps_sense(self, m):
        x = m.num_var(name="x")
        m.maximize(x)
        m.set_objective(2*x)
        assert m.sense is Sense.MAXIMIZE
        m.set_objective(x, "minimize")
        assert m.sense is Sense.MINIMIZE


class TestStandardForm:
    def test_arrays(self, m):
        x = m.num_var(0, 10, name="x")
        y = m.int_var(-2, 5, name="y")
        m.add_constraint(x + 2*y <= 8)
        m.add_constraint(x - y + 1 >= 2)
        m.add_constraint(y == 3)
        m.maximize(3*x + y + 4)

        A, AL, AU, l, u, c, integrality, obj_constant = m.to_standard_form()
        np.testing.assert_allclose(A.toarray(), [[1, 2], [1, -1], [0, 1]])
        np.testing.assert_allclose(AL, [-np.inf, 1, 3])
        np.testing.assert_allclose(AU, [8, np.inf, 3])
        np.testing.assert_allclose(l, [0, -2])
        np.testing.assert_allclose(u, [10, 5])
        np.testing.assert_allclose(c, [-3, -1])
        assert list(integrality) == [0, 1]
        assert obj_constant == -4.0

    def test_empty_model(self, m):
        with pytest.raises(ValueError):
            m.to_standard_form()
