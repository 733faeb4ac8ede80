"""
Model class for milpmodel

A Model owns the variables and constraints it creates. Besides plain linear
constraints it offers reformulation primitives (logical operators,
cardinality, indicators, abs, min/max, products, semi-continuous variables,
integer division, either-or and reification). Each primitive adds auxiliary
variables and linear constraints to the model and returns the variable that
carries its result.
"""
import logging
from collections.abc import Iterable
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np
from scipy import sparse

from .bounds import Bounds, assert_binary, compute_bounds, finite_bounds, is_integral
from .errors import InvalidArity, InvalidRange, UnsupportedProduct
from .formats import to_lp_format, to_mps_format
from .modeling import (
    Constraint, ConstraintSense, LinearExpression, Sense, Variable, VarType,
    _SCALAR_TYPES, as_expression, quicksum,
)
from .parameters import Parameters
from .solution import Solution


_log = logging.getLogger(__name__)

ExprLike = Union[LinearExpression, Variable, float]

_LE = ConstraintSense.LE
_GE = ConstraintSense.GE
_EQ = ConstraintSense.EQ

# Default strictness margin for reifying constraints over continuous values
_REIFY_EPSILON = 1e-6


class DivMod(NamedTuple):
    """Result of :meth:`Model.div_mod`"""
    quotient: Variable
    remainder: Variable


def _operands(args) -> list:
    """Accept both f(a, b, c) and f([a, b, c])"""
    if len(args) == 1 and isinstance(args[0], Iterable) and not isinstance(
            args[0], (Variable, LinearExpression, str)):
        return list(args[0])
    return list(args)


class Model:
    """
    Mixed-integer linear model builder.

    The model represents a problem of the form:
        minimize or maximize   objective
        subject to             constraints
                               lb <= x <= ub, x integer or binary where declared

    Parameters
    ----------
    name : str, optional
        Problem name, written to the MPS NAME record

    Examples
    --------
    >>> from milpmodel import Model
    >>>
    >>> model = Model()
    >>> x = model.num_var(0, 10, name='x')
    >>> y = model.num_var(0, 10, name='y')
    >>> model.add_constraint(x + y <= 10)
    >>> model.add_constraint(x <= 5)
    >>> model.maximize(x + 2*y)
    >>>
    >>> solution = model.solve()
    >>> solution.objective
    20.0
    >>> solution.get_value(y)
    10.0
    """

    def __init__(self, name: Optional[str] = None):
        self.name = name
        self._variables: Dict[str, Variable] = {}
        self._constraints: List[Constraint] = []
        self._constraint_names = set()
        self._objective: Optional[LinearExpression] = None
        self._sense = Sense.MINIMIZE
        self._var_counter = 0
        self._con_counter = 0
        self._aux_counter = 0

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def variables(self) -> List[Variable]:
        """Variables in creation order"""
        return list(self._variables.values())

    @property
    def constraints(self) -> List[Constraint]:
        """Registered constraints in insertion order"""
        return list(self._constraints)

    @property
    def num_variables(self) -> int:
        return len(self._variables)

    @property
    def num_constraints(self) -> int:
        return len(self._constraints)

    @property
    def objective(self) -> Optional[LinearExpression]:
        return self._objective

    @property
    def sense(self) -> Sense:
        return self._sense

    def get_variable(self, name: str) -> Variable:
        """Look up a variable by name"""
        return self._variables[name]

    # ------------------------------------------------------------------
    # Variables
    # ------------------------------------------------------------------

    def _next_var_name(self) -> str:
        while True:
            name = f"x{self._var_counter}"
            self._var_counter += 1
            if name not in self._variables:
                return name

    def _aux_name(self, prefix: str) -> str:
        while True:
            name = f"{prefix}_{self._aux_counter}"
            self._aux_counter += 1
            if name not in self._variables:
                return name

    def _check_new_name(self, name: Optional[str]) -> None:
        if name is not None and name in self._variables:
            raise ValueError(f"Variable name '{name}' is already used in this model")

    def add_variable(self, var_type: Union[VarType, str] = VarType.CONTINUOUS,
                     lb: float = 0.0, ub: float = np.inf,
                     name: Optional[str] = None) -> Variable:
        """
        Create a variable owned by this model.

        Parameters
        ----------
        var_type : VarType or str
            'continuous', 'integer' or 'binary'
        lb, ub : float
            Bounds; ignored for binary variables
        name : str, optional
            Unique name; generated as x0, x1, ... when omitted

        Raises
        ------
        ValueError
            If the name is already used
        InvalidRange
            If lb > ub
        """
        self._check_new_name(name)
        if name is None:
            name = self._next_var_name()
        var = Variable(name, var_type, lb, ub)
        self._variables[name] = var
        return var

    def num_var(self, lb: float = 0.0, ub: float = np.inf,
                name: Optional[str] = None) -> Variable:
        """Create a continuous variable"""
        return self.add_variable(VarType.CONTINUOUS, lb, ub, name)

    def int_var(self, lb: float = 0.0, ub: float = np.inf,
                name: Optional[str] = None) -> Variable:
        """Create an integer variable"""
        return self.add_variable(VarType.INTEGER, lb, ub, name)

    def bool_var(self, name: Optional[str] = None) -> Variable:
        """Create a binary variable"""
        return self.add_variable(VarType.BINARY, 0.0, 1.0, name)

    def add_variables(self, count: int,
                      var_type: Union[VarType, str] = VarType.CONTINUOUS,
                      lb: float = 0.0, ub: float = np.inf,
                      prefix: Optional[str] = None) -> List[Variable]:
        """
        Create ``count`` variables of one kind.

        With ``prefix`` the names are prefix0, prefix1, ...; otherwise they
        are generated like any unnamed variable. All names are checked before
        any variable is created.
        """
        if count < 0:
            raise ValueError("count must be non-negative")
        names = [None] * count
        if prefix is not None:
            names = [f"{prefix}{i}" for i in range(count)]
            for name in names:
                self._check_new_name(name)
        return [self.add_variable(var_type, lb, ub, name) for name in names]

    # ------------------------------------------------------------------
    # Constraints and objective
    # ------------------------------------------------------------------

    def _next_constraint_name(self) -> str:
        while True:
            name = f"c{self._con_counter}"
            self._con_counter += 1
            if name not in self._constraint_names:
                return name

    def add_constraint(self, constraint: Constraint,
                       name: Optional[str] = None) -> Constraint:
        """
        Register a constraint.

        Parameters
        ----------
        constraint : Constraint
            Constraint built with comparison operators
        name : str, optional
            Row name; falls back to the constraint's own name, then to a
            generated c0, c1, ...

        Returns
        -------
        Constraint
            The registered, named copy
        """
        if not isinstance(constraint, Constraint):
            raise TypeError(
                f"Expected a Constraint, got {type(constraint).__name__}"
            )
        if name is None:
            name = constraint.name
        if name is None:
            name = self._next_constraint_name()
        elif name in self._constraint_names:
            raise ValueError(f"Constraint name '{name}' is already used in this model")

        registered = constraint.with_name(name)
        self._constraints.append(registered)
        self._constraint_names.add(name)
        return registered

    def _add_row(self, lhs: ExprLike, sense: ConstraintSense, rhs: float) -> Constraint:
        return self.add_constraint(Constraint(lhs, float(rhs), sense))

    def set_objective(self, expr: ExprLike,
                      sense: Union[Sense, str, None] = None) -> None:
        """Set the objective expression and, optionally, the sense"""
        self._objective = as_expression(expr)
        if sense is not None:
            self._sense = Sense(sense)

    def minimize(self, expr: ExprLike) -> None:
        """Set the objective to minimize ``expr``"""
        self.set_objective(expr, Sense.MINIMIZE)

    def maximize(self, expr: ExprLike) -> None:
        """Set the objective to maximize ``expr``"""
        self.set_objective(expr, Sense.MAXIMIZE)

    # ------------------------------------------------------------------
    # Logical primitives
    # ------------------------------------------------------------------

    def and_(self, *variables: Variable) -> Variable:
        """
        Binary z = v1 AND v2 AND ... AND vn.

        A single operand is returned unchanged.

        Raises
        ------
        InvalidArity
            If no operand is given
        InvalidVariableKind
            If an operand is not binary
        """
        operands = _operands(variables)
        if not operands:
            raise InvalidArity("and_ requires at least 1 operand")
        for var in operands:
            assert_binary(var, 'and_')
        if len(operands) == 1:
            return operands[0]

        z = self.add_variable(VarType.BINARY, name=self._aux_name('and'))
        for var in operands:
            self._add_row(z - var, _LE, 0)
        self._add_row(z - quicksum(operands), _GE, 1 - len(operands))
        _log.debug("and_: %d operands -> %s", len(operands), z.name)
        return z

    def or_(self, *variables: Variable) -> Variable:
        """
        Binary z = v1 OR v2 OR ... OR vn.

        A single operand is returned unchanged.
        """
        operands = _operands(variables)
        if not operands:
            raise InvalidArity("or_ requires at least 1 operand")
        for var in operands:
            assert_binary(var, 'or_')
        if len(operands) == 1:
            return operands[0]

        z = self.add_variable(VarType.BINARY, name=self._aux_name('or'))
        for var in operands:
            self._add_row(z - var, _GE, 0)
        self._add_row(quicksum(operands) - z, _GE, 0)
        _log.debug("or_: %d operands -> %s", len(operands), z.name)
        return z

    def not_(self, x: Variable) -> Variable:
        """Binary z = 1 - x"""
        assert_binary(x, 'not_')
        z = self.add_variable(VarType.BINARY, name=self._aux_name('not'))
        self._add_row(z + x, _EQ, 1)
        _log.debug("not_: %s -> %s", x.name, z.name)
        return z

    def xor(self, x: Variable, y: Variable, method: str = 'constraints') -> Variable:
        """
        Binary z = x XOR y.

        Parameters
        ----------
        method : str
            'constraints' bounds z with four inequalities; 'compact' builds
            w = x AND y and sets z = x + y - 2w
        """
        if method not in ('constraints', 'compact'):
            raise ValueError(
                f"Unknown xor method: {method!r} (expected 'constraints' or 'compact')"
            )
        assert_binary(x, 'xor')
        assert_binary(y, 'xor')

        if method == 'compact':
            w = self.and_(x, y)
            z = self.add_variable(VarType.BINARY, name=self._aux_name('xor'))
            self._add_row(z - x - y + 2 * w, _EQ, 0)
        else:
            z = self.add_variable(VarType.BINARY, name=self._aux_name('xor'))
            self._add_row(z - x - y, _LE, 0)
            self._add_row(z - x + y, _GE, 0)
            self._add_row(z + x - y, _GE, 0)
            self._add_row(z + x + y, _LE, 2)
        _log.debug("xor(%s): %s, %s -> %s", method, x.name, y.name, z.name)
        return z

    def add_implication(self, x: Variable, y: Variable) -> Constraint:
        """x = 1 forces y = 1"""
        assert_binary(x, 'add_implication')
        assert_binary(y, 'add_implication')
        return self._add_row(x - y, _LE, 0)

    def _cardinality(self, context: str, k: float, sense: ConstraintSense,
                     variables) -> Constraint:
        operands = _operands(variables)
        if not isinstance(k, _SCALAR_TYPES):
            raise TypeError(f"{context}: k must be a number")
        for var in operands:
            assert_binary(var, context)
        return self._add_row(quicksum(operands), sense, k)

    def add_at_most(self, k: float, *variables: Variable) -> Constraint:
        """At most k of the binaries are 1"""
        return self._cardinality('add_at_most', k, _LE, variables)

    def add_at_least(self, k: float, *variables: Variable) -> Constraint:
        """At least k of the binaries are 1"""
        return self._cardinality('add_at_least', k, _GE, variables)

    def add_exactly(self, k: float, *variables: Variable) -> Constraint:
        """Exactly k of the binaries are 1"""
        return self._cardinality('add_exactly', k, _EQ, variables)

    # ------------------------------------------------------------------
    # Indicators and disjunctions
    # ------------------------------------------------------------------

    def _indicator_halves(self, constraint: Constraint, big_m: Optional[float],
                          context: str) -> List[Tuple[ConstraintSense, float]]:
        """
        Big-M per one-sided half of ``constraint``.

        Derived constants are clamped at 0: a half that can never be
        violated needs no relaxation. An explicit ``big_m`` is used as is.
        """
        if not isinstance(constraint, Constraint):
            raise TypeError(f"{context}: expected a Constraint")
        senses = [_LE, _GE] if constraint.sense is _EQ else [constraint.sense]
        if big_m is not None:
            return [(sense, float(big_m)) for sense in senses]

        bounds = finite_bounds(constraint.expression, context)
        rhs = constraint.rhs
        halves = []
        for sense in senses:
            if sense is _LE:
                halves.append((sense, max(bounds.ub - rhs, 0.0)))
            else:
                halves.append((sense, max(rhs - bounds.lb, 0.0)))
        return halves

    def _emit_indicator(self, delta: Variable, constraint: Constraint,
                        halves, active: int) -> List[Constraint]:
        expr = constraint.expression
        rhs = constraint.rhs
        rows = []
        for sense, big_m in halves:
            if sense is _LE:
                if active == 1:
                    rows.append(self._add_row(expr + big_m * delta, _LE, rhs + big_m))
                else:
                    rows.append(self._add_row(expr - big_m * delta, _LE, rhs))
            else:
                if active == 1:
                    rows.append(self._add_row(expr - big_m * delta, _GE, rhs - big_m))
                else:
                    rows.append(self._add_row(expr + big_m * delta, _GE, rhs))
        return rows

    def add_indicator(self, delta: Variable, constraint: Constraint,
                      active: int = 1, big_m: Optional[float] = None) -> List[Constraint]:
        """
        Enforce ``constraint`` whenever ``delta == active``.

        For a <= constraint the relaxation uses M = ub(expr) - rhs, for >=
        M = rhs - lb(expr); an equality emits both halves.

        Parameters
        ----------
        delta : Variable
            Binary controlling variable
        constraint : Constraint
            Constraint to switch on
        active : int
            Value of delta (0 or 1) under which the constraint holds
        big_m : float, optional
            Explicit Big-M; needed when the expression has infinite bounds

        Returns
        -------
        list of Constraint
            The rows added (one, or two for an equality)
        """
        assert_binary(delta, 'add_indicator')
        if active not in (0, 1):
            raise ValueError(f"add_indicator: active must be 0 or 1, got {active!r}")
        halves = self._indicator_halves(constraint, big_m, 'add_indicator')
        rows = self._emit_indicator(delta, constraint, halves, active)
        _log.debug("add_indicator: %s == %d -> %d rows", delta.name, active, len(rows))
        return rows

    def add_either_or(self, c1: Constraint, c2: Constraint,
                      big_m: Optional[float] = None) -> Variable:
        """
        At least one of ``c1`` and ``c2`` holds.

        Returns the binary selector: at 0 ``c1`` is enforced, at 1 ``c2``.
        """
        halves1 = self._indicator_halves(c1, big_m, 'add_either_or')
        halves2 = self._indicator_halves(c2, big_m, 'add_either_or')
        delta = self.add_variable(VarType.BINARY, name=self._aux_name('either'))
        self._emit_indicator(delta, c1, halves1, 0)
        self._emit_indicator(delta, c2, halves2, 1)
        _log.debug("add_either_or -> %s", delta.name)
        return delta

    # ------------------------------------------------------------------
    # Nonlinear functions
    # ------------------------------------------------------------------

    def abs(self, expr: ExprLike, big_m: Optional[float] = None) -> Variable:
        """
        Variable t = |expr|.

        The expression is split into its positive and negative parts, and a
        binary selects which of the two may be nonzero.
        """
        expr = as_expression(expr)
        lb, ub = finite_bounds(expr, 'abs', big_m)
        pos_max = max(ub, 0.0)
        neg_max = max(-lb, 0.0)

        x_plus = self.num_var(0, pos_max, name=self._aux_name('abs_pos'))
        x_minus = self.num_var(0, neg_max, name=self._aux_name('abs_neg'))
        delta = self.add_variable(VarType.BINARY, name=self._aux_name('abs_sign'))
        t = self.num_var(0, max(pos_max, neg_max), name=self._aux_name('abs'))

        self._add_row(expr - x_plus + x_minus, _EQ, 0)
        self._add_row(x_plus + x_minus - t, _EQ, 0)
        self._add_row(x_plus - pos_max * delta, _LE, 0)
        self._add_row(x_minus + neg_max * delta, _LE, neg_max)
        _log.debug("abs -> %s", t.name)
        return t

    def _extremum_operands(self, exprs, context: str,
                           big_m: Optional[float]) -> Tuple[list, List[Bounds]]:
        operands = list(exprs)
        if not operands:
            raise InvalidArity(f"{context} requires at least 1 operand")
        if len(operands) == 1:
            return operands, [compute_bounds(as_expression(operands[0]))]
        expressions = [as_expression(e) for e in operands]
        if big_m is None:
            bounds = [finite_bounds(e, context) for e in expressions]
        else:
            bounds = [compute_bounds(e) for e in expressions]
        return expressions, bounds

    def _single_operand(self, operand, bounds: Bounds, prefix: str) -> Variable:
        if isinstance(operand, Variable):
            return operand
        t = self.num_var(bounds.lb, bounds.ub, name=self._aux_name(prefix))
        self._add_row(t - as_expression(operand), _EQ, 0)
        return t

    def max(self, exprs: Sequence[ExprLike], big_m: Optional[float] = None) -> Variable:
        """
        Variable t = max(e1, ..., en).

        One binary selector per operand picks the operand that t equals;
        t is bounded below by every operand.

        Raises
        ------
        InvalidArity
            If ``exprs`` is empty
        UnboundedBigM
            If an operand has infinite bounds and no ``big_m`` is given
        """
        operands, bounds = self._extremum_operands(exprs, 'max', big_m)
        if len(operands) == 1:
            return self._single_operand(operands[0], bounds[0], 'max')

        max_ub = max(b.ub for b in bounds)
        min_lb = min(b.lb for b in bounds)
        if big_m is None:
            big_ms = [max_ub - b.lb for b in bounds]
        else:
            big_ms = [float(big_m)] * len(operands)

        t = self.num_var(min_lb, max_ub, name=self._aux_name('max'))
        selectors = [self.add_variable(VarType.BINARY, name=self._aux_name('max_sel'))
                     for _ in operands]
        self._add_row(quicksum(selectors), _EQ, 1)
        for expr, delta, m in zip(operands, selectors, big_ms):
            self._add_row(t - expr, _GE, 0)
            self._add_row(t - expr + m * delta, _LE, m)
        _log.debug("max: %d operands -> %s", len(operands), t.name)
        return t

    def min(self, exprs: Sequence[ExprLike], big_m: Optional[float] = None) -> Variable:
        """Variable t = min(e1, ..., en); mirror image of :meth:`max`"""
        operands, bounds = self._extremum_operands(exprs, 'min', big_m)
        if len(operands) == 1:
            return self._single_operand(operands[0], bounds[0], 'min')

        max_ub = max(b.ub for b in bounds)
        min_lb = min(b.lb for b in bounds)
        if big_m is None:
            big_ms = [b.ub - min_lb for b in bounds]
        else:
            big_ms = [float(big_m)] * len(operands)

        t = self.num_var(min_lb, max_ub, name=self._aux_name('min'))
        selectors = [self.add_variable(VarType.BINARY, name=self._aux_name('min_sel'))
                     for _ in operands]
        self._add_row(quicksum(selectors), _EQ, 1)
        for expr, delta, m in zip(operands, selectors, big_ms):
            self._add_row(t - expr, _LE, 0)
            self._add_row(t - expr - m * delta, _GE, -m)
        _log.debug("min: %d operands -> %s", len(operands), t.name)
        return t

    def product(self, x: Union[Variable, LinearExpression],
                y: Union[Variable, LinearExpression],
                big_m: Optional[float] = None) -> Variable:
        """
        Variable w = x * y where at least one factor is binary.

        Two binaries give ``and_(x, y)``. A binary times a bounded term uses
        Glover's linearization over the bounds [L, U] of the other factor.

        Raises
        ------
        UnsupportedProduct
            If neither factor is a binary variable
        UnboundedBigM
            If the non-binary factor is unbounded and no ``big_m`` is given
        """
        x_binary = isinstance(x, Variable) and x.is_binary
        y_binary = isinstance(y, Variable) and y.is_binary
        if x_binary and y_binary:
            return self.and_(x, y)
        if x_binary:
            delta, factor = x, as_expression(y)
        elif y_binary:
            delta, factor = y, as_expression(x)
        else:
            raise UnsupportedProduct(
                "product requires at least one binary operand; "
                "products of two non-binary terms are not supported"
            )

        lower, upper = finite_bounds(factor, 'product', big_m)
        w = self.num_var(min(lower, 0.0), max(upper, 0.0), name=self._aux_name('prod'))
        self._add_row(w - upper * delta, _LE, 0)
        self._add_row(w - lower * delta, _GE, 0)
        self._add_row(w - factor - lower * delta, _LE, -lower)
        self._add_row(w - factor - upper * delta, _GE, -upper)
        _log.debug("product: %s * [%g, %g] -> %s", delta.name, lower, upper, w.name)
        return w

    def semi_cont_var(self, lb: float, ub: float, name: Optional[str] = None) -> Variable:
        """
        Continuous variable restricted to {0} or [lb, ub].

        Raises
        ------
        InvalidRange
            Unless 0 < lb <= ub < inf
        """
        if not (0 < lb <= ub < np.inf):
            raise InvalidRange(
                f"semi_cont_var requires 0 < lb <= ub < inf, got lb={lb}, ub={ub}"
            )
        self._check_new_name(name)
        x = self.num_var(0, ub, name)
        delta = self.add_variable(VarType.BINARY, name=self._aux_name('semi_on'))
        self._add_row(x - lb * delta, _GE, 0)
        self._add_row(x - ub * delta, _LE, 0)
        _log.debug("semi_cont_var: %s in {0} U [%g, %g]", x.name, lb, ub)
        return x

    def div_mod(self, expr: ExprLike, d: int) -> DivMod:
        """
        Integer quotient and remainder of ``expr`` divided by ``d``.

        Parameters
        ----------
        expr : LinearExpression or Variable
            Dividend; must have lb >= 0 and a finite ub
        d : int
            Positive integer divisor

        Returns
        -------
        DivMod
            (quotient, remainder) integer variables with
            expr = d*quotient + remainder and 0 <= remainder < d
        """
        if (isinstance(d, bool) or not isinstance(d, _SCALAR_TYPES)
                or not float(d).is_integer() or d <= 0):
            raise InvalidRange(f"div_mod: divisor must be a positive integer, got {d!r}")
        d = int(d)
        expr = as_expression(expr)
        lb, ub = compute_bounds(expr)
        if lb < 0 or not np.isfinite(ub):
            raise InvalidRange(
                f"div_mod: dividend must be non-negative with a finite upper bound, "
                f"got bounds [{lb}, {ub}]"
            )

        quotient = self.int_var(0, np.floor(ub / d), name=self._aux_name('div'))
        remainder = self.int_var(0, d - 1, name=self._aux_name('mod'))
        self._add_row(expr - d * quotient - remainder, _EQ, 0)
        _log.debug("div_mod: d=%d -> %s, %s", d, quotient.name, remainder.name)
        return DivMod(quotient, remainder)

    # ------------------------------------------------------------------
    # Reification
    # ------------------------------------------------------------------

    @staticmethod
    def _default_epsilon(expr: LinearExpression, rhs: float) -> float:
        if is_integral(expr) and float(rhs).is_integer():
            return 1.0
        return _REIFY_EPSILON

    def reify(self, constraint: Constraint, big_m: Optional[float] = None,
              epsilon: Optional[float] = None) -> Variable:
        """
        Binary delta with delta = 1 exactly when ``constraint`` holds.

        When the constraint fails it is required to fail by at least
        ``epsilon``. The default is 1 when the expression and right-hand side
        are provably integral, which makes the reification exact, and 1e-6
        otherwise.

        An equality uses two binaries. With M = max(ub - rhs, rhs - lb) and
        K = M + epsilon::

            expr + M*delta           <= rhs + M      (delta=1: expr <= rhs)
            expr - M*delta           >= rhs - M      (delta=1: expr >= rhs)
            expr - K*mu + K*delta    >= rhs - M
            expr - K*mu - K*delta    <= rhs - epsilon

        The last two rows are slack when delta = 1. When delta = 0 they force
        expr <= rhs - epsilon (mu = 0) or expr >= rhs + epsilon (mu = 1).
        """
        if not isinstance(constraint, Constraint):
            raise TypeError("reify: expected a Constraint")
        if epsilon is not None and epsilon <= 0:
            raise ValueError(f"reify: epsilon must be positive, got {epsilon}")

        expr = constraint.expression
        rhs = constraint.rhs
        if constraint.sense is _LE:
            delta = self._reify_leq(expr, rhs, big_m, epsilon)
        elif constraint.sense is _GE:
            delta = self._reify_leq(-expr, -rhs, big_m, epsilon)
        else:
            delta = self._reify_eq(expr, rhs, big_m, epsilon)
        _log.debug("reify(%s) -> %s", constraint.sense.value, delta.name)
        return delta

    def _reify_leq(self, expr: LinearExpression, rhs: float,
                   big_m: Optional[float], epsilon: Optional[float]) -> Variable:
        lb, ub = finite_bounds(expr, 'reify', big_m)
        eps = epsilon if epsilon is not None else self._default_epsilon(expr, rhs)
        m_upper = ub - rhs
        m_lower = lb - rhs

        delta = self.add_variable(VarType.BINARY, name=self._aux_name('reif'))
        self._add_row(expr + m_upper * delta, _LE, rhs + m_upper)
        self._add_row(expr - (m_lower - eps) * delta, _GE, rhs + eps)
        return delta

    def _reify_eq(self, expr: LinearExpression, rhs: float,
                  big_m: Optional[float], epsilon: Optional[float]) -> Variable:
        lb, ub = finite_bounds(expr, 'reify', big_m)
        eps = epsilon if epsilon is not None else self._default_epsilon(expr, rhs)
        big = max(ub - rhs, rhs - lb)
        k = big + eps

        delta = self.add_variable(VarType.BINARY, name=self._aux_name('reif'))
        mu = self.add_variable(VarType.BINARY, name=self._aux_name('reif_side'))
        self._add_row(expr + big * delta, _LE, rhs + big)
        self._add_row(expr - big * delta, _GE, rhs - big)
        self._add_row(expr - k * mu + k * delta, _GE, rhs - big)
        self._add_row(expr - k * mu - k * delta, _LE, rhs - eps)
        return delta

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def to_lp(self) -> str:
        """Model in CPLEX LP format"""
        return to_lp_format(self._objective, self._sense, self._constraints,
                            self.variables, self.name)

    def to_mps(self) -> str:
        """Model in free MPS format"""
        return to_mps_format(self._objective, self._sense, self._constraints,
                             self.variables, self.name)

    def to_string(self, fmt: str = 'lp') -> str:
        """
        Model text in the given format.

        Parameters
        ----------
        fmt : str
            'lp' or 'mps'
        """
        fmt = fmt.lower()
        if fmt == 'lp':
            return self.to_lp()
        if fmt == 'mps':
            return self.to_mps()
        raise ValueError(f"Unknown model format: {fmt!r} (expected 'lp' or 'mps')")

    def to_standard_form(self):
        """
        Arrays of the model in minimization form.

        Returns
        -------
        tuple
            (A, AL, AU, l, u, c, integrality, obj_constant) describing
                minimize    c'*x + obj_constant
                subject to  AL <= A*x <= AU
                            l <= x <= u
            with A a scipy.sparse CSR matrix. A maximization objective is
            negated.
        """
        variables = self.variables
        n = len(variables)
        if n == 0:
            raise ValueError("Model has no variables")
        index = {var: j for j, var in enumerate(variables)}

        sign = -1.0 if self._sense is Sense.MAXIMIZE else 1.0
        c = np.zeros(n)
        obj_constant = 0.0
        if self._objective is not None:
            for coef, var in self._objective.terms:
                c[index[var]] = sign * coef
            obj_constant = sign * self._objective.constant

        m = len(self._constraints)
        rows, cols, data = [], [], []
        AL = np.full(m, -np.inf)
        AU = np.full(m, np.inf)
        for i, constraint in enumerate(self._constraints):
            expr = constraint.expression
            for coef, var in expr.terms:
                rows.append(i)
                cols.append(index[var])
                data.append(coef)
            rhs = constraint.rhs - expr.constant
            if constraint.sense is not _GE:
                AU[i] = rhs
            if constraint.sense is not _LE:
                AL[i] = rhs
        A = sparse.csr_matrix((data, (rows, cols)), shape=(m, n))

        l = np.array([var.lb for var in variables], dtype=np.float64)
        u = np.array([var.ub for var in variables], dtype=np.float64)
        integrality = np.array([1 if var.is_integer else 0 for var in variables],
                               dtype=np.int32)
        return A, AL, AU, l, u, c, integrality, obj_constant

    def solve(self, parameters: Optional[Parameters] = None, fmt: str = 'lp',
              backend: str = 'highs') -> Solution:
        """
        Solve the model.

        Parameters
        ----------
        parameters : Parameters, optional
            Solver parameters. If None, default parameters are used.
        fmt : str
            Text format handed to HiGHS, 'lp' or 'mps'
        backend : str
            'highs' serializes the model and solves the text with HiGHS;
            'scipy' solves the standard-form arrays with scipy.optimize.milp

        Returns
        -------
        Solution
            Variable-keyed view of the result
        """
        from .solver import HighsSolver, solve_arrays

        if backend == 'highs':
            text = self.to_string(fmt)
            with HighsSolver(parameters) as solver:
                solver.parse(text, fmt)
                result = solver.solve()
        elif backend == 'scipy':
            A, AL, AU, l, u, c, integrality, obj_constant = self.to_standard_form()
            result = solve_arrays(A, AL, AU, l, u, c, integrality,
                                  names=[var.name for var in self.variables],
                                  param=parameters)
            if result.objective is not None:
                objective = result.objective + obj_constant
                if self._sense is Sense.MAXIMIZE:
                    objective = -objective
                result.objective = objective
        else:
            raise ValueError(f"Unknown backend: {backend!r} (expected 'highs' or 'scipy')")

        _log.debug("Model solved with %s: status=%s", backend, result.status)
        return Solution(result, self.variables)

    def __repr__(self):
        return (f"<milpmodel.Model n_vars={self.num_variables} "
                f"n_cons={self.num_constraints} sense={self._sense.value}>")
