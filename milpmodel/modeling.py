"""
Modeling primitives for milpmodel

This module provides the value types of the modeling layer: decision
variables, linear expressions and linear constraints. Everything here is
immutable; arithmetic and comparison operators always build new objects.

Variables are created through :class:`milpmodel.Model`, which owns them.

Example
-------
>>> from milpmodel import Model
>>>
>>> model = Model()
>>> x = model.num_var(0, 10, name='x')
>>> y = model.int_var(0, 5, name='y')
>>>
>>> expr = 3*x + 2*y - 5          # LinearExpression
>>> c = expr <= 10                # Constraint
>>> model.add_constraint(c, name='cap')
"""

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from .errors import InvalidRange


_SCALAR_TYPES = (int, float, np.number)

# Coefficients smaller than this are dropped when expressions are combined
_ZERO_TOL = 1e-15


class VarType(Enum):
    """Variable domain"""
    CONTINUOUS = 'continuous'
    INTEGER = 'integer'
    BINARY = 'binary'


class Sense(Enum):
    """Optimization sense"""
    MINIMIZE = 'minimize'
    MAXIMIZE = 'maximize'


class ConstraintSense(Enum):
    """Constraint sense"""
    LE = '<='  # Less than or equal
    GE = '>='  # Greater than or equal
    EQ = '='   # Equal

    @classmethod
    def _missing_(cls, value):
        if value == '==':
            return cls.EQ
        return None


class Variable:
    """
    Represents a decision variable in the optimization model.

    Variables are immutable and compare by identity when used as dictionary
    keys. They can be combined with arithmetic operators to form expressions
    and with comparison operators to form constraints.

    Parameters
    ----------
    name : str
        Name of the variable, unique within its model
    var_type : VarType or str, optional
        'continuous', 'integer' or 'binary' (default: continuous)
    lower_bound : float, optional
        Lower bound (default: 0). Ignored for binary variables.
    upper_bound : float, optional
        Upper bound (default: inf). Ignored for binary variables.

    Examples
    --------
    >>> x = model.num_var(0, 10, name='x')
    >>> expr = 3*x + 5  # Create linear expression
    """

    __slots__ = ('_name', '_type', '_lb', '_ub')

    def __init__(self, name: str, var_type: Union[VarType, str] = VarType.CONTINUOUS,
                 lower_bound: float = 0.0, upper_bound: float = np.inf):
        var_type = VarType(var_type)
        if var_type is VarType.BINARY:
            lower_bound, upper_bound = 0.0, 1.0
        lb = float(lower_bound)
        ub = float(upper_bound)
        if np.isnan(lb) or np.isnan(ub) or lb > ub:
            raise InvalidRange(
                f"Variable '{name}': lower bound ({lb}) must be <= upper bound ({ub})"
            )
        self._name = name
        self._type = var_type
        self._lb = lb
        self._ub = ub

    @property
    def name(self) -> str:
        return self._name

    @property
    def type(self) -> VarType:
        return self._type

    @property
    def lb(self) -> float:
        """Lower bound"""
        return self._lb

    @property
    def ub(self) -> float:
        """Upper bound"""
        return self._ub

    @property
    def is_integer(self) -> bool:
        """True for integer and binary variables"""
        return self._type is not VarType.CONTINUOUS

    @property
    def is_binary(self) -> bool:
        """True for binary variables and integer variables bounded to [0, 1]"""
        if self._type is VarType.BINARY:
            return True
        return self._type is VarType.INTEGER and self._lb == 0 and self._ub == 1

    def __repr__(self):
        return f"Variable({self._name})"

    # Comparison operators build constraints, so hashing stays identity based
    __hash__ = object.__hash__

    # numpy scalars on the left defer to the reflected operators
    __array_ufunc__ = None

    # Arithmetic operations
    def __add__(self, other):
        return LinearExpression.from_variable(self) + other

    def __radd__(self, other):
        return LinearExpression.from_variable(self) + other

    def __sub__(self, other):
        return LinearExpression.from_variable(self) - other

    def __rsub__(self, other):
        return (-1) * LinearExpression.from_variable(self) + other

    def __mul__(self, other):
        return LinearExpression.from_variable(self) * other

    def __rmul__(self, other):
        return LinearExpression.from_variable(self) * other

    def __neg__(self):
        return -1 * self

    def __truediv__(self, other):
        if not isinstance(other, _SCALAR_TYPES):
            raise TypeError("Can only divide variable by scalar")
        return self * (1.0 / other)

    # Comparison operators for constraints
    def __le__(self, other):
        return LinearExpression.from_variable(self) <= other

    def __ge__(self, other):
        return LinearExpression.from_variable(self) >= other

    def __eq__(self, other):
        return LinearExpression.from_variable(self) == other


class LinearExpression:
    """
    Represents a linear expression: sum of (coefficient * variable) + constant.

    Coefficients are kept in insertion order, keyed by variable. Repeated
    variables are collapsed by summing their coefficients.

    Parameters
    ----------
    coefficients : dict, optional
        Dictionary mapping variables to coefficients
    constant : float, optional
        Constant term

    Examples
    --------
    >>> expr = 3*x + 2*y - 5
    >>> expr.terms
    [(3.0, Variable(x)), (2.0, Variable(y))]
    >>> expr.constant
    -5.0
    """

    __slots__ = ('_coefficients', '_constant')

    def __init__(self, coefficients: Optional[Mapping] = None,
                 constant: float = 0.0):
        coefficients = coefficients or {}
        self._coefficients: Dict[Variable, float] = {
            var: float(coef) for var, coef in coefficients.items()
            if abs(coef) > _ZERO_TOL
        }
        self._constant = float(constant)

    @classmethod
    def from_terms(cls, terms: Iterable, constant: float = 0.0) -> 'LinearExpression':
        """Create expression from (coefficient, variable) pairs, summing repeats"""
        coefficients: Dict[Variable, float] = {}
        for coef, var in terms:
            coefficients[var] = coefficients.get(var, 0.0) + coef
        return cls(coefficients, constant)

    @staticmethod
    def from_variable(var: Variable) -> 'LinearExpression':
        """Create expression from a single variable"""
        return LinearExpression({var: 1.0}, 0.0)

    @staticmethod
    def from_constant(value: float) -> 'LinearExpression':
        """Create expression from a constant"""
        return LinearExpression({}, value)

    @property
    def constant(self) -> float:
        return self._constant

    @property
    def terms(self) -> List[Tuple[float, Variable]]:
        """(coefficient, variable) pairs in insertion order"""
        return [(coef, var) for var, coef in self._coefficients.items()]

    @property
    def coefficients(self) -> Dict[Variable, float]:
        return dict(self._coefficients)

    @property
    def variables(self) -> List[Variable]:
        return list(self._coefficients)

    @property
    def is_constant(self) -> bool:
        return not self._coefficients

    def coefficient(self, var: Variable) -> float:
        """Get coefficient for a variable"""
        return self._coefficients.get(var, 0.0)

    def evaluate(self, values: Mapping) -> float:
        """
        Evaluate the expression for a variable assignment.

        Parameters
        ----------
        values : mapping
            Maps every variable of the expression to a number

        Raises
        ------
        KeyError
            If a variable of the expression has no value
        """
        total = self._constant
        for var, coef in self._coefficients.items():
            total += coef * values[var]
        return total

    def __len__(self):
        return len(self._coefficients)

    def __repr__(self):
        if not self._coefficients and self._constant == 0:
            return "0"

        terms = []
        for var, coef in self._coefficients.items():
            if coef == 1.0:
                terms.append(var.name)
            elif coef == -1.0:
                terms.append(f"-{var.name}")
            else:
                terms.append(f"{coef}*{var.name}")

        if self._constant != 0:
            terms.append(f"{self._constant}")

        result = terms[0]
        for term in terms[1:]:
            if term.startswith('-'):
                result += f" - {term[1:]}"
            else:
                result += f" + {term}"
        return result

    def _combine(self, other, sign: float):
        if isinstance(other, _SCALAR_TYPES):
            return LinearExpression(self._coefficients, self._constant + sign * float(other))
        if isinstance(other, Variable):
            other = LinearExpression.from_variable(other)
        if not isinstance(other, LinearExpression):
            return NotImplemented
        coefficients = dict(self._coefficients)
        for var, coef in other._coefficients.items():
            coefficients[var] = coefficients.get(var, 0.0) + sign * coef
        return LinearExpression(coefficients, self._constant + sign * other._constant)

    # Arithmetic operations
    def __add__(self, other):
        return self._combine(other, 1.0)

    def __radd__(self, other):
        return self._combine(other, 1.0)

    def __sub__(self, other):
        return self._combine(other, -1.0)

    def __rsub__(self, other):
        return (-1 * self) + other

    def __mul__(self, other):
        if isinstance(other, _SCALAR_TYPES):
            scalar = float(other)
            return LinearExpression(
                {var: coef * scalar for var, coef in self._coefficients.items()},
                self._constant * scalar
            )
        if isinstance(other, LinearExpression) and other.is_constant:
            return self * other.constant
        if isinstance(other, LinearExpression) and self.is_constant:
            return other * self._constant
        raise TypeError(
            "Can only multiply expression by scalar (no quadratic terms); "
            "use Model.product for binary products"
        )

    def __rmul__(self, other):
        return self.__mul__(other)

    def __neg__(self):
        return self * (-1)

    def __truediv__(self, other):
        if not isinstance(other, _SCALAR_TYPES):
            raise TypeError("Can only divide expression by scalar")
        return self * (1.0 / float(other))

    # Comparison operators for constraints
    def __le__(self, other):
        return Constraint(self, other, ConstraintSense.LE)

    def __ge__(self, other):
        return Constraint(self, other, ConstraintSense.GE)

    def __eq__(self, other):
        return Constraint(self, other, ConstraintSense.EQ)

    __hash__ = None
    __array_ufunc__ = None


def as_expression(value: Union['LinearExpression', Variable, float]) -> LinearExpression:
    """Convert a variable or scalar to a LinearExpression"""
    if isinstance(value, LinearExpression):
        return value
    if isinstance(value, Variable):
        return LinearExpression.from_variable(value)
    if isinstance(value, _SCALAR_TYPES):
        return LinearExpression.from_constant(float(value))
    raise TypeError(
        f"Expected Variable, scalar, or LinearExpression, got {type(value).__name__}"
    )


class Constraint:
    """
    Represents a linear constraint ``expression sense rhs``.

    Constraints are normally created with comparison operators. A scalar
    right-hand side is stored as ``rhs``; any other right-hand side is moved
    into the expression and ``rhs`` becomes 0. The constant of the expression
    is kept and only moved across by the serializers.

    Parameters
    ----------
    lhs : LinearExpression or Variable or float
        Left-hand side
    rhs : float or LinearExpression or Variable
        Right-hand side
    sense : ConstraintSense or str
        Constraint sense (<=, >=, =)
    name : str, optional
        Name of the constraint, assigned by the model when omitted

    Examples
    --------
    >>> c1 = 2*x + 3*y <= 10
    >>> c2 = x >= y
    >>> c3 = x + y == 7
    """

    __slots__ = ('_expression', '_sense', '_rhs', '_name')

    def __init__(self, lhs: Union[LinearExpression, Variable, float],
                 rhs: Union[float, LinearExpression, Variable],
                 sense: Union[ConstraintSense, str],
                 name: Optional[str] = None):
        lhs = as_expression(lhs)
        if isinstance(rhs, _SCALAR_TYPES):
            self._expression = lhs
            self._rhs = float(rhs)
        elif isinstance(rhs, (Variable, LinearExpression)):
            self._expression = lhs - rhs
            self._rhs = 0.0
        else:
            raise TypeError("RHS must be scalar, Variable, or LinearExpression")
        self._sense = ConstraintSense(sense)
        self._name = name

    @property
    def expression(self) -> LinearExpression:
        return self._expression

    @property
    def sense(self) -> ConstraintSense:
        return self._sense

    @property
    def rhs(self) -> float:
        return self._rhs

    @property
    def name(self) -> Optional[str]:
        return self._name

    def with_name(self, name: str) -> 'Constraint':
        """Return a copy of this constraint carrying ``name``"""
        return Constraint(self._expression, self._rhs, self._sense, name)

    def __bool__(self):
        raise TypeError(
            "A Constraint has no truth value; chained comparisons such as "
            "'a <= x <= b' must be written as two constraints"
        )

    def __repr__(self):
        return (f"Constraint({self._expression} {self._sense.value} {self._rhs}, "
                f"name={self._name})")


def quicksum(*terms) -> LinearExpression:
    """
    Sum variables, expressions and numbers into one LinearExpression.

    Arguments may also be iterables (lists, generators) of such terms.
    With no terms the zero expression is returned.

    Examples
    --------
    >>> quicksum(x, 2*y, 5)
    >>> quicksum(v for v in vars)
    """
    coefficients: Dict[Variable, float] = {}
    constant = 0.0

    def visit(term):
        nonlocal constant
        if isinstance(term, _SCALAR_TYPES):
            constant += float(term)
        elif isinstance(term, Variable):
            coefficients[term] = coefficients.get(term, 0.0) + 1.0
        elif isinstance(term, LinearExpression):
            for var, coef in term._coefficients.items():
                coefficients[var] = coefficients.get(var, 0.0) + coef
            constant += term.constant
        elif isinstance(term, Iterable) and not isinstance(term, (str, bytes)):
            for item in term:
                visit(item)
        else:
            raise TypeError(f"Cannot sum object of type {type(term).__name__}")

    for term in terms:
        visit(term)
    return LinearExpression(coefficients, constant)
