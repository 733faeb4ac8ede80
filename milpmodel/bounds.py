"""
Bound analysis for linear expressions

Interval bounds of an expression follow from the bounds of its variables.
They drive automatic Big-M selection in the reformulation primitives of
:class:`milpmodel.Model`.
"""

from typing import NamedTuple, Optional, Union

import numpy as np

from .errors import InvalidVariableKind, UnboundedBigM
from .modeling import LinearExpression, Variable, VarType, _SCALAR_TYPES


class Bounds(NamedTuple):
    """Closed interval [lb, ub]; either end may be infinite"""
    lb: float
    ub: float


def compute_bounds(expr: Union[LinearExpression, Variable, float]) -> Bounds:
    """
    Compute the tightest interval bounds of an expression.

    Parameters
    ----------
    expr : LinearExpression, Variable or float
        Expression to bound

    Returns
    -------
    Bounds
        (lb, ub), possibly infinite if a variable is unbounded in the
        direction that matters

    Examples
    --------
    >>> x = model.num_var(0, 10)
    >>> y = model.num_var(-5, 5)
    >>> compute_bounds(2*x - 3*y + 1)
    Bounds(lb=-14.0, ub=36.0)
    """
    if isinstance(expr, Variable):
        return Bounds(expr.lb, expr.ub)
    if isinstance(expr, _SCALAR_TYPES):
        return Bounds(float(expr), float(expr))

    lb = expr.constant
    ub = expr.constant
    for coef, var in expr.terms:
        if coef > 0:
            lb += coef * var.lb
            ub += coef * var.ub
        elif coef < 0:
            lb += coef * var.ub
            ub += coef * var.lb
    return Bounds(lb, ub)


def finite_bounds(expr: Union[LinearExpression, Variable],
                  context: str,
                  big_m: Optional[float] = None) -> Bounds:
    """
    Bounds for Big-M derivation.

    An explicit ``big_m`` overrides the analysis and yields (-big_m, big_m).
    Otherwise the computed bounds must be finite.

    Raises
    ------
    UnboundedBigM
        If a bound is infinite and no ``big_m`` was supplied
    """
    if big_m is not None:
        return Bounds(-float(big_m), float(big_m))
    bounds = compute_bounds(expr)
    if not (np.isfinite(bounds.lb) and np.isfinite(bounds.ub)):
        raise UnboundedBigM(
            f"{context}: expression has infinite bounds "
            f"[{bounds.lb}, {bounds.ub}]; provide an explicit big_m"
        )
    return bounds


def _is_integer_value(value: float) -> bool:
    return float(value).is_integer()


def is_integral(expr: Union[LinearExpression, Variable, float]) -> bool:
    """
    Return True if the expression is guaranteed to take integer values.

    This is a sufficient condition only: the constant and every coefficient
    must be integers and every variable integer or binary.
    """
    if isinstance(expr, Variable):
        return expr.type in (VarType.INTEGER, VarType.BINARY)
    if isinstance(expr, _SCALAR_TYPES):
        return _is_integer_value(expr)

    if not _is_integer_value(expr.constant):
        return False
    for coef, var in expr.terms:
        if not var.is_integer or not _is_integer_value(coef):
            return False
    return True


def assert_binary(var: Variable, context: str) -> None:
    """
    Check that ``var`` is binary, or integer with bounds [0, 1].

    Raises
    ------
    InvalidVariableKind
        If the variable is not binary
    """
    if not isinstance(var, Variable) or not var.is_binary:
        name = var.name if isinstance(var, Variable) else repr(var)
        raise InvalidVariableKind(f"{context}: variable '{name}' must be binary")
