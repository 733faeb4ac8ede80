"""
LP and MPS writers

Pure functions turning a model's objective, sense, constraints and variables
into solver-readable text. Output depends only on the input and follows
insertion order, so the same model always produces byte-identical text.
"""

from typing import Dict, List, Optional, Sequence

import numpy as np

from .modeling import (
    Constraint, ConstraintSense, LinearExpression, Sense, Variable, VarType
)


_MPS_ROW_TYPES = {
    ConstraintSense.LE: 'L',
    ConstraintSense.GE: 'G',
    ConstraintSense.EQ: 'E',
}

_OBJ_ROW = 'obj'


def format_number(value: float) -> str:
    """Format a number with up to 15 significant digits (10.0 -> '10')"""
    # adding 0.0 turns -0.0 into 0.0
    return f"{float(value) + 0.0:.15g}"


def _constraint_names(constraints: Sequence[Constraint]) -> List[str]:
    names = []
    index = 0
    for constraint in constraints:
        if constraint.name is not None:
            names.append(constraint.name)
        else:
            names.append(f"c{index}")
            index += 1
    return names


def _sense_of(sense) -> Sense:
    return sense if isinstance(sense, Sense) else Sense(sense)


# ---------------------------------------------------------------------------
# LP format
# ---------------------------------------------------------------------------

def _lp_terms(expr: LinearExpression) -> str:
    parts = []
    for coef, var in expr.terms:
        if coef == 0:
            continue
        magnitude = abs(coef)
        body = var.name if magnitude == 1 else f"{format_number(magnitude)} {var.name}"
        if not parts:
            parts.append(f"-{body}" if coef < 0 else body)
        else:
            parts.append(f"{'-' if coef < 0 else '+'} {body}")
    return ' '.join(parts)


def _lp_objective(objective: Optional[LinearExpression]) -> str:
    if objective is None:
        return ''
    text = _lp_terms(objective)
    constant = objective.constant
    if constant != 0:
        if not text:
            text = format_number(constant)
        else:
            text += f" {'-' if constant < 0 else '+'} {format_number(abs(constant))}"
    return text


def _lp_bound(var: Variable) -> Optional[str]:
    lb, ub = var.lb, var.ub
    if lb == 0 and ub == np.inf:
        return None
    if lb == -np.inf and ub == np.inf:
        return f" {var.name} free"
    if lb == ub:
        return f" {var.name} = {format_number(lb)}"
    if ub == np.inf:
        return f" {var.name} >= {format_number(lb)}"
    return f" {format_number(lb)} <= {var.name} <= {format_number(ub)}"


def to_lp_format(objective: Optional[LinearExpression],
                 sense,
                 constraints: Sequence[Constraint],
                 variables: Sequence[Variable],
                 name: Optional[str] = None) -> str:
    """
    Write a model in CPLEX LP format.

    Parameters
    ----------
    objective : LinearExpression or None
        Objective expression; an empty objective is written when None
    sense : Sense or str
        'minimize' or 'maximize'
    constraints : sequence of Constraint
        Constraints in output order; unnamed ones get c0, c1, ...
    variables : sequence of Variable
        All variables of the model, used for the Bounds, General and
        Binary sections
    name : str, optional
        Unused by the LP format, accepted for symmetry with MPS

    Returns
    -------
    str
        LP text terminated by ``End`` and a newline

    Examples
    --------
    >>> print(to_lp_format(x + 2*y, 'maximize', [x + y <= 10], [x, y]))
    Maximize
     obj: x + 2 y
    Subject To
     c0: x + y <= 10
    End
    """
    lines = ['Maximize' if _sense_of(sense) is Sense.MAXIMIZE else 'Minimize']

    objective_text = _lp_objective(objective)
    lines.append(f" obj: {objective_text}" if objective_text else " obj:")

    lines.append('Subject To')
    for row_name, constraint in zip(_constraint_names(constraints), constraints):
        expr = constraint.expression
        rhs = constraint.rhs - expr.constant
        terms = _lp_terms(expr) or '0'
        lines.append(
            f" {row_name}: {terms} {constraint.sense.value} {format_number(rhs)}"
        )

    bound_lines = []
    for var in variables:
        if var.type is VarType.BINARY:
            continue
        line = _lp_bound(var)
        if line is not None:
            bound_lines.append(line)
    if bound_lines:
        lines.append('Bounds')
        lines.extend(bound_lines)

    general = [var for var in variables if var.type is VarType.INTEGER]
    if general:
        lines.append('General')
        lines.extend(f" {var.name}" for var in general)

    binary = [var for var in variables if var.type is VarType.BINARY]
    if binary:
        lines.append('Binary')
        lines.extend(f" {var.name}" for var in binary)

    lines.append('End')
    return '\n'.join(lines) + '\n'


# ---------------------------------------------------------------------------
# MPS format
# ---------------------------------------------------------------------------

def _mps_bounds(var: Variable) -> List[str]:
    name = var.name
    lb, ub = var.lb, var.ub
    if var.type is VarType.BINARY:
        return [f" BV bnd  {name}"]
    if lb == -np.inf and ub == np.inf:
        return [f" FR bnd  {name}"]
    if lb == ub:
        return [f" FX bnd  {name}  {format_number(lb)}"]

    lines = []
    if lb == -np.inf:
        lines.append(f" MI bnd  {name}")
    elif lb != 0:
        lines.append(f" LO bnd  {name}  {format_number(lb)}")
    if ub == np.inf:
        # explicit so readers never default an integer column to binary
        lines.append(f" PL bnd  {name}")
    else:
        lines.append(f" UP bnd  {name}  {format_number(ub)}")
    return lines


def to_mps_format(objective: Optional[LinearExpression],
                  sense,
                  constraints: Sequence[Constraint],
                  variables: Sequence[Variable],
                  name: Optional[str] = None) -> str:
    """
    Write a model in free-format MPS.

    Rows are constant free, so each constraint's expression constant is moved
    to the RHS section. An objective constant is written on the objective row
    as its negation, the usual MPS convention for an objective offset.
    Columns are grouped continuous first, then integer and binary columns
    between INTORG/INTEND markers. Columns without a nonzero coefficient are
    not written.

    Parameters
    ----------
    objective : LinearExpression or None
        Objective expression
    sense : Sense or str
        'minimize' or 'maximize'
    constraints : sequence of Constraint
        Constraints in output order; unnamed ones get c0, c1, ...
    variables : sequence of Variable
        All variables of the model
    name : str, optional
        Problem name for the NAME record (default: 'problem')

    Returns
    -------
    str
        MPS text terminated by ``ENDATA`` and a newline
    """
    lines = [f"NAME          {name or 'problem'}"]

    if _sense_of(sense) is Sense.MAXIMIZE:
        lines.append('OBJSENSE')
        lines.append(' MAX')

    row_names = _constraint_names(constraints)

    lines.append('ROWS')
    lines.append(f" N  {_OBJ_ROW}")
    for row_name, constraint in zip(row_names, constraints):
        lines.append(f" {_MPS_ROW_TYPES[constraint.sense]}  {row_name}")

    # Column-major coefficients: variable -> {row name -> coefficient}
    column_entries: Dict[Variable, Dict[str, float]] = {var: {} for var in variables}

    def collect(expr: LinearExpression, row_name: str):
        for coef, var in expr.terms:
            entries = column_entries.setdefault(var, {})
            entries[row_name] = entries.get(row_name, 0.0) + coef

    if objective is not None:
        collect(objective, _OBJ_ROW)
    for row_name, constraint in zip(row_names, constraints):
        collect(constraint.expression, row_name)

    def column_lines(var: Variable) -> List[str]:
        return [
            f"    {var.name}  {row_name}  {format_number(coef)}"
            for row_name, coef in column_entries[var].items()
            if coef != 0
        ]

    lines.append('COLUMNS')
    for var in variables:
        if var.type is VarType.CONTINUOUS:
            lines.extend(column_lines(var))

    integer_lines = []
    for var in variables:
        if var.type is not VarType.CONTINUOUS:
            integer_lines.extend(column_lines(var))
    if integer_lines:
        lines.append("    MARKER    'MARKER'  'INTORG'")
        lines.extend(integer_lines)
        lines.append("    MARKER    'MARKER'  'INTEND'")

    lines.append('RHS')
    if objective is not None and objective.constant != 0:
        lines.append(f"    rhs  {_OBJ_ROW}  {format_number(-objective.constant)}")
    for row_name, constraint in zip(row_names, constraints):
        rhs = constraint.rhs - constraint.expression.constant
        if rhs != 0:
            lines.append(f"    rhs  {row_name}  {format_number(rhs)}")

    bound_lines = []
    for var in variables:
        # undeclared columns cannot carry bounds
        if any(coef != 0 for coef in column_entries[var].values()):
            bound_lines.extend(_mps_bounds(var))
    if bound_lines:
        lines.append('BOUNDS')
        lines.extend(bound_lines)

    lines.append('ENDATA')
    return '\n'.join(lines) + '\n'
