"""
milpmodel Python Package

Algebraic modeling layer for mixed-integer linear programming with LP/MPS
output and HiGHS-backed solving.
"""

from .solver import HighsSolver, solve_text, solve_file, solve_arrays
from .parameters import Parameters
from .results import SolveResult, STATUSES, SOLUTION_STATUSES
from .solution import Solution
from .model import Model, DivMod
from .modeling import (
    Variable, LinearExpression, Constraint, VarType, Sense, ConstraintSense,
    quicksum
)
from .bounds import Bounds, compute_bounds, is_integral
from .formats import to_lp_format, to_mps_format
from .errors import (
    ModelingError, InvalidArity, InvalidVariableKind, UnboundedBigM,
    InvalidRange, UnsupportedProduct, DisposedInstanceUse
)

__version__ = "0.1.0"

__all__ = [
    'HighsSolver',
    'Model',
    'DivMod',
    'solve_text',
    'solve_file',
    'solve_arrays',
    'Parameters',
    'SolveResult',
    'Solution',
    'STATUSES',
    'SOLUTION_STATUSES',
    '__version__',
    # Modeling interface
    'Variable',
    'LinearExpression',
    'Constraint',
    'VarType',
    'Sense',
    'ConstraintSense',
    'quicksum',
    'Bounds',
    'compute_bounds',
    'is_integral',
    'to_lp_format',
    'to_mps_format',
    # Errors
    'ModelingError',
    'InvalidArity',
    'InvalidVariableKind',
    'UnboundedBigM',
    'InvalidRange',
    'UnsupportedProduct',
    'DisposedInstanceUse',
]
