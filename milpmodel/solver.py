"""
Solver interface for milpmodel

Models are handed to HiGHS (through ``highspy``) as LP or MPS text. The
standard-form arrays of a model can also be solved directly with
``scipy.optimize.milp``, which runs the same engine without going through
text.
"""
import contextlib
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np
from scipy import sparse

from .errors import DisposedInstanceUse
from .parameters import Parameters
from .results import SOLUTION_STATUSES, SolveResult


_log = logging.getLogger(__name__)

FORMATS = ('lp', 'mps')

# HighsModelStatus member name -> solve status
_HIGHS_STATUS = {
    'kOptimal': 'optimal',
    'kModelEmpty': 'optimal',
    'kInfeasible': 'infeasible',
    'kUnbounded': 'unbounded',
    'kUnboundedOrInfeasible': 'inforunbd',
    'kTimeLimit': 'timelimit',
    'kIterationLimit': 'nodelimit',
    'kSolutionLimit': 'sollimit',
}

# scipy.optimize.milp status code -> solve status
_SCIPY_STATUS = {
    0: 'optimal',
    1: 'timelimit',
    2: 'infeasible',
    3: 'unbounded',
}

# HiGHS primal_solution_status value for a feasible point
_SOLUTION_FEASIBLE = 2


def _ensure_contiguous_int32(arr):
    """Ensure array is contiguous int32"""
    if not isinstance(arr, np.ndarray):
        arr = np.array(arr, dtype=np.int32)
    if arr.dtype != np.int32:
        arr = arr.astype(np.int32)
    return np.ascontiguousarray(arr)


def _ensure_contiguous_float64(arr):
    """Ensure array is contiguous float64"""
    if not isinstance(arr, np.ndarray):
        arr = np.array(arr, dtype=np.float64)
    if arr.dtype != np.float64:
        arr = arr.astype(np.float64)
    return np.ascontiguousarray(arr)


def _import_highspy():
    try:
        import highspy
    except ImportError as e:
        raise ImportError(
            f"Failed to import the HiGHS bindings: {e}\n\n"
            f"Solving models requires the highspy package:\n"
            f"  python -m pip install highspy\n"
        ) from e
    return highspy


class HighsSolver:
    """
    Handle on one HiGHS instance.

    A problem is loaded from LP or MPS text (or a file), solved, and the
    instance released with :meth:`free`. ``free`` is idempotent and never
    raises; every other method raises :class:`DisposedInstanceUse` once the
    instance has been freed. The handle is also a context manager.

    Parameters
    ----------
    param : Parameters, optional
        Solver parameters. If None, default parameters are used.

    Examples
    --------
    >>> from milpmodel import HighsSolver
    >>>
    >>> with HighsSolver() as solver:
    ...     solver.parse(model.to_lp(), 'lp')
    ...     result = solver.solve()
    >>> print(f"Status: {result.status}")
    >>> print(f"Objective: {result.objective}")
    """

    def __init__(self, param: Optional[Parameters] = None):
        self._freed = True
        self._highspy = _import_highspy()
        self._highs = self._highspy.Highs()
        self._freed = False
        self.apply(param if param is not None else Parameters())

    @property
    def freed(self) -> bool:
        return self._freed

    def _ensure_not_freed(self):
        if self._freed:
            raise DisposedInstanceUse("Solver instance has been freed")

    def set_param(self, name: str, value) -> None:
        """
        Set a HiGHS option by name.

        Raises
        ------
        ValueError
            If HiGHS rejects the option name or value
        """
        self._ensure_not_freed()
        status = self._highs.setOptionValue(name, value)
        if status == self._highspy.HighsStatus.kError:
            raise ValueError(f"Invalid HiGHS option: {name}={value!r}")

    def apply(self, param: Parameters) -> None:
        """Set every option of ``param``"""
        for name, value in param.to_highs_options().items():
            self.set_param(name, value)

    def parse(self, text: str, fmt: str = 'lp') -> None:
        """
        Load a problem from LP or MPS text.

        Parameters
        ----------
        text : str
            Problem text
        fmt : str
            'lp' or 'mps'
        """
        self._ensure_not_freed()
        fmt = fmt.lower()
        if fmt not in FORMATS:
            raise ValueError(f"Unknown problem format: {fmt!r} (expected 'lp' or 'mps')")

        fd, path = tempfile.mkstemp(prefix='milpmodel_', suffix=f'.{fmt}')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                fh.write(text)
            _log.debug("Parsing %s problem (%d bytes)", fmt, len(text))
            self._read(path)
        finally:
            with contextlib.suppress(OSError):
                os.unlink(path)

    def read_problem(self, filename: Union[str, Path]) -> None:
        """
        Load a problem from an LP or MPS file; the format follows the suffix.
        """
        self._ensure_not_freed()
        path = Path(filename)
        if not path.exists():
            raise FileNotFoundError(f"Problem file not found: {filename}")
        if path.suffix.lstrip('.').lower() not in FORMATS:
            raise ValueError(f"Cannot infer problem format from file name: {filename}")
        self._read(str(path))

    def _read(self, path: str) -> None:
        status = self._highs.readModel(path)
        if status == self._highspy.HighsStatus.kError:
            raise ValueError(f"HiGHS could not read problem file {path}")

    def solve(self) -> SolveResult:
        """
        Solve the loaded problem.

        Returns
        -------
        SolveResult
            Status, plus objective and name -> value mapping when a feasible
            solution exists
        """
        self._ensure_not_freed()
        highs = self._highs
        highs.run()

        model_status = highs.getModelStatus()
        result = SolveResult(_HIGHS_STATUS.get(model_status.name, 'unknown'))
        result.time = highs.getRunTime()

        info = highs.getInfo()
        if info.mip_node_count >= 0:
            result.node_count = int(info.mip_node_count)
            result.gap = float(info.mip_gap)

        if (result.status in SOLUTION_STATUSES
                and info.primal_solution_status == _SOLUTION_FEASIBLE):
            names = list(highs.getLp().col_names_)
            values = list(highs.getSolution().col_value)
            result.objective = float(info.objective_function_value)
            result.solution = {name: float(value) for name, value in zip(names, values)}

        _log.debug("HiGHS finished: status=%s objective=%s time=%.3fs",
                   result.status, result.objective, result.time)
        return result

    def free(self) -> None:
        """
        Release the HiGHS instance. Safe to call more than once.

        Failures inside the engine while tearing down are logged and
        suppressed; the instance counts as freed either way.
        """
        if self._freed:
            return
        self._freed = True
        try:
            self._highs.clear()
        except Exception:
            _log.debug("HiGHS teardown failed; instance treated as freed", exc_info=True)
        finally:
            self._highs = None

    def __del__(self):
        """Destructor - automatically free the instance when garbage collected"""
        if not getattr(self, '_freed', True):
            self.free()

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - automatically free the instance"""
        self.free()
        return False

    def __repr__(self):
        if self._freed:
            return "<milpmodel.HighsSolver (freed)>"
        return "<milpmodel.HighsSolver>"


def solve_text(text: str, fmt: str = 'lp',
               param: Optional[Parameters] = None) -> SolveResult:
    """
    Convenience function to solve LP or MPS text without keeping a handle.

    Examples
    --------
    >>> result = solve_text(model.to_mps(), 'mps')
    >>> print(result)
    """
    with HighsSolver(param) as solver:
        solver.parse(text, fmt)
        return solver.solve()


def solve_file(filename: Union[str, Path],
               param: Optional[Parameters] = None) -> SolveResult:
    """
    Convenience function to solve an LP or MPS file.

    Examples
    --------
    >>> result = solve_file("model.mps")
    >>> print(result)
    """
    with HighsSolver(param) as solver:
        solver.read_problem(filename)
        return solver.solve()


def solve_arrays(
    A: Union[np.ndarray, sparse.spmatrix],
    AL: np.ndarray,
    AU: np.ndarray,
    l: np.ndarray,
    u: np.ndarray,
    c: np.ndarray,
    integrality: Optional[np.ndarray] = None,
    names: Optional[Sequence[str]] = None,
    param: Optional[Parameters] = None,
) -> SolveResult:
    """
    Solve a problem in standard form with ``scipy.optimize.milp``.

    Solves:
        minimize    c'*x
        subject to  AL <= A*x <= AU
                    l <= x <= u
                    x[j] integer where integrality[j] == 1

    Parameters
    ----------
    A : np.ndarray or scipy.sparse matrix
        Constraint matrix (m x n)
    AL, AU : np.ndarray
        Lower and upper bounds for constraints (length m)
    l, u : np.ndarray
        Lower and upper bounds for variables (length n)
    c : np.ndarray
        Objective coefficients (length n)
    integrality : np.ndarray, optional
        1 for integer columns, 0 for continuous (default: all continuous)
    names : sequence of str, optional
        Column names for the solution mapping (default: x0, x1, ...)
    param : Parameters, optional
        Solver parameters. If None, default parameters are used.

    Returns
    -------
    SolveResult
        Objective is c'*x, without any constant term
    """
    from scipy.optimize import Bounds, LinearConstraint, milp

    if param is None:
        param = Parameters()

    c = _ensure_contiguous_float64(c)
    n = len(c)
    l = _ensure_contiguous_float64(l)
    u = _ensure_contiguous_float64(u)
    if len(l) != n or len(u) != n:
        raise ValueError(f"l and u must have length {n} (number of variables)")
    if integrality is None:
        integrality = np.zeros(n, dtype=np.int32)
    integrality = _ensure_contiguous_int32(integrality)
    if names is None:
        names = [f"x{j}" for j in range(n)]

    if not sparse.issparse(A):
        A = sparse.csr_matrix(np.atleast_2d(A))
    m = A.shape[0]
    AL = _ensure_contiguous_float64(AL)
    AU = _ensure_contiguous_float64(AU)
    if len(AL) != m or len(AU) != m:
        raise ValueError(f"AL and AU must have length {m} (number of constraints)")

    constraints = LinearConstraint(A, AL, AU) if m > 0 else None
    res = milp(c, integrality=integrality, bounds=Bounds(l, u),
               constraints=constraints, options=param.to_scipy_options())

    result = SolveResult(_SCIPY_STATUS.get(res.status, 'unknown'))
    result.gap = getattr(res, 'mip_gap', None)
    result.node_count = getattr(res, 'mip_node_count', None)
    if res.x is not None and result.status in SOLUTION_STATUSES:
        result.objective = float(res.fun)
        result.solution = {name: float(value) for name, value in zip(names, res.x)}

    _log.debug("scipy.optimize.milp finished: status=%s objective=%s",
               result.status, result.objective)
    return result
