"""
Results class for solver output
"""
from typing import Any, Dict, Optional


#: Every status a solve can report
STATUSES = (
    'optimal',
    'infeasible',
    'unbounded',
    'inforunbd',
    'timelimit',
    'nodelimit',
    'stallnodelimit',
    'gaplimit',
    'sollimit',
    'bestsollimit',
    'restartlimit',
    'unknown',
)

#: Statuses under which a solver may hold a primal solution
SOLUTION_STATUSES = (
    'optimal',
    'timelimit',
    'nodelimit',
    'gaplimit',
    'sollimit',
    'bestsollimit',
)


class SolveResult:
    """
    Raw result of one solve, keyed by variable name.

    Attributes
    ----------
    status : str
        One of :data:`STATUSES`
    objective : float or None
        Objective value of the best solution, None without a solution
    solution : dict or None
        Variable name -> value, None without a solution
    gap : float or None
        Relative MIP gap reported by the solver
    node_count : int or None
        Branch-and-bound nodes explored
    time : float
        Solve time in seconds

    Methods
    -------
    is_optimal()
        Check if solution is optimal
    has_solution()
        Check if a primal solution is attached
    to_dict()
        Convert results to dictionary
    """

    def __init__(self, status: str = 'unknown',
                 objective: Optional[float] = None,
                 solution: Optional[Dict[str, float]] = None):
        if status not in STATUSES:
            raise ValueError(f"Unknown solve status: {status!r}")
        self.status: str = status
        self.objective: Optional[float] = objective
        self.solution: Optional[Dict[str, float]] = solution
        self.gap: Optional[float] = None
        self.node_count: Optional[int] = None
        self.time: float = 0.0

    def is_optimal(self) -> bool:
        """Check if solution is optimal"""
        return self.status == 'optimal'

    def has_solution(self) -> bool:
        """Check if a primal solution is attached"""
        return self.solution is not None

    def __repr__(self):
        n_vars = len(self.solution) if self.solution is not None else 0
        return (f"SolveResult(status='{self.status}', "
                f"objective={self.objective}, "
                f"time={self.time:.3f}s, "
                f"n_vars={n_vars})")

    def __str__(self):
        lines = [
            "Solve Results",
            "=" * 50,
            f"Status:          {self.status}",
        ]
        if self.objective is not None:
            lines.append(f"Objective:       {self.objective:.6e}")
        if self.gap is not None:
            lines.append(f"Gap:             {self.gap:.6e}")
        if self.node_count is not None:
            lines.append(f"Nodes:           {self.node_count}")
        lines.append(f"Time:            {self.time:.3f} seconds")
        if self.solution is not None:
            lines.append(f"Variables:       {len(self.solution)}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert results to dictionary"""
        return {
            'status': self.status,
            'objective': self.objective,
            'solution': dict(self.solution) if self.solution is not None else None,
            'gap': self.gap,
            'node_count': self.node_count,
            'time': self.time,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]):
        """Create SolveResult from dictionary"""
        results = cls(d.get('status', 'unknown'))
        for key, value in d.items():
            if key == 'solution' and value is not None:
                results.solution = dict(value)
            elif key != 'status' and hasattr(results, key):
                setattr(results, key, value)
        return results
