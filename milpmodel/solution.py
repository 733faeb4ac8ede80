"""
Variable-keyed view of a solve result
"""
from typing import Dict, Iterable, Optional, Union

from .modeling import LinearExpression, Variable
from .results import SolveResult


class Solution:
    """
    Read-only solution of a :class:`milpmodel.Model`.

    The solver reports values by variable name. On construction they are
    copied once into an ordered table keyed by the model's Variable objects,
    so lookups use the variables themselves.

    Parameters
    ----------
    result : SolveResult
        Raw solver result
    variables : iterable of Variable
        Variables of the model that was solved

    Examples
    --------
    >>> solution = model.solve()
    >>> solution.status
    'optimal'
    >>> solution.get_value(x)
    3.0
    """

    def __init__(self, result: SolveResult, variables: Iterable[Variable]):
        self._result = result
        self._values: Dict[Variable, float] = {}
        if result.solution is not None:
            raw = result.solution
            for var in variables:
                if var.name in raw:
                    self._values[var] = raw[var.name]

    @property
    def status(self) -> str:
        return self._result.status

    @property
    def objective(self) -> Optional[float]:
        return self._result.objective

    @property
    def result(self) -> SolveResult:
        """The underlying name-keyed result"""
        return self._result

    @property
    def values(self) -> Dict[Variable, float]:
        """Variable -> value, in model order"""
        return dict(self._values)

    def is_optimal(self) -> bool:
        return self._result.is_optimal()

    def get_value(self, item: Union[Variable, LinearExpression]) -> Optional[float]:
        """
        Value of a variable or expression in this solution.

        Returns None when the solver reported no value for a variable the
        item depends on.
        """
        if isinstance(item, Variable):
            return self._values.get(item)
        if isinstance(item, LinearExpression):
            try:
                return item.evaluate(self._values)
            except KeyError:
                return None
        raise TypeError("Can only look up a Variable or LinearExpression")

    def __getitem__(self, var: Variable) -> float:
        if var not in self._values:
            raise KeyError(var.name)
        return self._values[var]

    def __repr__(self):
        return (f"Solution(status='{self.status}', objective={self.objective}, "
                f"n_vars={len(self._values)})")
