"""
Parameters class for the milpmodel solve backends
"""


class Parameters:
    """
    Configuration parameters for solving a model.

    The same object configures both backends: HiGHS through ``highspy``
    (text models) and ``scipy.optimize.milp`` (standard-form arrays).

    Attributes
    ----------
    time_limit : float or None
        Maximum time in seconds (default: None, no limit)
    mip_rel_gap : float or None
        Relative MIP gap at which branch-and-bound stops (default: None,
        solver default)
    threads : int or None
        Number of threads (default: None, solver default). HiGHS only.
    random_seed : int or None
        Random seed (default: None, solver default). HiGHS only.
    presolve : bool
        Enable presolve (default: True)
    verbose : bool
        Print solver log to the console (default: False)

    Examples
    --------
    >>> param = Parameters()
    >>> param.time_limit = 10.0
    >>> param.mip_rel_gap = 1e-6
    """

    def __init__(self):
        self.time_limit = None
        self.mip_rel_gap = None
        self.threads = None
        self.random_seed = None
        self.presolve = True
        self.verbose = False

    def __repr__(self):
        return (f"Parameters(time_limit={self.time_limit}, "
                f"mip_rel_gap={self.mip_rel_gap}, "
                f"threads={self.threads}, "
                f"presolve={self.presolve}, "
                f"verbose={self.verbose})")

    def to_highs_options(self):
        """Convert to a dictionary of HiGHS option names and values"""
        options = {
            'output_flag': bool(self.verbose),
            'presolve': 'on' if self.presolve else 'off',
        }
        if self.time_limit is not None:
            options['time_limit'] = float(self.time_limit)
        if self.mip_rel_gap is not None:
            options['mip_rel_gap'] = float(self.mip_rel_gap)
        if self.threads is not None:
            options['threads'] = int(self.threads)
        if self.random_seed is not None:
            options['random_seed'] = int(self.random_seed)
        return options

    def to_scipy_options(self):
        """Convert to the ``options`` dictionary of scipy.optimize.milp"""
        options = {
            'disp': bool(self.verbose),
            'presolve': bool(self.presolve),
        }
        if self.time_limit is not None:
            options['time_limit'] = float(self.time_limit)
        if self.mip_rel_gap is not None:
            options['mip_rel_gap'] = float(self.mip_rel_gap)
        return options

    @classmethod
    def from_dict(cls, d):
        """Create Parameters from dictionary"""
        param = cls()
        for key, value in d.items():
            if hasattr(param, key):
                setattr(param, key, value)
        return param

    def to_dict(self):
        """Convert to dictionary"""
        return {
            'time_limit': self.time_limit,
            'mip_rel_gap': self.mip_rel_gap,
            'threads': self.threads,
            'random_seed': self.random_seed,
            'presolve': self.presolve,
            'verbose': self.verbose,
        }
