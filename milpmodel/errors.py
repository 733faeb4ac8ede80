"""
Exceptions raised by milpmodel

All modeling errors are caller-input errors raised synchronously at the call
that violates a precondition. They derive from ValueError so code written
against plain ValueError keeps working.
"""


class ModelingError(ValueError):
    """Base class for invalid modeling requests"""


class InvalidArity(ModelingError):
    """A combinatorial primitive was called without operands"""


class InvalidVariableKind(ModelingError):
    """A primitive that needs a binary variable received something else"""


class UnboundedBigM(ModelingError):
    """
    A Big-M constant could not be derived because an operand has an
    infinite bound and no explicit ``big_m`` was given.
    """


class InvalidRange(ModelingError):
    """Bounds or a divisor outside the domain a primitive accepts"""


class UnsupportedProduct(ModelingError):
    """``product`` was called with two non-binary operands"""


class DisposedInstanceUse(RuntimeError):
    """A solver handle was used after ``free()``"""
