# position_seed/errors.py

"""
Exceptions raised at the public boundary of the pipeline.

All of them signal programmer errors (out-of-domain arguments). They are
raised synchronously, before any JIT kernel is entered, and are never retried.
"""


class GenerationError(Exception):
    """Base class for every error raised by position_seed."""


class InvalidParameter(GenerationError, ValueError):
    """A numeric or categorical argument is outside its documented domain."""


class InvalidCoordinate(InvalidParameter):
    """A coordinate has the wrong dimensionality, a non-finite component,
    or a non-integral component where an integer lattice point is required."""


class ConstraintConflict(InvalidParameter):
    """A child entity tried to redefine a constraint inherited from its parent."""
