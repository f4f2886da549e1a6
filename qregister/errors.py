"""Exception types raised by qregister.

Every error is a precondition or invariant failure: they are raised before a
register is mutated wherever the condition can be detected up front, and they
are never retried. Each class also derives from the builtin exception a caller
would naturally catch (``ValueError``, ``IndexError``, ``ArithmeticError``).
"""

from __future__ import annotations


class QRegisterError(Exception):
    """Base class for all qregister errors."""


class DimensionMismatchError(QRegisterError, ValueError):
    """Operator and register sizes disagree, or two registers differ in shape."""


class QubitOutOfRangeError(QRegisterError, IndexError):
    """A qubit index lies outside the qubit count, or locations overlap."""


class DivisibilityError(QRegisterError, ValueError):
    """A roller window does not evenly divide the qubit count."""


class DegenerateStateError(QRegisterError, ArithmeticError):
    """A measurement hit an outcome (or a batch column) with zero probability."""


__all__ = [
    "QRegisterError",
    "DimensionMismatchError",
    "QubitOutOfRangeError",
    "DivisibilityError",
    "DegenerateStateError",
]
