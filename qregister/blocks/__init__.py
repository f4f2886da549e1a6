"""Composite operator algebra over registers."""

from .base import Block, MatrixBlock, PutBlock, as_block
from .composite import Kron, Roller, Sequential
from .pauli import PauliSum, PauliTerm, expect

__all__ = [
    "Block",
    "MatrixBlock",
    "PutBlock",
    "as_block",
    "Sequential",
    "Kron",
    "Roller",
    "PauliTerm",
    "PauliSum",
    "expect",
]
