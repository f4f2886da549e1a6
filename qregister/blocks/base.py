"""Block base class and the leaf blocks."""

from __future__ import annotations

from typing import Sequence

from ..errors import DimensionMismatchError
from ..operators.structured import (
    KronOperator,
    StructuredOperator,
    apply_on_locs,
    apply_operator,
    check_locs,
)
from ..register.register import Register


class Block:
    """
    A node of a composite circuit.

    Subclasses set ``nqubits`` and implement ``_apply`` (mutate a register
    whose active qubit count is already known to match) and ``mat``.
    """

    nqubits: int

    def check(self, nactive: int) -> None:
        """
        Validate the whole block tree against a register with ``nactive`` qubits.

        Raises:
            DimensionMismatchError: If the sizes disagree.
        """
        if nactive != self.nqubits:
            raise DimensionMismatchError(
                f"{type(self).__name__} acts on {self.nqubits} qubits but the "
                f"register has {nactive} active qubits"
            )

    def apply(self, reg: Register) -> Register:
        """Check the block against ``reg``, then apply it in place."""
        self.check(reg.nactive)
        self._apply(reg)
        return reg

    def _apply(self, reg: Register) -> None:
        raise NotImplementedError

    def mat(self) -> StructuredOperator:
        """Effective operator of the block on its ``nqubits`` qubits."""
        raise NotImplementedError

    def adjoint(self) -> "Block":
        raise NotImplementedError


class MatrixBlock(Block):
    """Leaf block wrapping a structured operator."""

    def __init__(self, op: StructuredOperator) -> None:
        self.op = op
        self.nqubits = op.nqubits

    def __repr__(self) -> str:
        return f"MatrixBlock({self.op.kind.value}, nqubits={self.nqubits})"

    def _apply(self, reg: Register) -> None:
        reg._replace(apply_operator(self.op, reg.state))

    def mat(self) -> StructuredOperator:
        return self.op

    def adjoint(self) -> "MatrixBlock":
        return MatrixBlock(self.op.adjoint())


def as_block(target) -> Block:
    """Wrap a bare structured operator in a MatrixBlock; pass blocks through."""
    if isinstance(target, Block):
        return target
    if isinstance(target, StructuredOperator):
        return MatrixBlock(target)
    raise TypeError(f"expected a Block or StructuredOperator, got {type(target)}")


class PutBlock(Block):
    """
    Place ``block`` on the qubits ``locs`` of an ``n``-qubit register.

    Local qubit ``j`` of the sub-block is qubit ``locs[j]``.
    """

    def __init__(self, n: int, locs: Sequence[int], block) -> None:
        block = as_block(block)
        self.nqubits = int(n)
        self.locs = check_locs(self.nqubits, locs, width=block.nqubits)
        self.block = block

    def __repr__(self) -> str:
        return f"PutBlock(n={self.nqubits}, locs={self.locs}, {self.block!r})"

    def check(self, nactive: int) -> None:
        super().check(nactive)
        self.block.check(len(self.locs))

    def _apply(self, reg: Register) -> None:
        if isinstance(self.block, MatrixBlock):
            reg._replace(apply_on_locs(self.block.op, reg.state, self.nqubits, self.locs))
            return
        reg.focus(*self.locs)
        try:
            self.block._apply(reg)
        finally:
            reg.relax(*self.locs, to_nactive=self.nqubits)

    def mat(self) -> KronOperator:
        return KronOperator(self.nqubits, ((self.locs, self.block.mat()),))

    def adjoint(self) -> "PutBlock":
        return PutBlock(self.nqubits, self.locs, self.block.adjoint())


__all__ = ["Block", "MatrixBlock", "PutBlock", "as_block"]
