"""Composite blocks: sequences, Kronecker products and rollers."""

from __future__ import annotations

from typing import Iterable, List, Mapping, Sequence, Tuple, Union

from ..errors import DimensionMismatchError, DivisibilityError, QubitOutOfRangeError
from ..operators.structured import KronOperator, StructuredOperator, compose
from ..register.register import Register
from .base import Block, PutBlock, as_block


class Sequential(Block):
    """
    Apply blocks one after another on the same register.

    Every intermediate state is materialized in the register, so a sequence
    behaves exactly like calling ``apply`` for each block in order.
    """

    def __init__(self, *blocks) -> None:
        if len(blocks) == 1 and isinstance(blocks[0], (list, tuple)):
            blocks = tuple(blocks[0])
        if not blocks:
            raise ValueError("Sequential needs at least one block")
        self.blocks: Tuple[Block, ...] = tuple(as_block(b) for b in blocks)
        self.nqubits = self.blocks[0].nqubits
        for i, b in enumerate(self.blocks):
            if b.nqubits != self.nqubits:
                raise DimensionMismatchError(
                    f"block {i} acts on {b.nqubits} qubits, expected {self.nqubits}"
                )

    def __repr__(self) -> str:
        return f"Sequential({', '.join(repr(b) for b in self.blocks)})"

    def __len__(self) -> int:
        return len(self.blocks)

    def __iter__(self):
        return iter(self.blocks)

    def check(self, nactive: int) -> None:
        super().check(nactive)
        for b in self.blocks:
            b.check(nactive)

    def _apply(self, reg: Register) -> None:
        for b in self.blocks:
            b._apply(reg)

    def mat(self) -> StructuredOperator:
        # Later blocks multiply from the left.
        result = self.blocks[0].mat()
        for b in self.blocks[1:]:
            result = compose(b.mat(), result)
        return result

    def adjoint(self) -> "Sequential":
        return Sequential(*[b.adjoint() for b in reversed(self.blocks)])


LocsLike = Union[int, Sequence[int]]


def _as_locs(locs: LocsLike) -> Tuple[int, ...]:
    if isinstance(locs, int):
        return (locs,)
    return tuple(int(q) for q in locs)


class Kron(Block):
    """
    Sub-blocks on disjoint qubit ranges of an ``n``-qubit register.

    Parameters
    ----------
    n:
        Total number of qubits.
    blocks:
        Mapping or iterable of ``(locs, block)`` pairs. ``locs`` is a qubit or
        a sequence of qubits whose length matches the block.

    Raises
    ------
    QubitOutOfRangeError
        If a location is out of range or two sub-blocks overlap.
    """

    def __init__(
        self,
        n: int,
        blocks: Union[Mapping[LocsLike, object], Iterable[Tuple[LocsLike, object]]],
    ) -> None:
        items = blocks.items() if isinstance(blocks, Mapping) else blocks
        self.nqubits = int(n)
        self.puts: List[PutBlock] = []
        used: set[int] = set()
        for locs, block in items:
            put = PutBlock(self.nqubits, _as_locs(locs), block)
            overlap = used.intersection(put.locs)
            if overlap:
                raise QubitOutOfRangeError(
                    f"Kron sub-blocks overlap on qubits {sorted(overlap)}"
                )
            used.update(put.locs)
            self.puts.append(put)
        if not self.puts:
            raise ValueError("Kron needs at least one sub-block")

    def __repr__(self) -> str:
        inner = ", ".join(f"{p.locs}: {p.block!r}" for p in self.puts)
        return f"{type(self).__name__}(n={self.nqubits}, {{{inner}}})"

    def check(self, nactive: int) -> None:
        super().check(nactive)
        for put in self.puts:
            put.check(nactive)

    def _apply(self, reg: Register) -> None:
        for put in self.puts:
            put._apply(reg)

    def mat(self) -> KronOperator:
        return KronOperator(
            self.nqubits, tuple((put.locs, put.block.mat()) for put in self.puts)
        )

    def adjoint(self) -> "Kron":
        return Kron(self.nqubits, [(put.locs, put.block.adjoint()) for put in self.puts])


class Roller(Kron):
    """
    One layer of ``window``-qubit blocks tiled over ``n`` qubits.

    ``blocks`` is either a single block, repeated at every offset, or a
    sequence of blocks placed at the offsets in order. Without ``offsets``
    the blocks sit at 0, w, 2w, ... and must cover all ``n`` qubits. With
    ``offsets``, block ``k`` covers qubits ``offsets[k] .. offsets[k] + w - 1``
    and the windows may leave qubits uncovered.

    Raises
    ------
    DivisibilityError
        If ``offsets`` is omitted and ``window`` does not divide ``n``.
    QubitOutOfRangeError
        If a window leaves the register or two windows overlap.
    """

    def __init__(
        self,
        n: int,
        blocks,
        window: int | None = None,
        offsets: Sequence[int] | None = None,
    ) -> None:
        single = isinstance(blocks, (Block, StructuredOperator))
        blocks = [as_block(blocks)] if single else [as_block(b) for b in blocks]
        if not blocks:
            raise ValueError("Roller needs at least one block")
        window = blocks[0].nqubits if window is None else int(window)
        if window < 1:
            raise DimensionMismatchError(f"window must be >= 1, got {window}")

        if offsets is None:
            if n % window != 0:
                raise DivisibilityError(
                    f"window {window} does not divide {n} qubits"
                )
            offsets = range(0, n, window)
        offsets = tuple(int(o) for o in offsets)
        if single:
            blocks = blocks * len(offsets)
        elif len(blocks) != len(offsets):
            raise DimensionMismatchError(
                f"Roller over {n} qubits with {len(offsets)} windows of {window} "
                f"needs {len(offsets)} blocks, got {len(blocks)}"
            )
        for b in blocks:
            if b.nqubits != window:
                raise DimensionMismatchError(
                    f"Roller block acts on {b.nqubits} qubits, window is {window}"
                )
        self.window = window
        self.offsets = offsets
        super().__init__(
            n, [(range(o, o + window), b) for o, b in zip(offsets, blocks)]
        )

    def adjoint(self) -> "Roller":
        return Roller(
            self.nqubits,
            [put.block.adjoint() for put in self.puts],
            self.window,
            offsets=self.offsets,
        )


__all__ = ["Sequential", "Kron", "Roller"]
