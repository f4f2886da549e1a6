"""Structured operators: permutation, diagonal, dense and Kronecker forms.

A structured operator is a linear map on ``2**nqubits`` amplitudes stored in
the cheapest form that represents it exactly:

- ``PermOperator``: ``(M v)[i] = vals[i] * v[perm[i]]``. Each basis state maps
  to exactly one other basis state (X, CNOT, Y up to phases).
- ``DiagOperator``: ``(M v)[i] = diag[i] * v[i]`` (Z, CZ, phase shifts).
- ``DenseOperator``: an explicit matrix, the fallback for H and rotations.
- ``KronOperator``: smaller operators placed on disjoint qubit tuples with
  identity elsewhere. It is applied factor by factor and never expanded.

Application goes through a dispatch table keyed by :class:`OperatorKind`
rather than through per-class methods, so the hot path is one dict lookup
followed by a vectorized tensor expression.

All application functions take amplitudes as a 2D tensor ``(dim, ncols)``:
rows are basis indices of the qubits the operator acts on, columns are
everything else (remaining qubits and batch).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, ClassVar, Dict, Sequence, Tuple

import torch

from ..bits import is_pow2, log2i
from ..errors import DimensionMismatchError, QubitOutOfRangeError


class OperatorKind(enum.Enum):
    """Closed set of structured operator forms."""

    PERM = "perm"
    DIAG = "diag"
    DENSE = "dense"
    KRON = "kron"


def _nqubits_of(dim: int, what: str) -> int:
    if not is_pow2(dim):
        raise DimensionMismatchError(f"{what} dimension {dim} is not a power of 2")
    return log2i(dim)


class StructuredOperator:
    """Shared interface of the structured operator forms."""

    kind: ClassVar[OperatorKind]

    @property
    def nqubits(self) -> int:
        raise NotImplementedError

    @property
    def dim(self) -> int:
        return 1 << self.nqubits

    @property
    def dtype(self) -> torch.dtype:
        raise NotImplementedError

    def to_dense(self) -> torch.Tensor:
        """Materialize the full ``(dim, dim)`` matrix. Meant for small operators."""
        eye = torch.eye(self.dim, dtype=self.dtype, device=self.device)
        return apply_operator(self, eye)

    @property
    def device(self) -> torch.device:
        raise NotImplementedError

    def adjoint(self) -> "StructuredOperator":
        raise NotImplementedError

    def __matmul__(self, other: "StructuredOperator") -> "StructuredOperator":
        return compose(self, other)


@dataclass(frozen=True, eq=False)
class PermOperator(StructuredOperator):
    """
    Permutation matrix with per-row multipliers.

    Attributes
    ----------
    perm:
        int64 tensor of shape (dim,); row ``i`` reads amplitude ``perm[i]``.
    vals:
        complex tensor of shape (dim,); row ``i`` is scaled by ``vals[i]``.
    """

    perm: torch.Tensor
    vals: torch.Tensor

    kind: ClassVar[OperatorKind] = OperatorKind.PERM

    def __post_init__(self) -> None:
        if self.perm.dim() != 1 or self.vals.shape != self.perm.shape:
            raise DimensionMismatchError(
                f"perm and vals must be 1D with equal length, got "
                f"{tuple(self.perm.shape)} and {tuple(self.vals.shape)}"
            )
        _nqubits_of(self.perm.shape[0], "PermOperator")
        if self.perm.dtype != torch.int64:
            object.__setattr__(self, "perm", self.perm.to(torch.int64))

    @property
    def nqubits(self) -> int:
        return log2i(self.perm.shape[0])

    @property
    def dtype(self) -> torch.dtype:
        return self.vals.dtype

    @property
    def device(self) -> torch.device:
        return self.vals.device

    def to_dense(self) -> torch.Tensor:
        mat = torch.zeros((self.dim, self.dim), dtype=self.dtype, device=self.device)
        rows = torch.arange(self.dim, device=self.device)
        mat[rows, self.perm] = self.vals
        return mat

    def adjoint(self) -> "PermOperator":
        inv = torch.argsort(self.perm)
        return PermOperator(inv, self.vals[inv].conj())


@dataclass(frozen=True, eq=False)
class DiagOperator(StructuredOperator):
    """Diagonal matrix stored as its diagonal ``diag`` of shape (dim,)."""

    diag: torch.Tensor

    kind: ClassVar[OperatorKind] = OperatorKind.DIAG

    def __post_init__(self) -> None:
        if self.diag.dim() != 1:
            raise DimensionMismatchError(
                f"diag must be 1D, got shape {tuple(self.diag.shape)}"
            )
        _nqubits_of(self.diag.shape[0], "DiagOperator")

    @property
    def nqubits(self) -> int:
        return log2i(self.diag.shape[0])

    @property
    def dtype(self) -> torch.dtype:
        return self.diag.dtype

    @property
    def device(self) -> torch.device:
        return self.diag.device

    def to_dense(self) -> torch.Tensor:
        return torch.diag(self.diag)

    def adjoint(self) -> "DiagOperator":
        return DiagOperator(self.diag.conj())


@dataclass(frozen=True, eq=False)
class DenseOperator(StructuredOperator):
    """Explicit square matrix."""

    matrix: torch.Tensor

    kind: ClassVar[OperatorKind] = OperatorKind.DENSE

    def __post_init__(self) -> None:
        if self.matrix.dim() != 2 or self.matrix.shape[0] != self.matrix.shape[1]:
            raise DimensionMismatchError(
                f"matrix must be square, got shape {tuple(self.matrix.shape)}"
            )
        _nqubits_of(self.matrix.shape[0], "DenseOperator")

    @property
    def nqubits(self) -> int:
        return log2i(self.matrix.shape[0])

    @property
    def dtype(self) -> torch.dtype:
        return self.matrix.dtype

    @property
    def device(self) -> torch.device:
        return self.matrix.device

    def to_dense(self) -> torch.Tensor:
        return self.matrix

    def adjoint(self) -> "DenseOperator":
        return DenseOperator(self.matrix.conj().transpose(0, 1).contiguous())


Locs = Tuple[int, ...]


def check_locs(nqubits: int, locs: Sequence[int], width: int | None = None) -> Locs:
    """
    Validate qubit locations against a qubit count.

    Returns the locations as a tuple of ints.

    Raises:
        QubitOutOfRangeError: If a location is outside ``[0, nqubits)`` or
            repeated.
        DimensionMismatchError: If ``width`` is given and differs from the
            number of locations.
    """
    locs = tuple(int(q) for q in locs)
    for q in locs:
        if q < 0 or q >= nqubits:
            raise QubitOutOfRangeError(
                f"qubit index {q} out of range [0, {nqubits})"
            )
    if len(set(locs)) != len(locs):
        raise QubitOutOfRangeError(f"qubit locations {locs} are not distinct")
    if width is not None and len(locs) != width:
        raise DimensionMismatchError(
            f"operator acts on {width} qubits but {len(locs)} locations were given"
        )
    return locs


@dataclass(frozen=True, eq=False)
class KronOperator(StructuredOperator):
    """
    Tensor product of operators on disjoint qubit tuples of an n-qubit space.

    Attributes
    ----------
    n:
        Number of qubits of the whole space.
    factors:
        Tuple of ``(locs, operator)`` pairs. ``operator.nqubits`` equals
        ``len(locs)``; local bit ``j`` of a factor is qubit ``locs[j]``.
        Qubits not covered by any factor are acted on by the identity.
    """

    n: int
    factors: Tuple[Tuple[Locs, StructuredOperator], ...]

    kind: ClassVar[OperatorKind] = OperatorKind.KRON

    def __post_init__(self) -> None:
        seen: set[int] = set()
        normalized = []
        for locs, op in self.factors:
            locs = check_locs(self.n, locs, width=op.nqubits)
            overlap = seen.intersection(locs)
            if overlap:
                raise QubitOutOfRangeError(
                    f"Kronecker factors overlap on qubits {sorted(overlap)}"
                )
            seen.update(locs)
            normalized.append((locs, op))
        if not normalized:
            raise DimensionMismatchError("KronOperator needs at least one factor")
        object.__setattr__(self, "factors", tuple(normalized))

    @property
    def nqubits(self) -> int:
        return self.n

    @property
    def dtype(self) -> torch.dtype:
        return self.factors[0][1].dtype

    @property
    def device(self) -> torch.device:
        return self.factors[0][1].device

    def adjoint(self) -> "KronOperator":
        return KronOperator(self.n, tuple((locs, op.adjoint()) for locs, op in self.factors))


def _apply_perm(op: PermOperator, state: torch.Tensor) -> torch.Tensor:
    vals = op.vals.to(dtype=state.dtype, device=state.device)
    return vals.unsqueeze(1) * state[op.perm.to(state.device)]


def _apply_diag(op: DiagOperator, state: torch.Tensor) -> torch.Tensor:
    return op.diag.to(dtype=state.dtype, device=state.device).unsqueeze(1) * state


def _apply_dense(op: DenseOperator, state: torch.Tensor) -> torch.Tensor:
    return op.matrix.to(dtype=state.dtype, device=state.device) @ state


def _apply_kron(op: KronOperator, state: torch.Tensor) -> torch.Tensor:
    for locs, factor in op.factors:
        state = apply_on_locs(factor, state, op.n, locs)
    return state


_APPLY: Dict[OperatorKind, Callable[..., torch.Tensor]] = {
    OperatorKind.PERM: _apply_perm,
    OperatorKind.DIAG: _apply_diag,
    OperatorKind.DENSE: _apply_dense,
    OperatorKind.KRON: _apply_kron,
}


def apply_operator(op: StructuredOperator, state: torch.Tensor) -> torch.Tensor:
    """
    Return ``op @ state`` for a 2D amplitude tensor of shape (op.dim, ncols).

    The input is not modified.

    Raises:
        DimensionMismatchError: If ``state.shape[0] != op.dim``.
    """
    if state.dim() != 2 or state.shape[0] != op.dim:
        raise DimensionMismatchError(
            f"operator of dimension {op.dim} cannot act on state of shape "
            f"{tuple(state.shape)}"
        )
    return _APPLY[op.kind](op, state)


def apply_on_locs(
    op: StructuredOperator,
    state: torch.Tensor,
    nqubits: int,
    locs: Sequence[int],
) -> torch.Tensor:
    """
    Apply a small operator to the qubits ``locs`` of an n-qubit amplitude tensor.

    ``state`` has shape (2**nqubits, ncols). The targeted qubit axes are moved
    to the front, the operator acts on the flattened ``2**len(locs)`` rows, and
    the axes are moved back. Cost is proportional to the operator size times
    the number of columns, independent of the other qubits' structure.
    """
    locs = check_locs(nqubits, locs, width=op.nqubits)
    if state.dim() != 2 or state.shape[0] != 1 << nqubits:
        raise DimensionMismatchError(
            f"state of shape {tuple(state.shape)} does not hold {nqubits} qubits"
        )
    if locs == tuple(range(nqubits)):
        return apply_operator(op, state)

    ncols = state.shape[1]
    # Row-major axis k of the hypercube is qubit nqubits-1-k.
    cube = state.reshape((2,) * nqubits + (ncols,))
    source = [nqubits - 1 - q for q in reversed(locs)]
    moved = torch.movedim(cube, source, list(range(len(locs))))
    moved_shape = moved.shape
    out = apply_operator(op, moved.reshape(1 << len(locs), -1))
    out = torch.movedim(out.reshape(moved_shape), list(range(len(locs))), source)
    return out.reshape(1 << nqubits, ncols)


def compose(a: StructuredOperator, b: StructuredOperator) -> StructuredOperator:
    """
    Matrix product ``a @ b`` (``b`` acts first), keeping structure when possible.

    Permutations and diagonals are closed under products with each other;
    every other combination is materialized as a DenseOperator.
    """
    if a.nqubits != b.nqubits:
        raise DimensionMismatchError(
            f"cannot compose operators on {a.nqubits} and {b.nqubits} qubits"
        )
    if isinstance(a, DiagOperator) and isinstance(b, DiagOperator):
        return DiagOperator(a.diag * b.diag.to(a.dtype))
    if isinstance(a, PermOperator) and isinstance(b, PermOperator):
        return PermOperator(b.perm[a.perm], a.vals * b.vals.to(a.dtype)[a.perm])
    if isinstance(a, PermOperator) and isinstance(b, DiagOperator):
        return PermOperator(a.perm, a.vals * b.diag.to(a.dtype)[a.perm])
    if isinstance(a, DiagOperator) and isinstance(b, PermOperator):
        return PermOperator(b.perm, a.diag * b.vals.to(a.dtype))
    return DenseOperator(a.to_dense() @ b.to_dense().to(a.dtype))


def kron(*ops: StructuredOperator) -> StructuredOperator:
    """
    Kronecker product ``ops[0] (x) ops[1] (x) ...``.

    The last operator acts on the lowest qubits, matching ``torch.kron`` on
    the dense matrices. Products of diagonals stay diagonal and products of
    permutations stay permutations; mixed forms become a KronOperator.
    """
    if not ops:
        raise DimensionMismatchError("kron needs at least one operator")
    if len(ops) == 1:
        return ops[0]
    if all(isinstance(op, DiagOperator) for op in ops):
        diag = ops[0].diag
        for op in ops[1:]:
            diag = torch.kron(diag, op.diag.to(diag.dtype))
        return DiagOperator(diag)
    if all(isinstance(op, PermOperator) for op in ops):
        perm, vals = ops[0].perm, ops[0].vals
        for op in ops[1:]:
            perm = (perm.unsqueeze(1) * op.dim + op.perm.unsqueeze(0)).reshape(-1)
            vals = torch.kron(vals, op.vals.to(vals.dtype))
        return PermOperator(perm, vals)

    factors = []
    offset = 0
    for op in reversed(ops):
        factors.append((tuple(range(offset, offset + op.nqubits)), op))
        offset += op.nqubits
    return KronOperator(offset, tuple(factors))


def identity(
    nqubits: int,
    dtype: torch.dtype,
    device: torch.device | None = None,
) -> DiagOperator:
    """Identity on ``nqubits`` qubits as a diagonal operator."""
    return DiagOperator(torch.ones(1 << nqubits, dtype=dtype, device=device))


__all__ = [
    "OperatorKind",
    "StructuredOperator",
    "PermOperator",
    "DiagOperator",
    "DenseOperator",
    "KronOperator",
    "check_locs",
    "apply_operator",
    "apply_on_locs",
    "compose",
    "kron",
    "identity",
]
