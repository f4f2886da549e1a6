"""Multi-qubit gates built directly in structured form.

These constructors never form a ``2**n x 2**n`` matrix for X/Y/Z-type gates.
They enumerate the basis once as an int64 tensor and derive the permutation
and multipliers with bitmask arithmetic, so cost is O(2**num_bit) time and
memory.
"""

from __future__ import annotations

from typing import Sequence, Union

import torch

from ..bits import basis_tensor, bmask, flip, parity, take_bit, test_all
from ..core.device import resolve_dtype
from ..errors import QubitOutOfRangeError
from ..operators.structured import (
    DenseOperator,
    DiagOperator,
    KronOperator,
    PermOperator,
    StructuredOperator,
    check_locs,
)
from . import standard

Bits = Union[int, Sequence[int]]


def _as_tuple(bits: Bits) -> tuple[int, ...]:
    if isinstance(bits, int):
        return (bits,)
    return tuple(int(b) for b in bits)


def _basis(num_bit: int, device: torch.device | None) -> torch.Tensor:
    return basis_tensor(num_bit, device=device)


def _check_disjoint(cbits: tuple[int, ...], tbits: tuple[int, ...]) -> None:
    common = set(cbits).intersection(tbits)
    if common:
        raise QubitOutOfRangeError(
            f"control and target qubits overlap on {sorted(common)}"
        )


def x_gate(
    num_bit: int,
    bits: Bits,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> PermOperator:
    """X on every qubit in ``bits``: ``perm[i] = flip(i, bmask(bits))``."""
    bits = check_locs(num_bit, _as_tuple(bits))
    dtype = resolve_dtype(dtype)
    b = _basis(num_bit, device)
    return PermOperator(flip(b, bmask(bits)), torch.ones(1 << num_bit, dtype=dtype, device=device))


def y_gate(
    num_bit: int,
    bits: Bits,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> PermOperator:
    """
    Y on every qubit in ``bits``.

    Same permutation as :func:`x_gate`. With ``factor = 1j ** len(bits)``,
    row ``i`` is scaled by ``+factor`` when the masked bits of ``i`` (the index
    before flipping) have odd parity and by ``-factor`` when it is even.

    For one qubit this is exactly [[0, -i], [i, 0]]. For ``m`` qubits it equals
    the m-fold tensor power of Pauli-Y times ``(-1) ** (m + 1)``, a global
    phase; :func:`pauli_string_gate` builds the exact tensor power.
    """
    bits = check_locs(num_bit, _as_tuple(bits))
    dtype = resolve_dtype(dtype)
    mask = bmask(bits)
    b = _basis(num_bit, device)
    factor = torch.tensor(1j ** len(bits), dtype=dtype, device=device)
    odd = parity(b, mask) == 1
    vals = torch.where(odd, factor, -factor)
    return PermOperator(flip(b, mask), vals)


def z_gate(
    num_bit: int,
    bits: Bits,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> DiagOperator:
    """Z on every qubit in ``bits``: +1 for even masked parity, -1 for odd."""
    bits = check_locs(num_bit, _as_tuple(bits))
    dtype = resolve_dtype(dtype)
    b = _basis(num_bit, device)
    signs = 1 - 2 * parity(b, bmask(bits))
    return DiagOperator(signs.to(dtype))


def cx_gate(
    num_bit: int,
    cbits: Bits,
    tbits: Bits,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> PermOperator:
    """Flip every qubit in ``tbits`` on basis states where all ``cbits`` are 1."""
    cbits = check_locs(num_bit, _as_tuple(cbits))
    tbits = check_locs(num_bit, _as_tuple(tbits))
    _check_disjoint(cbits, tbits)
    dtype = resolve_dtype(dtype)
    b = _basis(num_bit, device)
    ctrl = test_all(b, bmask(cbits))
    perm = torch.where(ctrl, flip(b, bmask(tbits)), b)
    return PermOperator(perm, torch.ones(1 << num_bit, dtype=dtype, device=device))


def cy_gate(
    num_bit: int,
    cbit: int,
    tbit: int,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> PermOperator:
    """
    Controlled-Y with a single control and a single target.

    On controlled rows the target bit is flipped and the row is scaled by
    ``(2 * take_bit(i, tbit) - 1) * 1j``: -i when the target bit of the row
    is 0 and +i when it is 1, matching Pauli-Y.
    """
    cbit, tbit = check_locs(num_bit, (cbit, tbit))
    dtype = resolve_dtype(dtype)
    b = _basis(num_bit, device)
    ctrl = take_bit(b, cbit) == 1
    perm = torch.where(ctrl, flip(b, bmask(tbit)), b)
    phase = ((2 * take_bit(b, tbit) - 1).to(dtype)) * 1j
    vals = torch.where(ctrl, phase, torch.ones_like(phase))
    return PermOperator(perm, vals)


def cz_gate(
    num_bit: int,
    cbit: int,
    tbit: int,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> DiagOperator:
    """Controlled-Z: -1 on rows where both ``cbit`` and ``tbit`` are 1."""
    cbit, tbit = check_locs(num_bit, (cbit, tbit))
    dtype = resolve_dtype(dtype)
    b = _basis(num_bit, device)
    ctrl = take_bit(b, cbit) == 1
    diag = torch.where(ctrl, 1 - 2 * take_bit(b, tbit), torch.ones_like(b))
    return DiagOperator(diag.to(dtype))


def hilbert_kron(
    num_bit: int,
    ops: Sequence[StructuredOperator],
    locs: Sequence[Bits],
) -> KronOperator:
    """
    Place ``ops[k]`` on ``locs[k]`` inside a ``num_bit``-qubit space.

    A location is a single qubit or a tuple of qubits for multi-qubit
    operators. Uncovered qubits get the identity.
    """
    if len(ops) != len(locs):
        raise ValueError(
            f"got {len(ops)} operators but {len(locs)} locations"
        )
    return KronOperator(num_bit, tuple((_as_tuple(loc), op) for op, loc in zip(ops, locs)))


def general_controlled_gates(
    num_bit: int,
    projectors: Sequence[StructuredOperator],
    cbits: Sequence[int],
    gates: Sequence[StructuredOperator],
    locs: Sequence[int],
) -> DenseOperator:
    """
    Generic multi-controlled gate ``I - P + P (x) G``.

    ``projectors`` (usually ``P1`` for a control, ``P0`` for an inverted
    control) sit on ``cbits`` and ``gates`` on ``locs``. The result is dense;
    structured targets should go through :func:`controlled_gate` instead.
    """
    cbits = check_locs(num_bit, cbits)
    locs = check_locs(num_bit, locs)
    _check_disjoint(cbits, locs)
    projected = hilbert_kron(num_bit, projectors, cbits).to_dense()
    corrected = hilbert_kron(
        num_bit, list(projectors) + list(gates), list(cbits) + list(locs)
    ).to_dense()
    eye = torch.eye(1 << num_bit, dtype=projected.dtype, device=projected.device)
    return DenseOperator(eye - projected + corrected.to(projected.dtype))


def controlled_gate(
    num_bit: int,
    cbits: Bits,
    gate: StructuredOperator,
    tbit: int,
) -> StructuredOperator:
    """
    Multi-controlled single-qubit ``gate`` on ``tbit``.

    Diagonal and permutation gates stay in their form: only rows where all
    ``cbits`` are set are touched, every other row keeps the identity. Dense
    gates go through :func:`general_controlled_gates` on the control and target
    qubits alone, wrapped in a :class:`KronOperator`, so memory scales with
    the qubits touched rather than with ``num_bit``.
    """
    cbits = check_locs(num_bit, _as_tuple(cbits))
    (tbit,) = check_locs(num_bit, (tbit,))
    _check_disjoint(cbits, (tbit,))
    if gate.nqubits != 1:
        raise ValueError(f"controlled_gate expects a 1-qubit gate, got {gate.nqubits} qubits")

    b = _basis(num_bit, gate.device)
    ctrl = test_all(b, bmask(cbits))
    t = take_bit(b, tbit)

    if isinstance(gate, DiagOperator):
        diag = torch.where(ctrl, gate.diag[t], torch.ones((), dtype=gate.dtype, device=gate.device))
        return DiagOperator(diag)

    if isinstance(gate, PermOperator):
        tmask = bmask(tbit)
        # Replace the target bit by the bit the gate reads for this row.
        target = (b & ~tmask) | (gate.perm[t] << tbit)
        perm = torch.where(ctrl, target, b)
        vals = torch.where(ctrl, gate.vals[t], torch.ones((), dtype=gate.dtype, device=gate.device))
        return PermOperator(perm, vals)

    # Build the controlled gate on its own qubits only and place it there.
    nlocal = len(cbits) + 1
    projectors = [standard.P1(dtype=gate.dtype, device=gate.device)] * len(cbits)
    local = general_controlled_gates(
        nlocal, projectors, range(len(cbits)), [gate], [len(cbits)]
    )
    return KronOperator(num_bit, ((cbits + (tbit,), local),))


def pauli_string_gate(
    num_bit: int,
    paulis: dict[int, str],
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> StructuredOperator:
    """
    Exact tensor product of Pauli operators, e.g. ``{0: "X", 2: "Y"}``.

    Qubits not named are acted on by the identity. The result is a
    permutation when any X or Y is present and a diagonal otherwise.
    """
    for q, label in paulis.items():
        if label not in ("I", "X", "Y", "Z"):
            raise ValueError(f"Invalid Pauli label {label!r} on qubit {q}")
    check_locs(num_bit, list(paulis))
    dtype = resolve_dtype(dtype)
    xs = [q for q, p in paulis.items() if p == "X"]
    ys = [q for q, p in paulis.items() if p == "Y"]
    zs = [q for q, p in paulis.items() if p == "Z"]

    b = _basis(num_bit, device)
    # Row phase: each Y contributes -i on a 0 bit and +i on a 1 bit, each Z
    # contributes (-1) ** bit. Z and Y bits are disjoint, so parities add.
    sign = 1 - 2 * (parity(b, bmask(ys)) ^ parity(b, bmask(zs)))
    vals = sign.to(dtype) * ((-1j) ** len(ys))
    if not xs and not ys:
        return DiagOperator(vals)
    return PermOperator(flip(b, bmask(xs + ys)), vals)


__all__ = [
    "x_gate",
    "y_gate",
    "z_gate",
    "cx_gate",
    "cy_gate",
    "cz_gate",
    "controlled_gate",
    "general_controlled_gates",
    "hilbert_kron",
    "pauli_string_gate",
]
