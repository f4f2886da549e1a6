"""Single-qubit gates as structured operators.

Every constructor takes optional ``dtype`` and ``device`` and falls back to
``DEFAULT_COMPLEX_DTYPE`` on the CPU.
"""

from __future__ import annotations

import cmath
import math

import torch

from ..core.device import resolve_dtype
from ..operators.structured import DenseOperator, DiagOperator, PermOperator


def _resolve(dtype: torch.dtype | None, device: torch.device | None):
    return resolve_dtype(dtype), device if device is not None else torch.device("cpu")


def I(dtype: torch.dtype | None = None, device: torch.device | None = None) -> DiagOperator:
    """Identity gate."""
    dtype, device = _resolve(dtype, device)
    return DiagOperator(torch.ones(2, dtype=dtype, device=device))


def X(dtype: torch.dtype | None = None, device: torch.device | None = None) -> PermOperator:
    """Pauli-X (bit flip) as the permutation [1, 0]."""
    dtype, device = _resolve(dtype, device)
    return PermOperator(
        torch.tensor([1, 0], dtype=torch.int64, device=device),
        torch.ones(2, dtype=dtype, device=device),
    )


def Y(dtype: torch.dtype | None = None, device: torch.device | None = None) -> PermOperator:
    """
    Pauli-Y.

    Matrix form [[0, -i], [i, 0]]: row 0 reads amplitude 1 scaled by -i, row 1
    reads amplitude 0 scaled by +i.
    """
    dtype, device = _resolve(dtype, device)
    return PermOperator(
        torch.tensor([1, 0], dtype=torch.int64, device=device),
        torch.tensor([-1.0j, 1.0j], dtype=dtype, device=device),
    )


def Z(dtype: torch.dtype | None = None, device: torch.device | None = None) -> DiagOperator:
    """Pauli-Z (phase flip)."""
    dtype, device = _resolve(dtype, device)
    return DiagOperator(torch.tensor([1.0, -1.0], dtype=dtype, device=device))


def H(dtype: torch.dtype | None = None, device: torch.device | None = None) -> DenseOperator:
    """Hadamard gate."""
    dtype, device = _resolve(dtype, device)
    s = 1.0 / math.sqrt(2.0)
    return DenseOperator(torch.tensor([[s, s], [s, -s]], dtype=dtype, device=device))


def S(dtype: torch.dtype | None = None, device: torch.device | None = None) -> DiagOperator:
    """S gate (sqrt(Z))."""
    dtype, device = _resolve(dtype, device)
    return DiagOperator(torch.tensor([1.0, 1.0j], dtype=dtype, device=device))


def T(dtype: torch.dtype | None = None, device: torch.device | None = None) -> DiagOperator:
    """T gate (sqrt(S))."""
    dtype, device = _resolve(dtype, device)
    return DiagOperator(
        torch.tensor([1.0, cmath.exp(1.0j * math.pi / 4.0)], dtype=dtype, device=device)
    )


def P0(dtype: torch.dtype | None = None, device: torch.device | None = None) -> DiagOperator:
    """Projector onto |0>."""
    dtype, device = _resolve(dtype, device)
    return DiagOperator(torch.tensor([1.0, 0.0], dtype=dtype, device=device))


def P1(dtype: torch.dtype | None = None, device: torch.device | None = None) -> DiagOperator:
    """Projector onto |1>."""
    dtype, device = _resolve(dtype, device)
    return DiagOperator(torch.tensor([0.0, 1.0], dtype=dtype, device=device))


def shift(
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> DiagOperator:
    """
    Phase shift gate diag(1, exp(i theta)).

    Its adjoint is ``shift(-theta)``, which ``DiagOperator.adjoint`` produces
    by conjugating the diagonal.
    """
    dtype, device = _resolve(dtype, device)
    return DiagOperator(
        torch.tensor([1.0, cmath.exp(1.0j * float(theta))], dtype=dtype, device=device)
    )


def RX(
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> DenseOperator:
    """
    Rotation around X: RX(theta) = exp(-i theta X / 2).

    Matrix form:
        [[cos(theta/2), -i sin(theta/2)],
         [-i sin(theta/2), cos(theta/2)]]
    """
    dtype, device = _resolve(dtype, device)
    c, s = math.cos(float(theta) / 2.0), math.sin(float(theta) / 2.0)
    return DenseOperator(
        torch.tensor([[c, -1.0j * s], [-1.0j * s, c]], dtype=dtype, device=device)
    )


def RY(
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> DenseOperator:
    """
    Rotation around Y: RY(theta) = exp(-i theta Y / 2).

    Matrix form:
        [[cos(theta/2), -sin(theta/2)],
         [sin(theta/2), cos(theta/2)]]
    """
    dtype, device = _resolve(dtype, device)
    c, s = math.cos(float(theta) / 2.0), math.sin(float(theta) / 2.0)
    return DenseOperator(torch.tensor([[c, -s], [s, c]], dtype=dtype, device=device))


def RZ(
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> DiagOperator:
    """Rotation around Z: diag(exp(-i theta/2), exp(i theta/2))."""
    dtype, device = _resolve(dtype, device)
    half = float(theta) / 2.0
    return DiagOperator(
        torch.tensor([cmath.exp(-1.0j * half), cmath.exp(1.0j * half)], dtype=dtype, device=device)
    )


__all__ = ["I", "X", "Y", "Z", "H", "S", "T", "P0", "P1", "shift", "RX", "RY", "RZ"]
