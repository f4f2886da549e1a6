"""Numeric diagnostics on amplitude matrices.

The helpers here work on plain tensors whose *first* axis is the Hilbert
space index, which is how a register lays out its columns. They back
``Register.isnormalized``, ``fidelity`` and ``tracedist``.
"""

from __future__ import annotations

import torch


def column_norms(amplitudes: torch.Tensor) -> torch.Tensor:
    """
    L2 norm of every column of an amplitude matrix.

    Parameters
    ----------
    amplitudes:
        Complex tensor of shape (dim, ncols).

    Returns
    -------
    torch.Tensor
        Real tensor of shape (ncols,).
    """
    if amplitudes.dim() != 2:
        raise ValueError(
            f"column_norms expects a 2D tensor, got shape {tuple(amplitudes.shape)}"
        )
    return torch.sqrt((amplitudes.conj() * amplitudes).real.sum(dim=0))


def assert_normalized(amplitudes: torch.Tensor, atol: float = 1e-5) -> None:
    """
    Raise if some column of ``amplitudes`` does not have unit norm.

    Raises
    ------
    ValueError
        If a norm is non-finite or differs from 1 by more than ``atol``.
    """
    norms = column_norms(amplitudes)
    if not torch.all(torch.isfinite(norms)):
        raise ValueError("State norm contains non-finite values.")
    if not torch.allclose(norms, torch.ones_like(norms), atol=atol, rtol=0.0):
        raise ValueError(
            f"State is not normalized within tolerance {atol}. "
            f"Norms found: {norms.detach().cpu().tolist()}"
        )


def fidelity_pure(psi: torch.Tensor, phi: torch.Tensor) -> torch.Tensor:
    """Return ``|<psi|phi>|`` for two vectors of equal length."""
    return torch.abs(torch.vdot(psi, phi))


def fidelity_mix(a: torch.Tensor, b: torch.Tensor) -> torch.Tensor:
    """
    Uhlmann fidelity of two reduced states given by their purifications.

    ``a`` and ``b`` are (dim, env) amplitude matrices whose reduced density
    matrices are ``a a^dagger`` and ``b b^dagger``. The fidelity is the trace
    norm of ``a^dagger b``, which reduces to ``|<a|b>|`` when ``env == 1``.
    """
    overlap = a.conj().transpose(0, 1) @ b
    return torch.linalg.svdvals(overlap).sum()


def trace_distance_mix(a: torch.Tensor, b: torch.Tensor) -> torch.Tensor:
    """Half the trace norm of ``a a^dagger - b b^dagger``."""
    rho = a @ a.conj().transpose(0, 1)
    sigma = b @ b.conj().transpose(0, 1)
    eigvals = torch.linalg.eigvalsh(rho - sigma)
    return 0.5 * eigvals.abs().sum()


def is_unitary(matrix: torch.Tensor, atol: float = 1e-6) -> bool:
    """
    Check if a square matrix is unitary within a given tolerance.

    Returns
    -------
    bool
        True if ``U^dagger U`` equals the identity within ``atol``.
    """
    if matrix.dim() != 2 or matrix.shape[0] != matrix.shape[1]:
        return False
    product = matrix.conj().transpose(0, 1) @ matrix
    identity = torch.eye(matrix.shape[0], dtype=matrix.dtype, device=matrix.device)
    return bool(torch.all(torch.abs(product - identity) < atol))
