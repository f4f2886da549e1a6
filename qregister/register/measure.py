"""Measurement and projection of registers.

All routines measure the *active* qubits in the computational basis, once per
batch element. Variants taking ``locs`` first focus those qubits, measure, and
restore the previous partition afterwards, including when sampling fails.

Outcomes are active basis indices: bit ``j`` of an outcome is the result on
``locs[j]`` (or on active qubit ``j`` when ``locs`` is omitted).
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

import torch

from ..bits import is_pow2
from ..errors import DegenerateStateError, DimensionMismatchError, QubitOutOfRangeError
from ..logging import get_logger
from .register import Register

logger = get_logger(__name__)

# torch.multinomial accepts at most 2**24 categories.
_MULTINOMIAL_MAX_CATEGORIES = 1 << 24


@contextmanager
def focused(reg: Register, locs: Optional[Sequence[int]]) -> Iterator[Register]:
    """
    Temporarily make ``locs`` the active qubits of ``reg``.

    With ``locs=None`` the register is left as it is.
    """
    if locs is None:
        yield reg
        return
    locs = tuple(locs)
    nactive = reg.nactive
    reg.focus(*locs)
    try:
        yield reg
    finally:
        reg.relax(*locs, to_nactive=nactive)


def _active_probs(reg: Register) -> torch.Tensor:
    """Outcome probabilities of the active qubits, shape (2**nactive, nbatch)."""
    return (reg.rank3().abs() ** 2).sum(dim=1)


def _sample(weights: torch.Tensor, nshots: int, generator: Optional[torch.Generator]) -> torch.Tensor:
    """
    Draw ``nshots`` outcomes per batch column of non-negative ``weights``.

    Parameters
    ----------
    weights:
        Real tensor of shape (dim, nbatch); columns need not be normalized.

    Returns
    -------
    torch.Tensor
        int64 tensor of shape (nbatch, nshots).
    """
    if nshots < 1:
        raise ValueError(f"nshots must be >= 1, got {nshots}")
    totals = weights.sum(dim=0)
    if not torch.all(totals > 0):
        bad = torch.nonzero(totals <= 0).flatten().tolist()
        raise DegenerateStateError(f"batch columns {bad} have zero total probability")
    if weights.shape[0] <= _MULTINOMIAL_MAX_CATEGORIES:
        return torch.multinomial(weights.T, nshots, replacement=True, generator=generator)
    return _sample_inverse_cdf(weights, totals, nshots, generator)


def _sample_inverse_cdf(
    weights: torch.Tensor,
    totals: torch.Tensor,
    nshots: int,
    generator: Optional[torch.Generator],
) -> torch.Tensor:
    """Inverse-CDF sampling for outcome spaces too large for ``torch.multinomial``."""
    cdf = weights.T.cumsum(dim=1)
    u = torch.rand(
        (weights.shape[1], nshots),
        generator=generator,
        dtype=cdf.dtype,
        device=cdf.device,
    ) * totals.unsqueeze(1)
    # right=True skips zero-weight outcomes, whose cdf equals their predecessor's.
    idx = torch.searchsorted(cdf, u, right=True)
    return idx.clamp_(max=weights.shape[0] - 1)


def measure(
    reg: Register,
    locs: Optional[Sequence[int]] = None,
    nshots: int = 1,
    generator: Optional[torch.Generator] = None,
) -> torch.Tensor:
    """
    Sample measurement outcomes without changing the register.

    Returns
    -------
    torch.Tensor
        int64 tensor of shape (nbatch, nshots).
    """
    with focused(reg, locs):
        outcomes = _sample(_active_probs(reg), nshots, generator)
    logger.debug("measure %s: %d shots on %d batch elements", locs, nshots, reg.nbatch)
    return outcomes


def _project(reg: Register, generator: Optional[torch.Generator]):
    """
    Sample one outcome per batch element and the normalized surviving amplitudes.

    Returns the outcomes, shape (nbatch,), and the post-measurement amplitudes
    of the remaining qubits, shape (nbatch, 2**nremain). ``reg`` is untouched.
    """
    s = reg.rank3()
    probs = (s.abs() ** 2).sum(dim=1)
    outcomes = _sample(probs, 1, generator)[:, 0]
    batch = torch.arange(reg.nbatch, device=reg.device)
    chosen = probs[outcomes, batch]
    if not torch.all(chosen > 0):
        raise DegenerateStateError(
            f"sampled outcomes {outcomes.tolist()} include a zero-probability outcome"
        )
    kept = s[outcomes, :, batch] / torch.sqrt(chosen).to(s.dtype).unsqueeze(1)
    return outcomes, kept


def _measure_remove(reg: Register, generator: Optional[torch.Generator]) -> torch.Tensor:
    outcomes, kept = _project(reg, generator)
    reg._replace(kept.T.reshape(1, -1))
    return outcomes


def measure_remove(
    reg: Register,
    locs: Optional[Sequence[int]] = None,
    generator: Optional[torch.Generator] = None,
) -> torch.Tensor:
    """
    Measure and discard the measured qubits.

    Without ``locs`` every active qubit is measured and removed, so the
    register ends with no active qubits. With ``locs`` only those qubits are
    removed; the other previously active qubits stay active in their order.

    Returns
    -------
    torch.Tensor
        int64 tensor of shape (nbatch,).
    """
    if locs is None:
        outcomes = _measure_remove(reg, generator)
    else:
        locs = tuple(locs)
        nactive = reg.nactive
        reg.focus(*locs)
        removed = False
        try:
            outcomes = _measure_remove(reg, generator)
            removed = True
        finally:
            if removed:
                reg.relax(to_nactive=nactive - len(locs))
            else:
                reg.relax(*locs, to_nactive=nactive)
    logger.debug("measure_remove %s: %d qubits left", locs, reg.nqubits)
    return outcomes


def _collapse_into(
    reg: Register, rows: Optional[torch.Tensor], generator: Optional[torch.Generator]
) -> torch.Tensor:
    """Measure the active qubits and write each survivor into row ``rows[b]``."""
    dim, nremain_dim, nbatch = reg.rank3().shape
    outcomes, kept = _project(reg, generator)
    collapsed = torch.zeros((dim, nremain_dim, nbatch), dtype=reg.dtype, device=reg.device)
    batch = torch.arange(nbatch, device=reg.device)
    target = outcomes if rows is None else rows
    collapsed[target, :, batch] = kept
    reg._replace(collapsed.reshape(dim, nremain_dim * nbatch))
    return outcomes


def measure_collapse(
    reg: Register,
    locs: Optional[Sequence[int]] = None,
    generator: Optional[torch.Generator] = None,
) -> torch.Tensor:
    """
    Measure and collapse the measured qubits onto the observed outcome.

    The qubit count is unchanged and the register stays normalized.

    Returns
    -------
    torch.Tensor
        int64 tensor of shape (nbatch,).
    """
    with focused(reg, locs):
        outcomes = _collapse_into(reg, None, generator)
    logger.debug("measure_collapse %s: outcomes %s", locs, outcomes.tolist())
    return outcomes


def measure_reset(
    reg: Register,
    locs: Optional[Sequence[int]] = None,
    val: int = 0,
    generator: Optional[torch.Generator] = None,
) -> torch.Tensor:
    """
    Measure, then reset the measured qubits to the basis state ``val``.

    Returns the measured outcomes, int64 tensor of shape (nbatch,).
    """
    with focused(reg, locs):
        dim = reg.state.shape[0]
        if val < 0 or val >= dim:
            raise QubitOutOfRangeError(f"reset value {val} out of range [0, {dim})")
        rows = torch.full((reg.nbatch,), val, dtype=torch.int64, device=reg.device)
        outcomes = _collapse_into(reg, rows, generator)
    logger.debug("measure_reset %s to %d: outcomes %s", locs, val, outcomes.tolist())
    return outcomes


def _select_rows(reg: Register, bits: Sequence[int]) -> torch.Tensor:
    rows = torch.as_tensor(list(bits), dtype=torch.int64, device=reg.device)
    if rows.dim() != 1 or not is_pow2(rows.shape[0]):
        raise DimensionMismatchError(
            f"select needs a power-of-two number of basis states, got {rows.numel()}"
        )
    dim = reg.state.shape[0]
    if torch.any(rows < 0) or torch.any(rows >= dim):
        raise QubitOutOfRangeError(f"basis states {list(bits)} out of range [0, {dim})")
    return reg.state[rows]


def select(reg: Register, bits: Sequence[int]) -> Register:
    """
    New register keeping only the active basis rows ``bits``, in that order.

    The result is not renormalized.
    """
    return Register(_select_rows(reg, bits), nbatch=reg.nbatch)


def select_(reg: Register, bits: Sequence[int]) -> Register:
    """In-place :func:`select`: ``reg`` keeps only the rows ``bits``."""
    reg._replace(_select_rows(reg, bits))
    return reg


def outcome_counts(outcomes: torch.Tensor, dim: int) -> torch.Tensor:
    """
    Histogram of measurement outcomes per batch element.

    Parameters
    ----------
    outcomes:
        int64 tensor of shape (nbatch, nshots) as returned by :func:`measure`.
    dim:
        Number of possible outcomes, ``2**len(locs)``.

    Returns
    -------
    torch.Tensor
        int64 tensor of shape (nbatch, dim).
    """
    if outcomes.dim() != 2:
        raise ValueError(f"outcomes must be 2D, got shape {tuple(outcomes.shape)}")
    return torch.stack([torch.bincount(row, minlength=dim) for row in outcomes])


__all__ = [
    "focused",
    "measure",
    "measure_collapse",
    "measure_remove",
    "measure_reset",
    "select",
    "select_",
    "outcome_counts",
]
