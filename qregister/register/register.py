"""Batched quantum register.

Layout
------
A register owns one 2D complex tensor ``state`` of shape
``(2**nactive, 2**nremain * nbatch)``. Rows index the *active* qubits, the
ones operators act on. Columns index the *remaining* qubits and the batch,
with column ``r * nbatch + b`` for remaining index ``r`` and batch ``b``.

The logical basis index of the full state is ``a + 2**nactive * r``: active
qubits occupy the low bits in focus order, remaining qubits the high bits in
their original order. ``focus`` and ``relax`` move qubits between the two
groups by permuting axes of the qubit hypercube.

Buffer handling
---------------
Updates that keep the shape are written into the existing buffer with
``Tensor.copy_``, so registers returned by :meth:`Register.view_batch` see
them. Updates that change the shape build the new tensor completely and only
then rebind ``state``.
"""

from __future__ import annotations

from typing import Iterable, Sequence, Tuple

import torch

from ..bits import basis_tensor, is_pow2, log2i, reorder_index
from ..core.device import DEFAULT_COMPLEX_DTYPE
from ..diagnostics.core import fidelity_mix, fidelity_pure, trace_distance_mix
from ..errors import DimensionMismatchError, QubitOutOfRangeError
from ..logging import get_logger
from ..operators.structured import check_locs

logger = get_logger(__name__)


def _flatten_locs(locs: Iterable) -> Tuple[int, ...]:
    flat = []
    for q in locs:
        if isinstance(q, (list, tuple, range)):
            flat.extend(int(x) for x in q)
        else:
            flat.append(int(q))
    return tuple(flat)


class Register:
    """
    A batch of quantum states sharing one amplitude buffer.

    Parameters
    ----------
    state:
        Complex tensor of shape ``(2**nactive, ncols)`` where ``ncols`` is
        ``2**nremain * nbatch``. Real tensors are converted to
        ``DEFAULT_COMPLEX_DTYPE``.
    nbatch:
        Batch size B >= 1.

    Examples
    --------
    >>> from qregister import zero_state, x_gate
    >>> reg = zero_state(2, nbatch=3)
    >>> reg.apply(x_gate(2, [0]))
    >>> reg.probs().shape
    torch.Size([4, 3])
    """

    def __init__(self, state: torch.Tensor, nbatch: int = 1) -> None:
        if state.dim() != 2:
            raise DimensionMismatchError(
                f"state must be a 2D tensor, got shape {tuple(state.shape)}"
            )
        nbatch = int(nbatch)
        if nbatch < 1:
            raise ValueError(f"nbatch must be >= 1, got {nbatch}")
        rows, cols = state.shape
        if not is_pow2(rows):
            raise DimensionMismatchError(f"state row count {rows} is not a power of 2")
        if cols % nbatch != 0 or not is_pow2(cols // nbatch):
            raise DimensionMismatchError(
                f"state column count {cols} is not a power of 2 times nbatch={nbatch}"
            )
        if not torch.is_complex(state):
            state = state.to(DEFAULT_COMPLEX_DTYPE)
        self.state = state
        self._nbatch = nbatch

    @property
    def nbatch(self) -> int:
        """Batch size."""
        return self._nbatch

    @property
    def nqubits(self) -> int:
        """Total number of qubits, active and remaining."""
        return log2i(self.state.numel() // self._nbatch)

    @property
    def nactive(self) -> int:
        """Number of qubits operators currently act on."""
        return log2i(self.state.shape[0])

    @property
    def nremain(self) -> int:
        """Number of qubits folded into the column dimension."""
        return self.nqubits - self.nactive

    @property
    def dtype(self) -> torch.dtype:
        return self.state.dtype

    @property
    def device(self) -> torch.device:
        return self.state.device

    def __repr__(self) -> str:
        return (
            f"Register(nbatch={self._nbatch}, dtype={self.dtype}, "
            f"active qubits: {self.nactive}/{self.nqubits})"
        )

    # Views -------------------------------------------------------------

    def rank3(self) -> torch.Tensor:
        """State as a (2**nactive, 2**nremain, nbatch) tensor."""
        return self.state.reshape(self.state.shape[0], -1, self._nbatch)

    def hypercubic(self) -> torch.Tensor:
        """
        Active space as a hypercube: axis ``k`` is active qubit ``k``.

        The last axis holds the remaining qubits and the batch, flattened.
        """
        k = self.nactive
        cube = self.state.reshape((2,) * k + (-1,))
        return cube.permute(list(reversed(range(k))) + [k])

    def statevec(self) -> torch.Tensor:
        """``state`` with a trailing size-1 column dimension dropped."""
        if self.state.shape[1] == 1:
            return self.state[:, 0]
        return self.state

    def relaxedvec(self) -> torch.Tensor:
        """
        Full state in logical basis order with every qubit counted.

        Shape is ``(2**nqubits,)`` for a single batch and
        ``(2**nqubits, nbatch)`` otherwise.
        """
        s = self.rank3()
        full = s.permute(1, 0, 2).reshape(-1, self._nbatch)
        if self._nbatch == 1:
            return full[:, 0]
        return full

    # Buffer management -------------------------------------------------

    def _replace(self, new_state: torch.Tensor) -> None:
        if new_state.shape == self.state.shape:
            self.state.copy_(new_state)
        else:
            self.state = new_state

    # Partition ---------------------------------------------------------

    def focus(self, *locs) -> "Register":
        """
        Make exactly ``locs`` the active qubits, in the given order.

        ``locs`` index the currently active qubits. Active qubit ``j`` after
        the call is old active qubit ``locs[j]``. The other previously active
        qubits become the lowest remaining qubits, in ascending order.
        """
        locs = check_locs(self.nactive, _flatten_locs(locs))
        k = self.nactive
        others = [q for q in range(k) if q not in locs]
        nr = self.state.shape[1] // self._nbatch

        cube = self.state.reshape((2,) * k + (nr, self._nbatch))
        rows = [k - 1 - q for q in reversed(locs)]
        cols = [k] + [k - 1 - q for q in reversed(others)] + [k + 1]
        new_state = cube.permute(rows + cols).reshape(1 << len(locs), -1)
        self.state = new_state
        logger.debug("focus %s: active %d -> %d", locs, k, len(locs))
        return self

    def relax(self, *locs, to_nactive: int | None = None) -> "Register":
        """
        Undo :meth:`focus`.

        Parameters
        ----------
        locs:
            The locations passed to the matching ``focus`` call. Defaults to
            ``0 .. nactive - 1``.
        to_nactive:
            Number of active qubits before that ``focus`` call. Defaults to
            ``nqubits``, i.e. everything becomes active.
        """
        locs = _flatten_locs(locs)
        n_cur = self.nactive
        if not locs:
            locs = tuple(range(n_cur))
        if len(locs) != n_cur:
            raise DimensionMismatchError(
                f"relax got {len(locs)} locations but {n_cur} qubits are active"
            )
        k = self.nqubits if to_nactive is None else int(to_nactive)
        if k < n_cur or k > self.nqubits:
            raise DimensionMismatchError(
                f"cannot relax {n_cur} active qubits to {k} of {self.nqubits}"
            )
        locs = check_locs(k, locs)
        others = [q for q in range(k) if q not in locs]
        n_others = len(others)
        r_old = 1 << (self.nqubits - k)

        cube = self.state.reshape(
            (2,) * n_cur + (r_old,) + (2,) * n_others + (self._nbatch,)
        )
        order = []
        for q in reversed(range(k)):
            if q in locs:
                order.append(n_cur - 1 - locs.index(q))
            else:
                order.append(n_cur + n_others - others.index(q))
        order += [n_cur, n_cur + 1 + n_others]
        self.state = cube.permute(order).reshape(1 << k, -1)
        logger.debug("relax %s: active %d -> %d", locs, n_cur, k)
        return self

    # Shape-changing operations ----------------------------------------

    def extend(self, n: int) -> "Register":
        """
        Add ``n`` qubits in state |0> above the active qubits.

        ``|psi>`` becomes ``|0..0> (x) |psi>``; the old amplitudes keep the
        lowest row indices.
        """
        if n < 0:
            raise ValueError(f"n must be >= 0, got {n}")
        rows, cols = self.state.shape
        new_state = torch.zeros(
            (rows << n, cols), dtype=self.dtype, device=self.device
        )
        new_state[:rows] = self.state
        self.state = new_state
        logger.debug("extend by %d qubits: now %d", n, self.nqubits)
        return self

    def addbit(self, n: int) -> "Register":
        """Alias of :meth:`extend`."""
        return self.extend(n)

    def reorder(self, orders: Sequence[int]) -> "Register":
        """
        Permute the active qubit lines: new qubit ``k`` is old qubit ``orders[k]``.
        """
        orders = tuple(int(q) for q in orders)
        if sorted(orders) != list(range(self.nactive)):
            raise QubitOutOfRangeError(
                f"orders {orders} is not a permutation of range({self.nactive})"
            )
        src = reorder_index(basis_tensor(self.nactive, device=self.device), orders)
        self._replace(self.state[src])
        return self

    def invorder(self) -> "Register":
        """Reverse the order of the active qubits."""
        return self.reorder(list(reversed(range(self.nactive))))

    def reset(self, val: int = 0) -> "Register":
        """
        Set every batch element to ``|val>`` on the active qubits.

        Remaining qubits go to ``|0..0>``, so the result is normalized.
        """
        if val < 0 or val >= self.state.shape[0]:
            raise QubitOutOfRangeError(
                f"basis index {val} out of range [0, {self.state.shape[0]})"
            )
        self.state.zero_()
        # Columns 0 .. nbatch-1 are remaining index 0.
        self.state[val, : self._nbatch] = 1
        return self

    # Numerics ----------------------------------------------------------

    def probs(self) -> torch.Tensor:
        """
        Probability of each active basis state.

        Sums ``|amplitude|**2`` over the remaining qubits. Shape is
        ``(2**nactive,)`` for a single batch, else ``(2**nactive, nbatch)``.
        """
        p = (self.rank3().abs() ** 2).sum(dim=1)
        if self._nbatch == 1:
            return p[:, 0]
        return p

    def norms(self) -> torch.Tensor:
        """Euclidean norm of each batch element, shape (nbatch,)."""
        return torch.sqrt((self.rank3().abs() ** 2).sum(dim=(0, 1)))

    def isnormalized(self, atol: float = 1e-8) -> bool:
        """True iff every batch element has total probability 1 within ``atol``."""
        totals = (self.rank3().abs() ** 2).sum(dim=(0, 1))
        return bool(torch.allclose(totals, torch.ones_like(totals), atol=atol, rtol=0.0))

    def normalize(self) -> "Register":
        """Scale every batch element to unit norm."""
        norms = torch.clamp(self.norms(), min=1e-300).to(self.dtype)
        self._replace((self.rank3() / norms).reshape(self.state.shape))
        return self

    def density_matrix(self) -> torch.Tensor:
        """Reduced density matrix of the active qubits, shape (nbatch, M, M)."""
        s = self.rank3()
        return torch.einsum("irb,jrb->bij", s, s.conj())

    # Copies and views --------------------------------------------------

    def copy(self) -> "Register":
        """Independent register with a cloned buffer."""
        return Register(self.state.clone(), nbatch=self._nbatch)

    def view_batch(self, index: int) -> "Register":
        """
        Single-batch register sharing storage with batch column ``index``.

        The view does not own its buffer: it must not be used after this
        register changes shape.
        """
        if index < 0 or index >= self._nbatch:
            raise IndexError(f"batch index {index} out of range [0, {self._nbatch})")
        return Register(self.rank3()[:, :, index], nbatch=1)

    def apply(self, target) -> "Register":
        """Apply an operator, block or gate spec in place. See :func:`qregister.apply`."""
        from ..apply import apply

        return apply(self, target)


def join(reg1: Register, reg2: Register) -> Register:
    """
    Register holding ``reg2 (x) reg1`` for every batch element.

    ``reg1`` supplies the low qubits. Both registers must have the same batch
    size.
    """
    if reg1.nbatch != reg2.nbatch:
        raise DimensionMismatchError(
            f"cannot join registers with batch sizes {reg1.nbatch} and {reg2.nbatch}"
        )
    dtype = torch.promote_types(reg1.dtype, reg2.dtype)
    s1 = reg1.rank3().to(dtype)
    s2 = reg2.rank3().to(dtype)
    m1, r1, nbatch = s1.shape
    m2, r2, _ = s2.shape
    state = torch.einsum("ijb,klb->ikjlb", s2, s1).reshape(m2 * m1, r2 * r1 * nbatch)
    return Register(state, nbatch=nbatch)


def _check_same_shape(reg1: Register, reg2: Register) -> Tuple[torch.Tensor, torch.Tensor]:
    if reg1.nbatch != reg2.nbatch or reg1.state.shape != reg2.state.shape:
        raise DimensionMismatchError(
            f"register shapes do not match: {tuple(reg1.rank3().shape)} vs "
            f"{tuple(reg2.rank3().shape)}"
        )
    dtype = torch.promote_types(reg1.dtype, reg2.dtype)
    return reg1.rank3().to(dtype), reg2.rank3().to(dtype)


def fidelity(reg1: Register, reg2: Register) -> torch.Tensor:
    """
    Fidelity per batch element, shape (nbatch,).

    Pure active states (no remaining qubits) give ``|<psi|phi>|``. Otherwise
    the remaining qubits are traced out and the Uhlmann fidelity of the
    reduced states is returned.
    """
    s1, s2 = _check_same_shape(reg1, reg2)
    if s1.shape[1] == 1:
        values = [fidelity_pure(s1[:, 0, b], s2[:, 0, b]) for b in range(reg1.nbatch)]
    else:
        values = [fidelity_mix(s1[:, :, b], s2[:, :, b]) for b in range(reg1.nbatch)]
    return torch.stack(values)


def tracedist(reg1: Register, reg2: Register) -> torch.Tensor:
    """
    Trace distance per batch element, shape (nbatch,).

    Pure states use ``sqrt(1 - F**2)``; with remaining qubits the distance is
    half the trace norm of the difference of the reduced density matrices.
    """
    s1, s2 = _check_same_shape(reg1, reg2)
    if s1.shape[1] == 1:
        f = fidelity(reg1, reg2)
        return torch.sqrt(torch.clamp(1.0 - f**2, min=0.0))
    values = [trace_distance_mix(s1[:, :, b], s2[:, :, b]) for b in range(reg1.nbatch)]
    return torch.stack(values)


def reduced_density_matrix(reg: Register) -> torch.Tensor:
    """Density matrices of the active qubits, remaining qubits traced out.

    Returns a tensor of shape ``(nbatch, 2**nactive, 2**nactive)``.
    """
    return reg.density_matrix()


__all__ = ["Register", "join", "fidelity", "tracedist", "reduced_density_matrix"]
