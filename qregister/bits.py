"""Bit-index arithmetic over computational-basis indices.

Qubit ``q`` is bit ``1 << q`` of a basis index, so qubit 0 is the least
significant bit. Everything here is written with bitwise operators only, so
the same function works on a Python ``int`` and elementwise on an int64
``torch.Tensor`` (e.g. the output of :func:`basis_tensor`).
"""

from __future__ import annotations

from typing import Iterable, Sequence, Union

import torch

IntOrTensor = Union[int, torch.Tensor]


def _flatten_bits(bits: Iterable) -> list[int]:
    flat: list[int] = []
    for b in bits:
        if isinstance(b, (list, tuple, range)):
            flat.extend(int(x) for x in b)
        else:
            flat.append(int(b))
    return flat


def bmask(*bits) -> int:
    """
    Return an integer with exactly the given bit positions set.

    Accepts positions directly or as iterables, so ``bmask(0, 2)``,
    ``bmask([0, 2])`` and ``bmask(range(0, 3, 2))`` all give ``0b101``.
    ``bmask()`` is 0.
    """
    mask = 0
    for b in _flatten_bits(bits):
        mask |= 1 << b
    return mask


def flip(x: IntOrTensor, mask: int) -> IntOrTensor:
    """Flip the masked bits of ``x``."""
    return x ^ mask


def take_bit(x: IntOrTensor, pos: int) -> IntOrTensor:
    """Return bit ``pos`` of ``x`` as 0 or 1."""
    return (x >> pos) & 1


def test_all(x: IntOrTensor, mask: int) -> IntOrTensor:
    """True where every masked bit of ``x`` is set (vacuously for mask 0)."""
    return (x & mask) == mask


def test_any(x: IntOrTensor, mask: int) -> IntOrTensor:
    """True where at least one masked bit of ``x`` is set."""
    return (x & mask) != 0


def parity(x: IntOrTensor, mask: int) -> IntOrTensor:
    """Number of set bits of ``x & mask``, modulo 2."""
    y = x & mask
    result = y & 0
    pos = 0
    while mask >> pos:
        if (mask >> pos) & 1:
            result = result ^ ((y >> pos) & 1)
        pos += 1
    return result


def swap_bits(x: IntOrTensor, i: int, j: int) -> IntOrTensor:
    """Exchange bits ``i`` and ``j`` of ``x``."""
    differ = ((x >> i) ^ (x >> j)) & 1
    return x ^ ((differ << i) | (differ << j))


def reorder_index(x: IntOrTensor, orders: Sequence[int]) -> IntOrTensor:
    """
    Source index for a qubit reordering.

    After reordering, new qubit ``k`` carries what old qubit ``orders[k]``
    carried, so the amplitude at new index ``x`` comes from the returned old
    index.
    """
    result = x & 0
    for k, q in enumerate(orders):
        result = result | (((x >> k) & 1) << q)
    return result


def basis(n: int) -> range:
    """Ascending enumeration ``0 .. 2**n - 1`` of the basis states of n qubits."""
    return range(1 << n)


def basis_tensor(n: int, device: torch.device | None = None) -> torch.Tensor:
    """:func:`basis` as an int64 tensor."""
    return torch.arange(1 << n, dtype=torch.int64, device=device)


def is_pow2(n: int) -> bool:
    """True for 1, 2, 4, 8, ..."""
    return n > 0 and (n & (n - 1)) == 0


def log2i(n: int) -> int:
    """Exact base-2 logarithm of a power of two."""
    if not is_pow2(n):
        raise ValueError(f"{n} is not a power of 2")
    return n.bit_length() - 1


__all__ = [
    "bmask",
    "flip",
    "take_bit",
    "test_all",
    "test_any",
    "parity",
    "swap_bits",
    "reorder_index",
    "basis",
    "basis_tensor",
    "is_pow2",
    "log2i",
]
