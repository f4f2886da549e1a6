"""Tests for bit-index utilities."""

import pytest
import torch

from qregister import bits
from qregister.bits import (
    basis,
    basis_tensor,
    bmask,
    flip,
    is_pow2,
    log2i,
    parity,
    reorder_index,
    swap_bits,
    take_bit,
)


class TestMask:
    """Tests for bmask."""

    def test_empty_mask_is_zero(self):
        assert bmask() == 0

    def test_positions(self):
        assert bmask(0) == 1
        assert bmask(0, 2) == 0b101
        assert bmask(3) == 8

    def test_iterables(self):
        assert bmask([0, 2]) == 0b101
        assert bmask(range(3)) == 0b111
        assert bmask((1,), 3) == 0b1010


class TestBitOps:
    """Tests for the elementwise bit predicates and transforms."""

    def test_flip(self):
        assert flip(0b0110, bmask(1, 3)) == 0b1100
        assert flip(flip(13, 0b101), 0b101) == 13

    def test_take_bit(self):
        assert take_bit(0b1010, 0) == 0
        assert take_bit(0b1010, 1) == 1
        assert take_bit(0b1010, 3) == 1

    def test_test_all_and_any(self):
        assert bits.test_all(0b111, 0b101)
        assert not bits.test_all(0b110, 0b101)
        assert bits.test_any(0b100, 0b101)
        assert not bits.test_any(0b010, 0b101)

    def test_empty_mask_predicates(self):
        assert bits.test_all(5, 0)
        assert not bits.test_any(5, 0)

    def test_parity(self):
        assert parity(0b1011, 0b1111) == 1
        assert parity(0b1011, 0b0011) == 0
        assert parity(0b1011, 0) == 0

    def test_swap_bits(self):
        assert swap_bits(0b01, 0, 1) == 0b10
        assert swap_bits(0b11, 0, 1) == 0b11
        assert swap_bits(0b100, 0, 2) == 0b001

    def test_tensor_inputs_match_ints(self):
        b = basis_tensor(3)
        mask = bmask(0, 2)
        assert flip(b, mask).tolist() == [flip(i, mask) for i in basis(3)]
        assert take_bit(b, 1).tolist() == [take_bit(i, 1) for i in basis(3)]
        assert parity(b, mask).tolist() == [parity(i, mask) for i in basis(3)]
        assert bits.test_all(b, mask).tolist() == [bits.test_all(i, mask) for i in basis(3)]
        assert swap_bits(b, 0, 2).tolist() == [swap_bits(i, 0, 2) for i in basis(3)]


class TestBasis:
    """Tests for basis enumeration."""

    def test_basis_range(self):
        assert list(basis(2)) == [0, 1, 2, 3]
        assert list(basis(0)) == [0]

    def test_basis_is_restartable(self):
        b = basis(3)
        assert list(b) == list(b)

    def test_basis_tensor(self):
        b = basis_tensor(3)
        assert b.dtype == torch.int64
        assert b.tolist() == list(range(8))


class TestReorderIndex:
    """Tests for reorder_index."""

    def test_identity_order(self):
        b = basis_tensor(3)
        assert torch.equal(reorder_index(b, [0, 1, 2]), b)

    def test_reverse_two_qubits_is_swap(self):
        assert [reorder_index(i, [1, 0]) for i in basis(2)] == [0, 2, 1, 3]

    def test_cyclic_order(self):
        # New qubit 0 carries old qubit 1, new 1 old 2, new 2 old 0.
        assert reorder_index(0b001, [1, 2, 0]) == 0b010
        assert reorder_index(0b100, [1, 2, 0]) == 0b001


class TestPowersOfTwo:
    """Tests for is_pow2 and log2i."""

    def test_is_pow2(self):
        assert is_pow2(1)
        assert is_pow2(64)
        assert not is_pow2(0)
        assert not is_pow2(6)

    def test_log2i(self):
        assert log2i(1) == 0
        assert log2i(1024) == 10

    def test_log2i_rejects_non_powers(self):
        with pytest.raises(ValueError, match="power of 2"):
            log2i(12)
