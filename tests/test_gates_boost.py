"""Tests for multi-qubit structured gate constructors."""

import numpy as np
import pytest
import torch

from qregister.errors import QubitOutOfRangeError
from qregister.gates import standard as std
from qregister.gates.boost import (
    controlled_gate,
    cx_gate,
    cy_gate,
    cz_gate,
    general_controlled_gates,
    hilbert_kron,
    pauli_string_gate,
    x_gate,
    y_gate,
    z_gate,
)
from qregister.operators import (
    DenseOperator,
    DiagOperator,
    KronOperator,
    PermOperator,
    apply_operator,
)

I2 = np.eye(2)
X2 = np.array([[0, 1], [1, 0]], dtype=complex)
Y2 = np.array([[0, -1j], [1j, 0]], dtype=complex)
Z2 = np.array([[1, 0], [0, -1]], dtype=complex)
P0 = np.diag([1.0, 0.0])
P1 = np.diag([0.0, 1.0])


def kron_np(*mats):
    """Kronecker product, first factor on the highest qubit."""
    out = mats[0]
    for m in mats[1:]:
        out = np.kron(out, m)
    return out


class TestPauliGates:
    """x_gate, y_gate and z_gate."""

    def test_x_gate_single(self):
        op = x_gate(1, [0])
        assert isinstance(op, PermOperator)
        assert np.allclose(op.to_dense().numpy(), X2)

    def test_x_gate_on_subset(self):
        op = x_gate(3, [0, 2])
        assert np.allclose(op.to_dense().numpy(), kron_np(X2, I2, X2))

    def test_x_gate_involution(self, random_state):
        psi = torch.from_numpy(random_state(16, 2))
        op = x_gate(4, [1, 3])
        twice = apply_operator(op, apply_operator(op, psi))
        assert torch.allclose(twice, psi)

    def test_z_gate(self):
        op = z_gate(2, [1])
        assert isinstance(op, DiagOperator)
        assert np.allclose(op.to_dense().numpy(), kron_np(Z2, I2))

    def test_z_gate_squared_is_identity(self, random_state):
        psi = torch.from_numpy(random_state(8, 1))
        op = z_gate(3, [0, 1, 2])
        assert torch.allclose(apply_operator(op, apply_operator(op, psi)), psi)

    def test_y_gate_single_is_pauli_y(self):
        assert np.allclose(y_gate(1, [0]).to_dense().numpy(), Y2)

    def test_y_gate_single_in_larger_space(self):
        assert np.allclose(y_gate(2, [1]).to_dense().numpy(), kron_np(Y2, I2))

    def test_y_gate_three_qubits_is_tensor_power(self):
        assert np.allclose(y_gate(3, [0, 1, 2]).to_dense().numpy(), kron_np(Y2, Y2, Y2))

    def test_y_gate_two_qubits_sign(self):
        # With an even number of qubits the parity rule differs from Y (x) Y
        # by a global sign.
        assert np.allclose(y_gate(2, [0, 1]).to_dense().numpy(), -kron_np(Y2, Y2))

    def test_y_anticommutes_with_x(self, random_state):
        psi = torch.from_numpy(random_state(2, 1))
        x, y = x_gate(1, [0]), y_gate(1, [0])
        yx = apply_operator(y, apply_operator(x, psi))
        xy = apply_operator(x, apply_operator(y, psi))
        assert torch.allclose(yx, -xy)

    def test_y_anticommutes_with_z(self, random_state):
        psi = torch.from_numpy(random_state(4, 1))
        z, y = z_gate(2, [1]), y_gate(2, [1])
        assert torch.allclose(
            apply_operator(y, apply_operator(z, psi)),
            -apply_operator(z, apply_operator(y, psi)),
        )

    def test_dtype_override(self):
        assert x_gate(2, [0], dtype=torch.complex64).dtype == torch.complex64
        assert y_gate(2, [0], dtype=torch.complex64).dtype == torch.complex64

    @pytest.mark.parametrize("make", [x_gate, y_gate, z_gate])
    def test_out_of_range(self, make):
        with pytest.raises(QubitOutOfRangeError):
            make(2, [2])

    def test_int_bits_accepted(self):
        assert np.allclose(x_gate(2, 1).to_dense().numpy(), kron_np(X2, I2))


class TestControlledPaulis:
    """cx_gate, cy_gate and cz_gate."""

    def test_cx_on_zero_state_is_identity_action(self):
        psi = torch.zeros((4, 1), dtype=torch.complex128)
        psi[0, 0] = 1
        out = apply_operator(cx_gate(2, [0], [1]), psi)
        assert torch.allclose(out, psi)

    def test_cx_matrix(self):
        expected = kron_np(I2, P0) + kron_np(X2, P1)
        assert np.allclose(cx_gate(2, [0], [1]).to_dense().numpy(), expected)

    def test_cx_multiple_targets(self):
        expected = kron_np(I2, I2, P0) + kron_np(X2, X2, P1)
        assert np.allclose(cx_gate(3, [0], [1, 2]).to_dense().numpy(), expected)

    def test_toffoli(self):
        op = cx_gate(3, [0, 1], [2])
        perm = op.perm.tolist()
        assert perm == [0, 1, 2, 7, 4, 5, 6, 3]

    def test_cy_matrix(self):
        expected = kron_np(I2, P0) + kron_np(Y2, P1)
        assert np.allclose(cy_gate(2, 0, 1).to_dense().numpy(), expected)

    def test_cy_reversed_roles(self):
        expected = kron_np(P0, I2) + kron_np(P1, Y2)
        assert np.allclose(cy_gate(2, 1, 0).to_dense().numpy(), expected)

    def test_cz_matrix(self):
        op = cz_gate(2, 0, 1)
        assert isinstance(op, DiagOperator)
        assert op.diag.real.tolist() == [1.0, 1.0, 1.0, -1.0]

    def test_overlapping_control_and_target(self):
        with pytest.raises(QubitOutOfRangeError, match="overlap"):
            cx_gate(2, [0], [0])


class TestGenericControlled:
    """controlled_gate, general_controlled_gates and hilbert_kron."""

    def test_controlled_perm_matches_cx(self):
        op = controlled_gate(3, [2], std.X(), 0)
        assert isinstance(op, PermOperator)
        assert torch.equal(op.perm, cx_gate(3, [2], [0]).perm)

    def test_controlled_y_matches_cy(self):
        op = controlled_gate(2, [0], std.Y(), 1)
        assert np.allclose(op.to_dense().numpy(), cy_gate(2, 0, 1).to_dense().numpy())

    def test_controlled_diag(self):
        op = controlled_gate(2, [1], std.S(), 0)
        assert isinstance(op, DiagOperator)
        expected = kron_np(P0, I2) + kron_np(P1, np.diag([1, 1j]))
        assert np.allclose(op.to_dense().numpy(), expected)

    def test_multi_controlled_diag(self):
        op = controlled_gate(3, [0, 1], std.Z(), 2)
        assert op.diag.real.tolist() == [1, 1, 1, 1, 1, 1, 1, -1]

    def test_controlled_dense_falls_back(self):
        h = std.H()
        op = controlled_gate(2, [0], h, 1)
        assert isinstance(op, KronOperator)
        expected = kron_np(I2, P0) + kron_np(h.to_dense().numpy(), P1)
        assert np.allclose(op.to_dense().numpy(), expected)

    def test_controlled_dense_is_local(self):
        op = controlled_gate(12, [0], std.H(), 3)
        assert isinstance(op, KronOperator)
        ((locs, local),) = op.factors
        assert locs == (0, 3)
        assert isinstance(local, DenseOperator)
        assert local.matrix.shape == (4, 4)

    def test_multi_controlled_dense_matches_reference(self, random_state):
        rx = std.RX(0.9)
        op = controlled_gate(4, [3, 0], rx, 2)
        # Qubits 3, 2, 1, 0 from left to right.
        both = kron_np(P1, rx.to_dense().numpy(), I2, P1)
        rest = np.eye(16) - kron_np(P1, I2, I2, P1)
        expected = rest + both
        assert np.allclose(op.to_dense().numpy(), expected)
        psi = random_state(16, 2)
        out = apply_operator(op, torch.from_numpy(psi))
        assert np.allclose(out.numpy(), expected @ psi)

    def test_controlled_gate_requires_single_qubit_gate(self):
        with pytest.raises(ValueError):
            controlled_gate(3, [0], cx_gate(2, [0], [1]), 1)

    def test_general_controlled_inverted_control(self):
        op = general_controlled_gates(2, [std.P0()], [0], [std.X()], [1])
        expected = kron_np(I2, P1) + kron_np(X2, P0)
        assert np.allclose(op.to_dense().numpy(), expected)

    def test_hilbert_kron(self):
        op = hilbert_kron(3, [std.X(), std.Z()], [0, 2])
        assert isinstance(op, KronOperator)
        assert np.allclose(op.to_dense().numpy(), kron_np(Z2, I2, X2))

    def test_hilbert_kron_length_mismatch(self):
        with pytest.raises(ValueError):
            hilbert_kron(3, [std.X()], [0, 1])


class TestPauliString:
    """pauli_string_gate builds exact tensor products."""

    @pytest.mark.parametrize(
        "labels",
        [
            {0: "X"},
            {1: "Y"},
            {0: "Y", 1: "Y"},
            {0: "Z", 2: "Y"},
            {0: "X", 1: "Y", 2: "Z"},
            {0: "Y", 1: "Y", 2: "Y"},
        ],
    )
    def test_matches_numpy(self, labels):
        single = {"I": I2, "X": X2, "Y": Y2, "Z": Z2}
        mats = [single[labels.get(q, "I")] for q in reversed(range(3))]
        op = pauli_string_gate(3, labels)
        assert np.allclose(op.to_dense().numpy(), kron_np(*mats))

    def test_z_only_is_diagonal(self):
        assert isinstance(pauli_string_gate(2, {0: "Z", 1: "Z"}), DiagOperator)

    def test_invalid_label(self):
        with pytest.raises(ValueError, match="Pauli"):
            pauli_string_gate(2, {0: "Q"})
