"""Tests for GateSpec, the circuit-builder gate description."""

import math

import numpy as np
import pytest
import torch

from qregister import apply, zero_state
from qregister.gates import GateSpec, gate
from qregister.gates import standard as std
from qregister.gates.boost import cx_gate, cy_gate, cz_gate, hilbert_kron
from qregister.operators import DiagOperator, KronOperator, PermOperator


class TestGateSpecConstruction:
    """Normalization and validation of GateSpec fields."""

    def test_kind_is_uppercased(self):
        spec = GateSpec("rx", (0,), params=(0.5,))
        assert spec.kind == "RX"

    def test_fields_become_tuples(self):
        spec = gate("cnot", [0, 1])
        assert spec.targets == (0, 1)
        assert spec.controls == ()
        assert spec.params == ()

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown gate kind"):
            GateSpec("FOO", (0,))

    def test_no_targets(self):
        with pytest.raises(ValueError):
            GateSpec("X", ())

    def test_frozen(self):
        spec = GateSpec("X", (0,))
        with pytest.raises(Exception):
            spec.kind = "Y"


class TestToOperator:
    """GateSpec.to_operator picks the structured constructor."""

    def test_uncontrolled_x_uses_bitmask_gate(self):
        op = GateSpec("X", (0, 2)).to_operator(3)
        assert isinstance(op, PermOperator)
        assert op.perm.tolist() == [5, 4, 7, 6, 1, 0, 3, 2]

    def test_uncontrolled_z(self):
        op = GateSpec("Z", (1,)).to_operator(2)
        assert isinstance(op, DiagOperator)
        assert op.diag.real.tolist() == [1.0, 1.0, -1.0, -1.0]

    def test_single_y(self):
        op = GateSpec("Y", (0,)).to_operator(1)
        assert torch.allclose(op.to_dense(), std.Y().to_dense())

    def test_multi_y_is_exact_tensor_power(self):
        op = GateSpec("Y", (0, 1)).to_operator(2)
        y = std.Y().to_dense().numpy()
        assert np.allclose(op.to_dense().numpy(), np.kron(y, y))

    def test_hadamard_placed_on_target(self):
        op = GateSpec("H", (1,)).to_operator(2)
        expected = hilbert_kron(2, [std.H()], [1]).to_dense()
        assert torch.allclose(op.to_dense(), expected)

    def test_parametric(self):
        op = GateSpec("RZ", (0,), params=(0.3,)).to_operator(1)
        assert torch.allclose(op.to_dense(), std.RZ(0.3).to_dense())

    def test_parametric_requires_one_param(self):
        with pytest.raises(ValueError, match="one parameter"):
            GateSpec("RX", (0,)).to_operator(1)

    def test_cnot_alias(self):
        op = gate("CNOT", [0, 1]).to_operator(2)
        assert torch.equal(op.perm, cx_gate(2, [0], [1]).perm)

    def test_cnot_alias_needs_two_targets(self):
        with pytest.raises(ValueError):
            gate("CNOT", [0]).to_operator(2)

    def test_controlled_x_with_controls(self):
        op = gate("X", [2], controls=[0, 1]).to_operator(3)
        assert torch.equal(op.perm, cx_gate(3, [0, 1], [2]).perm)

    def test_cy_and_cz_aliases(self):
        cy = gate("CY", [1, 0]).to_operator(2)
        cz = gate("CZ", [0, 1]).to_operator(2)
        assert torch.allclose(cy.to_dense(), cy_gate(2, 1, 0).to_dense())
        assert torch.allclose(cz.to_dense(), cz_gate(2, 0, 1).to_dense())

    def test_controlled_shift(self):
        theta = math.pi / 3
        op = gate("SHIFT", [1], controls=[0], params=[theta]).to_operator(2)
        assert isinstance(op, DiagOperator)
        expected = [1.0, 1.0, 1.0, complex(math.cos(theta), math.sin(theta))]
        assert torch.allclose(op.diag, torch.tensor(expected, dtype=torch.complex128))

    def test_controlled_hadamard_stays_local(self):
        op = gate("H", [3], controls=[0]).to_operator(12)
        assert isinstance(op, KronOperator)
        assert max(factor.dim for _, factor in op.factors) == 4

    def test_controlled_hadamard_matches_dense(self):
        op = gate("H", [0], controls=[1]).to_operator(2)
        h = std.H().to_dense().numpy()
        expected = np.kron(np.diag([1.0, 0.0]), np.eye(2)) + np.kron(np.diag([0.0, 1.0]), h)
        assert np.allclose(op.to_dense().numpy(), expected)

    def test_dtype_passthrough(self):
        op = GateSpec("H", (0,)).to_operator(1, dtype=torch.complex64)
        assert op.dtype == torch.complex64


class TestApplyGateSpec:
    """GateSpec through the apply entry point."""

    def test_apply_cnot_after_x(self):
        reg = zero_state(2)
        apply(reg, gate("X", [0]))
        apply(reg, gate("CNOT", [0, 1]))
        assert torch.allclose(reg.probs(), torch.tensor([0.0, 0.0, 0.0, 1.0], dtype=torch.float64))

    def test_spec_follows_register_dtype(self):
        reg = zero_state(1, dtype=torch.complex64)
        apply(reg, gate("H", [0]))
        assert reg.dtype == torch.complex64
        assert torch.allclose(reg.probs(), torch.tensor([0.5, 0.5]), atol=1e-6)
