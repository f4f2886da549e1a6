"""Tests for debug mode and the normalization check in apply."""

import pytest
import torch

from qregister import apply
from qregister.diagnostics import debug_context, is_debug_enabled, set_debug_enabled
from qregister.gates import standard as std
from qregister.gates.boost import cx_gate, hilbert_kron
from qregister.register import select, uniform_state, zero_state


def test_debug_mode_toggle_and_context() -> None:
    """Test debug mode toggling and context manager."""
    set_debug_enabled(False)
    assert not is_debug_enabled()

    with debug_context(True):
        assert is_debug_enabled()

    assert not is_debug_enabled()

    set_debug_enabled(True)
    with debug_context(False):
        assert not is_debug_enabled()
    assert is_debug_enabled()


def test_debug_context_nested() -> None:
    set_debug_enabled(False)
    with debug_context(True):
        with debug_context(False):
            assert not is_debug_enabled()
        assert is_debug_enabled()
    assert not is_debug_enabled()


def test_debug_context_restores_on_error() -> None:
    set_debug_enabled(False)
    with pytest.raises(RuntimeError):
        with debug_context(True):
            raise RuntimeError("boom")
    assert not is_debug_enabled()


def test_unitary_passes_in_debug_mode() -> None:
    reg = uniform_state(2, dtype=torch.complex64)
    with debug_context(True):
        apply(reg, cx_gate(2, [0], [1], dtype=torch.complex64))
        apply(reg, hilbert_kron(2, [std.H(dtype=torch.complex64)], [1]))
    assert reg.isnormalized(atol=1e-5)


def test_non_unitary_raises_in_debug_mode() -> None:
    reg = uniform_state(1)
    with debug_context(True):
        with pytest.raises(ValueError, match="not normalized"):
            apply(reg, std.P0())


def test_non_unitary_ignored_without_debug_mode() -> None:
    reg = uniform_state(1)
    apply(reg, std.P0())
    assert not reg.isnormalized()


def test_unnormalized_input_is_not_checked() -> None:
    reg = select(uniform_state(2), [0, 1])
    assert not reg.isnormalized()
    with debug_context(True):
        apply(reg, std.P0())


def test_projector_preserving_norm_passes() -> None:
    with debug_context(True):
        apply(zero_state(1), std.P0())
