"""Gate constructors returning structured operators."""

from .boost import (
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
from .instruction import GateSpec, gate
from .standard import H, I, P0, P1, RX, RY, RZ, S, T, X, Y, Z, shift

__all__ = [
    "I",
    "X",
    "Y",
    "Z",
    "H",
    "S",
    "T",
    "P0",
    "P1",
    "shift",
    "RX",
    "RY",
    "RZ",
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
    "GateSpec",
    "gate",
]
