"""Gate specifications handed over by circuit builders."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

import torch

from ..operators.structured import StructuredOperator
from . import boost, standard

_PRIMITIVES: Dict[str, Callable[..., StructuredOperator]] = {
    "I": standard.I,
    "X": standard.X,
    "Y": standard.Y,
    "Z": standard.Z,
    "H": standard.H,
    "S": standard.S,
    "T": standard.T,
}

_PARAMETRIC: Dict[str, Callable[..., StructuredOperator]] = {
    "SHIFT": standard.shift,
    "RX": standard.RX,
    "RY": standard.RY,
    "RZ": standard.RZ,
}

# Two-qubit shorthands whose first target is the control.
_CONTROLLED_ALIASES = {"CNOT": "X", "CX": "X", "CY": "Y", "CZ": "Z"}


@dataclass(frozen=True)
class GateSpec:
    """
    One gate application as produced by a circuit builder.

    Attributes
    ----------
    kind:
        Gate name: "I", "X", "Y", "Z", "H", "S", "T", "SHIFT", "RX", "RY",
        "RZ", or the controlled shorthands "CNOT"/"CX", "CY", "CZ".
    targets:
        Target qubit indices (0-based). For the controlled shorthands without
        explicit ``controls`` this is ``(control, target)``.
    controls:
        Control qubit indices; the gate acts where all of them are 1.
    params:
        Real parameters, e.g. the angle of "SHIFT" or "RX".
    """

    kind: str
    targets: Tuple[int, ...]
    controls: Tuple[int, ...] = ()
    params: Tuple[float, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", self.kind.upper())
        object.__setattr__(self, "targets", tuple(int(q) for q in self.targets))
        object.__setattr__(self, "controls", tuple(int(q) for q in self.controls))
        object.__setattr__(self, "params", tuple(float(p) for p in self.params))
        if not self.targets:
            raise ValueError("GateSpec must act on at least one qubit.")
        if self.kind not in _PRIMITIVES and self.kind not in _PARAMETRIC and (
            self.kind not in _CONTROLLED_ALIASES
        ):
            raise ValueError(f"Unknown gate kind {self.kind!r}")

    def _normalized(self) -> Tuple[str, Tuple[int, ...], Tuple[int, ...]]:
        if self.kind in _CONTROLLED_ALIASES:
            base = _CONTROLLED_ALIASES[self.kind]
            if self.controls:
                return base, self.targets, self.controls
            if len(self.targets) != 2:
                raise ValueError(
                    f"{self.kind} needs (control, target) targets, got {self.targets}"
                )
            return base, self.targets[1:], self.targets[:1]
        return self.kind, self.targets, self.controls

    def _primitive(
        self, kind: str, dtype: Optional[torch.dtype], device: Optional[torch.device]
    ) -> StructuredOperator:
        if kind in _PARAMETRIC:
            if len(self.params) != 1:
                raise ValueError(f"{kind} takes one parameter, got {len(self.params)}")
            return _PARAMETRIC[kind](self.params[0], dtype=dtype, device=device)
        return _PRIMITIVES[kind](dtype=dtype, device=device)

    def to_operator(
        self,
        num_bit: int,
        dtype: Optional[torch.dtype] = None,
        device: Optional[torch.device] = None,
    ) -> StructuredOperator:
        """
        Build the structured operator of this gate on ``num_bit`` qubits.

        Pauli gates use the bitmask constructors directly; other gates are
        placed on their targets as Kronecker factors, or routed through
        :func:`~qregister.gates.boost.controlled_gate` when controlled.
        """
        kind, targets, controls = self._normalized()

        if not controls:
            if kind == "X":
                return boost.x_gate(num_bit, targets, dtype=dtype, device=device)
            if kind == "Z":
                return boost.z_gate(num_bit, targets, dtype=dtype, device=device)
            if kind == "Y" and len(targets) == 1:
                return boost.y_gate(num_bit, targets, dtype=dtype, device=device)
            prim = self._primitive(kind, dtype, device)
            return boost.hilbert_kron(num_bit, [prim] * len(targets), targets)

        if kind == "X":
            return boost.cx_gate(num_bit, controls, targets, dtype=dtype, device=device)
        if len(targets) != 1:
            raise ValueError(
                f"controlled {kind} supports a single target, got {targets}"
            )
        if kind == "Y" and len(controls) == 1:
            return boost.cy_gate(num_bit, controls[0], targets[0], dtype=dtype, device=device)
        if kind == "Z" and len(controls) == 1:
            return boost.cz_gate(num_bit, controls[0], targets[0], dtype=dtype, device=device)
        prim = self._primitive(kind, dtype, device)
        return boost.controlled_gate(num_bit, controls, prim, targets[0])


def gate(
    kind: str,
    targets: Sequence[int],
    controls: Sequence[int] = (),
    params: Sequence[float] = (),
) -> GateSpec:
    """Convenience constructor accepting any sequences."""
    return GateSpec(kind, tuple(targets), tuple(controls), tuple(params))


__all__ = ["GateSpec", "gate"]
