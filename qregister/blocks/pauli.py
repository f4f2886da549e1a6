"""Weighted sums of Pauli strings as blocks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

import torch

from ..core.device import resolve_dtype
from ..errors import DimensionMismatchError
from ..gates.boost import pauli_string_gate
from ..operators.structured import (
    DenseOperator,
    StructuredOperator,
    apply_operator,
)
from ..register.register import Register
from .base import Block

_VALID_PAULI_LABELS = {"I", "X", "Y", "Z"}


@dataclass(frozen=True)
class PauliTerm:
    """
    A coefficient times a tensor product of Pauli operators.

    Args:
        coeff: Complex scalar coefficient.
        paulis: One label per qubit, ``paulis[q]`` acting on qubit ``q``.
            Each label is "I", "X", "Y" or "Z".

    Example:
        >>> term = PauliTerm(0.5, ("Z", "I"))  # Z on qubit 0
        >>> term.n_qubits()
        2
    """

    coeff: complex
    paulis: Tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "coeff", complex(self.coeff))
        if isinstance(self.paulis, str):
            object.__setattr__(self, "paulis", tuple(self.paulis))
        elif not isinstance(self.paulis, tuple):
            object.__setattr__(self, "paulis", tuple(self.paulis))

        if len(self.paulis) < 1:
            raise ValueError(f"paulis must have length >= 1, got {len(self.paulis)}")
        invalid = [p for p in self.paulis if p not in _VALID_PAULI_LABELS]
        if invalid:
            raise ValueError(
                f"Invalid Pauli labels: {invalid}. "
                f"All labels must be in {_VALID_PAULI_LABELS}"
            )

    def n_qubits(self) -> int:
        """Return the number of qubits this term acts on."""
        return len(self.paulis)

    def is_identity(self) -> bool:
        return all(p == "I" for p in self.paulis)

    def operator(
        self,
        dtype: Optional[torch.dtype] = None,
        device: Optional[torch.device] = None,
    ) -> StructuredOperator:
        """The Pauli string without its coefficient, as a structured operator."""
        labels = {q: p for q, p in enumerate(self.paulis) if p != "I"}
        return pauli_string_gate(self.n_qubits(), labels, dtype=dtype, device=device)


@dataclass(eq=False)
class PauliSum(Block):
    """
    Block computing ``sum_k c_k P_k |psi>``.

    Terms are evaluated on the input state in listed order and accumulated
    into a fresh buffer; the register receives the sum. The result is a
    linear combination, so it is generally not normalized.

    Example:
        >>> h = PauliSum([PauliTerm(1.0, "ZI"), PauliTerm(0.5, "XX")])
        >>> h.nqubits
        2
    """

    terms: List[PauliTerm] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.terms = list(self.terms)
        if self.terms:
            n_qubits = self.terms[0].n_qubits()
            for i, term in enumerate(self.terms):
                if term.n_qubits() != n_qubits:
                    raise DimensionMismatchError(
                        f"All terms must have the same n_qubits. Term 0 has "
                        f"{n_qubits} qubits, but term {i} has {term.n_qubits()} qubits."
                    )

    @property
    def nqubits(self) -> int:  # type: ignore[override]
        if not self.terms:
            return 0
        return self.terms[0].n_qubits()

    def __len__(self) -> int:
        return len(self.terms)

    @classmethod
    def from_terms(cls, terms: Iterable[PauliTerm]) -> "PauliSum":
        return cls(terms=list(terms))

    def add_term(self, term: PauliTerm) -> None:
        if self.terms and term.n_qubits() != self.nqubits:
            raise DimensionMismatchError(
                f"Cannot add term with {term.n_qubits()} qubits to "
                f"PauliSum with {self.nqubits} qubits."
            )
        self.terms.append(term)

    def simplify(self, tol: float = 1e-12) -> "PauliSum":
        """
        Combine terms with identical Pauli strings and drop those with
        ``|coeff| < tol``. Order of first appearance is kept.
        """
        coeff_map: dict[Tuple[str, ...], complex] = {}
        for term in self.terms:
            coeff_map[term.paulis] = coeff_map.get(term.paulis, 0j) + term.coeff
        return PauliSum(
            [PauliTerm(c, p) for p, c in coeff_map.items() if abs(c) >= tol]
        )

    def check(self, nactive: int) -> None:
        if not self.terms:
            raise ValueError("Cannot apply an empty PauliSum")
        super().check(nactive)

    def _apply(self, reg: Register) -> None:
        source = reg.state
        acc = torch.zeros_like(source)
        for term in self.terms:
            op = term.operator(dtype=source.dtype, device=source.device)
            acc = acc + term.coeff * apply_operator(op, source)
        reg._replace(acc)

    def mat(self) -> DenseOperator:
        """Dense matrix of the sum. Meant for small systems."""
        if not self.terms:
            raise ValueError("Cannot compute matrix for empty PauliSum")
        dtype = resolve_dtype(None)
        matrix = None
        for term in self.terms:
            part = term.coeff * term.operator(dtype=dtype).to_dense()
            matrix = part if matrix is None else matrix + part
        return DenseOperator(matrix)

    def adjoint(self) -> "PauliSum":
        return PauliSum([PauliTerm(t.coeff.conjugate(), t.paulis) for t in self.terms])


def expect(hamiltonian: PauliSum, reg: Register) -> torch.Tensor:
    """
    Expectation value ``<psi|H|psi>`` per batch element, shape (nbatch,).

    The register is left unchanged. Remaining qubits are summed over, so for
    a register with remaining qubits this is the expectation in the reduced
    state of the active qubits.
    """
    hamiltonian.check(reg.nactive)
    out = reg.copy()
    hamiltonian._apply(out)
    bra = reg.rank3().conj()
    return (bra * out.rank3()).sum(dim=(0, 1))


__all__ = ["PauliTerm", "PauliSum", "expect"]
