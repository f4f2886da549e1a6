"""Structured operator forms and their application."""

from .structured import (
    DenseOperator,
    DiagOperator,
    KronOperator,
    OperatorKind,
    PermOperator,
    StructuredOperator,
    apply_on_locs,
    apply_operator,
    check_locs,
    compose,
    identity,
    kron,
)

__all__ = [
    "OperatorKind",
    "StructuredOperator",
    "PermOperator",
    "DiagOperator",
    "DenseOperator",
    "KronOperator",
    "check_locs",
    "apply_operator",
    "apply_on_locs",
    "compose",
    "kron",
    "identity",
]
