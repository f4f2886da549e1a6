"""Batched registers, their factories and measurement."""

from .factories import (
    batched_from_configs,
    product_state,
    rand_state,
    register,
    uniform_state,
    zero_state,
)
from .measure import (
    focused,
    measure,
    measure_collapse,
    measure_remove,
    measure_reset,
    outcome_counts,
    select,
    select_,
)
from .register import Register, fidelity, join, reduced_density_matrix, tracedist

__all__ = [
    "Register",
    "register",
    "zero_state",
    "product_state",
    "uniform_state",
    "rand_state",
    "batched_from_configs",
    "join",
    "fidelity",
    "tracedist",
    "reduced_density_matrix",
    "focused",
    "measure",
    "measure_collapse",
    "measure_remove",
    "measure_reset",
    "select",
    "select_",
    "outcome_counts",
]
