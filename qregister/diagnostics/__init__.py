"""Diagnostics and debugging utilities for qregister."""

from .core import (
    assert_normalized,
    column_norms,
    fidelity_mix,
    fidelity_pure,
    is_unitary,
    trace_distance_mix,
)
from .debug_mode import (
    debug_context,
    is_debug_enabled,
    set_debug_enabled,
)

__all__ = [
    "column_norms",
    "assert_normalized",
    "fidelity_pure",
    "fidelity_mix",
    "trace_distance_mix",
    "is_unitary",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
]
