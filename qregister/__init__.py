"""qregister - batched quantum registers with structured gate operators on PyTorch."""

__version__ = "0.1.0"

from .apply import apply
from .bits import (
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
    test_all,
    test_any,
)
from .blocks import (
    Block,
    Kron,
    MatrixBlock,
    PauliSum,
    PauliTerm,
    PutBlock,
    Roller,
    Sequential,
    expect,
)
from .core import DEFAULT_COMPLEX_DTYPE, Device, default_device, device
from .diagnostics import debug_context, is_debug_enabled, set_debug_enabled
from .errors import (
    DegenerateStateError,
    DimensionMismatchError,
    DivisibilityError,
    QRegisterError,
    QubitOutOfRangeError,
)
from .gates import (
    GateSpec,
    controlled_gate,
    cx_gate,
    cy_gate,
    cz_gate,
    gate,
    general_controlled_gates,
    hilbert_kron,
    pauli_string_gate,
    x_gate,
    y_gate,
    z_gate,
)
from .logging import configure_logging, get_logger, set_log_level
from .operators import (
    DenseOperator,
    DiagOperator,
    KronOperator,
    OperatorKind,
    PermOperator,
    StructuredOperator,
    apply_operator,
    compose,
    identity,
    kron,
)
from .register import (
    Register,
    fidelity,
    join,
    measure,
    measure_collapse,
    measure_remove,
    measure_reset,
    product_state,
    rand_state,
    reduced_density_matrix,
    register,
    select,
    select_,
    tracedist,
    uniform_state,
    zero_state,
)

__all__ = [
    "__version__",
    # Entry point
    "apply",
    # Bits
    "bmask",
    "flip",
    "take_bit",
    "test_all",
    "test_any",
    "parity",
    "swap_bits",
    "reorder_index",
    "basis",
    "basis_tensor",
    "is_pow2",
    "log2i",
    # Operators
    "OperatorKind",
    "StructuredOperator",
    "PermOperator",
    "DiagOperator",
    "DenseOperator",
    "KronOperator",
    "apply_operator",
    "compose",
    "kron",
    "identity",
    # Gates
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
    # Register
    "Register",
    "register",
    "zero_state",
    "product_state",
    "uniform_state",
    "rand_state",
    "join",
    "fidelity",
    "tracedist",
    "reduced_density_matrix",
    "measure",
    "measure_collapse",
    "measure_remove",
    "measure_reset",
    "select",
    "select_",
    # Blocks
    "Block",
    "MatrixBlock",
    "PutBlock",
    "Sequential",
    "Kron",
    "Roller",
    "PauliTerm",
    "PauliSum",
    "expect",
    # Config, diagnostics, logging, errors
    "DEFAULT_COMPLEX_DTYPE",
    "Device",
    "device",
    "default_device",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
    "get_logger",
    "set_log_level",
    "configure_logging",
    "QRegisterError",
    "DimensionMismatchError",
    "QubitOutOfRangeError",
    "DivisibilityError",
    "DegenerateStateError",
]
