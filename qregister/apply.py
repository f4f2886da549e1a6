"""Principal entry point: apply an operator, block or gate spec to a register."""

from __future__ import annotations

from typing import Union

from .blocks.base import Block, MatrixBlock
from .diagnostics import assert_normalized, is_debug_enabled
from .gates.instruction import GateSpec
from .logging import get_logger
from .operators.structured import StructuredOperator
from .register.register import Register

logger = get_logger(__name__)

Target = Union[StructuredOperator, Block, GateSpec]


def apply(reg: Register, target: Target) -> Register:
    """
    Apply ``target`` to the active qubits of ``reg`` in place.

    Args:
        reg: Register to mutate.
        target: A structured operator on ``reg.nactive`` qubits, a block, or a
            :class:`GateSpec`, which is turned into an operator on
            ``reg.nactive`` qubits with the register's dtype and device.

    Returns:
        ``reg``, for chaining.

    Raises:
        DimensionMismatchError: If the target's qubit count differs from
            ``reg.nactive``. The register is left untouched.

    In debug mode a register that was normalized before the call must still
    be normalized afterwards, which catches non-unitary operators applied by
    mistake.
    """
    if isinstance(target, GateSpec):
        target = target.to_operator(reg.nactive, dtype=reg.dtype, device=reg.device)
    if isinstance(target, StructuredOperator):
        target = MatrixBlock(target)
    if not isinstance(target, Block):
        raise TypeError(
            f"apply expects a StructuredOperator, Block or GateSpec, got {type(target)}"
        )

    target.check(reg.nactive)
    check_norm = is_debug_enabled() and reg.isnormalized(atol=1e-4)
    target._apply(reg)
    logger.debug("applied %r to %r", target, reg)
    if check_norm:
        assert_normalized(reg.rank3().reshape(-1, reg.nbatch), atol=1e-4)
    return reg


__all__ = ["apply"]
