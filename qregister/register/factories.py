"""Constructors for common register states."""

from __future__ import annotations

from typing import Optional, Sequence, Union

import torch

from ..core.device import Device, real_dtype_of, resolve_device, resolve_dtype
from ..errors import DimensionMismatchError, QubitOutOfRangeError
from .register import Register

DeviceLike = Union[Device, torch.device, str, None]


def _target(dtype: Optional[torch.dtype], device: DeviceLike):
    dev = resolve_device(device)
    return resolve_dtype(dtype, dev), dev.as_torch_device()


def register(raw: torch.Tensor, nbatch: Optional[int] = None) -> Register:
    """
    Wrap a raw amplitude tensor in a Register without copying.

    A 1D tensor becomes a single-batch register. For a 2D tensor ``nbatch``
    defaults to the number of columns, i.e. every column is one batch element.
    """
    if raw.dim() == 1:
        if nbatch not in (None, 1):
            raise DimensionMismatchError(
                f"a 1D state holds a single batch element, got nbatch={nbatch}"
            )
        return Register(raw.reshape(-1, 1), nbatch=1)
    if raw.dim() != 2:
        raise DimensionMismatchError(
            f"raw state must be 1D or 2D, got shape {tuple(raw.shape)}"
        )
    return Register(raw, nbatch=raw.shape[1] if nbatch is None else nbatch)


def product_state(
    n: int,
    config: int,
    nbatch: int = 1,
    dtype: Optional[torch.dtype] = None,
    device: DeviceLike = None,
) -> Register:
    """Every batch element in the computational basis state ``|config>``."""
    if config < 0 or config >= 1 << n:
        raise QubitOutOfRangeError(
            f"basis configuration {config} out of range for {n} qubits"
        )
    dtype, dev = _target(dtype, device)
    state = torch.zeros((1 << n, nbatch), dtype=dtype, device=dev)
    state[config, :] = 1
    return Register(state, nbatch=nbatch)


def zero_state(
    n: int,
    nbatch: int = 1,
    dtype: Optional[torch.dtype] = None,
    device: DeviceLike = None,
) -> Register:
    """Every batch element in ``|0...0>``."""
    return product_state(n, 0, nbatch=nbatch, dtype=dtype, device=device)


def uniform_state(
    n: int,
    nbatch: int = 1,
    dtype: Optional[torch.dtype] = None,
    device: DeviceLike = None,
) -> Register:
    """Equal superposition of all ``2**n`` basis states."""
    dtype, dev = _target(dtype, device)
    amp = 1.0 / (1 << n) ** 0.5
    state = torch.full((1 << n, nbatch), amp, dtype=dtype, device=dev)
    return Register(state, nbatch=nbatch)


def rand_state(
    n: int,
    nbatch: int = 1,
    dtype: Optional[torch.dtype] = None,
    device: DeviceLike = None,
    generator: Optional[torch.Generator] = None,
) -> Register:
    """
    Random normalized state per batch element.

    Real and imaginary parts are drawn from a standard normal distribution,
    then each batch column is normalized. Pass a seeded ``torch.Generator``
    for reproducible states.
    """
    dtype, dev = _target(dtype, device)
    real = real_dtype_of(dtype)
    shape = (1 << n, nbatch)
    state = torch.complex(
        torch.randn(shape, dtype=real, device=dev, generator=generator),
        torch.randn(shape, dtype=real, device=dev, generator=generator),
    )
    return Register(state, nbatch=nbatch).normalize()


def batched_from_configs(
    n: int,
    configs: Sequence[int],
    dtype: Optional[torch.dtype] = None,
    device: DeviceLike = None,
) -> Register:
    """One batch element per basis configuration in ``configs``."""
    dtype, dev = _target(dtype, device)
    nbatch = len(configs)
    state = torch.zeros((1 << n, nbatch), dtype=dtype, device=dev)
    for b, config in enumerate(configs):
        if config < 0 or config >= 1 << n:
            raise QubitOutOfRangeError(
                f"basis configuration {config} out of range for {n} qubits"
            )
        state[config, b] = 1
    return Register(state, nbatch=nbatch)


__all__ = [
    "register",
    "product_state",
    "zero_state",
    "uniform_state",
    "rand_state",
    "batched_from_configs",
]
