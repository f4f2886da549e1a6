"""Device and precision configuration for registers and operators."""

from __future__ import annotations

import torch

# Single documented default precision. Factories and gate constructors fall
# back to this dtype only when the caller passes ``dtype=None``.
DEFAULT_COMPLEX_DTYPE = torch.complex128
DEFAULT_REAL_DTYPE = torch.float64

_COMPLEX_TO_REAL = {
    torch.complex64: torch.float32,
    torch.complex128: torch.float64,
}


class Device:
    """
    A logical simulation device: a torch device plus default dtypes.

    Instances are treated as immutable values; construct a new one instead of
    editing attributes.
    """

    def __init__(
        self,
        name: str,
        torch_device: torch.device,
        dtype: torch.dtype = DEFAULT_REAL_DTYPE,
        complex_dtype: torch.dtype = DEFAULT_COMPLEX_DTYPE,
    ) -> None:
        """
        Initialize a Device.

        Args:
            name: Logical device name (e.g., "sv_cpu", "sv_cuda").
            torch_device: Underlying PyTorch device.
            dtype: Real dtype used for probabilities.
            complex_dtype: Complex dtype used for amplitudes.
        """
        self.name = name
        self.torch_device = torch_device
        self.dtype = dtype
        self.complex_dtype = complex_dtype

    def __repr__(self) -> str:
        return (
            f"Device(name={self.name!r}, torch_device={self.torch_device}, "
            f"complex_dtype={self.complex_dtype})"
        )

    def as_torch_device(self) -> torch.device:
        """Return the underlying PyTorch device."""
        return self.torch_device


def device(name: str) -> Device:
    """
    Create a Device from its name.

    Supported names:
        - "sv_cpu": CPU statevector device
        - "sv_cuda": CUDA statevector device (only if CUDA is available)

    Raises:
        RuntimeError: If "sv_cuda" is requested but CUDA is not available.
        ValueError: If the device name is not supported.
    """
    if name == "sv_cpu":
        return Device(name="sv_cpu", torch_device=torch.device("cpu"))
    elif name == "sv_cuda":
        if not torch.cuda.is_available():
            raise RuntimeError(
                "CUDA device requested but torch.cuda.is_available() is False"
            )
        return Device(name="sv_cuda", torch_device=torch.device("cuda"))
    else:
        supported = ["sv_cpu", "sv_cuda"]
        raise ValueError(
            f"Unsupported device name: {name!r}. Supported devices: {supported}"
        )


def default_device() -> Device:
    """Return the default (CPU) device."""
    return device("sv_cpu")


def resolve_device(dev: Device | torch.device | str | None) -> Device:
    """
    Normalize the accepted device specifications to a Device.

    Args:
        dev: A Device, a logical name ("sv_cpu"), a torch.device, or None for
            the default device.

    Raises:
        ValueError: For unsupported torch.device types.
        TypeError: For any other kind of object.
    """
    if dev is None:
        return default_device()
    if isinstance(dev, Device):
        return dev
    if isinstance(dev, str):
        return device(dev)
    if isinstance(dev, torch.device):
        if dev.type == "cpu":
            return device("sv_cpu")
        if dev.type == "cuda":
            return device("sv_cuda")
        raise ValueError(
            f"Unsupported torch.device type: {dev.type}. "
            "Only 'cpu' and 'cuda' are supported."
        )
    raise TypeError(
        f"device must be Device, str, torch.device, or None, got {type(dev)}"
    )


def resolve_dtype(dtype: torch.dtype | None, dev: Device | None = None) -> torch.dtype:
    """Return ``dtype`` or the device's complex dtype, checking it is complex."""
    if dtype is None:
        dtype = dev.complex_dtype if dev is not None else DEFAULT_COMPLEX_DTYPE
    if dtype not in _COMPLEX_TO_REAL:
        raise ValueError(
            f"dtype must be complex (complex64 or complex128), got {dtype}"
        )
    return dtype


def real_dtype_of(dtype: torch.dtype) -> torch.dtype:
    """Return the real dtype matching a complex dtype."""
    return _COMPLEX_TO_REAL[dtype]
