"""Configuration: devices and default precision."""

from .device import (
    DEFAULT_COMPLEX_DTYPE,
    DEFAULT_REAL_DTYPE,
    Device,
    default_device,
    device,
    real_dtype_of,
    resolve_device,
    resolve_dtype,
)

__all__ = [
    "DEFAULT_COMPLEX_DTYPE",
    "DEFAULT_REAL_DTYPE",
    "Device",
    "device",
    "default_device",
    "resolve_device",
    "resolve_dtype",
    "real_dtype_of",
]
