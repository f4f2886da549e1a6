"""Tests for device and precision configuration."""

import pytest
import torch

from qregister.core.device import (
    DEFAULT_COMPLEX_DTYPE,
    Device,
    default_device,
    device,
    real_dtype_of,
    resolve_device,
    resolve_dtype,
)


class TestDevice:
    """Tests for Device class."""

    def test_device_creation(self):
        dev = Device(
            name="test",
            torch_device=torch.device("cpu"),
            dtype=torch.float32,
            complex_dtype=torch.complex64,
        )
        assert dev.name == "test"
        assert dev.torch_device == torch.device("cpu")
        assert dev.dtype == torch.float32
        assert dev.complex_dtype == torch.complex64

    def test_device_repr(self):
        repr_str = repr(device("sv_cpu"))
        assert "sv_cpu" in repr_str
        assert "cpu" in repr_str

    def test_as_torch_device(self):
        assert device("sv_cpu").as_torch_device() == torch.device("cpu")


class TestDeviceFactory:
    """Tests for device factory function."""

    def test_device_sv_cpu(self):
        dev = device("sv_cpu")
        assert dev.name == "sv_cpu"
        assert dev.torch_device == torch.device("cpu")
        assert dev.complex_dtype == torch.complex128

    def test_device_sv_cuda_unavailable(self):
        if torch.cuda.is_available():
            pytest.skip("CUDA is available, cannot test failure case")
        with pytest.raises(RuntimeError, match="CUDA device requested"):
            device("sv_cuda")

    def test_device_unsupported_name(self):
        with pytest.raises(ValueError, match="Unsupported device name"):
            device("invalid_device")

    def test_default_device(self):
        assert default_device().name == "sv_cpu"


class TestResolve:
    """Normalization of device and dtype arguments."""

    def test_resolve_device_forms(self):
        dev = device("sv_cpu")
        assert resolve_device(None).name == "sv_cpu"
        assert resolve_device(dev) is dev
        assert resolve_device("sv_cpu").name == "sv_cpu"
        assert resolve_device(torch.device("cpu")).name == "sv_cpu"

    def test_resolve_device_rejects_other_types(self):
        with pytest.raises(TypeError):
            resolve_device(42)

    def test_resolve_dtype_default(self):
        assert resolve_dtype(None) == DEFAULT_COMPLEX_DTYPE == torch.complex128

    def test_resolve_dtype_follows_device(self):
        dev = Device("sv_cpu", torch.device("cpu"), complex_dtype=torch.complex64)
        assert resolve_dtype(None, dev) == torch.complex64
        assert resolve_dtype(torch.complex128, dev) == torch.complex128

    def test_resolve_dtype_rejects_real(self):
        with pytest.raises(ValueError, match="must be complex"):
            resolve_dtype(torch.float64)

    def test_real_dtype_of(self):
        assert real_dtype_of(torch.complex64) == torch.float32
        assert real_dtype_of(torch.complex128) == torch.float64
