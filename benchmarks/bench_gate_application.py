"""Benchmark gate application on registers."""

import time
from typing import Dict

import torch

import qregister as qr
from qregister.gates import standard as stdgates
from qregister.operators import DenseOperator


def benchmark_gate_application(
    n_qubits: int,
    n_gates: int = 1000,
    device: str = "cpu",
    dtype: torch.dtype = torch.complex64,
) -> Dict[str, float]:
    """Benchmark structured single-qubit gates placed with PutBlock.

    Args:
        n_qubits: Number of qubits.
        n_gates: Number of gates to apply.
        device: Device ('cpu' or 'cuda').
        dtype: Data type.

    Returns:
        Dictionary with timing results.
    """
    device_map = {"cpu": "sv_cpu", "cuda": "sv_cuda"}
    qr_device = qr.device(device_map.get(device, "sv_cpu"))
    torch_device = torch.device(device)

    reg = qr.zero_state(n_qubits, device=qr_device, dtype=dtype)

    gates = [
        stdgates.H(dtype=dtype, device=torch_device),
        stdgates.X(dtype=dtype, device=torch_device),
        stdgates.Y(dtype=dtype, device=torch_device),
        stdgates.Z(dtype=dtype, device=torch_device),
    ]
    blocks = [
        qr.PutBlock(n_qubits, [q], g) for q in range(n_qubits) for g in gates
    ]

    # Warmup
    for _ in range(10):
        qr.apply(reg, blocks[0])

    start = time.perf_counter()
    for i in range(n_gates):
        qr.apply(reg, blocks[i % len(blocks)])
    end = time.perf_counter()

    total_time = end - start
    return {
        "n_qubits": n_qubits,
        "n_gates": n_gates,
        "total_time_sec": total_time,
        "time_per_gate_sec": total_time / n_gates,
        "gates_per_sec": n_gates / total_time,
    }


def benchmark_structured_vs_dense(
    n_qubits: int,
    batch_size: int = 100,
    n_gates: int = 100,
    dtype: torch.dtype = torch.complex64,
) -> Dict[str, float]:
    """Compare a permutation CNOT against its dense matrix on a batched register.

    Args:
        n_qubits: Number of qubits.
        batch_size: Batch size.
        n_gates: Number of applications of each form.
        dtype: Data type.

    Returns:
        Dictionary with per-gate timings of both forms.
    """
    reg = qr.uniform_state(n_qubits, nbatch=batch_size, dtype=dtype)
    structured = qr.cx_gate(n_qubits, [0], [n_qubits - 1], dtype=dtype)
    dense = DenseOperator(structured.to_dense())

    timings = {}
    for name, op in (("structured", structured), ("dense", dense)):
        for _ in range(5):
            qr.apply(reg, op)
        start = time.perf_counter()
        for _ in range(n_gates):
            qr.apply(reg, op)
        timings[f"{name}_time_per_gate_sec"] = (time.perf_counter() - start) / n_gates

    return {
        "n_qubits": n_qubits,
        "batch_size": batch_size,
        "n_gates": n_gates,
        **timings,
    }


if __name__ == "__main__":
    print("Benchmarking gate application...")

    results = benchmark_gate_application(n_qubits=5, n_gates=1000)
    print("Single register (5 qubits, 1000 gates):")
    print(f"  Time per gate: {results['time_per_gate_sec']*1e6:.2f} μs")
    print(f"  Gates per second: {results['gates_per_sec']:.0f}")

    results_cmp = benchmark_structured_vs_dense(n_qubits=10, batch_size=100, n_gates=100)
    print("\nCNOT, 10 qubits, batch_size=100:")
    print(f"  Permutation: {results_cmp['structured_time_per_gate_sec']*1e3:.3f} ms")
    print(f"  Dense:       {results_cmp['dense_time_per_gate_sec']*1e3:.3f} ms")
