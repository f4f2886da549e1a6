"""Benchmark measurement sampling and collapse."""

import time
from typing import Dict

import torch

import qregister as qr


def benchmark_sampling(
    n_qubits: int,
    n_shots: int = 10000,
    batch_size: int = 1,
    dtype: torch.dtype = torch.complex64,
) -> Dict[str, float]:
    """Benchmark ``measure`` without collapse.

    Args:
        n_qubits: Number of qubits.
        n_shots: Number of shots per batch element.
        batch_size: Batch size.
        dtype: Data type.

    Returns:
        Dictionary with timing results.
    """
    generator = torch.Generator().manual_seed(0)
    reg = qr.rand_state(n_qubits, nbatch=batch_size, dtype=dtype, generator=generator)

    # Warmup
    for _ in range(3):
        qr.measure(reg, nshots=100, generator=generator)

    start = time.perf_counter()
    qr.measure(reg, nshots=n_shots, generator=generator)
    total_time = time.perf_counter() - start

    return {
        "n_qubits": n_qubits,
        "n_shots": n_shots,
        "batch_size": batch_size,
        "total_time_sec": total_time,
        "shots_per_sec": n_shots * batch_size / total_time,
    }


def benchmark_measure_remove(
    n_qubits: int,
    batch_size: int = 100,
    repeats: int = 50,
    dtype: torch.dtype = torch.complex64,
) -> Dict[str, float]:
    """Benchmark collapsing and discarding half of the qubits.

    Returns:
        Dictionary with the mean time of one ``measure_remove`` call.
    """
    generator = torch.Generator().manual_seed(0)
    locs = list(range(0, n_qubits, 2))
    total_time = 0.0
    for _ in range(repeats):
        reg = qr.rand_state(n_qubits, nbatch=batch_size, dtype=dtype, generator=generator)
        start = time.perf_counter()
        qr.measure_remove(reg, locs=locs, generator=generator)
        total_time += time.perf_counter() - start

    return {
        "n_qubits": n_qubits,
        "batch_size": batch_size,
        "time_per_call_sec": total_time / repeats,
    }


if __name__ == "__main__":
    print("Benchmarking measurement...")

    results = benchmark_sampling(n_qubits=10, n_shots=10000)
    print("Sampling (10 qubits, 10000 shots):")
    print(f"  Total time: {results['total_time_sec']*1e3:.2f} ms")
    print(f"  Shots per second: {results['shots_per_sec']:.0f}")

    results_remove = benchmark_measure_remove(n_qubits=10, batch_size=100)
    print("\nmeasure_remove on 5 of 10 qubits, batch_size=100:")
    print(f"  Time per call: {results_remove['time_per_call_sec']*1e3:.3f} ms")
