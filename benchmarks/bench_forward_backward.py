"""Benchmark forward-backward passes and full Baum-Welch fits."""

import sys
import time
from typing import Dict

import numpy as np

import regimehmm as rh
from regimehmm import ParameterSet


def _params(n_states: int) -> ParameterSet:
    trans = np.full((n_states, n_states), 0.05 / (n_states - 1))
    np.fill_diagonal(trans, 0.95)
    return ParameterSet.from_arrays(
        start_prob=np.full(n_states, 1.0 / n_states),
        trans_mat=trans,
        means=np.linspace(-0.01, 0.01, n_states),
        variances=np.full(n_states, 1e-4),
    )


def benchmark_forward_backward(length: int, n_states: int = 2, repeats: int = 5) -> Dict[str, float]:
    """Time one forward-backward pass.

    Args:
        length: Sequence length T.
        n_states: Number of hidden states K.
        repeats: Number of timed passes.

    Returns:
        Dictionary with timing results.
    """
    params = _params(n_states)
    _, obs = rh.sample(params, length, np.random.default_rng(0))

    # Warmup
    rh.forward_backward(obs, params)

    start = time.perf_counter()
    for _ in range(repeats):
        rh.forward_backward(obs, params)
    end = time.perf_counter()

    per_pass = (end - start) / repeats
    return {
        "length": length,
        "n_states": n_states,
        "time_per_pass_sec": per_pass,
        "steps_per_sec": length / per_pass,
    }


def benchmark_fit(length: int, n_states: int = 2, max_iterations: int = 50) -> Dict[str, float]:
    """Time a full fit with a fixed iteration cap."""
    params = _params(n_states)
    _, obs = rh.sample(params, length, np.random.default_rng(1))

    start = time.perf_counter()
    result = rh.fit(obs, n_states, tolerance=1e-8, max_iterations=max_iterations, viterbi_path=False)
    end = time.perf_counter()

    return {
        "length": length,
        "n_states": n_states,
        "n_iter": result.n_iter,
        "total_time_sec": end - start,
        "time_per_iter_sec": (end - start) / max(result.n_iter, 1),
    }


if __name__ == "__main__":
    quick = "--quick" in sys.argv[1:]
    lengths = [250, 1000] if quick else [250, 1000, 5000, 20000]

    print("Benchmarking forward-backward...")
    for length in lengths:
        results = benchmark_forward_backward(length, repeats=1 if quick else 5)
        print(f"forward-backward (T={length}, K=2):")
        print(f"  Time per pass: {results['time_per_pass_sec']*1e3:.2f} ms")
        print(f"  Steps per second: {results['steps_per_sec']:.0f}")

    print("\nBenchmarking fit...")
    for length in lengths:
        results = benchmark_fit(length, max_iterations=5 if quick else 50)
        print(f"fit (T={length}, K=2, {results['n_iter']} iterations):")
        print(f"  Time per iteration: {results['time_per_iter_sec']*1e3:.2f} ms")
