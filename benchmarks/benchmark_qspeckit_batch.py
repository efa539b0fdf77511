#!/usr/bin/env python3
"""
benchmark_qspeckit_batch

Benchmarks batch quantile spectra of a panel of AR(1) series against the
number of worker processes.

Parameters:
    n       = 512 samples per series
    R       = 32 series
    taus    = 0.1, 0.2, ..., 0.9
    kind    = 2 (loss reduction)

Output:
    - Prints timing statistics per worker count and the speedup over the
      serial run.

Notes:
    - The first parallel run pays the numba cache load in every worker; it
      is excluded from the statistics.
"""

import os
import time

import numpy as np
from qspeckit import batch_qspec


def report_stats(name, t):
    """Print timing statistics for a set of runs."""
    print(
        f"{name}: mean={np.mean(t):.3f}, median={np.median(t):.3f}, "
        f"std={np.std(t):.3f}, min={np.min(t):.3f}, max={np.max(t):.3f}"
    )


def make_panel(n, R, seed=0):
    rng = np.random.default_rng(seed)
    Y = np.empty((n, R))
    for r in range(R):
        e = rng.standard_normal(n + 100)
        x = np.empty_like(e)
        x[0] = e[0]
        for t in range(1, e.size):
            x[t] = 0.6 * x[t - 1] + e[t]
        x = x[100:]
        Y[:, r] = (x - x.mean()) / x.std()
    return Y


def bench_batch(Y, n_workers, n_runs):
    """
    Benchmark batch_qspec for a given worker count.

    Returns
    -------
    np.ndarray
        Array of timing results in seconds
    """
    taus = np.linspace(0.1, 0.9, 9)
    batch_qspec(Y, taus, kind=2, n_workers=n_workers)  # warm-up

    tvec = np.zeros(n_runs)
    print(f"Benchmark: n_workers={n_workers} (nRuns={n_runs})")
    for i in range(n_runs):
        t0 = time.perf_counter()
        batch_qspec(Y, taus, kind=2, n_workers=n_workers)
        tvec[i] = time.perf_counter() - t0
    return tvec


def main():
    Y = make_panel(512, 32)
    n_runs = 3
    counts = sorted({1, 2, 4, os.cpu_count() or 1})
    results = {}
    for n_workers in counts:
        results[n_workers] = bench_batch(Y, n_workers, n_runs)
        report_stats(f"n_workers={n_workers}", results[n_workers])

    base = np.median(results[1])
    for n_workers in counts[1:]:
        print(f"speedup x{base / np.median(results[n_workers]):.2f} with {n_workers} workers")


if __name__ == "__main__":
    main()
