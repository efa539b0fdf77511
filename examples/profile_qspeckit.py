# profile_qspeckit.py

import numpy as np
import cProfile
import pstats

from qspeckit.analysis import compute_qspec


def main():
    """Sets up and runs the profiling task."""
    print("Setting up profiling workload...")

    # --- 1. A single series, serial periodogram ---
    # The harmonic quantile regressions dominate; everything after the
    # periodogram is linear algebra on (order x levels) arrays.
    N = 1024
    rng = np.random.default_rng(0)
    e = rng.standard_t(3, N + 200)
    data = np.empty_like(e)
    data[0] = e[0]
    for t in range(1, e.size):
        data[t] = 0.7 * data[t - 1] + e[t]
    data = data[200:]
    data = (data - data.mean()) / data.std()
    taus = np.linspace(0.1, 0.9, 9)

    print(f"Profiling compute_qspec on a time series of length {N}...")

    # --- 2. Run the function under cProfile ---
    command = "compute_qspec(data, taus, kind=2, smooth_pacf=True, smooth_scale=True)"
    profiler_context = {"compute_qspec": compute_qspec, "data": data, "taus": taus}

    cProfile.runctx(
        command, globals=profiler_context, locals={}, filename="qspeckit_profile.prof"
    )

    print("Profiling complete. Stats saved to 'qspeckit_profile.prof'")

    # --- 3. (Optional) Print a simple summary to the console ---
    print("\n--- Top 10 Functions by Cumulative Time ---")
    stats = pstats.Stats("qspeckit_profile.prof")
    stats.sort_stats("cumulative").print_stats(10)


if __name__ == "__main__":
    main()
