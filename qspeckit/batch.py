# BSD 3-Clause License

# Copyright (c) 2025, Miguel Dovale

# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:

# 1. Redistributions of source code must retain the above copyright notice, this
#    list of conditions and the following disclaimer.

# 2. Redistributions in binary form must reproduce the above copyright notice,
#    this list of conditions and the following disclaimer in the documentation
#    and/or other materials provided with the distribution.

# 3. Neither the name of the copyright holder nor the names of its
#    contributors may be used to endorse or promote products derived from
#    this software without specific prior written permission.

# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE
# DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE
# FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL
# DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR
# SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY,
# OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE
# OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.

# This software may be subject to U.S. export control laws. By accepting this
# software, the user agrees to comply with all applicable U.S. export laws and
# regulations. User has the responsibility to obtain export licenses, or other
# export authority as may be required before exporting such information to
# foreign countries or providing access to foreign persons.
#
"""
batch.py — quantile spectra of many series
-----------------------------------------------------------------------------
One series is one task. Options are validated once in the parent process,
then every series is fitted independently (in worker processes when more
than one is requested) and results are returned in input order.
-----------------------------------------------------------------------------
"""
__all__ = [
    "WorkerPool",
    "batch_qspec",
    "batch_features",
]

import time
import logging
import multiprocessing
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd
from tqdm import tqdm

from .analysis import QuantileSpectrumAnalyzer, QuantileSpectrumResult, fit_qspec
from .errors import ConfigurationError, ResourceExhaustionError
from .periodogram import qper
from .utils import as_series

logger = logging.getLogger(__name__)


class WorkerPool:
    """
    Process pool with a bounded lifetime.

    Workers are started with the "spawn" method, so the pool behaves the same
    on every platform and never inherits numba or BLAS thread state. Use it as
    a context manager; it can be passed as `pool` to `qper`,
    `QuantileSpectrumAnalyzer.compute` and friends.

    Parameters
    ----------
    processes : int
        Number of worker processes (>= 1).
    """

    def __init__(self, processes: int = 1):
        processes = int(processes)
        if processes < 1:
            raise ConfigurationError(f"Number of workers must be at least 1, got {processes}.")
        self.processes = processes
        self._pool = None

    def open(self) -> "WorkerPool":
        if self._pool is None:
            try:
                self._pool = multiprocessing.get_context("spawn").Pool(processes=self.processes)
            except OSError as exc:
                raise ResourceExhaustionError(
                    f"Could not start {self.processes} worker processes: {exc}"
                ) from exc
        return self

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool.join()
            self._pool = None

    def terminate(self) -> None:
        if self._pool is not None:
            self._pool.terminate()
            self._pool.join()
            self._pool = None

    def __enter__(self) -> "WorkerPool":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.close()
        else:
            self.terminate()
        return False

    def _running(self):
        if self._pool is None:
            raise RuntimeError("WorkerPool is not running; use it as a context manager.")
        return self._pool

    def starmap(self, func: Callable, tasks: Iterable[Tuple]) -> List[Any]:
        return self._running().starmap(func, tasks)

    def imap(self, func: Callable, tasks: Iterable[Any]) -> Iterator[Any]:
        return self._running().imap(func, tasks)


def _fit_series(y: np.ndarray, taus: np.ndarray, freqs: np.ndarray, config: Dict[str, Any]) -> QuantileSpectrumResult:
    x = as_series(y)
    periodogram = qper(
        x,
        freqs,
        taus,
        kind=config["kind"],
        intercept=config["intercept"],
        weights=config["weights"],
        max_iter=config["max_iter"],
    )
    fit = fit_qspec(x, periodogram.P, freqs, taus, config)
    return QuantileSpectrumResult(fit, periodogram)


def _fit_task(task: Tuple) -> QuantileSpectrumResult:
    return _fit_series(*task)


def batch_qspec(
    Y: np.ndarray,
    taus: Optional[np.ndarray] = None,
    *,
    n_workers: int = 1,
    freqs: Optional[np.ndarray] = None,
    pool: Optional[WorkerPool] = None,
    verbose: bool = False,
    **kwargs,
) -> List[QuantileSpectrumResult]:
    """
    Quantile spectra of every column of a (time x series) matrix.

    Parameters
    ----------
    Y : (n,) or (n, R) ndarray
        Series in columns, all of the same length.
    taus : ndarray, optional
        Quantile levels shared by all series. Defaults to 0.1, ..., 0.9.
    n_workers : int, optional
        Worker processes. 1 runs in the calling process. Defaults to 1.
    freqs : ndarray, optional
        Output frequencies shared by all series. Defaults to the Fourier grid.
    pool : WorkerPool, optional
        Running pool to dispatch to instead of starting one; `n_workers` is
        then ignored.
    verbose : bool, optional
        Log progress and show a progress bar. Defaults to False.
    **kwargs
        Estimation options, see `analysis.resolve_config`.

    Returns
    -------
    list of QuantileSpectrumResult
        One result per column, in column order.
    """
    Y = np.asarray(Y, dtype=np.float64)
    if Y.ndim == 1:
        Y = Y[:, None]
    if Y.ndim != 2 or Y.shape[1] == 0:
        raise ConfigurationError(f"Input must be a (time x series) matrix, got shape {Y.shape}.")
    n_workers = int(n_workers)
    if n_workers < 1:
        raise ConfigurationError(f"`n_workers` must be at least 1, got {n_workers}.")

    # Validates every option against the common length before any dispatch.
    template = QuantileSpectrumAnalyzer(Y[:, 0], taus, freqs=freqs, **kwargs)
    n_series = Y.shape[1]
    tasks = [
        (np.ascontiguousarray(Y[:, i]), template.taus, template.freqs, template.config)
        for i in range(n_series)
    ]

    t0 = time.perf_counter()
    if pool is not None:
        n_workers = pool.processes
        results = list(
            tqdm(pool.imap(_fit_task, tasks), total=n_series, disable=not verbose, desc="qspec")
        )
    elif min(n_workers, n_series) >= 2:
        n_workers = min(n_workers, n_series)
        with WorkerPool(n_workers) as own_pool:
            results = list(
                tqdm(own_pool.imap(_fit_task, tasks), total=n_series, disable=not verbose, desc="qspec")
            )
    else:
        n_workers = 1
        results = [_fit_task(task) for task in tqdm(tasks, disable=not verbose, desc="qspec")]

    if verbose:
        orders = np.array([r.order for r in results])
        logger.info(
            f"{n_series} series on {n_workers} worker(s) in {time.perf_counter() - t0:.2f} s; "
            f"orders {orders.min()}..{orders.max()}"
        )
    n_failed = sum(r.solver_failures for r in results)
    if n_failed:
        logger.warning(f"Regression solver failed in {n_failed} periodogram cells across the batch.")
    return results


def batch_features(
    data: Mapping[Any, np.ndarray],
    taus: Optional[np.ndarray] = None,
    *,
    which: str = "spec",
    n_workers: int = 1,
    freqs: Optional[np.ndarray] = None,
    verbose: bool = False,
    **kwargs,
) -> pd.DataFrame:
    """
    Feature table of labeled series: one row per case.

    Parameters
    ----------
    data : mapping
        {label: (time x case) ndarray}. Lengths may differ between labels,
        in which case a common `freqs` grid is required so that every row
        has the same features.
    taus, freqs, n_workers, verbose, **kwargs
        As in `batch_qspec`. One pool serves every label.
    which : str, optional
        'spec' or 'qper'. Defaults to 'spec'.

    Returns
    -------
    pandas.DataFrame
        The flattened estimate of every case (level by level, see
        `QuantileSpectrumResult.to_features`) followed by a `label` column.
    """
    labels = list(data.keys())
    if not labels:
        raise ConfigurationError("No series given.")
    if int(n_workers) < 1:
        raise ConfigurationError(f"`n_workers` must be at least 1, got {n_workers}.")
    matrices = []
    for label in labels:
        Y = np.asarray(data[label], dtype=np.float64)
        matrices.append(Y[:, None] if Y.ndim == 1 else Y)
    lengths = {Y.shape[0] for Y in matrices}
    if len(lengths) > 1 and freqs is None:
        raise ConfigurationError(
            f"Series lengths differ across labels ({sorted(lengths)}); pass a common `freqs` grid."
        )

    def run(pool):
        return [
            batch_qspec(Y, taus, freqs=freqs, pool=pool, verbose=verbose, **kwargs)
            for Y in matrices
        ]

    if int(n_workers) >= 2:
        with WorkerPool(n_workers) as pool:
            per_label = run(pool)
    else:
        per_label = run(None)

    rows, row_labels = [], []
    for label, results in zip(labels, per_label):
        for res in results:
            rows.append(res.to_features(which))
            row_labels.append(label)
    names = per_label[0][0].feature_names(which)
    df = pd.DataFrame(np.vstack(rows), columns=names)
    df["label"] = row_labels
    return df
