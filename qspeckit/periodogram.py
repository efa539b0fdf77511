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
periodogram.py — quantile periodogram and pseudo-autocovariance
-----------------------------------------------------------------------------
The periodogram is built one frequency at a time: every task fits all
quantile levels at its frequency, so the frequency axis is the unit of
parallel dispatch. Blocks returned by a pool are merged back by frequency
index, never by completion order.
-----------------------------------------------------------------------------
"""
__all__ = [
    "QPer",
    "qper",
    "qacf",
    "qacf_from_qper",
    "check_weights",
]

import time
import logging
from typing import Any, List, NamedTuple, Optional, Union

import numpy as np

from .core import PeriodogramType, fit_harmonic_taus, harmonic_score
from .errors import ConfigurationError
from .schedulers import check_frequencies, check_quantiles, fourier_grid
from .utils import as_series, chunker

logger = logging.getLogger(__name__)


class QPer(NamedTuple):
    """
    Quantile periodogram.

    P : (nf, L) ndarray
        Non-negative ordinates, frequency by quantile level.
    failed : (nf, L) bool ndarray
        Cells where the regression solver failed and a zero was substituted.
    """
    P: np.ndarray
    failed: np.ndarray


def check_weights(weights, n: int) -> Optional[np.ndarray]:
    if weights is None:
        return None
    w = np.ascontiguousarray(weights, dtype=np.float64)
    if w.shape != (n,):
        raise ConfigurationError(f"`weights` must have shape ({n},), got {w.shape}.")
    if not np.all(np.isfinite(w)) or np.any(w < 0) or not np.any(w > 0):
        raise ConfigurationError("`weights` must be finite, non-negative and not all zero.")
    return w


def _pool_size(pool: Any) -> int:
    size = getattr(pool, "processes", None)
    if size is None:
        size = getattr(pool, "_processes", 1)
    return int(size or 1)


def _qper_block(y, freqs, f_indices, taus, kind, intercept, weights, max_iter) -> List[Any]:
    """
    Core loop for a block of frequency indices.

    Returns a list of (index, ordinates, failed) triples.
    """
    n = y.shape[0]
    results_block = []
    for i in f_indices:
        i = int(i)
        f = float(freqs[i])
        coef, cost, converged = fit_harmonic_taus(
            y, f, taus, intercept=intercept, weights=weights, max_iter=max_iter
        )
        results_block.append((i, harmonic_score(coef, cost, f, n, kind), ~converged))
    return results_block


def qper(
    y: np.ndarray,
    freqs: np.ndarray,
    taus: Optional[np.ndarray] = None,
    *,
    kind: Union[int, PeriodogramType] = PeriodogramType.COEF,
    intercept: bool = True,
    weights: Optional[np.ndarray] = None,
    max_iter: int = 5000,
    pool: Any = None,
    verbose: bool = False,
) -> QPer:
    """
    Computes the quantile periodogram of a series.

    Parameters
    ----------
    y : (n,) ndarray
        Time series.
    freqs : (nf,) ndarray
        Frequencies in cycles per sample, in [0, 0.5].
    taus : (L,) ndarray, optional
        Quantile levels in (0, 1). None computes the least-squares
        (classical) periodogram with a single column. Defaults to None.
    kind : int or PeriodogramType, optional
        1 for coefficient energy, 2 for loss reduction. Defaults to 1.
    intercept : bool, optional
        Include a constant in the harmonic regression. Defaults to True.
    weights : (n,) ndarray, optional
        Observation weights. Defaults to uniform.
    max_iter : int, optional
        Iteration limit of the quantile-regression solver. Defaults to 5000.
    pool : object, optional
        Anything with a `starmap` method (multiprocessing.Pool,
        qspeckit.batch.WorkerPool). Frequencies are split in equal blocks,
        one per process. Defaults to None (serial).
    verbose : bool, optional
        Log progress information. Defaults to False.

    Returns
    -------
    QPer
    """
    x = as_series(y)
    freqs = check_frequencies(freqs)
    if taus is not None:
        taus = check_quantiles(taus)
    try:
        kind = PeriodogramType(int(kind))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Periodogram type must be 1 or 2, got {kind!r}.") from exc
    w = check_weights(weights, x.shape[0])

    if not np.all(np.isfinite(x)):
        logger.warning("Input series contains NaN/Inf; results may be undefined.")

    nf = freqs.shape[0]
    L = 1 if taus is None else taus.shape[0]
    common = (taus, kind, bool(intercept), w, int(max_iter))

    t0 = time.perf_counter()
    if pool is not None and _pool_size(pool) >= 2:
        chunk_size = int(np.ceil(nf / _pool_size(pool)))
        f_blocks = chunker(np.arange(nf), chunk_size)
        if verbose:
            logger.info(f"{len(f_blocks)} frequency blocks to process")
        tasks = [(x, freqs, block) + common for block in f_blocks]
        results_list = pool.starmap(_qper_block, tasks)
    else:
        results_list = [_qper_block(x, freqs, np.arange(nf), *common)]

    P = np.zeros((nf, L), dtype=np.float64)
    failed = np.zeros((nf, L), dtype=bool)
    for chunk in results_list:
        for (i, row, bad) in chunk:
            P[i] = row
            failed[i] = bad

    n_failed = int(failed.sum())
    if n_failed:
        logger.warning(f"Regression solver failed in {n_failed} of {failed.size} cells; zeros substituted.")
    if verbose:
        logger.info(f"Periodogram of {nf} frequencies x {L} levels in {time.perf_counter() - t0:.2f} s")
    return QPer(P, failed)


def qacf_from_qper(
    P: np.ndarray,
    n: int,
    nyquist: Optional[np.ndarray] = None,
    pad: float = 0.0,
) -> np.ndarray:
    """
    Pseudo-autocovariance from a periodogram on the Fourier grid.

    The ordinates are mirrored to the full frequency circle with a zero DC
    term, plus the Nyquist ordinates when n is even. Every entry is padded by
    `pad * mean(column)`, then the sequence is inverse transformed; the real
    part, divided by n, is returned.

    Parameters
    ----------
    P : (m,) or (m, L) ndarray
        Periodogram on fourier_grid(n), m = floor((n-1)/2).
    n : int
        Series length.
    nyquist : (L,) ndarray, optional
        Ordinates at frequency 0.5. Required when n is even.
    pad : float, optional
        Non-negative padding fraction. Defaults to 0.

    Returns
    -------
    acf : (n, L) ndarray
        Lags 0..n-1 by quantile level. Row 0 holds the scale.
    """
    P = np.asarray(P, dtype=np.float64)
    if P.ndim == 1:
        P = P[:, None]
    n = int(n)
    m = (n - 1) // 2
    if P.ndim != 2 or P.shape[0] != m:
        raise ConfigurationError(f"Periodogram must have {m} rows for n={n}, got shape {P.shape}.")
    if not np.isfinite(pad) or pad < 0:
        raise ConfigurationError(f"`pad` must be a non-negative float, got {pad!r}.")
    L = P.shape[1]
    dc = np.zeros((1, L), dtype=np.float64)

    if n % 2 == 0:
        if nyquist is None:
            raise ConfigurationError("Even series length requires the Nyquist ordinates.")
        nyq = np.asarray(nyquist, dtype=np.float64).reshape(1, L)
        full = np.vstack([dc, P, nyq, P[::-1]])
    else:
        full = np.vstack([dc, P, P[::-1]])

    if pad > 0:
        full = full + pad * P.mean(axis=0)[None, :]

    # numpy's ifft already carries the 1/n factor
    return np.fft.ifft(full, axis=0).real


def qacf(
    y: np.ndarray,
    taus: Optional[np.ndarray] = None,
    *,
    kind: Union[int, PeriodogramType] = PeriodogramType.COEF,
    intercept: bool = True,
    weights: Optional[np.ndarray] = None,
    pad: float = 0.0,
    max_iter: int = 5000,
    pool: Any = None,
) -> np.ndarray:
    """
    Pseudo-autocovariance of a series, periodogram included.

    Returns
    -------
    acf : (n, L) ndarray
    """
    x = as_series(y)
    n = x.shape[0]
    opts = dict(kind=kind, intercept=intercept, weights=weights, max_iter=max_iter)
    P = qper(x, fourier_grid(n), taus, pool=pool, **opts).P
    nyq = qper(x, [0.5], taus, **opts).P[0] if n % 2 == 0 else None
    return qacf_from_qper(P, n, nyquist=nyq, pad=pad)
