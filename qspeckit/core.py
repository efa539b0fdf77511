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
core.py — single-frequency harmonic regression kernels
-----------------------------------------------------------------------------
Design notes
- Model: y_t ~ [1] + cos(2 pi f t) + sin(2 pi f t), t = 1..n, frequency f in
  cycles per sample.
- tau=None fits by weighted least squares (Gaussian variant, reproduces the
  classical periodogram); a level tau in (0, 1) fits by quantile regression
  (check loss) through statsmodels' QuantReg.
- Observation weights enter as row scaling: sqrt(w) for least squares and w
  for the check loss, which is positively homogeneous.
- f = 0 only identifies the constant term. f = 0.5 fits the cosine column
  alone; the sine coefficient is 0.
- A solver failure (exception, non-finite coefficients) never propagates. The
  harmonic coefficients and the cost are zero and the fit is flagged with
  converged=False. An estimate at the iteration limit is kept when its loss
  does not exceed the null model's; otherwise the null model is returned.
-----------------------------------------------------------------------------
"""
__all__ = [
    "PeriodogramType",
    "HarmonicFit",
    "fit_harmonic",
    "fit_harmonic_taus",
    "harmonic_score",
]

import enum
import warnings
from typing import NamedTuple, Optional, Tuple

import numpy as np
from numba import njit as _njit
from statsmodels.regression.quantile_regression import QuantReg
from statsmodels.tools.sm_exceptions import IterationLimitWarning


class PeriodogramType(enum.IntEnum):
    """Scoring of a harmonic fit: coefficient energy (1) or loss reduction (2)."""
    COEF = 1
    COST = 2


class HarmonicFit(NamedTuple):
    """
    Result of one harmonic regression.

    coef : (2,) ndarray
        Cosine and sine coefficients.
    intercept : float
        Fitted constant (0.0 without intercept).
    cost : float
        Null-model loss minus harmonic-model loss.
    converged : bool
        False when the solver failed and the zero-effect fit was substituted.
    """
    coef: np.ndarray
    intercept: float
    cost: float
    converged: bool


# Check loss -------------------------------------------------------------------

@_njit(cache=True, fastmath=True)
def _check_loss(u: np.ndarray, tau: float, w: np.ndarray) -> float:
    """
    Weighted check loss sum_t w_t * rho_tau(u_t), rho_tau(u) = u (tau - 1{u<0}).
    """
    acc = 0.0
    for i in range(u.shape[0]):
        r = u[i]
        if r < 0.0:
            acc += w[i] * r * (tau - 1.0)
        else:
            acc += w[i] * r * tau
    return acc


def _check_loss_np(u: np.ndarray, tau: float, w: np.ndarray) -> float:
    """NumPy reference of _check_loss."""
    return float(np.sum(w * u * (tau - (u < 0.0))))


def _weighted_quantile(y: np.ndarray, tau: float, w: np.ndarray) -> float:
    """
    Exact minimizer of sum_t w_t * rho_tau(y_t - c) over the constant c.
    """
    order = np.argsort(y, kind="mergesort")
    cw = np.cumsum(w[order])
    idx = int(np.searchsorted(cw, tau * cw[-1], side="left"))
    idx = min(max(idx, 0), y.shape[0] - 1)
    return float(y[order][idx])


def _harmonic_design(n: int, f: float, intercept: bool) -> np.ndarray:
    """
    Design matrix [1, cos, sin] (columns dropped as required by f and intercept).
    """
    t = np.arange(1, n + 1, dtype=np.float64)
    cols = []
    if intercept:
        cols.append(np.ones(n, dtype=np.float64))
    cols.append(np.cos(2.0 * np.pi * f * t))
    if f != 0.5:
        cols.append(np.sin(2.0 * np.pi * f * t))
    return np.ascontiguousarray(np.stack(cols, axis=1))


def _null_fit(y: np.ndarray, tau: Optional[float], w: np.ndarray, intercept: bool) -> Tuple[float, float]:
    """Constant of the null model and its loss."""
    if not intercept:
        c = 0.0
    elif tau is None:
        c = float(np.sum(w * y) / np.sum(w))
    else:
        c = _weighted_quantile(y, tau, w)
    u = np.ascontiguousarray(y - c)
    if tau is None:
        return c, float(np.sum(w * u * u))
    return c, float(_check_loss(u, float(tau), w))


def _solve(
    y: np.ndarray, X: np.ndarray, tau: Optional[float], w: np.ndarray, max_iter: int
) -> Tuple[Optional[np.ndarray], bool]:
    """
    Run the regression solver.

    Returns the coefficients (None on failure) and whether the iteration
    limit was reached. An estimate at the limit is still returned when finite.
    """
    reached_limit = False
    try:
        if tau is None:
            sw = np.sqrt(w)
            beta = np.linalg.lstsq(X * sw[:, None], y * sw, rcond=None)[0]
        else:
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always", IterationLimitWarning)
                warnings.simplefilter("ignore", RuntimeWarning)
                res = QuantReg(y * w, X * w[:, None]).fit(q=float(tau), max_iter=int(max_iter))
            reached_limit = any(issubclass(item.category, IterationLimitWarning) for item in caught)
            beta = np.asarray(res.params, dtype=np.float64)
    except (np.linalg.LinAlgError, ValueError, ZeroDivisionError):
        return None, reached_limit
    if not np.all(np.isfinite(beta)):
        return None, reached_limit
    return beta, reached_limit


def fit_harmonic(
    y: np.ndarray,
    f: float,
    tau: Optional[float] = None,
    *,
    intercept: bool = True,
    weights: Optional[np.ndarray] = None,
    max_iter: int = 5000,
) -> HarmonicFit:
    """
    Fits the two-harmonic regression at a single frequency.

    Parameters
    ----------
    y : (n,) ndarray
        Time series.
    f : float
        Frequency in cycles per sample, in [0, 0.5].
    tau : float, optional
        Quantile level. None selects least squares. Defaults to None.
    intercept : bool, optional
        Include the constant column. Defaults to True.
    weights : (n,) ndarray, optional
        Non-negative observation weights. Defaults to uniform.
    max_iter : int, optional
        Iteration limit of the quantile-regression solver. An estimate at the
        limit is kept unless its loss exceeds the null model's, in which case
        the null model is the solution. Defaults to 5000.

    Returns
    -------
    HarmonicFit
    """
    y = np.ascontiguousarray(y, dtype=np.float64)
    n = y.shape[0]
    w = np.ones(n, dtype=np.float64) if weights is None else np.ascontiguousarray(weights, dtype=np.float64)
    f = float(f)

    c0, null_loss = _null_fit(y, tau, w, intercept)
    if f == 0.0:
        return HarmonicFit(np.zeros(2), c0, 0.0, True)

    X = _harmonic_design(n, f, intercept)
    beta, reached_limit = _solve(y, X, tau, w, max_iter)
    if beta is None:
        return HarmonicFit(np.zeros(2), c0, 0.0, False)

    u = np.ascontiguousarray(y - X @ beta)
    if tau is None:
        loss = float(np.sum(w * u * u))
    else:
        loss = float(_check_loss(u, float(tau), w))
    if reached_limit and loss > null_loss:
        # the nested null model is the better of the two solutions
        return HarmonicFit(np.zeros(2), c0, 0.0, True)

    k = 1 if intercept else 0
    coef = np.zeros(2)
    coef[0] = beta[k]
    if f != 0.5:
        coef[1] = beta[k + 1]
    return HarmonicFit(coef, float(beta[0]) if intercept else 0.0, null_loss - loss, True)


def fit_harmonic_taus(
    y: np.ndarray,
    f: float,
    taus: Optional[np.ndarray],
    *,
    intercept: bool = True,
    weights: Optional[np.ndarray] = None,
    max_iter: int = 5000,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Fits every quantile level at one frequency.

    Returns
    -------
    coef : (L, 2) ndarray
    cost : (L,) ndarray
    converged : (L,) bool ndarray
        L = len(taus), or 1 for the least-squares variant (taus=None).
    """
    levels = [None] if taus is None else [float(t) for t in taus]
    L = len(levels)
    coef = np.zeros((L, 2), dtype=np.float64)
    cost = np.zeros(L, dtype=np.float64)
    converged = np.ones(L, dtype=bool)
    for j, tau in enumerate(levels):
        fit = fit_harmonic(y, f, tau, intercept=intercept, weights=weights, max_iter=max_iter)
        coef[j] = fit.coef
        cost[j] = fit.cost
        converged[j] = fit.converged
    return coef, cost, converged


def harmonic_score(coef: np.ndarray, cost: np.ndarray, f: float, n: int, kind: PeriodogramType) -> np.ndarray:
    """
    Periodogram ordinate(s) from harmonic fits, clipped at zero.

    Type 1 is n/4 * (a^2 + b^2), and n * a^2 at the Nyquist frequency, so the
    least-squares variant equals |sum_t y_t exp(-i 2 pi f t)|^2 / n on the
    Fourier grid. Type 2 is the loss reduction.
    """
    if kind is PeriodogramType.COEF:
        energy = coef[..., 0] ** 2 + coef[..., 1] ** 2
        val = n * energy if float(f) == 0.5 else 0.25 * n * energy
    else:
        val = np.asarray(cost, dtype=np.float64)
    return np.maximum(val, 0.0)
