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
analysis.py — single-series quantile spectral analysis
-----------------------------------------------------------------------------
Resolves options, turns a quantile periodogram into a smoothed AR spectral
estimate, and wraps the outcome in a result object with export and plotting
helpers.
-----------------------------------------------------------------------------
"""
__all__ = [
    "resolve_config",
    "order_ceiling",
    "ar_spectrum",
    "scale_gain",
    "rescale_spectrum",
    "QSpecFit",
    "fit_qspec",
    "QuantileSpectrumAnalyzer",
    "QuantileSpectrumResult",
    "compute_qspec",
    "compute_qper",
]

import time
import logging
from typing import Any, Dict, List, NamedTuple, Optional, Tuple, Union

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.axes import Axes

from . import smoothing
from .core import PeriodogramType
from .errors import ConfigurationError
from .levinson import RecursionState, acf2ar, pacf2ar
from .periodogram import QPer, check_weights, qacf_from_qper, qper
from .schedulers import (
    check_frequencies,
    check_quantiles,
    fourier_grid,
    is_fourier_grid,
    quantile_grid,
)
from .selection import Criterion, select_order
from .smoothing import Smoother
from .utils import as_series

logger = logging.getLogger(__name__)


# Configuration ----------------------------------------------------------------

def resolve_config(
    *,
    kind: Union[int, PeriodogramType] = PeriodogramType.COEF,
    intercept: bool = True,
    weights: Optional[np.ndarray] = None,
    criterion: Union[str, Criterion] = Criterion.AIC,
    order_max: Optional[int] = None,
    smooth_pacf: bool = False,
    pacf_method: Union[str, Smoother] = Smoother.SPLINE,
    pacf_spar: Optional[float] = None,
    smooth_scale: bool = False,
    scale_method: Union[str, Smoother] = Smoother.SPLINE,
    scale_spar: Optional[float] = None,
    pad: float = 1e-3,
    max_iter: int = 5000,
    oversample: int = 1,
) -> Dict[str, Any]:
    """
    Validates the estimation options and resolves method names once.

    The returned dict holds enum members and plain numbers only, so it can be
    shipped to worker processes as is.

    Parameters
    ----------
    kind : int or PeriodogramType, optional
        Periodogram scoring, 1 (coefficient energy) or 2 (loss reduction).
        Defaults to 1.
    intercept : bool, optional
        Include a constant in the harmonic regression. Defaults to True.
    weights : ndarray, optional
        Observation weights (length checked against the series later).
    criterion : str or Criterion, optional
        'aic', 'bic', 'aicc' or 'fixed'. Defaults to 'aic'.
    order_max : int, optional
        Order ceiling for criterion selection, or the order itself with
        'fixed'. Defaults to floor(nf/4), or floor(nf/2) with 'fixed'.
    smooth_pacf : bool, optional
        Smooth the PACF across quantile levels. Defaults to False.
    pacf_method, scale_method : str or Smoother, optional
        'lowess' or 'spline'. Default to 'spline'.
    pacf_spar, scale_spar : float, optional
        Lowess span or spline penalty; None selects the default span
        (lowess) or generalized cross-validation (spline).
    smooth_scale : bool, optional
        Smooth the lag-0 scale across quantile levels. Defaults to False.
    pad : float, optional
        Periodogram padding fraction. Defaults to 1e-3.
    max_iter : int, optional
        Quantile-regression iteration limit. Defaults to 5000.
    oversample : int, optional
        Density of the default output frequency grid. Defaults to 1.
    """
    try:
        kind = PeriodogramType(int(kind))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Periodogram type must be 1 or 2, got {kind!r}.") from exc

    criterion = Criterion.parse(criterion)
    if order_max is not None:
        order_max = int(order_max)
        if order_max < 1:
            raise ConfigurationError(f"`order_max` must be a positive integer, got {order_max}.")

    pacf_method = Smoother.parse(pacf_method)
    scale_method = Smoother.parse(scale_method)

    pad = float(pad)
    if not np.isfinite(pad) or pad < 0:
        raise ConfigurationError(f"`pad` must be a non-negative float, got {pad!r}.")
    if int(max_iter) < 1:
        raise ConfigurationError(f"`max_iter` must be positive, got {max_iter!r}.")
    if int(oversample) < 1:
        raise ConfigurationError(f"`oversample` must be a positive integer, got {oversample!r}.")

    return {
        "kind": kind,
        "intercept": bool(intercept),
        "weights": None if weights is None else np.asarray(weights, dtype=np.float64),
        "criterion": criterion,
        "order_max": order_max,
        "smooth_pacf": bool(smooth_pacf),
        "pacf_method": pacf_method,
        "pacf_spar": pacf_method.check_spar(pacf_spar),
        "smooth_scale": bool(smooth_scale),
        "scale_method": scale_method,
        "scale_spar": scale_method.check_spar(scale_spar),
        "pad": pad,
        "max_iter": int(max_iter),
        "oversample": int(oversample),
    }


def order_ceiling(config: Dict[str, Any], nf: int, n: int) -> int:
    """
    Order ceiling for a frequency grid of nf points and a series of length n.

    floor(nf/4) when the order is selected by a criterion, floor(nf/2) for a
    fixed order, and never above n-1, the last lag of the pseudo-autocovariance.
    """
    limit = nf // 2 if config["criterion"] is Criterion.FIXED else nf // 4
    limit = min(limit, int(n) - 1)
    order_max = limit if config["order_max"] is None else int(config["order_max"])
    if order_max < 1:
        raise ConfigurationError(
            f"Order ceiling must be positive; {nf} frequencies and {n} samples allow at most {limit}."
        )
    if order_max > limit:
        raise ConfigurationError(
            f"`order_max`={order_max} exceeds {limit} for {nf} frequencies and {n} samples."
        )
    return order_max


# AR spectrum ------------------------------------------------------------------

def ar_spectrum(ar: np.ndarray, var: float, freqs: np.ndarray) -> np.ndarray:
    """
    AR spectral density var / |1 + sum_k ar_k exp(-i 2 pi f k)|^2.

    Parameters
    ----------
    ar : (p,) ndarray
        AR coefficients.
    var : float
        Innovation variance.
    freqs : (nf,) ndarray
        Frequencies in cycles per sample.
    """
    ar = np.asarray(ar).ravel()
    freqs = np.asarray(freqs, dtype=np.float64).ravel()
    if ar.size == 0:
        return np.full(freqs.shape, float(var))
    k = np.arange(1, ar.size + 1, dtype=np.float64)
    A = 1.0 + np.exp(-2j * np.pi * np.outer(freqs, k)) @ ar
    return float(var) / np.abs(A) ** 2


def scale_gain(raw_scale: np.ndarray, smoothed_scale: np.ndarray) -> np.ndarray:
    """smoothed / raw per level; 1 where the raw scale is 0."""
    raw_scale = np.asarray(raw_scale, dtype=np.float64)
    return np.divide(
        smoothed_scale,
        raw_scale,
        out=np.ones_like(raw_scale),
        where=raw_scale > 0,
    )


def rescale_spectrum(spec: np.ndarray, raw_scale: np.ndarray, smoothed_scale: np.ndarray) -> np.ndarray:
    return spec * scale_gain(raw_scale, smoothed_scale)[None, :]


# Single-series fit --------------------------------------------------------------

class QSpecFit(NamedTuple):
    """
    Outcome of one series fit. Arrays are (frequency, level) or (lag, level).

    spec : (nf, L) ndarray
        Final spectral estimate.
    freqs, taus : ndarray
        Frequency and quantile grids.
    n : int
        Series length.
    order : int
        AR order, shared by all levels.
    criterion : (order_max+1,) ndarray
        Criterion averaged across levels (empty for a fixed order).
    ignored_rate : float
        Fraction of non-finite criterion values skipped in the average.
    ar : (p, L) ndarray
        AR coefficients used for the spectrum.
    sigma2 : (L,) ndarray
        Innovation variances before rescaling.
    gain : (L,) ndarray
        Scale-smoothing factors applied to the spectrum (1 when disabled).
    pacf, pacf_smoothed : (p, L) ndarray
        PACF from the recursion and after smoothing.
    pacf_is_smoothed : bool
    scale, scale_smoothed : (L,) ndarray
        Lag-0 pseudo-autocovariance, raw and smoothed.
    scale_is_smoothed : bool
    effective_order : (L,) int ndarray
        Steps completed by the recursion before freezing.
    frozen : (L,) bool ndarray
    solver_failures : int
        Failed cells in periodograms computed during the fit.
    """
    spec: np.ndarray
    freqs: np.ndarray
    taus: np.ndarray
    n: int
    order: int
    criterion: np.ndarray
    ignored_rate: float
    ar: np.ndarray
    sigma2: np.ndarray
    gain: np.ndarray
    pacf: np.ndarray
    pacf_smoothed: np.ndarray
    pacf_is_smoothed: bool
    scale: np.ndarray
    scale_smoothed: np.ndarray
    scale_is_smoothed: bool
    effective_order: np.ndarray
    frozen: np.ndarray
    solver_failures: int


def fit_qspec(
    y: np.ndarray,
    P: Optional[np.ndarray],
    freqs: np.ndarray,
    taus: np.ndarray,
    config: Optional[Dict[str, Any]] = None,
) -> QSpecFit:
    """
    Smoothed AR estimate of the quantile spectrum of one series.

    Pure function of its arguments: pseudo-autocovariance, order selection
    (or fixed order), Levinson-Durbin, optional PACF smoothing, AR spectrum
    on `freqs`, optional scale smoothing.

    Parameters
    ----------
    y : (n,) ndarray
        Time series.
    P : (nf, L) ndarray or None
        Quantile periodogram on `freqs`. Reused when `freqs` is the Fourier
        grid of the series, recomputed on that grid otherwise.
    freqs : (nf,) ndarray
        Output frequency grid. Its length sets the order ceiling.
    taus : (L,) ndarray
        Quantile levels.
    config : dict, optional
        Output of resolve_config. Defaults to resolve_config().

    Returns
    -------
    QSpecFit
    """
    x = as_series(y)
    n = x.shape[0]
    taus = check_quantiles(taus)
    freqs = check_frequencies(freqs)
    config = resolve_config() if config is None else config
    w = check_weights(config["weights"], n)
    nf, L = freqs.shape[0], taus.shape[0]
    order_max = order_ceiling(config, nf, n)
    opts = dict(kind=config["kind"], intercept=config["intercept"], weights=w, max_iter=config["max_iter"])

    solver_failures = 0
    if P is not None and is_fourier_grid(freqs, n):
        P = np.asarray(P, dtype=np.float64)
        if P.shape != (nf, L):
            raise ConfigurationError(f"Periodogram must have shape ({nf}, {L}), got {P.shape}.")
    else:
        grid_qper = qper(x, fourier_grid(n), taus, **opts)
        P = grid_qper.P
        solver_failures += int(grid_qper.failed.sum())

    nyquist = None
    if n % 2 == 0:
        nyq_qper = qper(x, [0.5], taus, **opts)
        nyquist = nyq_qper.P[0]
        solver_failures += int(nyq_qper.failed.sum())

    acf = qacf_from_qper(P, n, nyquist=nyquist, pad=config["pad"])
    scale = acf[0].copy()

    # ---- Order -----------------------------------------------------------------
    if config["criterion"] is Criterion.FIXED:
        order = order_max
        curve = np.empty(0)
        ignored_rate = 0.0
    else:
        selection = select_order(acf, n, order_max, config["criterion"])
        order = selection.order
        curve = selection.curve
        ignored_rate = selection.ignored_rate

    # ---- Levinson-Durbin per level ---------------------------------------------
    ar = np.zeros((order, L))
    pacf = np.zeros((order, L))
    sigma2 = np.zeros(L)
    effective_order = np.zeros(L, dtype=np.int64)
    frozen = np.zeros(L, dtype=bool)
    for j in range(L):
        r0 = scale[j]
        r = acf[:order + 1, j]
        fit = acf2ar(r / r0 if r0 > 0 else r, order)
        ar[:, j] = fit.ar.real
        pacf[:, j] = fit.pacf.real
        sigma2[j] = r0 * fit.var[-1] if r0 > 0 else 0.0
        effective_order[j] = fit.effective_order
        frozen[j] = fit.state is RecursionState.FROZEN

    if frozen.any():
        logger.warning(
            f"Levinson-Durbin froze for {int(frozen.sum())} of {L} levels; "
            f"effective orders {effective_order[frozen].tolist()} < {order}."
        )

    # ---- Smoothing across levels -----------------------------------------------
    pacf_smoothed = pacf.copy()
    pacf_is_smoothed = False
    if config["smooth_pacf"] and order > 0:
        pacf_smoothed, pacf_is_smoothed = smoothing.smooth_pacf(
            pacf, taus, config["pacf_method"], config["pacf_spar"]
        )
        if pacf_is_smoothed:
            for j in range(L):
                fit = pacf2ar(pacf_smoothed[:, j], scale=max(scale[j], 0.0))
                ar[:, j] = fit.ar.real
                sigma2[j] = fit.var[-1]

    spec = np.empty((nf, L))
    for j in range(L):
        spec[:, j] = ar_spectrum(ar[:, j], sigma2[j], freqs)

    scale_smoothed = scale.copy()
    scale_is_smoothed = False
    gain = np.ones(L)
    if config["smooth_scale"]:
        smoothed, scale_is_smoothed = smoothing.smooth_scale(
            scale, taus, config["scale_method"], config["scale_spar"]
        )
        if scale_is_smoothed:
            scale_smoothed = smoothed
            gain = scale_gain(scale, scale_smoothed)
            spec = rescale_spectrum(spec, scale, scale_smoothed)

    return QSpecFit(
        spec=spec,
        freqs=freqs,
        taus=taus,
        n=n,
        order=int(order),
        criterion=curve,
        ignored_rate=float(ignored_rate),
        ar=ar,
        sigma2=sigma2,
        gain=gain,
        pacf=pacf,
        pacf_smoothed=pacf_smoothed,
        pacf_is_smoothed=bool(pacf_is_smoothed),
        scale=scale,
        scale_smoothed=scale_smoothed,
        scale_is_smoothed=bool(scale_is_smoothed),
        effective_order=effective_order,
        frozen=frozen,
        solver_failures=int(solver_failures),
    )


# User-facing API --------------------------------------------------------------

class QuantileSpectrumAnalyzer:
    """
    Configures and executes a quantile spectral analysis of one series.

    Options are validated and method names resolved in the constructor; the
    heavy computation is deferred until `.periodogram()` or `.compute()`.
    """

    def __init__(
        self,
        data: np.ndarray,
        taus: Optional[np.ndarray] = None,
        *,
        freqs: Optional[np.ndarray] = None,
        verbose: bool = False,
        **kwargs,
    ):
        """
        Initializes the analyzer.

        Parameters
        ----------
        data : np.ndarray
            1D time series, standardized by the caller.
        taus : np.ndarray, optional
            Quantile levels in (0, 1). Defaults to 0.1, 0.2, ..., 0.9.
        freqs : np.ndarray, optional
            Output frequencies in cycles per sample. Defaults to the Fourier
            grid of the series (oversampled by `oversample`).
        verbose : bool, optional
            If True, logs progress and diagnostic information. Defaults to False.
        **kwargs
            Estimation options, see `resolve_config`.
        """
        x = np.asarray(data)
        if x.ndim != 1:
            raise ConfigurationError("Input data must be a 1D array.")
        self.data = as_series(x)
        self.n = int(self.data.shape[0])
        self.verbose = bool(verbose)

        if not np.all(np.isfinite(self.data)):
            logger.warning("Input data contains NaN/Inf; results may be undefined.")

        self.config = resolve_config(**kwargs)
        self.config["weights"] = check_weights(self.config["weights"], self.n)
        self.taus = quantile_grid() if taus is None else check_quantiles(taus)
        self.freqs = (
            fourier_grid(self.n, self.config["oversample"]) if freqs is None else check_frequencies(freqs)
        )
        self.order_max = order_ceiling(self.config, self.freqs.shape[0], self.n)

        self._qper_cache: Optional[QPer] = None

        if self.verbose:
            logger.info(
                f"QuantileSpectrumAnalyzer: N={self.n} | nf={self.freqs.shape[0]} | "
                f"levels={self.taus.shape[0]} | type={int(self.config['kind'])} | "
                f"criterion={self.config['criterion'].value} | order_max={self.order_max}"
            )

    def periodogram(self, pool: Any = None) -> QPer:
        """
        Computes (once) and returns the quantile periodogram on `self.freqs`.

        Parameters
        ----------
        pool : object, optional
            Object with a `starmap` method used to spread frequencies over
            processes. Defaults to None.
        """
        if self._qper_cache is not None:
            return self._qper_cache
        self._qper_cache = qper(
            self.data,
            self.freqs,
            self.taus,
            kind=self.config["kind"],
            intercept=self.config["intercept"],
            weights=self.config["weights"],
            max_iter=self.config["max_iter"],
            pool=pool,
            verbose=self.verbose,
        )
        return self._qper_cache

    def compute(self, pool: Any = None) -> "QuantileSpectrumResult":
        """
        Executes the analysis and returns a QuantileSpectrumResult.

        The pool, if any, is only used for the periodogram.
        """
        periodogram = self.periodogram(pool=pool)
        t0 = time.perf_counter()
        fit = fit_qspec(self.data, periodogram.P, self.freqs, self.taus, self.config)
        if self.verbose:
            logger.info(
                f"AR fit: order={fit.order} (ceiling {self.order_max}) in {time.perf_counter() - t0:.2f} s"
            )
        return QuantileSpectrumResult(fit, periodogram)


class QuantileSpectrumResult:
    """
    Container for a quantile spectral estimate and its diagnostics.

    Every field of QSpecFit is readable as an attribute (`spec`, `order`,
    `pacf`, `scale`, ...). Derived quantities:

    f : frequencies (alias of `freqs`)
    qper, qper_failed : periodogram and its solver-failure mask (if available)
    orders : the AR order of every level (all equal)
    spec_db, qper_db : 10 log10 of the estimates
    """

    def __init__(self, fit: QSpecFit, periodogram: Optional[QPer] = None):
        self.fit = fit
        self.periodogram = periodogram
        self._cache: Dict[str, Any] = {}

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        if name in self._cache:
            return self._cache[name]

        if name == "f":
            val = self.fit.freqs
        elif name == "qper":
            val = None if self.periodogram is None else self.periodogram.P
        elif name == "qper_failed":
            val = None if self.periodogram is None else self.periodogram.failed
        elif name == "orders":
            val = np.full(self.fit.taus.shape[0], self.fit.order, dtype=np.int64)
        elif name == "spec_db":
            val = _to_db(self.fit.spec)
        elif name == "qper_db":
            val = None if self.periodogram is None else _to_db(self.periodogram.P)
        elif name in QSpecFit._fields:
            val = getattr(self.fit, name)
        else:
            raise AttributeError(
                f"'{type(self).__name__}' object has no attribute '{name}'"
            )

        self._cache[name] = val
        return val

    def __dir__(self) -> List[str]:
        dynamic_attrs = ["f", "qper", "qper_failed", "orders", "spec_db", "qper_db"]
        return sorted(set(super().__dir__()) | set(QSpecFit._fields) | set(dynamic_attrs))

    def _values(self, which: str) -> np.ndarray:
        if which == "spec":
            return self.fit.spec
        if which == "qper":
            if self.periodogram is None:
                raise ValueError("No periodogram attached to this result.")
            return self.periodogram.P
        raise ValueError(f"Quantity '{which}' not recognized. Available: ['spec', 'qper']")

    def evaluate(self, freqs: np.ndarray) -> np.ndarray:
        """
        Evaluates the final spectral estimate at arbitrary frequencies.

        Returns
        -------
        (len(freqs), L) ndarray
        """
        freqs = np.atleast_1d(np.asarray(freqs, dtype=np.float64))
        L = self.fit.taus.shape[0]
        out = np.empty((freqs.shape[0], L))
        for j in range(L):
            out[:, j] = ar_spectrum(self.fit.ar[:, j], self.fit.sigma2[j] * self.fit.gain[j], freqs)
        return out

    def feature_names(self, which: str = "spec") -> List[str]:
        return [f"{which}[tau={t:g},f={f:.6g}]" for t in self.fit.taus for f in self.fit.freqs]

    def to_features(self, which: str = "spec") -> np.ndarray:
        """
        Flattens the estimate into one feature vector, level by level.
        """
        return np.ascontiguousarray(self._values(which).T).ravel()

    def to_dataframe(self, which: str = "spec") -> pd.DataFrame:
        """
        Exports the estimate as a DataFrame indexed by frequency, one column per level.
        """
        return pd.DataFrame(
            self._values(which),
            index=pd.Index(self.fit.freqs, name="f"),
            columns=[f"tau={t:g}" for t in self.fit.taus],
        )

    def plot(
        self,
        which: str = "spec",
        *,
        ax: Optional[Axes] = None,
        ylabel: Optional[str] = None,
        dB: bool = False,
        **kwargs,
    ) -> Tuple[Figure, Axes]:
        """
        Plots one curve per quantile level against frequency.

        Parameters
        ----------
        which : str, optional
            'spec' (AR estimate) or 'qper' (periodogram). Defaults to 'spec'.
        ax : matplotlib.axes.Axes, optional
            Existing Axes to draw on. Defaults to a new figure.
        ylabel : str, optional
            Custom y-axis label.
        dB : bool, optional
            Plot 10 log10 of the values. Defaults to False.
        **kwargs
            Passed to `Axes.plot`.
        """
        values = self._values(which)
        if dB:
            values = _to_db(values)
        default_label = {"spec": "Quantile spectrum", "qper": "Quantile periodogram"}[which]

        fig, ax1 = (ax.get_figure(), ax) if ax is not None else plt.subplots()
        for j, tau in enumerate(self.fit.taus):
            ax1.plot(self.fit.freqs, values[:, j], label=f"τ={tau:g}", **kwargs)
        ax1.set_xlabel("Frequency (cycles/sample)")
        ax1.set_ylabel(ylabel if ylabel is not None else default_label + (" (dB)" if dB else ""))
        ax1.legend()
        fig.tight_layout()
        return fig, ax1


def _to_db(values: np.ndarray) -> np.ndarray:
    return 10.0 * np.log10(np.maximum(values, np.finfo(np.float64).tiny))


def compute_qspec(
    data: np.ndarray, taus: Optional[np.ndarray] = None, *, pool: Any = None, **kwargs
) -> QuantileSpectrumResult:
    """
    Computes the quantile spectrum of one series in a single call.

    Wrapper around `QuantileSpectrumAnalyzer`; `kwargs` are its options
    (`freqs`, `kind`, `criterion`, `order_max`, `smooth_pacf`, ...).
    """
    analyzer = QuantileSpectrumAnalyzer(data, taus, **kwargs)
    return analyzer.compute(pool=pool)


def compute_qper(
    data: np.ndarray, taus: Optional[np.ndarray] = None, *, pool: Any = None, **kwargs
) -> QPer:
    """Computes the quantile periodogram of one series in a single call."""
    analyzer = QuantileSpectrumAnalyzer(data, taus, **kwargs)
    return analyzer.periodogram(pool=pool)
