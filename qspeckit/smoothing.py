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
smoothing.py — smoothing across quantile levels
-----------------------------------------------------------------------------
Two targets: PACF rows (smoothed on the Fisher-z scale) and the scale
sequence (smoothed directly). The scatterplot smoother is chosen from a
closed set:

    LOWESS  statsmodels local linear regression, spar = span fraction in (0, 1]
    SPLINE  scipy penalized cubic smoothing spline, spar = penalty lambda >= 0,
            None = generalized cross-validation

With too few levels for the method the input is returned as is and the
`smoothed` flag is False.
-----------------------------------------------------------------------------
"""
__all__ = ["Smoother", "smooth_curve", "smooth_pacf", "smooth_scale", "fisher_z", "inv_fisher_z"]

import enum
import logging
from typing import Optional, Tuple

import numpy as np
from scipy.interpolate import make_smoothing_spline
from statsmodels.nonparametric.smoothers_lowess import lowess

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# |pacf| is kept below 1 before arctanh
_Z_CLIP = 1.0 - 1e-8


class Smoother(enum.Enum):
    LOWESS = "lowess"
    SPLINE = "spline"

    @classmethod
    def parse(cls, value) -> "Smoother":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as exc:
            raise ConfigurationError(
                f"Smoother '{value}' not recognized. Available: {[s.value for s in cls]}"
            ) from exc

    @property
    def min_points(self) -> int:
        return 4 if self is Smoother.LOWESS else 5

    def check_spar(self, spar: Optional[float]) -> Optional[float]:
        if spar is None:
            return None
        spar = float(spar)
        if self is Smoother.LOWESS and not (0.0 < spar <= 1.0):
            raise ConfigurationError(f"Lowess span must lie in (0, 1], got {spar!r}.")
        if self is Smoother.SPLINE and not (np.isfinite(spar) and spar >= 0.0):
            raise ConfigurationError(f"Spline penalty must be a non-negative float, got {spar!r}.")
        return spar


def fisher_z(x: np.ndarray) -> np.ndarray:
    return np.arctanh(np.clip(x, -_Z_CLIP, _Z_CLIP))


def inv_fisher_z(z: np.ndarray) -> np.ndarray:
    return np.tanh(z)


def smooth_curve(
    x: np.ndarray, y: np.ndarray, method: Smoother, spar: Optional[float] = None
) -> Tuple[np.ndarray, bool]:
    """
    Smooths y against x.

    Returns
    -------
    ys : ndarray
        Smoothed values in the order of the input.
    smoothed : bool
        False when the input was returned unchanged.
    """
    method = Smoother.parse(method)
    spar = method.check_spar(spar)
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.shape[0] < method.min_points:
        logger.warning(
            f"{method.value} smoothing needs {method.min_points} levels, got {x.shape[0]}; skipped."
        )
        return y.copy(), False

    order = np.argsort(x)
    xs, ys = x[order], y[order]
    if method is Smoother.LOWESS:
        frac = 2.0 / 3.0 if spar is None else spar
        frac = max(frac, 4.0 / xs.shape[0])
        fitted = lowess(ys, xs, frac=frac, it=0, delta=0.0, return_sorted=False)
    else:
        fitted = make_smoothing_spline(xs, ys, lam=spar)(xs)

    fitted = np.asarray(fitted, dtype=np.float64)
    if not np.all(np.isfinite(fitted)):
        logger.warning(f"{method.value} smoother returned non-finite values; skipped.")
        return y.copy(), False
    out = np.empty_like(fitted)
    out[order] = fitted
    return out, True


def smooth_pacf(
    pacf: np.ndarray, taus: np.ndarray, method: Smoother, spar: Optional[float] = None
) -> Tuple[np.ndarray, bool]:
    """
    Smooths each PACF row (one AR lag) across quantile levels on the Fisher-z scale.

    Parameters
    ----------
    pacf : (p, L) ndarray
        Real partial autocorrelations, lag by level.
    taus : (L,) ndarray
        Quantile levels.

    Returns
    -------
    pacf_smoothed : (p, L) ndarray
    smoothed : bool
    """
    pacf = np.asarray(pacf, dtype=np.float64)
    if pacf.shape[0] == 0:
        return pacf.copy(), True
    z = fisher_z(pacf)
    zs = np.empty_like(z)
    ok = True
    for i in range(z.shape[0]):
        zs[i], row_ok = smooth_curve(taus, z[i], method, spar)
        ok = ok and row_ok
    if not ok:
        return pacf.copy(), False
    return inv_fisher_z(zs), True


def smooth_scale(
    scale: np.ndarray, taus: np.ndarray, method: Smoother, spar: Optional[float] = None
) -> Tuple[np.ndarray, bool]:
    """Smooths the lag-0 values across quantile levels, clipped at zero."""
    ys, ok = smooth_curve(taus, scale, method, spar)
    return np.maximum(ys, 0.0), ok
