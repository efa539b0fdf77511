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
selection.py — AR order selection shared across quantile levels
-----------------------------------------------------------------------------
For every level the pseudo-autocovariance is normalized by its lag-0 value
and run through the Levinson-Durbin recursion up to the ceiling. The
generalized information criterion

    GIC(p) = n log var(p) + penalty(p)

is averaged across levels, skipping non-finite values, and the single order
minimizing the average is used for every level.
-----------------------------------------------------------------------------
"""
__all__ = ["Criterion", "OrderSelection", "gic_penalty", "select_order"]

import enum
import logging
from typing import NamedTuple

import numpy as np

from .errors import ConfigurationError
from .levinson import acf2ar

logger = logging.getLogger(__name__)


class Criterion(enum.Enum):
    AIC = "aic"
    BIC = "bic"
    AICC = "aicc"
    FIXED = "fixed"

    @classmethod
    def parse(cls, value) -> "Criterion":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as exc:
            raise ConfigurationError(
                f"Criterion '{value}' not recognized. Available: {[c.value for c in cls]}"
            ) from exc


class OrderSelection(NamedTuple):
    """
    order : int
        Selected order, shared by all levels.
    curve : (order_max+1,) ndarray
        Criterion averaged across levels (inf where no level was finite).
    criteria : (order_max+1, L) ndarray
        Criterion per order and level.
    ignored : (order_max+1,) int ndarray
        Number of levels whose criterion was non-finite, per order.
    ignored_rate : float
        Fraction of non-finite entries in `criteria`.
    """
    order: int
    curve: np.ndarray
    criteria: np.ndarray
    ignored: np.ndarray
    ignored_rate: float


def gic_penalty(criterion: Criterion, orders: np.ndarray, n: int) -> np.ndarray:
    p = np.asarray(orders, dtype=np.float64)
    if criterion is Criterion.AIC:
        return 2.0 * p
    if criterion is Criterion.BIC:
        return np.log(n) * p
    if criterion is Criterion.AICC:
        denom = n - p - 1.0
        out = np.full_like(p, np.inf)
        np.divide(2.0 * p * n, denom, out=out, where=denom > 0)
        return out
    raise ConfigurationError(f"No penalty for criterion {criterion.value!r}.")


def select_order(
    acf: np.ndarray,
    n: int,
    order_max: int,
    criterion: Criterion = Criterion.AIC,
) -> OrderSelection:
    """
    Selects one AR order for all quantile levels.

    Parameters
    ----------
    acf : (m,) or (m, L) ndarray
        Pseudo-autocovariances, lag by level, m > order_max.
    n : int
        Series length used in the criterion.
    order_max : int
        Largest candidate order (>= 1).
    criterion : Criterion, optional
        AIC, BIC or AICC. Defaults to AIC.

    Returns
    -------
    OrderSelection
    """
    criterion = Criterion.parse(criterion)
    if criterion is Criterion.FIXED:
        raise ConfigurationError("A fixed order is not selected by a criterion.")
    acf = np.asarray(acf)
    if acf.ndim == 1:
        acf = acf[:, None]
    order_max = int(order_max)
    if order_max < 1:
        raise ConfigurationError(f"Order ceiling must be positive, got {order_max}.")
    if acf.shape[0] < order_max + 1:
        raise ConfigurationError(
            f"Need {order_max + 1} autocovariance lags for order_max={order_max}, got {acf.shape[0]}."
        )

    L = acf.shape[1]
    orders = np.arange(order_max + 1)
    penalty = gic_penalty(criterion, orders, n)
    criteria = np.empty((order_max + 1, L), dtype=np.float64)
    for j in range(L):
        r = acf[:order_max + 1, j]
        r0 = float(np.real(r[0]))
        fit = acf2ar(r / r0 if r0 > 0 else r, order_max)
        with np.errstate(divide="ignore", invalid="ignore"):
            criteria[:, j] = n * np.log(fit.var) + penalty

    finite = np.isfinite(criteria)
    counts = finite.sum(axis=1)
    sums = np.where(finite, criteria, 0.0).sum(axis=1)
    curve = np.full(order_max + 1, np.inf)
    np.divide(sums, counts, out=curve, where=counts > 0)
    ignored = L - counts
    ignored_rate = float(ignored.sum()) / criteria.size

    if ignored_rate > 0:
        logger.warning(f"{int(ignored.sum())} non-finite criterion values ignored ({ignored_rate:.1%}).")
    return OrderSelection(int(np.argmin(curve)), curve, criteria, ignored, ignored_rate)
