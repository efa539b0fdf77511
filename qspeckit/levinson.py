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
levinson.py — complex Levinson-Durbin recursion
-----------------------------------------------------------------------------
Sign convention: the AR model is x_t + sum_k a_k x_{t-k} = e_t, so the
spectral density is var / |1 + sum_k a_k exp(-i 2 pi f k)|^2.

Forward direction (acf2ar), step i of the recursion:
    pacf[i]  = -(r[i+1] + sum_{j<i} a[j] r[i-j]) / var[i]
    a[:i]    =  a[:i] + pacf[i] * conj(a[:i][::-1]),  a[i] = pacf[i]
    var[i+1] =  var[i] * (1 - |pacf[i]|^2)

The recursion runs as a two-state machine. While ACTIVE it updates as above;
the first step whose variance would be <= 0 moves it to FROZEN, after which
PACF entries are 0, the variance is carried forward and the AR coefficients
stay as they were. The effective order is the number of ACTIVE steps.
-----------------------------------------------------------------------------
"""
__all__ = ["RecursionState", "ARFit", "acf2ar", "pacf2ar"]

import enum
from typing import NamedTuple, Optional

import numpy as np


class RecursionState(enum.Enum):
    ACTIVE = "active"
    FROZEN = "frozen"


class ARFit(NamedTuple):
    """
    AR model of order p.

    ar : (p,) complex ndarray
        AR coefficients a_1..a_p.
    pacf : (p,) complex ndarray
        Partial autocorrelations (reflection coefficients).
    var : (p+1,) ndarray
        Innovation variances for orders 0..p, non-increasing.
    effective_order : int
        Number of steps completed before the recursion froze (p if it never did).
    state : RecursionState
        Final state of the recursion.
    """
    ar: np.ndarray
    pacf: np.ndarray
    var: np.ndarray
    effective_order: int
    state: RecursionState


def acf2ar(r: np.ndarray, order: Optional[int] = None) -> ARFit:
    """
    Yule-Walker solution by the Levinson-Durbin recursion.

    Parameters
    ----------
    r : (m,) array_like
        Autocovariances r(0), r(1), ... (real or complex).
    order : int, optional
        AR order p <= m-1. Defaults to m-1.

    Returns
    -------
    ARFit
        With r(0) <= 0 the sequence is degenerate: zero coefficients and PACF,
        unit variances, effective order 0.
    """
    r = np.asarray(r, dtype=np.complex128).ravel()
    if r.size == 0:
        raise ValueError("Autocovariance sequence is empty.")
    p = r.size - 1 if order is None else int(order)
    if p < 0 or p > r.size - 1:
        raise ValueError(f"Order must lie in [0, {r.size - 1}], got {p}.")

    ar = np.zeros(p, dtype=np.complex128)
    pacf = np.zeros(p, dtype=np.complex128)
    r0 = float(r[0].real)
    if r0 <= 0.0:
        return ARFit(ar, pacf, np.ones(p + 1), 0, RecursionState.FROZEN)

    var = np.empty(p + 1, dtype=np.float64)
    var[0] = r0
    state = RecursionState.ACTIVE
    effective_order = p
    for i in range(p):
        if state is RecursionState.ACTIVE:
            k = -(r[i + 1] + np.dot(ar[:i], r[i:0:-1])) / var[i]
            v = var[i] * (1.0 - abs(k) ** 2)
            if v > 0.0:
                ar[:i] = ar[:i] + k * np.conj(ar[:i][::-1])
                ar[i] = k
                pacf[i] = k
                var[i + 1] = v
                continue
            state = RecursionState.FROZEN
            effective_order = i
        pacf[i] = 0.0
        var[i + 1] = var[i]
    return ARFit(ar, pacf, var, effective_order, state)


def pacf2ar(pacf: np.ndarray, scale: Optional[float] = None) -> ARFit:
    """
    AR coefficients and innovation variances from partial autocorrelations.

    Runs the forward update without the degeneracy check; the PACF is
    expected to be validated (|pacf| < 1) already.

    Parameters
    ----------
    pacf : (p,) array_like
        Partial autocorrelations.
    scale : float, optional
        Lag-0 autocovariance. The variance sequence starts at 1 and is
        multiplied by `scale` when given.

    Returns
    -------
    ARFit
    """
    pacf = np.asarray(pacf, dtype=np.complex128).ravel().copy()
    p = pacf.size
    ar = np.zeros(p, dtype=np.complex128)
    var = np.empty(p + 1, dtype=np.float64)
    var[0] = 1.0
    for i in range(p):
        k = pacf[i]
        ar[:i] = ar[:i] + k * np.conj(ar[:i][::-1])
        ar[i] = k
        var[i + 1] = var[i] * (1.0 - abs(k) ** 2)
    if scale is not None:
        var = var * float(scale)
    return ARFit(ar, pacf, var, p, RecursionState.ACTIVE)
