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
schedulers.py — frequency and quantile grids
-----------------------------------------------------------------------------
Fourier grids are expressed in cycles per sample, so the usable band is
(0, 0.5). The zero frequency and the Nyquist frequency are never members of a
grid; the periodogram builder evaluates them individually when needed.
-----------------------------------------------------------------------------
"""
import numpy as np

from .errors import ConfigurationError


def fourier_grid(n: int, oversample: int = 1) -> np.ndarray:
    """
    Fourier frequencies strictly inside (0, 0.5).

    Parameters
    ----------
    n : int
        Length of the time series.
    oversample : int, optional
        Grid density factor k; frequencies are j / (n k). With k = 1 this is
        the canonical grid j / n, j = 1..floor((n-1)/2). Defaults to 1.

    Returns
    -------
    freqs : ndarray
        Increasing frequencies in cycles per sample.
    """
    n = int(n)
    oversample = int(oversample)
    if n < 3:
        raise ConfigurationError(f"Series length must be at least 3, got {n}.")
    if oversample < 1:
        raise ConfigurationError(f"`oversample` must be a positive integer, got {oversample}.")
    m = n * oversample
    j = np.arange(1, (m - 1) // 2 + 1, dtype=np.float64)
    return j / m


def is_fourier_grid(freqs: np.ndarray, n: int) -> bool:
    """True when `freqs` is exactly the canonical Fourier grid for length n."""
    ref = fourier_grid(n)
    freqs = np.asarray(freqs, dtype=np.float64)
    return freqs.shape == ref.shape and bool(np.allclose(freqs, ref, rtol=0, atol=1e-12))


def quantile_grid(start: float = 0.1, stop: float = 0.9, num: int = 9) -> np.ndarray:
    """Uniform grid of quantile levels, both ends included."""
    taus = np.linspace(float(start), float(stop), int(num))
    return check_quantiles(taus)


def check_quantiles(taus) -> np.ndarray:
    taus = np.atleast_1d(np.asarray(taus, dtype=np.float64))
    if taus.ndim != 1 or taus.size == 0:
        raise ConfigurationError("Quantile grid must be a non-empty 1D sequence.")
    if not np.all(np.isfinite(taus)) or np.any(taus <= 0.0) or np.any(taus >= 1.0):
        raise ConfigurationError(f"Quantile levels must lie in (0, 1); got {taus!r}.")
    if np.unique(taus).size != taus.size:
        raise ConfigurationError("Quantile levels must be distinct.")
    return np.ascontiguousarray(taus)


def check_frequencies(freqs) -> np.ndarray:
    freqs = np.atleast_1d(np.asarray(freqs, dtype=np.float64))
    if freqs.ndim != 1 or freqs.size == 0:
        raise ConfigurationError("Frequency grid must be a non-empty 1D sequence.")
    if not np.all(np.isfinite(freqs)) or np.any(freqs < 0.0) or np.any(freqs > 0.5):
        raise ConfigurationError("Frequencies must lie in [0, 0.5] (cycles per sample).")
    return np.ascontiguousarray(freqs)
