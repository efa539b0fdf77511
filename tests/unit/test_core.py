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
import warnings
from types import SimpleNamespace

import pytest
from pytest import approx

import numpy as np

from statsmodels.regression.quantile_regression import QuantReg
from statsmodels.tools.sm_exceptions import IterationLimitWarning

import qspeckit.core as core
from qspeckit.core import (
    PeriodogramType,
    fit_harmonic,
    fit_harmonic_taus,
    harmonic_score,
    _check_loss,
    _check_loss_np,
    _harmonic_design,
    _weighted_quantile,
)


@pytest.mark.parametrize("tau", [0.1, 0.5, 0.9])
def test_check_loss_kernels_agree(tau):
    rng = np.random.default_rng(0)
    u = rng.standard_normal(257)
    w = rng.uniform(0.5, 2.0, 257)
    assert _check_loss(u, tau, w) == approx(_check_loss_np(u, tau, w), rel=1e-10)


def test_check_loss_values():
    u = np.array([-2.0, 1.0])
    w = np.ones(2)
    # rho_0.25(-2) = 1.5, rho_0.25(1) = 0.25
    assert _check_loss(u, 0.25, w) == approx(1.75)


def test_weighted_quantile_uniform_weights():
    y = np.array([4.0, 1.0, 3.0, 2.0])
    assert _weighted_quantile(y, 0.5, np.ones(4)) == 2.0
    assert _weighted_quantile(y, 0.9, np.ones(4)) == 4.0


def test_weighted_quantile_heavy_weight():
    y = np.array([1.0, 2.0, 3.0])
    w = np.array([1.0, 1.0, 10.0])
    assert _weighted_quantile(y, 0.5, w) == 3.0


def test_design_columns():
    assert _harmonic_design(10, 0.1, True).shape == (10, 3)
    assert _harmonic_design(10, 0.1, False).shape == (10, 2)
    assert _harmonic_design(10, 0.5, True).shape == (10, 2)


def test_zero_frequency_is_null_fit():
    y = np.random.default_rng(3).standard_normal(50)
    fit = fit_harmonic(y, 0.0, 0.5)
    assert fit.converged
    assert fit.cost == 0.0
    np.testing.assert_array_equal(fit.coef, np.zeros(2))


def test_nyquist_has_no_sine_coefficient():
    n = 64
    t = np.arange(1, n + 1)
    y = 3.0 * np.cos(np.pi * t)
    fit = fit_harmonic(y, 0.5)
    assert fit.converged
    assert fit.coef[0] == approx(3.0)
    assert fit.coef[1] == 0.0
    score = harmonic_score(fit.coef, fit.cost, 0.5, n, PeriodogramType.COEF)
    assert score == approx(n * 9.0)


def test_least_squares_recovers_harmonic():
    n = 100
    t = np.arange(1, n + 1)
    f = 7 / n
    y = 1.5 + 2.0 * np.cos(2 * np.pi * f * t) - 0.5 * np.sin(2 * np.pi * f * t)
    fit = fit_harmonic(y, f)
    assert fit.coef == approx([2.0, -0.5])
    assert fit.intercept == approx(1.5)
    assert fit.cost > 0


def test_quantile_fit_median_of_harmonic():
    n = 200
    t = np.arange(1, n + 1)
    f = 11 / n
    rng = np.random.default_rng(7)
    y = np.cos(2 * np.pi * f * t) + 0.1 * rng.standard_normal(n)
    fit = fit_harmonic(y, f, 0.5)
    assert fit.converged
    assert fit.coef[0] == approx(1.0, abs=0.1)
    assert abs(fit.coef[1]) < 0.1
    assert fit.cost > 0


def test_solver_failure_is_flagged(monkeypatch):
    class BrokenQuantReg:
        def __init__(self, endog, exog):
            pass

        def fit(self, **kwargs):
            raise ValueError("no convergence")

    monkeypatch.setattr(core, "QuantReg", BrokenQuantReg)
    y = np.random.default_rng(5).standard_normal(40)
    coef, cost, converged = fit_harmonic_taus(y, 0.1, np.array([0.25, 0.75]))
    assert not converged.any()
    np.testing.assert_array_equal(coef, 0.0)
    np.testing.assert_array_equal(cost, 0.0)


def test_iteration_limit_keeps_finite_estimate(monkeypatch):
    n = 120
    t = np.arange(1, n + 1)
    f = 9 / n
    rng = np.random.default_rng(11)
    y = np.cos(2 * np.pi * f * t) + 0.2 * rng.standard_normal(n)
    reference = fit_harmonic(y, f, 0.5)

    class CappedQuantReg(QuantReg):
        def fit(self, **kwargs):
            res = super().fit(**kwargs)
            warnings.warn("Maximum number of iterations reached.", IterationLimitWarning)
            return res

    monkeypatch.setattr(core, "QuantReg", CappedQuantReg)
    fit = fit_harmonic(y, f, 0.5)
    assert fit.converged
    assert fit.coef == approx(reference.coef)
    assert fit.cost == approx(reference.cost)


def test_iteration_limit_worse_than_null_returns_null_model(monkeypatch):
    class DivergedQuantReg:
        def __init__(self, endog, exog):
            pass

        def fit(self, **kwargs):
            warnings.warn("Maximum number of iterations reached.", IterationLimitWarning)
            return SimpleNamespace(params=np.array([0.0, 100.0, 100.0]))

    monkeypatch.setattr(core, "QuantReg", DivergedQuantReg)
    y = np.random.default_rng(13).standard_normal(50)
    fit = fit_harmonic(y, 0.1, 0.5)
    assert fit.converged
    np.testing.assert_array_equal(fit.coef, 0.0)
    assert fit.cost == 0.0
    assert fit.intercept == approx(_weighted_quantile(y, 0.5, np.ones(50)))


def test_fit_harmonic_taus_least_squares_shape():
    y = np.random.default_rng(9).standard_normal(30)
    coef, cost, converged = fit_harmonic_taus(y, 0.2, None)
    assert coef.shape == (1, 2)
    assert cost.shape == (1,)
    assert converged.all()


def test_harmonic_score_clips_negative_cost():
    coef = np.zeros((2, 2))
    cost = np.array([-1e-12, 2.0])
    out = harmonic_score(coef, cost, 0.1, 20, PeriodogramType.COST)
    np.testing.assert_array_equal(out, [0.0, 2.0])


def test_public_names_only_exported():
    assert all(not name.startswith("_") for name in core.__all__)
    for name in core.__all__:
        assert hasattr(core, name)
