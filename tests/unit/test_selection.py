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
import pytest
from pytest import approx

import numpy as np

from qspeckit import ConfigurationError
from qspeckit.selection import Criterion, gic_penalty, select_order


def _sample_acf(x, nlags):
    x = x - x.mean()
    n = x.size
    return np.array([np.dot(x[:n - k], x[k:]) / n for k in range(nlags + 1)])


def test_criterion_parse():
    assert Criterion.parse("BIC") is Criterion.BIC
    assert Criterion.parse(Criterion.AICC) is Criterion.AICC
    with pytest.raises(ConfigurationError):
        Criterion.parse("hqic")


def test_penalties():
    orders = np.arange(3)
    np.testing.assert_allclose(gic_penalty(Criterion.AIC, orders, 10), [0, 2, 4])
    np.testing.assert_allclose(gic_penalty(Criterion.BIC, orders, 10), np.log(10) * orders)
    aicc = gic_penalty(Criterion.AICC, orders, 3)
    assert aicc[0] == 0
    assert aicc[1] == approx(6.0)
    assert np.isinf(aicc[2])


def test_ceiling_respected(ar1):
    rng = np.random.default_rng(0)
    x = ar1(256, 0.9, rng)
    acf = _sample_acf(x, 3)
    sel = select_order(acf, 256, 3)
    assert 0 <= sel.order <= 3
    assert sel.curve.shape == (4,)
    assert sel.criteria.shape == (4, 1)


def test_ar1_order_recovered(ar1):
    rng = np.random.default_rng(2024)
    chosen_bic, chosen_aic = [], []
    for _ in range(30):
        x = ar1(256, 0.6, rng)
        acf = _sample_acf(x, 10)
        chosen_bic.append(select_order(acf, 256, 10, Criterion.BIC).order)
        chosen_aic.append(select_order(acf, 256, 10, Criterion.AIC).order)
    chosen_bic = np.array(chosen_bic)
    assert np.mean(chosen_bic == 1) >= 0.5
    assert np.all(chosen_bic >= 1)
    chosen_aic = np.array(chosen_aic)
    assert np.mean(chosen_aic == 1) >= 0.5
    assert np.all(chosen_aic >= 1)


def test_shared_order_across_levels(ar1):
    rng = np.random.default_rng(5)
    acf = np.column_stack([_sample_acf(ar1(256, phi, rng), 8) for phi in (0.3, 0.6, 0.8)])
    sel = select_order(acf, 256, 8)
    assert isinstance(sel.order, int)
    assert sel.order == int(np.argmin(sel.curve))
    assert sel.ignored_rate == 0.0


def test_non_finite_criteria_are_ignored():
    acf = np.zeros((4, 2))
    acf[:, 0] = [1.0, 0.5, 0.25, 0.125]
    sel = select_order(acf, 4, 3, Criterion.AICC)
    # order 3 has n - p - 1 <= 0 for every level
    assert np.isinf(sel.curve[3])
    assert sel.ignored[3] == 2
    assert sel.ignored_rate == approx(2 / 8)
    assert sel.order < 3


def test_select_order_validation():
    acf = np.ones((3, 1))
    with pytest.raises(ConfigurationError):
        select_order(acf, 10, 0)
    with pytest.raises(ConfigurationError):
        select_order(acf, 10, 3)
    with pytest.raises(ConfigurationError):
        select_order(acf, 10, 1, Criterion.FIXED)
