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

import numpy as np
import pandas as pd

import qspeckit.batch as batch
from qspeckit import (
    ConfigurationError,
    QuantileSpectrumResult,
    ResourceExhaustionError,
    WorkerPool,
    batch_features,
    batch_qspec,
    compute_qspec,
    qper,
    fourier_grid,
)

TAUS = np.array([0.25, 0.5, 0.75])


@pytest.fixture(scope="module")
def panel():
    rng = np.random.default_rng(99)
    n, R = 64, 4
    Y = np.empty((n, R))
    for r, phi in enumerate((0.0, 0.3, 0.6, 0.9)):
        e = rng.standard_normal(n + 100)
        x = np.empty_like(e)
        x[0] = e[0]
        for t in range(1, e.size):
            x[t] = phi * x[t - 1] + e[t]
        Y[:, r] = x[100:]
    return Y


def test_batch_serial_matches_single(panel):
    results = batch_qspec(panel, TAUS)
    assert len(results) == panel.shape[1]
    for r, res in enumerate(results):
        assert isinstance(res, QuantileSpectrumResult)
        single = compute_qspec(panel[:, r], TAUS)
        assert res.order == single.order
        np.testing.assert_allclose(res.spec, single.spec)


def test_batch_parallel_preserves_order(panel):
    serial = batch_qspec(panel, TAUS, kind=2)
    parallel = batch_qspec(panel, TAUS, kind=2, n_workers=2)
    assert [r.order for r in parallel] == [r.order for r in serial]
    for a, b in zip(serial, parallel):
        np.testing.assert_allclose(a.spec, b.spec)


def test_batch_single_column():
    y = np.random.default_rng(0).standard_normal(32)
    results = batch_qspec(y, [0.5])
    assert len(results) == 1
    assert results[0].spec.shape == (15, 1)


def test_batch_validates_before_dispatch(panel):
    with pytest.raises(ConfigurationError):
        batch_qspec(panel, TAUS, criterion="hqic", n_workers=2)
    with pytest.raises(ConfigurationError):
        batch_qspec(panel, TAUS, n_workers=0)
    with pytest.raises(ConfigurationError):
        batch_qspec(np.empty((64, 0)), TAUS)
    with pytest.raises(ConfigurationError):
        batch_qspec(np.ones((4, 4, 4)), TAUS)


def test_batch_features_table(panel):
    data = {"slow": panel[:, :2], "fast": panel[:, 2:]}
    df = batch_features(data, TAUS)
    assert isinstance(df, pd.DataFrame)
    assert df.shape == (4, 31 * 3 + 1)
    assert list(df["label"]) == ["slow", "slow", "fast", "fast"]
    first = compute_qspec(panel[:, 0], TAUS).to_features()
    np.testing.assert_allclose(df.iloc[0, :-1].to_numpy(dtype=float), first)


def test_batch_features_mixed_lengths(panel):
    data = {"long": panel[:, :2], "short": panel[:48, 2:]}
    with pytest.raises(ConfigurationError):
        batch_features(data, TAUS)
    freqs = np.linspace(0.02, 0.48, 20)
    df = batch_features(data, TAUS, freqs=freqs, order_max=4)
    assert df.shape == (4, 20 * 3 + 1)
    assert np.all(np.isfinite(df.iloc[:, :-1].to_numpy(dtype=float)))


def test_batch_features_rejects_empty():
    with pytest.raises(ConfigurationError):
        batch_features({})


def test_worker_pool_with_periodogram(panel):
    y = panel[:, 2]
    freqs = fourier_grid(64)
    serial = qper(y, freqs, TAUS)
    with WorkerPool(2) as pool:
        assert pool.processes == 2
        pooled = qper(y, freqs, TAUS, pool=pool)
    np.testing.assert_allclose(pooled.P, serial.P)


def test_worker_pool_lifecycle():
    with pytest.raises(ConfigurationError):
        WorkerPool(0)
    pool = WorkerPool(1)
    with pytest.raises(RuntimeError):
        pool.starmap(abs, [(1,)])


def test_worker_start_failure_raises_resource_error(panel, monkeypatch):
    class NoProcessContext:
        def Pool(self, processes=None):
            raise OSError("Resource temporarily unavailable")

    monkeypatch.setattr(batch.multiprocessing, "get_context", lambda method: NoProcessContext())
    with pytest.raises(ResourceExhaustionError, match="2 worker processes"):
        batch_qspec(panel, TAUS, n_workers=2)
    with pytest.raises(ResourceExhaustionError):
        WorkerPool(2).__enter__()
