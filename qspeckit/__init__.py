import os
os.environ.setdefault("NUMBA_THREADING_LAYER", "workqueue")
os.environ.setdefault("NUMBA_NUM_THREADS", str(max(1, (os.cpu_count() or 1))))
os.environ.setdefault("OMP_NUM_THREADS", "1")
os.environ.setdefault("MKL_NUM_THREADS", "1")
os.environ.setdefault("OPENBLAS_NUM_THREADS", "1")

from .errors import ConfigurationError, ResourceExhaustionError
from .core import PeriodogramType
from .schedulers import fourier_grid, quantile_grid
from .periodogram import QPer, qper, qacf
from .levinson import acf2ar, pacf2ar
from .selection import Criterion
from .smoothing import Smoother
from .analysis import (
    compute_qspec,
    compute_qper,
    fit_qspec,
    ar_spectrum,
    QuantileSpectrumAnalyzer,
    QuantileSpectrumResult,
)
from .batch import WorkerPool, batch_qspec, batch_features
